"""Shared JSON snapshot I/O and git helpers for persistent data files."""

import json
import logging
import os
import subprocess
import tempfile
from pathlib import Path

from remind_bot.config import DATA_DIR as DATA_DIR

STATE_DIR = DATA_DIR / "state"

log = logging.getLogger(__name__)


class StorageCorruptError(Exception):
    """A persisted file exists but cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def _find_repo(filepath: Path) -> Path | None:
    """Walk up from filepath to find the nearest git repo root."""
    for parent in filepath.parents:
        if (parent / ".git").is_dir():
            return parent
    return None


def git_commit(filepath: Path, message: str) -> None:
    """No-op when no git repo is found above filepath."""
    repo = _find_repo(filepath)
    if repo is None:
        return
    rel = filepath.relative_to(repo)
    subprocess.run(
        ["git", "add", str(rel)],
        cwd=repo,
        capture_output=True,
    )
    subprocess.run(
        ["git", "commit", "-m", message, "--", str(rel)],
        cwd=repo,
        capture_output=True,
    )


def read_json(filepath: Path) -> object | None:
    """Returns None when the file is missing; raises StorageCorruptError on bad JSON."""
    if not filepath.exists():
        return None
    try:
        return json.loads(filepath.read_text())
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise StorageCorruptError(filepath, f"not valid JSON ({e})") from e


def write_json(filepath: Path, data: object, commit_msg: str | None = None) -> None:
    """Atomic, durable write: temp file + fsync + rename, then fsync the directory."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2) + "\n"
    fd, tmp = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
    try:
        os.write(fd, content.encode())
        os.fsync(fd)
    finally:
        os.close(fd)
    os.replace(tmp, filepath)
    dir_fd = os.open(filepath.parent, os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)
    log.debug("wrote %s (%d bytes)", filepath, len(content))
    if commit_msg:
        git_commit(filepath, commit_msg)
