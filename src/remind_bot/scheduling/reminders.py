"""Reminder data model and JSON snapshot persistence.

The store is append-only: every append rewrites the full record set to
``reminders.json`` so a crash never leaves a half-written entry behind.
"""

from __future__ import annotations

import hashlib
import json
import threading
from dataclasses import asdict, dataclass, fields
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from remind_bot.config import TZ
from remind_bot.scheduling.schedule import (
    ScheduleExpression,
    ValidationError,
    build_schedule,
    parse_date,
    parse_time,
)
from remind_bot.storage import (
    DATA_DIR,
    StorageCorruptError,
    read_json,
    write_json,
)

REMINDERS_FILE = DATA_DIR / "reminders.json"

_REQUIRED = ("time", "date", "message", "frequency", "channel_id")
# Key names written by older deployments.
_LEGACY_KEYS = {"channelId": "channel_id", "createdAt": "created_at"}


@dataclass(frozen=True, slots=True)
class Reminder:
    id: str
    time: str  # HH:MM, UTC
    date: str  # YYYY-MM-DD, UTC
    message: str
    frequency: str  # once | daily | weekly | custom
    channel_id: str
    interval: int | None = None  # minutes, custom only
    mention: str | None = None  # user id, or "&<role id>" for roles
    created_at: str = ""  # ISO datetime

    @staticmethod
    def new(
        *,
        time: str,
        date: str,
        message: str,
        frequency: str,
        channel_id: str,
        interval: int | None = None,
        mention: str | None = None,
    ) -> Reminder:
        """Validate raw input and build a record with a fresh ID."""
        if not message or not message.strip():
            raise ValidationError("message must not be empty")
        if not channel_id:
            raise ValidationError("a destination channel is required")
        build_schedule(date, time, frequency, interval)
        hour, minute = parse_time(time)
        return Reminder(
            id=uuid4().hex[:8],
            time=f"{hour:02d}:{minute:02d}",
            date=parse_date(date).isoformat(),
            message=message,
            frequency=frequency,
            channel_id=str(channel_id),
            interval=interval,
            mention=str(mention) if mention else None,
            created_at=datetime.now(TZ).isoformat(timespec="seconds"),
        )

    def schedule(self) -> ScheduleExpression:
        return build_schedule(self.date, self.time, self.frequency, self.interval)

    def render(self) -> str:
        """Delivered text: the message, a space, then the mention if any."""
        mention = f"<@{self.mention}>" if self.mention else ""
        return f"{self.message} {mention}"


def _derive_id(data: dict[str, object], index: int) -> str:
    """Stable ID for records persisted without one.

    Hashes the record's position with its content: positions never change in
    an append-only store, and identical records may be stored more than once.
    """
    content = {k: data.get(k) for k in (*_REQUIRED, "interval", "mention")}
    canonical = json.dumps({"index": index, **content}, sort_keys=True)
    return hashlib.sha1(canonical.encode()).hexdigest()[:8]


def _from_dict(path: Path, index: int, raw: object) -> Reminder:
    if not isinstance(raw, dict):
        raise StorageCorruptError(path, f"entry {index} is not an object")
    data = {_LEGACY_KEYS.get(k, k): v for k, v in raw.items()}
    missing = [k for k in _REQUIRED if data.get(k) is None]
    if missing:
        raise StorageCorruptError(
            path, f"entry {index} is missing {', '.join(missing)}"
        )
    interval = data.get("interval")
    if interval is not None and (
        isinstance(interval, bool) or not isinstance(interval, int)
    ):
        raise StorageCorruptError(path, f"entry {index} has a non-integer interval")
    known = {f.name for f in fields(Reminder)}
    kwargs = {k: v for k, v in data.items() if k in known}
    for key in ("time", "date", "message", "frequency", "channel_id"):
        kwargs[key] = str(kwargs[key])
    if kwargs.get("mention") is not None:
        kwargs["mention"] = str(kwargs["mention"])
    kwargs.setdefault("id", None)
    if not kwargs["id"]:
        kwargs["id"] = _derive_id(data, index)
    kwargs["id"] = str(kwargs["id"])
    return Reminder(**kwargs)


class ReminderStore:
    """Durable list of reminders in a single JSON file.

    ``append`` holds a lock across read-modify-write so concurrent callers
    cannot drop each other's records.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or REMINDERS_FILE
        self._lock = threading.Lock()

    def load_all(self) -> list[Reminder]:
        """Empty list when nothing has been stored yet."""
        data = read_json(self.path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise StorageCorruptError(self.path, "top level is not a list")
        return [_from_dict(self.path, i, raw) for i, raw in enumerate(data)]

    def append(self, reminder: Reminder) -> None:
        with self._lock:
            current = self.load_all()
            current.append(reminder)
            write_json(
                self.path,
                [asdict(r) for r in current],
                f"add reminder {reminder.id}",
            )
