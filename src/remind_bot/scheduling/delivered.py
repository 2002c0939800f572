"""Persist which one-shot reminders have fired so restarts don't re-deliver them."""

import threading
from datetime import datetime
from pathlib import Path

from remind_bot.config import TZ
from remind_bot.storage import STATE_DIR, StorageCorruptError, read_json, write_json

DELIVERED_FILE = STATE_DIR / "delivered.json"


class DeliveredLog:
    """Map of one-shot reminder ID to the ISO time it fired."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DELIVERED_FILE
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        data = read_json(self.path)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise StorageCorruptError(self.path, "top level is not an object")
        return {str(k): str(v) for k, v in data.items()}

    def __contains__(self, reminder_id: str) -> bool:
        return reminder_id in self._read()

    def mark(self, reminder_id: str) -> None:
        with self._lock:
            data = self._read()
            data[reminder_id] = datetime.now(TZ).isoformat(timespec="seconds")
            write_json(self.path, data)
