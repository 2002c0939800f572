"""Shared fixtures for remind-bot tests."""

import os
import tempfile

os.environ.setdefault("REMIND_BOT_DATA_DIR", tempfile.mkdtemp(prefix="remind-bot-"))

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Redirect all data file paths to a temp directory."""
    import remind_bot.scheduling.delivered as delivered_mod
    import remind_bot.scheduling.reminders as reminders_mod
    import remind_bot.storage as storage_mod

    state_dir = tmp_path / "state"
    monkeypatch.setattr(storage_mod, "DATA_DIR", tmp_path)
    monkeypatch.setattr(storage_mod, "STATE_DIR", state_dir)
    monkeypatch.setattr(reminders_mod, "REMINDERS_FILE", tmp_path / "reminders.json")
    monkeypatch.setattr(delivered_mod, "DELIVERED_FILE", state_dir / "delivered.json")
    return tmp_path


@pytest.fixture()
def reminder_scheduler(data_dir):
    """ReminderScheduler over a scheduler that is never started."""
    from remind_bot.scheduling.delivered import DeliveredLog
    from remind_bot.scheduling.scheduler import ReminderScheduler

    return ReminderScheduler(
        AsyncIOScheduler(timezone="UTC"),
        delivered=DeliveredLog(),
        missed_oneshot="fire",
    )


class FakeSink:
    """DeliverySink that records what it was asked to send."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[tuple[str, str]] = []
        self.error = error

    async def send(self, channel_id: str, text: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((channel_id, text))

    async def deliver(self, text: str, channel_id: str) -> None:
        """on_fire callback: rendered text first, then the channel."""
        await self.send(channel_id, text)


@pytest.fixture()
def sink():
    return FakeSink()
