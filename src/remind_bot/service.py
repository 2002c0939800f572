"""Create reminders and restore them after a restart."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from remind_bot.delivery import DeliverySink
from remind_bot.scheduling.reminders import Reminder, ReminderStore
from remind_bot.scheduling.schedule import ValidationError
from remind_bot.scheduling.scheduler import ReminderScheduler

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReminderRequest:
    """Fields parsed out of a chat command, before validation."""

    time: str
    date: str
    message: str
    frequency: str
    channel_id: str
    interval: int | None = None
    mention: str | None = None


class ReminderService:
    def __init__(
        self, store: ReminderStore, scheduler: ReminderScheduler, sink: DeliverySink
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.sink = sink
        self.ready = False

    def create_reminder(self, request: ReminderRequest) -> Reminder:
        """Validate, persist, then schedule. Nothing is stored if validation fails."""
        if not self.ready:
            raise RuntimeError("startup() must complete before creating reminders")
        reminder = Reminder.new(
            time=request.time,
            date=request.date,
            message=request.message,
            frequency=request.frequency,
            channel_id=request.channel_id,
            interval=request.interval,
            mention=request.mention,
        )
        self.store.append(reminder)
        self.scheduler.register(reminder, self._deliver)
        log.info(
            "Created reminder %s for channel %s (%s)",
            reminder.id,
            reminder.channel_id,
            reminder.frequency,
        )
        return reminder

    async def _deliver(self, text: str, channel_id: str) -> None:
        await self.sink.send(channel_id, text)

    def startup(self) -> int:
        """Re-register every stored reminder. StorageCorruptError is fatal."""
        reminders = self.store.load_all()
        registered = 0
        for reminder in reminders:
            try:
                job = self.scheduler.register(reminder, self._deliver)
            except ValidationError as e:
                log.error("Stored reminder %s cannot be scheduled: %s", reminder.id, e)
                continue
            if job is not None:
                registered += 1
        self.ready = True
        log.info("Restored %d of %d stored reminders", registered, len(reminders))
        return registered


def confirmation(reminder: Reminder) -> str:
    text = (
        f"Reminder set for {reminder.date} {reminder.time} UTC! "
        f"Frequency: {reminder.frequency}"
    )
    if reminder.frequency == "custom":
        text += f" every {reminder.interval} minutes."
    else:
        text += "."
    if reminder.frequency == "weekly":
        text += " Weekly reminders fire on Sundays at that time."
    return text
