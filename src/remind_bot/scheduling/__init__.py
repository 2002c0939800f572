"""Scheduling: reminder records, schedule building, and the APScheduler integration."""

from remind_bot.scheduling.delivered import DeliveredLog
from remind_bot.scheduling.reminders import Reminder, ReminderStore
from remind_bot.scheduling.schedule import (
    ScheduleExpression,
    ValidationError,
    build_schedule,
    to_trigger,
)
from remind_bot.scheduling.scheduler import ReminderScheduler

__all__ = [
    "DeliveredLog",
    "Reminder",
    "ReminderScheduler",
    "ReminderStore",
    "ScheduleExpression",
    "ValidationError",
    "build_schedule",
    "to_trigger",
]
