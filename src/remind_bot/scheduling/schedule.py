"""Turn a reminder's date/time/frequency into a UTC schedule.

``build_schedule`` is pure: it validates the raw fields and returns a
``ScheduleExpression`` holding exactly one of a one-shot instant, a standard
cron rule, or a minute interval. ``to_trigger`` maps that onto APScheduler.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date as date_cls
from datetime import datetime

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from remind_bot.config import TZ

FREQUENCIES = ("once", "daily", "weekly", "custom")

# Weekly reminders always land on this day, whatever date was given.
WEEKLY_DOW = "0"

_DATE_RE = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")
_TIME_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")

# Standard cron: 0=Sunday. APScheduler CronTrigger: 0=Monday.
# Convert numeric values to named days to avoid the mismatch.
_CRON_DOW = {
    "0": "sun",
    "1": "mon",
    "2": "tue",
    "3": "wed",
    "4": "thu",
    "5": "fri",
    "6": "sat",
    "7": "sun",
}
_DAY_NAMES = {
    "sun": "Sunday",
    "mon": "Monday",
    "tue": "Tuesday",
    "wed": "Wednesday",
    "thu": "Thursday",
    "fri": "Friday",
    "sat": "Saturday",
}


class ValidationError(ValueError):
    """Reminder input is malformed or contradicts its frequency."""


@dataclass(frozen=True, slots=True)
class ScheduleExpression:
    frequency: str
    run_at: datetime | None = None  # once
    cron: str | None = None  # daily, weekly
    interval_minutes: int | None = None  # custom

    @property
    def recurring(self) -> bool:
        return self.run_at is None

    def describe(self) -> str:
        """Human summary of when this fires, e.g. ``daily at 14:30 UTC``."""
        if self.run_at is not None:
            return f"once at {self.run_at:%Y-%m-%d %H:%M} UTC"
        if self.interval_minutes is not None:
            s = "s" if self.interval_minutes != 1 else ""
            return f"every {self.interval_minutes} minute{s}"
        assert self.cron is not None
        minute, hour, _, _, dow = self.cron.split()
        at = f"{int(hour):02d}:{int(minute):02d} UTC"
        if dow == "*":
            return f"daily at {at}"
        return f"every {_DAY_NAMES[_CRON_DOW[dow]]} at {at}"


def parse_date(value: str) -> date_cls:
    m = _DATE_RE.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise ValidationError(f"date must be YYYY-MM-DD, got {value!r}")
    try:
        return date_cls(int(m[1]), int(m[2]), int(m[3]))
    except ValueError as e:
        raise ValidationError(f"invalid date {value!r}: {e}") from None


def parse_time(value: str) -> tuple[int, int]:
    m = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise ValidationError(f"time must be HH:MM, got {value!r}")
    hour, minute = int(m[1]), int(m[2])
    if hour > 23 or minute > 59:
        raise ValidationError(f"invalid time {value!r}: use 00:00-23:59")
    return hour, minute


def build_schedule(
    date: str, time: str, frequency: str, interval: int | None = None
) -> ScheduleExpression:
    """Validate raw reminder fields and normalize them to a UTC schedule.

    Weekly reminders are anchored to Sunday and ignore the weekday of ``date``.
    Custom reminders ignore ``date``/``time`` for timing but both are still
    validated.
    """
    if frequency not in FREQUENCIES:
        raise ValidationError(
            f"frequency must be one of {', '.join(FREQUENCIES)}, got {frequency!r}"
        )
    day = parse_date(date)
    hour, minute = parse_time(time)

    if frequency == "custom":
        if interval is None:
            raise ValidationError("custom frequency requires an interval in minutes")
        if isinstance(interval, bool) or not isinstance(interval, int):
            raise ValidationError(f"interval must be a whole number, got {interval!r}")
        if interval <= 0:
            raise ValidationError(f"interval must be positive, got {interval}")
        return ScheduleExpression(frequency=frequency, interval_minutes=interval)
    if frequency == "daily":
        return ScheduleExpression(frequency=frequency, cron=f"{minute} {hour} * * *")
    if frequency == "weekly":
        return ScheduleExpression(
            frequency=frequency, cron=f"{minute} {hour} * * {WEEKLY_DOW}"
        )
    run_at = datetime(day.year, day.month, day.day, hour, minute, tzinfo=TZ)
    return ScheduleExpression(frequency=frequency, run_at=run_at)


def _convert_dow(dow: str) -> str:
    """Convert standard cron day_of_week (0=Sun) to APScheduler names."""
    if dow == "*" or dow.startswith("*/"):
        return dow
    return ",".join(_CRON_DOW.get(part, part) for part in dow.split(","))


def to_trigger(expr: ScheduleExpression, *, now: datetime) -> BaseTrigger:
    """Map an expression onto an APScheduler trigger, all in UTC.

    ``now`` anchors custom intervals: the first firing is one interval later.
    """
    if expr.run_at is not None:
        return DateTrigger(run_date=expr.run_at, timezone=TZ)
    if expr.interval_minutes is not None:
        return IntervalTrigger(minutes=expr.interval_minutes, start_date=now, timezone=TZ)
    assert expr.cron is not None
    minute, hour, day, month, dow = expr.cron.split()
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=_convert_dow(dow),
        timezone=TZ,
    )
