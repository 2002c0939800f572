"""Tests for schedule.py — building UTC schedules and APScheduler triggers."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from remind_bot.scheduling.schedule import (
    ValidationError,
    _convert_dow,
    build_schedule,
    parse_date,
    parse_time,
    to_trigger,
)

UTC = ZoneInfo("UTC")
NOW = datetime(2025, 3, 1, 10, 0, tzinfo=UTC)  # a Saturday


# --- build_schedule ---


@pytest.mark.parametrize(
    ("date", "time", "expected"),
    [
        ("2025-03-01", "14:30", datetime(2025, 3, 1, 14, 30, tzinfo=UTC)),
        ("2024-02-29", "00:00", datetime(2024, 2, 29, 0, 0, tzinfo=UTC)),
        ("2030-12-31", "23:59", datetime(2030, 12, 31, 23, 59, tzinfo=UTC)),
        ("2025-07-04", "9:05", datetime(2025, 7, 4, 9, 5, tzinfo=UTC)),
    ],
)
def test_once_is_exact_utc_instant(date, time, expected):
    expr = build_schedule(date, time, "once")

    assert expr.run_at == expected
    assert expr.run_at.utcoffset() == timedelta(0)
    assert expr.cron is None
    assert expr.interval_minutes is None
    assert expr.recurring is False


def test_daily_cron():
    expr = build_schedule("2025-03-01", "14:30", "daily")

    assert expr.cron == "30 14 * * *"
    assert expr.run_at is None
    assert expr.recurring is True


def test_weekly_anchored_to_sunday_regardless_of_date():
    wednesday = build_schedule("2025-03-05", "08:15", "weekly")
    friday = build_schedule("2025-03-07", "08:15", "weekly")

    assert wednesday.cron == "15 8 * * 0"
    assert wednesday == friday


def test_custom_interval():
    expr = build_schedule("2025-03-01", "14:30", "custom", 15)

    assert expr.interval_minutes == 15
    assert expr.cron is None
    assert expr.run_at is None


def test_interval_ignored_unless_custom():
    expr = build_schedule("2025-03-01", "14:30", "daily", 0)

    assert expr.cron == "30 14 * * *"
    assert expr.interval_minutes is None


@pytest.mark.parametrize("interval", [None, 0, -5])
def test_custom_rejects_missing_or_nonpositive_interval(interval):
    with pytest.raises(ValidationError, match="interval"):
        build_schedule("2025-03-01", "14:30", "custom", interval)


@pytest.mark.parametrize("interval", ["5", 2.5, True])
def test_custom_rejects_non_integer_interval(interval):
    with pytest.raises(ValidationError, match="whole number"):
        build_schedule("2025-03-01", "14:30", "custom", interval)


def test_unknown_frequency():
    with pytest.raises(ValidationError, match="frequency"):
        build_schedule("2025-03-01", "14:30", "hourly")


@pytest.mark.parametrize("frequency", ["once", "daily", "weekly", "custom"])
def test_bad_date_rejected_for_every_frequency(frequency):
    with pytest.raises(ValidationError, match="date"):
        build_schedule("2025-02-30", "14:30", frequency, 5)


def test_is_deterministic():
    assert build_schedule("2025-03-01", "14:30", "once") == build_schedule(
        "2025-03-01", "14:30", "once"
    )


# --- parsing ---


@pytest.mark.parametrize(
    "value", ["2025/03/01", "25-03-01", "2025-3-1", "2025-13-01", "2025-02-30", "", "today"]
)
def test_parse_date_rejects(value):
    with pytest.raises(ValidationError):
        parse_date(value)


def test_parse_date_rejects_non_string():
    with pytest.raises(ValidationError):
        parse_date(None)  # type: ignore[arg-type]


@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "12", "12:5", "-1:30", ""])
def test_parse_time_rejects(value):
    with pytest.raises(ValidationError):
        parse_time(value)


def test_non_ascii_digits_rejected():
    with pytest.raises(ValidationError):
        parse_time("\uff11\uff14:\uff13\uff10")
    with pytest.raises(ValidationError):
        parse_date("\u0662\u0660\u0662\u0665-\u0660\u0663-\u0660\u0661")


def test_parse_time_accepts_padding_and_whitespace():
    assert parse_time(" 07:05 ") == (7, 5)


# --- describe ---


def test_describe():
    assert build_schedule("2025-03-01", "14:30", "once").describe() == (
        "once at 2025-03-01 14:30 UTC"
    )
    assert build_schedule("2025-03-01", "9:05", "daily").describe() == (
        "daily at 09:05 UTC"
    )
    assert build_schedule("2025-03-05", "14:30", "weekly").describe() == (
        "every Sunday at 14:30 UTC"
    )
    assert build_schedule("2025-03-01", "14:30", "custom", 1).describe() == (
        "every 1 minute"
    )
    assert build_schedule("2025-03-01", "14:30", "custom", 45).describe() == (
        "every 45 minutes"
    )


# --- to_trigger ---


def test_once_trigger_fires_at_instant():
    expr = build_schedule("2025-03-01", "14:30", "once")

    trigger = to_trigger(expr, now=NOW)

    assert isinstance(trigger, DateTrigger)
    assert trigger.get_next_fire_time(None, NOW) == datetime(
        2025, 3, 1, 14, 30, tzinfo=UTC
    )


def test_daily_trigger_fires_every_24h():
    trigger = to_trigger(build_schedule("2025-03-01", "14:30", "daily"), now=NOW)

    assert isinstance(trigger, CronTrigger)
    first = trigger.get_next_fire_time(None, NOW)
    second = trigger.get_next_fire_time(first, first)
    third = trigger.get_next_fire_time(second, second)
    assert first == datetime(2025, 3, 1, 14, 30, tzinfo=UTC)
    assert second - first == timedelta(days=1)
    assert third - second == timedelta(days=1)


def test_daily_trigger_after_time_passed_starts_tomorrow():
    trigger = to_trigger(build_schedule("2025-03-01", "09:00", "daily"), now=NOW)

    assert trigger.get_next_fire_time(None, NOW) == datetime(
        2025, 3, 2, 9, 0, tzinfo=UTC
    )


def test_weekly_trigger_fires_on_sundays():
    trigger = to_trigger(build_schedule("2025-03-05", "08:15", "weekly"), now=NOW)

    first = trigger.get_next_fire_time(None, NOW)
    second = trigger.get_next_fire_time(first, first)
    assert first == datetime(2025, 3, 2, 8, 15, tzinfo=UTC)
    assert first.weekday() == 6
    assert second - first == timedelta(weeks=1)


def test_custom_trigger_fires_every_interval():
    trigger = to_trigger(build_schedule("2025-03-01", "14:30", "custom", 15), now=NOW)

    assert isinstance(trigger, IntervalTrigger)
    first = trigger.get_next_fire_time(None, NOW + timedelta(seconds=1))
    second = trigger.get_next_fire_time(first, first)
    assert first == NOW + timedelta(minutes=15)
    assert second - first == timedelta(minutes=15)


def test_convert_dow():
    assert _convert_dow("0") == "sun"
    assert _convert_dow("7") == "sun"
    assert _convert_dow("1,3") == "mon,wed"
    assert _convert_dow("*") == "*"
