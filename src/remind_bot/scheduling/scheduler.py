"""Reminder timers via APScheduler.

One job per reminder, keyed ``rem_<id>``. One-shots use DateTrigger and are
recorded in the delivered log once fired; daily/weekly use CronTrigger and
custom reminders use IntervalTrigger, firing until the process exits.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from apscheduler.events import EVENT_JOB_MISSED, JobExecutionEvent
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from remind_bot.config import MISFIRE_GRACE, MISSED_ONESHOT, TZ
from remind_bot.delivery import DeliveryError
from remind_bot.scheduling.delivered import DeliveredLog
from remind_bot.scheduling.reminders import Reminder
from remind_bot.scheduling.schedule import to_trigger

log = logging.getLogger(__name__)

OnFire = Callable[[str, str], Awaitable[None] | None]

# Missed one-shots fire this long after they are re-registered.
_CATCH_UP_DELAY = timedelta(seconds=5)


def job_id(reminder_id: str) -> str:
    return f"rem_{reminder_id}"


class ReminderScheduler:
    """Owns the live job handle for every registered reminder."""

    def __init__(
        self,
        scheduler: AsyncIOScheduler | None = None,
        *,
        delivered: DeliveredLog | None = None,
        missed_oneshot: str = MISSED_ONESHOT,
        misfire_grace: int = MISFIRE_GRACE,
    ) -> None:
        self.scheduler = scheduler or AsyncIOScheduler(timezone=TZ)
        self.delivered = delivered or DeliveredLog()
        self.missed_oneshot = missed_oneshot
        self.misfire_grace = misfire_grace
        self.jobs: dict[str, Job] = {}
        self.scheduler.add_listener(self._on_missed, EVENT_JOB_MISSED)

    def _on_missed(self, event: JobExecutionEvent) -> None:
        """APScheduler drops a one-shot that misses its grace time without running it."""
        reminder_id = event.job_id.removeprefix("rem_")
        job = self.jobs.get(reminder_id)
        if job is None or not isinstance(job.trigger, DateTrigger):
            return
        log.warning(
            "Reminder %s missed its run time %s by more than %ss; dropping",
            reminder_id,
            event.scheduled_run_time,
            self.misfire_grace,
        )
        self.jobs.pop(reminder_id, None)
        self.delivered.mark(reminder_id)

    def start(self) -> None:
        self.scheduler.start()

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    def register(self, reminder: Reminder, on_fire: OnFire) -> Job | None:
        """Start (or restart) the job for a reminder.

        Returns None when a one-shot is not scheduled: it already fired, or it
        was missed and the missed-oneshot policy is ``skip``.
        """
        expr = reminder.schedule()
        now = datetime.now(TZ)
        trigger = to_trigger(expr, now=now)

        if expr.run_at is not None:
            if reminder.id in self.delivered:
                log.debug("Reminder %s already delivered, not rescheduling", reminder.id)
                return None
            if expr.run_at <= now:
                if self.missed_oneshot == "skip":
                    log.warning(
                        "Reminder %s was due at %s and is expired; skipping",
                        reminder.id,
                        expr.run_at.isoformat(),
                    )
                    return None
                log.warning(
                    "Reminder %s was due at %s; firing now",
                    reminder.id,
                    expr.run_at.isoformat(),
                )
                trigger = DateTrigger(run_date=now + _CATCH_UP_DELAY, timezone=TZ)

        text = reminder.render()

        async def fire() -> None:
            try:
                result = on_fire(text, reminder.channel_id)
                if inspect.isawaitable(result):
                    await result
            except DeliveryError as e:
                log.warning("Reminder %s not delivered: %s", reminder.id, e)
            except Exception:
                log.exception("Reminder %s failed", reminder.id)
                raise
            finally:
                if not expr.recurring:
                    self.jobs.pop(reminder.id, None)
                    self.delivered.mark(reminder.id)

        job = self.scheduler.add_job(
            fire,
            trigger,
            id=job_id(reminder.id),
            name=f"reminder {reminder.id}",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=self.misfire_grace,
        )
        self.jobs[reminder.id] = job
        log.info("Registered reminder %s: %s", reminder.id, expr.describe())
        return job
