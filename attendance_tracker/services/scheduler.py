"""APScheduler wiring for the attendance lifecycle, with day-rollover self-correction."""
import logging
from datetime import date
from typing import Literal, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from attendance_tracker.services.lifecycle import AttendanceLifecycle

logger = logging.getLogger(__name__)

ScheduleMode = Literal["daily", "hourly"]

GENERATE_JOB_ID = "attendance-generate"
RESOLVE_JOB_ID = "attendance-resolve"
STARTUP_JOB_ID = "attendance-startup"


class AttendanceScheduler:
    """Owns the periodic triggers and the last calendar day they were registered for.

    ``daily`` fires both triggers at local midnight. ``hourly`` fires them at the
    top of every hour and additionally sweeps the trailing catch-up window, which
    tolerates longer downtime.
    """

    def __init__(
        self,
        lifecycle: AttendanceLifecycle,
        *,
        mode: ScheduleMode = "hourly",
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        if mode not in ("daily", "hourly"):
            raise ValueError(f"Unknown schedule mode {mode!r}")
        self.lifecycle = lifecycle
        self.mode = mode
        self._scheduler = scheduler or AsyncIOScheduler(timezone=lifecycle.tz_name)
        self.last_observed_day: Optional[date] = None
        self._generate_job = None
        self._resolve_job = None

    @property
    def scheduler(self) -> AsyncIOScheduler:
        return self._scheduler

    def _trigger(self) -> CronTrigger:
        if self.mode == "daily":
            return CronTrigger(hour=0, minute=0, timezone=self.lifecycle.tz_name)
        return CronTrigger(minute=0, timezone=self.lifecycle.tz_name)

    def _register_triggers(self) -> None:
        job_options = {"replace_existing": True, "coalesce": True, "max_instances": 1, "misfire_grace_time": 3600}
        self._generate_job = self._scheduler.add_job(
            self._generate_tick, self._trigger(), id=GENERATE_JOB_ID, **job_options
        )
        self._resolve_job = self._scheduler.add_job(
            self._resolve_tick, self._trigger(), id=RESOLVE_JOB_ID, **job_options
        )

    def _cancel_triggers(self) -> None:
        for job in (self._generate_job, self._resolve_job):
            if job is None:
                continue
            try:
                job.remove()
            except JobLookupError:
                logger.debug("Attendance job %s was already removed", job.id)
        self._generate_job = None
        self._resolve_job = None

    def _schedule_startup_run(self) -> None:
        # No trigger: APScheduler runs the job once, as soon as possible.
        self._scheduler.add_job(
            self.lifecycle.run_startup,
            id=STARTUP_JOB_ID,
            kwargs={"catch_up": self.mode == "hourly"},
            replace_existing=True,
        )

    def schedule_daily(self, run_now: bool = True) -> None:
        """Register both periodic triggers, plus an immediate one-off run."""
        self.last_observed_day = self.lifecycle.today()
        self._register_triggers()
        if run_now:
            self._schedule_startup_run()
        logger.info("Attendance triggers registered (%s mode, tz=%s)", self.mode, self.lifecycle.tz_name)

    def check_rollover(self) -> bool:
        """Re-register the triggers if the calendar day changed since the last tick."""
        today = self.lifecycle.today()
        if today == self.last_observed_day:
            return False
        logger.info("Day changed from %s to %s, re-registering attendance triggers", self.last_observed_day, today)
        self._cancel_triggers()
        self._register_triggers()
        self.last_observed_day = today
        # Re-registering can drop the sibling trigger's firing for this boundary,
        # so bring both today and yesterday up to date in one go.
        self._schedule_startup_run()
        return True

    async def _generate_tick(self) -> None:
        if self.check_rollover():
            return
        if self.mode == "hourly":
            await self.lifecycle.run_catch_up()
        await self.lifecycle.generate_today()

    async def _resolve_tick(self) -> None:
        if self.check_rollover():
            return
        await self.lifecycle.resolve_previous_day()

    def start(self) -> None:
        self.schedule_daily()
        self._scheduler.start()

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._cancel_triggers()
