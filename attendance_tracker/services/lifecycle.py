"""Attendance record lifecycle: pending creation, holiday suppression, stale sweep.

Per (user, class, date) a record goes

    [none] -> pending -> present | absent

and never leaves present/absent. Every write is either an insert guarded by the
unique (user, class_name, date) index or an update conditioned on
``status == "pending"``, so overlapping runs are harmless.
"""
import logging
from datetime import date, timedelta

from attendance_tracker.dates import day_bounds, day_end_utc, day_name, format_date, local_today, trailing_days
from attendance_tracker.models.attendance import AttendanceStatus
from attendance_tracker.services.stores import HolidayStore, RecordStore, TimetableStore

logger = logging.getLogger(__name__)

RESOLVED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.ABSENT)


class AttendanceLifecycle:
    def __init__(
        self,
        records: RecordStore,
        holidays: HolidayStore,
        timetable: TimetableStore,
        *,
        tz_name: str = "UTC",
        catch_up_days: int = 7,
    ):
        self._records = records
        self._holidays = holidays
        self._timetable = timetable
        self.tz_name = tz_name
        self.catch_up_days = int(catch_up_days)

    def today(self) -> date:
        return local_today(self.tz_name)

    async def generate_pending_for(self, day: date) -> int:
        """Create a pending record for every scheduled class on `day` that has none.

        Returns the number of records created. Holidays create nothing.
        Entries added to the timetable after `day` ended do not apply to it.
        """
        date_str = format_date(day)
        try:
            start, end = day_bounds(day)
            holiday = await self._holidays.find_overlapping(start, end)
            if holiday:
                logger.info("%s is a holiday (%s). Skipping attendance creation.", date_str, holiday.reason)
                return 0
            entries = await self._timetable.find_by_day(day_name(day))
            cutoff = day_end_utc(day, self.tz_name)
        except Exception:
            logger.exception("Error preparing attendance for %s", date_str)
            return 0

        created = 0
        for entry in entries:
            if entry.created_at and entry.created_at > cutoff:
                continue
            try:
                existing = await self._records.find_one(entry.user, entry.class_name, date_str)
                if existing:
                    continue
                record = await self._records.create(entry.user, entry.class_name, date_str)
                if record is not None:
                    created += 1
                    logger.debug(
                        "Created pending attendance for %s - user %s - %s", entry.class_name, entry.user, date_str
                    )
            except Exception as e:
                logger.error(
                    "Error creating attendance for %s - user %s - %s: %s", entry.class_name, entry.user, date_str, e
                )
        logger.info("Created %d pending attendance records for %s", created, date_str)
        return created

    async def resolve_stale_pending(self, day: date) -> int:
        """Finalize every record on `day` still pending as absent. Returns the count flipped."""
        date_str = format_date(day)
        try:
            pending = await self._records.find_many({"date": date_str, "status": AttendanceStatus.PENDING.value})
        except Exception:
            logger.exception("Error loading pending attendance for %s", date_str)
            return 0

        resolved = 0
        for record in pending:
            try:
                if await self._records.update_status(
                    record.user, record.class_name, date_str, AttendanceStatus.ABSENT
                ):
                    resolved += 1
            except Exception as e:
                logger.error(
                    "Error marking absent for %s - user %s - %s: %s", record.class_name, record.user, date_str, e
                )
        logger.info("Marked %d stale pending records absent for %s", resolved, date_str)
        return resolved

    async def resolve_previous_day(self) -> int:
        return await self.resolve_stale_pending(self.today() - timedelta(days=1))

    async def generate_today(self) -> int:
        return await self.generate_pending_for(self.today())

    async def run_catch_up(self) -> None:
        """Re-run generation and the stale sweep over the trailing window, excluding today."""
        for day in trailing_days(self.today(), self.catch_up_days):
            await self.generate_pending_for(day)
            await self.resolve_stale_pending(day)

    async def run_startup(self, catch_up: bool = False) -> None:
        """Bring today and yesterday up to date after a (re)start."""
        if catch_up:
            await self.run_catch_up()
        await self.generate_today()
        await self.resolve_previous_day()

    async def mark_status(self, user: str, class_name: str, date_str: str, status: AttendanceStatus) -> bool:
        """User-facing flip of a pending record. False if there is no pending record to flip."""
        if status not in RESOLVED_STATUSES:
            raise ValueError(f"Cannot mark attendance as {status!r}")
        try:
            return await self._records.update_status(user, class_name, date_str, status)
        except Exception:
            logger.exception("Error marking %s for %s - user %s - %s", status.value, class_name, user, date_str)
            return False

    async def mark_present(self, user: str, class_name: str, date_str: str) -> bool:
        return await self.mark_status(user, class_name, date_str, AttendanceStatus.PRESENT)
