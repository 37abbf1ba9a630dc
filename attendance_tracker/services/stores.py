"""Record, holiday and timetable stores backed by Beanie documents.

The lifecycle job only talks to these interfaces, so tests can swap in
in-memory implementations.
"""
import logging
from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from attendance_tracker.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_tracker.models.holiday import Holiday
from attendance_tracker.models.timetable import TimetableEntry

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    async def find_one(self, user: str, class_name: str, date_str: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def find_many(self, query: dict[str, Any]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    async def create(
        self, user: str, class_name: str, date_str: str, status: AttendanceStatus = AttendanceStatus.PENDING
    ) -> Optional[AttendanceRecord]:
        """Insert a record; None when (user, class_name, date) already exists."""
        raise NotImplementedError

    async def update_status(
        self,
        user: str,
        class_name: str,
        date_str: str,
        new_status: AttendanceStatus,
        expected_status: Optional[AttendanceStatus] = AttendanceStatus.PENDING,
    ) -> bool:
        """Atomically set the status if the current one matches `expected_status`."""
        raise NotImplementedError

    async def count(self, query: dict[str, Any]) -> int:
        raise NotImplementedError


class HolidayStore(Protocol):
    async def find_overlapping(self, day_start: datetime, day_end: datetime) -> Optional[Holiday]:
        raise NotImplementedError

    async def find_all(self) -> Sequence[Holiday]:
        raise NotImplementedError

    async def create(self, holiday_date: date, reason: str) -> Holiday:
        raise NotImplementedError


class TimetableStore(Protocol):
    async def find_by_day(self, day: str) -> Sequence[TimetableEntry]:
        raise NotImplementedError

    async def create(self, user: str, class_name: str, day: str, time: str) -> TimetableEntry:
        raise NotImplementedError


class MongoRecordStore:
    async def find_one(self, user, class_name, date_str):
        return await AttendanceRecord.find_one({"user": user, "class_name": class_name, "date": date_str})

    async def find_many(self, query):
        return await AttendanceRecord.find(query).sort("date").to_list()

    async def create(self, user, class_name, date_str, status=AttendanceStatus.PENDING):
        record = AttendanceRecord(user=user, class_name=class_name, date=date_str, status=status)
        try:
            await record.insert()
        except DuplicateKeyError:
            logger.debug("Attendance for %s / %s / %s already exists", user, class_name, date_str)
            return None
        return record

    async def update_status(
        self, user, class_name, date_str, new_status, expected_status=AttendanceStatus.PENDING
    ):
        query = {"user": user, "class_name": class_name, "date": date_str}
        if expected_status is not None:
            query["status"] = expected_status.value
        now = datetime.utcnow()
        result = await AttendanceRecord.find_one(query).update(
            {"$set": {"status": new_status.value, "marked_at": now, "updated_at": now}}
        )
        return bool(result and result.modified_count)

    async def count(self, query):
        return await AttendanceRecord.find(query).count()


class MongoHolidayStore:
    async def find_overlapping(self, day_start, day_end):
        return await Holiday.find_one({"date": {"$gte": day_start, "$lte": day_end}})

    async def find_all(self):
        return await Holiday.find().sort("date").to_list()

    async def create(self, holiday_date, reason):
        holiday = Holiday(date=datetime.combine(holiday_date, datetime.min.time()), reason=reason)
        await holiday.insert()
        return holiday


class MongoTimetableStore:
    async def find_by_day(self, day):
        return await TimetableEntry.find({"day": day}).to_list()

    async def find_for_user(self, user: str, day: str) -> list[TimetableEntry]:
        return await TimetableEntry.find({"user": user, "day": day}).sort("time").to_list()

    async def create(self, user, class_name, day, time):
        entry = TimetableEntry(user=user, class_name=class_name, day=day, time=time)
        await entry.insert()
        return entry

    async def delete(self, user: str, entry_id: str) -> bool:
        try:
            entry = await TimetableEntry.get(PydanticObjectId(entry_id))
        except InvalidId:
            return False
        if not entry or entry.user != user:
            return False
        await entry.delete()
        return True
