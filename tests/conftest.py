from __future__ import annotations

import os

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from dataclasses import dataclass, field
from datetime import date, datetime
from itertools import count
from typing import Optional

import pytest

from attendance_tracker.models.attendance import AttendanceStatus
from attendance_tracker.services.lifecycle import AttendanceLifecycle

MONDAY = date(2024, 1, 15)

_ids = count(1)


@dataclass
class Record:
    user: str
    class_name: str
    date: str
    status: AttendanceStatus = AttendanceStatus.PENDING
    marked_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: f"rec-{next(_ids)}")


@dataclass
class Entry:
    user: str
    class_name: str
    day: str
    time: str = "09:00-10:00"
    created_at: Optional[datetime] = datetime(2024, 1, 1)
    id: str = field(default_factory=lambda: f"tt-{next(_ids)}")


@dataclass
class HolidayRow:
    date: datetime
    reason: str
    created_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: f"hol-{next(_ids)}")


class InMemoryRecords:
    def __init__(self):
        self.by_key: dict[tuple[str, str, str], Record] = {}
        self.fail_create_for: set[str] = set()
        self.fail_update_for: set[str] = set()
        self.create_calls = 0

    def _matches(self, record: Record, query: dict) -> bool:
        return all(getattr(record, k) == v for k, v in query.items())

    def add(self, user, class_name, date_str, status=AttendanceStatus.PENDING) -> Record:
        record = Record(user, class_name, date_str, status)
        self.by_key[(user, class_name, date_str)] = record
        return record

    async def find_one(self, user, class_name, date_str):
        return self.by_key.get((user, class_name, date_str))

    async def find_many(self, query):
        return sorted((r for r in self.by_key.values() if self._matches(r, query)), key=lambda r: r.date)

    async def create(self, user, class_name, date_str, status=AttendanceStatus.PENDING):
        self.create_calls += 1
        if class_name in self.fail_create_for:
            raise RuntimeError("store unavailable")
        if (user, class_name, date_str) in self.by_key:
            return None
        return self.add(user, class_name, date_str, status)

    async def update_status(self, user, class_name, date_str, new_status, expected_status=AttendanceStatus.PENDING):
        if class_name in self.fail_update_for:
            raise RuntimeError("store unavailable")
        record = self.by_key.get((user, class_name, date_str))
        if record is None or (expected_status is not None and record.status != expected_status):
            return False
        record.status = new_status
        record.marked_at = datetime(2024, 1, 1)
        return True

    async def count(self, query):
        return len(await self.find_many(query))


class InMemoryHolidays:
    def __init__(self):
        self.rows: list[HolidayRow] = []
        self.fail = False

    async def find_overlapping(self, day_start, day_end):
        if self.fail:
            raise RuntimeError("holiday store unavailable")
        for row in self.rows:
            if day_start <= row.date <= day_end:
                return row
        return None

    async def find_all(self):
        return sorted(self.rows, key=lambda r: r.date)

    async def create(self, holiday_date, reason):
        row = HolidayRow(datetime.combine(holiday_date, datetime.min.time()), reason, datetime(2024, 1, 1))
        self.rows.append(row)
        return row


class InMemoryTimetable:
    def __init__(self):
        self.entries: list[Entry] = []

    def add(self, user, class_name, day, time="09:00-10:00", created_at=datetime(2024, 1, 1)) -> Entry:
        entry = Entry(user, class_name, day, time, created_at)
        self.entries.append(entry)
        return entry

    async def find_by_day(self, day):
        return [e for e in self.entries if e.day == day]

    async def find_for_user(self, user, day):
        return sorted((e for e in self.entries if e.user == user and e.day == day), key=lambda e: e.time)

    async def create(self, user, class_name, day, time):
        return self.add(user, class_name, day, time)

    async def delete(self, user, entry_id):
        for entry in self.entries:
            if entry.id == entry_id and entry.user == user:
                self.entries.remove(entry)
                return True
        return False


@pytest.fixture
def records():
    return InMemoryRecords()


@pytest.fixture
def holidays():
    return InMemoryHolidays()


@pytest.fixture
def timetable():
    return InMemoryTimetable()


@pytest.fixture
def lifecycle(records, holidays, timetable):
    job = AttendanceLifecycle(records, holidays, timetable, tz_name="UTC", catch_up_days=7)
    job.today = lambda: MONDAY
    return job
