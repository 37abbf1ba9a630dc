"""Beanie document models and Pydantic schemas."""
from attendance_tracker.models.user import User, UserRole, UserCreate
from attendance_tracker.models.timetable import TimetableEntry, TimetableEntryCreate, TimetableEntryOut
from attendance_tracker.models.holiday import Holiday, HolidayCreate, HolidayOut
from attendance_tracker.models.attendance import (
    AttendanceRecord,
    AttendanceStatus,
    AttendanceCreate,
    AttendanceMarkRequest,
    AttendanceOut,
    ClassSummary,
)

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "TimetableEntry",
    "TimetableEntryCreate",
    "TimetableEntryOut",
    "Holiday",
    "HolidayCreate",
    "HolidayOut",
    "AttendanceRecord",
    "AttendanceStatus",
    "AttendanceCreate",
    "AttendanceMarkRequest",
    "AttendanceOut",
    "ClassSummary",
]
