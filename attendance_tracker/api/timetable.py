from typing import List

from fastapi import APIRouter, HTTPException, Response

from attendance_tracker.api.deps import CurrentUser, Holidays, TeacherOrAdmin, Timetable
from attendance_tracker.dates import DAY_NAMES
from attendance_tracker.models.holiday import HolidayCreate, HolidayOut
from attendance_tracker.models.timetable import TimetableEntryCreate, TimetableEntryOut

router = APIRouter()


def _entry_out(entry) -> dict:
    return {"id": str(entry.id), "user": entry.user, "class_name": entry.class_name, "day": entry.day, "time": entry.time}


def _holiday_out(holiday) -> dict:
    return {"id": str(holiday.id), "date": holiday.date, "reason": holiday.reason, "created_at": holiday.created_at}


@router.post("/", response_model=TimetableEntryOut, status_code=201)
async def create_entry(data: TimetableEntryCreate, user: CurrentUser, timetable: Timetable):
    """Add a weekly class slot for the current user."""
    entry = await timetable.create(str(user.id), data.class_name, data.day, data.time)
    return _entry_out(entry)


@router.get("/day/{day}", response_model=List[TimetableEntryOut])
async def list_entries_for_day(day: str, user: CurrentUser, timetable: Timetable):
    """The current user's classes on a weekday, ordered by time slot."""
    day = day.capitalize()
    if day not in DAY_NAMES:
        raise HTTPException(status_code=400, detail=f"Unknown day {day!r}")
    entries = await timetable.find_for_user(str(user.id), day)
    return [_entry_out(e) for e in entries]


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(entry_id: str, user: CurrentUser, timetable: Timetable):
    if not await timetable.delete(str(user.id), entry_id):
        raise HTTPException(status_code=404, detail="Timetable entry not found")
    return Response(status_code=204)


@router.post("/holiday", response_model=HolidayOut, status_code=201)
async def create_holiday(data: HolidayCreate, user: TeacherOrAdmin, holidays: Holidays):
    """Mark a day as a holiday; no attendance is generated for it."""
    holiday = await holidays.create(data.date, data.reason)
    return _holiday_out(holiday)


@router.get("/holidays", response_model=List[HolidayOut])
async def list_holidays(user: CurrentUser, holidays: Holidays):
    return [_holiday_out(h) for h in await holidays.find_all()]
