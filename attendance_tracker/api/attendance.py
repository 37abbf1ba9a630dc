from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from attendance_tracker.api.deps import CurrentUser, Lifecycle, Records
from attendance_tracker.dates import format_date, parse_date
from attendance_tracker.models.attendance import (
    AttendanceCreate,
    AttendanceMarkRequest,
    AttendanceOut,
    AttendanceStatus,
    ClassSummary,
)

router = APIRouter()


def _record_out(record) -> dict:
    return {
        "id": str(record.id),
        "user": record.user,
        "class_name": record.class_name,
        "date": record.date,
        "status": record.status,
        "marked_at": record.marked_at,
    }


def _validated_date(date_str: str) -> str:
    try:
        return format_date(parse_date(date_str))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format (YYYY-MM-DD)")


@router.post("/", response_model=AttendanceOut, status_code=201)
async def create_attendance(data: AttendanceCreate, user: CurrentUser, records: Records, lifecycle: Lifecycle):
    """Open today's pending record for a class outside the timetable."""
    today = format_date(lifecycle.today())
    record = await records.create(str(user.id), data.class_name, today)
    if record is None:
        raise HTTPException(status_code=400, detail="Attendance for today already recorded for this class")
    return _record_out(record)


@router.get("/", response_model=List[AttendanceOut])
async def list_attendance(user: CurrentUser, records: Records, date: Optional[str] = Query(None)):
    query = {"user": str(user.id)}
    if date:
        query["date"] = _validated_date(date)
    return [_record_out(r) for r in await records.find_many(query)]


@router.get("/count")
async def count_present(user: CurrentUser, records: Records):
    total = await records.count({"user": str(user.id), "status": AttendanceStatus.PRESENT.value})
    return {"total_present": total}


@router.get("/summary", response_model=List[ClassSummary])
async def attendance_summary(user: CurrentUser, records: Records):
    """Per-class totals; the percentage only counts resolved records."""
    by_class: dict[str, dict[str, int]] = {}
    for record in await records.find_many({"user": str(user.id)}):
        counts = by_class.setdefault(record.class_name, {s.value: 0 for s in AttendanceStatus})
        counts[AttendanceStatus(record.status).value] += 1

    summaries = []
    for class_name in sorted(by_class):
        counts = by_class[class_name]
        resolved = counts["present"] + counts["absent"]
        summaries.append(
            ClassSummary(
                class_name=class_name,
                present=counts["present"],
                absent=counts["absent"],
                pending=counts["pending"],
                total=sum(counts.values()),
                percentage=round(counts["present"] * 100 / resolved) if resolved else 0,
            )
        )
    return summaries


@router.put("/{class_name}/{date_str}")
async def mark_attendance(
    class_name: str, date_str: str, data: AttendanceMarkRequest, user: CurrentUser, lifecycle: Lifecycle
):
    """Resolve a pending record as present or absent. Resolved records stay as they are."""
    date_key = _validated_date(date_str)
    updated = await lifecycle.mark_status(str(user.id), class_name, date_key, AttendanceStatus(data.status))
    if not updated:
        raise HTTPException(status_code=404, detail="No pending attendance record for this class and date")
    return {"class_name": class_name, "date": date_key, "status": data.status}
