"""Calendar helpers shared by the lifecycle job and the API."""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def day_name(d: date) -> str:
    """English weekday name, independent of the process locale."""
    return DAY_NAMES[d.weekday()]


def format_date(d: date) -> str:
    return d.isoformat()


def parse_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string. Raises ValueError otherwise."""
    if len(value) != 10:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    return date.fromisoformat(value)


def day_bounds(d: date) -> tuple[datetime, datetime]:
    """Local wall-clock span of a day: 00:00:00.000 through 23:59:59.999.

    Holidays are stored as naive local datetimes, so the bounds are naive too.
    """
    start = datetime.combine(d, time.min)
    end = datetime.combine(d, time(23, 59, 59, 999000))
    return start, end


def day_end_utc(d: date, tz_name: str) -> datetime:
    """End of `d` in `tz_name` as a naive UTC datetime, comparable with stored `created_at` values."""
    end = datetime.combine(d, time(23, 59, 59, 999000), tzinfo=ZoneInfo(tz_name))
    return end.astimezone(timezone.utc).replace(tzinfo=None)


def local_now(tz_name: str) -> datetime:
    return datetime.now(ZoneInfo(tz_name))


def local_today(tz_name: str) -> date:
    return local_now(tz_name).date()


def trailing_days(today: date, days: int) -> list[date]:
    """The `days` calendar days before `today`, oldest first, excluding today."""
    return [today - timedelta(days=offset) for offset in range(days, 0, -1)]
