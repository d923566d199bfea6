"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def day_in_month(year: int, month: int, day: int) -> date:
    """Build a date, clamping the day to the month length (day 31 in February -> 28/29)"""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last))


def add_months(year: int, month: int, delta: int) -> tuple[int, int]:
    """Shift a (year, month) pair by delta months"""
    total = year * 12 + (month - 1) + delta
    return total // 12, total % 12 + 1


def next_day_of_month(day: int, today: date) -> date:
    """Next occurrence of a day of month, today included"""
    candidate = day_in_month(today.year, today.month, day)
    if candidate >= today:
        return candidate
    year, month = add_months(today.year, today.month, 1)
    return day_in_month(year, month, day)


def days_between(start: date, end: date) -> int:
    return (end - start).days
