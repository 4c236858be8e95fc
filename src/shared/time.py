from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from src.core.errors import InvalidRangeError


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Naive timestamps from the record store are stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_key(value: datetime) -> str:
    return as_utc(value).strftime("%Y-%m")


def validate_date_range(
    start: Optional[datetime], end: Optional[datetime]
) -> Tuple[Optional[datetime], Optional[datetime]]:
    start_utc = as_utc(start) if start is not None else None
    end_utc = as_utc(end) if end is not None else None
    if start_utc is not None and end_utc is not None and end_utc < start_utc:
        raise InvalidRangeError()
    return start_utc, end_utc


def validate_day_range(start: date, end: date) -> Tuple[date, date]:
    if end < start:
        raise InvalidRangeError("Start date must be before end date")
    return start, end


def trailing_window(days: int, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    current = now or now_utc()
    return current - timedelta(days=days), current


def today_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    current = as_utc(now or now_utc())
    start_of_day = datetime.combine(current.date(), time.min, tzinfo=timezone.utc)
    return start_of_day, start_of_day + timedelta(days=1)


def month_to_date_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    current = as_utc(now or now_utc())
    start_of_month = datetime(current.year, current.month, 1, tzinfo=timezone.utc)
    return start_of_month, current


def year_to_date_window(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    current = as_utc(now or now_utc())
    start_of_year = datetime(current.year, 1, 1, tzinfo=timezone.utc)
    return start_of_year, current
