from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) string into time."""
    v = value.strip()
    fmt = "%H:%M:%S" if v.count(":") == 2 else "%H:%M"
    return datetime.strptime(v, fmt).time()


def minutes_between(day: date, start: time, end: time) -> int:
    """Whole minutes from start to end on the same calendar day (negative if end < start)."""
    delta = datetime.combine(day, end) - datetime.combine(day, start)
    return int(delta.total_seconds() // 60)


def work_minutes(day: date, check_in: Optional[time], check_out: Optional[time], break_minutes: int) -> int:
    """Standard rule: (out - in) - breaks, not below 0."""
    if check_in is None or check_out is None:
        return 0
    return max(minutes_between(day, check_in, check_out) - int(break_minutes or 0), 0)


def is_sunday(day: date) -> bool:
    return day.weekday() == calendar.SUNDAY


def previous_day(day: date) -> date:
    return day - timedelta(days=1)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def format_duration(minutes: Optional[int]) -> str:
    if not minutes:
        return "0h 0m"
    return f"{minutes // 60}h {minutes % 60}m"
