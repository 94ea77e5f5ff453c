from datetime import date, time

import pytest

from retail_attendance.common.datetime_utils import (
    format_duration,
    is_sunday,
    minutes_between,
    month_bounds,
    parse_hhmm,
    previous_day,
    work_minutes,
)

DAY = date(2024, 3, 15)


def test_parse_hhmm_accepts_seconds():
    assert parse_hhmm("09:05") == time(9, 5)
    assert parse_hhmm(" 22:00:30 ") == time(22, 0, 30)
    with pytest.raises(ValueError):
        parse_hhmm("25:00")


def test_minutes_are_floored():
    assert minutes_between(DAY, time(9, 0), time(9, 1, 59)) == 1
    assert minutes_between(DAY, time(10, 0), time(9, 0)) == -60


def test_work_minutes_subtracts_breaks_and_clamps():
    assert work_minutes(DAY, time(9, 0), time(17, 0), 45) == 435
    assert work_minutes(DAY, time(9, 0), time(10, 0), 90) == 0
    assert work_minutes(DAY, time(9, 0), None, 0) == 0


def test_calendar_helpers():
    assert is_sunday(date(2024, 3, 17))
    assert not is_sunday(date(2024, 3, 16))
    assert previous_day(date(2024, 3, 1)) == date(2024, 2, 29)
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


def test_format_duration():
    assert format_duration(0) == "0h 0m"
    assert format_duration(None) == "0h 0m"
    assert format_duration(300) == "5h 0m"
    assert format_duration(435) == "7h 15m"
