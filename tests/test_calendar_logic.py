# tests/test_calendar_logic.py

from datetime import date

import pytest

from Dojodesk.core.calendar_logic import (
    day_of_week, iter_days, month_bounds, planned_lessons, slots_by_weekday,
)
from Dojodesk.core.models import ScheduleSlot


def slot(id, dow, start="18:00", end="19:00"):
    return ScheduleSlot(id=id, group_id=1, day_of_week=dow, start_time=start, end_time=end)


def test_monday_is_zero():
    # 6 January 2025 is a Monday, 12 January a Sunday
    assert day_of_week(date(2025, 1, 6)) == 0
    assert day_of_week(date(2025, 1, 12)) == 6


def test_iter_days_inclusive_and_empty_when_reversed():
    days = list(iter_days(date(2025, 1, 30), date(2025, 2, 2)))
    assert days == [date(2025, 1, 30), date(2025, 1, 31), date(2025, 2, 1), date(2025, 2, 2)]
    assert list(iter_days(date(2025, 2, 2), date(2025, 2, 1))) == []


def test_earliest_slot_wins_per_weekday():
    late = slot(1, 0, "19:00", "20:00")
    early = slot(2, 0, "17:00", "18:00")
    by_day = slots_by_weekday([late, early])
    assert by_day[0] is early


def test_planned_lessons_for_two_weeks():
    plan = planned_lessons([slot(1, 0), slot(2, 2)], date(2025, 1, 6), date(2025, 1, 19))
    assert [d for d, _ in plan] == [
        date(2025, 1, 6), date(2025, 1, 8), date(2025, 1, 13), date(2025, 1, 15),
    ]


def test_planned_lessons_without_schedule():
    assert planned_lessons([], date(2025, 1, 1), date(2025, 1, 31)) == []


@pytest.mark.parametrize("year,month,last", [
    (2025, 2, date(2025, 2, 28)),
    (2024, 2, date(2024, 2, 29)),
    (2025, 12, date(2025, 12, 31)),
])
def test_month_bounds(year, month, last):
    first, end = month_bounds(year, month)
    assert first == date(year, month, 1)
    assert end == last
