from datetime import date, timedelta
from typing import Dict, Iterable, Iterator, List, Tuple

from Dojodesk.core.models import ScheduleSlot


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end]; empty when start > end."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def day_of_week(day: date) -> int:
    """0=Monday … 6=Sunday, the convention stored in group_schedule."""
    return day.weekday()


def slots_by_weekday(schedule: Iterable[ScheduleSlot]) -> Dict[int, ScheduleSlot]:
    """One slot per weekday: the earliest start_time wins."""
    by_day: Dict[int, ScheduleSlot] = {}
    for slot in sorted(schedule, key=lambda s: (s.day_of_week, s.start_time, s.id)):
        by_day.setdefault(slot.day_of_week, slot)
    return by_day


def planned_lessons(
    schedule: Iterable[ScheduleSlot], start: date, end: date
) -> List[Tuple[date, ScheduleSlot]]:
    """
    Expand a weekly schedule into (date, slot) pairs over [start, end].
    """
    by_day = slots_by_weekday(schedule)
    if not by_day:
        return []
    return [(d, by_day[day_of_week(d)]) for d in iter_days(start, end) if day_of_week(d) in by_day]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    first = date(year, month, 1)
    if month == 12:
        last = date(year + 1, 1, 1) - timedelta(days=1)
    else:
        last = date(year, month + 1, 1) - timedelta(days=1)
    return first, last
