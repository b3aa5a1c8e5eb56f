# tests/test_lessons.py

from datetime import date

import pytest

from Dojodesk.core.errors import NotFound, ValidationError
from Dojodesk.data.repos import groups_repo, lessons_repo


def test_generate_follows_weekdays(group):
    created = lessons_repo.generate_from_schedule(group.id, "2025-03-03", "2025-03-09")
    assert [l.lesson_date for l in created] == [date(2025, 3, 3), date(2025, 3, 5)]
    assert all(l.start_time == "18:00" and l.end_time == "19:00" for l in created)
    assert created[0].group_name == "Juniors"


def test_generate_is_idempotent(group):
    first = lessons_repo.generate_from_schedule(group.id, "2025-03-01", "2025-03-31")
    again = lessons_repo.generate_from_schedule(group.id, "2025-03-01", "2025-03-31")
    assert len(first) == 9
    assert again == []
    _, total = lessons_repo.fetch_lessons(group_id=group.id)
    assert total == 9


def test_generate_fills_only_missing_dates(group):
    lessons_repo.create_lesson(group.id, "2025-03-05", "10:00", "11:00")
    created = lessons_repo.generate_from_schedule(group.id, "2025-03-03", "2025-03-09")
    assert [l.lesson_date for l in created] == [date(2025, 3, 3)]


def test_generate_without_schedule(db):
    bare = groups_repo.create_group("No schedule")
    assert lessons_repo.generate_from_schedule(bare.id, "2025-03-01", "2025-03-31") == []


def test_generate_earliest_slot_of_the_day(db):
    g = groups_repo.create_group("Doubles", schedule=[
        {"day_of_week": 4, "start_time": "19:00", "end_time": "20:00"},
        {"day_of_week": 4, "start_time": "09:30", "end_time": "10:30"},
    ])
    (lesson,) = lessons_repo.generate_from_schedule(g.id, "2025-03-07", "2025-03-07")
    assert lesson.start_time == "09:30"


def test_generate_unknown_group(db):
    with pytest.raises(NotFound):
        lessons_repo.generate_from_schedule(424242, "2025-03-01", "2025-03-31")


def test_create_lesson_validation(group):
    with pytest.raises(ValidationError):
        lessons_repo.create_lesson(group.id, "2025-03-05", "19:00", "18:00")
    with pytest.raises(ValidationError):
        lessons_repo.create_lesson(group.id, "2025-03-05", "7pm", "8pm")
    with pytest.raises(NotFound):
        lessons_repo.create_lesson(999, "2025-03-05", "18:00", "19:00")


def test_listing_and_paging(group):
    lessons_repo.generate_from_schedule(group.id, "2025-03-01", "2025-03-31")
    page, total = lessons_repo.fetch_lessons(group_id=group.id, page=2, limit=4)
    assert total == 9
    assert [l.lesson_date for l in page] == [
        date(2025, 3, 17), date(2025, 3, 19), date(2025, 3, 24), date(2025, 3, 26),
    ]
    window, total = lessons_repo.fetch_lessons(start_date="2025-03-10", end_date="2025-03-12")
    assert total == 2 and len(window) == 2


def test_today_and_month(group):
    lessons_repo.generate_from_schedule(group.id, "2025-02-24", "2025-04-02")
    (today_lesson,) = lessons_repo.get_today_lessons()
    assert today_lesson.lesson_date == date(2025, 3, 10)
    assert len(lessons_repo.get_lessons_by_group_and_month(group.id, 2025, 3)) == 9
    assert lessons_repo.get_lessons_by_date("2025-03-11") == []
    with pytest.raises(ValidationError):
        lessons_repo.get_lessons_by_group_and_month(group.id, 2025, 13)


def test_delete_lesson(group):
    (lesson,) = lessons_repo.generate_from_schedule(group.id, "2025-03-03", "2025-03-03")
    assert lessons_repo.delete_lesson(lesson.id) is True
    with pytest.raises(NotFound):
        lessons_repo.get_lesson_by_id(lesson.id)
