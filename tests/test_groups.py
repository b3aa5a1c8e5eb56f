# tests/test_groups.py

import pytest

from Dojodesk.core.errors import Conflict, NotFound, ValidationError
from Dojodesk.data.repos import (
    attendance_repo, clients_repo, employees_repo, groups_repo, lessons_repo,
)


def test_create_group_with_schedule_and_trainer(db):
    coach = employees_repo.create_employee("Sensei Sato", phone="+7 900 111-11-11")
    g = groups_repo.create_group("Seniors", "2025-01-01", coach.id, [
        {"day_of_week": 1, "start_time": "20:00", "end_time": "21:30"},
    ])
    assert g.trainer_name == "Sensei Sato"
    assert [(s.day_of_week, s.start_time) for s in g.schedule] == [(1, "20:00")]
    assert [x.id for x in groups_repo.fetch_groups_by_trainer(coach.id)] == [g.id]


def test_create_group_bad_input(db):
    with pytest.raises(NotFound):
        groups_repo.create_group("Ghost coach", trainer_id=999)
    with pytest.raises(ValidationError):
        groups_repo.create_group("Bad day", schedule=[
            {"day_of_week": 7, "start_time": "18:00", "end_time": "19:00"},
        ])
    assert groups_repo.fetch_groups() == []


def test_schedule_edits(group):
    slot = groups_repo.add_schedule(group.id, 4, "17:00", "18:00")
    moved = groups_repo.update_schedule(slot.id, start_time="16:00", end_time="17:00")
    assert (moved.day_of_week, moved.start_time, moved.end_time) == (4, "16:00", "17:00")
    friday = groups_repo.get_schedule_for_day(4)
    assert [(s["group_name"], s["start_time"]) for s in friday] == [("Juniors", "16:00")]
    assert groups_repo.remove_schedule(slot.id) is True
    assert groups_repo.get_schedule_for_day(4) == []
    with pytest.raises(NotFound):
        groups_repo.update_schedule(slot.id, start_time="10:00")


def test_add_member_backfills_from_join_date(group, client):
    lessons = lessons_repo.generate_from_schedule(group.id, "2025-03-03", "2025-03-12")
    groups_repo.add_member(group.id, client.id, joined_at="2025-03-06")
    marked = {
        l.lesson_date.isoformat(): [a.client_id for a in attendance_repo.get_for_lesson(l.id)]
        for l in lessons
    }
    assert marked == {
        "2025-03-03": [],
        "2025-03-05": [],
        "2025-03-10": [client.id],
        "2025-03-12": [client.id],
    }


def test_add_member_twice_conflicts(group, client):
    member = groups_repo.add_member(group.id, client.id)
    assert member.joined_at == "2025-03-10"
    with pytest.raises(Conflict):
        groups_repo.add_member(group.id, client.id)
    with pytest.raises(NotFound):
        groups_repo.add_member(group.id, 999)


def test_member_count_and_listing(group, client):
    other = clients_repo.create_client("Anna Smirnova")
    groups_repo.add_member(group.id, client.id)
    groups_repo.add_member(group.id, other.id)
    g = groups_repo.get_group_by_id(group.id)
    assert g.member_count == 2
    assert [m.full_name for m in g.members] == ["Anna Smirnova", "Ivan Petrov"]
    assert groups_repo.remove_member(group.id, other.id) is True
    assert groups_repo.get_group_by_id(group.id).member_count == 1


def test_delete_group_cascades(group, client):
    groups_repo.add_member(group.id, client.id)
    lessons_repo.generate_from_schedule(group.id, "2025-03-03", "2025-03-05")
    assert groups_repo.delete_group(group.id) is True
    assert lessons_repo.fetch_lessons(group_id=group.id) == ([], 0)
    assert attendance_repo.get_history_for_client(client.id) == []
    with pytest.raises(NotFound):
        groups_repo.get_group_by_id(group.id)


def test_update_group(group):
    updated = groups_repo.update_group(group.id, name="Juniors A", start_date="2025-02-01")
    assert (updated.name, updated.start_date) == ("Juniors A", "2025-02-01")
    with pytest.raises(NotFound):
        groups_repo.update_group(group.id, trainer_id=555)
