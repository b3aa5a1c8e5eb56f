# tests/test_employees.py

import pytest

from Dojodesk.core.errors import Conflict, NotFound
from Dojodesk.data.repos import employees_repo, groups_repo


def test_default_login_is_seeded(db):
    admin = employees_repo.authenticate("admin", "s3cret")
    assert admin is not None
    assert admin.login == "admin"
    assert not hasattr(admin, "password")


def test_authenticate_rejects_bad_credentials(db):
    assert employees_repo.authenticate("admin", "wrong") is None
    assert employees_repo.authenticate("nobody", "s3cret") is None


def test_create_and_update_employee(db):
    e = employees_repo.create_employee("Sensei Sato", 1980, "+7 900", "sato", "kata")
    assert employees_repo.authenticate("sato", "kata").id == e.id
    employees_repo.update_employee(e.id, password="kumite", phone="+7 901")
    assert employees_repo.authenticate("sato", "kata") is None
    assert employees_repo.authenticate("sato", "kumite").phone == "+7 901"


def test_login_is_unique(db):
    employees_repo.create_employee("One", login="coach", password="x")
    with pytest.raises(Conflict):
        employees_repo.create_employee("Two", login="coach", password="y")


def test_trainer_cannot_be_deleted(db):
    coach = employees_repo.create_employee("Coach")
    groups_repo.create_group("Kids", trainer_id=coach.id)
    with pytest.raises(Conflict):
        employees_repo.delete_employee(coach.id)
    assert employees_repo.get_employee_by_id(coach.id).full_name == "Coach"


def test_delete_and_missing(db):
    e = employees_repo.create_employee("Temp")
    assert employees_repo.delete_employee(e.id) is True
    with pytest.raises(NotFound):
        employees_repo.get_employee_by_id(e.id)
    with pytest.raises(NotFound):
        employees_repo.update_employee(e.id, phone="1")
