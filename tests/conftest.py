# tests/conftest.py

from datetime import date

import pytest

from Dojodesk.core import clock
from Dojodesk.data.db import get_connection
from Dojodesk.data.migrations import run_migrations
from Dojodesk.data.repos import clients_repo, groups_repo, subscriptions_repo

TODAY = date(2025, 3, 10)  # a Monday


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "dojodesk.db"
    monkeypatch.setenv("DOJODESK_DB_PATH", str(path))
    monkeypatch.setenv("DOJODESK_ADMIN_LOGIN", "admin")
    monkeypatch.setenv("DOJODESK_ADMIN_PASSWORD", "s3cret")
    return path


@pytest.fixture
def db(db_path):
    """A freshly migrated database; 'today' is pinned to TODAY."""
    conn = get_connection()
    try:
        run_migrations(conn)
    finally:
        conn.close()
    clock.set_today_provider(lambda: TODAY)
    yield db_path
    clock.set_today_provider(None)


@pytest.fixture
def client(db):
    return clients_repo.create_client("Ivan Petrov", phone="+7 900 000-00-01")


@pytest.fixture
def plan(db):
    # 8 visits over 30 days
    return subscriptions_repo.create_plan("Monthly 8", 3000, 30, 8)


@pytest.fixture
def unlimited_plan(db):
    return subscriptions_repo.create_plan("Unlimited", 5000, 30, 0)


@pytest.fixture
def group(db):
    # Monday and Wednesday evenings
    return groups_repo.create_group(
        "Juniors",
        start_date="2025-01-01",
        schedule=[
            {"day_of_week": 0, "start_time": "18:00", "end_time": "19:00"},
            {"day_of_week": 2, "start_time": "18:00", "end_time": "19:00"},
        ],
    )
