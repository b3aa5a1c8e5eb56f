# tests/test_migrations.py

import logging

import pytest

from Dojodesk.data.db import get_connection
from Dojodesk.data.migrations import MIGRATIONS, Migration, applied_versions, run_migrations
from Dojodesk.data.repos import settings_repo


@pytest.fixture
def conn(db_path):
    c = get_connection()
    yield c
    c.close()


def columns(conn, table):
    return {row["name"] for row in conn.execute(f"PRAGMA table_info({table})")}


def test_fresh_database_gets_every_version(conn):
    assert run_migrations(conn) == [1, 2, 3, 4, 5]
    assert applied_versions(conn) == {1, 2, 3, 4, 5}
    assert {"login", "password"} <= columns(conn, "employees")
    assert {"birth_date", "doc_type", "workplace"} <= columns(conn, "clients")
    assert settings_repo.get_setting("expiring_days_ahead") == "7"


def test_second_run_is_a_noop(conn):
    run_migrations(conn)
    assert run_migrations(conn) == []
    admins = conn.execute("SELECT COUNT(*) FROM employees WHERE login = 'admin'").fetchone()[0]
    assert admins == 1


def test_partial_ledger_applies_only_missing(conn):
    run_migrations(conn, MIGRATIONS[:2])
    assert "subscriptions" not in {
        r["name"] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    assert run_migrations(conn) == [3, 4, 5]


def test_failed_migration_is_rolled_back_and_not_recorded(conn):
    run_migrations(conn)
    broken = Migration(6, "broken", (
        "ALTER TABLE clients ADD COLUMN belt TEXT;",
        "ALTER TABLE no_such_table ADD COLUMN x TEXT;",
    ), None)
    with pytest.raises(Exception):
        run_migrations(conn, MIGRATIONS + (broken,))
    assert 6 not in applied_versions(conn)
    assert "belt" not in columns(conn, "clients")


def test_no_admin_password_skips_seeding(db_path, monkeypatch, caplog):
    monkeypatch.delenv("DOJODESK_ADMIN_PASSWORD", raising=False)
    c = get_connection()
    try:
        with caplog.at_level(logging.WARNING, logger="Dojodesk.data.migrations"):
            run_migrations(c)
        assert c.execute("SELECT COUNT(*) FROM employees").fetchone()[0] == 0
        assert 2 in applied_versions(c)
    finally:
        c.close()
    assert "DOJODESK_ADMIN_PASSWORD" in caplog.text


def test_custom_admin_login(db_path, monkeypatch):
    monkeypatch.setenv("DOJODESK_ADMIN_LOGIN", "owner")
    c = get_connection()
    try:
        run_migrations(c)
        row = c.execute("SELECT login FROM employees").fetchone()
    finally:
        c.close()
    assert row["login"] == "owner"
