import logging
import os
from collections import namedtuple

from Dojodesk.core.utils import hash_password
from Dojodesk.data import schema

logger = logging.getLogger(__name__)

Migration = namedtuple("Migration", "version name statements fixup")

DEFAULT_ADMIN_LOGIN = "admin"
DEFAULT_ADMIN_NAME = "Administrator"


def seed_default_staff_login(conn):
	"""
	Create (or reset the password of) the default staff login.
	Credentials come from DOJODESK_ADMIN_LOGIN / DOJODESK_ADMIN_PASSWORD.
	"""
	login = (os.getenv("DOJODESK_ADMIN_LOGIN") or DEFAULT_ADMIN_LOGIN).strip()
	password = (os.getenv("DOJODESK_ADMIN_PASSWORD") or "").strip()
	if not password:
		logger.warning("DOJODESK_ADMIN_PASSWORD is not set; default staff login was not created.")
		return

	hashed = hash_password(password)
	row = conn.execute("SELECT id FROM employees WHERE login = ?", (login,)).fetchone()
	if row:
		conn.execute(
			"UPDATE employees SET password = ?, updated_at = datetime('now','localtime') WHERE id = ?",
			(hashed, row["id"]),
		)
		logger.info("Updated password for staff login %s", login)
	else:
		conn.execute(
			"INSERT INTO employees (full_name, login, password) VALUES (?, ?, ?)",
			(DEFAULT_ADMIN_NAME, login, hashed),
		)
		logger.info("Created default staff login %s", login)


MIGRATIONS = (
	Migration(1, "initial_schema", schema.INITIAL_SCHEMA, None),
	Migration(2, "add_employee_login_password", schema.EMPLOYEE_LOGIN, seed_default_staff_login),
	Migration(3, "add_subscriptions", schema.SUBSCRIPTIONS, None),
	Migration(4, "add_client_documents", schema.CLIENT_DOCUMENTS, None),
	Migration(5, "add_settings", schema.SETTINGS, None),
)


def applied_versions(conn):
	return {row["version"] for row in conn.execute("SELECT version FROM migrations")}


def apply_migration(conn, migration):
	"""Run one migration and record it in the ledger, all in one transaction."""
	conn.execute("BEGIN IMMEDIATE")
	try:
		for statement in migration.statements:
			conn.execute(statement)
		if migration.fixup is not None:
			migration.fixup(conn)
		conn.execute(
			"INSERT INTO migrations (version, name) VALUES (?, ?)",
			(migration.version, migration.name),
		)
		conn.commit()
	except Exception:
		conn.rollback()
		logger.exception("Migration %s (%s) failed; rolled back", migration.version, migration.name)
		raise


def run_migrations(conn, migrations=MIGRATIONS):
	"""
	Bring the database up to date. `conn` must be in autocommit mode
	(see data.db.get_connection). Returns the versions applied now.
	"""
	conn.execute(schema.LEDGER_TABLE)
	done = applied_versions(conn)
	applied = []
	for migration in sorted(migrations, key=lambda m: m.version):
		if migration.version in done:
			continue
		logger.info("Applying migration %s: %s", migration.version, migration.name)
		apply_migration(conn, migration)
		applied.append(migration.version)
	if applied:
		logger.info("Database schema is at version %s", applied[-1])
	return applied
