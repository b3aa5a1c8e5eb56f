import logging
import sqlite3

from Dojodesk.core.errors import Conflict, NotFound
from Dojodesk.core.models import Employee
from Dojodesk.core.utils import hash_password, require_text
from Dojodesk.data.db import read, tx, update_columns

logger = logging.getLogger(__name__)

_EDITABLE = {"full_name", "birth_year", "phone", "login", "password"}


def fetch_employees():
	with read() as conn:
		rows = conn.execute("SELECT * FROM employees ORDER BY full_name COLLATE NOCASE").fetchall()
		return [Employee.from_row(r) for r in rows]


def get_employee_by_id(employee_id):
	with read() as conn:
		row = conn.execute("SELECT * FROM employees WHERE id = ?", (employee_id,)).fetchone()
	if row is None:
		raise NotFound(f"employee {employee_id} not found")
	return Employee.from_row(row)


def create_employee(full_name, birth_year=None, phone=None, login=None, password=None):
	full_name = require_text("full_name", full_name)
	hashed = hash_password(password) if password else None
	try:
		with tx() as conn:
			cur = conn.execute(
				"""
				INSERT INTO employees (full_name, birth_year, phone, login, password)
				VALUES (?, ?, ?, ?, ?)
				""",
				(full_name, birth_year, phone, login or None, hashed),
			)
			employee_id = cur.lastrowid
	except sqlite3.IntegrityError as e:
		raise Conflict(f"login {login!r} is already taken") from e
	return get_employee_by_id(employee_id)


def update_employee(employee_id, **fields):
	if "full_name" in fields:
		fields["full_name"] = require_text("full_name", fields["full_name"])
	if fields.get("password"):
		fields["password"] = hash_password(fields["password"])
	try:
		with tx() as conn:
			exists = conn.execute("SELECT 1 FROM employees WHERE id = ?", (employee_id,)).fetchone()
			if not exists:
				raise NotFound(f"employee {employee_id} not found")
			update_columns(conn, "employees", employee_id, fields, _EDITABLE)
	except sqlite3.IntegrityError as e:
		raise Conflict(f"login {fields.get('login')!r} is already taken") from e
	return get_employee_by_id(employee_id)


def delete_employee(employee_id):
	try:
		with tx() as conn:
			cur = conn.execute("DELETE FROM employees WHERE id = ?", (employee_id,))
			return cur.rowcount > 0
	except sqlite3.IntegrityError as e:
		logger.warning("⛔️ Employee %s still trains a group; not deleted.", employee_id)
		raise Conflict(f"employee {employee_id} is the trainer of a group") from e


def authenticate(login, password):
	"""Return the Employee for a valid login/password pair, else None."""
	with read() as conn:
		row = conn.execute(
			"SELECT * FROM employees WHERE login = ? AND password = ?",
			(login, hash_password(password or "")),
		).fetchone()
		if row is None:
			known = conn.execute("SELECT 1 FROM employees WHERE login = ?", (login,)).fetchone()
			if known:
				logger.info("Login %s exists but password does not match", login)
			else:
				logger.info("Login %s not found", login)
			return None
	return Employee.from_row(row)
