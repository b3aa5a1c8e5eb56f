import logging
import sqlite3

from Dojodesk.core import clock
from Dojodesk.core.errors import Conflict, NotFound, ValidationError
from Dojodesk.core.models import Group, GroupMember, ScheduleSlot
from Dojodesk.core.utils import require_text, to_iso, validate_day_of_week, validate_time
from Dojodesk.data.db import read, tx, update_columns

logger = logging.getLogger(__name__)

_GROUP_EDITABLE = {"name", "start_date", "trainer_id"}

_GROUP_SELECT = """
	SELECT g.*,
	       e.full_name AS trainer_name,
	       (SELECT COUNT(*) FROM group_members WHERE group_id = g.id) AS member_count
	FROM groups g
	LEFT JOIN employees e ON g.trainer_id = e.id
"""


def _clean_slot(day_of_week, start_time, end_time):
	start = validate_time(start_time)
	end = validate_time(end_time)
	if end <= start:
		raise ValidationError(f"end_time {end} must be after start_time {start}")
	return validate_day_of_week(day_of_week), start, end


def _clean_group_fields(fields):
	out = {k: v for k, v in fields.items() if k in _GROUP_EDITABLE}
	if "name" in out:
		out["name"] = require_text("name", out["name"])
	if out.get("start_date"):
		out["start_date"] = to_iso(out["start_date"])
	return out


def fetch_schedule(conn, group_id):
	rows = conn.execute(
		"SELECT * FROM group_schedule WHERE group_id = ? ORDER BY day_of_week, start_time",
		(group_id,),
	).fetchall()
	return [ScheduleSlot.from_row(r) for r in rows]


def _get_group(conn, group_id):
	row = conn.execute(_GROUP_SELECT + " WHERE g.id = ?", (group_id,)).fetchone()
	if row is None:
		raise NotFound(f"group {group_id} not found")
	members = [
		GroupMember.from_row(r)
		for r in conn.execute(
			"""
			SELECT gm.*, c.full_name, c.phone
			FROM group_members gm
			JOIN clients c ON gm.client_id = c.id
			WHERE gm.group_id = ?
			ORDER BY c.full_name COLLATE NOCASE
			""",
			(group_id,),
		)
	]
	return Group.from_row(row, schedule=fetch_schedule(conn, group_id), members=members)


def get_group_by_id(group_id):
	with read() as conn:
		return _get_group(conn, group_id)


def fetch_groups():
	with read() as conn:
		rows = conn.execute(_GROUP_SELECT + " ORDER BY g.name COLLATE NOCASE").fetchall()
		return [Group.from_row(r) for r in rows]


def fetch_groups_by_trainer(trainer_id):
	with read() as conn:
		rows = conn.execute(
			_GROUP_SELECT + " WHERE g.trainer_id = ? ORDER BY g.name COLLATE NOCASE", (trainer_id,)
		).fetchall()
		return [Group.from_row(r) for r in rows]


def create_group(name, start_date=None, trainer_id=None, schedule=None):
	"""schedule: iterable of {"day_of_week", "start_time", "end_time"}"""
	values = _clean_group_fields({"name": name, "start_date": start_date, "trainer_id": trainer_id})
	slots = [_clean_slot(s["day_of_week"], s["start_time"], s["end_time"]) for s in schedule or ()]
	try:
		with tx() as conn:
			cur = conn.execute(
				"INSERT INTO groups (name, start_date, trainer_id) VALUES (?, ?, ?)",
				(values["name"], values.get("start_date"), values.get("trainer_id")),
			)
			group_id = cur.lastrowid
			conn.executemany(
				"INSERT INTO group_schedule (group_id, day_of_week, start_time, end_time) VALUES (?, ?, ?, ?)",
				[(group_id, dow, start, end) for dow, start, end in slots],
			)
			return _get_group(conn, group_id)
	except sqlite3.IntegrityError as e:
		raise NotFound(f"trainer {trainer_id} not found") from e


def update_group(group_id, **fields):
	values = _clean_group_fields(fields)
	try:
		with tx() as conn:
			_get_group(conn, group_id)
			update_columns(conn, "groups", group_id, values, _GROUP_EDITABLE)
			return _get_group(conn, group_id)
	except sqlite3.IntegrityError as e:
		raise NotFound(f"trainer {fields.get('trainer_id')} not found") from e


def delete_group(group_id):
	"""Schedule, members, lessons and their attendance are removed by FK cascade."""
	with tx() as conn:
		cur = conn.execute("DELETE FROM groups WHERE id = ?", (group_id,))
		return cur.rowcount > 0


def add_schedule(group_id, day_of_week, start_time, end_time):
	dow, start, end = _clean_slot(day_of_week, start_time, end_time)
	with tx() as conn:
		if not conn.execute("SELECT 1 FROM groups WHERE id = ?", (group_id,)).fetchone():
			raise NotFound(f"group {group_id} not found")
		cur = conn.execute(
			"INSERT INTO group_schedule (group_id, day_of_week, start_time, end_time) VALUES (?, ?, ?, ?)",
			(group_id, dow, start, end),
		)
		row = conn.execute("SELECT * FROM group_schedule WHERE id = ?", (cur.lastrowid,)).fetchone()
		return ScheduleSlot.from_row(row)


def update_schedule(schedule_id, day_of_week=None, start_time=None, end_time=None):
	with tx() as conn:
		row = conn.execute("SELECT * FROM group_schedule WHERE id = ?", (schedule_id,)).fetchone()
		if row is None:
			raise NotFound(f"schedule slot {schedule_id} not found")
		dow, start, end = _clean_slot(
			row["day_of_week"] if day_of_week is None else day_of_week,
			start_time or row["start_time"],
			end_time or row["end_time"],
		)
		update_columns(
			conn, "group_schedule", schedule_id,
			{"day_of_week": dow, "start_time": start, "end_time": end},
			{"day_of_week", "start_time", "end_time"}, touch=False,
		)
		row = conn.execute("SELECT * FROM group_schedule WHERE id = ?", (schedule_id,)).fetchone()
		return ScheduleSlot.from_row(row)


def remove_schedule(schedule_id):
	with tx() as conn:
		cur = conn.execute("DELETE FROM group_schedule WHERE id = ?", (schedule_id,))
		return cur.rowcount > 0


def get_schedule_for_day(day_of_week):
	dow = validate_day_of_week(day_of_week)
	with read() as conn:
		rows = conn.execute(
			"""
			SELECT gs.*, g.name AS group_name, e.full_name AS trainer_name
			FROM group_schedule gs
			JOIN groups g ON gs.group_id = g.id
			LEFT JOIN employees e ON g.trainer_id = e.id
			WHERE gs.day_of_week = ?
			ORDER BY gs.start_time
			""",
			(dow,),
		).fetchall()
		return [dict(r) for r in rows]


def add_member(group_id, client_id, joined_at=None):
	"""
	Add a client to a group and back-fill NULL attendance for the group's
	lessons dated on/after joined_at (default: today).
	"""
	joined = clock.resolve(joined_at).isoformat()
	with tx() as conn:
		if not conn.execute("SELECT 1 FROM groups WHERE id = ?", (group_id,)).fetchone():
			raise NotFound(f"group {group_id} not found")
		if not conn.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,)).fetchone():
			raise NotFound(f"client {client_id} not found")
		try:
			cur = conn.execute(
				"INSERT INTO group_members (group_id, client_id, joined_at) VALUES (?, ?, ?)",
				(group_id, client_id, joined),
			)
		except sqlite3.IntegrityError as e:
			raise Conflict(f"client {client_id} is already a member of group {group_id}") from e

		backfilled = conn.execute(
			"""
			INSERT OR IGNORE INTO attendance (lesson_id, client_id, status)
			SELECT id, ?, NULL FROM lessons
			WHERE group_id = ? AND lesson_date >= ?
			""",
			(client_id, group_id, joined),
		).rowcount
		row = conn.execute("SELECT * FROM group_members WHERE id = ?", (cur.lastrowid,)).fetchone()
	logger.info("Client %s joined group %s on %s (%s lesson placeholder(s))", client_id, group_id, joined, backfilled)
	return GroupMember.from_row(row)


def remove_member(group_id, client_id):
	"""Attendance history of the former member is kept."""
	with tx() as conn:
		cur = conn.execute(
			"DELETE FROM group_members WHERE group_id = ? AND client_id = ?", (group_id, client_id)
		)
		return cur.rowcount > 0
