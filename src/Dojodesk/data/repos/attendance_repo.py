import logging

from Dojodesk.core import clock
from Dojodesk.core.errors import (
	NotFound, NoActiveSubscription, SubscriptionUnpaid, ValidationError, VisitLimitReached,
)
from Dojodesk.core.models import ATTENDANCE_STATUSES, PRESENT, Attendance
from Dojodesk.core.subscription_rules import select_active_assignment
from Dojodesk.core.utils import parse_date
from Dojodesk.data.db import read, tx
from Dojodesk.data.repos.lessons_repo import get_lessons_by_group_and_month
from Dojodesk.data.repos.subscriptions_repo import consume_visit, load_client_assignments

logger = logging.getLogger(__name__)


def get_for_lesson(lesson_id):
	"""Attendance rows of a lesson, limited to clients still in the group."""
	with read() as conn:
		rows = conn.execute(
			"""
			SELECT a.*, c.full_name AS client_name, c.phone AS client_phone
			FROM attendance a
			JOIN clients c ON a.client_id = c.id
			JOIN lessons l ON a.lesson_id = l.id
			JOIN group_members gm ON l.group_id = gm.group_id AND a.client_id = gm.client_id
			WHERE a.lesson_id = ?
			ORDER BY c.full_name COLLATE NOCASE
			""",
			(lesson_id,),
		).fetchall()
		return [Attendance.from_row(r) for r in rows]


def _fetch_row(conn, lesson_id, client_id):
	return conn.execute(
		"SELECT * FROM attendance WHERE lesson_id = ? AND client_id = ?", (lesson_id, client_id)
	).fetchone()


def _consume_for_presence(conn, client_id, today):
	assignment = select_active_assignment(load_client_assignments(conn, client_id), today)
	if assignment is None:
		logger.warning("⛔️ Client %s has no active subscription on %s", client_id, today)
		raise NoActiveSubscription(f"client {client_id} has no active subscription")
	if not assignment.is_paid:
		logger.warning("⛔️ Subscription %s of client %s is unpaid", assignment.id, client_id)
		raise SubscriptionUnpaid(f"subscription {assignment.id} of client {client_id} is not paid")
	if not consume_visit(conn, assignment.id):
		logger.warning("⛔️ Subscription %s of client %s has no visits left", assignment.id, client_id)
		raise VisitLimitReached(f"subscription {assignment.id} has no visits left")
	return assignment


def set_status(lesson_id, client_id, status, today=None):
	"""
	Upsert the attendance mark of a client for a lesson.

	Entering 'present' consumes one visit of the client's active
	subscription in the same transaction; if no paid subscription with
	visits left exists, nothing is written. Leaving 'present' does not
	give the visit back.
	"""
	if status not in ATTENDANCE_STATUSES:
		raise ValidationError(f"invalid attendance status: {status!r}")
	today = clock.resolve(today)

	with tx() as conn:
		if not conn.execute("SELECT 1 FROM lessons WHERE id = ?", (lesson_id,)).fetchone():
			raise NotFound(f"lesson {lesson_id} not found")
		if not conn.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,)).fetchone():
			raise NotFound(f"client {client_id} not found")

		previous = _fetch_row(conn, lesson_id, client_id)
		previous_status = previous["status"] if previous else None
		if status == PRESENT and previous_status != PRESENT:
			_consume_for_presence(conn, client_id, today)

		conn.execute(
			"""
			INSERT INTO attendance (lesson_id, client_id, status, updated_at)
			VALUES (?, ?, ?, datetime('now','localtime'))
			ON CONFLICT(lesson_id, client_id) DO UPDATE SET
				status = excluded.status,
				updated_at = excluded.updated_at
			""",
			(lesson_id, client_id, status),
		)
		return Attendance.from_row(_fetch_row(conn, lesson_id, client_id))


def get_history_for_client(client_id, start_date=None, end_date=None):
	query = """
		SELECT a.*, l.lesson_date, l.start_time, l.end_time, g.name AS group_name
		FROM attendance a
		JOIN lessons l ON a.lesson_id = l.id
		JOIN groups g ON l.group_id = g.id
		WHERE a.client_id = ?
	"""
	params = [client_id]
	if start_date:
		query += " AND l.lesson_date >= ?"
		params.append(parse_date(start_date).isoformat())
	if end_date:
		query += " AND l.lesson_date <= ?"
		params.append(parse_date(end_date).isoformat())
	query += " ORDER BY l.lesson_date DESC, l.start_time DESC"

	with read() as conn:
		return [Attendance.from_row(r) for r in conn.execute(query, params).fetchall()]


def get_stats_by_group(group_id):
	with read() as conn:
		row = conn.execute(
			"""
			SELECT
				COALESCE(SUM(CASE WHEN a.status = 'present' THEN 1 ELSE 0 END), 0) AS present,
				COALESCE(SUM(CASE WHEN a.status = 'absent' THEN 1 ELSE 0 END), 0) AS absent,
				COALESCE(SUM(CASE WHEN a.status = 'sick' THEN 1 ELSE 0 END), 0) AS sick,
				COUNT(a.id) AS total
			FROM attendance a
			JOIN lessons l ON a.lesson_id = l.id
			WHERE l.group_id = ?
			""",
			(group_id,),
		).fetchone()
		return dict(row)


def get_group_attendance_matrix(group_id, year, month):
	"""
	Attendance grid of a group for one month:
	{"lessons": [Lesson], "members": [dict], "attendance": {lesson_id: {client_id: status}}}
	"""
	lessons = get_lessons_by_group_and_month(group_id, year, month)
	with read() as conn:
		members = [
			dict(r)
			for r in conn.execute(
				"""
				SELECT gm.client_id, c.full_name AS client_name, c.phone AS client_phone
				FROM group_members gm
				JOIN clients c ON c.id = gm.client_id
				WHERE gm.group_id = ?
				ORDER BY c.full_name COLLATE NOCASE
				""",
				(group_id,),
			)
		]
		attendance = {}
		if lessons:
			placeholders = ",".join("?" for _ in lessons)
			rows = conn.execute(
				f"SELECT lesson_id, client_id, status FROM attendance WHERE lesson_id IN ({placeholders})",
				[l.id for l in lessons],
			).fetchall()
			for r in rows:
				attendance.setdefault(r["lesson_id"], {})[r["client_id"]] = r["status"]
	return {"lessons": lessons, "members": members, "attendance": attendance}
