import logging

from Dojodesk.core import clock
from Dojodesk.core.calendar_logic import month_bounds, planned_lessons
from Dojodesk.core.errors import NotFound, ValidationError
from Dojodesk.core.models import Lesson
from Dojodesk.core.utils import parse_date, validate_time
from Dojodesk.data.db import read, tx
from Dojodesk.data.repos.groups_repo import fetch_schedule

logger = logging.getLogger(__name__)

_LESSON_SELECT = """
	SELECT l.*,
	       g.name AS group_name,
	       e.full_name AS trainer_name,
	       (SELECT COUNT(*) FROM attendance WHERE lesson_id = l.id AND status = 'present') AS attendance_count,
	       (SELECT COUNT(*) FROM group_members WHERE group_id = l.group_id) AS total_members
	FROM lessons l
	JOIN groups g ON l.group_id = g.id
	LEFT JOIN employees e ON g.trainer_id = e.id
"""


def _get_lesson(conn, lesson_id):
	row = conn.execute(_LESSON_SELECT + " WHERE l.id = ?", (lesson_id,)).fetchone()
	if row is None:
		raise NotFound(f"lesson {lesson_id} not found")
	return Lesson.from_row(row)


def get_lesson_by_id(lesson_id):
	with read() as conn:
		return _get_lesson(conn, lesson_id)


def insert_lesson(conn, group_id, lesson_date, start_time, end_time):
	"""Insert a lesson plus one NULL attendance row per current group member."""
	cur = conn.execute(
		"INSERT INTO lessons (group_id, lesson_date, start_time, end_time) VALUES (?, ?, ?, ?)",
		(group_id, lesson_date, start_time, end_time),
	)
	lesson_id = cur.lastrowid
	conn.execute(
		"""
		INSERT OR IGNORE INTO attendance (lesson_id, client_id, status)
		SELECT ?, client_id, NULL FROM group_members WHERE group_id = ?
		""",
		(lesson_id, group_id),
	)
	return lesson_id


def _require_group(conn, group_id):
	if not conn.execute("SELECT 1 FROM groups WHERE id = ?", (group_id,)).fetchone():
		raise NotFound(f"group {group_id} not found")


def create_lesson(group_id, lesson_date, start_time, end_time):
	day = parse_date(lesson_date).isoformat()
	start = validate_time(start_time)
	end = validate_time(end_time)
	if end <= start:
		raise ValidationError(f"end_time {end} must be after start_time {start}")
	with tx() as conn:
		_require_group(conn, group_id)
		lesson_id = insert_lesson(conn, group_id, day, start, end)
		return _get_lesson(conn, lesson_id)


def generate_from_schedule(group_id, start_date, end_date):
	"""
	Create lessons for every scheduled weekday in [start_date, end_date].
	Dates that already have a lesson for the group are skipped; only the
	newly created lessons are returned.
	"""
	start = parse_date(start_date)
	end = parse_date(end_date)
	created_ids = []
	with tx() as conn:
		_require_group(conn, group_id)
		schedule = fetch_schedule(conn, group_id)
		if not schedule:
			return []
		for day, slot in planned_lessons(schedule, start, end):
			existing = conn.execute(
				"SELECT 1 FROM lessons WHERE group_id = ? AND lesson_date = ?",
				(group_id, day.isoformat()),
			).fetchone()
			if existing:
				continue
			created_ids.append(insert_lesson(conn, group_id, day.isoformat(), slot.start_time, slot.end_time))
		lessons = [_get_lesson(conn, lesson_id) for lesson_id in created_ids]
	logger.info("Generated %s lesson(s) for group %s in %s .. %s", len(lessons), group_id, start, end)
	return lessons


def delete_lesson(lesson_id):
	"""Attendance rows of the lesson are removed by FK cascade."""
	with tx() as conn:
		cur = conn.execute("DELETE FROM lessons WHERE id = ?", (lesson_id,))
		return cur.rowcount > 0


def fetch_lessons(group_id=None, start_date=None, end_date=None, page=1, limit=30):
	"""Return (lessons, total) for one page, oldest first."""
	page = max(int(page or 1), 1)
	limit = max(int(limit or 30), 1)
	conditions = []
	params = []
	if group_id:
		conditions.append("l.group_id = ?")
		params.append(group_id)
	if start_date:
		conditions.append("l.lesson_date >= ?")
		params.append(parse_date(start_date).isoformat())
	if end_date:
		conditions.append("l.lesson_date <= ?")
		params.append(parse_date(end_date).isoformat())
	where = (" WHERE " + " AND ".join(conditions)) if conditions else ""

	with read() as conn:
		total = conn.execute(f"SELECT COUNT(*) FROM lessons l{where}", params).fetchone()[0]
		rows = conn.execute(
			_LESSON_SELECT + where + " ORDER BY l.lesson_date ASC, l.start_time ASC LIMIT ? OFFSET ?",
			params + [limit, (page - 1) * limit],
		).fetchall()
		return [Lesson.from_row(r) for r in rows], total


def get_lessons_by_date(lesson_date):
	day = parse_date(lesson_date).isoformat()
	with read() as conn:
		rows = conn.execute(
			_LESSON_SELECT + " WHERE l.lesson_date = ? ORDER BY l.start_time ASC", (day,)
		).fetchall()
		return [Lesson.from_row(r) for r in rows]


def get_today_lessons(today=None):
	return get_lessons_by_date(clock.resolve(today))


def get_lessons_by_group_and_month(group_id, year, month):
	try:
		first, last = month_bounds(int(year), int(month))
	except (TypeError, ValueError):
		raise ValidationError(f"invalid year/month: {year}-{month}") from None
	with read() as conn:
		rows = conn.execute(
			_LESSON_SELECT + """
			WHERE l.group_id = ? AND l.lesson_date BETWEEN ? AND ?
			ORDER BY l.lesson_date ASC, l.start_time ASC
			""",
			(group_id, first.isoformat(), last.isoformat()),
		).fetchall()
		return [Lesson.from_row(r) for r in rows]
