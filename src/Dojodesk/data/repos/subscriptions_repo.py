import logging
from collections import defaultdict
from datetime import timedelta

from Dojodesk.core import clock
from Dojodesk.core.errors import NotFound, PlanInUse, PlanNotFound, ValidationError
from Dojodesk.core.models import ClientSubscription, Plan
from Dojodesk.core.subscription_rules import (
	resolve_status, select_active_assignment, select_current_assignment,
)
from Dojodesk.core.utils import parse_date, require_non_negative, require_text
from Dojodesk.data.db import read, tx, update_columns
from Dojodesk.data.repos.settings_repo import get_setting_int

logger = logging.getLogger(__name__)

_PLAN_EDITABLE = {"name", "price", "duration_days", "visit_limit", "is_active"}

_ASSIGNMENT_SELECT = """
	SELECT cs.*, s.name AS subscription_name, s.price AS subscription_price
	FROM client_subscriptions cs
	LEFT JOIN subscriptions s ON s.id = cs.subscription_id
"""

_ASSIGNMENT_WITH_CLIENT_SELECT = """
	SELECT cs.*, s.name AS subscription_name, s.price AS subscription_price,
	       c.full_name AS client_name
	FROM client_subscriptions cs
	LEFT JOIN subscriptions s ON s.id = cs.subscription_id
	JOIN clients c ON c.id = cs.client_id
"""


def _validate_plan_fields(fields):
	out = dict(fields)
	if "name" in out:
		out["name"] = require_text("name", out["name"])
	if "price" in out:
		try:
			price = float(out["price"])
		except (TypeError, ValueError):
			raise ValidationError("price must be a number") from None
		if price < 0:
			raise ValidationError("price must be non-negative")
		out["price"] = price
	if "duration_days" in out:
		days = require_non_negative("duration_days", out["duration_days"])
		if days == 0:
			raise ValidationError("duration_days must be positive")
		out["duration_days"] = days
	if "visit_limit" in out:
		out["visit_limit"] = require_non_negative("visit_limit", out["visit_limit"])
	if "is_active" in out:
		out["is_active"] = 1 if out["is_active"] else 0
	return out


# --- plans ------------------------------------------------------------------

def fetch_plans():
	with read() as conn:
		rows = conn.execute("SELECT * FROM subscriptions ORDER BY name COLLATE NOCASE").fetchall()
		return [Plan.from_row(r) for r in rows]


def fetch_active_plans():
	with read() as conn:
		rows = conn.execute(
			"SELECT * FROM subscriptions WHERE is_active = 1 ORDER BY name COLLATE NOCASE"
		).fetchall()
		return [Plan.from_row(r) for r in rows]


def _get_plan(conn, plan_id):
	row = conn.execute("SELECT * FROM subscriptions WHERE id = ?", (plan_id,)).fetchone()
	if row is None:
		raise PlanNotFound(f"subscription plan {plan_id} not found")
	return Plan.from_row(row)


def get_plan_by_id(plan_id):
	with read() as conn:
		return _get_plan(conn, plan_id)


def create_plan(name, price, duration_days, visit_limit=0):
	values = _validate_plan_fields(
		{"name": name, "price": price, "duration_days": duration_days, "visit_limit": visit_limit or 0}
	)
	with tx() as conn:
		cur = conn.execute(
			"""
			INSERT INTO subscriptions (name, price, duration_days, visit_limit)
			VALUES (?, ?, ?, ?)
			""",
			(values["name"], values["price"], values["duration_days"], values["visit_limit"]),
		)
		return _get_plan(conn, cur.lastrowid)


def update_plan(plan_id, **fields):
	"""Edit a plan. Existing assignments keep their frozen end_date and visits_total."""
	values = _validate_plan_fields(fields)
	with tx() as conn:
		_get_plan(conn, plan_id)
		update_columns(conn, "subscriptions", plan_id, values, _PLAN_EDITABLE)
		return _get_plan(conn, plan_id)


def delete_plan(plan_id, today=None):
	"""
	Refuse while any assignment of this plan ends today or later. Only the
	end date is checked: unpaid or exhausted assignments still block.
	"""
	today = clock.resolve(today)
	with tx() as conn:
		_get_plan(conn, plan_id)
		in_use = conn.execute(
			"""
			SELECT COUNT(*) FROM client_subscriptions
			WHERE subscription_id = ? AND end_date >= ?
			""",
			(plan_id, today.isoformat()),
		).fetchone()[0]
		if in_use:
			logger.warning("⛔️ Plan %s has %s assignment(s) ending on/after %s; not deleted.", plan_id, in_use, today)
			raise PlanInUse(f"subscription plan {plan_id} has {in_use} active client subscription(s)")
		cur = conn.execute("DELETE FROM subscriptions WHERE id = ?", (plan_id,))
		return cur.rowcount > 0


# --- client assignments -----------------------------------------------------

def _get_assignment(conn, assignment_id):
	row = conn.execute(_ASSIGNMENT_SELECT + " WHERE cs.id = ?", (assignment_id,)).fetchone()
	if row is None:
		raise NotFound(f"client subscription {assignment_id} not found")
	return ClientSubscription.from_row(row)


def get_assignment_by_id(assignment_id):
	with read() as conn:
		return _get_assignment(conn, assignment_id)


def load_client_assignments(conn, client_id):
	rows = conn.execute(
		_ASSIGNMENT_SELECT + " WHERE cs.client_id = ? ORDER BY cs.start_date DESC, cs.id DESC",
		(client_id,),
	).fetchall()
	return [ClientSubscription.from_row(r) for r in rows]


def load_assignments_by_client(conn):
	"""Every assignment in the ledger, grouped by client id."""
	grouped = defaultdict(list)
	for row in conn.execute(_ASSIGNMENT_SELECT):
		cs = ClientSubscription.from_row(row)
		grouped[cs.client_id].append(cs)
	return grouped


def fetch_client_subscriptions(client_id):
	with read() as conn:
		return load_client_assignments(conn, client_id)


def get_current_for_client(client_id, today=None):
	today = clock.resolve(today)
	return select_current_assignment(fetch_client_subscriptions(client_id), today)


def get_active_for_client(client_id, today=None):
	today = clock.resolve(today)
	return select_active_assignment(fetch_client_subscriptions(client_id), today)


def get_client_status(client_id, today=None):
	"""Return (status, current assignment or None)."""
	today = clock.resolve(today)
	current = get_current_for_client(client_id, today)
	return resolve_status(current, today), current


def assign_subscription(client_id, plan_id, start_date, is_paid=False):
	"""Append a purchase to the client's ledger; never merges with earlier ones."""
	start = parse_date(start_date)
	with tx() as conn:
		plan = _get_plan(conn, plan_id)
		if not conn.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,)).fetchone():
			raise NotFound(f"client {client_id} not found")
		end = start + timedelta(days=plan.duration_days)
		payment_date = start.isoformat() if is_paid else None
		cur = conn.execute(
			"""
			INSERT INTO client_subscriptions
				(client_id, subscription_id, start_date, end_date, visits_used, visits_total, is_paid, payment_date)
			VALUES (?, ?, ?, ?, 0, ?, ?, ?)
			""",
			(client_id, plan.id, start.isoformat(), end.isoformat(),
			 plan.visit_limit, 1 if is_paid else 0, payment_date),
		)
		if is_paid:
			_stamp_client_payment(conn, client_id, payment_date)
		assignment = _get_assignment(conn, cur.lastrowid)
	logger.info("Assigned plan %s to client %s (%s .. %s)", plan.id, client_id, start, end)
	return assignment


def _stamp_client_payment(conn, client_id, payment_date):
	conn.execute(
		"""
		UPDATE clients
		SET last_payment_date = ?, updated_at = datetime('now','localtime')
		WHERE id = ? AND (last_payment_date IS NULL OR last_payment_date < ?)
		""",
		(payment_date, client_id, payment_date),
	)


def mark_paid(assignment_id, payment_date=None, today=None):
	"""Idempotent: an already paid assignment is returned unchanged."""
	paid_on = parse_date(payment_date) if payment_date else clock.resolve(today)
	with tx() as conn:
		assignment = _get_assignment(conn, assignment_id)
		if assignment.is_paid:
			return assignment
		conn.execute(
			"""
			UPDATE client_subscriptions
			SET is_paid = 1, payment_date = ?, updated_at = datetime('now','localtime')
			WHERE id = ? AND is_paid = 0
			""",
			(paid_on.isoformat(), assignment_id),
		)
		_stamp_client_payment(conn, assignment.client_id, paid_on.isoformat())
		return _get_assignment(conn, assignment_id)


def consume_visit(conn, assignment_id):
	"""Conditional increment on an open connection; True if a visit was consumed."""
	cur = conn.execute(
		"""
		UPDATE client_subscriptions
		SET visits_used = visits_used + 1, updated_at = datetime('now','localtime')
		WHERE id = ? AND (visits_total = 0 OR visits_used < visits_total)
		""",
		(assignment_id,),
	)
	return cur.rowcount > 0


def increment_visit(assignment_id):
	with tx() as conn:
		return consume_visit(conn, assignment_id)


def remove_client_subscription(assignment_id):
	with tx() as conn:
		cur = conn.execute("DELETE FROM client_subscriptions WHERE id = ?", (assignment_id,))
		return cur.rowcount > 0


def get_unpaid(today=None):
	today = clock.resolve(today)
	with read() as conn:
		rows = conn.execute(
			_ASSIGNMENT_WITH_CLIENT_SELECT + """
			WHERE cs.is_paid = 0 AND cs.end_date >= ?
			ORDER BY cs.start_date ASC, cs.id ASC
			""",
			(today.isoformat(),),
		).fetchall()
		return [ClientSubscription.from_row(r) for r in rows]


def get_expiring_soon(days_ahead=None, today=None):
	"""Assignments ending within [today, today + days_ahead] with visits left, paid or not."""
	today = clock.resolve(today)
	if days_ahead is None:
		days_ahead = get_setting_int("expiring_days_ahead", 7)
	days_ahead = require_non_negative("days_ahead", days_ahead)
	horizon = today + timedelta(days=days_ahead)
	with read() as conn:
		rows = conn.execute(
			_ASSIGNMENT_WITH_CLIENT_SELECT + """
			WHERE cs.end_date BETWEEN ? AND ?
			  AND (cs.visits_total = 0 OR cs.visits_used < cs.visits_total)
			ORDER BY cs.end_date ASC, cs.id ASC
			""",
			(today.isoformat(), horizon.isoformat()),
		).fetchall()
		return [ClientSubscription.from_row(r) for r in rows]
