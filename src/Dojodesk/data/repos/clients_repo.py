import logging

from Dojodesk.core import clock
from Dojodesk.core.errors import DuplicateClient, NotFound, ValidationError
from Dojodesk.core.models import Client, ClientParent
from Dojodesk.core.subscription_rules import (
	is_debtor_status, resolve_status, select_current_assignment,
)
from Dojodesk.core.utils import require_text, to_iso
from Dojodesk.data.db import read, tx, update_columns
from Dojodesk.data.repos.subscriptions_repo import (
	load_assignments_by_client, load_client_assignments,
)

logger = logging.getLogger(__name__)

CLIENT_FIELDS = (
	"full_name", "birth_date", "birth_year", "phone", "last_payment_date",
	"doc_type", "doc_series", "doc_number", "doc_issued_by", "doc_issued_date",
	"home_address", "workplace",
)
DOC_TYPES = {"passport", "certificate"}
_DATE_FIELDS = ("birth_date", "last_payment_date", "doc_issued_date")


def _clean_client_fields(fields):
	out = {k: v for k, v in fields.items() if k in CLIENT_FIELDS}
	if "full_name" in out:
		out["full_name"] = require_text("full_name", out["full_name"])
	for key in _DATE_FIELDS:
		if out.get(key):
			out[key] = to_iso(out[key])
	if out.get("doc_type") and out["doc_type"] not in DOC_TYPES:
		raise ValidationError(f"doc_type must be one of {sorted(DOC_TYPES)}")
	return out


def _ensure_not_duplicate(conn, full_name, birth_date, exclude_id=None):
	if not birth_date:
		return
	query = """
		SELECT id FROM clients
		WHERE full_name = ? COLLATE NOCASE AND birth_date = ?
	"""
	params = [full_name, birth_date]
	if exclude_id is not None:
		query += " AND id != ?"
		params.append(exclude_id)
	row = conn.execute(query, params).fetchone()
	if row:
		raise DuplicateClient(f"client {full_name!r} born {birth_date} already exists (id {row[0]})")


def _with_subscription(client, assignments, today):
	current = select_current_assignment(assignments, today)
	client.current_subscription = current
	client.subscription_status = resolve_status(current, today)
	return client


def _get_client(conn, client_id, today):
	row = conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
	if row is None:
		raise NotFound(f"client {client_id} not found")
	parents = [
		ClientParent.from_row(r)
		for r in conn.execute("SELECT * FROM clients_parents WHERE client_id = ? ORDER BY id", (client_id,))
	]
	client = Client.from_row(row, parents=parents)
	return _with_subscription(client, load_client_assignments(conn, client_id), today)


def get_client_by_id(client_id, today=None):
	today = clock.resolve(today)
	with read() as conn:
		return _get_client(conn, client_id, today)


def create_client(full_name, parents=None, **fields):
	"""
	Register a client with optional guardian contacts in one transaction.
	parents: iterable of {"full_name": ..., "phone": ...}
	"""
	values = _clean_client_fields(dict(fields, full_name=full_name))
	cols = list(values)
	with tx() as conn:
		_ensure_not_duplicate(conn, values["full_name"], values.get("birth_date"))
		cur = conn.execute(
			f"INSERT INTO clients ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})",
			[values[c] for c in cols],
		)
		client_id = cur.lastrowid
		for parent in parents or ():
			_insert_parent(conn, client_id, parent.get("full_name"), parent.get("phone"))
		return _get_client(conn, client_id, clock.today())


def update_client(client_id, **fields):
	values = _clean_client_fields(fields)
	with tx() as conn:
		current = conn.execute(
			"SELECT full_name, birth_date FROM clients WHERE id = ?", (client_id,)
		).fetchone()
		if current is None:
			raise NotFound(f"client {client_id} not found")
		if "full_name" in values or "birth_date" in values:
			_ensure_not_duplicate(
				conn,
				values.get("full_name", current["full_name"]),
				values.get("birth_date", current["birth_date"]),
				exclude_id=client_id,
			)
		update_columns(conn, "clients", client_id, values, set(CLIENT_FIELDS))
		return _get_client(conn, client_id, clock.today())


def update_payment_date(client_id, payment_date):
	return update_client(client_id, last_payment_date=payment_date)


def delete_client(client_id):
	"""Parents, memberships, attendance and subscriptions go with the client (FK cascade)."""
	with tx() as conn:
		cur = conn.execute("DELETE FROM clients WHERE id = ?", (client_id,))
		return cur.rowcount > 0


def fetch_clients(page=1, limit=20, search=None, today=None):
	"""Return (clients, total) for one page, optionally filtered by name/phone."""
	today = clock.resolve(today)
	page = max(int(page or 1), 1)
	limit = max(int(limit or 20), 1)
	where = "WHERE 1=1"
	params = []
	if search:
		where += " AND (full_name LIKE ? OR phone LIKE ?)"
		pattern = f"%{search.strip()}%"
		params += [pattern, pattern]

	with read() as conn:
		total = conn.execute(f"SELECT COUNT(*) FROM clients {where}", params).fetchone()[0]
		rows = conn.execute(
			f"""
			SELECT * FROM clients
			{where}
			ORDER BY full_name COLLATE NOCASE, id
			LIMIT ? OFFSET ?
			""",
			params + [limit, (page - 1) * limit],
		).fetchall()
		clients = [
			_with_subscription(Client.from_row(r), load_client_assignments(conn, r["id"]), today)
			for r in rows
		]
	return clients, total


def search_clients(query, page=1, limit=20, today=None):
	return fetch_clients(page=page, limit=limit, search=query, today=today)


def get_debtors(today=None):
	"""
	Clients whose current assignment resolves to none, unpaid or expired.
	"""
	today = clock.resolve(today)
	with read() as conn:
		ledger = load_assignments_by_client(conn)
		rows = conn.execute("SELECT * FROM clients ORDER BY full_name COLLATE NOCASE, id").fetchall()
	debtors = []
	for row in rows:
		client = _with_subscription(Client.from_row(row), ledger.get(row["id"], []), today)
		if is_debtor_status(client.subscription_status):
			debtors.append(client)
	return debtors


def _insert_parent(conn, client_id, full_name, phone=None):
	cur = conn.execute(
		"INSERT INTO clients_parents (client_id, full_name, phone) VALUES (?, ?, ?)",
		(client_id, require_text("parent full_name", full_name), phone),
	)
	return cur.lastrowid


def add_parent(client_id, full_name, phone=None):
	with tx() as conn:
		if not conn.execute("SELECT 1 FROM clients WHERE id = ?", (client_id,)).fetchone():
			raise NotFound(f"client {client_id} not found")
		parent_id = _insert_parent(conn, client_id, full_name, phone)
		row = conn.execute("SELECT * FROM clients_parents WHERE id = ?", (parent_id,)).fetchone()
		return ClientParent.from_row(row)


def remove_parent(parent_id):
	with tx() as conn:
		cur = conn.execute("DELETE FROM clients_parents WHERE id = ?", (parent_id,))
		return cur.rowcount > 0
