import logging
from Dojodesk.data.db import read, tx

logger = logging.getLogger(__name__)


def set_setting(key, value):
	"""Insert or update a setting key/value pair."""
	with tx() as conn:
		conn.execute(
			"REPLACE INTO settings (key, value) VALUES (?, ?)",
			(key, str(value))
		)


def get_setting(key, default=None):
	"""Retrieve a setting value by key, or return default."""
	with read() as conn:
		row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
		return row[0] if row else default


def get_setting_int(key: str, default: int) -> int:
	raw = get_setting(key, None)
	if raw is None:
		return default
	try:
		return int(str(raw).strip())
	except ValueError:
		logger.warning("Setting %s has non-integer value %r; using %s", key, raw, default)
		return default
