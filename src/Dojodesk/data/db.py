import sqlite3
from contextlib import contextmanager
from Dojodesk.paths import get_db_path


def get_connection():
    # autocommit mode: transactions are opened explicitly by tx()
    conn = sqlite3.connect(get_db_path(), isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute("PRAGMA journal_mode = WAL")
    conn.execute("PRAGMA synchronous = NORMAL")
    return conn


@contextmanager
def tx():
    conn = get_connection()
    try:
        conn.execute("BEGIN IMMEDIATE")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def read():
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


def update_columns(conn, table, row_id, values, allowed, touch=True):
    """UPDATE only the given columns; unknown keys are ignored. Returns rowcount."""
    cols = [k for k in values if k in allowed]
    if not cols:
        return 0
    assignments = [f"{col} = ?" for col in cols]
    if touch:
        assignments.append("updated_at = datetime('now','localtime')")
    params = [values[col] for col in cols] + [row_id]
    cur = conn.execute(
        f"UPDATE {table} SET {', '.join(assignments)} WHERE id = ?", params
    )
    return cur.rowcount
