import os
import sys
import logging
from dotenv import load_dotenv

from Dojodesk.paths import APP_DATA_DIR, LOG_FILENAME, get_db_path, resource_path
from Dojodesk.data.db import get_connection
from Dojodesk.data.migrations import run_migrations

logger = logging.getLogger(__name__)


def load_environment():
    # a bundled .env wins; otherwise search from the working directory
    env_path = resource_path(".env")
    if env_path.exists():
        load_dotenv(env_path)
    else:
        load_dotenv()


def ensure_logging(level=None):
    root = logging.getLogger()
    if root.handlers:
        return  # respect existing setup
    level = level or (os.getenv("DOJODESK_LOG_LEVEL") or "INFO").upper()
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(level)

    try:
        APP_DATA_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(APP_DATA_DIR / LOG_FILENAME, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        print(f"⚠️ Could not open log file in {APP_DATA_DIR}: {e}", file=sys.stderr)

    # console output only for non-frozen runs
    if not getattr(sys, "frozen", False) and sys.stdout is not None:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)


def initialize_database():
    """Load .env, set up logging and migrate the database. Returns applied versions."""
    load_environment()
    ensure_logging()
    db_path = get_db_path()
    conn = get_connection()
    try:
        applied = run_migrations(conn)
    finally:
        conn.close()
    if applied:
        logger.info("✅ Database ready at %s (applied %s)", db_path, applied)
    else:
        logger.info("Database at %s is up to date", db_path)
    return applied
