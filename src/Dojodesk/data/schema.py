"""DDL statements, grouped by the migration that introduces them."""

LEDGER_TABLE = """
	CREATE TABLE IF NOT EXISTS migrations (
		version INTEGER PRIMARY KEY,
		name TEXT NOT NULL,
		applied_at TEXT DEFAULT (datetime('now','localtime'))
	);
"""

INITIAL_SCHEMA = (
	# Employees (trainers and staff logins)
	"""
	CREATE TABLE IF NOT EXISTS employees (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		full_name TEXT NOT NULL,
		birth_year INTEGER,
		phone TEXT,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		updated_at TEXT DEFAULT (datetime('now','localtime'))
	);
	""",
	# Clients
	"""
	CREATE TABLE IF NOT EXISTS clients (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		full_name TEXT NOT NULL,
		birth_year INTEGER,
		phone TEXT,
		last_payment_date TEXT,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		updated_at TEXT DEFAULT (datetime('now','localtime'))
	);
	""",
	# Guardian contacts
	"""
	CREATE TABLE IF NOT EXISTS clients_parents (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		client_id INTEGER NOT NULL,
		full_name TEXT NOT NULL,
		phone TEXT,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		updated_at TEXT DEFAULT (datetime('now','localtime')),
		FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE
	);
	""",
	# Groups; a trainer cannot be deleted while assigned
	"""
	CREATE TABLE IF NOT EXISTS groups (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		name TEXT NOT NULL,
		start_date TEXT,
		trainer_id INTEGER,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		updated_at TEXT DEFAULT (datetime('now','localtime')),
		FOREIGN KEY(trainer_id) REFERENCES employees(id)
	);
	""",
	# Weekly schedule, day_of_week 0=Monday .. 6=Sunday
	"""
	CREATE TABLE IF NOT EXISTS group_schedule (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		group_id INTEGER NOT NULL,
		day_of_week INTEGER NOT NULL CHECK (day_of_week >= 0 AND day_of_week <= 6),
		start_time TEXT NOT NULL,
		end_time TEXT NOT NULL,
		FOREIGN KEY(group_id) REFERENCES groups(id) ON DELETE CASCADE
	);
	""",
	"""
	CREATE TABLE IF NOT EXISTS group_members (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		group_id INTEGER NOT NULL,
		client_id INTEGER NOT NULL,
		joined_at TEXT NOT NULL DEFAULT (date('now','localtime')),
		FOREIGN KEY(group_id) REFERENCES groups(id) ON DELETE CASCADE,
		FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE,
		UNIQUE(group_id, client_id)
	);
	""",
	"""
	CREATE TABLE IF NOT EXISTS lessons (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		group_id INTEGER NOT NULL,
		lesson_date TEXT NOT NULL,
		start_time TEXT NOT NULL,
		end_time TEXT NOT NULL,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		FOREIGN KEY(group_id) REFERENCES groups(id) ON DELETE CASCADE
	);
	""",
	# Attendance; NULL status = not marked yet
	"""
	CREATE TABLE IF NOT EXISTS attendance (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		lesson_id INTEGER NOT NULL,
		client_id INTEGER NOT NULL,
		status TEXT CHECK (status IN ('present', 'absent', 'sick') OR status IS NULL),
		updated_at TEXT DEFAULT (datetime('now','localtime')),
		FOREIGN KEY(lesson_id) REFERENCES lessons(id) ON DELETE CASCADE,
		FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE,
		UNIQUE(lesson_id, client_id)
	);
	""",
	"CREATE INDEX IF NOT EXISTS idx_clients_full_name ON clients(full_name);",
	"CREATE INDEX IF NOT EXISTS idx_groups_trainer ON groups(trainer_id);",
	"CREATE INDEX IF NOT EXISTS idx_lessons_date ON lessons(lesson_date);",
	"CREATE INDEX IF NOT EXISTS idx_lessons_group_date ON lessons(group_id, lesson_date);",
	"CREATE INDEX IF NOT EXISTS idx_attendance_lesson ON attendance(lesson_id);",
	"CREATE INDEX IF NOT EXISTS idx_attendance_client ON attendance(client_id);",
)

EMPLOYEE_LOGIN = (
	"ALTER TABLE employees ADD COLUMN login TEXT;",
	"ALTER TABLE employees ADD COLUMN password TEXT;",
	"CREATE UNIQUE INDEX IF NOT EXISTS idx_employees_login ON employees(login) WHERE login IS NOT NULL;",
)

SUBSCRIPTIONS = (
	"""
	CREATE TABLE IF NOT EXISTS subscriptions (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		name TEXT NOT NULL,
		price REAL NOT NULL DEFAULT 0,
		duration_days INTEGER NOT NULL CHECK (duration_days > 0),
		visit_limit INTEGER NOT NULL DEFAULT 0 CHECK (visit_limit >= 0),
		is_active INTEGER NOT NULL DEFAULT 1,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		updated_at TEXT DEFAULT (datetime('now','localtime'))
	);
	""",
	# end_date and visits_total are frozen at assignment time
	"""
	CREATE TABLE IF NOT EXISTS client_subscriptions (
		id INTEGER PRIMARY KEY AUTOINCREMENT,
		client_id INTEGER NOT NULL,
		subscription_id INTEGER,
		start_date TEXT NOT NULL,
		end_date TEXT NOT NULL,
		visits_used INTEGER NOT NULL DEFAULT 0,
		visits_total INTEGER NOT NULL DEFAULT 0,
		is_paid INTEGER NOT NULL DEFAULT 0,
		payment_date TEXT,
		created_at TEXT DEFAULT (datetime('now','localtime')),
		updated_at TEXT DEFAULT (datetime('now','localtime')),
		FOREIGN KEY(client_id) REFERENCES clients(id) ON DELETE CASCADE,
		FOREIGN KEY(subscription_id) REFERENCES subscriptions(id) ON DELETE SET NULL,
		CHECK (visits_used >= 0)
	);
	""",
	"CREATE INDEX IF NOT EXISTS idx_client_subs_client ON client_subscriptions(client_id, start_date);",
	"CREATE INDEX IF NOT EXISTS idx_client_subs_plan_end ON client_subscriptions(subscription_id, end_date);",
	"CREATE INDEX IF NOT EXISTS idx_client_subs_end ON client_subscriptions(end_date);",
)

CLIENT_DOCUMENTS = (
	"ALTER TABLE clients ADD COLUMN birth_date TEXT;",
	"ALTER TABLE clients ADD COLUMN doc_type TEXT CHECK (doc_type IN ('passport', 'certificate') OR doc_type IS NULL);",
	"ALTER TABLE clients ADD COLUMN doc_series TEXT;",
	"ALTER TABLE clients ADD COLUMN doc_number TEXT;",
	"ALTER TABLE clients ADD COLUMN doc_issued_by TEXT;",
	"ALTER TABLE clients ADD COLUMN doc_issued_date TEXT;",
	"ALTER TABLE clients ADD COLUMN home_address TEXT;",
	"ALTER TABLE clients ADD COLUMN workplace TEXT;",
	"CREATE INDEX IF NOT EXISTS idx_clients_name_birth ON clients(full_name, birth_date);",
)

SETTINGS = (
	"""
	CREATE TABLE IF NOT EXISTS settings (
		key TEXT PRIMARY KEY,
		value TEXT NOT NULL
	);
	""",
	"INSERT OR IGNORE INTO settings (key, value) VALUES ('expiring_days_ahead', '7');",
)
