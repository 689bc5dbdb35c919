"""SQLite schema management (code-first approach)."""

import logging

import aiosqlite


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    "users",
    "login_attempts",
    "task_completions",
]

# Columns stored as JSON text and decoded on read
JSON_COLUMNS: dict[str, set[str]] = {
    "users": {"login_times"},
}

_TABLES: dict[str, str] = {
    "users": """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            phone TEXT NOT NULL CHECK (length(phone) = 10),
            login_times TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    # Audit trail: rows are only ever inserted
    "login_attempts": """
        CREATE TABLE IF NOT EXISTS login_attempts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            phone TEXT NOT NULL,
            referral_code TEXT NOT NULL,
            result TEXT NOT NULL CHECK (result IN ('pending', 'success', 'failed')),
            reason TEXT,
            timestamp TEXT NOT NULL
        )
    """,
    "task_completions": """
        CREATE TABLE IF NOT EXISTS task_completions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id TEXT NOT NULL,
            task_id TEXT NOT NULL,
            task_title TEXT NOT NULL,
            video_file_name TEXT,
            video_path TEXT,
            status TEXT NOT NULL CHECK (status IN ('under_evaluation', 'approved', 'rejected')),
            payment_status TEXT CHECK (payment_status IS NULL OR payment_status IN ('pending', 'allotted', 'paid')),
            uploaded_at TEXT NOT NULL,
            evaluated_at TEXT,
            feedback TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
}

_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_phone ON users (phone)",
    "CREATE INDEX IF NOT EXISTS idx_attempts_phone ON login_attempts (phone)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_completions_user_task ON task_completions (user_id, task_id)",
    "CREATE INDEX IF NOT EXISTS idx_completions_user ON task_completions (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_completions_task ON task_completions (task_id)",
    "CREATE INDEX IF NOT EXISTS idx_completions_status ON task_completions (status)",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """Create tables and indexes if they do not exist (idempotent)."""
    for collection_name in COLLECTIONS:
        await conn.execute(_TABLES[collection_name])
    for index_sql in _INDEXES:
        await conn.execute(index_sql)
    await conn.commit()

    logger.info("Schema initialized", extra={"collections": COLLECTIONS})
