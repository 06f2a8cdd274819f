"""Database schema definitions and migration helpers."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

_RECEIPTS_V1 = """
CREATE TABLE IF NOT EXISTS receipts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT NOT NULL,
    original_filename TEXT NOT NULL,
    file_path TEXT NOT NULL,
    total_amount REAL,
    store_name TEXT,
    transaction_date TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    processed_at TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_receipts_status ON receipts(status);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    receipt_id INTEGER NOT NULL REFERENCES receipts(id),
    item_name TEXT NOT NULL,
    quantity REAL NOT NULL DEFAULT 1,
    unit_price REAL,
    total_price REAL NOT NULL,
    category TEXT,
    subcategory TEXT,
    confidence_score REAL,
    created_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);

CREATE INDEX IF NOT EXISTS idx_transactions_receipt ON transactions(receipt_id);
CREATE INDEX IF NOT EXISTS idx_transactions_created ON transactions(created_at);

CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);
"""

# Entry N upgrades a database from version N to N + 1.
_MIGRATIONS: tuple[str, ...] = (_RECEIPTS_V1,)
_SCHEMA_VERSION = len(_MIGRATIONS)


def _current_version(conn: sqlite3.Connection) -> int:
    """Return the stored schema version, 0 for an empty database."""
    exists = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'schema_version'"
    ).fetchone()
    if exists is None:
        return 0
    row = conn.execute("SELECT MAX(version) AS version FROM schema_version").fetchone()
    return row["version"] or 0


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open (or create) the receipts database and apply pending migrations.

    Args:
        db_path: Path to the SQLite database file. ``~`` is expanded and
            missing parent directories are created.

    Returns:
        An open sqlite3.Connection (rows as ``sqlite3.Row``, WAL journal,
        foreign keys enforced) at the latest schema version.
    """
    db_path = Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    version = _current_version(conn)
    if version > _SCHEMA_VERSION:
        logger.warning(
            "%s has schema version %d, newer than supported %d",
            db_path, version, _SCHEMA_VERSION,
        )
    for target, script in enumerate(_MIGRATIONS[version:], start=version + 1):
        conn.executescript(script)
        conn.execute("DELETE FROM schema_version")
        conn.execute("INSERT INTO schema_version (version) VALUES (?)", (target,))
        conn.commit()
        logger.info("Migrated %s to schema version %d", db_path, target)

    return conn
