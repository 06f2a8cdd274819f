"""Tests for database schema creation and migration."""

import sqlite3

import pytest

from grocery_scanner.db.schema import _SCHEMA_VERSION, _current_version, ensure_schema


def test_ensure_schema_creates_tables(tmp_path):
    """Schema creates receipts, transactions and version tables."""
    conn = ensure_schema(tmp_path / "test.db")

    tables = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"
    ).fetchall()
    table_names = {row["name"] for row in tables}

    assert "receipts" in table_names
    assert "transactions" in table_names
    assert "schema_version" in table_names

    conn.close()


def test_ensure_schema_creates_parent_dirs(tmp_path):
    """Schema creates parent directories if they don't exist."""
    db_path = tmp_path / "sub" / "dir" / "test.db"
    conn = ensure_schema(db_path)
    assert db_path.exists()
    conn.close()


def test_ensure_schema_idempotent(tmp_path):
    """Calling ensure_schema twice doesn't error."""
    db_path = tmp_path / "test.db"
    conn1 = ensure_schema(db_path)
    conn1.close()

    conn2 = ensure_schema(db_path)
    row = conn2.execute("SELECT version FROM schema_version").fetchone()
    assert row["version"] == _SCHEMA_VERSION
    conn2.close()


def test_ensure_schema_wal_mode(tmp_path):
    """Schema sets WAL journal mode."""
    conn = ensure_schema(tmp_path / "test.db")
    mode = conn.execute("PRAGMA journal_mode").fetchone()
    assert mode[0] == "wal"
    conn.close()


def test_transactions_columns(tmp_path):
    """transactions table has expected columns."""
    conn = ensure_schema(tmp_path / "test.db")

    info = conn.execute("PRAGMA table_info(transactions)").fetchall()
    col_names = {row["name"] for row in info}

    expected = {
        "id", "receipt_id", "item_name", "quantity", "unit_price",
        "total_price", "category", "subcategory", "confidence_score",
        "created_at",
    }
    assert expected.issubset(col_names)

    conn.close()


def test_current_version_of_empty_database(tmp_path):
    """A database without a version table is at version 0."""
    conn = sqlite3.connect(str(tmp_path / "empty.db"))
    conn.row_factory = sqlite3.Row
    assert _current_version(conn) == 0
    conn.close()


def test_single_version_row_after_reopen(tmp_path):
    """Reopening does not re-run migrations or duplicate the version row."""
    db_path = tmp_path / "test.db"
    ensure_schema(db_path).close()
    conn = ensure_schema(db_path)
    rows = conn.execute("SELECT version FROM schema_version").fetchall()
    assert [row["version"] for row in rows] == [_SCHEMA_VERSION]
    conn.close()


def test_foreign_keys_enforced(tmp_path):
    """Transactions must reference an existing receipt."""
    conn = ensure_schema(tmp_path / "test.db")
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute(
            "INSERT INTO transactions (receipt_id, item_name, total_price) "
            "VALUES (999, 'Milk', 65)"
        )
    conn.close()
