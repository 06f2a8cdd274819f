"""Receipt and transaction storage."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import DEFAULT_DB_PATH
from .schema import ensure_schema

if TYPE_CHECKING:
    from ..models import ReceiptExtraction

logger = logging.getLogger(__name__)


class ReceiptStore:
    """Manages the receipts and transactions tables."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH) -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def create_receipt(self, original_filename: str, file_path: str) -> int:
        """Record an uploaded receipt with status 'pending'.

        Returns:
            The new receipt ID.
        """
        conn = self._get_conn()
        cur = conn.execute(
            """INSERT INTO receipts
               (filename, original_filename, file_path, status)
               VALUES (?, ?, ?, 'pending')""",
            (Path(file_path).name, original_filename, file_path),
        )
        conn.commit()
        return cur.lastrowid

    def save_extraction(
        self, receipt_id: int, extraction: ReceiptExtraction
    ) -> list[int]:
        """Store extracted transactions and mark the receipt processed.

        Receipt summary fields are overwritten with the extraction's values;
        empty strings are stored as NULL.

        Returns:
            List of inserted transaction IDs.

        Raises:
            KeyError: If no receipt with ``receipt_id`` exists.
        """
        conn = self._get_conn()
        if self.get_receipt(receipt_id) is None:
            raise KeyError(f"receipt {receipt_id} not found")

        ids: list[int] = []
        with conn:
            for t in extraction.transactions:
                cur = conn.execute(
                    """INSERT INTO transactions
                       (receipt_id, item_name, quantity, unit_price,
                        total_price, category, confidence_score)
                       VALUES (?, ?, ?, ?, ?, ?, ?)""",
                    (
                        receipt_id,
                        t.item_name,
                        t.quantity,
                        t.unit_price,
                        t.total_price,
                        t.category,
                        t.confidence_score,
                    ),
                )
                ids.append(cur.lastrowid)

            conn.execute(
                """UPDATE receipts
                   SET total_amount = ?,
                       store_name = ?,
                       transaction_date = ?,
                       status = 'processed',
                       processed_at = datetime('now', 'localtime')
                   WHERE id = ?""",
                (
                    extraction.total_amount,
                    extraction.store_name or None,
                    extraction.transaction_date or None,
                    receipt_id,
                ),
            )
        logger.info(
            "Saved %d transactions for receipt %d", len(ids), receipt_id
        )
        return ids

    def get_receipt(self, receipt_id: int) -> dict | None:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT * FROM receipts WHERE id = ?", (receipt_id,)
        ).fetchone()
        return dict(row) if row else None

    def list_receipts(self) -> list[dict]:
        """Return all receipts, newest first, with transaction aggregates."""
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT r.*,
                      COUNT(t.id) AS transaction_count,
                      COALESCE(SUM(t.total_price), 0) AS calculated_total
               FROM receipts r
               LEFT JOIN transactions t ON t.receipt_id = r.id
               GROUP BY r.id
               ORDER BY r.created_at DESC, r.id DESC"""
        ).fetchall()
        return [dict(r) for r in rows]

    def get_transactions(self, receipt_id: int) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM transactions WHERE receipt_id = ? ORDER BY id",
            (receipt_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    def get_transactions_since(self, days: int = 30) -> list[dict]:
        """Return transactions created within the last ``days`` days."""
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM transactions
               WHERE created_at >= datetime('now', 'localtime', '-' || ? || ' days')
               ORDER BY created_at""",
            (days,),
        ).fetchall()
        return [dict(r) for r in rows]

    def delete_receipt(self, receipt_id: int) -> None:
        """Delete a receipt and its transactions."""
        conn = self._get_conn()
        with conn:
            conn.execute(
                "DELETE FROM transactions WHERE receipt_id = ?", (receipt_id,)
            )
            conn.execute("DELETE FROM receipts WHERE id = ?", (receipt_id,))
