"""SQLite storage for receipts and their transactions."""

from .receipts import ReceiptStore
from .schema import ensure_schema

__all__ = [
    "ReceiptStore",
    "ensure_schema",
]
