"""Data models for extracted receipt data."""

from __future__ import annotations

from dataclasses import dataclass, field

CATEGORIES: tuple[str, ...] = (
    "Fruits & Vegetables",
    "Dairy & Eggs",
    "Meat & Fish",
    "Bakery",
    "Pantry",
    "Beverages",
    "Snacks",
    "Frozen Foods",
    "Household",
    "Personal Care",
)

DEFAULT_CATEGORY = "Pantry"
DEFAULT_CONFIDENCE = 0.7


@dataclass
class LineItem:
    """A single purchased item on a receipt."""

    item_name: str
    total_price: float
    quantity: float = 1
    unit_price: float | None = None
    category: str = DEFAULT_CATEGORY
    confidence_score: float = DEFAULT_CONFIDENCE

    def to_dict(self) -> dict:
        return {
            "item_name": self.item_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "total_price": self.total_price,
            "category": self.category,
            "confidence_score": self.confidence_score,
        }


@dataclass
class ReceiptExtraction:
    """Structured result of reading one receipt image.

    ``transactions`` may be empty, meaning nothing was recognized.
    ``placeholder`` is set only for canned demo data returned when the
    provider quota is exhausted.
    """

    store_name: str = ""
    total_amount: float | None = None
    transaction_date: str = ""
    transactions: list[LineItem] = field(default_factory=list)
    placeholder: bool = False

    def to_dict(self) -> dict:
        return {
            "store_name": self.store_name,
            "total_amount": self.total_amount,
            "transaction_date": self.transaction_date,
            "transactions": [t.to_dict() for t in self.transactions],
        }


# Canned demo data for the degrade-on-quota path.
PLACEHOLDER_EXTRACTION = ReceiptExtraction(
    store_name="Sample Supermarket",
    total_amount=285.0,
    transaction_date="2024-01-15",
    transactions=[
        LineItem(
            item_name="Milk 1L",
            quantity=1,
            unit_price=65.0,
            total_price=65.0,
            category="Dairy & Eggs",
            confidence_score=0.95,
        ),
        LineItem(
            item_name="Whole Wheat Bread",
            quantity=1,
            unit_price=45.0,
            total_price=45.0,
            category="Bakery",
            confidence_score=0.9,
        ),
        LineItem(
            item_name="Bananas",
            quantity=6,
            unit_price=10.0,
            total_price=60.0,
            category="Fruits & Vegetables",
            confidence_score=0.9,
        ),
        LineItem(
            item_name="Basmati Rice 1kg",
            quantity=1,
            unit_price=115.0,
            total_price=115.0,
            category="Pantry",
            confidence_score=0.85,
        ),
    ],
    placeholder=True,
)


def placeholder_extraction() -> ReceiptExtraction:
    """Return a fresh copy of the canned placeholder extraction."""
    return ReceiptExtraction(
        store_name=PLACEHOLDER_EXTRACTION.store_name,
        total_amount=PLACEHOLDER_EXTRACTION.total_amount,
        transaction_date=PLACEHOLDER_EXTRACTION.transaction_date,
        transactions=[
            LineItem(**t.to_dict()) for t in PLACEHOLDER_EXTRACTION.transactions
        ],
        placeholder=True,
    )
