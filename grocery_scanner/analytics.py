"""Category spending analytics over stored transactions."""

from __future__ import annotations

from dataclasses import dataclass, field

UNCATEGORIZED = "Uncategorized"


@dataclass
class CategorySpending:
    category: str
    transaction_count: int
    total_spent: float

    @property
    def avg_price(self) -> float:
        return self.total_spent / self.transaction_count

    def share_of(self, total: float) -> float:
        """Percentage of ``total`` spent in this category."""
        return self.total_spent / total * 100 if total > 0 else 0.0


@dataclass
class SpendingSummary:
    categories: list[CategorySpending] = field(default_factory=list)

    @property
    def total_spent(self) -> float:
        return sum(c.total_spent for c in self.categories)

    @property
    def total_transactions(self) -> int:
        return sum(c.transaction_count for c in self.categories)

    @property
    def avg_transaction_value(self) -> float:
        count = self.total_transactions
        return self.total_spent / count if count > 0 else 0.0

    @property
    def top_category(self) -> str:
        return self.categories[0].category if self.categories else "None"

    def to_dict(self) -> dict:
        return {
            "total_spent": self.total_spent,
            "total_transactions": self.total_transactions,
            "avg_transaction_value": self.avg_transaction_value,
            "top_category": self.top_category,
            "categories": [
                {
                    "category": c.category,
                    "transaction_count": c.transaction_count,
                    "total_spent": c.total_spent,
                    "avg_price": c.avg_price,
                    "percentage": c.share_of(self.total_spent),
                }
                for c in self.categories
            ],
        }


def summarize_spending(transactions: list[dict]) -> SpendingSummary:
    """Group transaction rows by category, largest spend first.

    Args:
        transactions: Rows with at least ``category`` and ``total_price``.
    """
    by_category: dict[str, CategorySpending] = {}
    for t in transactions:
        category = t.get("category") or UNCATEGORIZED
        entry = by_category.get(category)
        if entry is None:
            entry = by_category[category] = CategorySpending(
                category=category, transaction_count=0, total_spent=0.0
            )
        entry.transaction_count += 1
        entry.total_spent += t.get("total_price") or 0.0

    categories = sorted(
        by_category.values(), key=lambda c: c.total_spent, reverse=True
    )
    return SpendingSummary(categories=categories)
