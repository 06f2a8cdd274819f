"""Tests for receipt data models."""

from grocery_scanner.models import (
    CATEGORIES,
    LineItem,
    PLACEHOLDER_EXTRACTION,
    ReceiptExtraction,
    placeholder_extraction,
)


class TestLineItem:
    def test_defaults(self):
        item = LineItem(item_name="Rice", total_price=80)
        assert item.quantity == 1
        assert item.unit_price is None
        assert item.category == "Pantry"
        assert item.confidence_score == 0.7

    def test_to_dict(self):
        item = LineItem(item_name="Rice", total_price=80, unit_price=80)
        assert item.to_dict() == {
            "item_name": "Rice",
            "quantity": 1,
            "unit_price": 80,
            "total_price": 80,
            "category": "Pantry",
            "confidence_score": 0.7,
        }


class TestReceiptExtraction:
    def test_empty_is_valid(self):
        extraction = ReceiptExtraction()
        assert extraction.transactions == []
        assert extraction.to_dict() == {
            "store_name": "",
            "total_amount": None,
            "transaction_date": "",
            "transactions": [],
        }

    def test_placeholder_flag_not_serialized(self):
        assert "placeholder" not in placeholder_extraction().to_dict()


class TestPlaceholder:
    def test_marked_as_placeholder(self):
        assert placeholder_extraction().placeholder is True
        assert PLACEHOLDER_EXTRACTION.placeholder is True

    def test_categories_are_known(self):
        for item in PLACEHOLDER_EXTRACTION.transactions:
            assert item.category in CATEGORIES

    def test_totals_consistent(self):
        total = sum(t.total_price for t in PLACEHOLDER_EXTRACTION.transactions)
        assert total == PLACEHOLDER_EXTRACTION.total_amount
