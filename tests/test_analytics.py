"""Tests for category spending analytics."""

import pytest

from grocery_scanner.analytics import summarize_spending


def test_groups_and_sorts_by_total():
    rows = [
        {"category": "Dairy & Eggs", "total_price": 65.0},
        {"category": "Bakery", "total_price": 35.0},
        {"category": "Dairy & Eggs", "total_price": 55.0},
        {"category": "Pantry", "total_price": 200.0},
    ]
    summary = summarize_spending(rows)

    assert [c.category for c in summary.categories] == [
        "Pantry", "Dairy & Eggs", "Bakery",
    ]
    dairy = summary.categories[1]
    assert dairy.transaction_count == 2
    assert dairy.total_spent == 120.0
    assert dairy.avg_price == 60.0
    assert summary.top_category == "Pantry"
    assert summary.total_spent == 355.0
    assert summary.total_transactions == 4
    assert summary.avg_transaction_value == pytest.approx(88.75)


def test_missing_category_is_uncategorized():
    summary = summarize_spending([{"category": None, "total_price": 10.0}])
    assert summary.categories[0].category == "Uncategorized"


def test_empty():
    summary = summarize_spending([])
    assert summary.categories == []
    assert summary.total_spent == 0
    assert summary.avg_transaction_value == 0.0
    assert summary.top_category == "None"


def test_to_dict_percentages():
    rows = [
        {"category": "Snacks", "total_price": 25.0},
        {"category": "Beverages", "total_price": 75.0},
    ]
    data = summarize_spending(rows).to_dict()

    assert data["top_category"] == "Beverages"
    assert data["categories"][0]["percentage"] == 75.0
    assert data["categories"][1]["percentage"] == 25.0
    assert data["categories"][1]["avg_price"] == 25.0
