"""Turn raw vision-model output into a ReceiptExtraction.

Two tiers:

1. Strict: decode the embedded JSON object (first ``{`` to last ``}``).
2. Heuristic: line-by-line pattern matching, used only when no JSON
   object is present or it fails to decode.

``parse`` never raises; the worst case is an extraction with empty fields
and no transactions.
"""

from __future__ import annotations

import json
import logging
import math
import re

from .errors import DecodeError
from .models import DEFAULT_CATEGORY, DEFAULT_CONFIDENCE, LineItem, ReceiptExtraction

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"-?\d+(?:,\d{3})*(?:\.\d+)?")

# Heuristic tier patterns
_STORE_KEYWORDS = ("store", "mart", "supermarket")
_TOTAL = re.compile(r"total", re.IGNORECASE)
_AMOUNT = re.compile(r"\d+\.?\d*")
_DATE = re.compile(r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})")
_ITEM = re.compile(r"(.*?\S)\s+(\d+\.?\d*)")


def parse(raw_text: str | None) -> ReceiptExtraction:
    """Parse a vision-model response into a ReceiptExtraction."""
    text = raw_text if isinstance(raw_text, str) else ""

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        try:
            return _decode_json(text[start : end + 1])
        except DecodeError as e:
            logger.debug("Strict parse failed, using heuristic tier: %s", e)

    return _parse_lines(text)


# ---------------------------------------------------------------------------
# Strict tier
# ---------------------------------------------------------------------------


def _decode_json(candidate: str) -> ReceiptExtraction:
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        raise DecodeError(str(e)) from e

    if not isinstance(data, dict):
        raise DecodeError("embedded JSON is not an object")
    transactions = data.get("transactions")
    if not isinstance(transactions, list):
        raise DecodeError("embedded JSON has no transactions list")

    items: list[LineItem] = []
    for raw_item in transactions:
        item = _normalize_item(raw_item)
        if item is not None:
            items.append(item)

    return ReceiptExtraction(
        store_name=_to_text(data.get("store_name")),
        total_amount=_non_negative(data.get("total_amount")),
        transaction_date=_to_text(data.get("transaction_date")),
        transactions=items,
    )


def _normalize_item(raw: object) -> LineItem | None:
    """Normalize one JSON item, or return None if it must be dropped."""
    if not isinstance(raw, dict):
        return None

    name = _to_text(raw.get("item_name"))
    if not name:
        return None

    total_price = _non_negative(raw.get("total_price"))
    if total_price is None:
        return None

    quantity = _to_number(raw.get("quantity"))
    if quantity is None or quantity <= 0:
        quantity = 1

    category = _to_text(raw.get("category")) or DEFAULT_CATEGORY

    confidence = _to_number(raw.get("confidence_score"))
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE
    confidence = min(max(confidence, 0.0), 1.0)

    return LineItem(
        item_name=name,
        quantity=quantity,
        unit_price=_non_negative(raw.get("unit_price")),
        total_price=total_price,
        category=category,
        confidence_score=confidence,
    )


def _to_text(value: object) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value).strip()


def _to_number(value: object) -> float | None:
    """Coerce a JSON value to a finite number.

    Accepts numbers and strings such as "₹1,250.00"; anything else is None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        m = _NUMBER.search(value)
        if not m:
            return None
        number = float(m.group(0).replace(",", ""))
    else:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _non_negative(value: object) -> float | None:
    number = _to_number(value)
    if number is None or number < 0:
        return None
    return number


# ---------------------------------------------------------------------------
# Heuristic tier
# ---------------------------------------------------------------------------


def _parse_lines(text: str) -> ReceiptExtraction:
    store_name = ""
    total_amount: float | None = None
    transaction_date = ""
    items: list[LineItem] = []

    # Each check runs independently; one line may match several.
    for line in text.split("\n"):
        lowered = line.lower()

        if any(keyword in lowered for keyword in _STORE_KEYWORDS):
            store_name = line.strip()

        total_match = _TOTAL.search(line)
        if total_match:
            amount_match = _AMOUNT.search(line, total_match.end())
            if amount_match:
                total_amount = _to_number(amount_match.group(0))

        date_match = _DATE.search(line)
        if date_match:
            transaction_date = date_match.group(1)

        item_match = _ITEM.match(line)
        if item_match and "total" not in lowered:
            name = item_match.group(1).strip()
            price = _to_number(item_match.group(2))
            if name and price is not None and price > 0:
                items.append(
                    LineItem(
                        item_name=name,
                        quantity=1,
                        unit_price=price,
                        total_price=price,
                        category=DEFAULT_CATEGORY,
                        confidence_score=DEFAULT_CONFIDENCE,
                    )
                )

    return ReceiptExtraction(
        store_name=store_name,
        total_amount=total_amount,
        transaction_date=transaction_date,
        transactions=items,
    )
