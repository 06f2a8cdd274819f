"""CLI entry point for the receipt scanner."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

from .analytics import summarize_spending
from .config import load_config
from .db import ReceiptStore
from .errors import ConfigurationError, ExternalServiceError
from .models import ReceiptExtraction
from .parser import parse
from .pipeline import ExtractOptions, extract_and_parse
from .vision import create_backend

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="grocery-scanner",
        description="Extract grocery receipt line items with a vision model and track spending",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to the configuration file (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # scan
    scan_parser = sub.add_parser("scan", help="Extract transactions from a receipt image")
    scan_parser.add_argument("image", type=str, help="Receipt image file")
    scan_parser.add_argument("--json", action="store_true", help="Output JSON")
    scan_parser.add_argument(
        "--save", action="store_true", help="Store the receipt and its transactions"
    )
    scan_parser.add_argument(
        "--allow-placeholder",
        action="store_true",
        help="Return demo data instead of failing when the provider quota is exhausted",
    )
    scan_parser.add_argument(
        "--timeout-ms", type=int, default=None, help="Provider request timeout"
    )

    # parse
    parse_parser = sub.add_parser("parse", help="Parse saved model output text")
    parse_parser.add_argument("file", type=str, help="Text file, or - for stdin")
    parse_parser.add_argument("--json", action="store_true", help="Output JSON")

    # receipts / show / delete
    sub.add_parser("receipts", help="List stored receipts")
    show_parser = sub.add_parser("show", help="Show transactions of a receipt")
    show_parser.add_argument("receipt_id", type=int)
    delete_parser = sub.add_parser("delete", help="Delete a receipt")
    delete_parser.add_argument("receipt_id", type=int)

    # analytics
    analytics_parser = sub.add_parser("analytics", help="Spending by category")
    analytics_parser.add_argument(
        "--days", type=int, default=30, help="Time range in days (default: 30)"
    )
    analytics_parser.add_argument("--json", action="store_true", help="Output JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    config = load_config(args.config)

    try:
        match args.command:
            case "scan":
                asyncio.run(_cmd_scan(config, args))
            case "parse":
                _cmd_parse(args)
            case "receipts":
                _cmd_receipts(config)
            case "show":
                _cmd_show(config, args)
            case "delete":
                _cmd_delete(config, args)
            case "analytics":
                _cmd_analytics(config, args)
    except (ConfigurationError, ExternalServiceError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


async def _cmd_scan(config, args) -> None:
    path = Path(args.image)
    if not path.exists():
        raise ConfigurationError(f"Image not found: {path}")

    image = path.read_bytes()
    mime_type = mimetypes.guess_type(str(path))[0] or "image/jpeg"
    options = ExtractOptions(
        allow_placeholder_on_quota_error=(
            args.allow_placeholder or config.vision.allow_placeholder_on_quota_error
        ),
        timeout_ms=args.timeout_ms or config.vision.timeout_ms,
    )

    backend = create_backend(config)
    if not args.json:
        print("🔍 Reading receipt...")
    extraction = await extract_and_parse(
        image,
        config.vision.api_key,
        options,
        backend=backend,
        mime_type=mime_type,
    )

    receipt_id = None
    if args.save and extraction.placeholder:
        logger.warning("Not saving placeholder extraction for %s", path.name)
    elif args.save:
        store = ReceiptStore(config.database.path)
        try:
            receipt_id = store.create_receipt(path.name, str(path.resolve()))
            store.save_extraction(receipt_id, extraction)
        finally:
            store.close()

    if args.json:
        data = {
            "success": True,
            "placeholder": extraction.placeholder,
            "receipt_id": receipt_id,
            "data": extraction.to_dict(),
        }
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if extraction.placeholder:
        print("⚠  Provider quota exhausted: showing placeholder data, not your receipt.")
        if args.save:
            print("   Placeholder data was not saved.")
    _print_extraction(extraction)
    if receipt_id is not None:
        print(f"\nSaved as receipt {receipt_id}")


def _cmd_parse(args) -> None:
    if args.file == "-":
        text = sys.stdin.read()
    else:
        text = Path(args.file).read_text(encoding="utf-8")

    extraction = parse(text)
    if args.json:
        print(json.dumps(extraction.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_extraction(extraction)


def _print_extraction(extraction: ReceiptExtraction) -> None:
    if not extraction.transactions:
        print("Nothing recognized, try a clearer photo.")
        return

    print(f"\n🧾 {extraction.store_name or 'Unknown Store'}", end="")
    if extraction.transaction_date:
        print(f"  ({extraction.transaction_date})", end="")
    print()
    for t in extraction.transactions:
        qty = f"{t.quantity:g} x " if t.quantity != 1 else ""
        print(
            f"  {t.item_name:<30} {qty}₹{t.total_price:.2f}  "
            f"[{t.category}] {t.confidence_score:.0%}"
        )
    if extraction.total_amount is not None:
        print(f"  {'Total':<30} ₹{extraction.total_amount:.2f}")


def _cmd_receipts(config) -> None:
    store = ReceiptStore(config.database.path)
    try:
        receipts = store.list_receipts()
    finally:
        store.close()

    if not receipts:
        print("No receipts stored yet.")
        return
    print(f"Receipts: {len(receipts)}")
    for r in receipts:
        total = r["total_amount"]
        if total is None:
            total = r["calculated_total"]
        print(
            f"  #{r['id']:<4} {r['store_name'] or 'Unknown Store':<25} "
            f"{r['transaction_date'] or '-':<12} ₹{total:.2f}  "
            f"{r['transaction_count']} items  [{r['status']}]"
        )


def _cmd_show(config, args) -> None:
    store = ReceiptStore(config.database.path)
    try:
        receipt = store.get_receipt(args.receipt_id)
        transactions = store.get_transactions(args.receipt_id) if receipt else []
    finally:
        store.close()

    if receipt is None:
        print(f"Receipt {args.receipt_id} not found.", file=sys.stderr)
        sys.exit(1)

    print(f"Transactions - {receipt['store_name'] or 'Unknown Store'}")
    for t in transactions:
        unit = f" @ ₹{t['unit_price']:.2f}" if t["unit_price"] is not None else ""
        print(
            f"  {t['item_name']:<30} ₹{t['total_price']:.2f}{unit}  "
            f"[{t['category'] or '-'}]"
        )


def _cmd_delete(config, args) -> None:
    store = ReceiptStore(config.database.path)
    try:
        if store.get_receipt(args.receipt_id) is None:
            print(f"Receipt {args.receipt_id} not found.", file=sys.stderr)
            sys.exit(1)
        store.delete_receipt(args.receipt_id)
    finally:
        store.close()
    print(f"Deleted receipt {args.receipt_id}")


def _cmd_analytics(config, args) -> None:
    store = ReceiptStore(config.database.path)
    try:
        rows = store.get_transactions_since(args.days)
    finally:
        store.close()

    summary = summarize_spending(rows)
    if args.json:
        print(json.dumps(summary.to_dict(), ensure_ascii=False, indent=2))
        return

    print(f"Spending over the last {args.days} days")
    print(f"  Total spent:       ₹{summary.total_spent:.2f}")
    print(f"  Transactions:      {summary.total_transactions}")
    print(f"  Avg per item:      ₹{summary.avg_transaction_value:.2f}")
    print(f"  Top category:      {summary.top_category}")
    if not summary.categories:
        return
    print()
    for c in summary.categories:
        print(
            f"  {c.category:<22} {c.transaction_count:>4}  "
            f"₹{c.total_spent:>10.2f}  avg ₹{c.avg_price:.2f}  "
            f"{c.share_of(summary.total_spent):.1f}%"
        )
