"""Console interface for the budget tracker."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from budget_core.aggregator import split_by_type, summarize_month
from budget_core.config import get_settings
from budget_core.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from budget_core.fiscal import MONTH_LABELS, calendar_year_of, current_fiscal_period
from budget_core.formatting import format_signed_yen, format_yen
from budget_core.models import EffectiveEntry, Entry, RecurringExpense
from budget_core.services import LedgerService
from budget_core.storage import JSONStorage

DATE_FORMAT = "YYYY-MM-DD"


def _parse_date(value: str) -> str:
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format {DATE_FORMAT}."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    if not value.isdigit() or int(value) <= 0:
        raise argparse.ArgumentTypeError("Amount must be a positive whole number of yen")
    return value


def _parse_month(value: str) -> int:
    if not value.isdigit() or not 1 <= int(value) <= 12:
        raise argparse.ArgumentTypeError("Month must be between 1 and 12")
    return int(value)


def _load_service(data_dir: Path) -> LedgerService:
    return LedgerService(JSONStorage(data_dir), get_settings().resource)


def _format_entry(entry: Entry) -> str:
    return (
        f"[{entry.id}] {entry.date.isoformat()} {entry.type.value} {format_yen(entry.amount)}\n"
        f"  Category: {entry.category.display_name} | Name: {entry.name or '-'}\n"
    )


def _format_effective(entry: EffectiveEntry) -> str:
    marker = " (固定費)" if entry.is_recurring else ""
    sign = "+" if entry.type.value == "income" else "-"
    return f"  {entry.label} [{entry.category.display_name}]{marker} {sign}{format_yen(entry.amount)}"


def _format_recurring(item: RecurringExpense) -> str:
    if item.is_open_ended:
        until = "継続中"
    else:
        until = f"{item.end_year}年{item.end_month}月"
    return (
        f"[{item.id}] {item.name} {format_yen(item.amount)} / 月\n"
        f"  {item.start_year}年{item.start_month}月 〜 {until}\n"
    )


def handle_entry(args: argparse.Namespace, ledger: LedgerService) -> None:
    if args.command == "add":
        payload = {
            "type": args.type,
            "amount": args.amount,
            "date": args.date,
            "category": args.category,
            "name": args.name,
        }
        entry = ledger.add_entry(payload)
        print("Entry added:\n" + _format_entry(entry))
    elif args.command == "list":
        entries = sorted(ledger.entries, key=lambda entry: entry.date)
        if not entries:
            print("No entries found.")
            return
        print(f"Found {len(entries)} entries:")
        for entry in entries:
            print(_format_entry(entry))
    elif args.command == "edit":
        changes = {
            "type": args.type,
            "amount": args.amount,
            "date": args.date,
            "category": args.category,
            "name": args.name,
        }
        cleaned = {k: v for k, v in changes.items() if v is not None}
        entry = ledger.update_entry(args.id, cleaned)
        print("Entry updated:\n" + _format_entry(entry))
    elif args.command == "delete":
        ledger.delete_entry(args.id)
        print(f"Entry {args.id} deleted.")


def handle_recurring(args: argparse.Namespace, ledger: LedgerService) -> None:
    if args.command == "add":
        payload = {
            "name": args.name,
            "amount": args.amount,
            "startYear": args.start_year,
            "startMonth": args.start_month,
            "endYear": args.end_year,
            "endMonth": args.end_month,
        }
        recurring = ledger.add_recurring(payload)
        print("Recurring expense added:\n" + _format_recurring(recurring))
    elif args.command == "list":
        items = ledger.recurring_expenses
        if not items:
            print("No recurring expenses found.")
            return
        for item in items:
            print(_format_recurring(item))
    elif args.command == "delete":
        ledger.delete_recurring(args.id)
        print(f"Recurring expense {args.id} deleted.")


def handle_summary(args: argparse.Namespace, ledger: LedgerService) -> None:
    fiscal_year = args.year if args.year is not None else current_fiscal_period()[0]
    summary = ledger.year_summary(fiscal_year)
    print(f"{fiscal_year}年度")
    print(
        f"Income: {format_yen(summary.total_income)} | "
        f"Expense: {format_yen(summary.total_expense)} | "
        f"Balance: {format_yen(summary.balance)}"
    )
    for label, month in zip(MONTH_LABELS, summary.per_month):
        print(
            f"{label:>4} {format_signed_yen(month.balance):>14}  "
            f"収入 {format_yen(month.income)}  支出 {format_yen(month.expense)}"
        )


def handle_month(args: argparse.Namespace, ledger: LedgerService) -> None:
    default_year, default_month = current_fiscal_period()
    fiscal_year = args.year if args.year is not None else default_year
    month = args.month if args.month is not None else default_month

    effective = ledger.entries_for_month(fiscal_year, month)
    summary = summarize_month(effective, calendar_year_of(fiscal_year, month), month)
    incomes, expenses = split_by_type(effective)

    print(f"{summary.calendar_year}年{month}月")
    print(
        f"Balance: {format_yen(summary.balance)} "
        f"(+{format_yen(summary.income)} / -{format_yen(summary.expense)})"
    )
    for heading, items in (("収入", incomes), ("支出", expenses)):
        print(heading)
        if not items:
            print("  データなし")
        for entry in items:
            print(_format_effective(entry))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fiscal-year budget tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=None,
        type=Path,
        help="Directory to store JSON data (default: $BUDGET_DATA_DIR or ./data)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="entity", required=True)

    entry_parser = subparsers.add_parser("entry", help="Manage income and expense entries")
    entry_sub = entry_parser.add_subparsers(dest="command", required=True)

    entry_add = entry_sub.add_parser("add", help="Add a new entry")
    entry_add.add_argument("type", choices=["income", "expense"])
    entry_add.add_argument("amount", type=_parse_amount)
    entry_add.add_argument("date", type=_parse_date)
    entry_add.add_argument("--category")
    entry_add.add_argument("--name")

    entry_sub.add_parser("list", help="List stored entries")

    entry_edit = entry_sub.add_parser("edit", help="Edit an existing entry")
    entry_edit.add_argument("id")
    entry_edit.add_argument("--type", choices=["income", "expense"])
    entry_edit.add_argument("--amount", type=_parse_amount)
    entry_edit.add_argument("--date", type=_parse_date)
    entry_edit.add_argument("--category")
    entry_edit.add_argument("--name")

    entry_delete = entry_sub.add_parser("delete", help="Delete an entry")
    entry_delete.add_argument("id")

    recurring_parser = subparsers.add_parser("recurring", help="Manage recurring fixed expenses")
    recurring_sub = recurring_parser.add_subparsers(dest="command", required=True)

    recurring_add = recurring_sub.add_parser("add", help="Add a recurring expense")
    recurring_add.add_argument("name")
    recurring_add.add_argument("amount", type=_parse_amount)
    recurring_add.add_argument("start_year", type=int)
    recurring_add.add_argument("start_month", type=_parse_month)
    recurring_add.add_argument("--end-year", type=int)
    recurring_add.add_argument("--end-month", type=_parse_month)

    recurring_sub.add_parser("list", help="List recurring expenses")

    recurring_delete = recurring_sub.add_parser("delete", help="Delete a recurring expense")
    recurring_delete.add_argument("id")

    summary_parser = subparsers.add_parser("summary", help="Show the fiscal year summary")
    summary_parser.add_argument("--year", type=int, help="Fiscal year (default: current)")

    month_parser = subparsers.add_parser("month", help="Show one month in detail")
    month_parser.add_argument("--year", type=int, help="Fiscal year (default: current)")
    month_parser.add_argument("--month", type=_parse_month, help="Calendar month (default: current)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ledger = _load_service(args.data_dir or get_settings().data_dir)

    try:
        if args.entity == "entry":
            handle_entry(args, ledger)
        elif args.entity == "recurring":
            handle_recurring(args, ledger)
        elif args.entity == "summary":
            handle_summary(args, ledger)
        elif args.entity == "month":
            handle_month(args, ledger)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
