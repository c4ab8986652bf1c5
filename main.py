import argparse
import os
import sys

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from database.budget_dao import BudgetDAO

from services.transaction_service import TransactionService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.report_service import ReportService
from services.chart_service import ChartService
from services import recurrence_engine

from models.recurrence_rule import Frequency, RecurrenceRule
from models.transaction import Transaction
from utils.app_config import get_db_path, get_log_level, set_db_path
from utils.constants import APP_NAME, DEFAULT_CURRENCY_SYMBOL, RECURRENCE_PRESETS
from utils.currency import format_currency, format_signed, parse_amount
from utils.date_helpers import current_month_str, friendly_month, today_str
from utils.logger import init_logging


class App:
    """Wires the store, DAOs and services together for one CLI invocation."""

    def __init__(self, db_path: str):
        self.db = DatabaseManager(db_path)
        self.db.initialize()

        tx_dao = TransactionDAO(self.db)
        category_dao = CategoryDAO(self.db)
        budget_dao = BudgetDAO(self.db)

        self.categories = CategoryService(category_dao)
        self.transactions = TransactionService(tx_dao, self.categories)
        self.budgets = BudgetService(budget_dao, tx_dao, category_dao)
        self.reports = ReportService(tx_dao, self.budgets)
        self.charts = ChartService(self.reports)
        self.symbol = self.db.get_setting("currency_symbol", DEFAULT_CURRENCY_SYMBOL)

    def close(self):
        self.db.close()

    def category_id(self, name: str | None) -> int | None:
        if not name:
            return None
        cat = self.categories.get_by_name(name)
        if cat is None:
            raise ValueError(f"Unknown category: {name}")
        return cat.id

    def money(self, amount: float) -> str:
        return format_signed(amount, self.symbol)

    def describe(self, tx: Transaction) -> str:
        line = f"#{tx.id:<5} {tx.date}  {self.money(tx.amount):>12}  {tx.category_name or '-':<14} {tx.note}"
        if tx.is_recurring and tx.recurrence:
            line += f"  [{tx.recurrence.describe()}]"
        return line.rstrip()


# ── Argument helpers ──────────────────────────────────────────────────────────

def _add_rule_args(p: argparse.ArgumentParser):
    p.add_argument("--recur", choices=RECURRENCE_PRESETS,
                   help="Recurrence preset; 'custom' uses --frequency/--interval")
    p.add_argument("--frequency", choices=[f.value for f in Frequency])
    p.add_argument("--interval", type=int)
    p.add_argument("--end-date", help="Last possible occurrence (YYYY-MM-DD)")
    p.add_argument("--default-end", action="store_true",
                   help="Stop at the suggested end date for this rule")


def _rule_from_args(args, start: str) -> RecurrenceRule | None:
    if not args.recur:
        if args.frequency:
            args.recur = "custom"
        else:
            return None
    rule = RecurrenceRule.from_preset(args.recur, args.frequency, args.interval or 1, args.end_date)
    if args.default_end and not rule.end_date:
        rule = RecurrenceRule(rule.frequency, rule.interval,
                              recurrence_engine.default_end_date(start, rule))
    return rule


def _edit_rule_from_args(args, current: Transaction, start: str) -> RecurrenceRule | None:
    """Rule flags on edit adjust the row's own rule; whatever is not given keeps
    its current value. None means the rule is left alone."""
    base = current.recurrence
    if base is None:
        return _rule_from_args(args, start)
    if not (args.recur or args.frequency or args.interval or args.end_date or args.default_end):
        return None
    if args.recur in (None, "custom"):
        args.frequency = args.frequency or base.frequency.value
        if args.interval is None:
            args.interval = base.interval
    if args.end_date is None and not args.default_end:
        args.end_date = base.end_date
    return _rule_from_args(args, start)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spenderplus", description=f"{APP_NAME} personal finance tracker")
    parser.add_argument("--db", help="Path to the SQLite database (default from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add", help="Record a transaction")
    p.add_argument("amount", help="e.g. -54.23 for an expense, 200 for income")
    p.add_argument("--date", default=None)
    p.add_argument("--note", default="")
    p.add_argument("--category")
    _add_rule_args(p)

    p = sub.add_parser("edit", help="Edit a transaction")
    p.add_argument("id", type=int)
    p.add_argument("--amount")
    p.add_argument("--date")
    p.add_argument("--note")
    p.add_argument("--category")
    p.add_argument("--apply-to-future", action="store_true",
                   help="Regenerate later instances of the series from this one")
    _add_rule_args(p)

    p = sub.add_parser("delete", help="Delete a transaction")
    p.add_argument("id", type=int)

    p = sub.add_parser("duplicate", help="Copy a transaction")
    p.add_argument("id", type=int)

    p = sub.add_parser("list", help="List a month's transactions")
    p.add_argument("--month", default=None)
    p.add_argument("--category", action="append", help="Filter; repeat for several")

    p = sub.add_parser("series", help="Show every instance of a transaction's series")
    p.add_argument("id", type=int)

    sub.add_parser("categories", help="List categories")

    p = sub.add_parser("budget", help="Show or set budgets")
    bsub = p.add_subparsers(dest="budget_command", required=True)
    bp = bsub.add_parser("show")
    bp.add_argument("--month", default=None)
    bp = bsub.add_parser("set")
    bp.add_argument("amount", type=float)
    bp.add_argument("--category")
    bp.add_argument("--month", default=None)
    bp = bsub.add_parser("sync", help="Mirror the month's income as the overall budget")
    bp.add_argument("state", choices=["on", "off"])
    bp.add_argument("--month", default=None)
    bp = bsub.add_parser("copy", help="Copy category budgets from the previous month")
    bp.add_argument("--month", default=None)
    bp = bsub.add_parser("delete", help="Remove a category budget")
    bp.add_argument("--category", required=True)
    bp.add_argument("--month", default=None)

    p = sub.add_parser("db-path", help="Show or change the default database path")
    p.add_argument("path", nargs="?")
    p.add_argument("--reset", action="store_true", help="Go back to the default path")

    p = sub.add_parser("chart", help="Write a spent-vs-budget PNG")
    p.add_argument("--month", default=None)
    p.add_argument("--out", required=True)

    return parser


# ── Commands ─────────────────────────────────────────────────────────────────

def cmd_add(app: App, args) -> int:
    date = args.date or today_str()
    rule = _rule_from_args(args, date)
    tx, followers = app.transactions.create(
        amount=parse_amount(args.amount),
        date=date,
        note=args.note,
        category_id=app.category_id(args.category),
        rule=rule,
    )
    print(f"Added {app.describe(tx)}")
    if rule:
        print(f"Scheduled {followers} more ({rule.describe()})")
    return 0


def cmd_edit(app: App, args) -> int:
    current = app.transactions.require(args.id)
    date = args.date or current.date
    category_id = app.category_id(args.category) if args.category else current.category_id
    tx, deleted, created = app.transactions.update(
        args.id,
        amount=parse_amount(args.amount) if args.amount is not None else current.amount,
        date=date,
        note=args.note if args.note is not None else current.note,
        category_id=category_id,
        rule=_edit_rule_from_args(args, current, date),
        apply_to_future=args.apply_to_future,
    )
    print(f"Updated {app.describe(tx)}")
    if args.apply_to_future and tx.series_id:
        print(f"Series regenerated: {deleted} removed, {created} created")
    return 0


def cmd_delete(app: App, args) -> int:
    app.transactions.delete(args.id)
    print(f"Deleted #{args.id}")
    return 0


def cmd_duplicate(app: App, args) -> int:
    tx = app.transactions.duplicate(args.id)
    print(f"Added {app.describe(tx)}")
    return 0


def cmd_list(app: App, args) -> int:
    month = args.month or current_month_str()
    ids = [app.category_id(name) for name in args.category] if args.category else None
    txs = app.transactions.list_for_month(month, ids)
    totals = app.transactions.month_totals(month, ids)
    print(friendly_month(month))
    for tx in txs:
        print(app.describe(tx))
    print(f"Net {app.money(totals['net'])}, spent {format_currency(totals['expense'], app.symbol)}")
    return 0


def cmd_series(app: App, args) -> int:
    tx = app.transactions.require(args.id)
    if not tx.series_id:
        print(f"#{tx.id} is not part of a series")
        return 0
    for member in app.transactions.get_series(tx.series_id):
        print(app.describe(member))
    return 0


def cmd_categories(app: App, args) -> int:
    for cat in app.categories.get_all():
        print(f"{cat.name:<14} {cat.type:<8} {cat.color_hex}")
    return 0


def cmd_budget(app: App, args) -> int:
    month = args.month or current_month_str()
    if args.budget_command == "set":
        if args.category:
            app.budgets.set_category_budget(month, app.category_id(args.category), args.amount)
        else:
            app.budgets.set_overall(month, args.amount)
    elif args.budget_command == "sync":
        app.budgets.set_sync_with_income(month, args.state == "on")
    elif args.budget_command == "copy":
        count = app.budgets.copy_from_previous_month(month)
        print(f"Copied {count} category budgets into {month}")
    elif args.budget_command == "delete":
        app.budgets.delete_category_budget(month, app.category_id(args.category))

    summary = app.reports.get_summary(month)
    label = " (synced with income)" if summary["synced"] else ""
    print(f"{friendly_month(month)} budget {format_currency(summary['budget'], app.symbol)}{label}")
    print(
        f"Spent {format_currency(summary['expense'], app.symbol)} "
        f"({summary['percentage']:.0%}), remaining {app.money(summary['remaining'])}"
    )
    for b in app.budgets.get_budget_status(month):
        print(
            f"  {b.category_name:<14} {format_currency(b.spent_amount, app.symbol)} "
            f"of {format_currency(b.amount, app.symbol)}"
        )
    return 0


def cmd_chart(app: App, args) -> int:
    month = args.month or current_month_str()
    buf = app.charts.budget_chart(month, app.symbol)
    if buf is None:
        print(f"No spending or budgets for {friendly_month(month)}")
        return 0
    with open(args.out, "wb") as f:
        f.write(buf.getvalue())
    print(f"Wrote {args.out}")
    return 0


def cmd_db_path(args) -> int:
    if args.reset:
        set_db_path(None)
    elif args.path:
        set_db_path(args.path)
    print(get_db_path())
    return 0


COMMANDS = {
    "add": cmd_add,
    "edit": cmd_edit,
    "delete": cmd_delete,
    "duplicate": cmd_duplicate,
    "list": cmd_list,
    "series": cmd_series,
    "categories": cmd_categories,
    "budget": cmd_budget,
    "chart": cmd_chart,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(get_log_level())
    if args.command == "db-path":
        return cmd_db_path(args)

    app = App(args.db or get_db_path())
    try:
        return COMMANDS[args.command](app, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
