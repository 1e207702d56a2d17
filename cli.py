# cli.py
import argparse
import sys
from datetime import date

import matplotlib.pyplot as plt

from analysis import (
    current_budget_status, filter_by_date, filter_by_search_term, month_total,
    sort_newest_first, today_total, category_breakdown, txs_to_df,
)
from ledger import Ledger
from logging_setup import configure_logging
from models import CATEGORIES, DEFAULT_CATEGORY, TransactionDraft, display_category
from storage import STORAGE_PATH, JsonFileStorage, write_transactions_csv
from validation import InvalidBudgetError, parse_budget, validate_transaction_form
from viz import plot_category_pie, plot_monthly_totals, plot_time_series


def format_transaction(t) -> str:
    return f"{t.id:>14}  {t.date}  {display_category(t.category):<14}  {t.amount:>10.2f}  {t.description}"


def cmd_add(ledger, args):
    errors = validate_transaction_form(args.description, args.amount, args.category)
    if errors:
        for field, message in errors.items():
            print(f"{field}: {message}", file=sys.stderr)
        return 2
    draft = TransactionDraft(description=args.description.strip(), amount=float(args.amount), category=args.category)
    txs = ledger.add(draft)
    print(f"Saved: {format_transaction(txs[-1])}")
    return 0


def cmd_delete(ledger, args):
    match = [t for t in ledger.transactions if t.id == args.id]
    if not match:
        print(f"No transaction with id {args.id}.", file=sys.stderr)
        return 1
    if not args.yes:
        answer = input(f"Delete '{match[0].description}'? This action cannot be undone. [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            print("Cancelled.")
            return 0
    ledger.delete(args.id)
    print(f"Deleted transaction {args.id}.")
    return 0


def cmd_list(ledger, args):
    txs = list(ledger.transactions)
    if args.date:
        result = filter_by_date(txs, args.date)
        txs = result.transactions
        print(f"{result.count} transaction(s) on {args.date}, total {result.total:.2f}")
    txs = sort_newest_first(filter_by_search_term(txs, args.search))
    if args.limit is not None:
        txs = txs[:args.limit]
    if not txs:
        print("No transactions found.")
        return 0
    for t in txs:
        print(format_transaction(t))
    return 0


def cmd_summary(ledger, args):
    now = date.today()
    txs = ledger.transactions
    today = today_total(txs, now.isoformat())
    print(f"Today: {today.total:.2f} ({today.count} transaction(s))")

    month = month_total(txs, now.year, now.month)
    print(f"{now.strftime('%B %Y')}: {month.total:.2f}")
    for category, amount in month.top_categories:
        print(f"  {display_category(category):<14} {amount:>10.2f}")

    budget = ledger.budget
    if budget is not None:
        status = current_budget_status(txs, budget, now)
        print(f"Budget: {status.budget:.2f}  spent: {status.spent:.2f}  remaining: {status.remaining:.2f}"
              f"  ({status.percent_used:.0f}% used, {status.severity})")
    return 0


def cmd_budget(ledger, args):
    if args.value is None:
        budget = ledger.budget
        print("No monthly budget set." if budget is None else f"Monthly budget: {budget:.2f}")
        return 0
    try:
        value = parse_budget(args.value)
    except InvalidBudgetError as e:
        print(str(e), file=sys.stderr)
        return 2
    ledger.set_budget(value)
    print(f"Monthly budget set to {value:.2f}")
    return 0


def cmd_chart(ledger, args):
    if args.kind == "pie":
        breakdown = category_breakdown(ledger.transactions)
        if not breakdown:
            print("No expense data to display.")
            return 0
        plot_category_pie(breakdown)
    elif args.kind == "month":
        plot_monthly_totals(txs_to_df(ledger.transactions))
    else:
        plot_time_series(txs_to_df(ledger.transactions))
    if args.output:
        plt.savefig(args.output)
        print(f"Chart written to {args.output}")
    else:
        plt.show()
    return 0


def cmd_export(ledger, args):
    write_transactions_csv(args.path, sort_newest_first(ledger.transactions))
    print(f"Exported {len(ledger.transactions)} transaction(s) to {args.path}")
    return 0


COMMANDS = {
    "add": cmd_add,
    "delete": cmd_delete,
    "list": cmd_list,
    "summary": cmd_summary,
    "budget": cmd_budget,
    "chart": cmd_chart,
    "export": cmd_export,
}


def build_parser():
    p = argparse.ArgumentParser("expense-tracker")
    p.add_argument("--storage", default=STORAGE_PATH, help="Path of the JSON storage file.")
    p.add_argument("--log-level", default=None, help="Logging level, e.g. DEBUG or INFO.")
    sub = p.add_subparsers(dest="cmd")

    a = sub.add_parser("add", help="Record an expense dated today.")
    a.add_argument("description", help="What the money was spent on.")
    a.add_argument("amount", help="Amount spent (positive number).")
    a.add_argument("--category", default=DEFAULT_CATEGORY, choices=CATEGORIES)

    d = sub.add_parser("delete", help="Delete a transaction by id.")
    d.add_argument("id", type=int)
    d.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")

    ls = sub.add_parser("list", help="List transactions, newest first.")
    ls.add_argument("--search", default="", help="Match description or category (case-insensitive).")
    ls.add_argument("--date", default=None, help="Only transactions on this YYYY-MM-DD date.")
    ls.add_argument("--limit", type=int, default=None)

    sub.add_parser("summary", help="Today's total, this month's total and budget status.")

    b = sub.add_parser("budget", help="Show or set the monthly budget.")
    b.add_argument("value", nargs="?", default=None)

    c = sub.add_parser("chart", help="Draw a chart of the ledger.")
    c.add_argument("--kind", choices=["pie", "time", "month"], default="pie")
    c.add_argument("--output", default=None, help="Write the chart to this file instead of showing it.")

    e = sub.add_parser("export", help="Export all transactions to CSV.")
    e.add_argument("path")
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    handler = COMMANDS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return 1
    ledger = Ledger(JsonFileStorage(args.storage))
    return handler(ledger, args)


if __name__ == "__main__":
    sys.exit(main())
