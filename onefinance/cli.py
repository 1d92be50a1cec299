"""
Command-line entry point for OneFinance.

This module handles configuration loading, logging setup and the
`onefinance` subcommands.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from onefinance.config import (
    DEFAULT_RECENT_LIMIT,
    EXPORT_FORMATS,
    LOG_FILE,
    LOG_FORMAT,
    VERSION,
    ensure_directories,
    get_log_dir,
    get_log_level,
)
from onefinance.db import LedgerDatabase, Transaction
from onefinance.services import ExportFormat, ExportService, RecapService

logger = logging.getLogger(__name__)


def get_log_path(db_path: Optional[str] = None) -> Path:
    """The log file sits beside an explicit --db file, else in the data dir."""
    if db_path:
        return Path(db_path).expanduser().parent / LOG_FILE
    return get_log_dir() / LOG_FILE


def configure_logging(log_path: Path):
    """
    Send log records to the log file, and warnings to stderr.

    Stdout is left to the command output.
    """
    ensure_directories()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.WARNING)
    logging.basicConfig(
        level=get_log_level(),
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_path),
            console,
        ],
    )


def _format_transaction(t: Transaction) -> str:
    sign = "+" if t.signed_amount > 0 else "-"
    category = t.category_name or "Uncategorized"
    account = f" [{t.account_name}]" if t.account_name else ""
    return (
        f"{t.date.isoformat()}  {sign}{t.amount:>12,.2f}  "
        f"{t.title} ({category}){account}"
    )


def _print_transactions(transactions: list[Transaction]):
    if not transactions:
        print("No transactions.")
        return
    for t in transactions:
        print(_format_transaction(t))


# =============================================================================
# Commands
# =============================================================================


def cmd_init(db: LedgerDatabase, args: argparse.Namespace) -> int:
    db.initialize()
    print(f"Ledger database ready at {db.db_path}")
    print(f"  Categories: {len(db.list_categories())}")
    print(f"  Accounts:   {len(db.get_accounts())}")
    return 0


def cmd_tree(db: LedgerDatabase, args: argparse.Namespace) -> int:
    tree = db.list_ledger_tree()
    if not tree:
        print("Ledger is empty.")
        return 0
    for node in tree:
        print(node.year)
        for period in node.periods:
            print(f"  {period.month:02d}  {period.label}")
    return 0


def cmd_summary(db: LedgerDatabase, args: argparse.Namespace) -> int:
    summary = db.get_summary()
    print(f"Income:  {summary.income_total:>15,.2f}")
    print(f"Expense: {summary.expense_total:>15,.2f}")
    print(f"Balance: {summary.balance:>15,.2f}")
    return 0


def cmd_recent(db: LedgerDatabase, args: argparse.Namespace) -> int:
    _print_transactions(db.list_recent_transactions(args.limit))
    return 0


def cmd_month(db: LedgerDatabase, args: argparse.Namespace) -> int:
    transactions = db.get_transactions_by_month(args.year, args.month)
    _print_transactions(transactions)

    period = db.find_period(args.year, args.month)
    if period is not None:
        summary = db.get_period_summary(period.id)
        print()
        print(
            f"{period.label}: income {summary.income_total:,.2f}, "
            f"expense {summary.expense_total:,.2f}, net {summary.balance:,.2f}"
        )
    return 0


def cmd_create_year(db: LedgerDatabase, args: argparse.Namespace) -> int:
    db.create_year(args.year)
    print(f"Created ledger year {args.year} with all twelve months")
    return 0


def cmd_export(db: LedgerDatabase, args: argparse.Namespace) -> int:
    service = ExportService(db)
    export_format = ExportFormat(args.format)
    buffer = service.export(export_format, year=args.year, month=args.month)

    output = Path(args.output) if args.output else Path(
        service.get_filename(export_format, args.year, args.month)
    )
    output.write_bytes(buffer.getvalue())
    logger.info(f"Exported ledger to {output}")
    print(f"Exported to {output}")
    return 0


def cmd_recap(db: LedgerDatabase, args: argparse.Namespace) -> int:
    service = RecapService(db)
    recap = service.generate_recap(args.year)
    print(service.format_recap_text(recap))

    if args.chart:
        chart = service.generate_monthly_chart(recap)
        Path(args.chart).write_bytes(chart.getvalue())
        print(f"\nChart saved to {args.chart}")
    return 0


COMMANDS = {
    "init": cmd_init,
    "tree": cmd_tree,
    "summary": cmd_summary,
    "recent": cmd_recent,
    "month": cmd_month,
    "create-year": cmd_create_year,
    "export": cmd_export,
    "recap": cmd_recap,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="onefinance", description="Personal finance ledger"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="Path to the ledger database (defaults to the per-user data directory)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the database and default data")
    sub.add_parser("tree", help="Show ledger years and months")
    sub.add_parser("summary", help="Show income and expense totals")

    recent = sub.add_parser("recent", help="Show the most recent transactions")
    recent.add_argument(
        "-n", "--limit", type=int, default=DEFAULT_RECENT_LIMIT, help="Rows to show"
    )

    month = sub.add_parser("month", help="Show transactions of one month")
    month.add_argument("year", type=int)
    month.add_argument("month", type=int)

    create_year = sub.add_parser("create-year", help="Create a year with twelve months")
    create_year.add_argument("year", type=int)

    export = sub.add_parser("export", help="Export transactions to a file")
    export.add_argument("--year", type=int, default=None)
    export.add_argument("--month", type=int, default=None)
    export.add_argument("--format", choices=EXPORT_FORMATS, default="csv")
    export.add_argument(
        "-o", "--output", type=str, default=None, help="Output file path"
    )

    recap = sub.add_parser("recap", help="Show monthly totals for a year")
    recap.add_argument("year", type=int)
    recap.add_argument(
        "--chart", type=str, default=None, help="Write a PNG chart to this path"
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command-line interface."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    log_path = get_log_path(args.db)
    configure_logging(log_path)

    try:
        db = LedgerDatabase(args.db)
        return COMMANDS[args.command](db, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        logger.critical(f"Critical error running '{args.command}': {e}", exc_info=True)
        print(f"\nCritical error: {e}", file=sys.stderr)
        print(f"Check {log_path} for more details.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
