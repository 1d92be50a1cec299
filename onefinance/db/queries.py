"""
Queries repository module for ledger reads and aggregates.

Handles all read-only query operations including:
- Transactions per period, per month and per date range
- The global "recent transactions" feed
- Income/expense summaries and monthly totals
- Categories filtered by type
"""

import logging
from datetime import date
from typing import Optional

from onefinance.config import DEFAULT_RECENT_LIMIT, MONTHS_PER_YEAR
from onefinance.models import TransactionType

from .base import BaseRepository
from .models import Category, LedgerPeriod, LedgerSummary, MonthlyTotal, Transaction
from .validators import (
    parse_date,
    require_id,
    validate_limit,
    validate_month,
    validate_transaction_type,
    validate_year,
)

logger = logging.getLogger(__name__)

# Transactions joined with their display fields
TRANSACTION_DETAILS_SELECT = """
    SELECT
        t.id,
        t.ledger_period_id,
        t.title,
        t.amount,
        t.date,
        t.type,
        t.notes,
        t.category_id,
        t.account_id,
        t.created_at,
        t.updated_at,
        c.name AS category_name,
        a.name AS account_name,
        p.year,
        p.month
    FROM transactions t
    JOIN ledger_periods p ON p.id = t.ledger_period_id
    LEFT JOIN categories c ON c.id = t.category_id
    LEFT JOIN accounts a ON a.id = t.account_id
"""

# Newest first; same-day entries most recently inserted first
TRANSACTION_ORDER_COLUMNS = "t.date DESC, t.id DESC"
TRANSACTION_ORDER = f"ORDER BY {TRANSACTION_ORDER_COLUMNS}"

SUMMARY_SELECT = """
    SELECT
        COALESCE(SUM(CASE WHEN type = 'income' THEN amount END), 0) AS income_total,
        COALESCE(SUM(CASE WHEN type = 'expense' THEN amount END), 0) AS expense_total
    FROM transactions
"""


class QueryRepository(BaseRepository):
    """
    Repository for display-ready transaction lists and aggregates.

    Provides read-only query operations; nothing here writes.
    """

    def __init__(self, db_path=None, init_schema: bool = False, seed: bool = True):
        """
        Initialize the query repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema
            seed: Whether bootstrapping inserts the default rows
        """
        super().__init__(db_path, init_schema=init_schema, seed=seed)

    def _select_transactions(
        self, where: str = "", params: tuple = (), limit: Optional[int] = None
    ) -> list[Transaction]:
        sql = f"{TRANSACTION_DETAILS_SELECT} {where} {TRANSACTION_ORDER}"
        if limit is not None:
            sql += " LIMIT ?"
            params = params + (limit,)

        with self._get_connection() as conn:
            cursor = conn.execute(sql, params)
            return [Transaction.from_row(row) for row in cursor.fetchall()]

    # =========================================================================
    # Transaction Lists
    # =========================================================================

    def get_transactions_with_details(self) -> list[Transaction]:
        """Get every transaction with category/account names resolved."""
        try:
            transactions = self._select_transactions()
            logger.debug(f"Retrieved {len(transactions)} transactions")
            return transactions
        except Exception as e:
            logger.error(f"Error listing transactions: {e}", exc_info=True)
            raise

    def list_by_period(self, period_id: int) -> list[Transaction]:
        """
        Get the transactions of one period, newest first.

        Returns:
            List of transactions (empty if the period does not exist)
        """
        require_id("period id", period_id)

        try:
            transactions = self._select_transactions(
                "WHERE t.ledger_period_id = ?", (period_id,)
            )
            logger.debug(
                f"Retrieved {len(transactions)} transactions for period {period_id}"
            )
            return transactions
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error listing transactions for period {period_id}: {e}",
                exc_info=True,
            )
            raise

    def list_by_date_range(self, start_date: date, end_date: date) -> list[Transaction]:
        """
        Get transactions dated in [start_date, end_date), newest first.

        Args:
            start_date: First day included
            end_date: First day excluded

        Raises:
            ValueError: If the dates are invalid or end_date <= start_date
        """
        start_date = parse_date(start_date)
        end_date = parse_date(end_date)
        if end_date <= start_date:
            raise ValueError(
                f"end_date ({end_date}) must be after start_date ({start_date})"
            )
        return self._list_range(start_date, end_date)

    def _list_range(self, start_date: date, end_date: date) -> list[Transaction]:
        try:
            return self._select_transactions(
                "WHERE t.date >= ? AND t.date < ?",
                (start_date.isoformat(), end_date.isoformat()),
            )
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error listing transactions {start_date}..{end_date}: {e}",
                exc_info=True,
            )
            raise

    def list_by_month(self, year: int, month: int) -> list[Transaction]:
        """
        Get transactions dated in a calendar month, newest first.

        Uses the date range [first of month, first of next month), which
        matches list_by_period for the period of that month.
        """
        validate_year(year)
        validate_month(month)
        period = LedgerPeriod(id=None, year=year, month=month)
        return self._list_range(period.start_date, period.end_date)

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Transaction]:
        """
        Get the most recent transactions across all periods.

        Raises:
            ValueError: If limit is outside 1-100
        """
        validate_limit(limit)

        try:
            return self._select_transactions(limit=limit)
        except Exception as e:
            logger.error(f"Error listing recent transactions: {e}", exc_info=True)
            raise

    # =========================================================================
    # Aggregates
    # =========================================================================

    def summary(self) -> LedgerSummary:
        """
        Get income and expense totals across ALL transactions.

        Returns zeros (never None) on an empty ledger.
        """
        try:
            with self._get_connection() as conn:
                row = conn.execute(SUMMARY_SELECT).fetchone()
            return self._to_summary(row)
        except Exception as e:
            logger.error(f"Error computing summary: {e}", exc_info=True)
            raise

    def period_summary(self, period_id: int) -> LedgerSummary:
        """Get income and expense totals for a single period."""
        require_id("period id", period_id)

        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    f"{SUMMARY_SELECT} WHERE ledger_period_id = ?", (period_id,)
                ).fetchone()
            return self._to_summary(row)
        except Exception as e:
            logger.error(
                f"Error computing summary for period {period_id}: {e}", exc_info=True
            )
            raise

    @staticmethod
    def _to_summary(row) -> LedgerSummary:
        income_total = float(row["income_total"] or 0)
        expense_total = float(row["expense_total"] or 0)
        return LedgerSummary(
            income_total=income_total,
            expense_total=expense_total,
            balance=income_total - expense_total,
        )

    def monthly_totals(self, year: int) -> list[MonthlyTotal]:
        """
        Get income/expense totals for each month of a year.

        Always returns twelve entries; months without transactions are zero.
        """
        validate_year(year)

        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT p.month, t.type, SUM(t.amount) AS total
                    FROM transactions t
                    JOIN ledger_periods p ON p.id = t.ledger_period_id
                    WHERE p.year = ?
                    GROUP BY p.month, t.type
                    """,
                    (year,),
                )
                rows = cursor.fetchall()

            totals = {
                month: MonthlyTotal(year=year, month=month)
                for month in range(1, MONTHS_PER_YEAR + 1)
            }
            for row in rows:
                if row["type"] == TransactionType.INCOME.value:
                    totals[row["month"]].income = row["total"] or 0.0
                else:
                    totals[row["month"]].expense = row["total"] or 0.0

            return list(totals.values())
        except Exception as e:
            logger.error(f"Error computing monthly totals for {year}: {e}", exc_info=True)
            raise

    # =========================================================================
    # Categories
    # =========================================================================

    def list_categories_by_type(self, category_type: TransactionType) -> list[Category]:
        """Get categories with the given income/expense affinity, by name."""
        category_type = validate_transaction_type(category_type)

        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    """
                    SELECT id, name, color_code, icon, type, is_system,
                           created_at, updated_at
                    FROM categories
                    WHERE type = ?
                    ORDER BY name ASC
                    """,
                    (category_type.value,),
                )
                return [Category.from_row(row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(
                f"Error listing {category_type.value} categories: {e}", exc_info=True
            )
            raise
