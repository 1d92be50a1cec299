"""
Periods repository module for the year -> month ledger hierarchy.

Handles all period-related database operations including:
- Resolving (and auto-creating) the period for a year/month
- Creating a year with all twelve months
- The ledger tree used for navigation
- Deleting a year with everything under it
"""

import logging
import sqlite3
from typing import TYPE_CHECKING, Optional

from onefinance.config import MONTHS_PER_YEAR

from .base import BaseRepository, utc_now
from .models import LedgerPeriod, LedgerYear, LedgerYearNode
from .validators import require_id, validate_month, validate_year

if TYPE_CHECKING:
    from .accounts import AccountRepository

logger = logging.getLogger(__name__)


class PeriodRepository(BaseRepository):
    """
    Repository for ledger years and periods.

    Periods are created lazily: asking for a (year, month) that does not
    exist yet creates the year marker and that month.
    """

    def __init__(
        self,
        db_path=None,
        init_schema: bool = False,
        seed: bool = True,
        account_repo: Optional["AccountRepository"] = None,
    ):
        """
        Initialize the period repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema
            seed: Whether bootstrapping inserts the default rows
            account_repo: Account repository used to keep balances
                consistent when a year is deleted
        """
        super().__init__(db_path, init_schema=init_schema, seed=seed)
        self._account_repo = account_repo

    def set_account_repo(self, account_repo: "AccountRepository"):
        """Set the account repository reference."""
        self._account_repo = account_repo

    # =========================================================================
    # Create Operations
    # =========================================================================

    @staticmethod
    def _ensure_year(conn: sqlite3.Connection, year: int):
        conn.execute(
            "INSERT OR IGNORE INTO ledger_years (year, created_at) VALUES (?, ?)",
            (year, utc_now().isoformat()),
        )

    def _ensure_period(
        self, conn: sqlite3.Connection, year: int, month: int
    ) -> LedgerPeriod:
        """Get or create a period (and its year) on an open connection."""
        self._ensure_year(conn, year)
        cursor = conn.execute(
            """
            INSERT OR IGNORE INTO ledger_periods (year, month, created_at)
            VALUES (?, ?, ?)
            """,
            (year, month, utc_now().isoformat()),
        )
        if cursor.rowcount:
            logger.info(f"Created ledger period {year}-{month:02d}")

        row = conn.execute(
            """
            SELECT id, year, month, created_at FROM ledger_periods
            WHERE year = ? AND month = ?
            """,
            (year, month),
        ).fetchone()
        if not row:
            raise RuntimeError(f"Failed to create ledger period {year}-{month:02d}")
        return LedgerPeriod.from_row(row)

    def resolve_period(self, year: int, month: int) -> LedgerPeriod:
        """
        Get the period for a year/month, creating it (and the year) if absent.

        Calling this repeatedly for the same year/month returns the same
        period ID.

        Raises:
            ValueError: If year or month is out of range
        """
        validate_year(year)
        validate_month(month)

        try:
            with self._get_connection() as conn:
                return self._ensure_period(conn, year, month)
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error resolving period {year}-{month}: {e}", exc_info=True
            )
            raise

    def create_month(self, year: int, month: int) -> LedgerPeriod:
        """Explicitly create a (possibly empty) month; same as resolve_period."""
        return self.resolve_period(year, month)

    def create_year(self, year: int) -> LedgerYear:
        """
        Create a year together with all twelve of its months.

        Existing months are kept as they are; the whole step runs in one
        transaction so a half-created year is never visible.

        Raises:
            ValueError: If the year is out of range
        """
        validate_year(year)

        try:
            with self._get_connection() as conn:
                self._ensure_year(conn, year)
                created_at = utc_now().isoformat()
                cursor = conn.executemany(
                    """
                    INSERT OR IGNORE INTO ledger_periods (year, month, created_at)
                    VALUES (?, ?, ?)
                    """,
                    [
                        (year, month, created_at)
                        for month in range(1, MONTHS_PER_YEAR + 1)
                    ],
                )
                logger.info(
                    f"Created ledger year {year} ({cursor.rowcount} new months)"
                )
                row = conn.execute(
                    "SELECT year, created_at FROM ledger_years WHERE year = ?",
                    (year,),
                ).fetchone()
                return LedgerYear.from_row(row)
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error creating year {year}: {e}", exc_info=True)
            raise

    # =========================================================================
    # Read Operations
    # =========================================================================

    def find_period(self, year: int, month: int) -> Optional[LedgerPeriod]:
        """Look up a period without creating it."""
        validate_year(year)
        validate_month(month)

        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    """
                    SELECT id, year, month, created_at FROM ledger_periods
                    WHERE year = ? AND month = ?
                    """,
                    (year, month),
                ).fetchone()
                return LedgerPeriod.from_row(row) if row else None
        except Exception as e:
            logger.error(f"Error finding period {year}-{month}: {e}", exc_info=True)
            raise

    def get_period(self, period_id: int) -> Optional[LedgerPeriod]:
        """Get a period by ID."""
        require_id("period id", period_id)

        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    """
                    SELECT id, year, month, created_at FROM ledger_periods
                    WHERE id = ?
                    """,
                    (period_id,),
                ).fetchone()
                return LedgerPeriod.from_row(row) if row else None
        except Exception as e:
            logger.error(f"Error getting period {period_id}: {e}", exc_info=True)
            raise

    def list_years(self) -> list[LedgerYear]:
        """Get all ledger years, newest first."""
        try:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "SELECT year, created_at FROM ledger_years ORDER BY year DESC"
                )
                return [LedgerYear.from_row(row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(f"Error listing ledger years: {e}", exc_info=True)
            raise

    def list_tree(self) -> list[LedgerYearNode]:
        """
        Get the ledger tree: years newest first, each with its months in order.

        Years without any period are included with an empty month list.
        """
        try:
            with self._get_connection() as conn:
                years = conn.execute(
                    "SELECT year FROM ledger_years ORDER BY year DESC"
                ).fetchall()
                periods = conn.execute(
                    """
                    SELECT id, year, month, created_at FROM ledger_periods
                    ORDER BY year DESC, month ASC
                    """
                ).fetchall()

            periods_by_year: dict[int, list[LedgerPeriod]] = {}
            for row in periods:
                period = LedgerPeriod.from_row(row)
                periods_by_year.setdefault(period.year, []).append(period)

            tree = [
                LedgerYearNode(year=row["year"], periods=periods_by_year.get(row["year"], []))
                for row in years
            ]
            logger.debug(f"Built ledger tree with {len(tree)} years")
            return tree
        except Exception as e:
            logger.error(f"Error building ledger tree: {e}", exc_info=True)
            raise

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def delete_year(self, year: int) -> int:
        """
        Delete a year, its periods and every transaction in them.

        This is destructive and not recoverable; callers confirm with the
        user first. Account balances are moved back by the net effect of
        the removed transactions before they cascade away.

        Returns:
            Number of years deleted (0 if the year does not exist)
        """
        validate_year(year)

        try:
            with self._get_connection() as conn:
                if self._account_repo is not None:
                    cursor = conn.execute(
                        """
                        SELECT t.account_id,
                               SUM(CASE WHEN t.type = 'income'
                                        THEN t.amount ELSE -t.amount END) AS net
                        FROM transactions t
                        JOIN ledger_periods p ON p.id = t.ledger_period_id
                        WHERE p.year = ? AND t.account_id IS NOT NULL
                        GROUP BY t.account_id
                        """,
                        (year,),
                    )
                    for row in cursor.fetchall():
                        self._account_repo._apply_delta(conn, row["account_id"], -row["net"])

                removed = conn.execute(
                    """
                    SELECT COUNT(*) FROM transactions t
                    JOIN ledger_periods p ON p.id = t.ledger_period_id
                    WHERE p.year = ?
                    """,
                    (year,),
                ).fetchone()[0]
                cursor = conn.execute("DELETE FROM ledger_years WHERE year = ?", (year,))

                if cursor.rowcount:
                    logger.info(
                        f"Deleted ledger year {year} with {removed} transaction(s)"
                    )
                return cursor.rowcount
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error deleting year {year}: {e}", exc_info=True)
            raise
