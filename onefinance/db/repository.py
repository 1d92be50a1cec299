"""
Ledger database facade.

Composes the per-kind repositories behind the single data-access contract
that UI layers call. Nothing here holds session state: the "current period"
is always passed in explicitly.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from onefinance.config import DEFAULT_RECENT_LIMIT
from onefinance.models import AccountType, TransactionType

from .accounts import AccountRepository
from .base import BaseRepository
from .categories import CategoryRepository
from .models import (
    Account,
    Category,
    LedgerPeriod,
    LedgerSummary,
    LedgerYear,
    LedgerYearNode,
    MonthlyTotal,
    Transaction,
)
from .periods import PeriodRepository
from .queries import QueryRepository
from .store import EntityKind, EntityRepository
from .transactions import TransactionRepository

logger = logging.getLogger(__name__)


class LedgerDatabase(BaseRepository):
    """
    Main entry point for ledger persistence.

    All sub-repositories share one database file. Schema creation and
    seeding happen lazily on first use, so callers never need to call
    `initialize()` themselves.
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        init_schema: bool = True,
        seed: bool = True,
    ):
        """
        Initialize the ledger database.

        Args:
            db_path: Path to the SQLite database file. Defaults to the
                per-user data directory
            init_schema: Whether to create the schema immediately
            seed: Whether to insert default categories and account into
                empty tables
        """
        super().__init__(db_path, init_schema=False, seed=seed)

        self.categories = CategoryRepository(self.db_path, seed=seed)
        self.accounts = AccountRepository(self.db_path, seed=seed)
        self.periods = PeriodRepository(
            self.db_path, seed=seed, account_repo=self.accounts
        )
        self.transactions = TransactionRepository(
            self.db_path,
            seed=seed,
            account_repo=self.accounts,
            period_repo=self.periods,
        )
        self.queries = QueryRepository(self.db_path, seed=seed)

        self._stores: dict[EntityKind, EntityRepository] = {
            EntityKind.CATEGORY: self.categories,
            EntityKind.ACCOUNT: self.accounts,
            EntityKind.TRANSACTION: self.transactions,
        }

        if init_schema:
            self.initialize()

    def _store(self, kind: Union[EntityKind, str]) -> EntityRepository:
        try:
            return self._stores[EntityKind(kind)]
        except ValueError:
            raise ValueError(f"Unknown entity kind: {kind!r}") from None

    # =========================================================================
    # Generic Entity Store
    # =========================================================================

    def get_all(self, kind: Union[EntityKind, str]) -> list[Any]:
        return self._store(kind).get_all()

    def get_by_id(self, kind: Union[EntityKind, str], entity_id: int) -> Optional[Any]:
        return self._store(kind).get_by_id(entity_id)

    def insert(self, kind: Union[EntityKind, str], entity: Any) -> int:
        return self._store(kind).insert(entity)

    def update(self, kind: Union[EntityKind, str], entity: Any) -> int:
        return self._store(kind).update(entity)

    def delete(self, kind: Union[EntityKind, str], entity: Any) -> int:
        return self._store(kind).delete(entity)

    # =========================================================================
    # Ledger Tree
    # =========================================================================

    def list_ledger_tree(self) -> list[LedgerYearNode]:
        return self.periods.list_tree()

    def create_year(self, year: int) -> LedgerYear:
        return self.periods.create_year(year)

    def create_month(self, year: int, month: int) -> LedgerPeriod:
        return self.periods.create_month(year, month)

    def resolve_period(self, year: int, month: int) -> LedgerPeriod:
        return self.periods.resolve_period(year, month)

    def find_period(self, year: int, month: int) -> Optional[LedgerPeriod]:
        return self.periods.find_period(year, month)

    def get_period(self, period_id: int) -> Optional[LedgerPeriod]:
        return self.periods.get_period(period_id)

    def list_years(self) -> list[LedgerYear]:
        return self.periods.list_years()

    def delete_year(self, year: int) -> int:
        """Delete a year with all its periods and transactions. Irreversible."""
        return self.periods.delete_year(year)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_transactions_with_details(self) -> list[Transaction]:
        return self.queries.get_transactions_with_details()

    def get_transactions_by_month(self, year: int, month: int) -> list[Transaction]:
        return self.queries.list_by_month(year, month)

    def list_transactions(self, period_id: int) -> list[Transaction]:
        return self.queries.list_by_period(period_id)

    def list_transactions_by_date_range(
        self, start_date: date, end_date: date
    ) -> list[Transaction]:
        return self.queries.list_by_date_range(start_date, end_date)

    def list_recent_transactions(
        self, limit: int = DEFAULT_RECENT_LIMIT
    ) -> list[Transaction]:
        return self.queries.list_recent(limit)

    def get_summary(self) -> LedgerSummary:
        return self.queries.summary()

    def get_period_summary(self, period_id: int) -> LedgerSummary:
        return self.queries.period_summary(period_id)

    def get_monthly_totals(self, year: int) -> list[MonthlyTotal]:
        return self.queries.monthly_totals(year)

    def get_categories_by_type(self, category_type: TransactionType) -> list[Category]:
        return self.queries.list_categories_by_type(category_type)

    # =========================================================================
    # Categories
    # =========================================================================

    def list_categories(self) -> list[Category]:
        return self.categories.list_categories()

    def create_category(
        self,
        name: str,
        color_code: Optional[str] = None,
        icon: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> Category:
        return self.categories.create_category(name, color_code, icon, type)

    def update_category(
        self,
        category_id: int,
        name: str,
        color_code: Optional[str] = None,
        icon: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> Optional[Category]:
        return self.categories.update_category(category_id, name, color_code, icon, type)

    def delete_category(self, category_id: int) -> int:
        return self.categories.delete_category(category_id)

    # =========================================================================
    # Accounts
    # =========================================================================

    def get_accounts(self) -> list[Account]:
        return self.accounts.list_accounts()

    def get_account(self, account_id: int) -> Optional[Account]:
        return self.accounts.get_account_by_id(account_id)

    def get_default_account(self) -> Optional[Account]:
        return self.accounts.get_default_account()

    def create_account(
        self,
        name: str,
        account_type: AccountType,
        institution: Optional[str] = None,
        opening_balance: float = 0.0,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        is_default: bool = False,
    ) -> Account:
        return self.accounts.create_account(
            name, account_type, institution, opening_balance, color, icon, is_default
        )

    def update_account(
        self,
        account_id: int,
        name: str,
        account_type: AccountType,
        institution: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Optional[Account]:
        return self.accounts.update_account(
            account_id, name, account_type, institution, color, icon
        )

    def set_default_account(self, account_id: int) -> Account:
        return self.accounts.set_default(account_id)

    def remove_current_default_account(self) -> int:
        return self.accounts.remove_current_default()

    def delete_account(self, account_id: int) -> int:
        return self.accounts.delete_account(account_id)

    def adjust_account_balance(self, account_id: int, amount: float, is_income: bool) -> float:
        return self.accounts.adjust_balance(account_id, amount, is_income)

    def recompute_account_balance(self, account_id: int) -> float:
        return self.accounts.recompute_balance(account_id)

    # =========================================================================
    # Transactions
    # =========================================================================

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self.transactions.get_transaction_by_id(transaction_id)

    def create_transaction(
        self,
        title: str,
        amount: float,
        type: TransactionType,
        date: date,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> Transaction:
        return self.transactions.create_transaction(
            title, amount, type, date, notes, category_id, account_id
        )

    def update_transaction(
        self,
        transaction_id: int,
        title: str,
        amount: float,
        type: TransactionType,
        date: date,
        notes: Optional[str] = None,
        category_id: Optional[int] = None,
        account_id: Optional[int] = None,
    ) -> Optional[Transaction]:
        return self.transactions.update_transaction(
            transaction_id, title, amount, type, date, notes, category_id, account_id
        )

    def delete_transaction(self, transaction_id: int) -> int:
        return self.transactions.delete_transaction(transaction_id)

    # =========================================================================
    # Maintenance
    # =========================================================================

    def delete_database_file(self):
        """
        Remove the database file and its WAL side files.

        Maintenance only: the next operation bootstraps a brand new, seeded
        database.
        """
        for suffix in ("", "-wal", "-shm"):
            path = Path(f"{self.db_path}{suffix}")
            path.unlink(missing_ok=True)
        self._forget_bootstrap()
        logger.warning(f"Deleted ledger database file {self.db_path}")


# Singleton instance
_default_database: Optional[LedgerDatabase] = None


def get_database() -> LedgerDatabase:
    """Get or create the default database instance."""
    global _default_database
    if _default_database is None:
        _default_database = LedgerDatabase()
    return _default_database
