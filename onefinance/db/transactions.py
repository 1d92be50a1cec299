"""
Transactions repository module for transaction CRUD operations.

Handles all transaction-related database operations including:
- Creating transactions (period auto-creation + balance update)
- Reading transactions with their display fields
- Updating transactions (period re-resolution + balance re-application)
- Deleting transactions (balance reversal)
"""

import logging
import sqlite3
from datetime import date
from typing import TYPE_CHECKING, Optional

from onefinance.config import MAX_NOTES_LENGTH, MAX_TITLE_LENGTH
from onefinance.models import TransactionType

from .base import utc_now
from .models import Transaction
from .queries import TRANSACTION_DETAILS_SELECT, TRANSACTION_ORDER_COLUMNS
from .store import EntityKind, EntityRepository
from .validators import (
    optional_id,
    optional_text,
    parse_date,
    require_id,
    require_text,
    validate_amount,
    validate_transaction_type,
)

if TYPE_CHECKING:
    from .accounts import AccountRepository
    from .periods import PeriodRepository

logger = logging.getLogger(__name__)


class TransactionRepository(EntityRepository[Transaction]):
    """
    Repository for managing income and expense transactions.

    Every write runs in one database transaction together with the period
    it resolves and the account balance change it causes.
    """

    kind = EntityKind.TRANSACTION
    table = "transactions"
    select_sql = TRANSACTION_DETAILS_SELECT
    id_column = "t.id"
    order_by = TRANSACTION_ORDER_COLUMNS

    def __init__(
        self,
        db_path=None,
        init_schema: bool = False,
        seed: bool = True,
        account_repo: Optional["AccountRepository"] = None,
        period_repo: Optional["PeriodRepository"] = None,
    ):
        """
        Initialize the transaction repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema
            seed: Whether bootstrapping inserts the default rows
            account_repo: Account repository for balance updates
            period_repo: Period repository for period resolution
        """
        super().__init__(db_path, init_schema=init_schema, seed=seed)
        self._account_repo = account_repo
        self._period_repo = period_repo

    def set_account_repo(self, account_repo: "AccountRepository"):
        """Set the account repository reference."""
        self._account_repo = account_repo

    def set_period_repo(self, period_repo: "PeriodRepository"):
        """Set the period repository reference."""
        self._period_repo = period_repo

    def _from_row(self, row: sqlite3.Row) -> Transaction:
        return Transaction.from_row(row)

    def _require_collaborators(self):
        if not self._account_repo:
            raise RuntimeError("Account repository not set")
        if not self._period_repo:
            raise RuntimeError("Period repository not set")

    def _validated(self, transaction: Transaction) -> Transaction:
        return Transaction(
            id=transaction.id,
            title=require_text("title", transaction.title, MAX_TITLE_LENGTH),
            amount=validate_amount(transaction.amount),
            type=validate_transaction_type(transaction.type),
            date=parse_date(transaction.date),
            notes=optional_text("notes", transaction.notes, MAX_NOTES_LENGTH),
            category_id=optional_id("category_id", transaction.category_id),
            account_id=optional_id("account_id", transaction.account_id),
        )

    def _check_references(self, conn: sqlite3.Connection, transaction: Transaction):
        """Reject references to categories or accounts that do not exist."""
        if transaction.category_id is not None:
            row = conn.execute(
                "SELECT 1 FROM categories WHERE id = ?", (transaction.category_id,)
            ).fetchone()
            if not row:
                raise ValueError(f"Category {transaction.category_id} not found")
        if transaction.account_id is not None:
            row = conn.execute(
                "SELECT 1 FROM accounts WHERE id = ?", (transaction.account_id,)
            ).fetchone()
            if not row:
                raise ValueError(f"Account {transaction.account_id} not found")

    def _apply_effect(
        self, conn: sqlite3.Connection, account_id: Optional[int], signed_amount: float
    ):
        if account_id is not None:
            self._account_repo._apply_delta(conn, account_id, signed_amount)

    # =========================================================================
    # Create Operations
    # =========================================================================

    def insert(self, transaction: Transaction) -> int:
        """
        Insert a transaction.

        This method:
        1. Validates the fields and the category/account references
        2. Resolves the period from the date, creating it if needed
        3. Inserts the transaction row
        4. Applies the amount to the account balance

        Returns:
            The new transaction ID (also set on the passed object)

        Raises:
            ValueError: If validation fails or a reference does not exist
        """
        self._require_collaborators()
        clean = self._validated(transaction)
        created_at = utc_now()

        try:
            with self._get_connection() as conn:
                self._check_references(conn, clean)
                period = self._period_repo._ensure_period(
                    conn, clean.date.year, clean.date.month
                )

                cursor = conn.execute(
                    """
                    INSERT INTO transactions (
                        ledger_period_id, title, amount, date, type, notes,
                        category_id, account_id, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        period.id,
                        clean.title,
                        clean.amount,
                        clean.date.isoformat(),
                        clean.type.value,
                        clean.notes,
                        clean.category_id,
                        clean.account_id,
                        created_at.isoformat(),
                    ),
                )
                transaction_id = cursor.lastrowid
                self._apply_effect(conn, clean.account_id, clean.signed_amount)

                transaction.id = transaction_id
                transaction.title = clean.title
                transaction.amount = clean.amount
                transaction.type = clean.type
                transaction.date = clean.date
                transaction.notes = clean.notes
                transaction.ledger_period_id = period.id
                transaction.year = period.year
                transaction.month = period.month
                transaction.created_at = created_at

                logger.info(
                    f"Inserted {clean.type.value} transaction {transaction_id} "
                    f"'{clean.title}' = {clean.amount} on {clean.date} "
                    f"(period {period.id})"
                )
                return transaction_id
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error inserting transaction: {e}", exc_info=True)
            raise

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
        """Create a transaction and return it with its display fields."""
        transaction = Transaction(
            id=None,
            title=title,
            amount=amount,
            type=type,
            date=date,
            notes=notes,
            category_id=category_id,
            account_id=account_id,
        )
        transaction_id = self.insert(transaction)
        return self.get_by_id(transaction_id)

    def get_transaction_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Get a transaction with its category/account names and period."""
        return self.get_by_id(transaction_id)

    # =========================================================================
    # Update Operations
    # =========================================================================

    def update(self, transaction: Transaction) -> int:
        """
        Update a transaction.

        The period is re-resolved from the (possibly new) date. For balances
        the edit counts as delete-then-reinsert: the old effect is reversed
        on the old account and the new effect applied to the new account.

        Returns:
            Number of rows updated (0 if the transaction does not exist)
        """
        self._require_collaborators()
        require_id("transaction id", transaction.id)
        clean = self._validated(transaction)
        updated_at = utc_now()

        try:
            with self._get_connection() as conn:
                old = conn.execute(
                    "SELECT amount, type, account_id FROM transactions WHERE id = ?",
                    (transaction.id,),
                ).fetchone()
                if not old:
                    logger.warning(f"Transaction {transaction.id} not found for update")
                    return 0

                self._check_references(conn, clean)
                period = self._period_repo._ensure_period(
                    conn, clean.date.year, clean.date.month
                )

                cursor = conn.execute(
                    """
                    UPDATE transactions
                    SET ledger_period_id = ?, title = ?, amount = ?, date = ?,
                        type = ?, notes = ?, category_id = ?, account_id = ?,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        period.id,
                        clean.title,
                        clean.amount,
                        clean.date.isoformat(),
                        clean.type.value,
                        clean.notes,
                        clean.category_id,
                        clean.account_id,
                        updated_at.isoformat(),
                        transaction.id,
                    ),
                )

                old_signed = old["amount"] * TransactionType(old["type"]).sign
                self._apply_effect(conn, old["account_id"], -old_signed)
                self._apply_effect(conn, clean.account_id, clean.signed_amount)

                transaction.ledger_period_id = period.id
                transaction.year = period.year
                transaction.month = period.month
                transaction.date = clean.date
                transaction.updated_at = updated_at

                logger.info(
                    f"Updated transaction {transaction.id}: "
                    f"{clean.type.value} {clean.amount} on {clean.date} "
                    f"(period {period.id})"
                )
                return cursor.rowcount
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error updating transaction {transaction.id}: {e}", exc_info=True
            )
            raise

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
        """
        Replace a transaction's fields.

        Returns:
            The updated Transaction, or None if it does not exist
        """
        transaction = Transaction(
            id=transaction_id,
            title=title,
            amount=amount,
            type=type,
            date=date,
            notes=notes,
            category_id=category_id,
            account_id=account_id,
        )
        if not self.update(transaction):
            return None
        return self.get_by_id(transaction_id)

    # =========================================================================
    # Delete Operations
    # =========================================================================

    def _delete_with(self, conn: sqlite3.Connection, entity_id: int) -> int:
        self._require_collaborators()
        old = conn.execute(
            "SELECT amount, type, account_id FROM transactions WHERE id = ?",
            (entity_id,),
        ).fetchone()
        if not old:
            return 0

        affected = super()._delete_with(conn, entity_id)
        old_signed = old["amount"] * TransactionType(old["type"]).sign
        self._apply_effect(conn, old["account_id"], -old_signed)
        return affected

    def delete_transaction(self, transaction_id: int) -> int:
        """
        Delete a transaction and reverse its effect on the account balance.

        Returns:
            Number of transactions deleted (0 or 1)
        """
        return self.delete_by_id(transaction_id)
