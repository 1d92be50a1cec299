"""
Accounts repository module for accounts, balances and the default account.

Handles all account-related database operations including:
- Account CRUD
- Balance adjustments driven by transaction writes
- The single default account
"""

import logging
import sqlite3
from typing import Optional

from onefinance.config import BALANCE_PRECISION, MAX_NAME_LENGTH
from onefinance.models import AccountType

from .base import utc_now
from .models import Account
from .store import EntityKind, EntityRepository
from .validators import (
    optional_text,
    require_id,
    require_text,
    validate_account_type,
    validate_amount,
    validate_balance,
    validate_hex_color,
)

logger = logging.getLogger(__name__)


class AccountRepository(EntityRepository[Account]):
    """
    Repository for managing accounts and their balances.

    Balances are kept in step with transactions: every transaction write
    calls `_apply_delta` on the same connection, so the balance change and
    the transaction row commit together.
    """

    kind = EntityKind.ACCOUNT
    table = "accounts"
    select_sql = """
        SELECT id, name, account_type, institution, balance, opening_balance,
               color, icon, is_default, created_at, updated_at
        FROM accounts
    """
    order_by = "is_default DESC, name ASC, id ASC"

    def __init__(self, db_path=None, init_schema: bool = False, seed: bool = True):
        """
        Initialize the account repository.

        Args:
            db_path: Path to the SQLite database file
            init_schema: Whether to initialize schema (usually False,
                        as main repository handles this)
            seed: Whether bootstrapping inserts the default rows
        """
        super().__init__(db_path, init_schema=init_schema, seed=seed)

    def _from_row(self, row: sqlite3.Row) -> Account:
        return Account.from_row(row)

    def _validated(self, account: Account) -> Account:
        return Account(
            id=account.id,
            name=require_text("name", account.name, MAX_NAME_LENGTH),
            account_type=validate_account_type(account.account_type),
            institution=optional_text("institution", account.institution, MAX_NAME_LENGTH),
            balance=validate_balance("balance", account.balance),
            opening_balance=validate_balance("opening_balance", account.opening_balance),
            color=validate_hex_color("color", account.color),
            icon=optional_text("icon", account.icon),
            is_default=bool(account.is_default),
        )

    @staticmethod
    def _clear_default(conn: sqlite3.Connection, keep_id: Optional[int] = None) -> int:
        cursor = conn.execute(
            "UPDATE accounts SET is_default = 0 WHERE is_default = 1 AND id IS NOT ?",
            (keep_id,),
        )
        return cursor.rowcount

    # =========================================================================
    # Create / Update
    # =========================================================================

    def insert(self, account: Account) -> int:
        """
        Insert an account and stamp its creation time.

        A new account starts with balance equal to its opening balance; when
        only `balance` is given it is taken as the opening balance. Inserting
        an account flagged as default first clears the previous default.

        Returns:
            The new account ID (also set on the passed object)
        """
        clean = self._validated(account)
        opening = clean.opening_balance or clean.balance
        opening = round(opening, BALANCE_PRECISION)
        created_at = utc_now()

        try:
            with self._get_connection() as conn:
                if clean.is_default:
                    self._clear_default(conn)
                cursor = conn.execute(
                    """
                    INSERT INTO accounts
                    (name, account_type, institution, balance, opening_balance,
                     color, icon, is_default, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        clean.name,
                        clean.account_type.value,
                        clean.institution,
                        opening,
                        opening,
                        clean.color,
                        clean.icon,
                        1 if clean.is_default else 0,
                        created_at.isoformat(),
                    ),
                )
                account.id = cursor.lastrowid
                account.name = clean.name
                account.account_type = clean.account_type
                account.balance = opening
                account.opening_balance = opening
                account.created_at = created_at

                logger.info(
                    f"Created account '{clean.name}' "
                    f"(type: {clean.account_type.value}, id: {account.id})"
                )
                return account.id
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error creating account: {e}", exc_info=True)
            raise

    def update(self, account: Account) -> int:
        """
        Update an account's fields, including a manually set balance.

        Flagging the account as default clears the previous default in the
        same transaction.

        Returns:
            Number of rows updated (0 if the account does not exist)
        """
        require_id("account id", account.id)
        clean = self._validated(account)
        updated_at = utc_now()

        try:
            with self._get_connection() as conn:
                if not self.exists(conn, account.id):
                    return 0
                if clean.is_default:
                    self._clear_default(conn, keep_id=account.id)
                cursor = conn.execute(
                    """
                    UPDATE accounts
                    SET name = ?, account_type = ?, institution = ?,
                        balance = ?, opening_balance = ?, color = ?, icon = ?,
                        is_default = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (
                        clean.name,
                        clean.account_type.value,
                        clean.institution,
                        round(clean.balance, BALANCE_PRECISION),
                        round(clean.opening_balance, BALANCE_PRECISION),
                        clean.color,
                        clean.icon,
                        1 if clean.is_default else 0,
                        updated_at.isoformat(),
                        account.id,
                    ),
                )
                account.updated_at = updated_at
                logger.info(f"Updated account {account.id} ('{clean.name}')")
                return cursor.rowcount
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error updating account {account.id}: {e}", exc_info=True)
            raise

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
        """Create an account and return it."""
        account = Account(
            id=None,
            name=name,
            account_type=account_type,
            institution=institution,
            opening_balance=opening_balance,
            color=color,
            icon=icon,
            is_default=is_default,
        )
        self.insert(account)
        return account

    def update_account(
        self,
        account_id: int,
        name: str,
        account_type: AccountType,
        institution: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Optional[Account]:
        """
        Rename or restyle an account.

        Balance, opening balance and the default flag are left as they are.

        Returns:
            The updated Account, or None if it does not exist
        """
        current = self.get_account_by_id(account_id)
        if current is None:
            return None

        current.name = name
        current.account_type = account_type
        current.institution = institution
        current.color = color
        current.icon = icon
        if not self.update(current):
            return None
        return self.get_account_by_id(account_id)

    def get_account_by_id(self, account_id: int) -> Optional[Account]:
        return self.get_by_id(account_id)

    def list_accounts(self) -> list[Account]:
        """Get all accounts, default first, then by name."""
        return self.get_all()

    def delete_account(self, account_id: int) -> int:
        """
        Delete an account.

        Transactions that referenced it stay in the ledger with no account.
        Deleting the default account leaves no default.

        Returns:
            Number of accounts deleted (0 or 1)
        """
        return self.delete_by_id(account_id)

    # =========================================================================
    # Default Account
    # =========================================================================

    def get_default_account(self) -> Optional[Account]:
        """Get the default account, or None if no account is flagged."""
        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    f"{self.select_sql} WHERE is_default = 1 LIMIT 1"
                ).fetchone()
                return self._from_row(row) if row else None
        except Exception as e:
            logger.error(f"Error getting default account: {e}", exc_info=True)
            raise

    def set_default(self, account_id: int) -> Account:
        """
        Make an account the default.

        The previous default is cleared and the new one set in one
        transaction, so no reader ever sees zero or two defaults.

        Raises:
            ValueError: If the account does not exist
        """
        require_id("account id", account_id)

        try:
            with self._get_connection() as conn:
                if not self.exists(conn, account_id):
                    raise ValueError(f"Account {account_id} not found")
                cleared = self._clear_default(conn, keep_id=account_id)
                conn.execute(
                    "UPDATE accounts SET is_default = 1, updated_at = ? WHERE id = ?",
                    (utc_now().isoformat(), account_id),
                )
                logger.info(
                    f"Account {account_id} is now the default "
                    f"({cleared} previous default cleared)"
                )
                return self._fetch_by_id(conn, account_id)
        except ValueError:
            raise
        except Exception as e:
            logger.error(f"Error setting default account: {e}", exc_info=True)
            raise

    def remove_current_default(self) -> int:
        """
        Clear the default flag without choosing a new default.

        Returns:
            Number of accounts that were un-flagged (0 or 1)
        """
        try:
            with self._get_connection() as conn:
                cleared = self._clear_default(conn)
                if cleared:
                    logger.info("Cleared the default account")
                return cleared
        except Exception as e:
            logger.error(f"Error clearing default account: {e}", exc_info=True)
            raise

    # =========================================================================
    # Balances
    # =========================================================================

    def _apply_delta(
        self, conn: sqlite3.Connection, account_id: int, delta: float
    ) -> float:
        """
        Add a signed delta to an account balance on an open connection.

        Raises:
            ValueError: If the account does not exist
        """
        cursor = conn.execute(
            """
            UPDATE accounts
            SET balance = ROUND(balance + ?, ?), updated_at = ?
            WHERE id = ?
            """,
            (delta, BALANCE_PRECISION, utc_now().isoformat(), account_id),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Account {account_id} not found")

        balance = conn.execute(
            "SELECT balance FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()[0]
        logger.debug(f"Account {account_id} balance {delta:+} -> {balance}")
        return balance

    def adjust_balance(self, account_id: int, amount: float, is_income: bool) -> float:
        """
        Apply a transaction-sized change to an account balance.

        Args:
            account_id: Account to adjust
            amount: Positive transaction amount
            is_income: True adds the amount, False subtracts it

        Returns:
            The new balance

        Raises:
            ValueError: If inputs are invalid or the account does not exist
        """
        require_id("account id", account_id)
        amount = validate_amount(amount)
        delta = amount if is_income else -amount

        try:
            with self._get_connection() as conn:
                return self._apply_delta(conn, account_id, delta)
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error adjusting balance of account {account_id}: {e}", exc_info=True
            )
            raise

    def recompute_balance(self, account_id: int) -> float:
        """
        Rebuild an account balance from its opening balance and transactions.

        Returns:
            The recomputed balance

        Raises:
            ValueError: If the account does not exist (the balance is never
                reset to zero as a fallback)
        """
        require_id("account id", account_id)

        try:
            with self._get_connection() as conn:
                row = conn.execute(
                    "SELECT opening_balance FROM accounts WHERE id = ?", (account_id,)
                ).fetchone()
                if not row:
                    raise ValueError(f"Account {account_id} not found")

                net = conn.execute(
                    """
                    SELECT COALESCE(SUM(
                        CASE WHEN type = 'income' THEN amount ELSE -amount END
                    ), 0)
                    FROM transactions
                    WHERE account_id = ?
                    """,
                    (account_id,),
                ).fetchone()[0]

                balance = round(row["opening_balance"] + net, BALANCE_PRECISION)
                conn.execute(
                    "UPDATE accounts SET balance = ?, updated_at = ? WHERE id = ?",
                    (balance, utc_now().isoformat(), account_id),
                )
                logger.info(f"Recomputed balance of account {account_id}: {balance}")
                return balance
        except ValueError:
            raise
        except Exception as e:
            logger.error(
                f"Error recomputing balance of account {account_id}: {e}",
                exc_info=True,
            )
            raise
