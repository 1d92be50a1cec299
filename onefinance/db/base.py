"""
Base repository module with connection management and schema initialization.

Provides the foundation for all database operations in the OneFinance ledger.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from onefinance.config import DB_TIMEOUT, MAX_YEAR, MIN_YEAR, get_default_db_path

from .seed import seed_defaults

logger = logging.getLogger(__name__)

# Database files whose schema (and seed step) already ran in this process
_bootstrapped_paths: set[str] = set()

SCHEMA = [
    # Ledger years - the year number is the primary key
    f"""
    CREATE TABLE IF NOT EXISTS ledger_years (
        year INTEGER PRIMARY KEY CHECK(year >= {MIN_YEAR} AND year <= {MAX_YEAR}),
        created_at TEXT NOT NULL
    )
    """,
    # Ledger periods - one row per (year, month)
    """
    CREATE TABLE IF NOT EXISTS ledger_periods (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        year INTEGER NOT NULL REFERENCES ledger_years(year) ON DELETE CASCADE,
        month INTEGER NOT NULL CHECK(month >= 1 AND month <= 12),
        created_at TEXT NOT NULL,
        UNIQUE(year, month)
    )
    """,
    # Categories - user-defined and seeded system labels
    """
    CREATE TABLE IF NOT EXISTS categories (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE CHECK(length(name) > 0),
        color_code TEXT,
        icon TEXT,
        type TEXT CHECK(type IS NULL OR type IN ('income', 'expense')),
        is_system INTEGER NOT NULL DEFAULT 0 CHECK(is_system IN (0, 1)),
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    # Accounts - balances are maintained as transactions change
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL CHECK(length(name) > 0),
        account_type TEXT NOT NULL CHECK(
            account_type IN ('chequing', 'savings', 'credit', 'cash', 'other')
        ),
        institution TEXT,
        balance REAL NOT NULL DEFAULT 0,
        opening_balance REAL NOT NULL DEFAULT 0,
        color TEXT,
        icon TEXT,
        is_default INTEGER NOT NULL DEFAULT 0 CHECK(is_default IN (0, 1)),
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
    # Transactions - amount is always positive, direction comes from type
    """
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        ledger_period_id INTEGER NOT NULL
            REFERENCES ledger_periods(id) ON DELETE CASCADE,
        title TEXT NOT NULL CHECK(length(title) > 0),
        amount REAL NOT NULL CHECK(amount > 0),
        date TEXT NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('income', 'expense')),
        notes TEXT,
        category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
        account_id INTEGER REFERENCES accounts(id) ON DELETE SET NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
]

INDEXES = [
    ("idx_transactions_ledger_period_id", "transactions", "ledger_period_id"),
    ("idx_transactions_date", "transactions", "date DESC, id DESC"),
    ("idx_transactions_category_id", "transactions", "category_id"),
    ("idx_transactions_account_id", "transactions", "account_id"),
    ("idx_categories_type", "categories", "type, name"),
]


def utc_now() -> datetime:
    """Timestamp used for created_at / updated_at stamps."""
    return datetime.now(timezone.utc)


def ensure_schema(conn: sqlite3.Connection):
    """
    Create any missing tables and indexes.

    Safe to run on every start: nothing existing is altered or dropped.
    """
    for statement in SCHEMA:
        conn.execute(statement)

    for index_name, table, columns in INDEXES:
        conn.execute(f"""
            CREATE INDEX IF NOT EXISTS {index_name}
            ON {table}({columns})
        """)

    # At most one default account, enforced by the storage engine as well
    conn.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS idx_accounts_single_default
        ON accounts(is_default) WHERE is_default = 1
    """)

    logger.debug("Ledger schema ensured")


class BaseRepository:
    """
    Base repository class with SQLite connection management.

    Provides lazy schema bootstrap, per-operation connections and common
    database utilities for all repository classes.
    """

    def __init__(
        self,
        db_path: Optional[Union[str, Path]] = None,
        init_schema: bool = True,
        seed: bool = True,
    ):
        """
        Initialize the base repository.

        Args:
            db_path: Path to the SQLite database file. Defaults to the
                per-user data directory
            init_schema: Whether to initialize the schema right away instead
                of on first use
            seed: Whether bootstrapping also inserts the default
                categories and account
        """
        self.db_path = Path(db_path) if db_path else get_default_db_path()
        self.seed = seed
        self._ensure_db_directory()
        if init_schema:
            self.initialize()

    @property
    def _bootstrap_key(self) -> str:
        return str(self.db_path.resolve())

    @property
    def is_initialized(self) -> bool:
        return self._bootstrap_key in _bootstrapped_paths

    def _ensure_db_directory(self):
        """Ensure the database directory exists."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Database directory ensured: {self.db_path.parent}")
        except Exception as e:
            logger.error(f"Failed to create database directory: {e}", exc_info=True)
            raise

    def initialize(self):
        """
        Ensure the schema exists and run the one-shot seed step.

        Idempotent; every repository operation calls this lazily on first use.
        """
        with self._connection() as conn:
            ensure_schema(conn)
            if self.seed:
                seed_defaults(conn)
        _bootstrapped_paths.add(self._bootstrap_key)
        logger.info(f"Ledger database ready at {self.db_path}")

    def _forget_bootstrap(self):
        """Mark the database as needing a fresh bootstrap (file was removed)."""
        _bootstrapped_paths.discard(self._bootstrap_key)

    @contextmanager
    def _connection(self):
        """Open a connection with WAL journaling and foreign keys enforced."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=DB_TIMEOUT)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode = WAL")
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            logger.error(f"Database locked or operational error: {e}", exc_info=True)
            if conn:
                conn.rollback()
            raise
        except ValueError:
            # Validation failures raised mid-transaction roll back quietly
            if conn:
                conn.rollback()
            raise
        except Exception as e:
            logger.error(f"Database error: {e}", exc_info=True)
            if conn:
                conn.rollback()
            raise
        finally:
            if conn:
                conn.close()

    @contextmanager
    def _get_connection(self):
        """
        Context manager for one unit of work.

        Everything executed on the yielded connection commits together, or
        rolls back together when an exception escapes.
        """
        if not self.is_initialized:
            self.initialize()
        with self._connection() as conn:
            yield conn

    @staticmethod
    def _count(conn: sqlite3.Connection, table: str) -> int:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
