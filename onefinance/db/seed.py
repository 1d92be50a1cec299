"""
Starter data for a fresh ledger.

Each table is seeded only while it is empty, decided by a row count rather
than by looking for individual names. Once a table holds any row the step
does nothing for it.
"""

import logging
import sqlite3
from datetime import datetime, timezone

from onefinance.models import DEFAULT_ACCOUNTS, DEFAULT_CATEGORIES

logger = logging.getLogger(__name__)


def seed_default_categories(conn: sqlite3.Connection) -> int:
    """Insert the system categories if the table is empty; returns rows added."""
    if conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0] > 0:
        return 0

    created_at = datetime.now(timezone.utc).isoformat()
    conn.executemany(
        """
        INSERT INTO categories (name, color_code, icon, type, is_system, created_at)
        VALUES (?, NULL, ?, ?, 1, ?)
        """,
        [
            (name, icon, category_type.value, created_at)
            for name, category_type, icon in DEFAULT_CATEGORIES
        ],
    )
    logger.info(f"Seeded {len(DEFAULT_CATEGORIES)} default categories")
    return len(DEFAULT_CATEGORIES)


def seed_default_accounts(conn: sqlite3.Connection) -> int:
    """Insert the default Cash account if the table is empty; returns rows added."""
    if conn.execute("SELECT COUNT(*) FROM accounts").fetchone()[0] > 0:
        return 0

    created_at = datetime.now(timezone.utc).isoformat()
    conn.executemany(
        """
        INSERT INTO accounts
        (name, account_type, balance, opening_balance, icon, is_default, created_at)
        VALUES (?, ?, 0, 0, ?, ?, ?)
        """,
        [
            (name, account_type.value, icon, 1 if is_default else 0, created_at)
            for name, account_type, icon, is_default in DEFAULT_ACCOUNTS
        ],
    )
    logger.info(f"Seeded {len(DEFAULT_ACCOUNTS)} default accounts")
    return len(DEFAULT_ACCOUNTS)


def seed_defaults(conn: sqlite3.Connection) -> dict[str, int]:
    """
    Run every seed step on one connection so they commit together.

    Returns:
        Dictionary mapping table names to the number of rows inserted
    """
    return {
        "categories": seed_default_categories(conn),
        "accounts": seed_default_accounts(conn),
    }
