"""
Database module for the OneFinance ledger.

This module provides the persistence layer: schema, seed data, the generic
entity store, the year/month period hierarchy, account balances and the
read-only query engine.

Structure:
- base.py: Base repository with connection management and schema
- seed.py: One-shot default categories and account
- models.py: Data models (LedgerPeriod, Category, Account, Transaction, etc.)
- validators.py: Input validation shared by all repositories
- store.py: Entity kinds and the common CRUD contract
- categories.py: Category CRUD
- accounts.py: Account CRUD, balances and the default account
- periods.py: Ledger years and periods
- transactions.py: Transaction CRUD
- queries.py: Transaction lists, summaries and monthly totals
- repository.py: Main facade that composes all sub-repositories
"""

from .accounts import AccountRepository
from .base import BaseRepository, ensure_schema
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
from .repository import LedgerDatabase, get_database
from .seed import seed_defaults
from .store import EntityKind, EntityRepository
from .transactions import TransactionRepository

__all__ = [
    # Base
    "BaseRepository",
    "ensure_schema",
    "seed_defaults",
    # Models
    "Account",
    "Category",
    "LedgerPeriod",
    "LedgerSummary",
    "LedgerYear",
    "LedgerYearNode",
    "MonthlyTotal",
    "Transaction",
    # Repositories
    "AccountRepository",
    "CategoryRepository",
    "EntityKind",
    "EntityRepository",
    "LedgerDatabase",
    "PeriodRepository",
    "QueryRepository",
    "TransactionRepository",
    # Utilities
    "get_database",
]
