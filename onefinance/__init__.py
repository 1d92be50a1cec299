"""
OneFinance - personal finance ledger

Persistence and query layer for a year/month ledger of income and expense
transactions, with categories and balance-tracked accounts.
"""

from .db import LedgerDatabase, get_database
from .models import AccountType, TransactionType

__version__ = "0.1.0"

__all__ = [
    "AccountType",
    "LedgerDatabase",
    "TransactionType",
    "get_database",
]
