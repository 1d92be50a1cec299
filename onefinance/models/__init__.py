from .account import DEFAULT_ACCOUNTS, DEFAULT_CATEGORIES, AccountType
from .transaction import TransactionType

__all__ = [
    "AccountType",
    "DEFAULT_ACCOUNTS",
    "DEFAULT_CATEGORIES",
    "TransactionType",
]
