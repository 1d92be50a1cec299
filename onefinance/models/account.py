"""
Account and category reference data.

Defines the account type enum and the starter rows that are seeded into a
fresh ledger database.
"""

from enum import Enum

from .transaction import TransactionType


class AccountType(str, Enum):
    """
    Kinds of financial account a user can track.

    - CHEQUING: Everyday bank account
    - SAVINGS: Interest-bearing savings
    - CREDIT: Credit card or line of credit (balance usually negative)
    - CASH: Physical cash / wallet
    - OTHER: Anything else
    """

    CHEQUING = "chequing"
    SAVINGS = "savings"
    CREDIT = "credit"
    CASH = "cash"
    OTHER = "other"


# Default system categories: (name, type affinity, icon)
DEFAULT_CATEGORIES = [
    # Income categories
    ("Salary", TransactionType.INCOME, "💼"),
    ("Freelance", TransactionType.INCOME, "💻"),
    ("Investments", TransactionType.INCOME, "📈"),
    ("Other Income", TransactionType.INCOME, "💰"),
    # Expense categories
    ("Food & Dining", TransactionType.EXPENSE, "🍔"),
    ("Transportation", TransactionType.EXPENSE, "🚗"),
    ("Shopping", TransactionType.EXPENSE, "🛒"),
    ("Entertainment", TransactionType.EXPENSE, "🎬"),
    ("Bills & Utilities", TransactionType.EXPENSE, "📄"),
    ("Healthcare", TransactionType.EXPENSE, "🏥"),
    ("Other Expense", TransactionType.EXPENSE, "📦"),
]

# Default accounts: (name, type, icon, is_default)
DEFAULT_ACCOUNTS = [
    ("Cash", AccountType.CASH, "💵", True),
]
