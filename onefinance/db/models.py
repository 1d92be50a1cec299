"""
Database models for the OneFinance ledger.

Defines the records stored in SQLite: ledger years and periods, categories,
accounts and transactions, plus the derived rows the query layer returns.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from onefinance.models import AccountType, TransactionType


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _optional(row: Any, key: str) -> Any:
    """Read a column that only some queries select."""
    return row[key] if key in row.keys() else None


@dataclass
class LedgerYear:
    """A top-level grouping of periods, keyed by the year number itself."""

    year: int
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {"year": self.year, "created_at": _format_timestamp(self.created_at)}

    @classmethod
    def from_row(cls, row: Any) -> "LedgerYear":
        """Create a LedgerYear from a database row."""
        return cls(year=row["year"], created_at=_parse_timestamp(row["created_at"]))


@dataclass
class LedgerPeriod:
    """
    A (year, month) bucket that transactions belong to.

    Periods are never created directly by users; they are resolved (and
    auto-created) from a transaction date or an explicit year/month request.
    """

    id: Optional[int]
    year: int
    month: int
    created_at: Optional[datetime] = None

    @property
    def start_date(self) -> date:
        """First day of the period (inclusive)."""
        return date(self.year, self.month, 1)

    @property
    def end_date(self) -> date:
        """First day of the following period (exclusive)."""
        if self.month == 12:
            return date(self.year + 1, 1, 1)
        return date(self.year, self.month + 1, 1)

    @property
    def label(self) -> str:
        """Human readable name, e.g. 'March 2025'."""
        return f"{calendar.month_name[self.month]} {self.year}"

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "created_at": _format_timestamp(self.created_at),
        }

    @classmethod
    def from_row(cls, row: Any) -> "LedgerPeriod":
        """Create a LedgerPeriod from a database row."""
        return cls(
            id=row["id"],
            year=row["year"],
            month=row["month"],
            created_at=_parse_timestamp(_optional(row, "created_at")),
        )


@dataclass
class LedgerYearNode:
    """A year with its periods, as shown in the ledger tree."""

    year: int
    periods: list[LedgerPeriod] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {"year": self.year, "periods": [p.to_dict() for p in self.periods]}


@dataclass
class Category:
    """
    A user-defined (or seeded) label for transactions.

    Names are unique and compared case-sensitively. `type` is an optional
    income/expense affinity used to filter pickers.
    """

    id: Optional[int]
    name: str
    color_code: Optional[str] = None
    icon: Optional[str] = None
    type: Optional[TransactionType] = None
    is_system: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "color_code": self.color_code,
            "icon": self.icon,
            "type": self.type.value if self.type else None,
            "is_system": self.is_system,
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }

    @classmethod
    def from_row(cls, row: Any) -> "Category":
        """Create a Category from a database row."""
        return cls(
            id=row["id"],
            name=row["name"],
            color_code=row["color_code"],
            icon=row["icon"],
            type=TransactionType(row["type"]) if row["type"] else None,
            is_system=bool(row["is_system"]),
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )


@dataclass
class Account:
    """
    A money account (bank, card, wallet).

    `balance` is maintained incrementally as transactions referencing the
    account are written; `opening_balance` is the starting point it was
    created with and is what a full recompute starts from.
    """

    id: Optional[int]
    name: str
    account_type: AccountType
    institution: Optional[str] = None
    balance: float = 0.0
    opening_balance: float = 0.0
    color: Optional[str] = None
    icon: Optional[str] = None
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "account_type": self.account_type.value,
            "institution": self.institution,
            "balance": self.balance,
            "opening_balance": self.opening_balance,
            "color": self.color,
            "icon": self.icon,
            "is_default": self.is_default,
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
        }

    @classmethod
    def from_row(cls, row: Any) -> "Account":
        """Create an Account from a database row."""
        return cls(
            id=row["id"],
            name=row["name"],
            account_type=AccountType(row["account_type"]),
            institution=row["institution"],
            balance=row["balance"],
            opening_balance=row["opening_balance"],
            color=row["color"],
            icon=row["icon"],
            is_default=bool(row["is_default"]),
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )


@dataclass
class Transaction:
    """
    A single income or expense entry.

    `amount` is always positive; the direction comes from `type`.
    `ledger_period_id` is derived from `date` by the store and is ignored
    on input. The trailing display fields are filled by joined reads.
    """

    id: Optional[int]
    title: str
    amount: float
    type: TransactionType
    date: date
    notes: Optional[str] = None
    category_id: Optional[int] = None
    account_id: Optional[int] = None
    ledger_period_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Denormalized for display
    category_name: Optional[str] = None
    account_name: Optional[str] = None
    year: Optional[int] = None
    month: Optional[int] = None

    @property
    def signed_amount(self) -> float:
        """Amount with income positive and expense negative."""
        return self.amount * self.type.sign

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "type": self.type.value,
            "date": self.date.isoformat(),
            "notes": self.notes,
            "category_id": self.category_id,
            "account_id": self.account_id,
            "ledger_period_id": self.ledger_period_id,
            "created_at": _format_timestamp(self.created_at),
            "updated_at": _format_timestamp(self.updated_at),
            "category_name": self.category_name,
            "account_name": self.account_name,
            "year": self.year,
            "month": self.month,
        }

    @classmethod
    def from_row(cls, row: Any) -> "Transaction":
        """Create a Transaction from a (possibly joined) database row."""
        return cls(
            id=row["id"],
            title=row["title"],
            amount=row["amount"],
            type=TransactionType(row["type"]),
            date=date.fromisoformat(row["date"]),
            notes=row["notes"],
            category_id=row["category_id"],
            account_id=row["account_id"],
            ledger_period_id=row["ledger_period_id"],
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
            category_name=_optional(row, "category_name"),
            account_name=_optional(row, "account_name"),
            year=_optional(row, "year"),
            month=_optional(row, "month"),
        )


@dataclass
class LedgerSummary:
    """Income/expense totals over a set of transactions."""

    income_total: float = 0.0
    expense_total: float = 0.0
    balance: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "income_total": self.income_total,
            "expense_total": self.expense_total,
            "balance": self.balance,
        }


@dataclass
class MonthlyTotal:
    """Income/expense totals for one month of a year."""

    year: int
    month: int
    income: float = 0.0
    expense: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expense

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "year": self.year,
            "month": self.month,
            "income": self.income,
            "expense": self.expense,
            "net": self.net,
        }
