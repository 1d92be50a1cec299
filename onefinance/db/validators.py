"""
Input validation for ledger operations.

Every check raises ValueError with a descriptive message, before any write
happens, so a rejected call never leaves partial state behind.
"""

import math
import re
from datetime import date, datetime
from typing import Any, Optional

from onefinance.config import (
    BALANCE_PRECISION,
    MAX_RECENT_LIMIT,
    MAX_YEAR,
    MIN_RECENT_LIMIT,
    MIN_YEAR,
)
from onefinance.models import AccountType, TransactionType

HEX_COLOR_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
ISO_DATE_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})-([0-9]{2})$")


def require_int(name: str, value: Any) -> int:
    """Reject anything that is not a real integer (bools included)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    return value


def require_id(name: str, value: Any) -> int:
    """Validate a row identity: a positive integer."""
    require_int(name, value)
    if value <= 0:
        raise ValueError(f"Invalid {name}: {value}")
    return value


def optional_id(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    return require_id(name, value)


def require_text(name: str, value: Any, max_length: Optional[int] = None) -> str:
    """Validate a required string and return it stripped."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValueError(f"{name} cannot exceed {max_length} characters")
    return value


def optional_text(name: str, value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """Validate an optional string; blank strings become None."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string")
    value = value.strip()
    if not value:
        return None
    if max_length is not None and len(value) > max_length:
        raise ValueError(f"{name} cannot exceed {max_length} characters")
    return value


def validate_year(year: Any) -> int:
    require_int("year", year)
    if year < MIN_YEAR or year > MAX_YEAR:
        raise ValueError(f"year out of range ({MIN_YEAR}-{MAX_YEAR}): {year}")
    return year


def validate_month(month: Any) -> int:
    require_int("month", month)
    if month < 1 or month > 12:
        raise ValueError(f"month must be 1-12, got {month}")
    return month


def validate_hex_color(name: str, value: Any) -> Optional[str]:
    """Accept None or a '#RGB' / '#RRGGBB' colour string."""
    value = optional_text(name, value)
    if value is None:
        return None
    if not HEX_COLOR_PATTERN.match(value):
        raise ValueError(f"{name} must be a hex colour like #RGB or #RRGGBB, got {value!r}")
    return value


def validate_amount(amount: Any) -> float:
    """
    Transaction amounts are finite, strictly positive and whole cents.

    The returned value is rounded to the balance precision so the stored
    amount and the balance delta it causes are the same number.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValueError(f"amount must be a number, got {amount!r}")
    if not math.isfinite(amount):
        raise ValueError("amount must be finite")
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")
    rounded = round(float(amount), BALANCE_PRECISION)
    if not math.isclose(rounded, amount, rel_tol=0, abs_tol=1e-9):
        raise ValueError(
            f"amount cannot have more than {BALANCE_PRECISION} decimal places, got {amount}"
        )
    return rounded


def validate_balance(name: str, value: Any) -> float:
    """Balances are signed but must be finite numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
    return float(value)


def validate_transaction_type(value: Any) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise ValueError(f"invalid transaction type: {value!r}") from None


def optional_transaction_type(value: Any) -> Optional[TransactionType]:
    if value is None:
        return None
    return validate_transaction_type(value)


def validate_account_type(value: Any) -> AccountType:
    try:
        return AccountType(value)
    except ValueError:
        raise ValueError(f"invalid account type: {value!r}") from None


def parse_date(value: Any) -> date:
    """
    Normalize a transaction date.

    Accepts a date (or datetime, truncated) or a 'YYYY-MM-DD' string; the year must fall in the
    supported ledger range.
    """
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        match = ISO_DATE_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"date must be YYYY-MM-DD, got {value!r}")
        try:
            parsed = date.fromisoformat(value.strip())
        except ValueError:
            raise ValueError(f"invalid calendar date: {value!r}") from None
    else:
        raise ValueError(f"date is required, got {value!r}")

    validate_year(parsed.year)
    return parsed


def validate_limit(limit: Any) -> int:
    require_int("limit", limit)
    if limit < MIN_RECENT_LIMIT or limit > MAX_RECENT_LIMIT:
        raise ValueError(
            f"limit out of range ({MIN_RECENT_LIMIT}-{MAX_RECENT_LIMIT}): {limit}"
        )
    return limit
