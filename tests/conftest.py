import pytest

from onefinance.db import LedgerDatabase
from onefinance.models import TransactionType


@pytest.fixture
def db(tmp_path):
    """A fresh, seeded ledger database per test."""
    return LedgerDatabase(tmp_path / "ledger.db")


@pytest.fixture
def add_tx(db):
    """Shortcut for creating a transaction with sensible defaults."""

    def _add(
        date,
        amount=10.0,
        type=TransactionType.EXPENSE,
        title="Entry",
        category_id=None,
        account_id=None,
        notes=None,
    ):
        return db.create_transaction(
            title=title,
            amount=amount,
            type=type,
            date=date,
            notes=notes,
            category_id=category_id,
            account_id=account_id,
        )

    return _add
