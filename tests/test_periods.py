"""
Tests for the year -> month ledger hierarchy.
"""

from datetime import date

import pytest

from onefinance.db import LedgerPeriod
from onefinance.models import TransactionType


class TestResolvePeriod:
    """Tests for resolving and creating periods."""

    def test_resolve_is_idempotent(self, db):
        """Test that resolving the same month twice returns the same period."""
        first = db.resolve_period(2025, 3)
        second = db.resolve_period(2025, 3)
        assert first.id == second.id
        assert (first.year, first.month) == (2025, 3)

    def test_resolve_creates_year(self, db):
        """Test that resolving a month creates its year marker."""
        assert db.list_years() == []
        db.resolve_period(2024, 11)
        assert [y.year for y in db.list_years()] == [2024]

    def test_create_month_creates_only_that_month(self, db):
        """Test that an explicit month does not create its siblings."""
        db.create_month(2024, 5)
        tree = db.list_ledger_tree()
        assert len(tree) == 1
        assert [p.month for p in tree[0].periods] == [5]

    @pytest.mark.parametrize(
        "year, month", [(1899, 1), (3001, 1), (2025, 0), (2025, 13)]
    )
    def test_out_of_range_rejected(self, db, year, month):
        """Test that years and months outside the ledger range are rejected."""
        with pytest.raises(ValueError):
            db.resolve_period(year, month)
        assert db.list_years() == []

    def test_boundary_years_accepted(self, db):
        """Test that the first and last supported years work."""
        assert db.resolve_period(1900, 1).year == 1900
        assert db.resolve_period(3000, 12).year == 3000

    def test_find_period_does_not_create(self, db):
        """Test that looking up a period never creates it."""
        assert db.find_period(2025, 3) is None
        assert db.list_years() == []

        period = db.create_month(2025, 3)
        assert db.find_period(2025, 3).id == period.id
        assert db.get_period(period.id).month == 3
        assert db.get_period(999) is None


class TestCreateYear:
    """Tests for creating whole years."""

    def test_create_year_creates_twelve_months(self, db):
        """Test that a new year comes with all of its months."""
        year = db.create_year(2025)
        assert year.year == 2025
        assert year.created_at is not None

        tree = db.list_ledger_tree()
        assert [p.month for p in tree[0].periods] == list(range(1, 13))

    def test_create_year_keeps_existing_months(self, db):
        """Test that an existing month keeps its identity."""
        march = db.create_month(2025, 3)
        db.create_year(2025)
        assert db.find_period(2025, 3).id == march.id
        assert len(db.list_ledger_tree()[0].periods) == 12

    def test_create_year_twice(self, db):
        """Test that creating a year again changes nothing."""
        db.create_year(2025)
        db.create_year(2025)
        assert len(db.list_ledger_tree()[0].periods) == 12

    def test_create_year_out_of_range(self, db):
        """Test that unsupported years are rejected."""
        with pytest.raises(ValueError):
            db.create_year(3001)


class TestLedgerTree:
    """Tests for the navigation tree."""

    def test_tree_order(self, db):
        """Test that years are newest first and months ascending."""
        db.create_month(2024, 12)
        db.create_month(2024, 2)
        db.create_month(2025, 7)
        db.create_month(2025, 1)

        tree = db.list_ledger_tree()
        assert [node.year for node in tree] == [2025, 2024]
        assert [p.month for p in tree[0].periods] == [1, 7]
        assert [p.month for p in tree[1].periods] == [2, 12]

    def test_empty_tree(self, db):
        """Test that a fresh ledger has no years."""
        assert db.list_ledger_tree() == []


class TestDeleteYear:
    """Tests for deleting years."""

    def test_delete_year_cascades(self, db, add_tx):
        """Test that a year takes its periods and transactions with it."""
        db.create_year(2025)
        tx = add_tx("2025-03-15")
        kept = add_tx("2024-12-31")

        assert db.delete_year(2025) == 1

        assert db.find_period(2025, 3) is None
        assert db.get_transaction(tx.id) is None
        assert db.get_transaction(kept.id) is not None
        assert [node.year for node in db.list_ledger_tree()] == [2024]

    def test_delete_missing_year_is_noop(self, db, add_tx):
        """Test that deleting a year with no periods changes nothing."""
        add_tx("2025-03-15")
        assert db.delete_year(2030) == 0
        assert len(db.get_transactions_with_details()) == 1

    def test_delete_year_restores_balances(self, db, add_tx):
        """Test that balances drop the effect of the removed transactions."""
        cash = db.get_default_account()
        add_tx("2025-03-15", amount=100, type=TransactionType.INCOME, account_id=cash.id)
        add_tx("2025-04-01", amount=30, account_id=cash.id)
        add_tx("2024-06-01", amount=20, account_id=cash.id)
        assert db.get_account(cash.id).balance == 50

        db.delete_year(2025)
        assert db.get_account(cash.id).balance == -20


class TestLedgerPeriodModel:
    """Tests for LedgerPeriod helpers."""

    def test_date_bounds(self):
        """Test the half-open date range of a period."""
        period = LedgerPeriod(id=1, year=2025, month=3)
        assert period.start_date == date(2025, 3, 1)
        assert period.end_date == date(2025, 4, 1)
        assert period.label == "March 2025"

    def test_december_rolls_over(self):
        """Test that December ends at the first of next January."""
        period = LedgerPeriod(id=1, year=2025, month=12)
        assert period.end_date == date(2026, 1, 1)
