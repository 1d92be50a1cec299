"""
Tests for transaction lists, summaries and monthly totals.
"""

import inspect
from datetime import date

import pytest

from onefinance.config import DEFAULT_RECENT_LIMIT
from onefinance.models import TransactionType


class TestLedgerScenarios:
    """End-to-end flows through the ledger."""

    def test_paycheck_flow(self, db):
        """Test create year, create month, insert, then list and summarize."""
        db.create_year(2025)
        db.create_month(2025, 3)
        tx = db.create_transaction(
            title="Paycheck",
            amount=2000,
            type=TransactionType.INCOME,
            date="2025-03-15",
        )

        march = db.get_transactions_by_month(2025, 3)
        assert [t.id for t in march] == [tx.id]
        assert march[0].title == "Paycheck"

        summary = db.get_summary()
        assert summary.income_total == 2000
        assert summary.expense_total == 0
        assert summary.balance == 2000

    def test_recent_spans_months(self, db, add_tx):
        """Test that the recent feed takes the newest rows across periods."""
        add_tx("2025-02-10", title="a")
        add_tx("2025-02-20", title="b")
        add_tx("2025-02-28", title="c")
        add_tx("2025-03-01", title="d")
        add_tx("2025-03-05", title="e")

        recent = db.list_recent_transactions(3)
        assert [t.title for t in recent] == ["e", "d", "c"]


class TestListByMonth:
    """Tests for month and period listings."""

    def test_month_boundaries(self, db, add_tx):
        """Test the half-open range of a calendar month."""
        add_tx("2025-02-28", title="feb")
        first = add_tx("2025-03-01", title="first")
        last = add_tx("2025-03-31", title="last")
        add_tx("2025-04-01", title="apr")

        march = db.get_transactions_by_month(2025, 3)
        assert [t.id for t in march] == [last.id, first.id]

    def test_month_matches_period(self, db, add_tx):
        """Test that the month listing equals the period listing."""
        for day in (3, 14, 27):
            add_tx(f"2025-03-{day:02d}")
        add_tx("2025-04-01")

        period = db.find_period(2025, 3)
        by_period = [t.id for t in db.list_transactions(period.id)]
        by_month = [t.id for t in db.get_transactions_by_month(2025, 3)]
        assert by_period == by_month
        assert len(by_month) == 3

    def test_december_of_last_year(self, db, add_tx):
        """Test the last supported month."""
        tx = add_tx("3000-12-31")
        assert [t.id for t in db.get_transactions_by_month(3000, 12)] == [tx.id]

    def test_empty_month(self, db):
        """Test that a month without transactions lists nothing."""
        assert db.get_transactions_by_month(2025, 3) == []

    def test_unknown_period(self, db):
        """Test that an unknown period lists nothing."""
        assert db.list_transactions(999) == []

    def test_invalid_month(self, db):
        """Test that month numbers are validated."""
        with pytest.raises(ValueError):
            db.get_transactions_by_month(2025, 13)

    def test_same_day_newest_insert_first(self, db, add_tx):
        """Test that ties on date are broken by insertion order, newest first."""
        first = add_tx("2025-03-10")
        second = add_tx("2025-03-10")
        assert [t.id for t in db.get_transactions_by_month(2025, 3)] == [
            second.id,
            first.id,
        ]


class TestDateRange:
    """Tests for arbitrary date ranges."""

    def test_range(self, db, add_tx):
        """Test listing a range across months."""
        add_tx("2025-02-14")
        inside = add_tx("2025-03-20")
        add_tx("2025-04-10")

        result = db.list_transactions_by_date_range(date(2025, 3, 1), date(2025, 4, 1))
        assert [t.id for t in result] == [inside.id]

    def test_empty_range_rejected(self, db):
        """Test that the end must come after the start."""
        with pytest.raises(ValueError):
            db.list_transactions_by_date_range(date(2025, 3, 1), date(2025, 3, 1))


class TestRecent:
    """Tests for the recent transactions feed."""

    def test_default_limit(self, db, add_tx):
        """Test that the feed shows eight rows by default."""
        for day in range(1, 11):
            add_tx(f"2025-03-{day:02d}")
        assert len(db.list_recent_transactions()) == 8
        assert len(db.queries.list_recent()) == 8

    def test_facade_default_follows_config(self, db):
        """Test that the facade and query defaults both use the configured limit."""
        facade = inspect.signature(db.list_recent_transactions)
        queries = inspect.signature(db.queries.list_recent)
        assert facade.parameters["limit"].default == DEFAULT_RECENT_LIMIT
        assert queries.parameters["limit"].default == DEFAULT_RECENT_LIMIT

    @pytest.mark.parametrize("limit", [0, 101, -1])
    def test_limit_bounds(self, db, limit):
        """Test that limits outside 1-100 are rejected."""
        with pytest.raises(ValueError):
            db.list_recent_transactions(limit)

    def test_limit_edges(self, db, add_tx):
        """Test the smallest and largest accepted limits."""
        add_tx("2025-03-01")
        add_tx("2025-03-02")
        assert len(db.list_recent_transactions(1)) == 1
        assert len(db.list_recent_transactions(100)) == 2


class TestSummaries:
    """Tests for income/expense aggregates."""

    def test_empty_summary(self, db):
        """Test that an empty ledger reports zeros."""
        summary = db.get_summary()
        assert summary.income_total == 0
        assert summary.expense_total == 0
        assert summary.balance == 0

    def test_summary_signed_sum(self, db, add_tx):
        """Test that the balance is income minus expense."""
        add_tx("2025-03-01", amount=1500, type=TransactionType.INCOME)
        add_tx("2025-03-02", amount=200)
        add_tx("2024-12-24", amount=300)

        summary = db.get_summary()
        assert summary.income_total == 1500
        assert summary.expense_total == 500
        assert summary.balance == 1000

    def test_insert_then_delete_restores_summary(self, db, add_tx):
        """Test that removing a transaction undoes its effect on the summary."""
        add_tx("2025-03-01", amount=100, type=TransactionType.INCOME)
        before = db.get_summary()

        tx = add_tx("2025-03-02", amount=33.33)
        db.delete_transaction(tx.id)

        assert db.get_summary() == before

    def test_period_summary(self, db, add_tx):
        """Test totals restricted to one period."""
        add_tx("2025-03-01", amount=100, type=TransactionType.INCOME)
        add_tx("2025-03-02", amount=40)
        add_tx("2025-04-02", amount=999)

        summary = db.get_period_summary(db.find_period(2025, 3).id)
        assert summary.income_total == 100
        assert summary.expense_total == 40
        assert summary.balance == 60

    def test_monthly_totals(self, db, add_tx):
        """Test that every month of the year is reported."""
        add_tx("2025-01-05", amount=1000, type=TransactionType.INCOME)
        add_tx("2025-01-06", amount=250)
        add_tx("2025-03-01", amount=80)
        add_tx("2024-01-01", amount=5000, type=TransactionType.INCOME)

        totals = db.get_monthly_totals(2025)
        assert [t.month for t in totals] == list(range(1, 13))
        assert (totals[0].income, totals[0].expense, totals[0].net) == (1000, 250, 750)
        assert (totals[1].income, totals[1].expense) == (0, 0)
        assert totals[2].expense == 80
