"""
Tests for transaction writes: period resolution, validation and balances.
"""

from datetime import date, datetime

import pytest

from onefinance.db import Transaction
from onefinance.models import AccountType, TransactionType


class TestTransactionCreate:
    """Tests for inserting transactions."""

    def test_create_resolves_period(self, db, add_tx):
        """Test that a transaction lands in the period of its date."""
        assert db.find_period(2025, 3) is None

        tx = add_tx("2025-03-15", amount=42.5, title="Groceries")

        period = db.find_period(2025, 3)
        assert period is not None
        assert tx.ledger_period_id == period.id
        assert (tx.year, tx.month) == (2025, 3)
        assert tx.date == date(2025, 3, 15)
        assert tx.amount == 42.5
        assert tx.created_at is not None

    def test_create_reuses_period(self, db, add_tx):
        """Test that transactions of one month share a period."""
        first = add_tx("2025-03-01")
        second = add_tx("2025-03-31")
        assert first.ledger_period_id == second.ledger_period_id

    def test_accepts_date_objects(self, db, add_tx):
        """Test that date and datetime values are accepted."""
        assert add_tx(date(2025, 1, 2)).date == date(2025, 1, 2)
        assert add_tx(datetime(2025, 1, 3, 18, 30)).date == date(2025, 1, 3)

    def test_display_fields(self, db, add_tx):
        """Test that reads carry category and account names."""
        food = db.create_category("Food")
        cash = db.get_default_account()
        tx = add_tx("2025-03-15", category_id=food.id, account_id=cash.id)
        assert tx.category_name == "Food"
        assert tx.account_name == "Cash"

    def test_insert_writes_back_id(self, db):
        """Test that inserting through the store sets the new id on the object."""
        tx = Transaction(
            id=None,
            title="Coffee",
            amount=4,
            type=TransactionType.EXPENSE,
            date="2025-02-10",
        )
        new_id = db.insert("transaction", tx)
        assert tx.id == new_id
        assert tx.date == date(2025, 2, 10)
        assert tx.ledger_period_id == db.find_period(2025, 2).id

    @pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf"), "10"])
    def test_invalid_amount(self, db, add_tx, amount):
        """Test that amounts must be finite positive numbers."""
        with pytest.raises(ValueError):
            add_tx("2025-03-15", amount=amount)
        assert db.find_period(2025, 3) is None

    @pytest.mark.parametrize("value", ["2025-02-30", "15/03/2025", "", None, "1899-12-31"])
    def test_invalid_date(self, db, add_tx, value):
        """Test that malformed or out-of-range dates are rejected."""
        with pytest.raises(ValueError):
            add_tx(value)

    def test_invalid_type(self, db, add_tx):
        """Test that only income and expense are accepted."""
        with pytest.raises(ValueError):
            add_tx("2025-03-15", type="transfer")

    def test_blank_title(self, db, add_tx):
        """Test that a title is required."""
        with pytest.raises(ValueError):
            add_tx("2025-03-15", title="  ")

    def test_missing_category_rejected(self, db, add_tx):
        """Test that a reference to an unknown category leaves nothing behind."""
        with pytest.raises(ValueError, match="Category 999 not found"):
            add_tx("2025-03-15", category_id=999)
        assert db.find_period(2025, 3) is None
        assert db.get_transactions_with_details() == []

    def test_missing_account_rejected(self, db, add_tx):
        """Test that a reference to an unknown account is rejected."""
        with pytest.raises(ValueError, match="Account 999 not found"):
            add_tx("2025-03-15", account_id=999)


class TestTransactionUpdate:
    """Tests for updating transactions."""

    def test_date_change_moves_period(self, db, add_tx):
        """Test that editing the date re-resolves the period."""
        tx = add_tx("2025-03-15", title="Rent", amount=900)
        march = db.find_period(2025, 3)

        updated = db.update_transaction(
            tx.id, "Rent", 900, TransactionType.EXPENSE, "2025-04-02"
        )

        april = db.find_period(2025, 4)
        assert updated.ledger_period_id == april.id
        assert (updated.year, updated.month) == (2025, 4)
        assert db.list_transactions(march.id) == []
        assert [t.id for t in db.list_transactions(april.id)] == [tx.id]

    def test_update_fields(self, db, add_tx):
        """Test replacing every editable field."""
        food = db.create_category("Food")
        tx = add_tx("2025-03-15")

        updated = db.update_transaction(
            tx.id,
            "Dinner",
            55.25,
            TransactionType.EXPENSE,
            "2025-03-16",
            notes="with friends",
            category_id=food.id,
        )
        assert updated.title == "Dinner"
        assert updated.amount == 55.25
        assert updated.notes == "with friends"
        assert updated.category_name == "Food"
        assert updated.updated_at is not None

    def test_update_missing_returns_none(self, db):
        """Test that updating an unknown transaction creates nothing."""
        result = db.update_transaction(
            999, "Ghost", 10, TransactionType.EXPENSE, "2030-01-05"
        )
        assert result is None
        assert db.find_period(2030, 1) is None

    def test_store_update_missing_returns_zero(self, db):
        """Test the store contract for an unknown id."""
        tx = Transaction(
            id=999,
            title="Ghost",
            amount=10,
            type=TransactionType.EXPENSE,
            date="2030-01-05",
        )
        assert db.update("transaction", tx) == 0

    def test_update_validation(self, db, add_tx):
        """Test that an invalid edit leaves the transaction untouched."""
        tx = add_tx("2025-03-15", amount=10)
        with pytest.raises(ValueError):
            db.update_transaction(tx.id, "Bad", -1, TransactionType.EXPENSE, "2025-03-15")
        assert db.get_transaction(tx.id).amount == 10


class TestTransactionBalances:
    """Tests for account balance maintenance on transaction writes."""

    def test_insert_adjusts_balance(self, db, add_tx):
        """Test that income adds to and expense subtracts from the balance."""
        cash = db.get_default_account()
        add_tx("2025-03-01", amount=100, type=TransactionType.INCOME, account_id=cash.id)
        add_tx("2025-03-02", amount=40, account_id=cash.id)
        assert db.get_account(cash.id).balance == 60

    def test_no_account_no_balance_change(self, db, add_tx):
        """Test that transactions without an account touch no balance."""
        cash = db.get_default_account()
        add_tx("2025-03-01", amount=100)
        assert db.get_account(cash.id).balance == 0

    def test_update_reapplies_effect(self, db, add_tx):
        """Test that an edit reverses the old effect and applies the new one."""
        cash = db.get_default_account()
        tx = add_tx("2025-03-01", amount=50, account_id=cash.id)
        assert db.get_account(cash.id).balance == -50

        db.update_transaction(
            tx.id, "Refund", 20, TransactionType.INCOME, "2025-03-01", account_id=cash.id
        )
        assert db.get_account(cash.id).balance == 20

    def test_update_moves_between_accounts(self, db, add_tx):
        """Test that switching accounts moves the effect."""
        cash = db.get_default_account()
        visa = db.create_account("Visa", AccountType.CREDIT)
        tx = add_tx("2025-03-01", amount=30, account_id=cash.id)

        db.update_transaction(
            tx.id, "Entry", 30, TransactionType.EXPENSE, "2025-03-01", account_id=visa.id
        )
        assert db.get_account(cash.id).balance == 0
        assert db.get_account(visa.id).balance == -30

    def test_delete_reverses_effect(self, db, add_tx):
        """Test that deleting a transaction restores the balance."""
        cash = db.get_default_account()
        add_tx("2025-03-01", amount=75, type=TransactionType.INCOME, account_id=cash.id)
        tx = add_tx("2025-03-02", amount=20, account_id=cash.id)

        assert db.delete_transaction(tx.id) == 1
        assert db.get_account(cash.id).balance == 75
        assert db.get_transaction(tx.id) is None

    def test_delete_missing(self, db):
        """Test that deleting an unknown transaction affects nothing."""
        assert db.delete_transaction(999) == 0

    def test_delete_after_account_removed(self, db, add_tx):
        """Test that a transaction whose account is gone can still be deleted."""
        visa = db.create_account("Visa", AccountType.CREDIT)
        tx = add_tx("2025-03-01", amount=30, account_id=visa.id)
        db.delete_account(visa.id)
        assert db.delete_transaction(tx.id) == 1
