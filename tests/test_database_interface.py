"""Tests for the Database interface returning domain models."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fintrack.domain import entities
from fintrack.domain.entities import AccountType, ClosureState, TransactionType
from fintrack.domain.errors import NotFoundError, StoreError, ValidationError


class TestDatabaseInterface:
    """Tests to verify the Database interface returns domain models."""

    def test_get_account_returns_domain_model(self, temp_db):
        account_id = temp_db.create_account(
            name="Checking", account_type=AccountType.CHECKING, currency="USD", initial_balance=Decimal("10")
        )

        account = temp_db.get_account(account_id)

        assert isinstance(account, entities.Account)
        assert account.type == AccountType.CHECKING
        assert isinstance(account.created_at, datetime)
        assert account.calculated_balance == Decimal("10.00")

    def test_get_missing_rows_return_none(self, temp_db):
        assert temp_db.get_account(1) is None
        assert temp_db.get_transaction(1) is None
        assert temp_db.get_purchase(1) is None
        assert temp_db.get_category(1) is None
        assert temp_db.get_dps_closure(1) is None

    def test_calculated_balance_is_signed_sum(self, temp_db, sample_account):
        for amount, type in [("100", TransactionType.INCOME), ("30.25", TransactionType.EXPENSE)]:
            temp_db.create_transaction(
                transaction_id="F0000001",
                account_id=sample_account.id,
                amount=Decimal(amount),
                type=type,
                category="Misc",
                description="",
                date=date(2024, 1, 1),
            )

        balances = {a.id: a.calculated_balance for a in temp_db.list_accounts()}

        assert balances[sample_account.id] == Decimal("1069.75")

    def test_transaction_returns_domain_model(self, temp_db, sample_account):
        store_id = temp_db.create_transaction(
            transaction_id="F1234567",
            account_id=sample_account.id,
            amount=Decimal("12.5"),
            type=TransactionType.EXPENSE,
            category="Food",
            description="Lunch",
            date=date(2024, 2, 2),
            tags=("work",),
        )

        txn = temp_db.get_transaction(store_id)

        assert isinstance(txn, entities.Transaction)
        assert txn.amount == Decimal("12.50")
        assert txn.tags == ("work",)
        assert temp_db.transaction_id_exists("F1234567")
        assert not temp_db.transaction_id_exists("F7654321")

    def test_update_rejects_unknown_field(self, temp_db, sample_account):
        with pytest.raises(ValidationError, match="Unknown account field"):
            temp_db.update_account(sample_account.id, balance=Decimal("1"))

    def test_update_missing_row(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_transaction(99, category="Food")

    def test_driver_failure_becomes_store_error(self, temp_db, sample_account):
        with pytest.raises(StoreError, match="Failed to create account"):
            temp_db.create_account(
                name=None, account_type=AccountType.CASH, currency="USD", initial_balance=Decimal("0")
            )

        # The session is usable again after the rollback
        assert [a.name for a in temp_db.list_accounts()] == ["Checking"]

    def test_list_unfinished_closures(self, temp_db):
        common = {
            "primary_account_id": 1,
            "subaccount_id": 2,
            "subaccount_name": "Salary (DPS)",
            "currency": "USD",
            "amount": Decimal("5"),
        }
        done_id = temp_db.create_dps_closure(state=ClosureState.DONE, **common)
        failed_id = temp_db.create_dps_closure(
            state=ClosureState.FAILED, failed_step=ClosureState.DETACHING, error="boom", **common
        )

        unfinished = temp_db.list_dps_closures(unfinished_only=True)

        assert [c.id for c in unfinished] == [failed_id]
        assert unfinished[0].failed_step == ClosureState.DETACHING
        assert len(temp_db.list_dps_closures()) == 2
        assert temp_db.get_dps_closure(done_id).is_finished
