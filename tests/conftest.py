"""Shared pytest fixtures for fintrack tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal

import pytest
import structlog

from fintrack.database.factories import create_sqlite_database
from fintrack.domain.account import AccountService
from fintrack.domain.category import CategoryService
from fintrack.domain.dps_closure import DPSClosureWorkflow
from fintrack.domain.entities import AccountType, DPSAmountType, DPSType, TransactionType
from fintrack.domain.lend_borrow import LendBorrowService
from fintrack.domain.purchase import PurchaseService
from fintrack.domain.savings_goal import SavingsGoalService
from fintrack.domain.transaction import TransactionService
from fintrack.domain.transfer import TransferService


@pytest.fixture(autouse=True)
def reset_structlog():
    """Drop logging config set up by a CLI run so later tests log to the live streams."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def transfer_service(temp_db):
    """Create a TransferService with a temporary database."""
    return TransferService(temp_db)


@pytest.fixture
def purchase_service(temp_db):
    """Create a PurchaseService with a temporary database."""
    return PurchaseService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def savings_goal_service(temp_db):
    """Create a SavingsGoalService with a temporary database."""
    return SavingsGoalService(temp_db)


@pytest.fixture
def lend_borrow_service(temp_db):
    """Create a LendBorrowService with a temporary database."""
    return LendBorrowService(temp_db)


@pytest.fixture
def workflow(temp_db):
    """Create a DPSClosureWorkflow with a fixed transfer date."""
    return DPSClosureWorkflow(temp_db, today=lambda: date(2024, 6, 30))


@pytest.fixture
def sample_account(temp_db):
    """A USD checking account with an opening balance of 1000.

    Created through the store directly so no cash wallet is added.
    """
    account_id = temp_db.create_account(
        name="Checking",
        account_type=AccountType.CHECKING,
        currency="USD",
        initial_balance=Decimal("1000.00"),
    )
    return temp_db.get_account(account_id)


@pytest.fixture
def dps_accounts(temp_db, transaction_service):
    """A primary account with a linked DPS sub-account holding 500.

    Returns (primary, subaccount). The sub-account balance comes from an
    opening balance of 300 plus a 200 deposit.
    """
    def make(currency="USD"):
        subaccount_id = temp_db.create_account(
            name="Salary (DPS)",
            account_type=AccountType.SAVINGS,
            currency=currency,
            initial_balance=Decimal("300.00"),
        )
        primary_id = temp_db.create_account(
            name="Salary",
            account_type=AccountType.CHECKING,
            currency=currency,
            initial_balance=Decimal("2000.00"),
            has_dps=True,
            dps_type=DPSType.MONTHLY,
            dps_amount_type=DPSAmountType.FIXED,
            dps_fixed_amount=Decimal("200.00"),
            dps_savings_account_id=subaccount_id,
        )
        transaction_service.create_transaction(
            account_id=subaccount_id,
            amount=Decimal("200.00"),
            type=TransactionType.INCOME,
            category="DPS",
            date=date(2024, 5, 1),
        )
        return temp_db.get_account(primary_id), temp_db.get_account(subaccount_id)

    return make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
