"""Tests for summary command."""

from datetime import date
from decimal import Decimal

from fintrack.cli.main import cli
from fintrack.domain.entities import AccountType, TransactionType


def _add(transaction_service, account_id, amount, type, category, day=15):
    transaction_service.create_transaction(
        account_id=account_id,
        amount=Decimal(amount),
        type=type,
        category=category,
        date=date(2024, 1, day),
    )


def test_summary_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "summary"])

    assert result.exit_code == 0
    assert "No transactions found" in result.output


def test_summary_per_currency(cli_runner, temp_db, transaction_service, sample_account):
    euro_id = temp_db.create_account(
        name="Euro", account_type=AccountType.CHECKING, currency="EUR", initial_balance=Decimal("0")
    )
    _add(transaction_service, sample_account.id, "3000", TransactionType.INCOME, "Salary")
    _add(transaction_service, sample_account.id, "250", TransactionType.INCOME, "Savings")
    _add(transaction_service, sample_account.id, "1200", TransactionType.EXPENSE, "Rent")
    _add(transaction_service, euro_id, "40", TransactionType.EXPENSE, "Food")

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "summary"])

    assert result.exit_code == 0
    assert result.output.index("EUR") < result.output.index("USD")
    assert "3,250.00" in result.output
    assert "2,050.00" in result.output
    assert "250.00" in result.output
    assert "-40.00" in result.output


def test_summary_excludes_transfers_by_default(
    cli_runner, temp_db, transaction_service, transfer_service, sample_account
):
    savings_id = temp_db.create_account(
        name="Savings", account_type=AccountType.SAVINGS, currency="USD", initial_balance=Decimal("0")
    )
    _add(transaction_service, sample_account.id, "80", TransactionType.EXPENSE, "Food")
    transfer_service.transfer(sample_account.id, savings_id, Decimal("500"), on_date=date(2024, 1, 20))

    default = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "summary", "--currency", "usd"])
    included = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "summary", "--currency", "USD", "--include-transfers"]
    )

    assert default.exit_code == 0
    assert "580.00" not in default.output
    assert "80.00" in default.output
    assert "580.00" in included.output


def test_summary_date_range(cli_runner, temp_db, transaction_service, sample_account):
    _add(transaction_service, sample_account.id, "10", TransactionType.EXPENSE, "Food", day=1)
    _add(transaction_service, sample_account.id, "20", TransactionType.EXPENSE, "Food", day=31)

    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "summary", "--start-date", "2024-01-15", "--end-date", "2024-01-31"],
    )

    assert result.exit_code == 0
    assert "-20.00" in result.output
    assert "30.00" not in result.output


def test_summary_reversed_range(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "summary", "--start-date", "2024-02-01", "--end-date", "2024-01-01"],
    )

    assert result.exit_code == 1
    assert "Start date must be on or before end date" in result.output
