"""Tests for account service and commands."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.cli.main import cli
from fintrack.domain.entities import AccountType, DPSAmountType, DPSType, TransactionType
from fintrack.domain.errors import NotFoundError, ValidationError


class TestAccountService:
    """Tests for AccountService."""

    def test_create_account(self, account_service):
        account_id = account_service.create_account(
            name="Checking", account_type=AccountType.CHECKING, currency="usd", initial_balance=Decimal("250")
        )

        account = account_service.get_account(account_id)
        assert account.name == "Checking"
        assert account.currency == "USD"
        assert account.initial_balance == Decimal("250.00")
        assert account.calculated_balance == Decimal("250.00")
        assert account.is_active is True
        assert account.has_dps is False

    def test_first_account_gets_cash_wallet(self, account_service):
        account_service.create_account(name="Checking", account_type=AccountType.CHECKING, currency="EUR")
        account_service.create_account(name="Savings", account_type=AccountType.SAVINGS, currency="EUR")

        wallets = [a for a in account_service.list_accounts() if a.type == AccountType.CASH]
        assert len(wallets) == 1
        assert wallets[0].name == "Cash Wallet"
        assert wallets[0].currency == "EUR"
        assert wallets[0].initial_balance == 0

    def test_cash_account_does_not_get_extra_wallet(self, account_service):
        account_service.create_account(name="Pocket", account_type=AccountType.CASH, currency="USD")

        assert [a.name for a in account_service.list_accounts()] == ["Pocket"]

    def test_create_with_dps_creates_linked_subaccount(self, account_service):
        account_id = account_service.create_account(
            name="Salary",
            account_type=AccountType.CHECKING,
            currency="USD",
            has_dps=True,
            dps_type=DPSType.MONTHLY,
            dps_amount_type=DPSAmountType.FIXED,
            dps_fixed_amount=Decimal("150"),
            dps_initial_balance=Decimal("40"),
        )

        primary = account_service.get_account(account_id)
        assert primary.has_dps is True
        assert primary.dps_type == DPSType.MONTHLY
        assert primary.dps_fixed_amount == Decimal("150.00")

        subaccount = account_service.get_account(primary.dps_savings_account_id)
        assert subaccount.name == "Salary (DPS)"
        assert subaccount.type == AccountType.SAVINGS
        assert subaccount.currency == "USD"
        assert subaccount.calculated_balance == Decimal("40.00")
        assert subaccount.has_dps is False
        assert account_service.find_dps_subaccount_ids() == {subaccount.id}

    def test_custom_dps_plan_drops_fixed_amount(self, account_service):
        account_id = account_service.create_account(
            name="Bonus",
            account_type=AccountType.CHECKING,
            currency="USD",
            has_dps=True,
            dps_type=DPSType.FLEXIBLE,
            dps_amount_type=DPSAmountType.CUSTOM,
            dps_fixed_amount=Decimal("99"),
        )

        assert account_service.get_account(account_id).dps_fixed_amount is None

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"name": "  "}, "name is required"),
            ({"currency": "US1"}, "Invalid currency"),
            ({"initial_balance": Decimal("-1")}, "must not be negative"),
            ({"has_dps": True}, "DPS type and amount type are required"),
            (
                {"has_dps": True, "dps_type": DPSType.MONTHLY, "dps_amount_type": DPSAmountType.FIXED},
                "positive fixed amount",
            ),
        ],
    )
    def test_create_validation(self, account_service, kwargs, message):
        params = {"name": "Checking", "account_type": AccountType.CHECKING, "currency": "USD"}
        params.update(kwargs)

        with pytest.raises(ValidationError, match=message):
            account_service.create_account(**params)
        assert account_service.list_accounts() == []

    def test_calculated_balance_follows_transactions(self, account_service, transaction_service, sample_account):
        transaction_service.create_transaction(
            account_id=sample_account.id,
            amount=Decimal("300"),
            type=TransactionType.INCOME,
            category="Salary",
            date=date(2024, 1, 1),
        )
        transaction_service.create_transaction(
            account_id=sample_account.id,
            amount=Decimal("120.50"),
            type=TransactionType.EXPENSE,
            category="Food",
            date=date(2024, 1, 2),
        )

        assert account_service.get_account(sample_account.id).calculated_balance == Decimal("1179.50")

    def test_update_is_partial(self, account_service, sample_account):
        account_service.update_account(sample_account.id, {"name": "Main", "description": "Everyday"})

        account = account_service.get_account(sample_account.id)
        assert account.name == "Main"
        assert account.description == "Everyday"
        assert account.currency == "USD"
        assert account.initial_balance == Decimal("1000.00")

    def test_update_rejects_unknown_fields(self, account_service, sample_account):
        with pytest.raises(ValidationError, match="calculated_balance"):
            account_service.update_account(sample_account.id, {"calculated_balance": Decimal("5")})

    def test_dps_subaccount_cannot_enable_dps(self, account_service):
        primary_id = account_service.create_account(
            name="Salary",
            account_type=AccountType.CHECKING,
            currency="USD",
            has_dps=True,
            dps_type=DPSType.MONTHLY,
            dps_amount_type=DPSAmountType.CUSTOM,
        )
        subaccount_id = account_service.get_account(primary_id).dps_savings_account_id

        with pytest.raises(ValidationError, match="DPS savings account"):
            account_service.update_account(
                subaccount_id,
                {"has_dps": True, "dps_type": DPSType.MONTHLY, "dps_amount_type": DPSAmountType.CUSTOM},
            )

    def test_update_missing_account(self, account_service):
        with pytest.raises(NotFoundError):
            account_service.update_account(999, {"name": "X"})

    def test_set_active(self, account_service, sample_account):
        account_service.set_active(sample_account.id, False)
        assert account_service.get_account(sample_account.id).is_active is False

        account_service.set_active(sample_account.id, True)
        assert account_service.get_account(sample_account.id).is_active is True

    def test_disable_dps_keeps_savings_account(self, account_service):
        primary_id = account_service.create_account(
            name="Salary",
            account_type=AccountType.CHECKING,
            currency="USD",
            has_dps=True,
            dps_type=DPSType.MONTHLY,
            dps_amount_type=DPSAmountType.FIXED,
            dps_fixed_amount=Decimal("10"),
        )
        subaccount_id = account_service.get_account(primary_id).dps_savings_account_id

        account_service.disable_dps(primary_id)

        primary = account_service.get_account(primary_id)
        assert primary.has_dps is False
        assert primary.dps_savings_account_id is None
        assert primary.dps_fixed_amount is None
        assert account_service.get_account(subaccount_id) is not None

    def test_delete_account_removes_transactions_and_links(self, temp_db, account_service, transaction_service):
        primary_id = account_service.create_account(
            name="Salary",
            account_type=AccountType.CHECKING,
            currency="USD",
            has_dps=True,
            dps_type=DPSType.MONTHLY,
            dps_amount_type=DPSAmountType.CUSTOM,
        )
        subaccount_id = account_service.get_account(primary_id).dps_savings_account_id
        transaction_service.create_transaction(
            account_id=subaccount_id,
            amount=Decimal("5"),
            type=TransactionType.INCOME,
            category="DPS",
            date=date(2024, 1, 1),
        )

        account_service.delete_account(subaccount_id)

        assert account_service.get_account(subaccount_id) is None
        assert temp_db.list_transactions(account_id=subaccount_id) == []
        assert account_service.get_account(primary_id).dps_savings_account_id is None

    def test_delete_missing_account(self, account_service):
        with pytest.raises(NotFoundError, match="Account 42 not found"):
            account_service.delete_account(42)


class TestAccountCommands:
    """Tests for account CLI commands."""

    def test_account_create(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "account", "create", "Checking", "--currency", "EUR",
             "--initial-balance", "1,250.00"],
        )

        assert result.exit_code == 0
        assert "Created account 'Checking'" in result.output
        assert "ID:" in result.output

    def test_account_create_with_dps(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path", temp_db.database_path,
                "account", "create", "Salary",
                "--dps", "--dps-type", "monthly", "--dps-amount-type", "fixed", "--dps-fixed-amount", "100",
            ],
        )

        assert result.exit_code == 0
        assert "Created DPS account 'Salary (DPS)'" in result.output

    def test_account_create_invalid(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "create", "Salary", "--dps"]
        )

        assert result.exit_code == 1
        assert "Error: DPS type and amount type are required" in result.output

    def test_account_list_empty(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

        assert result.exit_code == 0
        assert "No accounts found" in result.output

    def test_account_list_with_filters(self, cli_runner, temp_db, sample_account):
        temp_db.create_account(
            name="Euro Savings", account_type=AccountType.SAVINGS, currency="EUR", initial_balance=Decimal("5")
        )

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "list", "--currency", "eur"]
        )

        assert result.exit_code == 0
        assert "Euro Savings" in result.output
        assert "Checking" not in result.output

    def test_account_list_sorted_by_balance(self, cli_runner, temp_db, sample_account):
        temp_db.create_account(
            name="Small", account_type=AccountType.SAVINGS, currency="USD", initial_balance=Decimal("5")
        )

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "list", "--sort", "balance", "--desc"]
        )

        assert result.exit_code == 0
        assert result.output.index("Checking") < result.output.index("Small")

    def test_account_show(self, cli_runner, temp_db, sample_account):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "checking"])

        assert result.exit_code == 0
        assert "Checking (ID:" in result.output
        assert "1,000.00" in result.output

    def test_account_show_unknown(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "show", "Nope"])

        assert result.exit_code == 1
        assert "Error: Account 'Nope' not found" in result.output

    def test_account_update_and_deactivate(self, cli_runner, temp_db, sample_account):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "update", str(sample_account.id), "--name", "Main"]
        )
        assert result.exit_code == 0

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "deactivate", "Main"])
        assert result.exit_code == 0
        assert "is inactive" in result.output

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "list", "--status", "inactive"]
        )
        assert "Main" in result.output

    def test_account_delete_with_confirmation(self, cli_runner, temp_db, sample_account):
        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "delete", "Checking"], input="n\n"
        )
        assert "Deletion cancelled" in result.output

        result = cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "account", "delete", "Checking", "--yes"]
        )
        assert result.exit_code == 0
        assert "Deleted account 'Checking'" in result.output
