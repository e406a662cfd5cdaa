"""Tests for purchase tracking."""

from datetime import date
from decimal import Decimal

import pytest

from fintrack.cli.main import cli
from fintrack.domain.entities import PurchasePriority, PurchaseStatus, TransactionType
from fintrack.domain.errors import NotFoundError, ValidationError


class TestPurchaseService:
    """Tests for PurchaseService."""

    def test_planned_purchase_has_no_price_or_transaction(self, temp_db, purchase_service):
        purchase_id = purchase_service.create_purchase(
            item_name="Bike",
            category="Transportation",
            purchase_date=date(2024, 7, 1),
            price=Decimal("450"),
            priority=PurchasePriority.LOW,
        )

        purchase = purchase_service.get_purchase(purchase_id)
        assert purchase.status == PurchaseStatus.PLANNED
        assert purchase.price == Decimal("0")
        assert purchase.priority == PurchasePriority.LOW
        assert purchase.transaction_id is None
        assert temp_db.list_transactions() == []

    def test_purchased_item_is_paid_from_account(self, temp_db, purchase_service, sample_account):
        purchase_id = purchase_service.create_purchase(
            item_name="Desk",
            category="Shopping",
            purchase_date=date(2024, 7, 2),
            status=PurchaseStatus.PURCHASED,
            price=Decimal("180"),
            account_id=sample_account.id,
        )

        purchase = purchase_service.get_purchase(purchase_id)
        transactions = temp_db.list_transactions(account_id=sample_account.id)
        assert len(transactions) == 1
        assert transactions[0].transaction_id == purchase.transaction_id
        assert transactions[0].type == TransactionType.EXPENSE
        assert transactions[0].tags == ("purchase",)
        assert transactions[0].description == "Desk"
        assert purchase.currency == "USD"
        assert temp_db.get_account(sample_account.id).calculated_balance == Decimal("820.00")

    def test_excluded_purchase_creates_no_transaction(self, temp_db, purchase_service):
        purchase_id = purchase_service.create_purchase(
            item_name="Gift",
            category="Shopping",
            purchase_date=date(2024, 7, 2),
            status=PurchaseStatus.PURCHASED,
            price=Decimal("30"),
            exclude_from_calculation=True,
        )

        assert purchase_service.get_purchase(purchase_id).transaction_id is None
        assert temp_db.list_transactions() == []

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"item_name": " "}, "Item name is required"),
            ({"category": ""}, "Category is required"),
            ({"status": PurchaseStatus.PURCHASED, "price": Decimal("0")}, "Price must be greater than zero"),
            ({"status": PurchaseStatus.PURCHASED, "price": Decimal("5")}, "account is required"),
        ],
    )
    def test_create_validation(self, purchase_service, kwargs, message):
        params = {"item_name": "Lamp", "category": "Shopping", "purchase_date": date(2024, 7, 2)}
        params.update(kwargs)

        with pytest.raises(ValidationError, match=message):
            purchase_service.create_purchase(**params)

    def test_mark_planned_as_purchased(self, temp_db, purchase_service, sample_account):
        purchase_id = purchase_service.create_purchase(
            item_name="Phone", category="Shopping", purchase_date=date(2024, 7, 3)
        )

        with pytest.raises(ValidationError, match="account and a price"):
            purchase_service.update_purchase_status(purchase_id, PurchaseStatus.PURCHASED)

        purchase_service.update_purchase_status(
            purchase_id, PurchaseStatus.PURCHASED, account_id=sample_account.id, price=Decimal("600")
        )

        purchase = purchase_service.get_purchase(purchase_id)
        assert purchase.status == PurchaseStatus.PURCHASED
        assert purchase.price == Decimal("600.00")
        assert purchase.transaction_id is not None
        assert temp_db.get_account(sample_account.id).calculated_balance == Decimal("400.00")

    def test_cancel_planned_purchase(self, purchase_service):
        purchase_id = purchase_service.create_purchase(
            item_name="Sofa", category="Shopping", purchase_date=date(2024, 7, 3)
        )

        purchase_service.update_purchase_status(purchase_id, PurchaseStatus.CANCELLED)

        assert purchase_service.get_purchase(purchase_id).status == PurchaseStatus.CANCELLED

    def test_list_by_status(self, purchase_service):
        purchase_service.create_purchase(item_name="A", category="Shopping", purchase_date=date(2024, 1, 1))
        cancelled = purchase_service.create_purchase(
            item_name="B", category="Shopping", purchase_date=date(2024, 1, 2)
        )
        purchase_service.update_purchase_status(cancelled, PurchaseStatus.CANCELLED)

        planned = purchase_service.list_purchases(status=PurchaseStatus.PLANNED)

        assert [p.item_name for p in planned] == ["A"]
        assert len(purchase_service.list_purchases()) == 2

    def test_delete_keeps_transaction(self, temp_db, purchase_service, sample_account):
        purchase_id = purchase_service.create_purchase(
            item_name="Chair",
            category="Shopping",
            purchase_date=date(2024, 7, 2),
            status=PurchaseStatus.PURCHASED,
            price=Decimal("60"),
            account_id=sample_account.id,
        )

        purchase_service.delete_purchase(purchase_id)

        assert purchase_service.get_purchase(purchase_id) is None
        assert len(temp_db.list_transactions()) == 1

    def test_bulk_update(self, purchase_service):
        ids = [
            purchase_service.create_purchase(item_name=name, category="Shopping", purchase_date=date(2024, 1, 1))
            for name in ("A", "B", "C")
        ]

        count = purchase_service.bulk_update_purchases(
            ids[:2] + [ids[0]], {"status": "cancelled", "priority": PurchasePriority.HIGH}
        )

        assert count == 2
        assert [purchase_service.get_purchase(i).status for i in ids] == [
            PurchaseStatus.CANCELLED,
            PurchaseStatus.CANCELLED,
            PurchaseStatus.PLANNED,
        ]
        assert purchase_service.get_purchase(ids[1]).priority == PurchasePriority.HIGH

    def test_bulk_update_missing_purchase_changes_nothing(self, purchase_service):
        purchase_id = purchase_service.create_purchase(
            item_name="A", category="Shopping", purchase_date=date(2024, 1, 1)
        )

        with pytest.raises(NotFoundError, match="Purchase 99 not found"):
            purchase_service.bulk_update_purchases([purchase_id, 99], {"notes": "later"})
        assert purchase_service.get_purchase(purchase_id).notes == ""

    @pytest.mark.parametrize(
        "ids, changes, message",
        [
            ([], {"notes": "x"}, "No purchases selected"),
            ([1], {}, "Nothing to update"),
            ([1], {"price": Decimal("5")}, "Cannot bulk update purchase field"),
            ([1], {"status": PurchaseStatus.PURCHASED}, "one at a time"),
        ],
    )
    def test_bulk_update_rejects(self, purchase_service, ids, changes, message):
        purchase_service.create_purchase(item_name="A", category="Shopping", purchase_date=date(2024, 1, 1))

        with pytest.raises(ValidationError, match=message):
            purchase_service.bulk_update_purchases(ids, changes)

    def test_missing_purchase(self, purchase_service):
        with pytest.raises(NotFoundError, match="Purchase 7 not found"):
            purchase_service.delete_purchase(7)
        with pytest.raises(NotFoundError):
            purchase_service.update_purchase_status(7, PurchaseStatus.CANCELLED)


class TestPurchaseCommands:
    """Tests for purchase CLI commands."""

    def test_add_and_list(self, cli_runner, temp_db, sample_account):
        result = cli_runner.invoke(
            cli,
            [
                "--db-path", temp_db.database_path,
                "purchase", "add", "Headphones", "--category", "Shopping",
                "--status", "purchased", "--price", "89.99", "--account", "Checking",
            ],
        )
        assert result.exit_code == 0
        assert "Recorded purchase 'Headphones'" in result.output

        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "purchase", "list"])
        assert result.exit_code == 0
        assert "Headphones" in result.output
        assert "89.99 USD" in result.output

    def test_add_purchased_without_account(self, cli_runner, temp_db):
        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "purchase", "add", "Desk", "--category", "Shopping",
             "--status", "purchased", "--price", "10"],
        )

        assert result.exit_code == 1
        assert "Error: An account is required" in result.output

    def test_list_empty(self, cli_runner, temp_db):
        result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "purchase", "list"])

        assert result.exit_code == 0
        assert "No purchases found." in result.output

    def test_bulk_update_command(self, cli_runner, temp_db, purchase_service):
        ids = [
            purchase_service.create_purchase(item_name=name, category="Shopping", purchase_date=date(2024, 1, 1))
            for name in ("A", "B")
        ]

        result = cli_runner.invoke(
            cli,
            ["--db-path", temp_db.database_path, "purchase", "bulk-update", *map(str, ids), "--status", "cancelled"],
        )

        assert result.exit_code == 0
        assert "Updated 2 purchase(s)" in result.output
        assert purchase_service.list_purchases(status=PurchaseStatus.PLANNED) == []
