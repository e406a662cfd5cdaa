"""Purchase tracking service."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import (
    Purchase as PurchaseEntity,
    PurchasePriority,
    PurchaseStatus,
    TransactionType,
)
from fintrack.domain.errors import NotFoundError, ValidationError, account_not_found, purchase_not_found
from fintrack.domain.money import to_cents
from fintrack.domain.transaction import TransactionService

logger = structlog.get_logger()

PURCHASE_TAG = "purchase"
DEFAULT_CURRENCY = "USD"
BULK_FIELDS = frozenset({"category", "status", "priority", "notes", "exclude_from_calculation"})


class PurchaseService:
    """Service for planned and completed purchases."""

    def __init__(self, db: Database):
        """Initialize purchase service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transactions = TransactionService(db)

    def create_purchase(
        self,
        item_name: str,
        category: str,
        purchase_date: date,
        status: PurchaseStatus = PurchaseStatus.PLANNED,
        price: Decimal = Decimal("0"),
        account_id: Optional[int] = None,
        priority: PurchasePriority = PurchasePriority.MEDIUM,
        notes: str = "",
        exclude_from_calculation: bool = False,
    ) -> int:
        """Record a purchase.

        Planned purchases are stored with price 0. A purchased item that is
        not excluded from calculation is paid from ``account_id``: an expense
        tagged ``purchase`` is created and linked by its transaction ID.

        Returns:
            Purchase ID

        Raises:
            ValidationError: If the input is invalid
            NotFoundError: If the paying account doesn't exist
        """
        item_name = (item_name or "").strip()
        if not item_name:
            raise ValidationError("Item name is required")
        category = (category or "").strip()
        if not category:
            raise ValidationError("Category is required")
        status = PurchaseStatus(status)
        priority = PurchasePriority(priority)

        currency = DEFAULT_CURRENCY
        transaction_id = None

        price = to_cents(price)
        if status == PurchaseStatus.PLANNED:
            price = Decimal("0")
        elif price is None or price <= 0:
            raise ValidationError("Price must be greater than zero")

        if account_id is not None:
            account = self.db.get_account(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            currency = account.currency

        if status == PurchaseStatus.PURCHASED and not exclude_from_calculation:
            if account_id is None:
                raise ValidationError("An account is required to pay for a purchase")
            created = self.transactions.create_transaction(
                account_id=account_id,
                amount=price,
                type=TransactionType.EXPENSE,
                category=category,
                date=purchase_date,
                description=item_name,
                tags=(PURCHASE_TAG,),
            )
            transaction_id = created.transaction_id

        purchase_id = self.db.create_purchase(
            item_name=item_name,
            category=category,
            price=price,
            currency=currency,
            purchase_date=purchase_date,
            status=status,
            priority=priority,
            notes=notes or "",
            transaction_id=transaction_id,
            exclude_from_calculation=exclude_from_calculation,
        )
        logger.info(
            "purchase_created",
            purchase_id=purchase_id,
            status=status.value,
            transaction_id=transaction_id,
        )
        return purchase_id

    def get_purchase(self, purchase_id: int) -> Optional[PurchaseEntity]:
        return self.db.get_purchase(purchase_id)

    def list_purchases(self, status: Optional[PurchaseStatus] = None) -> list[PurchaseEntity]:
        """List purchases, newest first, optionally of one status."""
        return self.db.list_purchases(status=status)

    def update_purchase_status(
        self,
        purchase_id: int,
        status: PurchaseStatus,
        account_id: Optional[int] = None,
        price: Optional[Decimal] = None,
    ) -> None:
        """Move a purchase to another status.

        Going from planned to purchased pays for it: ``account_id`` and a
        positive ``price`` are required unless the purchase is excluded from
        calculation.

        Raises:
            NotFoundError: If the purchase or account doesn't exist
            ValidationError: If payment details are missing
        """
        purchase = self.db.get_purchase(purchase_id)
        if purchase is None:
            raise NotFoundError(purchase_not_found(purchase_id))
        status = PurchaseStatus(status)

        price = to_cents(price)
        changes: dict = {"status": status}
        if price is not None:
            if price <= 0:
                raise ValidationError("Price must be greater than zero")
            changes["price"] = price

        paying = (
            purchase.status == PurchaseStatus.PLANNED
            and status == PurchaseStatus.PURCHASED
            and not purchase.exclude_from_calculation
        )
        if paying:
            if account_id is None or price is None:
                raise ValidationError("An account and a price are required to mark a purchase as purchased")
            account = self.db.get_account(account_id)
            if account is None:
                raise NotFoundError(account_not_found(account_id))
            created = self.transactions.create_transaction(
                account_id=account_id,
                amount=price,
                type=TransactionType.EXPENSE,
                category=purchase.category,
                date=purchase.purchase_date,
                description=purchase.item_name,
                tags=(PURCHASE_TAG,),
            )
            changes["transaction_id"] = created.transaction_id
            changes["currency"] = account.currency

        self.db.update_purchase(purchase_id, **changes)
        logger.info("purchase_status_changed", purchase_id=purchase_id, status=status.value)

    def bulk_update_purchases(self, purchase_ids: list[int], changes: dict[str, Any]) -> int:
        """Apply the same change to several purchases at once.

        Marking purchases as purchased needs a paying account and price per
        item, so that status goes through ``update_purchase_status`` instead.

        Returns:
            Number of purchases updated

        Raises:
            ValidationError: If no IDs are given or a change is not allowed
            NotFoundError: If any purchase doesn't exist; nothing is updated
        """
        purchase_ids = list(dict.fromkeys(purchase_ids))
        if not purchase_ids:
            raise ValidationError("No purchases selected")
        unknown = sorted(set(changes) - BULK_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot bulk update purchase field(s): {', '.join(unknown)}")
        if not changes:
            raise ValidationError("Nothing to update")

        patch = dict(changes)
        if "status" in patch:
            patch["status"] = PurchaseStatus(patch["status"])
            if patch["status"] == PurchaseStatus.PURCHASED:
                raise ValidationError("Mark purchases as purchased one at a time")
        if "priority" in patch:
            patch["priority"] = PurchasePriority(patch["priority"])
        if "category" in patch:
            patch["category"] = (patch["category"] or "").strip()
            if not patch["category"]:
                raise ValidationError("Category is required")

        count = self.db.update_purchases(purchase_ids, **patch)
        logger.info("purchases_bulk_updated", count=count, fields=sorted(patch))
        return count

    def delete_purchase(self, purchase_id: int) -> None:
        """Delete a purchase. Its linked transaction, if any, is kept.

        Raises:
            NotFoundError: If the purchase doesn't exist
        """
        if self.db.get_purchase(purchase_id) is None:
            raise NotFoundError(purchase_not_found(purchase_id))
        self.db.delete_purchase(purchase_id)
        logger.info("purchase_deleted", purchase_id=purchase_id)
