"""Transaction domain service."""

from typing import Any, Optional
from datetime import date
from decimal import Decimal

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import (
    CreatedTransaction,
    PurchaseDetails,
    PurchaseStatus,
    StatementLine,
    Transaction as TransactionEntity,
    TransactionType,
)
from fintrack.domain.errors import (
    NotFoundError,
    StoreError,
    ValidationError,
    account_not_found,
    transaction_not_found,
)
from fintrack.domain.ledger import build_statement
from fintrack.domain.money import to_cents
from fintrack.utils.transaction_id import generate_unique_transaction_id, is_valid_transaction_id

logger = structlog.get_logger()

UPDATABLE_FIELDS = frozenset(
    {"account_id", "amount", "type", "category", "description", "date", "tags", "donation_amount"}
)


def normalize_tags(tags) -> tuple[str, ...]:
    """Strip, drop empties and de-duplicate tags keeping their order."""
    seen: list[str] = []
    for tag in tags or ():
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def new_transaction_id(self) -> str:
        """Generate a transaction ID not yet used in the store."""
        return generate_unique_transaction_id(self.db.transaction_id_exists)

    def create_transaction(
        self,
        account_id: int,
        amount: Decimal,
        type: TransactionType,
        category: str,
        date: date,
        description: str = "",
        tags: tuple[str, ...] = (),
        donation_amount: Optional[Decimal] = None,
        transaction_id: Optional[str] = None,
        purchase_details: Optional[PurchaseDetails] = None,
    ) -> CreatedTransaction:
        """Create a transaction.

        An expense created with ``purchase_details`` also records a purchase
        linked through the transaction ID. A failure to store that purchase
        is logged and does not undo the transaction.

        Args:
            account_id: Account ID
            amount: Positive amount; the sign follows ``type``
            type: Income or expense
            category: Category name
            date: Transaction date
            description: Optional description
            tags: Optional tags
            donation_amount: Optional donation part of an income
            transaction_id: Reuse this ID (transfer legs share one)
            purchase_details: Priority and notes of the linked purchase

        Returns:
            Store ID and transaction ID of the new transaction

        Raises:
            ValidationError: If the input is invalid
            NotFoundError: If the account doesn't exist
        """
        type = TransactionType(type)
        amount = to_cents(amount)
        donation_amount = to_cents(donation_amount)
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        category = (category or "").strip()
        if not category:
            raise ValidationError("Category is required")
        if donation_amount is not None and donation_amount < 0:
            raise ValidationError("Donation amount must not be negative")

        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        if transaction_id is None:
            transaction_id = self.new_transaction_id()
        elif not is_valid_transaction_id(transaction_id):
            raise ValidationError(f"Invalid transaction ID '{transaction_id}'")

        description = (description or "").strip()
        store_id = self.db.create_transaction(
            transaction_id=transaction_id,
            account_id=account_id,
            amount=amount,
            type=type,
            category=category,
            description=description,
            date=date,
            tags=normalize_tags(tags),
            donation_amount=donation_amount,
        )
        logger.info(
            "transaction_created",
            id=store_id,
            transaction_id=transaction_id,
            account_id=account_id,
            type=type.value,
            amount=str(amount),
        )

        if purchase_details is not None and type == TransactionType.EXPENSE:
            try:
                self.db.create_purchase(
                    transaction_id=transaction_id,
                    item_name=description or "Purchase",
                    category=category,
                    price=amount,
                    currency=account.currency,
                    purchase_date=date,
                    status=PurchaseStatus.PURCHASED,
                    priority=purchase_details.priority,
                    notes=purchase_details.notes,
                )
            except StoreError as e:
                logger.warning("linked_purchase_failed", transaction_id=transaction_id, error=str(e))

        return CreatedTransaction(id=store_id, transaction_id=transaction_id)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            transaction_id: Transaction store ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> list[TransactionEntity]:
        """List transactions, newest first.

        Raises:
            ValidationError: If the date range is reversed
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        return self.db.list_transactions(
            account_id=account_id,
            start_date=start_date,
            end_date=end_date,
            category=category,
            type=type,
        )

    def update_transaction(self, transaction_id: int, changes: dict[str, Any]) -> None:
        """Apply a partial update to a transaction.

        Raises:
            NotFoundError: If the transaction or a new account doesn't exist
            ValidationError: If a key is not updatable or a value is invalid
        """
        if self.db.get_transaction(transaction_id) is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update transaction field(s): {', '.join(unknown)}")

        patch = dict(changes)
        for field in ("amount", "donation_amount"):
            if field in patch:
                patch[field] = to_cents(patch[field])
        if "donation_amount" in patch and patch["donation_amount"] is not None and patch["donation_amount"] < 0:
            raise ValidationError("Donation amount must not be negative")
        if "amount" in patch and (patch["amount"] is None or patch["amount"] <= 0):
            raise ValidationError("Amount must be greater than zero")
        if "type" in patch:
            patch["type"] = TransactionType(patch["type"])
        if "category" in patch:
            patch["category"] = (patch["category"] or "").strip()
            if not patch["category"]:
                raise ValidationError("Category is required")
        if "tags" in patch:
            patch["tags"] = normalize_tags(patch["tags"])
        if "account_id" in patch and self.db.get_account(patch["account_id"]) is None:
            raise NotFoundError(account_not_found(patch["account_id"]))

        self.db.update_transaction(transaction_id, **patch)
        logger.info("transaction_updated", id=transaction_id, fields=sorted(patch))

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction, unlinking the purchase that points at it.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        purchase = self.db.get_purchase_by_transaction_id(txn.transaction_id)
        if purchase is not None:
            self.db.update_purchase(purchase.id, transaction_id=None)

        self.db.delete_transaction(transaction_id)
        logger.info("transaction_deleted", id=transaction_id, transaction_id=txn.transaction_id)

    def get_statement(self, account_id: int) -> list[StatementLine]:
        """Newest-first transactions of an account with running balances.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return build_statement(account, self.db.list_transactions(account_id=account_id))
