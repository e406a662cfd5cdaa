"""Money lent to or borrowed from people.

Records live beside the accounts: creating or settling one does not touch any
account balance.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import (
    LendBorrow as LendBorrowEntity,
    LendBorrowStatus,
    LendBorrowTotals,
    LendBorrowType,
)
from fintrack.domain.errors import NotFoundError, ValidationError, lend_borrow_not_found
from fintrack.domain.money import to_cents

logger = structlog.get_logger()

UPDATABLE_FIELDS = frozenset({"person_name", "amount", "currency", "due_date", "status", "notes"})


def summarize_lend_borrow(records: Iterable[LendBorrowEntity]) -> dict[str, LendBorrowTotals]:
    """Totals per currency. Outstanding amounts net out partial returns."""
    totals: dict[str, dict[str, Any]] = defaultdict(
        lambda: {
            "total_lent": Decimal("0"),
            "total_borrowed": Decimal("0"),
            "outstanding_lent": Decimal("0"),
            "outstanding_borrowed": Decimal("0"),
            "active_count": 0,
            "settled_count": 0,
            "overdue_count": 0,
        }
    )
    for record in records:
        bucket = totals[record.currency]
        if record.type == LendBorrowType.LEND:
            bucket["total_lent"] += record.amount
            bucket["outstanding_lent"] += record.outstanding
        else:
            bucket["total_borrowed"] += record.amount
            bucket["outstanding_borrowed"] += record.outstanding
        bucket[f"{record.status.value}_count"] += 1
    return {currency: LendBorrowTotals(**values) for currency, values in sorted(totals.items())}


class LendBorrowService:
    """Service for lend and borrow records."""

    def __init__(self, db: Database):
        """Initialize lend/borrow service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_record(
        self,
        type: LendBorrowType,
        person_name: str,
        amount: Decimal,
        currency: str,
        due_date: Optional[date] = None,
        notes: str = "",
    ) -> int:
        """Record money lent or borrowed. New records are active.

        Returns:
            Record ID

        Raises:
            ValidationError: If the person, amount or currency is invalid
        """
        type = LendBorrowType(type)
        person_name = (person_name or "").strip()
        if not person_name:
            raise ValidationError("Person name is required")
        amount = to_cents(amount)
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        currency = (currency or "").strip().upper()
        if not currency:
            raise ValidationError("Currency is required")

        record_id = self.db.create_lend_borrow(
            type=type,
            person_name=person_name,
            amount=amount,
            currency=currency,
            due_date=due_date,
            status=LendBorrowStatus.ACTIVE,
            notes=notes or "",
            partial_return_amount=Decimal("0.00"),
        )
        logger.info("lend_borrow_created", record_id=record_id, type=type.value, amount=str(amount))
        return record_id

    def get_record(self, record_id: int) -> Optional[LendBorrowEntity]:
        return self.db.get_lend_borrow(record_id)

    def require_record(self, record_id: int) -> LendBorrowEntity:
        """Get record by ID or raise NotFoundError."""
        record = self.db.get_lend_borrow(record_id)
        if record is None:
            raise NotFoundError(lend_borrow_not_found(record_id))
        return record

    def list_records(
        self,
        type: Optional[LendBorrowType] = None,
        status: Optional[LendBorrowStatus] = None,
    ) -> list[LendBorrowEntity]:
        return self.db.list_lend_borrow(type=type, status=status)

    def update_record(self, record_id: int, changes: dict[str, Any]) -> None:
        """Apply a partial update to a record.

        Raises:
            NotFoundError: If the record doesn't exist
            ValidationError: If a key is not updatable or a value is invalid
        """
        record = self.require_record(record_id)
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update lend/borrow field(s): {', '.join(unknown)}")

        patch = dict(changes)
        if "person_name" in patch:
            patch["person_name"] = (patch["person_name"] or "").strip()
            if not patch["person_name"]:
                raise ValidationError("Person name is required")
        if "amount" in patch:
            patch["amount"] = to_cents(patch["amount"])
            if patch["amount"] is None or patch["amount"] <= 0:
                raise ValidationError("Amount must be greater than zero")
            if patch["amount"] < record.partial_return_amount:
                raise ValidationError("Amount must not be less than what was already returned")
        if "currency" in patch:
            patch["currency"] = (patch["currency"] or "").strip().upper()
            if not patch["currency"]:
                raise ValidationError("Currency is required")
        if "status" in patch:
            patch["status"] = LendBorrowStatus(patch["status"])

        self.db.update_lend_borrow(record_id, **patch)
        logger.info("lend_borrow_updated", record_id=record_id, fields=sorted(patch))

    def record_return(self, record_id: int, amount: Decimal, on_date: Optional[date] = None) -> LendBorrowEntity:
        """Record part of the money coming back.

        A return that covers the rest of the amount settles the record.

        Returns:
            The updated record

        Raises:
            NotFoundError: If the record doesn't exist
            ValidationError: If the record is settled or the amount is not
                between zero and what is outstanding
        """
        record = self.require_record(record_id)
        if record.status == LendBorrowStatus.SETTLED:
            raise ValidationError(f"Lend/borrow record {record_id} is already settled")
        amount = to_cents(amount)
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if amount > record.outstanding:
            raise ValidationError(f"Return of {amount} exceeds the outstanding {record.outstanding}")

        returned = record.partial_return_amount + amount
        patch: dict[str, Any] = {
            "partial_return_amount": returned,
            "partial_return_date": on_date or date.today(),
        }
        if returned >= record.amount:
            patch["status"] = LendBorrowStatus.SETTLED
        self.db.update_lend_borrow(record_id, **patch)
        logger.info(
            "lend_borrow_returned",
            record_id=record_id,
            amount=str(amount),
            settled=returned >= record.amount,
        )
        return self.require_record(record_id)

    def settle(self, record_id: int) -> None:
        """Mark a record as settled in full."""
        self.require_record(record_id)
        self.db.update_lend_borrow(record_id, status=LendBorrowStatus.SETTLED)
        logger.info("lend_borrow_settled", record_id=record_id)

    def delete_record(self, record_id: int) -> None:
        """Delete a record.

        Raises:
            NotFoundError: If the record doesn't exist
        """
        self.require_record(record_id)
        self.db.delete_lend_borrow(record_id)
        logger.info("lend_borrow_deleted", record_id=record_id)

    def mark_overdue(self, today: date) -> int:
        """Flag active records whose due date has passed. Returns how many changed."""
        changed = 0
        for record in self.db.list_lend_borrow(status=LendBorrowStatus.ACTIVE):
            if record.due_date is not None and record.due_date < today:
                self.db.update_lend_borrow(record.id, status=LendBorrowStatus.OVERDUE)
                changed += 1
        if changed:
            logger.info("lend_borrow_marked_overdue", count=changed)
        return changed
