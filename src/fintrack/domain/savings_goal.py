"""Savings goals: a target amount fed by transfers into a dedicated account."""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import AccountType, SavingsGoal as SavingsGoalEntity
from fintrack.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    savings_goal_not_found,
)
from fintrack.domain.money import to_cents
from fintrack.domain.transfer import TransferService

logger = structlog.get_logger()

UPDATABLE_FIELDS = frozenset({"name", "target_amount", "description"})


def savings_account_name(goal_name: str) -> str:
    return f"{goal_name} (Savings)"


class SavingsGoalService:
    """Service for savings goals."""

    def __init__(self, db: Database):
        """Initialize savings goal service.

        Args:
            db: Database instance
        """
        self.db = db
        self.transfers = TransferService(db)

    def create_goal(
        self,
        name: str,
        target_amount: Decimal,
        source_account_id: int,
        description: Optional[str] = None,
    ) -> int:
        """Create a goal together with its savings account.

        The savings account is named "<name> (Savings)", starts at zero and
        uses the source account's currency. If the goal cannot be stored, the
        account is removed again.

        Returns:
            Goal ID

        Raises:
            ValidationError: If the name is empty or the target not positive
            NotFoundError: If the source account doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Goal name is required")
        target_amount = to_cents(target_amount)
        if target_amount is None or target_amount <= 0:
            raise ValidationError("Target amount must be greater than zero")
        source = self.transfers.accounts.require_account(source_account_id)

        savings_account_id = self.db.create_account(
            name=savings_account_name(name),
            account_type=AccountType.SAVINGS,
            currency=source.currency,
            initial_balance=Decimal("0.00"),
            description=description,
        )
        try:
            goal_id = self.db.create_savings_goal(
                name=name,
                target_amount=target_amount,
                current_amount=Decimal("0.00"),
                source_account_id=source.id,
                savings_account_id=savings_account_id,
                description=description,
            )
        except DomainError:
            logger.warning("savings_account_removed", account_id=savings_account_id)
            self.db.delete_account(savings_account_id)
            raise

        logger.info(
            "savings_goal_created",
            goal_id=goal_id,
            savings_account_id=savings_account_id,
            target_amount=str(target_amount),
        )
        return goal_id

    def get_goal(self, goal_id: int) -> Optional[SavingsGoalEntity]:
        return self.db.get_savings_goal(goal_id)

    def require_goal(self, goal_id: int) -> SavingsGoalEntity:
        """Get goal by ID or raise NotFoundError."""
        goal = self.db.get_savings_goal(goal_id)
        if goal is None:
            raise NotFoundError(savings_goal_not_found(goal_id))
        return goal

    def list_goals(self) -> list[SavingsGoalEntity]:
        return self.db.list_savings_goals()

    def update_goal(self, goal_id: int, changes: dict[str, Any]) -> None:
        """Apply a partial update to the name, target or description.

        Raises:
            NotFoundError: If the goal doesn't exist
            ValidationError: If a key is not updatable or a value is invalid
        """
        self.require_goal(goal_id)
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update savings goal field(s): {', '.join(unknown)}")

        patch = dict(changes)
        if "name" in patch:
            patch["name"] = (patch["name"] or "").strip()
            if not patch["name"]:
                raise ValidationError("Goal name is required")
        if "target_amount" in patch:
            patch["target_amount"] = to_cents(patch["target_amount"])
            if patch["target_amount"] is None or patch["target_amount"] <= 0:
                raise ValidationError("Target amount must be greater than zero")

        self.db.update_savings_goal(goal_id, **patch)
        logger.info("savings_goal_updated", goal_id=goal_id, fields=sorted(patch))

    def delete_goal(self, goal_id: int) -> None:
        """Delete a goal. Its savings account and transfers are kept.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        self.require_goal(goal_id)
        self.db.delete_savings_goal(goal_id)
        logger.info("savings_goal_deleted", goal_id=goal_id)

    def save_to_goal(self, goal_id: int, amount: Decimal, on_date: Optional[date] = None) -> str:
        """Transfer ``amount`` from the source account into the goal's account.

        Both legs are tagged ``transfer`` and ``savings``. The goal's current
        amount grows by the amount moved.

        Returns:
            The shared transaction ID

        Raises:
            NotFoundError: If the goal or one of its accounts doesn't exist
            ValidationError: If the amount is not positive or funds are short
        """
        goal = self.require_goal(goal_id)
        amount = to_cents(amount)
        transaction_id = self.transfers.savings_transfer(
            goal.source_account_id,
            goal.savings_account_id,
            amount,
            note=f"Savings: {goal.name}",
            on_date=on_date,
        )
        self.db.update_savings_goal(goal_id, current_amount=goal.current_amount + amount)
        logger.info(
            "savings_goal_funded",
            goal_id=goal_id,
            transaction_id=transaction_id,
            amount=str(amount),
        )
        return transaction_id
