"""Transfers between accounts."""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import TransactionType
from fintrack.domain.errors import (
    DomainError,
    ValidationError,
    insufficient_funds,
    no_dps_subaccount,
)
from fintrack.domain.ledger import DPS_CATEGORY, DPS_TRANSFER_TAG, SAVINGS_GOAL_TAG, TRANSFER_TAG
from fintrack.domain.money import to_cents
from fintrack.domain.transaction import TransactionService
from fintrack.domain.account import AccountService

logger = structlog.get_logger()

TRANSFER_CATEGORY = "Transfer"


class TransferService:
    """Moves money between two accounts as a pair of linked transactions."""

    def __init__(self, db: Database):
        """Initialize transfer service.

        Args:
            db: Database instance
        """
        self.db = db
        self.accounts = AccountService(db)
        self.transactions = TransactionService(db)

    def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        exchange_rate: Decimal = Decimal("1"),
        note: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> str:
        """Transfer ``amount`` from one account to another.

        The source gets an expense, the destination an income of
        ``amount * exchange_rate``. Both legs share one transaction ID. If
        the destination leg cannot be stored, the source leg is removed
        again before the error propagates.

        Returns:
            The shared transaction ID

        Raises:
            ValidationError: If the accounts are the same, the amount or rate
                is not positive, or the source lacks funds
            NotFoundError: If an account doesn't exist
        """
        return self._move(
            from_account_id,
            to_account_id,
            amount,
            exchange_rate,
            note,
            on_date,
            category=TRANSFER_CATEGORY,
            tags=(TRANSFER_TAG,),
        )

    def dps_transfer(
        self,
        primary_account_id: int,
        amount: Optional[Decimal] = None,
        on_date: Optional[date] = None,
    ) -> str:
        """Deposit into the DPS savings account linked to an account.

        Fixed plans deposit their fixed amount unless ``amount`` is given;
        custom plans require ``amount``.

        Returns:
            The shared transaction ID
        """
        primary = self.accounts.require_account(primary_account_id)
        if not primary.has_dps or primary.dps_savings_account_id is None:
            raise ValidationError(no_dps_subaccount(primary.name))
        if amount is None:
            amount = primary.dps_fixed_amount
        if amount is None:
            raise ValidationError(f"Account '{primary.name}' has a custom DPS plan; give an amount")
        return self._move(
            primary.id,
            primary.dps_savings_account_id,
            amount,
            Decimal("1"),
            None,
            on_date,
            category=DPS_CATEGORY,
            tags=(DPS_TRANSFER_TAG,),
        )

    def savings_transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        note: str,
        on_date: Optional[date] = None,
    ) -> str:
        """Transfer into a savings goal account, tagged ``transfer`` and ``savings``.

        Returns:
            The shared transaction ID
        """
        return self._move(
            from_account_id,
            to_account_id,
            amount,
            Decimal("1"),
            note,
            on_date,
            category=TRANSFER_CATEGORY,
            tags=(TRANSFER_TAG, SAVINGS_GOAL_TAG),
        )

    def _move(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        exchange_rate: Decimal,
        note: Optional[str],
        on_date: Optional[date],
        category: str,
        tags: tuple[str, ...],
    ) -> str:
        if from_account_id == to_account_id:
            raise ValidationError("Source and destination accounts must be different")
        amount = to_cents(amount)
        if amount is None or amount <= 0:
            raise ValidationError("Amount must be greater than zero")
        if exchange_rate is None or exchange_rate <= 0:
            raise ValidationError("Exchange rate must be greater than zero")

        source = self.accounts.require_account(from_account_id)
        destination = self.accounts.require_account(to_account_id)
        if source.calculated_balance < amount:
            raise ValidationError(insufficient_funds(source.name, source.calculated_balance, amount))

        to_amount = to_cents(amount * exchange_rate)
        if to_amount <= 0:
            raise ValidationError("Converted amount rounds to zero; check the exchange rate")
        on_date = on_date or date.today()
        transaction_id = self.transactions.new_transaction_id()

        source_leg = self.transactions.create_transaction(
            account_id=source.id,
            amount=amount,
            type=TransactionType.EXPENSE,
            category=category,
            date=on_date,
            description=note or f"Transfer to {destination.name}",
            tags=tags,
            transaction_id=transaction_id,
        )
        try:
            self.transactions.create_transaction(
                account_id=destination.id,
                amount=to_amount,
                type=TransactionType.INCOME,
                category=category,
                date=on_date,
                description=note or f"Transfer from {source.name}",
                tags=tags,
                transaction_id=transaction_id,
            )
        except DomainError:
            logger.warning("transfer_source_leg_removed", transaction_id=transaction_id)
            self.db.delete_transaction(source_leg.id)
            raise

        logger.info(
            "transfer_completed",
            transaction_id=transaction_id,
            from_account_id=source.id,
            to_account_id=destination.id,
            amount=str(amount),
            to_amount=str(to_amount),
            category=category,
        )
        return transaction_id
