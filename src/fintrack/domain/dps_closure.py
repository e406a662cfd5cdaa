"""Closing a DPS savings account.

A closure moves the balance of the DPS sub-account B of a primary account A
to a destination, detaches B from A and deletes B. It runs as a journaled
state machine::

    idle -> confirm_pending -> resolving_destination -> transferring
         -> detaching -> deleting_subaccount -> done

Every transition is written to the ``dps_closures`` journal before the step
runs. A step that raises moves the closure to ``failed`` and leaves the
steps already completed in place; ``resume`` re-runs the closure from the
failed step. Each step checks what is already recorded, so running it twice
has no further effect.

The balance is captured once, in ``begin``, and never re-read.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.account import (
    CASH_WALLET_NAME,
    DPS_CLEARED_FIELDS,
    AccountService,
    is_cash_wallet_for,
)
from fintrack.domain.entities import (
    AccountType,
    ClosureDestination,
    ClosureState,
    DPSClosure,
    TransactionType,
)
from fintrack.domain.errors import (
    ConflictError,
    DPSClosureError,
    NotFoundError,
    StoreError,
    ValidationError,
    account_not_found,
    closure_not_found,
    no_dps_subaccount,
)
from fintrack.domain.ledger import DPS_CATEGORY, DPS_DELETION_TAG
from fintrack.domain.transaction import TransactionService

logger = structlog.get_logger()

# Steps run after confirmation, in order
STEP_ORDER = (
    ClosureState.RESOLVING_DESTINATION,
    ClosureState.TRANSFERRING,
    ClosureState.DETACHING,
    ClosureState.DELETING_SUBACCOUNT,
)

RESUMABLE_STATES = frozenset({ClosureState.FAILED, *STEP_ORDER})


class DPSClosureWorkflow:
    """Journaled, resumable closure of DPS sub-accounts."""

    def __init__(self, db: Database, today: Callable[[], date] = date.today):
        """Initialize the workflow.

        Args:
            db: Database instance
            today: Date source for the transfer transaction
        """
        self.db = db
        self.today = today
        self.accounts = AccountService(db)
        self.transactions = TransactionService(db)

    def get_closure(self, closure_id: int) -> DPSClosure:
        """Get a journaled closure or raise NotFoundError."""
        closure = self.db.get_dps_closure(closure_id)
        if closure is None:
            raise NotFoundError(closure_not_found(closure_id))
        return closure

    def list_unfinished(self) -> list[DPSClosure]:
        """Closures that are awaiting confirmation, in progress or failed."""
        return self.db.list_dps_closures(unfinished_only=True)

    def begin(self, primary_account_id: int) -> DPSClosure:
        """Start closing the DPS sub-account of ``primary_account_id``.

        Captures the sub-account's id, name, currency and current balance,
        and journals them in ``confirm_pending``. A closure of the same
        account still awaiting confirmation is replaced; one that already
        started must be resumed instead.

        Raises:
            NotFoundError: If the primary or its sub-account doesn't exist
            ValidationError: If the primary has no DPS sub-account
            ConflictError: If a started closure for the primary is unfinished
        """
        primary = self.accounts.require_account(primary_account_id)
        if primary.dps_savings_account_id is None:
            raise ValidationError(no_dps_subaccount(primary.name))
        subaccount = self.db.get_account(primary.dps_savings_account_id)
        if subaccount is None:
            raise NotFoundError(account_not_found(primary.dps_savings_account_id))

        for existing in self.list_unfinished():
            if existing.primary_account_id != primary.id:
                continue
            if existing.state != ClosureState.CONFIRM_PENDING:
                raise ConflictError(
                    f"DPS closure {existing.id} for '{primary.name}' is unfinished; resume it instead"
                )
            self.db.delete_dps_closure(existing.id)

        closure_id = self.db.create_dps_closure(
            primary_account_id=primary.id,
            subaccount_id=subaccount.id,
            subaccount_name=subaccount.name,
            currency=subaccount.currency,
            amount=subaccount.calculated_balance,
            state=ClosureState.CONFIRM_PENDING,
        )
        logger.info(
            "dps_closure_started",
            closure_id=closure_id,
            primary_account_id=primary.id,
            subaccount_id=subaccount.id,
            amount=str(subaccount.calculated_balance),
            currency=subaccount.currency,
        )
        return self.get_closure(closure_id)

    def cancel(self, closure_id: int) -> None:
        """Discard a closure that is still awaiting confirmation.

        Raises:
            ValidationError: If the closure already started
        """
        closure = self.get_closure(closure_id)
        if closure.state != ClosureState.CONFIRM_PENDING:
            raise ValidationError(
                f"DPS closure {closure_id} is {closure.state.value} and can no longer be cancelled"
            )
        self.db.delete_dps_closure(closure_id)
        logger.info("dps_closure_cancelled", closure_id=closure_id)

    def confirm(self, closure_id: int, destination: ClosureDestination) -> DPSClosure:
        """Confirm a closure and run it to the end.

        Args:
            closure_id: Closure awaiting confirmation
            destination: Where the balance goes

        Returns:
            The finished closure

        Raises:
            ValidationError: If the closure is not awaiting confirmation
            DPSClosureError: If a step fails; completed steps are kept
        """
        closure = self.get_closure(closure_id)
        if closure.state != ClosureState.CONFIRM_PENDING:
            raise ValidationError(f"DPS closure {closure_id} is not awaiting confirmation")
        destination = ClosureDestination(destination)
        self.db.update_dps_closure(closure_id, destination=destination)
        logger.info("dps_closure_confirmed", closure_id=closure_id, destination=destination.value)
        return self._run(closure_id, ClosureState.RESOLVING_DESTINATION)

    def resume(self, closure_id: int) -> DPSClosure:
        """Continue a failed or interrupted closure from where it stopped.

        Raises:
            ValidationError: If the closure is done or never confirmed
            DPSClosureError: If a step fails again
        """
        closure = self.get_closure(closure_id)
        if closure.state not in RESUMABLE_STATES:
            raise ValidationError(f"DPS closure {closure_id} is {closure.state.value} and cannot be resumed")
        start = closure.failed_step if closure.state == ClosureState.FAILED else closure.state
        if start is None:
            start = ClosureState.RESOLVING_DESTINATION
        self.db.update_dps_closure(closure_id, failed_step=None, error=None)
        logger.info("dps_closure_resumed", closure_id=closure_id, step=start.value)
        return self._run(closure_id, start)

    def _run(self, closure_id: int, start: ClosureState) -> DPSClosure:
        steps = {
            ClosureState.RESOLVING_DESTINATION: self._resolve_destination,
            ClosureState.TRANSFERRING: self._transfer,
            ClosureState.DETACHING: self._detach,
            ClosureState.DELETING_SUBACCOUNT: self._delete_subaccount,
        }
        for state in STEP_ORDER[STEP_ORDER.index(start):]:
            self.db.update_dps_closure(closure_id, state=state)
            closure = self.get_closure(closure_id)
            logger.info("dps_closure_step", closure_id=closure_id, step=state.value)
            try:
                steps[state](closure)
            except Exception as e:
                self._fail(closure_id, state, e)

        self.db.update_dps_closure(closure_id, state=ClosureState.DONE)
        logger.info("dps_closure_done", closure_id=closure_id)
        return self.get_closure(closure_id)

    def _fail(self, closure_id: int, step: ClosureState, error: Exception) -> None:
        self.db.update_dps_closure(
            closure_id, state=ClosureState.FAILED, failed_step=step, error=str(error)
        )
        closure = self.get_closure(closure_id)
        logger.error(
            "dps_closure_failed",
            closure_id=closure_id,
            step=step.value,
            error=str(error),
            exc_info=error,
        )
        raise DPSClosureError(
            f"DPS closure {closure_id} failed while {step.value.replace('_', ' ')}: {error}",
            closure=closure,
            failed_step=step,
        ) from error

    def _resolve_destination(self, closure: DPSClosure) -> None:
        if closure.destination_account_id is not None:
            return

        if closure.destination == ClosureDestination.PRIMARY:
            destination_id = self.accounts.require_account(closure.primary_account_id).id
        elif closure.destination == ClosureDestination.CASH_WALLET:
            destination_id = self._find_or_create_cash_wallet(closure.currency)
        else:
            raise ValidationError(f"DPS closure {closure.id} has no destination")

        self.db.update_dps_closure(closure.id, destination_account_id=destination_id)

    def _find_cash_wallet(self, currency: str) -> Optional[int]:
        for account in self.db.list_accounts():
            if is_cash_wallet_for(account, currency):
                return account.id
        return None

    def _find_or_create_cash_wallet(self, currency: str) -> int:
        wallet_id = self._find_cash_wallet(currency)
        if wallet_id is not None:
            return wallet_id

        self.db.create_account(
            name=CASH_WALLET_NAME,
            account_type=AccountType.CASH,
            currency=currency,
            initial_balance=Decimal("0"),
        )
        logger.info("cash_wallet_created", currency=currency)

        # Wallet id comes from a fresh lookup, not from create_account
        wallet_id = self._find_cash_wallet(currency)
        if wallet_id is None:
            raise StoreError(f"Created a {currency} cash wallet but could not find it afterwards")
        return wallet_id

    def _transfer(self, closure: DPSClosure) -> None:
        transaction_id = closure.transfer_transaction_id
        if transaction_id is not None and self.db.transaction_id_exists(transaction_id):
            return
        if closure.amount <= 0:
            logger.info("dps_closure_nothing_to_move", closure_id=closure.id, amount=str(closure.amount))
            return

        if transaction_id is None:
            transaction_id = self.transactions.new_transaction_id()
            self.db.update_dps_closure(closure.id, transfer_transaction_id=transaction_id)

        self.transactions.create_transaction(
            account_id=closure.destination_account_id,
            amount=closure.amount,
            type=TransactionType.INCOME,
            category=DPS_CATEGORY,
            date=self.today(),
            description=f"DPS balance transferred from {closure.subaccount_name}",
            tags=(DPS_DELETION_TAG,),
            transaction_id=transaction_id,
        )

    def _detach(self, closure: DPSClosure) -> None:
        self.db.update_account(closure.primary_account_id, **DPS_CLEARED_FIELDS)

    def _delete_subaccount(self, closure: DPSClosure) -> None:
        if self.db.get_account(closure.subaccount_id) is None:
            return
        self.accounts.delete_account(closure.subaccount_id)
