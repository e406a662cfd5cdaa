"""Account domain service."""

from decimal import Decimal
from typing import Any, Optional

import structlog

from fintrack.database.base import Database
from fintrack.domain.entities import (
    Account as AccountEntity,
    AccountType,
    DPSAmountType,
    DPSType,
)
from fintrack.domain.errors import NotFoundError, ValidationError, account_not_found
from fintrack.domain.money import to_cents

logger = structlog.get_logger()

CASH_WALLET_NAME = "Cash Wallet"

# Patch applied to a primary account when its DPS plan is switched off
DPS_CLEARED_FIELDS: dict[str, Any] = {
    "dps_savings_account_id": None,
    "has_dps": False,
    "dps_type": None,
    "dps_amount_type": None,
    "dps_fixed_amount": None,
}

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "type",
        "currency",
        "initial_balance",
        "description",
        "is_active",
        "has_dps",
        "dps_type",
        "dps_amount_type",
        "dps_fixed_amount",
    }
)


def normalize_currency(currency: str) -> str:
    """Upper-case and validate a currency code."""
    code = (currency or "").strip().upper()
    if not code.isalpha() or not 2 <= len(code) <= 5:
        raise ValidationError(f"Invalid currency code '{currency}'")
    return code


def is_cash_wallet_for(account: AccountEntity, currency: str) -> bool:
    """True for a cash account held in ``currency``."""
    return account.type == AccountType.CASH and account.currency == currency


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        account_type: AccountType,
        currency: str,
        initial_balance: Decimal = Decimal("0"),
        description: Optional[str] = None,
        has_dps: bool = False,
        dps_type: Optional[DPSType] = None,
        dps_amount_type: Optional[DPSAmountType] = None,
        dps_fixed_amount: Optional[Decimal] = None,
        dps_initial_balance: Decimal = Decimal("0"),
    ) -> int:
        """Create a new account.

        With ``has_dps`` a savings sub-account named ``"<name> (DPS)"`` is
        created and linked. When the user has no cash account yet, a
        "Cash Wallet" in the same currency is created as well.

        Args:
            name: Account name
            account_type: Account type
            currency: Currency code
            initial_balance: Opening balance
            description: Optional description
            has_dps: Attach a DPS savings plan
            dps_type: DPS schedule (required with ``has_dps``)
            dps_amount_type: Fixed or custom deposits (required with ``has_dps``)
            dps_fixed_amount: Deposit amount for fixed plans
            dps_initial_balance: Opening balance of the DPS sub-account

        Returns:
            Account ID

        Raises:
            ValidationError: If the input is inconsistent
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name is required")
        account_type = AccountType(account_type)
        currency = normalize_currency(currency)
        initial_balance = to_cents(initial_balance)
        dps_initial_balance = to_cents(dps_initial_balance)
        if dps_initial_balance < 0:
            raise ValidationError("DPS initial balance must not be negative")
        if initial_balance < 0:
            raise ValidationError("Initial balance must not be negative")

        dps_fields = self._validated_dps_fields(has_dps, dps_type, dps_amount_type, dps_fixed_amount)
        had_cash_account = any(acc.type == AccountType.CASH for acc in self.db.list_accounts())

        account_id = self.db.create_account(
            name=name,
            account_type=account_type,
            currency=currency,
            initial_balance=initial_balance,
            description=description,
            **dps_fields,
        )
        logger.info("account_created", account_id=account_id, name=name, currency=currency)

        if has_dps:
            savings_id = self.db.create_account(
                name=f"{name} (DPS)",
                account_type=AccountType.SAVINGS,
                currency=currency,
                initial_balance=dps_initial_balance,
                description=f"DPS account for {name}",
            )
            self.db.update_account(account_id, dps_savings_account_id=savings_id)
            logger.info("dps_subaccount_created", account_id=account_id, subaccount_id=savings_id)

        if not had_cash_account and account_type != AccountType.CASH:
            cash_id = self.db.create_account(
                name=CASH_WALLET_NAME,
                account_type=AccountType.CASH,
                currency=currency,
                initial_balance=Decimal("0"),
                description="Default cash account for tracking physical money",
            )
            logger.info("cash_wallet_created", account_id=cash_id, currency=currency)

        return account_id

    def _validated_dps_fields(
        self,
        has_dps: bool,
        dps_type: Optional[DPSType],
        dps_amount_type: Optional[DPSAmountType],
        dps_fixed_amount: Optional[Decimal],
    ) -> dict[str, Any]:
        if not has_dps:
            return {"has_dps": False}
        if dps_type is None or dps_amount_type is None:
            raise ValidationError("DPS type and amount type are required when DPS is enabled")
        dps_amount_type = DPSAmountType(dps_amount_type)
        dps_fixed_amount = to_cents(dps_fixed_amount)
        if dps_amount_type == DPSAmountType.FIXED:
            if dps_fixed_amount is None or dps_fixed_amount <= 0:
                raise ValidationError("A fixed DPS plan needs a positive fixed amount")
        else:
            dps_fixed_amount = None
        return {
            "has_dps": True,
            "dps_type": DPSType(dps_type),
            "dps_amount_type": dps_amount_type,
            "dps_fixed_amount": dps_fixed_amount,
        }

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts()

    def find_dps_subaccount_ids(self) -> set[int]:
        """IDs of accounts that serve as some account's DPS savings account."""
        return {
            acc.dps_savings_account_id
            for acc in self.db.list_accounts()
            if acc.dps_savings_account_id is not None
        }

    def update_account(self, account_id: int, changes: dict[str, Any]) -> None:
        """Apply a partial update to an account.

        Keys not present in ``changes`` are left unchanged.

        Raises:
            NotFoundError: If the account doesn't exist
            ValidationError: If a key is not updatable or the result is invalid
        """
        account = self.require_account(account_id)

        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update account field(s): {', '.join(unknown)}")

        patch = dict(changes)
        if "name" in patch:
            patch["name"] = (patch["name"] or "").strip()
            if not patch["name"]:
                raise ValidationError("Account name is required")
        if "currency" in patch:
            patch["currency"] = normalize_currency(patch["currency"])
        if "type" in patch:
            patch["type"] = AccountType(patch["type"])
        if "initial_balance" in patch:
            patch["initial_balance"] = to_cents(patch["initial_balance"])
            if patch["initial_balance"] is None or patch["initial_balance"] < 0:
                raise ValidationError("Initial balance must not be negative")

        if patch.get("has_dps"):
            if account.id in self.find_dps_subaccount_ids():
                raise ValidationError(
                    f"Account '{account.name}' is a DPS savings account and cannot have its own DPS plan"
                )
            patch.update(
                self._validated_dps_fields(
                    True,
                    patch.get("dps_type", account.dps_type),
                    patch.get("dps_amount_type", account.dps_amount_type),
                    patch.get("dps_fixed_amount", account.dps_fixed_amount),
                )
            )

        self.db.update_account(account_id, **patch)
        logger.info("account_updated", account_id=account_id, fields=sorted(patch))

    def set_active(self, account_id: int, is_active: bool) -> None:
        """Activate or deactivate an account."""
        self.require_account(account_id)
        self.db.update_account(account_id, is_active=is_active)
        logger.info("account_active_changed", account_id=account_id, is_active=is_active)

    def disable_dps(self, account_id: int) -> None:
        """Switch off the DPS plan of an account, keeping the savings account."""
        self.require_account(account_id)
        self.db.update_account(account_id, **DPS_CLEARED_FIELDS)
        logger.info("dps_disabled", account_id=account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account together with its transactions.

        Primary accounts pointing at it as their DPS savings account are
        unlinked first.

        Raises:
            NotFoundError: If account not found
        """
        self.require_account(account_id)
        unlinked = self.db.clear_dps_references(account_id)
        self.db.delete_account(account_id)
        logger.info("account_deleted", account_id=account_id, unlinked_primaries=unlinked)
