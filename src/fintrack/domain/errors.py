"""Shared domain error messages and error types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from fintrack.domain.entities import ClosureState, DPSClosure


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class StoreError(DomainError):
    """The store failed to carry out a request.

    Network, constraint and driver failures all collapse into this type.
    """


class DPSClosureError(DomainError):
    """A DPS closure stopped part way.

    Steps completed before the failure are not rolled back; ``closure`` holds
    the journal record as it was left.
    """

    def __init__(self, message: str, closure: "DPSClosure", failed_step: Optional["ClosureState"]):
        super().__init__(message)
        self.closure = closure
        self.failed_step = failed_step


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def purchase_not_found(purchase_id: int) -> str:
    return f"Purchase {purchase_id} not found"


def category_not_found(category_id: int) -> str:
    return f"Category {category_id} not found"


def closure_not_found(closure_id: int) -> str:
    return f"DPS closure {closure_id} not found"


def duplicate_category(name: str, category_type: str) -> str:
    """Return message for duplicate category name within a type."""
    return f"{category_type.capitalize()} category '{name}' already exists"


def no_dps_subaccount(account_name: str) -> str:
    """Return message when an account has no linked DPS sub-account."""
    return f"Account '{account_name}' has no DPS savings account"


def insufficient_funds(account_name: str, balance, amount) -> str:
    return f"Insufficient funds in '{account_name}': balance {balance}, requested {amount}"


def savings_goal_not_found(goal_id: int) -> str:
    return f"Savings goal {goal_id} not found"


def lend_borrow_not_found(record_id: int) -> str:
    return f"Lend/borrow record {record_id} not found"
