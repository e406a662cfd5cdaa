"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enum values are stored as plain
strings and amounts are normalized to two-place Decimals on the way out.
"""

from decimal import Decimal
from typing import Any, Optional

from fintrack.domain import entities as domain
from fintrack.domain.money import to_cents
from fintrack.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    DPSClosure as ORMDPSClosure,
    LendBorrow as ORMLendBorrow,
    Purchase as ORMPurchase,
    SavingsGoal as ORMSavingsGoal,
    Transaction as ORMTransaction,
)


def to_decimal(value: Any) -> Decimal:
    """Normalize a stored numeric value to a two-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return to_cents(value)


def _optional_decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


def enum_value(value: Any) -> Any:
    """Return the stored representation of an enum member (or the value itself)."""
    return getattr(value, "value", value)


def account_to_domain(orm_account: ORMAccount, balance_delta: Any = None) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity.

    Args:
        orm_account: Account row
        balance_delta: Sum of signed transaction amounts for the account
    """
    initial_balance = to_decimal(orm_account.initial_balance)
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        currency=orm_account.currency,
        initial_balance=initial_balance,
        calculated_balance=initial_balance + to_decimal(balance_delta),
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
        description=orm_account.description,
        has_dps=orm_account.has_dps,
        dps_type=domain.DPSType(orm_account.dps_type) if orm_account.dps_type else None,
        dps_amount_type=(
            domain.DPSAmountType(orm_account.dps_amount_type) if orm_account.dps_amount_type else None
        ),
        dps_fixed_amount=_optional_decimal(orm_account.dps_fixed_amount),
        dps_savings_account_id=orm_account.dps_savings_account_id,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        transaction_id=orm_transaction.transaction_id,
        account_id=orm_transaction.account_id,
        amount=to_decimal(orm_transaction.amount),
        type=domain.TransactionType(orm_transaction.type),
        category=orm_transaction.category,
        description=orm_transaction.description or "",
        date=orm_transaction.date,
        created_at=orm_transaction.created_at,
        tags=tuple(orm_transaction.tags or ()),
        donation_amount=_optional_decimal(orm_transaction.donation_amount),
    )


def purchase_to_domain(orm_purchase: ORMPurchase) -> domain.Purchase:
    """Convert SQLAlchemy Purchase model to domain Purchase entity."""
    return domain.Purchase(
        id=orm_purchase.id,
        item_name=orm_purchase.item_name,
        category=orm_purchase.category,
        price=to_decimal(orm_purchase.price),
        currency=orm_purchase.currency,
        purchase_date=orm_purchase.purchase_date,
        status=domain.PurchaseStatus(orm_purchase.status),
        priority=domain.PurchasePriority(orm_purchase.priority),
        created_at=orm_purchase.created_at,
        notes=orm_purchase.notes or "",
        transaction_id=orm_purchase.transaction_id,
        exclude_from_calculation=orm_purchase.exclude_from_calculation,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        type=domain.TransactionType(orm_category.type),
        created_at=orm_category.created_at,
        color=orm_category.color,
        currency=orm_category.currency,
    )


def dps_closure_to_domain(orm_closure: ORMDPSClosure) -> domain.DPSClosure:
    """Convert SQLAlchemy DPSClosure model to domain DPSClosure entity."""
    return domain.DPSClosure(
        id=orm_closure.id,
        primary_account_id=orm_closure.primary_account_id,
        subaccount_id=orm_closure.subaccount_id,
        subaccount_name=orm_closure.subaccount_name,
        currency=orm_closure.currency,
        amount=to_decimal(orm_closure.amount),
        state=domain.ClosureState(orm_closure.state),
        created_at=orm_closure.created_at,
        updated_at=orm_closure.updated_at,
        destination=(
            domain.ClosureDestination(orm_closure.destination) if orm_closure.destination else None
        ),
        destination_account_id=orm_closure.destination_account_id,
        transfer_transaction_id=orm_closure.transfer_transaction_id,
        failed_step=domain.ClosureState(orm_closure.failed_step) if orm_closure.failed_step else None,
        error=orm_closure.error,
    )


def savings_goal_to_domain(orm_goal: ORMSavingsGoal) -> domain.SavingsGoal:
    """Convert SQLAlchemy SavingsGoal model to domain SavingsGoal entity."""
    return domain.SavingsGoal(
        id=orm_goal.id,
        name=orm_goal.name,
        target_amount=to_decimal(orm_goal.target_amount),
        current_amount=to_decimal(orm_goal.current_amount),
        source_account_id=orm_goal.source_account_id,
        savings_account_id=orm_goal.savings_account_id,
        created_at=orm_goal.created_at,
        description=orm_goal.description,
    )


def lend_borrow_to_domain(orm_record: ORMLendBorrow) -> domain.LendBorrow:
    """Convert SQLAlchemy LendBorrow model to domain LendBorrow entity."""
    return domain.LendBorrow(
        id=orm_record.id,
        type=domain.LendBorrowType(orm_record.type),
        person_name=orm_record.person_name,
        amount=to_decimal(orm_record.amount),
        currency=orm_record.currency,
        status=domain.LendBorrowStatus(orm_record.status),
        created_at=orm_record.created_at,
        updated_at=orm_record.updated_at,
        due_date=orm_record.due_date,
        notes=orm_record.notes or "",
        partial_return_amount=to_decimal(orm_record.partial_return_amount),
        partial_return_date=orm_record.partial_return_date,
    )
