"""Domain layer for fintrack application.

Services live in their own modules (``fintrack.domain.account`` and so on)
and are imported from there; this package only re-exports the entities so
the database layer can import them without pulling the services in.
"""

from fintrack.domain.entities import (
    Account,
    AccountType,
    Category,
    ClosureDestination,
    ClosureState,
    DPSClosure,
    LendBorrow,
    Purchase,
    SavingsGoal,
    Transaction,
    TransactionType,
)

__all__ = [
    "Account",
    "AccountType",
    "Category",
    "ClosureDestination",
    "ClosureState",
    "DPSClosure",
    "LendBorrow",
    "Purchase",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
]
