"""Abstract database interface.

Services and the DPS closure workflow receive a ``Database`` instead of
reaching for shared state, so tests can hand them any implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from fintrack.domain.entities import (
    Account,
    AccountType,
    Category,
    DPSClosure,
    LendBorrow,
    LendBorrowStatus,
    LendBorrowType,
    Purchase,
    SavingsGoal,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for fintrack."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        account_type: AccountType,
        currency: str,
        initial_balance: Decimal,
        description: Optional[str] = None,
        is_active: bool = True,
        **dps_fields: Any,
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID, with its store-derived balance."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts, with their store-derived balances."""
        pass

    @abstractmethod
    def update_account(self, account_id: int, **fields: Any) -> None:
        """Patch account fields. Fields not passed are left unchanged."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account and its transactions."""
        pass

    @abstractmethod
    def clear_dps_references(self, account_id: int) -> int:
        """Unlink every primary account pointing at ``account_id``. Returns count."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_id: str,
        account_id: int,
        amount: Decimal,
        type: TransactionType,
        category: str,
        description: str,
        date: date,
        tags: tuple[str, ...] = (),
        donation_amount: Optional[Decimal] = None,
    ) -> int:
        """Create a transaction. Returns the store ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by store ID."""
        pass

    @abstractmethod
    def transaction_id_exists(self, transaction_id: str) -> bool:
        """Check whether a human-facing transaction ID is already in use."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions, newest first, with optional filters."""
        pass

    @abstractmethod
    def update_transaction(self, transaction_id: int, **fields: Any) -> None:
        """Patch transaction fields."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Purchase operations
    @abstractmethod
    def create_purchase(self, **fields: Any) -> int:
        """Create a purchase. Returns purchase ID."""
        pass

    @abstractmethod
    def get_purchase(self, purchase_id: int) -> Optional[Purchase]:
        """Get purchase by ID."""
        pass

    @abstractmethod
    def get_purchase_by_transaction_id(self, transaction_id: str) -> Optional[Purchase]:
        """Get the purchase linked to a transaction ID."""
        pass

    @abstractmethod
    def list_purchases(self, status: Optional[str] = None) -> list[Purchase]:
        """List purchases, newest first."""
        pass

    @abstractmethod
    def update_purchase(self, purchase_id: int, **fields: Any) -> None:
        """Patch purchase fields."""
        pass

    @abstractmethod
    def update_purchases(self, purchase_ids: list[int], **fields: Any) -> int:
        """Apply one patch to several purchases in a single commit. Returns count."""
        pass

    @abstractmethod
    def delete_purchase(self, purchase_id: int) -> None:
        """Delete a purchase."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        name: str,
        type: TransactionType,
        color: str = "#3B82F6",
        currency: Optional[str] = None,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_name(self, name: str, type: TransactionType) -> Optional[Category]:
        """Get category by name within a type."""
        pass

    @abstractmethod
    def list_categories(self, type: Optional[TransactionType] = None) -> list[Category]:
        """List categories, optionally of one type."""
        pass

    @abstractmethod
    def update_category(self, category_id: int, **fields: Any) -> None:
        """Patch category fields."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category."""
        pass

    # Savings goal operations
    @abstractmethod
    def create_savings_goal(self, **fields: Any) -> int:
        """Create a savings goal. Returns goal ID."""
        pass

    @abstractmethod
    def get_savings_goal(self, goal_id: int) -> Optional[SavingsGoal]:
        """Get savings goal by ID."""
        pass

    @abstractmethod
    def list_savings_goals(self) -> list[SavingsGoal]:
        """List savings goals, oldest first."""
        pass

    @abstractmethod
    def update_savings_goal(self, goal_id: int, **fields: Any) -> None:
        """Patch savings goal fields."""
        pass

    @abstractmethod
    def delete_savings_goal(self, goal_id: int) -> None:
        """Delete a savings goal. Its savings account is kept."""
        pass

    # Lend/borrow operations
    @abstractmethod
    def create_lend_borrow(self, **fields: Any) -> int:
        """Create a lend/borrow record. Returns record ID."""
        pass

    @abstractmethod
    def get_lend_borrow(self, record_id: int) -> Optional[LendBorrow]:
        """Get lend/borrow record by ID."""
        pass

    @abstractmethod
    def list_lend_borrow(
        self,
        type: Optional[LendBorrowType] = None,
        status: Optional[LendBorrowStatus] = None,
    ) -> list[LendBorrow]:
        """List lend/borrow records, newest first."""
        pass

    @abstractmethod
    def update_lend_borrow(self, record_id: int, **fields: Any) -> None:
        """Patch lend/borrow record fields."""
        pass

    @abstractmethod
    def delete_lend_borrow(self, record_id: int) -> None:
        """Delete a lend/borrow record."""
        pass

    # DPS closure journal
    @abstractmethod
    def create_dps_closure(self, **fields: Any) -> int:
        """Journal a new DPS closure. Returns closure ID."""
        pass

    @abstractmethod
    def get_dps_closure(self, closure_id: int) -> Optional[DPSClosure]:
        """Get a journaled DPS closure."""
        pass

    @abstractmethod
    def update_dps_closure(self, closure_id: int, **fields: Any) -> None:
        """Patch a journaled DPS closure."""
        pass

    @abstractmethod
    def delete_dps_closure(self, closure_id: int) -> None:
        """Remove a journaled DPS closure."""
        pass

    @abstractmethod
    def list_dps_closures(self, unfinished_only: bool = False) -> list[DPSClosure]:
        """List journaled DPS closures, oldest first."""
        pass
