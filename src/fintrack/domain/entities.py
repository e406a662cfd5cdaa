"""Domain model entities for fintrack.

These are pure data classes representing business concepts, independent of
database schema. Services and the ledger functions only ever see these types,
never the ORM rows.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Kind of account."""

    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    CASH = "cash"


class TransactionType(str, Enum):
    """Direction of a transaction. The sign of an amount is implied by it."""

    INCOME = "income"
    EXPENSE = "expense"


class DPSType(str, Enum):
    """Schedule of a DPS (recurring savings) plan."""

    MONTHLY = "monthly"
    FLEXIBLE = "flexible"


class DPSAmountType(str, Enum):
    """Whether a DPS plan deposits a fixed or a custom amount."""

    FIXED = "fixed"
    CUSTOM = "custom"


class PurchaseStatus(str, Enum):
    PLANNED = "planned"
    PURCHASED = "purchased"
    CANCELLED = "cancelled"


class PurchasePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class LendBorrowType(str, Enum):
    """Whether money was lent to or borrowed from a person."""

    LEND = "lend"
    BORROW = "borrow"


class LendBorrowStatus(str, Enum):
    ACTIVE = "active"
    SETTLED = "settled"
    OVERDUE = "overdue"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ClosureState(str, Enum):
    """States of the DPS closure workflow."""

    IDLE = "idle"
    CONFIRM_PENDING = "confirm_pending"
    RESOLVING_DESTINATION = "resolving_destination"
    TRANSFERRING = "transferring"
    DETACHING = "detaching"
    DELETING_SUBACCOUNT = "deleting_subaccount"
    DONE = "done"
    FAILED = "failed"


class ClosureDestination(str, Enum):
    """Where the balance of a closed DPS sub-account goes."""

    PRIMARY = "primary"
    CASH_WALLET = "cash_wallet"


@dataclass(frozen=True)
class Account:
    """Account domain entity.

    ``calculated_balance`` is derived by the store from the transaction log;
    nothing in the domain layer computes or writes it.
    """

    id: int
    name: str
    type: AccountType
    currency: str
    initial_balance: Decimal
    calculated_balance: Decimal
    is_active: bool
    created_at: datetime
    description: Optional[str] = None
    has_dps: bool = False
    dps_type: Optional[DPSType] = None
    dps_amount_type: Optional[DPSAmountType] = None
    dps_fixed_amount: Optional[Decimal] = None
    dps_savings_account_id: Optional[int] = None


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    transaction_id: str
    account_id: int
    amount: Decimal
    type: TransactionType
    category: str
    description: str
    date: date
    created_at: datetime
    tags: tuple[str, ...] = ()
    donation_amount: Optional[Decimal] = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign implied by the transaction type."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


@dataclass(frozen=True)
class CreatedTransaction:
    """Identifiers returned when a transaction is stored."""

    id: int
    transaction_id: str


@dataclass(frozen=True)
class Purchase:
    """Purchase domain entity, optionally linked to an expense transaction."""

    id: int
    item_name: str
    category: str
    price: Decimal
    currency: str
    purchase_date: date
    status: PurchaseStatus
    priority: PurchasePriority
    created_at: datetime
    notes: str = ""
    transaction_id: Optional[str] = None
    exclude_from_calculation: bool = False


@dataclass(frozen=True)
class PurchaseDetails:
    """Extra fields for the purchase created together with an expense."""

    priority: PurchasePriority = PurchasePriority.MEDIUM
    notes: str = ""


@dataclass(frozen=True)
class Category:
    """Income or expense category."""

    id: int
    name: str
    type: TransactionType
    created_at: datetime
    color: str = "#3B82F6"
    currency: Optional[str] = None


@dataclass(frozen=True)
class SavingsGoal:
    """A savings target fed from a source account into its own savings account."""

    id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal
    source_account_id: int
    savings_account_id: int
    created_at: datetime
    description: Optional[str] = None

    @property
    def remaining(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal("0.00"))

    @property
    def progress(self) -> Decimal:
        """Share of the target reached, in percent, capped at 100."""
        if self.target_amount <= 0:
            return Decimal("0")
        return min(self.current_amount * 100 / self.target_amount, Decimal("100"))


@dataclass(frozen=True)
class LendBorrow:
    """Money lent to or borrowed from a person, outside any account."""

    id: int
    type: LendBorrowType
    person_name: str
    amount: Decimal
    currency: str
    status: LendBorrowStatus
    created_at: datetime
    updated_at: datetime
    due_date: Optional[date] = None
    notes: str = ""
    partial_return_amount: Decimal = Decimal("0.00")
    partial_return_date: Optional[date] = None

    @property
    def outstanding(self) -> Decimal:
        """Amount still owed; nothing once settled."""
        if self.status == LendBorrowStatus.SETTLED:
            return Decimal("0.00")
        return max(self.amount - self.partial_return_amount, Decimal("0.00"))


@dataclass(frozen=True)
class LendBorrowTotals:
    """Lend and borrow totals of one currency."""

    total_lent: Decimal = Decimal("0")
    total_borrowed: Decimal = Decimal("0")
    outstanding_lent: Decimal = Decimal("0")
    outstanding_borrowed: Decimal = Decimal("0")
    active_count: int = 0
    settled_count: int = 0
    overdue_count: int = 0


@dataclass(frozen=True)
class DPSClosure:
    """Journal record of one DPS closure.

    The snapshot fields (``subaccount_*``, ``currency``, ``amount``) are
    captured when the closure begins and never re-read.
    """

    id: int
    primary_account_id: int
    subaccount_id: int
    subaccount_name: str
    currency: str
    amount: Decimal
    state: ClosureState
    created_at: datetime
    updated_at: datetime
    destination: Optional[ClosureDestination] = None
    destination_account_id: Optional[int] = None
    transfer_transaction_id: Optional[str] = None
    failed_step: Optional[ClosureState] = None
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.state == ClosureState.DONE


@dataclass(frozen=True)
class LedgerAggregates:
    """Currency-scoped totals for analytics cards."""

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    total_saved: Decimal = Decimal("0")
    total_donated: Decimal = Decimal("0")
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense


@dataclass(frozen=True)
class AccountStats:
    """Per-account activity numbers."""

    total_transactions: int
    income_transactions: int
    expense_transactions: int
    total_saved: Decimal
    total_donated: Decimal
    last_transaction_date: Optional[date]


@dataclass(frozen=True)
class StatementLine:
    """A transaction annotated with the account balance right after it."""

    transaction: Transaction
    balance: Decimal


@dataclass(frozen=True)
class SortState:
    """Current sort key and direction of a table view."""

    key: str
    direction: SortDirection = SortDirection.ASC

    def toggle(self, key: str) -> "SortState":
        """Return the state after a click on column ``key``.

        The same key flips the direction; a different key starts ascending.
        """
        if key != self.key:
            return SortState(key=key, direction=SortDirection.ASC)
        flipped = SortDirection.DESC if self.direction == SortDirection.ASC else SortDirection.ASC
        return replace(self, direction=flipped)


@dataclass(frozen=True)
class RowFilter:
    """Filter values for account and transaction list views.

    Empty strings, ``None`` and ``"all"`` disable the matching predicate.
    """

    search: str = ""
    search_fields: tuple[str, ...] = ("name", "description", "category", "tags")
    exact: dict[str, str] = field(default_factory=dict)
    status: str = "all"
    date_field: str = "date"
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    exclude_transfers: bool = False
