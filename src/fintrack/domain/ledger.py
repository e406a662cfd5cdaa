"""Ledger computations over transactions already loaded into memory.

Everything in this module is a pure function: no store access, inputs are
never mutated, and identical input always gives identical output. The store
owns ``Account.calculated_balance``; these functions only derive views.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Optional

from fintrack.domain.entities import (
    Account,
    AccountStats,
    LedgerAggregates,
    RowFilter,
    SortDirection,
    StatementLine,
    Transaction,
    TransactionType,
)

SAVINGS_CATEGORY = "Savings"
DONATION_CATEGORY = "Donation"
TRANSFER_TAG = "transfer"
SAVINGS_GOAL_TAG = "savings"
DPS_CATEGORY = "DPS"
DPS_TRANSFER_TAG = "dps_transfer"
DPS_DELETION_TAG = "dps_deletion"
INTERNAL_MOVEMENT_TAGS = frozenset({TRANSFER_TAG, DPS_TRANSFER_TAG, DPS_DELETION_TAG})

# Sort keys used by the views that do not match an attribute name
FIELD_ALIASES = {
    "balance": "calculated_balance",
    "dps": "has_dps",
    "account": "account_id",
    "status": "is_active",
}
NUMERIC_FIELDS = frozenset({"balance", "calculated_balance", "initial_balance", "amount", "price"})

_UNSET_VALUES = ("", "all")

RowPredicate = Callable[[Any], bool]


def chronological_key(txn: Transaction) -> tuple:
    """Sort key for ledger order: date, then creation time, then store id."""
    return (txn.date, txn.created_at, txn.id)


def compute_running_balances(
    account: Account, transactions: Iterable[Transaction]
) -> dict[int, Decimal]:
    """Compute the balance after each transaction of an account.

    Args:
        account: Account the transactions belong to
        transactions: All transactions of the account (caller filters)

    Returns:
        Mapping of transaction id to the running balance right after it.
        Empty when there are no transactions.
    """
    running = Decimal(account.initial_balance)
    balances: dict[int, Decimal] = {}
    for txn in sorted(transactions, key=chronological_key):
        if txn.type == TransactionType.INCOME:
            running += txn.amount
        else:
            running -= txn.amount
        balances[txn.id] = running
    return balances


def build_statement(account: Account, transactions: Iterable[Transaction]) -> list[StatementLine]:
    """Newest-first statement lines annotated with running balances."""
    transactions = list(transactions)
    balances = compute_running_balances(account, transactions)
    display = sorted(transactions, key=chronological_key, reverse=True)
    return [StatementLine(transaction=txn, balance=balances[txn.id]) for txn in display]


def _accumulate(transactions: Iterable[Transaction]) -> LedgerAggregates:
    total_income = Decimal("0")
    total_expense = Decimal("0")
    total_saved = Decimal("0")
    total_donated = Decimal("0")
    count = 0

    for txn in transactions:
        count += 1
        if txn.type == TransactionType.INCOME:
            total_income += txn.amount
            # Category-name match, kept for compatibility with existing data
            if txn.category == SAVINGS_CATEGORY:
                total_saved += txn.amount
            elif txn.category == DONATION_CATEGORY:
                total_donated += txn.amount
        else:
            total_expense += txn.amount

    return LedgerAggregates(
        total_income=total_income,
        total_expense=total_expense,
        total_saved=total_saved,
        total_donated=total_donated,
        count=count,
    )


def _currency_index(accounts: Iterable[Account]) -> dict[int, str]:
    return {acc.id: acc.currency.upper() for acc in accounts}


def compute_aggregates(
    transactions: Iterable[Transaction], currency: str, accounts: Iterable[Account]
) -> LedgerAggregates:
    """Compute totals for the transactions held in one currency.

    Args:
        transactions: Transactions of any number of accounts
        currency: Currency code to aggregate
        accounts: Accounts used to resolve each transaction's currency

    Returns:
        Aggregates over the transactions whose owning account uses
        ``currency``. Transactions of unknown accounts are ignored.
    """
    currency_by_account = _currency_index(accounts)
    wanted = currency.upper()
    return _accumulate(
        txn for txn in transactions if currency_by_account.get(txn.account_id) == wanted
    )


def compute_currency_aggregates(
    transactions: Iterable[Transaction], accounts: Iterable[Account]
) -> dict[str, LedgerAggregates]:
    """Compute aggregates for every currency that has transactions."""
    currency_by_account = _currency_index(accounts)
    grouped: dict[str, list[Transaction]] = defaultdict(list)
    for txn in transactions:
        currency = currency_by_account.get(txn.account_id)
        if currency is not None:
            grouped[currency].append(txn)
    return {currency: _accumulate(grouped[currency]) for currency in sorted(grouped)}


def compute_account_stats(account: Account, transactions: Iterable[Transaction]) -> AccountStats:
    """Summarize the activity of a single account."""
    own = [txn for txn in transactions if txn.account_id == account.id]
    totals = _accumulate(own)
    income_count = sum(1 for txn in own if txn.type == TransactionType.INCOME)
    return AccountStats(
        total_transactions=len(own),
        income_transactions=income_count,
        expense_transactions=len(own) - income_count,
        total_saved=totals.total_saved,
        total_donated=totals.total_donated,
        last_transaction_date=max((txn.date for txn in own), default=None),
    )


def get_field(row: Any, name: str) -> Any:
    """Read a field from an entity or a mapping, honoring view aliases."""
    candidates = (name, FIELD_ALIASES[name]) if name in FIELD_ALIASES else (name,)
    for candidate in candidates:
        if isinstance(row, Mapping):
            if candidate in row:
                return row[candidate]
        elif hasattr(row, candidate):
            return getattr(row, candidate)
    return None


def _sort_value(value: Any, numeric: bool) -> Any:
    if isinstance(value, bool):
        return int(value)
    if numeric or isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return value.casefold()
    return value


def sort_rows(
    rows: Iterable[Any], key: str, direction: SortDirection = SortDirection.ASC
) -> list[Any]:
    """Return ``rows`` sorted by field ``key``.

    Numeric fields compare numerically, strings case-insensitively. The sort
    is stable in both directions, so rows with equal keys keep their input
    order. Rows missing the field sort last when ascending and first when
    descending, so without ties descending is the exact reverse of ascending.
    """
    numeric = key in NUMERIC_FIELDS
    rows = list(rows)
    present = [row for row in rows if get_field(row, key) is not None]
    missing = [row for row in rows if get_field(row, key) is None]
    ordered = sorted(
        present,
        key=lambda row: _sort_value(get_field(row, key), numeric),
        reverse=direction == SortDirection.DESC,
    )
    if direction == SortDirection.DESC:
        return missing + ordered
    return ordered + missing


def _is_set(value: Optional[str]) -> bool:
    return value is not None and str(value).strip().lower() not in _UNSET_VALUES


def _as_text(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return None


def _search_predicate(term: str, fields: Sequence[str]) -> RowPredicate:
    needle = term.strip().casefold()

    def matches(row: Any) -> bool:
        for name in fields:
            value = get_field(row, name)
            if value is None:
                continue
            if isinstance(value, (list, tuple, set, frozenset)):
                if any(needle in _as_text(item).casefold() for item in value):
                    return True
            elif needle in _as_text(value).casefold():
                return True
        return False

    return matches


def _exact_predicate(name: str, expected: str) -> RowPredicate:
    return lambda row: _as_text(get_field(row, name)) == str(expected)


def _date_range_predicate(
    name: str, start: Optional[date], end: Optional[date]
) -> RowPredicate:
    def in_range(row: Any) -> bool:
        value = _as_date(get_field(row, name))
        if value is None:
            return False
        if start is not None and value < start:
            return False
        if end is not None and value > end:
            return False
        return True

    return in_range


def is_internal_movement(row: Any) -> bool:
    """True for transfer legs and DPS movements, which are not real income or spend."""
    return any(tag in INTERNAL_MOVEMENT_TAGS for tag in get_field(row, "tags") or ())


def build_predicates(row_filter: RowFilter) -> list[RowPredicate]:
    """Turn filter values into the list of active predicates."""
    predicates: list[RowPredicate] = []

    if _is_set(row_filter.search):
        predicates.append(_search_predicate(row_filter.search, row_filter.search_fields))

    for name, expected in row_filter.exact.items():
        if _is_set(expected):
            predicates.append(_exact_predicate(name, expected))

    status = (row_filter.status or "all").lower()
    if status == "active":
        predicates.append(lambda row: bool(get_field(row, "is_active")))
    elif status == "inactive":
        predicates.append(lambda row: not get_field(row, "is_active"))

    if row_filter.start_date is not None or row_filter.end_date is not None:
        predicates.append(
            _date_range_predicate(row_filter.date_field, row_filter.start_date, row_filter.end_date)
        )

    if row_filter.exclude_transfers:
        predicates.append(lambda row: not is_internal_movement(row))

    return predicates


def filter_rows(rows: Iterable[Any], row_filter: RowFilter) -> list[Any]:
    """Return the rows matching every active predicate of ``row_filter``."""
    predicates = build_predicates(row_filter)
    return [row for row in rows if all(predicate(row) for predicate in predicates)]
