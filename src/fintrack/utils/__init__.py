"""Utility functions for fintrack."""

from fintrack.utils.date_parser import parse_date, period_range
from fintrack.utils.amount_parser import parse_amount
from fintrack.utils.transaction_id import generate_transaction_id, is_valid_transaction_id

__all__ = [
    "parse_date",
    "period_range",
    "parse_amount",
    "generate_transaction_id",
    "is_valid_transaction_id",
]
