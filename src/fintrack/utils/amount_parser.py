"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

from fintrack.domain.errors import ValidationError
from fintrack.domain.money import to_cents

_SYMBOLS_RE = re.compile(r"[$€£¥৳₹]")


def parse_amount(amount_str: str, allow_zero: bool = False) -> Decimal:
    """Parse a user-entered amount into a non-negative Decimal.

    Handles "123.45", "$1,234.56", "৳ 500" and similar. Signs are rejected:
    whether money comes in or goes out is given by the transaction type.

    Args:
        amount_str: Amount string
        allow_zero: Accept 0 (planned purchases have no price yet)

    Returns:
        Decimal amount

    Raises:
        ValidationError: If the string is not a usable amount
    """
    if amount_str is None or not str(amount_str).strip():
        raise ValidationError("Amount is required")

    cleaned = _SYMBOLS_RE.sub("", str(amount_str)).replace(",", "").strip()

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValidationError(f"Could not parse amount '{amount_str}'")

    if not amount.is_finite():
        raise ValidationError(f"Could not parse amount '{amount_str}'")
    amount = to_cents(amount)
    if amount < 0:
        raise ValidationError("Amount must not be negative; use the transaction type instead")
    if amount == 0 and not allow_zero:
        raise ValidationError("Amount must be greater than 0")
    return amount
