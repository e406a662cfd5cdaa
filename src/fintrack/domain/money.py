"""Rounding of money amounts to the cents the store keeps."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

CENTS = Decimal("0.01")


def to_cents(value: Any) -> Optional[Decimal]:
    """Round ``value`` half-up to two decimal places. ``None`` passes through.

    Amounts are rounded before they are validated or stored, so every
    balance is a sum of whole cents.
    """
    if value is None:
        return None
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
