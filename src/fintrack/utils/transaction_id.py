"""Human-facing transaction IDs.

IDs are ``F`` followed by seven digits. The space is small (10 million), so
``generate_unique_transaction_id`` checks candidates against the store.
"""

import re
import secrets
from typing import Callable, Optional

from fintrack.domain.errors import ConflictError

TRANSACTION_ID_PREFIX = "F"
TRANSACTION_ID_DIGITS = 7
MAX_GENERATION_ATTEMPTS = 20

_TRANSACTION_ID_RE = re.compile(r"F[0-9]{7}")


def generate_transaction_id() -> str:
    """Generate a random transaction ID such as ``F0042137``."""
    number = secrets.randbelow(10**TRANSACTION_ID_DIGITS)
    return f"{TRANSACTION_ID_PREFIX}{number:0{TRANSACTION_ID_DIGITS}d}"


def is_valid_transaction_id(transaction_id: Optional[str]) -> bool:
    """Check the ``F`` + 7 digits format."""
    if not transaction_id:
        return False
    return _TRANSACTION_ID_RE.fullmatch(transaction_id) is not None


def generate_unique_transaction_id(
    exists: Callable[[str], bool],
    attempts: int = MAX_GENERATION_ATTEMPTS,
    generator: Callable[[], str] = generate_transaction_id,
) -> str:
    """Generate a transaction ID that ``exists`` reports as unused.

    Args:
        exists: Lookup returning True when an ID is taken
        attempts: Number of candidates to try
        generator: Candidate source

    Raises:
        ConflictError: If every candidate was taken
    """
    for _ in range(attempts):
        candidate = generator()
        if not exists(candidate):
            return candidate
    raise ConflictError(f"Could not find a free transaction ID after {attempts} attempts")


def create_success_message(action: str, transaction_id: str, additional_info: Optional[str] = None) -> str:
    """Build the confirmation line shown after a mutating command."""
    base = f"{action} completed successfully"
    info = f"Transaction ID: {transaction_id}"
    if additional_info:
        return f"{base}. {additional_info} ({info})"
    return f"{base} ({info})"
