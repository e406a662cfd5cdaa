"""Utility for resolving account references typed on the command line."""

from fintrack.domain.account import AccountService
from fintrack.domain.entities import Account
from fintrack.domain.errors import ConflictError, NotFoundError


def resolve_account(account_service: AccountService, account: str | int) -> Account:
    """Resolve an account ID or name to the account entity.

    Numeric input is treated as an ID. Names match case-insensitively; a name
    shared by several accounts (e.g. one "Cash Wallet" per currency) must be
    given by ID.

    Raises:
        NotFoundError: If nothing matches
        ConflictError: If the name is ambiguous
    """
    if isinstance(account, int) or str(account).strip().isdigit():
        account_id = int(account)
        account_obj = account_service.get_account(account_id)
        if account_obj is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_obj

    wanted = str(account).strip().casefold()
    matches = [acc for acc in account_service.list_accounts() if acc.name.casefold() == wanted]
    if not matches:
        raise NotFoundError(f"Account '{account}' not found")
    if len(matches) > 1:
        ids = ", ".join(str(acc.id) for acc in matches)
        raise ConflictError(f"Account name '{account}' is ambiguous (IDs: {ids}); use the ID")
    return matches[0]
