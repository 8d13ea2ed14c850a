"""Utility for resolving account names to IDs."""

from finledger.domain.account import AccountService
from finledger.domain.errors import NotFoundError, account_not_found


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Numeric input is treated as an ID; anything else is matched against
    account names, closed accounts included.

    Args:
        account_service: AccountService instance
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int) or str(account).strip().isdigit():
        account_id = int(account)
        if account_service.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        return account_id

    for acc in account_service.list_accounts(include_inactive=True):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
