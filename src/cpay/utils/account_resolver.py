"""Utility for resolving account references to IDs."""

from cpay.domain.account import AccountService
from cpay.utils.mobile_number import is_mobile_number


def resolve_account(account_service: AccountService, account: str) -> str:
    """Resolve an account ID, mobile number or name to an account ID.

    Args:
        account_service: AccountService instance
        account: Account ID, mobile number or account name

    Returns:
        Account ID

    Raises:
        NotFoundError: If no account matches
    """
    account_obj = account_service.get_account(account)
    if account_obj is not None:
        return account_obj.id

    if is_mobile_number(account):
        account_obj = account_service.get_account_by_mobile_number(account)
        if account_obj is not None:
            return account_obj.id

    return account_service.require_account_by_name(account).id
