"""Account domain service."""

import re
import uuid
from decimal import Decimal
from typing import Optional

from cpay.database.base import Database
from cpay.domain.entities import Account as AccountEntity
from cpay.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
)
from cpay.utils.amount_parser import CENT
from cpay.utils.mobile_number import normalize_mobile_number

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def validate_currency(currency: str) -> str:
    """Return currency if it is a three-letter uppercase code.

    Raises:
        ValidationError: If the code is malformed
    """
    if not isinstance(currency, str) or not _CURRENCY_RE.match(currency):
        raise ValidationError(f"Invalid currency code '{currency}'")
    return currency


class AccountService:
    """Service for managing wallet accounts.

    In production accounts are provisioned by onboarding; this service
    creates them with opening balances and answers lookups for the transfer
    flow. Balances only change through transfer settlement.
    """

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        name: str,
        mobile_number: str,
        balances: Optional[dict[str, Decimal]] = None,
    ) -> str:
        """Create a new account.

        Args:
            name: Display name (unique)
            mobile_number: Mobile number used for OTP delivery and as the
                recipient lookup key
            balances: Optional opening balances by currency

        Returns:
            Account ID

        Raises:
            ValidationError: If the name, number, currency or a balance is invalid
            ConflictError: If the name or mobile number is already registered
        """
        if not name or not name.strip():
            raise ValidationError("Account name is required.")
        try:
            normalized = normalize_mobile_number(mobile_number)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        opening: dict[str, Decimal] = {}
        for currency, amount in (balances or {}).items():
            validate_currency(currency)
            value = Decimal(amount)
            if not value.is_finite() or value < 0:
                raise ValidationError(f"Opening balance for {currency} must not be negative")
            if value.quantize(CENT) != value:
                raise ValidationError(f"Opening balance for {currency} has more than two decimal places")
            opening[currency] = value.quantize(CENT)

        return self.db.create_account(
            account_id=uuid.uuid4().hex,
            name=name.strip(),
            mobile_number=normalized,
            balances=opening,
        )

    def get_account(self, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: str) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def require_account_by_name(self, name: str) -> AccountEntity:
        """Get account by name or raise NotFoundError."""
        account = self.db.get_account_by_name(name)
        if account is None:
            raise NotFoundError(f"Account '{name}' not found")
        return account

    def get_account_by_mobile_number(self, mobile_number: str) -> Optional[AccountEntity]:
        """Look up an account by mobile number in any accepted format.

        Raises:
            ValidationError: If the number is malformed
        """
        try:
            normalized = normalize_mobile_number(mobile_number)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        return self.db.get_account_by_mobile_number(normalized)

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts.

        Returns:
            List of account entities
        """
        return self.db.list_accounts()

    def get_balance(self, account_id: str, currency: str) -> Decimal:
        """Return the current balance of an account in one currency.

        Raises:
            NotFoundError: If the account does not exist
        """
        self.require_account(account_id)
        return self.db.get_balance(account_id, validate_currency(currency))
