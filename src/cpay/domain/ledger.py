"""Ledger history service."""

from typing import Optional

from cpay.database.base import Database
from cpay.domain.entities import LedgerEntry
from cpay.domain.errors import NotFoundError, ValidationError, account_not_found

DIRECTIONS = ("all", "sent", "received")


class LedgerService:
    """Read-only access to settled transactions."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_entry(self, transaction_id: str) -> Optional[LedgerEntry]:
        """Get a ledger entry by transaction ID."""
        return self.db.get_ledger_entry(transaction_id)

    def list_entries(
        self, account_id: str, direction: str = "all", limit: Optional[int] = 50
    ) -> list[LedgerEntry]:
        """List an account's transactions, newest first.

        Args:
            account_id: Account whose history to list
            direction: "all", "sent" or "received"
            limit: Maximum number of entries (None for no limit)

        Raises:
            ValidationError: If direction or limit is invalid
            NotFoundError: If the account does not exist
        """
        if direction not in DIRECTIONS:
            raise ValidationError(f"Direction must be one of: {', '.join(DIRECTIONS)}")
        if limit is not None and limit <= 0:
            raise ValidationError("Limit must be positive")
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        return self.db.list_ledger_entries(
            account_id=account_id,
            sent=direction in ("all", "sent"),
            received=direction in ("all", "received"),
            limit=limit,
        )
