"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from cpay.domain.entities import (
    Account,
    LedgerEntry,
    PendingTransfer,
)


class Database(ABC):
    """Abstract database interface for cpay.

    Implementations must be safe to share between threads: every operation
    runs in its own unit of work.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        account_id: str,
        name: str,
        mobile_number: str,
        balances: Optional[dict[str, Decimal]] = None,
    ) -> str:
        """Create a new account with opening balances. Returns account ID.

        Raises:
            ConflictError: If the ID, name or mobile number is taken
        """
        pass

    @abstractmethod
    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account (with balances) by ID."""
        pass

    @abstractmethod
    def get_account_by_name(self, name: str) -> Optional[Account]:
        """Get account by name."""
        pass

    @abstractmethod
    def get_account_by_mobile_number(self, mobile_number: str) -> Optional[Account]:
        """Get account by normalized mobile number."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def get_balance(self, account_id: str, currency: str) -> Decimal:
        """Read the current balance of one currency (zero if none)."""
        pass

    # Pending transfer operations
    @abstractmethod
    def insert_pending_transfer(self, record: PendingTransfer) -> None:
        """Store a pending transfer.

        Raises:
            ConflictError: If the token already exists
        """
        pass

    @abstractmethod
    def take_pending_transfer(self, token: str) -> Optional[PendingTransfer]:
        """Atomically remove and return a pending transfer.

        Of several concurrent callers for one token, exactly one receives
        the record; the others get None.
        """
        pass

    @abstractmethod
    def delete_pending_transfer(self, token: str) -> bool:
        """Delete a pending transfer. Returns True if a row was removed."""
        pass

    @abstractmethod
    def delete_pending_transfers_created_before(self, cutoff: datetime) -> int:
        """Delete pending transfers created before cutoff. Returns count."""
        pass

    @abstractmethod
    def count_pending_transfers(self) -> int:
        """Count stored pending transfers (live or not yet purged)."""
        pass

    # Ledger operations
    @abstractmethod
    def settle_transfer(
        self,
        transaction_id: str,
        sender_id: str,
        recipient_id: str,
        amount: Decimal,
        currency: str,
        type: str,
        description: Optional[str],
        timestamp: datetime,
    ) -> LedgerEntry:
        """Debit sender, credit recipient and append a ledger entry atomically.

        All three writes commit together or none do.

        Raises:
            FailedPreconditionError: If the sender cannot cover the amount
            NotFoundError: If either account does not exist
            InternalError: If the store fails to commit
        """
        pass

    @abstractmethod
    def get_ledger_entry(self, transaction_id: str) -> Optional[LedgerEntry]:
        """Get ledger entry by transaction ID."""
        pass

    @abstractmethod
    def list_ledger_entries(
        self,
        account_id: Optional[str] = None,
        sent: bool = True,
        received: bool = True,
        limit: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """List ledger entries, newest first.

        Args:
            account_id: Optional account filter
            sent: Include entries where the account is the sender
            received: Include entries where the account is the recipient
            limit: Optional maximum number of entries
        """
        pass
