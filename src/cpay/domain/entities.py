"""Domain model entities for cpay.

These are pure data classes representing business concepts, independent of
database schema. Money is carried as ``Decimal`` with two places; storage
keeps integer minor units and the mappers convert.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


TRANSFER_TYPE_P2P = "p2p"
STATUS_COMPLETED = "completed"


@dataclass(frozen=True)
class Account:
    """Wallet account domain entity."""

    id: str
    name: str
    mobile_number: str
    created_at: datetime
    balances: dict[str, Decimal] = field(default_factory=dict, compare=False)

    def balance(self, currency: str) -> Decimal:
        """Return the available balance for a currency (zero if absent)."""
        return self.balances.get(currency, Decimal("0.00"))


@dataclass(frozen=True)
class PendingTransfer:
    """Transfer request awaiting OTP confirmation."""

    token: str
    sender_id: str
    recipient_id: str
    amount: Decimal
    currency: str
    otp_secret: str = field(repr=False)
    created_at: datetime


@dataclass(frozen=True)
class LedgerEntry:
    """Immutable record of a completed money movement."""

    transaction_id: str
    sender_id: str
    recipient_id: str
    amount: Decimal
    currency: str
    type: str
    status: str
    description: Optional[str]
    timestamp: datetime


@dataclass(frozen=True)
class TransferRequest:
    """Result of a successful initiation."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TransferReceipt:
    """Result of a successful confirmation."""

    transaction_id: str
    amount: Decimal
    currency: str
    recipient_id: str
    timestamp: datetime
