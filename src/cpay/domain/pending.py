"""Pending-transfer registry.

Holds one record per initiated transfer until it is confirmed or expires.
Records live in the shared database rather than process memory, so a
confirmation can be served by any process and survives restarts.
"""

import logging
import secrets
from datetime import datetime, timedelta

from cpay.database.base import Database
from cpay.domain.entities import PendingTransfer
from cpay.domain.errors import ExpiredError, PendingTransferNotFound, transfer_expired

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_SECONDS = 300


def generate_token() -> str:
    """Return a new 128-bit random token as 32 hex characters."""
    return secrets.token_hex(16)


class PendingTransferRegistry:
    """Single-use store of transfers awaiting confirmation."""

    def __init__(self, db: Database, validity_seconds: int = DEFAULT_VALIDITY_SECONDS):
        """Initialize registry.

        Args:
            db: Database instance
            validity_seconds: Confirmation window measured from ``created_at``
        """
        self.db = db
        self.validity = timedelta(seconds=validity_seconds)

    def expires_at(self, record: PendingTransfer) -> datetime:
        """Return the last instant at which the record may be confirmed."""
        return record.created_at + self.validity

    def is_expired(self, record: PendingTransfer, now: datetime) -> bool:
        """Return True once ``now`` is past the confirmation window."""
        return now - record.created_at > self.validity

    def put(self, record: PendingTransfer) -> None:
        """Store a record.

        Raises:
            ConflictError: If the token is already in use
        """
        self.db.insert_pending_transfer(record)

    def take_if_live(self, token: str, now: datetime) -> PendingTransfer:
        """Remove and return the record for a token if it is still live.

        The removal is a single atomic operation, so of any number of
        concurrent callers for one token only the first gets the record.

        Raises:
            PendingTransferNotFound: If no record exists for the token
            ExpiredError: If the record existed but its window has passed
                (the record is removed either way)
        """
        record = self.db.take_pending_transfer(token)
        if record is None:
            raise PendingTransferNotFound(f"Pending transfer {token} not found")
        if self.is_expired(record, now):
            logger.info("Pending transfer %s expired at %s", token, self.expires_at(record).isoformat())
            raise ExpiredError(transfer_expired())
        return record

    def discard(self, token: str) -> bool:
        """Remove a record without confirming it. Returns True if one was removed."""
        return self.db.delete_pending_transfer(token)

    def purge_expired(self, now: datetime) -> int:
        """Delete every record whose window has passed. Returns the count."""
        removed = self.db.delete_pending_transfers_created_before(now - self.validity)
        if removed:
            logger.info("Purged %d expired pending transfer(s)", removed)
        return removed
