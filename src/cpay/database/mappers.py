"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: integer minor units become
two-place Decimals and timestamps read back from SQLite (which drops the
offset) are pinned to UTC.
"""

from datetime import datetime, UTC
from typing import Any, Mapping, Optional

from cpay.domain import entities as domain
from cpay.database.models import (
    Account as ORMAccount,
    AccountBalance as ORMAccountBalance,
    LedgerEntry as ORMLedgerEntry,
)
from cpay.utils.amount_parser import from_minor_units


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def account_to_domain(
    orm_account: ORMAccount, orm_balances: Optional[list[ORMAccountBalance]] = None
) -> domain.Account:
    """Convert SQLAlchemy Account model (and its balances) to domain Account entity."""
    if orm_balances is None:
        orm_balances = list(orm_account.balances)
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        mobile_number=orm_account.mobile_number,
        created_at=as_utc(orm_account.created_at),
        balances={b.currency: from_minor_units(b.balance_minor) for b in orm_balances},
    )


def pending_transfer_to_domain(row: Mapping[str, Any]) -> domain.PendingTransfer:
    """Convert a ``pending_transfers`` row mapping to a domain PendingTransfer.

    Rows come from ``DELETE ... RETURNING`` rather than ORM instances.
    """
    return domain.PendingTransfer(
        token=row["token"],
        sender_id=row["sender_id"],
        recipient_id=row["recipient_id"],
        amount=from_minor_units(row["amount_minor"]),
        currency=row["currency"],
        otp_secret=row["otp_secret"],
        created_at=as_utc(row["created_at"]),
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        transaction_id=orm_entry.transaction_id,
        sender_id=orm_entry.sender_id,
        recipient_id=orm_entry.recipient_id,
        amount=from_minor_units(orm_entry.amount_minor),
        currency=orm_entry.currency,
        type=orm_entry.type,
        status=orm_entry.status,
        description=orm_entry.description,
        timestamp=as_utc(orm_entry.timestamp),
    )
