"""Two-phase P2P transfer service.

``initiate`` validates a request, stores it as a pending transfer and sends
a one-time code to the sender. ``confirm`` consumes the pending transfer,
checks the code and settles the funds. Nothing moves until ``confirm``
succeeds.
"""

import logging
import uuid
from datetime import datetime, UTC
from decimal import Decimal
from typing import Callable, Optional

from cpay.config import Settings, get_settings
from cpay.database.base import Database
from cpay.domain.account import validate_currency
from cpay.domain.delivery import CodeDelivery, DeliveryError, create_delivery
from cpay.domain.entities import (
    TRANSFER_TYPE_P2P,
    PendingTransfer,
    TransferReceipt,
    TransferRequest,
)
from cpay.domain.errors import (
    FailedPreconditionError,
    InternalError,
    NotFoundError,
    PendingTransferNotFound,
    PermissionDeniedError,
    ValidationError,
    account_not_found,
    insufficient_balance,
    invalid_code,
    pending_transfer_unavailable,
    recipient_not_found,
)
from cpay.domain.otp import OtpEngine
from cpay.domain.pending import PendingTransferRegistry, generate_token
from cpay.utils.amount_parser import quantize_amount
from cpay.utils.mobile_number import normalize_mobile_number

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class TransferService:
    """Service for initiating and confirming P2P transfers."""

    def __init__(
        self,
        db: Database,
        settings: Optional[Settings] = None,
        delivery: Optional[CodeDelivery] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize transfer service.

        Args:
            db: Database instance
            settings: Settings (defaults to the environment settings)
            delivery: Code delivery backend (defaults to the configured one)
            clock: Returns the current time as an aware datetime
        """
        self.db = db
        self.settings = settings or get_settings()
        self.delivery = delivery or create_delivery(self.settings.delivery)
        self.clock = clock
        self.otp = OtpEngine(
            step_seconds=self.settings.otp.step_seconds,
            digits=self.settings.otp.digits,
            tolerance_steps=self.settings.otp.tolerance_steps,
        )
        self.registry = PendingTransferRegistry(db, validity_seconds=self.settings.validity_seconds)

    def initiate(
        self,
        sender_id: str,
        recipient_lookup_key: str,
        amount: Decimal | str,
        currency: Optional[str] = None,
    ) -> TransferRequest:
        """Start a transfer and send a verification code to the sender.

        Args:
            sender_id: Authenticated sender account ID
            recipient_lookup_key: Recipient mobile number
            amount: Amount to send (positive, at most two decimal places)
            currency: Currency code (defaults to the configured currency)

        Returns:
            TransferRequest with the token to confirm with

        Raises:
            ValidationError: Bad amount, currency or mobile number, or self-transfer
            NotFoundError: Sender or recipient does not exist
            FailedPreconditionError: Sender balance does not cover the amount
            InternalError: The code could not be delivered or storage failed
        """
        currency = validate_currency(currency or self.settings.default_currency)
        try:
            amount = quantize_amount(amount)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        try:
            recipient_mobile = normalize_mobile_number(recipient_lookup_key)
        except ValueError as e:
            raise ValidationError("Recipient mobile number is invalid.") from e

        sender = self.db.get_account(sender_id)
        if sender is None:
            raise NotFoundError(account_not_found(sender_id))

        # Advisory only: confirm re-checks inside the settlement transaction.
        if sender.balance(currency) < amount:
            raise FailedPreconditionError(insufficient_balance())

        recipient = self.db.get_account_by_mobile_number(recipient_mobile)
        if recipient is None:
            raise NotFoundError(recipient_not_found())
        if recipient.id == sender.id:
            raise ValidationError("Cannot send money to yourself.")

        now = self.clock()
        record = PendingTransfer(
            token=generate_token(),
            sender_id=sender.id,
            recipient_id=recipient.id,
            amount=amount,
            currency=currency,
            otp_secret=self.otp.generate_secret(),
            created_at=now,
        )
        self.registry.put(record)

        try:
            self.delivery.deliver(sender.mobile_number, self.otp.code_at(record.otp_secret, now))
        except DeliveryError as e:
            self.registry.discard(record.token)
            logger.error("Aborted transfer %s: code delivery failed: %s", record.token, e)
            raise InternalError("Failed to send verification code.") from e
        except Exception as e:
            # Any backend failure, timeouts included, aborts the initiation
            self.registry.discard(record.token)
            logger.exception("Aborted transfer %s: code delivery raised", record.token)
            raise InternalError("Failed to send verification code.") from e

        logger.info(
            "Initiated transfer %s: %s %s from %s to %s",
            record.token,
            amount,
            currency,
            sender.id,
            recipient.id,
        )
        return TransferRequest(token=record.token, expires_at=self.registry.expires_at(record))

    def confirm(self, sender_id: str, token: str, code: str) -> TransferReceipt:
        """Confirm a pending transfer with its verification code and settle it.

        The pending transfer is consumed before the code is checked, so any
        failure after that point means the transfer has to be initiated
        again.

        Args:
            sender_id: Authenticated account ID; must match the initiator
            token: Token returned by ``initiate``
            code: Verification code delivered to the sender

        Returns:
            TransferReceipt with the new transaction ID

        Raises:
            ValidationError: Malformed token or code (token not consumed)
            FailedPreconditionError: Token unknown or already used, or the
                balance no longer covers the amount
            ExpiredError: Confirmation window has passed
            PermissionDeniedError: Caller is not the initiator or code is wrong
            InternalError: Storage failed or settlement could not be committed
        """
        if not isinstance(token, str) or not token.strip():
            raise ValidationError("Pending transfer ID is required.")
        if not self.otp.is_well_formed(code):
            raise ValidationError(f"A valid {self.otp.digits}-digit OTP code is required.")

        now = self.clock()
        try:
            record = self.registry.take_if_live(token, now)
        except PendingTransferNotFound:
            # Never issued and already consumed look the same from here.
            logger.warning("Confirmation for unknown or consumed transfer %s by %s", token, sender_id)
            raise FailedPreconditionError(pending_transfer_unavailable())

        if record.sender_id != sender_id:
            logger.warning(
                "Transfer %s confirmed by %s but initiated by %s", token, sender_id, record.sender_id
            )
            raise PermissionDeniedError("This transfer was not initiated by you.")

        if not self.otp.verify_code(record.otp_secret, code, now):
            logger.warning("Invalid verification code for transfer %s", token)
            raise PermissionDeniedError(invalid_code())

        if self.db.get_balance(sender_id, record.currency) < record.amount:
            raise FailedPreconditionError(insufficient_balance())

        recipient = self.db.get_account(record.recipient_id)
        description = (
            f"P2P transfer to {recipient.mobile_number}" if recipient is not None else "P2P transfer"
        )
        entry = self.db.settle_transfer(
            transaction_id=uuid.uuid4().hex,
            sender_id=record.sender_id,
            recipient_id=record.recipient_id,
            amount=record.amount,
            currency=record.currency,
            type=TRANSFER_TYPE_P2P,
            description=description,
            timestamp=now,
        )
        logger.info(
            "Settled transfer %s as transaction %s: %s %s",
            token,
            entry.transaction_id,
            entry.amount,
            entry.currency,
        )
        return TransferReceipt(
            transaction_id=entry.transaction_id,
            amount=entry.amount,
            currency=entry.currency,
            recipient_id=entry.recipient_id,
            timestamp=entry.timestamp,
        )

    def purge_expired(self) -> int:
        """Delete pending transfers whose window has passed. Returns count."""
        return self.registry.purge_expired(self.clock())
