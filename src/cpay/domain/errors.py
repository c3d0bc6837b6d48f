"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``code`` is the RPC status
    reported to callers.
    """

    code = "unknown"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    code = "invalid-argument"


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""

    code = "not-found"


class PendingTransferNotFound(NotFoundError):
    """No pending transfer is stored under the requested token."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""

    code = "already-exists"


class FailedPreconditionError(DomainError):
    """Operation rejected because of the current state (e.g. balance)."""

    code = "failed-precondition"


class ExpiredError(DomainError):
    """Pending transfer outlived its confirmation window."""

    code = "deadline-exceeded"


class PermissionDeniedError(DomainError):
    """Caller is not allowed to perform the operation."""

    code = "permission-denied"


class InternalError(DomainError):
    """Delivery, storage or other unexpected failure.

    The message is shown to callers, so it must not carry storage details;
    chain the underlying exception instead.
    """

    code = "internal"


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def recipient_not_found() -> str:
    """Return message for a lookup key that matches no account."""
    return "Recipient not found."


def insufficient_balance() -> str:
    """Return message for a sender that cannot cover the amount."""
    return "Insufficient balance."


def duplicate_account(field: str, value: str) -> str:
    """Return message for a duplicate account name or mobile number."""
    return f"Account with {field} '{value}' already exists"


def pending_transfer_unavailable() -> str:
    """Return message for a token that cannot be confirmed.

    Used for both unknown and already consumed tokens so callers cannot
    tell the two apart.
    """
    return "No pending transfer is awaiting confirmation for this request."


def transfer_expired() -> str:
    """Return message for a pending transfer past its window."""
    return "Verification code has expired. Please start the transfer again."


def invalid_code() -> str:
    """Return message for a verification code that does not match."""
    return "Invalid verification code."
