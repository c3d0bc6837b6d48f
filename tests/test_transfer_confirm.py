"""Tests for transfer confirmation and settlement."""

from decimal import Decimal

import pytest

from cpay.domain.entities import TRANSFER_TYPE_P2P, STATUS_COMPLETED
from cpay.domain.errors import (
    ExpiredError,
    FailedPreconditionError,
    InternalError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


def wrong_code(code: str) -> str:
    return f"{(int(code) + 500000) % 1000000:06d}"


@pytest.fixture
def pending(transfer_service, delivery, sender, recipient):
    """Initiated transfer of PHP 500.00 and its delivered code."""
    request = transfer_service.initiate(sender.id, "09181234567", Decimal("500.00"))
    return request.token, delivery.last_code


def test_confirm_settles_transfer(
    transfer_service, account_service, ledger_service, clock, sender, recipient, pending
):
    """Test the happy path: 1000 PHP sender sends 500 PHP."""
    token, code = pending
    clock.advance(30)

    receipt = transfer_service.confirm(sender.id, token, code)

    assert receipt.amount == Decimal("500.00")
    assert receipt.currency == "PHP"
    assert receipt.recipient_id == recipient.id
    assert account_service.get_balance(sender.id, "PHP") == Decimal("500.00")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("750.00")

    entries = ledger_service.list_entries(sender.id)
    assert len(entries) == 1
    entry = entries[0]
    assert entry.transaction_id == receipt.transaction_id
    assert entry.amount == Decimal("500.00")
    assert entry.currency == "PHP"
    assert entry.sender_id == sender.id
    assert entry.recipient_id == recipient.id
    assert entry.type == TRANSFER_TYPE_P2P
    assert entry.status == STATUS_COMPLETED
    assert entry.description == "P2P transfer to +639181234567"
    assert entry.timestamp == clock.now


def test_confirm_accepts_code_from_previous_bucket(transfer_service, clock, sender, pending):
    """Test clock-skew tolerance: a code one bucket old still confirms."""
    token, code = pending
    clock.advance(90)

    receipt = transfer_service.confirm(sender.id, token, code)
    assert receipt.transaction_id


def test_confirm_rejects_code_two_buckets_old(
    transfer_service, temp_db, account_service, delivery, clock, sender, recipient, monkeypatch
):
    """Test that a code from two buckets ago no longer verifies."""
    stored = []
    real_insert = temp_db.insert_pending_transfer

    def capture(record):
        stored.append(record)
        real_insert(record)

    monkeypatch.setattr(temp_db, "insert_pending_transfer", capture)
    request = transfer_service.initiate(sender.id, "09181234567", Decimal("500.00"))
    code = delivery.last_code
    clock.advance(120)

    secret = stored[0].otp_secret
    current = transfer_service.otp.time_step(clock.now)
    accepted = {transfer_service.otp.compute_code(secret, current + k) for k in (-1, 0, 1)}
    if code in accepted:
        pytest.skip("code collides with an accepted bucket")

    with pytest.raises(PermissionDeniedError):
        transfer_service.confirm(sender.id, request.token, code)
    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")


def test_confirm_after_window_is_expired(
    transfer_service, account_service, ledger_service, clock, sender, recipient, pending
):
    """Test that waiting 301 seconds expires the transfer even with a correct code."""
    token, code = pending
    clock.advance(301)

    with pytest.raises(ExpiredError):
        transfer_service.confirm(sender.id, token, code)

    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("250.00")
    assert ledger_service.list_entries(sender.id) == []


def test_token_is_single_use(transfer_service, ledger_service, account_service, sender, pending):
    """Test that a confirmed token cannot be confirmed again."""
    token, code = pending
    transfer_service.confirm(sender.id, token, code)

    with pytest.raises(FailedPreconditionError):
        transfer_service.confirm(sender.id, token, code)

    assert len(ledger_service.list_entries(sender.id)) == 1
    assert account_service.get_balance(sender.id, "PHP") == Decimal("500.00")


def test_unknown_token_indistinguishable_from_consumed(transfer_service, sender, pending):
    """Test that unknown and consumed tokens produce the same error message."""
    token, code = pending
    transfer_service.confirm(sender.id, token, code)

    with pytest.raises(FailedPreconditionError) as consumed:
        transfer_service.confirm(sender.id, token, code)
    with pytest.raises(FailedPreconditionError) as unknown:
        transfer_service.confirm(sender.id, "f" * 32, code)

    assert str(consumed.value) == str(unknown.value)


def test_wrong_code_denied_and_burns_token(transfer_service, account_service, sender, pending):
    """Test that an invalid code is denied and the token cannot be retried."""
    token, code = pending

    with pytest.raises(PermissionDeniedError, match="Invalid verification code"):
        transfer_service.confirm(sender.id, token, wrong_code(code))

    with pytest.raises(FailedPreconditionError):
        transfer_service.confirm(sender.id, token, code)
    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")


def test_other_caller_denied(transfer_service, account_service, sender, recipient, pending):
    """Test that only the initiator can confirm."""
    token, code = pending

    with pytest.raises(PermissionDeniedError):
        transfer_service.confirm(recipient.id, token, code)

    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("250.00")


@pytest.mark.parametrize("code", ["", "12345", "1234567", "abcdef"])
def test_malformed_code_does_not_consume_token(transfer_service, sender, pending, code):
    """Test that malformed codes are rejected before the token is taken."""
    token, good_code = pending

    with pytest.raises(ValidationError):
        transfer_service.confirm(sender.id, token, code)

    receipt = transfer_service.confirm(sender.id, token, good_code)
    assert receipt.transaction_id


def test_missing_token(transfer_service, sender):
    """Test that an empty token is an invalid argument."""
    with pytest.raises(ValidationError):
        transfer_service.confirm(sender.id, "", "123456")


def test_balance_rechecked_at_confirmation(transfer_service, delivery, account_service, sender, recipient):
    """Test that funds spent after initiation cause confirmation to fail."""
    first = transfer_service.initiate(sender.id, "09181234567", Decimal("700.00"))
    first_code = delivery.last_code
    second = transfer_service.initiate(sender.id, "09181234567", Decimal("700.00"))
    second_code = delivery.last_code

    transfer_service.confirm(sender.id, first.token, first_code)
    with pytest.raises(FailedPreconditionError, match="Insufficient balance"):
        transfer_service.confirm(sender.id, second.token, second_code)

    assert account_service.get_balance(sender.id, "PHP") == Decimal("300.00")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("950.00")


def test_credit_creates_missing_currency_balance(transfer_service, account_service, delivery, sender):
    """Test that a recipient without a balance row is credited."""
    new_id = account_service.create_account("Ana Cruz", "09201234567")
    request = transfer_service.initiate(sender.id, "09201234567", Decimal("0.01"))

    transfer_service.confirm(sender.id, request.token, delivery.last_code)

    assert account_service.get_balance(new_id, "PHP") == Decimal("0.01")
    assert account_service.get_balance(sender.id, "PHP") == Decimal("999.99")


def test_settlement_failure_is_atomic(
    transfer_service, account_service, ledger_service, sender, recipient, pending, monkeypatch
):
    """Test that a storage fault during settlement changes nothing."""
    from sqlalchemy.exc import OperationalError

    from cpay.database import sqlalchemy_db

    token, code = pending

    def failing_mapper(entry):
        raise OperationalError("INSERT INTO transactions", {}, Exception("disk I/O error"))

    monkeypatch.setattr(sqlalchemy_db, "ledger_entry_to_domain", failing_mapper)

    with pytest.raises(InternalError) as excinfo:
        transfer_service.confirm(sender.id, token, code)

    monkeypatch.undo()
    assert "disk" not in str(excinfo.value)
    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("250.00")
    assert ledger_service.list_entries(sender.id) == []


def test_recipient_removed_before_settlement(transfer_service, temp_db, account_service, sender, pending, monkeypatch):
    """Test that a vanished recipient aborts settlement without moving funds."""
    token, code = pending
    real_settle = temp_db.settle_transfer

    def settle_to_missing(**kwargs):
        kwargs["recipient_id"] = "e" * 32
        return real_settle(**kwargs)

    monkeypatch.setattr(temp_db, "settle_transfer", settle_to_missing)

    with pytest.raises(NotFoundError):
        transfer_service.confirm(sender.id, token, code)
    assert account_service.get_balance(sender.id, "PHP") == Decimal("1000.00")


def test_conservation_over_several_transfers(transfer_service, account_service, delivery, clock, sender, recipient):
    """Test that total money is conserved across transfers in both directions."""
    total_before = account_service.get_balance(sender.id, "PHP") + account_service.get_balance(
        recipient.id, "PHP"
    )

    for amount, src, dst in [
        ("100.25", sender, "09181234567"),
        ("50.50", recipient, "09171234567"),
        ("0.75", sender, "09181234567"),
    ]:
        request = transfer_service.initiate(src.id, dst, Decimal(amount))
        transfer_service.confirm(src.id, request.token, delivery.last_code)
        clock.advance(5)

    assert account_service.get_balance(sender.id, "PHP") == Decimal("949.50")
    assert account_service.get_balance(recipient.id, "PHP") == Decimal("300.50")
    assert (
        account_service.get_balance(sender.id, "PHP") + account_service.get_balance(recipient.id, "PHP")
        == total_before
    )
