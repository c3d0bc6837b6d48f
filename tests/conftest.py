"""Shared pytest fixtures for cpay tests."""

import tempfile
import os
from datetime import datetime, timedelta, UTC
from decimal import Decimal
import pytest

from cpay.config import Settings
from cpay.database.factories import create_sqlite_database
from cpay.domain.account import AccountService
from cpay.domain.delivery import DeliveryError
from cpay.domain.ledger import LedgerService
from cpay.domain.otp import OtpEngine
from cpay.domain.pending import PendingTransferRegistry
from cpay.domain.transfer import TransferService


class FakeClock:
    """Controllable clock returning aware UTC datetimes."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingDelivery:
    """Delivery backend that keeps sent codes in memory."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def deliver(self, address: str, code: str) -> None:
        if self.fail:
            raise DeliveryError("gateway unavailable")
        self.sent.append((address, code))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Settings with the default OTP and transfer parameters."""
    return Settings(_env_file=None)


@pytest.fixture
def clock():
    """Clock fixed at the start of a 60-second OTP bucket."""
    return FakeClock(datetime(2024, 6, 1, 8, 0, 0, tzinfo=UTC))


@pytest.fixture
def delivery():
    """Delivery backend that records codes instead of sending them."""
    return RecordingDelivery()


@pytest.fixture
def otp_engine():
    """OTP engine with default parameters."""
    return OtpEngine(step_seconds=60, digits=6, tolerance_steps=1)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def registry(temp_db):
    """Pending-transfer registry with the default 300 second window."""
    return PendingTransferRegistry(temp_db, validity_seconds=300)


@pytest.fixture
def transfer_service(temp_db, settings, delivery, clock):
    """Create a TransferService with recording delivery and a fake clock."""
    return TransferService(temp_db, settings=settings, delivery=delivery, clock=clock)


@pytest.fixture
def sender(account_service):
    """Sender account holding PHP 1,000.00."""
    account_id = account_service.create_account(
        name="Juan dela Cruz", mobile_number="09171234567", balances={"PHP": Decimal("1000.00")}
    )
    return account_service.get_account(account_id)


@pytest.fixture
def recipient(account_service):
    """Recipient account holding PHP 250.00."""
    account_id = account_service.create_account(
        name="Maria Santos", mobile_number="09181234567", balances={"PHP": Decimal("250.00")}
    )
    return account_service.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
