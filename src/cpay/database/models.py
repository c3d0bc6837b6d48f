"""SQLAlchemy models for cpay database.

Money columns hold integer minor units (centavos) so balance arithmetic in
SQL is exact on every backend.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Wallet account model."""

    __tablename__ = "accounts"

    id = Column(String(32), primary_key=True)
    name = Column(String, unique=True, nullable=False)
    mobile_number = Column(String(13), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    balances = relationship("AccountBalance", back_populates="account", cascade="all, delete-orphan")


class AccountBalance(Base):
    """Per-currency balance of an account."""

    __tablename__ = "account_balances"

    account_id = Column(String(32), ForeignKey("accounts.id"), primary_key=True)
    currency = Column(String(3), primary_key=True)
    balance_minor = Column(BigInteger, default=0, nullable=False)

    __table_args__ = (CheckConstraint("balance_minor >= 0", name="ck_balance_non_negative"),)

    # Relationships
    account = relationship("Account", back_populates="balances")


class PendingTransfer(Base):
    """Transfer awaiting OTP confirmation."""

    __tablename__ = "pending_transfers"

    token = Column(String(32), primary_key=True)
    sender_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    recipient_id = Column(String(32), ForeignKey("accounts.id"), nullable=False)
    amount_minor = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    otp_secret = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Expiry sweep scans by age
    __table_args__ = (Index("ix_pending_transfers_created_at", "created_at"),)


class LedgerEntry(Base):
    """Append-only transaction ledger."""

    __tablename__ = "transactions"

    transaction_id = Column(String(32), primary_key=True)
    sender_id = Column(String(32), ForeignKey("accounts.id"), nullable=False, index=True)
    recipient_id = Column(String(32), ForeignKey("accounts.id"), nullable=False, index=True)
    amount_minor = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False)
    type = Column(String, nullable=False)
    status = Column(String, nullable=False)
    description = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (CheckConstraint("amount_minor > 0", name="ck_ledger_amount_positive"),)


def _use_immediate_transactions(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock up front.

    A deferred transaction that reads before it writes can fail with
    "database is locked" instead of waiting when another writer is active.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
    engine_kwargs = {"echo": False}
    if is_sqlite:
        # Sessions are opened per operation from any thread; writers wait on
        # each other for up to 30 seconds.
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, **engine_kwargs)
    if is_sqlite:
        _use_immediate_transactions(engine)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)
