"""SQLAlchemy models for sarrafi database."""

from datetime import datetime, UTC
from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

# Amounts carry commission fractions; rates carry more precision than money.
AMOUNT = Numeric(20, 4)
RATE = Numeric(20, 8)


class Entity(Base):
    """Customer or partner model."""

    __tablename__ = "entities"

    id = Column(Integer, primary_key=True)
    kind = Column(String, nullable=False)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, nullable=True)
    status = Column(String, default="Active", nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="owner")
    snapshots = relationship("BalanceSnapshot", back_populates="entity")


class Account(Base):
    """Cashbox, bank, rented or dedicated account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    kind = Column(String, nullable=False)
    currency = Column(String, nullable=False)
    status = Column(String, default="Active", nullable=False)
    owner_kind = Column(String, default="None", nullable=False)
    owner_id = Column(Integer, ForeignKey("entities.id"), nullable=True)
    bank_name = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    owner = relationship("Entity", back_populates="accounts")
    transactions = relationship("LedgerTransaction", back_populates="account")


class LedgerTransaction(Base):
    """Ledger transaction model. Rows are append-only except opening balances."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    namespace = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)
    amount = Column(AMOUNT, nullable=False)
    currency = Column(String, nullable=False)
    timestamp = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    owner_kind = Column(String, default="None", nullable=False)
    owner_id = Column(Integer, nullable=True, index=True)
    guest_name = Column(String, nullable=True)
    commission_percentage = Column(Numeric(9, 4), default=0, nullable=False)
    commission_amount = Column(AMOUNT, default=0, nullable=False)
    total_amount = Column(AMOUNT, nullable=True)
    receipt_serial = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    card_last_digits = Column(String, nullable=True)
    destination_account = Column(String, nullable=True)
    description = Column(String, nullable=True)
    linked_entity_type = Column(String, nullable=True)
    linked_entity_id = Column(String, nullable=True)
    linked_entity_description = Column(String, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Unique constraint on namespace + receipt_serial (NULL serials are not compared)
    __table_args__ = (
        UniqueConstraint("namespace", "receipt_serial", name="uq_namespace_receipt_serial"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions")


class ExchangeRate(Base):
    """Exchange rate model: units of currency per one USD."""

    __tablename__ = "exchange_rates"

    currency = Column(String, primary_key=True)
    rate = Column(RATE, nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class CommissionTransfer(Base):
    """Commission transfer model."""

    __tablename__ = "commission_transfers"

    id = Column(Integer, primary_key=True)
    initiator_kind = Column(String, nullable=False)
    initiator_id = Column(Integer, nullable=True)
    amount = Column(AMOUNT, nullable=False)
    currency = Column(String, nullable=False)
    commission_percentage = Column(Numeric(9, 4), nullable=False)
    status = Column(String, nullable=False)
    source_account_number = Column(String, nullable=True)
    received_into_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    receipt_serial = Column(String, nullable=True)
    paid_from_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    destination_account_number = Column(String, nullable=True)
    execution_receipt_serial = Column(String, nullable=True)
    commission_amount = Column(AMOUNT, nullable=True)
    final_amount_paid = Column(AMOUNT, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class BalanceSnapshot(Base):
    """Balance snapshot model. Balances are stored as strings to keep Decimal precision."""

    __tablename__ = "balance_snapshots"

    id = Column(Integer, primary_key=True)
    entity_id = Column(Integer, ForeignKey("entities.id"), nullable=False)
    main_balances = Column(JSON, nullable=False)
    rented_balance = Column(AMOUNT, nullable=False)
    summary_text = Column(String, nullable=False)
    notes = Column(String, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    entity = relationship("Entity", back_populates="snapshots")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
