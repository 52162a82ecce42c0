"""Shared pytest fixtures for sarrafi tests."""

import tempfile
import os
from datetime import datetime
from decimal import Decimal
import pytest

from sarrafi.database.factories import create_sqlite_database
from sarrafi.domain.account import AccountService
from sarrafi.domain.commission_transfer import CommissionTransferService
from sarrafi.domain.entities import (
    Account,
    AccountKind,
    AccountStatus,
    Currency,
    Entity,
    LedgerTransaction,
    Namespace,
    OwnerKind,
    TransactionType,
)
from sarrafi.domain.entity import EntityService
from sarrafi.domain.ledger_service import LedgerService
from sarrafi.domain.rate import RateService
from sarrafi.domain.snapshot import BalanceSnapshotService
from sarrafi.domain.transaction import TransactionService

T0 = datetime(2024, 3, 1, 9, 0)


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
def entity_service(temp_db):
    return EntityService(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def rate_service(temp_db):
    return RateService(temp_db)


@pytest.fixture
def commission_service(temp_db):
    return CommissionTransferService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    return LedgerService(temp_db)


@pytest.fixture
def snapshot_service(temp_db):
    return BalanceSnapshotService(temp_db)


@pytest.fixture
def sample_customer(entity_service):
    """Create a sample customer for testing."""
    entity_id = entity_service.create_entity(OwnerKind.CUSTOMER, "Ahmad Karimi", code="C-100")
    return entity_service.get_entity(entity_id)


@pytest.fixture
def sample_partner(entity_service):
    entity_id = entity_service.create_entity(OwnerKind.PARTNER, "Kabul Exchange")
    return entity_service.get_entity(entity_id)


@pytest.fixture
def cashbox_usd(account_service):
    account_id = account_service.create_account("Cashbox USD", AccountKind.CASHBOX, Currency.USD)
    return account_service.get_account(account_id)


@pytest.fixture
def bank_eur(account_service):
    account_id = account_service.create_account(
        "Sparkasse EUR", AccountKind.BANK, Currency.EUR, bank_name="Sparkasse"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def rented_account(account_service):
    account_id = account_service.create_account(
        "Melli 1234", AccountKind.RENTED, Currency.IRT_BANK, bank_name="Melli"
    )
    return account_service.get_account(account_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


# In-memory records for the pure core


@pytest.fixture
def make_txn():
    """Build LedgerTransaction records with sensible defaults."""
    counter = {"id": 0}

    def _make(
        type=TransactionType.DEPOSIT,
        amount="100",
        currency=Currency.USD,
        timestamp=T0,
        namespace=Namespace.RENTED,
        account_id=1,
        owner_kind=OwnerKind.NONE,
        owner_id=None,
        guest_name=None,
        commission_amount="0",
        total_amount=None,
        id=None,
        **extra,
    ):
        counter["id"] += 1
        amount = Decimal(amount)
        commission = Decimal(commission_amount)
        if total_amount is None:
            total_amount = amount if type.is_inflow else amount + commission
        return LedgerTransaction(
            id=id if id is not None else counter["id"],
            namespace=namespace,
            type=type,
            amount=amount,
            currency=currency,
            timestamp=timestamp,
            account_id=account_id,
            owner_kind=owner_kind,
            owner_id=owner_id,
            guest_name=guest_name,
            commission_amount=commission,
            total_amount=Decimal(total_amount),
            **extra,
        )

    return _make


@pytest.fixture
def make_account():
    def _make(
        id=1,
        kind=AccountKind.RENTED,
        currency=Currency.IRT_BANK,
        status=AccountStatus.ACTIVE,
        owner_kind=OwnerKind.NONE,
        owner_id=None,
        name=None,
    ):
        return Account(
            id=id,
            name=name or f"Account {id}",
            kind=kind,
            currency=currency,
            status=status,
            owner_kind=owner_kind,
            owner_id=owner_id,
            bank_name=None,
            created_at=T0,
        )

    return _make


@pytest.fixture
def make_entity():
    def _make(id=1, name=None, kind=OwnerKind.CUSTOMER):
        return Entity(
            id=id,
            kind=kind,
            name=name or f"Customer {id}",
            code=None,
            status=AccountStatus.ACTIVE,
            created_at=T0,
        )

    return _make
