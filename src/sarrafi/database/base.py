"""Abstract database interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from sarrafi.domain.entities import (
    Account,
    AccountKind,
    AccountStatus,
    BalanceSnapshot,
    CommissionTransfer,
    CommissionTransferStatus,
    Currency,
    Entity,
    ExchangeRate,
    LedgerInputs,
    LedgerTransaction,
    LinkedEntity,
    Namespace,
    OwnerKind,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for sarrafi."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Entity operations
    @abstractmethod
    def create_entity(self, kind: OwnerKind, name: str, code: Optional[str] = None) -> int:
        """Create a customer or partner. Returns entity ID."""
        pass

    @abstractmethod
    def get_entity(self, entity_id: int) -> Optional[Entity]:
        """Get entity by ID."""
        pass

    @abstractmethod
    def list_entities(self, kind: Optional[OwnerKind] = None) -> list[Entity]:
        """List entities, optionally filtered by kind."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self,
        name: str,
        kind: AccountKind,
        currency: Currency,
        owner_kind: OwnerKind = OwnerKind.NONE,
        owner_id: Optional[int] = None,
        bank_name: Optional[str] = None,
    ) -> int:
        """Create an account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, kind: Optional[AccountKind] = None) -> list[Account]:
        """List accounts, optionally filtered by kind."""
        pass

    @abstractmethod
    def update_account_status(self, account_id: int, status: AccountStatus) -> None:
        """Activate or deactivate an account."""
        pass

    # Ledger transaction operations
    @abstractmethod
    def create_transaction(
        self,
        namespace: Namespace,
        type: TransactionType,
        amount: Decimal,
        currency: Currency,
        timestamp: datetime,
        account_id: Optional[int] = None,
        owner_kind: OwnerKind = OwnerKind.NONE,
        owner_id: Optional[int] = None,
        guest_name: Optional[str] = None,
        commission_percentage: Decimal = Decimal("0"),
        commission_amount: Decimal = Decimal("0"),
        total_amount: Optional[Decimal] = None,
        receipt_serial: Optional[str] = None,
        bank_name: Optional[str] = None,
        card_last_digits: Optional[str] = None,
        destination_account: Optional[str] = None,
        description: Optional[str] = None,
        linked_entity: Optional[LinkedEntity] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Append a ledger transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[LedgerTransaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        namespace: Optional[Namespace] = None,
        account_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[LedgerTransaction]:
        """List transactions with optional filters, oldest first."""
        pass

    @abstractmethod
    def receipt_serial_exists(self, namespace: Namespace, receipt_serial: str) -> bool:
        """Check if a receipt serial is already recorded in a namespace."""
        pass

    @abstractmethod
    def update_opening_balance(
        self, transaction_id: int, type: TransactionType, amount: Decimal
    ) -> None:
        """Rewrite the direction and amount of an opening-balance entry."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Exchange rate operations
    @abstractmethod
    def set_exchange_rate(self, currency: Currency, rate: Decimal) -> None:
        """Insert or update the rate of a currency."""
        pass

    @abstractmethod
    def list_exchange_rates(self) -> list[ExchangeRate]:
        """List stored exchange rates."""
        pass

    # Commission transfer operations
    @abstractmethod
    def create_commission_transfer(
        self,
        initiator_kind: OwnerKind,
        initiator_id: Optional[int],
        amount: Decimal,
        currency: Currency,
        commission_percentage: Decimal,
        source_account_number: Optional[str] = None,
        received_into_account_id: Optional[int] = None,
        receipt_serial: Optional[str] = None,
    ) -> int:
        """Log a commission transfer awaiting deposit approval. Returns its ID."""
        pass

    @abstractmethod
    def get_commission_transfer(self, transfer_id: int) -> Optional[CommissionTransfer]:
        """Get commission transfer by ID."""
        pass

    @abstractmethod
    def list_commission_transfers(
        self, status: Optional[CommissionTransferStatus] = None
    ) -> list[CommissionTransfer]:
        """List commission transfers, newest first."""
        pass

    @abstractmethod
    def save_commission_transfer(self, transfer: CommissionTransfer) -> None:
        """Persist the status and execution details of a transfer."""
        pass

    # Balance snapshot operations
    @abstractmethod
    def create_balance_snapshot(
        self,
        entity_id: int,
        main_balances: dict[Currency, Decimal],
        rented_balance: Decimal,
        summary_text: str,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Store a balance snapshot. Returns snapshot ID."""
        pass

    @abstractmethod
    def list_balance_snapshots(self, entity_id: Optional[int] = None) -> list[BalanceSnapshot]:
        """List balance snapshots, newest first."""
        pass

    # Bulk read
    @abstractmethod
    def load_ledger_inputs(self) -> LedgerInputs:
        """Read entities, accounts, transactions, rates and commission transfers
        in one consistent read.

        Raises:
            DataSourceError: If any part of the read fails
        """
        pass
