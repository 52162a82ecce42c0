"""Domain model entities for sarrafi.

These are pure data classes representing business concepts, independent of
database schema. Balances are never stored on accounts or entities; they are
derived from the transaction log by the ledger fold.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class Currency(str, Enum):
    """Closed set of currencies handled by the exchange.

    Declaration order is the canonical display and summation order.
    """

    USD = "USD"
    EUR = "EUR"
    AFN = "AFN"
    PKR = "PKR"
    IRT_BANK = "IRT_BANK"
    IRT_CASH = "IRT_CASH"


REFERENCE_CURRENCY = Currency.USD


class OwnerKind(str, Enum):
    """Kind of counterparty owning an account or a ledger entry."""

    CUSTOMER = "Customer"
    PARTNER = "Partner"
    GUEST = "Guest"
    NONE = "None"


class AccountKind(str, Enum):
    """Physical location of money."""

    CASHBOX = "cashbox"
    BANK = "bank"
    RENTED = "rented"
    DEDICATED = "dedicated"


class AccountStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Namespace(str, Enum):
    """Independent ledger namespaces; balances are merged only for display."""

    MAIN = "main"
    RENTED = "rented"
    DEDICATED = "dedicated"
    TREASURY = "treasury"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    CREDIT = "credit"
    DEBIT = "debit"

    @property
    def is_inflow(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.CREDIT)


class CommissionTransferStatus(str, Enum):
    PENDING_DEPOSIT_APPROVAL = "PendingDepositApproval"
    PENDING_EXECUTION = "PendingExecution"
    PENDING_WITHDRAWAL_APPROVAL = "PendingWithdrawalApproval"
    COMPLETED = "Completed"
    REJECTED = "Rejected"


class LinkedEntityType(str, Enum):
    """Provenance tags for ledger entries."""

    OPENING_BALANCE = "OpeningBalance"
    CASHBOX_REQUEST = "CashboxRequest"
    COMMISSION_TRANSFER = "CommissionTransfer"
    RENTED_CONVERSION = "RentedConversion"
    INTERNAL_EXCHANGE = "InternalExchange"
    MANUAL = "Manual"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LinkedEntityType":
        """Parse a stored tag, falling back to OTHER for unknown values."""
        for member in cls:
            if member.value == value:
                return member
        return cls.OTHER


@dataclass(frozen=True)
class LinkedEntity:
    """Tagged reference to the record that produced a ledger entry."""

    type: LinkedEntityType
    id: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class EntityKey:
    """Identity of a counterparty across ledgers.

    Customers and partners are keyed by their numeric ID; guests of the rented
    ledger have no record of their own and are keyed by name.
    """

    kind: OwnerKind
    id: str

    def __str__(self) -> str:
        return f"{self.kind.value.lower()}-{self.id}"


@dataclass(frozen=True)
class Entity:
    """Customer or partner."""

    id: int
    kind: OwnerKind
    name: str
    code: Optional[str]
    status: AccountStatus
    created_at: datetime

    @property
    def key(self) -> EntityKey:
        return EntityKey(kind=self.kind, id=str(self.id))


@dataclass(frozen=True)
class Account:
    """Bank, cashbox, rented or dedicated account."""

    id: int
    name: str
    kind: AccountKind
    currency: Currency
    status: AccountStatus
    owner_kind: OwnerKind
    owner_id: Optional[int]
    bank_name: Optional[str]
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @property
    def owner_key(self) -> Optional[EntityKey]:
        if self.owner_kind in (OwnerKind.CUSTOMER, OwnerKind.PARTNER) and self.owner_id is not None:
            return EntityKey(kind=self.owner_kind, id=str(self.owner_id))
        return None


@dataclass(frozen=True)
class LedgerTransaction:
    """Immutable movement of money within one namespace.

    Main-ledger entries (credit/debit) post against the entity itself and have
    no physical account; every other namespace posts against one account.
    """

    id: int
    namespace: Namespace
    type: TransactionType
    amount: Decimal
    currency: Currency
    timestamp: datetime
    account_id: Optional[int] = None
    owner_kind: OwnerKind = OwnerKind.NONE
    owner_id: Optional[int] = None
    guest_name: Optional[str] = None
    commission_percentage: Decimal = Decimal("0")
    commission_amount: Decimal = Decimal("0")
    total_amount: Optional[Decimal] = None
    receipt_serial: Optional[str] = None
    bank_name: Optional[str] = None
    card_last_digits: Optional[str] = None
    destination_account: Optional[str] = None
    description: Optional[str] = None
    linked_entity: Optional[LinkedEntity] = None
    created_by: Optional[str] = None

    @property
    def effective_total(self) -> Decimal:
        """Amount that leaves or enters the balance."""
        if self.total_amount is not None:
            return self.total_amount
        if self.type.is_inflow:
            return self.amount
        return self.amount + self.commission_amount

    @property
    def entity_key(self) -> Optional[EntityKey]:
        if self.owner_kind == OwnerKind.GUEST:
            return EntityKey(kind=OwnerKind.GUEST, id=self.guest_name or "Unknown")
        if self.owner_kind in (OwnerKind.CUSTOMER, OwnerKind.PARTNER) and self.owner_id is not None:
            return EntityKey(kind=self.owner_kind, id=str(self.owner_id))
        return None

    @property
    def is_opening_balance(self) -> bool:
        return (
            self.linked_entity is not None
            and self.linked_entity.type == LinkedEntityType.OPENING_BALANCE
        )


@dataclass(frozen=True)
class ExchangeRate:
    """Units of ``currency`` per one unit of the reference currency."""

    currency: Currency
    rate_to_reference: Decimal
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashboxBalance:
    currency: Currency
    balance: Decimal


@dataclass(frozen=True)
class AccountBalance:
    """Account paired with its derived balance."""

    account: Account
    balance: Decimal


@dataclass(frozen=True)
class EntityBalance:
    """Signed per-currency balances of one entity in one namespace.

    Positive means the business owes the entity; negative means the entity
    owes the business.
    """

    key: EntityKey
    name: str
    balances: dict[Currency, Decimal]
    namespace: Namespace = Namespace.MAIN


@dataclass(frozen=True)
class CommissionTransfer:
    id: int
    initiator_kind: OwnerKind
    initiator_id: Optional[int]
    amount: Decimal
    currency: Currency
    commission_percentage: Decimal
    status: CommissionTransferStatus
    created_at: datetime
    source_account_number: Optional[str] = None
    received_into_account_id: Optional[int] = None
    receipt_serial: Optional[str] = None
    paid_from_account_id: Optional[int] = None
    destination_account_number: Optional[str] = None
    execution_receipt_serial: Optional[str] = None
    commission_amount: Optional[Decimal] = None
    final_amount_paid: Optional[Decimal] = None


@dataclass(frozen=True)
class BalanceSnapshot:
    id: int
    entity_id: int
    main_balances: dict[Currency, Decimal]
    rented_balance: Decimal
    summary_text: str
    notes: Optional[str]
    created_by: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Anomaly:
    """Input value the core refused to fold in."""

    source: str
    reference: str
    reason: str


@dataclass(frozen=True)
class StatementLine:
    transaction: LedgerTransaction
    change: Decimal
    balance_after: Decimal


@dataclass(frozen=True)
class EntitySummary:
    """Aggregated view of one entity in the rented or dedicated ledger."""

    key: EntityKey
    name: str
    balance: Decimal
    last_activity: Optional[datetime]
    known: bool = True


@dataclass(frozen=True)
class AggregationResult:
    namespace: Namespace
    per_account_balance: dict[int, Decimal]
    per_entity_balance: dict[EntityKey, Decimal]
    entity_summaries: tuple[EntitySummary, ...] = ()
    excluded: tuple[LedgerTransaction, ...] = ()
    anomalies: tuple[Anomaly, ...] = ()


@dataclass(frozen=True)
class UsdTotals:
    total_liquid_assets_usd: Decimal
    total_receivables_usd: Decimal
    total_liabilities_usd: Decimal
    total_commission_liability_usd: Decimal


@dataclass(frozen=True)
class NetWorthBreakdown:
    liquid_assets: dict[Currency, Decimal]
    receivables: dict[Currency, Decimal]
    liabilities: dict[Currency, Decimal]
    commission_liability: dict[Currency, Decimal]
    usd_totals: UsdTotals


@dataclass(frozen=True)
class NetWorthReport:
    """Consolidated net-worth analysis in the reference currency.

    ``net_worth`` assumes every receivable is collected; ``liquid_net_worth``
    assumes none is. Both are reported.
    """

    gross_assets: Decimal
    net_worth: Decimal
    liquid_net_worth: Decimal
    breakdown: NetWorthBreakdown
    reference_currency: Currency
    rates: dict[Currency, Decimal]
    missing_rates: tuple[Currency, ...] = ()
    anomalies: tuple[Anomaly, ...] = ()


@dataclass(frozen=True)
class SummaryItem:
    label: str
    value: str
    currency: str


@dataclass(frozen=True)
class ReportResult:
    title: str
    summary: tuple[SummaryItem, ...]
    headers: tuple[str, ...]
    rows: tuple[tuple, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LedgerInputs:
    """Everything one recompute cycle reads, taken from a single read."""

    entities: tuple[Entity, ...]
    accounts: tuple[Account, ...]
    transactions: tuple[LedgerTransaction, ...]
    rates: tuple[ExchangeRate, ...]
    commission_transfers: tuple[CommissionTransfer, ...]
