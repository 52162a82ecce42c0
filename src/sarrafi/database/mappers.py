"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so stored strings become the closed
enums of the domain in one place.
"""

from decimal import Decimal
from typing import Optional

from sarrafi.domain import entities as domain
from sarrafi.database.models import (
    Account as ORMAccount,
    BalanceSnapshot as ORMBalanceSnapshot,
    CommissionTransfer as ORMCommissionTransfer,
    Entity as ORMEntity,
    ExchangeRate as ORMExchangeRate,
    LedgerTransaction as ORMLedgerTransaction,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def entity_to_domain(orm_entity: ORMEntity) -> domain.Entity:
    """Convert SQLAlchemy Entity model to domain Entity."""
    return domain.Entity(
        id=orm_entity.id,
        kind=domain.OwnerKind(orm_entity.kind),
        name=orm_entity.name,
        code=orm_entity.code,
        status=domain.AccountStatus(orm_entity.status),
        created_at=orm_entity.created_at,
    )


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        kind=domain.AccountKind(orm_account.kind),
        currency=domain.Currency(orm_account.currency),
        status=domain.AccountStatus(orm_account.status),
        owner_kind=domain.OwnerKind(orm_account.owner_kind),
        owner_id=orm_account.owner_id,
        bank_name=orm_account.bank_name,
        created_at=orm_account.created_at,
    )


def linked_entity_to_domain(orm_transaction: ORMLedgerTransaction) -> Optional[domain.LinkedEntity]:
    """Build the linked-entity tag of a transaction, if it has one."""
    if orm_transaction.linked_entity_type is None:
        return None
    return domain.LinkedEntity(
        type=domain.LinkedEntityType.parse(orm_transaction.linked_entity_type),
        id=orm_transaction.linked_entity_id,
        description=orm_transaction.linked_entity_description,
    )


def transaction_to_domain(orm_transaction: ORMLedgerTransaction) -> domain.LedgerTransaction:
    """Convert SQLAlchemy LedgerTransaction model to domain LedgerTransaction."""
    return domain.LedgerTransaction(
        id=orm_transaction.id,
        namespace=domain.Namespace(orm_transaction.namespace),
        type=domain.TransactionType(orm_transaction.type),
        amount=_decimal(orm_transaction.amount),
        currency=domain.Currency(orm_transaction.currency),
        timestamp=orm_transaction.timestamp,
        account_id=orm_transaction.account_id,
        owner_kind=domain.OwnerKind(orm_transaction.owner_kind),
        owner_id=orm_transaction.owner_id,
        guest_name=orm_transaction.guest_name,
        commission_percentage=_decimal(orm_transaction.commission_percentage) or Decimal("0"),
        commission_amount=_decimal(orm_transaction.commission_amount) or Decimal("0"),
        total_amount=_decimal(orm_transaction.total_amount),
        receipt_serial=orm_transaction.receipt_serial,
        bank_name=orm_transaction.bank_name,
        card_last_digits=orm_transaction.card_last_digits,
        destination_account=orm_transaction.destination_account,
        description=orm_transaction.description,
        linked_entity=linked_entity_to_domain(orm_transaction),
        created_by=orm_transaction.created_by,
    )


def exchange_rate_to_domain(orm_rate: ORMExchangeRate) -> domain.ExchangeRate:
    """Convert SQLAlchemy ExchangeRate model to domain ExchangeRate."""
    return domain.ExchangeRate(
        currency=domain.Currency(orm_rate.currency),
        rate_to_reference=_decimal(orm_rate.rate),
        updated_at=orm_rate.updated_at,
    )


def commission_transfer_to_domain(orm_transfer: ORMCommissionTransfer) -> domain.CommissionTransfer:
    """Convert SQLAlchemy CommissionTransfer model to domain CommissionTransfer."""
    return domain.CommissionTransfer(
        id=orm_transfer.id,
        initiator_kind=domain.OwnerKind(orm_transfer.initiator_kind),
        initiator_id=orm_transfer.initiator_id,
        amount=_decimal(orm_transfer.amount),
        currency=domain.Currency(orm_transfer.currency),
        commission_percentage=_decimal(orm_transfer.commission_percentage),
        status=domain.CommissionTransferStatus(orm_transfer.status),
        created_at=orm_transfer.created_at,
        source_account_number=orm_transfer.source_account_number,
        received_into_account_id=orm_transfer.received_into_account_id,
        receipt_serial=orm_transfer.receipt_serial,
        paid_from_account_id=orm_transfer.paid_from_account_id,
        destination_account_number=orm_transfer.destination_account_number,
        execution_receipt_serial=orm_transfer.execution_receipt_serial,
        commission_amount=_decimal(orm_transfer.commission_amount),
        final_amount_paid=_decimal(orm_transfer.final_amount_paid),
    )


def balances_to_json(balances: dict[domain.Currency, Decimal]) -> dict[str, str]:
    """Serialize a per-currency balance map for a JSON column."""
    return {currency.value: str(amount) for currency, amount in balances.items()}


def balances_from_json(data: dict[str, str]) -> dict[domain.Currency, Decimal]:
    """Parse a stored balance map, in canonical currency order."""
    parsed = {domain.Currency(code): Decimal(value) for code, value in (data or {}).items()}
    return {c: parsed[c] for c in domain.Currency if c in parsed}


def balance_snapshot_to_domain(orm_snapshot: ORMBalanceSnapshot) -> domain.BalanceSnapshot:
    """Convert SQLAlchemy BalanceSnapshot model to domain BalanceSnapshot."""
    return domain.BalanceSnapshot(
        id=orm_snapshot.id,
        entity_id=orm_snapshot.entity_id,
        main_balances=balances_from_json(orm_snapshot.main_balances),
        rented_balance=_decimal(orm_snapshot.rented_balance),
        summary_text=orm_snapshot.summary_text,
        notes=orm_snapshot.notes,
        created_by=orm_snapshot.created_by,
        created_at=orm_snapshot.created_at,
    )
