"""Transaction domain service.

Every write goes through here: amounts are validated, commission and totals
are computed, and receipt serials are checked before a row is appended.
"""

import logging
from datetime import datetime, UTC
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sarrafi.database.base import Database
from sarrafi.domain.account import namespace_for
from sarrafi.domain.entities import (
    Account,
    AccountKind,
    Currency,
    LedgerTransaction,
    LinkedEntity,
    LinkedEntityType,
    Namespace,
    OwnerKind,
    TransactionType,
)
from sarrafi.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    account_inactive,
    account_not_found,
    duplicate_receipt_serial,
    entity_not_found,
    transaction_not_found,
)
from sarrafi.domain.ledger import ZERO, compute_commission, validate_amount
from sarrafi.domain.rates import validate_rate

logger = logging.getLogger(__name__)

SUSPENSE_GUEST = "SUSPENSE"
CENT = Decimal("0.01")


class TransactionService:
    """Service for recording and listing ledger transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_account(self, account_id: int) -> Account:
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def _check_receipt_serial(self, namespace: Namespace, receipt_serial: Optional[str]) -> None:
        if receipt_serial and self.db.receipt_serial_exists(namespace, receipt_serial):
            raise ConflictError(duplicate_receipt_serial(receipt_serial, namespace.value))

    def _resolve_owner(
        self,
        account: Account,
        owner_id: Optional[int],
        guest_name: Optional[str],
    ) -> tuple[OwnerKind, Optional[int], Optional[str]]:
        """Work out who a movement on an account belongs to."""
        if account.kind == AccountKind.DEDICATED:
            return account.owner_kind, account.owner_id, None
        if owner_id is not None and guest_name:
            raise ValidationError("Give either an entity or a guest name, not both")
        if owner_id is not None:
            entity = self.db.get_entity(owner_id)
            if entity is None:
                raise NotFoundError(entity_not_found(owner_id))
            return entity.kind, entity.id, None
        if guest_name:
            if account.kind != AccountKind.RENTED:
                raise ValidationError("Guest counterparties are only recorded on rented accounts")
            return OwnerKind.GUEST, None, guest_name.strip()
        return OwnerKind.NONE, None, None

    def record_deposit(
        self,
        account_id: int,
        amount: Decimal,
        owner_id: Optional[int] = None,
        guest_name: Optional[str] = None,
        receipt_serial: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        description: Optional[str] = None,
        bank_name: Optional[str] = None,
        card_last_digits: Optional[str] = None,
        linked_entity: Optional[LinkedEntity] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Record money coming into an account.

        Args:
            account_id: Receiving account
            amount: Positive amount in the account currency
            owner_id: Customer or partner the money is received for
            guest_name: Walk-in counterparty on a rented account
            receipt_serial: Bank receipt serial, unique within the ledger
            timestamp: Transaction time, defaults to now
            description: Optional description
            bank_name: Paying bank
            card_last_digits: Last digits of the paying card
            linked_entity: Record that produced this entry
            created_by: Operator name

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the account or entity does not exist
            ConflictError: If the receipt serial was already recorded
        """
        amount = validate_amount(amount)
        account = self._require_account(account_id)
        namespace = namespace_for(account)
        owner_kind, owner_id, guest_name = self._resolve_owner(account, owner_id, guest_name)
        self._check_receipt_serial(namespace, receipt_serial)

        txn_id = self.db.create_transaction(
            namespace=namespace,
            type=TransactionType.DEPOSIT,
            amount=amount,
            currency=account.currency,
            timestamp=timestamp or datetime.now(UTC),
            account_id=account.id,
            owner_kind=owner_kind,
            owner_id=owner_id,
            guest_name=guest_name,
            total_amount=amount,
            receipt_serial=receipt_serial,
            bank_name=bank_name,
            card_last_digits=card_last_digits,
            description=description,
            linked_entity=linked_entity,
            created_by=created_by,
        )
        logger.info("Recorded deposit %s of %s %s into account %s", txn_id, amount, account.currency.value, account.id)
        return txn_id

    def record_withdrawal(
        self,
        account_id: int,
        amount: Decimal,
        commission_percentage: Decimal = ZERO,
        owner_id: Optional[int] = None,
        guest_name: Optional[str] = None,
        receipt_serial: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        description: Optional[str] = None,
        destination_account: Optional[str] = None,
        card_last_digits: Optional[str] = None,
        linked_entity: Optional[LinkedEntity] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Record money leaving an account.

        The balance is reduced by the amount plus the commission charged on it.

        Returns:
            Transaction ID

        Raises:
            ValidationError: If the amount or commission percentage is invalid
            NotFoundError: If the account or entity does not exist
            ConflictError: If the account is inactive or the receipt serial is reused
        """
        amount = validate_amount(amount)
        account = self._require_account(account_id)
        if not account.is_active:
            raise ConflictError(account_inactive(account_id))
        namespace = namespace_for(account)
        owner_kind, owner_id, guest_name = self._resolve_owner(account, owner_id, guest_name)
        self._check_receipt_serial(namespace, receipt_serial)
        commission, total = compute_commission(amount, commission_percentage)

        txn_id = self.db.create_transaction(
            namespace=namespace,
            type=TransactionType.WITHDRAWAL,
            amount=amount,
            currency=account.currency,
            timestamp=timestamp or datetime.now(UTC),
            account_id=account.id,
            owner_kind=owner_kind,
            owner_id=owner_id,
            guest_name=guest_name,
            commission_percentage=Decimal(commission_percentage or 0),
            commission_amount=commission,
            total_amount=total,
            receipt_serial=receipt_serial,
            card_last_digits=card_last_digits,
            destination_account=destination_account,
            description=description,
            linked_entity=linked_entity,
            created_by=created_by,
        )
        logger.info("Recorded withdrawal %s of %s %s from account %s", txn_id, total, account.currency.value, account.id)
        return txn_id

    def _record_entity_entry(
        self,
        type: TransactionType,
        entity_id: int,
        amount: Decimal,
        currency: Currency,
        commission_percentage: Decimal = ZERO,
        receipt_serial: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        description: Optional[str] = None,
        linked_entity: Optional[LinkedEntity] = None,
        created_by: Optional[str] = None,
    ) -> int:
        amount = validate_amount(amount)
        entity = self.db.get_entity(entity_id)
        if entity is None:
            raise NotFoundError(entity_not_found(entity_id))
        self._check_receipt_serial(Namespace.MAIN, receipt_serial)
        if type.is_inflow:
            commission, total = ZERO, amount
        else:
            commission, total = compute_commission(amount, commission_percentage)

        return self.db.create_transaction(
            namespace=Namespace.MAIN,
            type=type,
            amount=amount,
            currency=currency,
            timestamp=timestamp or datetime.now(UTC),
            owner_kind=entity.kind,
            owner_id=entity.id,
            commission_percentage=Decimal(commission_percentage or 0),
            commission_amount=commission,
            total_amount=total,
            receipt_serial=receipt_serial,
            description=description,
            linked_entity=linked_entity,
            created_by=created_by,
        )

    def record_credit(
        self,
        entity_id: int,
        amount: Decimal,
        currency: Currency,
        receipt_serial: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        description: Optional[str] = None,
        linked_entity: Optional[LinkedEntity] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Credit an entity's main ledger: the business owes it more.

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the entity does not exist
            ConflictError: If the receipt serial was already recorded
        """
        return self._record_entity_entry(
            TransactionType.CREDIT,
            entity_id,
            amount,
            currency,
            receipt_serial=receipt_serial,
            timestamp=timestamp,
            description=description,
            linked_entity=linked_entity,
            created_by=created_by,
        )

    def record_debit(
        self,
        entity_id: int,
        amount: Decimal,
        currency: Currency,
        commission_percentage: Decimal = ZERO,
        receipt_serial: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        description: Optional[str] = None,
        linked_entity: Optional[LinkedEntity] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Debit an entity's main ledger, e.g. for a payout.

        Raises:
            ValidationError: If the amount or commission percentage is invalid
            NotFoundError: If the entity does not exist
            ConflictError: If the receipt serial was already recorded
        """
        return self._record_entity_entry(
            TransactionType.DEBIT,
            entity_id,
            amount,
            currency,
            commission_percentage=commission_percentage,
            receipt_serial=receipt_serial,
            timestamp=timestamp,
            description=description,
            linked_entity=linked_entity,
            created_by=created_by,
        )

    def get_transaction(self, transaction_id: int) -> Optional[LedgerTransaction]:
        """Get transaction by ID, or None if not found."""
        return self.db.get_transaction(transaction_id)

    def list_transactions(
        self,
        namespace: Optional[Namespace] = None,
        account_id: Optional[int] = None,
        entity_id: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[LedgerTransaction]:
        """List transactions with filters, oldest first.

        Args:
            namespace: Optional ledger namespace
            account_id: Optional account ID filter
            entity_id: Optional customer/partner ID filter
            start: Optional inclusive lower bound on the timestamp
            end: Optional exclusive upper bound on the timestamp

        Returns:
            List of ledger transactions
        """
        return self.db.list_transactions(
            namespace=namespace,
            account_id=account_id,
            owner_id=entity_id,
            start=start,
            end=end,
        )

    def opening_balances(self, entity_id: int) -> list[LedgerTransaction]:
        """Opening-balance entries of an entity, one per currency at most."""
        return [
            txn
            for txn in self.db.list_transactions(namespace=Namespace.MAIN, owner_id=entity_id)
            if txn.is_opening_balance
        ]

    def set_opening_balance(
        self,
        entity_id: int,
        currency: Currency,
        balance: Decimal,
        created_by: Optional[str] = None,
    ) -> Optional[int]:
        """Create, update or clear the opening balance of an entity in one currency.

        A positive balance is a credit (the business owes the entity), a
        negative one a debit. Zero removes the entry.

        Args:
            entity_id: Customer or partner ID
            currency: Currency of the balance
            balance: Signed opening balance
            created_by: Operator name

        Returns:
            Transaction ID of the opening-balance entry, or None when cleared

        Raises:
            NotFoundError: If the entity does not exist
            ValidationError: If the balance is not a finite number
        """
        entity = self.db.get_entity(entity_id)
        if entity is None:
            raise NotFoundError(entity_not_found(entity_id))
        balance = Decimal(balance)
        if balance.is_nan() or balance.is_infinite():
            raise ValidationError(f"Opening balance must be a finite number, got '{balance}'")

        existing = next((t for t in self.opening_balances(entity_id) if t.currency == currency), None)
        if balance == 0:
            if existing is not None:
                self.db.delete_transaction(existing.id)
                logger.info("Cleared %s opening balance of entity %s", currency.value, entity_id)
            return None

        type = TransactionType.CREDIT if balance > 0 else TransactionType.DEBIT
        if existing is not None:
            self.db.update_opening_balance(existing.id, type=type, amount=abs(balance))
            logger.info("Updated %s opening balance of entity %s", currency.value, entity_id)
            return existing.id

        return self._record_entity_entry(
            type,
            entity_id,
            abs(balance),
            currency,
            description="Opening balance",
            linked_entity=LinkedEntity(type=LinkedEntityType.OPENING_BALANCE),
            created_by=created_by,
        )

    def delete_opening_balance(self, transaction_id: int) -> None:
        """Delete an opening-balance entry. Other entries are immutable.

        Raises:
            NotFoundError: If the transaction does not exist
            ConflictError: If the transaction is not an opening balance
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if not txn.is_opening_balance:
            raise ConflictError(f"Transaction {transaction_id} is not an opening balance and cannot be deleted")
        self.db.delete_transaction(transaction_id)
        logger.info("Deleted opening balance %s", transaction_id)

    def convert_rented_to_main(
        self,
        account_id: int,
        entity_id: int,
        amount: Decimal,
        target_currency: Currency,
        rate: Decimal,
        created_by: Optional[str] = None,
    ) -> tuple[int, int]:
        """Move an entity's rented-account money into its main ledger.

        The rented balance is reduced by ``amount`` (IRT_BANK) and the main
        ledger is credited ``amount / rate`` in the target currency, where the
        rate is IRT_BANK per unit of the target currency.

        Returns:
            Tuple of (rented withdrawal ID, main credit ID)

        Raises:
            ValidationError: If the amount or rate is invalid, or the account is not rented
            NotFoundError: If the account or entity does not exist
            ConflictError: If the rented account is inactive
        """
        amount = validate_amount(amount)
        rate = validate_rate(rate)
        account = self._require_account(account_id)
        if account.kind != AccountKind.RENTED:
            raise ValidationError(f"Account {account_id} is not a rented account")
        converted = amount / rate
        timestamp = datetime.now(UTC)

        withdrawal_id = self.record_withdrawal(
            account_id,
            amount,
            owner_id=entity_id,
            timestamp=timestamp,
            description=f"Converted to {target_currency.value} at {rate}",
            created_by=created_by,
        )
        credit_id = self.record_credit(
            entity_id,
            converted,
            target_currency,
            timestamp=timestamp,
            description=f"Converted from rented account {account.name}",
            linked_entity=LinkedEntity(
                type=LinkedEntityType.RENTED_CONVERSION,
                id=str(withdrawal_id),
                description=f"{amount} IRT_BANK at {rate}",
            ),
            created_by=created_by,
        )
        logger.info(
            "Converted %s IRT_BANK of entity %s to %s %s",
            amount,
            entity_id,
            converted,
            target_currency.value,
        )
        return withdrawal_id, credit_id

    def internal_exchange(
        self,
        entity_id: int,
        from_amount: Decimal,
        from_currency: Currency,
        to_currency: Currency,
        rate: Decimal,
        divide: bool = False,
        created_by: Optional[str] = None,
    ) -> tuple[int, int]:
        """Exchange money between two currencies of one entity's main ledger.

        The entity is debited ``from_amount`` in ``from_currency`` and credited
        ``from_amount * rate`` (or ``from_amount / rate`` when ``divide`` is set)
        in ``to_currency``, rounded to cents.

        Returns:
            Tuple of (debit ID, credit ID)

        Raises:
            ValidationError: If an amount or the rate is invalid, or both currencies are the same
            NotFoundError: If the entity does not exist
        """
        from_amount = validate_amount(from_amount)
        rate = validate_rate(rate)
        if from_currency == to_currency:
            raise ValidationError("Cannot exchange a currency into itself")
        entity = self.db.get_entity(entity_id)
        if entity is None:
            raise NotFoundError(entity_not_found(entity_id))
        to_amount = (from_amount / rate if divide else from_amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
        to_amount = validate_amount(to_amount)
        effective_rate = 1 / rate if divide else rate
        timestamp = datetime.now(UTC)

        debit_id = self.record_debit(
            entity_id,
            from_amount,
            from_currency,
            timestamp=timestamp,
            description=f"Exchanged to {to_amount} {to_currency.value}",
            linked_entity=LinkedEntity(type=LinkedEntityType.INTERNAL_EXCHANGE),
            created_by=created_by,
        )
        credit_id = self.record_credit(
            entity_id,
            to_amount,
            to_currency,
            timestamp=timestamp,
            description=f"Exchanged from {from_amount} {from_currency.value}",
            linked_entity=LinkedEntity(
                type=LinkedEntityType.INTERNAL_EXCHANGE,
                id=str(debit_id),
                description=f"rate {effective_rate}",
            ),
            created_by=created_by,
        )
        logger.info(
            "Exchanged %s %s to %s %s for entity %s",
            from_amount,
            from_currency.value,
            to_amount,
            to_currency.value,
            entity_id,
        )
        return debit_id, credit_id

    def allocate_suspense(
        self,
        transaction_id: int,
        entity_id: int,
        created_by: Optional[str] = None,
    ) -> tuple[int, int]:
        """Assign an unidentified rented deposit to its real owner.

        Deposits whose sender is unknown are parked on the ``SUSPENSE`` guest.
        Allocation withdraws the amount from the suspense guest and deposits
        it for the entity on the same rented account. The deposit carries the
        receipt serial ``ALLOC-<transaction id>``, so a deposit can only be
        allocated once.

        Returns:
            Tuple of (suspense withdrawal ID, entity deposit ID)

        Raises:
            NotFoundError: If the transaction or entity does not exist
            ValidationError: If the transaction is not a suspense deposit
            ConflictError: If it was already allocated or the account is inactive
        """
        source = self.db.get_transaction(transaction_id)
        if source is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if (
            source.namespace != Namespace.RENTED
            or source.type != TransactionType.DEPOSIT
            or source.owner_kind != OwnerKind.GUEST
            or source.guest_name != SUSPENSE_GUEST
        ):
            raise ValidationError(f"Transaction {transaction_id} is not a suspense deposit")
        entity = self.db.get_entity(entity_id)
        if entity is None:
            raise NotFoundError(entity_not_found(entity_id))
        receipt_serial = f"ALLOC-{transaction_id}"
        self._check_receipt_serial(Namespace.RENTED, receipt_serial)
        timestamp = datetime.now(UTC)

        withdrawal_id = self.record_withdrawal(
            source.account_id,
            source.amount,
            guest_name=SUSPENSE_GUEST,
            timestamp=timestamp,
            description="Suspense allocation",
            destination_account=f"Allocated to {entity.name}",
            linked_entity=LinkedEntity(type=LinkedEntityType.MANUAL, id=str(transaction_id)),
            created_by=created_by,
        )
        deposit_id = self.record_deposit(
            source.account_id,
            source.amount,
            owner_id=entity.id,
            receipt_serial=receipt_serial,
            timestamp=timestamp,
            description="Allocated from suspense",
            linked_entity=LinkedEntity(type=LinkedEntityType.MANUAL, id=str(withdrawal_id)),
            created_by=created_by,
        )
        logger.info(
            "Allocated suspense deposit %s (%s %s) to entity %s",
            transaction_id,
            source.amount,
            source.currency.value,
            entity_id,
        )
        return withdrawal_id, deposit_id
