"""Tests for the transaction service."""

from datetime import datetime
from decimal import Decimal

import pytest

from sarrafi.domain.entities import (
    AccountKind,
    Currency,
    EntityKey,
    LinkedEntity,
    LinkedEntityType,
    Namespace,
    OwnerKind,
    TransactionType,
)
from sarrafi.domain.errors import ConflictError, NotFoundError, ValidationError


def test_deposit_into_rented_account(transaction_service, rented_account, sample_customer):
    """Test recording a deposit for a customer."""
    txn_id = transaction_service.record_deposit(
        rented_account.id,
        Decimal("5000000"),
        owner_id=sample_customer.id,
        receipt_serial="88123",
        timestamp=datetime(2024, 3, 1, 10, 0),
        card_last_digits="4411",
        created_by="maryam",
    )
    txn = transaction_service.get_transaction(txn_id)

    assert txn.namespace == Namespace.RENTED
    assert txn.type == TransactionType.DEPOSIT
    assert txn.amount == Decimal("5000000")
    assert txn.currency == Currency.IRT_BANK
    assert txn.owner_kind == OwnerKind.CUSTOMER
    assert txn.owner_id == sample_customer.id
    assert txn.total_amount == Decimal("5000000")
    assert txn.card_last_digits == "4411"
    assert txn.created_by == "maryam"


def test_deposit_into_cashbox_is_treasury(transaction_service, cashbox_usd):
    txn_id = transaction_service.record_deposit(cashbox_usd.id, Decimal("1000"))
    txn = transaction_service.get_transaction(txn_id)
    assert txn.namespace == Namespace.TREASURY
    assert txn.currency == Currency.USD


def test_deposit_rejects_bad_amount(transaction_service, cashbox_usd):
    with pytest.raises(ValidationError):
        transaction_service.record_deposit(cashbox_usd.id, Decimal("0"))
    with pytest.raises(ValidationError):
        transaction_service.record_deposit(cashbox_usd.id, Decimal("-10"))


def test_deposit_unknown_account(transaction_service):
    with pytest.raises(NotFoundError):
        transaction_service.record_deposit(999, Decimal("1"))


def test_guest_only_on_rented_accounts(transaction_service, rented_account, cashbox_usd):
    """Test that walk-in guests are recorded on rented accounts only."""
    txn_id = transaction_service.record_deposit(rented_account.id, Decimal("100"), guest_name=" Reza ")
    txn = transaction_service.get_transaction(txn_id)
    assert txn.owner_kind == OwnerKind.GUEST
    assert txn.guest_name == "Reza"

    with pytest.raises(ValidationError):
        transaction_service.record_deposit(cashbox_usd.id, Decimal("100"), guest_name="Reza")


def test_entity_and_guest_together_rejected(transaction_service, rented_account, sample_customer):
    with pytest.raises(ValidationError):
        transaction_service.record_deposit(
            rented_account.id, Decimal("100"), owner_id=sample_customer.id, guest_name="Reza"
        )


def test_duplicate_receipt_serial_in_namespace(transaction_service, rented_account, bank_eur):
    """Test that receipt serials are unique within one ledger only."""
    transaction_service.record_deposit(rented_account.id, Decimal("100"), receipt_serial="R-1")

    with pytest.raises(ConflictError):
        transaction_service.record_deposit(rented_account.id, Decimal("200"), receipt_serial="R-1")

    # Another namespace may reuse the serial
    transaction_service.record_deposit(bank_eur.id, Decimal("50"), receipt_serial="R-1")


def test_withdrawal_with_commission(transaction_service, rented_account, sample_customer):
    """Test that withdrawals store commission and total."""
    txn_id = transaction_service.record_withdrawal(
        rented_account.id,
        Decimal("1000000"),
        commission_percentage=Decimal("1"),
        owner_id=sample_customer.id,
        destination_account="6037-9911",
    )
    txn = transaction_service.get_transaction(txn_id)

    assert txn.commission_amount == Decimal("10000")
    assert txn.total_amount == Decimal("1010000")
    assert txn.destination_account == "6037-9911"


def test_withdrawal_from_inactive_account(transaction_service, account_service, rented_account):
    transaction_service.record_deposit(rented_account.id, Decimal("500"))
    account_service.deactivate_account(rented_account.id)

    with pytest.raises(ConflictError, match="inactive"):
        transaction_service.record_withdrawal(rented_account.id, Decimal("100"))

    # Deposits are still accepted
    transaction_service.record_deposit(rented_account.id, Decimal("50"))


def test_dedicated_account_entries_take_owner(transaction_service, account_service, sample_customer):
    account_id = account_service.create_account(
        "Ahmad EUR", AccountKind.DEDICATED, Currency.EUR, owner_id=sample_customer.id
    )
    txn_id = transaction_service.record_deposit(account_id, Decimal("75"))
    txn = transaction_service.get_transaction(txn_id)

    assert txn.namespace == Namespace.DEDICATED
    assert txn.owner_id == sample_customer.id


def test_credit_and_debit_main_ledger(transaction_service, sample_customer):
    """Test main-ledger entries for an entity."""
    credit_id = transaction_service.record_credit(sample_customer.id, Decimal("500"), Currency.USD)
    debit_id = transaction_service.record_debit(
        sample_customer.id, Decimal("200"), Currency.USD, commission_percentage=Decimal("2")
    )

    credit = transaction_service.get_transaction(credit_id)
    debit = transaction_service.get_transaction(debit_id)

    assert credit.namespace == Namespace.MAIN
    assert credit.account_id is None
    assert debit.commission_amount == Decimal("4")
    assert debit.total_amount == Decimal("204")


def test_credit_unknown_entity(transaction_service):
    with pytest.raises(NotFoundError):
        transaction_service.record_credit(999, Decimal("1"), Currency.USD)


def test_list_transactions_filters(transaction_service, rented_account, cashbox_usd, sample_customer):
    transaction_service.record_deposit(
        rented_account.id, Decimal("100"), owner_id=sample_customer.id, timestamp=datetime(2024, 1, 5)
    )
    transaction_service.record_deposit(rented_account.id, Decimal("200"), timestamp=datetime(2024, 2, 5))
    transaction_service.record_deposit(cashbox_usd.id, Decimal("300"), timestamp=datetime(2024, 2, 6))

    assert len(transaction_service.list_transactions(namespace=Namespace.RENTED)) == 2
    assert len(transaction_service.list_transactions(account_id=cashbox_usd.id)) == 1
    assert len(transaction_service.list_transactions(entity_id=sample_customer.id)) == 1
    february = transaction_service.list_transactions(start=datetime(2024, 2, 1), end=datetime(2024, 3, 1))
    assert [t.amount for t in february] == [Decimal("200"), Decimal("300")]


class TestOpeningBalance:
    """Tests for opening balance entries."""

    def test_set_positive_is_credit(self, transaction_service, sample_customer):
        txn_id = transaction_service.set_opening_balance(sample_customer.id, Currency.USD, Decimal("750"))
        txn = transaction_service.get_transaction(txn_id)

        assert txn.type == TransactionType.CREDIT
        assert txn.amount == Decimal("750")
        assert txn.is_opening_balance

    def test_set_negative_is_debit(self, transaction_service, sample_customer):
        txn_id = transaction_service.set_opening_balance(sample_customer.id, Currency.EUR, Decimal("-40"))
        txn = transaction_service.get_transaction(txn_id)

        assert txn.type == TransactionType.DEBIT
        assert txn.amount == Decimal("40")

    def test_update_keeps_single_entry(self, transaction_service, sample_customer):
        first = transaction_service.set_opening_balance(sample_customer.id, Currency.USD, Decimal("750"))
        second = transaction_service.set_opening_balance(sample_customer.id, Currency.USD, Decimal("-20"))

        assert first == second
        entries = transaction_service.opening_balances(sample_customer.id)
        assert len(entries) == 1
        assert entries[0].type == TransactionType.DEBIT
        assert entries[0].amount == Decimal("20")

    def test_zero_clears_entry(self, transaction_service, sample_customer):
        transaction_service.set_opening_balance(sample_customer.id, Currency.USD, Decimal("750"))
        assert transaction_service.set_opening_balance(sample_customer.id, Currency.USD, Decimal("0")) is None
        assert transaction_service.opening_balances(sample_customer.id) == []

    def test_delete(self, transaction_service, sample_customer):
        txn_id = transaction_service.set_opening_balance(sample_customer.id, Currency.USD, Decimal("1"))
        transaction_service.delete_opening_balance(txn_id)
        assert transaction_service.get_transaction(txn_id) is None

    def test_delete_refuses_regular_entries(self, transaction_service, sample_customer):
        txn_id = transaction_service.record_credit(sample_customer.id, Decimal("5"), Currency.USD)
        with pytest.raises(ConflictError):
            transaction_service.delete_opening_balance(txn_id)

    def test_unknown_entity(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.set_opening_balance(999, Currency.USD, Decimal("1"))


class TestRentedConversion:
    def test_convert_posts_both_sides(self, transaction_service, rented_account, sample_customer):
        """Test moving rented money into the main ledger."""
        transaction_service.record_deposit(rented_account.id, Decimal("1200000"), owner_id=sample_customer.id)

        withdrawal_id, credit_id = transaction_service.convert_rented_to_main(
            rented_account.id, sample_customer.id, Decimal("600000"), Currency.USD, Decimal("60000")
        )

        withdrawal = transaction_service.get_transaction(withdrawal_id)
        credit = transaction_service.get_transaction(credit_id)
        assert withdrawal.namespace == Namespace.RENTED
        assert withdrawal.total_amount == Decimal("600000")
        assert credit.namespace == Namespace.MAIN
        assert credit.amount == Decimal("10")
        assert credit.currency == Currency.USD
        assert credit.linked_entity == LinkedEntity(
            type=LinkedEntityType.RENTED_CONVERSION,
            id=str(withdrawal_id),
            description="600000 IRT_BANK at 60000",
        )

    def test_convert_requires_rented_account(self, transaction_service, cashbox_usd, sample_customer):
        with pytest.raises(ValidationError):
            transaction_service.convert_rented_to_main(
                cashbox_usd.id, sample_customer.id, Decimal("1"), Currency.USD, Decimal("1")
            )

    def test_convert_rejects_bad_rate(self, transaction_service, rented_account, sample_customer):
        with pytest.raises(ValidationError):
            transaction_service.convert_rented_to_main(
                rented_account.id, sample_customer.id, Decimal("1"), Currency.USD, Decimal("0")
            )


class TestInternalExchange:
    def test_multiply_posts_debit_and_credit(self, transaction_service, sample_customer):
        """Test exchanging USD into AFN on the main ledger."""
        debit_id, credit_id = transaction_service.internal_exchange(
            sample_customer.id, Decimal("100"), Currency.USD, Currency.AFN, Decimal("70")
        )

        debit = transaction_service.get_transaction(debit_id)
        credit = transaction_service.get_transaction(credit_id)
        assert (debit.namespace, debit.type, debit.currency) == (Namespace.MAIN, TransactionType.DEBIT, Currency.USD)
        assert debit.amount == Decimal("100")
        assert (credit.type, credit.currency) == (TransactionType.CREDIT, Currency.AFN)
        assert credit.amount == Decimal("7000")
        assert credit.owner_id == sample_customer.id
        assert credit.linked_entity == LinkedEntity(
            type=LinkedEntityType.INTERNAL_EXCHANGE, id=str(debit_id), description="rate 70"
        )

    def test_divide_rounds_to_cents(self, transaction_service, sample_customer):
        _, credit_id = transaction_service.internal_exchange(
            sample_customer.id, Decimal("1000"), Currency.AFN, Currency.USD, Decimal("70"), divide=True
        )

        assert transaction_service.get_transaction(credit_id).amount == Decimal("14.29")

    def test_same_currency_rejected(self, transaction_service, sample_customer):
        with pytest.raises(ValidationError):
            transaction_service.internal_exchange(
                sample_customer.id, Decimal("1"), Currency.USD, Currency.USD, Decimal("1")
            )

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-2")])
    def test_bad_rate_posts_nothing(self, transaction_service, sample_customer, rate):
        with pytest.raises(ValidationError):
            transaction_service.internal_exchange(
                sample_customer.id, Decimal("10"), Currency.USD, Currency.EUR, rate
            )

        assert transaction_service.list_transactions(entity_id=sample_customer.id) == []

    def test_result_rounding_to_zero_rejected(self, transaction_service, sample_customer):
        with pytest.raises(ValidationError):
            transaction_service.internal_exchange(
                sample_customer.id, Decimal("1"), Currency.IRT_BANK, Currency.USD, Decimal("600000"), divide=True
            )

    def test_unknown_entity(self, transaction_service):
        with pytest.raises(NotFoundError):
            transaction_service.internal_exchange(999, Decimal("1"), Currency.USD, Currency.EUR, Decimal("1"))


class TestSuspenseAllocation:
    @pytest.fixture
    def suspense_deposit(self, transaction_service, rented_account):
        return transaction_service.record_deposit(rented_account.id, Decimal("500000"), guest_name="SUSPENSE")

    def test_allocate_moves_money_to_entity(
        self, transaction_service, ledger_service, rented_account, sample_customer, suspense_deposit
    ):
        withdrawal_id, deposit_id = transaction_service.allocate_suspense(suspense_deposit, sample_customer.id)

        withdrawal = transaction_service.get_transaction(withdrawal_id)
        deposit = transaction_service.get_transaction(deposit_id)
        assert (withdrawal.owner_kind, withdrawal.guest_name) == (OwnerKind.GUEST, "SUSPENSE")
        assert withdrawal.total_amount == Decimal("500000")
        assert withdrawal.destination_account == "Allocated to Ahmad Karimi"
        assert deposit.account_id == rented_account.id
        assert deposit.owner_id == sample_customer.id
        assert deposit.receipt_serial == f"ALLOC-{suspense_deposit}"

        balances = ledger_service.aggregate_namespace(Namespace.RENTED).per_entity_balance
        assert balances.get(EntityKey(OwnerKind.GUEST, "SUSPENSE"), Decimal("0")) == 0
        assert balances[sample_customer.key] == Decimal("500000")

    def test_allocate_to_partner(self, transaction_service, sample_partner, suspense_deposit):
        _, deposit_id = transaction_service.allocate_suspense(suspense_deposit, sample_partner.id)

        assert transaction_service.get_transaction(deposit_id).owner_kind == OwnerKind.PARTNER

    def test_allocate_twice_rejected(self, transaction_service, sample_customer, suspense_deposit):
        transaction_service.allocate_suspense(suspense_deposit, sample_customer.id)

        with pytest.raises(ConflictError):
            transaction_service.allocate_suspense(suspense_deposit, sample_customer.id)

        withdrawals = [
            t for t in transaction_service.list_transactions(namespace=Namespace.RENTED)
            if t.type == TransactionType.WITHDRAWAL
        ]
        assert len(withdrawals) == 1

    def test_only_suspense_deposits(self, transaction_service, rented_account, sample_customer):
        named = transaction_service.record_deposit(rented_account.id, Decimal("10"), guest_name="Reza")

        with pytest.raises(ValidationError):
            transaction_service.allocate_suspense(named, sample_customer.id)

    def test_unknown_transaction(self, transaction_service, sample_customer):
        with pytest.raises(NotFoundError):
            transaction_service.allocate_suspense(999, sample_customer.id)
