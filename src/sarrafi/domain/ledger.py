"""Transaction ledger: chronological fold of signed movements."""

import logging
from collections import defaultdict
from decimal import Decimal, InvalidOperation
from typing import Callable, Hashable, Iterable, Optional, Sequence, TypeVar

from sarrafi.domain.entities import Anomaly, LedgerTransaction, Namespace, StatementLine
from sarrafi.domain.errors import ValidationError, invalid_amount

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

K = TypeVar("K", bound=Hashable)


def validate_amount(amount: object) -> Decimal:
    """Validate an amount at the ingestion boundary.

    Args:
        amount: Amount as Decimal, int or numeric string

    Returns:
        Decimal amount

    Raises:
        ValidationError: If the amount is NaN, not numeric, or not positive
    """
    try:
        value = Decimal(str(amount)) if not isinstance(amount, Decimal) else amount
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(invalid_amount(amount))
    if value.is_nan() or value.is_infinite() or value <= 0:
        raise ValidationError(invalid_amount(amount))
    return value


def compute_commission(amount: Decimal, percentage: Decimal) -> tuple[Decimal, Decimal]:
    """Return (commission_amount, total_amount) for a payout.

    Raises:
        ValidationError: If the percentage is negative or NaN
    """
    if percentage is None:
        percentage = ZERO
    percentage = Decimal(percentage)
    if percentage.is_nan() or percentage < 0:
        raise ValidationError(f"Commission percentage must not be negative, got '{percentage}'")
    commission = amount * percentage / HUNDRED
    return commission, amount + commission


def _is_usable(value: Optional[Decimal]) -> bool:
    return value is not None and not value.is_nan() and not value.is_infinite() and value > 0


def sort_transactions(transactions: Iterable[LedgerTransaction]) -> list[LedgerTransaction]:
    """Sort oldest first; equal timestamps keep ID order, then input order."""
    return sorted(transactions, key=lambda txn: (txn.timestamp, txn.id))


def signed_change(txn: LedgerTransaction) -> Decimal:
    """Return the balance change a transaction causes.

    Deposits and credits add the amount; withdrawals and debits remove the
    effective total (amount plus commission).
    """
    if txn.type.is_inflow:
        return txn.amount
    return -txn.effective_total


def checked_change(txn: LedgerTransaction) -> tuple[Decimal, Optional[Anomaly]]:
    """Return the signed change, clamping malformed amounts to zero.

    Outflows need both a usable amount and a usable effective total.
    """
    values = [txn.amount] if txn.type.is_inflow else [txn.amount, txn.effective_total]
    unusable = [v for v in values if not _is_usable(v)]
    if unusable:
        bad = unusable[0]
        anomaly = Anomaly(
            source="transaction",
            reference=str(txn.id),
            reason=f"unusable amount {bad!s}; counted as 0",
        )
        logger.warning("Transaction %s has unusable amount %s; counted as 0", txn.id, bad)
        return ZERO, anomaly
    return signed_change(txn), None


def balance_key(txn: LedgerTransaction) -> Hashable:
    """Group a running balance belongs to.

    Main-ledger entries have no account, so they run per entity and currency;
    every other namespace runs per account and currency.
    """
    if txn.namespace == Namespace.MAIN:
        return (txn.entity_key, txn.currency)
    return (txn.account_id, txn.currency)


def fold_balances(
    transactions: Iterable[LedgerTransaction],
    key: Callable[[LedgerTransaction], Optional[K]],
    anomalies: Optional[list[Anomaly]] = None,
) -> dict[K, Decimal]:
    """Fold transactions into balances grouped by ``key``.

    Transactions for which ``key`` returns None are skipped. Input order does
    not matter; the fold runs over the chronologically sorted log.
    """
    balances: dict[K, Decimal] = defaultdict(lambda: ZERO)
    for txn in sort_transactions(transactions):
        group = key(txn)
        if group is None:
            continue
        change, anomaly = checked_change(txn)
        if anomaly is not None and anomalies is not None:
            anomalies.append(anomaly)
        balances[group] += change
    return dict(balances)


def running_balances(transactions: Iterable[LedgerTransaction]) -> dict[int, Decimal]:
    """Per-account balance after every transaction has been applied."""
    return fold_balances(transactions, key=lambda txn: txn.account_id)


def statement(
    transactions: Sequence[LedgerTransaction],
    key: Callable[[LedgerTransaction], Hashable] = balance_key,
) -> list[StatementLine]:
    """Build statement lines with the running balance after each entry.

    Balances run independently per ``key`` value (see ``balance_key``; use
    the currency alone for one entity's multi-currency ledger). Lines are
    oldest first.
    """
    balances: dict[Hashable, Decimal] = defaultdict(lambda: ZERO)
    lines: list[StatementLine] = []
    for txn in sort_transactions(transactions):
        change, _ = checked_change(txn)
        group = key(txn)
        balances[group] += change
        lines.append(StatementLine(transaction=txn, change=change, balance_after=balances[group]))
    return lines


def balance_after(transactions: Sequence[LedgerTransaction], transaction_id: int) -> Decimal:
    """Return the running balance of the transaction's group right after it.

    Raises:
        KeyError: If the transaction is not in the list
    """
    target = next((t for t in transactions if t.id == transaction_id), None)
    if target is None:
        raise KeyError(transaction_id)
    group = balance_key(target)
    same_group = [t for t in transactions if t.namespace == target.namespace and balance_key(t) == group]
    for line in statement(same_group):
        if line.transaction.id == transaction_id:
            return line.balance_after
    raise KeyError(transaction_id)
