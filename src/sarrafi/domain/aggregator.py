"""Account aggregator: per-account and per-entity balances of one namespace."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from sarrafi.domain.entities import (
    Account,
    AggregationResult,
    Anomaly,
    Currency,
    Entity,
    EntityBalance,
    EntityKey,
    EntitySummary,
    LedgerTransaction,
    Namespace,
    OwnerKind,
)
from sarrafi.domain.ledger import ZERO, checked_change, sort_transactions

logger = logging.getLogger(__name__)

REMOVED_ENTITY_NAME = "unknown/removed"
GUEST_DEFAULT_NAME = "walk-in customer"


def _is_known_entity(key: Optional[EntityKey], entity_index: dict[EntityKey, Entity]) -> bool:
    if key is None:
        return False
    # Guests have no stored record; any named guest is a valid counterparty.
    return key.kind == OwnerKind.GUEST or key in entity_index


def aggregate(
    transactions: Sequence[LedgerTransaction],
    accounts: Iterable[Account],
    entities: Iterable[Entity],
    namespace: Namespace = Namespace.RENTED,
) -> AggregationResult:
    """Aggregate one namespace into account and entity balances.

    An entity's balance is its signed claim against the business summed over
    every account it transacted on. Transactions of other namespaces are
    ignored. Transactions referencing an unknown account or entity are kept in
    ``excluded`` and contribute to neither map.

    Args:
        transactions: Raw ledger entries, in any order
        accounts: Accounts of the namespace
        entities: Known customers and partners
        namespace: Namespace to aggregate

    Returns:
        AggregationResult for the namespace
    """
    account_index = {acc.id: acc for acc in accounts}
    entity_index = {ent.key: ent for ent in entities}

    per_account: dict[int, Decimal] = {acc_id: ZERO for acc_id in account_index}
    per_entity: dict[EntityKey, Decimal] = defaultdict(lambda: ZERO)
    last_activity: dict[EntityKey, datetime] = {}
    excluded: list[LedgerTransaction] = []
    anomalies: list[Anomaly] = []

    for txn in sort_transactions(t for t in transactions if t.namespace == namespace):
        key = txn.entity_key
        account = account_index.get(txn.account_id) if txn.account_id is not None else None
        account_known = txn.account_id is None or account is not None
        if key is None and account is not None:
            # Dedicated accounts belong to one entity; entries carry no owner.
            key = account.owner_key
        if not account_known or (key is not None and not _is_known_entity(key, entity_index)):
            logger.warning(
                "Excluding transaction %s: unknown account %s or entity %s",
                txn.id,
                txn.account_id,
                key,
            )
            excluded.append(txn)
            continue

        change, anomaly = checked_change(txn)
        if anomaly is not None:
            anomalies.append(anomaly)

        if txn.account_id is not None:
            per_account[txn.account_id] += change
        if key is not None:
            per_entity[key] += change
            last_activity[key] = txn.timestamp

    summaries = tuple(
        EntitySummary(
            key=key,
            name=entity_display_name(key, entity_index),
            balance=balance,
            last_activity=last_activity.get(key),
        )
        for key, balance in per_entity.items()
    )

    return AggregationResult(
        namespace=namespace,
        per_account_balance=per_account,
        per_entity_balance=dict(per_entity),
        entity_summaries=summaries,
        excluded=tuple(excluded),
        anomalies=tuple(anomalies),
    )


def entity_display_name(key: EntityKey, entity_index: dict[EntityKey, Entity]) -> str:
    """Name to print for an entity key."""
    entity = entity_index.get(key)
    if entity is not None:
        return entity.name
    if key.kind == OwnerKind.GUEST:
        return key.id or GUEST_DEFAULT_NAME
    return REMOVED_ENTITY_NAME


def entity_currency_balances(
    transactions: Sequence[LedgerTransaction],
    entities: Iterable[Entity],
    namespace: Namespace = Namespace.MAIN,
) -> list[EntityBalance]:
    """Per-currency balances of every known entity in the main ledger.

    Entities without transactions are returned with an empty balance map.
    """
    entity_list = list(entities)
    entity_index = {ent.key: ent for ent in entity_list}
    balances: dict[EntityKey, dict[Currency, Decimal]] = {ent.key: {} for ent in entity_list}

    for txn in sort_transactions(t for t in transactions if t.namespace == namespace):
        key = txn.entity_key
        if key is None or key not in entity_index:
            logger.warning("Excluding main-ledger transaction %s: unknown entity %s", txn.id, key)
            continue
        change, _ = checked_change(txn)
        per_currency = balances[key]
        per_currency[txn.currency] = per_currency.get(txn.currency, ZERO) + change

    return [
        EntityBalance(key=ent.key, name=ent.name, balances=balances[ent.key], namespace=namespace)
        for ent in entity_list
    ]


@dataclass(frozen=True)
class UnifiedBalance:
    """Main and rented balances of one entity, kept apart.

    ``combined`` is for display only: it folds the rented balance into
    IRT_BANK without touching either source map.
    """

    key: EntityKey
    name: str
    main_balances: dict[Currency, Decimal]
    rented_balance: Decimal

    def combined(self) -> dict[Currency, Decimal]:
        merged = dict(self.main_balances)
        if self.rented_balance != 0:
            merged[Currency.IRT_BANK] = merged.get(Currency.IRT_BANK, ZERO) + self.rented_balance
        return merged


def unify(main: EntityBalance, rented: Optional[AggregationResult]) -> UnifiedBalance:
    """Pair an entity's main balances with its rented-ledger balance."""
    rented_balance = ZERO
    if rented is not None:
        rented_balance = rented.per_entity_balance.get(main.key, ZERO)
    return UnifiedBalance(
        key=main.key,
        name=main.name,
        main_balances=dict(main.balances),
        rented_balance=rented_balance,
    )

