"""Ledger service: load one consistent snapshot and run the pure core on it."""

import logging
from decimal import Decimal
from typing import Optional

from sarrafi.database.base import Database
from sarrafi.domain.account import ACCOUNT_NAMESPACES
from sarrafi.domain.aggregator import (
    UnifiedBalance,
    aggregate,
    entity_currency_balances,
    unify,
)
from sarrafi.domain.entities import (
    AccountBalance,
    AccountKind,
    AggregationResult,
    CashboxBalance,
    Currency,
    EntityBalance,
    LedgerInputs,
    Namespace,
    NetWorthReport,
    StatementLine,
)
from sarrafi.domain.errors import NotFoundError, entity_not_found
from sarrafi.domain.ledger import ZERO, fold_balances, statement
from sarrafi.domain.net_worth import analyze
from sarrafi.domain.rates import RateTable

logger = logging.getLogger(__name__)


class LedgerService:
    """Service computing balances, statements and net worth.

    Each public method reads a fresh ``LedgerInputs`` unless one is passed
    in, so several views can be computed from the same snapshot. A failed
    read raises ``DataSourceError`` and nothing is computed.
    """

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def load_inputs(self) -> LedgerInputs:
        """Read every input of one recompute cycle.

        Raises:
            DataSourceError: If the read fails
        """
        inputs = self.db.load_ledger_inputs()
        logger.debug(
            "Loaded %d entities, %d accounts, %d transactions, %d rates, %d commission transfers",
            len(inputs.entities),
            len(inputs.accounts),
            len(inputs.transactions),
            len(inputs.rates),
            len(inputs.commission_transfers),
        )
        return inputs

    def _inputs(self, inputs: Optional[LedgerInputs]) -> LedgerInputs:
        return inputs if inputs is not None else self.load_inputs()

    def cashbox_balances(self, inputs: Optional[LedgerInputs] = None) -> list[CashboxBalance]:
        """Cash on hand per currency, summed over cashbox accounts."""
        inputs = self._inputs(inputs)
        cashboxes = {a.id: a for a in inputs.accounts if a.kind == AccountKind.CASHBOX}
        per_currency = fold_balances(
            (t for t in inputs.transactions if t.namespace == Namespace.TREASURY),
            key=lambda t: cashboxes[t.account_id].currency if t.account_id in cashboxes else None,
        )
        currencies = {a.currency for a in cashboxes.values()}
        return [
            CashboxBalance(currency=c, balance=per_currency.get(c, ZERO))
            for c in Currency
            if c in currencies
        ]

    def account_balances(
        self, kind: AccountKind, inputs: Optional[LedgerInputs] = None
    ) -> list[AccountBalance]:
        """Balances of every account of one kind."""
        inputs = self._inputs(inputs)
        accounts = [a for a in inputs.accounts if a.kind == kind]
        # Cashbox and bank share the treasury namespace.
        account_ids = {a.id for a in accounts}
        transactions = [t for t in inputs.transactions if t.account_id in account_ids]
        result = aggregate(
            transactions, accounts, inputs.entities, namespace=ACCOUNT_NAMESPACES[kind]
        )
        return [
            AccountBalance(account=a, balance=result.per_account_balance.get(a.id, ZERO))
            for a in accounts
        ]

    def aggregate_namespace(
        self, namespace: Namespace, inputs: Optional[LedgerInputs] = None
    ) -> AggregationResult:
        """Aggregate the rented or dedicated ledger."""
        inputs = self._inputs(inputs)
        kind = AccountKind.RENTED if namespace == Namespace.RENTED else AccountKind.DEDICATED
        accounts = [a for a in inputs.accounts if a.kind == kind]
        return aggregate(inputs.transactions, accounts, inputs.entities, namespace=namespace)

    def entity_balances(self, inputs: Optional[LedgerInputs] = None) -> list[EntityBalance]:
        """Main-ledger balances of every customer and partner."""
        inputs = self._inputs(inputs)
        return entity_currency_balances(inputs.transactions, inputs.entities)

    def unified_balance(self, entity_id: int, inputs: Optional[LedgerInputs] = None) -> UnifiedBalance:
        """Main balances of one entity with its rented balance alongside.

        Raises:
            NotFoundError: If the entity does not exist
        """
        inputs = self._inputs(inputs)
        main = next((b for b in self.entity_balances(inputs) if b.key.id == str(entity_id)), None)
        if main is None:
            raise NotFoundError(entity_not_found(entity_id))
        rented = self.aggregate_namespace(Namespace.RENTED, inputs)
        return unify(main, rented)

    def entity_statement(self, entity_id: int, inputs: Optional[LedgerInputs] = None) -> list[StatementLine]:
        """Main-ledger statement of an entity, running balance per currency.

        Raises:
            NotFoundError: If the entity does not exist
        """
        inputs = self._inputs(inputs)
        if not any(e.id == entity_id for e in inputs.entities):
            raise NotFoundError(entity_not_found(entity_id))
        entries = [
            t for t in inputs.transactions
            if t.namespace == Namespace.MAIN and t.owner_id == entity_id
        ]
        return statement(entries, key=lambda t: t.currency)

    def rate_table(self, inputs: Optional[LedgerInputs] = None) -> RateTable:
        inputs = self._inputs(inputs)
        return RateTable.from_exchange_rates(inputs.rates)

    def net_worth(self, inputs: Optional[LedgerInputs] = None) -> NetWorthReport:
        """Net-worth report of the whole business from one snapshot.

        Only main-ledger entity balances are classified; rented money counts
        as liquid assets of the active rented accounts holding it.

        Raises:
            DataSourceError: If the snapshot cannot be read
        """
        inputs = self._inputs(inputs)
        report = analyze(
            cash_balances=self.cashbox_balances(inputs),
            bank_balances=self.account_balances(AccountKind.BANK, inputs),
            entity_balances=self.entity_balances(inputs),
            pending_commissions=inputs.commission_transfers,
            rates=self.rate_table(inputs),
            rented_balances=self.account_balances(AccountKind.RENTED, inputs),
        )
        logger.info(
            "Net worth %s %s (liquid %s)",
            report.net_worth.quantize(Decimal("0.01")),
            report.reference_currency.value,
            report.liquid_net_worth.quantize(Decimal("0.01")),
        )
        return report
