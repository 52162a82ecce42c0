"""Domain layer for sarrafi application.

Only the pure aggregation core is re-exported here; services import the
database layer and are imported from their own modules.
"""

from sarrafi.domain.aggregator import aggregate, entity_currency_balances, unify
from sarrafi.domain.commission import commission_split, transition
from sarrafi.domain.ledger import running_balances, signed_change, sort_transactions, statement
from sarrafi.domain.net_worth import analyze
from sarrafi.domain.rates import RateTable
from sarrafi.domain.reports import format_account_statement, format_entity_statement, format_net_worth, to_csv

__all__ = [
    "RateTable",
    "aggregate",
    "analyze",
    "commission_split",
    "entity_currency_balances",
    "format_account_statement",
    "format_entity_statement",
    "format_net_worth",
    "running_balances",
    "signed_change",
    "sort_transactions",
    "statement",
    "to_csv",
    "transition",
    "unify",
]
