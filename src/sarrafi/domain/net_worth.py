"""Net-worth analyzer: classify balances and normalize to the reference currency."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from sarrafi.domain.commission import commission_split, is_pending_liability
from sarrafi.domain.entities import (
    AccountBalance,
    Anomaly,
    CashboxBalance,
    CommissionTransfer,
    Currency,
    EntityBalance,
    NetWorthBreakdown,
    NetWorthReport,
    UsdTotals,
)
from sarrafi.domain.errors import ValidationError
from sarrafi.domain.rates import RateTable

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class _Buckets:
    """Per-currency accumulators for the four report categories."""

    def __init__(self):
        self.liquid_assets: dict[Currency, Decimal] = {}
        self.receivables: dict[Currency, Decimal] = {}
        self.liabilities: dict[Currency, Decimal] = {}
        self.commission_liability: dict[Currency, Decimal] = {}

    @staticmethod
    def add(bucket: dict[Currency, Decimal], currency: Currency, amount: Decimal) -> None:
        bucket[currency] = bucket.get(currency, ZERO) + amount

    def currencies(self) -> set[Currency]:
        used: set[Currency] = set()
        for bucket in (self.liquid_assets, self.receivables, self.liabilities, self.commission_liability):
            used.update(c for c, amount in bucket.items() if amount != 0)
        return used


def _ordered(bucket: dict[Currency, Decimal]) -> dict[Currency, Decimal]:
    return {c: bucket[c] for c in Currency if c in bucket}


def _total(bucket: dict[Currency, Decimal], rates: RateTable) -> Decimal:
    total = ZERO
    for currency in Currency:
        total += rates.convert(bucket.get(currency, ZERO), currency)
    return total


def _usable(value: Optional[Decimal]) -> bool:
    return value is not None and not value.is_nan() and not value.is_infinite()


def analyze(
    cash_balances: Iterable[CashboxBalance],
    bank_balances: Iterable[AccountBalance],
    entity_balances: Iterable[EntityBalance],
    pending_commissions: Iterable[CommissionTransfer],
    rates: RateTable,
    rented_balances: Iterable[AccountBalance] = (),
) -> NetWorthReport:
    """Build a net-worth report from one consistent snapshot of balances.

    Classification:
        - positive cashbox balances, and positive balances of active bank and
          rented accounts, are liquid assets
        - positive entity balances are liabilities (the business owes them)
        - negative entity balances are receivables, by magnitude
        - a transfer awaiting execution or payout approval contributes its
          principal less commission to commission liability and its
          commission to receivables

    The function is pure: identical inputs give an identical report.
    """
    buckets = _Buckets()
    anomalies: list[Anomaly] = []

    for cash in cash_balances:
        if not _usable(cash.balance):
            anomalies.append(Anomaly("cashbox", cash.currency.value, f"unusable balance {cash.balance!s}"))
            continue
        if cash.balance > 0:
            buckets.add(buckets.liquid_assets, cash.currency, cash.balance)

    for held in list(bank_balances) + list(rented_balances):
        account = held.account
        if not _usable(held.balance):
            anomalies.append(Anomaly("account", str(account.id), f"unusable balance {held.balance!s}"))
            continue
        if account.is_active and held.balance > 0:
            buckets.add(buckets.liquid_assets, account.currency, held.balance)

    for entity in entity_balances:
        for currency, balance in entity.balances.items():
            if not _usable(balance):
                anomalies.append(Anomaly("entity", str(entity.key), f"unusable {currency.value} balance {balance!s}"))
                continue
            if balance > 0:
                buckets.add(buckets.liabilities, currency, balance)
            elif balance < 0:
                buckets.add(buckets.receivables, currency, abs(balance))

    for transfer in pending_commissions:
        if not is_pending_liability(transfer):
            continue
        if not _usable(transfer.amount) or transfer.amount <= 0:
            anomalies.append(Anomaly("commission_transfer", str(transfer.id), f"unusable amount {transfer.amount!s}"))
            continue
        try:
            commission, principal = commission_split(transfer.amount, transfer.commission_percentage)
        except ValidationError as e:
            anomalies.append(Anomaly("commission_transfer", str(transfer.id), str(e)))
            continue
        buckets.add(buckets.commission_liability, transfer.currency, principal)
        buckets.add(buckets.receivables, transfer.currency, commission)

    for anomaly in anomalies:
        logger.warning("Skipped %s %s: %s", anomaly.source, anomaly.reference, anomaly.reason)

    totals = UsdTotals(
        total_liquid_assets_usd=_total(buckets.liquid_assets, rates),
        total_receivables_usd=_total(buckets.receivables, rates),
        total_liabilities_usd=_total(buckets.liabilities, rates),
        total_commission_liability_usd=_total(buckets.commission_liability, rates),
    )

    gross_assets = totals.total_liquid_assets_usd + totals.total_receivables_usd
    net_worth = gross_assets - totals.total_liabilities_usd - totals.total_commission_liability_usd
    liquid_net_worth = (
        totals.total_liquid_assets_usd
        - totals.total_liabilities_usd
        - totals.total_commission_liability_usd
    )

    missing = rates.missing_rates(buckets.currencies())
    if missing:
        logger.warning(
            "Net-worth totals exclude balances in %s: no exchange rate",
            ", ".join(c.value for c in missing),
        )

    return NetWorthReport(
        gross_assets=gross_assets,
        net_worth=net_worth,
        liquid_net_worth=liquid_net_worth,
        breakdown=NetWorthBreakdown(
            liquid_assets=_ordered(buckets.liquid_assets),
            receivables=_ordered(buckets.receivables),
            liabilities=_ordered(buckets.liabilities),
            commission_liability=_ordered(buckets.commission_liability),
            usd_totals=totals,
        ),
        reference_currency=rates.reference,
        rates=rates.as_dict(),
        missing_rates=missing,
        anomalies=tuple(anomalies),
    )


@dataclass(frozen=True)
class FinancialPulse:
    """Dashboard headline figures in the reference currency."""

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


def pulse(report: NetWorthReport) -> FinancialPulse:
    totals = report.breakdown.usd_totals
    total_liabilities = totals.total_liabilities_usd + totals.total_commission_liability_usd
    return FinancialPulse(
        total_assets=report.gross_assets,
        total_liabilities=total_liabilities,
        net_worth=report.gross_assets - total_liabilities,
    )
