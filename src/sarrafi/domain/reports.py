"""Report formatter: turn analysis results into titled tables.

Rows keep raw values (Decimal, datetime) so exports stay exact; only the
summary items are pre-formatted for display.
"""

import csv
import io
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from sarrafi.domain.entities import (
    Account,
    Currency,
    LedgerTransaction,
    NetWorthReport,
    ReportResult,
    StatementLine,
    SummaryItem,
    TransactionType,
)
from sarrafi.domain.rates import RateTable

ZERO = Decimal("0")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def format_amount(value: Decimal, places: int = 2) -> str:
    """Format an amount with thousands separators, e.g. ``1,234.56``."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:,.{places}f}"


def format_compact(value: Decimal) -> str:
    """Format with separators and at most two decimals, trailing zeros dropped.

    ``Decimal("1000")`` gives ``1,000`` and ``Decimal("12.50")`` gives ``12.5``.
    """
    text = format_amount(value)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_net_worth(report: NetWorthReport) -> ReportResult:
    """Net-worth report: headline figures plus one row per bucket and currency."""
    ref = report.reference_currency.value
    totals = report.breakdown.usd_totals
    rates = RateTable(report.rates, reference=report.reference_currency)
    summary = [
        SummaryItem("Gross Assets", format_amount(report.gross_assets), ref),
        SummaryItem("Net Worth", format_amount(report.net_worth), ref),
        SummaryItem("Liquid Net Worth", format_amount(report.liquid_net_worth), ref),
        SummaryItem("Liquid Assets", format_amount(totals.total_liquid_assets_usd), ref),
        SummaryItem("Receivables", format_amount(totals.total_receivables_usd), ref),
        SummaryItem("Liabilities", format_amount(totals.total_liabilities_usd), ref),
        SummaryItem("Commission Liability", format_amount(totals.total_commission_liability_usd), ref),
    ]
    if report.missing_rates:
        summary.append(
            SummaryItem("Missing Rates", ", ".join(c.value for c in report.missing_rates), "")
        )

    buckets = (
        ("Liquid Assets", report.breakdown.liquid_assets),
        ("Receivables", report.breakdown.receivables),
        ("Liabilities", report.breakdown.liabilities),
        ("Commission Liability", report.breakdown.commission_liability),
    )
    rows = []
    for label, bucket in buckets:
        for currency in Currency:
            if currency not in bucket:
                continue
            amount = bucket[currency]
            rows.append(
                (label, currency.value, amount, rates.convert(amount, currency))
            )

    return ReportResult(
        title="Net Worth",
        summary=tuple(summary),
        headers=("Category", "Currency", "Amount", f"Amount ({ref})"),
        rows=tuple(rows),
    )


def format_entity_statement(
    name: str,
    lines: Sequence[StatementLine],
    account_names: Optional[dict[int, str]] = None,
) -> ReportResult:
    """Statement of one entity: every entry with its running balance.

    Summary items carry the closing balance per currency.
    """
    account_names = account_names or {}
    closing: dict[Currency, Decimal] = {}
    rows = []
    for line in lines:
        txn = line.transaction
        closing[txn.currency] = line.balance_after
        account = account_names.get(txn.account_id, "") if txn.account_id is not None else ""
        rows.append(
            (
                txn.timestamp.strftime(TIMESTAMP_FORMAT),
                txn.type.value,
                account,
                txn.currency.value,
                txn.amount,
                line.change,
                line.balance_after,
                txn.description or "",
            )
        )

    summary = tuple(
        SummaryItem("Balance", format_amount(closing[c]), c.value) for c in Currency if c in closing
    )
    return ReportResult(
        title=f"Statement: {name}",
        summary=summary,
        headers=("Date", "Type", "Account", "Currency", "Amount", "Change", "Balance", "Description"),
        rows=tuple(rows),
    )


def format_account_statement(
    account: Account,
    transactions: Iterable[LedgerTransaction],
) -> ReportResult:
    """Rented-account statement with receipt and payout totals.

    Receipts are deposit amounts; payouts are withdrawal totals including
    commission. Rows are newest first.
    """
    entries = sorted(transactions, key=lambda t: (t.timestamp, t.id), reverse=True)
    receipts = ZERO
    payouts = ZERO
    rows = []
    for txn in entries:
        if txn.type == TransactionType.DEPOSIT:
            receipts += txn.amount
        elif txn.type == TransactionType.WITHDRAWAL:
            payouts += txn.effective_total
        rows.append(
            (
                txn.timestamp.strftime(TIMESTAMP_FORMAT),
                txn.type.value,
                account.name,
                txn.amount,
                txn.commission_amount,
                txn.effective_total,
            )
        )

    currency = account.currency.value
    return ReportResult(
        title=f"Account Statement: {account.name}",
        summary=(
            SummaryItem("Total Receipts", format_amount(receipts), currency),
            SummaryItem("Total Payouts", format_amount(payouts), currency),
        ),
        headers=("Date", "Type", "Account", "Amount", "Commission", "Total"),
        rows=tuple(rows),
    )


def to_csv(result: ReportResult) -> str:
    """Render a report's table as CSV text (header line plus rows)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(result.headers)
    for row in result.rows:
        writer.writerow(["" if value is None else value for value in row])
    return buffer.getvalue()
