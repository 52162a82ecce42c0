"""Reporting commands."""

import click
from sarrafi.cli.options import PERIODS, date_range_or_exit
from sarrafi.cli.render import echo_report
from sarrafi.cli.resolution import resolve_account_or_exit
from sarrafi.domain.account import AccountService, namespace_for
from sarrafi.domain.reports import format_account_statement, format_net_worth
from sarrafi.domain.ledger_service import LedgerService
from sarrafi.domain.net_worth import pulse
from sarrafi.domain.transaction import TransactionService


@click.group()
def report_group():
    """Generate reports."""
    pass


@report_group.command("net-worth")
@click.option("--csv", "as_csv", is_flag=True, help="Print the breakdown as CSV")
@click.pass_context
def net_worth(ctx, as_csv: bool) -> None:
    """Net worth of the business in USD.

    Net worth counts receivables as assets; liquid net worth does not.
    Balances in currencies without a rate are left out and listed.
    """
    service = LedgerService(ctx.obj["db"])
    try:
        report = service.net_worth()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    echo_report(format_net_worth(report), as_csv=as_csv)
    if as_csv:
        return

    headline = pulse(report)
    click.echo(
        f"\nPulse: assets {headline.total_assets:,.2f} | "
        f"liabilities {headline.total_liabilities:,.2f} | "
        f"net {headline.net_worth:,.2f} {report.reference_currency.value}"
    )
    if report.anomalies:
        click.echo(f"\nWarning: {len(report.anomalies)} unusable value(s) were left out:", err=True)
        for anomaly in report.anomalies:
            click.echo(f"  {anomaly.source} {anomaly.reference}: {anomaly.reason}", err=True)


@report_group.command("account-statement")
@click.argument("account", metavar="ACCOUNT")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.option("--csv", "as_csv", is_flag=True, help="Print as CSV")
@click.pass_context
def account_statement(
    ctx,
    account: str,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
    as_csv: bool,
) -> None:
    """Statement of one account with receipt and payout totals.

    ACCOUNT can be an account name or ID.

    Examples:
        sarrafi report account-statement "Melli 1234" --start-date "this month"
        sarrafi report account-statement "Melli 1234" --period last-month
    """
    db = ctx.obj["db"]
    account_service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, account_service, account)
    start, end = date_range_or_exit(ctx, start_date, end_date, period)
    account_obj = account_service.require_account(account_id)

    transactions = TransactionService(db).list_transactions(
        namespace=namespace_for(account_obj),
        account_id=account_id,
        start=start,
        end=end,
    )
    echo_report(format_account_statement(account_obj, transactions), as_csv=as_csv)


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
