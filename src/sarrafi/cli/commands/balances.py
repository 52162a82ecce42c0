"""Balance and statement commands."""

from decimal import Decimal

import click
from sarrafi.cli.render import echo_report
from sarrafi.cli.resolution import resolve_entity_or_exit
from sarrafi.domain.aggregator import unify
from sarrafi.domain.entities import AccountKind, Currency, Namespace
from sarrafi.domain.entity import EntityService
from sarrafi.domain.ledger_service import LedgerService
from sarrafi.domain.reports import format_compact, format_entity_statement


def _balance_text(balances: dict[Currency, Decimal]) -> str:
    parts = [f"{format_compact(balances[c])} {c.value}" for c in Currency if balances.get(c)]
    return " | ".join(parts) if parts else "0"


@click.command("balances")
@click.option(
    "--namespace",
    type=click.Choice([n.value for n in Namespace]),
    default=Namespace.MAIN.value,
    show_default=True,
    help="Ledger to show",
)
@click.option("--unified", is_flag=True, help="Main ledger: fold rented balances into IRT_BANK")
@click.pass_context
def show_balances(ctx, namespace: str, unified: bool) -> None:
    """Show balances of one ledger.

    Positive entity balances are owed by the business; negative ones are
    owed to it.
    """
    service = LedgerService(ctx.obj["db"])
    try:
        inputs = service.load_inputs()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    selected = Namespace(namespace)
    if selected == Namespace.MAIN:
        rented = service.aggregate_namespace(Namespace.RENTED, inputs) if unified else None
        click.echo("\nCustomer and partner balances:")
        click.echo("-" * 80)
        for balance in service.entity_balances(inputs):
            shown = unify(balance, rented).combined() if unified else balance.balances
            click.echo(f"{str(balance.key):14s} | {balance.name:24s} | {_balance_text(shown)}")
        return

    if selected == Namespace.TREASURY:
        click.echo("\nCashbox:")
        click.echo("-" * 60)
        for cash in service.cashbox_balances(inputs):
            click.echo(f"{cash.currency.value:10s} {cash.balance:>18,.2f}")
        click.echo("\nBank accounts:")
        click.echo("-" * 60)
        for held in service.account_balances(AccountKind.BANK, inputs):
            acc = held.account
            click.echo(f"ID: {acc.id:3d} | {acc.name:24s} | {held.balance:>18,.2f} {acc.currency.value} | {acc.status.value}")
        return

    result = service.aggregate_namespace(selected, inputs)
    kind = AccountKind.RENTED if selected == Namespace.RENTED else AccountKind.DEDICATED
    click.echo(f"\n{kind.value.capitalize()} accounts:")
    click.echo("-" * 60)
    for held in service.account_balances(kind, inputs):
        acc = held.account
        click.echo(f"ID: {acc.id:3d} | {acc.name:24s} | {held.balance:>18,.2f} {acc.currency.value} | {acc.status.value}")

    click.echo(f"\n{kind.value.capitalize()} ledger by counterparty:")
    click.echo("-" * 60)
    for summary in sorted(result.entity_summaries, key=lambda s: s.name):
        last = f"{summary.last_activity:%Y-%m-%d}" if summary.last_activity else "-"
        click.echo(f"{summary.name:24s} | {summary.balance:>18,.2f} | last activity {last}")
    if result.excluded:
        click.echo(
            f"\nWarning: {len(result.excluded)} transaction(s) reference unknown accounts "
            "or counterparties and were left out.",
            err=True,
        )


@click.command("statement")
@click.argument("entity", metavar="ENTITY")
@click.option("--csv", "as_csv", is_flag=True, help="Print as CSV")
@click.pass_context
def show_statement(ctx, entity: str, as_csv: bool) -> None:
    """Main-ledger statement of a customer or partner with running balances.

    ENTITY can be an ID, customer code or name.
    """
    db = ctx.obj["db"]
    entity_service = EntityService(db)
    entity_id = resolve_entity_or_exit(ctx, entity_service, entity)
    service = LedgerService(db)

    try:
        lines = service.entity_statement(entity_id)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    name = entity_service.require_entity(entity_id).name
    echo_report(format_entity_statement(name, lines), as_csv=as_csv)


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(show_balances)
    cli.add_command(show_statement)
