"""Opening balance commands."""

import click
from sarrafi.cli.options import amount_or_exit, currency_or_exit
from sarrafi.cli.resolution import resolve_entity_or_exit
from sarrafi.domain.entity import EntityService
from sarrafi.domain.transaction import TransactionService


@click.group()
def opening_balance_group():
    """Set or remove opening balances carried over from earlier books."""
    pass


@opening_balance_group.command(
    "set", context_settings={"ignore_unknown_options": True}
)
@click.argument("entity", metavar="ENTITY")
@click.argument("currency", metavar="CURRENCY")
@click.argument("amount", metavar="AMOUNT")
@click.pass_context
def set_opening_balance(ctx, entity: str, currency: str, amount: str) -> None:
    """Set the opening balance of ENTITY in CURRENCY.

    A positive AMOUNT means the business owes the entity; a negative one
    means the entity owes the business. 0 removes the opening balance.

    Examples:
        sarrafi opening-balance set C-100 USD 1500
        sarrafi opening-balance set C-100 EUR -250
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)
    balance_currency = currency_or_exit(ctx, currency)
    balance = amount_or_exit(ctx, amount)

    try:
        txn_id = service.set_opening_balance(
            entity_id, balance_currency, balance, created_by=ctx.obj.get("user")
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if txn_id is None:
        click.echo(f"Cleared {balance_currency.value} opening balance")
    else:
        click.echo(f"Set {balance_currency.value} opening balance to {balance:,} (transaction {txn_id})")


@opening_balance_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_opening_balance(ctx, transaction_id: int) -> None:
    """Delete an opening-balance entry by transaction ID."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        service.delete_opening_balance(transaction_id)
        click.echo(f"Deleted opening balance {transaction_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register opening balance commands with main CLI."""
    cli.add_command(opening_balance_group, name="opening-balance")
