"""Conversion commands: rented-to-main, internal exchange and suspense allocation."""

import click
from sarrafi.cli.options import amount_or_exit, currency_or_exit
from sarrafi.cli.resolution import resolve_account_or_exit, resolve_entity_or_exit
from sarrafi.domain.account import AccountService
from sarrafi.domain.entity import EntityService
from sarrafi.domain.transaction import TransactionService


@click.command("convert-rented")
@click.argument("account", metavar="RENTED_ACCOUNT")
@click.argument("entity", metavar="ENTITY")
@click.argument("amount", metavar="AMOUNT")
@click.argument("currency", metavar="TARGET_CURRENCY")
@click.option("--rate", required=True, help="IRT_BANK per one unit of the target currency")
@click.pass_context
def convert_rented(ctx, account: str, entity: str, amount: str, currency: str, rate: str) -> None:
    """Move AMOUNT IRT_BANK of ENTITY from a rented account into its main ledger.

    Examples:
        sarrafi convert-rented "Melli 1234" C-100 58500000 USD --rate 585000
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)
    irt_amount = amount_or_exit(ctx, amount)
    target = currency_or_exit(ctx, currency)
    irt_rate = amount_or_exit(ctx, rate, label="rate")

    try:
        withdrawal_id, credit_id = TransactionService(db).convert_rented_to_main(
            account_id,
            entity_id,
            irt_amount,
            target,
            irt_rate,
            created_by=ctx.obj.get("user"),
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(
        f"Converted {irt_amount:,} IRT_BANK to {irt_amount / irt_rate:,.2f} {target.value} "
        f"(withdrawal {withdrawal_id}, credit {credit_id})"
    )


@click.command("exchange")
@click.argument("entity", metavar="ENTITY")
@click.argument("amount", metavar="AMOUNT")
@click.argument("from_currency", metavar="FROM")
@click.argument("to_currency", metavar="TO")
@click.option("--rate", required=True, help="Exchange rate applied to AMOUNT")
@click.option("--divide", is_flag=True, help="Divide AMOUNT by the rate instead of multiplying")
@click.pass_context
def exchange(ctx, entity: str, amount: str, from_currency: str, to_currency: str, rate: str, divide: bool) -> None:
    """Exchange AMOUNT of ENTITY's main balance from one currency into another.

    Examples:
        sarrafi exchange C-100 100 USD AFN --rate 70
        sarrafi exchange C-100 7000 AFN USD --rate 70 --divide
    """
    db = ctx.obj["db"]
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)
    from_amount = amount_or_exit(ctx, amount)
    source = currency_or_exit(ctx, from_currency)
    target = currency_or_exit(ctx, to_currency)
    exchange_rate = amount_or_exit(ctx, rate, label="rate")

    service = TransactionService(db)
    try:
        debit_id, credit_id = service.internal_exchange(
            entity_id,
            from_amount,
            source,
            target,
            exchange_rate,
            divide=divide,
            created_by=ctx.obj.get("user"),
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    credit = service.get_transaction(credit_id)
    click.echo(
        f"Exchanged {from_amount:,.2f} {source.value} to {credit.amount:,.2f} {target.value} "
        f"(debit {debit_id}, credit {credit_id})"
    )


@click.command("allocate-suspense")
@click.argument("transaction_id", type=int)
@click.argument("entity", metavar="ENTITY")
@click.pass_context
def allocate_suspense(ctx, transaction_id: int, entity: str) -> None:
    """Assign the SUSPENSE deposit TRANSACTION_ID on a rented account to ENTITY.

    Examples:
        sarrafi allocate-suspense 42 C-100
    """
    db = ctx.obj["db"]
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)

    try:
        withdrawal_id, deposit_id = TransactionService(db).allocate_suspense(
            transaction_id, entity_id, created_by=ctx.obj.get("user")
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(
        f"Allocated suspense deposit {transaction_id} (withdrawal {withdrawal_id}, deposit {deposit_id})"
    )


def register_commands(cli):
    """Register conversion commands with main CLI."""
    cli.add_command(convert_rented)
    cli.add_command(exchange)
    cli.add_command(allocate_suspense)
