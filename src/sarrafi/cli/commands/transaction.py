"""Ledger transaction commands."""

import click
from sarrafi.cli.options import PERIODS, amount_or_exit, currency_or_exit, date_range_or_exit, timestamp_or_exit
from sarrafi.cli.resolution import resolve_account_or_exit, resolve_entity_or_exit
from sarrafi.domain.account import AccountService
from sarrafi.domain.entities import LinkedEntity, LinkedEntityType, Namespace
from sarrafi.domain.entity import EntityService
from sarrafi.domain.ledger import ZERO
from sarrafi.domain.transaction import TransactionService


@click.group()
def transaction_group():
    """Record and list ledger transactions."""
    pass


def _commission_link(transfer_id: int | None) -> LinkedEntity | None:
    if transfer_id is None:
        return None
    return LinkedEntity(type=LinkedEntityType.COMMISSION_TRANSFER, id=str(transfer_id))


@transaction_group.command("deposit")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--entity", help="Customer/partner the money is for (ID, code or name)")
@click.option("--guest", help="Walk-in counterparty name (rented accounts)")
@click.option("--receipt", help="Receipt serial")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Description")
@click.option("--bank", help="Paying bank")
@click.option("--card", help="Last digits of the paying card")
@click.option("--commission-transfer", type=int, help="Commission transfer this deposit belongs to")
@click.pass_context
def deposit(
    ctx,
    account: str,
    amount: str,
    entity: str | None,
    guest: str | None,
    receipt: str | None,
    date: str | None,
    description: str | None,
    bank: str | None,
    card: str | None,
    commission_transfer: int | None,
) -> None:
    """Record money coming into an account.

    Examples:
        sarrafi txn deposit "Main Cashbox USD" 1000
        sarrafi txn deposit "Melli 1234" 5,000,000 --entity C-100 --receipt 88123
        sarrafi txn deposit "Melli 1234" 2000000 --guest "Reza" --card 4411
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity) if entity else None
    txn_amount = amount_or_exit(ctx, amount)
    timestamp = timestamp_or_exit(ctx, date)

    try:
        txn_id = service.record_deposit(
            account_id=account_id,
            amount=txn_amount,
            owner_id=entity_id,
            guest_name=guest,
            receipt_serial=receipt,
            timestamp=timestamp,
            description=description,
            bank_name=bank,
            card_last_digits=card,
            linked_entity=_commission_link(commission_transfer),
            created_by=ctx.obj.get("user"),
        )
        click.echo(f"Recorded deposit {txn_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@transaction_group.command("withdraw")
@click.argument("account", metavar="ACCOUNT")
@click.argument("amount", metavar="AMOUNT")
@click.option("--commission", "commission_pct", default="0", help="Commission percentage charged")
@click.option("--entity", help="Customer/partner the money is paid for (ID, code or name)")
@click.option("--guest", help="Walk-in counterparty name (rented accounts)")
@click.option("--receipt", help="Receipt serial")
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--description", help="Description")
@click.option("--destination", help="Destination account or card number")
@click.option("--commission-transfer", type=int, help="Commission transfer this payout belongs to")
@click.pass_context
def withdraw(
    ctx,
    account: str,
    amount: str,
    commission_pct: str,
    entity: str | None,
    guest: str | None,
    receipt: str | None,
    date: str | None,
    description: str | None,
    destination: str | None,
    commission_transfer: int | None,
) -> None:
    """Record money leaving an account.

    The account balance drops by the amount plus commission.

    Examples:
        sarrafi txn withdraw "Melli 1234" 1000000 --entity C-100 --commission 1
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity) if entity else None
    txn_amount = amount_or_exit(ctx, amount)
    pct = amount_or_exit(ctx, commission_pct, label="commission percentage")
    timestamp = timestamp_or_exit(ctx, date)

    try:
        txn_id = service.record_withdrawal(
            account_id=account_id,
            amount=txn_amount,
            commission_percentage=pct,
            owner_id=entity_id,
            guest_name=guest,
            receipt_serial=receipt,
            timestamp=timestamp,
            description=description,
            destination_account=destination,
            linked_entity=_commission_link(commission_transfer),
            created_by=ctx.obj.get("user"),
        )
        click.echo(f"Recorded withdrawal {txn_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@transaction_group.command("credit")
@click.argument("entity", metavar="ENTITY")
@click.argument("amount", metavar="AMOUNT")
@click.argument("currency", metavar="CURRENCY")
@click.option("--receipt", help="Receipt serial")
@click.option("--date", help="Transaction date")
@click.option("--description", help="Description")
@click.pass_context
def credit(
    ctx,
    entity: str,
    amount: str,
    currency: str,
    receipt: str | None,
    date: str | None,
    description: str | None,
) -> None:
    """Credit a customer or partner: the business owes them AMOUNT more.

    Examples:
        sarrafi txn credit C-100 500 USD --description "Cash handed in"
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)
    txn_amount = amount_or_exit(ctx, amount)
    txn_currency = currency_or_exit(ctx, currency)
    timestamp = timestamp_or_exit(ctx, date)

    try:
        txn_id = service.record_credit(
            entity_id=entity_id,
            amount=txn_amount,
            currency=txn_currency,
            receipt_serial=receipt,
            timestamp=timestamp,
            description=description,
            created_by=ctx.obj.get("user"),
        )
        click.echo(f"Recorded credit {txn_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@transaction_group.command("debit")
@click.argument("entity", metavar="ENTITY")
@click.argument("amount", metavar="AMOUNT")
@click.argument("currency", metavar="CURRENCY")
@click.option("--commission", "commission_pct", default="0", help="Commission percentage charged")
@click.option("--receipt", help="Receipt serial")
@click.option("--date", help="Transaction date")
@click.option("--description", help="Description")
@click.pass_context
def debit(
    ctx,
    entity: str,
    amount: str,
    currency: str,
    commission_pct: str,
    receipt: str | None,
    date: str | None,
    description: str | None,
) -> None:
    """Debit a customer or partner, e.g. for a payout.

    Examples:
        sarrafi txn debit C-100 200 USD
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity)
    txn_amount = amount_or_exit(ctx, amount)
    txn_currency = currency_or_exit(ctx, currency)
    pct = amount_or_exit(ctx, commission_pct, label="commission percentage")
    timestamp = timestamp_or_exit(ctx, date)

    try:
        txn_id = service.record_debit(
            entity_id=entity_id,
            amount=txn_amount,
            currency=txn_currency,
            commission_percentage=pct,
            receipt_serial=receipt,
            timestamp=timestamp,
            description=description,
            created_by=ctx.obj.get("user"),
        )
        click.echo(f"Recorded debit {txn_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@transaction_group.command("list")
@click.option("--namespace", type=click.Choice([n.value for n in Namespace]), help="Ledger namespace")
@click.option("--account", help="Account name or ID")
@click.option("--entity", help="Customer/partner ID, code or name")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--period", type=click.Choice(PERIODS), help="Named period instead of explicit dates")
@click.pass_context
def list_transactions(
    ctx,
    namespace: str | None,
    account: str | None,
    entity: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
) -> None:
    """List transactions, oldest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None
    entity_id = resolve_entity_or_exit(ctx, EntityService(db), entity) if entity else None
    start, end = date_range_or_exit(ctx, start_date, end_date, period)

    transactions = service.list_transactions(
        namespace=Namespace(namespace) if namespace else None,
        account_id=account_id,
        entity_id=entity_id,
        start=start,
        end=end,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    for txn in transactions:
        commission = f" (+{txn.commission_amount:,.2f} commission)" if txn.commission_amount > ZERO else ""
        where = f"account {txn.account_id}" if txn.account_id is not None else "main ledger"
        who = f" | {txn.entity_key}" if txn.entity_key is not None else ""
        tag = " | opening balance" if txn.is_opening_balance else ""
        click.echo(
            f"ID: {txn.id:4d} | {txn.timestamp:%Y-%m-%d %H:%M} | {txn.namespace.value:9s} | "
            f"{txn.type.value:10s} | {txn.amount:>14,.2f} {txn.currency.value}{commission} | "
            f"{where}{who}{tag}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="txn")
