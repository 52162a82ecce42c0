"""Account management commands."""

import click
from sarrafi.cli.options import currency_or_exit
from sarrafi.cli.resolution import resolve_account_or_exit, resolve_entity_or_exit
from sarrafi.domain.account import AccountService
from sarrafi.domain.entities import AccountKind
from sarrafi.domain.entity import EntityService


@click.group()
def account_group():
    """Manage cashbox, bank, rented and dedicated accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in AccountKind]),
    default=AccountKind.BANK.value,
    show_default=True,
    help="Account kind",
)
@click.option("--currency", default="USD", show_default=True, help="Account currency")
@click.option("--owner", help="Owning customer/partner (ID, code or name), for dedicated accounts")
@click.option("--bank", help="Bank name")
@click.pass_context
def create_account(ctx, name: str, kind: str, currency: str, owner: str | None, bank: str | None):
    """Create a new account.

    Examples:
        sarrafi account create "Main Cashbox USD" --kind cashbox --currency USD
        sarrafi account create "Melli 1234" --kind rented --currency IRT_BANK --bank Melli
        sarrafi account create "Ahmad Dedicated" --kind dedicated --currency IRT_BANK --owner C-100
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    account_currency = currency_or_exit(ctx, currency)
    owner_id = None
    if owner is not None:
        owner_id = resolve_entity_or_exit(ctx, EntityService(db), owner)

    try:
        account_id = service.create_account(
            name=name,
            kind=AccountKind(kind),
            currency=account_currency,
            owner_id=owner_id,
            bank_name=bank,
        )
        click.echo(f"Created {kind} account '{name}' (ID: {account_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@account_group.command("list")
@click.option("--kind", type=click.Choice([k.value for k in AccountKind]), help="Only list this kind")
@click.pass_context
def list_accounts(ctx, kind: str | None):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(kind=AccountKind(kind) if kind else None)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        bank = acc.bank_name or "-"
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:24s} | {acc.kind.value:9s} | "
            f"{acc.currency.value:8s} | {acc.status.value:8s} | Bank: {bank}"
        )


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account. Withdrawals from it are refused until reactivated.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated account {account_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@account_group.command("activate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def activate_account(ctx, account: str) -> None:
    """Reactivate an account.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.activate_account(account_id)
        click.echo(f"Activated account {account_id}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
