"""Commission transfer commands."""

import click
from sarrafi.cli.options import amount_or_exit, currency_or_exit
from sarrafi.cli.resolution import resolve_account_or_exit, resolve_entity_or_exit
from sarrafi.domain.account import AccountService
from sarrafi.domain.commission_transfer import CommissionTransferService
from sarrafi.domain.entities import CommissionTransfer, CommissionTransferStatus
from sarrafi.domain.entity import EntityService


@click.group()
def commission_group():
    """Run commission transfers through their approval workflow."""
    pass


def _describe(transfer: CommissionTransfer) -> str:
    line = (
        f"ID: {transfer.id:3d} | {transfer.created_at:%Y-%m-%d} | "
        f"{transfer.amount:>14,.2f} {transfer.currency.value:8s} | "
        f"{transfer.commission_percentage}% | {transfer.status.value}"
    )
    if transfer.final_amount_paid is not None:
        line += f" | paid {transfer.final_amount_paid:,.2f}"
    return line


@commission_group.command("log")
@click.argument("amount", metavar="AMOUNT")
@click.argument("currency", metavar="CURRENCY")
@click.option("--commission", "commission_pct", required=True, help="Commission percentage kept")
@click.option("--initiator", help="Customer/partner sending the money (ID, code or name)")
@click.option("--source-account", help="Account number the money comes from")
@click.option("--received-into", help="Our account receiving the money (name or ID)")
@click.option("--receipt", help="Deposit receipt serial")
@click.pass_context
def log_transfer(
    ctx,
    amount: str,
    currency: str,
    commission_pct: str,
    initiator: str | None,
    source_account: str | None,
    received_into: str | None,
    receipt: str | None,
) -> None:
    """Log an incoming commission transfer.

    Examples:
        sarrafi commission log 100000000 IRT_BANK --commission 2 --initiator C-100
    """
    db = ctx.obj["db"]
    service = CommissionTransferService(db)
    transfer_amount = amount_or_exit(ctx, amount)
    transfer_currency = currency_or_exit(ctx, currency)
    pct = amount_or_exit(ctx, commission_pct, label="commission percentage")
    initiator_id = resolve_entity_or_exit(ctx, EntityService(db), initiator) if initiator else None
    account_id = resolve_account_or_exit(ctx, AccountService(db), received_into) if received_into else None

    try:
        transfer_id = service.log_transfer(
            initiator_id=initiator_id,
            amount=transfer_amount,
            currency=transfer_currency,
            commission_percentage=pct,
            source_account_number=source_account,
            received_into_account_id=account_id,
            receipt_serial=receipt,
        )
        click.echo(f"Logged commission transfer {transfer_id} (awaiting deposit approval)")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@commission_group.command("approve-deposit")
@click.argument("transfer_id", type=int)
@click.pass_context
def approve_deposit(ctx, transfer_id: int) -> None:
    """Confirm the money of a transfer arrived."""
    service = CommissionTransferService(ctx.obj["db"])
    try:
        transfer = service.approve_deposit(transfer_id)
        click.echo(f"Commission transfer {transfer.id} is now {transfer.status.value}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@commission_group.command("execute")
@click.argument("transfer_id", type=int)
@click.option("--paid-from", required=True, help="Our account paying out (name or ID)")
@click.option("--destination", required=True, help="Destination account number")
@click.option("--receipt", help="Payout receipt serial")
@click.pass_context
def execute(ctx, transfer_id: int, paid_from: str, destination: str, receipt: str | None) -> None:
    """Issue the payout of a transfer."""
    db = ctx.obj["db"]
    service = CommissionTransferService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), paid_from)

    try:
        transfer = service.execute(
            transfer_id,
            paid_from_account_id=account_id,
            destination_account_number=destination,
            execution_receipt_serial=receipt,
        )
        click.echo(
            f"Commission transfer {transfer.id} is now {transfer.status.value}: "
            f"pay {transfer.final_amount_paid:,.2f} {transfer.currency.value}, "
            f"commission {transfer.commission_amount:,.2f}"
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@commission_group.command("approve-withdrawal")
@click.argument("transfer_id", type=int)
@click.pass_context
def approve_withdrawal(ctx, transfer_id: int) -> None:
    """Confirm the payout of a transfer left; completes it."""
    service = CommissionTransferService(ctx.obj["db"])
    try:
        transfer = service.approve_withdrawal(transfer_id)
        click.echo(f"Commission transfer {transfer.id} is now {transfer.status.value}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@commission_group.command("reject")
@click.argument("transfer_id", type=int)
@click.pass_context
def reject(ctx, transfer_id: int) -> None:
    """Reject a transfer that has not completed."""
    service = CommissionTransferService(ctx.obj["db"])
    try:
        transfer = service.reject(transfer_id)
        click.echo(f"Commission transfer {transfer.id} is now {transfer.status.value}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@commission_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in CommissionTransferStatus]),
    help="Only list transfers in this status",
)
@click.pass_context
def list_transfers(ctx, status: str | None) -> None:
    """List commission transfers, newest first."""
    service = CommissionTransferService(ctx.obj["db"])
    transfers = service.list_transfers(
        status=CommissionTransferStatus(status) if status else None
    )
    if not transfers:
        click.echo("No commission transfers found.")
        return

    click.echo("\nCommission transfers:")
    click.echo("-" * 90)
    for transfer in transfers:
        click.echo(_describe(transfer))


def register_commands(cli):
    """Register commission transfer commands with main CLI."""
    cli.add_command(commission_group, name="commission")
