"""Exchange rate commands."""

import click
from sarrafi.cli.options import amount_or_exit, currency_or_exit
from sarrafi.domain.entities import REFERENCE_CURRENCY, Currency
from sarrafi.domain.rate import RateService


@click.group()
def rate_group():
    """Maintain exchange rates (units per one USD)."""
    pass


@rate_group.command("set")
@click.argument("currency", metavar="CURRENCY")
@click.argument("rate", metavar="RATE")
@click.pass_context
def set_rate(ctx, currency: str, rate: str) -> None:
    """Set how many units of CURRENCY buy one USD.

    Examples:
        sarrafi rate set EUR 0.92
        sarrafi rate set IRT_BANK 585000
    """
    db = ctx.obj["db"]
    service = RateService(db)
    rate_currency = currency_or_exit(ctx, currency)
    value = amount_or_exit(ctx, rate, label="rate")

    try:
        service.set_rate(rate_currency, value)
        click.echo(f"Set {rate_currency.value} rate to {value} per {REFERENCE_CURRENCY.value}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@rate_group.command("list")
@click.pass_context
def list_rates(ctx) -> None:
    """List exchange rates."""
    db = ctx.obj["db"]
    service = RateService(db)

    rates = service.list_rates()
    click.echo(f"\nExchange rates (per 1 {REFERENCE_CURRENCY.value}):")
    click.echo("-" * 50)
    click.echo(f"{REFERENCE_CURRENCY.value:10s} 1")
    for rate in rates:
        updated = f"{rate.updated_at:%Y-%m-%d %H:%M}" if rate.updated_at else "-"
        click.echo(f"{rate.currency.value:10s} {rate.rate_to_reference:<16} updated {updated}")

    missing = service.rate_table().missing_rates(c for c in Currency)
    if missing:
        click.echo(f"\nNo usable rate for: {', '.join(c.value for c in missing)}")


def register_commands(cli):
    """Register rate commands with main CLI."""
    cli.add_command(rate_group, name="rate")
