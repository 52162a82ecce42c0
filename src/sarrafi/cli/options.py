"""Shared option parsing for CLI commands."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

import click

from sarrafi.domain.entities import Currency
from sarrafi.utils.amount_parser import parse_amount, parse_currency
from sarrafi.utils.date_parser import get_date_range, parse_date, to_datetime_bounds

PERIODS = ("this-week", "this-month", "this-year", "last-week", "last-month", "last-year")


def amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def currency_or_exit(ctx: click.Context, value: str) -> Currency:
    try:
        return parse_currency(value)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def timestamp_or_exit(ctx: click.Context, value: Optional[str]) -> Optional[datetime]:
    """Parse a --date option into the start of that day, or None."""
    if value is None:
        return None
    try:
        return datetime.combine(parse_date(value), time.min)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)


def date_range_or_exit(
    ctx: click.Context,
    start_date: Optional[str],
    end_date: Optional[str],
    period: Optional[str] = None,
) -> tuple[Optional[datetime], Optional[datetime]]:
    """Parse --period or --start-date/--end-date into a [start, end) timestamp range."""
    if period is not None:
        if start_date or end_date:
            click.echo("Error: --period cannot be combined with --start-date or --end-date.", err=True)
            ctx.exit(1)
        return to_datetime_bounds(*get_date_range(period))

    bounds: list[Optional[date]] = []
    for label, value in (("start", start_date), ("end", end_date)):
        if value is None:
            bounds.append(None)
            continue
        try:
            bounds.append(parse_date(value))
        except ValueError as e:
            click.echo(f"Error: Invalid {label} date: {e}", err=True)
            ctx.exit(1)
    return to_datetime_bounds(bounds[0], bounds[1])
