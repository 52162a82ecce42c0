"""Rendering of report tables for the terminal."""

from datetime import datetime
from decimal import Decimal

import click

from sarrafi.domain.entities import ReportResult
from sarrafi.domain.reports import format_amount, to_csv


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Decimal):
        return format_amount(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)


def echo_report(result: ReportResult, as_csv: bool = False) -> None:
    """Print a report as an aligned table, or as CSV."""
    if as_csv:
        click.echo(to_csv(result), nl=False)
        return

    click.echo(f"\n{result.title}")
    click.echo("=" * max(len(result.title), 20))
    for item in result.summary:
        suffix = f" {item.currency}" if item.currency else ""
        click.echo(f"{item.label + ':':24s} {item.value}{suffix}")

    if not result.rows:
        click.echo("\nNo entries.")
        return

    cells = [[_cell(v) for v in row] for row in result.rows]
    widths = [
        max(len(header), *(len(row[i]) for row in cells))
        for i, header in enumerate(result.headers)
    ]
    click.echo("")
    click.echo(" | ".join(h.ljust(w) for h, w in zip(result.headers, widths)))
    click.echo("-+-".join("-" * w for w in widths))
    for row in cells:
        click.echo(" | ".join(c.ljust(w) for c, w in zip(row, widths)))
