"""Tests for CLI date filter helper."""

from datetime import datetime

import click
import pytest

from sarrafi.cli.options import date_range_or_exit
from sarrafi.utils.date_parser import get_date_range, to_datetime_bounds


def _ctx() -> click.Context:
    return click.Context(click.Command("test"))


def test_date_range_rejects_period_with_start_end(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        date_range_or_exit(_ctx(), start_date="2024-01-01", end_date=None, period="this-month")

    assert excinfo.value.exit_code == 1
    err = capsys.readouterr().err
    assert "cannot be combined" in err


def test_date_range_returns_period_range():
    expected = to_datetime_bounds(*get_date_range("last-month"))

    assert date_range_or_exit(_ctx(), start_date=None, end_date=None, period="last-month") == expected


def test_date_range_parses_explicit_dates():
    """The end date is inclusive, so the range stops at the next midnight."""
    start, end = date_range_or_exit(_ctx(), start_date="2024-03-01", end_date="2024-03-31")

    assert start == datetime(2024, 3, 1)
    assert end == datetime(2024, 4, 1)


def test_date_range_open_ended():
    assert date_range_or_exit(_ctx(), start_date=None, end_date=None) == (None, None)


def test_date_range_invalid_end_date(capsys):
    with pytest.raises(click.exceptions.Exit) as excinfo:
        date_range_or_exit(_ctx(), start_date=None, end_date="not-a-date")

    assert excinfo.value.exit_code == 1
    assert "Invalid end date" in capsys.readouterr().err
