"""Utility functions for sarrafi."""

from sarrafi.utils.date_parser import parse_date
from sarrafi.utils.amount_parser import parse_amount, parse_currency

__all__ = ["parse_date", "parse_amount", "parse_currency"]
