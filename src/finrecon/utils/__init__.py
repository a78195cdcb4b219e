"""Utility functions for finrecon."""

from finrecon.utils.date_parser import parse_date, get_window
from finrecon.utils.amount_parser import parse_amount

__all__ = ["parse_date", "get_window", "parse_amount"]
