"""Utility functions for fincontrol."""

from fincontrol.utils.date_parser import format_date, parse_date
from fincontrol.utils.amount_parser import format_amount, parse_amount

__all__ = ["parse_date", "format_date", "parse_amount", "format_amount"]
