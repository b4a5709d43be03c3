"""Amount parsing and formatting utilities."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENTS = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles both separators conventions:
    - "1234.56", "1,234.56"
    - "1234,56", "1.234,56"
    - currency prefixes ("R$", "$", "€") and a leading minus or
      parentheses for negatives

    The last "," or "." followed by one or two digits is taken as the
    decimal separator; every other separator is a thousands separator.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()

    is_negative = False
    if text.startswith("(") and text.endswith(")"):
        is_negative = True
        text = text[1:-1]

    text = re.sub(r"R\$|[$€£¥\s]", "", text)
    if text.startswith("-"):
        is_negative = not is_negative
        text = text[1:]

    match = re.search(r"[.,](\d{1,2})$", text)
    if match:
        integer_part = re.sub(r"[.,]", "", text[: match.start()])
        text = f"{integer_part}.{match.group(1)}"
    else:
        text = re.sub(r"[.,]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def parse_value(amount_str: str) -> Decimal:
    """Parse a non-negative transaction value.

    Raises:
        ValueError: If the string cannot be parsed or is negative
    """
    amount = parse_amount(amount_str)
    if amount < 0:
        raise ValueError(f"Value must be non-negative, got '{amount_str}'")
    return amount


def format_amount(amount: Decimal) -> str:
    """Format an amount as "1.234,56" (comma decimal, dot thousands)."""
    quantized = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    formatted = f"{abs(quantized):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"-{formatted}" if quantized < 0 else formatted
