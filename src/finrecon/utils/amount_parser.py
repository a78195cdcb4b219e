"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a signed amount string from a bank export into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45" or "-$123.45"
    - "123.45-" (trailing minus)
    - "1,234.56"
    - "(123.45)" (negative in parentheses)
    - "123.45 DR" / "123.45 CR" (debit negative, credit positive)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip().upper()
    is_negative = False

    # Debit/credit suffix
    if text.endswith("DR"):
        is_negative = True
        text = text[:-2].strip()
    elif text.endswith("CR"):
        text = text[:-2].strip()

    # Parentheses notation (negative)
    if text.startswith("(") and text.endswith(")"):
        is_negative = not is_negative
        text = text[1:-1].strip()

    # Trailing minus
    if text.endswith("-"):
        is_negative = not is_negative
        text = text[:-1].strip()

    # Remove currency symbols, thousands separators and whitespace
    text = re.sub(r"[$€£¥,\s]", "", text)

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'") from None
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str.strip()}'")
    return -amount if is_negative else amount
