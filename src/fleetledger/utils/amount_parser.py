"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse a movement amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "1,234.56"
    - "MXN 250"

    Movement direction comes from the credit/debit type, so signs and
    parenthesised negatives are rejected rather than flipped.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    if amount_str.startswith("-") or (amount_str.startswith("(") and amount_str.endswith(")")):
        raise ValueError(
            f"Amount '{amount_str}' must be positive; use the movement type for direction"
        )

    # Remove currency symbols and codes
    amount_str = re.sub(r"[$€£¥]|\b[A-Z]{3}\b", "", amount_str)

    # Remove thousands separators
    amount_str = amount_str.replace(",", "").strip()

    try:
        return Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")
