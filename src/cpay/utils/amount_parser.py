"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

CENT = Decimal("0.01")
MAX_MINOR_UNITS = 10**13


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "500"
    - "500.00"
    - "₱500.00"
    - "PHP 1,234.56"

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

    # Remove currency symbols and a leading ISO code
    amount_str = re.sub(r"^[A-Za-z]{3}\s*", "", amount_str)
    amount_str = re.sub(r"[₱$€£¥]", "", amount_str)

    # Remove commas
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}'") from e
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return amount


def quantize_amount(amount: Decimal | int | str) -> Decimal:
    """Return a positive amount with exactly two decimal places.

    Raises:
        ValueError: If the amount is not positive, has more than two decimal
            places, or is too large to store
    """
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Invalid amount '{amount}'") from e
    if not value.is_finite() or value <= 0:
        raise ValueError("Amount must be a positive number.")
    quantized = value.quantize(CENT)
    if quantized != value:
        raise ValueError("Amount must have at most two decimal places.")
    if to_minor_units(quantized) >= MAX_MINOR_UNITS:
        raise ValueError("Amount is too large.")
    return quantized


def to_minor_units(amount: Decimal) -> int:
    """Convert a two-place Decimal to integer centavos."""
    return int((amount * 100).to_integral_value())


def from_minor_units(minor: int) -> Decimal:
    """Convert integer centavos to a two-place Decimal."""
    return (Decimal(minor) / 100).quantize(CENT)
