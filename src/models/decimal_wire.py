"""Decimal wire serialization and price parsing"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENTS = Decimal("0.01")
# Largest value the Numeric(12, 2) cost column holds
MAX_PRICE = Decimal("9999999999.99")


def decimal_to_wire(d: Optional[Decimal]) -> Optional[str]:
    """
    Convert Decimal to wire-safe string representation.

    Args:
        d: Decimal value or None

    Returns:
        String representation without scientific notation, or None

    Examples:
        >>> decimal_to_wire(Decimal("123.45"))
        "123.45"
        >>> decimal_to_wire(Decimal("50.00"))
        "50"
        >>> decimal_to_wire(None)
        None
    """
    if d is None:
        return None

    s = format(d, 'f')
    # Trailing zeros carry no meaning on the wire
    if '.' in s:
        s = s.rstrip('0').rstrip('.')
    if s in ('', '-0'):
        return '0'
    return s


def wire_to_decimal(x: Any) -> Optional[Decimal]:
    """
    Parse wire value to Decimal safely.

    Args:
        x: Wire value (None, str, int, float, or Decimal)

    Returns:
        Finite Decimal value, or None when the value is absent or not numeric
    """
    if x is None or isinstance(x, bool):
        return None

    if isinstance(x, Decimal):
        return x if x.is_finite() else None

    text = str(x).strip()
    if text == "":
        return None

    try:
        # Always convert via string to avoid float precision issues
        value = Decimal(text)
    except (InvalidOperation, ValueError, TypeError):
        logger.debug(f"Value is not numeric: {x!r}")
        return None

    if not value.is_finite():
        return None
    return value


def parse_price(x: Any) -> Decimal:
    """
    Parse a typed or stored price.

    Blank and non-numeric values count as zero; negative values are
    clamped to zero. Values above MAX_PRICE also count as zero. Never raises.
    """
    value = wire_to_decimal(x)
    if value is None or value < ZERO:
        return ZERO
    if value > MAX_PRICE:
        logger.debug(f"Price out of range, counted as zero: {x!r}")
        return ZERO
    return value


def format_currency(amount: Optional[Decimal]) -> str:
    """Format an amount as currency with two decimals, e.g. ``$1,250.00``"""
    value = amount if amount is not None else ZERO
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the cents
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
        return f"${value:,.2f}"
