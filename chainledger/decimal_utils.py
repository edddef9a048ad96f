"""Decimal helpers shared by the ledger and the FIFO engine.

Amounts arrive from the chain as integer strings in base units. They are
shifted into Decimal with a context wide enough to stay exact for 256-bit
values. Sums and differences of amounts run under the same context through
``exact()``, so balances and FIFO inventory never pick up rounding error.
"""

from decimal import Context, Decimal, InvalidOperation, localcontext
from typing import Any

NAN = Decimal("NaN")
ZERO = Decimal("0")
ONE = Decimal("1")

# uint256 has 78 decimal digits
EXACT_CONTEXT = Context(prec=80)


def exact():
    """Context manager for amount arithmetic that must not round."""
    return localcontext(EXACT_CONTEXT)


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a value to Decimal, returning ``default`` for empty or invalid input.

    Floats are converted through ``str`` so that ``0.1`` stays ``0.1``.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def from_base_units(value: str | int, decimals: int) -> Decimal:
    """Shift an integer amount of base units (wei, token units) by ``decimals``."""
    raw = int(value or 0)
    return Decimal(raw).scaleb(-decimals, context=EXACT_CONTEXT)


def parse_quantity(value: str | int | None) -> int:
    """Parse a JSON-RPC quantity, hex (``0x5208``) or decimal string."""
    if value is None or value == "":
        return 0
    if isinstance(value, int):
        return value
    text = value.strip().lower()
    if text.startswith("0x"):
        return int(text, 16) if len(text) > 2 else 0
    return int(text)


def is_nan(value: Decimal) -> bool:
    return isinstance(value, Decimal) and value.is_nan()


def any_nan(*values: Decimal) -> bool:
    return any(is_nan(v) for v in values)


def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, yielding NaN instead of raising on a zero or unpriced denominator."""
    if any_nan(numerator, denominator) or denominator == 0:
        return NAN
    return numerator / denominator
