"""Money coercion, rounding and display formatting.

Every monetary value crossing the engine boundary goes through this module:
inputs are coerced to Decimal (malformed values become zero) and outputs are
quantized to cents with half-up rounding.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import TypeVar

from pydantic import BaseModel

CENT = Decimal("0.01")
DOLLAR = Decimal("1")
ZERO = Decimal("0")

# Amounts with more integer digits than this are treated as malformed input
MAX_AMOUNT_DIGITS = 100

ModelT = TypeVar("ModelT", bound=BaseModel)


def coerce_money(value: object) -> Decimal:
    """Convert loosely typed form input into a Decimal amount.

    Missing, blank or unparsable values become zero instead of raising, since
    the wizard recalculates on every keystroke.

    Args:
        value: Decimal, int, float, numeric string ("$1,234.50"), or None.

    Returns:
        Finite Decimal amount (zero for anything malformed).

    Example:
        >>> coerce_money("$1,234.50")
        Decimal('1234.50')
        >>> coerce_money("abc")
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # str() avoids carrying binary float artifacts into Decimal
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace("$", "").replace(",", "").replace(" ", "")
        if not text:
            return ZERO
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not amount.is_finite() or amount.adjusted() >= MAX_AMOUNT_DIGITS:
        return ZERO
    return amount


def coerce_optional_money(value: object) -> Decimal | None:
    """Like coerce_money, but keeps an absent value as None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_money(value)


def _quantize_half_up(value: Decimal, exponent: Decimal) -> Decimal:
    # The quantized coefficient must fit the context precision, so widen it
    # for amounts with more than 28 significant digits.
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - exponent.as_tuple().exponent + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


def to_cents(value: Decimal) -> Decimal:
    """Quantize an amount to cents (half-up), mapping non-finite values to zero.

    Example:
        >>> to_cents(Decimal("1e30"))
        Decimal('1000000000000000000000000000000.00')
    """
    if not value.is_finite():
        return ZERO.quantize(CENT)
    return _quantize_half_up(value, CENT)


def to_whole_dollars(value: Decimal) -> Decimal:
    """Quantize an amount to whole dollars (half-up)."""
    if not value.is_finite():
        return ZERO
    return _quantize_half_up(value, DOLLAR)


def round_results(results: ModelT) -> ModelT:
    """Return a copy of a results model with every Decimal field in cents.

    Rounding is idempotent: applying it to already-rounded results returns an
    equal model.

    Args:
        results: Any pydantic model whose money fields are Decimal.

    Returns:
        New model instance with Decimal fields quantized to cents.
    """
    updates: dict[str, Decimal] = {}
    for name in type(results).model_fields:
        value = getattr(results, name)
        if isinstance(value, Decimal):
            updates[name] = to_cents(value)
    return results.model_copy(update=updates)


def format_currency(amount: Decimal) -> str:
    """Format an amount for display as whole US dollars.

    Example:
        >>> format_currency(Decimal("1234.5"))
        '$1,235'
        >>> format_currency(Decimal("-50"))
        '-$50'
    """
    dollars = to_whole_dollars(amount)
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(dollars):,.0f}"
