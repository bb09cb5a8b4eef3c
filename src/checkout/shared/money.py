"""Fixed-point money helpers.

Amounts are carried as ``Decimal`` quantized to cents and persisted as
strings (``"69.98"``), never as floats. Amounts claimed by a client or the
payment processor are parsed exactly and compared unrounded.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError

CENT = Decimal("0.01")
TOLERANCE = CENT


def parse_amount(value, field: str = "amount") -> Decimal:
    """Parse ``value`` into an exact Decimal without rounding.

    Raises ValidationError for anything that is not a finite number.
    """
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({field: [f"Invalid monetary amount: {value!r}"]}) from None
    if not amount.is_finite():
        raise ValidationError({field: [f"Invalid monetary amount: {value!r}"]})
    return amount


def to_money(value, field: str = "amount") -> Decimal:
    """Parse ``value`` into a cent-quantized Decimal.

    Raises ValidationError for anything that is not a finite number or is
    too large to carry cents.
    """
    amount = parse_amount(value, field=field)
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError({field: [f"Monetary amount out of range: {value!r}"]}) from None


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two decimal places."""
    return f"{amount.quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def within_tolerance(claimed: Decimal, expected: Decimal, tolerance: Decimal = TOLERANCE) -> bool:
    """True when the two amounts differ by at most ``tolerance`` (one cent).

    ``claimed`` is compared as given; rounding it first would widen the band.
    """
    return abs(claimed - expected) <= tolerance
