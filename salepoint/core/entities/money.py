"""Money helpers. All amounts are Decimals quantized to cents."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: object) -> Decimal:
    """Coerce ``value`` to a 2-place Decimal.

    Floats go through ``str`` so that ``5.5`` becomes ``5.50`` rather than
    the binary expansion of 5.5.
    """
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, bool):
        raise ValueError("Boolean is not a valid amount")
    elif isinstance(value, (int, str)):
        try:
            amount = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        raise ValueError(f"Invalid amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
