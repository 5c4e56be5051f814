from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """
    Quantize to 2 fractional digits with ROUND_HALF_UP (GST display rounding).

    Accepts Decimal, int or str. Floats are converted through str() so that
    binary representation noise does not leak into the result.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    return to_money(Decimal(amount) * Decimal(rate) / Decimal(100))


def money_str(value: Decimal, currency: str) -> str:
    return f"{currency} {to_money(value)}"
