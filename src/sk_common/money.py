"""Fixed-point decimal utilities for INR amounts and share quantities.

All prices, costs, fees and quantities use Decimal. No float anywhere.
Money is held at 4 decimal places, quantities at 6 (banker's rounding),
matching the NUMERIC(18,4) / NUMERIC(18,6) columns.
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

MONEY_PLACES = 4
QUANTITY_PLACES = 6

_MONEY_QUANT = Decimal(1).scaleb(-MONEY_PLACES)
_QUANTITY_QUANT = Decimal(1).scaleb(-QUANTITY_PLACES)

ZERO = Decimal("0")

# Exclusive magnitude limits: 12 integer digits for NUMERIC(18,6), 14 for NUMERIC(18,4)
MAX_QUANTITY = Decimal(10) ** 12
MAX_MONEY = Decimal(10) ** 14


def quantize_money(value: Decimal) -> Decimal:
    """Round an INR amount to 4 decimal places."""
    return value.quantize(_MONEY_QUANT, rounding=ROUND_HALF_EVEN)


def quantize_quantity(value: Decimal) -> Decimal:
    """Round a share quantity to 6 decimal places."""
    return value.quantize(_QUANTITY_QUANT, rounding=ROUND_HALF_EVEN)


def parse_decimal(value: str | int | float | Decimal) -> Decimal:
    """Parse a decimal string: '5.5' -> Decimal('5.5'). Raises ValueError on junk or NaN/Inf."""
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"not a decimal: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"not a finite decimal: {value!r}")
    return result


def money_to_str(value: Decimal, places: int = MONEY_PLACES) -> str:
    """Fixed-scale string: (Decimal('557.25'), 4) -> '557.2500', (.., 2) -> '557.25'."""
    quant = Decimal(1).scaleb(-places)
    return f"{value.quantize(quant, rounding=ROUND_HALF_EVEN):f}"


def quantity_to_str(value: Decimal) -> str:
    """Shortest exact string: Decimal('5.500000') -> '5.5', Decimal('100') -> '100'."""
    normalized = quantize_quantity(value).normalize()
    if normalized == ZERO:
        return "0"
    return f"{normalized:f}"
