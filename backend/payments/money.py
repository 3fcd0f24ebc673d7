"""
Monetary precision helpers for order totals and bill splitting.

Key principles:
1. NEVER use float for money
2. Always quantize Decimals BEFORE converting to minor units
3. Use ROUND_HALF_EVEN (banker's rounding) to prevent systematic bias
4. Allocate remainder cents deterministically (largest residual first)
5. Stored amounts always carry PRICE_DECIMAL_PLACES; a currency argument
   changes precision only when passed explicitly (settings.CURRENCY is
   used for display in format_money)
"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import List, Optional, Union

from django.conf import settings

Amount = Union[Decimal, str, int, float]

# Precision of every stored price and total (Order.total is DecimalField(decimal_places=2))
PRICE_DECIMAL_PLACES = 2

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "MYR": 2,  # Malaysian Ringgit (sen)
    "SGD": 2,
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "BHD": 3,
}

CURRENCY_SYMBOL = {
    "MYR": "RM ",
    "SGD": "S$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def default_currency() -> str:
    return getattr(settings, "CURRENCY", "MYR")


def currency_exponent(currency: Optional[str] = None) -> int:
    """
    Get the number of decimal places for a currency.

    Without a currency this is PRICE_DECIMAL_PLACES, whatever
    settings.CURRENCY says.

    Examples:
        >>> currency_exponent()
        2
        >>> currency_exponent("MYR")
        2
        >>> currency_exponent("JPY")
        0
    """
    if currency is None:
        return PRICE_DECIMAL_PLACES
    return CURRENCY_EXPONENT.get(currency.upper(), PRICE_DECIMAL_PLACES)


def quantize_decimal(currency: Optional[str] = None) -> Decimal:
    """Smallest unit for a currency, e.g. Decimal('0.01') for MYR or by default."""
    return Decimal(10) ** -currency_exponent(currency)


def to_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, float):
        # Convert float to string first to avoid binary precision artifacts
        amount = str(amount)
    return Decimal(amount)


def quantize(amount: Amount, currency: Optional[str] = None) -> Decimal:
    """
    Round to currency decimals using banker's rounding (ROUND_HALF_EVEN).

    Examples:
        >>> quantize("10.127")
        Decimal('10.13')
        >>> quantize("10.125")
        Decimal('10.12')
        >>> quantize("1234.56", "JPY")
        Decimal('1235')
    """
    return to_decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def to_minor(amount: Amount, currency: Optional[str] = None) -> int:
    """
    Convert to minor units (e.g. sen) after quantization.

    Examples:
        >>> to_minor("10.127")
        1013
    """
    quantized = quantize(amount, currency)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())


def from_minor(minor: int, currency: Optional[str] = None) -> Decimal:
    """
    Convert from minor units back to a quantized Decimal.

    Examples:
        >>> from_minor(1013)
        Decimal('10.13')
    """
    return quantize(Decimal(minor) / (10 ** currency_exponent(currency)), currency)


def allocate_minor(weights: List[int], total_minor: int) -> List[int]:
    """
    Allocate total_minor across items proportionally by weights.

    Guarantees:
    - sum(result) == total_minor (exact, no drift)
    - Deterministic: largest residual gets the next cent, ties by index

    Examples:
        >>> allocate_minor([1, 1, 1], 1000)
        [334, 333, 333]
        >>> allocate_minor([1000, 1500, 2000], 100)
        [22, 33, 45]
    """
    total_weight = sum(weights)

    if total_weight == 0 or total_minor == 0:
        return [0] * len(weights)

    # Integer floor division keeps the residual exact
    floors = []
    residuals = []
    for index, weight in enumerate(weights):
        share, residual = divmod(weight * total_minor, total_weight)
        floors.append(share)
        residuals.append((residual, index))

    remainder = total_minor - sum(floors)
    residuals.sort(key=lambda item: (-item[0], item[1]))

    result = floors[:]
    for i in range(remainder):
        _, idx = residuals[i]
        result[idx] += 1

    return result


def split_evenly(total: Amount, parts: int, currency: Optional[str] = None) -> List[Decimal]:
    """
    Split an amount into `parts` shares that sum exactly to the quantized total.

    Examples:
        >>> split_evenly("10.00", 3)
        [Decimal('3.34'), Decimal('3.33'), Decimal('3.33')]
    """
    if parts < 1:
        raise ValueError("parts must be at least 1")
    allocations = allocate_minor([1] * parts, to_minor(total, currency))
    return [from_minor(minor, currency) for minor in allocations]


def validate_minor_sum(components: List[int], expected_total: int, context: str = "") -> None:
    """
    Validate that sum of components equals expected total.

    Raises ValueError if mismatch (catches penny drift bugs).
    """
    actual = sum(components)
    diff = actual - expected_total

    if diff:
        sign = "+" if diff > 0 else ""
        raise ValueError(
            f"Minor unit sum mismatch{' ' + context if context else ''}: "
            f"expected {expected_total}, got {actual} "
            f"(diff: {sign}{diff})"
        )


def format_money(amount: Amount, currency: Optional[str] = None) -> str:
    """
    Format an amount as a human-readable currency string.

    Examples:
        >>> format_money("10.5", "MYR")
        'RM 10.50'
    """
    currency = (currency or default_currency()).upper()
    symbol = CURRENCY_SYMBOL.get(currency, currency + " ")
    exponent = currency_exponent(currency)
    return f"{symbol}{quantize(amount, currency):,.{exponent}f}"
