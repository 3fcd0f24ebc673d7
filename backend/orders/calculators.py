"""
Order and cart financial calculators.

Shared, stateless pricing for both carts (preview) and orders (final), so a
total can never drift from the lines it was computed from.

Usage:
    from orders.calculators import line_total, order_total
    order.total = order_total(lines)

Lines are duck-typed: anything with `unit_price`, `quantity` and
`modifiers` (each with a `price`) works.
"""

from decimal import Decimal
from typing import Iterable

from payments.money import quantize


def unit_total(line) -> Decimal:
    """Item price plus every selected modifier price, for one unit."""
    return quantize(
        sum((Decimal(m.price) for m in line.modifiers), Decimal(line.unit_price))
    )


def line_total(line) -> Decimal:
    """(item price + sum of modifier prices) x quantity."""
    return quantize(unit_total(line) * line.quantity)


def order_total(lines: Iterable) -> Decimal:
    """Sum of line totals."""
    return quantize(sum((line_total(line) for line in lines), Decimal("0")))
