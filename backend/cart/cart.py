"""
In-memory cart for a single customer checkout.

Cart lines are frozen snapshots of the menu item and modifiers at the moment
they are added, so later catalog price changes never leak into an order.
"""
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from core_backend.exceptions import NotFoundError, ValidationError
from orders.calculators import line_total, order_total
from payments.money import quantize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModifierSnapshot:
    id: int
    name: str
    price: Decimal

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "price": str(quantize(self.price))}

    @classmethod
    def from_dict(cls, data: dict) -> "ModifierSnapshot":
        return cls(id=int(data["id"]), name=data["name"], price=quantize(data["price"]))


def make_line_key(item_id, modifier_ids: Iterable) -> str:
    """Identity key: item id followed by the sorted modifier ids, e.g. '17-4001-4003'."""
    return f"{item_id}-" + "-".join(str(mid) for mid in sorted(set(modifier_ids)))


@dataclass(frozen=True)
class CartLine:
    item_id: int
    name: str
    unit_price: Decimal
    quantity: int = 1
    category: str = ""
    modifiers: Tuple[ModifierSnapshot, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.quantity < 1:
            raise ValidationError(f"Quantity must be at least 1, got {self.quantity}.")
        if self.unit_price < 0 or any(m.price < 0 for m in self.modifiers):
            raise ValidationError("Prices cannot be negative.")
        # Deduplicate and order modifiers by id so equal selections compare equal
        unique = {m.id: m for m in self.modifiers}
        object.__setattr__(self, "modifiers", tuple(unique[mid] for mid in sorted(unique)))

    @property
    def key(self) -> str:
        return make_line_key(self.item_id, (m.id for m in self.modifiers))

    @property
    def total(self) -> Decimal:
        return line_total(self)

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    @classmethod
    def from_menu_item(cls, item, modifiers=(), quantity: int = 1) -> "CartLine":
        """Snapshot a catalog MenuItem plus the selected Modifier rows."""
        allowed = {m.pk for m in item.modifiers.all()}
        unknown = [m.pk for m in modifiers if m.pk not in allowed]
        if unknown:
            raise ValidationError(f"Modifiers {unknown} are not offered on '{item.name}'.")

        return cls(
            item_id=item.pk,
            name=item.name,
            unit_price=quantize(item.price),
            quantity=quantity,
            category=item.category,
            modifiers=tuple(
                ModifierSnapshot(id=m.pk, name=m.name, price=quantize(m.price)) for m in modifiers
            ),
        )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "item_id": self.item_id,
            "name": self.name,
            "category": self.category,
            "unit_price": str(quantize(self.unit_price)),
            "quantity": self.quantity,
            "modifiers": [m.to_dict() for m in self.modifiers],
            "line_total": str(self.total),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        return cls(
            item_id=int(data["item_id"]),
            name=data["name"],
            unit_price=quantize(data["unit_price"]),
            quantity=int(data["quantity"]),
            category=data.get("category", ""),
            modifiers=tuple(ModifierSnapshot.from_dict(m) for m in data.get("modifiers", [])),
        )


def merge_lines(existing: Iterable[CartLine], new: Iterable[CartLine]) -> List[CartLine]:
    """
    Combine two line sequences, summing quantities of lines that share a key.

    Order of first appearance is preserved.
    """
    merged: Dict[str, CartLine] = {}
    for line in list(existing) + list(new):
        current = merged.get(line.key)
        if current is None:
            merged[line.key] = line
        else:
            merged[line.key] = current.with_quantity(current.quantity + line.quantity)
    return list(merged.values())


class Cart:
    """Accumulates cart lines before checkout. Touches no persisted state."""

    def __init__(self, lines: Optional[Iterable[CartLine]] = None):
        self._lines: Dict[str, CartLine] = {}
        for line in merge_lines([], lines or []):
            self._lines[line.key] = line

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self.lines)

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total(self) -> Decimal:
        return order_total(self._lines.values())

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def get(self, key: str) -> CartLine:
        try:
            return self._lines[key]
        except KeyError:
            raise NotFoundError(f"Cart line {key} not found.")

    def add_line(self, item, modifiers=()) -> CartLine:
        """
        Add one unit of `item` with the selected modifiers.

        Re-adding the same item and modifier set bumps the existing line's
        quantity instead of creating a second line.
        """
        if not item.is_available:
            raise ValidationError(f"'{item.name}' is currently unavailable.")

        line = CartLine.from_menu_item(item, modifiers)
        existing = self._lines.get(line.key)
        if existing:
            line = existing.with_quantity(existing.quantity + 1)
        self._lines[line.key] = line
        logger.debug(f"Cart line {line.key} now x{line.quantity}")
        return line

    def set_quantity(self, key: str, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity; zero or less removes the line."""
        line = self.get(key)
        if quantity <= 0:
            del self._lines[key]
            return None
        line = line.with_quantity(quantity)
        self._lines[key] = line
        return line

    def remove(self, key: str) -> None:
        self.set_quantity(key, 0)

    def clear(self) -> None:
        self._lines.clear()
