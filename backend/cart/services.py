"""
Checkout service layer.

This service handles:
- Building a cart from catalog items for one customer session
- Optional split-bill settlement for Dine-in orders
- Converting the cart into a placed order (snapshot creation)
"""

from decimal import Decimal
from typing import Optional
import logging

from core_backend.exceptions import ValidationError
from customers.models import LoyaltyAccount
from orders.models import Order
from orders.services import OrderService
from payments.money import format_money
from payments.services import SplitMode, SplitSession

from .cart import Cart, CartLine

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    One customer checkout: a cart, an optional split session and the
    confirmation that turns them into an Order.

    Instances are per-session and hold no persisted state until confirm().
    """

    def __init__(self, cart: Optional[Cart] = None):
        self.cart = cart or Cart()
        self.split: Optional[SplitSession] = None

    # --- cart ---

    def add_item(self, item, modifiers=()) -> CartLine:
        self._ensure_not_splitting()
        return self.cart.add_line(item, modifiers)

    def set_quantity(self, key: str, quantity: int) -> Optional[CartLine]:
        self._ensure_not_splitting()
        return self.cart.set_quantity(key, quantity)

    def remove_item(self, key: str) -> None:
        self._ensure_not_splitting()
        self.cart.remove(key)

    @property
    def total(self) -> Decimal:
        return self.cart.total

    def _ensure_not_splitting(self):
        if self.split is not None and self.split.payments:
            raise ValidationError("The bill is being split; cancel the split before changing the cart.")

    # --- split bill ---

    def start_split(self, mode: str = SplitMode.BY_ITEM, party_count: Optional[int] = None) -> SplitSession:
        """Begin settling the current cart in parts."""
        if self.cart.is_empty:
            raise ValidationError("Cannot split an empty cart.")
        self.split = SplitSession(self.cart.lines, mode=mode, party_count=party_count)
        logger.info(f"Started {mode} split over {len(self.cart)} line(s), total {format_money(self.cart.total)}")
        return self.split

    def cancel_split(self) -> None:
        self.split = None

    # --- confirmation ---

    def confirm(
        self,
        order_type: str,
        *,
        table_number: Optional[str] = None,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        payment_method: str = Order.PaymentMethod.CASH,
        notes: str = "",
        loyalty_account: Optional[LoyaltyAccount] = None,
    ) -> Order:
        """
        Place the order and empty the cart.

        A split that was started must be fully settled first; the order is
        then recorded as Paid. Splitting only applies to Dine-in orders.
        """
        payment_status = Order.PaymentStatus.PENDING
        if self.split is not None:
            if order_type != Order.OrderType.DINE_IN:
                raise ValidationError("Split bills are only available for Dine-in orders.")
            if not self.split.all_settled:
                raise ValidationError(
                    f"{len(self.split.unpaid_lines)} item(s) are still unpaid "
                    f"({format_money(self.split.remaining_total)} outstanding)."
                )
            payment_status = Order.PaymentStatus.PAID

        order = OrderService.create_order(
            order_type,
            self.cart.lines,
            table_number=table_number,
            customer_name=customer_name,
            customer_phone=customer_phone,
            payment_method=payment_method,
            notes=notes,
            payment_status=payment_status,
            loyalty_account=loyalty_account,
        )

        self.cart.clear()
        self.split = None
        return order
