from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from cart.cart import CartLine


class Order(models.Model):
    """
    A confirmed customer purchase.

    Lines are stored as frozen JSON snapshots (see cart.cart.CartLine.to_dict),
    never as references into the live catalog. All writes go through
    orders.services.OrderService, which bumps `revision` on every change.
    """

    # --- Status Fields ---
    class OrderStatus(models.TextChoices):
        NEW = "new", _("New")  # Placed, waiting for the kitchen
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready")  # Waiting for pickup / serving
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class OrderType(models.TextChoices):
        DINE_IN = "Dine-in", _("Dine-in")
        TAKEAWAY = "Takeaway", _("Takeaway")
        DELIVERY = "Delivery", _("Delivery")

    class PaymentStatus(models.TextChoices):
        PENDING = "Pending", _("Pending")
        PAID = "Paid", _("Paid")
        REFUNDED = "Refunded", _("Refunded")

    class PaymentMethod(models.TextChoices):
        CASH = "Cash", _("Cash")
        CARD = "Credit/Debit Card", _("Credit/Debit Card")
        FPX = "FPX", _("FPX")
        TOUCH_N_GO = "Touch n Go", _("Touch n Go")
        GRABPAY = "GrabPay", _("GrabPay")
        SHOPEEPAY = "ShopeePay", _("ShopeePay")
        BOOST = "Boost", _("Boost")
        GOOGLE_PAY = "Google Pay", _("Google Pay")
        APPLE_PAY = "Apple Pay", _("Apple Pay")

    TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    status = models.CharField(
        max_length=10, choices=OrderStatus.choices, default=OrderStatus.NEW, db_index=True
    )
    order_type = models.CharField(max_length=10, choices=OrderType.choices)
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.CASH
    )
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )

    # --- Fulfillment target ---
    table_number = models.CharField(max_length=20, blank=True, default="")
    customer_name = models.CharField(max_length=100, blank=True, default="")
    customer_phone = models.CharField(max_length=30, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    # --- Line snapshots and totals ---
    lines = models.JSONField(default=list)
    total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    points_earned = models.PositiveIntegerField(default=0)

    loyalty_account = models.ForeignKey(
        "customers.LoyaltyAccount",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Optimistic concurrency counter, incremented on every write
    revision = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
        ]

    def __str__(self):
        return f"Order #{self.pk} ({self.get_order_type_display()}, {self.status})"

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    @property
    def cart_lines(self):
        return [CartLine.from_dict(data) for data in self.lines]

    @property
    def fulfillment_target(self) -> str:
        if self.order_type == self.OrderType.DINE_IN:
            return f"Table {self.table_number}"
        return self.customer_name
