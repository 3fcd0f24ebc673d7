from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from decimal import Decimal


class Modifier(models.Model):
    """An optional paid add-on (e.g. "Extra Sambal") selectable on a menu item."""

    name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("The amount added to the item price when selected."),
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} (+{self.price})"


class MenuItem(models.Model):
    name = models.CharField(max_length=200, help_text=_("Name of the menu item."))
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("The selling price of the item."),
    )
    category = models.CharField(max_length=100, db_index=True)
    image = models.URLField(blank=True)
    is_available = models.BooleanField(
        default=True,
        help_text=_("Unavailable items are hidden from the customer menu."),
    )
    is_featured = models.BooleanField(default=False)
    modifiers = models.ManyToManyField(Modifier, blank=True, related_name="menu_items")

    class Meta:
        ordering = ["category", "name"]
        indexes = [
            models.Index(fields=["category", "is_available"], name="menuitem_category_avail_idx"),
        ]

    def __str__(self):
        return self.name
