from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyAccount(models.Model):
    """
    Loyalty points balance for one customer context.

    The balance only ever changes additively through LoyaltyService,
    called from the order lifecycle operations.
    """

    DEFAULT_KEY = "default"

    customer_key = models.CharField(
        max_length=100,
        unique=True,
        default=DEFAULT_KEY,
        help_text=_("Identifies the customer context owning this balance."),
    )
    points = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Loyalty Account")
        verbose_name_plural = _("Loyalty Accounts")

    def __str__(self):
        return f"{self.customer_key}: {self.points} pts"
