"""
Loyalty ledger services.
"""
import logging
from decimal import Decimal, ROUND_FLOOR

from django.conf import settings
from django.db.models import F, Value
from django.db.models.functions import Greatest

from payments.money import to_decimal
from .models import LoyaltyAccount

logger = logging.getLogger(__name__)


class LoyaltyService:
    """
    Derives points from order totals and applies them to a LoyaltyAccount.

    Amendments must go through apply_delta with (new - old) points so a
    merged order is never counted twice.
    """

    @staticmethod
    def rate() -> Decimal:
        return to_decimal(getattr(settings, "LOYALTY_POINTS_RATE", Decimal("1")))

    @staticmethod
    def points_for_total(total) -> int:
        """floor(total * rate), never negative."""
        points = (to_decimal(total) * LoyaltyService.rate()).to_integral_value(rounding=ROUND_FLOOR)
        return max(int(points), 0)

    @staticmethod
    def get_account(customer_key: str = LoyaltyAccount.DEFAULT_KEY) -> LoyaltyAccount:
        account, created = LoyaltyAccount.objects.get_or_create(customer_key=customer_key)
        if created:
            logger.info(f"Created loyalty account for {customer_key}")
        return account

    @staticmethod
    def apply_delta(account: LoyaltyAccount, delta: int) -> LoyaltyAccount:
        """
        Add `delta` points to the account atomically at the database level.

        A negative delta (an amendment that lowered the total) is clamped so
        the balance never drops below zero.
        """
        if delta == 0:
            return account

        if delta > 0:
            LoyaltyAccount.objects.filter(pk=account.pk).update(points=F("points") + delta)
        else:
            LoyaltyAccount.objects.filter(pk=account.pk).update(
                points=Greatest(F("points") + delta, Value(0))
            )

        account.refresh_from_db(fields=["points", "updated_at"])
        logger.info(f"Loyalty account {account.customer_key} {delta:+d} pts -> {account.points}")
        return account
