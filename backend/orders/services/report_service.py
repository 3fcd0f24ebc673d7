from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Optional
import logging

from django.db.models import Sum
from django.utils import timezone

from orders.models import Order
from payments.money import quantize

logger = logging.getLogger(__name__)


class OrderReportService:
    """Manager dashboard figures."""

    @staticmethod
    def daily_summary(day: Optional[date] = None) -> dict:
        """
        Order count, revenue and top-selling item for one local calendar day.

        Revenue and the top seller only count orders that are completed and
        Paid; refunded and cancelled orders are excluded.
        """
        day = day or timezone.localdate()
        todays_orders = Order.objects.filter(created_at__date=day)
        settled = todays_orders.filter(
            status=Order.OrderStatus.COMPLETED,
            payment_status=Order.PaymentStatus.PAID,
        )

        revenue = settled.aggregate(revenue=Sum("total"))["revenue"] or Decimal("0")

        item_counts = Counter()
        for lines in settled.values_list("lines", flat=True):
            for line in lines:
                item_counts[line["name"]] += int(line["quantity"])
        top_item = item_counts.most_common(1)[0][0] if item_counts else None

        return {
            "date": day.isoformat(),
            "order_count": todays_orders.count(),
            "completed_count": settled.count(),
            "revenue": quantize(revenue),
            "top_selling_item": top_item,
        }
