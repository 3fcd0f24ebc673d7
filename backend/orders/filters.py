import django_filters

from .models import Order


class OrderFilter(django_filters.FilterSet):
    """Dashboard filters; `created_on` matches the local calendar day."""

    created_on = django_filters.DateFilter(field_name="created_at", lookup_expr="date")
    created_at__gte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_at__lte = django_filters.DateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ["status", "order_type", "payment_status", "payment_method"]
