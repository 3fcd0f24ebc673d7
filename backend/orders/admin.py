from django.contrib import admin

from .models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-mostly admin for orders. Status changes belong to the dashboards,
    which go through OrderService and its revision checks.
    """

    list_display = (
        "id",
        "order_type",
        "fulfillment_target",
        "status",
        "payment_status",
        "payment_method",
        "total",
        "created_at",
    )
    list_filter = ("status", "order_type", "payment_status", "payment_method")
    search_fields = ("customer_name", "customer_phone", "table_number")
    date_hierarchy = "created_at"
    readonly_fields = (
        "status",
        "payment_status",
        "lines",
        "total",
        "points_earned",
        "revision",
        "created_at",
        "updated_at",
    )
