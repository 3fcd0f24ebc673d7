from rest_framework import serializers

from cart.cart import CartLine
from core_backend.exceptions import NotFoundError, ValidationError
from products.models import Modifier
from products.services import ProductService
from .models import Order
from .policies import OrderAction


class OrderSerializer(serializers.ModelSerializer):
    """Flat, read-only order record as shown on the dashboards."""

    fulfillment_target = serializers.CharField(read_only=True)
    order_type_display = serializers.CharField(source="get_order_type_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "status_display",
            "order_type",
            "order_type_display",
            "payment_method",
            "payment_status",
            "table_number",
            "customer_name",
            "customer_phone",
            "fulfillment_target",
            "notes",
            "lines",
            "total",
            "points_earned",
            "revision",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    modifier_ids = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    quantity = serializers.IntegerField(min_value=1, default=1)

    def to_cart_line(self, data) -> CartLine:
        """Snapshot the current catalog item into a CartLine."""
        item = ProductService.get_menu_item(data["item_id"])
        if not item.is_available:
            raise ValidationError(f"'{item.name}' is currently unavailable.")

        modifier_ids = set(data.get("modifier_ids") or [])
        modifiers = list(Modifier.objects.filter(pk__in=modifier_ids))
        if len(modifiers) != len(modifier_ids):
            missing = sorted(modifier_ids - {m.pk for m in modifiers})
            raise NotFoundError(f"Modifiers {missing} not found.")

        return CartLine.from_menu_item(item, modifiers, quantity=data["quantity"])


class OrderLinesField(serializers.ListField):
    child = OrderLineInputSerializer()

    def to_internal_value(self, data):
        validated = super().to_internal_value(data)
        return [self.child.to_cart_line(line) for line in validated]


class OrderCreateSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.OrderType.choices)
    lines = OrderLinesField(allow_empty=False)
    table_number = serializers.CharField(required=False, allow_blank=True, default="")
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(
        choices=Order.PaymentMethod.choices, default=Order.PaymentMethod.CASH
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class RevisionMixin(serializers.Serializer):
    expected_revision = serializers.IntegerField(required=False, min_value=1)


class OrderTransitionSerializer(RevisionMixin):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
    payment_status = serializers.ChoiceField(
        choices=Order.PaymentStatus.choices, required=False, allow_null=True, default=None
    )


class OrderActionSerializer(RevisionMixin):
    action = serializers.ChoiceField(choices=OrderAction.choices)


class AddItemsSerializer(RevisionMixin):
    lines = OrderLinesField(allow_empty=False)


class OrderDetailsSerializer(RevisionMixin):
    customer_name = serializers.CharField(required=False, allow_blank=True)
    customer_phone = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
