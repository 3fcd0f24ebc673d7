import logging

from django.utils.dateparse import parse_date
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from core_backend.exceptions import ValidationError
from users.permissions import HasRoleSession, IsManagerSession
from users.services import RoleSessionService
from .filters import OrderFilter
from .models import Order
from .policies import OrderActionPolicy
from .serializers import (
    AddItemsSerializer,
    OrderActionSerializer,
    OrderCreateSerializer,
    OrderDetailsSerializer,
    OrderSerializer,
    OrderTransitionSerializer,
)
from .services import OrderReportService, OrderService

logger = logging.getLogger(__name__)


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """
    Orders for the kitchen, cashier and manager dashboards.

    Placing an order, reading one back and adding items to it are public
    (customer checkout and status page); everything else needs a staff role
    session. Every write accepts an optional `expected_revision`
    and answers 409 when the order changed underneath the caller.
    """

    # Customer-facing: place an order, poll its status, add more items
    CUSTOMER_ACTIONS = ("create", "retrieve", "add_items")

    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_permissions(self):
        if self.action in self.CUSTOMER_ACTIONS:
            return [AllowAny()]
        if self.action == "summary":
            return [IsManagerSession()]
        return [HasRoleSession()]

    def _role(self):
        return RoleSessionService.current_role(self.request)

    def _respond(self, order, status_code=status.HTTP_200_OK):
        return Response(OrderSerializer(order).data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.create_order(
            data["order_type"],
            data["lines"],
            table_number=data["table_number"],
            customer_name=data["customer_name"],
            customer_phone=data["customer_phone"],
            payment_method=data["payment_method"],
            notes=data["notes"],
        )
        return self._respond(order, status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def transition(self, request, pk=None):
        serializer = OrderTransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.transition_status(
            pk,
            data["status"],
            data["payment_status"],
            role=self._role(),
            expected_revision=data.get("expected_revision"),
        )
        return self._respond(order)

    @action(detail=True, methods=["get", "post"], url_path="actions", url_name="actions")
    def order_actions(self, request, pk=None):
        """GET lists the actions open to the current role; POST performs one."""
        role = self._role()
        if request.method == "GET":
            order = OrderService.get_order(pk)
            permitted = OrderActionPolicy.permitted_actions(role, order.status, order.payment_status)
            return Response({"role": role, "actions": sorted(permitted)})

        serializer = OrderActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.apply_action(
            pk,
            serializer.validated_data["action"],
            role,
            expected_revision=serializer.validated_data.get("expected_revision"),
        )
        return self._respond(order)

    @action(detail=True, methods=["post"], url_path="add-items")
    def add_items(self, request, pk=None):
        serializer = AddItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderService.merge_additional_items(
            pk,
            serializer.validated_data["lines"],
            expected_revision=serializer.validated_data.get("expected_revision"),
        )
        return self._respond(order)

    @action(detail=True, methods=["patch"])
    def details(self, request, pk=None):
        serializer = OrderDetailsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = OrderService.edit_details(
            pk,
            customer_name=data.get("customer_name"),
            customer_phone=data.get("customer_phone"),
            notes=data.get("notes"),
            role=self._role(),
            expected_revision=data.get("expected_revision"),
        )
        return self._respond(order)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        day = None
        raw_date = request.query_params.get("date")
        if raw_date:
            day = parse_date(raw_date)
            if day is None:
                raise ValidationError(f"'{raw_date}' is not a valid date (YYYY-MM-DD).")

        report = OrderReportService.daily_summary(day)
        report["revenue"] = str(report["revenue"])
        return Response(report)
