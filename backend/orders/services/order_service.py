from functools import partial
from typing import Iterable, List, Optional
import logging

from django.db import transaction
from django.utils import timezone

from cart.cart import CartLine, merge_lines
from core_backend.exceptions import (
    ActionNotPermittedError,
    ConflictError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from customers.models import LoyaltyAccount
from customers.services import LoyaltyService
from orders.calculators import order_total
from orders.models import Order
from orders.policies import OrderAction, OrderActionPolicy
from orders.signals import order_placed, order_status_changed

logger = logging.getLogger(__name__)

Status = Order.OrderStatus
Payment = Order.PaymentStatus


class OrderService:
    """
    Core service for order lifecycle management - creating, amending,
    transitioning orders.

    Every write is a single atomic read-modify-write guarded by the order's
    revision counter: the UPDATE only lands if the revision is still the one
    that was read, otherwise ConflictError is raised and nothing changes.
    The service never retries on its own.
    """

    # Valid status transitions for order state machine
    VALID_STATUS_TRANSITIONS = {
        Status.NEW: [Status.PREPARING, Status.CANCELLED],
        Status.PREPARING: [Status.READY, Status.CANCELLED],
        Status.READY: [Status.COMPLETED, Status.CANCELLED],
        Status.COMPLETED: [],
        Status.CANCELLED: [],
    }

    # Independent payment axis
    VALID_PAYMENT_TRANSITIONS = {
        Payment.PENDING: [Payment.PAID],
        Payment.PAID: [Payment.REFUNDED],
        Payment.REFUNDED: [],
    }

    # --- helpers ---

    @staticmethod
    def _coerce_lines(lines: Iterable) -> List[CartLine]:
        coerced = []
        for line in lines or []:
            if isinstance(line, dict):
                line = CartLine.from_dict(line)
            elif not isinstance(line, CartLine):
                raise ValidationError(f"Unsupported order line: {line!r}")
            coerced.append(line)
        return coerced

    @staticmethod
    def _load(order_id, expected_revision: Optional[int] = None) -> Order:
        try:
            order = Order.objects.select_related("loyalty_account").get(pk=order_id)
        except (Order.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(f"Order {order_id} not found.")

        if expected_revision is not None and int(expected_revision) != order.revision:
            raise ConflictError(
                f"Order {order.pk} is at revision {order.revision}, expected {expected_revision}. "
                f"Reload the order and retry."
            )
        return order

    @staticmethod
    def _save(order: Order, fields: List[str]) -> Order:
        """Compare-and-swap write of `fields` against the revision that was read."""
        read_revision = order.revision
        values = {field: getattr(order, field) for field in fields}
        values["revision"] = read_revision + 1
        values["updated_at"] = timezone.now()

        updated = Order.objects.filter(pk=order.pk, revision=read_revision).update(**values)
        if not updated:
            logger.warning(f"Revision conflict on order {order.pk} at revision {read_revision}")
            raise ConflictError(
                f"Order {order.pk} was modified concurrently. Reload the order and retry."
            )

        order.revision = values["revision"]
        order.updated_at = values["updated_at"]
        return order

    @staticmethod
    def _resolve_payment_status(current: str, new_status: str, explicit: Optional[str]) -> str:
        if explicit is None:
            # Completing settles the bill unless it was already settled
            if new_status == Status.COMPLETED and current == Payment.PENDING:
                return Payment.PAID
            return current

        if explicit not in Payment.values:
            raise ValidationError(f"'{explicit}' is not a valid payment status.")
        if explicit == current:
            return current
        if explicit not in OrderService.VALID_PAYMENT_TRANSITIONS[current]:
            raise InvalidTransitionError(f"Cannot change payment status from {current} to {explicit}.")
        if explicit == Payment.REFUNDED and new_status != Status.COMPLETED:
            raise InvalidTransitionError("Only completed orders can be refunded.")
        return explicit

    # --- reads ---

    @staticmethod
    def get_order(order_id) -> Order:
        return OrderService._load(order_id)

    @staticmethod
    def list_orders(status: Optional[str] = None, order_type: Optional[str] = None) -> List[Order]:
        queryset = Order.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        if order_type:
            queryset = queryset.filter(order_type=order_type)
        return list(queryset)

    # --- writes ---

    @staticmethod
    @transaction.atomic
    def create_order(
        order_type: str,
        lines: Iterable,
        *,
        table_number: Optional[str] = None,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        payment_method: str = Order.PaymentMethod.CASH,
        notes: str = "",
        payment_status: str = Payment.PENDING,
        loyalty_account: Optional[LoyaltyAccount] = None,
    ) -> Order:
        """
        Place a new order from cart lines.

        Raises:
            ValidationError: empty lines, missing table number for Dine-in,
                missing customer name for Takeaway/Delivery, or unknown
                order type / payment method / payment status.
        """
        lines = OrderService._coerce_lines(lines)
        table_number = (table_number or "").strip()
        customer_name = (customer_name or "").strip()

        if order_type not in Order.OrderType.values:
            raise ValidationError(f"'{order_type}' is not a valid order type.")
        if payment_method not in Order.PaymentMethod.values:
            raise ValidationError(f"'{payment_method}' is not a valid payment method.")
        if payment_status not in (Payment.PENDING, Payment.PAID):
            raise ValidationError("New orders can only be Pending or Paid.")
        if not lines:
            raise ValidationError("Cannot place an order with an empty cart.")
        if order_type == Order.OrderType.DINE_IN and not table_number:
            raise ValidationError("A table number is required for Dine-in orders.")
        if order_type != Order.OrderType.DINE_IN and not customer_name:
            raise ValidationError(f"A customer name is required for {order_type} orders.")

        merged = merge_lines([], lines)
        total = order_total(merged)
        points = LoyaltyService.points_for_total(total)
        account = loyalty_account or LoyaltyService.get_account()

        order = Order.objects.create(
            order_type=order_type,
            table_number=table_number,
            customer_name=customer_name,
            customer_phone=(customer_phone or "").strip(),
            notes=notes or "",
            lines=[line.to_dict() for line in merged],
            total=total,
            status=Status.NEW,
            payment_method=payment_method,
            payment_status=payment_status,
            points_earned=points,
            loyalty_account=account,
        )
        LoyaltyService.apply_delta(account, points)

        logger.info(f"Created order {order.pk} ({order_type}) total {total}, {points} pts")
        transaction.on_commit(partial(order_placed.send, sender=Order, order=order))
        return order

    @staticmethod
    @transaction.atomic
    def transition_status(
        order_id,
        new_status: str,
        payment_status: Optional[str] = None,
        *,
        role=None,
        expected_revision: Optional[int] = None,
    ) -> Order:
        """
        Move an order along the status graph.

        Completing an order without an explicit payment status marks it Paid.
        The only change allowed on a completed order is Paid -> Refunded.
        When `role` is given, the role policy must also allow the change.
        """
        if new_status not in Status.values:
            raise InvalidTransitionError(f"'{new_status}' is not a valid order status.")

        order = OrderService._load(order_id, expected_revision)
        previous_status = order.status
        previous_payment = order.payment_status

        refund_only = previous_status == new_status == Status.COMPLETED
        if refund_only:
            if payment_status != Payment.REFUNDED or previous_payment != Payment.PAID:
                raise InvalidTransitionError(
                    f"Order {order.pk} is completed; only a refund of a paid order is possible."
                )
        elif new_status not in OrderService.VALID_STATUS_TRANSITIONS[previous_status]:
            logger.warning(f"Rejected transition of order {order.pk}: {previous_status} -> {new_status}")
            raise InvalidTransitionError(
                f"Cannot transition order {order.pk} from {previous_status} to {new_status}."
            )

        resolved_payment = OrderService._resolve_payment_status(previous_payment, new_status, payment_status)

        if role is not None and not OrderActionPolicy.allows_transition(
            role, previous_status, previous_payment, new_status, payment_status
        ):
            logger.warning(f"Role {role} denied {previous_status} -> {new_status} on order {order.pk}")
            raise ActionNotPermittedError(
                f"{role} may not move order {order.pk} from {previous_status} to {new_status}."
            )

        order.status = new_status
        order.payment_status = resolved_payment
        OrderService._save(order, ["status", "payment_status"])

        logger.info(
            f"Order {order.pk}: {previous_status}/{previous_payment} -> {new_status}/{resolved_payment}"
        )
        transaction.on_commit(
            partial(
                order_status_changed.send,
                sender=Order,
                order=order,
                previous_status=previous_status,
                previous_payment_status=previous_payment,
            )
        )
        return order

    @staticmethod
    @transaction.atomic
    def merge_additional_items(order_id, new_lines: Iterable, *, expected_revision: Optional[int] = None) -> Order:
        """
        Add more items to an unfinished order.

        Lines sharing an identity key with existing ones are merged by
        quantity. Loyalty is credited with the points delta only.
        """
        new_lines = OrderService._coerce_lines(new_lines)
        if not new_lines:
            raise ValidationError("No items to add.")

        order = OrderService._load(order_id, expected_revision)
        if order.is_terminal:
            raise InvalidStateError(f"Cannot add items to a {order.status} order.")

        old_points = order.points_earned
        merged = merge_lines(order.cart_lines, new_lines)
        order.lines = [line.to_dict() for line in merged]
        order.total = order_total(merged)
        order.points_earned = LoyaltyService.points_for_total(order.total)
        OrderService._save(order, ["lines", "total", "points_earned"])

        account = order.loyalty_account or LoyaltyService.get_account()
        LoyaltyService.apply_delta(account, order.points_earned - old_points)

        logger.info(f"Merged {len(new_lines)} line(s) into order {order.pk}; total now {order.total}")
        return order

    @staticmethod
    @transaction.atomic
    def edit_details(
        order_id,
        *,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        notes: Optional[str] = None,
        role=None,
        expected_revision: Optional[int] = None,
    ) -> Order:
        """
        Partial update of customer details and notes; omitted fields are kept.

        Takeaway and Delivery orders must keep a non-blank customer name.
        """
        order = OrderService._load(order_id, expected_revision)
        if order.is_terminal:
            raise InvalidStateError(f"Cannot edit a {order.status} order.")
        if role is not None and not OrderActionPolicy.can_edit(role, order.status):
            raise ActionNotPermittedError(f"{role} may not edit order details.")

        if customer_name is not None:
            customer_name = customer_name.strip()
            if not customer_name and order.order_type != Order.OrderType.DINE_IN:
                raise ValidationError(f"A customer name is required for {order.order_type} orders.")

        changes = {
            "customer_name": customer_name,
            "customer_phone": customer_phone,
            "notes": notes,
        }
        fields = [field for field, value in changes.items() if value is not None]
        if not fields:
            return order

        for field in fields:
            setattr(order, field, changes[field])
        OrderService._save(order, fields)
        logger.info(f"Edited {', '.join(fields)} on order {order.pk}")
        return order

    @staticmethod
    def apply_action(order_id, action, role, *, expected_revision: Optional[int] = None) -> Order:
        """
        Run a dashboard action (start cooking, mark ready, complete, cancel,
        refund) on behalf of `role`.
        """
        if action not in OrderAction.values:
            raise ValidationError(f"'{action}' is not a valid order action.")
        if action == OrderAction.EDIT:
            raise ValidationError("Use edit_details to edit an order.")

        order = OrderService._load(order_id, expected_revision)
        if action not in OrderActionPolicy.permitted_actions(role, order.status, order.payment_status):
            raise ActionNotPermittedError(
                f"{role} may not {OrderAction(action).label.lower()} order {order.pk} "
                f"while it is {order.status}/{order.payment_status}."
            )

        rule = OrderActionPolicy.resolve(action)
        return OrderService.transition_status(
            order.pk,
            rule.to_status,
            rule.payment_status,
            role=role,
            expected_revision=order.revision,
        )
