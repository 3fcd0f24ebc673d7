"""
Role-gated action policy for orders.

A pure lookup from (role, order status, payment status) to the actions a
staff member may take. Dashboards use it to decide which buttons to show;
OrderService consults it again so a caller cannot bypass it.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Set

from django.db import models
from django.utils.translation import gettext_lazy as _

from users.models import Role
from .models import Order

Status = Order.OrderStatus
Payment = Order.PaymentStatus


class OrderAction(models.TextChoices):
    START_COOKING = "start_cooking", _("Start Cooking")
    MARK_READY = "mark_ready", _("Order Ready")
    COMPLETE = "complete", _("Mark as Completed & Paid")
    EDIT = "edit", _("Edit")
    CANCEL = "cancel", _("Cancel")
    REFUND = "refund", _("Refund")


@dataclass(frozen=True)
class ActionRule:
    # None means "any non-terminal status"
    from_status: Optional[str]
    to_status: Optional[str]
    payment_status: Optional[str] = None
    requires_payment: Optional[str] = None


ACTION_RULES: Dict[str, ActionRule] = {
    OrderAction.START_COOKING: ActionRule(Status.NEW, Status.PREPARING),
    OrderAction.MARK_READY: ActionRule(Status.PREPARING, Status.READY),
    OrderAction.COMPLETE: ActionRule(Status.READY, Status.COMPLETED, payment_status=Payment.PAID),
    OrderAction.EDIT: ActionRule(None, None),
    OrderAction.CANCEL: ActionRule(None, Status.CANCELLED),
    OrderAction.REFUND: ActionRule(
        Status.COMPLETED, Status.COMPLETED, payment_status=Payment.REFUNDED, requires_payment=Payment.PAID
    ),
}

ROLE_ACTIONS: Dict[str, FrozenSet[str]] = {
    Role.KITCHEN: frozenset({OrderAction.START_COOKING, OrderAction.MARK_READY}),
    Role.CASHIER: frozenset({OrderAction.COMPLETE}),
    Role.MANAGER: frozenset(OrderAction.values),
}


class OrderActionPolicy:

    @staticmethod
    def _applies(rule: ActionRule, status: str, payment_status: str) -> bool:
        if rule.from_status is None:
            if status in Order.TERMINAL_STATUSES:
                return False
        elif rule.from_status != status:
            return False
        if rule.requires_payment and rule.requires_payment != payment_status:
            return False
        return True

    @staticmethod
    def actions_for_role(role) -> FrozenSet[str]:
        return ROLE_ACTIONS.get(role, frozenset())

    @staticmethod
    def permitted_actions(role, status: str, payment_status: str) -> Set[str]:
        """Actions `role` may take on an order in (status, payment_status)."""
        return {
            action
            for action in OrderActionPolicy.actions_for_role(role)
            if OrderActionPolicy._applies(ACTION_RULES[action], status, payment_status)
        }

    @staticmethod
    def can_edit(role, status: str) -> bool:
        return OrderAction.EDIT in OrderActionPolicy.permitted_actions(role, status, Payment.PENDING)

    @staticmethod
    def resolve(action) -> ActionRule:
        return ACTION_RULES[OrderAction(action)]

    @staticmethod
    def allows_transition(
        role, status: str, payment_status: str, new_status: str, new_payment_status: Optional[str] = None
    ) -> bool:
        """
        Whether some action permitted to `role` produces this transition.

        An explicit payment status must agree with the action's: either the
        one it forces, or unchanged for actions that leave payment alone.
        """
        for action in OrderActionPolicy.permitted_actions(role, status, payment_status):
            rule = ACTION_RULES[action]
            if rule.to_status is None or rule.to_status != new_status:
                continue
            allowed_payment = {None, rule.payment_status or payment_status}
            if new_payment_status in allowed_payment:
                return True
        return False
