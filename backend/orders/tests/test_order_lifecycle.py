"""
Order lifecycle tests: creation rules and the status / payment state machine.
"""
import pytest
from decimal import Decimal

from core_backend.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from orders.models import Order
from orders.services import OrderService

Status = Order.OrderStatus
Payment = Order.PaymentStatus


@pytest.mark.django_db
class TestCreateOrder:

    def test_dine_in_order(self, dine_in_order):
        assert dine_in_order.status == Status.NEW
        assert dine_in_order.payment_status == Payment.PENDING
        assert dine_in_order.total == Decimal("29.00")
        assert dine_in_order.points_earned == 29
        assert dine_in_order.revision == 1
        assert dine_in_order.fulfillment_target == "Table 5"

    def test_lines_are_stored_as_snapshots(self, dine_in_order):
        burger = dine_in_order.lines[0]

        assert burger["key"] == "1-"
        assert burger["unit_price"] == "12.90"
        assert burger["quantity"] == 2
        assert burger["line_total"] == "25.80"

    def test_duplicate_lines_are_merged(self, make_line):
        order = OrderService.create_order(
            "Dine-in",
            [make_line(2, "Teh Ais", "3.20"), make_line(2, "Teh Ais", "3.20")],
            table_number="2",
        )

        assert len(order.lines) == 1
        assert order.lines[0]["quantity"] == 2

    def test_accepts_line_dicts(self, make_line):
        line = make_line(2, "Teh Ais", "3.20", quantity=2)

        order = OrderService.create_order("Dine-in", [line.to_dict()], table_number="2")

        assert order.total == Decimal("6.40")

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError):
            OrderService.create_order("Dine-in", [], table_number="1")

    def test_dine_in_requires_table_number(self, make_line):
        with pytest.raises(ValidationError, match="table number"):
            OrderService.create_order("Dine-in", [make_line(1, "Burger", "12.90")], table_number="  ")

    @pytest.mark.parametrize("order_type", ["Takeaway", "Delivery"])
    def test_takeaway_and_delivery_require_customer_name(self, make_line, order_type):
        with pytest.raises(ValidationError, match="customer name"):
            OrderService.create_order(order_type, [make_line(1, "Burger", "12.90")])

        assert not Order.objects.exists()

    def test_unknown_order_type_rejected(self, make_line):
        with pytest.raises(ValidationError):
            OrderService.create_order("Drive-thru", [make_line(1, "Burger", "12.90")], customer_name="A")

    def test_unknown_payment_method_rejected(self, make_line):
        with pytest.raises(ValidationError):
            OrderService.create_order(
                "Dine-in", [make_line(1, "Burger", "12.90")], table_number="1", payment_method="Cheque"
            )


@pytest.mark.django_db
class TestStatusTransitions:

    def test_happy_path_completes_and_pays(self, dine_in_order, advance_order):
        order = advance_order(dine_in_order, Status.PREPARING, Status.READY, Status.COMPLETED)

        assert order.status == Status.COMPLETED
        assert order.payment_status == Payment.PAID
        assert order.revision == 4

        order.refresh_from_db()
        assert order.status == Status.COMPLETED
        assert order.payment_status == Payment.PAID

    def test_cannot_skip_a_step(self, dine_in_order):
        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.READY)

        dine_in_order.refresh_from_db()
        assert dine_in_order.status == Status.NEW
        assert dine_in_order.revision == 1

    def test_cannot_move_backwards(self, dine_in_order, advance_order):
        advance_order(dine_in_order, Status.PREPARING)

        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.NEW)

    @pytest.mark.parametrize("start", ["new", "preparing", "ready"])
    def test_cancel_from_any_open_status(self, dine_in_order, advance_order, start):
        path = {"new": [], "preparing": [Status.PREPARING], "ready": [Status.PREPARING, Status.READY]}
        advance_order(dine_in_order, *path[start])

        order = OrderService.transition_status(dine_in_order.pk, Status.CANCELLED)

        assert order.status == Status.CANCELLED
        assert order.payment_status == Payment.PENDING

    def test_cancelled_is_terminal(self, dine_in_order, advance_order):
        advance_order(dine_in_order, Status.CANCELLED)

        for target in (Status.NEW, Status.PREPARING, Status.COMPLETED):
            with pytest.raises(InvalidTransitionError):
                OrderService.transition_status(dine_in_order.pk, target)

    def test_completed_only_accepts_refund(self, dine_in_order, advance_order):
        advance_order(dine_in_order, Status.PREPARING, Status.READY, Status.COMPLETED)

        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.CANCELLED)
        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.COMPLETED)

        order = OrderService.transition_status(dine_in_order.pk, Status.COMPLETED, Payment.REFUNDED)
        assert order.status == Status.COMPLETED
        assert order.payment_status == Payment.REFUNDED

    def test_refunded_order_cannot_be_refunded_again(self, dine_in_order, advance_order):
        advance_order(dine_in_order, Status.PREPARING, Status.READY, Status.COMPLETED)
        OrderService.transition_status(dine_in_order.pk, Status.COMPLETED, Payment.REFUNDED)

        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.COMPLETED, Payment.REFUNDED)

    def test_refund_not_allowed_before_completion(self, dine_in_order, advance_order):
        advance_order(dine_in_order, Status.PREPARING)

        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.READY, Payment.REFUNDED)

    def test_cancelled_order_cannot_be_refunded(self, dine_in_order, advance_order):
        advance_order(dine_in_order, Status.CANCELLED)

        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, Status.COMPLETED, Payment.REFUNDED)

    def test_prepaid_order_stays_paid_on_completion(self, make_line, advance_order):
        order = OrderService.create_order(
            "Dine-in", [make_line(1, "Burger", "12.90")], table_number="9", payment_status=Payment.PAID
        )

        order = advance_order(order, Status.PREPARING, Status.READY, Status.COMPLETED)

        assert order.payment_status == Payment.PAID

    def test_unknown_status_rejected(self, dine_in_order):
        with pytest.raises(InvalidTransitionError):
            OrderService.transition_status(dine_in_order.pk, "eaten")

    def test_unknown_order(self, db):
        with pytest.raises(NotFoundError):
            OrderService.transition_status(999999, Status.PREPARING)


@pytest.mark.django_db
class TestEditDetails:

    def test_partial_update_keeps_other_fields(self, takeaway_order):
        order = OrderService.edit_details(takeaway_order.pk, notes="No sambal")

        order.refresh_from_db()
        assert order.notes == "No sambal"
        assert order.customer_name == "Aisyah"
        assert order.customer_phone == "012-3456789"
        assert order.revision == 2

    def test_no_changes_keeps_revision(self, takeaway_order):
        order = OrderService.edit_details(takeaway_order.pk)

        assert order.revision == 1

    @pytest.mark.parametrize("blank_name", ["", "   "])
    def test_takeaway_customer_name_cannot_be_blanked(self, takeaway_order, blank_name):
        with pytest.raises(ValidationError, match="customer name"):
            OrderService.edit_details(takeaway_order.pk, customer_name=blank_name)

        takeaway_order.refresh_from_db()
        assert takeaway_order.customer_name == "Aisyah"
        assert takeaway_order.fulfillment_target == "Aisyah"
        assert takeaway_order.revision == 1

    def test_dine_in_customer_name_may_be_cleared(self, dine_in_order):
        OrderService.edit_details(dine_in_order.pk, customer_name="Farid")

        order = OrderService.edit_details(dine_in_order.pk, customer_name="")

        assert order.customer_name == ""
        assert order.fulfillment_target == "Table 5"

    def test_blank_customer_name_via_api(self, takeaway_order, manager_client):
        response = manager_client.patch(
            f"/api/orders/{takeaway_order.pk}/details/", {"customer_name": ""}, format="json"
        )

        assert response.status_code == 400
        assert response.data["error"] == "ValidationError"

    def test_list_orders_filters(self, dine_in_order, takeaway_order):
        assert OrderService.list_orders(order_type="Takeaway") == [takeaway_order]
        assert len(OrderService.list_orders(status=Status.NEW)) == 2
