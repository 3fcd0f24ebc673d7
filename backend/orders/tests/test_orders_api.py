"""
Orders API Integration Tests

Tests the complete request/response cycle for order endpoints including:
- Public order placement from catalog items
- Staff role sessions and the action policy
- Revision conflicts surfacing as 409
- Error payloads from the POS exception handler
"""
import pytest
from decimal import Decimal
from rest_framework import status

from orders.models import Order


@pytest.fixture
def place_order(api_client, burger, extra_cheese, iced_tea):
    def _place(**overrides):
        payload = {
            "order_type": "Dine-in",
            "table_number": "8",
            "lines": [
                {"item_id": burger.pk, "modifier_ids": [extra_cheese.pk], "quantity": 2},
                {"item_id": iced_tea.pk},
            ],
        }
        payload.update(overrides)
        return api_client.post("/api/orders/", payload, format="json")

    return _place


@pytest.mark.django_db
class TestPlaceOrder:

    def test_create_order_is_public(self, place_order):
        response = place_order()

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == "new"
        assert response.data["payment_status"] == "Pending"
        assert response.data["total"] == "33.00"
        assert response.data["points_earned"] == 33
        assert response.data["fulfillment_target"] == "Table 8"
        assert response.data["revision"] == 1
        assert len(response.data["lines"]) == 2

    def test_missing_table_number(self, place_order):
        response = place_order(table_number="")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["error"] == "ValidationError"
        assert not Order.objects.exists()

    def test_unknown_menu_item(self, place_order):
        response = place_order(lines=[{"item_id": 999999}])

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error"] == "NotFoundError"

    def test_unavailable_item(self, place_order, sold_out_item):
        response = place_order(lines=[{"item_id": sold_out_item.pk}])

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "unavailable" in response.data["detail"]

    def test_modifier_not_offered(self, place_order, nasi_lemak, extra_cheese):
        response = place_order(lines=[{"item_id": nasi_lemak.pk, "modifier_ids": [extra_cheese.pk]}])

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_empty_lines(self, place_order):
        response = place_order(lines=[])

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestStaffAccess:

    def test_list_requires_staff_session(self, api_client, place_order):
        place_order()

        response = api_client.get("/api/orders/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_and_filter(self, place_order, kitchen_client):
        place_order()
        place_order(order_type="Takeaway", customer_name="Mei")

        response = kitchen_client.get("/api/orders/", {"order_type": "Takeaway"})

        assert response.status_code == status.HTTP_200_OK
        assert [row["customer_name"] for row in response.data] == ["Mei"]

    def test_retrieve(self, place_order, cashier_client):
        order_id = place_order().data["id"]

        response = cashier_client.get(f"/api/orders/{order_id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == order_id

    def test_retrieve_unknown(self, cashier_client):
        response = cashier_client.get("/api/orders/999999/")

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestOrderActionsAPI:

    def test_available_actions_follow_role(self, place_order, kitchen_client, cashier_client):
        order_id = place_order().data["id"]

        kitchen = kitchen_client.get(f"/api/orders/{order_id}/actions/")
        cashier = cashier_client.get(f"/api/orders/{order_id}/actions/")

        assert kitchen.data == {"role": "Kitchen", "actions": ["start_cooking"]}
        assert cashier.data == {"role": "Cashier", "actions": []}

    def test_kitchen_to_cashier_flow(self, place_order, kitchen_client, cashier_client):
        order_id = place_order().data["id"]

        kitchen_client.post(f"/api/orders/{order_id}/actions/", {"action": "start_cooking"}, format="json")
        kitchen_client.post(f"/api/orders/{order_id}/actions/", {"action": "mark_ready"}, format="json")
        response = cashier_client.post(f"/api/orders/{order_id}/actions/", {"action": "complete"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "completed"
        assert response.data["payment_status"] == "Paid"
        assert response.data["revision"] == 4

    def test_kitchen_cannot_complete(self, place_order, kitchen_client):
        order_id = place_order().data["id"]
        for new_status in ("preparing", "ready"):
            kitchen_client.post(f"/api/orders/{order_id}/transition/", {"status": new_status}, format="json")

        response = kitchen_client.post(
            f"/api/orders/{order_id}/transition/", {"status": "completed"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error"] == "ActionNotPermittedError"
        assert Order.objects.get(pk=order_id).status == "ready"

    def test_invalid_transition(self, place_order, manager_client):
        order_id = place_order().data["id"]

        response = manager_client.post(
            f"/api/orders/{order_id}/transition/", {"status": "completed"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"] == "InvalidTransitionError"

    def test_stale_revision_conflict(self, place_order, manager_client):
        order_id = place_order().data["id"]
        manager_client.post(f"/api/orders/{order_id}/transition/", {"status": "preparing"}, format="json")

        response = manager_client.post(
            f"/api/orders/{order_id}/transition/",
            {"status": "cancelled", "expected_revision": 1},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"] == "ConflictError"

    def test_manager_refund(self, place_order, manager_client):
        order_id = place_order().data["id"]
        for new_status in ("preparing", "ready", "completed"):
            manager_client.post(f"/api/orders/{order_id}/transition/", {"status": new_status}, format="json")

        response = manager_client.post(f"/api/orders/{order_id}/actions/", {"action": "refund"}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["payment_status"] == "Refunded"


@pytest.mark.django_db
class TestAmendOrderAPI:

    def test_add_items_merges_and_credits_delta(self, place_order, kitchen_client, iced_tea):
        order_id = place_order().data["id"]

        response = kitchen_client.post(
            f"/api/orders/{order_id}/add-items/",
            {"lines": [{"item_id": iced_tea.pk, "quantity": 2}], "expected_revision": 1},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["total"] == "39.40"
        assert response.data["points_earned"] == 39
        assert response.data["lines"][1]["quantity"] == 3

    def test_manager_edits_details(self, place_order, manager_client):
        order_id = place_order().data["id"]

        response = manager_client.patch(
            f"/api/orders/{order_id}/details/", {"notes": "Birthday candle"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["notes"] == "Birthday candle"
        assert response.data["revision"] == 2

    def test_cashier_cannot_edit_details(self, place_order, cashier_client):
        order_id = place_order().data["id"]

        response = cashier_client.patch(f"/api/orders/{order_id}/details/", {"notes": "x"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestSummaryAPI:

    def test_manager_summary(self, place_order, manager_client):
        order_id = place_order().data["id"]
        for new_status in ("preparing", "ready", "completed"):
            manager_client.post(f"/api/orders/{order_id}/transition/", {"status": new_status}, format="json")

        response = manager_client.get("/api/orders/summary/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["revenue"] == "33.00"
        assert response.data["top_selling_item"] == "Classic Burger"
        assert Decimal(response.data["revenue"]) == Decimal("33.00")

    def test_summary_is_manager_only(self, cashier_client):
        response = cashier_client.get("/api/orders/summary/")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_bad_date(self, manager_client):
        response = manager_client.get("/api/orders/summary/", {"date": "yesterday"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestCustomerOrderAPI:
    """Customer-side flows that need no staff login."""

    def test_customer_polls_order_status(self, api_client, place_order, kitchen_client):
        order_id = place_order().data["id"]
        kitchen_client.post(f"/api/orders/{order_id}/actions/", {"action": "start_cooking"}, format="json")

        response = api_client.get(f"/api/orders/{order_id}/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == "preparing"

    def test_customer_adds_items_to_own_order(self, api_client, place_order, iced_tea, loyalty_account):
        order_id = place_order().data["id"]

        response = api_client.post(
            f"/api/orders/{order_id}/add-items/",
            {"lines": [{"item_id": iced_tea.pk}]},
            format="json",
        )

        loyalty_account.refresh_from_db()
        assert response.status_code == status.HTTP_200_OK
        assert response.data["total"] == "36.20"
        assert response.data["lines"][1]["quantity"] == 2
        assert loyalty_account.points == 36

    def test_customer_cannot_add_to_completed_order(self, api_client, place_order, manager_client, iced_tea):
        order_id = place_order().data["id"]
        for new_status in ("preparing", "ready", "completed"):
            manager_client.post(f"/api/orders/{order_id}/transition/", {"status": new_status}, format="json")

        response = api_client.post(
            f"/api/orders/{order_id}/add-items/", {"lines": [{"item_id": iced_tea.pk}]}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data["error"] == "InvalidStateError"

    def test_customer_cannot_change_status(self, api_client, place_order):
        order_id = place_order().data["id"]

        response = api_client.post(f"/api/orders/{order_id}/transition/", {"status": "cancelled"}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Order.objects.get(pk=order_id).status == "new"
