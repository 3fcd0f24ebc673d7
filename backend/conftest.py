"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
from decimal import Decimal

import pytest
from django.core.cache import cache


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test to prevent cache pollution.
    """
    yield  # Run the test
    cache.clear()


@pytest.fixture(autouse=True)
def default_loyalty_rate(settings):
    """Pin the points rate so tests do not depend on the environment."""
    settings.LOYALTY_POINTS_RATE = Decimal("1")
    settings.CURRENCY = "MYR"


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def extra_cheese(db):
    from products.models import Modifier
    return Modifier.objects.create(name="Extra Cheese", price=Decimal("2.00"))


@pytest.fixture
def extra_egg(db):
    from products.models import Modifier
    return Modifier.objects.create(name="Extra Egg", price=Decimal("1.50"))


@pytest.fixture
def burger(db, extra_cheese, extra_egg):
    """RM 12.90 burger offering cheese and egg add-ons."""
    from products.models import MenuItem
    item = MenuItem.objects.create(
        name="Classic Burger",
        price=Decimal("12.90"),
        category="Mains",
        is_featured=True,
    )
    item.modifiers.set([extra_cheese, extra_egg])
    return item


@pytest.fixture
def nasi_lemak(db):
    from products.models import MenuItem
    return MenuItem.objects.create(name="Nasi Lemak", price=Decimal("8.50"), category="Mains")


@pytest.fixture
def iced_tea(db):
    from products.models import MenuItem
    return MenuItem.objects.create(name="Teh Ais", price=Decimal("3.20"), category="Drinks")


@pytest.fixture
def sold_out_item(db):
    from products.models import MenuItem
    return MenuItem.objects.create(
        name="Durian Cendol", price=Decimal("9.00"), category="Desserts", is_available=False
    )


# ============================================================================
# CART / ORDER FIXTURES
# ============================================================================

@pytest.fixture
def make_line():
    """
    Factory for CartLine snapshots without touching the catalog.

    Usage:
        line = make_line(1, "Burger", "12.90", quantity=2, modifiers=[(10, "Cheese", "2.00")])
    """
    from cart.cart import CartLine, ModifierSnapshot

    def _make(item_id, name, price, quantity=1, modifiers=(), category=""):
        return CartLine(
            item_id=item_id,
            name=name,
            unit_price=Decimal(price),
            quantity=quantity,
            category=category,
            modifiers=tuple(ModifierSnapshot(mid, mname, Decimal(mprice)) for mid, mname, mprice in modifiers),
        )

    return _make


@pytest.fixture
def loyalty_account(db):
    from customers.services import LoyaltyService
    return LoyaltyService.get_account()


@pytest.fixture
def dine_in_order(db, make_line, loyalty_account):
    """A new Dine-in order for table 5 totalling RM 29.00 (29 points)."""
    from orders.services import OrderService
    return OrderService.create_order(
        "Dine-in",
        [make_line(1, "Classic Burger", "12.90", quantity=2), make_line(2, "Teh Ais", "3.20")],
        table_number="5",
    )


@pytest.fixture
def takeaway_order(db, make_line, loyalty_account):
    from orders.services import OrderService
    return OrderService.create_order(
        "Takeaway",
        [make_line(3, "Nasi Lemak", "8.50")],
        customer_name="Aisyah",
        customer_phone="012-3456789",
    )


@pytest.fixture
def advance_order():
    """Walk an order forward through the status graph as a manager would."""
    from orders.services import OrderService

    def _advance(order, *statuses):
        for new_status in statuses:
            order = OrderService.transition_status(order.pk, new_status)
        return order

    return _advance


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/products/menu-items/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def staff_client(db, settings):
    """
    Factory returning an API client logged in to a staff role session.

    Usage:
        def test_kitchen(staff_client):
            client = staff_client("Kitchen")
    """
    from rest_framework.test import APIClient

    def _login(role):
        client = APIClient()
        response = client.post(
            "/api/users/login/",
            {"role": role, "password": settings.STAFF_DEFAULT_PASSWORD},
            format="json",
        )
        assert response.status_code == 200, response.data
        return client

    return _login


@pytest.fixture
def manager_client(staff_client):
    return staff_client("Manager")


@pytest.fixture
def kitchen_client(staff_client):
    return staff_client("Kitchen")


@pytest.fixture
def cashier_client(staff_client):
    return staff_client("Cashier")
