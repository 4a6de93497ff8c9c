"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
from decimal import Decimal

import pytest

from notifications.push import PushDispatcher
from orders.desk import OrderDesk, get_order_desk, set_order_desk
from orders.models import OrderItem
from orders.pipeline import COOK_FIRST
from orders.tests.doubles import SUBSCRIPTION, FakePushDelivery, RecordingEventBus


# ============================================================================
# DESK FIXTURES
# ============================================================================

@pytest.fixture
def push_delivery():
    return FakePushDelivery()


@pytest.fixture
def event_bus():
    return RecordingEventBus()


@pytest.fixture
def desk(event_bus, push_delivery):
    """A fresh cook-first desk with recorded events and fake push delivery."""
    desk = OrderDesk(
        pipeline=COOK_FIRST,
        event_bus=event_bus,
        dispatcher=PushDispatcher(delivery_service=push_delivery, max_workers=2),
    )
    yield desk
    desk.shutdown()


@pytest.fixture
def installed_desk(push_delivery):
    """
    A fresh desk wired to the real channel layer and installed as the
    process desk for views and consumers. The previous desk is restored
    afterwards.
    """
    previous = get_order_desk()
    desk = OrderDesk(
        pipeline=COOK_FIRST,
        dispatcher=PushDispatcher(delivery_service=push_delivery, max_workers=2),
    )
    set_order_desk(desk)
    yield desk
    desk.shutdown()
    set_order_desk(previous)


# ============================================================================
# DATA FIXTURES
# ============================================================================

@pytest.fixture
def burger():
    return [OrderItem(name="Burger", price=Decimal("5"), quantity=1)]


@pytest.fixture
def subscription():
    return {**SUBSCRIPTION, "keys": dict(SUBSCRIPTION["keys"])}


@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/orders/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()
