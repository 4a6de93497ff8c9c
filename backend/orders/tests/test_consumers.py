"""
WebSocket Consumer Tests

Operator terminals (kitchen, cashier) and the customer order page, driven
through the real ASGI routing and the in-memory channel layer.
"""
import json

import pytest
from asgiref.sync import sync_to_async
from channels.testing import WebsocketCommunicator

from counter_backend.asgi import application
from orders.models import OrderStatus


async def connect_operator(role):
    communicator = WebsocketCommunicator(application, f"/ws/operators/{role}/")
    connected, _ = await communicator.connect()
    assert connected
    snapshot = await communicator.receive_json_from()
    return communicator, snapshot


async def connect_customer(query=""):
    communicator = WebsocketCommunicator(application, f"/ws/customer/{query}")
    connected, _ = await communicator.connect()
    assert connected
    return communicator


# ============================================================================
# OPERATOR TERMINALS
# ============================================================================

class TestOperatorConsumer:
    @pytest.mark.asyncio
    async def test_snapshot_on_connect(self, installed_desk, burger):
        await sync_to_async(installed_desk.lifecycle.submit_order)(burger)

        communicator, snapshot = await connect_operator("kitchen")

        assert snapshot["type"] == "initial_orders"
        assert [o["id"] for o in snapshot["orders"]] == [1]
        assert snapshot["orders"][0]["status"] == OrderStatus.COOKING
        await communicator.disconnect()

    @pytest.mark.asyncio
    async def test_unknown_role_rejected(self, installed_desk):
        communicator = WebsocketCommunicator(application, "/ws/operators/manager/")
        connected, code = await communicator.connect()

        assert not connected
        assert code == 4004

    @pytest.mark.asyncio
    async def test_submission_broadcast_to_every_terminal(self, installed_desk):
        kitchen, _ = await connect_operator("kitchen")
        cashier, _ = await connect_operator("cashier")

        await cashier.send_json_to(
            {"action": "submit_order", "items": [{"name": "Burger", "price": "5.00", "quantity": 1}]}
        )

        for communicator in (kitchen, cashier):
            message = await communicator.receive_json_from()
            assert message["type"] == "new_kitchen_order"
            assert message["order"]["id"] == 1
            assert message["order"]["total"] == "5.00"

        await kitchen.disconnect()
        await cashier.disconnect()

    @pytest.mark.asyncio
    async def test_command_advances_and_broadcasts(self, installed_desk, burger):
        order = await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        kitchen, _ = await connect_operator("kitchen")
        cashier, _ = await connect_operator("cashier")

        await kitchen.send_json_to({"action": "cooking_complete", "order_id": order.id})

        for communicator in (kitchen, cashier):
            message = await communicator.receive_json_from()
            assert message["type"] == "status_updated"
            assert message["order"]["status"] == OrderStatus.AWAITING_PAYMENT

        await kitchen.disconnect()
        await cashier.disconnect()

    @pytest.mark.asyncio
    async def test_command_from_wrong_role_is_ignored(self, installed_desk, burger):
        order = await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        cashier, _ = await connect_operator("cashier")

        await cashier.send_json_to({"action": "cooking_complete", "order_id": order.id})

        assert await cashier.receive_nothing()
        assert installed_desk.store.get(order.id).status == OrderStatus.COOKING
        await cashier.disconnect()

    @pytest.mark.asyncio
    async def test_advance_by_status(self, installed_desk, burger):
        order = await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        kitchen, _ = await connect_operator("kitchen")

        await kitchen.send_json_to(
            {"action": "advance", "order_id": order.id, "status": OrderStatus.AWAITING_PAYMENT}
        )

        message = await kitchen.receive_json_from()
        assert message["order"]["status"] == OrderStatus.AWAITING_PAYMENT
        await kitchen.disconnect()

    @pytest.mark.asyncio
    async def test_empty_submission_reports_error(self, installed_desk):
        kitchen, _ = await connect_operator("kitchen")

        await kitchen.send_json_to({"action": "submit_order", "items": []})

        message = await kitchen.receive_json_from()
        assert message["type"] == "error"
        assert len(installed_desk.store) == 0
        await kitchen.disconnect()

    @pytest.mark.asyncio
    async def test_unknown_action_and_bad_json(self, installed_desk):
        kitchen, _ = await connect_operator("kitchen")

        await kitchen.send_json_to({"action": "self_destruct"})
        unknown = await kitchen.receive_json_from()
        await kitchen.send_to(text_data="{not json")
        invalid = await kitchen.receive_json_from()

        assert unknown == {"type": "error", "message": "Unknown action: self_destruct"}
        assert invalid["type"] == "error"
        await kitchen.disconnect()

    @pytest.mark.asyncio
    async def test_ping_and_refresh(self, installed_desk, burger):
        kitchen, _ = await connect_operator("kitchen")
        await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        await kitchen.receive_json_from()

        await kitchen.send_json_to({"action": "ping"})
        pong = await kitchen.receive_json_from()
        await kitchen.send_json_to({"action": "refresh_data"})
        refreshed = await kitchen.receive_json_from()

        assert pong["type"] == "pong"
        assert refreshed["type"] == "initial_orders"
        assert len(refreshed["orders"]) == 1
        await kitchen.disconnect()


# ============================================================================
# CUSTOMER PAGE
# ============================================================================

class TestCustomerConsumer:
    @pytest.mark.asyncio
    async def test_register_with_query_parameter(self, installed_desk):
        customer = await connect_customer("?order_id=5")

        message = await customer.receive_json_from()

        assert message == {"type": "registered", "order_id": 5}
        assert installed_desk.connections.get(5) is not None
        await customer.disconnect()

    @pytest.mark.asyncio
    async def test_register_with_message(self, installed_desk):
        customer = await connect_customer()

        await customer.send_json_to({"action": "register_customer", "order_id": "6"})
        message = await customer.receive_json_from()

        assert message == {"type": "registered", "order_id": 6}
        assert 6 in installed_desk.connections
        await customer.disconnect()

    @pytest.mark.asyncio
    async def test_ready_alert_and_receipt(self, installed_desk, burger):
        """
        CRITICAL: The customer sees "ready" when the kitchen finishes and a
        receipt when the cashier confirms payment.
        """
        order = await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        customer = await connect_customer(f"?order_id={order.id}")
        await customer.receive_json_from()
        kitchen, _ = await connect_operator("kitchen")
        cashier, _ = await connect_operator("cashier")

        await kitchen.send_json_to({"action": "cooking_complete", "order_id": order.id})
        ready = await customer.receive_json_from()
        await cashier.receive_json_from()

        await cashier.send_json_to({"action": "confirm_payment", "order_id": order.id})
        receipt = await customer.receive_json_from()

        assert ready == {"type": "order_ready", "order_id": order.id}
        assert receipt["type"] == "payment_confirmed"
        assert receipt["order"]["status"] == OrderStatus.SERVED
        assert receipt["order"]["total"] == "5.00"
        assert receipt["order"]["items"][0]["name"] == "Burger"

        for communicator in (customer, kitchen, cashier):
            await communicator.disconnect()

    @pytest.mark.asyncio
    async def test_other_customers_hear_nothing(self, installed_desk, burger):
        order = await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        other = await connect_customer(f"?order_id={order.id + 1}")
        await other.receive_json_from()

        await sync_to_async(installed_desk.lifecycle.advance_by_command)(order.id, "cooking_complete")

        assert await other.receive_nothing()
        await other.disconnect()

    @pytest.mark.asyncio
    async def test_disconnect_unregisters(self, installed_desk):
        customer = await connect_customer("?order_id=8")
        await customer.receive_json_from()

        await customer.disconnect()

        assert 8 not in installed_desk.connections

    @pytest.mark.asyncio
    async def test_disconnect_keeps_subscription_and_order(self, installed_desk, burger, subscription):
        """
        HIGH: Closing the customer page only drops the live connection.

        The push subscription stays so the ready alert still reaches the
        device, and the order itself is untouched.
        """
        order = await sync_to_async(installed_desk.lifecycle.submit_order)(burger)
        await sync_to_async(installed_desk.notifications.subscribe)(order.id, subscription)
        customer = await connect_customer(f"?order_id={order.id}")
        await customer.receive_json_from()

        await customer.disconnect()

        assert order.id not in installed_desk.connections
        assert installed_desk.subscriptions.get(order.id) == subscription
        assert installed_desk.store.get(order.id).status == OrderStatus.COOKING

    @pytest.mark.asyncio
    async def test_register_without_order_id(self, installed_desk):
        customer = await connect_customer()

        await customer.send_to(text_data=json.dumps({"action": "register_customer"}))
        message = await customer.receive_json_from()

        assert message["type"] == "error"
        assert len(installed_desk.connections) == 0
        await customer.disconnect()
