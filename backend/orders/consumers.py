import json
import logging
from datetime import datetime
from urllib.parse import parse_qs

from channels.generic.websocket import AsyncWebsocketConsumer
from asgiref.sync import sync_to_async

from .desk import get_order_desk
from .events import OrderEventBus, operator_group_name
from .pipeline import OPERATOR_ROLES
from .serializers import OrderSubmitSerializer
from .services import OrderValidationError

logger = logging.getLogger(__name__)


def _parse_order_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class OperatorConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for kitchen and cashier terminals.

    On connect the terminal joins its role's group and receives a snapshot of
    every order; afterwards it receives a broadcast for every submission and
    every applied transition.
    """

    async def connect(self):
        self.role = self.scope["url_route"]["kwargs"].get("role")
        if self.role not in OPERATOR_ROLES:
            logger.warning(f"OperatorConsumer: unknown role {self.role!r}. Closing connection.")
            await self.close(code=4004)
            return

        self.desk = get_order_desk()
        self.group_name = operator_group_name(self.role)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        orders = await sync_to_async(self.desk.lifecycle.orders)()
        await self.send(text_data=json.dumps(OrderEventBus.snapshot(orders)))
        logger.info(f"Operator terminal connected: role={self.role}, channel={self.channel_name}")

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"Operator terminal disconnected: role={self.role}, code={close_code}")

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send_error("Invalid JSON format")
            return

        action = data.get("action")
        try:
            if action == "ping":
                await self.send(text_data=json.dumps({"type": "pong", "timestamp": datetime.now().isoformat()}))
            elif action == "submit_order":
                await self.handle_submit_order(data)
            elif action == "advance":
                await self.handle_advance(data)
            elif action == "refresh_data":
                orders = await sync_to_async(self.desk.lifecycle.orders)()
                await self.send(text_data=json.dumps(OrderEventBus.snapshot(orders)))
            elif action and self.desk.pipeline.stage_for_command(action):
                await self.handle_command(action, data)
            else:
                await self.send_error(f"Unknown action: {action}")
        except Exception as e:
            logger.error(f"Error processing {action} from {self.role} terminal: {e}")
            await self.send_error("Error processing request")

    async def handle_submit_order(self, data):
        serializer = OrderSubmitSerializer(data={"items": data.get("items") or []})
        if not serializer.is_valid():
            await self.send_error("Invalid order items", details=serializer.errors)
            return
        try:
            await sync_to_async(self.desk.lifecycle.submit_order)(serializer.get_order_items())
        except OrderValidationError as e:
            await self.send_error(str(e))

    async def handle_advance(self, data):
        order_id = _parse_order_id(data.get("order_id"))
        target_status = data.get("status")
        if order_id is None or not target_status:
            await self.send_error("Missing order_id or status")
            return
        await sync_to_async(self.desk.lifecycle.advance)(order_id, target_status, role=self.role)

    async def handle_command(self, command, data):
        order_id = _parse_order_id(data.get("order_id"))
        if order_id is None:
            await self.send_error("Missing order_id")
            return
        await sync_to_async(self.desk.lifecycle.advance_by_command)(order_id, command, role=self.role)

    async def order_event(self, event):
        """Broadcast from the order event bus."""
        await self.send(text_data=json.dumps({"type": event["event"], "order": event["order"]}))

    async def send_error(self, message, details=None):
        payload = {"type": "error", "message": message}
        if details:
            payload["details"] = details
        await self.send(text_data=json.dumps(payload))


class CustomerConsumer(AsyncWebsocketConsumer):
    """
    WebSocket consumer for the customer's order page.

    The page registers the order number it is waiting for, either with an
    ``order_id`` query parameter or a ``register_customer`` message. The
    connection then receives ``order_ready`` and ``payment_confirmed`` for
    that order.
    """

    async def connect(self):
        self.desk = get_order_desk()
        await self.accept()

        query_params = parse_qs(self.scope.get("query_string", b"").decode())
        order_id = _parse_order_id(query_params.get("order_id", [None])[0])
        if order_id is not None:
            await self.register(order_id)

    async def disconnect(self, close_code):
        if hasattr(self, "desk"):
            await sync_to_async(self.desk.notifications.disconnect)(self.channel_name)

    async def receive(self, text_data):
        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            await self.send(text_data=json.dumps({"type": "error", "message": "Invalid JSON format"}))
            return

        action = data.get("action")
        if action == "register_customer":
            order_id = _parse_order_id(data.get("order_id"))
            if order_id is None:
                await self.send(text_data=json.dumps({"type": "error", "message": "Missing order_id"}))
                return
            await self.register(order_id)
        elif action == "ping":
            await self.send(text_data=json.dumps({"type": "pong", "timestamp": datetime.now().isoformat()}))
        else:
            logger.warning(f"Unknown message type from customer connection {self.channel_name}: {action}")

    async def register(self, order_id):
        await sync_to_async(self.desk.notifications.register_connection)(order_id, self.channel_name)
        await self.send(text_data=json.dumps({"type": "registered", "order_id": order_id}))

    async def customer_event(self, event):
        """Unicast from the order event bus."""
        await self.send(text_data=json.dumps({"type": event["event"], **event["data"]}))
