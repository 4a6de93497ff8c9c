import logging
from concurrent.futures import Future
from typing import Any, Dict, Optional

from .push import PushDispatcher, PushSubscriptionExpired
from .registries import LiveConnectionRegistry, PushSubscriptionRegistry

logger = logging.getLogger(__name__)


def build_ready_payload(order_id: int) -> Dict[str, str]:
    """Push payload rendered as a system notification by the customer's device."""
    return {
        "title": "Your order is ready!",
        "body": f"Order #{order_id}: please come to the counter to pick it up.",
    }


class NotificationRouter:
    """
    Delivers the "ready for pickup" alert to the customer of one order.

    The live websocket (if registered) is told immediately; the push
    subscription (if registered) is handed to the dispatcher and cleaned up
    when delivery resolves. There is no de-duplication: two ``notify`` calls
    for the same order before the first push resolves reach the customer
    twice.
    """

    def __init__(
        self,
        connections: LiveConnectionRegistry,
        subscriptions: PushSubscriptionRegistry,
        event_bus,
        dispatcher: PushDispatcher,
    ):
        self.connections = connections
        self.subscriptions = subscriptions
        self.event_bus = event_bus
        self.dispatcher = dispatcher

    def notify(self, order_id: int) -> Optional[Future]:
        channel_name = self.connections.get(order_id)
        if channel_name:
            self.event_bus.send_order_ready(channel_name, order_id)

        subscription = self.subscriptions.get(order_id)
        if not subscription:
            if not channel_name:
                logger.info(f"Order {order_id} is ready but the customer has no registered channel")
            return None

        future = self.dispatcher.dispatch(subscription, build_ready_payload(order_id))
        logger.info(f"Push notification dispatched for order {order_id}")
        future.add_done_callback(lambda f: self._on_push_resolved(order_id, f))
        return future

    def _on_push_resolved(self, order_id: int, future: Future) -> None:
        error = future.exception()
        if error is None:
            # Consumed: a repeated trigger must no longer reach this customer.
            self.subscriptions.pop(order_id)
            self.connections.pop(order_id)
            logger.info(f"Push notification delivered for order {order_id}")
        elif isinstance(error, PushSubscriptionExpired):
            self.subscriptions.pop(order_id)
            logger.warning(f"Push subscription for order {order_id} expired; removed it: {error}")
        else:
            # Transient failures are not retried.
            logger.warning(f"Push notification for order {order_id} failed: {error}")

    def connection_for(self, order_id: int) -> Optional[str]:
        """Channel name of the live connection registered for the order, if any."""
        return self.connections.get(order_id)

    def register_connection(self, order_id: int, channel_name: str) -> None:
        self.connections.register(order_id, channel_name)

    def subscribe(self, order_id: int, subscription: Dict[str, Any]) -> None:
        self.subscriptions.subscribe(order_id, subscription)

    def disconnect(self, channel_name: str):
        return self.connections.discard_handle(channel_name)
