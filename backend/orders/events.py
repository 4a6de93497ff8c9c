from typing import Any, Dict, Iterable
import logging

from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

from .serializers import serialize_order

logger = logging.getLogger(__name__)


def operator_group_name(role: str) -> str:
    """Channels group joined by every operator terminal of ``role``."""
    return f"operators_{role}"


class OrderEventBus:
    """
    Relays order events over the channel layer.

    Broadcasts go to operator groups (kitchen, cashier terminals); unicasts go
    to the single channel registered for a customer's order.
    """

    def __init__(self, channel_layer=None):
        self.channel_layer = channel_layer or get_channel_layer()

    def broadcast(self, audience: Iterable[str], event_type: str, order) -> None:
        """Send ``event_type`` with the serialized order to each role's group."""
        if not self.channel_layer:
            logger.warning("No channel layer available for broadcasts")
            return

        payload = serialize_order(order)
        for role in audience:
            group_name = operator_group_name(role)
            try:
                async_to_sync(self.channel_layer.group_send)(
                    group_name,
                    {
                        "type": "order.event",
                        "event": event_type,
                        "order": payload,
                    },
                )
                logger.debug(f"Broadcast {event_type} for order {order.id} to {group_name}")
            except Exception as e:
                logger.error(f"Error broadcasting {event_type} for order {order.id} to {group_name}: {e}")

    def unicast(self, channel_name: str, event_type: str, data: Dict[str, Any]) -> None:
        """Send ``event_type`` to exactly one connection."""
        if not self.channel_layer:
            logger.warning("No channel layer available for unicasts")
            return

        try:
            async_to_sync(self.channel_layer.send)(
                channel_name,
                {
                    "type": "customer.event",
                    "event": event_type,
                    "data": data,
                },
            )
            logger.info(f"Sent {event_type} to customer connection {channel_name}")
        except Exception as e:
            logger.error(f"Error sending {event_type} to {channel_name}: {e}")

    def send_order_ready(self, channel_name: str, order_id: int) -> None:
        self.unicast(channel_name, "order_ready", {"order_id": order_id})

    def send_payment_confirmed(self, channel_name: str, order) -> None:
        """Digital receipt: the full itemized order including its total."""
        self.unicast(channel_name, "payment_confirmed", {"order": serialize_order(order)})

    @staticmethod
    def snapshot(orders) -> Dict[str, Any]:
        """Initial state frame for a newly connected operator terminal."""
        return {
            "type": "initial_orders",
            "orders": [serialize_order(order) for order in orders],
        }
