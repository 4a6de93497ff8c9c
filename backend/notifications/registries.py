"""
Per-order customer channel registries.

Both registries are touched from request handlers, websocket consumers and
push-delivery worker threads, so every operation takes the registry lock and
removal is always an atomic delete-if-present.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class _OrderKeyedRegistry:
    kind = "entry"

    def __init__(self) -> None:
        self._entries: Dict[int, Any] = {}
        self._lock = threading.Lock()

    def get(self, order_id: int) -> Optional[Any]:
        with self._lock:
            return self._entries.get(order_id)

    def pop(self, order_id: int) -> Optional[Any]:
        """Remove and return the entry for ``order_id``; None if absent."""
        with self._lock:
            value = self._entries.pop(order_id, None)
        if value is not None:
            logger.debug(f"Removed {self.kind} for order {order_id}")
        return value

    def __contains__(self, order_id: int) -> bool:
        with self._lock:
            return order_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def snapshot(self) -> Dict[int, Any]:
        with self._lock:
            return dict(self._entries)


class LiveConnectionRegistry(_OrderKeyedRegistry):
    """order id -> channel name of the customer's open websocket."""

    kind = "live connection"

    def register(self, order_id: int, channel_name: str) -> None:
        """Bind ``channel_name`` to the order, replacing any older connection."""
        with self._lock:
            previous = self._entries.get(order_id)
            self._entries[order_id] = channel_name
        if previous and previous != channel_name:
            logger.info(f"Order {order_id}: customer connection {previous} replaced by {channel_name}")
        else:
            logger.info(f"Order {order_id}: customer connection {channel_name} registered")

    def discard_handle(self, channel_name: str) -> List[int]:
        """Remove every entry bound to ``channel_name``; return the affected order ids."""
        with self._lock:
            order_ids = [oid for oid, handle in self._entries.items() if handle == channel_name]
            for oid in order_ids:
                del self._entries[oid]
        if order_ids:
            logger.info(f"Connection {channel_name} closed; unregistered orders {order_ids}")
        return order_ids


class PushSubscriptionRegistry(_OrderKeyedRegistry):
    """order id -> Web Push subscription descriptor from the customer's device."""

    kind = "push subscription"

    def subscribe(self, order_id: int, subscription: Dict[str, Any]) -> None:
        with self._lock:
            self._entries[order_id] = subscription
        logger.info(f"Order {order_id}: push subscription stored")
