"""
Order domain objects and the in-memory order store.

Orders only live for the lifetime of the process, so these are plain
dataclasses rather than ORM models. ``OrderStatus`` still uses Django's
``TextChoices`` so status values and labels read the same as elsewhere in
the project.
"""
import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from django.db import models
from django.utils import timezone

logger = logging.getLogger(__name__)


class OrderStatus(models.TextChoices):
    AWAITING_PAYMENT = "AWAITING_PAYMENT", "Awaiting Payment"
    ACCEPTED = "ACCEPTED", "Accepted"
    COOKING = "COOKING", "Cooking"
    READY = "READY", "Ready"
    SERVED = "SERVED", "Served"


@dataclass(frozen=True)
class OrderItem:
    name: str
    price: Decimal
    quantity: int

    @property
    def total_price(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Order:
    """
    A customer order.

    - id: unique, strictly increasing, assigned by OrderStore
    - items: ordered line items as submitted
    - status: current pipeline stage; only OrderStore changes it
    - created_at: creation time (aware datetime), never changes
    """

    id: int
    items: List[OrderItem]
    status: str
    created_at: datetime = field(default_factory=timezone.now)

    @property
    def total(self) -> Decimal:
        return sum((item.total_price for item in self.items), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def get_status_display(self) -> str:
        return OrderStatus(self.status).label


class OrderStore:
    """
    Holds every order created during the process lifetime, in creation order.

    All reads and writes go through ``self._lock`` so the status guard in
    ``compare_and_set_status`` is atomic with respect to other commands.
    """

    def __init__(self) -> None:
        self._orders: Dict[int, Order] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def create(self, items: List[OrderItem], status: str) -> Order:
        """Allocate the next id and store a new order."""
        with self._lock:
            order = Order(id=next(self._ids), items=list(items), status=status)
            self._orders[order.id] = order
            return order

    def get(self, order_id: int) -> Optional[Order]:
        with self._lock:
            return self._orders.get(order_id)

    def all(self) -> List[Order]:
        with self._lock:
            return list(self._orders.values())

    def compare_and_set_status(self, order_id: int, expected: str, new_status: str) -> Optional[Order]:
        """
        Set the order's status to ``new_status`` only if it currently equals
        ``expected``. Returns the order on success, None otherwise.
        """
        with self._lock:
            order = self._orders.get(order_id)
            if order is None or order.status != expected:
                return None
            order.status = new_status
            return order

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
