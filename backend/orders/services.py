import logging
from typing import Iterable, List, Optional

from .models import Order, OrderItem, OrderStore
from .pipeline import Pipeline, Stage
from .signals import order_submitted, order_transitioned, transition_rejected

logger = logging.getLogger(__name__)


class OrderValidationError(ValueError):
    """A submitted order was rejected; the message is safe to show the client."""


class OrderLifecycleService:
    """
    Applies submit and advance commands to the order store.

    Advance commands that do not match the pipeline (unknown order, wrong
    current stage, wrong role) are ignored without an error so duplicate or
    late taps from several terminals are harmless. Each ignored command still
    sends ``transition_rejected`` and logs at debug level.
    """

    def __init__(self, store: OrderStore, pipeline: Pipeline, event_bus, notification_router):
        self.store = store
        self.pipeline = pipeline
        self.event_bus = event_bus
        self.notification_router = notification_router

    def submit_order(self, items: Optional[Iterable[OrderItem]]) -> Order:
        items = list(items or [])
        if not items:
            raise OrderValidationError("Order must contain at least one item.")

        first = self.pipeline.first
        order = self.store.create(items, first.status)
        logger.info(f"Order {order.id} submitted with {order.item_count} item(s), status {order.status}")

        self.event_bus.broadcast(first.audience, first.event, order)
        order_submitted.send(sender=self.__class__, order=order)
        return order

    def advance(self, order_id: int, target_status: str, role: Optional[str] = None) -> Optional[Order]:
        """
        Move the order to ``target_status`` if it is currently in that stage's
        predecessor. Returns the order on success, None if ignored.
        """
        stage = self.pipeline.stage(target_status)
        predecessor = self.pipeline.predecessor(target_status)
        if stage is None or predecessor is None:
            return self._reject(order_id, target_status, role, "not an advanceable stage")

        if role is not None and role != stage.role:
            return self._reject(order_id, target_status, role, f"requires role {stage.role}")

        order = self.store.compare_and_set_status(order_id, predecessor.status, stage.status)
        if order is None:
            reason = "unknown order" if self.store.get(order_id) is None else f"not in {predecessor.status}"
            return self._reject(order_id, target_status, role, reason)

        logger.info(f"Order {order_id}: {predecessor.status} -> {stage.status}")
        self._fan_out(order, stage)
        order_transitioned.send(
            sender=self.__class__, order=order, previous_status=predecessor.status, stage=stage
        )
        return order

    def advance_by_command(self, order_id: int, command: str, role: Optional[str] = None) -> Optional[Order]:
        stage = self.pipeline.stage_for_command(command)
        if stage is None:
            return self._reject(order_id, None, role, f"unknown command {command!r}")
        return self.advance(order_id, stage.status, role=role)

    def orders(self) -> List[Order]:
        return self.store.all()

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.store.get(order_id)

    def _fan_out(self, order: Order, stage: Stage) -> None:
        self.event_bus.broadcast(stage.audience, stage.event, order)

        if stage.settles_payment:
            channel_name = self.notification_router.connection_for(order.id)
            if channel_name:
                self.event_bus.send_payment_confirmed(channel_name, order)

        if stage.notifies_customer:
            self.notification_router.notify(order.id)

    def _reject(self, order_id, target_status, role, reason) -> None:
        order = self.store.get(order_id)
        current_status = order.status if order else None
        logger.debug(
            f"Ignored transition of order {order_id} to {target_status} "
            f"(current {current_status}, role {role}): {reason}"
        )
        transition_rejected.send(
            sender=self.__class__,
            order_id=order_id,
            target_status=target_status,
            current_status=current_status,
            role=role,
            reason=reason,
        )
        return None
