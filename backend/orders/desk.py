"""
OrderDesk owns every piece of process-wide state (orders, customer
registries) and wires the services that operate on it. One desk is created by
``OrdersConfig.ready`` and handed to views and consumers through
``get_order_desk``; tests build their own.
"""
from typing import Optional

from django.apps import apps

from notifications.push import PushDispatcher
from notifications.registries import LiveConnectionRegistry, PushSubscriptionRegistry
from notifications.services import NotificationRouter

from .events import OrderEventBus
from .models import OrderStore
from .pipeline import Pipeline, get_pipeline
from .services import OrderLifecycleService


class OrderDesk:
    def __init__(
        self,
        pipeline: Optional[Pipeline] = None,
        event_bus=None,
        dispatcher: Optional[PushDispatcher] = None,
    ):
        self.pipeline = pipeline or get_pipeline()
        self.store = OrderStore()
        self.connections = LiveConnectionRegistry()
        self.subscriptions = PushSubscriptionRegistry()
        self.event_bus = event_bus or OrderEventBus()
        self.dispatcher = dispatcher or PushDispatcher()
        self.notifications = NotificationRouter(
            self.connections, self.subscriptions, self.event_bus, self.dispatcher
        )
        self.lifecycle = OrderLifecycleService(
            self.store, self.pipeline, self.event_bus, self.notifications
        )

    def shutdown(self):
        self.dispatcher.shutdown(wait=True)


def get_order_desk() -> OrderDesk:
    return apps.get_app_config("orders").desk


def set_order_desk(desk: OrderDesk) -> None:
    apps.get_app_config("orders").desk = desk
