import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    desk = None

    def ready(self):
        # Import here to avoid circular imports
        from .desk import OrderDesk

        self.desk = OrderDesk()
        logger.info(f"Order desk ready using {self.desk.pipeline!r}")
