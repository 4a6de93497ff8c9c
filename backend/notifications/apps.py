import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"

    def ready(self):
        if getattr(settings, "WEBPUSH_VAPID_PUBLIC_KEY", "") and getattr(
            settings, "WEBPUSH_VAPID_PRIVATE_KEY", ""
        ):
            logger.info("Web Push configured.")
        else:
            logger.warning(
                "VAPID keys are not set (VAPID_PUBLIC_KEY / VAPID_PRIVATE_KEY). "
                "Push notifications will fail; live connections still work."
            )
