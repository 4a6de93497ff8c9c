"""
Web Push delivery.

``WebPushDeliveryService`` sends one payload to one subscription and
classifies failures; ``PushDispatcher`` runs deliveries on a small thread pool
so the command that triggered them never waits on the push service.
"""
import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Optional

import requests
from django.conf import settings
from pywebpush import WebPushException, webpush

logger = logging.getLogger(__name__)

# Push services answer 404/410 once a subscription has expired or been revoked.
EXPIRED_SUBSCRIPTION_STATUS_CODES = (404, 410)


class PushDeliveryError(Exception):
    """A push delivery failed; the subscription may still be valid."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class PushSubscriptionExpired(PushDeliveryError):
    """The push endpoint is gone and must not be used again."""


class WebPushDeliveryService:
    def __init__(self, vapid_private_key=None, vapid_claims_sub=None, ttl=None, timeout=None):
        self.vapid_private_key = (
            vapid_private_key
            if vapid_private_key is not None
            else getattr(settings, "WEBPUSH_VAPID_PRIVATE_KEY", "")
        )
        self.vapid_claims_sub = vapid_claims_sub or getattr(
            settings, "WEBPUSH_VAPID_CLAIMS_SUB", "mailto:test@example.com"
        )
        self.ttl = ttl if ttl is not None else getattr(settings, "WEBPUSH_TTL", 3600)
        self.timeout = timeout if timeout is not None else getattr(settings, "PUSH_REQUEST_TIMEOUT", 10)

    @property
    def is_configured(self) -> bool:
        return bool(self.vapid_private_key)

    def send(self, subscription: Dict[str, Any], payload: Dict[str, Any]) -> None:
        """
        Deliver ``payload`` as JSON to ``subscription``.

        Raises:
            PushSubscriptionExpired: the endpoint answered 404 or 410.
            PushDeliveryError: any other failure, including missing VAPID keys.
        """
        if not self.is_configured:
            raise PushDeliveryError("VAPID keys are not configured")

        try:
            webpush(
                subscription_info=subscription,
                data=json.dumps(payload),
                vapid_private_key=self.vapid_private_key,
                # pywebpush adds "aud" to the claims dict, so never share it
                vapid_claims={"sub": self.vapid_claims_sub},
                ttl=self.ttl,
                timeout=self.timeout,
            )
        except WebPushException as e:
            status_code = getattr(e.response, "status_code", None)
            if status_code in EXPIRED_SUBSCRIPTION_STATUS_CODES:
                raise PushSubscriptionExpired(
                    f"Push subscription expired ({status_code})", status_code=status_code
                ) from e
            raise PushDeliveryError(f"Push delivery failed: {e}", status_code=status_code) from e
        except requests.RequestException as e:
            raise PushDeliveryError(f"Push service unreachable: {e}") from e


class PushDispatcher:
    """Runs push deliveries in the background and hands back a Future."""

    def __init__(self, delivery_service: Optional[WebPushDeliveryService] = None, max_workers=None):
        self.delivery_service = delivery_service or WebPushDeliveryService()
        self.max_workers = max_workers or getattr(settings, "PUSH_DISPATCH_WORKERS", 4)
        self._executor: Optional[ThreadPoolExecutor] = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers, thread_name_prefix="push-dispatch"
            )
        return self._executor

    def dispatch(self, subscription: Dict[str, Any], payload: Dict[str, Any]) -> Future:
        return self._get_executor().submit(self.delivery_service.send, subscription, payload)

    def shutdown(self, wait=True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
