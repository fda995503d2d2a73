"""
Отправка Web Push уведомлений (VAPID).
"""
import logging

from pywebpush import webpush, WebPushException

from app.core.config import settings

logger = logging.getLogger(__name__)


class WebPushSender:
    """Отправляет текст уведомления на сохранённую подписку браузера."""

    def __init__(self, private_key: str | None = None, claims_email: str | None = None, ttl: int = 86400):
        self.private_key = private_key if private_key is not None else settings.VAPID_PRIVATE_KEY
        self.claims_email = claims_email or settings.VAPID_CLAIMS_EMAIL
        self.ttl = ttl

    def send(self, subscription: dict, payload: str) -> None:
        if not self.private_key:
            raise RuntimeError("VAPID_PRIVATE_KEY is not configured")

        try:
            webpush(
                subscription_info=subscription,
                data=payload,
                vapid_private_key=self.private_key,
                vapid_claims={"sub": self.claims_email},
                ttl=self.ttl,
                timeout=settings.HTTP_TIMEOUT,
            )
        except WebPushException as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error("Web push failed (status=%s): %s", status_code, e)
            raise

        logger.info("Push notification sent to %s", subscription.get("endpoint", "")[:60])
