"""
HTTP клиент для отправки писем через Resend API.
"""
import logging
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


class ResendMailer:
    """Отправка HTML писем через POST /emails."""

    def __init__(
        self,
        api_key: str | None = None,
        sender: str | None = None,
        base_url: str | None = None,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender or settings.EMAIL_FROM
        self.base_url = (base_url or settings.RESEND_API_URL).rstrip("/")
        self._client = client

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(base_url=self.base_url, timeout=settings.HTTP_TIMEOUT)
        return self._client

    def close(self) -> None:
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def send(self, to: str, subject: str, html: str) -> None:
        if not self.api_key:
            raise RuntimeError("RESEND_API_KEY is not configured")

        client = self._get_client()
        try:
            response = client.post(
                "/emails",
                json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Resend HTTP error {e.response.status_code}: {e.response.text}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed: {e}")
            raise

        logger.info("Email sent to %s, id=%s", to, response.json().get("id"))
