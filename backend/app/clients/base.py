"""
Интерфейсы внешних провайдеров: почта, Web Push, распознавание изображений.

Сервисы получают реализации через конструктор, поэтому в тестах
подставляются фейки без сети.
"""
from typing import Any, Protocol


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None:
        ...


class PushSender(Protocol):
    def send(self, subscription: dict, payload: str) -> None:
        ...


class ImageExtractor(Protocol):
    def extract(self, image: bytes, mime_type: str) -> dict[str, Any]:
        """Возвращает словарь с ключами name, expiryDate, batchNumber."""
        ...
