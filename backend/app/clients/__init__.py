"""
Клиенты внешних провайдеров и фабрики для dependency injection.
"""
from functools import lru_cache

from app.clients.base import Mailer, PushSender, ImageExtractor
from app.clients.gemini import GeminiImageExtractor
from app.clients.resend_mailer import ResendMailer
from app.clients.web_push import WebPushSender


@lru_cache
def get_mailer() -> Mailer:
    return ResendMailer()


@lru_cache
def get_push_sender() -> PushSender:
    return WebPushSender()


@lru_cache
def get_image_extractor() -> ImageExtractor:
    return GeminiImageExtractor()


__all__ = [
    "Mailer",
    "PushSender",
    "ImageExtractor",
    "ResendMailer",
    "WebPushSender",
    "GeminiImageExtractor",
    "get_mailer",
    "get_push_sender",
    "get_image_extractor",
]
