"""
Безопасность и аутентификация.
"""
import logging
import secrets

from fastapi import Security, HTTPException, status
from fastapi.security import APIKeyHeader

from app.core.config import settings

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str | None = Security(api_key_header)) -> str:
    """Проверяет заголовок X-API-Key (сравнение за постоянное время)."""
    expected = settings.API_KEY
    if not api_key or not expected or not secrets.compare_digest(api_key, expected):
        logger.warning("Invalid API key attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
    return api_key
