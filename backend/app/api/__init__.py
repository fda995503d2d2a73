"""
API endpoints.
"""
from fastapi import APIRouter

from app.api import medicines, notifications

# Главный роутер API
api_router = APIRouter(prefix="/api/v1")

# Подключаем все модули
api_router.include_router(medicines.router)
api_router.include_router(notifications.router)

__all__ = ["api_router"]
