"""
Сервисный слой для бизнес-логики.
"""
from app.services.medicine_service import MedicineService
from app.services.settings_service import SettingsService
from app.services.notification_service import NotificationService

__all__ = [
    "MedicineService",
    "SettingsService",
    "NotificationService",
]
