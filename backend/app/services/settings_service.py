"""
Сервис для работы с настройками уведомлений (одна строка id=1).
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.models.notification import NotificationSettings, SETTINGS_ID, DEFAULT_NOTIFICATION_TIME
from app.schemas.notification import NotificationSettingsUpdate, PushSubscriptionCreate
from app.core.utils import sanitize_text

logger = logging.getLogger(__name__)


def default_settings() -> NotificationSettings:
    """Настройки по умолчанию (объект не добавлен в сессию)."""
    return NotificationSettings(
        id=SETTINGS_ID,
        email=None,
        enable_daily_notifications=True,
        enable_weekly_notifications=True,
        enable_monthly_notifications=True,
        enable_email_notifications=True,
        enable_push_notifications=False,
        notification_time=DEFAULT_NOTIFICATION_TIME,
    )


class SettingsService:
    """Сервис для управления настройками уведомлений."""

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> Optional[NotificationSettings]:
        """Сохранённые настройки или None."""
        return self.db.get(NotificationSettings, SETTINGS_ID)

    def get_or_default(self) -> NotificationSettings:
        """Сохранённые настройки или значения по умолчанию."""
        return self.get() or default_settings()

    def _get_or_create(self) -> NotificationSettings:
        settings = self.get()
        if settings is None:
            settings = default_settings()
            self.db.add(settings)
            logger.info("Creating notification settings row")
        return settings

    def update(self, data: NotificationSettingsUpdate) -> NotificationSettings:
        """Upsert настроек: меняются только переданные поля."""
        settings = self._get_or_create()
        update_data = data.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if field == "email":
                value = sanitize_text(value, max_length=320) or None
            if value is None and field != "email":
                continue
            setattr(settings, field, value)

        self.db.flush()
        self.db.refresh(settings)
        logger.info("Notification settings updated: fields=%s", sorted(update_data))
        return settings

    def save_push_subscription(self, subscription: PushSubscriptionCreate) -> NotificationSettings:
        """Сохраняет подписку браузера как есть и включает push."""
        settings = self._get_or_create()
        settings.endpoint = subscription.endpoint
        settings.p256dh = subscription.keys.p256dh
        settings.auth = subscription.keys.auth
        settings.enable_push_notifications = True
        self.db.flush()
        self.db.refresh(settings)
        logger.info("Push subscription saved")
        return settings
