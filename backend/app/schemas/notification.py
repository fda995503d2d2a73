"""
Pydantic схемы для уведомлений.
"""
import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class NotificationSettingsResponse(BaseModel):
    """Текущие настройки уведомлений."""
    model_config = ConfigDict(from_attributes=True)

    email: Optional[str] = None
    enable_daily_notifications: bool
    enable_weekly_notifications: bool
    enable_monthly_notifications: bool
    enable_email_notifications: bool
    enable_push_notifications: bool
    notification_time: str
    has_push_subscription: bool = False


class NotificationSettingsUpdate(BaseModel):
    """Частичное обновление настроек (передаются только изменяемые поля)."""
    email: Optional[str] = None
    enable_daily_notifications: Optional[bool] = None
    enable_weekly_notifications: Optional[bool] = None
    enable_monthly_notifications: Optional[bool] = None
    enable_email_notifications: Optional[bool] = None
    enable_push_notifications: Optional[bool] = None
    notification_time: Optional[str] = None

    @field_validator("notification_time")
    @classmethod
    def check_time_format(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not _TIME_RE.match(value):
            raise ValueError("notification_time must be in HH:MM format")
        return value


class PushSubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionCreate(BaseModel):
    """Подписка браузера из PushManager.subscribe()."""
    endpoint: str
    keys: PushSubscriptionKeys


class NotificationLogResponse(BaseModel):
    """Запись журнала отправок с названием лекарства."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    medicine_id: int
    medicine_name: Optional[str] = None
    type: str
    channel: str
    status: str
    message: Optional[str] = None
    sent_at: datetime


class NotificationHistoryResponse(BaseModel):
    """Схема списка последних отправок."""
    items: list[NotificationLogResponse]
    total: int


class MessageResponse(BaseModel):
    message: str


class SubscribeResponse(BaseModel):
    success: bool


class VapidKeyResponse(BaseModel):
    public_key: str
