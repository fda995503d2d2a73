"""
Модели настроек уведомлений и журнала отправок.
"""
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.core.utils import now_local

# Единственная строка настроек
SETTINGS_ID = 1
DEFAULT_NOTIFICATION_TIME = "09:00"

# Категории окон истечения (порядок обработки важен)
TYPE_MONTHLY = "MONTHLY"
TYPE_WEEKLY = "WEEKLY"
TYPE_DAILY = "DAILY"

CHANNEL_EMAIL = "EMAIL"
CHANNEL_PUSH = "PUSH"

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class NotificationSettings(Base):
    """Глобальные настройки уведомлений (одна строка, id=1)."""
    __tablename__ = "notification_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SETTINGS_ID)
    email: Mapped[str] = mapped_column(String, nullable=True)
    enable_daily_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    enable_weekly_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    enable_monthly_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    enable_email_notifications: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    enable_push_notifications: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Push-подписка браузера, хранится как есть
    endpoint: Mapped[str] = mapped_column(Text, nullable=True)
    p256dh: Mapped[str] = mapped_column(String, nullable=True)
    auth: Mapped[str] = mapped_column(String, nullable=True)
    notification_time: Mapped[str] = mapped_column(String(5), default=DEFAULT_NOTIFICATION_TIME, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_local, onupdate=now_local)

    @property
    def has_push_subscription(self) -> bool:
        return bool(self.endpoint and self.p256dh and self.auth)

    def push_subscription(self) -> dict:
        """Подписка в формате Web Push API."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }


class NotificationLog(Base):
    """Запись журнала отправки (только добавление)."""
    __tablename__ = "notification_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    medicine_id: Mapped[int] = mapped_column(
        ForeignKey("medicines.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String, nullable=False)  # MONTHLY / WEEKLY / DAILY
    channel: Mapped[str] = mapped_column(String, nullable=False)  # EMAIL / PUSH
    status: Mapped[str] = mapped_column(String, nullable=False)  # success / failed
    message: Mapped[str] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=now_local, index=True)

    medicine = relationship("Medicine", back_populates="logs", lazy="joined")

    @property
    def medicine_name(self) -> str | None:
        return self.medicine.name if self.medicine else None
