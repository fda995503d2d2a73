"""
Сервис уведомлений об истечении срока годности.

Один тик планировщика:
1. читаем настройки; без force сравниваем текущее HH:MM с notification_time;
2. по очереди MONTHLY → WEEKLY → DAILY выбираем неотмеченные лекарства
   в окне категории (окна пересекаются);
3. для каждого лекарства отправляем email и push по включённым каналам,
   пишем журнал и ставим notified=True.

Флаг notified общий для всех категорий: лекарство, попавшее в MONTHLY,
уже не попадёт в WEEKLY и DAILY.
"""
import html
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import and_, desc

from app.clients.base import Mailer, PushSender
from app.core.exceptions import NotificationDeliveryError
from app.core.utils import end_of_month, format_expiry, format_time_hhmm, now_local, start_of_month
from app.models.medicine import Medicine
from app.models.notification import (
    NotificationLog,
    NotificationSettings,
    CHANNEL_EMAIL,
    CHANNEL_PUSH,
    STATUS_FAILED,
    STATUS_SUCCESS,
    TYPE_DAILY,
    TYPE_MONTHLY,
    TYPE_WEEKLY,
)
from app.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

# Порядок обработки категорий
CATEGORY_ORDER = (TYPE_MONTHLY, TYPE_WEEKLY, TYPE_DAILY)

# Флаг включения категории в настройках
CATEGORY_FLAGS = {
    TYPE_MONTHLY: "enable_monthly_notifications",
    TYPE_WEEKLY: "enable_weekly_notifications",
    TYPE_DAILY: "enable_daily_notifications",
}

EMAIL_SUBJECT = "Medicine Expiry Alert"

HISTORY_LIMIT = 50


def expiry_window(category: str, now: datetime) -> tuple[datetime, datetime]:
    """Границы окна категории (включительно)."""
    if category == TYPE_MONTHLY:
        return start_of_month(now), end_of_month(now)
    if category == TYPE_WEEKLY:
        return now, now + timedelta(days=7)
    if category == TYPE_DAILY:
        return now, now + timedelta(days=1)
    raise ValueError(f"Unknown notification category: {category}")


def build_message(category: str, medicine: Medicine, now: datetime) -> str:
    """Текст уведомления для категории."""
    expiry = format_expiry(medicine.expiry_date)
    if category == TYPE_MONTHLY:
        return f"Medicine {medicine.name} will expire this month on {expiry}"
    if category == TYPE_WEEKLY:
        days = (medicine.expiry_date - now).days
        return f"Medicine {medicine.name} will expire in {days} days on {expiry}"
    return f"URGENT: Medicine {medicine.name} will expire tomorrow on {expiry}"


def render_expiry_email(medicine: Medicine, message: str) -> str:
    """HTML письма с деталями лекарства."""
    rows = [
        ("Name", medicine.name),
        ("Expiry Date", format_expiry(medicine.expiry_date)),
        ("Quantity", str(medicine.quantity)),
    ]
    if medicine.batch_number:
        rows.append(("Batch Number", medicine.batch_number))

    cell = "padding: 8px; border-bottom: 1px solid #eee;"
    table_rows = "".join(
        f'<tr><td style="{cell}"><strong>{label}:</strong></td>'
        f'<td style="{cell}">{html.escape(value)}</td></tr>'
        for label, value in rows
    )
    return (
        '<div style="font-family: Arial, sans-serif; padding: 20px; background-color: #f5f5f5;">'
        '<h2 style="color: #d9534f;">Medicine Expiry Alert</h2>'
        '<div style="background-color: white; padding: 15px; border-radius: 5px; margin: 15px 0;">'
        '<h3 style="color: #333; margin-top: 0;">Medicine Details:</h3>'
        f'<table style="width: 100%; border-collapse: collapse;">{table_rows}</table>'
        '</div>'
        f'<p style="font-size: 16px; color: #333; margin-top: 20px;">{html.escape(message)}</p>'
        '<hr style="border: 1px solid #eee;">'
        '<p style="color: #666; font-size: 14px;">'
        'This is an automated notification from your Medicine Expiry Tracker.</p>'
        '</div>'
    )


class NotificationService:
    """Сервис проверки сроков и рассылки уведомлений."""

    def __init__(
        self,
        db: Session,
        mailer: Optional[Mailer] = None,
        push_sender: Optional[PushSender] = None,
    ):
        self.db = db
        self.mailer = mailer
        self.push_sender = push_sender

    def check_and_send(self, force: bool = False, now: Optional[datetime] = None) -> bool:
        """
        Один тик планировщика.
        Возвращает False, если тик пропущен (нет настроек или не то время).
        """
        now = now or now_local()
        settings = SettingsService(self.db).get()
        if settings is None:
            logger.debug("Notification settings are not configured, skipping tick")
            return False

        if not force and format_time_hhmm(now) != settings.notification_time:
            return False

        logger.info("Checking notifications (force=%s, now=%s)", force, now.isoformat(timespec="minutes"))
        for category in CATEGORY_ORDER:
            self.process_category(category, settings, now)
        return True

    def get_candidates(self, category: str, now: datetime) -> list[Medicine]:
        """Неотмеченные лекарства, срок которых попадает в окно категории."""
        start, end = expiry_window(category, now)
        return (
            self.db.query(Medicine)
            .filter(
                and_(
                    Medicine.expiry_date >= start,
                    Medicine.expiry_date <= end,
                    Medicine.notified == False,
                )
            )
            .order_by(Medicine.expiry_date, Medicine.id)
            .all()
        )

    def process_category(self, category: str, settings: NotificationSettings, now: datetime) -> int:
        """Обрабатывает одну категорию. Возвращает число отмеченных лекарств."""
        if not getattr(settings, CATEGORY_FLAGS[category]):
            return 0

        medicines = self.get_candidates(category, now)
        logger.info("Found %s medicines for %s notifications", len(medicines), category)

        marked = 0
        for medicine in medicines:
            message = build_message(category, medicine, now)
            if self.send_notification(medicine, category, message, settings, now):
                marked += 1
        return marked

    def send_notification(
        self,
        medicine: Medicine,
        category: str,
        message: str,
        settings: NotificationSettings,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Рассылает уведомление по включённым каналам (email, затем push).

        При ошибке канала пишет запись failed и пробрасывает
        NotificationDeliveryError: остальные каналы не вызываются,
        notified не ставится. Если ни один канал не включён — лекарство
        не отмечается. Возвращает True, если лекарство отмечено.
        """
        send_email = bool(settings.enable_email_notifications and settings.email and self.mailer)
        send_push = bool(
            settings.enable_push_notifications and settings.has_push_subscription and self.push_sender
        )
        if not send_email and not send_push:
            logger.warning(
                "No notification channel enabled, medicine %s stays unnotified (%s)", medicine.id, category
            )
            return False

        logger.info("Sending %s notification for %s (id=%s)", category, medicine.name, medicine.id)

        if send_email:
            try:
                self.mailer.send(settings.email, EMAIL_SUBJECT, render_expiry_email(medicine, message))
            except Exception as e:
                self._fail(medicine, category, CHANNEL_EMAIL, e)
            self.log_notification(medicine.id, category, CHANNEL_EMAIL, STATUS_SUCCESS, message)

        if send_push:
            try:
                self.push_sender.send(settings.push_subscription(), message)
            except Exception as e:
                self._fail(medicine, category, CHANNEL_PUSH, e)
            self.log_notification(medicine.id, category, CHANNEL_PUSH, STATUS_SUCCESS, message)

        medicine.notified = True
        medicine.last_notification_date = now or now_local()
        self.db.flush()
        return True

    def _fail(self, medicine: Medicine, category: str, channel: str, error: Exception) -> None:
        logger.error("%s notification for medicine %s failed: %s", channel, medicine.id, error)
        self.log_notification(medicine.id, category, channel, STATUS_FAILED, str(error))
        raise NotificationDeliveryError(channel, str(error)) from error

    def log_notification(
        self,
        medicine_id: int,
        category: str,
        channel: str,
        status: str,
        message: Optional[str],
    ) -> NotificationLog:
        """Добавляет запись в журнал отправок."""
        entry = NotificationLog(
            medicine_id=medicine_id,
            type=category,
            channel=channel,
            status=status,
            message=message,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def get_history(self, limit: int = HISTORY_LIMIT) -> list[NotificationLog]:
        """Последние записи журнала, новые первыми."""
        return (
            self.db.query(NotificationLog)
            .order_by(desc(NotificationLog.sent_at), desc(NotificationLog.id))
            .limit(limit)
            .all()
        )
