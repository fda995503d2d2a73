"""
API endpoints для уведомлений: настройки, push-подписка, история, тестовый запуск.
"""
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.clients import Mailer, PushSender, get_mailer, get_push_sender
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotificationDeliveryError, ValidationException
from app.core.security import verify_api_key
from app.core.utils import end_of_day, now_local
from app.models.medicine import Medicine
from app.schemas.notification import (
    MessageResponse,
    NotificationHistoryResponse,
    NotificationLogResponse,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    PushSubscriptionCreate,
    SubscribeResponse,
    VapidKeyResponse,
)
from app.services.notification_scheduler import tick_guard
from app.services.notification_service import NotificationService
from app.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("/settings", response_model=NotificationSettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    """Получить настройки уведомлений (или значения по умолчанию)."""
    service = SettingsService(db)
    return NotificationSettingsResponse.model_validate(service.get_or_default())


@router.post("/settings", response_model=NotificationSettingsResponse)
@router.put("/settings", response_model=NotificationSettingsResponse)
def update_settings(data: NotificationSettingsUpdate, db: Session = Depends(get_db)):
    """Обновить настройки уведомлений (upsert единственной записи)."""
    service = SettingsService(db)
    updated = service.update(data)
    return NotificationSettingsResponse.model_validate(updated)


@router.post("/subscribe", response_model=SubscribeResponse)
def subscribe_push(data: PushSubscriptionCreate, db: Session = Depends(get_db)):
    """Сохранить push-подписку браузера и включить push-уведомления."""
    service = SettingsService(db)
    service.save_push_subscription(data)
    return SubscribeResponse(success=True)


@router.get("/vapid-public-key", response_model=VapidKeyResponse)
def get_vapid_public_key():
    """Публичный VAPID ключ для PushManager.subscribe()."""
    return VapidKeyResponse(public_key=settings.VAPID_PUBLIC_KEY)


@router.get("/history", response_model=NotificationHistoryResponse)
def get_history(db: Session = Depends(get_db)):
    """Последние 50 отправок, новые первыми."""
    service = NotificationService(db)
    logs = service.get_history()

    return NotificationHistoryResponse(
        items=[NotificationLogResponse.model_validate(entry) for entry in logs],
        total=len(logs),
    )


@router.post("/test", response_model=MessageResponse)
def send_test_notifications(
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    push_sender: PushSender = Depends(get_push_sender),
):
    """
    Создать тестовое лекарство со сроком до конца завтрашнего дня и
    запустить проверку немедленно, без сравнения с notification_time.
    Во время планового тика возвращает 409.
    """
    with tick_guard():
        if SettingsService(db).get() is None:
            raise ValidationException("Notification settings are not configured, nothing was sent")

        tomorrow = (now_local() + timedelta(days=1)).date()
        test_medicine = Medicine(
            name="Test Medicine",
            expiry_date=end_of_day(tomorrow),
            quantity=1,
            batch_number="TEST-123",
            notified=False,
        )
        db.add(test_medicine)
        db.flush()
        logger.info("Test medicine created: id=%s", test_medicine.id)

        service = NotificationService(db, mailer=mailer, push_sender=push_sender)
        try:
            service.check_and_send(force=True)
        except NotificationDeliveryError:
            # Журнал с failed должен пережить ответ с ошибкой
            db.commit()
            raise

    return MessageResponse(message="Test notifications sent successfully")
