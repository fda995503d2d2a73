"""
Фоновая задача проверки сроков годности.
Раз в минуту (на границе минуты) запускает тик NotificationService.
"""
import asyncio
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Optional

from app.clients import Mailer, PushSender, get_mailer, get_push_sender
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.exceptions import NotificationDeliveryError, TickInProgressError
from app.core.utils import now_local
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

# Тики не должны пересекаться внутри процесса
_tick_lock = threading.Lock()


@contextmanager
def tick_guard():
    """
    Захватывает блокировку тика для ручного запуска.
    Если идёт плановый тик, бросает TickInProgressError.
    """
    if not _tick_lock.acquire(blocking=False):
        logger.warning("Notification tick is running, manual check rejected")
        raise TickInProgressError()
    try:
        yield
    finally:
        _tick_lock.release()


def run_tick(
    force: bool = False,
    now: Optional[datetime] = None,
    session_factory: Callable = SessionLocal,
    mailer: Optional[Mailer] = None,
    push_sender: Optional[PushSender] = None,
) -> bool:
    """
    Выполняет один тик в отдельной сессии.
    Возвращает False, если тик пропущен.
    """
    if not _tick_lock.acquire(blocking=False):
        logger.warning("Previous notification tick is still running, skipping")
        return False

    db = session_factory()
    try:
        service = NotificationService(
            db,
            mailer=mailer or get_mailer(),
            push_sender=push_sender or get_push_sender(),
        )
        ran = service.check_and_send(force=force, now=now)
        db.commit()
        return ran
    except NotificationDeliveryError:
        # Запись failed и уже отмеченные лекарства сохраняем
        db.commit()
        raise
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        _tick_lock.release()


def seconds_until_next_minute(now: Optional[datetime] = None) -> float:
    now = now or now_local()
    return 60 - now.second - now.microsecond / 1_000_000


async def process_tick() -> None:
    """Одна итерация: ошибки логируются, следующий тик — через минуту."""
    try:
        await asyncio.to_thread(run_tick)
    except NotificationDeliveryError as e:
        logger.error(f"Notification delivery aborted: {e.detail}")
    except Exception as e:
        logger.exception(f"Error processing notifications: {e}")


async def run_notification_scheduler(interval: Optional[int] = None) -> None:
    """Запускает бесконечный цикл проверки уведомлений."""
    interval = interval or settings.SCHEDULER_INTERVAL
    logger.info("Notification scheduler started")
    while True:
        # Выравниваемся по минуте, чтобы сравнение HH:MM не пропускало минуты
        delay = seconds_until_next_minute() if interval == 60 else interval
        await asyncio.sleep(delay)
        await process_tick()
