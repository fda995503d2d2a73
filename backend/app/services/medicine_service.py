"""
Сервис для работы с лекарствами.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy import and_, asc

from app.clients.base import ImageExtractor
from app.core.exceptions import ExtractionError, NotFoundException
from app.core.utils import end_of_day, now_local, parse_calendar_date, sanitize_text
from app.models.medicine import Medicine
from app.schemas.medicine import ExtractedMedicine, MedicineCreate

logger = logging.getLogger(__name__)

DEFAULT_EXPIRING_DAYS = 7


class MedicineService:
    """Сервис для управления лекарствами."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, medicine_id: int) -> Optional[Medicine]:
        """Получить лекарство по ID."""
        return self.db.query(Medicine).filter(Medicine.id == medicine_id).first()

    def get_all(self) -> list[Medicine]:
        """Все лекарства, ближайший срок первым."""
        return self.db.query(Medicine).order_by(asc(Medicine.expiry_date), asc(Medicine.id)).all()

    def get_expiring(self, days: int = DEFAULT_EXPIRING_DAYS, now: Optional[datetime] = None) -> list[Medicine]:
        """Неотмеченные лекарства со сроком не позже now + days (включая просроченные)."""
        threshold = (now or now_local()) + timedelta(days=days)
        return (
            self.db.query(Medicine)
            .filter(
                and_(
                    Medicine.expiry_date <= threshold,
                    Medicine.notified == False,
                )
            )
            .order_by(asc(Medicine.expiry_date))
            .all()
        )

    def create(self, data: MedicineCreate) -> Medicine:
        """Создать лекарство; срок годности — конец указанного дня."""
        logger.info("Creating medicine: name=%s, expiry=%s", data.name, data.expiry_date)
        medicine = Medicine(
            name=sanitize_text(data.name, max_length=200),
            expiry_date=end_of_day(data.expiry_date),
            quantity=data.quantity,
            batch_number=sanitize_text(data.batch_number, max_length=100),
            notified=False,
        )
        self.db.add(medicine)
        self.db.flush()
        self.db.refresh(medicine)
        logger.info("Medicine created: id=%s", medicine.id)
        return medicine

    def delete(self, medicine_id: int) -> None:
        """Удалить лекарство вместе с его журналом уведомлений."""
        medicine = self.get_by_id(medicine_id)
        if not medicine:
            raise NotFoundException("Лекарство", medicine_id)

        # Записи журнала удаляются каскадом relationship
        deleted_logs = len(medicine.logs)
        self.db.delete(medicine)
        self.db.flush()
        logger.info("Medicine deleted: id=%s, logs removed=%s", medicine_id, deleted_logs)

    def extract_from_image(self, extractor: ImageExtractor, image: bytes, mime_type: str) -> ExtractedMedicine:
        """
        Распознаёт поля лекарства на фото упаковки.
        Ничего не сохраняет: пользователь подтверждает данные отдельным POST.
        """
        try:
            raw = extractor.extract(image, mime_type)
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Error extracting medicine info: {e}")
            raise ExtractionError()

        if not isinstance(raw, dict):
            raise ExtractionError()

        name = raw.get("name") or None
        expiry = raw.get("expiryDate") or raw.get("expiry_date") or None
        batch = raw.get("batchNumber") or raw.get("batch_number") or None
        if not name and not expiry and not batch:
            raise ExtractionError("No information could be extracted from the image")

        # Дату приводим к YYYY-MM-DD, если её удалось разобрать
        if expiry is not None:
            expiry = str(expiry)
            parsed = parse_calendar_date(expiry)
            if parsed is not None:
                expiry = parsed.isoformat()

        return ExtractedMedicine(
            name=str(name) if name is not None else None,
            expiry_date=expiry,
            batch_number=str(batch) if batch is not None else None,
        )
