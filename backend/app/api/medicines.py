"""
API endpoints для управления лекарствами.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.clients import ImageExtractor, get_image_extractor
from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import NotFoundException, ValidationException
from app.core.security import verify_api_key
from app.schemas.medicine import (
    ExtractedMedicine,
    MedicineCreate,
    MedicineDeleteResponse,
    MedicineListResponse,
    MedicineResponse,
)
from app.services.medicine_service import MedicineService, DEFAULT_EXPIRING_DAYS

router = APIRouter(
    prefix="/medicines",
    tags=["medicines"],
    dependencies=[Depends(verify_api_key)],
)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/jpg")


@router.get("", response_model=MedicineListResponse)
def list_medicines(db: Session = Depends(get_db)):
    """Получить все лекарства (ближайший срок первым)."""
    service = MedicineService(db)
    medicines = service.get_all()

    return MedicineListResponse(
        items=[MedicineResponse.model_validate(m) for m in medicines],
        total=len(medicines),
    )


@router.post("", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
def create_medicine(data: MedicineCreate, db: Session = Depends(get_db)):
    """Добавить лекарство вручную."""
    service = MedicineService(db)
    medicine = service.create(data)
    return MedicineResponse.model_validate(medicine)


@router.get("/expiring", response_model=MedicineListResponse)
def get_expiring_medicines(
    days: Optional[str] = Query(None, description="Горизонт в днях, по умолчанию 7"),
    db: Session = Depends(get_db),
):
    """Неотмеченные лекарства, срок которых истекает в ближайшие N дней."""
    # Нечисловое или нулевое значение — горизонт по умолчанию
    try:
        horizon = int(days) if days else DEFAULT_EXPIRING_DAYS
    except ValueError:
        horizon = DEFAULT_EXPIRING_DAYS
    horizon = horizon or DEFAULT_EXPIRING_DAYS

    service = MedicineService(db)
    medicines = service.get_expiring(horizon)

    return MedicineListResponse(
        items=[MedicineResponse.model_validate(m) for m in medicines],
        total=len(medicines),
    )


@router.post("/extract", response_model=ExtractedMedicine)
async def extract_medicine(
    image: UploadFile = File(...),
    extractor: ImageExtractor = Depends(get_image_extractor),
    db: Session = Depends(get_db),
):
    """
    Распознать название, срок и партию по фото упаковки.
    Лекарство не создаётся — только возвращаются найденные поля.
    """
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise ValidationException("Invalid file type. Please upload a JPEG or PNG image.")

    content = await image.read()
    if len(content) > settings.MAX_IMAGE_SIZE:
        raise ValidationException("File too large. Maximum size is 5MB.")
    if not content:
        raise ValidationException("No image provided")

    service = MedicineService(db)
    # Вызов провайдера синхронный — выносим из event loop
    return await run_in_threadpool(service.extract_from_image, extractor, content, image.content_type)


@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(medicine_id: int, db: Session = Depends(get_db)):
    """Получить лекарство по ID."""
    service = MedicineService(db)
    medicine = service.get_by_id(medicine_id)

    if not medicine:
        raise NotFoundException("Лекарство", medicine_id)

    return MedicineResponse.model_validate(medicine)


@router.delete("/{medicine_id}", response_model=MedicineDeleteResponse)
def delete_medicine(medicine_id: int, db: Session = Depends(get_db)):
    """Удалить лекарство вместе с историей уведомлений."""
    service = MedicineService(db)
    service.delete(medicine_id)
    return MedicineDeleteResponse(message="Medicine deleted successfully")
