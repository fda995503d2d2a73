"""
Pydantic схемы для лекарств.
"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.utils import sanitize_text


class MedicineBase(BaseModel):
    """Базовая схема лекарства."""
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    batch_number: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        # Пробелы и управляющие символы не считаются названием
        value = sanitize_text(value, max_length=200)
        if not value:
            raise ValueError("Medicine name must not be empty")
        return value

    @field_validator("batch_number")
    @classmethod
    def empty_batch_is_none(cls, value: Optional[str]) -> Optional[str]:
        # Пустая строка из формы — это "нет номера партии"
        if value is None or not value.strip():
            return None
        return value


class MedicineCreate(MedicineBase):
    """Схема создания лекарства (ручной ввод)."""
    expiry_date: date


class MedicineResponse(MedicineBase):
    """Схема ответа с данными лекарства."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    expiry_date: datetime
    notified: bool = False
    last_notification_date: Optional[datetime] = None
    created_at: datetime


class MedicineListResponse(BaseModel):
    """Схема списка лекарств."""
    items: list[MedicineResponse]
    total: int


class MedicineDeleteResponse(BaseModel):
    message: str


class ExtractedMedicine(BaseModel):
    """Результат распознавания упаковки. Любое поле может быть None."""
    name: Optional[str] = None
    expiry_date: Optional[str] = None
    batch_number: Optional[str] = None
