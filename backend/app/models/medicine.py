"""
Модель лекарства.
"""
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, Boolean, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.core.utils import now_local


class Medicine(Base):
    """Лекарство в домашней аптечке."""
    __tablename__ = "medicines"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_medicines_quantity_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # Всегда конец календарного дня (23:59:59.999999)
    expiry_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    batch_number: Mapped[str] = mapped_column(String, nullable=True)
    notified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_notification_date: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_local)

    logs = relationship(
        "NotificationLog",
        back_populates="medicine",
        cascade="all, delete-orphan",
        lazy="select",
    )
