"""
Утилиты приложения.
"""
import calendar
import re
from datetime import date, datetime, time
from typing import Optional


def now_local() -> datetime:
    """Текущее локальное время сервера (naive, как хранится в БД)."""
    return datetime.now()


def end_of_day(value: date) -> datetime:
    """Нормализует дату к концу календарного дня (23:59:59.999999)."""
    return datetime.combine(value, time.max)


def start_of_month(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def end_of_month(value: datetime) -> datetime:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return datetime.combine(value.date().replace(day=last_day), time.max)


def format_time_hhmm(dt: datetime) -> str:
    """Формат HH:MM для сравнения с настройкой notification_time."""
    return dt.strftime("%H:%M")


def format_expiry(dt: datetime) -> str:
    """Дата в виде 'March 5, 2026'."""
    return f"{dt.strftime('%B')} {dt.day}, {dt.year}"


_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%m/%Y",
    "%m/%y",
    "%b %Y",
    "%B %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def parse_calendar_date(value: Optional[str]) -> Optional[date]:
    """Пытается разобрать дату из произвольной строки; None если не вышло."""
    if not value:
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def sanitize_text(text: str | None, max_length: int = 1000) -> str | None:
    """Очистить текст от управляющих символов и ограничить длину."""
    if text is None:
        return None
    text = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', text)
    return text[:max_length].strip()
