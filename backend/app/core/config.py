"""
Конфигурация приложения.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    """Читает булеву переменную окружения (true/1/yes)."""
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Настройки приложения."""

    # Database — без дефолта, приложение не запустится без БД
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # FastAPI
    APP_TITLE: str = "Medicine Expiry Tracker"

    # API Security — без дефолтов
    API_KEY: str = os.getenv("API_KEY", "")

    # CORS — по умолчанию пустой (ничего не разрешено)
    ALLOWED_ORIGINS: str = os.getenv("ALLOWED_ORIGINS", "")

    # Планировщик уведомлений (тик раз в минуту)
    SCHEDULER_ENABLED: bool = _env_bool("SCHEDULER_ENABLED", True)
    SCHEDULER_INTERVAL: int = int(os.getenv("SCHEDULER_INTERVAL", 60))

    # Email (Resend)
    RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
    RESEND_API_URL: str = os.getenv("RESEND_API_URL", "https://api.resend.com")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "Medicine Tracker <onboarding@resend.dev>")

    # Web Push (VAPID)
    VAPID_PUBLIC_KEY: str = os.getenv("VAPID_PUBLIC_KEY", "")
    VAPID_PRIVATE_KEY: str = os.getenv("VAPID_PRIVATE_KEY", "")
    VAPID_CLAIMS_EMAIL: str = os.getenv("VAPID_CLAIMS_EMAIL", "mailto:noreply@medicinetracker.com")

    # Распознавание упаковки (Gemini)
    GOOGLE_API_KEY: str = os.getenv("GOOGLE_API_KEY", "")
    GEMINI_API_URL: str = os.getenv("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-exp")

    # Загрузка изображений: максимум 5 МБ
    MAX_IMAGE_SIZE: int = int(os.getenv("MAX_IMAGE_SIZE", 5 * 1024 * 1024))

    # Таймаут внешних HTTP вызовов, секунды
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", 30.0))


settings = Settings()
