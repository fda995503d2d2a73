"""
Модели SQLAlchemy — импортируем все для корректной регистрации relationship.
"""
from app.models.medicine import Medicine  # noqa: F401
from app.models.notification import NotificationSettings, NotificationLog  # noqa: F401
