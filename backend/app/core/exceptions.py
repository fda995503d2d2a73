"""
Пользовательская иерархия исключений приложения.
"""


class AppException(Exception):
    def __init__(self, status_code: int, detail: str, error_code: str | None = None):
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail
        self.error_code = error_code


class NotFoundException(AppException):
    def __init__(self, resource: str, identifier):
        super().__init__(404, f"{resource} с id {identifier} не найден", "NOT_FOUND")


class ValidationException(AppException):
    def __init__(self, detail: str):
        super().__init__(400, detail, "VALIDATION_ERROR")


class TickInProgressError(AppException):
    """Проверка уведомлений уже выполняется в этом процессе."""

    def __init__(self, detail: str = "Notification check is already running"):
        super().__init__(409, detail, "TICK_IN_PROGRESS")


class ExtractionError(AppException):
    """Не удалось распознать данные лекарства на изображении."""

    def __init__(self, detail: str = "Failed to extract medicine information from image"):
        super().__init__(502, detail, "EXTRACTION_FAILED")


class NotificationDeliveryError(AppException):
    """Ошибка отправки уведомления по одному из каналов."""

    def __init__(self, channel: str, reason: str):
        super().__init__(502, f"{channel} delivery failed: {reason}", "NOTIFICATION_FAILED")
        self.channel = channel
        self.reason = reason
