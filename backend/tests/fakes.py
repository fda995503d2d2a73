"""
Фейковые провайдеры для тестов (без сети).
"""


class FakeMailer:
    def __init__(self, error: Exception | None = None):
        self.sent: list[dict] = []
        self.error = error

    def send(self, to: str, subject: str, html: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakePushSender:
    def __init__(self, error: Exception | None = None):
        self.sent: list[dict] = []
        self.error = error

    def send(self, subscription: dict, payload: str) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append({"subscription": subscription, "payload": payload})


class FakeImageExtractor:
    def __init__(self, result: dict | None = None, error: Exception | None = None):
        self.result = result if result is not None else {
            "name": "Amoxicillin 500mg",
            "expiryDate": "2027-03-31",
            "batchNumber": "LOT42",
        }
        self.error = error
        self.calls: list[tuple[int, str]] = []

    def extract(self, image: bytes, mime_type: str) -> dict:
        self.calls.append((len(image), mime_type))
        if self.error is not None:
            raise self.error
        return self.result
