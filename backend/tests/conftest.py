"""
Тестовая инфраструктура: фикстуры для SQLite in-memory и FastAPI TestClient.
"""
import os

# Должно быть ДО импорта app: настройки читаются при импорте
os.environ["API_KEY"] = "test-api-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["RESEND_API_KEY"] = ""
os.environ["VAPID_PRIVATE_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.clients import get_image_extractor, get_mailer, get_push_sender
from app.core.database import Base, get_db
from app.main import app as fastapi_app
from tests.fakes import FakeImageExtractor, FakeMailer, FakePushSender

# Импортируем все модели чтобы Base.metadata знал о них
import app.models.medicine  # noqa: F401
import app.models.notification  # noqa: F401


# SQLite in-memory с StaticPool — одна БД для всех connections
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Включаем поддержку FK в SQLite
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Создаёт все таблицы перед каждым тестом и удаляет после."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """Фабрика сессий тестовой БД (для тиков планировщика)."""
    return TestingSessionLocal


@pytest.fixture
def db_session() -> Session:
    """Фикстура тестовой сессии БД."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def fake_push_sender() -> FakePushSender:
    return FakePushSender()


@pytest.fixture
def fake_extractor() -> FakeImageExtractor:
    return FakeImageExtractor()


def _override_dependencies(db_session, fake_mailer, fake_push_sender, fake_extractor):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_mailer] = lambda: fake_mailer
    fastapi_app.dependency_overrides[get_push_sender] = lambda: fake_push_sender
    fastapi_app.dependency_overrides[get_image_extractor] = lambda: fake_extractor


@pytest.fixture
def client_no_auth(db_session, fake_mailer, fake_push_sender, fake_extractor) -> TestClient:
    """FastAPI TestClient БЕЗ API-ключа (для тестов безопасности)."""
    _override_dependencies(db_session, fake_mailer, fake_push_sender, fake_extractor)
    with TestClient(fastapi_app, raise_server_exceptions=False) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(db_session, fake_mailer, fake_push_sender, fake_extractor) -> TestClient:
    """FastAPI TestClient с подменёнными БД, провайдерами и API-ключом."""
    _override_dependencies(db_session, fake_mailer, fake_push_sender, fake_extractor)
    with TestClient(
        fastapi_app,
        raise_server_exceptions=False,
        headers={"X-API-Key": "test-api-key"},
    ) as c:
        yield c
    fastapi_app.dependency_overrides.clear()


# --- Вспомогательные функции для создания тестовых данных ---

def create_medicine(
    c: TestClient,
    name: str = "Paracetamol",
    expiry_date: str = "2030-01-31",
    quantity: int = 10,
    batch_number: str | None = None,
) -> dict:
    """Создаёт лекарство через API."""
    data = {"name": name, "expiry_date": expiry_date, "quantity": quantity}
    if batch_number is not None:
        data["batch_number"] = batch_number
    resp = c.post("/api/v1/medicines", json=data)
    assert resp.status_code == 201
    return resp.json()


def update_settings(c: TestClient, **fields) -> dict:
    """Обновляет настройки уведомлений через API."""
    resp = c.post("/api/v1/notifications/settings", json=fields)
    assert resp.status_code == 200
    return resp.json()
