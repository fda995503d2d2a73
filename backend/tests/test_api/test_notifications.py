"""Тесты API уведомлений."""
from datetime import date, time, timedelta

from app.models.medicine import Medicine
from app.models.notification import NotificationLog
from app.services import notification_scheduler
from tests.conftest import create_medicine, update_settings


class TestSettings:
    """Настройки уведомлений."""

    def test_default_settings(self, client):
        resp = client.get("/api/v1/notifications/settings")
        assert resp.status_code == 200
        data = resp.json()
        assert data["notification_time"] == "09:00"
        assert data["enable_daily_notifications"] is True
        assert data["enable_push_notifications"] is False
        assert data["has_push_subscription"] is False

    def test_update_settings(self, client):
        data = update_settings(client, email="a@b.com", notification_time="07:45", enable_monthly_notifications=False)
        assert data["email"] == "a@b.com"
        assert data["notification_time"] == "07:45"
        assert data["enable_monthly_notifications"] is False

        resp = client.get("/api/v1/notifications/settings")
        assert resp.json()["notification_time"] == "07:45"

    def test_put_settings(self, client):
        resp = client.put("/api/v1/notifications/settings", json={"enable_weekly_notifications": False})
        assert resp.status_code == 200
        assert resp.json()["enable_weekly_notifications"] is False

    def test_invalid_time_rejected(self, client):
        resp = client.post("/api/v1/notifications/settings", json={"notification_time": "25:00"})
        assert resp.status_code == 422

    def test_subscribe(self, client):
        resp = client.post(
            "/api/v1/notifications/subscribe",
            json={"endpoint": "https://push.example/1", "keys": {"p256dh": "pub", "auth": "sec"}},
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

        data = client.get("/api/v1/notifications/settings").json()
        assert data["enable_push_notifications"] is True
        assert data["has_push_subscription"] is True

    def test_subscribe_requires_keys(self, client):
        resp = client.post("/api/v1/notifications/subscribe", json={"endpoint": "https://push.example/1"})
        assert resp.status_code == 422

    def test_vapid_public_key(self, client):
        resp = client.get("/api/v1/notifications/vapid-public-key")
        assert resp.status_code == 200
        assert "public_key" in resp.json()


class TestHistory:

    def test_history_empty(self, client):
        resp = client.get("/api/v1/notifications/history")
        assert resp.status_code == 200
        assert resp.json()["total"] == 0

    def test_history_has_medicine_name(self, client, db_session):
        med = create_medicine(client, "Aspirin")
        db_session.add(NotificationLog(
            medicine_id=med["id"], type="WEEKLY", channel="EMAIL", status="success", message="m",
        ))
        db_session.commit()

        items = client.get("/api/v1/notifications/history").json()["items"]
        assert len(items) == 1
        assert items[0]["medicine_name"] == "Aspirin"
        assert items[0]["type"] == "WEEKLY"


class TestManualTrigger:
    """POST /notifications/test — тестовое лекарство и принудительный тик."""

    def test_sends_email_for_test_medicine(self, client, db_session, fake_mailer):
        update_settings(client, email="a@b.com", notification_time="03:17")

        resp = client.post("/api/v1/notifications/test")

        assert resp.status_code == 200
        assert resp.json() == {"message": "Test notifications sent successfully"}
        assert len(fake_mailer.sent) == 1
        assert fake_mailer.sent[0]["to"] == "a@b.com"
        test_medicine = db_session.query(Medicine).filter_by(name="Test Medicine").one()
        assert test_medicine.batch_number == "TEST-123"
        assert test_medicine.notified is True

        history = client.get("/api/v1/notifications/history").json()
        assert history["total"] == 1
        assert history["items"][0]["channel"] == "EMAIL"
        assert history["items"][0]["status"] == "success"

    def test_push_and_email(self, client, fake_mailer, fake_push_sender):
        update_settings(client, email="a@b.com")
        client.post(
            "/api/v1/notifications/subscribe",
            json={"endpoint": "https://push.example/1", "keys": {"p256dh": "pub", "auth": "sec"}},
        )

        resp = client.post("/api/v1/notifications/test")

        assert resp.status_code == 200
        assert len(fake_mailer.sent) == 1
        assert len(fake_push_sender.sent) == 1
        channels = {item["channel"] for item in client.get("/api/v1/notifications/history").json()["items"]}
        assert channels == {"EMAIL", "PUSH"}

    def test_delivery_failure_returns_502_and_keeps_failed_log(self, client, db_session, fake_mailer):
        update_settings(client, email="a@b.com")
        fake_mailer.error = RuntimeError("provider down")

        resp = client.post("/api/v1/notifications/test")

        assert resp.status_code == 502
        assert resp.json()["error_code"] == "NOTIFICATION_FAILED"
        logs = db_session.query(NotificationLog).all()
        assert [(log.channel, log.status) for log in logs] == [("EMAIL", "failed")]
        test_medicine = db_session.query(Medicine).filter_by(name="Test Medicine").one()
        assert test_medicine.notified is False

    def test_test_medicine_expires_at_end_of_tomorrow(self, client, db_session):
        update_settings(client, email="a@b.com")

        client.post("/api/v1/notifications/test")

        test_medicine = db_session.query(Medicine).filter_by(name="Test Medicine").one()
        assert test_medicine.expiry_date.time() == time.max
        assert test_medicine.expiry_date.date() >= date.today() + timedelta(days=1)

    def test_without_settings_nothing_runs(self, client, db_session, fake_mailer):
        resp = client.post("/api/v1/notifications/test")

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "VALIDATION_ERROR"
        assert "nothing was sent" in resp.json()["detail"]
        assert db_session.query(Medicine).count() == 0
        assert fake_mailer.sent == []

    def test_rejected_while_scheduled_tick_runs(self, client, db_session, fake_mailer):
        update_settings(client, email="a@b.com")
        create_medicine(client, "Aspirin", expiry_date=(date.today() + timedelta(days=2)).isoformat())

        assert notification_scheduler._tick_lock.acquire(blocking=False)
        try:
            resp = client.post("/api/v1/notifications/test")
        finally:
            notification_scheduler._tick_lock.release()

        assert resp.status_code == 409
        assert resp.json()["error_code"] == "TICK_IN_PROGRESS"
        assert fake_mailer.sent == []
        assert db_session.query(Medicine).filter_by(name="Test Medicine").count() == 0

    def test_lock_released_after_run(self, client, fake_mailer):
        update_settings(client, email="a@b.com")

        assert client.post("/api/v1/notifications/test").status_code == 200
        assert client.post("/api/v1/notifications/test").status_code == 200
        assert not notification_scheduler._tick_lock.locked()
