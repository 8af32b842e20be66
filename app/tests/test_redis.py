"""
Test the Redis lock that gates registrations per event.
"""
import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.core import redis_config
from app.core.config import settings
from app.core.errors import EventFull, RegistrationBusy, ValidationFailed
from app.main import app
from app.services.registrations import register
from app.tests.helpers import make_event, registrant, registrant_fields


class TestRegistrationLock:
    """Test how registration uses the per-event lock."""

    def test_lock_is_released_after_success(self, db_session: Session, redis_client):
        event = make_event(db_session)

        register(db_session, event_id=event.id, fields=registrant_fields(1))

        lock = redis_client.lock(f"event_lock:{event.id}", timeout=10)
        assert lock.acquire(blocking=False) is True
        lock.release()

    @pytest.mark.parametrize(
        "overrides, error",
        [({"capacity": 1, "registered": 1}, EventFull), ({}, ValidationFailed)],
    )
    def test_lock_is_released_after_rejection(self, db_session: Session, redis_client, overrides, error):
        event = make_event(db_session, **overrides)

        with pytest.raises(error):
            register(db_session, event_id=event.id, fields=registrant_fields(1, phone="123"))

        assert redis_client.get(f"event_lock:{event.id}") is None

    def test_busy_event_fails_fast_and_changes_nothing(
        self, db_session: Session, redis_client, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "REGISTRATION_LOCK_WAIT", 0)
        event = make_event(db_session)
        held = redis_client.lock(f"event_lock:{event.id}", timeout=10)
        assert held.acquire(blocking=False) is True

        try:
            with pytest.raises(RegistrationBusy):
                register(db_session, event_id=event.id, fields=registrant_fields(1))
        finally:
            held.release()

        db_session.refresh(event)
        assert event.registered == 0

    def test_busy_event_is_503_and_retry_succeeds(
        self, client, db_session: Session, redis_client, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings, "REGISTRATION_LOCK_WAIT", 0)
        event = make_event(db_session)
        held = redis_client.lock(f"event_lock:{event.id}", timeout=10)
        held.acquire(blocking=False)

        response = client.post(f"/api/events/{event.id}/register", json=registrant(1))
        assert response.status_code == 503
        assert response.json() == {"error": "Registration is busy, please try again"}

        held.release()
        retry = client.post(f"/api/events/{event.id}/register", json=registrant(1))
        assert retry.status_code == 201

    def test_other_events_are_not_blocked(self, db_session: Session, redis_client, monkeypatch):
        monkeypatch.setattr(settings, "REGISTRATION_LOCK_WAIT", 0)
        busy = make_event(db_session, title="Busy Event")
        free = make_event(db_session, title="Free Event")
        held = redis_client.lock(f"event_lock:{busy.id}", timeout=10)
        held.acquire(blocking=False)

        try:
            registration = register(db_session, event_id=free.id, fields=registrant_fields(1))
        finally:
            held.release()

        assert registration.event_id == free.id

    def test_redis_client_is_shared_and_closed_on_shutdown(self, monkeypatch: pytest.MonkeyPatch):
        assert redis_config.get_redis_client() is redis_config.get_redis_client()

        closed = []

        class TrackedRedis:
            def close(self):
                closed.append(True)

        monkeypatch.setattr(redis_config, "redis_client", TrackedRedis())
        with TestClient(app):
            assert closed == []

        assert closed == [True]

    def test_redis_outage_is_reported_as_busy(self, db_session: Session, monkeypatch: pytest.MonkeyPatch):
        class DownRedis:
            def lock(self, *args, **kwargs):
                return self

            def acquire(self, *args, **kwargs):
                raise redis.exceptions.ConnectionError("connection refused")

        monkeypatch.setattr("app.services.registrations.get_redis_client", DownRedis)
        event = make_event(db_session)

        with pytest.raises(RegistrationBusy):
            register(db_session, event_id=event.id, fields=registrant_fields(1))
