"""
Test database models (Event, Registration and Admin).
"""
import re

import pytest
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.dates import parse_datetime
from app.models.admins import Admin
from app.models.events import Event
from app.models.registrations import Registration, new_ticket_id


def add_registration(db: Session, event: Event, email: str, **overrides) -> Registration:
    fields = {
        "event_id": event.id,
        "event_title": event.title,
        "name": "Test Student",
        "email": email,
        "phone": "9876543210",
        "department": "Physics",
        "year": "1",
        "roll_number": "PH0001",
    }
    fields.update(overrides)
    registration = Registration(**fields)
    db.add(registration)
    db.commit()
    return registration


def new_event(db: Session, **overrides) -> Event:
    fields = {
        "title": "Test Event",
        "description": "An event used by model tests",
        "date": parse_datetime("2025-10-10T10:00"),
        "venue": "Main Hall",
        "capacity": 100,
        "category": "Seminar",
    }
    fields.update(overrides)
    event = Event(**fields)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


class TestEventModel:
    """Test the Event model."""

    def test_create_event_defaults(self, db_session: Session):
        event = new_event(db_session)

        assert event.id is not None
        assert len(event.id) == 36
        assert event.registered == 0
        assert event.status == "upcoming"
        assert event.tags == []
        assert event.image is None
        assert event.created_at is not None
        assert event.updated_at is not None

    def test_tags_keep_their_order(self, db_session: Session):
        event = new_event(db_session, tags=["zeta", "alpha", "mid"])

        db_session.expire_all()
        assert db_session.get(Event, event.id).tags == ["zeta", "alpha", "mid"]

    def test_registered_cannot_exceed_capacity(self, db_session: Session):
        event = new_event(db_session, capacity=2, registered=2)

        event.registered = 3
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_registered_cannot_go_negative(self, db_session: Session):
        with pytest.raises(IntegrityError):
            new_event(db_session, registered=-1)
        db_session.rollback()


class TestRegistrationModel:
    """Test the Registration model."""

    def test_create_registration(self, db_session: Session):
        event = new_event(db_session)

        registration = add_registration(db_session, event, "one@campus.edu")
        db_session.refresh(registration)

        assert registration.id is not None
        assert re.fullmatch(r"TKT-[A-Z0-9]{8}", registration.ticket_id)
        assert registration.registered_at is not None
        assert registration.event.title == "Test Event"

    def test_one_registration_per_event_and_email(self, db_session: Session):
        event = new_event(db_session)
        add_registration(db_session, event, "same@campus.edu")

        with pytest.raises(IntegrityError):
            add_registration(db_session, event, "same@campus.edu", roll_number="PH0002")
        db_session.rollback()

    def test_ticket_ids_are_unique(self, db_session: Session):
        event = new_event(db_session)
        add_registration(db_session, event, "a@campus.edu", ticket_id="TKT-AAAAAAAA")

        with pytest.raises(IntegrityError):
            add_registration(db_session, event, "b@campus.edu", ticket_id="TKT-AAAAAAAA")
        db_session.rollback()

    def test_ticket_id_format(self):
        tickets = {new_ticket_id() for _ in range(50)}

        assert len(tickets) == 50
        assert all(re.fullmatch(r"TKT-[A-Z0-9]{8}", t) for t in tickets)

    def test_deleting_event_row_cascades(self, db_session: Session):
        event = new_event(db_session)
        add_registration(db_session, event, "gone@campus.edu")
        event_id = event.id

        db_session.execute(delete(Event).where(Event.id == event_id))
        db_session.commit()

        assert db_session.scalars(select(Registration).where(Registration.event_id == event_id)).all() == []


class TestAdminModel:
    """Test the Admin model."""

    def test_admin_email_is_unique(self, db_session: Session):
        db_session.add(Admin(name="One", email="same-admin@campus.edu", password="x"))
        db_session.commit()

        db_session.add(Admin(name="Two", email="same-admin@campus.edu", password="y"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_admin_role_defaults_to_admin(self, db_session: Session):
        admin = Admin(name="Role", email="role@campus.edu", password="x")
        db_session.add(admin)
        db_session.commit()
        db_session.refresh(admin)

        assert admin.role == "admin"
