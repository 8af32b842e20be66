import os

from sqlalchemy.orm import Session, sessionmaker

from app.core.dates import parse_datetime
from app.database.db import build_engine
from app.models.events import Event

# Same SQLite file the app uses, with a generous busy timeout for the
# threaded tests.
engine = build_engine(os.environ["DATABASE_URL"], connect_timeout=30)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_event(db: Session, **overrides) -> Event:
    """Insert an event directly, bypassing the API."""
    fields = {
        "title": "Hack Day",
        "description": "A full day hackathon",
        "date": parse_datetime("2025-12-01T09:00"),
        "venue": "Hall A",
        "capacity": 10,
        "registered": 0,
        "category": "Technical",
        "tags": [],
        "status": "upcoming",
        "created_by": "tester@campus.edu",
    }
    fields.update(overrides)
    event = Event(**fields)
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def registrant(n: int = 1, **overrides) -> dict:
    """Valid registration body for the n-th distinct student."""
    body = {
        "name": f"Student {n}",
        "email": f"student{n}@campus.edu",
        "phone": f"98765{n:05d}",
        "department": "Computer Science",
        "year": "3",
        "rollNumber": f"CS{n:04d}",
    }
    body.update(overrides)
    return body


def registrant_fields(n: int = 1, **overrides) -> dict:
    """Same as registrant() but keyed the way the service expects."""
    body = registrant(n)
    body["roll_number"] = body.pop("rollNumber")
    body.update(overrides)
    return body
