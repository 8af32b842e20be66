import logging
import re

import redis
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    AlreadyRegistered,
    EventCancelled,
    EventFull,
    EventNotFound,
    RegistrationBusy,
    ValidationFailed,
)
from app.core.redis_config import get_redis_client
from app.models.events import Event, EventStatus
from app.models.registrations import Registration
from app.services.pagination import clamp_page, like_pattern, page_count

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{10}$")

# (attribute, wire name) in the order violations are reported
REGISTRANT_FIELDS = (
    ("name", "name"),
    ("email", "email"),
    ("phone", "phone"),
    ("department", "department"),
    ("year", "year"),
    ("roll_number", "rollNumber"),
)

MAX_REGISTRATIONS_PAGE = 200


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def validate_registrant(fields: dict) -> dict:
    """
    Trim and check registrant fields. Every violation is collected so the
    client sees all of them at once; raises ValidationFailed if any.
    """
    cleaned = {}
    missing = []
    malformed = []
    for attr, wire_name in REGISTRANT_FIELDS:
        value = fields.get(attr)
        if value is None:
            value = ""
        elif isinstance(value, bool) or not isinstance(value, (str, int, float)):
            malformed.append(wire_name)
            cleaned[attr] = ""
            continue
        value = str(value).strip()
        if not value:
            missing.append(wire_name)
        cleaned[attr] = value

    errors = []
    if missing:
        errors.append(f"Missing required fields: {', '.join(missing)}")
    if malformed:
        errors.append(f"Fields must be text or numbers: {', '.join(malformed)}")
    if cleaned["email"] and not is_valid_email(cleaned["email"]):
        errors.append("Invalid email format")
    if cleaned["phone"] and not PHONE_RE.match(cleaned["phone"]):
        errors.append("Phone must be exactly 10 digits")
    if errors:
        raise ValidationFailed(errors, missing_fields=missing)

    cleaned["email"] = cleaned["email"].lower()
    return cleaned


def register(db: Session, *, event_id: str, fields: dict) -> Registration:
    """
    Register an attendee for an event.

    A per-event Redis lock keeps concurrent attempts for the same event from
    piling onto the database; the conditional counter update and the unique
    (event_id, email) index decide the outcome regardless of the lock.
    """
    redis_client = get_redis_client()
    lock = redis_client.lock(
        f"event_lock:{event_id}",
        timeout=settings.REGISTRATION_LOCK_TIMEOUT,
        blocking_timeout=settings.REGISTRATION_LOCK_WAIT,
    )

    try:
        if not lock.acquire(blocking=True):
            raise RegistrationBusy()
    except redis.exceptions.RedisError as exc:
        logger.warning("Registration lock unavailable for event %s: %s", event_id, exc)
        raise RegistrationBusy() from exc

    try:
        return _register_in_transaction(db, event_id, fields)
    finally:
        try:
            lock.release()
        except redis.exceptions.RedisError as exc:
            # Expired while we worked; the database outcome already stands.
            logger.warning("Could not release registration lock for event %s: %s", event_id, exc)


def _register_in_transaction(db: Session, event_id: str, fields: dict) -> Registration:
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFound()
    if event.status == EventStatus.CANCELLED.value:
        raise EventCancelled()
    # Early rejection only; the guarded UPDATE below is authoritative.
    if event.registered >= event.capacity:
        raise EventFull()

    registrant = validate_registrant(fields)

    if _find_registration_id(db, event_id, registrant["email"]) is not None:
        logger.info("Duplicate registration for event %s by %s", event_id, registrant["email"])
        raise AlreadyRegistered()

    event_title = event.title
    try:
        stmt = (
            update(Event)
            .where(Event.id == event_id)
            .where(Event.status != EventStatus.CANCELLED.value)
            .where(Event.registered < Event.capacity)
            .values(registered=Event.registered + 1)
        )
        res = db.execute(stmt)
        if res.rowcount != 1:  # type: ignore
            raise _rejection_for(db, event_id)

        registration = Registration(event_id=event_id, event_title=event_title, **registrant)
        db.add(registration)
        db.flush()
        db.commit()
    except IntegrityError:
        db.rollback()
        if _find_registration_id(db, event_id, registrant["email"]) is not None:
            logger.info("Concurrent duplicate registration for event %s by %s", event_id, registrant["email"])
            raise AlreadyRegistered()
        raise
    except Exception:
        db.rollback()
        raise

    db.refresh(registration)
    logger.info(
        "Registered %s for event %s (ticket %s)",
        registration.email,
        event_id,
        registration.ticket_id,
    )
    return registration


def _find_registration_id(db: Session, event_id: str, email: str) -> str | None:
    return db.scalar(
        select(Registration.id).where(
            Registration.event_id == event_id,
            Registration.email == email,
        )
    )


def _rejection_for(db: Session, event_id: str) -> Exception:
    """Explain why the guarded increment matched no row."""
    status = db.scalar(select(Event.status).where(Event.id == event_id))
    if status is None:
        return EventNotFound()
    if status == EventStatus.CANCELLED.value:
        return EventCancelled()
    logger.info("Event %s filled up while registering", event_id)
    return EventFull()


def count_registrations(db: Session, event_id: str) -> int:
    return int(
        db.scalar(select(func.count(Registration.id)).where(Registration.event_id == event_id)) or 0
    )


def list_registrations(
    db: Session,
    *,
    event_id: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> dict:
    """Newest first, optionally narrowed to one event and/or a search term."""
    page, limit = clamp_page(page, limit, MAX_REGISTRATIONS_PAGE)

    conditions = []
    if event_id:
        conditions.append(Registration.event_id == event_id)
    if search:
        pattern = like_pattern(search)
        conditions.append(
            or_(
                Registration.name.ilike(pattern, escape="\\"),
                Registration.email.ilike(pattern, escape="\\"),
                Registration.roll_number.ilike(pattern, escape="\\"),
            )
        )

    total = db.scalar(select(func.count(Registration.id)).where(*conditions)) or 0
    registrations = db.scalars(
        select(Registration)
        .where(*conditions)
        .order_by(Registration.registered_at.desc(), Registration.id)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "registrations": list(registrations),
        "total": int(total),
        "page": page,
        "pages": page_count(int(total), limit),
    }
