import logging

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.dates import parse_datetime, utcnow
from app.core.errors import EventNotFound, ValidationFailed
from app.models.events import Event, EventStatus
from app.models.registrations import Registration
from app.services.pagination import clamp_page, like_pattern, page_count

logger = logging.getLogger(__name__)

# Fields an admin may set on an existing event; anything else is ignored.
UPDATABLE_FIELDS = ("title", "description", "date", "venue", "capacity", "category", "image", "tags", "status")

EVENT_STATUSES = tuple(status.value for status in EventStatus)

MAX_EVENTS_PAGE = 100

TEXT_FIELDS = ("title", "description", "venue", "category")


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_capacity(value) -> int | None:
    """Whole-number capacity from a JSON number or numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def validate_event_fields(data: dict) -> list[str]:
    """Return every rule the event data breaks (empty list when valid)."""
    errors = []
    if len(_text(data.get("title"))) < 3:
        errors.append("Title must be at least 3 characters")
    if len(_text(data.get("description"))) < 10:
        errors.append("Description must be at least 10 characters")

    date = data.get("date")
    if date is None or (isinstance(date, str) and not date.strip()):
        errors.append("Date is required")
    else:
        try:
            parse_datetime(date)
        except ValueError:
            errors.append("Date must be a valid ISO date string")

    if len(_text(data.get("venue"))) < 2:
        errors.append("Venue is required")

    capacity = parse_capacity(data.get("capacity"))
    if capacity is None or capacity < 1:
        errors.append("Capacity must be a positive number")

    if not _text(data.get("category")):
        errors.append("Category is required")

    image = data.get("image")
    if image is not None and not isinstance(image, str):
        errors.append("Image must be a URL string")

    status = data.get("status")
    if status is not None and status not in EVENT_STATUSES:
        errors.append(f"Status must be one of: {', '.join(EVENT_STATUSES)}")

    tags = data.get("tags")
    if tags is not None and not (isinstance(tags, list) and all(isinstance(tag, str) for tag in tags)):
        errors.append("Tags must be a list of strings")
    return errors


def get_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFound()
    return event


def create_event(db: Session, data: dict, *, created_by: str) -> Event:
    errors = validate_event_fields(data)
    if errors:
        raise ValidationFailed(errors)

    now = utcnow()
    event = Event(
        title=data["title"].strip(),
        description=data["description"].strip(),
        date=parse_datetime(data["date"]),
        venue=data["venue"].strip(),
        capacity=parse_capacity(data["capacity"]),
        registered=0,
        category=data["category"].strip(),
        image=data.get("image") or None,
        tags=list(data.get("tags") or []),
        status=data.get("status") or EventStatus.UPCOMING.value,
        created_by=created_by,
        created_at=now,
        updated_at=now,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Event %s (%s) created by %s", event.id, event.title, created_by)
    return event


def update_event(db: Session, event_id: str, patch: dict) -> Event:
    """
    Apply a partial update. Only UPDATABLE_FIELDS are considered and the
    merged result must still be a valid event.
    """
    event = get_event(db, event_id)
    changes = {key: patch[key] for key in UPDATABLE_FIELDS if patch.get(key) is not None}

    merged = {key: getattr(event, key) for key in UPDATABLE_FIELDS}
    merged.update(changes)
    errors = validate_event_fields(merged)
    capacity = parse_capacity(changes.get("capacity"))
    if capacity is not None and 0 < capacity < event.registered:
        errors.append(f"Capacity cannot be less than current registrations ({event.registered})")
    if errors:
        raise ValidationFailed(errors)

    for key, value in changes.items():
        if key == "date":
            value = parse_datetime(value)
        elif key == "capacity":
            value = parse_capacity(value)
        elif key in TEXT_FIELDS:
            value = value.strip()
        setattr(event, key, value)
    event.updated_at = utcnow()

    try:
        db.commit()
    except IntegrityError:
        # registered <= capacity check constraint: a registration landed
        # between our read and this write.
        db.rollback()
        raise ValidationFailed(["Capacity cannot be less than current registrations"])
    db.refresh(event)
    logger.info("Event %s updated (%s)", event_id, ", ".join(sorted(changes)) or "no fields")
    return event


def delete_event(db: Session, event_id: str) -> int:
    """Delete an event and its registrations in one transaction.

    Registrations are removed before the event row. Returns how many
    registrations were removed.
    """
    get_event(db, event_id)
    try:
        removed = db.execute(delete(Registration).where(Registration.event_id == event_id)).rowcount
        db.execute(delete(Event).where(Event.id == event_id))
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Event %s deleted with %s registration(s)", event_id, removed)
    return int(removed or 0)


def list_events(
    db: Session,
    *,
    category: str | None = None,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    page, limit = clamp_page(page, limit, MAX_EVENTS_PAGE)

    conditions = []
    if category and category != "All":
        conditions.append(Event.category == category)
    if status:
        conditions.append(Event.status == status)
    if search:
        pattern = like_pattern(search)
        conditions.append(
            or_(
                Event.title.ilike(pattern, escape="\\"),
                Event.description.ilike(pattern, escape="\\"),
                Event.venue.ilike(pattern, escape="\\"),
            )
        )

    total = int(db.scalar(select(func.count(Event.id)).where(*conditions)) or 0)
    events = db.scalars(
        select(Event)
        .where(*conditions)
        .order_by(Event.date.asc(), Event.id)
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {"events": list(events), "total": total, "page": page, "pages": page_count(total, limit)}
