from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.events import Event, EventStatus
from app.models.registrations import Registration

TOP_EVENTS_LIMIT = 5


def get_dashboard_stats(db: Session) -> dict:
    """Aggregate counts for the admin dashboard."""
    total_events = db.scalar(select(func.count(Event.id)))
    total_registrations = db.scalar(select(func.count(Registration.id)))
    upcoming_events = db.scalar(
        select(func.count(Event.id)).where(Event.status == EventStatus.UPCOMING.value)
    )
    cancelled_events = db.scalar(
        select(func.count(Event.id)).where(Event.status == EventStatus.CANCELLED.value)
    )
    total_capacity = db.scalar(select(func.sum(Event.capacity)))
    total_registered = db.scalar(select(func.sum(Event.registered)))

    event_count = func.count(Event.id).label("event_count")
    by_category = db.execute(
        select(Event.category, event_count)
        .group_by(Event.category)
        .order_by(event_count.desc(), Event.category)
    ).all()

    top_events = db.execute(
        select(Event.id, Event.title, Event.registered, Event.capacity)
        .order_by(Event.registered.desc(), Event.date.asc())
        .limit(TOP_EVENTS_LIMIT)
    ).all()

    return {
        "total_events": int(total_events or 0),
        "total_registrations": int(total_registrations or 0),
        "upcoming_events": int(upcoming_events or 0),
        "cancelled_events": int(cancelled_events or 0),
        "total_capacity": int(total_capacity or 0),
        "total_registered": int(total_registered or 0),
        "events_by_category": [{"category": row.category, "count": row.event_count} for row in by_category],
        "top_events": [
            {"id": row.id, "title": row.title, "registered": row.registered, "capacity": row.capacity}
            for row in top_events
        ],
    }
