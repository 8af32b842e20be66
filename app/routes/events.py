from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.errors import EventNotFound
from app.database.db import get_db
from app.schemas.events import EventDetailOut, EventListOut, EventOut
from app.services import events as event_service
from app.services.registrations import count_registrations

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", response_model=EventListOut)
def list_events(
    category: str | None = None,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
):
    return event_service.list_events(
        db, category=category, status=status, search=search, page=page, limit=limit
    )


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    try:
        event = event_service.get_event(db, event_id)
    except EventNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return EventDetailOut(
        **EventOut.model_validate(event).model_dump(),
        registration_count=count_registrations(db, event_id),
    )
