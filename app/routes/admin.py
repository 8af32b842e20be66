from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.errors import AppError, to_http
from app.database.db import get_db
from app.routes.deps import require_admin
from app.schemas.auth import AdminClaims
from app.schemas.common import MessageOut
from app.schemas.events import EventMutationOut, EventPayload
from app.schemas.registrations import EventRegistrationsOut, RegistrationListOut
from app.services import events as event_service
from app.services.registrations import list_registrations

# Every route here requires a valid bearer token.
router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.post("/events", response_model=EventMutationOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventPayload,
    db: Session = Depends(get_db),
    current_admin: AdminClaims = Depends(require_admin),
):
    try:
        event = event_service.create_event(
            db, payload.model_dump(exclude_unset=True), created_by=current_admin.email
        )
    except AppError as e:
        raise to_http(e)
    return {"message": "Event created successfully", "event": event}


@router.put("/events/{event_id}", response_model=EventMutationOut)
def update_event(event_id: str, payload: EventPayload, db: Session = Depends(get_db)):
    try:
        event = event_service.update_event(db, event_id, payload.model_dump(exclude_unset=True))
    except AppError as e:
        raise to_http(e)
    return {"message": "Event updated successfully", "event": event}


@router.delete("/events/{event_id}", response_model=MessageOut)
def delete_event(event_id: str, db: Session = Depends(get_db)):
    try:
        event_service.delete_event(db, event_id)
    except AppError as e:
        raise to_http(e)
    return {"message": "Event deleted successfully"}


@router.get("/events/{event_id}/registrations", response_model=EventRegistrationsOut)
def event_registrations(
    event_id: str,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    try:
        event = event_service.get_event(db, event_id)
    except AppError as e:
        raise to_http(e)
    result = list_registrations(db, event_id=event_id, search=search, page=page, limit=limit)
    return {"event": {"id": event.id, "title": event.title}, **result}


@router.get("/registrations", response_model=RegistrationListOut)
def all_registrations(
    event_id: str | None = Query(None, alias="eventId"),
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    return list_registrations(db, event_id=event_id, search=search, page=page, limit=limit)
