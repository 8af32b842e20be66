from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import AppError, to_http
from app.database.db import get_db
from app.schemas.registrations import RegistrationCreatedOut, RegistrationRequest
from app.services.registrations import register

router = APIRouter(prefix="/api/events", tags=["registrations"])


@router.post(
    "/{event_id}/register",
    response_model=RegistrationCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
def register_for_event(
    event_id: str,
    payload: RegistrationRequest | None = None,
    db: Session = Depends(get_db),
):
    # Field checks happen in the service, after the event itself is checked.
    fields = payload.model_dump() if payload is not None else {}
    try:
        registration = register(db, event_id=event_id, fields=fields)
    except AppError as e:
        raise to_http(e)
    return {"message": "Registration successful!", "registration": registration}
