from typing import Any

from pydantic import ConfigDict

from app.schemas.common import APIModel, Timestamp
from app.schemas.events import EventRef


class RegistrationRequest(APIModel):
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    email: Any = None
    phone: Any = None
    department: Any = None
    year: Any = None
    roll_number: Any = None


class RegistrationOut(APIModel):
    id: str
    event_id: str
    event_title: str
    name: str
    email: str
    phone: str
    department: str
    year: str
    roll_number: str
    ticket_id: str
    registered_at: Timestamp


class RegistrationCreatedOut(APIModel):
    message: str
    registration: RegistrationOut


class RegistrationListOut(APIModel):
    registrations: list[RegistrationOut]
    total: int
    page: int
    pages: int


class EventRegistrationsOut(RegistrationListOut):
    event: EventRef
