from typing import Any

from pydantic import ConfigDict

from app.schemas.common import APIModel, Timestamp


# ---------- Event ----------
class EventPayload(APIModel):
    """Create/patch body. Every field is optional here; the event service
    reports all rule violations together instead of failing on the first."""

    model_config = ConfigDict(extra="ignore")

    title: Any = None
    description: Any = None
    date: Any = None
    venue: Any = None
    capacity: Any = None
    category: Any = None
    image: Any = None
    tags: Any = None
    status: Any = None


class EventOut(APIModel):
    id: str
    title: str
    description: str
    date: Timestamp
    venue: str
    capacity: int
    registered: int
    category: str
    image: str | None = None
    tags: list[str]
    status: str
    created_by: str | None = None
    created_at: Timestamp
    updated_at: Timestamp


class EventDetailOut(EventOut):
    registration_count: int


class EventListOut(APIModel):
    events: list[EventOut]
    total: int
    page: int
    pages: int


class EventMutationOut(APIModel):
    message: str
    event: EventOut


class EventRef(APIModel):
    id: str
    title: str
