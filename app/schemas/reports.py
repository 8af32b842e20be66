from app.schemas.common import APIModel


class CategoryCount(APIModel):
    category: str
    count: int


class TopEvent(APIModel):
    id: str
    title: str
    registered: int
    capacity: int


class StatsOut(APIModel):
    total_events: int
    total_registrations: int
    upcoming_events: int
    cancelled_events: int
    total_capacity: int
    total_registered: int
    events_by_category: list[CategoryCount]
    top_events: list[TopEvent]
