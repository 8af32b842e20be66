from pydantic import BaseModel


class HealthOut(BaseModel):
    status: str
    database: str
    uptime: int | None = None
    timestamp: str | None = None
    environment: str | None = None
