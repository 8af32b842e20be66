import secrets
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.dates import utcnow
from app.database.db import Base
from app.models.events import Event

TICKET_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


def new_ticket_id() -> str:
    return "TKT-" + "".join(secrets.choice(TICKET_ALPHABET) for _ in range(8))


class Registration(Base):
    __tablename__ = "registrations"
    # (event, email) uniqueness lives in the schema, not only in service code.
    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_registrations_event_email"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    event_id: Mapped[str] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Snapshot of the title at registration time; never refreshed.
    event_title: Mapped[str] = mapped_column(String(200), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(10), nullable=False)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    year: Mapped[str] = mapped_column(String(20), nullable=False)
    roll_number: Mapped[str] = mapped_column(String(50), nullable=False)
    ticket_id: Mapped[str] = mapped_column(String(12), nullable=False, unique=True, default=new_ticket_id)
    registered_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)

    event: Mapped[Event] = relationship()
