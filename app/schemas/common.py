from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from app.core.dates import to_iso

Timestamp = Annotated[datetime, PlainSerializer(to_iso, return_type=str)]


class APIModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class MessageOut(BaseModel):
    message: str
