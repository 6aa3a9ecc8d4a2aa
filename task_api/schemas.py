"""
Request/response schemas for the HTTP API.

Field names are camelCase on the wire. Estimated time is exchanged in hours.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import MAX_DURATION_MINUTES

MAX_ESTIMATED_HOURS = MAX_DURATION_MINUTES / 60.0


class TaskRequest(BaseModel):
    """Schema for creating or replacing a task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    description: str | None = None
    estimated_time: float = Field(ge=0, le=MAX_ESTIMATED_HOURS, allow_inf_nan=False)  # hours


class TaskResponse(BaseModel):
    """Schema returned for a task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    description: str | None = None
    estimated_time: float  # hours
    created_at: datetime
    updated_at: datetime


class ErrorResponse(BaseModel):
    """Body returned for every non-2xx response."""

    message: str
    code: str | None = None
    fields: dict[str, str] | None = None


class HealthResponse(BaseModel):
    """Health probe result."""

    status: str
    timestamp: datetime
    tasks: int | None = None
