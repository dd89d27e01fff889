from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from unified_dash.schemas.base import DashModel, utcnow

EventCategory = Literal["service", "container", "gpu", "storage", "automation", "vision"]
Severity = Literal["info", "warning", "error"]


class Event(DashModel):
    id: str
    category: EventCategory = Field(alias="type")
    severity: Severity
    title: str
    description: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime = Field(default_factory=utcnow)


class EventCreate(DashModel):
    category: EventCategory = Field(alias="type")
    severity: Severity
    title: str = Field(..., min_length=1)
    description: str | None = None
    metadata: dict[str, Any] | None = None
