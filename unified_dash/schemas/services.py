from datetime import datetime
from typing import Literal

from pydantic import Field

from unified_dash.schemas.base import DashModel, PartialUpdate, utcnow

ServiceCategory = Literal["ai", "db", "automation", "vision", "infra"]
ServiceState = Literal["operational", "warning", "critical", "offline"]


class Service(DashModel):
    id: str
    name: str
    category: ServiceCategory = Field(alias="type")
    status: ServiceState
    url: str | None = None
    container_id: str | None = None
    uptime: float | None = None  # percentage, descriptive only
    last_checked: datetime = Field(default_factory=utcnow)


class ServiceCreate(DashModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: ServiceCategory = Field(alias="type")
    status: ServiceState = "operational"
    url: str | None = None
    container_id: str | None = None
    uptime: float | None = Field(default=None, ge=0, le=100)


class ServiceUpdate(PartialUpdate):
    non_nullable = frozenset({"name", "category", "status"})

    name: str | None = None
    category: ServiceCategory | None = Field(default=None, alias="type")
    status: ServiceState | None = None
    url: str | None = None
    container_id: str | None = None
    uptime: float | None = Field(default=None, ge=0, le=100)
