from datetime import datetime

from pydantic import Field

from unified_dash.schemas.base import DashModel, PartialUpdate, utcnow


class AutomationStats(DashModel):
    id: str = "ha_stats"
    total_entities: int = Field(ge=0)
    active_automations: int = Field(ge=0)
    total_automations: int = Field(ge=0)
    last_updated: datetime = Field(default_factory=utcnow)


class AutomationStatsUpdate(PartialUpdate):
    non_nullable = frozenset({"total_entities", "active_automations", "total_automations"})

    total_entities: int | None = Field(default=None, ge=0)
    active_automations: int | None = Field(default=None, ge=0)
    total_automations: int | None = Field(default=None, ge=0)
