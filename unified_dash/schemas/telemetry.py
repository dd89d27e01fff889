from datetime import datetime
from typing import Literal

from pydantic import Field

from unified_dash.schemas.base import DashModel, PartialUpdate, utcnow

StorageCategory = Literal["models", "data", "system"]


class Gpu(DashModel):
    id: str
    name: str
    utilization: float = Field(ge=0, le=1)
    vram_used: float  # GB
    vram_total: float  # GB
    temperature: int | None = None
    jobs_queued: int = Field(default=0, ge=0)
    last_updated: datetime = Field(default_factory=utcnow)


class GpuUpdate(PartialUpdate):
    non_nullable = frozenset({"name", "utilization", "vram_used", "vram_total", "jobs_queued"})

    name: str | None = None
    utilization: float | None = Field(default=None, ge=0, le=1)
    vram_used: float | None = Field(default=None, ge=0)
    vram_total: float | None = Field(default=None, ge=0)
    temperature: int | None = None
    jobs_queued: int | None = Field(default=None, ge=0)


class StorageVolume(DashModel):
    id: str
    name: str
    path: str
    used_gb: float = Field(alias="usedGB")
    total_gb: float = Field(alias="totalGB")
    usage_percent: float
    category: StorageCategory = Field(alias="type")
    last_updated: datetime = Field(default_factory=utcnow)


class StorageUpdate(PartialUpdate):
    """Partial update. Callers changing capacity must send a matching usage_percent."""

    non_nullable = frozenset({"name", "path", "used_gb", "total_gb", "usage_percent", "category"})

    name: str | None = None
    path: str | None = None
    used_gb: float | None = Field(default=None, ge=0, alias="usedGB")
    total_gb: float | None = Field(default=None, gt=0, alias="totalGB")
    usage_percent: float | None = Field(default=None, ge=0)
    category: StorageCategory | None = Field(default=None, alias="type")


class OffloadRequest(DashModel):
    storage_id: str | None = None


class OffloadResponse(DashModel):
    success: bool
    message: str
    freed_gb: float = Field(alias="freedGB")


class MetricsData(DashModel):
    gpus: list[Gpu]
    storage: list[StorageVolume]
    timestamp: str


class MetricsUpdate(DashModel):
    """Push message sent to every telemetry observer on each tick."""

    type: Literal["metrics_update"] = "metrics_update"
    data: MetricsData
