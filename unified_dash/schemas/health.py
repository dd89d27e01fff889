from typing import Literal

from unified_dash.schemas.base import DashModel


class HealthResponse(DashModel):
    status: str  # "ok" or "degraded"
    command_mode: Literal["delegated", "fallback"]
    observers: int = 0
    services_total: int = 0
    services_degraded: int = 0
    version: str = "0.1.0"
