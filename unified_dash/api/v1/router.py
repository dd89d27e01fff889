from fastapi import APIRouter

from unified_dash.api.v1.automation import router as automation_router
from unified_dash.api.v1.commands import router as commands_router
from unified_dash.api.v1.events import router as events_router
from unified_dash.api.v1.health import router as health_router
from unified_dash.api.v1.metrics import router as metrics_router
from unified_dash.api.v1.models import router as models_router
from unified_dash.api.v1.services import router as services_router
from unified_dash.api.v1.telemetry import router as telemetry_router
from unified_dash.api.v1.vision import router as vision_router
from unified_dash.api.v1.websocket import router as websocket_router

v1_router = APIRouter()

v1_router.include_router(health_router, tags=["Health"])
v1_router.include_router(services_router, tags=["Services"])
v1_router.include_router(telemetry_router, tags=["Telemetry"])
v1_router.include_router(vision_router, tags=["Vision"])
v1_router.include_router(automation_router, tags=["Home Automation"])
v1_router.include_router(models_router, tags=["Models"])
v1_router.include_router(events_router, tags=["Events"])
v1_router.include_router(commands_router, tags=["AI Command"])

# WebSocket
v1_router.include_router(websocket_router, tags=["WebSocket"])

# Monitoring
v1_router.include_router(metrics_router, tags=["Metrics"])
