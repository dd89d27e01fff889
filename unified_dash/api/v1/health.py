from fastapi import APIRouter, Request

from unified_dash.schemas.health import HealthResponse

router = APIRouter()


@router.get("/api/health")
async def health(request: Request) -> HealthResponse:
    """Liveness plus a summary of service states and push observers."""
    state = request.app.state
    services = await state.repository.services.list_all()
    degraded = sum(1 for s in services if s.status != "operational")
    return HealthResponse(
        status="ok" if degraded == 0 else "degraded",
        command_mode=state.command_router.mode,
        observers=state.broadcaster.observer_count,
        services_total=len(services),
        services_degraded=degraded,
    )
