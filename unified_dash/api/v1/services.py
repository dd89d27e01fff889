from fastapi import APIRouter, Depends

from unified_dash.core.exceptions import DashError, NotFoundError
from unified_dash.dependencies import get_control_plane, get_repository
from unified_dash.schemas.services import Service, ServiceCreate, ServiceUpdate
from unified_dash.services.control_plane import ControlPlane
from unified_dash.services.repository import Repository

router = APIRouter()


@router.get("/api/services")
async def list_services(repository: Repository = Depends(get_repository)) -> list[Service]:
    """All known services, sorted by name."""
    return await repository.services.list_all()


@router.get("/api/services/{service_id}")
async def get_service(service_id: str, repository: Repository = Depends(get_repository)) -> Service:
    service = await repository.services.get(service_id)
    if service is None:
        raise NotFoundError("Service not found")
    return service


@router.post("/api/services", status_code=201)
async def create_service(body: ServiceCreate, repository: Repository = Depends(get_repository)) -> Service:
    """Register a new service. Ids are unique."""
    if await repository.services.get(body.id) is not None:
        raise DashError(code="conflict", message=f"Service already exists: {body.id}", status=409)
    service = Service(**body.model_dump())
    created = await repository.services.add(service)
    await repository.events.record(
        category="service",
        severity="info",
        title=f"{created.name} registered",
        metadata={"serviceId": created.id},
    )
    return created


@router.patch("/api/services/{service_id}")
async def update_service(
    service_id: str,
    body: ServiceUpdate,
    control_plane: ControlPlane = Depends(get_control_plane),
) -> Service:
    return await control_plane.update_service(service_id, body)
