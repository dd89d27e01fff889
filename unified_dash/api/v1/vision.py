from fastapi import APIRouter, Depends

from unified_dash.core.exceptions import NotFoundError
from unified_dash.dependencies import get_control_plane, get_repository
from unified_dash.schemas.vision import Camera, CameraUpdate, Caption, CaptionCreate
from unified_dash.services.control_plane import ControlPlane
from unified_dash.services.repository import Repository

router = APIRouter()


@router.get("/api/cameras")
async def list_cameras(repository: Repository = Depends(get_repository)) -> list[Camera]:
    return await repository.cameras.list_all()


@router.get("/api/cameras/{camera_id}")
async def get_camera(camera_id: str, repository: Repository = Depends(get_repository)) -> Camera:
    camera = await repository.cameras.get(camera_id)
    if camera is None:
        raise NotFoundError("Camera not found")
    return camera


@router.patch("/api/cameras/{camera_id}")
async def update_camera(
    camera_id: str,
    body: CameraUpdate,
    control_plane: ControlPlane = Depends(get_control_plane),
) -> Camera:
    """Update camera settings. Toggling captions is recorded as a vision event."""
    return await control_plane.update_camera(camera_id, body)


@router.get("/api/captions")
async def list_captions(repository: Repository = Depends(get_repository)) -> list[Caption]:
    return await repository.captions.list_all()


@router.post("/api/captions", status_code=201)
async def create_caption(
    body: CaptionCreate,
    control_plane: ControlPlane = Depends(get_control_plane),
) -> Caption:
    return await control_plane.record_caption(body)
