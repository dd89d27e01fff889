from fastapi import APIRouter, Depends

from unified_dash.core.exceptions import NotFoundError
from unified_dash.dependencies import get_control_plane, get_repository
from unified_dash.schemas.telemetry import (
    Gpu,
    GpuUpdate,
    OffloadRequest,
    OffloadResponse,
    StorageUpdate,
    StorageVolume,
)
from unified_dash.services.control_plane import ControlPlane
from unified_dash.services.repository import Repository

router = APIRouter()


@router.get("/api/gpus")
async def list_gpus(repository: Repository = Depends(get_repository)) -> list[Gpu]:
    return await repository.gpus.list_all()


@router.get("/api/gpus/{gpu_id}")
async def get_gpu(gpu_id: str, repository: Repository = Depends(get_repository)) -> Gpu:
    gpu = await repository.gpus.get(gpu_id)
    if gpu is None:
        raise NotFoundError("GPU not found")
    return gpu


@router.patch("/api/gpus/{gpu_id}")
async def update_gpu(gpu_id: str, body: GpuUpdate, repository: Repository = Depends(get_repository)) -> Gpu:
    gpu = await repository.gpus.update(gpu_id, body)
    if gpu is None:
        raise NotFoundError("GPU not found")
    return gpu


@router.get("/api/storage")
async def list_storage(repository: Repository = Depends(get_repository)) -> list[StorageVolume]:
    return await repository.storage.list_all()


@router.post("/api/storage/offload")
async def offload_storage(
    body: OffloadRequest,
    control_plane: ControlPlane = Depends(get_control_plane),
) -> OffloadResponse:
    """Offload cold data from a volume to object storage."""
    return await control_plane.offload_storage(body.storage_id)


@router.get("/api/storage/{storage_id}")
async def get_storage(storage_id: str, repository: Repository = Depends(get_repository)) -> StorageVolume:
    volume = await repository.storage.get(storage_id)
    if volume is None:
        raise NotFoundError("Storage not found")
    return volume


@router.patch("/api/storage/{storage_id}")
async def update_storage(
    storage_id: str,
    body: StorageUpdate,
    repository: Repository = Depends(get_repository),
) -> StorageVolume:
    volume = await repository.storage.update(storage_id, body)
    if volume is None:
        raise NotFoundError("Storage not found")
    return volume
