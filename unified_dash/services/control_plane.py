"""Mutations that also append an event to the recorder.

Each operation performs the entity update and the event append as two
independent steps; there is no rollback if the second one fails.
"""

import structlog

from unified_dash.core.exceptions import InvalidInputError, NotFoundError
from unified_dash.schemas.services import Service, ServiceUpdate
from unified_dash.schemas.telemetry import OffloadResponse
from unified_dash.schemas.vision import Camera, CameraUpdate, Caption, CaptionCreate
from unified_dash.services.repository import Repository

logger = structlog.get_logger()

STATUS_TO_SEVERITY = {
    "operational": "info",
    "warning": "warning",
    "critical": "error",
    "offline": "error",
}


class ControlPlane:
    def __init__(self, repository: Repository, offload_freed_gb: float = 200.0):
        self._repository = repository
        self._offload_freed_gb = offload_freed_gb

    async def update_camera(self, camera_id: str, updates: CameraUpdate) -> Camera:
        camera = await self._repository.cameras.get(camera_id)
        if camera is None:
            raise NotFoundError("Camera not found")

        updated = await self._repository.cameras.update(camera_id, updates)
        if updated is None:
            raise NotFoundError("Camera not found")

        if "caption_enabled" in updates.model_fields_set and updates.caption_enabled is not None:
            state = "enabled" if updates.caption_enabled else "disabled"
            await self._repository.events.record(
                category="vision",
                severity="info",
                title=f"Caption {state} for {camera.name}",
                description="Vision Caption API toggled for camera",
                metadata={"cameraId": camera_id},
            )
        return updated

    async def update_service(self, service_id: str, updates: ServiceUpdate) -> Service:
        service = await self._repository.services.get(service_id)
        if service is None:
            raise NotFoundError("Service not found")

        updated = await self._repository.services.update(service_id, updates)
        if updated is None:
            raise NotFoundError("Service not found")

        if updated.status != service.status:
            await self._repository.events.record(
                category="service",
                severity=STATUS_TO_SEVERITY[updated.status],
                title=f"{updated.name} is now {updated.status}",
                description=f"Status changed from {service.status} to {updated.status}",
                metadata={"serviceId": service_id},
            )
        return updated

    async def offload_storage(self, storage_id: str | None) -> OffloadResponse:
        """Move cold data off a volume to object storage, freeing a fixed amount."""
        if not storage_id:
            raise InvalidInputError("Storage ID is required")

        volume = await self._repository.storage.get(storage_id)
        if volume is None:
            raise NotFoundError("Storage not found")

        freed_gb = self._offload_freed_gb
        new_used = max(0.0, volume.used_gb - freed_gb)
        new_percent = new_used / volume.total_gb * 100 if volume.total_gb else 0.0

        await self._repository.storage.update(
            storage_id, {"used_gb": new_used, "usage_percent": new_percent}
        )
        await self._repository.events.record(
            category="storage",
            severity="info",
            title=f"MinIO offload completed for {volume.name}",
            description=f"Freed {freed_gb:g} GB - usage now at {new_percent:.1f}%",
            metadata={"storageId": storage_id, "freedGB": freed_gb},
        )
        logger.info("storage_offloaded", storage_id=storage_id, freed_gb=freed_gb, usage_percent=new_percent)
        return OffloadResponse(success=True, message="Offload completed", freed_gb=freed_gb)

    async def record_caption(self, request: CaptionCreate) -> Caption:
        camera = await self._repository.cameras.get(request.camera_id)
        if camera is None:
            raise NotFoundError("Camera not found")

        caption = await self._repository.captions.create(
            camera_id=camera.id,
            camera_name=camera.name,
            caption=request.caption,
            snapshot_url=request.snapshot_url,
        )
        await self._repository.cameras.update(
            camera.id, {"last_caption": caption.caption, "last_caption_time": caption.timestamp}
        )
        await self._repository.events.record(
            category="vision",
            severity="info",
            title="New caption generated",
            description=f"{camera.name}: {caption.caption}",
            metadata={"cameraId": camera.id, "captionId": caption.id},
        )
        return caption
