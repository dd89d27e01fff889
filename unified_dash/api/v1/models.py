from fastapi import APIRouter, Depends

from unified_dash.core.exceptions import NotFoundError
from unified_dash.dependencies import get_repository
from unified_dash.schemas.models import ModelEntry
from unified_dash.services.repository import Repository

router = APIRouter()


@router.get("/api/models")
async def list_models(repository: Repository = Depends(get_repository)) -> list[ModelEntry]:
    """Model placements, pinned models first."""
    return await repository.models.list_all()


@router.get("/api/models/{model_id}")
async def get_model(model_id: str, repository: Repository = Depends(get_repository)) -> ModelEntry:
    model = await repository.models.get(model_id)
    if model is None:
        raise NotFoundError("Model not found")
    return model
