from fastapi import APIRouter, Depends

from unified_dash.core.exceptions import NotFoundError
from unified_dash.dependencies import get_repository
from unified_dash.schemas.automation import AutomationStats, AutomationStatsUpdate
from unified_dash.services.repository import Repository

router = APIRouter()


@router.get("/api/home-assistant")
async def automation_stats(repository: Repository = Depends(get_repository)) -> AutomationStats:
    stats = await repository.automation.get()
    if stats is None:
        raise NotFoundError("Home Assistant stats not found")
    return stats


@router.patch("/api/home-assistant")
async def update_automation_stats(
    body: AutomationStatsUpdate,
    repository: Repository = Depends(get_repository),
) -> AutomationStats:
    stats = await repository.automation.update(body)
    if stats is None:
        raise NotFoundError("Home Assistant stats not found")
    return stats
