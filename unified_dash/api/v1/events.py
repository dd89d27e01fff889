from fastapi import APIRouter, Depends

from unified_dash.dependencies import get_repository
from unified_dash.schemas.events import Event, EventCreate
from unified_dash.services.repository import Repository

router = APIRouter()


@router.get("/api/events")
async def list_events(repository: Repository = Depends(get_repository)) -> list[Event]:
    """Most recent system events, newest first."""
    return await repository.events.list_all()


@router.post("/api/events", status_code=201)
async def create_event(body: EventCreate, repository: Repository = Depends(get_repository)) -> Event:
    return await repository.events.create(body)
