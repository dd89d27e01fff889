"""In-memory entity repository.

Every entity kind lives in its own ``Collection``: an owned id -> model mapping
guarded by its own ``asyncio.Lock`` so concurrent partial merges on the same id
never interleave. Callers only ever receive deep copies.
"""

import asyncio
import uuid
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import structlog
from pydantic import BaseModel

from unified_dash.schemas.automation import AutomationStats, AutomationStatsUpdate
from unified_dash.schemas.base import utcnow
from unified_dash.schemas.models import ModelEntry
from unified_dash.schemas.services import Service
from unified_dash.schemas.telemetry import Gpu, StorageVolume
from unified_dash.schemas.vision import Camera, Caption
from unified_dash.services.events import EventRecorder

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

# Fields that can never be changed through update().
IDENTITY_FIELDS = frozenset({"id"})


def _by_name(item: Any) -> tuple[str, str]:
    return (item.name.casefold(), item.name)


def _pinned_then_name(item: ModelEntry) -> tuple[bool, str, str]:
    return (not item.is_pinned, item.name.casefold(), item.name)


def _by_timestamp(item: Caption):
    return item.timestamp


def _update_fields(updates: BaseModel | dict) -> dict:
    if isinstance(updates, BaseModel):
        fields = updates.model_dump(exclude_unset=True)
    else:
        fields = dict(updates)
    for key in IDENTITY_FIELDS:
        fields.pop(key, None)
    return fields


class Collection(Generic[T]):
    """Owned collection for one entity kind with a fixed default ordering."""

    def __init__(
        self,
        name: str,
        model: type[T],
        sort_key: Callable[[T], Any],
        reverse: bool = False,
        touch_field: str | None = None,
    ):
        self.name = name
        self._model = model
        self._sort_key = sort_key
        self._reverse = reverse
        self._touch_field = touch_field
        self._items: dict[str, T] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._items)

    async def list_all(self) -> list[T]:
        ordered = sorted(self._items.values(), key=self._sort_key, reverse=self._reverse)
        return [item.model_copy(deep=True) for item in ordered]

    async def get(self, item_id: str) -> T | None:
        item = self._items.get(item_id)
        return item.model_copy(deep=True) if item is not None else None

    async def add(self, item: T) -> T:
        """Insert (or replace) an entity that already carries its own id."""
        async with self._lock:
            self._items[item.id] = item.model_copy(deep=True)
        return item.model_copy(deep=True)

    async def create(self, **fields: Any) -> T:
        """Create an entity with a generated id; timestamps come from model defaults."""
        fields.pop("id", None)
        item = self._model(id=str(uuid.uuid4()), **fields)
        async with self._lock:
            self._items[item.id] = item
        logger.debug("entity_created", collection=self.name, id=item.id)
        return item.model_copy(deep=True)

    async def update(self, item_id: str, updates: BaseModel | dict) -> T | None:
        """Shallow-merge ``updates`` over the stored entity. Returns None for unknown ids."""
        fields = _update_fields(updates)
        async with self._lock:
            current = self._items.get(item_id)
            if current is None:
                return None
            if self._touch_field:
                fields[self._touch_field] = utcnow()
            merged = self._model.model_validate({**current.model_dump(), **fields})
            self._items[item_id] = merged
        logger.debug("entity_updated", collection=self.name, id=item_id, fields=sorted(fields))
        return merged.model_copy(deep=True)


class AutomationStore:
    """Singleton home-automation coverage stats."""

    def __init__(self):
        self._stats: AutomationStats | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> AutomationStats | None:
        return self._stats.model_copy(deep=True) if self._stats is not None else None

    async def set(self, stats: AutomationStats) -> AutomationStats:
        async with self._lock:
            self._stats = stats.model_copy(deep=True)
        return stats.model_copy(deep=True)

    async def update(self, updates: AutomationStatsUpdate | dict) -> AutomationStats | None:
        fields = _update_fields(updates)
        async with self._lock:
            if self._stats is None:
                return None
            fields["last_updated"] = utcnow()
            self._stats = AutomationStats.model_validate({**self._stats.model_dump(), **fields})
            return self._stats.model_copy(deep=True)


class Repository:
    """Owns all dashboard entity state. Constructed once by the composition root."""

    def __init__(self, event_log_limit: int = 50):
        self.services: Collection[Service] = Collection(
            "services", Service, _by_name, touch_field="last_checked"
        )
        self.gpus: Collection[Gpu] = Collection("gpus", Gpu, _by_name, touch_field="last_updated")
        self.storage: Collection[StorageVolume] = Collection(
            "storage", StorageVolume, _by_name, touch_field="last_updated"
        )
        self.cameras: Collection[Camera] = Collection("cameras", Camera, _by_name)
        self.captions: Collection[Caption] = Collection("captions", Caption, _by_timestamp, reverse=True)
        self.models: Collection[ModelEntry] = Collection("models", ModelEntry, _pinned_then_name)
        self.automation = AutomationStore()
        self.events = EventRecorder(limit=event_log_limit)
