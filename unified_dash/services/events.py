"""Append-only, capped system event log."""

import asyncio
import itertools
import uuid
from datetime import datetime
from typing import Any

import structlog

from unified_dash.schemas.base import utcnow
from unified_dash.schemas.events import Event, EventCreate

logger = structlog.get_logger()


class EventRecorder:
    """Keeps only the ``limit`` most recent events, newest first.

    Events with identical timestamps are ordered by insertion, so the most
    recently appended one always wins a tie.
    """

    def __init__(self, limit: int = 50):
        self.limit = limit
        self._entries: list[tuple[datetime, int, Event]] = []
        self._seq = itertools.count()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    async def list_all(self) -> list[Event]:
        return [event.model_copy(deep=True) for _, _, event in self._entries]

    async def get(self, event_id: str) -> Event | None:
        for _, _, event in self._entries:
            if event.id == event_id:
                return event.model_copy(deep=True)
        return None

    async def create(self, event: EventCreate) -> Event:
        return await self.record(
            category=event.category,
            severity=event.severity,
            title=event.title,
            description=event.description,
            metadata=event.metadata,
        )

    async def record(
        self,
        category: str,
        severity: str,
        title: str,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        timestamp: datetime | None = None,
    ) -> Event:
        event = Event(
            id=str(uuid.uuid4()),
            category=category,
            severity=severity,
            title=title,
            description=description,
            metadata=metadata,
            timestamp=timestamp or utcnow(),
        )
        async with self._lock:
            self._entries.append((event.timestamp, next(self._seq), event))
            self._entries.sort(key=lambda entry: (entry[0], entry[1]), reverse=True)
            del self._entries[self.limit:]
        logger.info("event_recorded", category=category, severity=severity, title=title)
        return event.model_copy(deep=True)
