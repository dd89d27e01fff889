"""Periodic GPU/storage push to connected observers.

Per observer: CONNECTING -> OPEN -> CLOSED. Each OPEN observer gets its own
timer; a tick builds a fresh snapshot and sends it unless the previous send to
that observer is still in flight, in which case the tick is dropped for that
observer only. Nothing is retried; the next tick carries fresher data anyway.
"""

import asyncio
import uuid
from datetime import datetime, timezone
from enum import Enum

import structlog
from starlette.websockets import WebSocket

from unified_dash.schemas.telemetry import MetricsData, MetricsUpdate
from unified_dash.services.repository import Repository

logger = structlog.get_logger()


class ObserverState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class Observer:
    """One connected telemetry consumer."""

    def __init__(self, websocket: WebSocket):
        self.id = uuid.uuid4().hex[:12]
        self.websocket = websocket
        self.state = ObserverState.CONNECTING
        self.delivered = 0
        self.dropped = 0
        self._in_flight: asyncio.Task | None = None
        self._closed = asyncio.Event()

    @property
    def ready(self) -> bool:
        """True when OPEN and no earlier send is still pending."""
        if self.state is not ObserverState.OPEN:
            return False
        return self._in_flight is None or self._in_flight.done()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class TelemetryBroadcaster:
    def __init__(self, repository: Repository, interval: float = 5.0):
        self._repository = repository
        self.interval = interval
        self._observers: dict[str, Observer] = {}

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    async def snapshot(self) -> MetricsUpdate:
        gpus = await self._repository.gpus.list_all()
        storage = await self._repository.storage.list_all()
        return MetricsUpdate(data=MetricsData(gpus=gpus, storage=storage, timestamp=_timestamp()))

    async def open(self, websocket: WebSocket) -> Observer:
        observer = Observer(websocket)
        self._observers[observer.id] = observer
        await websocket.accept()
        observer.state = ObserverState.OPEN
        logger.info("observer_connected", observer=observer.id, observers=self.observer_count)
        return observer

    async def run(self, observer: Observer) -> None:
        """Tick until the observer closes. Returns without raising on transport loss."""
        try:
            while observer.state is ObserverState.OPEN:
                try:
                    await asyncio.wait_for(observer._closed.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    self.tick(observer)
        finally:
            await self.close(observer)

    def tick(self, observer: Observer) -> bool:
        """Schedule one delivery. Returns False if the tick was dropped."""
        if not observer.ready:
            observer.dropped += 1
            logger.debug("metrics_tick_dropped", observer=observer.id, dropped=observer.dropped)
            return False
        observer._in_flight = asyncio.create_task(self._deliver(observer))
        return True

    async def _deliver(self, observer: Observer) -> None:
        message = await self.snapshot()
        try:
            await observer.websocket.send_json(message.to_wire())
        except Exception as exc:
            logger.info("observer_send_failed", observer=observer.id, reason=str(exc))
            self._mark_closed(observer)
            return
        observer.delivered += 1

    def _mark_closed(self, observer: Observer) -> None:
        observer.state = ObserverState.CLOSED
        observer._closed.set()

    async def close(self, observer: Observer) -> None:
        """Cancel the observer's timer and pending send. Safe to call twice."""
        self._mark_closed(observer)
        if self._observers.pop(observer.id, None) is None:
            return

        task = observer._in_flight
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info(
            "observer_disconnected",
            observer=observer.id,
            delivered=observer.delivered,
            dropped=observer.dropped,
            observers=self.observer_count,
        )

    async def close_all(self) -> None:
        for observer in list(self._observers.values()):
            await self.close(observer)
