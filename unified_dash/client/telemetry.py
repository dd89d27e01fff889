"""Consumer side of the telemetry push channel.

``ReconciliationCache`` keeps the last applied value per telemetry key and only
notifies subscribers when a new snapshot structurally differs from it.
``TelemetryClient`` feeds the cache from the ``/ws`` endpoint and reconnects
after a fixed delay whenever the link drops.
"""

import asyncio
import copy
import json
from collections import defaultdict
from collections.abc import Callable
from typing import Any

import structlog
import websockets
from websockets.exceptions import WebSocketException

logger = structlog.get_logger()

TELEMETRY_KEYS = ("gpus", "storage")

Subscriber = Callable[[Any], None]


def structurally_equal(a: Any, b: Any) -> bool:
    """Deep equality over decoded JSON. Lists are order-sensitive; bool never equals a number."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, dict) and isinstance(b, dict):
        return a.keys() == b.keys() and all(structurally_equal(a[k], b[k]) for k in a)
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(structurally_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, (dict, list)) or isinstance(b, (dict, list)):
        return False
    return a == b


class ReconciliationCache:
    def __init__(self):
        self._values: dict[str, Any] = {}
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def get(self, key: str, default: Any = None) -> Any:
        return copy.deepcopy(self._values.get(key, default))

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for changes to ``key``. Returns an unsubscribe function."""
        self._subscribers[key].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[key]:
                self._subscribers[key].remove(callback)

        return unsubscribe

    def apply(self, key: str, value: Any) -> bool:
        """Store ``value`` and publish it unless it equals the cached one. Returns True on publish."""
        if key in self._values and structurally_equal(self._values[key], value):
            return False
        self._values[key] = copy.deepcopy(value)
        for callback in list(self._subscribers[key]):
            callback(copy.deepcopy(value))
        return True

    def apply_message(self, message: dict) -> list[str]:
        """Apply a ``metrics_update`` push. Returns the keys that changed."""
        if message.get("type") != "metrics_update":
            return []
        data = message.get("data")
        if not isinstance(data, dict):
            return []
        return [key for key in TELEMETRY_KEYS if key in data and self.apply(key, data[key])]


class TelemetryClient:
    def __init__(
        self,
        url: str,
        cache: ReconciliationCache | None = None,
        reconnect_delay: float = 3.0,
        connect: Callable = websockets.connect,
    ):
        self.url = url
        self.cache = cache or ReconciliationCache()
        self.reconnect_delay = reconnect_delay
        self.connected = False
        self.attempts = 0
        self._connect = connect
        self._running = False
        self._task: asyncio.Task | None = None

    def handle(self, raw: str | bytes) -> list[str]:
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, TypeError, UnicodeDecodeError):
            logger.warning("telemetry_message_invalid")
            return []
        if not isinstance(message, dict):
            return []
        return self.cache.apply_message(message)

    async def run(self) -> None:
        """Consume pushes forever, reconnecting after a fixed delay, until stop()."""
        self._running = True
        while self._running:
            self.attempts += 1
            try:
                async with self._connect(self.url) as ws:
                    self.connected = True
                    logger.info("telemetry_connected", url=self.url, attempt=self.attempts)
                    async for raw in ws:
                        self.handle(raw)
                logger.info("telemetry_disconnected", url=self.url)
            except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
                logger.warning("telemetry_connection_lost", url=self.url, reason=str(exc))
            finally:
                self.connected = False

            if self._running:
                await asyncio.sleep(self.reconnect_delay)

    async def start(self) -> None:
        self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
