import asyncio
import json

import pytest

from unified_dash.client.telemetry import ReconciliationCache, TelemetryClient


class FakeConnection:
    def __init__(self, messages):
        self._messages = list(messages)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            raise StopAsyncIteration
        await asyncio.sleep(0)
        return self._messages.pop(0)


class FakeConnector:
    """Plays a script of outcomes: an exception instance fails the attempt, a list is a session."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else []
        if isinstance(outcome, Exception):
            raise outcome
        return FakeConnection(outcome)


def _push(utilization):
    return json.dumps(
        {
            "type": "metrics_update",
            "data": {
                "gpus": [{"id": "gpu0", "utilization": utilization}],
                "storage": [],
                "timestamp": "2025-01-01T00:00:00Z",
            },
        }
    )


async def _wait_for(predicate, timeout=1.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)


class TestHandle:
    def test_valid_push_updates_cache(self):
        client = TelemetryClient("ws://test/ws")
        assert client.handle(_push(0.5)) == ["gpus", "storage"]
        assert client.cache.get("gpus") == [{"id": "gpu0", "utilization": 0.5}]

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", "null", b"\xff\xfe"])
    def test_malformed_frames_ignored(self, raw):
        client = TelemetryClient("ws://test/ws")
        assert client.handle(raw) == []
        assert client.cache.get("gpus") is None


class TestRun:
    async def test_reconnects_after_failure_and_applies_pushes(self):
        connector = FakeConnector(
            ConnectionRefusedError("refused"),
            [_push(0.1), _push(0.1), _push(0.2)],
        )
        cache = ReconciliationCache()
        seen = []
        cache.subscribe("gpus", seen.append)

        client = TelemetryClient("ws://test/ws", cache=cache, reconnect_delay=0.01, connect=connector)
        await client.start()
        try:
            await _wait_for(lambda: len(seen) == 2)
        finally:
            await client.stop()

        assert client.attempts >= 2
        assert connector.urls[0] == "ws://test/ws"
        assert [g[0]["utilization"] for g in seen] == [0.1, 0.2]
        assert client.connected is False

    async def test_reconnects_after_clean_close(self):
        connector = FakeConnector([_push(0.1)], [_push(0.3)])
        client = TelemetryClient("ws://test/ws", reconnect_delay=0.01, connect=connector)
        await client.start()
        try:
            await _wait_for(lambda: (client.cache.get("gpus") or [{}])[0].get("utilization") == 0.3)
        finally:
            await client.stop()

        assert client.attempts >= 2

    async def test_stop_without_start(self):
        client = TelemetryClient("ws://test/ws")
        await client.stop()
        assert client.connected is False
