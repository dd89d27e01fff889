"""Natural-language command routing.

The router is built once with one of two strategies:

* ``DelegatedCommandStrategy`` asks an OpenAI-compatible backend to classify
  the command against the known services.
* ``FallbackCommandStrategy`` is a deterministic "open <service>" matcher used
  when no backend credentials are configured.

Both return the same ``CommandResponse`` shape. Backend failures are never
retried; they collapse into a single zero-confidence ``unknown`` result.
"""

import asyncio
import math
import re
from abc import ABC, abstractmethod

import httpx
import structlog

from unified_dash.config import Settings
from unified_dash.core.exceptions import CapabilityError
from unified_dash.schemas.commands import (
    DESTRUCTIVE_INTENTS,
    INTENTS,
    CommandResponse,
    capability_failure_response,
    invalid_command_response,
)
from unified_dash.schemas.services import Service
from unified_dash.services.intent.base import IntentBackend
from unified_dash.services.intent.openai_client import OpenAIIntentBackend
from unified_dash.services.repository import Repository

logger = structlog.get_logger()

FALLBACK_CONFIDENCE = 0.7
DEFAULT_CONFIDENCE = 0.5
FALLBACK_MESSAGE = "AI features are not configured. I can help you with basic commands."
DEFAULT_MESSAGE = "I'm not sure what you want to do."

OPEN_PATTERN = re.compile(r"open\s+(\w+)")

SYSTEM_PROMPT = """You are an AI assistant for the Unified Dash infrastructure control plane.
Parse user commands and return structured JSON responses.

Available services: {services}

Respond with a JSON object containing:
- intent: one of "open_service", "view_logs", "restart_service", "query_status", "unknown"
- confidence: 0-1 score
- serviceId: the service ID if applicable (match loosely by name)
- message: friendly response to the user
- requiresConfirmation: true for destructive actions (restart_service)"""


def opening_message(service: Service) -> str:
    return f"Opening {service.name} in a new tab..."


def no_url_message(name: str) -> str:
    return f"{name} doesn't have a URL configured."


async def find_service(repository: Repository, token: str) -> Service | None:
    """First service whose name or id contains ``token`` (case-insensitive)."""
    needle = token.lower()
    for service in await repository.services.list_all():
        if needle in service.name.lower() or needle in service.id.lower():
            return service
    return None


class CommandStrategy(ABC):
    mode: str

    @abstractmethod
    async def resolve(self, command: str) -> CommandResponse:
        """Classify a validated, non-empty command."""
        ...

    async def close(self) -> None:
        """Release any underlying resources."""


class FallbackCommandStrategy(CommandStrategy):
    mode = "fallback"

    def __init__(self, repository: Repository):
        self._repository = repository

    async def resolve(self, command: str) -> CommandResponse:
        match = OPEN_PATTERN.search(command.lower())
        if match:
            service = await find_service(self._repository, match.group(1))
            if service is not None:
                # A URL-less service stays open_service here; only the delegated path downgrades it.
                message = opening_message(service) if service.url else no_url_message(service.name)
                return CommandResponse(
                    intent="open_service",
                    confidence=FALLBACK_CONFIDENCE,
                    service_id=service.id,
                    message=message,
                )
        return CommandResponse(intent="unknown", confidence=FALLBACK_CONFIDENCE, message=FALLBACK_MESSAGE)


def _coerce_confidence(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, float(value)))


def coerce_backend_response(raw: dict) -> CommandResponse:
    """Map a loosely-typed backend object onto the response contract."""
    intent = raw.get("intent")
    if intent not in INTENTS:
        intent = "unknown"

    service_id = raw.get("serviceId") or raw.get("service_id")
    message = raw.get("message")

    return CommandResponse(
        intent=intent,
        confidence=_coerce_confidence(raw.get("confidence")),
        service_id=str(service_id) if service_id else None,
        message=message if isinstance(message, str) and message else DEFAULT_MESSAGE,
        requires_confirmation=intent in DESTRUCTIVE_INTENTS or raw.get("requiresConfirmation") is True,
    )


class DelegatedCommandStrategy(CommandStrategy):
    mode = "delegated"

    def __init__(self, repository: Repository, backend: IntentBackend):
        self._repository = repository
        self._backend = backend

    async def build_prompt(self) -> str:
        services = await self._repository.services.list_all()
        listing = ", ".join(f"{s.id}: {s.name} ({s.category})" for s in services)
        return SYSTEM_PROMPT.format(services=listing)

    async def resolve(self, command: str) -> CommandResponse:
        raw = await self._backend.classify(await self.build_prompt(), command)
        response = coerce_backend_response(raw)

        if response.intent == "open_service" and response.service_id:
            service = await self._repository.services.get(response.service_id)
            if service is not None and service.url:
                response.message = opening_message(service)
            else:
                response.message = no_url_message(service.name if service else "Service")
                response.intent = "unknown"
        return response

    async def close(self) -> None:
        await self._backend.close()


class CommandRouter:
    """Validates commands and runs them through the strategy chosen at construction."""

    def __init__(self, strategy: CommandStrategy, timeout: float | None = 30.0):
        self._strategy = strategy
        self._timeout = timeout

    @property
    def mode(self) -> str:
        return self._strategy.mode

    async def route(self, command) -> CommandResponse:
        if not isinstance(command, str) or not command.strip():
            return invalid_command_response()

        try:
            response = await asyncio.wait_for(self._strategy.resolve(command), timeout=self._timeout)
        except asyncio.CancelledError:
            logger.info("ai_command_cancelled", mode=self.mode)
            raise
        except asyncio.TimeoutError:
            logger.warning("ai_command_failed", mode=self.mode, reason="timeout", timeout=self._timeout)
            return capability_failure_response()
        except CapabilityError as exc:
            logger.warning("ai_command_failed", mode=self.mode, reason=exc.message)
            return capability_failure_response()
        except Exception:
            logger.exception("ai_command_failed", mode=self.mode)
            return capability_failure_response()

        logger.info(
            "ai_command_routed",
            mode=self.mode,
            intent=response.intent,
            confidence=response.confidence,
            service_id=response.service_id,
        )
        return response

    async def close(self) -> None:
        await self._strategy.close()


def build_command_router(
    settings: Settings,
    repository: Repository,
    http_client: httpx.AsyncClient | None = None,
) -> CommandRouter:
    """Select delegated mode when backend credentials are present, fallback otherwise."""
    if settings.ai_configured:
        backend = OpenAIIntentBackend(
            base_url=settings.ai_integrations_openai_base_url,
            api_key=settings.ai_integrations_openai_api_key,
            model=settings.ai_command_model,
            max_tokens=settings.ai_command_max_tokens,
            http_client=http_client,
        )
        strategy: CommandStrategy = DelegatedCommandStrategy(repository, backend)
    else:
        logger.warning("ai_integration_not_configured", mode="fallback")
        strategy = FallbackCommandStrategy(repository)
    return CommandRouter(strategy, timeout=settings.ai_command_timeout)
