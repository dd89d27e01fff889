from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unified_dash.api.v1.router import v1_router
from unified_dash.config import Settings, settings
from unified_dash.core.exceptions import DashError, dash_error_handler
from unified_dash.core.middleware import RequestLoggingMiddleware
from unified_dash.services.commands import build_command_router
from unified_dash.services.control_plane import ControlPlane
from unified_dash.services.monitoring import TelemetryProbe
from unified_dash.services.repository import Repository
from unified_dash.services.seed import seed_repository
from unified_dash.services.telemetry import TelemetryBroadcaster

_NAME_TO_LEVEL = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
}

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _NAME_TO_LEVEL.get(settings.dash_log_level.lower(), 20)
    ),
)

logger = structlog.get_logger()


async def init_state(app: FastAPI, config: Settings, http_client: httpx.AsyncClient | None = None) -> None:
    """Composition root: build the repository and every component that depends on it."""
    repository = Repository(event_log_limit=config.dash_event_log_limit)
    if config.dash_seed_data:
        await seed_repository(repository)

    app.state.repository = repository
    app.state.control_plane = ControlPlane(repository, offload_freed_gb=config.dash_offload_freed_gb)
    app.state.broadcaster = TelemetryBroadcaster(repository, interval=config.dash_broadcast_interval)
    app.state.command_router = build_command_router(config, repository, http_client=http_client)
    app.state.telemetry_probe = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.dash_http_connect_timeout,
            read=settings.ai_command_timeout,
            write=5.0,
            pool=5.0,
        )
    )
    await init_state(app, settings, http_client=http_client)

    if settings.dash_telemetry_probe_enabled:
        probe = TelemetryProbe(app.state.repository, interval=settings.dash_telemetry_probe_interval)
        await probe.start()
        app.state.telemetry_probe = probe

    logger.info(
        "dash_backend_starting",
        command_mode=app.state.command_router.mode,
        broadcast_interval=settings.dash_broadcast_interval,
        telemetry_probe=settings.dash_telemetry_probe_enabled,
    )
    yield

    await app.state.broadcaster.close_all()
    if app.state.telemetry_probe is not None:
        await app.state.telemetry_probe.stop()
    await app.state.command_router.close()
    await http_client.aclose()
    logger.info("dash_backend_stopping")


app = FastAPI(
    title="Unified Dash",
    description="Infrastructure status dashboard API with live telemetry and natural-language commands",
    version="0.1.0",
    lifespan=lifespan,
)

# Exception handler
app.add_exception_handler(DashError, dash_error_handler)

# Middleware (Starlette: last-added = outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.dash_cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(v1_router)


@app.get("/")
async def root():
    return {"service": "unified-dash", "version": "0.1.0"}
