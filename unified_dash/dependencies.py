from fastapi import Request

from unified_dash.services.commands import CommandRouter
from unified_dash.services.control_plane import ControlPlane
from unified_dash.services.repository import Repository
from unified_dash.services.telemetry import TelemetryBroadcaster


def get_repository(request: Request) -> Repository:
    """Return the repository stored on app state during lifespan."""
    return request.app.state.repository


def get_control_plane(request: Request) -> ControlPlane:
    return request.app.state.control_plane


def get_command_router(request: Request) -> CommandRouter:
    return request.app.state.command_router


def get_broadcaster(request: Request) -> TelemetryBroadcaster:
    return request.app.state.broadcaster
