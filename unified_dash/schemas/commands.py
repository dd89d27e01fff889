from typing import Literal

from pydantic import Field

from unified_dash.schemas.base import DashModel

Intent = Literal["open_service", "view_logs", "restart_service", "query_status", "unknown"]

INTENTS: tuple[str, ...] = ("open_service", "view_logs", "restart_service", "query_status", "unknown")
DESTRUCTIVE_INTENTS = frozenset({"restart_service"})


class CommandRequest(DashModel):
    command: str = Field(..., min_length=1)


class CommandResponse(DashModel):
    intent: Intent
    confidence: float = Field(ge=0, le=1)
    service_id: str | None = None
    message: str
    requires_confirmation: bool = False

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def invalid_command_response() -> CommandResponse:
    return CommandResponse(intent="unknown", confidence=0, message="Invalid command format")


def capability_failure_response() -> CommandResponse:
    return CommandResponse(
        intent="unknown",
        confidence=0,
        message="Sorry, I encountered an error processing your command.",
    )
