"""Error taxonomy for the dashboard API.

Every ``DashError`` becomes a JSON body of the form
``{"error": {"code", "message", "status", "details"?}}`` at the HTTP boundary.
``CapabilityError`` never gets that far: the command router folds it into an
``unknown`` result.
"""

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class DashError(Exception):
    code = "internal_error"
    status = 500
    default_message = "Internal error."

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status: int | None = None,
        details: dict | None = None,
    ):
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message, "status": self.status}
        if self.details:
            body["details"] = self.details
        return {"error": body}


class NotFoundError(DashError):
    code = "not_found"
    status = 404
    default_message = "Resource not found."


class InvalidInputError(DashError):
    code = "invalid_input"
    status = 400
    default_message = "Invalid request."


class CapabilityError(DashError):
    """The language-understanding backend errored, timed out or returned garbage."""

    code = "capability_failure"
    status = 502
    default_message = "Language backend is unavailable."


async def dash_error_handler(request: Request, exc: DashError) -> JSONResponse:
    if exc.status >= 500:
        logger.error("dash_error", code=exc.code, path=request.url.path, message=exc.message)
    return JSONResponse(status_code=exc.status, content=exc.to_dict())
