import asyncio
from collections.abc import Coroutine

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from unified_dash.dependencies import get_command_router
from unified_dash.schemas.commands import CommandRequest, CommandResponse, invalid_command_response
from unified_dash.services.commands import CommandRouter

logger = structlog.get_logger()

router = APIRouter()

DISCONNECT_POLL_INTERVAL = 0.5


async def _run_until_disconnect(request: Request, coro: Coroutine) -> CommandResponse | None:
    """Await ``coro`` but cancel it if the HTTP client goes away first. None means cancelled."""
    command_task = asyncio.create_task(coro)

    async def watch_disconnect() -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(DISCONNECT_POLL_INTERVAL)

    watcher = asyncio.create_task(watch_disconnect())
    try:
        done, _ = await asyncio.wait({command_task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()

    if command_task in done:
        return command_task.result()

    if watcher.exception() is not None:
        # Could not observe the connection; just finish the command.
        return await command_task

    command_task.cancel()
    try:
        await command_task
    except asyncio.CancelledError:
        pass
    logger.info("ai_command_client_disconnected", path=request.url.path)
    return None


@router.post("/api/ai/command")
async def ai_command(request: Request, command_router: CommandRouter = Depends(get_command_router)):
    """Resolve a free-text command into an operator intent."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    try:
        parsed = CommandRequest.model_validate(body)
    except ValidationError:
        return JSONResponse(status_code=400, content=invalid_command_response().to_wire())
    if not parsed.command.strip():
        return JSONResponse(status_code=400, content=invalid_command_response().to_wire())

    result = await _run_until_disconnect(request, command_router.route(parsed.command))
    if result is None:
        return Response(status_code=499)
    # Backend failures are already folded into an apology result, so they go out as 200.
    return JSONResponse(content=result.to_wire())
