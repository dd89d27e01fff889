import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter()


@router.websocket("/ws")
async def metrics_ws(websocket: WebSocket):
    """Live GPU and storage push on a fixed interval."""
    broadcaster = websocket.app.state.broadcaster
    observer = await broadcaster.open(websocket)

    async def wait_for_disconnect():
        try:
            while True:
                message = await websocket.receive()
                if message.get("type") == "websocket.disconnect":
                    break
        except WebSocketDisconnect:
            pass

    try:
        # Whichever finishes first (client gone or send failure) cancels the other
        done, pending = await asyncio.wait(
            [
                asyncio.create_task(broadcaster.run(observer)),
                asyncio.create_task(wait_for_disconnect()),
            ],
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
    finally:
        await broadcaster.close(observer)
