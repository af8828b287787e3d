"""Real-time change notification stream."""

import asyncio
import logging
import typing as t

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from grocerywatch.services import ChangeNotifier, Subscription

LOGGER: logging.Logger = logging.getLogger(__name__)

ROUTER = APIRouter(tags=["Notifications"])


async def _forward_events(
    websocket: WebSocket, subscription: Subscription
) -> None:
    async for event in subscription:
        await websocket.send_json(event.to_message())


async def _drain_client(websocket: WebSocket) -> None:
    # Clients never send anything meaningful; reading detects disconnects.
    while True:
        await websocket.receive_text()


@ROUTER.websocket("/ws")
async def notification_stream(websocket: WebSocket) -> None:
    """Push item change events to the client as JSON messages.

    Each message is an envelope ``{type, item?, items?, itemId?,
    message?}``. Events published before the connection are not replayed.

    Args:
        websocket (WebSocket): The client connection.
    """
    notifier: ChangeNotifier = websocket.app.state.notifier

    async with notifier.connect() as subscription:
        await websocket.accept()
        tasks: t.Set[asyncio.Task[None]] = {
            asyncio.create_task(_forward_events(websocket, subscription)),
            asyncio.create_task(_drain_client(websocket)),
        }
        done, pending = await asyncio.wait(
            tasks, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            exc: BaseException | None = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                LOGGER.warning("Notification stream closed: %s", exc)
