"""WebSocket endpoint: streams raised events to subscribers.

Path: /ws/events

Every event the notifier raises (demo events, condition transitions, alarm
band changes) is pushed as JSON.  Clients only listen; "ping" gets "pong".
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from uasim.services.connection_manager import ConnectionManager

logger = logging.getLogger(__name__)


def create_events_router(manager: ConnectionManager) -> APIRouter:
    """Factory that wires the events endpoint to a ConnectionManager."""

    router = APIRouter()

    @router.websocket("/ws/events")
    async def stream_events(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        logger.info("Event subscriber connected (total: %d)", manager.active_count)
        sender = asyncio.create_task(manager.pump(websocket))

        try:
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            pass
        finally:
            sender.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await sender
            manager.disconnect(websocket)
            logger.info("Event subscriber disconnected (total: %d)", manager.active_count)

    return router
