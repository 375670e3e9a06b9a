"""Manages WebSocket event subscribers.

``deliver`` is registered with the EventNotifier and runs inside a
simulator tick, so it only queues: each client has a bounded queue drained
by its own ``pump`` coroutine.  A full queue drops the event for that client
alone.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from uasim.domain.event import Event

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Fan-out of raised events to connected WebSocket clients."""

    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._queues: dict[WebSocket, asyncio.Queue[dict[str, Any]]] = {}
        self.dropped_count: int = 0

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._queues[websocket] = asyncio.Queue(maxsize=self._queue_size)

    def disconnect(self, websocket: WebSocket) -> None:
        self._queues.pop(websocket, None)

    @property
    def active_count(self) -> int:
        return len(self._queues)

    def deliver(self, event: Event) -> None:
        """Queue *event* for every connected client without blocking."""
        payload = event.to_payload()
        for websocket, queue in list(self._queues.items()):
            try:
                queue.put_nowait(payload)
            except asyncio.QueueFull:
                self.dropped_count += 1
                logger.warning("Event queue full for %s, dropping %s", websocket.client, payload["event_type"])

    async def pump(self, websocket: WebSocket) -> None:
        """Send queued events to *websocket* until it goes away."""
        queue = self._queues[websocket]
        while True:
            payload = await queue.get()
            await websocket.send_json(payload)
