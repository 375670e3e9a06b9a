"""uasim — simulated industrial-automation information model.

This is the application entry point.  It wires the address space,
VariableStore, Historian, EventNotifier, PeriodicScheduler and the HTTP /
WebSocket endpoints together.  Simulators run for the lifetime of the app.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI

from uasim.api.conditions import create_conditions_router
from uasim.api.variables import create_variables_router
from uasim.api.ws_events import create_events_router
from uasim.config import Settings, settings
from uasim.security.permissions import PermissionGate
from uasim.security.users import UserDirectory
from uasim.services.connection_manager import ConnectionManager
from uasim.simulation.showcase import build_showcase

logger = logging.getLogger(__name__)


def _load_users(path: str) -> UserDirectory:
    if not Path(path).is_file():
        logger.warning("User file %s not found, only anonymous access is possible", path)
        return UserDirectory()
    return UserDirectory.from_file(path)


def create_app(config: Settings = settings) -> FastAPI:
    """Build the showcase server and the FastAPI app around it."""

    # ── State ────────────────────────────────────────────────────────────

    server = build_showcase(config, gate=PermissionGate())
    users = _load_users(config.user_file)

    # ── Subscribers ──────────────────────────────────────────────────────

    subscribers = ConnectionManager()
    server.notifier.subscribe(subscribers.deliver)

    # ── App ──────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await server.start()
        try:
            yield
        finally:
            await server.stop()

    app = FastAPI(
        title=config.app_name,
        description="Simulated variables, conditions and limit alarms",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.server = server
    app.state.subscribers = subscribers

    # ── Routes ───────────────────────────────────────────────────────────

    app.include_router(create_variables_router(server.store, users, server.historian))
    app.include_router(create_conditions_router(server.address_space))
    app.include_router(create_events_router(subscribers))

    # ── Health ───────────────────────────────────────────────────────────

    @app.get("/health")
    async def health() -> dict:
        alarms = server.address_space.alarms()
        return {
            "status": "ok",
            "running": server.scheduler.running,
            "nodes": len(server.address_space),
            "jobs": server.scheduler.stats,
            "events": server.notifier.stats.to_dict(),
            "subscribers": subscribers.active_count,
            "dropped_events": subscribers.dropped_count,
            "active_alarms": sum(1 for a in alarms if a.active),
        }

    return app


# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

app = create_app()
