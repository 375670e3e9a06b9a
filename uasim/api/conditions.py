"""REST endpoints exposing condition and alarm state (read-only).

Paths:
    GET /api/conditions
    GET /api/alarms
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from uasim.store.address_space import AddressSpace


def create_conditions_router(address_space: AddressSpace) -> APIRouter:
    """Factory that wires the condition/alarm listing to an address space."""

    router = APIRouter(prefix="/api", tags=["conditions"])

    @router.get("/conditions")
    async def list_conditions() -> dict[str, Any]:
        conditions = [c.summary() for c in address_space.conditions()]
        return {"conditions": conditions, "count": len(conditions)}

    @router.get("/alarms")
    async def list_alarms() -> dict[str, Any]:
        alarms = [a.summary() for a in address_space.alarms()]
        return {
            "alarms": alarms,
            "count": len(alarms),
            "active_count": sum(1 for a in alarms if a["active"]),
        }

    return router
