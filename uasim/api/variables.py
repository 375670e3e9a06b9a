"""REST endpoints for variable access and history.

Paths:
    GET /api/variables
    GET /api/variables/{node_id}
    PUT /api/variables/{node_id}     body: {"data_type": "Double", "value": 250}
    GET /api/history/{node_id}

Node ids contain ';' and '=', so clients should percent-encode them.
Credentials are optional HTTP Basic; without them the caller is Anonymous.
Writes answer with the store's status code name so a client can tell
BadOutOfRange from BadUserAccessDenied.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, ValidationError

from uasim.domain.enums import DataType, Role, StatusCode
from uasim.domain.value import DataValue
from uasim.security.users import AuthenticationError, UserDirectory
from uasim.store.address_space import NodeNotFoundError
from uasim.store.historian import Historian
from uasim.store.variable_store import VariableStore

logger = logging.getLogger(__name__)

_HTTP_STATUS: dict[StatusCode, int] = {
    StatusCode.GOOD: 200,
    StatusCode.BAD_OUT_OF_RANGE: 422,
    StatusCode.BAD_TYPE_MISMATCH: 422,
    StatusCode.BAD_NOT_WRITABLE: 409,
    StatusCode.BAD_NOT_READABLE: 409,
    StatusCode.BAD_USER_ACCESS_DENIED: 403,
}


class WriteRequest(BaseModel):
    data_type: DataType
    value: Any


def create_variables_router(
    store: VariableStore,
    users: UserDirectory,
    historian: Historian,
) -> APIRouter:
    """Factory that wires the variable endpoints to store, users and historian."""

    router = APIRouter(prefix="/api", tags=["variables"])
    basic = HTTPBasic(auto_error=False)

    def session_roles(
        credentials: Optional[HTTPBasicCredentials] = Depends(basic),
    ) -> frozenset[Role]:
        try:
            if credentials is None:
                return users.resolve(None, None)
            return users.resolve(credentials.username, credentials.password)
        except AuthenticationError as exc:
            raise HTTPException(
                status_code=401,
                detail=str(exc),
                headers={"WWW-Authenticate": "Basic"},
            ) from exc

    @router.get("/variables")
    async def list_variables(roles: frozenset[Role] = Depends(session_roles)) -> dict[str, Any]:
        """All variables the caller may read."""
        gate = store.gate
        variables = [
            v.summary()
            for v in store.address_space.variables()
            if gate.can_read(v, roles)
        ]
        return {"variables": variables, "count": len(variables)}

    @router.get("/variables/{node_id}")
    async def read_variable(
        node_id: str,
        roles: frozenset[Role] = Depends(session_roles),
    ) -> JSONResponse:
        try:
            status, value = store.read_as(node_id, roles)
        except NodeNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        body: dict[str, Any] = {"node_id": node_id, "status": status.value}
        if value is not None:
            body.update(value.model_dump(mode="json"))
        return JSONResponse(body, status_code=_HTTP_STATUS[status])

    @router.put("/variables/{node_id}")
    async def write_variable(
        node_id: str,
        request: WriteRequest,
        roles: frozenset[Role] = Depends(session_roles),
    ) -> JSONResponse:
        try:
            value = DataValue(data_type=request.data_type, value=request.value)
        except ValidationError as exc:
            return JSONResponse(
                {
                    "node_id": node_id,
                    "status": StatusCode.BAD_TYPE_MISMATCH.value,
                    "detail": exc.errors(include_url=False, include_context=False, include_input=False),
                },
                status_code=_HTTP_STATUS[StatusCode.BAD_TYPE_MISMATCH],
            )
        try:
            status = store.write(node_id, value, roles)
        except NodeNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return JSONResponse(
            {"node_id": node_id, "status": status.value},
            status_code=_HTTP_STATUS[status],
        )

    @router.get("/history/{node_id}")
    async def read_history(
        node_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        max_values: Optional[int] = Query(None, ge=1),
        roles: frozenset[Role] = Depends(session_roles),
    ) -> dict[str, Any]:
        try:
            variable = store.address_space.resolve_variable(node_id)
        except NodeNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        if not store.gate.can_read(variable, roles):
            raise HTTPException(status_code=403, detail=StatusCode.BAD_USER_ACCESS_DENIED.value)
        if not historian.is_historizing(variable.node_id):
            raise HTTPException(status_code=409, detail=f"{variable.browse_name} is not historized")
        records = historian.read_raw(variable.node_id, start, end, max_values)
        return {
            "node_id": variable.node_id,
            "capacity": historian.capacity(variable.node_id),
            "count": len(records),
            "records": [r.model_dump(mode="json") for r in records],
        }

    return router
