"""API routes for port discovery and receiver/transmitter connections."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from raymote.api.deps import get_config_store, get_supervisor
from raymote.core.supervisor import SessionSupervisor
from raymote.exceptions import ConnectError, EnumerationError
from raymote.models.session import PortDescriptor, SessionRole, SessionStatus
from raymote.store import JsonConfigStore

router = APIRouter(tags=["sessions"])


class ConnectRequest(BaseModel):
    """Connect a role to a port; an empty or missing port disconnects it."""
    port: str | None = Field(default=None, description="Serial port path")
    type: SessionRole = Field(description="receiver or transmitter")


class ConnectResponse(BaseModel):
    success: bool = True
    port: str | None
    type: SessionRole
    disconnected: bool


@router.get("/ports")
async def get_ports(
    supervisor: SessionSupervisor = Depends(get_supervisor),
) -> list[PortDescriptor]:
    """List USB serial devices."""
    try:
        return await asyncio.to_thread(supervisor.list_ports)
    except EnumerationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.post("/connect")
async def connect(
    req: ConnectRequest,
    supervisor: SessionSupervisor = Depends(get_supervisor),
) -> ConnectResponse:
    """Connect the receiver or transmitter, persisting the choice."""
    try:
        result = await supervisor.connect(req.type, req.port)
    except ConnectError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ConnectResponse(port=req.port, type=req.type, disconnected=not result.connected)


@router.get("/status")
async def get_status(
    supervisor: SessionSupervisor = Depends(get_supervisor),
) -> list[SessionStatus]:
    """Current state of both sessions."""
    return supervisor.status()


@router.get("/config")
async def get_config(store: JsonConfigStore = Depends(get_config_store)) -> dict:
    """Persisted port assignment."""
    config = await asyncio.to_thread(store.load)
    return config.model_dump(by_alias=True)
