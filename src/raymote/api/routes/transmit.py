"""API route for sending IR commands."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from raymote.api.deps import get_supervisor
from raymote.core.supervisor import SessionSupervisor
from raymote.exceptions import SendError
from raymote.models.session import TransmitCommand

router = APIRouter(tags=["transmit"])


@router.post("/send")
async def send(
    command: TransmitCommand,
    supervisor: SessionSupervisor = Depends(get_supervisor),
) -> dict:
    """Send one IR command through the transmitter."""
    try:
        await supervisor.send(command)
    except SendError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return {"success": True}
