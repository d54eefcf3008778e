"""Server-sent events stream of decoded IR lines."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from raymote.api.deps import get_supervisor
from raymote.core.supervisor import SessionSupervisor

router = APIRouter(tags=["events"])

_STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/events")
async def event_stream(
    supervisor: SessionSupervisor = Depends(get_supervisor),
) -> StreamingResponse:
    """Push decoded events and periodic keepalive comments until the client leaves."""
    return StreamingResponse(
        supervisor.broadcaster.events(),
        media_type="text/event-stream",
        headers=_STREAM_HEADERS,
    )
