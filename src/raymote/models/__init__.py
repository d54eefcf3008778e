"""Pydantic data models for Raymote."""

from raymote.models.session import (
    ConnectResult,
    DecodedEvent,
    PortDescriptor,
    SessionRole,
    SessionState,
    SessionStatus,
    TransmitCommand,
)
from raymote.models.store import Button, PersistedPortConfig

__all__ = [
    "Button",
    "ConnectResult",
    "DecodedEvent",
    "PersistedPortConfig",
    "PortDescriptor",
    "SessionRole",
    "SessionState",
    "SessionStatus",
    "TransmitCommand",
]
