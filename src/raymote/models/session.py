"""Session, port and event models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SessionRole(StrEnum):
    """Functional identity of a serial device slot."""
    RECEIVER = "receiver"
    TRANSMITTER = "transmitter"


class SessionState(StrEnum):
    """Lifecycle state of one role's serial connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class PortDescriptor(BaseModel):
    """One enumerated USB serial device."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(description="OS device path, e.g. /dev/ttyUSB0")
    manufacturer: str = Field(default="Unknown", description="USB manufacturer string")


class SessionStatus(BaseModel):
    """Point-in-time view of a role's session."""
    role: SessionRole
    state: SessionState = SessionState.DISCONNECTED
    port: str | None = Field(default=None, description="Path of the open or last attempted port")
    reason: str | None = Field(default=None, description="Failure reason when state is failed")


class ConnectResult(BaseModel):
    """Outcome of a connect request. connected is False for disconnect requests."""
    role: SessionRole
    port: str | None = None
    connected: bool


class DecodedEvent(BaseModel):
    """A marker-bearing line read from the receiver."""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    raw_line: str

    def to_wire(self) -> dict[str, str]:
        """Payload pushed to event stream subscribers."""
        return {
            "timestamp": self.timestamp.strftime("%I:%M:%S %p").lstrip("0"),
            "data": self.raw_line,
        }


class TransmitCommand(BaseModel):
    """A send request for the transmitter firmware."""
    protocol: str = Field(min_length=1, description="IR protocol name, e.g. NEC")
    bits: int = Field(ge=0, description="Bit length of the code")
    code: str = Field(min_length=1, description="Hex or protocol-specific code")

    def to_line(self) -> str:
        return f"{self.protocol},{self.bits},{self.code}\n"
