"""Persisted configuration and button models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from raymote.models.session import SessionRole


class PersistedPortConfig(BaseModel):
    """Saved port assignment per role (config.json)."""
    receiver_port: str | None = Field(default=None, alias="receiverPort")
    transmitter_port: str | None = Field(default=None, alias="transmitterPort")

    model_config = ConfigDict(populate_by_name=True)

    def port_for(self, role: SessionRole) -> str | None:
        if role is SessionRole.RECEIVER:
            return self.receiver_port
        return self.transmitter_port

    def with_port(self, role: SessionRole, port: str | None) -> PersistedPortConfig:
        """Return a copy with the role's port replaced (None clears it)."""
        field = "receiver_port" if role is SessionRole.RECEIVER else "transmitter_port"
        return self.model_copy(update={field: port or None})


class Button(BaseModel):
    """A captured IR code saved for replay. Unknown fields are kept as-is."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = None
    name: str = ""
    protocol: str = ""
    bits: int = 0
    code: str = ""
