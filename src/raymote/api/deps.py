"""Request-scoped accessors for objects owned by the app lifespan."""

from __future__ import annotations

from fastapi import Request

from raymote.core.supervisor import SessionSupervisor
from raymote.store import JsonButtonStore, JsonConfigStore


def get_supervisor(request: Request) -> SessionSupervisor:
    return request.app.state.supervisor


def get_config_store(request: Request) -> JsonConfigStore:
    return request.app.state.config_store


def get_button_store(request: Request) -> JsonButtonStore:
    return request.app.state.button_store
