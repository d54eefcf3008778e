"""API routes for saved buttons."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from raymote.api.deps import get_button_store
from raymote.exceptions import PersistError
from raymote.models.store import Button
from raymote.store import JsonButtonStore

router = APIRouter(prefix="/buttons", tags=["buttons"])


@router.get("")
async def list_buttons(store: JsonButtonStore = Depends(get_button_store)) -> list[Button]:
    return await asyncio.to_thread(store.load)


@router.post("")
async def create_button(
    button: Button,
    store: JsonButtonStore = Depends(get_button_store),
) -> list[Button]:
    """Save a button; returns the updated list."""
    try:
        return await asyncio.to_thread(store.add, button)
    except PersistError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.delete("/{button_id}")
async def delete_button(
    button_id: str,
    store: JsonButtonStore = Depends(get_button_store),
) -> list[Button]:
    try:
        return await asyncio.to_thread(store.delete, button_id)
    except PersistError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
