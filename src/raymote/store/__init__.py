"""File-backed stores for port config and buttons."""

from raymote.store.button_store import JsonButtonStore
from raymote.store.config_store import ConfigStore, JsonConfigStore

__all__ = ["ConfigStore", "JsonButtonStore", "JsonConfigStore"]
