"""Persistence of the per-role port assignment."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from raymote.exceptions import PersistError
from raymote.models.store import PersistedPortConfig
from raymote.utils.logging import get_logger

logger = get_logger(__name__)


class ConfigStore(Protocol):
    """Storage for PersistedPortConfig."""

    def load(self) -> PersistedPortConfig: ...

    def save(self, config: PersistedPortConfig) -> None: ...


class JsonConfigStore:
    """Stores the port config as an indented JSON file.

    A missing or unreadable file loads as an empty config.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PersistedPortConfig:
        if not self._path.exists():
            return PersistedPortConfig()
        try:
            return PersistedPortConfig.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.error("config_load_failed", path=str(self._path), error=str(exc))
            return PersistedPortConfig()

    def save(self, config: PersistedPortConfig) -> None:
        """Write config to disk.

        Raises:
            PersistError: If the file cannot be written.
        """
        payload = json.dumps(config.model_dump(by_alias=True), indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise PersistError(f"Failed to save {self._path}: {exc}", reason=str(exc)) from exc
        logger.debug("config_saved", path=str(self._path))
