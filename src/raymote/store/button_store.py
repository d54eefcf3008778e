"""JSON-file storage of saved IR buttons."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from raymote.exceptions import PersistError
from raymote.models.store import Button
from raymote.utils.logging import get_logger

logger = get_logger(__name__)


class JsonButtonStore:
    """Reads and rewrites the whole button list on every call.

    Entries are validated one at a time. An entry that does not parse as a
    Button is hidden from load() but written back untouched by add() and
    delete(), so one bad record never costs the others.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Button]:
        try:
            entries = self._read_entries()
        except PersistError as exc:
            logger.error("buttons_load_failed", path=str(self._path), error=exc.reason)
            return []
        return self._validate(entries)

    def add(self, button: Button) -> list[Button]:
        """Append button with a fresh millisecond-timestamp ID.

        Returns:
            The full button list after the add.

        Raises:
            PersistError: The existing file is unreadable or the write failed.
        """
        entries = self._read_entries()
        button = button.model_copy(update={"id": self._next_id(entries)})
        entries.append(button.model_dump())
        self._write(entries)
        logger.info("button_added", button_id=button.id, name=button.name)
        return self._validate(entries)

    def delete(self, button_id: str) -> list[Button]:
        """Remove the button with button_id. Unknown IDs leave the list as-is."""
        entries = [e for e in self._read_entries() if _entry_id(e) != button_id]
        self._write(entries)
        logger.info("button_deleted", button_id=button_id)
        return self._validate(entries)

    def _read_entries(self) -> list[Any]:
        if not self._path.exists():
            return []
        try:
            entries = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistError(f"Failed to read {self._path}: {exc}", reason=str(exc)) from exc
        if not isinstance(entries, list):
            reason = f"expected a JSON list, got {type(entries).__name__}"
            raise PersistError(f"Failed to read {self._path}: {reason}", reason=reason)
        return entries

    def _validate(self, entries: list[Any]) -> list[Button]:
        buttons = []
        for index, entry in enumerate(entries):
            try:
                buttons.append(Button.model_validate(entry))
            except ValidationError as exc:
                logger.warning(
                    "button_entry_skipped", path=str(self._path), index=index, error=str(exc)
                )
        return buttons

    def _write(self, entries: list[Any]) -> None:
        payload = json.dumps(entries, indent=2)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise PersistError(f"Failed to save {self._path}: {exc}", reason=str(exc)) from exc

    @staticmethod
    def _next_id(entries: list[Any]) -> str:
        taken = {_entry_id(e) for e in entries}
        candidate = int(time.time() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)


def _entry_id(entry: Any) -> str | None:
    if isinstance(entry, dict) and entry.get("id") is not None:
        return str(entry["id"])
    return None
