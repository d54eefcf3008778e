"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from raymote.core.broadcaster import KEEPALIVE_INTERVAL

CONFIG_FILENAME = "config.json"
BUTTONS_FILENAME = "buttons.json"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    """Process settings.

    Environment variables:
        RAYMOTE_DATA_DIR: Directory holding config.json and buttons.json (default: cwd).
        RAYMOTE_HOST / RAYMOTE_PORT: HTTP bind address.
        RAYMOTE_KEEPALIVE_SECONDS: Event stream keepalive interval.
    """
    data_dir: Path = Path(".")
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    keepalive_interval: float = KEEPALIVE_INTERVAL

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    @property
    def buttons_path(self) -> Path:
        return self.data_dir / BUTTONS_FILENAME

    @classmethod
    def from_env(cls) -> Settings:
        env = os.environ
        return cls(
            data_dir=Path(env.get("RAYMOTE_DATA_DIR", ".")),
            host=env.get("RAYMOTE_HOST", DEFAULT_HOST),
            port=int(env.get("RAYMOTE_PORT", DEFAULT_PORT)),
            keepalive_interval=float(env.get("RAYMOTE_KEEPALIVE_SECONDS", KEEPALIVE_INTERVAL)),
        )

    def with_overrides(self, **overrides: object) -> Settings:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
