"""Runtime settings: CLI flags, env vars, and code defaults in one object.

Priority chain (highest to lowest):
  1. Init kwargs  -- CLI flags passed by Click
  2. Env vars     -- ``ORDERDESK_*`` prefix
  3. Code defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings

STORE_FILENAME = "store.json"


class OrderDeskSettings(BaseSettings):
    """Settings for the orderdesk CLI.

    Attributes:
        data_dir: Directory holding the JSON store file.
        store: ``"json"`` persists to ``data_dir``; ``"memory"`` keeps
            everything in process (useful for demos and tests).
        verbose: Enable DEBUG logging.
        log_json: Emit structured JSON log lines instead of console output.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ORDERDESK_",
    }

    data_dir: Path = Field(default_factory=lambda: Path.cwd() / "data")
    store: Literal["json", "memory"] = "json"
    verbose: bool = False
    log_json: bool = False

    @property
    def store_path(self) -> Path:
        return self.data_dir / STORE_FILENAME

    @classmethod
    def from_cli(cls, **cli_flags: Any) -> OrderDeskSettings:
        """Build settings, letting only flags actually given override env vars."""
        return cls(**{name: value for name, value in cli_flags.items() if value is not None})
