"""Configuration model for Nexus.

NexusConfig holds every tunable: provider connection, prompt windows,
debounce delays, and change-detection constants. Values come from
constructor arguments or ``NEXUS_*`` environment variables.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import BaseModel, Field

_ENV_PREFIX = "NEXUS_"


class NexusConfig(BaseModel):
    """Per-session configuration."""

    # Provider
    api_key: Optional[str] = None
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    synthesis_model: Optional[str] = None  # None = same as model
    temperature: float = 0.7
    timeout: float = Field(default=120.0, gt=0)
    max_retries: int = Field(default=1, ge=1)

    # Prompt windows (number of most recent transcript entries)
    turn_window: int = Field(default=15, ge=1)
    synthesis_window: int = Field(default=30, ge=1)

    # Synchronization
    debounce_seconds: float = Field(default=3.0, ge=0)
    save_debounce_seconds: float = Field(default=2.0, ge=0)
    line_ceiling: int = Field(default=600, ge=1)
    edit_threshold: int = Field(default=5, ge=1)

    # Logs
    error_log_size: int = Field(default=5, ge=1)
    activity_log_size: int = Field(default=100, ge=1)

    # Storage
    db_path: str = ".nexus.db"

    @classmethod
    def from_env(cls, **overrides: object) -> NexusConfig:
        """Build a config from ``NEXUS_*`` environment variables.

        Explicit keyword overrides win over the environment. Pydantic
        coerces numeric strings.
        """
        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{_ENV_PREFIX}{name.upper()}")
            if raw is not None and raw != "":
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def effective_synthesis_model(self) -> str:
        return self.synthesis_model or self.model
