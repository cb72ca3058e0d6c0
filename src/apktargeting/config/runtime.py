"""Pydantic-based settings for device matching.

Loads from ``APKTARGETING_*`` environment variables (with optional .env file).
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class TargetingSettings(BaseSettings):
    """Knobs of the device matching service."""

    model_config = {"env_prefix": "APKTARGETING_", "env_file": ".env", "env_file_encoding": "utf-8"}

    # --- Matching ---
    strict_device_abis: bool = Field(
        default=True,
        description="If True, an unrecognized ABI in a device spec is an error; otherwise it is skipped",
    )

    # --- Logging ---
    log_decisions: bool = Field(default=False, description="Log one record per dimension match decision")
    log_level: str = Field(default="INFO", description="Level applied to the 'apktargeting' logger by DeviceMatcher")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"log_level must be a logging level name, got {v!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> TargetingSettings:
    """Return the singleton TargetingSettings (cached after first call)."""
    return TargetingSettings()
