"""Configuration package.

Single source of truth: ``TargetingSettings`` via ``get_settings()``.
"""

from .runtime import TargetingSettings, get_settings

__all__ = [
    "TargetingSettings",
    "get_settings",
]
