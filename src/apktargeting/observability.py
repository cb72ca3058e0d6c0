"""Observability: structured match-decision logs, optional metrics stub."""

from __future__ import annotations

import logging
from typing import Any

_LOGGER = logging.getLogger("apktargeting")

# Optional metrics stub: decisions[dimension] = count, rejections[dimension] = count
METRICS: dict[str, dict[str, int]] = {"decisions": {}, "rejections": {}}


def get_logger() -> logging.Logger:
    return _LOGGER


def configure_logging(level: str | int) -> logging.Logger:
    """Set the level of the package logger; handlers are left to the application."""
    _LOGGER.setLevel(level)
    return _LOGGER


def log_match_decision(
    dimension: str,
    matched: bool,
    device_value: Any = None,
    rule: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Emit structured log and update metrics stub."""
    payload: dict[str, Any] = {
        "dimension": dimension,
        "matched": matched,
        "device_value": device_value,
    }
    if rule:
        payload["rule"] = rule
    if extra:
        payload.update(extra)
    _LOGGER.info("match_decision", extra=payload)
    # Metrics stub
    METRICS["decisions"][dimension] = METRICS["decisions"].get(dimension, 0) + 1
    if not matched:
        METRICS["rejections"][dimension] = METRICS["rejections"].get(dimension, 0) + 1


def metrics_snapshot() -> dict[str, dict[str, int]]:
    """Return current metrics."""
    return {k: dict(v) for k, v in METRICS.items()}


def reset_metrics() -> None:
    for counters in METRICS.values():
        counters.clear()
