"""Errors raised while matching and validating targeting."""

from __future__ import annotations

from typing import Any, Iterable


class TargetingError(ValueError):
    """Rejected targeting input. Carries the dimension and the offending values."""

    def __init__(
        self,
        message: str,
        *,
        dimension: Any = None,
        values: Iterable[Any] = (),
    ) -> None:
        super().__init__(message)
        self.dimension = dimension
        self.values = tuple(values)


class InvalidTargetingError(TargetingError):
    """Targeting that could not have been produced by a correct generator."""


class IncompatibleDeviceError(TargetingError):
    """The device's value for a dimension is not accounted for by the targeting."""


class DimensionNotPresentError(LookupError):
    """A dimension was projected out of an aggregate that does not carry it."""

    def __init__(self, dimension: Any, aggregate_type: str) -> None:
        super().__init__(f"Dimension '{dimension}' is not set on {aggregate_type}.")
        self.dimension = dimension
        self.aggregate_type = aggregate_type
