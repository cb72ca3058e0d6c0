"""Consistency checks over sets of sibling targetings.

Siblings are the aggregates generated at one split level for one dimension.
A consistent set has every value claimed by exactly one sibling and
acknowledged as an alternative by every other sibling.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Sequence, TypeVar

from .domain.alternatives import declared_values
from .domain.dimensions import TargetingDimension
from .domain.matchers import TargetingDimensionMatcher, check_device_compatible
from .errors import IncompatibleDeviceError, InvalidTargetingError
from .models.targeting import BaseAggregateTargeting

A = TypeVar("A", bound=BaseAggregateTargeting)


class ValidationResult:
    """Errors and warnings found on one dimension of a sibling set.

    Messages are prefixed with the dimension name.
    """

    def __init__(self, dimension: TargetingDimension):
        self.dimension = dimension
        self.errors: list[str] = []
        self.warnings: list[str] = []

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> ValidationResult:
        self.errors.append(f"{self.dimension.value}: {message}")
        return self

    def add_warning(self, message: str) -> ValidationResult:
        self.warnings.append(f"{self.dimension.value}: {message}")
        return self

    def raise_for_errors(self) -> None:
        """Raise ``InvalidTargetingError`` carrying every error, if any."""
        if self.errors:
            raise InvalidTargetingError(
                "Inconsistent sibling targeting: " + "; ".join(self.errors),
                dimension=self.dimension,
                values=self.errors,
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension.value,
            "valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
        }


def _alternatives(sibling: BaseAggregateTargeting, dimension: TargetingDimension) -> tuple:
    targeting = sibling.get(dimension)
    return targeting.alternatives if targeting is not None else ()


def validate_siblings(
    dimension: TargetingDimension, siblings: Sequence[BaseAggregateTargeting]
) -> ValidationResult:
    """Validate a sibling set on one dimension.

    Errors:
    - some siblings declare values on the dimension while others do not
    - a value is claimed by more than one sibling
    - a sibling's values and alternatives overlap
    - a sibling does not list another sibling's value as an alternative

    Alternatives that no sibling claims are reported as warnings; generators
    add such sentinels to cap the served range (e.g. a maximum SDK version).
    """
    result = ValidationResult(dimension)
    targeted = [bool(declared_values(s, dimension)) for s in siblings]
    if any(targeted) and not all(targeted):
        result.add_error("some siblings are agnostic to the dimension, and some are not")
        return result
    if not any(targeted):
        return result

    claims = Counter(value for s in siblings for value in set(declared_values(s, dimension)))
    for value, count in claims.items():
        if count > 1:
            result.add_error(f"value {value!r} is claimed by {count} siblings")

    for index, sibling in enumerate(siblings):
        own = set(declared_values(sibling, dimension))
        alternatives = set(_alternatives(sibling, dimension))
        others = {
            value
            for other_index, other in enumerate(siblings)
            if other_index != index
            for value in declared_values(other, dimension)
        } - own
        overlap = own & alternatives
        if overlap:
            result.add_error(
                f"sibling #{index} lists its own values as alternatives: "
                f"{sorted(map(repr, overlap))}"
            )
        missing = others - alternatives
        if missing:
            result.add_error(
                f"sibling #{index} is missing alternatives: "
                f"{sorted(map(repr, missing))}"
            )
        unclaimed = alternatives - others - own
        if unclaimed:
            result.add_warning(
                f"sibling #{index} has alternatives no sibling claims: "
                f"{sorted(map(repr, unclaimed))}"
            )
    return result


def check_siblings(dimension: TargetingDimension, siblings: Sequence[BaseAggregateTargeting]) -> None:
    """Raise ``InvalidTargetingError`` when ``validate_siblings`` reports errors."""
    validate_siblings(dimension, siblings).raise_for_errors()


def audit_device_coverage(matcher: TargetingDimensionMatcher, siblings: Sequence[A]) -> A:
    """Return the one sibling serving the matcher's device.

    Every sibling must be compatible with the device and exactly one must
    match it; otherwise ``IncompatibleDeviceError`` is raised. Compatibility is
    only checked when the device reports the dimension.
    """
    matched: list[A] = []
    for sibling in siblings:
        targeting = matcher.get_targeting_value(sibling)
        check_device_compatible(matcher, targeting)
        if matcher.matches_targeting(targeting):
            matched.append(sibling)
    if len(matched) != 1:
        raise IncompatibleDeviceError(
            f"Expected exactly one sibling to match the device on {matcher.dimension.value}, "
            f"got {len(matched)}.",
            dimension=matcher.dimension,
            values=matched,
        )
    return matched[0]
