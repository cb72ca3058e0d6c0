"""Population of alternatives across a set of sibling targetings.

Siblings are aggregates generated at the same split level. After population,
each sibling's alternatives on the dimension are exactly the values declared
by the other siblings.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from ..errors import InvalidTargetingError
from ..models.targeting import (
    DIMENSION_TARGETING_TYPES,
    BaseAggregateTargeting,
    SdkVersion,
)
from .dimensions import TargetingDimension
from .normalizer import normalize_dimension

A = TypeVar("A", bound=BaseAggregateTargeting)


def declared_values(sibling: BaseAggregateTargeting, dimension: TargetingDimension) -> tuple:
    targeting = sibling.get(dimension)
    return targeting.value if targeting is not None else ()


def populate_alternatives(
    dimension: TargetingDimension,
    siblings: Sequence[A],
    *,
    max_sdk_version: int | None = None,
) -> tuple[A, ...]:
    """Return ``siblings`` with their alternatives on ``dimension`` filled in.

    Either every sibling declares values on the dimension or none does; mixing
    the two is rejected with ``InvalidTargetingError``. Siblings agnostic to the
    dimension are returned unchanged.

    For ``sdk_version`` a ``max_sdk_version`` adds the sentinel floor
    ``max_sdk_version + 1`` to every sibling's alternatives, so devices above
    the maximum are not served.
    """
    targeted = {bool(declared_values(sibling, dimension)) for sibling in siblings}
    if len(targeted) > 1:
        raise InvalidTargetingError(
            "Some siblings are agnostic to the dimension, and some are not.",
            dimension=dimension,
        )
    if not siblings or not targeted.pop():
        return tuple(siblings)

    all_values = {value for sibling in siblings for value in declared_values(sibling, dimension)}
    targeting_type = DIMENSION_TARGETING_TYPES[dimension]

    populated: list[A] = []
    for sibling in siblings:
        own = declared_values(sibling, dimension)
        alternatives = all_values.difference(own)
        if dimension is TargetingDimension.sdk_version and max_sdk_version is not None:
            alternatives.add(SdkVersion(min=max_sdk_version + 1))
        targeting = normalize_dimension(
            dimension, targeting_type(value=own, alternatives=tuple(alternatives))
        )
        populated.append(sibling.model_copy(update={dimension.value: targeting}))
    return tuple(populated)
