"""Best-density selection, following the Android framework resource matching.

Scaling a resource down is considered twice as good as scaling it up.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable

from .dimensions import ANY_DENSITY_VALUE, MDPI_VALUE, NONE_DENSITY_VALUE


class ScreenDensityComparator:
    """Orders candidate DPIs so that the better match for ``desired_dpi`` is greater."""

    def __init__(self, desired_dpi: int) -> None:
        if desired_dpi == NONE_DENSITY_VALUE:
            raise ValueError("Desired density cannot be NODPI.")
        if desired_dpi in (0, ANY_DENSITY_VALUE):
            desired_dpi = MDPI_VALUE
        self.desired_dpi = desired_dpi

    def compare(self, dpi_a: int, dpi_b: int) -> int:
        if dpi_a == dpi_b:
            return 0
        # ANY_DPI always wins.
        if dpi_a == ANY_DENSITY_VALUE:
            return 1
        if dpi_b == ANY_DENSITY_VALUE:
            return -1
        if dpi_a > dpi_b:
            return -self._compare_ordered(dpi_b, dpi_a)
        return self._compare_ordered(dpi_a, dpi_b)

    def _compare_ordered(self, lower_dpi: int, higher_dpi: int) -> int:
        """1 if ``lower_dpi`` is the better match, -1 if ``higher_dpi`` is."""
        desired = self.desired_dpi
        if desired >= higher_dpi:
            return -1
        if desired <= lower_dpi:
            return 1
        if ((2 * lower_dpi) - desired) * higher_dpi > desired * desired:
            return 1
        return -1


def select_best_density(densities: Iterable[int], desired_dpi: int) -> int:
    """Return the density from ``densities`` the framework would pick for ``desired_dpi``."""
    candidates = list(densities)
    if not candidates:
        raise ValueError("Cannot select a density from an empty set.")
    comparator = ScreenDensityComparator(desired_dpi)
    return max(candidates, key=cmp_to_key(comparator.compare))

