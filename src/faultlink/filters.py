"""Geometry-only reference filters.

Physics filters (Coulomb stress ratios and the like) are supplied by the
caller.  The two filters here need nothing but the rupture geometry and are
handy as defaults, as scalar tie-break sources and in tests.
"""

from __future__ import annotations

from typing import Optional

from .plausibility import PlausibilityResult, Range, f32
from .ruptures import ClusterRupture

__all__ = [
    "JumpDistanceFilter",
    "MinSectionsPerParentFilter",
]


class JumpDistanceFilter:
    """Hard-stop any rupture containing a jump longer than ``max_dist`` km.

    Also a scalar filter: the value is the longest jump, acceptable up to
    ``max_dist``, so shorter jumps rank better.
    """

    def __init__(self, max_dist: float):
        if max_dist < 0:
            raise ValueError(f"max_dist must be >= 0, got {max_dist}")
        self.max_dist = float(max_dist)

    @property
    def name(self) -> str:
        return f"MaxJumpDist({self.max_dist:g}km)"

    def apply(self, rupture: ClusterRupture,
              verbose: bool = False) -> PlausibilityResult:
        if f32(rupture.max_jump_distance) > f32(self.max_dist):
            return PlausibilityResult.FAIL_HARD_STOP
        return PlausibilityResult.PASS

    def is_directional(self, verbose: bool = False) -> bool:
        return False

    def value(self, rupture: ClusterRupture) -> Optional[float]:
        return rupture.max_jump_distance

    def acceptable_range(self) -> Optional[Range]:
        return Range.at_most(self.max_dist)

    def __str__(self) -> str:
        return self.name


class MinSectionsPerParentFilter:
    """Every cluster in the rupture must have at least ``min_sections``.

    A short last cluster only fails (``FAIL``), since extending the rupture
    could still be valid; a short cluster anywhere else hard-stops.
    """

    def __init__(self, min_sections: int, allow_if_no_jumps: bool = True):
        if min_sections < 1:
            raise ValueError(f"min_sections must be >= 1, got {min_sections}")
        self.min_sections = int(min_sections)
        self.allow_if_no_jumps = allow_if_no_jumps

    @property
    def name(self) -> str:
        return f"MinSectsPerParent({self.min_sections})"

    def apply(self, rupture: ClusterRupture,
              verbose: bool = False) -> PlausibilityResult:
        if not rupture.jumps and self.allow_if_no_jumps:
            return PlausibilityResult.PASS
        last = len(rupture.clusters) - 1
        result = PlausibilityResult.PASS
        for k, cluster in enumerate(rupture.clusters):
            if len(cluster) >= self.min_sections:
                continue
            if k == last:
                result = result.logical_and(PlausibilityResult.FAIL)
            else:
                return PlausibilityResult.FAIL_HARD_STOP
        return result

    def is_directional(self, verbose: bool = False) -> bool:
        return False

    def __str__(self) -> str:
        return self.name
