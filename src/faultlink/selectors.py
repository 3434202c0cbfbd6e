"""Jump selectors — reduce a candidate list to the single best connection.

Each selector implements ``select(candidates, acceptable_range, verbose)``
and several take a *fallback* selector, so policies compose:

::

    PassesMinimizeFailedSelector          at least one passing strand combo,
        ↓ tied group                      fewest failures, fewest variants
    BestScalarSelector(2.0)               best scalar within 2 km of nearest
        ↓ tied group
    min_distance                          nearest

That chain is :data:`JUMP_SELECTOR_DEFAULT`.  It favours end-to-end
connections: if a simple end-point jump works it wins over a mid-strand
split, with distance and scalar plausibility as tie-breakers.

Distances and scalars are compared in single precision (:func:`f32`) for
ties and strict ordering; sorting uses full precision.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Sequence, runtime_checkable

from .candidates import CandidateJump
from .plausibility import Range, dist_from_range, f32, is_value_better
from .settings import DEFAULT_SETTINGS, SettingsRegistry

__all__ = [
    "JumpSelector",
    "MinDistanceSelector",
    "BestScalarSelector",
    "AnyPassMinDistSelector",
    "PassesMinimizeFailedSelector",
    "JUMP_SELECTOR_DEFAULT",
    "build_default_selector",
    "min_distance",
    "sort_by_distance",
]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════

def min_distance(candidates: Optional[Iterable[CandidateJump]]) -> Optional[CandidateJump]:
    """Nearest candidate; the first one wins on single-precision ties."""
    if candidates is None:
        return None
    best = None
    best_dist = float("inf")
    for candidate in candidates:
        dist = f32(candidate.distance)
        if dist < best_dist:
            best_dist = dist
            best = candidate
    return best


def sort_by_distance(candidates: Iterable[CandidateJump]) -> List[CandidateJump]:
    """Stable ascending sort by full-precision distance."""
    return sorted(candidates, key=lambda c: c.distance)


# ═══════════════════════════════════════════════════════════════════
# JumpSelector protocol
# ═══════════════════════════════════════════════════════════════════

@runtime_checkable
class JumpSelector(Protocol):
    """Strategy choosing one candidate (or none) from a list."""

    @property
    def name(self) -> str:
        ...

    def select(
        self,
        candidates: Sequence[CandidateJump],
        acceptable_range: Optional[Range] = None,
        verbose: bool = False,
    ) -> Optional[CandidateJump]:
        ...


# ═══════════════════════════════════════════════════════════════════
# Concrete selectors
# ═══════════════════════════════════════════════════════════════════

class MinDistanceSelector:
    """Pick the nearest candidate."""

    @property
    def name(self) -> str:
        return "MinDistance"

    def select(self, candidates, acceptable_range=None, verbose=False):
        return min_distance(candidates)

    def __repr__(self) -> str:
        return self.name


class BestScalarSelector:
    """Best scalar value among candidates of near-equivalent distance.

    Parameters
    ----------
    equiv_distance : float
        Candidates within this many km of the nearest one are treated as
        equally near.  ``0`` disables the band and considers every
        candidate.
    """

    def __init__(self, equiv_distance: float):
        if equiv_distance < 0:
            raise ValueError(
                f"equiv_distance must be >= 0, got {equiv_distance}")
        self.equiv_distance = float(equiv_distance)

    @property
    def name(self) -> str:
        return f"BestScalar({self.equiv_distance:g})"

    def __repr__(self) -> str:
        return self.name

    def select(self, candidates, acceptable_range=None, verbose=False):
        if not candidates:
            return None
        candidates = sort_by_distance(candidates)
        if self.equiv_distance > 0:
            max_dist = f32(candidates[0].distance + self.equiv_distance)
            within = []
            for candidate in candidates:
                if f32(candidate.distance) > max_dist:
                    break
                within.append(candidate)
            candidates = within

        best_value: Optional[float] = None
        best: List[CandidateJump] = []
        for candidate in candidates:
            if candidate.best_scalar is None or not candidate.passes:
                continue
            if verbose:
                logger.info(f"Testing {candidate}")
            if best_value is None:
                best_value = candidate.best_scalar
                best = [candidate]
                if verbose:
                    logger.info("\tkeeping as first")
            elif f32(best_value) == f32(candidate.best_scalar):
                best.append(candidate)
                if verbose:
                    logger.info("\tadding (tie)")
            elif is_value_better(candidate.best_scalar, best_value, acceptable_range):
                best_value = candidate.best_scalar
                best = [candidate]
                if verbose:
                    logger.info("\treplacing as new best")
            elif verbose:
                logger.info(
                    f"\t{candidate.best_scalar} is worse than {best_value} "
                    f"(range {acceptable_range}, candidate dist from range "
                    f"{self._range_dist(candidate.best_scalar, acceptable_range)})")

        if not best:
            if verbose:
                logger.info("No scalars, falling back to minDist")
            return candidates[0]
        return min_distance(best)

    @staticmethod
    def _range_dist(value: float, acceptable_range: Optional[Range]):
        if acceptable_range is None:
            return None
        return dist_from_range(value, acceptable_range)


class AnyPassMinDistSelector:
    """Nearest candidate with at least one allowed jump.

    With no passing candidate, the original list goes to *fallback*.
    """

    def __init__(self, fallback: Optional[JumpSelector] = None):
        self.fallback = fallback if fallback is not None else MinDistanceSelector()

    @property
    def name(self) -> str:
        return f"AnyPassMinDist({self.fallback.name})"

    def __repr__(self) -> str:
        return self.name

    def select(self, candidates, acceptable_range=None, verbose=False):
        passed = [c for c in candidates if c.passes]
        if not passed:
            return self.fallback.select(candidates, acceptable_range, verbose)
        return min_distance(passed)


class PassesMinimizeFailedSelector:
    """Passing candidates with the fewest failed, then fewest total, jumps.

    All candidates tied on both counts go to *fallback*; with no passing
    candidate the original list does.
    """

    def __init__(self, fallback: Optional[JumpSelector] = None):
        self.fallback = fallback if fallback is not None else MinDistanceSelector()

    @property
    def name(self) -> str:
        return f"PassesMinimizeFailed({self.fallback.name})"

    def __repr__(self) -> str:
        return self.name

    def select(self, candidates, acceptable_range=None, verbose=False):
        options: Optional[List[CandidateJump]] = None
        for candidate in candidates:
            if not candidate.passes:
                continue
            if options is None:
                if verbose:
                    logger.info(f"First real option: {candidate}")
                options = [candidate]
                continue
            prev = options[0]
            # > 0: candidate is better, 0: tie
            cmp = len(prev.failed_jumps) - len(candidate.failed_jumps)
            if verbose:
                logger.info(f"Comparing: failCMP={cmp}\n\tprev: {prev}"
                            f"\n\tnew={candidate}")
            if cmp == 0:
                cmp = prev.total_jumps - candidate.total_jumps
                if verbose:
                    logger.info(f"Fell back to totalJumps: jumpCMP={cmp}"
                                f"\tprev: {prev.total_jumps}"
                                f"\tnew={candidate.total_jumps}")
            if cmp > 0:
                if verbose:
                    logger.info("\t\tnew best!")
                options = [candidate]
            elif cmp == 0:
                if verbose:
                    logger.info("\t\ttie for best!")
                options.append(candidate)

        if options is None:
            return self.fallback.select(candidates, acceptable_range, verbose)
        if verbose:
            logger.info(f"Ended with {len(options)} options:")
            for candidate in options:
                logger.info(f"\t{candidate}")
        return self.fallback.select(options, acceptable_range, verbose)


# ═══════════════════════════════════════════════════════════════════
# Default policy
# ═══════════════════════════════════════════════════════════════════

def build_default_selector(
    settings: Optional[SettingsRegistry] = None,
) -> PassesMinimizeFailedSelector:
    """``PassesMinimizeFailed`` falling back to ``BestScalar(equiv_dist)``."""
    s = settings or DEFAULT_SETTINGS
    return PassesMinimizeFailedSelector(
        BestScalarSelector(s["selector.equiv_dist"]))


JUMP_SELECTOR_DEFAULT: PassesMinimizeFailedSelector = build_default_selector()
