"""Candidate jumps between two clusters.

For a cluster pair, every section pair within the maximum jump distance is
a *candidate* connection point.  Each candidate is probed with every
strand combination:

::

    from cluster  A0 A1 [A2] A3        to cluster  B0 [B1] B2
    from strands  A0 A1 A2 | A3 A2     to strands  B1 B0 | B1 B2
                  (ends at A2)                     (starts at B1)

giving up to four trial ruptures.  Each trial rupture is run through the
filter chain (and, for directional filters, also in reverse) and sorted into
``allowed_jumps`` / ``failed_jumps`` of one :class:`CandidateJump`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, TypeVar

from .distances import DistanceProvider
from .faults import FaultSection, FaultSubsectionCluster, Jump
from .plausibility import (
    PlausibilityFilter,
    PlausibilityResult,
    Range,
    ScalarValuePlausibilityFilter,
    f32,
    find_scalar_filter,
    is_value_better,
)
from .ruptures import ClusterRupture

__all__ = [
    "CandidateJump",
    "CandidateEvaluator",
    "strands_at",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════
# Strand splitting
# ═══════════════════════════════════════════════════════════════════

def strands_at(sections: Sequence[T], index: int) -> List[Sequence[T]]:
    """Sub-sequences usable as one side of a jump at ``sections[index]``.

    One section gives itself.  Otherwise the prefix ``[0..index]`` is
    included if ``index > 0`` and the suffix ``[index..end]`` if ``index`` is
    not the last position, so an interior point yields two strands and an
    end point one.
    """
    if not sections:
        raise ValueError("Cannot split an empty section list")
    n = len(sections)
    if not 0 <= index < n:
        raise IndexError(f"Index {index} out of range for {n} sections")
    if n == 1:
        return [sections[index:index + 1]]
    strands = []
    if index > 0:
        strands.append(sections[:index + 1])
    if index < n - 1:
        strands.append(sections[index:])
    return strands


# ═══════════════════════════════════════════════════════════════════
# CandidateJump
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CandidateJump:
    """Outcome of probing one section pair between two clusters.

    ``allowed_jumps`` / ``failed_jumps`` hold the trial jump of every strand
    combination; ``jump_scalars`` maps each trial jump's ``variant_key`` to
    its scalar value and is ``None`` when no scalar filter is configured.
    """

    from_cluster: FaultSubsectionCluster
    from_section: FaultSection
    from_end: bool
    to_cluster: FaultSubsectionCluster
    to_section: FaultSection
    to_end: bool
    distance: float
    allowed_jumps: Tuple[Jump, ...] = ()
    failed_jumps: Tuple[Jump, ...] = ()
    jump_scalars: Optional[Dict[tuple, float]] = field(default=None, compare=False)
    best_scalar: Optional[float] = None

    @property
    def total_jumps(self) -> int:
        return len(self.allowed_jumps) + len(self.failed_jumps)

    @property
    def passes(self) -> bool:
        """True if at least one strand combination is allowed."""
        return bool(self.allowed_jumps)

    def __str__(self) -> str:
        ret = str(self.from_section.section_id)
        if self.from_end:
            ret += "[end]"
        ret += f"->{self.to_section.section_id}"
        if self.to_end:
            ret += "[end]"
        ret += (f": dist={f32(self.distance):g}\t"
                f"{len(self.allowed_jumps)}/{self.total_jumps} pass")
        if self.best_scalar is not None:
            ret += f"\tbestScalar: {f32(self.best_scalar):g}"
        return ret


# ═══════════════════════════════════════════════════════════════════
# CandidateEvaluator
# ═══════════════════════════════════════════════════════════════════

class CandidateEvaluator:
    """Builds :class:`CandidateJump` objects for cluster pairs.

    Parameters
    ----------
    filters : sequence of PlausibilityFilter
        Non-empty.  Evaluated in order; the first one with a non-null
        acceptable range is the scalar tie-break source.
    distances : DistanceProvider
        Section distance source.
    max_jump_dist : float
        Section pairs farther apart than this (single precision) are skipped.
    """

    def __init__(
        self,
        filters: Sequence[PlausibilityFilter],
        distances: DistanceProvider,
        max_jump_dist: float,
    ):
        if not filters:
            raise ValueError("At least one plausibility filter is required")
        if max_jump_dist < 0:
            raise ValueError(f"max_jump_dist must be >= 0, got {max_jump_dist}")
        self.filters: Tuple[PlausibilityFilter, ...] = tuple(filters)
        self.distances = distances
        self.max_jump_dist = float(max_jump_dist)
        self.scalar_filter: Optional[ScalarValuePlausibilityFilter]
        self.scalar_range: Optional[Range]
        self.scalar_filter, self.scalar_range = find_scalar_filter(self.filters)

    # ── aggregation over all section pairs ──────────────────────

    def find_candidates(
        self,
        from_cluster: FaultSubsectionCluster,
        to_cluster: FaultSubsectionCluster,
        verbose: bool = False,
    ) -> List[CandidateJump]:
        """Every in-range section pair, in (from index, to index) order."""
        max_dist = f32(self.max_jump_dist)
        candidates: List[CandidateJump] = []
        for i, s1 in enumerate(from_cluster.sections):
            for j, s2 in enumerate(to_cluster.sections):
                dist = self.distances.distance(s1, s2)
                if f32(dist) > max_dist:
                    continue
                if verbose:
                    logger.info(f"{s1.section_id} => {s2.section_id}: {dist} km")
                candidates.append(
                    self.evaluate(from_cluster, i, to_cluster, j, dist, verbose))
        return candidates

    # ── one section pair ────────────────────────────────────────

    def evaluate(
        self,
        from_cluster: FaultSubsectionCluster,
        from_index: int,
        to_cluster: FaultSubsectionCluster,
        to_index: int,
        distance: float,
        verbose: bool = False,
    ) -> CandidateJump:
        """Probe every strand combination at ``from[i] -> to[j]``."""
        s1 = from_cluster.sections[from_index]
        s2 = to_cluster.sections[to_index]
        allowed: List[Jump] = []
        failed: List[Jump] = []
        jump_scalars: Optional[Dict[tuple, float]] = (
            None if self.scalar_filter is None else {})
        best_scalar: Optional[float] = None

        from_strands = strands_at(from_cluster.sections, from_index)
        to_strands = strands_at(to_cluster.sections, to_index)
        for from_strand in from_strands:
            oriented_from = FaultSubsectionCluster(from_strand)
            if oriented_from.end_section != s1:
                oriented_from = oriented_from.reversed()
            for to_strand in to_strands:
                oriented_to = FaultSubsectionCluster(to_strand)
                if oriented_to.start_section != s2:
                    oriented_to = oriented_to.reversed()
                trial = Jump(s1, oriented_from, s2, oriented_to, distance)
                passed, scalar = self._probe(trial, verbose)

                if scalar is not None:
                    jump_scalars[trial.variant_key] = scalar
                    if best_scalar is None or is_value_better(
                            scalar, best_scalar, self.scalar_range):
                        best_scalar = scalar

                (allowed if passed else failed).append(trial)

        candidate = CandidateJump(
            from_cluster=from_cluster,
            from_section=s1,
            from_end=from_index in (0, len(from_cluster) - 1),
            to_cluster=to_cluster,
            to_section=s2,
            to_end=to_index in (0, len(to_cluster) - 1),
            distance=distance,
            allowed_jumps=tuple(allowed),
            failed_jumps=tuple(failed),
            jump_scalars=jump_scalars,
            best_scalar=best_scalar,
        )
        if verbose:
            logger.info(f"New candidate: {candidate}")
        return candidate

    def _apply_filters(self, rupture: ClusterRupture,
                       verbose: bool) -> Tuple[PlausibilityResult, bool]:
        result = PlausibilityResult.PASS
        directional = False
        for filt in self.filters:
            result = result.logical_and(filt.apply(rupture, False))
            directional = directional or filt.is_directional(False)
        if verbose:
            logger.info(f"\tResult for {rupture}: {result.name}")
        return result, directional

    def _probe(self, trial: Jump, verbose: bool) -> Tuple[bool, Optional[float]]:
        """Evaluate one trial jump.  Returns (passes, scalar or None)."""
        rupture = ClusterRupture.from_cluster(trial.from_cluster).take(trial)
        if verbose:
            logger.info(f"\tTrying rupture: {rupture}")
        result, directional = self._apply_filters(rupture, verbose)

        scalar: Optional[float] = None
        if self.scalar_filter is not None and result.is_pass:
            scalar = self.scalar_filter.value(rupture)
            if verbose:
                logger.info(f"\tScalar val: {scalar}")

        if directional and (self.scalar_filter is not None or not result.is_pass):
            reversed_rupture = rupture.reversed()
            if verbose:
                logger.info(f"\tTrying reversed: {reversed_rupture}")
            reverse_result, _ = self._apply_filters(reversed_rupture, verbose)
            if self.scalar_filter is not None and reverse_result.is_pass:
                reverse_scalar = self.scalar_filter.value(reversed_rupture)
                if verbose:
                    logger.info(f"\tScalar val: {reverse_scalar}")
                if scalar is None or (reverse_scalar is not None and is_value_better(
                        reverse_scalar, scalar, self.scalar_range)):
                    scalar = reverse_scalar
            result = result.logical_or(reverse_result)

        return result.is_pass, scalar
