"""Cluster connection strategies.

A strategy decides which jump (if any) connects each pair of fault-section
clusters.  :class:`ClusterConnectionStrategy` drives the pairwise iteration
(optionally on a thread pool) and records the chosen jumps on the clusters;
subclasses supply ``build_possible_connections`` for one pair.

Strategies
----------
* :class:`PlausibleClusterConnectionStrategy` — plausibility-filtered
  candidate search plus a :class:`~faultlink.selectors.JumpSelector`
* :class:`DistCutoffClosestSectStrategy` — closest section pair within a
  distance cutoff (baseline for comparisons)
* :class:`PrecomputedClusterConnectionStrategy` — replays clusters whose
  connections were computed earlier

Usage
-----
>>> sections = [...]                                  # FaultSection list
>>> strategy = PlausibleClusterConnectionStrategy(
...     sections, SectionDistanceCalculator(sections), 5.0,
...     JumpDistanceFilter(5.0))
>>> strategy.build_connections(threads=4)
>>> strategy.are_parents_connected(12, 31)
True
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, FrozenSet, List, Optional, Sequence, Set, Tuple

from .candidates import CandidateEvaluator, CandidateJump
from .distances import DistanceProvider
from .faults import FaultSection, FaultSubsectionCluster, Jump, build_clusters
from .plausibility import PlausibilityFilter, Range, ScalarValuePlausibilityFilter, f32
from .selectors import JumpSelector, build_default_selector
from .settings import DEFAULT_SETTINGS, SettingsRegistry
from .trace import ConnectionTrace

__all__ = [
    "ClusterConnectionStrategy",
    "PlausibleClusterConnectionStrategy",
    "DistCutoffClosestSectStrategy",
    "PrecomputedClusterConnectionStrategy",
    "default_thread_count",
    "debug_parent_pair",
]

logger = logging.getLogger(__name__)

ClusterPairPredicate = Callable[[FaultSubsectionCluster, FaultSubsectionCluster], bool]


def default_thread_count(settings: Optional[SettingsRegistry] = None) -> int:
    """``max(1, min(threads.max, cpu_count - threads.reserved_cpus))``."""
    s = settings or DEFAULT_SETTINGS
    cpus = os.cpu_count() or 1
    return max(1, min(int(s["threads.max"]),
                      cpus - int(s["threads.reserved_cpus"])))


def debug_parent_pair(parent_a: int, parent_b: int) -> ClusterPairPredicate:
    """Predicate matching the cluster pair ``(parent_a, parent_b)`` either way."""
    target = {parent_a, parent_b}

    def _match(c1: FaultSubsectionCluster, c2: FaultSubsectionCluster) -> bool:
        return {c1.parent_id, c2.parent_id} == target

    return _match


def _format_dist(dist: float) -> str:
    text = f"{dist:.1f}"
    return text[:-2] if text.endswith(".0") else text


# ═══════════════════════════════════════════════════════════════════
# ClusterConnectionStrategy — pairwise driver
# ═══════════════════════════════════════════════════════════════════

class ClusterConnectionStrategy(ABC):
    """Base class: owns the clusters and connects every pair of them.

    Parameters
    ----------
    sections : sequence of FaultSection
    clusters : list of FaultSubsectionCluster, optional
        Defaults to :func:`~faultlink.faults.build_clusters` on *sections*.
    settings : SettingsRegistry, optional
    """

    def __init__(
        self,
        sections: Sequence[FaultSection],
        clusters: Optional[Sequence[FaultSubsectionCluster]] = None,
        settings: Optional[SettingsRegistry] = None,
    ):
        self._sections: Tuple[FaultSection, ...] = tuple(sections)
        self._clusters: List[FaultSubsectionCluster] = (
            list(clusters) if clusters is not None
            else build_clusters(self._sections))
        self._settings = settings or DEFAULT_SETTINGS
        self._connections_added = False
        self._connected_parents: Set[FrozenSet[int]] = set()

    # ── abstract interface ──────────────────────────────────────

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable strategy name for diagnostics."""

    @property
    @abstractmethod
    def max_jump_dist(self) -> float:
        """Largest jump distance this strategy can emit (km)."""

    @abstractmethod
    def build_possible_connections(
        self,
        from_cluster: FaultSubsectionCluster,
        to_cluster: FaultSubsectionCluster,
    ) -> List[Jump]:
        """Jumps from *from_cluster* to *to_cluster* (empty if none)."""

    # ── read ────────────────────────────────────────────────────

    @property
    def sections(self) -> Tuple[FaultSection, ...]:
        return self._sections

    @property
    def clusters(self) -> List[FaultSubsectionCluster]:
        return list(self._clusters)

    @property
    def settings(self) -> SettingsRegistry:
        return self._settings

    @property
    def connections_built(self) -> bool:
        return self._connections_added

    @property
    def connected_parent_pairs(self) -> FrozenSet[FrozenSet[int]]:
        return frozenset(self._connected_parents)

    @property
    def connection_count(self) -> int:
        """Number of undirected parent-to-parent connections."""
        return len(self._connected_parents)

    def are_parents_connected(self, parent_a: int, parent_b: int) -> bool:
        return frozenset((parent_a, parent_b)) in self._connected_parents

    def __repr__(self) -> str:
        return (f"{type(self).__name__}({self.name!r}, "
                f"{len(self._clusters)} clusters)")

    # ── driver ──────────────────────────────────────────────────

    def build_connections(self, threads: Optional[int] = None) -> int:
        """Connect every cluster pair once and return the connection count.

        *threads* defaults to :func:`default_thread_count` for the settings.

        Workers only compute jumps; they are attached to the clusters on the
        calling thread in cluster-pair order, so the result does not depend
        on *threads*.  Calling again is a no-op.
        """
        if self._connections_added:
            return self.connection_count
        if threads is None:
            threads = default_thread_count(self._settings)
        pairs = [(c1, c2)
                 for i, c1 in enumerate(self._clusters)
                 for c2 in self._clusters[i + 1:]]
        logger.debug(f"{self.name}: building connections for {len(pairs)} "
                     f"cluster pairs on {threads} thread(s)")

        if threads > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=threads) as pool:
                results = list(pool.map(
                    lambda pair: self.build_possible_connections(*pair), pairs))
        else:
            results = [self.build_possible_connections(c1, c2) for c1, c2 in pairs]

        n_jumps = 0
        for (c1, c2), jumps in zip(pairs, results):
            for jump in jumps:
                c1.add_connection(jump)
                c2.add_connection(jump.reverse())
                self._connected_parents.add(
                    frozenset((c1.parent_id, c2.parent_id)))
                n_jumps += 1
        self._connections_added = True
        logger.info(f"{self.name}: {n_jumps} jumps connect "
                    f"{self.connection_count} parent pairs")
        return self.connection_count


# ═══════════════════════════════════════════════════════════════════
# PlausibleClusterConnectionStrategy
# ═══════════════════════════════════════════════════════════════════

class PlausibleClusterConnectionStrategy(ClusterConnectionStrategy):
    """Best jump per cluster pair by plausibility filters and a selector.

    All section pairs within ``max_jump_dist`` are candidates.  Each is
    probed with every strand combination against *filters*; the
    *selector* (default: pass at least one combination, fewest failed
    combinations, then best scalar within ``selector.equiv_dist`` km, then
    nearest) picks the winner.

    Parameters
    ----------
    sections : sequence of FaultSection
    distances : DistanceProvider
    max_jump_dist : float
    *filters : PlausibilityFilter
        At least one.  The first with a non-null acceptable range is the
        scalar tie-break source.  A single list/tuple is also accepted.
    selector : JumpSelector, optional
    clusters : sequence of FaultSubsectionCluster, optional
    debug_pairs : callable, optional
        ``(from_cluster, to_cluster) -> bool``; matching pairs are
        evaluated verbosely (logged at INFO).
    settings : SettingsRegistry, optional
    """

    def __init__(
        self,
        sections: Sequence[FaultSection],
        distances: DistanceProvider,
        max_jump_dist: float,
        *filters: PlausibilityFilter,
        selector: Optional[JumpSelector] = None,
        clusters: Optional[Sequence[FaultSubsectionCluster]] = None,
        debug_pairs: Optional[ClusterPairPredicate] = None,
        settings: Optional[SettingsRegistry] = None,
    ):
        super().__init__(sections, clusters, settings)
        if len(filters) == 1 and isinstance(filters[0], (list, tuple)):
            filters = tuple(filters[0])
        self._evaluator = CandidateEvaluator(filters, distances, max_jump_dist)
        self._selector = (selector if selector is not None
                          else build_default_selector(self._settings))
        self._debug_pairs = debug_pairs

    # ── read ────────────────────────────────────────────────────

    @property
    def name(self) -> str:
        filters = self._evaluator.filters
        dist = _format_dist(self.max_jump_dist)
        if len(filters) == 1:
            return f"{filters[0].name} Plausible: maxDist={dist} km"
        return f"Plausible ({len(filters)} filters): maxDist={dist} km"

    @property
    def max_jump_dist(self) -> float:
        return self._evaluator.max_jump_dist

    @property
    def filters(self) -> Tuple[PlausibilityFilter, ...]:
        return self._evaluator.filters

    @property
    def selector(self) -> JumpSelector:
        return self._selector

    @property
    def scalar_filter(self) -> Optional[ScalarValuePlausibilityFilter]:
        return self._evaluator.scalar_filter

    @property
    def scalar_range(self) -> Optional[Range]:
        return self._evaluator.scalar_range

    # ── connection building ─────────────────────────────────────

    def build_possible_connections(self, from_cluster, to_cluster):
        jump = self.build_connection(from_cluster, to_cluster)
        return [] if jump is None else [jump]

    def build_connection(
        self,
        from_cluster: FaultSubsectionCluster,
        to_cluster: FaultSubsectionCluster,
    ) -> Optional[Jump]:
        """The selected jump between two clusters, or ``None``."""
        jump, _, _ = self._search(from_cluster, to_cluster)
        return jump

    def build_connection_traced(
        self,
        from_cluster: FaultSubsectionCluster,
        to_cluster: FaultSubsectionCluster,
    ) -> Tuple[Optional[Jump], ConnectionTrace]:
        """Like :meth:`build_connection`, plus a :class:`ConnectionTrace`."""
        jump, candidates, selected = self._search(from_cluster, to_cluster)
        trace = ConnectionTrace(
            from_parent_id=from_cluster.parent_id,
            to_parent_id=to_cluster.parent_id,
            candidates=tuple(candidates),
            selected=selected,
            jump=jump,
            selector_name=self._selector.name,
            scalar_range="" if self.scalar_range is None else str(self.scalar_range),
        )
        return jump, trace

    def _search(
        self,
        from_cluster: FaultSubsectionCluster,
        to_cluster: FaultSubsectionCluster,
    ) -> Tuple[Optional[Jump], List[CandidateJump], Optional[CandidateJump]]:
        verbose = bool(self._debug_pairs and self._debug_pairs(from_cluster, to_cluster))
        candidates = self._evaluator.find_candidates(from_cluster, to_cluster, verbose)
        if not candidates:
            return None, candidates, None
        if verbose:
            logger.info("All candidates (distance sorted)")
            for candidate in sorted(candidates, key=lambda c: c.distance):
                logger.info(f"\t{candidate}")

        best = self._selector.select(candidates, self.scalar_range, verbose)
        if verbose:
            logger.info(f"Final candidate: {best}")
        if best is None:
            return None, candidates, None
        jump = Jump(best.from_section, from_cluster,
                    best.to_section, to_cluster, best.distance)
        return jump, candidates, best


# ═══════════════════════════════════════════════════════════════════
# DistCutoffClosestSectStrategy — distance-only baseline
# ═══════════════════════════════════════════════════════════════════

class DistCutoffClosestSectStrategy(ClusterConnectionStrategy):
    """Connect each cluster pair at its closest section pair within a cutoff."""

    def __init__(
        self,
        sections: Sequence[FaultSection],
        distances: DistanceProvider,
        max_jump_dist: float,
        clusters: Optional[Sequence[FaultSubsectionCluster]] = None,
        settings: Optional[SettingsRegistry] = None,
    ):
        if max_jump_dist < 0:
            raise ValueError(f"max_jump_dist must be >= 0, got {max_jump_dist}")
        super().__init__(sections, clusters, settings)
        self._distances = distances
        self._max_jump_dist = float(max_jump_dist)

    @property
    def name(self) -> str:
        return f"Dist Cutoff Closest Sect: maxDist={_format_dist(self._max_jump_dist)} km"

    @property
    def max_jump_dist(self) -> float:
        return self._max_jump_dist

    def build_possible_connections(self, from_cluster, to_cluster):
        max_dist = f32(self._max_jump_dist)
        best: Optional[Tuple[FaultSection, FaultSection, float]] = None
        for s1 in from_cluster.sections:
            for s2 in to_cluster.sections:
                dist = self._distances.distance(s1, s2)
                if f32(dist) > max_dist:
                    continue
                if best is None or f32(dist) < f32(best[2]):
                    best = (s1, s2, dist)
        if best is None:
            return []
        return [Jump(best[0], from_cluster, best[1], to_cluster, best[2])]


# ═══════════════════════════════════════════════════════════════════
# PrecomputedClusterConnectionStrategy
# ═══════════════════════════════════════════════════════════════════

class PrecomputedClusterConnectionStrategy(ClusterConnectionStrategy):
    """Clusters whose connections were already chosen.

    Connections are fixed at construction; asking to recompute one is a
    programming error.
    """

    def __init__(
        self,
        name: str,
        sections: Sequence[FaultSection],
        clusters: Sequence[FaultSubsectionCluster],
        max_jump_dist: float,
    ):
        super().__init__(sections, clusters)
        self._name = name
        self._max_jump_dist = float(max_jump_dist)
        self._connections_added = True
        for cluster in self._clusters:
            for jump in cluster.connections:
                self._connected_parents.add(
                    frozenset((cluster.parent_id, jump.to_cluster.parent_id)))
        if not self._connected_parents:
            logger.warning(f"{name}: no connections detected")

    @property
    def name(self) -> str:
        return self._name

    @property
    def max_jump_dist(self) -> float:
        return self._max_jump_dist

    def build_possible_connections(self, from_cluster, to_cluster):
        raise RuntimeError("Already built when pre-computed")
