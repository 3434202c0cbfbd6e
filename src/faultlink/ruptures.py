"""ClusterRupture — a linear path of clusters joined by jumps.

Only used here as a disposable probe: the connection search builds a trial
rupture for every strand combination and asks the plausibility filters
whether the path is realistic.  Every operation returns a new rupture.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .faults import FaultSection, FaultSubsectionCluster, Jump

__all__ = ["ClusterRupture"]


@dataclass(frozen=True)
class ClusterRupture:
    """Ordered path ``clusters[0] -> jumps[0] -> clusters[1] -> ...``.

    Invariant: ``len(jumps) == len(clusters) - 1`` and ``jumps[k]`` leads
    from ``clusters[k]`` to ``clusters[k + 1]``.
    """

    clusters: Tuple[FaultSubsectionCluster, ...]
    jumps: Tuple[Jump, ...] = ()

    def __post_init__(self):
        if not self.clusters:
            raise ValueError("A rupture needs at least one cluster")
        if len(self.jumps) != len(self.clusters) - 1:
            raise ValueError(
                f"{len(self.clusters)} clusters need {len(self.clusters) - 1} "
                f"jumps, got {len(self.jumps)}")

    @classmethod
    def from_cluster(cls, cluster: FaultSubsectionCluster) -> "ClusterRupture":
        return cls((cluster,))

    # ── growth & reversal ───────────────────────────────────────

    def take(self, jump: Jump) -> "ClusterRupture":
        """Return a new rupture extended by *jump*.

        Raises
        ------
        ValueError
            If the jump does not start in the last cluster, or its target
            cluster overlaps sections already in the rupture.
        """
        last = self.clusters[-1]
        if not last.contains(jump.from_section):
            raise ValueError(
                f"Jump {jump} does not start in the last cluster {last}")
        present = {s.section_id for s in self.sections}
        overlap = present.intersection(jump.to_cluster.section_ids)
        if overlap:
            raise ValueError(
                f"Jump {jump} re-enters sections {sorted(overlap)}")
        return ClusterRupture(self.clusters + (jump.to_cluster,),
                              self.jumps + (jump,))

    def reversed(self) -> "ClusterRupture":
        """The same path traversed backward."""
        clusters = tuple(c.reversed() for c in self.clusters[::-1])
        n = len(self.jumps)
        jumps = []
        for k in range(n):
            orig = self.jumps[n - 1 - k]
            jumps.append(Jump(orig.to_section, clusters[k],
                              orig.from_section, clusters[k + 1],
                              orig.distance))
        return ClusterRupture(clusters, tuple(jumps))

    # ── derived properties ──────────────────────────────────────

    @property
    def sections(self) -> List[FaultSection]:
        return [s for c in self.clusters for s in c.sections]

    @property
    def unique_parent_ids(self) -> Tuple[int, ...]:
        seen: List[int] = []
        for c in self.clusters:
            if c.parent_id not in seen:
                seen.append(c.parent_id)
        return tuple(seen)

    @property
    def max_jump_distance(self) -> float:
        return max((j.distance for j in self.jumps), default=0.0)

    @property
    def total_jump_distance(self) -> float:
        return sum(j.distance for j in self.jumps)

    def __len__(self) -> int:
        return sum(len(c) for c in self.clusters)

    def __str__(self) -> str:
        return "".join(str(c) for c in self.clusters)
