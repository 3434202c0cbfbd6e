"""Compare the jumps chosen by two connection strategies.

Jumps are de-duplicated as undirected edges: each connection is stored on
both clusters (forward and reversed), and only the copy with
``from_section_id < to_section_id`` is kept.  Since :class:`Jump` equality is
by section-id pair, set operations then line up jumps across strategies
regardless of the cluster objects they reference.

Usage
-----
>>> comparison = compare_strategies(min_dist_strategy, plausible_strategy)
>>> print(comparison.summary())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Set

from .faults import Jump
from .strategy import ClusterConnectionStrategy

__all__ = [
    "JumpComparison",
    "unique_jumps",
    "compare_strategies",
]


def unique_jumps(strategy: ClusterConnectionStrategy,
                 threads: Optional[int] = None) -> Set[Jump]:
    """Undirected jumps of *strategy*, building connections if needed."""
    strategy.build_connections(threads=threads)
    jumps: Set[Jump] = set()
    for cluster in strategy.clusters:
        for jump in cluster.connections:
            if jump.from_section.section_id < jump.to_section.section_id:
                jumps.add(jump)
    return jumps


@dataclass(frozen=True)
class JumpComparison:
    """Jumps shared by, and unique to, two strategies."""

    name_a: str
    name_b: str
    common: FrozenSet[Jump]
    only_a: FrozenSet[Jump]
    only_b: FrozenSet[Jump]

    @property
    def n_a(self) -> int:
        return len(self.common) + len(self.only_a)

    @property
    def n_b(self) -> int:
        return len(self.common) + len(self.only_b)

    @property
    def identical(self) -> bool:
        return not self.only_a and not self.only_b

    def summary(self) -> str:
        """Multi-line human-readable comparison."""
        lines = [
            "Jump Comparison",
            "=" * 55,
            f"A: {self.name_a} ({self.n_a} jumps)",
            f"B: {self.name_b} ({self.n_b} jumps)",
            "",
            f"Common: {len(self.common)}",
            f"Only A: {len(self.only_a)}",
        ]
        lines.extend(f"  {j} (d={j.distance:.2f})" for j in _ordered(self.only_a))
        lines.append(f"Only B: {len(self.only_b)}")
        lines.extend(f"  {j} (d={j.distance:.2f})" for j in _ordered(self.only_b))
        return "\n".join(lines)


def _ordered(jumps) -> List[Jump]:
    return sorted(jumps, key=lambda j: j.id_pair)


def compare_strategies(
    a: ClusterConnectionStrategy,
    b: ClusterConnectionStrategy,
    threads: Optional[int] = None,
) -> JumpComparison:
    """Build both strategies (if needed) and compare their jumps."""
    jumps_a = unique_jumps(a, threads)
    jumps_b = unique_jumps(b, threads)
    common = jumps_a & jumps_b
    return JumpComparison(
        name_a=a.name,
        name_b=b.name,
        common=frozenset(common),
        only_a=frozenset(jumps_a - common),
        only_b=frozenset(jumps_b - common),
    )
