"""Fault sections, subsection clusters and jumps.

The three immutable-ish building blocks every other module works on:

* :class:`FaultSection` — one discretised fault patch (id, parent, trace)
* :class:`FaultSubsectionCluster` — an ordered run of sections on one parent
  fault, plus the outgoing connections chosen for it
* :class:`Jump` — a directed connection between a section of one cluster and
  a section of another

Reversal is always allocation-based: :meth:`FaultSubsectionCluster.reversed`
and :meth:`Jump.reverse` build new objects and never touch the originals,
which keeps candidate evaluation free of side effects and safe to run from
worker threads.

Usage
-----
>>> sects = [FaultSection(i, parent_id=7, trace=[[i, 0.0], [i + 1, 0.0]])
...          for i in range(3)]
>>> cluster = FaultSubsectionCluster(sects)
>>> cluster.reversed().section_ids
(2, 1, 0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

__all__ = [
    "FaultSection",
    "FaultSubsectionCluster",
    "Jump",
    "build_clusters",
]


# ═══════════════════════════════════════════════════════════════════
# FaultSection
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class FaultSection:
    """One fault subsection.

    Parameters
    ----------
    section_id : int
        Stable identifier, unique across the fault network.
    parent_id : int
        Identifier of the parent fault this section belongs to.
    trace : array-like, shape (n, 2) or (n, 3)
        Discretised trace in Cartesian km.  Copied and made read-only.
    parent_name : str
        Human-readable parent fault name.

    Notes
    -----
    Equality and hashing use ``section_id`` only.
    """

    section_id: int
    parent_id: int
    trace: np.ndarray = field(repr=False, default_factory=lambda: np.zeros((1, 2)))
    parent_name: str = ""

    def __post_init__(self):
        trace = np.array(self.trace, dtype=float)
        if trace.ndim == 1:
            trace = trace.reshape(1, -1)
        if trace.ndim != 2 or trace.shape[0] == 0 or trace.shape[1] not in (2, 3):
            raise ValueError(
                f"Section {self.section_id}: trace must have shape (n, 2) "
                f"or (n, 3), got {trace.shape}")
        trace.setflags(write=False)
        object.__setattr__(self, "trace", trace)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FaultSection):
            return NotImplemented
        return self.section_id == other.section_id

    def __hash__(self) -> int:
        return hash(self.section_id)

    @property
    def name(self) -> str:
        if self.parent_name:
            return f"{self.parent_name}, Subsection {self.section_id}"
        return f"Subsection {self.section_id}"


# ═══════════════════════════════════════════════════════════════════
# FaultSubsectionCluster
# ═══════════════════════════════════════════════════════════════════

class FaultSubsectionCluster:
    """Ordered sequence of sections belonging to one parent fault.

    Parameters
    ----------
    sections : sequence of FaultSection
        Non-empty, all with the same ``parent_id``.
    connections : iterable of Jump, optional
        Initial outgoing connections (copied).
    """

    def __init__(self, sections: Sequence[FaultSection],
                 connections: Iterable["Jump"] = ()):
        sections = tuple(sections)
        if not sections:
            raise ValueError("A cluster needs at least one section")
        parent_id = sections[0].parent_id
        for sect in sections:
            if sect.parent_id != parent_id:
                raise ValueError(
                    f"Section {sect.section_id} has parent {sect.parent_id}, "
                    f"expected {parent_id}")
        self._sections: Tuple[FaultSection, ...] = sections
        self._ids: Tuple[int, ...] = tuple(s.section_id for s in sections)
        self._index: Dict[int, int] = {sid: i for i, sid in enumerate(self._ids)}
        if len(self._index) != len(self._ids):
            raise ValueError(f"Duplicate sections in cluster {self._ids}")
        self._connections: List[Jump] = list(connections)

    # ── read ────────────────────────────────────────────────────

    @property
    def sections(self) -> Tuple[FaultSection, ...]:
        return self._sections

    @property
    def section_ids(self) -> Tuple[int, ...]:
        return self._ids

    @property
    def parent_id(self) -> int:
        return self._sections[0].parent_id

    @property
    def parent_name(self) -> str:
        return self._sections[0].parent_name

    @property
    def start_section(self) -> FaultSection:
        return self._sections[0]

    @property
    def end_section(self) -> FaultSection:
        return self._sections[-1]

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self):
        return iter(self._sections)

    def __getitem__(self, index: int) -> FaultSection:
        return self._sections[index]

    def contains(self, section: FaultSection) -> bool:
        return section.section_id in self._index

    def __contains__(self, section: object) -> bool:
        return isinstance(section, FaultSection) and self.contains(section)

    def index_of(self, section: FaultSection) -> int:
        """Position of *section* in this cluster (``ValueError`` if absent)."""
        try:
            return self._index[section.section_id]
        except KeyError:
            raise ValueError(
                f"Section {section.section_id} is not in cluster "
                f"{self.parent_id}") from None

    # ── derived clusters ────────────────────────────────────────

    def reversed(self) -> "FaultSubsectionCluster":
        """New cluster with the same sections in reverse order."""
        return FaultSubsectionCluster(self._sections[::-1], self._connections)

    # ── connections ─────────────────────────────────────────────

    @property
    def connections(self) -> Tuple["Jump", ...]:
        return tuple(self._connections)

    def add_connection(self, jump: "Jump") -> None:
        """Register an outgoing jump.  It must start in this cluster."""
        if not self.contains(jump.from_section):
            raise ValueError(
                f"Jump {jump} does not start in cluster {self.parent_id}")
        self._connections.append(jump)

    def connections_to(self, cluster: "FaultSubsectionCluster") -> List["Jump"]:
        return [j for j in self._connections
                if j.to_cluster.parent_id == cluster.parent_id]

    # ── identity ────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FaultSubsectionCluster):
            return NotImplemented
        return self._ids == other._ids

    def __hash__(self) -> int:
        return hash(self._ids)

    def __repr__(self) -> str:
        return f"FaultSubsectionCluster({self})"

    def __str__(self) -> str:
        ids = ",".join(str(i) for i in self._ids)
        return f"[{self.parent_id}:{ids}]"


# ═══════════════════════════════════════════════════════════════════
# Jump
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class Jump:
    """Directed connection from one cluster's section to another's.

    ``from_cluster`` / ``to_cluster`` give the orientation context the jump
    was built in (a whole cluster or a strand of one).  Equality and hashing
    use only the ``(from_section, to_section)`` id pair, so the same
    physical connection compares equal regardless of orientation context.
    """

    from_section: FaultSection
    from_cluster: FaultSubsectionCluster
    to_section: FaultSection
    to_cluster: FaultSubsectionCluster
    distance: float

    def __post_init__(self):
        if not self.from_cluster.contains(self.from_section):
            raise ValueError(
                f"From section {self.from_section.section_id} is not in "
                f"{self.from_cluster}")
        if not self.to_cluster.contains(self.to_section):
            raise ValueError(
                f"To section {self.to_section.section_id} is not in "
                f"{self.to_cluster}")

    @property
    def id_pair(self) -> Tuple[int, int]:
        return (self.from_section.section_id, self.to_section.section_id)

    @property
    def variant_key(self) -> Tuple[int, int, Tuple[int, ...], Tuple[int, ...]]:
        """Orientation-aware identity: section pair plus both cluster spans."""
        return self.id_pair + (self.from_cluster.section_ids,
                               self.to_cluster.section_ids)

    def reverse(self) -> "Jump":
        return Jump(self.to_section, self.to_cluster,
                    self.from_section, self.from_cluster, self.distance)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Jump):
            return NotImplemented
        return self.id_pair == other.id_pair

    def __hash__(self) -> int:
        return hash(self.id_pair)

    def __str__(self) -> str:
        return (f"{self.from_cluster.parent_id}[{self.from_section.section_id}]"
                f"=>{self.to_cluster.parent_id}[{self.to_section.section_id}]")


# ═══════════════════════════════════════════════════════════════════
# Cluster construction
# ═══════════════════════════════════════════════════════════════════

def build_clusters(sections: Iterable[FaultSection]) -> List[FaultSubsectionCluster]:
    """Group sections into one cluster per parent fault.

    Parents appear in first-seen order; section order within a parent is
    preserved.
    """
    by_parent: Dict[int, List[FaultSection]] = {}
    for sect in sections:
        by_parent.setdefault(sect.parent_id, []).append(sect)
    return [FaultSubsectionCluster(sects) for sects in by_parent.values()]
