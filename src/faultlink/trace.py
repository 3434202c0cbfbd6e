"""ConnectionTrace — audit trail for one cluster-pair connection search.

Captures every candidate considered, the selector that chose among them,
and the jump that was finally emitted, in a frozen dataclass suitable for
debugging and JSON serialisation.

Usage
-----
>>> jump, trace = strategy.build_connection_traced(c1, c2)
>>> trace.n_candidates, trace.n_passing
(6, 2)
>>> trace.summary()
'12 -> 31: 2/6 candidates pass, chose 104->311 (d=1.73) via PassesMinimizeFailed(BestScalar(2))'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .candidates import CandidateJump
from .faults import Jump

__all__ = ["ConnectionTrace"]


@dataclass(frozen=True)
class ConnectionTrace:
    """Full record of one ``build_connection`` call.

    Attributes
    ----------
    from_parent_id, to_parent_id : int
        The cluster pair.
    candidates : tuple of CandidateJump
        Every in-range candidate, in enumeration order.
    selected : CandidateJump or None
        What the selector returned.
    jump : Jump or None
        The emitted connection.
    selector_name : str
    scalar_range : str
        ``str()`` of the acceptable scalar range, or ``""``.
    """

    from_parent_id: int
    to_parent_id: int
    candidates: Tuple[CandidateJump, ...]
    selected: Optional[CandidateJump]
    jump: Optional[Jump]
    selector_name: str = ""
    scalar_range: str = ""

    # ── Derived properties ──────────────────────────────────────

    @property
    def n_candidates(self) -> int:
        return len(self.candidates)

    @property
    def n_passing(self) -> int:
        """Candidates with at least one allowed strand combination."""
        return sum(1 for c in self.candidates if c.passes)

    @property
    def connected(self) -> bool:
        return self.jump is not None

    @property
    def scalar_candidates(self) -> List[CandidateJump]:
        return [c for c in self.candidates if c.best_scalar is not None]

    # ── Serialisation ───────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-safe dict of the trace."""
        return {
            "from_parent_id": self.from_parent_id,
            "to_parent_id": self.to_parent_id,
            "selector": self.selector_name,
            "scalar_range": self.scalar_range,
            "candidates": [_candidate_dict(c) for c in self.candidates],
            "selected": (None if self.selected is None
                         else _candidate_dict(self.selected)),
            "jump": None if self.jump is None else {
                "from_section": self.jump.from_section.section_id,
                "to_section": self.jump.to_section.section_id,
                "distance": round(float(self.jump.distance), 6),
            },
        }

    def summary(self) -> str:
        """One-line human-readable description."""
        head = (f"{self.from_parent_id} -> {self.to_parent_id}: "
                f"{self.n_passing}/{self.n_candidates} candidates pass")
        if self.selected is None:
            return head + ", no connection"
        return (f"{head}, chose {self.selected.from_section.section_id}"
                f"->{self.selected.to_section.section_id} "
                f"(d={self.selected.distance:.2f}) via {self.selector_name}")


def _candidate_dict(c: CandidateJump) -> Dict[str, Any]:
    return {
        "from_section": c.from_section.section_id,
        "from_end": c.from_end,
        "to_section": c.to_section.section_id,
        "to_end": c.to_end,
        "distance": round(float(c.distance), 6),
        "n_allowed": len(c.allowed_jumps),
        "n_failed": len(c.failed_jumps),
        "best_scalar": (None if c.best_scalar is None
                        else round(float(c.best_scalar), 6)),
    }
