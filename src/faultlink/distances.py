"""Section-to-section distances with a shared, thread-safe cache.

The connection search asks for the distance of every section pair across
two clusters, and the driver may run many cluster pairs on worker threads.
:class:`SectionDistanceCalculator` memoises each unordered pair once; reads
are lock-free and population happens under a lock with idempotent writes.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Optional, Protocol, Tuple, runtime_checkable

from scipy.spatial.distance import cdist

from .faults import FaultSection

__all__ = [
    "DistanceProvider",
    "SectionDistanceCalculator",
]

logger = logging.getLogger(__name__)


@runtime_checkable
class DistanceProvider(Protocol):
    """Anything that can report the distance between two sections (km)."""

    def distance(self, a: FaultSection, b: FaultSection) -> float:
        ...


class SectionDistanceCalculator:
    """Minimum point-to-point distance between section traces.

    Parameters
    ----------
    sections : iterable of FaultSection, optional
        Known sections.  Only used for :meth:`__repr__` and validation; any
        section can be queried.
    """

    def __init__(self, sections: Optional[Iterable[FaultSection]] = None):
        self._n_sections = len(list(sections)) if sections is not None else 0
        self._cache: Dict[Tuple[int, int], float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(a: FaultSection, b: FaultSection) -> Tuple[int, int]:
        ia, ib = a.section_id, b.section_id
        return (ia, ib) if ia <= ib else (ib, ia)

    def distance(self, a: FaultSection, b: FaultSection) -> float:
        if a.section_id == b.section_id:
            return 0.0
        key = self._key(a, b)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if a.trace.shape[1] != b.trace.shape[1]:
            raise ValueError(
                f"Sections {a.section_id} and {b.section_id} have traces of "
                f"different dimension")
        dist = float(cdist(a.trace, b.trace).min())
        with self._lock:
            # concurrent writers store the same value
            self._cache.setdefault(key, dist)
        return dist

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear(self) -> int:
        """Drop all cached distances.  Returns the number removed."""
        with self._lock:
            n = len(self._cache)
            self._cache.clear()
        logger.debug(f"Cleared {n} cached section distances")
        return n

    def __repr__(self) -> str:
        return (f"SectionDistanceCalculator({self._n_sections} sections, "
                f"{self.cache_size} cached pairs)")
