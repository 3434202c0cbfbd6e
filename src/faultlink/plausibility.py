"""Plausibility filter interfaces and scalar ranking.

Filters judge whether a :class:`~faultlink.ruptures.ClusterRupture` is a
realistic path.  Their physics is supplied by the caller; this module only
fixes the contract:

* :class:`PlausibilityResult` — three-valued outcome with AND / OR
* :class:`PlausibilityFilter` — ``apply`` + ``is_directional``
* :class:`ScalarValuePlausibilityFilter` — additionally yields a value and
  an acceptable :class:`Range` used to rank connection points
* :func:`is_value_better` — the "betterness" order relative to a range
* :func:`find_scalar_filter` — pick the tie-break filter from a filter list

Range checks and betterness comparisons are made on single-precision
values (:func:`f32`), so near-identical doubles compare as ties on every
platform.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from .ruptures import ClusterRupture

__all__ = [
    "PlausibilityResult",
    "Range",
    "PlausibilityFilter",
    "ScalarValuePlausibilityFilter",
    "f32",
    "dist_from_range",
    "is_value_better",
    "find_scalar_filter",
]


def f32(value: float) -> float:
    """Truncate *value* to single precision (returned as a Python float)."""
    return float(np.float32(value))


# ═══════════════════════════════════════════════════════════════════
# PlausibilityResult
# ═══════════════════════════════════════════════════════════════════

class PlausibilityResult(Enum):
    """Outcome of one filter evaluation.

    ``FAIL`` means the rupture fails but could pass if extended further;
    ``FAIL_HARD_STOP`` means no extension can ever pass.
    """

    PASS = "pass"
    FAIL = "fail"
    FAIL_HARD_STOP = "fail_hard_stop"

    @property
    def is_pass(self) -> bool:
        return self is PlausibilityResult.PASS

    @property
    def can_continue(self) -> bool:
        return self is not PlausibilityResult.FAIL_HARD_STOP

    def logical_and(self, other: "PlausibilityResult") -> "PlausibilityResult":
        if not (self.can_continue and other.can_continue):
            return PlausibilityResult.FAIL_HARD_STOP
        if not (self.is_pass and other.is_pass):
            return PlausibilityResult.FAIL
        return PlausibilityResult.PASS

    def logical_or(self, other: "PlausibilityResult") -> "PlausibilityResult":
        if self.is_pass or other.is_pass:
            return PlausibilityResult.PASS
        if self.can_continue or other.can_continue:
            return PlausibilityResult.FAIL
        return PlausibilityResult.FAIL_HARD_STOP


# ═══════════════════════════════════════════════════════════════════
# Range
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Range:
    """Interval with optional, independently open/closed bounds."""

    lower: Optional[float] = None
    upper: Optional[float] = None
    lower_closed: bool = True
    upper_closed: bool = True

    def __post_init__(self):
        if (self.lower is not None and self.upper is not None
                and self.lower > self.upper):
            raise ValueError(f"Empty range: {self.lower} > {self.upper}")

    @classmethod
    def at_least(cls, lower: float) -> "Range":
        return cls(lower=lower)

    @classmethod
    def greater_than(cls, lower: float) -> "Range":
        return cls(lower=lower, lower_closed=False)

    @classmethod
    def at_most(cls, upper: float) -> "Range":
        return cls(upper=upper)

    @classmethod
    def less_than(cls, upper: float) -> "Range":
        return cls(upper=upper, upper_closed=False)

    @classmethod
    def closed(cls, lower: float, upper: float) -> "Range":
        return cls(lower=lower, upper=upper)

    @property
    def has_lower_bound(self) -> bool:
        return self.lower is not None

    @property
    def has_upper_bound(self) -> bool:
        return self.upper is not None

    @property
    def center(self) -> Optional[float]:
        if self.lower is None or self.upper is None:
            return None
        return 0.5 * (self.lower + self.upper)

    def contains(self, value: float) -> bool:
        v = f32(value)
        if self.lower is not None:
            lo = f32(self.lower)
            if v < lo or (v == lo and not self.lower_closed):
                return False
        if self.upper is not None:
            hi = f32(self.upper)
            if v > hi or (v == hi and not self.upper_closed):
                return False
        return True

    def __contains__(self, value: float) -> bool:
        return self.contains(value)

    def __str__(self) -> str:
        lo = "(-inf" if self.lower is None else (
            ("[" if self.lower_closed else "(") + f"{self.lower:g}")
        hi = "+inf)" if self.upper is None else (
            f"{self.upper:g}" + ("]" if self.upper_closed else ")"))
        return f"{lo}..{hi}"


def dist_from_range(value: float, acceptable: Range) -> float:
    """0 when *value* lies in *acceptable*, else distance to the violated bound."""
    if acceptable.contains(value):
        return 0.0
    if acceptable.lower is not None and f32(value) <= f32(acceptable.lower):
        return acceptable.lower - value
    if acceptable.upper is not None:
        return value - acceptable.upper
    return math.inf


def is_value_better(candidate: float, current: float,
                    acceptable: Optional[Range]) -> bool:
    """Return True if *candidate* ranks strictly better than *current*.

    * both bounds: smaller distance from the range wins; inside the range
      (or equally far outside), closer to the centre wins
    * lower bound only: larger wins
    * upper bound only: smaller wins
    * no range / unbounded: larger wins
    """
    cand, cur = f32(candidate), f32(current)
    if cand == cur:
        return False
    if acceptable is None:
        return cand > cur
    if acceptable.has_lower_bound and acceptable.has_upper_bound:
        d_cand = f32(dist_from_range(candidate, acceptable))
        d_cur = f32(dist_from_range(current, acceptable))
        if d_cand != d_cur:
            return d_cand < d_cur
        center = acceptable.center
        return f32(abs(candidate - center)) < f32(abs(current - center))
    if acceptable.has_upper_bound:
        return cand < cur
    return cand > cur


# ═══════════════════════════════════════════════════════════════════
# Filter protocols
# ═══════════════════════════════════════════════════════════════════

@runtime_checkable
class PlausibilityFilter(Protocol):
    """Judges whether a rupture path is plausible."""

    @property
    def name(self) -> str:
        ...

    def apply(self, rupture: "ClusterRupture",
              verbose: bool = False) -> PlausibilityResult:
        """Evaluate *rupture*."""
        ...

    def is_directional(self, verbose: bool = False) -> bool:
        """True if the result can depend on the traversal direction."""
        ...


@runtime_checkable
class ScalarValuePlausibilityFilter(PlausibilityFilter, Protocol):
    """A filter that also yields a continuous plausibility value."""

    def value(self, rupture: "ClusterRupture") -> Optional[float]:
        ...

    def acceptable_range(self) -> Optional[Range]:
        ...


def find_scalar_filter(
    filters: Sequence[PlausibilityFilter],
) -> Tuple[Optional[ScalarValuePlausibilityFilter], Optional[Range]]:
    """First filter (in list order) with a non-null acceptable range."""
    for filt in filters:
        if isinstance(filt, ScalarValuePlausibilityFilter):
            acceptable = filt.acceptable_range()
            if acceptable is not None:
                return filt, acceptable
    return None, None
