#!/usr/bin/env python3
"""Compare closest-section connections against plausibility-filtered
connections on a random synthetic fault network.

Usage:
    python scripts/compare_strategies.py [n_faults] [seed]
"""
import sys, os, logging
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import numpy as np

from faultlink import (
    FaultSection,
    SectionDistanceCalculator,
    DistCutoffClosestSectStrategy,
    PlausibleClusterConnectionStrategy,
    JumpDistanceFilter,
    PlausibilityResult,
    Range,
    compare_strategies,
    default_thread_count,
)

MAX_JUMP_DIST = 5.0     # km
SECTION_LENGTH = 5.0    # km
MAX_BEND = 60.0         # degrees


def _direction(section):
    d = section.trace[-1] - section.trace[0]
    return d / np.linalg.norm(d)


class StrikeChangeFilter:
    """Fails jumps whose sections differ in strike by more than ``max_bend``.

    Scalar: the strike change in degrees (0-90, orientation ignored).
    """

    def __init__(self, max_bend=MAX_BEND):
        self.max_bend = max_bend

    @property
    def name(self):
        return f"StrikeChange({self.max_bend:g}deg)"

    def value(self, rupture):
        worst = 0.0
        for jump in rupture.jumps:
            cos = abs(float(np.dot(_direction(jump.from_section),
                                   _direction(jump.to_section))))
            worst = max(worst, float(np.degrees(np.arccos(min(cos, 1.0)))))
        return worst

    def acceptable_range(self):
        return Range.at_most(self.max_bend)

    def apply(self, rupture, verbose=False):
        if self.value(rupture) > self.max_bend:
            return PlausibilityResult.FAIL
        return PlausibilityResult.PASS

    def is_directional(self, verbose=False):
        return False


def random_network(n_faults, seed=0, extent=60.0):
    """Straight faults with random position, strike and length."""
    rng = np.random.default_rng(seed)
    sections = []
    sid = 0
    for parent in range(n_faults):
        start = rng.uniform(0.0, extent, size=2)
        strike = rng.uniform(0.0, np.pi)
        n_sects = int(rng.integers(2, 6))
        step = SECTION_LENGTH * np.array([np.cos(strike), np.sin(strike)])
        for k in range(n_sects):
            trace = np.array([start + k * step, start + (k + 1) * step])
            sections.append(FaultSection(sid, parent_id=parent, trace=trace,
                                         parent_name=f"Fault {parent}"))
            sid += 1
    return sections


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    n_faults = int(sys.argv[1]) if len(sys.argv) > 1 else 25
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else 0

    sections = random_network(n_faults, seed)
    distances = SectionDistanceCalculator(sections)
    threads = default_thread_count()
    print(f"{n_faults} faults, {len(sections)} sections, {threads} threads")
    print("=" * 70)

    closest = DistCutoffClosestSectStrategy(sections, distances, MAX_JUMP_DIST)
    plausible = PlausibleClusterConnectionStrategy(
        sections, distances, MAX_JUMP_DIST,
        StrikeChangeFilter(), JumpDistanceFilter(MAX_JUMP_DIST))

    comparison = compare_strategies(closest, plausible, threads=threads)
    print(comparison.summary())
    print(f"\n{distances!r}")

    # Explain the first disagreement
    if comparison.only_b:
        jump = sorted(comparison.only_b, key=lambda j: j.id_pair)[0]
        clusters = {c.parent_id: c for c in plausible.clusters}
        _, trace = plausible.build_connection_traced(
            clusters[jump.from_cluster.parent_id], clusters[jump.to_cluster.parent_id])
        print()
        print(trace.summary())
        for candidate in trace.candidates:
            print(f"  {candidate}")


if __name__ == "__main__":
    main()
