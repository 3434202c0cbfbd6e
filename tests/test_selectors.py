"""Tests for jump selectors (faultlink.selectors).

Covers:
1. min_distance / MinDistanceSelector — nearest, first wins ties
2. BestScalarSelector — equivalence band, scalar ranking, fallbacks
3. AnyPassMinDistSelector / PassesMinimizeFailedSelector
4. Default chain
"""

import logging

import pytest

from faultlink.candidates import CandidateJump
from faultlink.faults import FaultSection, FaultSubsectionCluster, Jump
from faultlink.plausibility import Range
from faultlink.selectors import (
    JUMP_SELECTOR_DEFAULT,
    AnyPassMinDistSelector,
    BestScalarSelector,
    JumpSelector,
    MinDistanceSelector,
    PassesMinimizeFailedSelector,
    min_distance,
    sort_by_distance,
)

_A = FaultSubsectionCluster(
    [FaultSection(i, parent_id=1, trace=[[float(i), 0.0]]) for i in range(20)])
_B = FaultSubsectionCluster(
    [FaultSection(100 + i, parent_id=2, trace=[[float(i), 5.0]]) for i in range(20)])


def _cand(idx, dist, allowed=1, failed=0, scalar=None):
    jump = Jump(_A[idx], _A, _B[idx], _B, dist)
    return CandidateJump(
        from_cluster=_A, from_section=_A[idx], from_end=False,
        to_cluster=_B, to_section=_B[idx], to_end=False,
        distance=dist,
        allowed_jumps=(jump,) * allowed,
        failed_jumps=(jump,) * failed,
        best_scalar=scalar,
    )


# ═══════════════════════════════════════════════════════════════════
# 1. Min distance
# ═══════════════════════════════════════════════════════════════════

class TestMinDistance:
    def test_nearest(self):
        far, near = _cand(0, 3.0), _cand(1, 1.0)
        assert min_distance([far, near]) is near
        assert MinDistanceSelector().select([far, near]) is near

    def test_first_wins_tie(self):
        first, second = _cand(0, 1.0), _cand(1, 1.0)
        assert min_distance([first, second]) is first

    def test_single_precision_tie(self):
        first, second = _cand(0, 1.0 + 1e-9), _cand(1, 1.0)
        assert min_distance([first, second]) is first

    def test_empty(self):
        assert min_distance([]) is None
        assert min_distance(None) is None

    def test_sort_is_stable(self):
        a, b, c = _cand(0, 2.0), _cand(1, 1.0), _cand(2, 2.0)
        assert sort_by_distance([a, b, c]) == [b, a, c]


# ═══════════════════════════════════════════════════════════════════
# 2. BestScalarSelector
# ═══════════════════════════════════════════════════════════════════

class TestBestScalar:
    def test_best_scalar_within_band(self):
        near = _cand(0, 1.0, scalar=1.0)
        mid = _cand(1, 2.5, scalar=5.0)
        outside = _cand(2, 3.5, scalar=10.0)
        sel = BestScalarSelector(2.0)
        assert sel.select([outside, mid, near], Range.at_least(0.0)) is mid
        assert sel.select([outside, mid, near], None) is mid

    def test_band_edge_is_inclusive(self):
        near = _cand(0, 1.0, scalar=1.0)
        edge = _cand(1, 3.0, scalar=2.0)
        assert BestScalarSelector(2.0).select([near, edge], Range.at_least(0.0)) is edge

    def test_upper_bounded_range_prefers_smaller(self):
        a, b = _cand(0, 1.0, scalar=4.0), _cand(1, 1.5, scalar=2.0)
        assert BestScalarSelector(2.0).select([a, b], Range.at_most(5.0)) is b

    def test_scalar_tie_goes_to_nearest(self):
        near, far = _cand(0, 1.0, scalar=5.0), _cand(1, 2.0, scalar=5.0)
        assert BestScalarSelector(2.0).select([far, near], Range.at_least(0.0)) is near

    def test_single_precision_scalar_tie_goes_to_nearest(self):
        near = _cand(0, 1.0, scalar=5.0)
        far = _cand(1, 2.0, scalar=5.0 + 1e-9)
        r = Range.at_least(0.0)
        assert BestScalarSelector(2.0).select([far, near], r) is near
        assert BestScalarSelector(2.0).select([near, far], r) is near
        assert JUMP_SELECTOR_DEFAULT.select([far, near], r) is near

    def test_no_scalars_falls_back_to_nearest(self):
        far, near = _cand(0, 3.0), _cand(1, 1.0)
        assert BestScalarSelector(2.0).select([far, near]) is near

    def test_non_passing_candidates_ignored(self):
        failing = _cand(0, 1.0, allowed=0, failed=1, scalar=100.0)
        passing = _cand(1, 2.0, scalar=1.0)
        assert BestScalarSelector(2.0).select(
            [failing, passing], Range.at_least(0.0)) is passing

    def test_zero_band_considers_everything(self):
        near, far = _cand(0, 1.0, scalar=1.0), _cand(1, 50.0, scalar=9.0)
        assert BestScalarSelector(0.0).select([near, far], Range.at_least(0.0)) is far

    def test_input_not_reordered(self):
        cands = [_cand(0, 3.0, scalar=1.0), _cand(1, 1.0, scalar=2.0)]
        before = list(cands)
        BestScalarSelector(2.0).select(cands, Range.at_least(0.0))
        assert cands == before

    def test_empty(self):
        assert BestScalarSelector(2.0).select([]) is None

    def test_negative_band_raises(self):
        with pytest.raises(ValueError):
            BestScalarSelector(-1.0)

    def test_name(self):
        assert BestScalarSelector(2.0).name == "BestScalar(2)"
        assert BestScalarSelector(0.5).name == "BestScalar(0.5)"


# ═══════════════════════════════════════════════════════════════════
# 3. Pass-aware selectors
# ═══════════════════════════════════════════════════════════════════

class TestAnyPassMinDist:
    def test_nearest_passing(self):
        failing = _cand(0, 1.0, allowed=0, failed=1)
        passing = _cand(1, 2.0)
        assert AnyPassMinDistSelector().select([failing, passing]) is passing

    def test_fallback_when_none_pass(self):
        far = _cand(0, 3.0, allowed=0, failed=1)
        near = _cand(1, 1.0, allowed=0, failed=2)
        assert AnyPassMinDistSelector().select([far, near]) is near

    def test_passing_matches_candidate_passes(self):
        failing = _cand(0, 1.0, allowed=0, failed=2)
        passing = _cand(1, 2.0, allowed=1, failed=1)
        assert (failing.passes, passing.passes) == (False, True)
        assert AnyPassMinDistSelector().select([failing, passing]) is passing
        assert PassesMinimizeFailedSelector().select([failing, passing]) is passing

    def test_name(self):
        assert AnyPassMinDistSelector().name == "AnyPassMinDist(MinDistance)"


class TestPassesMinimizeFailed:
    def test_fewest_failed_then_fewest_total(self):
        some_failed = _cand(0, 1.0, allowed=1, failed=1)
        clean_simple = _cand(1, 2.0, allowed=1, failed=0)
        clean_split = _cand(2, 3.0, allowed=2, failed=0)
        sel = PassesMinimizeFailedSelector()
        assert sel.select([some_failed, clean_simple, clean_split]) is clean_simple

    def test_ties_go_to_fallback(self):
        near = _cand(0, 1.0, scalar=2.0)
        far = _cand(1, 3.0, scalar=5.0)
        sel = PassesMinimizeFailedSelector(BestScalarSelector(2.0))
        assert sel.select([near, far], Range.at_least(0.0)) is far
        assert PassesMinimizeFailedSelector().select([far, near]) is near

    def test_no_pass_uses_fallback_on_all(self):
        far = _cand(0, 3.0, allowed=0, failed=1)
        near = _cand(1, 1.0, allowed=0, failed=4)
        assert PassesMinimizeFailedSelector().select([far, near]) is near

    def test_passing_beats_nearer_failing(self):
        failing = _cand(0, 0.5, allowed=0, failed=1)
        passing = _cand(1, 4.0, allowed=1, failed=3)
        assert PassesMinimizeFailedSelector().select([failing, passing]) is passing

    def test_empty(self):
        assert PassesMinimizeFailedSelector().select([]) is None

    def test_verbose_logs(self, caplog):
        with caplog.at_level(logging.INFO, logger="faultlink.selectors"):
            PassesMinimizeFailedSelector().select(
                [_cand(0, 1.0), _cand(1, 2.0)], verbose=True)
        assert "First real option" in caplog.text
        assert "Ended with 2 options" in caplog.text


# ═══════════════════════════════════════════════════════════════════
# 4. Default chain
# ═══════════════════════════════════════════════════════════════════

class TestDefaultSelector:
    def test_name(self):
        assert JUMP_SELECTOR_DEFAULT.name == "PassesMinimizeFailed(BestScalar(2))"

    def test_all_selectors_satisfy_protocol(self):
        for sel in (MinDistanceSelector(), BestScalarSelector(1.0),
                    AnyPassMinDistSelector(), PassesMinimizeFailedSelector(),
                    JUMP_SELECTOR_DEFAULT):
            assert isinstance(sel, JumpSelector)

    def test_end_to_end_beats_split_with_better_scalar(self):
        end_to_end = _cand(0, 2.0, allowed=1, scalar=0.1)
        split = _cand(1, 1.0, allowed=3, scalar=0.9)
        assert JUMP_SELECTOR_DEFAULT.select(
            [split, end_to_end], Range.at_least(0.0)) is end_to_end
