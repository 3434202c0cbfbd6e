"""Tests for the geometry-only reference filters."""

import pytest

from faultlink.faults import FaultSection, FaultSubsectionCluster, Jump
from faultlink.filters import JumpDistanceFilter, MinSectionsPerParentFilter
from faultlink.plausibility import (
    PlausibilityFilter,
    PlausibilityResult,
    Range,
    ScalarValuePlausibilityFilter,
)
from faultlink.ruptures import ClusterRupture


def _cluster(parent, ids):
    return FaultSubsectionCluster(
        [FaultSection(i, parent_id=parent, trace=[[float(i), 0.0]]) for i in ids])


def _two_cluster(a_ids, b_ids, dist=1.0):
    a, b = _cluster(1, a_ids), _cluster(2, b_ids)
    return ClusterRupture.from_cluster(a).take(Jump(a[-1], a, b[0], b, dist))


# ═══════════════════════════════════════════════════════════════════
# JumpDistanceFilter
# ═══════════════════════════════════════════════════════════════════

class TestJumpDistanceFilter:
    def test_protocols(self):
        filt = JumpDistanceFilter(5.0)
        assert isinstance(filt, PlausibilityFilter)
        assert isinstance(filt, ScalarValuePlausibilityFilter)
        assert not filt.is_directional()

    def test_short_jump_passes(self):
        assert JumpDistanceFilter(5.0).apply(_two_cluster([0], [10], 4.0)) \
            is PlausibilityResult.PASS

    def test_limit_is_inclusive(self):
        assert JumpDistanceFilter(5.0).apply(_two_cluster([0], [10], 5.0)).is_pass

    def test_long_jump_hard_stops(self):
        assert JumpDistanceFilter(5.0).apply(_two_cluster([0], [10], 6.0)) \
            is PlausibilityResult.FAIL_HARD_STOP

    def test_single_cluster_passes(self):
        rup = ClusterRupture.from_cluster(_cluster(1, [0, 1]))
        assert JumpDistanceFilter(0.0).apply(rup).is_pass

    def test_scalar(self):
        filt = JumpDistanceFilter(5.0)
        assert filt.value(_two_cluster([0], [10], 3.5)) == 3.5
        assert filt.acceptable_range() == Range.at_most(5.0)

    def test_name(self):
        assert JumpDistanceFilter(5.0).name == "MaxJumpDist(5km)"
        assert str(JumpDistanceFilter(2.5)) == "MaxJumpDist(2.5km)"

    def test_negative_raises(self):
        with pytest.raises(ValueError):
            JumpDistanceFilter(-1.0)


# ═══════════════════════════════════════════════════════════════════
# MinSectionsPerParentFilter
# ═══════════════════════════════════════════════════════════════════

class TestMinSectionsPerParentFilter:
    def test_long_enough_passes(self):
        filt = MinSectionsPerParentFilter(2)
        assert filt.apply(_two_cluster([0, 1], [10, 11])).is_pass

    def test_short_last_cluster_fails(self):
        filt = MinSectionsPerParentFilter(2)
        assert filt.apply(_two_cluster([0, 1], [10])) is PlausibilityResult.FAIL

    def test_short_inner_cluster_hard_stops(self):
        filt = MinSectionsPerParentFilter(2)
        assert filt.apply(_two_cluster([0], [10, 11])) \
            is PlausibilityResult.FAIL_HARD_STOP

    def test_single_cluster(self):
        rup = ClusterRupture.from_cluster(_cluster(1, [0]))
        assert MinSectionsPerParentFilter(2).apply(rup).is_pass
        assert MinSectionsPerParentFilter(2, allow_if_no_jumps=False).apply(rup) \
            is PlausibilityResult.FAIL

    def test_not_scalar(self):
        filt = MinSectionsPerParentFilter(2)
        assert isinstance(filt, PlausibilityFilter)
        assert not isinstance(filt, ScalarValuePlausibilityFilter)
        assert filt.name == "MinSectsPerParent(2)"

    def test_invalid_minimum_raises(self):
        with pytest.raises(ValueError):
            MinSectionsPerParentFilter(0)
