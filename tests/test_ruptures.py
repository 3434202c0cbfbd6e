"""Tests for ClusterRupture (faultlink.ruptures)."""

import pytest

from faultlink.faults import FaultSection, FaultSubsectionCluster, Jump
from faultlink.ruptures import ClusterRupture


def _cluster(parent, ids):
    return FaultSubsectionCluster(
        [FaultSection(i, parent_id=parent, trace=[[float(i), 0.0]]) for i in ids])


@pytest.fixture
def three_cluster_rupture():
    a = _cluster(1, [0, 1, 2])
    b = _cluster(2, [10, 11])
    c = _cluster(3, [20, 21, 22])
    rup = ClusterRupture.from_cluster(a)
    rup = rup.take(Jump(a[2], a, b[0], b, 1.5))
    rup = rup.take(Jump(b[1], b, c[0], c, 2.5))
    return rup


class TestTake:
    def test_take_returns_new_rupture(self):
        a, b = _cluster(1, [0, 1]), _cluster(2, [10])
        base = ClusterRupture.from_cluster(a)
        grown = base.take(Jump(a[1], a, b[0], b, 1.0))
        assert len(base.clusters) == 1
        assert len(grown.clusters) == 2
        assert grown.jumps[0].distance == 1.0

    def test_jump_must_start_in_last_cluster(self):
        a, b, c = _cluster(1, [0, 1]), _cluster(2, [10]), _cluster(3, [20])
        rup = ClusterRupture.from_cluster(a).take(Jump(a[1], a, b[0], b, 1.0))
        with pytest.raises(ValueError, match="last cluster"):
            rup.take(Jump(a[0], a, c[0], c, 1.0))

    def test_overlap_raises(self):
        a = _cluster(1, [0, 1, 2])
        tail = FaultSubsectionCluster(a.sections[1:])
        head = FaultSubsectionCluster(a.sections[:2])
        with pytest.raises(ValueError, match="re-enters"):
            ClusterRupture.from_cluster(head).take(Jump(a[1], head, a[1], tail, 0.0))

    def test_inconsistent_construction_raises(self):
        with pytest.raises(ValueError):
            ClusterRupture(())
        with pytest.raises(ValueError, match="jumps"):
            ClusterRupture((_cluster(1, [0]), _cluster(2, [10])))


class TestReversed:
    def test_cluster_order_and_orientation(self, three_cluster_rupture):
        rev = three_cluster_rupture.reversed()
        assert [c.section_ids for c in rev.clusters] == [
            (22, 21, 20), (11, 10), (2, 1, 0)]

    def test_jumps_are_reversed_and_consistent(self, three_cluster_rupture):
        rev = three_cluster_rupture.reversed()
        assert [j.id_pair for j in rev.jumps] == [(20, 11), (10, 2)]
        assert [j.distance for j in rev.jumps] == [2.5, 1.5]
        for k, jump in enumerate(rev.jumps):
            assert jump.from_cluster is rev.clusters[k]
            assert jump.to_cluster is rev.clusters[k + 1]

    def test_double_reverse_restores_path(self, three_cluster_rupture):
        twice = three_cluster_rupture.reversed().reversed()
        assert [s.section_id for s in twice.sections] == [
            s.section_id for s in three_cluster_rupture.sections]

    def test_original_untouched(self, three_cluster_rupture):
        before = str(three_cluster_rupture)
        three_cluster_rupture.reversed()
        assert str(three_cluster_rupture) == before


class TestProperties:
    def test_sections_and_len(self, three_cluster_rupture):
        assert [s.section_id for s in three_cluster_rupture.sections] == [
            0, 1, 2, 10, 11, 20, 21, 22]
        assert len(three_cluster_rupture) == 8

    def test_jump_distances(self, three_cluster_rupture):
        assert three_cluster_rupture.max_jump_distance == 2.5
        assert three_cluster_rupture.total_jump_distance == 4.0

    def test_single_cluster_has_no_jump_distance(self):
        assert ClusterRupture.from_cluster(_cluster(1, [0])).max_jump_distance == 0.0

    def test_unique_parents(self, three_cluster_rupture):
        assert three_cluster_rupture.unique_parent_ids == (1, 2, 3)

    def test_str(self, three_cluster_rupture):
        assert str(three_cluster_rupture) == "[1:0,1,2][2:10,11][3:20,21,22]"
