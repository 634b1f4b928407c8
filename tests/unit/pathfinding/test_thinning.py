"""
Unit tests for thinning-based path extraction.

These tests verify the simple-point test, convergence on tubular regions,
and the three failure modes: branching skeletons, inconsistent skeletons
and passes running out.
"""

import pytest
import numpy as np

from distmap import (
    build_distance_map,
    extract_path_by_thinning,
    GoalUnreachable,
    SkeletonBranching,
    ThinningDidNotConverge,
)
from distmap.ops.pathfinding import is_simple_point


def _tube():
    """12x5x5 volume with a 3x3 square tube along i."""
    values = np.zeros((12, 5, 5))
    values[1:11, 1:4, 1:4] = 1.0
    return values


def _line_with_bump():
    """One-voxel line along i with a single side voxel at i=5."""
    values = np.zeros((10, 3, 1))
    values[:, 1, 0] = 1.0
    values[5, 2, 0] = 1.0
    return values


def _assert_strand(field, path):
    indices = path.index_list()
    assert len(set(indices)) == len(indices)
    for idx in indices:
        assert field.is_admissible(idx)
    for a, b in zip(indices, indices[1:]):
        step = np.abs(np.subtract(a, b))
        assert step.max() == 1
        if field.connectivity == 6:
            assert step.sum() == 1


class TestSimplePoint:
    """Topology test on 3x3x3 neighborhoods."""

    @pytest.mark.parametrize("connectivity", [6, 26])
    def test_isolated_voxel_is_not_simple(self, connectivity):
        block = np.zeros((3, 3, 3), dtype=bool)
        block[1, 1, 1] = True
        assert not is_simple_point(block, connectivity)

    @pytest.mark.parametrize("connectivity", [6, 26])
    def test_interior_voxel_is_not_simple(self, connectivity):
        block = np.ones((3, 3, 3), dtype=bool)
        assert not is_simple_point(block, connectivity)

    @pytest.mark.parametrize("connectivity", [6, 26])
    def test_line_end_is_simple(self, connectivity):
        block = np.zeros((3, 3, 3), dtype=bool)
        block[1, 1, 1] = True
        block[1, 1, 0] = True
        assert is_simple_point(block, connectivity)

    @pytest.mark.parametrize("connectivity", [6, 26])
    def test_line_middle_is_not_simple(self, connectivity):
        block = np.zeros((3, 3, 3), dtype=bool)
        block[1, 1, :] = True
        assert not is_simple_point(block, connectivity)

    def test_does_not_modify_input(self):
        block = np.ones((3, 3, 3), dtype=bool)
        is_simple_point(block, 6)
        assert block.all()


class TestTubeExtraction:
    """A thick tube thins to a single strand."""

    @pytest.mark.parametrize("connectivity", [6, 26])
    def test_converges_to_strand(self, connectivity):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5, connectivity=connectivity)
        path = extract_path_by_thinning(field, (10, 2, 2))

        assert path.converged
        assert path.method == "thinning"
        assert path.goal == (10, 2, 2)
        assert path.end == (1, 2, 2)
        assert len(path) >= 10
        assert path.iterations >= 1
        _assert_strand(field, path)

    def test_metadata(self):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        path = extract_path_by_thinning(field, (10, 2, 2))

        meta = path.metadata
        assert meta["region_voxels"] > meta["skeleton_voxels"]
        assert meta["removed_voxels"] == meta["region_voxels"] - meta["skeleton_voxels"]
        assert meta["goal_distance"] == 9.0
        assert meta["connectivity"] == 6

    def test_stop_quotient(self):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        path = extract_path_by_thinning(field, (10, 2, 2), min_quotient_stop=0.5)

        assert path.d_stop == 4.5
        assert path.distances[-1] <= 4.5
        assert np.all(path.distances[:-1] > 4.5)

    def test_field_method_delegates(self):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        direct = extract_path_by_thinning(field, (10, 2, 2))
        via_field = field.extract_path_by_thinning((10, 2, 2))
        np.testing.assert_array_equal(direct.indices, via_field.indices)

    def test_goal_is_seed(self):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        path = extract_path_by_thinning(field, (1, 2, 2))
        assert path.index_list() == [(1, 2, 2)]


class TestLineExtraction:
    """Regions that are already (nearly) one voxel wide."""

    def test_line_converges_in_one_pass(self):
        values = np.zeros((8, 1, 1))
        values[:, 0, 0] = 1.0
        field = build_distance_map(values, (0, 0, 0), 0.5)
        path = extract_path_by_thinning(field, (7, 0, 0))

        assert path.converged
        assert path.iterations == 1
        assert path.index_list() == [(i, 0, 0) for i in range(7, -1, -1)]

    def test_partial_skeleton_is_returned(self):
        """The bump needs a pass to go and a second to confirm convergence."""
        field = build_distance_map(_line_with_bump(), (0, 1, 0), 0.5)
        path = extract_path_by_thinning(field, (9, 1, 0), max_iterations=1)

        assert not path.converged
        assert path.iterations == 1
        assert path.index_list() == [(i, 1, 0) for i in range(9, -1, -1)]

    def test_bump_converges_with_more_passes(self):
        field = build_distance_map(_line_with_bump(), (0, 1, 0), 0.5)
        path = extract_path_by_thinning(field, (9, 1, 0), max_iterations=5)

        assert path.converged
        assert path.iterations == 2
        assert path.metadata["removed_voxels"] == 1


class TestThinningFailures:
    """Documented failure modes."""

    def test_ring_branches(self):
        """Both ways around the ring are equally long, so nothing can be removed."""
        values = np.zeros((8, 8, 1))
        values[0, :, 0] = 1.0
        values[7, :, 0] = 1.0
        values[:, 0, 0] = 1.0
        values[:, 7, 0] = 1.0
        field = build_distance_map(values, (0, 0, 0), 0.5, connectivity=6)
        assert field.distance((7, 7, 0)) == 14.0

        with pytest.raises(SkeletonBranching) as exc_info:
            extract_path_by_thinning(field, (7, 7, 0))
        assert exc_info.value.voxel == (7, 7, 0)

    def test_block_does_not_converge_in_one_pass(self):
        field = build_distance_map(np.ones((9, 9, 9)), (0, 0, 0), 0.5, connectivity=6)
        with pytest.raises(ThinningDidNotConverge) as exc_info:
            extract_path_by_thinning(field, (8, 8, 8), max_iterations=1)
        assert exc_info.value.iterations == 1
        assert exc_info.value.operation == "extract_path_by_thinning"

    @pytest.mark.parametrize("max_iterations", [0, -3, 2.5, True])
    def test_rejects_bad_iteration_bound(self, max_iterations):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        with pytest.raises(ValueError):
            extract_path_by_thinning(field, (10, 2, 2), max_iterations=max_iterations)

    def test_goal_unreachable(self):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        with pytest.raises(GoalUnreachable):
            extract_path_by_thinning(field, (0, 0, 0))

    def test_field_is_not_modified(self):
        field = build_distance_map(_tube(), (1, 2, 2), 0.5)
        before = field.values.copy()
        extract_path_by_thinning(field, (10, 2, 2))
        np.testing.assert_array_equal(field.values, before)
