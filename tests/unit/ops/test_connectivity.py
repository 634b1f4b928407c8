"""
Unit tests for the voxel connectivity model.
"""

import math

import pytest
import numpy as np

from distmap.ops.connectivity import (
    FACE_OFFSETS,
    FULL_OFFSETS,
    neighbor_offsets,
    complement_connectivity,
    structuring_element,
    step_costs,
)


class TestNeighborOffsets:
    """Offset tables for 6 and 26 connectivity."""

    def test_face_offsets(self):
        offsets = neighbor_offsets(6)
        assert len(offsets) == 6
        assert len(set(offsets)) == 6
        assert all(sum(abs(c) for c in o) == 1 for o in offsets)

    def test_full_offsets(self):
        offsets = neighbor_offsets(26)
        assert len(offsets) == 26
        assert len(set(offsets)) == 26
        assert (0, 0, 0) not in offsets
        assert offsets[0] == (-1, -1, -1)
        assert offsets[-1] == (1, 1, 1)

    def test_face_offsets_are_subset_of_full(self):
        assert set(FACE_OFFSETS) <= set(FULL_OFFSETS)

    def test_order_is_fixed(self):
        """Tie-breaking depends on offset order, so it must be stable."""
        assert neighbor_offsets(6) == FACE_OFFSETS
        assert neighbor_offsets(6)[0] == (-1, 0, 0)
        assert neighbor_offsets(26) is neighbor_offsets(26)

    @pytest.mark.parametrize("connectivity", [0, 4, 18, "6"])
    def test_rejects_other_connectivities(self, connectivity):
        with pytest.raises(ValueError):
            neighbor_offsets(connectivity)


class TestComplementAndStructure:
    """Background pairing and scipy structuring elements."""

    def test_complement(self):
        assert complement_connectivity(6) == 26
        assert complement_connectivity(26) == 6

    def test_structuring_elements(self):
        assert structuring_element(6).sum() == 7
        assert structuring_element(26).sum() == 27
        assert structuring_element(6).shape == (3, 3, 3)


class TestStepCosts:
    """Per-offset propagation costs."""

    def test_unit(self):
        costs = step_costs(neighbor_offsets(26), mode="unit")
        assert costs.shape == (26,)
        assert np.all(costs == 1.0)

    def test_euclidean(self):
        costs = step_costs(neighbor_offsets(26), mode="euclidean")
        rounded = np.round(costs, 6)
        assert np.count_nonzero(rounded == 1.0) == 6
        assert np.count_nonzero(rounded == round(math.sqrt(2), 6)) == 12
        assert np.count_nonzero(rounded == round(math.sqrt(3), 6)) == 8

    def test_physical_uses_spacing(self):
        costs = step_costs(FACE_OFFSETS, mode="physical", spacing=(2.0, 1.0, 0.5))
        np.testing.assert_allclose(costs, [2.0, 2.0, 1.0, 1.0, 0.5, 0.5])

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            step_costs(FACE_OFFSETS, mode="manhattan")
