"""
Test no numpy in JSON reports.

Ensures no numpy scalars or arrays leak into the dictionaries produced by
paths, results and reports, so they serialize with the plain json module.
"""

import json

import numpy as np

from dmap_policies import PathExtractionPolicy
from distmap import find_path, create_distance_map


def _find_numpy(obj, where="root"):
    """Return the location of the first numpy object in a nested structure, or None."""
    if isinstance(obj, (np.generic, np.ndarray)):
        return where
    if isinstance(obj, dict):
        for key, value in obj.items():
            found = _find_numpy(value, f"{where}.{key}")
            if found:
                return found
    if isinstance(obj, (list, tuple)):
        for n, value in enumerate(obj):
            found = _find_numpy(value, f"{where}[{n}]")
            if found:
                return found
    return None


class TestNoNumpyInJSONReports:
    """Serialized outputs contain JSON primitives only."""

    def test_steepest_descent_result(self):
        result = find_path(np.ones((6, 6, 2)), (0, 0, 0), (5, 5, 1), 0.5)
        payload = result.to_dict()

        assert _find_numpy(payload) is None
        json.dumps(payload)

    def test_thinning_result(self):
        values = np.zeros((8, 1, 1))
        values[:, 0, 0] = 1.0
        result = find_path(
            values, (0, 0, 0), (7, 0, 0), 0.5,
            extraction_policy=PathExtractionPolicy(method="thinning"),
        )

        assert result.success
        assert _find_numpy(result.to_dict()) is None

    def test_failed_result(self):
        result = find_path(np.ones((4, 4, 4)), (9, 9, 9), (1, 1, 1), 0.5)

        assert not result.success
        assert _find_numpy(result.to_dict()) is None
        assert _find_numpy(result.to_report().to_dict()) is None

    def test_distance_map_report(self):
        _, report = create_distance_map(np.ones((4, 4, 4)), np.array([1, 2, 3]), 0.5)

        assert report.success
        assert _find_numpy(report.to_dict()) is None
        json.loads(report.to_json())
