"""
Shared argument checks for the path extractors.
"""

from typing import Any

import numpy as np

from dmap_policies.base import coerce_index3
from ...core.distance_field import DistanceField
from ...core.errors import GoalUnreachable
from ...core.grid import Index3


def validate_goal(field: DistanceField, goal: Any, operation: str) -> Index3:
    """
    Check that the goal is an in-bounds, admissible and reachable voxel.

    Raises
    ------
    GoalUnreachable
        For any of the three failures, with the goal index attached
    """
    idx = coerce_index3(goal)
    if idx is None:
        raise GoalUnreachable(
            f"Goal must be three integer voxel indices, got {goal!r}",
            operation=operation,
        )
    if not field.grid.contains_index(idx):
        raise GoalUnreachable(
            f"Goal lies outside grid of shape {field.shape}",
            operation=operation,
            voxel=idx,
        )
    if not field.mask[idx]:
        raise GoalUnreachable(
            "Goal voxel does not pass the threshold",
            operation=operation,
            voxel=idx,
        )
    if not np.isfinite(field.values[idx]):
        raise GoalUnreachable(
            f"Goal is not connected to seed {field.seed} "
            f"under {field.connectivity}-connectivity",
            operation=operation,
            voxel=idx,
        )
    return idx


def stop_distance(field: DistanceField, goal: Index3, min_quotient_stop: float) -> float:
    """
    Distance at which extraction stops: a fraction of the goal's own distance.

    0 walks all the way to the seed; values closer to 1 stop earlier.
    """
    if isinstance(min_quotient_stop, bool) or not 0.0 <= float(min_quotient_stop) <= 1.0:
        raise ValueError(f"min_quotient_stop must be in [0, 1], got {min_quotient_stop!r}")
    return float(min_quotient_stop) * float(field.values[goal])


__all__ = ["validate_goal", "stop_distance"]
