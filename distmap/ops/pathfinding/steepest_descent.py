"""
Steepest-descent path extraction.

Walks from the goal down the distance field, always stepping to the
neighbor with the strictly smallest distance, until the stop distance is
reached. Ties go to the neighbor with the lowest connectivity offset index.
"""

from typing import Sequence
import logging

from ...core.distance_field import DistanceField
from ...core.errors import PathInconsistent
from ...core.path import VoxelPath
from ..connectivity import neighbor_offsets
from .validation import validate_goal, stop_distance

logger = logging.getLogger(__name__)

OPERATION = "extract_path"


def extract_path(
    field: DistanceField,
    goal: Sequence[int],
    min_quotient_stop: float = 0.0,
) -> VoxelPath:
    """
    Extract a path from goal toward the seed by steepest descent.

    Parameters
    ----------
    field : DistanceField
        A built distance field
    goal : sequence of 3 ints
        Goal voxel; must be admissible and reachable
    min_quotient_stop : float
        Fraction in [0, 1] of the goal distance at which to stop

    Returns
    -------
    VoxelPath
        Voxels from goal to the first voxel with distance <= d_stop

    Raises
    ------
    GoalUnreachable
        If the goal is outside the grid, inadmissible or unreachable
    PathInconsistent
        If a voxel above d_stop has no lower neighbor
    """
    goal_idx = validate_goal(field, goal, OPERATION)
    d_stop = stop_distance(field, goal_idx, min_quotient_stop)

    dist = field.values
    mask = field.mask
    nx, ny, nz = field.shape
    offsets = neighbor_offsets(field.connectivity)

    path = [goal_idx]
    current = goal_idx
    current_d = dist[current]

    while current_d > d_stop:
        i, j, k = current
        best = None
        best_d = current_d

        for di, dj, dk in offsets:
            ni, nj, nk = i + di, j + dj, k + dk
            if not (0 <= ni < nx and 0 <= nj < ny and 0 <= nk < nz):
                continue
            if not mask[ni, nj, nk]:
                continue
            d = dist[ni, nj, nk]
            # strict comparison keeps the earliest offset on ties
            if d < best_d:
                best = (ni, nj, nk)
                best_d = d

        if best is None:
            raise PathInconsistent(
                f"No neighbor below distance {current_d:g} "
                f"(stop distance {d_stop:g})",
                operation=OPERATION,
                voxel=current,
            )

        path.append(best)
        current = best
        current_d = best_d

    logger.debug(
        f"Steepest descent from {goal_idx}: {len(path)} voxels, "
        f"stopped at {current} (d={current_d:g}, d_stop={d_stop:g})"
    )

    return VoxelPath.from_indices(
        path,
        field_values=dist,
        grid=field.grid,
        method="steepest_descent",
        d_stop=d_stop,
        metadata={
            "goal_distance": float(dist[goal_idx]),
            "min_quotient_stop": float(min_quotient_stop),
            "connectivity": field.connectivity,
        },
    )


__all__ = ["extract_path"]
