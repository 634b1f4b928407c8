"""
Threshold-gated wavefront propagation.

Builds a DistanceField from a seed voxel: every admissible voxel reachable
through admissible neighbors receives its shortest propagation cost from
the seed, everything else stays unreachable.

With unit step cost the wavefront is a FIFO breadth-first expansion. With
weighted step costs a heap-ordered uniform-cost expansion is used so each
voxel still receives its true shortest-path cost.
"""

from collections import deque
from typing import Any, List, Optional, Sequence, Tuple, Union
import heapq
import logging
import time

import numpy as np

from dmap_policies.base import coerce_index3
from dmap_policies.distance_map import DistanceMapPolicy, resolve_policy
from ..core.distance_field import DistanceField, UNREACHABLE
from ..core.errors import InvalidGrid, InvalidSeed, SeedNotAdmissible
from ..core.grid import VolumeGrid, Index3
from .connectivity import neighbor_offsets, step_costs

logger = logging.getLogger(__name__)


def _as_grid(grid: Union[VolumeGrid, np.ndarray]) -> VolumeGrid:
    if isinstance(grid, VolumeGrid):
        return grid
    if grid is None:
        raise InvalidGrid("No volume supplied", operation="build_distance_map")
    return VolumeGrid.from_array(np.asarray(grid))


def validate_seed(grid: VolumeGrid, mask: np.ndarray, seed: Any) -> Index3:
    """
    Check that the seed is a voxel index inside the grid and admissible.

    Raises
    ------
    InvalidSeed
        If the seed is not an integer triple or lies outside the grid
    SeedNotAdmissible
        If the seed voxel fails the threshold test
    """
    idx = coerce_index3(seed)
    if idx is None:
        raise InvalidSeed(
            f"Seed must be three integer voxel indices, got {seed!r}",
            operation="build_distance_map",
        )
    if not grid.contains_index(idx):
        raise InvalidSeed(
            f"Seed lies outside grid of shape {grid.shape}",
            operation="build_distance_map",
            voxel=idx,
        )
    if not mask[idx]:
        raise SeedNotAdmissible(
            f"Seed intensity {grid.values[idx]!r} does not pass the threshold",
            operation="build_distance_map",
            voxel=idx,
        )
    return idx


def build_distance_map(
    grid: Union[VolumeGrid, np.ndarray],
    seed: Sequence[int],
    threshold: float,
    policy: Optional[DistanceMapPolicy] = None,
    connectivity: Optional[int] = None,
    step_cost: Optional[str] = None,
    threshold_above: Optional[bool] = None,
) -> DistanceField:
    """
    Build the distance field from a seed voxel.

    Parameters
    ----------
    grid : VolumeGrid or np.ndarray
        Source volume; plain arrays are wrapped with unit spacing
    seed : sequence of 3 ints
        Seed voxel index; must be in bounds and admissible
    threshold : float
        Admissibility threshold
    policy : DistanceMapPolicy, optional
        Build configuration
    connectivity, step_cost, threshold_above : optional
        Explicit overrides of the matching policy fields

    Returns
    -------
    DistanceField
        Immutable field with the seed at distance 0

    Raises
    ------
    InvalidGrid, InvalidSeed, SeedNotAdmissible
    """
    policy = resolve_policy(
        policy, DistanceMapPolicy,
        connectivity=connectivity,
        step_cost=step_cost,
        threshold_above=threshold_above,
    )
    start_time = time.time()

    grid = _as_grid(grid)
    mask = grid.admissibility_mask(threshold, threshold_above=policy.threshold_above)
    seed_idx = validate_seed(grid, mask, seed)

    offsets = neighbor_offsets(policy.connectivity)
    costs = step_costs(offsets, mode=policy.step_cost, spacing=grid.spacing)

    dist = np.full(grid.shape, UNREACHABLE, dtype=np.float64)
    dist[seed_idx] = 0.0

    if policy.step_cost == "unit":
        visited = _propagate_fifo(dist, mask, seed_idx, offsets)
    else:
        visited = _propagate_weighted(dist, mask, seed_idx, offsets, costs)

    logger.debug(
        f"Distance map from seed {seed_idx}: {visited:,} reachable of "
        f"{int(mask.sum()):,} admissible voxels, connectivity={policy.connectivity}, "
        f"step_cost={policy.step_cost}, {time.time() - start_time:.3f}s"
    )

    return DistanceField(
        values=dist,
        grid=grid,
        mask=mask,
        seed=seed_idx,
        connectivity=policy.connectivity,
        step_cost=policy.step_cost,
        threshold=float(threshold),
        threshold_above=policy.threshold_above,
    )


def _propagate_fifo(
    dist: np.ndarray,
    mask: np.ndarray,
    seed: Index3,
    offsets: Sequence[Tuple[int, int, int]],
) -> int:
    """Breadth-first expansion with unit step cost. Returns reached voxel count."""
    nx, ny, nz = dist.shape
    frontier = deque([seed])
    reached = 1

    while frontier:
        i, j, k = frontier.popleft()
        next_d = dist[i, j, k] + 1.0

        for di, dj, dk in offsets:
            ni, nj, nk = i + di, j + dj, k + dk
            if not (0 <= ni < nx and 0 <= nj < ny and 0 <= nk < nz):
                continue
            if not mask[ni, nj, nk] or dist[ni, nj, nk] != UNREACHABLE:
                continue
            dist[ni, nj, nk] = next_d
            frontier.append((ni, nj, nk))
            reached += 1

    return reached


def _propagate_weighted(
    dist: np.ndarray,
    mask: np.ndarray,
    seed: Index3,
    offsets: Sequence[Tuple[int, int, int]],
    costs: np.ndarray,
) -> int:
    """Uniform-cost expansion with per-offset step costs. Returns reached voxel count."""
    nx, ny, nz = dist.shape
    # (distance, push order, voxel); push order keeps ties deterministic
    open_set: List[Tuple[float, int, Index3]] = [(0.0, 0, seed)]
    counter = 1
    settled = 0

    while open_set:
        d, _, voxel = heapq.heappop(open_set)
        i, j, k = voxel
        if d > dist[i, j, k]:
            continue
        settled += 1

        for (di, dj, dk), cost in zip(offsets, costs):
            ni, nj, nk = i + di, j + dj, k + dk
            if not (0 <= ni < nx and 0 <= nj < ny and 0 <= nk < nz):
                continue
            if not mask[ni, nj, nk]:
                continue
            tentative = d + float(cost)
            if tentative < dist[ni, nj, nk]:
                dist[ni, nj, nk] = tentative
                heapq.heappush(open_set, (tentative, counter, (ni, nj, nk)))
                counter += 1

    return settled


__all__ = [
    "build_distance_map",
    "validate_seed",
]
