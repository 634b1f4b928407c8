"""
Thinning-based path extraction.

The admissible voxels no farther from the seed than the goal are eroded by
topology-preserving thinning until a one-voxel-wide strand joining goal and
seed remains; that strand is then traced from the goal.

Algorithm:
1. Working region = admissible voxels with distance <= distance(goal)
2. Each pass runs six directional sub-passes (-i, +i, -j, +j, -k, +k).
   A sub-pass visits, in index order, the region voxels whose face
   neighbor in that direction is outside the region and deletes those that
   are simple points (deletion changes neither the foreground nor the
   background component count in the 3x3x3 neighborhood). Seed and goal
   are never deleted.
3. Stop after a pass that deletes nothing, or after max_iterations passes
4. Walk the remaining voxels from the goal; a fork is a skeleton defect,
   a dead end on a converged skeleton is an internal inconsistency
"""

from typing import List, Optional, Sequence, Tuple
import logging
import time

import networkx as nx
import numpy as np
from scipy import ndimage

from ...core.distance_field import DistanceField
from ...core.errors import PathInconsistent, SkeletonBranching, ThinningDidNotConverge
from ...core.grid import Index3
from ...core.path import VoxelPath
from ..connectivity import (
    FACE_OFFSETS,
    neighbor_offsets,
    complement_connectivity,
    structuring_element,
)
from .validation import validate_goal, stop_distance

logger = logging.getLogger(__name__)

OPERATION = "extract_path_by_thinning"

# 18-neighborhood of the 3x3x3 block: everything but the 8 corners
_N18 = np.ones((3, 3, 3), dtype=bool)
for _ci in (0, 2):
    for _cj in (0, 2):
        for _ck in (0, 2):
            _N18[_ci, _cj, _ck] = False

_CENTER = (1, 1, 1)
_FACE_POSITIONS = tuple((1 + di, 1 + dj, 1 + dk) for di, dj, dk in FACE_OFFSETS)


def _count_components(
    block: np.ndarray,
    connectivity: int,
    face_adjacent_only: bool,
) -> int:
    """
    Count connected components of ``block`` (center already cleared).

    With face_adjacent_only, only components touching one of the six face
    neighbors of the center are counted.
    """
    labels, n = ndimage.label(block, structure=structuring_element(connectivity))
    if not face_adjacent_only:
        return int(n)
    touching = {int(labels[p]) for p in _FACE_POSITIONS}
    touching.discard(0)
    return len(touching)


def is_simple_point(neighborhood: np.ndarray, connectivity: int) -> bool:
    """
    Check whether the center of a 3x3x3 boolean block is a simple point.

    ``connectivity`` is the foreground connectivity (6 or 26); the
    background uses the complementary one. Deleting a simple point leaves
    the number of foreground and background components unchanged.
    """
    fg = np.array(neighborhood, dtype=bool)
    fg[_CENTER] = False
    bg = ~fg
    bg[_CENTER] = False

    if connectivity == 26:
        # 26-components of the foreground in N26*, 6-components of the
        # background in N18* that touch the center through a face
        n_fg = _count_components(fg, 26, face_adjacent_only=False)
        if n_fg != 1:
            return False
        n_bg = _count_components(bg & _N18, 6, face_adjacent_only=True)
        return n_bg == 1

    n_fg = _count_components(fg & _N18, 6, face_adjacent_only=True)
    if n_fg != 1:
        return False
    n_bg = _count_components(bg, complement_connectivity(connectivity), face_adjacent_only=False)
    return n_bg == 1


def _thinning_pass(
    region: np.ndarray,
    anchors: Tuple[Index3, ...],
    connectivity: int,
) -> int:
    """
    Run one pass (six directional sub-passes) over a padded region in place.

    Returns the number of deleted voxels.
    """
    removed = 0
    for di, dj, dk in FACE_OFFSETS:
        # shifted[p] == region[p + d]; padding keeps the wrap-around empty
        shifted = np.roll(region, shift=(-di, -dj, -dk), axis=(0, 1, 2))
        candidates = np.argwhere(region & ~shifted)

        for i, j, k in candidates:
            voxel = (int(i), int(j), int(k))
            if voxel in anchors or not region[voxel]:
                continue
            block = region[i - 1:i + 2, j - 1:j + 2, k - 1:k + 2]
            if is_simple_point(block, connectivity):
                region[voxel] = False
                removed += 1
    return removed


def _skeleton_graph(skeleton: np.ndarray, connectivity: int) -> nx.Graph:
    """Adjacency graph of skeleton voxels (unpadded indices)."""
    graph = nx.Graph()
    voxels = [tuple(int(v) for v in row) for row in np.argwhere(skeleton)]
    graph.add_nodes_from(voxels)

    offsets = neighbor_offsets(connectivity)
    for i, j, k in voxels:
        for di, dj, dk in offsets:
            other = (i + di, j + dj, k + dk)
            if other in graph:
                graph.add_edge((i, j, k), other)
    return graph


def _trace(
    graph: nx.Graph,
    goal: Index3,
    seed: Index3,
    dist: np.ndarray,
    d_stop: float,
) -> Tuple[List[Index3], Optional[Index3], str]:
    """
    Greedy walk from goal until a voxel at or below d_stop.

    Returns (trace, stuck_voxel, reason). On success stuck_voxel is None;
    otherwise reason is "branch" (more than one unvisited neighbor) or
    "dead_end" (none left before d_stop).
    """
    trace = [goal]
    visited = {goal}
    current = goal

    while dist[current] > d_stop:
        unvisited = [n for n in graph.adj[current] if n not in visited]
        if seed in unvisited:
            nxt = seed
        elif len(unvisited) == 1:
            nxt = unvisited[0]
        elif not unvisited:
            return trace, current, "dead_end"
        else:
            return trace, current, "branch"
        trace.append(nxt)
        visited.add(nxt)
        current = nxt

    return trace, None, ""


def extract_path_by_thinning(
    field: DistanceField,
    goal: Sequence[int],
    min_quotient_stop: float = 0.0,
    max_iterations: int = 100,
) -> VoxelPath:
    """
    Extract a one-voxel-wide path from goal toward the seed by thinning.

    Parameters
    ----------
    field : DistanceField
        A built distance field
    goal : sequence of 3 ints
        Goal voxel; must be admissible and reachable
    min_quotient_stop : float
        Fraction in [0, 1] of the goal distance at which to stop
    max_iterations : int
        Maximum number of thinning passes (> 0)

    Returns
    -------
    VoxelPath
        Skeleton voxels from goal to the first voxel with distance <= d_stop

    Raises
    ------
    GoalUnreachable
        If the goal is outside the grid, inadmissible or unreachable
    SkeletonBranching
        If the converged skeleton forks along the traced strand
    ThinningDidNotConverge
        If passes ran out and the partial skeleton is not a single strand
    """
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer)):
        raise ValueError(f"max_iterations must be an int, got {max_iterations!r}")
    if max_iterations <= 0:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")

    goal_idx = validate_goal(field, goal, OPERATION)
    d_stop = stop_distance(field, goal_idx, min_quotient_stop)
    start_time = time.time()

    dist = field.values
    seed = field.seed
    goal_d = float(dist[goal_idx])

    working = field.mask & (dist <= goal_d)
    region = np.pad(working, 1, mode="constant", constant_values=False)
    region_voxels = int(working.sum())

    anchors = (
        (seed[0] + 1, seed[1] + 1, seed[2] + 1),
        (goal_idx[0] + 1, goal_idx[1] + 1, goal_idx[2] + 1),
    )

    converged = False
    passes = 0
    total_removed = 0
    while passes < max_iterations:
        removed = _thinning_pass(region, anchors, field.connectivity)
        passes += 1
        total_removed += removed
        logger.debug(f"Thinning pass {passes}: removed {removed:,} voxels")
        if removed == 0:
            converged = True
            break

    skeleton = region[1:-1, 1:-1, 1:-1]
    graph = _skeleton_graph(skeleton, field.connectivity)
    trace, stuck, reason = _trace(graph, goal_idx, seed, dist, d_stop)

    if stuck is not None:
        if not converged:
            raise ThinningDidNotConverge(
                f"Skeleton still not a single strand after {passes} passes "
                f"({int(skeleton.sum()):,} voxels left)",
                operation=OPERATION,
                voxel=stuck,
                iterations=passes,
            )
        if reason == "branch":
            raise SkeletonBranching(
                f"Skeleton forks after {len(trace)} traced voxels",
                operation=OPERATION,
                voxel=stuck,
            )
        raise PathInconsistent(
            f"Skeleton strand ends after {len(trace)} traced voxels "
            f"above stop distance {d_stop:g}",
            operation=OPERATION,
            voxel=stuck,
        )

    if not converged:
        logger.warning(
            f"Thinning did not converge in {passes} passes; "
            f"returning traced strand of {len(trace)} voxels"
        )

    branch_points = sum(1 for _, degree in graph.degree() if degree > 2)
    logger.info(
        f"Thinning path from {goal_idx}: {len(trace)} voxels, {passes} passes, "
        f"{total_removed:,}/{region_voxels:,} voxels removed, "
        f"{time.time() - start_time:.3f}s"
    )

    return VoxelPath.from_indices(
        trace,
        field_values=dist,
        grid=field.grid,
        method="thinning",
        d_stop=d_stop,
        iterations=passes,
        converged=converged,
        metadata={
            "goal_distance": goal_d,
            "min_quotient_stop": float(min_quotient_stop),
            "max_iterations": int(max_iterations),
            "connectivity": field.connectivity,
            "region_voxels": region_voxels,
            "removed_voxels": total_removed,
            "skeleton_voxels": int(graph.number_of_nodes()),
            "branch_points": branch_points,
        },
    )


__all__ = [
    "extract_path_by_thinning",
    "is_simple_point",
]
