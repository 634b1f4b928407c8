"""
One-call distance map and path search.

Builds the distance field from a seed and extracts a path to a goal with
the method selected by the extraction policy. Engine errors are caught and
reported in the result instead of being raised, so interactive callers can
show the message and let the user adjust seed, goal or threshold.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging
import time

import numpy as np

from dmap_policies import (
    DistanceMapPolicy,
    PathExtractionPolicy,
    OperationReport,
    resolve_policy,
)
from ..core.distance_field import DistanceField
from ..core.errors import DistanceMapError
from ..core.grid import VolumeGrid
from ..core.path import VoxelPath
from ..ops.distance_map import build_distance_map
from ..ops.pathfinding import extract_path, extract_path_by_thinning

logger = logging.getLogger(__name__)

COORDINATE_MODES = ("index", "world")


@dataclass
class PathSearchResult:
    """Result of a find_path operation."""
    success: bool
    path: Optional[VoxelPath] = None
    distance_field: Optional[DistanceField] = None
    time_elapsed: float = 0.0
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def path_pts(self) -> Optional[np.ndarray]:
        return self.path.points if self.path is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "path": self.path.to_dict() if self.path is not None else None,
            "time_elapsed": self.time_elapsed,
            "warnings": self.warnings,
            "errors": self.errors,
            "metadata": self.metadata,
        }

    def to_report(self) -> OperationReport:
        return OperationReport(
            operation="find_path",
            success=self.success,
            requested_policy=self.metadata.get("requested_policy", {}),
            effective_policy=self.metadata.get("effective_policy", {}),
            warnings=list(self.warnings),
            errors=list(self.errors),
            metadata={
                k: v for k, v in self.metadata.items()
                if k not in ("requested_policy", "effective_policy")
            },
        )


def _to_index(grid: VolumeGrid, point: Any, coordinates: str) -> Any:
    if coordinates == "index":
        return point
    if coordinates == "world":
        return grid.world_to_index(point)
    raise ValueError(f"coordinates must be one of {COORDINATE_MODES}, got {coordinates!r}")


def _as_grid(grid: Union[VolumeGrid, np.ndarray]) -> VolumeGrid:
    return grid if isinstance(grid, VolumeGrid) else VolumeGrid.from_array(np.asarray(grid))


def create_distance_map(
    grid: Union[VolumeGrid, np.ndarray],
    seed: Sequence[float],
    threshold: float,
    policy: Optional[DistanceMapPolicy] = None,
    coordinates: str = "index",
) -> Tuple[Optional[DistanceField], OperationReport]:
    """
    Build a distance field and report on it.

    Parameters
    ----------
    grid : VolumeGrid or np.ndarray
        Source volume
    seed : sequence of 3 numbers
        Seed as voxel index or world point (see ``coordinates``)
    threshold : float
        Admissibility threshold
    policy : DistanceMapPolicy, optional
        Build configuration
    coordinates : str
        "index" or "world"

    Returns
    -------
    (DistanceField or None, OperationReport)
        The field is None when the build failed; the report holds the error.
    """
    requested = policy if policy is not None else DistanceMapPolicy()
    report = OperationReport(
        operation="create_distance_map",
        requested_policy=requested.to_dict(),
        effective_policy=requested.to_dict(),
    )

    try:
        grid = _as_grid(grid)
        seed_idx = _to_index(grid, seed, coordinates)
        dmap = build_distance_map(grid, seed_idx, threshold, policy=requested)
    except DistanceMapError as e:
        logger.error(f"Distance map build failed: {e}")
        report.add_error(str(e))
        return None, report

    report.metadata.update(dmap.summary())
    return dmap, report


def find_path(
    grid: Union[VolumeGrid, np.ndarray],
    seed: Sequence[float],
    goal: Sequence[float],
    threshold: float,
    distance_policy: Optional[DistanceMapPolicy] = None,
    extraction_policy: Optional[PathExtractionPolicy] = None,
    coordinates: str = "index",
) -> PathSearchResult:
    """
    Build a distance field from seed and extract a path from goal.

    Parameters
    ----------
    grid : VolumeGrid or np.ndarray
        Source volume
    seed, goal : sequence of 3 numbers
        Voxel indices or world points (see ``coordinates``)
    threshold : float
        Admissibility threshold
    distance_policy : DistanceMapPolicy, optional
        Build configuration
    extraction_policy : PathExtractionPolicy, optional
        Extraction method, stop fraction and thinning iteration bound
    coordinates : str
        "index" or "world"

    Returns
    -------
    PathSearchResult
        Result containing the path (goal first) and metadata
    """
    start_time = time.time()
    distance_policy = resolve_policy(distance_policy, DistanceMapPolicy)
    extraction_policy = resolve_policy(extraction_policy, PathExtractionPolicy)

    metadata: Dict[str, Any] = {
        "requested_policy": {
            "distance_map": distance_policy.to_dict(),
            "extraction": extraction_policy.to_dict(),
        },
        "effective_policy": {
            "distance_map": distance_policy.to_dict(),
            "extraction": extraction_policy.to_dict(),
        },
    }

    try:
        grid = _as_grid(grid)
        seed_idx = _to_index(grid, seed, coordinates)
        goal_idx = _to_index(grid, goal, coordinates)

        dmap = build_distance_map(grid, seed_idx, threshold, policy=distance_policy)

        if extraction_policy.method == "thinning":
            path = extract_path_by_thinning(
                dmap, goal_idx,
                min_quotient_stop=extraction_policy.min_quotient_stop,
                max_iterations=extraction_policy.max_iterations,
            )
        else:
            path = extract_path(
                dmap, goal_idx,
                min_quotient_stop=extraction_policy.min_quotient_stop,
            )
    except DistanceMapError as e:
        logger.error(f"Path search failed: {e}")
        metadata["failed_operation"] = e.operation
        if e.voxel is not None:
            metadata["failed_voxel"] = list(e.voxel)
        return PathSearchResult(
            success=False,
            time_elapsed=time.time() - start_time,
            errors=[str(e)],
            metadata=metadata,
        )

    warnings = []
    if not path.converged:
        warnings.append(
            f"Thinning did not converge in {path.iterations} passes; "
            "path traced on a partial skeleton"
        )

    metadata.update({
        "seed": list(dmap.seed),
        "goal": list(path.goal),
        "path_voxels": len(path),
        "reachable_voxels": dmap.num_reachable,
    })

    return PathSearchResult(
        success=True,
        path=path,
        distance_field=dmap,
        time_elapsed=time.time() - start_time,
        warnings=warnings,
        metadata=metadata,
    )


__all__ = [
    "find_path",
    "create_distance_map",
    "PathSearchResult",
]
