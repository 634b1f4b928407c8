"""
distmap - volumetric distance map and path extraction.

Builds a threshold-gated distance field from a seed voxel in a 3-D scalar
volume and recovers a voxel path from a goal back to the seed, either by
steepest descent or by topology-preserving thinning.

Main Entry Points:
    - build_distance_map(): wavefront propagation from a seed
    - extract_path(): steepest-descent path on a built field
    - extract_path_by_thinning(): skeleton path on a built field
    - find_path(): one-call build + extract with a report-style result

Example:
    >>> import numpy as np
    >>> from distmap import VolumeGrid, build_distance_map
    >>>
    >>> grid = VolumeGrid(np.ones((10, 10, 1)))
    >>> dmap = build_distance_map(grid, seed=(0, 0, 0), threshold=0.5)
    >>> dmap.distance((9, 9, 0))
    18.0
    >>> path = dmap.extract_path((9, 9, 0))
    >>> path.end
    (0, 0, 0)
"""

from .core import (
    VolumeGrid,
    StructuredCoordinates,
    DistanceField,
    UNREACHABLE,
    VoxelPath,
    DistanceMapError,
    InvalidGrid,
    InvalidSeed,
    SeedNotAdmissible,
    GoalUnreachable,
    PathInconsistent,
    SkeletonBranching,
    ThinningDidNotConverge,
)
from .ops import (
    build_distance_map,
    extract_path,
    extract_path_by_thinning,
    neighbor_offsets,
)
from .api import find_path, create_distance_map, PathSearchResult

__version__ = "0.1.0"

__all__ = [
    # Data model
    "VolumeGrid",
    "StructuredCoordinates",
    "DistanceField",
    "UNREACHABLE",
    "VoxelPath",
    # Errors
    "DistanceMapError",
    "InvalidGrid",
    "InvalidSeed",
    "SeedNotAdmissible",
    "GoalUnreachable",
    "PathInconsistent",
    "SkeletonBranching",
    "ThinningDidNotConverge",
    # Operations
    "build_distance_map",
    "extract_path",
    "extract_path_by_thinning",
    "neighbor_offsets",
    # High-level API
    "find_path",
    "create_distance_map",
    "PathSearchResult",
]
