"""
Core data model for the distance map engine.
"""

from .errors import (
    DistanceMapError,
    InvalidGrid,
    InvalidSeed,
    SeedNotAdmissible,
    GoalUnreachable,
    PathInconsistent,
    SkeletonBranching,
    ThinningDidNotConverge,
)
from .grid import VolumeGrid, StructuredCoordinates
from .distance_field import DistanceField, UNREACHABLE
from .path import VoxelPath

__all__ = [
    "DistanceMapError",
    "InvalidGrid",
    "InvalidSeed",
    "SeedNotAdmissible",
    "GoalUnreachable",
    "PathInconsistent",
    "SkeletonBranching",
    "ThinningDidNotConverge",
    "VolumeGrid",
    "StructuredCoordinates",
    "DistanceField",
    "UNREACHABLE",
    "VoxelPath",
]
