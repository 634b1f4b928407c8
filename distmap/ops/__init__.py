"""
Distance map operations: connectivity, wavefront propagation and path extraction.
"""

from .connectivity import (
    neighbor_offsets,
    complement_connectivity,
    structuring_element,
    step_costs,
)
from .distance_map import build_distance_map, validate_seed
from .pathfinding import extract_path, extract_path_by_thinning

__all__ = [
    "neighbor_offsets",
    "complement_connectivity",
    "structuring_element",
    "step_costs",
    "build_distance_map",
    "validate_seed",
    "extract_path",
    "extract_path_by_thinning",
]
