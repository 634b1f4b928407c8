"""
Path extraction from a built distance field.

Two strategies share the same DistanceField:
- extract_path: steepest descent from goal to seed
- extract_path_by_thinning: topology-preserving thinning, then a skeleton trace
"""

from .steepest_descent import extract_path
from .thinning import extract_path_by_thinning, is_simple_point
from .validation import validate_goal, stop_distance

__all__ = [
    "extract_path",
    "extract_path_by_thinning",
    "is_simple_point",
    "validate_goal",
    "stop_distance",
]
