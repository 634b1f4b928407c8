"""
High-level API for distance map path search.
"""

from .find_path import find_path, create_distance_map, PathSearchResult

__all__ = [
    "find_path",
    "create_distance_map",
    "PathSearchResult",
]
