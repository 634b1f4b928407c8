"""
Exceptions raised by the distance map engine.

Every error records the operation that failed and, where one is involved,
the offending voxel index so callers can log or display it.
"""

from typing import Optional, Tuple


class DistanceMapError(Exception):
    """Base exception for distance map build and path extraction failures."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        voxel: Optional[Tuple[int, ...]] = None,
    ):
        self.operation = operation
        self.voxel = tuple(voxel) if voxel is not None else None
        self.detail = message

        prefix = f"{operation}: " if operation else ""
        suffix = f" (voxel {self.voxel})" if self.voxel is not None else ""
        super().__init__(f"{prefix}{message}{suffix}")


class InvalidGrid(DistanceMapError):
    """Raised when a volume is not 3-D, has an empty dimension, or bad spacing."""
    pass


class InvalidSeed(DistanceMapError):
    """Raised when the seed is malformed or lies outside the grid."""
    pass


class SeedNotAdmissible(InvalidSeed):
    """Raised when the seed voxel does not pass the threshold test."""
    pass


class GoalUnreachable(DistanceMapError):
    """Raised when the goal is outside the grid, inadmissible, or not reached."""
    pass


class PathInconsistent(DistanceMapError):
    """
    Raised when steepest descent finds no lower neighbor before the stop distance.

    A correctly built field never produces this; it signals a corrupted or
    foreign distance array.
    """
    pass


class SkeletonBranching(DistanceMapError):
    """Raised when the thinned skeleton forks while being traced."""
    pass


class ThinningDidNotConverge(DistanceMapError):
    """
    Raised when thinning ran out of passes and the partial skeleton
    cannot be traced as a single strand down to the stop distance.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        voxel: Optional[Tuple[int, ...]] = None,
        iterations: int = 0,
    ):
        self.iterations = iterations
        super().__init__(message, operation=operation, voxel=voxel)


__all__ = [
    "DistanceMapError",
    "InvalidGrid",
    "InvalidSeed",
    "SeedNotAdmissible",
    "GoalUnreachable",
    "PathInconsistent",
    "SkeletonBranching",
    "ThinningDidNotConverge",
]
