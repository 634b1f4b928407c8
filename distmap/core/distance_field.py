"""
Distance field produced by a single distance map build.

The field is immutable once built: the values array is flagged
non-writeable and the object exposes no setters. Rebuild whenever the
seed, threshold, connectivity or grid changes.
"""

from typing import Any, Dict, Optional, Sequence, Tuple, TYPE_CHECKING

import numpy as np

from dmap_policies.base import coerce_index3
from .grid import VolumeGrid, Index3

if TYPE_CHECKING:
    from .path import VoxelPath

UNREACHABLE = np.inf


class DistanceField:
    """
    Per-voxel propagation cost from a seed through admissible voxels.

    Unreachable voxels hold ``UNREACHABLE`` (``numpy.inf``).
    """

    def __init__(
        self,
        values: np.ndarray,
        grid: VolumeGrid,
        mask: np.ndarray,
        seed: Index3,
        connectivity: int,
        step_cost: str = "unit",
        threshold: Optional[float] = None,
        threshold_above: bool = True,
    ):
        if values.shape != grid.shape or mask.shape != grid.shape:
            raise ValueError(
                f"Field {values.shape} and mask {mask.shape} must match grid {grid.shape}"
            )
        values.setflags(write=False)
        self._values = values
        self._grid = grid
        self._mask = mask
        self._seed = tuple(int(v) for v in seed)
        self._connectivity = connectivity
        self._step_cost = step_cost
        self._threshold = threshold
        self._threshold_above = threshold_above

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def grid(self) -> VolumeGrid:
        return self._grid

    @property
    def mask(self) -> np.ndarray:
        return self._mask

    @property
    def seed(self) -> Index3:
        return self._seed

    @property
    def connectivity(self) -> int:
        return self._connectivity

    @property
    def step_cost(self) -> str:
        return self._step_cost

    @property
    def threshold(self) -> Optional[float]:
        return self._threshold

    @property
    def threshold_above(self) -> bool:
        return self._threshold_above

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._grid.shape

    def __repr__(self) -> str:
        return (
            f"DistanceField(shape={self.shape}, seed={self._seed}, "
            f"connectivity={self._connectivity}, reachable={self.num_reachable})"
        )

    def _as_index(self, index: Sequence[int]) -> Index3:
        idx = coerce_index3(index)
        if idx is None or not self._grid.contains_index(idx):
            raise IndexError(f"Voxel index {index!r} is outside grid {self.shape}")
        return idx

    def distance(self, index: Sequence[int]) -> float:
        """Distance at a voxel, UNREACHABLE if the seed never reached it."""
        return float(self._values[self._as_index(index)])

    def is_admissible(self, index: Sequence[int]) -> bool:
        idx = coerce_index3(index)
        if idx is None or not self._grid.contains_index(idx):
            return False
        return bool(self._mask[idx])

    def is_reachable(self, index: Sequence[int]) -> bool:
        idx = coerce_index3(index)
        if idx is None or not self._grid.contains_index(idx):
            return False
        return bool(np.isfinite(self._values[idx]))

    def reachable_mask(self) -> np.ndarray:
        return np.isfinite(self._values)

    @property
    def num_reachable(self) -> int:
        return int(np.count_nonzero(np.isfinite(self._values)))

    @property
    def max_distance(self) -> float:
        finite = self._values[np.isfinite(self._values)]
        return float(finite.max()) if finite.size else 0.0

    def to_grid(self, unreachable_value: float = -1.0) -> VolumeGrid:
        """
        Export the field as a new VolumeGrid with the source spacing and origin.

        Unreachable voxels are written as ``unreachable_value`` so the result
        can be stored by tools that do not handle infinities.
        """
        exported = np.where(np.isfinite(self._values), self._values, unreachable_value)
        return VolumeGrid(exported, spacing=self._grid.spacing, origin=self._grid.origin)

    def extract_path(self, goal: Sequence[int], min_quotient_stop: float = 0.0) -> "VoxelPath":
        """Steepest-descent path from goal toward the seed."""
        from ..ops.pathfinding.steepest_descent import extract_path
        return extract_path(self, goal, min_quotient_stop=min_quotient_stop)

    def extract_path_by_thinning(
        self,
        goal: Sequence[int],
        min_quotient_stop: float = 0.0,
        max_iterations: int = 100,
    ) -> "VoxelPath":
        """Skeleton path from goal toward the seed via bounded thinning."""
        from ..ops.pathfinding.thinning import extract_path_by_thinning
        return extract_path_by_thinning(
            self, goal,
            min_quotient_stop=min_quotient_stop,
            max_iterations=max_iterations,
        )

    def summary(self) -> Dict[str, Any]:
        return {
            "shape": list(self.shape),
            "seed": list(self._seed),
            "connectivity": self._connectivity,
            "step_cost": self._step_cost,
            "threshold": self._threshold,
            "threshold_above": self._threshold_above,
            "admissible_voxels": int(np.count_nonzero(self._mask)),
            "reachable_voxels": self.num_reachable,
            "max_distance": self.max_distance,
        }


__all__ = [
    "DistanceField",
    "UNREACHABLE",
]
