"""
Extracted voxel path.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from .grid import VolumeGrid, Index3


@dataclass
class VoxelPath:
    """
    Ordered path from the goal voxel to the stop voxel.

    ``indices`` and ``points`` are fresh arrays, never views into the
    distance field they were read from.
    """
    indices: np.ndarray
    points: np.ndarray
    distances: np.ndarray
    method: str
    d_stop: float = 0.0
    iterations: int = 0
    converged: bool = True
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_indices(
        cls,
        indices: Sequence[Index3],
        field_values: np.ndarray,
        grid: VolumeGrid,
        method: str,
        **kwargs: Any,
    ) -> "VoxelPath":
        idx = np.array(indices, dtype=int).reshape(-1, 3)
        distances = np.array([field_values[tuple(v)] for v in idx], dtype=float)
        return cls(
            indices=idx,
            points=grid.indices_to_world(idx),
            distances=distances,
            method=method,
            **kwargs,
        )

    def __len__(self) -> int:
        return int(self.indices.shape[0])

    @property
    def goal(self) -> Index3:
        return tuple(int(v) for v in self.indices[0])

    @property
    def end(self) -> Index3:
        return tuple(int(v) for v in self.indices[-1])

    def index_list(self) -> List[Tuple[int, int, int]]:
        return [tuple(int(v) for v in row) for row in self.indices]

    @property
    def length(self) -> float:
        """World-space polyline length."""
        if len(self) < 2:
            return 0.0
        return float(np.sum(np.linalg.norm(np.diff(self.points, axis=0), axis=1)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "indices": self.indices.tolist(),
            "points": self.points.tolist(),
            "distances": self.distances.tolist(),
            "d_stop": float(self.d_stop),
            "iterations": int(self.iterations),
            "converged": bool(self.converged),
            "length": self.length,
            "metadata": self.metadata,
        }


__all__ = ["VoxelPath"]
