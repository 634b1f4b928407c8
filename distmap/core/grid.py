"""
Volume grid model.

A VolumeGrid is a read-only view of a 3-D scalar image: point-centred
voxel values on a regular lattice with per-axis spacing and an origin.
Voxel (i, j, k) sits at world position origin + (i, j, k) * spacing.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple
import logging

import numpy as np

from dmap_policies.base import coerce_vec3, coerce_index3
from .errors import InvalidGrid

logger = logging.getLogger(__name__)

Index3 = Tuple[int, int, int]


@dataclass(frozen=True)
class StructuredCoordinates:
    """Cell lookup result for a world point."""
    ijk: Index3
    pcoords: Tuple[float, float, float]
    intensity: float

    def to_dict(self):
        return {
            "ijk": list(self.ijk),
            "pcoords": list(self.pcoords),
            "intensity": self.intensity,
        }


class VolumeGrid:
    """
    Read-only 3-D scalar volume.

    The values array is copied on construction and flagged non-writeable,
    so a grid can be shared between independent builds.
    """

    def __init__(
        self,
        values: np.ndarray,
        spacing: Sequence[float] = (1.0, 1.0, 1.0),
        origin: Sequence[float] = (0.0, 0.0, 0.0),
    ):
        """
        Parameters
        ----------
        values : np.ndarray
            Scalar intensities with shape (nx, ny, nz)
        spacing : sequence of 3 floats
            Voxel spacing along each axis; all must be positive
        origin : sequence of 3 floats
            World position of voxel (0, 0, 0)
        """
        arr = np.array(values, copy=True)
        if arr.ndim != 3:
            raise InvalidGrid(
                f"Volume must be 3-D, got array with shape {arr.shape}",
                operation="VolumeGrid",
            )
        if any(n <= 0 for n in arr.shape):
            raise InvalidGrid(
                f"Every grid dimension must be positive, got {arr.shape}",
                operation="VolumeGrid",
            )
        if not np.issubdtype(arr.dtype, np.number) and arr.dtype != bool:
            raise InvalidGrid(
                f"Volume values must be numeric, got dtype {arr.dtype}",
                operation="VolumeGrid",
            )

        spacing_arr = np.asarray(spacing, dtype=float)
        origin_arr = np.asarray(origin, dtype=float)
        if spacing_arr.shape != (3,) or not np.all(np.isfinite(spacing_arr)) or np.any(spacing_arr <= 0):
            raise InvalidGrid(
                f"Spacing must be three positive numbers, got {spacing}",
                operation="VolumeGrid",
            )
        if origin_arr.shape != (3,) or not np.all(np.isfinite(origin_arr)):
            raise InvalidGrid(
                f"Origin must be three finite numbers, got {origin}",
                operation="VolumeGrid",
            )

        arr.setflags(write=False)
        spacing_arr.setflags(write=False)
        origin_arr.setflags(write=False)

        self._values = arr
        self._spacing = spacing_arr
        self._origin = origin_arr

    @classmethod
    def from_array(
        cls,
        values: np.ndarray,
        spacing: Optional[Sequence[float]] = None,
        origin: Optional[Sequence[float]] = None,
    ) -> "VolumeGrid":
        """Wrap a plain array, defaulting to unit spacing at the origin."""
        return cls(
            values,
            spacing=spacing if spacing is not None else (1.0, 1.0, 1.0),
            origin=origin if origin is not None else (0.0, 0.0, 0.0),
        )

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def shape(self) -> Index3:
        return tuple(int(n) for n in self._values.shape)

    @property
    def spacing(self) -> np.ndarray:
        return self._spacing

    @property
    def origin(self) -> np.ndarray:
        return self._origin

    @property
    def num_voxels(self) -> int:
        return int(self._values.size)

    def __repr__(self) -> str:
        return (
            f"VolumeGrid(shape={self.shape}, spacing={tuple(self._spacing.tolist())}, "
            f"origin={tuple(self._origin.tolist())})"
        )

    def contains_index(self, index: Sequence[int]) -> bool:
        """Check if voxel indices are within bounds."""
        return len(index) == 3 and all(0 <= v < s for v, s in zip(index, self._values.shape))

    def index_to_world(self, index: Sequence[int]) -> np.ndarray:
        """Convert voxel indices to world position."""
        return self._origin + np.asarray(index, dtype=float) * self._spacing

    def indices_to_world(self, indices: np.ndarray) -> np.ndarray:
        """Vectorized index_to_world for an (N, 3) array."""
        indices = np.asarray(indices, dtype=float).reshape(-1, 3)
        return self._origin + indices * self._spacing

    def world_to_index(self, point: Any) -> Index3:
        """
        Convert a world position to the nearest voxel index.

        The result is not clipped; callers validate bounds so an out-of-volume
        point is reported rather than silently moved to the border.
        """
        pos = np.asarray(coerce_vec3(point, default=(np.nan, np.nan, np.nan)))
        if not np.all(np.isfinite(pos)):
            raise ValueError(f"Cannot interpret {point!r} as a 3-D point")
        index = np.rint((pos - self._origin) / self._spacing).astype(int)
        return (int(index[0]), int(index[1]), int(index[2]))

    def value_at(self, index: Sequence[int]) -> float:
        """Intensity at a voxel index."""
        idx = coerce_index3(index)
        if idx is None or not self.contains_index(idx):
            raise IndexError(f"Voxel index {index!r} is outside grid {self.shape}")
        return float(self._values[idx])

    def compute_structured_coordinates(
        self,
        point: Any,
        tol: float = 1e-9,
    ) -> Optional[StructuredCoordinates]:
        """
        Locate the cell containing a world point.

        Returns the lower-corner voxel index of the cell, the parametric
        coordinates of the point inside it (each in [0, 1]) and the
        intensity at that voxel, or None if the point lies outside the
        volume bounds.
        """
        pos = np.asarray(coerce_vec3(point, default=(np.nan, np.nan, np.nan)))
        if not np.all(np.isfinite(pos)):
            return None

        rel = (pos - self._origin) / self._spacing
        ijk = []
        pcoords = []
        for axis in range(3):
            n = self._values.shape[axis]
            r = rel[axis]
            if r < -tol or r > (n - 1) + tol:
                return None
            r = min(max(r, 0.0), float(n - 1))
            if n == 1:
                ijk.append(0)
                pcoords.append(0.0)
                continue
            cell = int(np.floor(r))
            # A point on the upper face belongs to the last cell.
            if cell >= n - 1:
                cell = n - 2
            ijk.append(cell)
            pcoords.append(float(r - cell))

        ijk_t = (ijk[0], ijk[1], ijk[2])
        return StructuredCoordinates(
            ijk=ijk_t,
            pcoords=(pcoords[0], pcoords[1], pcoords[2]),
            intensity=float(self._values[ijk_t]),
        )

    def admissibility_mask(self, threshold: float, threshold_above: bool = True) -> np.ndarray:
        """
        Boolean mask of voxels that pass the threshold test.

        With threshold_above a voxel is admissible when value >= threshold,
        otherwise when value <= threshold. NaN voxels are never admissible.
        The returned array is read-only.
        """
        if threshold_above:
            mask = self._values >= threshold
        else:
            mask = self._values <= threshold
        mask = np.ascontiguousarray(mask, dtype=bool)
        mask.setflags(write=False)
        logger.debug(
            f"Admissibility mask: {int(mask.sum()):,}/{mask.size:,} voxels "
            f"({'>=' if threshold_above else '<='} {threshold})"
        )
        return mask


__all__ = [
    "VolumeGrid",
    "StructuredCoordinates",
    "Index3",
]
