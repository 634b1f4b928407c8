"""
Voxel connectivity model.

Neighbor offsets for face (6) and full (26) connectivity, the per-offset
step costs used by wavefront propagation, and matching scipy structuring
elements. Offset order is fixed; path extraction breaks ties by it.
"""

from typing import Sequence, Tuple

import numpy as np
from scipy import ndimage

Offset = Tuple[int, int, int]

# 6-connected (face neighbors only)
FACE_OFFSETS: Tuple[Offset, ...] = (
    (-1, 0, 0), (1, 0, 0),
    (0, -1, 0), (0, 1, 0),
    (0, 0, -1), (0, 0, 1),
)

# 26-connected (all neighbors including diagonals)
FULL_OFFSETS: Tuple[Offset, ...] = tuple(
    (di, dj, dk)
    for di in (-1, 0, 1)
    for dj in (-1, 0, 1)
    for dk in (-1, 0, 1)
    if not (di == 0 and dj == 0 and dk == 0)
)


def _check_connectivity(connectivity: int) -> None:
    if connectivity not in (6, 26):
        raise ValueError(f"Connectivity must be 6 or 26, got {connectivity!r}")


def neighbor_offsets(connectivity: int) -> Tuple[Offset, ...]:
    """Return the ordered neighbor offsets for 6 or 26 connectivity."""
    _check_connectivity(connectivity)
    return FACE_OFFSETS if connectivity == 6 else FULL_OFFSETS


def complement_connectivity(connectivity: int) -> int:
    """Background connectivity paired with a foreground connectivity (6 <-> 26)."""
    _check_connectivity(connectivity)
    return 26 if connectivity == 6 else 6


def structuring_element(connectivity: int) -> np.ndarray:
    """3x3x3 boolean structuring element for scipy.ndimage labelling."""
    _check_connectivity(connectivity)
    return ndimage.generate_binary_structure(3, 1 if connectivity == 6 else 3)


def step_costs(
    offsets: Sequence[Offset],
    mode: str = "unit",
    spacing: Sequence[float] = (1.0, 1.0, 1.0),
) -> np.ndarray:
    """
    Cost of one propagation step along each offset.

    Parameters
    ----------
    offsets : sequence of offsets
        Neighbor offsets, usually from neighbor_offsets()
    mode : str
        "unit" (every step costs 1), "euclidean" (offset length in index
        space) or "physical" (offset length scaled by spacing)
    spacing : sequence of 3 floats
        Grid spacing, used by "physical" only

    Returns
    -------
    np.ndarray
        float64 array with one cost per offset
    """
    offs = np.asarray(offsets, dtype=float).reshape(-1, 3)
    if mode == "unit":
        return np.ones(len(offs), dtype=float)
    if mode == "euclidean":
        return np.sqrt(np.sum(offs ** 2, axis=1))
    if mode == "physical":
        return np.sqrt(np.sum((offs * np.asarray(spacing, dtype=float)) ** 2, axis=1))
    raise ValueError(f"Unknown step cost mode {mode!r}")


__all__ = [
    "Offset",
    "FACE_OFFSETS",
    "FULL_OFFSETS",
    "neighbor_offsets",
    "complement_connectivity",
    "structuring_element",
    "step_costs",
]
