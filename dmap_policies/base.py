"""
Base utilities for distance map policies.

This module provides shared helpers and the OperationReport dataclass
used by the distance map build and path extraction operations.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Tuple
import json


def coerce_vec3(
    value: Any,
    default: Tuple[float, float, float] = (0.0, 0.0, 0.0)
) -> Tuple[float, float, float]:
    """
    Coerce a value to a 3D vector tuple.

    Accepts:
    - tuple/list/array of 3 numbers
    - dict with x, y, z keys

    Parameters
    ----------
    value : Any
        Value to coerce
    default : tuple
        Default value if coercion fails

    Returns
    -------
    Tuple[float, float, float]
        Coerced 3D vector
    """
    if value is None:
        return default

    # Handle dict
    if isinstance(value, dict):
        if 'x' in value and 'y' in value and 'z' in value:
            try:
                return (float(value['x']), float(value['y']), float(value['z']))
            except (TypeError, ValueError):
                return default
        return default

    # Handle tuple/list/array
    try:
        items = list(value)
    except TypeError:
        return default
    if len(items) != 3:
        return default
    try:
        return (float(items[0]), float(items[1]), float(items[2]))
    except (TypeError, ValueError):
        return default


def coerce_index3(value: Any) -> Optional[Tuple[int, int, int]]:
    """
    Coerce a value to an integer voxel index triple.

    Returns None when the value does not hold exactly three integral
    numbers. Floats are accepted only if they are whole numbers.
    """
    if value is None or isinstance(value, (str, bytes, dict)):
        return None
    try:
        items = list(value)
    except TypeError:
        return None
    if len(items) != 3:
        return None

    result = []
    for item in items:
        try:
            as_float = float(item)
        except (TypeError, ValueError):
            return None
        if not as_float.is_integer():
            return None
        result.append(int(as_float))
    return (result[0], result[1], result[2])


@dataclass
class OperationReport:
    """
    Standard report structure for distance map operations.

    Every operation returns a report with requested vs effective policy,
    warnings, and operation-specific metadata.

    The "requested vs effective" pattern records where explicit keyword
    arguments overrode the policy that was passed in.
    """
    operation: str = "unknown"
    success: bool = True
    requested_policy: Dict[str, Any] = field(default_factory=dict)
    effective_policy: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Add an error message and mark as failed."""
        self.errors.append(message)
        self.success = False

    def merge(self, other: "OperationReport") -> None:
        """Merge another report into this one."""
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)
        if not other.success:
            self.success = False
        self.metadata.update(other.metadata)


__all__ = [
    "OperationReport",
    "coerce_vec3",
    "coerce_index3",
]
