"""
Distance map and path extraction policies.

This module contains policy dataclasses for distance field construction
(threshold convention, connectivity, step cost) and for recovering a path
from a built field (steepest descent or thinning).

All policies are JSON-serializable and support from_dict/to_dict methods.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


CONNECTIVITIES = (6, 26)
STEP_COST_MODES = ("unit", "euclidean", "physical")
EXTRACTION_METHODS = ("steepest_descent", "thinning")


@dataclass
class DistanceMapPolicy:
    """
    Policy for distance field construction.

    Controls how voxels are admitted and how the wavefront propagates.
    A voxel is admissible when its intensity is >= threshold
    (threshold_above=True) or <= threshold (threshold_above=False).

    step_cost selects the cost of one propagation step:
    - "unit": every offset costs 1 (voxel-count distance)
    - "euclidean": offset length in index space (1, sqrt(2), sqrt(3))
    - "physical": offset length scaled by the grid spacing

    JSON Schema:
    {
        "threshold_above": bool,
        "connectivity": int (6 | 26),
        "step_cost": str ("unit" | "euclidean" | "physical")
    }
    """
    threshold_above: bool = True
    connectivity: int = 6
    step_cost: str = "unit"

    def validate(self) -> List[str]:
        errors = []
        if self.connectivity not in CONNECTIVITIES:
            errors.append(
                f"connectivity must be one of {CONNECTIVITIES}, got {self.connectivity!r}"
            )
        if self.step_cost not in STEP_COST_MODES:
            errors.append(
                f"step_cost must be one of {STEP_COST_MODES}, got {self.step_cost!r}"
            )
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threshold_above": self.threshold_above,
            "connectivity": self.connectivity,
            "step_cost": self.step_cost,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DistanceMapPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class PathExtractionPolicy:
    """
    Policy for extracting a path from a built distance field.

    min_quotient_stop is the fraction of the goal's own distance at which
    the walk stops: 0 walks all the way to the seed, values closer to 1
    stop earlier. max_iterations bounds the number of thinning passes and
    is ignored by steepest descent.

    JSON Schema:
    {
        "method": str ("steepest_descent" | "thinning"),
        "min_quotient_stop": float [0, 1],
        "max_iterations": int (> 0)
    }
    """
    method: str = "steepest_descent"
    min_quotient_stop: float = 0.0
    max_iterations: int = 100

    def validate(self) -> List[str]:
        errors = []
        if self.method not in EXTRACTION_METHODS:
            errors.append(
                f"method must be one of {EXTRACTION_METHODS}, got {self.method!r}"
            )
        if not 0.0 <= self.min_quotient_stop <= 1.0:
            errors.append(
                f"min_quotient_stop must be in [0, 1], got {self.min_quotient_stop}"
            )
        if isinstance(self.max_iterations, bool) or not isinstance(self.max_iterations, int):
            errors.append(f"max_iterations must be an int, got {self.max_iterations!r}")
        elif self.max_iterations <= 0:
            errors.append(f"max_iterations must be positive, got {self.max_iterations}")
        return errors

    @classmethod
    def from_max_iterations(
        cls,
        max_iterations: int,
        min_quotient_stop: float = 0.0,
    ) -> "PathExtractionPolicy":
        """
        Build a policy from a bare iteration count.

        A negative count selects steepest descent; zero or more selects
        thinning with that many passes (at least one).
        """
        if max_iterations < 0:
            return cls(method="steepest_descent", min_quotient_stop=min_quotient_stop)
        return cls(
            method="thinning",
            min_quotient_stop=min_quotient_stop,
            max_iterations=max(int(max_iterations), 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "min_quotient_stop": self.min_quotient_stop,
            "max_iterations": self.max_iterations,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PathExtractionPolicy":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


def resolve_policy(policy: Optional[Any], policy_cls: type, **overrides: Any) -> Any:
    """
    Return a copy of ``policy`` (or a default one) with non-None overrides applied.

    Raises ValueError when the resulting policy does not validate.
    """
    base = policy.to_dict() if policy is not None else policy_cls().to_dict()
    for key, value in overrides.items():
        if value is not None:
            base[key] = value
    effective = policy_cls.from_dict(base)
    errors = effective.validate()
    if errors:
        raise ValueError("; ".join(errors))
    return effective


__all__ = [
    "DistanceMapPolicy",
    "PathExtractionPolicy",
    "resolve_policy",
    "CONNECTIVITIES",
    "STEP_COST_MODES",
    "EXTRACTION_METHODS",
]
