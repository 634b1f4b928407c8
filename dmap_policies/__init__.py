"""
Distance map policies - configuration for the distance map engine.

This package provides the policy dataclasses used by distmap. All policies
are JSON-serializable and support the "requested vs effective" pattern for
tracking keyword overrides.

Usage:
    from dmap_policies import DistanceMapPolicy, PathExtractionPolicy, OperationReport
"""

from .base import (
    OperationReport,
    coerce_vec3,
    coerce_index3,
)

from .distance_map import (
    DistanceMapPolicy,
    PathExtractionPolicy,
    resolve_policy,
    CONNECTIVITIES,
    STEP_COST_MODES,
    EXTRACTION_METHODS,
)

__all__ = [
    "OperationReport",
    "coerce_vec3",
    "coerce_index3",
    "DistanceMapPolicy",
    "PathExtractionPolicy",
    "resolve_policy",
    "CONNECTIVITIES",
    "STEP_COST_MODES",
    "EXTRACTION_METHODS",
]
