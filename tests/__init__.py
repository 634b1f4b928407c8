"""
Tests for Voxel Distance Map

This package contains tests for:
- Grid model and connectivity
- Distance map construction
- Steepest-descent and thinning path extraction
- Policies, API results and the CLI
"""
