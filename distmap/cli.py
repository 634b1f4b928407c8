"""
Command-Line Interface

CLI for building distance maps and extracting paths from volumes stored as
numpy .npy / .npz files.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from dmap_policies import DistanceMapPolicy, PathExtractionPolicy
from .api import create_distance_map, find_path
from .core.grid import VolumeGrid


def _parse_triple(text: str, cast=float) -> Tuple:
    parts = [p.strip() for p in text.split(",")]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"Expected three comma-separated values, got {text!r}")
    try:
        return tuple(cast(p) for p in parts)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _load_volume(path: str, key: Optional[str], spacing, origin) -> VolumeGrid:
    """Load a 3-D array from .npy or .npz (first array unless key is given)."""
    data = np.load(path, allow_pickle=False)
    if hasattr(data, "files"):
        with data:
            name = key if key is not None else data.files[0]
            values = data[name]
    else:
        values = data
    return VolumeGrid(values, spacing=spacing, origin=origin)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="distmap",
        description="Distance map path finding in 3-D scalar volumes",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Distance map command
    dm_parser = subparsers.add_parser("distance-map", help="Build and save a distance map")
    dm_parser.add_argument(
        "--output", "-O",
        type=str,
        required=True,
        help="Output .npy file for the distance map (unreachable voxels = -1)",
    )

    # Find path command
    fp_parser = subparsers.add_parser("find-path", help="Extract a path from goal to seed")
    fp_parser.add_argument(
        "--goal", "-g",
        type=str,
        required=True,
        help="Goal as i,j,k (or x,y,z with --world)",
    )
    fp_parser.add_argument(
        "--max-iterations",
        type=int,
        default=-1,
        help="Thinning passes; negative selects steepest descent (default: -1)",
    )
    fp_parser.add_argument(
        "--min-quotient-stop",
        type=float,
        default=0.0,
        help="Stop at this fraction of the goal distance (default: 0)",
    )
    fp_parser.add_argument(
        "--output", "-O",
        type=str,
        default=None,
        help="Output JSON file for the path (default: stdout)",
    )

    # Common arguments for all commands
    for p in [dm_parser, fp_parser]:
        p.add_argument(
            "--input", "-i",
            type=str,
            required=True,
            help="Volume as .npy or .npz",
        )
        p.add_argument(
            "--array-key",
            type=str,
            default=None,
            help="Array name inside a .npz file (default: first array)",
        )
        p.add_argument(
            "--spacing",
            type=str,
            default="1,1,1",
            help="Voxel spacing sx,sy,sz (default: 1,1,1)",
        )
        p.add_argument(
            "--origin",
            type=str,
            default="0,0,0",
            help="Volume origin x,y,z (default: 0,0,0)",
        )
        p.add_argument(
            "--seed", "-s",
            type=str,
            required=True,
            help="Seed as i,j,k (or x,y,z with --world)",
        )
        p.add_argument(
            "--world",
            action="store_true",
            help="Interpret seed and goal as world coordinates",
        )
        p.add_argument(
            "--threshold", "-t",
            type=float,
            required=True,
            help="Admissibility threshold",
        )
        p.add_argument(
            "--below",
            action="store_true",
            help="Admit voxels <= threshold instead of >= threshold",
        )
        p.add_argument(
            "--connectivity", "-c",
            type=int,
            choices=[6, 26],
            default=6,
            help="Neighbor connectivity (default: 6)",
        )
        p.add_argument(
            "--step-cost",
            type=str,
            choices=["unit", "euclidean", "physical"],
            default="unit",
            help="Propagation step cost (default: unit)",
        )
        p.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output",
        )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        spacing = _parse_triple(args.spacing)
        origin = _parse_triple(args.origin)
        cast = float if args.world else int
        seed = _parse_triple(args.seed, cast)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    grid = _load_volume(args.input, args.array_key, spacing, origin)
    policy = DistanceMapPolicy(
        threshold_above=not args.below,
        connectivity=args.connectivity,
        step_cost=args.step_cost,
    )
    coordinates = "world" if args.world else "index"

    if args.command == "distance-map":
        return run_distance_map(grid, seed, policy, coordinates, args)
    return run_find_path(grid, seed, policy, coordinates, args, parser)


def run_distance_map(grid, seed, policy, coordinates, args) -> int:
    """Run the distance-map command."""
    dmap, report = create_distance_map(
        grid, seed, args.threshold, policy=policy, coordinates=coordinates,
    )
    if dmap is None:
        print(f"Error: {report.errors[0]}", file=sys.stderr)
        return 2

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    np.save(output, dmap.to_grid(unreachable_value=-1.0).values)

    print(f"Reachable voxels: {dmap.num_reachable:,}")
    print(f"Max distance: {dmap.max_distance:g}")
    print(f"Saved: {output}")
    return 0


def run_find_path(grid, seed, policy, coordinates, args, parser) -> int:
    """Run the find-path command."""
    try:
        goal = _parse_triple(args.goal, float if args.world else int)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    extraction = PathExtractionPolicy.from_max_iterations(
        args.max_iterations,
        min_quotient_stop=args.min_quotient_stop,
    )
    errors = extraction.validate()
    if errors:
        parser.error("; ".join(errors))

    result = find_path(
        grid, seed, goal, args.threshold,
        distance_policy=policy,
        extraction_policy=extraction,
        coordinates=coordinates,
    )

    payload = json.dumps(result.to_dict(), indent=2)
    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload)
        print(f"Saved: {output}")
    else:
        print(payload)

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    if not result.success:
        for error in result.errors:
            print(f"Error: {error}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
