"""
Tests for the distmap command-line interface.
"""

import json

import pytest
import numpy as np

from distmap.cli import main, build_parser


@pytest.fixture
def plane_file(tmp_path):
    path = tmp_path / "plane.npy"
    np.save(path, np.ones((10, 10, 1)))
    return path


class TestDistanceMapCommand:
    """distance-map subcommand."""

    def test_writes_distance_volume(self, tmp_path):
        values = np.ones((4, 1, 1))
        values[2, 0, 0] = 0.0
        source = tmp_path / "line.npy"
        np.save(source, values)
        output = tmp_path / "out" / "dist.npy"

        code = main([
            "distance-map", "--input", str(source), "--seed", "0,0,0",
            "--threshold", "0.5", "--output", str(output),
        ])

        assert code == 0
        np.testing.assert_array_equal(np.load(output)[:, 0, 0], [0.0, 1.0, -1.0, -1.0])

    def test_npz_input(self, tmp_path):
        source = tmp_path / "volumes.npz"
        np.savez(source, other=np.zeros((2, 2, 2)), image=np.ones((3, 3, 1)))
        output = tmp_path / "dist.npy"

        code = main([
            "distance-map", "--input", str(source), "--array-key", "image",
            "--seed", "0,0,0", "--threshold", "0.5", "--output", str(output),
            "--connectivity", "26",
        ])

        assert code == 0
        assert np.load(output)[2, 2, 0] == 2.0

    def test_inadmissible_seed_fails(self, tmp_path, plane_file):
        code = main([
            "distance-map", "--input", str(plane_file), "--seed", "0,0,0",
            "--threshold", "2", "--output", str(tmp_path / "dist.npy"),
        ])
        assert code == 2
        assert not (tmp_path / "dist.npy").exists()


class TestFindPathCommand:
    """find-path subcommand."""

    def test_json_to_stdout(self, plane_file, capsys):
        code = main([
            "find-path", "--input", str(plane_file), "--seed", "0,0,0",
            "--goal", "9,9,0", "--threshold", "0.5",
        ])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is True
        assert payload["path"]["method"] == "steepest_descent"
        assert len(payload["path"]["indices"]) == 19

    def test_thinning_to_file(self, tmp_path):
        source = tmp_path / "line.npy"
        np.save(source, np.ones((6, 1, 1)))
        output = tmp_path / "path.json"
        code = main([
            "find-path", "--input", str(source), "--seed", "0,0,0",
            "--goal", "5,0,0", "--threshold", "0.5", "--max-iterations", "50",
            "--output", str(output),
        ])

        assert code == 0
        payload = json.loads(output.read_text())
        assert payload["path"]["method"] == "thinning"
        assert payload["path"]["converged"] is True
        assert payload["path"]["indices"][0] == [5, 0, 0]
        assert payload["path"]["indices"][-1] == [0, 0, 0]

    def test_world_coordinates(self, plane_file, capsys):
        code = main([
            "find-path", "--input", str(plane_file), "--spacing", "2,2,1",
            "--world", "--seed", "0,0,0", "--goal", "18,18,0", "--threshold", "0.5",
        ])

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["path"]["points"][0] == [18.0, 18.0, 0.0]

    def test_unreachable_goal(self, plane_file, capsys):
        code = main([
            "find-path", "--input", str(plane_file), "--seed", "0,0,0",
            "--goal", "20,0,0", "--threshold", "0.5",
        ])

        assert code == 2
        payload = json.loads(capsys.readouterr().out)
        assert payload["success"] is False


class TestParser:
    """Argument parsing."""

    def test_no_command(self):
        assert main([]) == 1

    def test_bad_triple_exits(self, plane_file):
        with pytest.raises(SystemExit):
            main([
                "find-path", "--input", str(plane_file), "--seed", "0,0",
                "--goal", "1,1,0", "--threshold", "0.5",
            ])

    def test_defaults(self):
        args = build_parser().parse_args([
            "find-path", "--input", "x.npy", "--seed", "0,0,0",
            "--goal", "1,1,0", "--threshold", "1",
        ])
        assert args.max_iterations == -1
        assert args.connectivity == 6
        assert args.step_cost == "unit"
        assert not args.below
