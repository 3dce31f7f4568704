"""
Tests for the command line runner.
"""

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from d2q9_bgk.cli import build_parser, main
from d2q9_bgk.fileio import read_av_vels, read_final_state


@pytest.fixture
def run_files(tmp_path):
    """A 16x8 channel with a short wall, run for 20 steps."""
    param_file = tmp_path / "input.params"
    param_file.write_text("16\n8\n20\n8\n0.1\n0.005\n1.85\n")
    obstacle_file = tmp_path / "obstacles.dat"
    obstacle_file.write_text("".join(f"6 {y} 1\n" for y in range(3)))
    return param_file, obstacle_file


class TestArguments:

    @pytest.mark.parametrize("argv", [[], ["only.params"], ["a", "b", "c"]])
    def test_usage_error(self, argv, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(argv)

        assert excinfo.value.code == 2
        assert "usage: d2q9-bgk" in capsys.readouterr().err

    def test_parser(self):
        args = build_parser().parse_args(["p.params", "o.dat"])
        assert args.paramfile == "p.params"
        assert args.obstaclefile == "o.dat"


class TestRun:

    def test_successful_run(self, run_files, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        param_file, obstacle_file = run_files

        assert main([str(param_file), str(obstacle_file)]) == 0

        out = capsys.readouterr().out
        assert "==done==" in out
        assert "Reynolds number:" in out
        for phase in ("Init", "Compute", "Collate", "Total"):
            assert f"Elapsed {phase} time:" in out

        table = read_final_state(tmp_path / "final_state.dat")
        assert table.shape == (16 * 8, 7)
        assert table[:, 6].sum() == 3

        iters, av_vels = read_av_vels(tmp_path / "av_vels.dat")
        assert iters.size == 20
        assert np.all(av_vels > 0.0)

    def test_missing_param_file(self, run_files, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        _, obstacle_file = run_files

        assert main(["missing.params", str(obstacle_file)]) == 1

        err = capsys.readouterr().err
        assert "could not open input parameter file" in err
        assert not (tmp_path / "final_state.dat").exists()

    def test_bad_obstacle_file(self, run_files, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        param_file, obstacle_file = run_files
        obstacle_file.write_text("20 0 1\n")

        assert main([str(param_file), str(obstacle_file)]) == 1
        assert "x-coord out of range" in capsys.readouterr().err

    def test_fully_blocked_grid(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        param_file = tmp_path / "p"
        param_file.write_text("2 2 5 2 0.1 0.005 1.0")
        obstacle_file = tmp_path / "o"
        obstacle_file.write_text("0 0 1\n1 0 1\n0 1 1\n1 1 1\n")

        assert main([str(param_file), str(obstacle_file)]) == 1
        assert "every cell" in capsys.readouterr().err


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
