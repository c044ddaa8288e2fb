"""Tests for the batch runner."""

import numpy as np
import pytest

from gradient_field.batch import aggregate, main, run_batch, summarize
from gradient_field.config import SolverConfig
from gradient_field.grid import Grid
from gradient_field.grid_io import save_grid


@pytest.fixture
def grid_files(tmp_path, open_grid: Grid, split_grid: Grid, detour_grid: Grid):
    paths = []
    for name, grid in (("open", open_grid), ("split", split_grid), ("detour", detour_grid)):
        path = tmp_path / f"{name}.txt"
        save_grid(grid, path)
        paths.append(str(path))
    return paths


class TestSummarize:
    def test_statistics(self) -> None:
        stats = summarize([1.0, 2.0, 3.0, 4.0])
        assert stats["mean"] == 2.5
        assert stats["median"] == 2.5
        assert stats["min"] == 1.0
        assert stats["max"] == 4.0
        assert stats["std"] == pytest.approx(np.std([1, 2, 3, 4]))

    def test_empty(self) -> None:
        assert summarize([]) == {"mean": 0.0, "median": 0.0, "min": 0.0, "max": 0.0, "std": 0.0}


class TestRunBatch:
    def test_rates(self, grid_files) -> None:
        config = SolverConfig(enable_randomness=False)
        results = run_batch(grid_files, config, show_progress=False)
        summary = aggregate(results)

        assert summary["grids"] == 3
        assert list(results.success) == [True, False, True]
        assert summary["success_rate"] == pytest.approx(2 / 3)
        assert summary["fallback_rate"] == pytest.approx(2 / 3)

    def test_cli_saves_results(self, grid_files, tmp_path, capsys) -> None:
        output = tmp_path / "out" / "stats.npz"
        main([
            "--grids", *grid_files,
            "--override", "enable_randomness=false",
            "--output_path", str(output),
            "--no_progress",
        ])

        assert "Success: 66.7%" in capsys.readouterr().out
        with np.load(output) as data:
            assert data["success"].tolist() == [True, False, True]
            assert len(data["sources"]) == 3
