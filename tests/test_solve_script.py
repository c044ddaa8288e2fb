"""Tests for the hydra solve entry point and its presets."""

from hydra import compose, initialize

from gradient_field.config import from_omegaconf
from gradient_field.grid_io import parse_ascii
from gradient_field.registry import PRESETS
from gradient_field.solver import IntegratedSolver
from scripts.solve import _render


def _compose(*overrides: str):
    with initialize(config_path="../scripts/config", version_base="1.3"):
        return compose(config_name="solve", overrides=["grid=mazes/corridor.txt", *overrides])


class TestPresets:
    def test_balanced_by_default(self) -> None:
        cfg = _compose()
        options = from_omegaconf(cfg)
        assert cfg.algorithm == "integrated"
        assert options.momentum_factor == 0.7
        assert options.max_iterations == 1000

    def test_precise_matches_registry(self) -> None:
        options = from_omegaconf(_compose("preset=precise"))
        for key, value in PRESETS["precise"].options.items():
            assert getattr(options, key) == value

    def test_fast_matches_registry(self) -> None:
        options = from_omegaconf(_compose("preset=fast"))
        for key, value in PRESETS["fast"].options.items():
            assert getattr(options, key) == value

    def test_command_line_override_wins(self) -> None:
        options = from_omegaconf(_compose("preset=fast", "max_iterations=42"))
        assert options.max_iterations == 42


class TestRender:
    def test_path_drawn(self) -> None:
        grid = parse_ascii("#####\n#S..#\n#.#.#\n#..G#\n#####")
        result = IntegratedSolver(grid, enable_randomness=False).find_path()
        drawing = _render(grid, result.path)

        assert result.success
        assert drawing.splitlines()[0] == "#####"
        assert drawing.count("*") == result.path_length - 2
        assert "S" in drawing and "G" in drawing
