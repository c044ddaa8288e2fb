"""Tests for solver creation and comparison."""

import pytest

from gradient_field.fallback import RingSearchFallback
from gradient_field.grid import Grid
from gradient_field.navigator import GradientDescentNavigator
from gradient_field.registry import (
    PRESETS,
    AlgorithmType,
    available_algorithms,
    compare_algorithms,
    create_preset_solver,
    create_solver,
)
from gradient_field.solver import IntegratedSolver


class TestCreateSolver:
    @pytest.mark.parametrize("algorithm, expected", [
        (AlgorithmType.GRADIENT, GradientDescentNavigator),
        (AlgorithmType.FALLBACK, RingSearchFallback),
        (AlgorithmType.INTEGRATED, IntegratedSolver),
        ("integrated", IntegratedSolver),
    ])
    def test_types(self, open_grid: Grid, algorithm, expected) -> None:
        assert isinstance(create_solver(algorithm, open_grid), expected)

    def test_options_forwarded(self, open_grid: Grid) -> None:
        navigator = create_solver("gradient", open_grid, {"max_iterations": 25})
        assert navigator.config.max_iterations == 25

    def test_unknown_type(self, open_grid: Grid) -> None:
        with pytest.raises(ValueError, match="Unknown algorithm type"):
            create_solver("bfs", open_grid)

    def test_presets(self, open_grid: Grid) -> None:
        assert set(PRESETS) == {"fast", "balanced", "precise"}
        precise = create_preset_solver("precise", open_grid)
        assert isinstance(precise, IntegratedSolver)
        assert precise.config.primary_timeout == 10000.0
        assert isinstance(create_preset_solver("fast", open_grid), GradientDescentNavigator)

        with pytest.raises(ValueError):
            create_preset_solver("turbo", open_grid)


class TestCatalogue:
    def test_available_algorithms(self) -> None:
        algorithms = available_algorithms()
        assert {a["type"] for a in algorithms} == set(AlgorithmType)
        assert [a["type"] for a in algorithms if a["recommended"]] == [AlgorithmType.INTEGRATED]


class TestCompare:
    def test_compare_fallback_and_integrated(self, open_grid: Grid) -> None:
        report = compare_algorithms(open_grid, "fallback", AlgorithmType.INTEGRATED)
        comparison = report["comparison"]

        assert report["algorithm_1"]["type"] == AlgorithmType.FALLBACK
        assert report["algorithm_1"]["result"].success
        assert report["algorithm_2"]["result"].success
        assert comparison["runtime_difference"] >= 0.0
        assert comparison["path_length_difference"] == abs(
            report["algorithm_1"]["result"].path_length - report["algorithm_2"]["result"].path_length
        )
        assert comparison["faster_algorithm"] in (AlgorithmType.FALLBACK, AlgorithmType.INTEGRATED)
