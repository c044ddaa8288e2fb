"""Tests for the ring search completeness fallback."""

import numpy as np
import pytest

from gradient_field.dtypes import CellType, Point
from gradient_field.fallback import RingSearchFallback
from gradient_field.grid import Grid
from gradient_field.validation import has_path, is_valid_path, reachable_region


def _random_grid(seed: int, size: int = 12, density: float = 0.3) -> Grid:
    rng = np.random.default_rng(seed)
    walls = rng.random((size, size)) < density
    cells = np.where(walls, CellType.WALL, CellType.EMPTY).astype(np.int8)
    start, goal = Point(0, 0), Point(size - 1, size - 1)
    cells[start.y, start.x] = CellType.START
    cells[goal.y, goal.x] = CellType.GOAL
    return Grid(cells, start, goal)


# --- Tests: Batch search ---


class TestFindPath:
    def test_finds_shortest_path(self, open_grid: Grid) -> None:
        result = RingSearchFallback(open_grid).find_path()

        assert result.success
        assert result.used_fallback
        assert result.path_length == 5
        assert is_valid_path(open_grid, result.path) == (True, "ok")
        assert result.algorithm_name == "Completeness Fallback (Manhattan Ring Search)"

    def test_detour(self, detour_grid: Grid) -> None:
        result = RingSearchFallback(detour_grid).find_path()

        assert result.success
        assert result.path_length == 9
        assert is_valid_path(detour_grid, result.path)[0]

    def test_no_path(self, split_grid: Grid) -> None:
        result = RingSearchFallback(split_grid).find_path()

        assert not result.success
        assert result.path == ()
        assert result.path_length == 0
        assert result.explored_count == 10

    def test_start_equals_goal(self) -> None:
        grid = Grid.empty(5, 5, start=(2, 2), goal=(2, 2))
        result = RingSearchFallback(grid).find_path()

        assert result.success
        assert result.path == (Point(2, 2),)

    def test_existing_count_is_added(self, split_grid: Grid) -> None:
        result = RingSearchFallback(split_grid).find_path(existing_explored_count=7)
        assert result.explored_count == 17

    def test_prior_trace_does_not_block_by_default(self, detour_grid: Grid) -> None:
        prior = [Point(0, 1), Point(1, 0)]
        result = RingSearchFallback(detour_grid).find_path(prior_explored=prior)
        assert result.success

    def test_seeded_trace_can_void_completeness(self, detour_grid: Grid) -> None:
        prior = [Point(0, 1), Point(1, 0)]
        result = RingSearchFallback(detour_grid).find_path(prior_explored=prior, seed_visited=True)
        assert not result.success

    def test_has_path(self, detour_grid: Grid, split_grid: Grid) -> None:
        assert RingSearchFallback.has_path(detour_grid)
        assert not RingSearchFallback.has_path(split_grid)


# --- Tests: Properties ---


class TestProperties:
    def test_deterministic(self, obstacle_grid: Grid) -> None:
        first = RingSearchFallback(obstacle_grid).find_path()
        second = RingSearchFallback(obstacle_grid).find_path()

        assert first.success
        assert first.path_length == second.path_length
        assert first.explored_count == second.explored_count
        assert first.path == second.path

    @pytest.mark.parametrize("seed", range(12))
    def test_complete_on_random_grids(self, seed: int) -> None:
        grid = _random_grid(seed)
        result = RingSearchFallback(grid).find_path()

        assert result.success == has_path(grid)
        if result.success:
            assert is_valid_path(grid, result.path)[0]
        else:
            assert result.explored_count == int(reachable_region(grid).sum())

    @pytest.mark.parametrize("seed", range(6))
    def test_path_is_shortest(self, seed: int) -> None:
        grid = _random_grid(seed, density=0.2)
        fallback = RingSearchFallback(grid)
        result = fallback.find_path()
        if result.success:
            # Ring d holds the cells d moves away from the start
            assert result.path_length == fallback.state.distance + 1

    def test_search_statistics(self, split_grid: Grid) -> None:
        fallback = RingSearchFallback(split_grid)
        fallback.find_path()
        stats = fallback.search_statistics()

        assert stats["explored_count"] == 10
        assert stats["total_reachable"] == 10
        assert stats["efficiency"] == pytest.approx(1.0)


# --- Tests: Streaming ---


class TestStepIterator:
    def test_goal_step_last(self, open_grid: Grid) -> None:
        fallback = RingSearchFallback(open_grid)
        steps = list(fallback.step_iterator())

        assert steps[-1].message == "Goal found by completeness fallback!"
        assert steps[-1].path[-1] == open_grid.goal
        assert is_valid_path(open_grid, steps[-1].path)[0]
        assert [s.iteration for s in steps] == list(range(1, len(steps) + 1))
        assert fallback.get_steps() == steps

    def test_messages(self, open_grid: Grid) -> None:
        steps = list(RingSearchFallback(open_grid).step_iterator())
        messages = [s.message for s in steps]

        assert messages[0] == "Fallback ring search: distance 0, cell 1,1"
        assert messages[1] == "Advancing to distance ring 1"

    def test_exhaustion_step(self, split_grid: Grid) -> None:
        steps = list(RingSearchFallback(split_grid).step_iterator())

        assert steps[-1].message == "No path exists - completeness fallback exhausted all possibilities"
        assert steps[-1].path == ()
        assert len(steps[-1].explored) == 10

    def test_explored_snapshot_includes_prior(self, split_grid: Grid) -> None:
        prior = [Point(3.5, 3.5)]
        step = next(RingSearchFallback(split_grid).step_iterator(prior_explored=prior))
        assert Point(3, 3) in step.explored
        assert Point(1, 1) in step.explored
