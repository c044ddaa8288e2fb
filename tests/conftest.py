"""Shared grids for the pathfinding tests."""

import math

import numpy as np
import pytest

from gradient_field.dtypes import FieldGuidance, GradientField, Point
from gradient_field.grid import Grid


@pytest.fixture
def open_grid() -> Grid:
    """5x5 without obstacles, start (1, 1), goal (3, 3)."""
    return Grid.empty(5, 5)


@pytest.fixture
def split_grid() -> Grid:
    """5x5 with a full wall row at y=2 between start and goal."""
    grid = Grid.empty(5, 5)
    grid.set_walls(Point(x, 2) for x in range(5))
    return grid


@pytest.fixture
def detour_grid() -> Grid:
    """5x5 with a plus-shaped wall; the goal is only reachable along the border."""
    grid = Grid.empty(5, 5)
    grid.set_walls([Point(2, 1), Point(2, 2), Point(2, 3), Point(1, 2), Point(3, 2)])
    return grid


@pytest.fixture
def obstacle_grid() -> Grid:
    """10x10 with scattered obstacles and a reachable goal."""
    grid = Grid.empty(10, 10)
    grid.set_walls([
        Point(3, 0), Point(3, 1), Point(3, 2), Point(3, 3), Point(3, 4),
        Point(6, 3), Point(6, 4), Point(6, 5), Point(6, 6), Point(6, 7), Point(6, 9),
        Point(1, 6), Point(2, 6), Point(4, 6), Point(5, 6),
    ])
    return grid


@pytest.fixture
def corner_gap_grid() -> Grid:
    """4x4, start (0, 0) boxed in by two walls that touch at a corner."""
    grid = Grid.empty(4, 4, start=(0, 0), goal=(3, 3))
    grid.set_walls([Point(1, 0), Point(0, 1)])
    return grid


@pytest.fixture
def diagonal_guidance() -> FieldGuidance:
    """Uniform down-right descent direction for a 4x4 grid."""
    component = np.full((4, 4), 1.0 / math.sqrt(2.0))
    return FieldGuidance(
        potential=np.zeros((4, 4)),
        gradient=GradientField(component, component.copy()),
    )
