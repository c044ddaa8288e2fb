# gradient_field/validation.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from .dtypes import Point
from .geometry import floor_cell, manhattan_distance
from .grid import Grid



# Constants

# 4-connectivity structure (von Neumann neighbourhood)
_CROSS_STRUCTURE: NDArray[np.int32] = np.array(
    [[0, 1, 0],
     [1, 1, 1],
     [0, 1, 0]], dtype=np.int32
)


def reachable_region(grid: Grid, source: Optional[Point] = None) -> NDArray[np.bool_]:
    """Walkable cells 4-connected to ``source`` (default: start)."""
    H, W = grid.shape
    src = grid.start if source is None else source
    if not grid.is_walkable(src):
        return np.zeros((H, W), dtype=bool)

    labeled, _ = ndimage.label(grid.walkable_mask(), structure=_CROSS_STRUCTURE)
    label = labeled[int(src.y), int(src.x)]
    return labeled == label


def has_path(grid: Grid) -> bool:
    """True if goal lies in the start's connected component."""
    region = reachable_region(grid)
    return bool(region[grid.goal.y, grid.goal.x])


def obstacle_density(grid: Grid) -> float:
    """Fraction of cells that are walls."""
    return float(grid.wall_mask().mean())


def path_cells(path: Sequence[Point]) -> List[Point]:
    """Discretize a (possibly continuous) trajectory into its floored cells.

    Consecutive duplicates are collapsed; diagonal jumps between cells are
    kept as-is, so the result is only 4-connected when the input was.
    """
    cells: List[Point] = []
    for point in path:
        cell = floor_cell(point)
        if not cells or cells[-1] != cell:
            cells.append(cell)
    return cells


def _axis_walk(a: Point, b: Point, x_first: bool) -> List[Point]:
    """Cells after ``a`` up to ``b``, moving along one axis then the other."""
    sx = 1 if b.x > a.x else -1
    sy = 1 if b.y > a.y else -1
    if x_first:
        leg_1 = [Point(x, a.y) for x in range(a.x + sx, b.x + sx, sx)] if a.x != b.x else []
        leg_2 = [Point(b.x, y) for y in range(a.y + sy, b.y + sy, sy)] if a.y != b.y else []
    else:
        leg_1 = [Point(a.x, y) for y in range(a.y + sy, b.y + sy, sy)] if a.y != b.y else []
        leg_2 = [Point(x, b.y) for x in range(a.x + sx, b.x + sx, sx)] if a.x != b.x else []
    return leg_1 + leg_2


def trajectory_cells(grid: Grid, trajectory: Sequence[Point]) -> Optional[List[Point]]:
    """Turn a continuous trajectory into a 4-connected cell path.

    Each diagonal jump is bridged through whichever orthogonal corner cell
    is walkable, x move first. Returns None when a jump squeezes between two
    walls that touch at a corner.
    """
    cells = path_cells(trajectory)
    if not cells or not all(grid.is_walkable(cell) for cell in cells):
        return None

    route: List[Point] = [cells[0]]
    for target in cells[1:]:
        for x_first in (True, False):
            bridge = _axis_walk(route[-1], target, x_first)
            if all(grid.is_walkable(cell) for cell in bridge):
                route.extend(bridge)
                break
        else:
            return None
    return route


def is_valid_path(grid: Grid, path: Sequence[Point]) -> Tuple[bool, str]:
    """Check a discrete path: start to goal, 4-adjacent steps, no walls."""
    if len(path) == 0:
        return False, "path is empty"

    first = Point(int(path[0][0]), int(path[0][1]))
    last = Point(int(path[-1][0]), int(path[-1][1]))
    if first != grid.start:
        return False, f"path starts at {tuple(first)}, expected {tuple(grid.start)}"
    if last != grid.goal:
        return False, f"path ends at {tuple(last)}, expected {tuple(grid.goal)}"

    for i, point in enumerate(path):
        if not grid.is_walkable(point):
            return False, f"cell {tuple(point)} at index {i} is not walkable"
        if i > 0 and manhattan_distance(path[i - 1], point) != 1:
            return False, f"cells {tuple(path[i - 1])} and {tuple(point)} are not adjacent"

    return True, "ok"
