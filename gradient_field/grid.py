# gradient_field/grid.py
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .dtypes import Cell, CellMap, CellType, Point
from .errors import InvalidGridError
from .geometry import in_bounds, neighbors4


# Smallest grid the engine is designed for
MIN_GRID_SIZE: int = 3


class Grid:
    """Rectangular cell grid with designated start and goal cells.

    Cells are stored as an int8 array of ``CellType`` values indexed
    ``[y, x]``. The engine never mutates a grid during a solve; callers that
    edit a grid concurrently should work on a ``copy()``.
    """

    def __init__(self, cells: CellMap, start: Point, goal: Point):
        self.cells = np.asarray(cells, dtype=np.int8)
        if self.cells.ndim != 2:
            raise InvalidGridError(f"cells must be 2D, got shape {self.cells.shape}")
        self.start = Point(int(start[0]), int(start[1]))
        self.goal = Point(int(goal[0]), int(goal[1]))

    @classmethod
    def empty(
        cls,
        width: int,
        height: int,
        start: Optional[Point] = None,
        goal: Optional[Point] = None,
    ) -> "Grid":
        """Obstacle-free grid. Start defaults to (1, 1), goal to (W-2, H-2)."""
        sx, sy = start if start is not None else (1, 1)
        gx, gy = goal if goal is not None else (width - 2, height - 2)

        # Clamp to grid bounds
        valid_start = Point(
            max(0, min(int(sx), width - 1)), max(0, min(int(sy), height - 1))
        )
        valid_goal = Point(
            max(0, min(int(gx), width - 1)), max(0, min(int(gy), height - 1))
        )

        cells = np.full((height, width), CellType.EMPTY, dtype=np.int8)
        cells[valid_start.y, valid_start.x] = CellType.START
        cells[valid_goal.y, valid_goal.x] = CellType.GOAL
        return cls(cells, valid_start, valid_goal)

    @property
    def width(self) -> int:
        return int(self.cells.shape[1])

    @property
    def height(self) -> int:
        return int(self.cells.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.cells.shape

    def in_bounds(self, point: Point) -> bool:
        return in_bounds(point, self.width, self.height)

    def cell(self, point: Point) -> Optional[Cell]:
        if not self.in_bounds(point):
            return None
        x, y = int(point.x), int(point.y)
        return Cell(Point(x, y), CellType(int(self.cells[y, x])))

    def is_walkable(self, point: Point) -> bool:
        """True for in-bounds, non-wall cells."""
        if not self.in_bounds(point):
            return False
        return self.cells[int(point.y), int(point.x)] != CellType.WALL

    def walkable_neighbors(self, point: Point) -> List[Point]:
        """Walkable 4-neighbours in up, down, left, right order."""
        return [n for n in neighbors4(point) if self.is_walkable(n)]

    def walkable_mask(self) -> NDArray[np.bool_]:
        return self.cells != CellType.WALL

    def wall_mask(self) -> NDArray[np.bool_]:
        return self.cells == CellType.WALL

    def set_cell(self, point: Point, cell_type: CellType) -> bool:
        """Overwrite one cell. Tagging a cell START/GOAL moves the reference."""
        if not self.in_bounds(point):
            return False
        x, y = int(point.x), int(point.y)
        self.cells[y, x] = cell_type
        if cell_type == CellType.START:
            self.start = Point(x, y)
        elif cell_type == CellType.GOAL:
            self.goal = Point(x, y)
        return True

    def set_walls(self, points: Iterable[Point]) -> None:
        for point in points:
            self.set_cell(point, CellType.WALL)

    def with_start_goal(self, start: Point, goal: Point) -> "Grid":
        """Copy with start/goal moved. Old tags are cleared to EMPTY."""
        grid = self.copy()
        for old in (grid.start, grid.goal):
            if grid.in_bounds(old) and grid.cells[old.y, old.x] in (CellType.START, CellType.GOAL):
                grid.cells[old.y, old.x] = CellType.EMPTY
        grid.start = Point(int(start[0]), int(start[1]))
        grid.goal = Point(int(goal[0]), int(goal[1]))
        if grid.in_bounds(grid.start):
            grid.cells[grid.start.y, grid.start.x] = CellType.START
        if grid.in_bounds(grid.goal):
            grid.cells[grid.goal.y, grid.goal.x] = CellType.GOAL
        return grid

    def copy(self) -> "Grid":
        return Grid(self.cells.copy(), self.start, self.goal)

    def count(self, cell_type: CellType) -> int:
        return int(np.count_nonzero(self.cells == cell_type))

    def validate(self) -> None:
        """Check the structural invariants the engine relies on."""
        H, W = self.shape
        if H < MIN_GRID_SIZE or W < MIN_GRID_SIZE:
            raise InvalidGridError(
                f"grid must be at least {MIN_GRID_SIZE}x{MIN_GRID_SIZE}, got {W}x{H}"
            )
        for name, point in (("start", self.start), ("goal", self.goal)):
            if not self.in_bounds(point):
                raise InvalidGridError(f"{name} {tuple(point)} is out of bounds for {W}x{H}")
            if not self.is_walkable(point):
                raise InvalidGridError(f"{name} {tuple(point)} is a wall")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (
            self.start == other.start
            and self.goal == other.goal
            and np.array_equal(self.cells, other.cells)
        )

    def __repr__(self) -> str:
        return f"Grid({self.width}x{self.height}, start={tuple(self.start)}, goal={tuple(self.goal)})"
