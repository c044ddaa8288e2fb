# gradient_field/grid_io.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
from numpy.typing import NDArray

from .dtypes import CellType, OccupancyMap, Point
from .errors import InvalidGridError
from .grid import Grid


# ASCII Cell Symbols
_SYMBOLS: Dict[str, CellType] = {
    ".": CellType.EMPTY,
    "#": CellType.WALL,
    "S": CellType.START,
    "G": CellType.GOAL,
}
_CHARS: Dict[CellType, str] = {v: k for k, v in _SYMBOLS.items()}

# NPZ keys
_MAP_KEY: str = "map"
_START_KEY: str = "start"
_GOAL_KEY: str = "goal"
_GOAL_MAP_KEY: str = "goal_map"

PathLike = Union[str, os.PathLike]


def parse_ascii(text: str) -> Grid:
    """Parse a grid drawn with ``#`` walls, ``.`` floor, ``S`` start, ``G`` goal."""
    rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if not rows:
        raise InvalidGridError("empty grid text")

    width = len(rows[0])
    if any(len(row) != width for row in rows):
        raise InvalidGridError("grid rows must all have the same width")

    cells = np.zeros((len(rows), width), dtype=np.int8)
    start: Optional[Point] = None
    goal: Optional[Point] = None

    for y, row in enumerate(rows):
        for x, char in enumerate(row):
            if char not in _SYMBOLS:
                raise InvalidGridError(f"unknown cell symbol {char!r} at ({x}, {y})")
            cells[y, x] = _SYMBOLS[char]
            if char == "S":
                if start is not None:
                    raise InvalidGridError(f"second 'S' at ({x}, {y}), first at {tuple(start)}")
                start = Point(x, y)
            elif char == "G":
                if goal is not None:
                    raise InvalidGridError(f"second 'G' at ({x}, {y}), first at {tuple(goal)}")
                goal = Point(x, y)

    if start is None or goal is None:
        raise InvalidGridError("grid text needs exactly one 'S' and one 'G'")
    grid = Grid(cells, start, goal)
    grid.validate()
    return grid


def to_ascii(grid: Grid) -> str:
    lines = []
    for y in range(grid.height):
        lines.append("".join(_CHARS[CellType(int(v))] for v in grid.cells[y]))
    return "\n".join(lines)


def grid_to_occupancy(grid: Grid) -> OccupancyMap:
    """1.0 = passable, 0.0 = obstacle."""
    return grid.walkable_mask().astype(np.float32)


def grid_from_occupancy(
    occupancy: NDArray,
    start: Optional[Point] = None,
    goal: Optional[Point] = None,
) -> Grid:
    """Build a Grid from a binary occupancy map (1 = passable, 0 = obstacle).

    Missing start/goal default to the first/last passable cell in row-major
    order.
    """
    occupancy = np.asarray(occupancy)

    # Handle channel dimension
    if occupancy.ndim == 3 and occupancy.shape[0] == 1:
        occupancy = occupancy[0]
    if occupancy.ndim != 2:
        raise InvalidGridError(f"occupancy must be 2D, got shape {occupancy.shape}")

    passable = np.argwhere(occupancy > 0.5)     # (row, col)
    if len(passable) == 0:
        raise InvalidGridError("occupancy map has no passable cell")
    if start is None:
        start = Point(int(passable[0, 1]), int(passable[0, 0]))
    if goal is None:
        goal = Point(int(passable[-1, 1]), int(passable[-1, 0]))

    cells = np.where(occupancy > 0.5, CellType.EMPTY, CellType.WALL).astype(np.int8)
    grid = Grid(cells, start, goal)
    grid.validate()
    grid.set_cell(grid.start, CellType.START)
    grid.set_cell(grid.goal, CellType.GOAL)
    return grid


def _point_at(array: NDArray, index: int) -> Point:
    array = np.asarray(array).reshape(-1, 2)
    x, y = array[index if len(array) > 1 else 0]
    return Point(int(x), int(y))


def _goal_from_map(goal_map: NDArray) -> Optional[Point]:
    coords = np.argwhere(np.asarray(goal_map).squeeze() == 1)
    if len(coords) == 0:
        return None
    return Point(int(coords[0, 1]), int(coords[0, 0]))


def load_grids(path: PathLike) -> List[Grid]:
    """Load every grid stored in a ``.npz`` or ASCII file."""
    path = Path(path)
    if path.suffix != ".npz":
        return [parse_ascii(path.read_text())]

    with np.load(path) as data:
        if _MAP_KEY not in data:
            raise InvalidGridError(f"{path} has no '{_MAP_KEY}' array")
        maps = data[_MAP_KEY]

        # Handle channel dimension
        if maps.ndim == 4:
            maps = maps.squeeze(1)
        if maps.ndim == 2:
            maps = maps[None]

        grids = []
        for i in range(maps.shape[0]):
            start = _point_at(data[_START_KEY], i) if _START_KEY in data else None
            if _GOAL_KEY in data:
                goal = _point_at(data[_GOAL_KEY], i)
            elif _GOAL_MAP_KEY in data:
                goal_maps = data[_GOAL_MAP_KEY].reshape(maps.shape[0], *maps.shape[1:])
                goal = _goal_from_map(goal_maps[i])
            else:
                goal = None
            grids.append(grid_from_occupancy(maps[i], start, goal))
    return grids


def load_grid(path: PathLike, index: int = 0) -> Grid:
    grids = load_grids(path)
    if not 0 <= index < len(grids):
        raise IndexError(f"grid index {index} out of range for {len(grids)} grid(s) in {path}")
    return grids[index]


def save_grid(grid: Grid, path: PathLike) -> None:
    """Write a grid as ASCII (any suffix) or compressed occupancy ``.npz``."""
    path = Path(path)
    if path.parent != Path(""):
        path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix == ".npz":
        np.savez_compressed(
            path,
            **{
                _MAP_KEY: grid_to_occupancy(grid),
                _START_KEY: np.array(grid.start, dtype=np.int64),
                _GOAL_KEY: np.array(grid.goal, dtype=np.int64),
            },
        )
    else:
        path.write_text(to_ascii(grid) + "\n")
