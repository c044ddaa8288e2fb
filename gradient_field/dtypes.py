# gradient_field/dtypes.py
from __future__ import annotations

from enum import Enum, IntEnum
from typing import NamedTuple, Optional, Tuple, TypeAlias

import numpy as np
from numpy.typing import NDArray


# Type Aliases
CellMap: TypeAlias = NDArray[np.int8]
"""Cell type grid. Shape: (H, W), indexed [y, x]. Values: CellType."""

OccupancyMap: TypeAlias = NDArray[np.float32]
"""Binary occupancy grid. Shape: (H, W). Values: 1.0=passable, 0.0=obstacle."""

PotentialField: TypeAlias = NDArray[np.float64]
"""Scalar potential per cell. Shape: (H, W). Goal=0 before repulsion, +inf=unreachable."""

VectorField: TypeAlias = NDArray[np.float64]
"""One component of a 2D vector field. Shape: (H, W)."""


class CellType(IntEnum):
    EMPTY = 0
    WALL = 1
    START = 2
    GOAL = 3


class SolverPhase(str, Enum):
    """Which part of the integrated search produced a step."""
    PRIMARY = "primary"
    TRANSITION = "transition"
    FALLBACK = "fallback"
    FINAL = "final"



# Data Containers
class Point(NamedTuple):
    """Grid coordinate. Integer for cells, float for continuous positions."""
    x: float
    y: float


class Cell(NamedTuple):
    position: Point
    type: CellType


class GradientField(NamedTuple):
    """Negated potential gradient (descent direction)."""
    vec_x: VectorField
    vec_y: VectorField


class FieldGuidance(NamedTuple):
    """Potential and gradient fields computed for one grid."""
    potential: PotentialField
    gradient: GradientField

    @property
    def nbytes(self) -> int:
        return int(
            self.potential.nbytes
            + self.gradient.vec_x.nbytes
            + self.gradient.vec_y.nbytes
        )


class PathfindingResult(NamedTuple):
    """Outcome of a complete solve."""
    path: Tuple[Point, ...]
    explored_count: int
    frontier_count: int
    runtime: float                      # milliseconds
    memory_used: int                    # approximate bytes
    path_length: int
    success: bool
    algorithm_name: str
    used_fallback: bool = False


class PathfindingStep(NamedTuple):
    """Visualization snapshot emitted once per search iteration."""
    current: Point
    explored: Tuple[Point, ...]
    frontier: Tuple[Point, ...]
    path: Tuple[Point, ...]
    iteration: int
    message: Optional[str] = None
    field: Optional[VectorField] = None
    phase: Optional[SolverPhase] = None


class InteractiveStep(NamedTuple):
    """State after one call of the synchronous single-step search."""
    is_complete: bool
    path_found: bool
    explored_cells: Tuple[Point, ...]
    frontier_cells: Tuple[Point, ...]
    current_path: Optional[Tuple[Point, ...]]
    final_path: Optional[Tuple[Point, ...]]
    total_cells_explored: int
    execution_time_ms: float
