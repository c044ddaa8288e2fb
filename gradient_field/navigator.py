# gradient_field/navigator.py
from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from .config import NavigatorConfig
from .dtypes import FieldGuidance, PathfindingResult, PathfindingStep, Point
from .errors import CornerCutError, NavigatorTimeoutError, StuckExhaustedError
from .field import compute_guidance, sample_gradient_bilinear
from .geometry import add, clamp, euclidean_distance, floor_cell, normalize, scale
from .grid import Grid
from .validation import trajectory_cells

logger = logging.getLogger(__name__)



# Constants

# A cell entered more often than this counts as a cycle
_MAX_CELL_VISITS: int = 3

# Every n-th escape forgets the visit history
_VISIT_RESET_PERIOD: int = 5

# Margin keeping continuous positions off the outer cell boundary
_BOUNDARY_MARGIN: float = 0.1

# Perpendicular slide length, as a fraction of the velocity
_SLIDE_FACTOR: float = 0.5


class NavigatorPhase(str, Enum):
    DESCENDING = "descending"
    STUCK = "stuck"
    ESCAPING = "escaping"
    REACHED = "reached"
    FAILED = "failed"


@dataclass
class NavigationState:
    """Mutable state of one descent run."""
    position: Point
    velocity: Point = Point(0.0, 0.0)
    iteration: int = 0
    stuck_counter: int = 0
    phase: NavigatorPhase = NavigatorPhase.DESCENDING
    visit_counts: Dict[Point, int] = field(default_factory=dict)
    explored: Dict[Point, None] = field(default_factory=dict)   # insertion-ordered set
    path: List[Point] = field(default_factory=list)


class GradientDescentNavigator:
    """Momentum gradient descent over a potential field.

    The navigator alone is incomplete: when its escape budget runs out it
    raises ``StuckExhaustedError``, and a ``deadline`` that expires raises
    ``NavigatorTimeoutError``. Result paths are 4-connected cells; a
    trajectory that only reaches the goal between two corner-touching walls
    raises ``CornerCutError``. Use ``IntegratedSolver`` for a solve that
    falls back to a complete search instead of raising.
    """

    ALGORITHM_NAME = "Gradient Field Pathfinding"

    def __init__(
        self,
        grid: Grid,
        config: Optional[NavigatorConfig] = None,
        rng: Optional[np.random.Generator] = None,
        guidance: Optional[FieldGuidance] = None,
    ):
        self.grid = grid
        self.config = config if config is not None else NavigatorConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self._guidance = guidance
        self.state: Optional[NavigationState] = None
        self._steps: List[PathfindingStep] = []

    @property
    def guidance(self) -> FieldGuidance:
        if self._guidance is None:
            self._guidance = compute_guidance(self.grid, self.config)
        return self._guidance

    def find_path(self, deadline: Optional[float] = None) -> PathfindingResult:
        """Descend from start to goal.

        ``deadline`` is an absolute ``time.perf_counter()`` value.
        """
        start_time = time.perf_counter()
        guidance = self.guidance
        state = self._initialize_state()

        while not self.is_goal_reached() and state.iteration < self.config.max_iterations:
            if deadline is not None and time.perf_counter() > deadline:
                state.phase = NavigatorPhase.FAILED
                raise NavigatorTimeoutError(
                    f"Gradient field pathfinding timed out after {state.iteration} iterations",
                    explored=self.explored_cells(),
                    iterations=state.iteration,
                )
            self._perform_step()

        success = self.is_goal_reached()
        final_path = tuple(self._cell_route()) if success else ()
        state.phase = NavigatorPhase.REACHED if success else NavigatorPhase.FAILED

        return PathfindingResult(
            path=final_path,
            explored_count=len(state.explored),
            frontier_count=len(self.frontier_cells()),
            runtime=(time.perf_counter() - start_time) * 1000.0,
            memory_used=self._estimate_memory(guidance),
            path_length=len(final_path),
            success=success,
            algorithm_name=self.ALGORITHM_NAME,
            used_fallback=False,
        )

    def step_iterator(self) -> Iterator[PathfindingStep]:
        """Yield one snapshot per descent iteration (escape attempts included)."""
        guidance = self.guidance
        state = self._initialize_state()
        self._steps = []

        while not self.is_goal_reached() and state.iteration < self.config.max_iterations:
            message = self._perform_step()
            step = PathfindingStep(
                current=state.position,
                explored=self.explored_cells(),
                frontier=self.frontier_cells(),
                path=tuple(state.path),
                iteration=state.iteration,
                message=message,
                field=guidance.gradient.vec_x,
            )
            self._steps.append(step)
            yield step

        if self.is_goal_reached():
            self._cell_route()
            state.phase = NavigatorPhase.REACHED
            step = PathfindingStep(
                current=self.grid.goal,
                explored=self.explored_cells(),
                frontier=(),
                path=tuple(state.path) + (self.grid.goal,),
                iteration=state.iteration,
                message="Goal reached!",
                field=guidance.gradient.vec_x,
            )
            self._steps.append(step)
            yield step
        else:
            state.phase = NavigatorPhase.FAILED

    def get_steps(self) -> List[PathfindingStep]:
        return self._steps

    def is_goal_reached(self) -> bool:
        if self.state is None:
            return False
        return euclidean_distance(self.state.position, self.grid.goal) < self.config.goal_threshold

    def explored_cells(self) -> Tuple[Point, ...]:
        if self.state is None:
            return ()
        return tuple(self.state.explored)

    def frontier_cells(self) -> Tuple[Point, ...]:
        """Walkable neighbours of the current cell not explored yet."""
        if self.state is None:
            return ()
        current = floor_cell(self.state.position)
        return tuple(
            n for n in self.grid.walkable_neighbors(current)
            if n not in self.state.explored
        )

    def _cell_route(self) -> List[Point]:
        """4-connected cells of the finished trajectory, start to goal."""
        route = trajectory_cells(self.grid, self.state.path + [self.grid.goal])
        if route is None:
            self.state.phase = NavigatorPhase.FAILED
            raise CornerCutError(
                "Gradient field trajectory cuts between two walls - fallback required",
                explored=self.explored_cells(),
                iterations=self.state.iteration,
            )
        return route

    def _initialize_state(self) -> NavigationState:
        start = Point(float(self.grid.start.x), float(self.grid.start.y))
        self.state = NavigationState(position=start, path=[self.grid.start])
        return self.state

    def _perform_step(self) -> str:
        """One descent iteration. Returns a human-readable message."""
        state = self.state
        momentum = self.config.momentum_factor

        # 1. Sample gradient at the continuous position
        gx, gy = sample_gradient_bilinear(self.guidance.gradient, state.position)

        # 2. Blend with momentum; unit length makes every move the same size
        velocity = add(scale(state.velocity, momentum), scale(Point(gx, gy), 1.0 - momentum))
        state.velocity = normalize(velocity)

        # 3-4. Propose, clamp, slide along walls
        next_position = self._next_position(state.position, state.velocity)

        # 5. Cycle detection
        cell = floor_cell(next_position)
        visits = state.visit_counts.get(cell, 0)
        if visits > _MAX_CELL_VISITS:
            return self._attempt_escape()

        # 6. Commit
        state.phase = NavigatorPhase.DESCENDING
        state.position = next_position
        state.visit_counts[cell] = visits + 1
        state.explored[cell] = None
        state.path.append(next_position)
        state.iteration += 1
        return f"Gradient descent step {state.iteration}"

    def _next_position(self, position: Point, velocity: Point) -> Point:
        W, H = self.grid.width, self.grid.height
        proposed = Point(
            clamp(position.x + velocity.x, _BOUNDARY_MARGIN, W - 1 - _BOUNDARY_MARGIN),
            clamp(position.y + velocity.y, _BOUNDARY_MARGIN, H - 1 - _BOUNDARY_MARGIN),
        )
        if self.grid.is_walkable(floor_cell(proposed)):
            return proposed

        # Slide along the wall: pure x, pure y, then both perpendiculars
        px, py = position
        vx, vy = velocity
        alternatives = (
            Point(px + vx, py),
            Point(px, py + vy),
            Point(px - vy * _SLIDE_FACTOR, py + vx * _SLIDE_FACTOR),
            Point(px + vy * _SLIDE_FACTOR, py - vx * _SLIDE_FACTOR),
        )
        for alternative in alternatives:
            if self.grid.is_walkable(floor_cell(alternative)):
                return alternative

        # Boxed in: stay put this iteration
        return position

    def _attempt_escape(self) -> str:
        state = self.state
        state.stuck_counter += 1
        state.phase = NavigatorPhase.STUCK

        if self.config.enable_randomness and state.stuck_counter < self.config.escape_attempts:
            state.phase = NavigatorPhase.ESCAPING
            strength = self.config.perturbation_strength
            dx, dy = self.rng.uniform(-strength, strength, size=2)
            state.velocity = add(state.velocity, Point(float(dx), float(dy)))

            if state.stuck_counter % _VISIT_RESET_PERIOD == 0:
                state.visit_counts.clear()

            logger.debug(
                "Escape attempt %d at (%.2f, %.2f)",
                state.stuck_counter, state.position.x, state.position.y,
            )
            return f"Escape attempt {state.stuck_counter}"

        state.phase = NavigatorPhase.FAILED
        raise StuckExhaustedError(
            "Gradient field pathfinding stuck - fallback required",
            explored=self.explored_cells(),
            iterations=state.iteration,
        )

    def _estimate_memory(self, guidance: FieldGuidance) -> int:
        state = self.state
        return (
            guidance.nbytes
            + sys.getsizeof(state.visit_counts)
            + sys.getsizeof(state.explored)
            + sys.getsizeof(state.path)
            + len(state.path) * sys.getsizeof(state.position)
        )
