# gradient_field/solver.py
from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any, Deque, Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from .config import NavigatorConfig, SolverConfig, make_config
from .dtypes import (
    InteractiveStep,
    PathfindingResult,
    PathfindingStep,
    Point,
    SolverPhase,
)
from .errors import NavigatorError
from .fallback import RingSearchFallback
from .grid import Grid
from .navigator import GradientDescentNavigator

logger = logging.getLogger(__name__)



# Constants

# Axis moves (dx, dy); y grows downwards
_EAST: Tuple[int, int] = (1, 0)
_WEST: Tuple[int, int] = (-1, 0)
_SOUTH: Tuple[int, int] = (0, 1)
_NORTH: Tuple[int, int] = (0, -1)

_MERGED_NAME: str = "Integrated Solver (Gradient Field + Completeness Fallback)"
_FAILED_NAME: str = "Integrated Solver (Failed)"


class IntegratedSolver:
    """Gradient field navigation with a complete ring-search fallback.

    ``find_path`` never raises for "no path": an unreachable goal comes back
    as a ``success=False`` result. Only malformed options raise.
    """

    ALGORITHM_NAME = "Integrated Novel Pathfinding Solver"

    def __init__(
        self,
        grid: Grid,
        options: Union[None, NavigatorConfig, Dict[str, Any]] = None,
        rng: Optional[np.random.Generator] = None,
        **overrides: Any,
    ):
        self.grid = grid
        self.config: SolverConfig = make_config(options, **overrides)
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.reset()

    def find_path(self) -> PathfindingResult:
        start_time = time.perf_counter()
        deadline = start_time + self.config.primary_timeout / 1000.0
        navigator = self._navigator()

        # 1. Primary: gradient descent under the wall-clock budget
        self._phase = SolverPhase.PRIMARY
        logger.info("Running gradient field navigation on %r", self.grid)
        try:
            primary = navigator.find_path(deadline=deadline)
        except NavigatorError as exc:
            explored = exc.explored
            logger.info("Gradient field failed: %s", exc)
        else:
            if primary.success:
                self._phase = SolverPhase.FINAL
                logger.info("Gradient field reached the goal in %d iterations",
                            navigator.state.iteration)
                return primary
            explored = navigator.explored_cells()
            logger.info("Gradient field hit max_iterations=%d", self.config.max_iterations)

        if not self.config.enable_fallback:
            self._phase = SolverPhase.FINAL
            return self._failure_result(start_time, len(explored), navigator)

        # 2. Fallback: complete ring search, trace used for statistics
        logger.info("Switching to completeness fallback")
        self._phase = SolverPhase.FALLBACK
        fallback = RingSearchFallback(self.grid)
        secondary = fallback.find_path(
            prior_explored=explored,
            seed_visited=self.config.seed_fallback_visited,
            existing_explored_count=len(explored) if self.config.merge_stats else 0,
        )
        self._phase = SolverPhase.FINAL

        if not secondary.success:
            return self._failure_result(
                start_time, len(explored) + fallback.state.explored_count, navigator,
            )

        return secondary._replace(
            runtime=(time.perf_counter() - start_time) * 1000.0,
            memory_used=secondary.memory_used + navigator.guidance.nbytes,
            algorithm_name=_MERGED_NAME if self.config.merge_stats else secondary.algorithm_name,
            used_fallback=True,
        )

    def step_iterator(self) -> Iterator[PathfindingStep]:
        """Primary steps, one transition marker, fallback steps, final marker."""
        self._steps = []
        self._primary_steps = 0
        self._fallback_steps = 0
        self._transition_point = None
        navigator = self._navigator()

        # 1. Primary phase
        self._phase = SolverPhase.PRIMARY
        try:
            for step in navigator.step_iterator():
                tagged = step._replace(
                    message=f"[Gradient Field] {step.message}",
                    phase=SolverPhase.PRIMARY,
                )
                self._primary_steps += 1
                yield self._record(tagged)
                if self._is_goal_step(tagged):
                    self._phase = SolverPhase.FINAL
                    return
        except NavigatorError as exc:
            explored = exc.explored
            logger.info("Gradient field failed: %s", exc)
        else:
            explored = navigator.explored_cells()

        # 2. Transition marker
        if self.config.enable_fallback:
            self._phase = SolverPhase.TRANSITION
            self._transition_point = len(self._steps)
            yield self._record(PathfindingStep(
                current=self.grid.start,
                explored=tuple(explored),
                frontier=(),
                path=(),
                iteration=len(self._steps) + 1,
                message="[Transition] Switching to Completeness Fallback",
                phase=SolverPhase.TRANSITION,
            ))

            # 3. Fallback phase
            self._phase = SolverPhase.FALLBACK
            offset = len(self._steps)
            fallback = RingSearchFallback(self.grid)
            for step in fallback.step_iterator(
                prior_explored=explored,
                seed_visited=self.config.seed_fallback_visited,
            ):
                tagged = step._replace(
                    iteration=offset + step.iteration,
                    message=f"[Fallback] {step.message}",
                    phase=SolverPhase.FALLBACK,
                )
                self._fallback_steps += 1
                yield self._record(tagged)
                if self._is_goal_step(tagged):
                    self._phase = SolverPhase.FINAL
                    return

        # 4. Neither phase reached the goal
        self._phase = SolverPhase.FINAL
        yield self._record(PathfindingStep(
            current=self.grid.start,
            explored=tuple(explored),
            frontier=(),
            path=(),
            iteration=len(self._steps) + 1,
            message="[Final] No path exists in this maze",
            phase=SolverPhase.FINAL,
        ))

    def get_all_steps(self) -> List[PathfindingStep]:
        return self._steps

    def step(self) -> InteractiveStep:
        """Advance the interactive goal-directed search by one cell.

        This is not the gradient method: it is a FIFO search that enqueues
        goal-reducing axis moves first, then the perpendicular pair. Once
        the current cell is aligned with the goal on one axis only three
        moves are offered, so it can miss paths that need to back away from
        the goal. Use ``find_path`` for a complete answer.
        """
        if self._queue is None:
            start = self.grid.start
            self._queue = deque([(start, (start,))])
            self._visited = {start: None}
            self._interactive_start = time.perf_counter()

        current_path: Optional[Tuple[Point, ...]] = None
        if not self._interactive_complete:
            if not self._queue:
                self._interactive_complete = True
            else:
                point, path = self._queue.popleft()
                current_path = path
                if point == self.grid.goal:
                    self._interactive_complete = True
                    self._final_path = path
                else:
                    for dx, dy in self._goal_directed_moves(point):
                        neighbor = Point(point.x + dx, point.y + dy)
                        if self.grid.is_walkable(neighbor) and neighbor not in self._visited:
                            self._visited[neighbor] = None
                            self._queue.append((neighbor, path + (neighbor,)))

        return InteractiveStep(
            is_complete=self._interactive_complete,
            path_found=self._final_path is not None,
            explored_cells=tuple(self._visited),
            frontier_cells=tuple(p for p, _ in self._queue),
            current_path=current_path,
            final_path=self._final_path,
            total_cells_explored=len(self._visited),
            execution_time_ms=(time.perf_counter() - self._interactive_start) * 1000.0,
        )

    def _goal_directed_moves(self, point: Point) -> List[Tuple[int, int]]:
        dx = self.grid.goal.x - point.x
        dy = self.grid.goal.y - point.y

        moves: List[Tuple[int, int]] = []
        if dx > 0:
            moves.append(_EAST)
        elif dx < 0:
            moves.append(_WEST)
        if dy > 0:
            moves.append(_SOUTH)
        elif dy < 0:
            moves.append(_NORTH)

        if dx != 0:
            moves.extend(m for m in (_SOUTH, _NORTH) if m not in moves)
        if dy != 0:
            moves.extend(m for m in (_EAST, _WEST) if m not in moves)
        return moves

    def get_configuration(self) -> Dict[str, Any]:
        return {
            "algorithm_name": self.ALGORITHM_NAME,
            "primary_algorithm": GradientDescentNavigator.ALGORITHM_NAME,
            "fallback_enabled": self.config.enable_fallback,
            "options": self.config,
        }

    def get_statistics(self) -> Dict[str, Any]:
        return {
            "total_steps": len(self._steps),
            "primary_steps": self._primary_steps,
            "fallback_steps": self._fallback_steps,
            "transition_point": self._transition_point,
        }

    def current_phase(self) -> SolverPhase:
        return self._phase

    def reset(self) -> None:
        self._phase = SolverPhase.PRIMARY
        self._steps: List[PathfindingStep] = []
        self._primary_steps = 0
        self._fallback_steps = 0
        self._transition_point: Optional[int] = None

        self._queue: Optional[Deque[Tuple[Point, Tuple[Point, ...]]]] = None
        self._visited: Dict[Point, None] = {}
        self._interactive_start = 0.0
        self._interactive_complete = False
        self._final_path: Optional[Tuple[Point, ...]] = None

    def update_options(self, **changes: Any) -> None:
        """Merge option changes (validated) and reset all search state."""
        self.config = make_config(self.config, **changes)
        if "seed" in changes:
            self.rng = np.random.default_rng(self.config.seed)
        self.reset()

    def _navigator(self) -> GradientDescentNavigator:
        return GradientDescentNavigator(
            self.grid, self.config.navigator_config(), rng=self.rng,
        )

    def _record(self, step: PathfindingStep) -> PathfindingStep:
        self._steps.append(step)
        return step

    def _is_goal_step(self, step: PathfindingStep) -> bool:
        return len(step.path) > 0 and step.path[-1] == self.grid.goal

    def _failure_result(
        self,
        start_time: float,
        explored_count: int,
        navigator: GradientDescentNavigator,
    ) -> PathfindingResult:
        logger.info("No path found after exploring %d cells", explored_count)
        return PathfindingResult(
            path=(),
            explored_count=explored_count,
            frontier_count=0,
            runtime=(time.perf_counter() - start_time) * 1000.0,
            memory_used=navigator.guidance.nbytes,
            path_length=0,
            success=False,
            algorithm_name=_FAILED_NAME,
            used_fallback=self.config.enable_fallback,
        )
