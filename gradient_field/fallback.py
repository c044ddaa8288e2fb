# gradient_field/fallback.py
from __future__ import annotations

import logging
import sys
import time
import warnings
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, Iterator, List, Optional, Tuple

from .dtypes import PathfindingResult, PathfindingStep, Point
from .geometry import floor_cell
from .grid import Grid
from .validation import reachable_region

logger = logging.getLogger(__name__)


@dataclass
class RingSearchState:
    visited: Dict[Point, None] = field(default_factory=dict)    # insertion-ordered set
    current_ring: Deque[Point] = field(default_factory=deque)
    next_ring: List[Point] = field(default_factory=list)
    distance: int = 0
    parents: Dict[Point, Point] = field(default_factory=dict)
    explored_count: int = 1
    found: bool = False


class RingSearchFallback:
    """Complete, deterministic ring-by-ring search from the start.

    Ring ``d`` holds the cells first reached after ``d`` moves. Every ring is
    expanded in (x, y) order before the next one is started, so two runs on
    the same grid explore identically and finish with the same path.

    A prior exploration trace only contributes to the reported counts.
    With ``seed_visited=True`` its cells are also treated as visited and are
    never expanded; the search is then complete only if the trace is.
    """

    ALGORITHM_NAME = "Completeness Fallback (Manhattan Ring Search)"

    def __init__(self, grid: Grid):
        self.grid = grid
        self.state: Optional[RingSearchState] = None
        self._steps: List[PathfindingStep] = []

    @classmethod
    def has_path(cls, grid: Grid) -> bool:
        return cls(grid).find_path().success

    def find_path(
        self,
        prior_explored: Iterable[Point] = (),
        seed_visited: bool = False,
        existing_explored_count: int = 0,
    ) -> PathfindingResult:
        start_time = time.perf_counter()
        state = self._initialize_state(prior_explored, seed_visited)

        path: Tuple[Point, ...] = ()
        while state.current_ring or state.next_ring:
            if not state.current_ring:
                self._advance_ring()
                continue

            cell = state.current_ring.popleft()
            if cell == self.grid.goal:
                state.found = True
                path = tuple(self._reconstruct_path(cell))
                break
            self._expand(cell)

        if not state.found:
            logger.info("Ring search exhausted %d reachable cells", state.explored_count)

        return PathfindingResult(
            path=path,
            explored_count=existing_explored_count + state.explored_count,
            frontier_count=len(state.next_ring),
            runtime=(time.perf_counter() - start_time) * 1000.0,
            memory_used=self._estimate_memory(),
            path_length=len(path),
            success=state.found,
            algorithm_name=self.ALGORITHM_NAME,
            used_fallback=True,
        )

    def step_iterator(
        self,
        prior_explored: Iterable[Point] = (),
        seed_visited: bool = False,
    ) -> Iterator[PathfindingStep]:
        """Yield one snapshot per processed cell and per ring advance."""
        prior = [floor_cell(p) for p in prior_explored]
        state = self._initialize_state(prior, seed_visited)
        self._steps = []
        iteration = 0

        while state.current_ring or state.next_ring:
            iteration += 1

            if not state.current_ring:
                self._advance_ring()
                step = self._snapshot(
                    prior, state.current_ring[0], (), iteration,
                    f"Advancing to distance ring {state.distance}",
                )
                self._steps.append(step)
                yield step
                continue

            cell = state.current_ring.popleft()
            if cell == self.grid.goal:
                state.found = True
                step = self._snapshot(
                    prior, cell, tuple(self._reconstruct_path(cell)), iteration,
                    "Goal found by completeness fallback!",
                )
                self._steps.append(step)
                yield step
                return

            self._expand(cell)
            step = self._snapshot(
                prior, cell, tuple(self._reconstruct_path(cell)), iteration,
                f"Fallback ring search: distance {state.distance}, cell {cell.x},{cell.y}",
            )
            self._steps.append(step)
            yield step

        step = self._snapshot(
            prior, self.grid.start, (), iteration + 1,
            "No path exists - completeness fallback exhausted all possibilities",
        )
        self._steps.append(step)
        yield step

    def get_steps(self) -> List[PathfindingStep]:
        return self._steps

    def search_statistics(self) -> Dict[str, Any]:
        """Coverage of the last search relative to the start's component."""
        total_reachable = int(reachable_region(self.grid).sum())
        explored = self.state.explored_count if self.state is not None else 0
        return {
            "max_distance": self.state.distance if self.state is not None else 0,
            "explored_count": explored,
            "total_reachable": total_reachable,
            "efficiency": explored / total_reachable if total_reachable > 0 else 0.0,
        }

    def _initialize_state(
        self,
        prior_explored: Iterable[Point],
        seed_visited: bool,
    ) -> RingSearchState:
        start = self.grid.start
        state = RingSearchState()
        state.visited[start] = None
        state.current_ring.append(start)

        if seed_visited:
            for point in prior_explored:
                cell = floor_cell(point)
                if self.grid.is_walkable(cell):
                    state.visited.setdefault(cell, None)

        self.state = state
        return state

    def _expand(self, cell: Point) -> None:
        state = self.state
        for neighbor in sorted(self.grid.walkable_neighbors(cell)):
            if neighbor in state.visited:
                continue
            state.visited[neighbor] = None
            state.parents[neighbor] = cell
            state.explored_count += 1
            state.next_ring.append(neighbor)

    def _advance_ring(self) -> None:
        state = self.state
        state.current_ring = deque(sorted(state.next_ring))
        state.next_ring = []
        state.distance += 1

    def _reconstruct_path(self, end: Point) -> List[Point]:
        start = self.grid.start
        parents = self.state.parents
        path = [end]
        current = end
        while current != start:
            parent = parents.get(current)
            if parent is None:
                warnings.warn(
                    f"No parent recorded for {tuple(current)}; returning partial path",
                    RuntimeWarning,
                )
                break
            path.append(parent)
            current = parent
        path.reverse()
        return path

    def _snapshot(
        self,
        prior: List[Point],
        current: Point,
        path: Tuple[Point, ...],
        iteration: int,
        message: str,
    ) -> PathfindingStep:
        state = self.state
        explored = tuple(dict.fromkeys([*prior, *state.visited]))
        return PathfindingStep(
            current=current,
            explored=explored,
            frontier=tuple(state.current_ring) + tuple(state.next_ring),
            path=path,
            iteration=iteration,
            message=message,
        )

    def _estimate_memory(self) -> int:
        state = self.state
        return (
            sys.getsizeof(state.visited)
            + sys.getsizeof(state.parents)
            + sys.getsizeof(state.current_ring)
            + sys.getsizeof(state.next_ring)
        )
