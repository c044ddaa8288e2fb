# gradient_field/errors.py
from __future__ import annotations

from typing import Tuple

from .dtypes import Point


class PathfindingError(Exception):
    """Base class for all errors raised by the pathfinding engine."""


class InvalidConfigurationError(PathfindingError, ValueError):
    """Raised when a configuration value is malformed."""


class InvalidGridError(PathfindingError, ValueError):
    """Raised when a grid violates its structural invariants."""


class NavigatorError(PathfindingError):
    """Gradient descent could not reach the goal.

    Carries the partial exploration trace so that a caller can merge it
    into fallback statistics.
    """

    def __init__(
        self,
        message: str,
        explored: Tuple[Point, ...] = (),
        iterations: int = 0,
    ):
        super().__init__(message)
        self.explored = explored
        self.iterations = iterations


class StuckExhaustedError(NavigatorError):
    """Escape budget exhausted without a productive move."""


class NavigatorTimeoutError(NavigatorError):
    """Wall-clock budget exceeded before reaching the goal."""


class CornerCutError(NavigatorError):
    """Trajectory reached the goal only by slipping between two walls."""
