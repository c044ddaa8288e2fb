# gradient_field/registry.py
from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Union

import numpy as np

from .config import make_config
from .dtypes import PathfindingResult
from .fallback import RingSearchFallback
from .grid import Grid
from .navigator import GradientDescentNavigator
from .solver import IntegratedSolver


class AlgorithmType(str, Enum):
    GRADIENT = "gradient"
    FALLBACK = "fallback"
    INTEGRATED = "integrated"


class SolverFactory(NamedTuple):
    create: Callable[..., Any]
    algorithm_name: str
    description: str


class Preset(NamedTuple):
    algorithm: AlgorithmType
    options: Dict[str, Any]


def _create_gradient(grid: Grid, options: Any = None, rng: Optional[np.random.Generator] = None):
    return GradientDescentNavigator(grid, make_config(options).navigator_config(), rng=rng)


def _create_fallback(grid: Grid, options: Any = None, rng: Optional[np.random.Generator] = None):
    return RingSearchFallback(grid)


def _create_integrated(grid: Grid, options: Any = None, rng: Optional[np.random.Generator] = None):
    return IntegratedSolver(grid, options, rng=rng)


_FACTORIES: Dict[AlgorithmType, SolverFactory] = {
    AlgorithmType.INTEGRATED: SolverFactory(
        _create_integrated,
        "Integrated Novel Solver",
        "Gradient field pathfinding with completeness fallback",
    ),
    AlgorithmType.GRADIENT: SolverFactory(
        _create_gradient,
        GradientDescentNavigator.ALGORITHM_NAME,
        "Potential field navigation by momentum gradient descent",
    ),
    AlgorithmType.FALLBACK: SolverFactory(
        _create_fallback,
        "Completeness Fallback",
        "Ring search with guaranteed completeness",
    ),
}

# Named option sets for common use cases
PRESETS: Dict[str, Preset] = {
    "fast": Preset(AlgorithmType.GRADIENT, {
        "momentum_factor": 0.9, "max_iterations": 500, "goal_threshold": 1.0,
    }),
    "balanced": Preset(AlgorithmType.INTEGRATED, {
        "momentum_factor": 0.7, "max_iterations": 1000, "goal_threshold": 0.5,
        "enable_fallback": True,
    }),
    "precise": Preset(AlgorithmType.INTEGRATED, {
        "momentum_factor": 0.5, "max_iterations": 2000, "goal_threshold": 0.3,
        "enable_fallback": True, "primary_timeout": 10000.0,
    }),
}


def _resolve(algorithm: Union[AlgorithmType, str]) -> AlgorithmType:
    try:
        algorithm = AlgorithmType(algorithm)
    except ValueError:
        raise ValueError(f"Unknown algorithm type: {algorithm}") from None
    return algorithm


def create_solver(
    algorithm: Union[AlgorithmType, str],
    grid: Grid,
    options: Any = None,
    rng: Optional[np.random.Generator] = None,
):
    """Instantiate a solver. Every solver exposes ``find_path`` and ``step_iterator``."""
    return _FACTORIES[_resolve(algorithm)].create(grid, options, rng=rng)


def create_preset_solver(name: str, grid: Grid, rng: Optional[np.random.Generator] = None):
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}'. Available: {sorted(PRESETS)}")
    preset = PRESETS[name]
    return create_solver(preset.algorithm, grid, preset.options, rng=rng)


def available_algorithms() -> List[Dict[str, Any]]:
    return [
        {
            "type": algorithm,
            "name": factory.algorithm_name,
            "description": factory.description,
            "recommended": algorithm == AlgorithmType.INTEGRATED,
        }
        for algorithm, factory in _FACTORIES.items()
    ]


def compare_algorithms(
    grid: Grid,
    first: Union[AlgorithmType, str],
    second: Union[AlgorithmType, str],
    first_options: Any = None,
    second_options: Any = None,
) -> Dict[str, Any]:
    """Run two solvers on the same grid and compare their results.

    A bare gradient navigator may raise ``NavigatorError``; that is not
    caught here.
    """
    first, second = _resolve(first), _resolve(second)
    result_1: PathfindingResult = create_solver(first, grid, first_options).find_path()
    result_2: PathfindingResult = create_solver(second, grid, second_options).find_path()

    return {
        "algorithm_1": {"type": first, "result": result_1},
        "algorithm_2": {"type": second, "result": result_2},
        "comparison": {
            "faster_algorithm": first if result_1.runtime < result_2.runtime else second,
            "shorter_path": first if result_1.path_length < result_2.path_length else second,
            "fewer_explored": first if result_1.explored_count < result_2.explored_count else second,
            "runtime_difference": abs(result_1.runtime - result_2.runtime),
            "path_length_difference": abs(result_1.path_length - result_2.path_length),
            "explored_count_difference": abs(result_1.explored_count - result_2.explored_count),
        },
    }
