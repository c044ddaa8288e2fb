# gradient_field/__init__.py

from gradient_field.dtypes import (
    CellMap,
    OccupancyMap,
    PotentialField,
    VectorField,
    CellType,
    SolverPhase,
    Point,
    Cell,
    GradientField,
    FieldGuidance,
    PathfindingResult,
    PathfindingStep,
    InteractiveStep,
)
from gradient_field.errors import (
    PathfindingError,
    InvalidConfigurationError,
    InvalidGridError,
    NavigatorError,
    StuckExhaustedError,
    NavigatorTimeoutError,
    CornerCutError,
)
from gradient_field.grid import Grid
from gradient_field.config import NavigatorConfig, SolverConfig, make_config, load_config
from gradient_field.field import (
    PotentialFieldBuilder,
    GradientFieldComputer,
    compute_guidance,
    sample_gradient_bilinear,
)
from gradient_field.navigator import GradientDescentNavigator, NavigationState, NavigatorPhase
from gradient_field.fallback import RingSearchFallback, RingSearchState
from gradient_field.solver import IntegratedSolver
from gradient_field.registry import (
    AlgorithmType,
    PRESETS,
    create_solver,
    create_preset_solver,
    available_algorithms,
    compare_algorithms,
)
from gradient_field.validation import (
    reachable_region,
    has_path,
    is_valid_path,
    path_cells,
    trajectory_cells,
    obstacle_density,
)
from gradient_field.grid_io import load_grid, load_grids, save_grid, parse_ascii, to_ascii


__version__ = "1.0.0"
__author__ = "Gradient Field Team"

__all__ = [
    # Type aliases
    "CellMap",
    "OccupancyMap",
    "PotentialField",
    "VectorField",
    # Data containers
    "CellType",
    "SolverPhase",
    "Point",
    "Cell",
    "GradientField",
    "FieldGuidance",
    "PathfindingResult",
    "PathfindingStep",
    "InteractiveStep",
    "Grid",
    # Errors
    "PathfindingError",
    "InvalidConfigurationError",
    "InvalidGridError",
    "NavigatorError",
    "StuckExhaustedError",
    "NavigatorTimeoutError",
    "CornerCutError",
    # Configuration
    "NavigatorConfig",
    "SolverConfig",
    "make_config",
    "load_config",
    # Fields
    "PotentialFieldBuilder",
    "GradientFieldComputer",
    "compute_guidance",
    "sample_gradient_bilinear",
    # Solvers
    "GradientDescentNavigator",
    "NavigationState",
    "NavigatorPhase",
    "RingSearchFallback",
    "RingSearchState",
    "IntegratedSolver",
    "AlgorithmType",
    "PRESETS",
    "create_solver",
    "create_preset_solver",
    "available_algorithms",
    "compare_algorithms",
    # Validation utilities
    "reachable_region",
    "has_path",
    "is_valid_path",
    "path_cells",
    "trajectory_cells",
    "obstacle_density",
    # Grid I/O
    "load_grid",
    "load_grids",
    "save_grid",
    "parse_ascii",
    "to_ascii",
]
