# gradient_field/config.py
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from omegaconf import DictConfig, OmegaConf

from .errors import InvalidConfigurationError


@dataclass
class NavigatorConfig:
    """Gradient descent navigator options.

    Recommended tuning ranges (not enforced):
        momentum_factor 0.0-0.95, repulsion_sigma 0.5-3.0,
        repulsion_strength 1.0-20.0, max_iterations 100-5000,
        goal_threshold 0.1-2.0.
    Only values that make the algorithm ill-defined are rejected.
    """

    momentum_factor: float = 0.7
    repulsion_sigma: float = 1.5
    repulsion_strength: float = 10.0
    max_iterations: int = 1000
    goal_threshold: float = 0.5
    enable_randomness: bool = True
    perturbation_strength: float = 2.0
    escape_attempts: int = 20
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        _check(0.0 <= self.momentum_factor < 1.0,
               f"momentum_factor must be in [0, 1), got {self.momentum_factor}")
        _check(self.repulsion_sigma > 0.0,
               f"repulsion_sigma must be > 0, got {self.repulsion_sigma}")
        _check(self.repulsion_strength >= 0.0,
               f"repulsion_strength must be >= 0, got {self.repulsion_strength}")
        _check(isinstance(self.max_iterations, int) and self.max_iterations >= 1,
               f"max_iterations must be a positive integer, got {self.max_iterations!r}")
        _check(self.goal_threshold > 0.0,
               f"goal_threshold must be > 0, got {self.goal_threshold}")
        _check(self.perturbation_strength >= 0.0,
               f"perturbation_strength must be >= 0, got {self.perturbation_strength}")
        _check(isinstance(self.escape_attempts, int) and self.escape_attempts >= 0,
               f"escape_attempts must be a non-negative integer, got {self.escape_attempts!r}")


@dataclass
class SolverConfig(NavigatorConfig):
    """Integrated solver options (navigator options plus orchestration)."""

    enable_fallback: bool = True
    primary_timeout: float = 5000.0     # milliseconds
    merge_stats: bool = True
    # Treat the navigator's trace as already visited in the fallback.
    # Voids the fallback's completeness guarantee if the trace is wrong.
    seed_fallback_visited: bool = False

    def validate(self) -> None:
        super().validate()
        _check(self.primary_timeout > 0,
               f"primary_timeout must be > 0 ms, got {self.primary_timeout}")

    def navigator_config(self) -> NavigatorConfig:
        fields = {f.name for f in dataclasses.fields(NavigatorConfig)}
        return NavigatorConfig(**{k: v for k, v in dataclasses.asdict(self).items() if k in fields})


def _check(condition: bool, message: str) -> None:
    if not condition:
        raise InvalidConfigurationError(message)


def make_config(
    options: Union[None, NavigatorConfig, Dict[str, Any]] = None,
    **overrides: Any,
) -> SolverConfig:
    """Build a SolverConfig from a config object, a mapping, or keywords."""
    if options is None:
        base: Dict[str, Any] = {}
    elif isinstance(options, NavigatorConfig):
        base = dataclasses.asdict(options)
    else:
        base = dict(options)
    base.update(overrides)

    known = {f.name for f in dataclasses.fields(SolverConfig)}
    unknown = sorted(set(base) - known)
    if unknown:
        raise InvalidConfigurationError(f"Unknown option(s): {', '.join(unknown)}")
    return SolverConfig(**base)


def load_config(
    path: Optional[str] = None,
    overrides: Optional[list[str]] = None,
) -> SolverConfig:
    """Load a SolverConfig from YAML with optional dotlist overrides.

    Example overrides: ["max_iterations=200", "enable_fallback=false"].
    """
    schema = OmegaConf.structured(SolverConfig)
    merged = schema
    if path is not None:
        merged = OmegaConf.merge(merged, OmegaConf.load(path))
    if overrides:
        merged = OmegaConf.merge(merged, OmegaConf.from_dotlist(overrides))
    return from_omegaconf(merged)


def from_omegaconf(cfg: DictConfig) -> SolverConfig:
    """Convert a (possibly larger) DictConfig into a validated SolverConfig."""
    container = OmegaConf.to_container(cfg, resolve=True)
    known = {f.name for f in dataclasses.fields(SolverConfig)}
    return make_config({k: v for k, v in container.items() if k in known})
