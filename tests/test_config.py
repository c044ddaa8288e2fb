"""Tests for solver configuration."""

import pytest

from gradient_field.config import NavigatorConfig, SolverConfig, load_config, make_config
from gradient_field.errors import InvalidConfigurationError, PathfindingError


class TestDefaults:
    def test_navigator_defaults(self) -> None:
        config = NavigatorConfig()
        assert config.momentum_factor == 0.7
        assert config.repulsion_sigma == 1.5
        assert config.repulsion_strength == 10.0
        assert config.max_iterations == 1000
        assert config.goal_threshold == 0.5
        assert config.enable_randomness is True
        assert config.perturbation_strength == 2.0
        assert config.escape_attempts == 20
        assert config.seed is None

    def test_solver_defaults(self) -> None:
        config = SolverConfig()
        assert config.enable_fallback is True
        assert config.primary_timeout == 5000.0
        assert config.merge_stats is True
        assert config.seed_fallback_visited is False

    def test_navigator_config_projection(self) -> None:
        nav = SolverConfig(max_iterations=42, enable_fallback=False).navigator_config()
        assert type(nav) is NavigatorConfig
        assert nav.max_iterations == 42


class TestValidation:
    @pytest.mark.parametrize("overrides", [
        {"momentum_factor": 1.0},
        {"momentum_factor": -0.1},
        {"repulsion_sigma": 0.0},
        {"repulsion_strength": -1.0},
        {"max_iterations": 0},
        {"max_iterations": 10.5},
        {"goal_threshold": 0.0},
        {"perturbation_strength": -0.5},
        {"escape_attempts": -1},
        {"primary_timeout": 0.0},
    ])
    def test_rejects_malformed_values(self, overrides) -> None:
        with pytest.raises(InvalidConfigurationError):
            make_config(**overrides)

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            NavigatorConfig(momentum_factor=2.0)
        assert issubclass(InvalidConfigurationError, PathfindingError)

    def test_small_iteration_cap_allowed(self) -> None:
        assert NavigatorConfig(max_iterations=10).max_iterations == 10

    def test_unknown_option(self) -> None:
        with pytest.raises(InvalidConfigurationError, match="bogus"):
            make_config({"bogus": 1})


class TestMakeConfig:
    def test_from_mapping(self) -> None:
        config = make_config({"momentum_factor": 0.5}, max_iterations=200)
        assert config.momentum_factor == 0.5
        assert config.max_iterations == 200

    def test_from_navigator_config(self) -> None:
        config = make_config(NavigatorConfig(goal_threshold=1.0), enable_fallback=False)
        assert isinstance(config, SolverConfig)
        assert config.goal_threshold == 1.0
        assert config.enable_fallback is False


class TestLoadConfig:
    def test_defaults_without_file(self) -> None:
        assert load_config() == SolverConfig()

    def test_yaml_and_overrides(self, tmp_path) -> None:
        path = tmp_path / "solver.yaml"
        path.write_text("momentum_factor: 0.5\nmax_iterations: 2000\n")

        config = load_config(str(path), ["enable_fallback=false", "primary_timeout=250"])
        assert config.momentum_factor == 0.5
        assert config.max_iterations == 2000
        assert config.enable_fallback is False
        assert config.primary_timeout == 250.0

    def test_invalid_value_in_yaml(self, tmp_path) -> None:
        path = tmp_path / "solver.yaml"
        path.write_text("goal_threshold: -1.0\n")
        with pytest.raises(InvalidConfigurationError):
            load_config(str(path))
