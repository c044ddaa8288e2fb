# scripts/solve.py
from __future__ import annotations

import logging
import os
import sys

import hydra
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

# Prefer the local package over any globally installed gradient_field
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

from gradient_field.config import from_omegaconf
from gradient_field.grid_io import load_grid, to_ascii
from gradient_field.registry import AlgorithmType, create_solver
from gradient_field.validation import path_cells

logger = logging.getLogger(__name__)


def _render(grid, path) -> str:
    """ASCII grid with the path drawn as '*'."""
    rows = [list(line) for line in to_ascii(grid).splitlines()]
    for cell in path_cells(path):
        if rows[cell.y][cell.x] == ".":
            rows[cell.y][cell.x] = "*"
    return "\n".join("".join(row) for row in rows)


@hydra.main(config_path="config", config_name="solve", version_base="1.3")
def main(config: DictConfig) -> None:
    logger.info("Configuration:\n%s", OmegaConf.to_yaml(config))

    grid = load_grid(to_absolute_path(config.grid), index=config.index)
    grid.validate()
    options = from_omegaconf(config)
    algorithm = AlgorithmType(config.algorithm)
    solver = create_solver(algorithm, grid, options)

    if config.stream:
        for step in solver.step_iterator():
            print(f"{step.iteration:>5} | {step.message}")
        return

    result = solver.find_path()

    print("\n" + "=" * 60)
    print(f"Algorithm     : {result.algorithm_name}")
    print(f"Success       : {result.success}")
    print(f"Used fallback : {result.used_fallback}")
    print(f"Path length   : {result.path_length}")
    print(f"Explored      : {result.explored_count}")
    print(f"Runtime (ms)  : {result.runtime:.2f}")
    print("-" * 60)
    print(_render(grid, result.path))
    print("=" * 60)


if __name__ == "__main__":
    main()

# Usage:
# python scripts/solve.py grid=mazes/open_room.txt
# python scripts/solve.py grid=mazes/corridor.txt preset=precise
# python scripts/solve.py grid=mazes/corridor.txt preset=fast algorithm=gradient enable_randomness=false
# python scripts/solve.py grid=data/mazes_032.npz index=3 stream=true
