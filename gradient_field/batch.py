# gradient_field/batch.py
from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

import numpy as np
from tqdm import tqdm

from .config import SolverConfig, load_config
from .dtypes import PathfindingResult
from .grid_io import load_grids
from .solver import IntegratedSolver

logger = logging.getLogger(__name__)


class BatchResults(NamedTuple):
    """Per-grid outcomes of a batch run, one entry per grid."""
    sources: List[str]
    runtime: np.ndarray           # ms
    explored_count: np.ndarray
    path_length: np.ndarray
    success: np.ndarray
    used_fallback: np.ndarray


def summarize(values: Sequence[float]) -> Dict[str, float]:
    """mean/median/min/max/std of a sample (all zero when empty)."""
    array = np.asarray(values, dtype=np.float64)
    if array.size == 0:
        return {"mean": 0.0, "median": 0.0, "min": 0.0, "max": 0.0, "std": 0.0}
    return {
        "mean": float(np.mean(array)),
        "median": float(np.median(array)),
        "min": float(np.min(array)),
        "max": float(np.max(array)),
        "std": float(np.std(array)),
    }


def run_batch(
    paths: Sequence[str],
    config: Optional[SolverConfig] = None,
    show_progress: bool = True,
) -> BatchResults:
    """Solve every grid in ``paths`` (ASCII or ``.npz``) with the integrated solver."""
    config = config if config is not None else SolverConfig()

    jobs = []
    for path in paths:
        grids = load_grids(path)
        jobs.extend((f"{path}[{i}]" if len(grids) > 1 else str(path), grid)
                    for i, grid in enumerate(grids))
    logger.info("Loaded %d grid(s) from %d file(s)", len(jobs), len(paths))

    results: List[PathfindingResult] = []
    for _, grid in tqdm(jobs, desc="Solving", disable=not show_progress):
        results.append(IntegratedSolver(grid, config).find_path())

    return BatchResults(
        sources=[source for source, _ in jobs],
        runtime=np.array([r.runtime for r in results], dtype=np.float64),
        explored_count=np.array([r.explored_count for r in results], dtype=np.int64),
        path_length=np.array([r.path_length for r in results], dtype=np.int64),
        success=np.array([r.success for r in results], dtype=bool),
        used_fallback=np.array([r.used_fallback for r in results], dtype=bool),
    )


def aggregate(results: BatchResults) -> Dict[str, Any]:
    n = len(results.sources)
    solved = results.success
    return {
        "grids": n,
        "success_rate": float(solved.mean()) if n else 0.0,
        "fallback_rate": float(results.used_fallback.mean()) if n else 0.0,
        "runtime_ms": summarize(results.runtime),
        "explored_count": summarize(results.explored_count),
        "path_length": summarize(results.path_length[solved]),
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print aggregate statistics in a formatted table."""
    print("\n" + "=" * 60)
    print(f"Grids: {summary['grids']}  |  "
          f"Success: {summary['success_rate'] * 100:.1f}%  |  "
          f"Fallback: {summary['fallback_rate'] * 100:.1f}%")
    print("-" * 60)
    print(f"{'Metric':<15} | {'Mean':<9} | {'Median':<9} | {'Min':<9} | {'Max':<9} | {'Std':<9}")
    print("-" * 60)
    for name in ("runtime_ms", "explored_count", "path_length"):
        s = summary[name]
        print(f"{name:<15} | {s['mean']:<9.2f} | {s['median']:<9.2f} | "
              f"{s['min']:<9.2f} | {s['max']:<9.2f} | {s['std']:<9.2f}")
    print("=" * 60)


def save_results(results: BatchResults, output_path: str) -> None:
    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    np.savez_compressed(
        output_path,
        sources=np.array(results.sources),
        runtime=results.runtime,
        explored_count=results.explored_count,
        path_length=results.path_length,
        success=results.success,
        used_fallback=results.used_fallback,
    )
    logger.info("Batch results saved to: %s", output_path)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Command-line interface for batch solving."""
    parser = argparse.ArgumentParser(
        description="Gradient Field Pathfinding - Solve a batch of grids",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        python -m gradient_field.batch --grids mazes/open_room.txt mazes/corridor.txt

        python -m gradient_field.batch \\
            --grids data/mazes_032.npz \\
            --config scripts/config/preset/precise.yaml \\
            --override enable_fallback=false \\
            --output_path results/mazes_032_stats.npz
                """,
    )
    parser.add_argument(
        "--grids",
        type=str,
        nargs="+",
        required=True,
        help="ASCII grid files or .npz occupancy datasets",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with solver options",
    )
    parser.add_argument(
        "--override",
        type=str,
        nargs="*",
        default=[],
        help="Option overrides in key=value form",
    )
    parser.add_argument(
        "--output_path",
        type=str,
        default=None,
        help="Save per-grid results as compressed .npz",
    )
    parser.add_argument(
        "--no_progress",
        action="store_true",
        help="Disable progress bar",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    # Per-solve phase messages would drown the progress bar
    logging.getLogger("gradient_field.solver").setLevel(logging.WARNING)
    logging.getLogger("gradient_field.fallback").setLevel(logging.WARNING)

    config = load_config(args.config, args.override)
    results = run_batch(args.grids, config, show_progress=not args.no_progress)
    print_summary(aggregate(results))

    if args.output_path is not None:
        save_results(results, args.output_path)


if __name__ == "__main__":
    main()

# Example usage:
# python -m gradient_field.batch --grids mazes/open_room.txt mazes/corridor.txt
# python -m gradient_field.batch --grids data/mazes_032.npz --output_path results/mazes_032_stats.npz
