# gradient_field/field.py
from __future__ import annotations

import math
from collections import deque
from typing import Tuple

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from .config import NavigatorConfig
from .dtypes import FieldGuidance, GradientField, PotentialField, Point
from .grid import Grid



# Constants

# Repulsion is truncated at this many standard deviations (Chebyshev radius)
_REPULSION_TRUNCATE_SIGMAS: float = 3.0


class PotentialFieldBuilder:
    """Wavefront distance-to-goal potential with Gaussian wall repulsion."""

    def __init__(self, sigma: float = 1.5, strength: float = 10.0):
        self.sigma = sigma
        self.strength = strength

    @staticmethod
    def _wavefront(grid: Grid) -> PotentialField:
        """Breadth-first distance from the goal over walkable 4-neighbours."""
        H, W = grid.shape
        potential = np.full((H, W), np.inf, dtype=np.float64)
        goal = grid.goal

        potential[goal.y, goal.x] = 0.0
        queue = deque([goal])

        while queue:
            point = queue.popleft()
            value = potential[point.y, point.x] + 1.0
            for neighbor in grid.walkable_neighbors(point):
                if value < potential[neighbor.y, neighbor.x]:
                    potential[neighbor.y, neighbor.x] = value
                    queue.append(neighbor)

        return potential

    def repulsion_kernel(self) -> NDArray[np.float64]:
        """Gaussian bump sampled on a (2r+1)x(2r+1) window, r = ceil(3 sigma)."""
        radius = int(math.ceil(self.sigma * _REPULSION_TRUNCATE_SIGMAS))
        offsets = np.arange(-radius, radius + 1, dtype=np.float64)
        dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
        dist_sq = dx**2 + dy**2
        return self.strength * np.exp(-dist_sq / (2.0 * self.sigma**2))

    def repulsion(self, grid: Grid) -> NDArray[np.float64]:
        """Sum of wall bumps at every cell.

        Convolving the wall mask with the (symmetric) kernel adds one bump per
        wall cell; zero padding drops contributions from outside the grid.
        """
        walls = grid.wall_mask().astype(np.float64)
        if not walls.any():
            return np.zeros(grid.shape, dtype=np.float64)
        return ndimage.convolve(walls, self.repulsion_kernel(), mode="constant", cval=0.0)

    def build(self, grid: Grid) -> PotentialField:
        potential = self._wavefront(grid)

        # Walls and unreachable cells keep +inf
        finite = np.isfinite(potential)
        potential[finite] += self.repulsion(grid)[finite]
        return potential


class GradientFieldComputer:
    """Central-difference descent direction of a potential field."""

    @staticmethod
    def _partial(
        potential: PotentialField,
        axis: int,
    ) -> NDArray[np.float64]:
        """Clamped central difference along one axis (0 = y, 1 = x).

        Normalized by 2 * max(span, 1) where span is the clamped sample
        distance. Infinite samples give 0.
        """
        n = potential.shape[axis]
        idx = np.arange(n)
        lo = np.clip(idx - 1, 0, n - 1)
        hi = np.clip(idx + 1, 0, n - 1)
        span = np.maximum(hi - lo, 1).astype(np.float64)

        val_lo = np.take(potential, lo, axis=axis)
        val_hi = np.take(potential, hi, axis=axis)

        # Broadcast span along the other axis
        span_shape = [1, 1]
        span_shape[axis] = n
        denom = 2.0 * span.reshape(span_shape)

        valid = np.isfinite(val_lo) & np.isfinite(val_hi)
        with np.errstate(invalid="ignore"):
            diff = np.where(valid, val_hi - val_lo, 0.0)
        return diff / denom

    @classmethod
    def compute(cls, potential: PotentialField, grid: Grid) -> GradientField:
        grad_x = cls._partial(potential, axis=1)
        grad_y = cls._partial(potential, axis=0)

        # Negate: gradient points uphill (away from goal), we want downhill
        vec_x = -grad_x
        vec_y = -grad_y

        # Undefined on walls
        walls = grid.wall_mask()
        vec_x[walls] = 0.0
        vec_y[walls] = 0.0
        return GradientField(vec_x=vec_x, vec_y=vec_y)


def compute_guidance(grid: Grid, config: NavigatorConfig) -> FieldGuidance:
    """Build the potential field and its gradient for one grid."""
    builder = PotentialFieldBuilder(
        sigma=config.repulsion_sigma,
        strength=config.repulsion_strength,
    )
    potential = builder.build(grid)
    gradient = GradientFieldComputer.compute(potential, grid)
    return FieldGuidance(potential=potential, gradient=gradient)


def sample_gradient_bilinear(
    gradient: GradientField,
    position: Point,
) -> Tuple[float, float]:
    """Sample the gradient field at a continuous (x, y) position.

    Positions whose floored cell lies outside [0, W-1) x [0, H-1) have no
    complete 2x2 neighbourhood and sample as the zero vector.
    """
    vec_x, vec_y = gradient
    H, W = vec_x.shape

    x0 = math.floor(position.x)
    y0 = math.floor(position.y)
    if x0 < 0 or x0 >= W - 1 or y0 < 0 or y0 >= H - 1:
        return 0.0, 0.0

    x1 = x0 + 1
    y1 = y0 + 1
    fx = position.x - x0
    fy = position.y - y0

    # Bilinear interpolation weights
    w00 = (1 - fx) * (1 - fy)
    w10 = fx * (1 - fy)
    w01 = (1 - fx) * fy
    w11 = fx * fy

    vx = w00 * vec_x[y0, x0] + w10 * vec_x[y0, x1] + \
         w01 * vec_x[y1, x0] + w11 * vec_x[y1, x1]
    vy = w00 * vec_y[y0, x0] + w10 * vec_y[y0, x1] + \
         w01 * vec_y[y1, x0] + w11 * vec_y[y1, x1]

    return float(vx), float(vy)
