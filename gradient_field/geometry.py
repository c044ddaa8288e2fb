# gradient_field/geometry.py
from __future__ import annotations

import math
from typing import Tuple

from .dtypes import Point


# 4-connected offsets: up, down, left, right
NEIGHBOR_OFFSETS_4: Tuple[Tuple[int, int], ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def in_bounds(point: Point, width: int, height: int) -> bool:
    return 0 <= point.x < width and 0 <= point.y < height


def neighbors4(point: Point) -> Tuple[Point, ...]:
    """Axis neighbours in up, down, left, right order (no bounds check)."""
    return tuple(Point(point.x + dx, point.y + dy) for dx, dy in NEIGHBOR_OFFSETS_4)


def floor_cell(point: Point) -> Point:
    """Integer cell containing a continuous position."""
    return Point(math.floor(point.x), math.floor(point.y))


def manhattan_distance(a: Point, b: Point) -> float:
    return abs(a.x - b.x) + abs(a.y - b.y)


def euclidean_distance(a: Point, b: Point) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    return math.sqrt(dx * dx + dy * dy)


def add(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


def scale(v: Point, s: float) -> Point:
    return Point(v.x * s, v.y * s)


def magnitude(v: Point) -> float:
    return math.sqrt(v.x * v.x + v.y * v.y)


def normalize(v: Point) -> Point:
    """Unit vector in the direction of v; zero vector stays zero."""
    mag = magnitude(v)
    if mag == 0.0:
        return Point(0.0, 0.0)
    return Point(v.x / mag, v.y / mag)
