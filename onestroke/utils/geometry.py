"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

import numpy as np
from numpy.typing import NDArray


class Point(NamedTuple):
    x: float
    y: float

    def distance_to(self, other: Sequence[float]) -> float:
        return math.hypot(self.x - other[0], self.y - other[1])

    def is_close(self, other: Sequence[float], tolerance: float = 1e-6) -> bool:
        return self.distance_to(other) <= tolerance

    def midpoint(self, other: Sequence[float]) -> Point:
        return Point((self.x + other[0]) / 2, (self.y + other[1]) / 2)


def as_array(points: Sequence[Sequence[float]]) -> NDArray[np.float64]:
    """Nx2 float array; empty input gives shape (0, 2)."""
    if len(points) == 0:
        return np.empty((0, 2))
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def arc_lengths(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Cumulative arc-length along a point sequence."""
    if len(points) == 0:
        return np.empty(0)
    diffs = np.diff(points, axis=0)
    segment_lengths = np.sqrt(np.sum(diffs**2, axis=1))
    return np.concatenate([[0.0], np.cumsum(segment_lengths)])


def unit(dx: float, dy: float) -> tuple[float, float]:
    """Normalized (dx, dy); the zero vector stays zero."""
    norm = math.hypot(dx, dy)
    if norm < 1e-12:
        return (0.0, 0.0)
    return (dx / norm, dy / norm)


def nearest_index(points: NDArray[np.float64], point: Sequence[float]) -> tuple[int, float]:
    """Index of the closest row and its distance. (-1, inf) for no rows."""
    if len(points) == 0:
        return (-1, float("inf"))
    d = np.hypot(points[:, 0] - point[0], points[:, 1] - point[1])
    i = int(np.argmin(d))
    return (i, float(d[i]))
