"""Arc-length parameterisation of parsed path commands.

Each contiguous sub-path becomes a ``PathMetric``: its primitives are built
as svgpathtools segments, densely sampled, and the cumulative chord length of
the samples is the arc-length table every other component works in.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.spatial import cKDTree
from svgpathtools import Arc, CubicBezier, Line, Path, QuadraticBezier

from onestroke.svg.path_data import CommandKind, PathCommand
from onestroke.utils.geometry import Point, arc_lengths, as_array, nearest_index, unit

logger = logging.getLogger(__name__)

# Upper bound on samples per primitive, whatever its size
_MAX_SEGMENT_SAMPLES = 20000
_EPS = 1e-9


@dataclass(eq=False)
class PathMetric:
    """One continuous traceable sub-path."""

    index: int
    # svgpathtools primitives, in drawing order
    segments: list[Any]
    # Nx2 sampled positions
    points: NDArray[np.float64]
    # Cumulative arc length at each sample; distances[-1] == length
    distances: NDArray[np.float64]
    closed: bool = False
    _tree: cKDTree | None = field(default=None, init=False, repr=False)

    @property
    def length(self) -> float:
        if len(self.distances) == 0:
            return 0.0
        return float(self.distances[-1])

    @property
    def start(self) -> Point:
        return self.position_at(0.0)

    @property
    def end(self) -> Point:
        return self.position_at(self.length)

    @property
    def tree(self) -> cKDTree:
        if self._tree is None:
            self._tree = cKDTree(self.points)
        return self._tree

    def clamp(self, distance: float) -> float:
        return min(max(float(distance), 0.0), self.length)

    def position_at(self, distance: float) -> Point:
        if len(self.points) == 0:
            return Point(0.0, 0.0)
        d = self.clamp(distance)
        return Point(
            float(np.interp(d, self.distances, self.points[:, 0])),
            float(np.interp(d, self.distances, self.points[:, 1])),
        )

    def positions_at(self, distances: Sequence[float]) -> NDArray[np.float64]:
        d = np.clip(np.asarray(distances, dtype=np.float64), 0.0, self.length)
        return np.column_stack(
            [np.interp(d, self.distances, self.points[:, 0]), np.interp(d, self.distances, self.points[:, 1])]
        )

    def tangent_at(self, distance: float, span: float = 1.0) -> tuple[float, float]:
        """Unit direction of travel at ``distance``; zero vector if degenerate."""
        a = self.position_at(distance - span)
        b = self.position_at(distance + span)
        return unit(b.x - a.x, b.y - a.y)

    def distance_to(self, point: Sequence[float]) -> float:
        if len(self.points) == 0:
            return float("inf")
        dist, _ = self.tree.query((point[0], point[1]))
        return float(dist)

    def locate(
        self,
        point: Sequence[float],
        tolerance: float = float("inf"),
        start: float = 0.0,
        end: float | None = None,
    ) -> tuple[float, float] | None:
        """Closest arc-length position to ``point`` within [start, end].

        Returns (distance_along_path, gap) or None when nothing in range is
        within ``tolerance``.
        """
        if len(self.points) == 0:
            return None
        end = self.length if end is None else end
        i0 = int(np.searchsorted(self.distances, start, side="left"))
        i1 = int(np.searchsorted(self.distances, end, side="right"))
        candidates = self.points[i0:i1]
        offsets = self.distances[i0:i1]
        if len(candidates) == 0:
            candidates = self.positions_at([start, end])
            offsets = np.array([start, end])
        i, gap = nearest_index(candidates, point)
        if gap > tolerance:
            return None
        return (float(offsets[i]), gap)

    def extract_points(self, start: float, end: float) -> NDArray[np.float64]:
        """Polyline covering [start, end], for drawing a traced range."""
        start, end = self.clamp(start), self.clamp(end)
        if end < start:
            start, end = end, start
        inner = (self.distances > start) & (self.distances < end)
        head = np.array([self.position_at(start)])
        tail = np.array([self.position_at(end)])
        return np.vstack([head, self.points[inner], tail])

    def to_svg_path(self) -> Path:
        return Path(*self.segments)


def _c(p: Point) -> complex:
    return complex(p.x, p.y)


def _segment(current: Point, cmd: PathCommand) -> Any | None:
    """svgpathtools primitive for one command; None when it draws nothing."""
    kind = cmd.kind
    end = cmd.end
    if kind in (CommandKind.LINE_TO, CommandKind.HORIZONTAL_TO, CommandKind.VERTICAL_TO):
        if current.is_close(end, _EPS):
            return None
        return Line(_c(current), _c(end))

    if kind in (CommandKind.CUBIC_TO, CommandKind.SMOOTH_CUBIC_TO):
        pts = (current, cmd.control1, cmd.control2, end)
        if all(current.is_close(p, _EPS) for p in pts):
            return None
        return CubicBezier(*(_c(p) for p in pts))

    if kind in (CommandKind.QUADRATIC_TO, CommandKind.SMOOTH_QUADRATIC_TO):
        pts = (current, cmd.control1, end)
        if all(current.is_close(p, _EPS) for p in pts):
            return None
        return QuadraticBezier(*(_c(p) for p in pts))

    if kind is CommandKind.ARC_TO:
        if current.is_close(end, _EPS):
            return None
        rx, ry = cmd.radius or (0.0, 0.0)
        if rx < _EPS or ry < _EPS:
            return Line(_c(current), _c(end))
        try:
            return Arc(_c(current), complex(rx, ry), cmd.rotation, cmd.large_arc, cmd.sweep, _c(end))
        except (ValueError, ZeroDivisionError) as e:
            logger.debug("Degenerate arc treated as line: %s", e)
            return Line(_c(current), _c(end))

    return None


def split_subpaths(commands: list[PathCommand]) -> list[tuple[list[Any], bool]]:
    """Group primitives into sub-paths: (segments, closed) per contiguous run."""
    subpaths: list[tuple[list[Any], bool]] = []
    segments: list[Any] = []
    current = Point(0.0, 0.0)
    start = current

    def flush(closed: bool) -> None:
        nonlocal segments
        if segments:
            subpaths.append((segments, closed))
        segments = []

    for cmd in commands:
        if cmd.kind is CommandKind.MOVE_TO:
            flush(False)
            current = start = cmd.end
            continue
        if cmd.kind is CommandKind.CLOSE:
            if not current.is_close(start, _EPS):
                segments.append(Line(_c(current), _c(start)))
            flush(True)
            current = start
            continue
        seg = _segment(current, cmd)
        if seg is not None:
            segments.append(seg)
        current = cmd.end
    flush(False)
    return subpaths


def _approx_length(seg: Any) -> float:
    """Cheap upper bound on a primitive's length, for choosing a sample count."""
    if isinstance(seg, Line):
        return abs(seg.end - seg.start)
    if isinstance(seg, Arc):
        return max(seg.radius.real, seg.radius.imag) * math.radians(abs(seg.delta))
    pts = seg.bpoints()
    return float(sum(abs(b - a) for a, b in zip(pts, pts[1:])))


def sample_segment(seg: Any, step: float) -> NDArray[np.float64]:
    """Sample one primitive at roughly ``step`` spacing, endpoints included."""
    n = int(math.ceil(_approx_length(seg) / max(step, _EPS)))
    n = min(max(n, 1), _MAX_SEGMENT_SAMPLES)
    if isinstance(seg, Line):
        ts = np.linspace(0.0, 1.0, n + 1)
        z = seg.start + (seg.end - seg.start) * ts
    else:
        z = np.array([seg.point(float(t)) for t in np.linspace(0.0, 1.0, n + 1)], dtype=complex)
    return np.column_stack([z.real, z.imag])


def build_metric(index: int, segments: list[Any], closed: bool, step: float) -> PathMetric:
    chunks = []
    for i, seg in enumerate(segments):
        pts = sample_segment(seg, step)
        chunks.append(pts if i == 0 else pts[1:])
    points = np.vstack(chunks) if chunks else as_array([])
    return PathMetric(index=index, segments=segments, points=points, distances=arc_lengths(points), closed=closed)


def build_metrics(
    commands: list[PathCommand], sample_step: float = 0.5, first_index: int = 0
) -> list[PathMetric]:
    """One PathMetric per non-degenerate sub-path."""
    metrics: list[PathMetric] = []
    for segments, closed in split_subpaths(commands):
        metric = build_metric(first_index + len(metrics), segments, closed, sample_step)
        if metric.length < _EPS:
            continue
        metrics.append(metric)
    logger.debug("Built %d path metric(s), total length %.1f", len(metrics), total_length(metrics))
    return metrics


def total_length(metrics: Sequence[PathMetric]) -> float:
    return float(sum(m.length for m in metrics))


def distance_to_path(metrics: Sequence[PathMetric], point: Sequence[float]) -> float:
    """Shortest distance from ``point`` to any metric (inf if none)."""
    return min((m.distance_to(point) for m in metrics), default=float("inf"))
