"""Vertex (joint) extraction from path commands.

Two consumers:

* the gameplay graph, via ``extract_vertices``: on-path endpoints only,
  aggressively deduplicated, augmented with points where separate
  sub-paths touch, with an even-sampling fallback for featureless shapes;
* debug/visual tooling, via ``detect_joints`` / ``analyze_joints``: a
  literal endpoint list (optionally with curve control points) that only
  collapses consecutive repeats.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np
from scipy.spatial import cKDTree
from shapely.geometry import MultiPoint

from onestroke.engine.config import TracerConfig
from onestroke.svg.path_data import CommandKind, PathCommand, parse_path_data
from onestroke.svg.sampler import PathMetric, build_metrics
from onestroke.utils.geometry import Point

logger = logging.getLogger(__name__)


def command_points(
    commands: Sequence[PathCommand],
    include_control_points: bool = False,
    close_epsilon: float = 1.0,
) -> list[Point]:
    """Every endpoint a command produces, in drawing order.

    Curves contribute only their terminal point unless control points are
    requested. ``Z`` contributes the sub-path start when the pen is farther
    than ``close_epsilon`` from it.
    """
    points: list[Point] = []
    current = Point(0.0, 0.0)
    start = current
    for cmd in commands:
        if cmd.kind is CommandKind.CLOSE:
            if current.distance_to(start) > close_epsilon:
                points.append(start)
            current = start
            continue
        if include_control_points:
            points.extend(cmd.control_points)
        points.append(cmd.end)
        current = cmd.end
        if cmd.kind is CommandKind.MOVE_TO:
            start = cmd.end
    return points


def remove_duplicates(points: Sequence[Point], tolerance: float) -> list[Point]:
    """Greedy dedupe: keep a point only if it is ``tolerance`` away from all kept points."""
    kept: list[Point] = []
    for raw in points:
        p = Point(float(raw[0]), float(raw[1]))
        if all(p.distance_to(k) >= tolerance for k in kept):
            kept.append(p)
    return kept


def remove_consecutive_duplicates(points: Sequence[Point], tolerance: float) -> list[Point]:
    """Drop a point only when it is within ``tolerance`` of the last kept one."""
    kept: list[Point] = []
    for raw in points:
        p = Point(float(raw[0]), float(raw[1]))
        if not kept or p.distance_to(kept[-1]) > tolerance:
            kept.append(p)
    return kept


def _sample_evenly(metric: PathMetric, step: float, minimum: int = 5) -> np.ndarray:
    count = max(minimum, int(math.ceil(metric.length / step)))
    return metric.positions_at(np.linspace(0.0, metric.length, count))


def detect_near_intersections(
    metrics: Sequence[PathMetric], step: float = 5.0, threshold: float = 4.0
) -> list[Point]:
    """Midpoints where two different sub-paths pass within ``threshold``.

    Catches lattices and crossings whose sub-paths touch without sharing a
    command endpoint.
    """
    if len(metrics) < 2:
        return []
    samples = [_sample_evenly(m, step) for m in metrics]
    trees = [cKDTree(s) for s in samples]
    found: list[Point] = []
    for i in range(len(metrics)):
        for j in range(i + 1, len(metrics)):
            pairs = trees[i].query_ball_tree(trees[j], r=threshold)
            for a, neighbours in enumerate(pairs):
                for b in neighbours:
                    p, q = samples[i][a], samples[j][b]
                    found.append(Point(float(p[0] + q[0]) / 2, float(p[1] + q[1]) / 2))
    return found


def fallback_vertices(metrics: Sequence[PathMetric], count: int = 6, tolerance: float = 10.0) -> list[Point]:
    """Evenly spaced points per sub-path, for shapes with no usable corners."""
    points: list[Point] = []
    for metric in metrics:
        for x, y in metric.positions_at(np.linspace(0.0, metric.length, count)):
            points.append(Point(float(x), float(y)))
    return remove_duplicates(points, tolerance)


def extract_vertices(
    commands: Sequence[PathCommand],
    metrics: Sequence[PathMetric] | None = None,
    config: TracerConfig | None = None,
    include_control_points: bool = False,
) -> list[Point]:
    """Candidate graph vertices for one shape."""
    config = config or TracerConfig()
    if metrics is None:
        metrics = build_metrics(list(commands), config.sample_step)

    raw = command_points(commands, include_control_points, config.close_epsilon)
    vertices = remove_duplicates(raw, config.duplicate_tolerance)

    crossings = detect_near_intersections(metrics, config.intersection_step, config.intersection_threshold)
    if crossings:
        vertices = remove_duplicates(vertices + crossings, config.duplicate_tolerance)

    if len(vertices) < config.min_vertices:
        logger.debug("Only %d vertices found, sampling path evenly", len(vertices))
        vertices = fallback_vertices(metrics, config.fallback_samples, config.fallback_duplicate_tolerance)

    logger.debug(
        "Extracted %d vertices (%d raw, %d crossing candidates)", len(vertices), len(raw), len(crossings)
    )
    return vertices


# --- Joint analysis (debug / visualisation) ---


@dataclass(frozen=True)
class JointSegment:
    start: Point
    end: Point
    index: int

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> Point:
        length = self.length
        if length == 0:
            return Point(0.0, 0.0)
        return Point((self.end.x - self.start.x) / length, (self.end.y - self.start.y) / length)

    @property
    def angle(self) -> float:
        """Radians, 0 = pointing along +x."""
        return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)

    @property
    def midpoint(self) -> Point:
        return self.start.midpoint(self.end)


@dataclass(frozen=True)
class JointAnalysis:
    joints: list[Point] = field(default_factory=list)
    segments: list[JointSegment] = field(default_factory=list)
    total_length: float = 0.0
    # (xmin, ymin, xmax, ymax)
    bounding_box: tuple[float, float, float, float] | None = None

    @property
    def center(self) -> Point | None:
        if self.bounding_box is None:
            return None
        xmin, ymin, xmax, ymax = self.bounding_box
        return Point((xmin + xmax) / 2, (ymin + ymax) / 2)


def detect_joints(
    path_data: str,
    include_control_points: bool = False,
    duplicate_tolerance: float = 0.1,
) -> list[Point]:
    """Literal joint list of a ``d`` string; a closed square gives 4 corners + the closing point."""
    commands = parse_path_data(path_data)
    return remove_consecutive_duplicates(
        command_points(commands, include_control_points, close_epsilon=0.0), duplicate_tolerance
    )


def joint_segments(joints: Sequence[Point]) -> list[JointSegment]:
    return [JointSegment(joints[i], joints[i + 1], i) for i in range(len(joints) - 1)]


def analyze_joints(
    path_data: str,
    include_control_points: bool = False,
    duplicate_tolerance: float = 0.1,
) -> JointAnalysis:
    joints = detect_joints(path_data, include_control_points, duplicate_tolerance)
    segments = joint_segments(joints)
    bounds = MultiPoint([tuple(j) for j in joints]).bounds if joints else None
    return JointAnalysis(
        joints=joints,
        segments=segments,
        total_length=sum(s.length for s in segments),
        bounding_box=tuple(float(b) for b in bounds) if bounds else None,
    )
