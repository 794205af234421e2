"""PathGraph — vertices, edges and the metrics they are cut from.

Edge progress lives on the edges themselves as drawn ranges in the edge's own
arc-length units (0..length). Only the stroke tracker mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from onestroke.svg.sampler import PathMetric
from onestroke.utils.geometry import Point, unit

# Chord length used to judge which way an edge leaves a vertex
_TANGENT_PROBE = 8.0


class GraphError(LookupError):
    """Unknown vertex or edge id."""


@dataclass(eq=False)
class Vertex:
    id: int
    position: Point
    edge_ids: list[int] = field(default_factory=list)


@dataclass(eq=False)
class Edge:
    """Stretch of one metric between two vertices."""

    id: int
    start_vertex_id: int
    end_vertex_id: int
    metric_index: int
    start_distance: float
    end_distance: float
    metric: PathMetric = field(repr=False)
    is_curve: bool = False
    # Sorted, non-overlapping (start, end) pairs in 0..length
    drawn_ranges: list[tuple[float, float]] = field(default_factory=list)

    @property
    def length(self) -> float:
        return self.end_distance - self.start_distance

    @property
    def drawn_length(self) -> float:
        return sum(end - start for start, end in self.drawn_ranges)

    @property
    def completion(self) -> float:
        if self.length <= 0:
            return 1.0
        return min(1.0, max(0.0, self.drawn_length / self.length))

    def is_complete(self, threshold: float = 0.95) -> bool:
        return self.completion >= threshold

    def add_range(self, start: float, end: float, merge_gap: float = 2.0) -> None:
        """Record [start, end] as drawn, merging with ranges closer than ``merge_gap``."""
        if end < start:
            start, end = end, start
        start = min(max(start, 0.0), self.length)
        end = min(max(end, 0.0), self.length)
        if end <= start:
            return

        merged: list[tuple[float, float]] = []
        for r_start, r_end in self.drawn_ranges:
            if start <= r_end + merge_gap and end >= r_start - merge_gap:
                start, end = min(start, r_start), max(end, r_end)
            else:
                merged.append((r_start, r_end))
        merged.append((start, end))
        merged.sort()
        self.drawn_ranges = merged

    def reset(self) -> None:
        self.drawn_ranges = []

    def ends_at(self, vertex_id: int) -> list[float]:
        """Local positions (0 and/or length) where this edge touches ``vertex_id``."""
        ends = []
        if self.start_vertex_id == vertex_id:
            ends.append(0.0)
        if self.end_vertex_id == vertex_id:
            ends.append(self.length)
        return ends

    def vertex_at(self, local: float) -> int:
        """Vertex id at the end nearer to ``local``."""
        return self.start_vertex_id if local <= self.length / 2 else self.end_vertex_id

    def position_at(self, local: float) -> Point:
        local = min(max(local, 0.0), self.length)
        return self.metric.position_at(self.start_distance + local)

    def locate(
        self,
        point: Sequence[float],
        tolerance: float,
        near: float | None = None,
        max_jump: float | None = None,
    ) -> float | None:
        """Local position of ``point`` on this edge, or None if it is off the edge.

        With ``near``/``max_jump`` the answer must stay within ``max_jump`` of
        ``near``, so a U-shaped edge can't teleport between its arms.
        """
        hit = self.metric.locate(point, tolerance, self.start_distance, self.end_distance)
        if hit is None:
            return None
        local = hit[0] - self.start_distance
        if near is None or max_jump is None or abs(local - near) <= max_jump:
            return local
        lo = self.start_distance + max(0.0, near - max_jump)
        hi = self.start_distance + min(self.length, near + max_jump)
        hit = self.metric.locate(point, tolerance, lo, hi)
        return None if hit is None else hit[0] - self.start_distance

    def outward_tangent(self, local_end: float) -> tuple[float, float]:
        """Unit direction leaving the vertex at ``local_end`` along this edge."""
        probe = min(_TANGENT_PROBE, self.length / 2)
        if local_end <= self.length / 2:
            a, b = self.position_at(0.0), self.position_at(probe)
        else:
            a, b = self.position_at(self.length), self.position_at(self.length - probe)
        return unit(b.x - a.x, b.y - a.y)

    def points(self):
        """Sampled polyline of the whole edge."""
        return self.metric.extract_points(self.start_distance, self.end_distance)


@dataclass(frozen=True)
class EdgeHit:
    edge: Edge
    # Local position on the edge
    position: float
    # Screen distance from the query point
    gap: float


@dataclass(eq=False)
class PathGraph:
    vertices: list[Vertex] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    metrics: list[PathMetric] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.edges

    def vertex(self, vertex_id: int) -> Vertex:
        if 0 <= vertex_id < len(self.vertices) and self.vertices[vertex_id].id == vertex_id:
            return self.vertices[vertex_id]
        for v in self.vertices:
            if v.id == vertex_id:
                return v
        raise GraphError(f"Unknown vertex id: {vertex_id}")

    def edge(self, edge_id: int) -> Edge:
        if 0 <= edge_id < len(self.edges) and self.edges[edge_id].id == edge_id:
            return self.edges[edge_id]
        for e in self.edges:
            if e.id == edge_id:
                return e
        raise GraphError(f"Unknown edge id: {edge_id}")

    def edges_for_vertex(self, vertex_id: int) -> list[Edge]:
        return [self.edge(eid) for eid in dict.fromkeys(self.vertex(vertex_id).edge_ids)]

    def edges_for_metric(self, metric_index: int) -> list[Edge]:
        return sorted((e for e in self.edges if e.metric_index == metric_index), key=lambda e: e.start_distance)

    def nearest_vertex(self, point: Sequence[float], within: float = float("inf")) -> Vertex | None:
        best: Vertex | None = None
        best_dist = within
        for v in self.vertices:
            d = v.position.distance_to(point)
            if d <= best_dist:
                best, best_dist = v, d
        return best

    def distance_to_path(self, point: Sequence[float]) -> float:
        return min((m.distance_to(point) for m in self.metrics), default=float("inf"))

    def locate(self, point: Sequence[float], tolerance: float) -> EdgeHit | None:
        """Closest on-path position across every metric, as an edge hit."""
        best: tuple[PathMetric, float, float] | None = None
        for metric in self.metrics:
            hit = metric.locate(point, tolerance)
            if hit is not None and (best is None or hit[1] < best[2]):
                best = (metric, hit[0], hit[1])
        if best is None:
            return None
        metric, distance, gap = best
        for edge in self.edges_for_metric(metric.index):
            if edge.start_distance <= distance <= edge.end_distance:
                return EdgeHit(edge, distance - edge.start_distance, gap)
        return None

    @property
    def total_length(self) -> float:
        return sum(e.length for e in self.edges)

    @property
    def completion(self) -> float:
        """Length-weighted mean edge completion; an empty graph is vacuously complete."""
        total = self.total_length
        if total <= 0:
            return 1.0
        return sum(e.length * e.completion for e in self.edges) / total

    def reset(self) -> None:
        for edge in self.edges:
            edge.reset()

    @property
    def vertex_positions(self) -> list[Point]:
        return [v.position for v in self.vertices]

    @property
    def drawn_ranges(self) -> dict[int, list[tuple[float, float]]]:
        return {e.id: list(e.drawn_ranges) for e in self.edges}
