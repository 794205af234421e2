"""Cut path metrics into graph edges at the extracted vertices.

1. Cluster raw vertex candidates (first point anchors a cluster).
2. Per metric, find where each vertex sits along it. Every run of samples
   within the match tolerance gives one hit, so a vertex may be hit more
   than once (a closed outline hits its start vertex at 0 and at length).
3. Consecutive hits bound edges; stretches before the first hit and after
   the last are attached to the nearest vertex, so per metric the edges tile
   [0, length] with no gap and no overlap.
4. Edges whose samples stray from their chord are marked curved.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
import shapely
from shapely.geometry import LineString

from onestroke.engine.config import TracerConfig
from onestroke.engine.graph import Edge, PathGraph, Vertex
from onestroke.svg.sampler import PathMetric
from onestroke.utils.geometry import Point

logger = logging.getLogger(__name__)

# Samples per edge for the straight/curved check
_CURVE_SAMPLES = 9


def merge_vertices(points: Sequence[Sequence[float]], threshold: float) -> list[Point]:
    """Cluster points: each joins the nearest existing cluster within ``threshold``."""
    clusters: list[Point] = []
    for raw in points:
        p = Point(float(raw[0]), float(raw[1]))
        if clusters:
            nearest = min(clusters, key=p.distance_to)
            if p.distance_to(nearest) < threshold:
                continue
        clusters.append(p)
    return clusters


def vertex_hits(metric: PathMetric, vertices: Sequence[Vertex], tolerance: float) -> list[tuple[float, int]]:
    """(distance along metric, vertex id) for every pass of the metric near a vertex."""
    hits: list[tuple[float, int]] = []
    xs, ys = metric.points[:, 0], metric.points[:, 1]
    for v in vertices:
        d = np.hypot(xs - v.position.x, ys - v.position.y)
        inside = np.flatnonzero(d <= tolerance)
        if len(inside) == 0:
            continue
        runs = np.split(inside, np.flatnonzero(np.diff(inside) > 1) + 1)
        for run in runs:
            best = run[int(np.argmin(d[run]))]
            hits.append((float(metric.distances[best]), v.id))
    hits.sort()
    return hits


def is_curved(metric: PathMetric, start: float, end: float, threshold: float) -> bool:
    """True if the stretch deviates from its chord by more than ``threshold``."""
    samples = metric.positions_at(np.linspace(start, end, _CURVE_SAMPLES))
    p0, p1 = samples[0], samples[-1]
    if np.hypot(*(p1 - p0)) < 1e-9:
        deviation = float(np.max(np.hypot(samples[:, 0] - p0[0], samples[:, 1] - p0[1])))
    else:
        chord = LineString([tuple(p0), tuple(p1)])
        deviation = float(np.max(shapely.distance(chord, shapely.points(samples))))
    return deviation > threshold


class _Builder:
    def __init__(self, config: TracerConfig) -> None:
        self.config = config
        self.vertices: list[Vertex] = []
        self.edges: list[Edge] = []

    def add_vertex(self, position: Point) -> Vertex:
        vertex = Vertex(id=len(self.vertices), position=position)
        self.vertices.append(vertex)
        return vertex

    def vertex_for(self, position: Point) -> int:
        """Existing vertex within the merge threshold, else a new one."""
        nearest = min(self.vertices, key=lambda v: v.position.distance_to(position), default=None)
        if nearest is not None and nearest.position.distance_to(position) < self.config.merge_threshold:
            return nearest.id
        return self.add_vertex(position).id

    def add_edge(self, metric: PathMetric, start: tuple[float, int], end: tuple[float, int]) -> None:
        edge = Edge(
            id=len(self.edges),
            start_vertex_id=start[1],
            end_vertex_id=end[1],
            metric_index=metric.index,
            start_distance=start[0],
            end_distance=end[0],
            metric=metric,
            is_curve=is_curved(metric, start[0], end[0], self.config.curve_threshold),
        )
        self.edges.append(edge)
        self.vertices[edge.start_vertex_id].edge_ids.append(edge.id)
        self.vertices[edge.end_vertex_id].edge_ids.append(edge.id)

    def hits_for(self, metric: PathMetric) -> list[tuple[float, int]]:
        cfg = self.config
        length = metric.length
        hits: list[tuple[float, int]] = []
        for distance, vid in vertex_hits(metric, self.vertices, cfg.vertex_match_tolerance):
            if hits and distance - hits[-1][0] < cfg.min_edge_length:
                continue
            hits.append((distance, vid))

        if not hits:
            # Smooth sub-path with no detected corner: one edge end to end
            start_vid = self.vertex_for(metric.start)
            return [(0.0, start_vid), (length, self.vertex_for(metric.end))]

        # Leading stretch
        first_distance, first_vid = hits[0]
        if first_distance > cfg.edge_end_margin:
            vid = self.vertex_for(metric.start)
            if vid == first_vid:
                hits[0] = (0.0, first_vid)
            else:
                hits.insert(0, (0.0, vid))
        else:
            hits[0] = (0.0, first_vid)

        # Trailing stretch
        last_distance, last_vid = hits[-1]
        if len(hits) == 1:
            hits.append((length, self.vertex_for(metric.end)))
        elif last_distance < length - cfg.edge_end_margin:
            vid = self.vertex_for(metric.end)
            if vid == last_vid:
                hits[-1] = (length, last_vid)
            else:
                hits.append((length, vid))
        else:
            hits[-1] = (length, last_vid)
        return hits

    def build(self, metrics: Sequence[PathMetric], raw_vertices: Sequence[Sequence[float]]) -> PathGraph:
        for position in merge_vertices(raw_vertices, self.config.merge_threshold):
            self.add_vertex(position)
        for metric in metrics:
            if metric.length <= 0:
                continue
            hits = self.hits_for(metric)
            for start, end in zip(hits, hits[1:]):
                if end[0] > start[0]:
                    self.add_edge(metric, start, end)
        return PathGraph(vertices=self.vertices, edges=self.edges, metrics=list(metrics))


def build_graph(
    metrics: Sequence[PathMetric],
    raw_vertices: Sequence[Sequence[float]],
    config: TracerConfig | None = None,
) -> PathGraph:
    """Combine sampled metrics and vertex candidates into a PathGraph."""
    graph = _Builder(config or TracerConfig()).build(metrics, raw_vertices)
    logger.info(
        "Built path graph: %d vertices, %d edges over %d metric(s), length %.1f",
        len(graph.vertices),
        len(graph.edges),
        len(graph.metrics),
        graph.total_length,
    )
    return graph
