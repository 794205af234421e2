"""Level loading: SVG text → viewport-space geometry → PathGraph.

Everything is built into a fresh ``Level`` before any tracker sees it, so a
reload swaps in complete state in one assignment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from onestroke.engine.config import TracerConfig
from onestroke.engine.graph import PathGraph
from onestroke.engine.graph_builder import build_graph
from onestroke.svg.joints import extract_vertices
from onestroke.svg.parser import SvgDocument, parse_svg
from onestroke.svg.path_data import PathCommand, parse_path_data, to_path_data
from onestroke.svg.sampler import PathMetric, build_metrics
from onestroke.svg.transform import ViewportTransform
from onestroke.utils.geometry import Point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Level:
    """One playable shape, already in viewport coordinates."""

    transform: ViewportTransform
    # Viewport-space commands, one list per <path>
    commands: list[list[PathCommand]] = field(default_factory=list)
    metrics: list[PathMetric] = field(default_factory=list)
    vertices: list[Point] = field(default_factory=list)
    graph: PathGraph = field(default_factory=PathGraph)

    @property
    def total_length(self) -> float:
        return self.graph.total_length

    @property
    def is_playable(self) -> bool:
        return self.total_length > 0

    def outline_path_data(self) -> list[str]:
        """Viewport-space ``d`` strings for drawing the untraced outline."""
        return [to_path_data(cmds) for cmds in self.commands]

    @classmethod
    def from_document(
        cls,
        document: SvgDocument,
        viewport_width: float,
        viewport_height: float,
        config: TracerConfig | None = None,
    ) -> Level:
        transform = ViewportTransform.fit(document.view_box, viewport_width, viewport_height)
        return _build(document.path_data, transform, config or TracerConfig())

    @classmethod
    def from_path_data(
        cls,
        path_data: str | Sequence[str],
        view_box: tuple[float, float, float, float] | None = None,
        viewport_width: float | None = None,
        viewport_height: float | None = None,
        config: TracerConfig | None = None,
    ) -> Level:
        """Level from bare ``d`` strings; without a viewBox and viewport, coordinates are used as-is."""
        if isinstance(path_data, str):
            path_data = [path_data]
        if view_box is None or viewport_width is None or viewport_height is None:
            transform = ViewportTransform()
        else:
            transform = ViewportTransform.fit(view_box, viewport_width, viewport_height)
        return _build(list(path_data), transform, config or TracerConfig())


def _build(path_data: list[str], transform: ViewportTransform, config: TracerConfig) -> Level:
    commands: list[list[PathCommand]] = []
    metrics: list[PathMetric] = []
    for d in path_data:
        cmds = transform.apply_commands(parse_path_data(d))
        if not cmds:
            continue
        commands.append(cmds)
        metrics.extend(build_metrics(cmds, config.sample_step, first_index=len(metrics)))

    all_commands = [c for cmds in commands for c in cmds]
    vertices = extract_vertices(all_commands, metrics, config) if metrics else []
    graph = build_graph(metrics, vertices, config)
    if not graph.edges:
        logger.warning("Level has no traceable geometry")
    return Level(transform=transform, commands=commands, metrics=metrics, vertices=vertices, graph=graph)


def load_level(
    svg_text: str,
    viewport_width: float,
    viewport_height: float,
    config: TracerConfig | None = None,
) -> Level:
    """Parse an SVG level file and fit it to the viewport."""
    return Level.from_document(parse_svg(svg_text), viewport_width, viewport_height, config)
