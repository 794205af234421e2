"""ViewBox → viewport mapping: one uniform scale, centered.

The same transform is applied to commands (and so to every sampled point and
extracted vertex), which keeps the graph and the rendered outline aligned.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from onestroke.svg.path_data import PathCommand
from onestroke.utils.geometry import Point


@dataclass(frozen=True)
class ViewportTransform:
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    # viewBox origin, subtracted before scaling
    origin_x: float = 0.0
    origin_y: float = 0.0

    @classmethod
    def fit(
        cls,
        view_box: tuple[float, float, float, float],
        viewport_width: float,
        viewport_height: float,
    ) -> ViewportTransform:
        """Largest uniform scale that fits the viewBox, centered in the viewport."""
        min_x, min_y, vb_width, vb_height = view_box
        if vb_width <= 0 or vb_height <= 0:
            return cls(origin_x=min_x, origin_y=min_y)
        scale = min(viewport_width / vb_width, viewport_height / vb_height)
        return cls(
            scale=scale,
            offset_x=(viewport_width - vb_width * scale) / 2,
            offset_y=(viewport_height - vb_height * scale) / 2,
            origin_x=min_x,
            origin_y=min_y,
        )

    def apply_point(self, point: Sequence[float]) -> Point:
        return Point(
            (point[0] - self.origin_x) * self.scale + self.offset_x,
            (point[1] - self.origin_y) * self.scale + self.offset_y,
        )

    def apply_points(self, points: Sequence[Sequence[float]]) -> list[Point]:
        return [self.apply_point(p) for p in points]

    def invert_point(self, point: Sequence[float]) -> Point:
        if self.scale == 0:
            return Point(self.origin_x, self.origin_y)
        return Point(
            (point[0] - self.offset_x) / self.scale + self.origin_x,
            (point[1] - self.offset_y) / self.scale + self.origin_y,
        )

    def apply_command(self, cmd: PathCommand) -> PathCommand:
        return replace(
            cmd,
            end=self.apply_point(cmd.end),
            control1=self.apply_point(cmd.control1) if cmd.control1 is not None else None,
            control2=self.apply_point(cmd.control2) if cmd.control2 is not None else None,
            radius=(cmd.radius[0] * self.scale, cmd.radius[1] * self.scale) if cmd.radius else None,
        )

    def apply_commands(self, commands: Sequence[PathCommand]) -> list[PathCommand]:
        return [self.apply_command(c) for c in commands]
