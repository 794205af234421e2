"""Engine configuration: every tolerance and threshold in one place.

All distances are viewport pixels; the level loader transforms geometry into
viewport space before any of these are applied.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from onestroke.config import Settings


@dataclass(frozen=True)
class TracerConfig:
    """Tuning knobs for graph construction and stroke tracking."""

    # Geometry sampling
    sample_step: float = 0.5

    # Vertex extraction
    close_epsilon: float = 1.0
    duplicate_tolerance: float = 8.0
    intersection_step: float = 5.0
    intersection_threshold: float = 4.0
    min_vertices: int = 3
    fallback_samples: int = 6
    fallback_duplicate_tolerance: float = 10.0

    # Graph construction
    merge_threshold: float = 15.0
    vertex_match_tolerance: float = 10.0
    edge_end_margin: float = 5.0
    min_edge_length: float = 1.0
    curve_threshold: float = 3.0

    # Stroke tracking
    tolerance: float = 16.0
    range_merge_gap: float = 2.0
    auto_complete_threshold: float = 0.8
    edge_complete_threshold: float = 0.95
    completion_threshold: float = 0.99
    junction_reach_factor: float = 2.0
    junction_escape_factor: float = 3.0
    min_direction_distance: float = 3.0
    min_alignment: float = 0.5
    alignment_tie: float = 0.05
    max_jump_factor: float = 2.0
    # How close to an end the stroke must get before it may turn onto the next edge
    corner_reach: float = 5.0

    # Failed → Idle delay (seconds)
    reset_delay: float = 1.5

    @property
    def junction_reach(self) -> float:
        return self.tolerance * self.junction_reach_factor

    @property
    def junction_escape(self) -> float:
        return self.tolerance * self.junction_escape_factor

    @classmethod
    def from_settings(cls, settings: Settings) -> TracerConfig:
        return replace(
            cls(),
            tolerance=settings.tolerance,
            completion_threshold=settings.completion_threshold,
            merge_threshold=settings.merge_threshold,
            reset_delay=settings.reset_delay,
        )
