"""Read models handed to renderers after each pointer event."""

from __future__ import annotations

from pydantic import BaseModel, Field


class VertexSnapshot(BaseModel):
    id: int
    position: tuple[float, float]
    edge_ids: list[int] = Field(default_factory=list)


class EdgeSnapshot(BaseModel):
    id: int
    start_vertex_id: int
    end_vertex_id: int
    metric_index: int
    length: float
    is_curve: bool = False
    completion: float = 0.0
    # Local arc-length intervals already traced
    drawn_ranges: list[tuple[float, float]] = Field(default_factory=list)


class TracerSnapshot(BaseModel):
    state: str = "idle"
    is_drawing: bool = False
    is_completed: bool = False
    has_error: bool = False
    error_message: str | None = None
    failure_reason: str | None = None
    completion: float = 0.0
    active_edge_id: int | None = None
    vertices: list[VertexSnapshot] = Field(default_factory=list)
    edges: list[EdgeSnapshot] = Field(default_factory=list)
    trail: list[tuple[float, float]] = Field(default_factory=list)
