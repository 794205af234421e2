"""StrokeTracker — pointer events in, traced ranges and session state out.

States: IDLE → ACTIVE → COMPLETED, or ACTIVE → FAILED → (after a delay) IDLE.

Only one edge is active at a time. A point is resolved on the active edge
alone; leaving it is allowed only when the edge is nearly done and the pointer
left near one of its ends, in which case the tracker finishes the edge and
picks the next one at the shared vertex by movement direction. Once the stroke
has run into an end, heading onto an untraced edge there switches to it even
while the pointer is still within reach of the old edge, so sharp corners
don't drag the position back along the finished edge. Starting on a vertex
where several edges meet defers that choice to the first movement.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from onestroke.engine.config import TracerConfig
from onestroke.engine.graph import Edge, PathGraph, Vertex
from onestroke.engine.level import Level
from onestroke.engine.scheduler import ManualScheduler, Scheduler
from onestroke.models.snapshot import EdgeSnapshot, TracerSnapshot, VertexSnapshot
from onestroke.utils.geometry import Point, unit

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class TrackerState(str, enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureReason(str, enum.Enum):
    OFF_PATH = "off_path"
    INCOMPLETE_STROKE = "incomplete_stroke"
    UNFINISHED_EDGE = "unfinished_edge"
    WRONG_TURN = "wrong_turn"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    FailureReason.OFF_PATH: "Stay on the line!",
    FailureReason.INCOMPLETE_STROKE: "Complete the full outline in one stroke!",
    FailureReason.UNFINISHED_EDGE: "Finish the current line first!",
    FailureReason.WRONG_TURN: "Follow an untraced line from the corner!",
}


@dataclass
class StrokeSession:
    """Per-stroke state; replaced wholesale on every pointer-down and reset."""

    trail: list[Point] = field(default_factory=list)
    active_edge_id: int | None = None
    # Local arc-length position on the active edge
    last_position: float | None = None
    # +1 toward the edge's end, -1 toward its start, 0 unknown
    direction: int = 0
    # End of the active edge the stroke last ran into; sticks while the pointer rounds the corner
    reached_end: float | None = None
    # Edge seeded by a mid-edge touch; may be left unfinished once and re-entered later
    seed_edge_id: int | None = None
    # An edge has been chosen at least once
    committed: bool = False
    # Vertex waiting for a direction before an edge is chosen
    pending_vertex_id: int | None = None
    anchor: Point | None = None
    finished_edges: set[int] = field(default_factory=set)
    error: str | None = None
    failure_reason: FailureReason | None = None
    completed: bool = False


@dataclass(frozen=True)
class _Candidate:
    score: float
    gap: float
    edge: Edge
    end: float
    position: float


class StrokeTracker:
    def __init__(
        self,
        source: Level | PathGraph | None = None,
        config: TracerConfig | None = None,
        scheduler: Scheduler | None = None,
        on_complete: Listener | None = None,
        on_reset: Listener | None = None,
    ) -> None:
        self.config = config or TracerConfig()
        self.scheduler: Scheduler = scheduler or ManualScheduler()
        self.graph = PathGraph()
        self.session = StrokeSession()
        self._state = TrackerState.IDLE
        # Bumped on every failure and reset; a deferred reset only fires if it still matches
        self._failure_id = 0
        self._complete_listeners: list[Listener] = []
        self._reset_listeners: list[Listener] = []
        if on_complete is not None:
            self._complete_listeners.append(on_complete)
        if on_reset is not None:
            self._reset_listeners.append(on_reset)
        if source is not None:
            self.load(source)

    # --- Setup ---

    def load(self, source: Level | PathGraph) -> None:
        """Swap in a new graph and a fresh session together."""
        graph = source.graph if isinstance(source, Level) else source
        self.graph = graph
        logger.debug("Loaded graph with %d edges", len(graph.edges))
        self.reset()

    def add_complete_listener(self, listener: Listener) -> None:
        self._complete_listeners.append(listener)

    def add_reset_listener(self, listener: Listener) -> None:
        self._reset_listeners.append(listener)

    # --- Pointer events ---

    def pointer_down(self, point: Sequence[float]) -> None:
        if self._state is TrackerState.COMPLETED or self.graph.is_empty:
            return
        p = Point(float(point[0]), float(point[1]))
        tolerance = self.config.tolerance
        if self.graph.distance_to_path(p) > tolerance:
            logger.debug("Pointer down off path at (%.1f, %.1f)", p.x, p.y)
            return

        junction = self.graph.nearest_vertex(p, within=tolerance)
        if junction is not None and self._edge_end_count(junction.id) < 2:
            junction = None
        hit = None
        if junction is None:
            hit = self.graph.locate(p, tolerance)
            if hit is None:
                return

        self.graph.reset()
        self.session = StrokeSession(trail=[p])
        self._failure_id += 1
        self._state = TrackerState.ACTIVE

        if junction is not None:
            self.session.pending_vertex_id = junction.id
            self.session.anchor = p
            logger.debug("Stroke started at vertex %d, waiting for direction", junction.id)
        else:
            edge = hit.edge
            nearer_end = 0.0 if hit.position <= edge.length / 2 else edge.length
            self._activate(edge, nearer_end, hit.position)
            self.session.seed_edge_id = edge.id
            logger.debug("Stroke started on edge %d at %.1f", edge.id, hit.position)
        self._check_completion()

    def pointer_move(self, point: Sequence[float]) -> None:
        if self._state is not TrackerState.ACTIVE:
            return
        p = Point(float(point[0]), float(point[1]))
        session = self.session
        step = p.distance_to(session.trail[-1]) if session.trail else 0.0
        session.trail.append(p)

        if self.graph.distance_to_path(p) > self.config.tolerance:
            self._fail(FailureReason.OFF_PATH)
            return

        if session.active_edge_id is None:
            self._resolve_junction(p)
        else:
            self._advance(p, step)

        if self._state is TrackerState.ACTIVE:
            self._check_completion()

    def pointer_up(self, point: Sequence[float] | None = None) -> None:
        if self._state is not TrackerState.ACTIVE:
            return
        if point is not None:
            self.session.trail.append(Point(float(point[0]), float(point[1])))
        if not self.session.committed:
            logger.debug("Pointer lifted before any edge was chosen")
        self._fail(FailureReason.INCOMPLETE_STROKE)

    def reset(self) -> None:
        """Back to IDLE with every range cleared. Unconditional."""
        self.graph.reset()
        self.session = StrokeSession()
        self._failure_id += 1
        self._state = TrackerState.IDLE
        for listener in list(self._reset_listeners):
            listener()

    # --- Internals ---

    def _edge_end_count(self, vertex_id: int) -> int:
        return sum(len(e.ends_at(vertex_id)) for e in self.graph.edges_for_vertex(vertex_id))

    def _activate(self, edge: Edge, start: float, position: float) -> None:
        session = self.session
        session.active_edge_id = edge.id
        session.pending_vertex_id = None
        session.anchor = None
        session.reached_end = None
        session.committed = True
        edge.add_range(start, position, self.config.range_merge_gap)
        session.last_position = position
        session.direction = 1 if position > start else -1 if position < start else 0

    def _may_leave(self, edge: Edge) -> bool:
        return edge.completion >= self.config.auto_complete_threshold or edge.id == self.session.seed_edge_id

    def _advance(self, p: Point, step: float) -> None:
        cfg = self.config
        session = self.session
        edge = self.graph.edge(session.active_edge_id)
        last = session.last_position if session.last_position is not None else 0.0

        if session.reached_end is not None and self._turn_corner(edge, p):
            return

        max_jump = cfg.max_jump_factor * (step + cfg.tolerance)
        local = edge.locate(p, cfg.tolerance, near=last, max_jump=max_jump)
        if local is not None:
            edge.add_range(last, local, cfg.range_merge_gap)
            if local != last:
                session.direction = 1 if local > last else -1
            session.last_position = local
            if session.reached_end is not None and abs(local - session.reached_end) > cfg.junction_reach:
                # Walked back along the edge rather than around a corner
                session.reached_end = None
            nearest = min((0.0, edge.length), key=lambda e: abs(e - local))
            if abs(nearest - local) <= cfg.corner_reach and self._may_leave(edge):
                session.reached_end = nearest
            return

        end = session.reached_end
        if end is None:
            end = min((0.0, edge.length), key=lambda e: abs(e - last))
            if not self._may_leave(edge) or abs(end - last) > cfg.junction_reach:
                logger.debug("Left edge %d at %.0f%% complete", edge.id, edge.completion * 100)
                self._fail(FailureReason.UNFINISHED_EDGE)
                return

        vertex = self._leave(edge, last, end)
        session.pending_vertex_id = vertex.id
        session.anchor = vertex.position
        self._resolve_junction(p)

    def _turn_corner(self, edge: Edge, p: Point) -> bool:
        """Switch onto an untraced edge at the reached end if the pointer heads into one."""
        cfg = self.config
        session = self.session
        end = session.reached_end
        vertex = self.graph.vertex(edge.vertex_at(end))
        anchor = vertex.position
        moved = anchor.distance_to(p)
        if moved < cfg.min_direction_distance:
            return False
        reach = cfg.max_jump_factor * (moved + cfg.tolerance)
        candidates = self._candidates(vertex.id, p, unit(p.x - anchor.x, p.y - anchor.y), reach)
        if not candidates:
            return False
        last = session.last_position if session.last_position is not None else end
        self._leave(edge, last, end)
        self._take(vertex.id, candidates)
        return True

    def _leave(self, edge: Edge, last: float, end: float) -> Vertex:
        """Close the active edge off at ``end``; returns the vertex there."""
        cfg = self.config
        session = self.session
        edge.add_range(last, end, cfg.range_merge_gap)
        if edge.completion >= cfg.auto_complete_threshold:
            session.finished_edges.add(edge.id)
        else:
            # Seeded side only; the rest of the edge can be entered later
            logger.debug("Left seeded edge %d open at %.0f%%", edge.id, edge.completion * 100)
        if session.seed_edge_id == edge.id:
            session.seed_edge_id = None
        session.active_edge_id = None
        session.last_position = None
        session.direction = 0
        session.reached_end = None
        vertex = self.graph.vertex(edge.vertex_at(end))
        logger.debug("Finished edge %d, at junction %d", edge.id, vertex.id)
        return vertex

    def _candidates(self, vertex_id: int, p: Point, move: tuple[float, float], reach: float) -> list[_Candidate]:
        cfg = self.config
        session = self.session
        found: list[_Candidate] = []
        for edge in self.graph.edges_for_vertex(vertex_id):
            if edge.id == session.active_edge_id or edge.id in session.finished_edges:
                continue
            if edge.is_complete(cfg.edge_complete_threshold):
                continue
            for end in edge.ends_at(vertex_id):
                local = edge.locate(p, cfg.tolerance, near=end, max_jump=reach)
                if local is None:
                    continue
                tx, ty = edge.outward_tangent(end)
                score = move[0] * tx + move[1] * ty
                if score < cfg.min_alignment:
                    continue
                gap = edge.position_at(local).distance_to(p)
                found.append(_Candidate(score, gap, edge, end, local))
        return found

    def _take(self, vertex_id: int, candidates: list[_Candidate]) -> None:
        best = max(c.score for c in candidates)
        chosen = min((c for c in candidates if c.score >= best - self.config.alignment_tie), key=lambda c: c.gap)
        logger.debug("Junction %d: edge %d chosen (alignment %.2f)", vertex_id, chosen.edge.id, chosen.score)
        self._activate(chosen.edge, chosen.end, chosen.position)

    def _resolve_junction(self, p: Point) -> None:
        """Pick the next edge at the pending vertex, or keep waiting."""
        cfg = self.config
        session = self.session
        anchor = session.anchor
        dx, dy = p.x - anchor.x, p.y - anchor.y
        moved = anchor.distance_to(p)
        if moved < cfg.min_direction_distance:
            return

        reach = cfg.max_jump_factor * (moved + cfg.tolerance)
        candidates = self._candidates(session.pending_vertex_id, p, unit(dx, dy), reach)
        if not candidates:
            if moved > cfg.junction_escape:
                self._fail(FailureReason.WRONG_TURN)
            return
        self._take(session.pending_vertex_id, candidates)

    def _check_completion(self) -> None:
        if self.graph.completion < self.config.completion_threshold:
            return
        self._state = TrackerState.COMPLETED
        self.session.completed = True
        self.session.active_edge_id = None
        self.session.pending_vertex_id = None
        logger.info("Stroke completed over %d edges", len(self.graph.edges))
        for listener in list(self._complete_listeners):
            listener()

    def _fail(self, reason: FailureReason) -> None:
        session = self.session
        session.error = reason.message
        session.failure_reason = reason
        session.active_edge_id = None
        session.pending_vertex_id = None
        self._state = TrackerState.FAILED
        self._failure_id += 1
        token, message = self._failure_id, reason.message
        logger.info("Stroke failed: %s (%.0f%% traced)", reason.value, self.completion * 100)
        self.scheduler.call_later(self.config.reset_delay, lambda: self._expire_failure(token, message))

    def _expire_failure(self, token: int, message: str) -> None:
        if self._state is TrackerState.FAILED and token == self._failure_id and self.session.error == message:
            self.reset()

    # --- Read API ---

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._state is TrackerState.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self._state is TrackerState.COMPLETED

    @property
    def has_error(self) -> bool:
        return self.session.error is not None

    @property
    def error_message(self) -> str | None:
        return self.session.error

    @property
    def failure_reason(self) -> FailureReason | None:
        return self.session.failure_reason

    @property
    def completion(self) -> float:
        return self.graph.completion

    @property
    def drawn_ranges(self) -> dict[int, list[tuple[float, float]]]:
        return self.graph.drawn_ranges

    @property
    def vertex_positions(self) -> list[Point]:
        return self.graph.vertex_positions

    @property
    def active_edge_id(self) -> int | None:
        return self.session.active_edge_id

    @property
    def trail(self) -> list[Point]:
        return list(self.session.trail)

    def snapshot(self) -> TracerSnapshot:
        return TracerSnapshot(
            state=self._state.value,
            is_drawing=self.is_drawing,
            is_completed=self.is_completed,
            has_error=self.has_error,
            error_message=self.error_message,
            failure_reason=self.failure_reason.value if self.failure_reason else None,
            completion=self.completion,
            active_edge_id=self.active_edge_id,
            vertices=[
                VertexSnapshot(id=v.id, position=(v.position.x, v.position.y), edge_ids=list(v.edge_ids))
                for v in self.graph.vertices
            ],
            edges=[
                EdgeSnapshot(
                    id=e.id,
                    start_vertex_id=e.start_vertex_id,
                    end_vertex_id=e.end_vertex_id,
                    metric_index=e.metric_index,
                    length=e.length,
                    is_curve=e.is_curve,
                    completion=e.completion,
                    drawn_ranges=list(e.drawn_ranges),
                )
                for e in self.graph.edges
            ],
            trail=[(t.x, t.y) for t in self.session.trail],
        )
