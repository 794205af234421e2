"""Geometry and stroke tracking for single-stroke tracing puzzles."""

from onestroke.utils.geometry import Point
from onestroke.engine.config import TracerConfig
from onestroke.svg.path_data import CommandKind, PathCommand, parse_path_data, to_path_data
from onestroke.svg.parser import SvgDocument, parse_svg
from onestroke.svg.transform import ViewportTransform
from onestroke.svg.sampler import PathMetric, build_metrics
from onestroke.svg.joints import analyze_joints, detect_joints, extract_vertices
from onestroke.engine.graph import Edge, GraphError, PathGraph, Vertex
from onestroke.engine.graph_builder import build_graph
from onestroke.engine.scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from onestroke.engine.level import Level, load_level
from onestroke.engine.tracker import FailureReason, StrokeSession, StrokeTracker, TrackerState

__all__ = [
    "Point",
    "TracerConfig",
    "CommandKind",
    "PathCommand",
    "parse_path_data",
    "to_path_data",
    "SvgDocument",
    "parse_svg",
    "ViewportTransform",
    "PathMetric",
    "build_metrics",
    "analyze_joints",
    "detect_joints",
    "extract_vertices",
    "Edge",
    "GraphError",
    "PathGraph",
    "Vertex",
    "build_graph",
    "AsyncioScheduler",
    "ManualScheduler",
    "Scheduler",
    "Level",
    "load_level",
    "FailureReason",
    "StrokeSession",
    "StrokeTracker",
    "TrackerState",
]
