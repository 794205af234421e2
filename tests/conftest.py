"""Shared test fixtures."""

from __future__ import annotations

import pytest

from onestroke.engine.config import TracerConfig
from onestroke.engine.level import Level
from onestroke.engine.scheduler import ManualScheduler
from onestroke.engine.tracker import StrokeTracker


# Path data

SQUARE_D = "M 0 0 L 100 0 L 100 100 L 0 100 Z"
SMALL_SQUARE_D = "M 0 0 L 10 0 L 10 10 L 0 10 Z"
TRIANGLE_D = "M 50 0 L 100 100 L 0 100 Z"
STAR_D = "M 100 50 L 120 90 L 160 90 L 130 110 L 145 150 L 100 125 L 55 150 L 70 110 L 40 90 L 80 90 Z"
# Four rays sharing a center vertex at (100, 100)
RAY_STAR_D = "M 100 100 L 100 20 M 100 100 L 180 100 M 100 100 L 100 180 M 100 100 L 20 100"
CIRCLE_D = "M 150 100 A 50 50 0 1 1 50 100 A 50 50 0 1 1 150 100 Z"
# Two crossing strokes with no shared command endpoint
CROSS_D = "M 0 50 L 100 50 M 50 0 L 50 100"
WAVE_D = "M 0 50 C 25 0 75 100 100 50"


# Level files

SQUARE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <path d="M 10 10 L 90 10 L 90 90 L 10 90 Z" fill="none" stroke="#000"/>
</svg>'''

HOUSE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="200" height="100">
  <path d="M 20 90 L 20 40 L 60 10 L 100 40 L 100 90 Z"/>
  <path d='M 50 90 L 50 60 L 70 60 L 70 90'/>
</svg>'''

NO_VIEWBOX_SVG = '''<svg xmlns="http://www.w3.org/2000/svg">
  <path d="M 0 0 L 50 50"/>
</svg>'''


@pytest.fixture
def config() -> TracerConfig:
    return TracerConfig()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def square_level() -> Level:
    return Level.from_path_data(SQUARE_D)


@pytest.fixture
def ray_star_level() -> Level:
    return Level.from_path_data(RAY_STAR_D)


@pytest.fixture
def square_tracker(square_level: Level, scheduler: ManualScheduler) -> StrokeTracker:
    return StrokeTracker(square_level, scheduler=scheduler)


@pytest.fixture
def ray_star_tracker(ray_star_level: Level, scheduler: ManualScheduler) -> StrokeTracker:
    return StrokeTracker(ray_star_level, scheduler=scheduler)


def walk(start: tuple[float, float], end: tuple[float, float], step: float = 5.0) -> list[tuple[float, float]]:
    """Evenly spaced points from start (exclusive) to end (inclusive)."""
    dx, dy = end[0] - start[0], end[1] - start[1]
    length = (dx * dx + dy * dy) ** 0.5
    n = max(1, int(round(length / step)))
    return [(start[0] + dx * i / n, start[1] + dy * i / n) for i in range(1, n + 1)]


def trace(tracker: StrokeTracker, corners: list[tuple[float, float]], step: float = 5.0) -> None:
    """Pointer down on the first corner, then move through the rest."""
    tracker.pointer_down(corners[0])
    for a, b in zip(corners, corners[1:]):
        for p in walk(a, b, step):
            tracker.pointer_move(p)
