"""Tests for arc-length sampling."""

import math

import numpy as np
import pytest

from tests.conftest import CIRCLE_D, RAY_STAR_D, SQUARE_D, WAVE_D

from onestroke.svg.path_data import parse_path_data
from onestroke.svg.sampler import build_metrics, distance_to_path, split_subpaths, total_length


def metrics_for(d: str, step: float = 0.5):
    return build_metrics(parse_path_data(d), step)


def test_square_length_and_positions():
    (metric,) = metrics_for(SQUARE_D)
    assert metric.closed
    assert metric.length == pytest.approx(400.0)
    assert metric.position_at(50) == pytest.approx((50.0, 0.0))
    assert metric.position_at(150) == pytest.approx((100.0, 50.0))
    assert metric.position_at(400) == pytest.approx((0.0, 0.0))


def test_position_clamps_outside_range():
    (metric,) = metrics_for(SQUARE_D)
    assert metric.position_at(-10) == pytest.approx((0.0, 0.0))
    assert metric.position_at(1000) == pytest.approx((0.0, 0.0))


def test_positions_are_continuous():
    (metric,) = metrics_for(WAVE_D)
    pts = metric.positions_at(np.linspace(0, metric.length, 500))
    steps = np.hypot(*np.diff(pts, axis=0).T)
    assert steps.max() <= metric.length / 499 + 1e-6


def test_circle_length():
    (metric,) = metrics_for(CIRCLE_D)
    assert metric.length == pytest.approx(2 * math.pi * 50, rel=1e-3)


def test_tangent_on_straight_run():
    (metric,) = metrics_for(SQUARE_D)
    assert metric.tangent_at(50) == pytest.approx((1.0, 0.0))
    assert metric.tangent_at(150) == pytest.approx((0.0, 1.0))


def test_each_moveto_starts_a_metric():
    metrics = metrics_for(RAY_STAR_D)
    assert len(metrics) == 4
    assert [m.index for m in metrics] == [0, 1, 2, 3]
    assert total_length(metrics) == pytest.approx(320.0)


def test_zero_length_subpaths_are_dropped():
    assert metrics_for("M 5 5 M 10 10 L 10 10") == []
    assert metrics_for("") == []


def test_zero_radius_arc_is_a_line():
    subpaths = split_subpaths(parse_path_data("M 0 0 A 0 0 0 0 1 10 0"))
    assert len(subpaths) == 1
    assert subpaths[0][1] is False
    (metric,) = metrics_for("M 0 0 A 0 0 0 0 1 10 0")
    assert metric.length == pytest.approx(10.0)


def test_locate_and_distance():
    (metric,) = metrics_for(SQUARE_D)
    distance, gap = metric.locate((30, 4))
    assert distance == pytest.approx(30.0)
    assert gap == pytest.approx(4.0)
    assert metric.locate((50, 50), tolerance=16) is None
    assert distance_to_path([metric], (50, -10)) == pytest.approx(10.0)


def test_locate_within_window():
    (metric,) = metrics_for(SQUARE_D)
    # (1, 1) is nearest the start, but the window excludes it
    distance, _ = metric.locate((1, 1), start=300, end=400)
    assert distance > 390


def test_extract_points_covers_range():
    (metric,) = metrics_for(SQUARE_D)
    pts = metric.extract_points(90, 110)
    assert tuple(pts[0]) == pytest.approx((90.0, 0.0))
    assert tuple(pts[-1]) == pytest.approx((100.0, 10.0))
    assert any(np.allclose(p, (100.0, 0.0)) for p in pts)


def test_to_svg_path_roundtrips_length():
    (metric,) = metrics_for(SQUARE_D)
    assert metric.to_svg_path().length() == pytest.approx(400.0)
