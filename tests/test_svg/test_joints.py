"""Tests for vertex extraction and joint analysis."""

import pytest

from tests.conftest import CIRCLE_D, CROSS_D, SMALL_SQUARE_D, SQUARE_D, STAR_D, TRIANGLE_D, WAVE_D

from onestroke.engine.config import TracerConfig
from onestroke.svg.joints import (
    analyze_joints,
    command_points,
    detect_joints,
    detect_near_intersections,
    extract_vertices,
    joint_segments,
    remove_consecutive_duplicates,
    remove_duplicates,
)
from onestroke.svg.path_data import parse_path_data
from onestroke.svg.sampler import build_metrics
from onestroke.utils.geometry import Point


class TestDetectJoints:
    def test_square_gives_corners_plus_closing_point(self):
        joints = detect_joints(SMALL_SQUARE_D)
        assert len(joints) == 5
        assert joints[0] == joints[-1] == Point(0, 0)

    def test_triangle(self):
        assert len(detect_joints(TRIANGLE_D)) == 4

    def test_star(self):
        assert len(detect_joints(STAR_D)) == 11

    def test_curves_contribute_endpoints_only(self):
        assert detect_joints(WAVE_D) == [Point(0, 50), Point(100, 50)]

    def test_control_points_on_request(self):
        joints = detect_joints(WAVE_D, include_control_points=True)
        assert joints == [Point(0, 50), Point(25, 0), Point(75, 100), Point(100, 50)]

    def test_empty(self):
        assert detect_joints("") == []


class TestDeduplication:
    def test_close_points_collapse(self):
        points = [Point(50, 50), Point(50.5, 50.5)]
        assert remove_duplicates(points, 1.0) == [Point(50, 50)]

    def test_distant_points_survive(self):
        points = [Point(50, 50), Point(100, 100), Point(150, 150)]
        assert remove_duplicates(points, 1.0) == points

    def test_greedy_checks_every_kept_point(self):
        points = [Point(0, 0), Point(20, 0), Point(0.5, 0)]
        assert remove_duplicates(points, 1.0) == [Point(0, 0), Point(20, 0)]
        assert remove_consecutive_duplicates(points, 1.0) == points

    def test_consecutive_collapse(self):
        points = [Point(0, 0), Point(0.05, 0), Point(10, 0)]
        assert remove_consecutive_duplicates(points, 0.1) == [Point(0, 0), Point(10, 0)]


def test_command_points_closing_point():
    assert len(command_points(parse_path_data(SQUARE_D))) == 5
    # Pen already back at the start: Z adds nothing
    assert len(command_points(parse_path_data("M 0 0 L 10 0 L 10 10 L 0 0 Z"))) == 4


def test_extract_square_vertices():
    cmds = parse_path_data(SQUARE_D)
    vertices = extract_vertices(cmds)
    assert vertices == [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]


def test_crossing_adds_intersection_vertex():
    cmds = parse_path_data(CROSS_D)
    metrics = build_metrics(cmds)
    crossings = detect_near_intersections(metrics)
    assert crossings
    assert all(p.distance_to((50, 50)) < 4 for p in crossings)

    vertices = extract_vertices(cmds, metrics)
    assert any(v.distance_to((50, 50)) < 4 for v in vertices)
    assert len(vertices) == 5


def test_featureless_shape_falls_back_to_sampling():
    cmds = parse_path_data(CIRCLE_D)
    vertices = extract_vertices(cmds, config=TracerConfig())
    assert len(vertices) >= 3
    for v in vertices:
        assert v.distance_to((100, 100)) == pytest.approx(50.0, abs=0.5)


class TestAnalyzeJoints:
    def test_bounding_box_and_center(self):
        analysis = analyze_joints("M 0 0 L 100 0 L 100 100 L 0 100")
        assert analysis.bounding_box == (0.0, 0.0, 100.0, 100.0)
        assert analysis.center == Point(50.0, 50.0)

    def test_segments(self):
        analysis = analyze_joints(SQUARE_D)
        assert len(analysis.segments) == 4
        assert analysis.total_length == pytest.approx(400.0)
        first = analysis.segments[0]
        assert first.direction == pytest.approx((1.0, 0.0))
        assert first.angle == pytest.approx(0.0)
        assert first.midpoint == Point(50.0, 0.0)

    def test_empty(self):
        analysis = analyze_joints("")
        assert analysis.joints == []
        assert analysis.bounding_box is None
        assert analysis.center is None

    def test_joint_segments_of_single_point(self):
        assert joint_segments([Point(1, 1)]) == []
