"""Tests for the viewBox → viewport transform."""

import pytest

from onestroke.svg.path_data import parse_path_data
from onestroke.svg.transform import ViewportTransform
from onestroke.utils.geometry import Point


def test_fit_wide_viewport_centers_horizontally():
    t = ViewportTransform.fit((0, 0, 100, 100), 400, 200)
    assert t.scale == 2.0
    assert t.offset_x == 100.0
    assert t.offset_y == 0.0
    assert t.apply_point((0, 0)) == Point(100.0, 0.0)
    assert t.apply_point((100, 100)) == Point(300.0, 200.0)


def test_fit_honours_viewbox_origin():
    t = ViewportTransform.fit((-50, -50, 100, 100), 100, 100)
    assert t.apply_point((-50, -50)) == Point(0.0, 0.0)
    assert t.apply_point((0, 0)) == Point(50.0, 50.0)


def test_degenerate_viewbox_is_identity_scale():
    t = ViewportTransform.fit((0, 0, 0, 100), 300, 300)
    assert t.scale == 1.0
    assert t.apply_point((5, 5)) == Point(5.0, 5.0)


def test_invert_point():
    t = ViewportTransform.fit((10, 20, 50, 100), 300, 300)
    p = t.apply_point((35, 70))
    assert t.invert_point(p) == pytest.approx((35.0, 70.0))


def test_apply_commands_scales_controls_and_radii():
    t = ViewportTransform(scale=3.0, offset_x=1.0)
    cmds = t.apply_commands(parse_path_data("M 0 0 Q 1 1 2 0 A 5 4 0 0 1 10 0"))
    assert cmds[0].end == Point(1.0, 0.0)
    assert cmds[1].control1 == Point(4.0, 3.0)
    assert cmds[2].radius == (15.0, 12.0)
    assert cmds[2].end == Point(31.0, 0.0)
