"""Tests for geometry helpers."""

import numpy as np

from onestroke.utils.geometry import Point, arc_lengths, as_array, nearest_index, unit


def test_point_helpers():
    a, b = Point(0, 0), Point(3, 4)
    assert a.distance_to(b) == 5.0
    assert a.is_close((0.0, 1e-9))
    assert not a.is_close(b, tolerance=4.9)
    assert a.midpoint(b) == Point(1.5, 2.0)


def test_arc_lengths():
    pts = as_array([(0, 0), (3, 4), (3, 10)])
    assert arc_lengths(pts).tolist() == [0.0, 5.0, 11.0]
    assert len(arc_lengths(as_array([]))) == 0
    assert as_array([]).shape == (0, 2)


def test_unit_of_zero_vector():
    assert unit(0.0, 0.0) == (0.0, 0.0)
    assert unit(0.0, -2.0) == (0.0, -1.0)


def test_nearest_index():
    pts = np.array([(0.0, 0.0), (10.0, 0.0)])
    assert nearest_index(pts, (8, 0)) == (1, 2.0)
    assert nearest_index(np.empty((0, 2)), (0, 0)) == (-1, float("inf"))
