"""Tests for the SVG document reader."""

from tests.conftest import HOUSE_SVG, NO_VIEWBOX_SVG, SQUARE_SVG

from onestroke.svg.parser import DEFAULT_VIEWBOX, parse_svg, parse_view_box


def test_parse_square():
    doc = parse_svg(SQUARE_SVG)
    assert doc.view_box == (0.0, 0.0, 100.0, 100.0)
    assert doc.path_data == ["M 10 10 L 90 10 L 90 90 L 10 90 Z"]


def test_width_height_fallback():
    doc = parse_svg(HOUSE_SVG)
    assert doc.width == 200.0
    assert doc.height == 100.0
    assert len(doc.path_data) == 2  # single-quoted attribute included


def test_default_viewbox():
    doc = parse_svg(NO_VIEWBOX_SVG)
    assert doc.view_box == DEFAULT_VIEWBOX
    assert doc.path_data == ["M 0 0 L 50 50"]


def test_invalid_viewbox_falls_back():
    doc = parse_svg('<svg viewBox="0 0 0 10" width="40" height="30"><path d="M0 0 L1 1"/></svg>')
    assert doc.view_box == (0.0, 0.0, 40.0, 30.0)


def test_empty_and_pathless_documents():
    assert parse_svg("").path_data == []
    assert parse_svg("<svg viewBox='0 0 10 10'><circle r='3'/></svg>").path_data == []


def test_parse_view_box_separators():
    assert parse_view_box("-5,-5, 10 20") == (-5.0, -5.0, 10.0, 20.0)
    assert parse_view_box("0 0 10") is None
    assert parse_view_box("a b c d") is None
