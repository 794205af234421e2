"""SVG document reader.

Only two things are read from a level file: the root ``viewBox`` and the
``d`` attribute of every ``<path>``. Everything else is ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Regex for extracting viewBox
_SVG_TAG_RE = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)
_VIEWBOX_RE = re.compile(r'viewBox\s*=\s*["\']([^"\']+)["\']')
_WIDTH_RE = re.compile(r'\swidth\s*=\s*["\']([^"\']*?)["\']')
_HEIGHT_RE = re.compile(r'\sheight\s*=\s*["\']([^"\']*?)["\']')
_PATH_TAG_RE = re.compile(r"<path\b[^>]*>", re.IGNORECASE)
_D_ATTR_RE = re.compile(r'\sd\s*=\s*(?:"([^"]*)"|\'([^\']*)\')')
_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")

DEFAULT_VIEWBOX = (0.0, 0.0, 100.0, 100.0)


@dataclass(frozen=True)
class SvgDocument:
    # (min_x, min_y, width, height)
    view_box: tuple[float, float, float, float] = DEFAULT_VIEWBOX
    # Raw ``d`` strings, document order
    path_data: list[str] = field(default_factory=list)

    @property
    def width(self) -> float:
        return self.view_box[2]

    @property
    def height(self) -> float:
        return self.view_box[3]


def parse_view_box(value: str) -> tuple[float, float, float, float] | None:
    """Parse "minx miny w h" (space and/or comma separated). None if unusable."""
    parts = [p for p in re.split(r"[\s,]+", value.strip()) if p]
    if len(parts) < 4:
        return None
    try:
        min_x, min_y, width, height = (float(p) for p in parts[:4])
    except ValueError:
        return None
    if width <= 0 or height <= 0:
        return None
    return (min_x, min_y, width, height)


def _parse_length(value: str) -> float | None:
    m = _LENGTH_RE.match(value)
    if not m:
        return None
    length = float(m.group(1))
    return length if length > 0 else None


def _extract_view_box(svg_tag: str) -> tuple[float, float, float, float]:
    vb_match = _VIEWBOX_RE.search(svg_tag)
    if vb_match:
        view_box = parse_view_box(vb_match.group(1))
        if view_box is not None:
            return view_box
        logger.warning("Ignoring invalid viewBox %r", vb_match.group(1))

    w_match = _WIDTH_RE.search(svg_tag)
    h_match = _HEIGHT_RE.search(svg_tag)
    width = _parse_length(w_match.group(1)) if w_match else None
    height = _parse_length(h_match.group(1)) if h_match else None
    if width is not None and height is not None:
        return (0.0, 0.0, width, height)
    return DEFAULT_VIEWBOX


def parse_svg(svg_text: str) -> SvgDocument:
    """Read the viewBox and every path's ``d`` attribute. Never raises."""
    if not svg_text:
        return SvgDocument()

    svg_match = _SVG_TAG_RE.search(svg_text)
    view_box = _extract_view_box(svg_match.group(0)) if svg_match else DEFAULT_VIEWBOX

    path_data: list[str] = []
    for match in _PATH_TAG_RE.finditer(svg_text):
        d_match = _D_ATTR_RE.search(match.group(0))
        if not d_match:
            continue
        d = d_match.group(1) if d_match.group(1) is not None else d_match.group(2)
        if d.strip():
            path_data.append(d)

    logger.info(
        "Parsed SVG: %d path(s), viewBox %.0f×%.0f", len(path_data), view_box[2], view_box[3]
    )
    return SvgDocument(view_box=view_box, path_data=path_data)
