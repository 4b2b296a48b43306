"""
Geometry validation for slide elements.

Positions arrive as raw attribute strings. Each one is parsed on its own,
replaced by a per-kind default when unusable, and clamped so the element
stays on the slide.
"""
import logging
import math
from typing import Optional

from pptx.util import Emu

from .models import Geometry, GeometryRect

logger = logging.getLogger(__name__)

# (left, top, width, height) in points
DEFAULT_GEOMETRY = {
    'textbox': (100.0, 100.0, 400.0, 200.0),
    'list': (100.0, 100.0, 400.0, 200.0),
    'table': (100.0, 300.0, 500.0, 200.0),
    'chart': (100.0, 300.0, 500.0, 300.0),
    'image': (100.0, 400.0, 200.0, 150.0),
}


def validate_position(value: Optional[str], default: float, min_value: float, max_value: float) -> float:
    """
    Parse *value* as a number of points and clamp it into ``[min_value, max_value]``.

    Missing, blank, non-numeric or non-finite values fall back to *default*
    (which is clamped as well).

    >>> validate_position("abc", 100, 0, 500)
    100.0
    >>> validate_position("700", 100, 0, 500)
    500.0
    """
    parsed = None
    if value is not None and str(value).strip():
        try:
            parsed = float(str(value).strip())
        except ValueError:
            parsed = None
        if parsed is not None and not math.isfinite(parsed):
            parsed = None

    if parsed is None:
        if value is not None and str(value).strip():
            logger.debug("Invalid position value %r, using default %s", value, default)
        parsed = float(default)

    if max_value < min_value:
        max_value = min_value
    clamped = min(max(parsed, min_value), max_value)
    if clamped != parsed:
        logger.debug("Clamped position %s into [%s, %s] -> %s", parsed, min_value, max_value, clamped)
    return clamped


def element_rect(geometry: Optional[Geometry], kind: str, slide_width: float, slide_height: float) -> GeometryRect:
    """Validate an element's raw geometry against the slide size."""
    geometry = geometry or Geometry()
    d_left, d_top, d_width, d_height = DEFAULT_GEOMETRY.get(kind, DEFAULT_GEOMETRY['textbox'])

    left = validate_position(geometry.left, d_left, 0, slide_width - 1)
    top = validate_position(geometry.top, d_top, 0, slide_height - 1)
    width = validate_position(geometry.width, d_width, 1, slide_width - left)
    height = validate_position(geometry.height, d_height, 1, slide_height - top)

    return GeometryRect(left, top, width, height)


def slot_rect(shape) -> GeometryRect:
    """Bounds of an existing shape (usually a placeholder slot) in points."""
    return GeometryRect(
        Emu(shape.left or 0).pt,
        Emu(shape.top or 0).pt,
        Emu(shape.width or 0).pt,
        Emu(shape.height or 0).pt,
    )
