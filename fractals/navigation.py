"""Utilities for navigating the complex plane: zoom selections and iteration budgets."""

from __future__ import annotations

import math
from typing import Optional

from .viewport import LetterboxGeometry, Viewport

MAX_ITERATION_CAP = 5000
MIN_SELECTION_PIXELS = 10

Point = tuple[float, float]


def iteration_budget(base_iterations: int, zoom_level: float) -> int:
    """Iterations for a frame, growing with the square root of the zoom level."""

    base = int(base_iterations)
    floor = min(base, MAX_ITERATION_CAP)
    scaled = math.floor(base * math.sqrt(max(zoom_level, 0.0)))
    return max(floor, min(scaled, MAX_ITERATION_CAP))


def normalize_selection(start: Point, end: Point) -> tuple[float, float, float, float]:
    """Return ``(x1, y1, x2, y2)`` with ``x1 <= x2`` and ``y1 <= y2``."""

    x1, x2 = sorted((start[0], end[0]))
    y1, y2 = sorted((start[1], end[1]))
    return x1, y1, x2, y2


def fit_selection_to_aspect(start: Point, end: Point, canvas_width: int, canvas_height: int) -> Point:
    """Grow the short side of a drag so it matches the canvas aspect ratio.

    The drag direction is kept: the returned end point lies in the same
    quadrant relative to ``start`` as ``end`` did.
    """

    if canvas_width <= 0 or canvas_height <= 0:
        return end

    canvas_aspect = canvas_width / canvas_height
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    width = abs(dx)
    height = abs(dy)

    if height == 0 or width / height > canvas_aspect:
        height = width / canvas_aspect
    else:
        width = height * canvas_aspect

    x = start[0] + width if dx >= 0 else start[0] - width
    y = start[1] + height if dy >= 0 else start[1] - height
    return x, y


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def convert_selection(
    start: Point,
    end: Point,
    canvas_width: int,
    canvas_height: int,
    letterbox: LetterboxGeometry,
    viewport: Viewport,
) -> Optional[Viewport]:
    """Turn a screen-pixel drag rectangle into the viewport it encloses.

    Returns ``None`` for drags no larger than ``MIN_SELECTION_PIXELS`` on
    either axis, or when there is no render area to select from. Corners
    dragged into the letterbox bars are clipped to the render area. The
    passed viewport is left untouched.
    """

    x1, y1, x2, y2 = normalize_selection(start, end)
    if x2 - x1 <= MIN_SELECTION_PIXELS or y2 - y1 <= MIN_SELECTION_PIXELS:
        return None
    if canvas_width <= 0 or canvas_height <= 0 or letterbox.is_empty:
        return None

    rel_x1 = _clamp(x1 - letterbox.offset_x, 0, letterbox.render_width)
    rel_y1 = _clamp(y1 - letterbox.offset_y, 0, letterbox.render_height)
    rel_x2 = _clamp(x2 - letterbox.offset_x, 0, letterbox.render_width)
    rel_y2 = _clamp(y2 - letterbox.offset_y, 0, letterbox.render_height)

    min_real, min_imag = viewport.pixel_to_plane(rel_x1, rel_y1, letterbox)
    max_real, max_imag = viewport.pixel_to_plane(rel_x2, rel_y2, letterbox)
    if not (max_real > min_real and max_imag > min_imag):
        # the whole drag landed inside a letterbox bar
        return None

    selected = viewport.snapshot()
    selected.set_from_complex_rect(min_real, max_real, min_imag, max_imag)
    return selected
