"""Viewport geometry: complex-plane window, pixel mapping and letterboxing."""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

DEFAULT_CENTER_X = -0.5
DEFAULT_CENTER_Y = 0.0
DEFAULT_RANGE_X = 3.5
DEFAULT_RANGE_Y = 2.0


@dataclass(frozen=True)
class LetterboxGeometry:
    """Placement of the aspect-preserving render area inside the canvas."""

    render_width: int
    render_height: int
    offset_x: int
    offset_y: int

    @property
    def is_empty(self) -> bool:
        return self.render_width <= 0 or self.render_height <= 0


def compute_letterbox(canvas_width: int, canvas_height: int, range_x: float, range_y: float) -> LetterboxGeometry:
    """Fit a ``range_x`` by ``range_y`` window into the canvas, centering the short axis."""

    canvas_width = max(int(canvas_width), 0)
    canvas_height = max(int(canvas_height), 0)
    if canvas_width == 0 or canvas_height == 0:
        return LetterboxGeometry(0, 0, 0, 0)

    viewport_aspect = range_x / range_y
    canvas_aspect = canvas_width / canvas_height

    if canvas_aspect > viewport_aspect:
        # bars left and right
        render_height = canvas_height
        render_width = int(np.floor(render_height * viewport_aspect))
        offset_x = (canvas_width - render_width) // 2
        offset_y = 0
    else:
        # bars top and bottom
        render_width = canvas_width
        render_height = int(np.floor(render_width / viewport_aspect))
        offset_x = 0
        offset_y = (canvas_height - render_height) // 2

    return LetterboxGeometry(
        render_width=render_width,
        render_height=render_height,
        offset_x=offset_x,
        offset_y=offset_y,
    )


@dataclass
class Viewport:
    """The rectangle of the complex plane currently mapped onto the canvas.

    ``initial_range_x`` is the fixed reference width the zoom level is
    measured against.
    """

    center_x: float = DEFAULT_CENTER_X
    center_y: float = DEFAULT_CENTER_Y
    range_x: float = DEFAULT_RANGE_X
    range_y: float = DEFAULT_RANGE_Y
    initial_range_x: float = DEFAULT_RANGE_X

    def pixel_to_plane(self, col: float, row: float, letterbox: LetterboxGeometry) -> tuple[float, float]:
        x = self.center_x + (col / letterbox.render_width - 0.5) * self.range_x
        y = self.center_y + (row / letterbox.render_height - 0.5) * self.range_y
        return x, y

    def plane_grid(self, letterbox: LetterboxGeometry, row_start: int, row_end: int) -> tuple[np.ndarray, np.ndarray]:
        """Plane coordinates for rows ``[row_start, row_end)`` of the render area.

        Uses the same expression as :meth:`pixel_to_plane`, so a grid cell and
        the scalar mapping of the same pixel agree exactly.
        """

        cols = np.arange(letterbox.render_width, dtype=np.float64)
        rows = np.arange(row_start, row_end, dtype=np.float64)
        xs = np.float64(self.center_x) + (cols / letterbox.render_width - 0.5) * np.float64(self.range_x)
        ys = np.float64(self.center_y) + (rows / letterbox.render_height - 0.5) * np.float64(self.range_y)
        X, Y = np.meshgrid(xs, ys)
        return X, Y

    def zoom_level(self) -> float:
        return self.initial_range_x / self.range_x

    def set_from_complex_rect(self, min_real: float, max_real: float, min_imag: float, max_imag: float) -> None:
        range_x = max_real - min_real
        range_y = max_imag - min_imag
        if not (range_x > 0 and range_y > 0):
            raise ValueError(
                f"complex rectangle must have positive extent, got {range_x!r} x {range_y!r}"
            )
        self.center_x = (min_real + max_real) / 2
        self.center_y = (min_imag + max_imag) / 2
        self.range_x = range_x
        self.range_y = range_y

    def reset(self) -> None:
        self.center_x = DEFAULT_CENTER_X
        self.center_y = DEFAULT_CENTER_Y
        self.range_x = DEFAULT_RANGE_X
        self.range_y = DEFAULT_RANGE_Y
        self.initial_range_x = DEFAULT_RANGE_X

    def bounds(self) -> tuple[float, float, float, float]:
        """Return ``(min_real, max_real, min_imag, max_imag)``."""

        half_x = self.range_x / 2
        half_y = self.range_y / 2
        return (
            self.center_x - half_x,
            self.center_x + half_x,
            self.center_y - half_y,
            self.center_y + half_y,
        )

    def snapshot(self) -> "Viewport":
        return replace(self)
