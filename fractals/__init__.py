"""Public API for escape-time fractal rendering."""

from .kernels import DEFAULT_JULIA_C, FractalType, escape_grid, escape_value, select_kernel
from .navigation import (
    MAX_ITERATION_CAP,
    MIN_SELECTION_PIXELS,
    convert_selection,
    fit_selection_to_aspect,
    iteration_budget,
    normalize_selection,
)
from .overlay import annotate_status, draw_selection
from .palettes import ColorScheme, colorize, hsl_to_rgb, map_color, resolve_palette
from .renderer import (
    CHUNK_ROWS,
    FrameComposer,
    RenderFrame,
    RenderHandle,
    RenderParameters,
    RenderProgress,
    RenderState,
)
from .session import ExplorerSession
from .viewport import LetterboxGeometry, Viewport, compute_letterbox

__all__ = [
    "CHUNK_ROWS",
    "ColorScheme",
    "DEFAULT_JULIA_C",
    "ExplorerSession",
    "FractalType",
    "FrameComposer",
    "LetterboxGeometry",
    "MAX_ITERATION_CAP",
    "MIN_SELECTION_PIXELS",
    "RenderFrame",
    "RenderHandle",
    "RenderParameters",
    "RenderProgress",
    "RenderState",
    "Viewport",
    "annotate_status",
    "colorize",
    "compute_letterbox",
    "convert_selection",
    "draw_selection",
    "escape_grid",
    "escape_value",
    "fit_selection_to_aspect",
    "hsl_to_rgb",
    "iteration_budget",
    "map_color",
    "normalize_selection",
    "resolve_palette",
    "select_kernel",
]
