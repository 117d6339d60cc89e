"""Explorer state shared between a host and the frame composer."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Optional

from .navigation import Point, convert_selection, fit_selection_to_aspect, iteration_budget
from .renderer import (
    CompleteCallback,
    FrameComposer,
    ProgressCallback,
    RenderFrame,
    RenderHandle,
    RenderParameters,
)
from .viewport import LetterboxGeometry, Viewport, compute_letterbox

logger = logging.getLogger(__name__)


class ExplorerSession:
    """Viewport, parameters and canvas of one explorer, plus its latest frame.

    Every navigation call that changes what is visible starts a new render,
    which supersedes whatever was still being computed. Callbacks given to
    the constructor are used for every render the session starts; they run on
    a composer worker thread.
    """

    def __init__(
        self,
        canvas_width: int,
        canvas_height: int,
        params: Optional[RenderParameters] = None,
        *,
        viewport: Optional[Viewport] = None,
        composer: Optional[FrameComposer] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> None:
        self.canvas_width = int(canvas_width)
        self.canvas_height = int(canvas_height)
        self.params = params if params is not None else RenderParameters()
        self.viewport = viewport if viewport is not None else Viewport()
        self._owns_composer = composer is None
        self.composer = composer if composer is not None else FrameComposer()
        self.on_progress = on_progress
        self.on_complete = on_complete
        self._frame: Optional[RenderFrame] = None
        self._frame_lock = threading.Lock()
        self._handle: Optional[RenderHandle] = None

    def __enter__(self) -> "ExplorerSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_composer:
            self.composer.close()
        else:
            self.composer.cancel()

    @property
    def letterbox(self) -> LetterboxGeometry:
        return compute_letterbox(self.canvas_width, self.canvas_height, self.viewport.range_x, self.viewport.range_y)

    @property
    def frame(self) -> Optional[RenderFrame]:
        """The most recently delivered frame of this session."""

        return self._frame

    @property
    def handle(self) -> Optional[RenderHandle]:
        return self._handle

    @property
    def max_iterations(self) -> int:
        return iteration_budget(self.params.base_iterations, self.viewport.zoom_level())

    def _delivered(self, frame: RenderFrame) -> bool:
        """Keep ``frame`` unless a newer one was already delivered."""

        with self._frame_lock:
            if self._frame is not None and frame.generation < self._frame.generation:
                logger.debug("frame %d arrived after frame %d, dropped", frame.generation, self._frame.generation)
                return False
            self._frame = frame
        if self.on_complete is not None:
            self.on_complete(frame)
        return True

    def render(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> RenderHandle:
        progress_cb = on_progress if on_progress is not None else self.on_progress

        def delivered(frame: RenderFrame) -> None:
            if self._delivered(frame) and on_complete is not None:
                on_complete(frame)

        self._handle = self.composer.start_render(
            self.viewport,
            self.params,
            self.canvas_width,
            self.canvas_height,
            on_progress=progress_cb,
            on_complete=delivered,
        )
        return self._handle

    def update(self, **changes) -> RenderHandle:
        """Replace render parameters (``fractal_type``, ``color_scheme``, ...) and re-render."""

        self.params = replace(self.params, **changes)
        return self.render()

    def resize(self, canvas_width: int, canvas_height: int) -> RenderHandle:
        self.canvas_width = int(canvas_width)
        self.canvas_height = int(canvas_height)
        return self.render()

    def zoom_to_selection(self, start: Point, end: Point, *, fit_aspect: bool = False) -> Optional[RenderHandle]:
        """Zoom into a screen-pixel drag rectangle; ``None`` if the drag was rejected."""

        if fit_aspect:
            end = fit_selection_to_aspect(start, end, self.canvas_width, self.canvas_height)
        selected = convert_selection(
            start,
            end,
            self.canvas_width,
            self.canvas_height,
            self.letterbox,
            self.viewport,
        )
        if selected is None:
            logger.debug("selection %s -> %s ignored", start, end)
            return None
        self.viewport = selected
        return self.render()

    def reset_view(self) -> RenderHandle:
        self.viewport.reset()
        return self.render()

    def status_line(self) -> str:
        return (
            f"Zoom: {self.viewport.zoom_level():.1f}x | "
            f"Center: ({self.viewport.center_x:.6f}, {self.viewport.center_y:.6f}) | "
            f"Iter: {self.max_iterations}"
        )
