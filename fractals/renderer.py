"""Rendering primitives for fractal frames."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np
import PIL.Image

from .kernels import DEFAULT_JULIA_C, FractalType, select_kernel
from .navigation import iteration_budget
from .palettes import ColorScheme, colorize, resolve_palette
from .viewport import LetterboxGeometry, Viewport, compute_letterbox

logger = logging.getLogger(__name__)

CHUNK_ROWS = 100


@dataclass(frozen=True)
class RenderParameters:
    """Parameters that describe a single render, snapshotted when it starts."""

    fractal_type: FractalType = FractalType.MANDELBROT
    base_iterations: int = 100
    smooth_coloring: bool = True
    color_scheme: str = ColorScheme.CLASSIC.value
    julia_c: tuple[float, float] = DEFAULT_JULIA_C

    def __post_init__(self) -> None:
        object.__setattr__(self, "fractal_type", FractalType(self.fractal_type))
        if int(self.base_iterations) < 1:
            raise ValueError(f"base_iterations must be at least 1, got {self.base_iterations}")
        object.__setattr__(self, "base_iterations", int(self.base_iterations))
        scheme = self.color_scheme
        if isinstance(scheme, ColorScheme):
            scheme = scheme.value
        resolve_palette(scheme)
        object.__setattr__(self, "color_scheme", scheme)
        real, imag = self.julia_c
        object.__setattr__(self, "julia_c", (float(real), float(imag)))


@dataclass(frozen=True)
class RenderProgress:
    generation: int
    completed_rows: int
    total_rows: int

    @property
    def fraction(self) -> float:
        if self.total_rows <= 0:
            return 1.0
        return self.completed_rows / self.total_rows

    @property
    def percent(self) -> int:
        return int(np.floor(self.fraction * 100))


@dataclass(frozen=True, eq=False)
class RenderFrame:
    """A completed full-canvas RGBA bitmap and the state it was rendered from."""

    pixels: np.ndarray
    letterbox: LetterboxGeometry
    viewport: Viewport
    params: RenderParameters
    max_iterations: int
    generation: int
    elapsed: float

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def zoom_level(self) -> float:
        return self.viewport.zoom_level()

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(np.array(self.pixels, copy=True))

    def status_line(self) -> str:
        return f"Zoom: {self.zoom_level:.1f}x | Iter: {self.max_iterations} | Time: {self.elapsed:.2f}s"


class RenderState(str, Enum):
    IDLE = "idle"
    COMPUTING = "computing"
    COMPLETED = "completed"
    CANCELED = "canceled"


ProgressCallback = Callable[[RenderProgress], None]
CompleteCallback = Callable[[RenderFrame], None]


class RenderHandle:
    """Tracks one render request. Exactly one terminal state is ever reached."""

    def __init__(self, generation: int, future: Future) -> None:
        self.generation = generation
        self._future = future
        self._state = RenderState.IDLE
        self._progress = RenderProgress(generation, 0, 0)

    @property
    def state(self) -> RenderState:
        return self._state

    @property
    def progress(self) -> RenderProgress:
        return self._progress

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> Optional[RenderFrame]:
        """Block until the render ends; ``None`` means it was superseded."""

        return self._future.result(timeout)

    def __repr__(self) -> str:
        return f"RenderHandle(generation={self.generation}, state={self._state.value})"


@dataclass
class _Draft:
    pixels: np.ndarray
    letterbox: LetterboxGeometry
    max_iterations: int
    started: float


@dataclass(frozen=True)
class _RenderJob:
    viewport: Viewport
    params: RenderParameters
    canvas_width: int
    canvas_height: int
    on_progress: Optional[ProgressCallback]
    on_complete: Optional[CompleteCallback]


class FrameComposer:
    """Builds frames off the caller's thread, row chunk by row chunk.

    Starting a render bumps the generation counter; any older render notices
    the change before its next chunk (or before committing) and stops without
    delivering anything.
    """

    def __init__(self, *, chunk_rows: int = CHUNK_ROWS, max_workers: int = 2, device: Optional[str] = None) -> None:
        if chunk_rows < 1:
            raise ValueError(f"chunk_rows must be at least 1, got {chunk_rows}")
        self.chunk_rows = int(chunk_rows)
        self.device = device
        self._lock = threading.Lock()
        self._generation = 0
        self._last_frame: Optional[RenderFrame] = None
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fractal-render")

    def __enter__(self) -> "FrameComposer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def current_generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def last_frame(self) -> Optional[RenderFrame]:
        with self._lock:
            return self._last_frame

    def close(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=True)

    def cancel(self) -> None:
        """Supersede the in-flight render without starting another one."""

        with self._lock:
            self._generation += 1

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def start_render(
        self,
        viewport: Viewport,
        params: RenderParameters,
        canvas_width: int,
        canvas_height: int,
        *,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> RenderHandle:
        job = _RenderJob(
            viewport=viewport.snapshot(),
            params=params,
            canvas_width=max(int(canvas_width), 0),
            canvas_height=max(int(canvas_height), 0),
            on_progress=on_progress,
            on_complete=on_complete,
        )
        with self._lock:
            self._generation += 1
            generation = self._generation
            future: Future = Future()
            handle = RenderHandle(generation, future)

        logger.debug(
            "render %d requested: %s %dx%d center=(%.6g, %.6g) zoom=%.3g",
            generation,
            params.fractal_type.value,
            job.canvas_width,
            job.canvas_height,
            job.viewport.center_x,
            job.viewport.center_y,
            job.viewport.zoom_level(),
        )
        self._executor.submit(self._run, handle, job, future)
        return handle

    def render(
        self,
        viewport: Viewport,
        params: RenderParameters,
        canvas_width: int,
        canvas_height: int,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[RenderFrame]:
        """Render and wait for the frame; ``None`` if another render superseded it."""

        handle = self.start_render(viewport, params, canvas_width, canvas_height, on_progress=on_progress)
        return handle.result()

    def _run(self, handle: RenderHandle, job: _RenderJob, future: Future) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            draft = self._compose(handle, job)
            frame = self._commit(handle, job, draft) if draft is not None else None
            if frame is not None and job.on_complete is not None:
                job.on_complete(frame)
        except Exception as exc:
            logger.exception("render %d failed", handle.generation)
            future.set_exception(exc)
        else:
            future.set_result(frame)

    def _cancel(self, handle: RenderHandle, rows_done: int) -> None:
        handle._state = RenderState.CANCELED
        logger.debug("render %d canceled after %d rows", handle.generation, rows_done)

    def _compose(self, handle: RenderHandle, job: _RenderJob) -> Optional[_Draft]:
        """Fill the bitmap chunk by chunk; ``None`` if superseded along the way."""

        handle._state = RenderState.COMPUTING
        started = time.perf_counter()

        params = job.params
        viewport = job.viewport
        max_iterations = iteration_budget(params.base_iterations, viewport.zoom_level())
        letterbox = compute_letterbox(job.canvas_width, job.canvas_height, viewport.range_x, viewport.range_y)
        kernel = select_kernel(params.fractal_type)

        pixels = np.zeros((job.canvas_height, job.canvas_width, 4), dtype=np.uint8)
        pixels[..., 3] = 255

        total_rows = 0 if letterbox.is_empty else letterbox.render_height
        left = letterbox.offset_x
        top = letterbox.offset_y

        for row_start in range(0, total_rows, self.chunk_rows):
            if not self.is_current(handle.generation):
                self._cancel(handle, row_start)
                return None
            row_end = min(row_start + self.chunk_rows, total_rows)

            xs, ys = viewport.plane_grid(letterbox, row_start, row_end)
            values = kernel.evaluate(
                xs,
                ys,
                max_iterations,
                smooth_coloring=params.smooth_coloring,
                julia_c=params.julia_c,
                device=self.device,
            )
            rgb = colorize(values, max_iterations, params.color_scheme)
            pixels[top + row_start:top + row_end, left:left + letterbox.render_width, :3] = rgb

            # a newer render may have started while this chunk was computed
            if not self.is_current(handle.generation):
                self._cancel(handle, row_end)
                return None

            progress = RenderProgress(handle.generation, row_end, total_rows)
            handle._progress = progress
            if job.on_progress is not None:
                job.on_progress(progress)
            # hand the interpreter to the host between chunks
            time.sleep(0)

        return _Draft(pixels, letterbox, max_iterations, started)

    def _commit(self, handle: RenderHandle, job: _RenderJob, draft: _Draft) -> Optional[RenderFrame]:
        draft.pixels.flags.writeable = False
        elapsed = time.perf_counter() - draft.started
        total_rows = draft.letterbox.render_height
        with self._lock:
            if handle.generation != self._generation:
                frame = None
            else:
                frame = RenderFrame(
                    pixels=draft.pixels,
                    letterbox=draft.letterbox,
                    viewport=job.viewport,
                    params=job.params,
                    max_iterations=draft.max_iterations,
                    generation=handle.generation,
                    elapsed=elapsed,
                )
                self._last_frame = frame
                handle._progress = RenderProgress(handle.generation, total_rows, total_rows)
                handle._state = RenderState.COMPLETED

        if frame is None:
            self._cancel(handle, total_rows)
            return None
        logger.debug("render %d completed in %.2fs (%d iterations)", handle.generation, elapsed, draft.max_iterations)
        return frame
