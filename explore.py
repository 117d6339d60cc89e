import logging
import os
import queue
import sys
import warnings
from typing import Optional

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"

if _suppress_messages:
    warnings.filterwarnings(
        "ignore",
        message=r"Protobuf gencode version .* is exactly one major version older than the runtime version .*",
        category=UserWarning,
        module="google.protobuf",
    )

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


# Import libraries for computation
import tensorflow as tf
import numpy as np

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

import PIL.Image

from fractals import (
    ColorScheme,
    ExplorerSession,
    FractalType,
    FrameComposer,
    RenderFrame,
    RenderParameters,
    RenderProgress,
    Viewport,
    annotate_status,
    convert_selection,
    draw_selection,
    fit_selection_to_aspect,
)
from fractals.renderer import CHUNK_ROWS

log("TensorFlow version: %s" % tf.__version__)

from argparse import ArgumentParser


def build_parser():
    parser = ArgumentParser(description='Render escape-time fractals and zoom into rectangular selections.')

    parser.add_argument('--fractal', type=str, dest='fractal',
                        help='fractal family. Choices: %s' % ', '.join(t.value for t in FractalType),
                        metavar='FRACTAL', default=FractalType.MANDELBROT.value)

    parser.add_argument('--iterations', type=int,
                        dest='base_iterations', help='base iteration count; grows with the square root of the zoom level',
                        metavar='ITERATIONS', default=100)

    parser.add_argument('--color-scheme', type=str,
                        dest='color_scheme',
                        help='palette: %s, or any matplotlib colormap (e.g. "viridis")' % ', '.join(s.value for s in ColorScheme),
                        metavar='SCHEME', default=ColorScheme.CLASSIC.value)

    parser.add_argument('--no-smooth', dest='smooth_coloring', action='store_false',
                        help='color by the raw iteration count instead of the continuous escape value')

    parser.add_argument('--julia-real', type=float, dest='julia_real',
                        help='real part of the Julia constant', metavar='JULIA_REAL', default=-0.7)

    parser.add_argument('--julia-imag', type=float, dest='julia_imag',
                        help='imaginary part of the Julia constant', metavar='JULIA_IMAG', default=0.27)

    parser.add_argument('--width', type=int, dest='width',
                        help='canvas width in pixels', metavar='WIDTH', default=800)

    parser.add_argument('--height', type=int, dest='height',
                        help='canvas height in pixels', metavar='HEIGHT', default=600)

    parser.add_argument('--center-x', type=float, dest='center_x',
                        help='real coordinate of the view center', metavar='CENTER_X', default=-0.5)

    parser.add_argument('--center-y', type=float, dest='center_y',
                        help='imaginary coordinate of the view center', metavar='CENTER_Y', default=0.0)

    parser.add_argument('--range-x', type=float, dest='range_x',
                        help='width of the view in the complex plane', metavar='RANGE_X', default=3.5)

    parser.add_argument('--range-y', type=float, dest='range_y',
                        help='height of the view in the complex plane', metavar='RANGE_Y', default=2.0)

    parser.add_argument('--select', type=float, nargs=4, action='append', dest='selections',
                        metavar=('X1', 'Y1', 'X2', 'Y2'),
                        help='zoom into a canvas pixel rectangle before rendering. May be repeated; applied in order.')

    parser.add_argument('--fit-aspect', dest='fit_aspect', action='store_true',
                        help='stretch each selection to the canvas aspect ratio before zooming')

    parser.add_argument('--chunk-rows', type=int, dest='chunk_rows',
                        help='rows computed between cancellation checks', metavar='ROWS', default=CHUNK_ROWS)

    parser.add_argument('--show-status', dest='show_status', action='store_true',
                        help='overlay zoom, center and iteration count on the displayed frame')

    parser.add_argument('--interactive', dest='interactive', action='store_true',
                        help='open a window: drag a rectangle to zoom, press "r" to reset the view')

    parser.add_argument('--no-show', dest='show', action='store_false',
                        help='render without opening a window (prints the status line only)')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow and render diagnostics.')

    return parser


def params_from_args(opt, parser: ArgumentParser) -> RenderParameters:
    try:
        return RenderParameters(
            fractal_type=opt.fractal.lower(),
            base_iterations=opt.base_iterations,
            smooth_coloring=opt.smooth_coloring,
            color_scheme=opt.color_scheme,
            julia_c=(opt.julia_real, opt.julia_imag),
        )
    except ValueError as exc:
        parser.error(str(exc))


def viewport_from_args(opt, parser: ArgumentParser) -> Viewport:
    if opt.range_x <= 0 or opt.range_y <= 0:
        parser.error("--range-x and --range-y must be positive.")
    return Viewport(
        center_x=opt.center_x,
        center_y=opt.center_y,
        range_x=opt.range_x,
        range_y=opt.range_y,
    )


def print_progress(progress: RenderProgress) -> None:
    print("rendering {0}%".format(progress.percent), end='\r')


def apply_selections(session: ExplorerSession, selections, fit_aspect: bool) -> int:
    """Zoom the session viewport through each selection without rendering in between."""

    applied = 0
    for index, (x1, y1, x2, y2) in enumerate(selections or []):
        start = (x1, y1)
        end = (x2, y2)
        if fit_aspect:
            end = fit_selection_to_aspect(start, end, session.canvas_width, session.canvas_height)
        selected = convert_selection(
            start,
            end,
            session.canvas_width,
            session.canvas_height,
            session.letterbox,
            session.viewport,
        )
        if selected is None:
            print("selection {0} ({1:g},{2:g})-({3:g},{4:g}) is too small, ignored".format(index, x1, y1, x2, y2))
            continue
        session.viewport = selected
        applied += 1
        log("selection %d -> %s" % (index, session.status_line()))
    return applied


def frame_image(frame: RenderFrame, session: ExplorerSession, show_status: bool) -> PIL.Image.Image:
    image = frame.to_image()
    if show_status:
        image = annotate_status(image, [session.status_line(), frame.status_line()])
    return image


class InteractiveViewer:
    """Matplotlib window driving an explorer session.

    Frames arrive on a composer thread; they are queued and drawn from a
    figure timer so that matplotlib is only touched on the GUI thread.
    """

    def __init__(self, session: ExplorerSession, show_status: bool = False, poll_interval: int = 50) -> None:
        import matplotlib.pyplot as plt
        from matplotlib.widgets import RectangleSelector

        self.plt = plt
        self.session = session
        self.show_status = show_status
        self._frames: "queue.Queue[RenderFrame]" = queue.Queue()
        self._progress: Optional[RenderProgress] = None
        session.on_complete = self._frames.put
        session.on_progress = self._record_progress

        dpi = 100
        self.figure = plt.figure(figsize=(session.canvas_width / dpi, session.canvas_height / dpi), dpi=dpi)
        self.axes = self.figure.add_axes([0, 0, 1, 1])
        self.axes.set_axis_off()
        blank = np.zeros((session.canvas_height, session.canvas_width, 4), dtype=np.uint8)
        blank[..., 3] = 255
        self.image = self.axes.imshow(blank, interpolation='nearest')

        self.selector = RectangleSelector(
            self.axes,
            self._on_select,
            useblit=True,
            button=[1],
            spancoords='pixels',
            interactive=False,
            props=dict(edgecolor='#4CAF50', facecolor='#4CAF50', alpha=0.15, linestyle='--'),
        )
        self.figure.canvas.mpl_connect('key_press_event', self._on_key)
        self.timer = self.figure.canvas.new_timer(interval=poll_interval)
        self.timer.add_callback(self._poll)

    def _record_progress(self, progress: RenderProgress) -> None:
        handle = self.session.handle
        if handle is None or progress.generation != handle.generation:
            return
        self._progress = progress

    def _on_select(self, press, release) -> None:
        if None in (press.xdata, press.ydata, release.xdata, release.ydata):
            return
        # imshow centers pixel i on i; canvas pixel edges sit half a pixel earlier
        start = (press.xdata + 0.5, press.ydata + 0.5)
        end = fit_selection_to_aspect(
            start,
            (release.xdata + 0.5, release.ydata + 0.5),
            self.session.canvas_width,
            self.session.canvas_height,
        )
        previous = self.session.frame
        if self.session.zoom_to_selection(start, end) is None:
            log("selection too small, ignored")
            return
        if previous is not None:
            # keep the zoomed rectangle marked until the new frame arrives
            self.image.set_data(np.asarray(draw_selection(previous.to_image(), start, end)))
            self.figure.canvas.draw_idle()
        self._set_title("rendering... 0%")

    def _on_key(self, event) -> None:
        if event.key == 'r':
            self.session.reset_view()
            self._set_title("rendering... 0%")

    def _set_title(self, text: str) -> None:
        manager = self.figure.canvas.manager
        if manager is not None:
            manager.set_window_title(text)

    def _poll(self) -> None:
        frame = None
        while True:
            try:
                frame = self._frames.get_nowait()
            except queue.Empty:
                break
        if frame is not None:
            self.image.set_data(np.asarray(frame_image(frame, self.session, self.show_status)))
            self._set_title(frame.status_line())
            self.figure.canvas.draw_idle()
        elif self._progress is not None and self._progress.fraction < 1.0:
            self._set_title("rendering... {0}%".format(self._progress.percent))

    def run(self) -> None:
        self.session.render()
        self.timer.start()
        self.plt.show()


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)
    if VERBOSE:
        logging.basicConfig(level=logging.DEBUG, format='%(asctime)s %(threadName)s %(name)s: %(message)s')

    if opt.width <= 0 or opt.height <= 0:
        parser.error("--width and --height must be positive.")
    if opt.chunk_rows < 1:
        parser.error("--chunk-rows must be at least 1.")
    if opt.interactive and not opt.show:
        parser.error("--interactive cannot be combined with --no-show.")

    params = params_from_args(opt, parser)
    viewport = viewport_from_args(opt, parser)

    with FrameComposer(chunk_rows=opt.chunk_rows) as composer:
        session = ExplorerSession(opt.width, opt.height, params, viewport=viewport, composer=composer)
        apply_selections(session, opt.selections, opt.fit_aspect)

        if opt.interactive:
            InteractiveViewer(session, show_status=opt.show_status).run()
            return 0

        print(session.status_line())
        frame = session.render(on_progress=print_progress).result()
        print()
        if frame is None:
            print("render was superseded")
            return 1
        print(frame.status_line())

        if opt.show:
            import matplotlib.pyplot as plt

            image = frame_image(frame, session, opt.show_status)
            figure = plt.figure(figsize=(frame.width / 100, frame.height / 100), dpi=100)
            axes = figure.add_axes([0, 0, 1, 1])
            axes.set_axis_off()
            axes.imshow(np.asarray(image), interpolation='nearest')
            plt.show()
    return 0


if __name__ == '__main__':
    sys.exit(main())
