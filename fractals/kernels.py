"""Escape-time kernels for the supported fractal families.

Every family is iterated over a whole grid of points at once with a
TensorFlow while loop. Real and imaginary parts are carried as separate
float64 tensors; points that have escaped are frozen with ``tf.where`` so the
final ``z`` of each point is the first one outside the escape radius.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np
import tensorflow as tf

ESCAPE_RADIUS_SQUARED = 4.0
PHOENIX_P = 0.5667
DEFAULT_JULIA_C = (-0.7, 0.27)


class FractalType(str, Enum):
    MANDELBROT = "mandelbrot"
    JULIA = "julia"
    BURNING_SHIP = "burningship"
    TRICORN = "tricorn"
    MULTIBROT3 = "multibrot3"
    MULTIBROT4 = "multibrot4"
    PHOENIX = "phoenix"
    PERPENDICULAR = "perpendicular"


# A step maps (zr, zi, prev_r, prev_i, cr, ci) to the next (zr, zi, prev_r, prev_i).
StepFn = Callable[..., tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]]


def _quadratic_step(zr, zi, pr, pi, cr, ci):
    return zr * zr - zi * zi + cr, 2.0 * zr * zi + ci, pr, pi


def _burning_ship_step(zr, zi, pr, pi, cr, ci):
    ar = tf.abs(zr)
    ai = tf.abs(zi)
    return ar * ar - ai * ai + cr, 2.0 * ar * ai + ci, pr, pi


def _tricorn_step(zr, zi, pr, pi, cr, ci):
    return zr * zr - zi * zi + cr, -2.0 * zr * zi + ci, pr, pi


def _phoenix_step(zr, zi, pr, pi, cr, ci):
    next_r = zr * zr - zi * zi + cr + PHOENIX_P * pr
    next_i = 2.0 * zr * zi + ci + PHOENIX_P * pi
    return next_r, next_i, zr, zi


def _perpendicular_step(zr, zi, pr, pi, cr, ci):
    return zr * zr - zi * zi + cr, 2.0 * tf.abs(zr) * tf.abs(zi) + ci, pr, pi


def _multibrot_step(power: float) -> StepFn:
    def step(zr, zi, pr, pi, cr, ci):
        r = tf.sqrt(zr * zr + zi * zi)
        theta = tf.math.atan2(zi, zr)
        r_pow = tf.pow(r, power)
        return r_pow * tf.cos(power * theta) + cr, r_pow * tf.sin(power * theta) + ci, pr, pi

    return step


def _build_runner(step: StepFn):
    @tf.function(reduce_retracing=True)
    def run(zr: tf.Tensor, zi: tf.Tensor, cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor):
        """Iterate ``step`` until every point escaped or the budget is spent."""

        escape = tf.constant(ESCAPE_RADIUS_SQUARED, dtype=zr.dtype)
        max_iterations = tf.cast(max_iterations, tf.int32)
        i = tf.constant(0, dtype=tf.int32)
        pr = tf.zeros_like(zr)
        pi = tf.zeros_like(zi)
        ns = tf.zeros(tf.shape(zr), dtype=tf.int32)
        active = zr * zr + zi * zi <= escape

        def cond(i, zr, zi, pr, pi, ns, active):
            return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

        def body(i, zr, zi, pr, pi, ns, active):
            nzr, nzi, npr, npi = step(zr, zi, pr, pi, cr, ci)
            zr = tf.where(active, nzr, zr)
            zi = tf.where(active, nzi, zi)
            pr = tf.where(active, npr, pr)
            pi = tf.where(active, npi, pi)
            ns = ns + tf.cast(active, tf.int32)
            active = tf.logical_and(active, zr * zr + zi * zi <= escape)
            return i + 1, zr, zi, pr, pi, ns, active

        _, zr, zi, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, pr, pi, ns, active))
        return zr, zi, ns

    return run


@dataclass(frozen=True)
class Kernel:
    """A fractal family: its recurrence and how the iteration is seeded.

    ``seeds_from_point`` marks Julia-style kernels, where the pixel is the
    starting ``z`` and ``c`` is the fixed global parameter.
    """

    step: StepFn
    power: float = 2.0
    seeds_from_point: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "_run", _build_runner(self.step))

    def smooth_correction(self, modulus_squared: tf.Tensor) -> tf.Tensor:
        log2 = math.log(2.0)
        if self.power == 2.0:
            return tf.math.log(tf.math.log(modulus_squared) / log2) / log2
        return tf.math.log(tf.math.log(modulus_squared) / 2.0 / log2) / math.log(self.power)

    def evaluate(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        max_iterations: int,
        *,
        smooth_coloring: bool = True,
        julia_c: tuple[float, float] = DEFAULT_JULIA_C,
        device: Optional[str] = None,
    ) -> np.ndarray:
        with tf.device(device if device is not None else "/CPU:0"):
            x_tf = tf.convert_to_tensor(xs, dtype=tf.float64)
            y_tf = tf.convert_to_tensor(ys, dtype=tf.float64)
            if self.seeds_from_point:
                zr, zi = x_tf, y_tf
                cr = tf.fill(tf.shape(x_tf), tf.constant(julia_c[0], dtype=tf.float64))
                ci = tf.fill(tf.shape(y_tf), tf.constant(julia_c[1], dtype=tf.float64))
            else:
                zr, zi = tf.zeros_like(x_tf), tf.zeros_like(y_tf)
                cr, ci = x_tf, y_tf

            max_tensor = tf.constant(max_iterations, dtype=tf.int32)
            zr, zi, ns = self._run(zr, zi, cr, ci, max_tensor)

            ns_float = tf.cast(ns, tf.float64)
            limit = tf.cast(max_tensor, tf.float64)
            if not smooth_coloring:
                return ns_float.numpy()

            escaped = tf.less(ns, max_tensor)
            modulus_squared = zr * zr + zi * zi
            # non-escaped lanes are replaced before the logs; their value is discarded
            safe_modulus = tf.where(escaped, modulus_squared, tf.fill(tf.shape(zr), tf.constant(16.0, tf.float64)))
            smooth = ns_float + 1.0 - self.smooth_correction(safe_modulus)
            smooth = tf.where(escaped, smooth, ns_float)
            smooth = tf.clip_by_value(smooth, 0.0, limit)
        return smooth.numpy()


KERNELS: dict[FractalType, Kernel] = {
    FractalType.MANDELBROT: Kernel(_quadratic_step),
    FractalType.JULIA: Kernel(_quadratic_step, seeds_from_point=True),
    FractalType.BURNING_SHIP: Kernel(_burning_ship_step),
    FractalType.TRICORN: Kernel(_tricorn_step),
    FractalType.MULTIBROT3: Kernel(_multibrot_step(3.0), power=3.0),
    FractalType.MULTIBROT4: Kernel(_multibrot_step(4.0), power=4.0),
    FractalType.PHOENIX: Kernel(_phoenix_step),
    FractalType.PERPENDICULAR: Kernel(_perpendicular_step),
}


def select_kernel(fractal_type: FractalType | str) -> Kernel:
    return KERNELS[FractalType(fractal_type)]


def escape_grid(
    fractal_type: FractalType | str,
    xs: np.ndarray,
    ys: np.ndarray,
    max_iterations: int,
    *,
    smooth_coloring: bool = True,
    julia_c: tuple[float, float] = DEFAULT_JULIA_C,
    device: Optional[str] = None,
) -> np.ndarray:
    """Continuous escape values in ``[0, max_iterations]`` for a grid of points."""

    return select_kernel(fractal_type).evaluate(
        xs,
        ys,
        max_iterations,
        smooth_coloring=smooth_coloring,
        julia_c=julia_c,
        device=device,
    )


def escape_value(
    fractal_type: FractalType | str,
    x0: float,
    y0: float,
    max_iterations: int,
    *,
    smooth_coloring: bool = True,
    julia_c: tuple[float, float] = DEFAULT_JULIA_C,
) -> float:
    values = escape_grid(
        fractal_type,
        np.array([[x0]], dtype=np.float64),
        np.array([[y0]], dtype=np.float64),
        max_iterations,
        smooth_coloring=smooth_coloring,
        julia_c=julia_c,
    )
    return float(values[0, 0])
