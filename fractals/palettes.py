"""Palette-based color mapping of escape values."""

from __future__ import annotations

from enum import Enum
from typing import Callable

import numpy as np

from matplotlib import colormaps as _mpl_colormaps

# A palette maps an array of t in [0, 1) to float channels of shape (..., 3) on a 0-255 scale.
Palette = Callable[[np.ndarray], np.ndarray]


class ColorScheme(str, Enum):
    CLASSIC = "classic"
    FIRE = "fire"
    OCEAN = "ocean"
    RAINBOW = "rainbow"
    SUNSET = "sunset"
    ICE = "ice"
    PSYCHEDELIC = "psychedelic"
    GOLD = "gold"
    COPPER = "copper"
    FOREST = "forest"
    GRAYSCALE = "grayscale"


def hsl_to_rgb(h, s, l) -> np.ndarray:
    """Convert hue in degrees, saturation and lightness in percent to floored 0-255 channels.

    Accepts scalars or arrays; the result has a trailing axis of length 3.
    """

    h = np.asarray(h, dtype=np.float64)
    s = np.asarray(s, dtype=np.float64) / 100.0
    l = np.asarray(l, dtype=np.float64) / 100.0
    a = s * np.minimum(l, 1.0 - l)

    def channel(n: int) -> np.ndarray:
        k = np.mod(n + h / 30.0, 12.0)
        return l - a * np.maximum(-1.0, np.minimum(np.minimum(k - 3.0, 9.0 - k), 1.0))

    rgb = np.stack([channel(0), channel(8), channel(4)], axis=-1)
    return np.floor(255.0 * rgb)


def _classic(t):
    return np.stack(
        [
            9.0 * (1 - t) * t * t * t * 255,
            15.0 * (1 - t) * (1 - t) * t * t * 255,
            8.5 * (1 - t) * (1 - t) * (1 - t) * t * 255,
        ],
        axis=-1,
    )


def _fire(t):
    return np.stack([255 * t ** 0.4, 255 * t ** 1.5, 50 * t ** 3], axis=-1)


def _ocean(t):
    return np.stack([50 * t, 150 * np.sqrt(t), 255 * t], axis=-1)


def _rainbow(t):
    return hsl_to_rgb(t * 360.0, 100.0, 50.0)


def _sunset(t):
    return np.stack([255 * np.sqrt(t), 140 * t, 80 * (1 - t) ** 2], axis=-1)


def _ice(t):
    return np.stack([200 * t + 55 * (1 - t), 230 * t + 25 * (1 - t), 255 * np.sqrt(t)], axis=-1)


def _psychedelic(t):
    phase = t * np.pi * 4
    return np.stack(
        [128 + 127 * np.sin(phase), 128 + 127 * np.sin(phase + 2), 128 + 127 * np.sin(phase + 4)],
        axis=-1,
    )


def _gold(t):
    return np.stack([255 * t ** 0.5, 215 * t ** 0.7, 50 * t], axis=-1)


def _copper(t):
    return np.stack([184 * t ** 0.6, 115 * t ** 0.8, 51 * t], axis=-1)


def _forest(t):
    return np.stack([34 * t, 139 * t ** 0.7, 34 * t ** 0.5], axis=-1)


def _grayscale(t):
    gray = 255 * t
    return np.stack([gray, gray, gray], axis=-1)


PALETTES: dict[ColorScheme, Palette] = {
    ColorScheme.CLASSIC: _classic,
    ColorScheme.FIRE: _fire,
    ColorScheme.OCEAN: _ocean,
    ColorScheme.RAINBOW: _rainbow,
    ColorScheme.SUNSET: _sunset,
    ColorScheme.ICE: _ice,
    ColorScheme.PSYCHEDELIC: _psychedelic,
    ColorScheme.GOLD: _gold,
    ColorScheme.COPPER: _copper,
    ColorScheme.FOREST: _forest,
    ColorScheme.GRAYSCALE: _grayscale,
}


def _colormap_palette(name: str) -> Palette:
    try:
        cmap = _mpl_colormaps[name]
    except (KeyError, ValueError) as exc:
        raise ValueError(
            f"Unknown color scheme '{name}'. Use one of {', '.join(s.value for s in ColorScheme)} "
            "or a matplotlib colormap name."
        ) from exc

    def palette(t):
        return np.asarray(cmap(t), dtype=np.float64)[..., :3] * 255.0

    return palette


def resolve_palette(scheme: ColorScheme | str) -> Palette:
    """Return the palette for a built-in scheme or a matplotlib colormap name."""

    try:
        return PALETTES[ColorScheme(scheme)]
    except ValueError:
        return _colormap_palette(str(scheme))


def colorize(values: np.ndarray, max_iterations: int, scheme: ColorScheme | str) -> np.ndarray:
    """Map escape values to ``uint8`` RGB; points that never escaped are black."""

    palette = resolve_palette(scheme)
    values = np.asarray(values, dtype=np.float64)
    inside = np.floor(values) >= max_iterations
    t = np.clip(values / max_iterations, 0.0, 1.0)
    rgb = np.floor(np.clip(palette(t), 0.0, 255.0)).astype(np.uint8)
    rgb[inside] = 0
    return rgb


def map_color(value: float, max_iterations: int, scheme: ColorScheme | str) -> tuple[int, int, int]:
    r, g, b = colorize(np.array([value]), max_iterations, scheme)[0]
    return int(r), int(g), int(b)
