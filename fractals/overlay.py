"""Status panel and selection preview drawn over rendered frames."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import PIL.Image
import PIL.ImageDraw
import PIL.ImageFont

from .navigation import Point, normalize_selection

_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/freefont/FreeSans.ttf",
)

SELECTION_OUTLINE = (76, 175, 80, 255)
SELECTION_FILL = (76, 175, 80, 25)


def _status_font(image: PIL.Image.Image) -> PIL.ImageFont.ImageFont:
    size = max(12, int(round(max(min(image.size), 1) * 0.024)))
    for path in _FONT_CANDIDATES:
        if Path(path).exists():
            try:
                return PIL.ImageFont.truetype(path, size)
            except OSError:
                continue
    return PIL.ImageFont.load_default()


def _panel(size: tuple[int, int], radius: int) -> PIL.Image.Image:
    """A rounded panel fading from a dense navy at the top to a lighter one at the bottom."""

    width, height = size
    top = (18, 22, 40, 210)
    bottom = (10, 12, 24, 150)
    panel = PIL.Image.new("RGBA", size)
    draw = PIL.ImageDraw.Draw(panel)
    for y in range(height):
        ratio = y / (height - 1) if height > 1 else 0.0
        color = tuple(int(round(a + (b - a) * ratio)) for a, b in zip(top, bottom))
        draw.line([(0, y), (width, y)], fill=color)

    mask = PIL.Image.new("L", size, 0)
    PIL.ImageDraw.Draw(mask).rounded_rectangle(
        [(0, 0), (width - 1, height - 1)],
        radius=min(radius, min(size) // 2),
        fill=255,
    )
    return PIL.Image.composite(panel, PIL.Image.new("RGBA", size, (0, 0, 0, 0)), mask)


def annotate_status(image: PIL.Image.Image, lines: Sequence[str]) -> PIL.Image.Image:
    """Overlay ``lines`` in a translucent panel at the top-left corner of ``image``."""

    image = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
    lines = [line for line in lines if line]
    if not lines or image.width == 0 or image.height == 0:
        return image

    draw = PIL.ImageDraw.Draw(image, "RGBA")
    font = _status_font(image)
    font_size = getattr(font, "size", 12)
    padding = max(6, int(round(font_size * 0.6)))
    spacing = max(3, int(round(font_size * 0.35)))

    boxes = [draw.textbbox((0, 0), line, font=font) for line in lines]
    widths = [box[2] - box[0] for box in boxes]
    heights = [box[3] - box[1] for box in boxes]
    box_width = max(widths) + padding * 2
    box_height = sum(heights) + spacing * (len(lines) - 1) + padding * 2

    margin = 12
    panel = _panel((box_width, box_height), max(8, int(round(min(box_width, box_height) * 0.18))))
    image.paste(panel, (margin, margin), panel)

    shadow = max(1, int(round(font_size * 0.1)))
    y = margin + padding
    for line, height in zip(lines, heights):
        x = margin + padding
        draw.text((x + shadow, y + shadow), line, font=font, fill=(0, 0, 0, 170))
        draw.text((x, y), line, font=font, fill=(240, 244, 255, 255))
        y += height + spacing
    return image


def draw_selection(image: PIL.Image.Image, start: Point, end: Point) -> PIL.Image.Image:
    """Draw the pending zoom rectangle as a green outline with a faint fill."""

    image = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
    x1, y1, x2, y2 = (int(round(v)) for v in normalize_selection(start, end))
    overlay = PIL.Image.new("RGBA", image.size, (0, 0, 0, 0))
    PIL.ImageDraw.Draw(overlay).rectangle(
        [(x1, y1), (x2, y2)],
        fill=SELECTION_FILL,
        outline=SELECTION_OUTLINE,
        width=2,
    )
    return PIL.Image.alpha_composite(image, overlay)
