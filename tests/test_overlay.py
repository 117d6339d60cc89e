import numpy as np
import PIL.Image

from fractals import annotate_status, draw_selection
from fractals.overlay import SELECTION_OUTLINE


def black(width=200, height=120, mode="RGBA"):
    return PIL.Image.new(mode, (width, height), 0)


def test_status_panel_is_drawn_top_left():
    image = black()
    annotated = annotate_status(image, ["Zoom: 1.0x | Iter: 100", "Time: 0.12s"])

    assert annotated.mode == "RGBA"
    assert annotated.size == image.size
    before = np.asarray(image)
    after = np.asarray(annotated)
    assert not np.array_equal(before[:60, :], after[:60, :])
    # the far corner is untouched and the input is not modified
    assert tuple(after[-1, -1]) == (0, 0, 0, 0)
    assert np.all(np.asarray(image) == 0)


def test_status_without_lines_is_a_copy():
    image = black()
    annotated = annotate_status(image, ["", ""])
    assert annotated is not image
    assert np.array_equal(np.asarray(annotated), np.asarray(image))


def test_status_converts_rgb_input():
    annotated = annotate_status(black(mode="RGB"), ["Zoom: 2.0x"])
    assert annotated.mode == "RGBA"


def test_selection_outline_and_fill():
    image = PIL.Image.new("RGBA", (100, 100), (0, 0, 0, 255))
    drawn = np.asarray(draw_selection(image, (60, 60), (20, 20)))

    assert tuple(drawn[20, 20]) == SELECTION_OUTLINE
    assert tuple(drawn[60, 40]) == SELECTION_OUTLINE
    inside = drawn[40, 40]
    assert 0 < inside[1] < SELECTION_OUTLINE[1]
    assert inside[3] == 255
    assert tuple(drawn[5, 5]) == (0, 0, 0, 255)
    assert tuple(drawn[80, 80]) == (0, 0, 0, 255)
