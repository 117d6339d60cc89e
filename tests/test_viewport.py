import pytest

from fractals import LetterboxGeometry, Viewport, compute_letterbox


def test_defaults_and_reset():
    viewport = Viewport()
    assert (viewport.center_x, viewport.center_y) == (-0.5, 0.0)
    assert (viewport.range_x, viewport.range_y) == (3.5, 2.0)
    assert viewport.zoom_level() == 1.0

    viewport.set_from_complex_rect(-1.0, 0.0, -0.25, 0.25)
    viewport.reset()
    assert viewport == Viewport()


def test_pixel_to_plane_maps_corners_and_center():
    viewport = Viewport()
    letterbox = LetterboxGeometry(render_width=350, render_height=200, offset_x=0, offset_y=0)

    assert viewport.pixel_to_plane(0, 0, letterbox) == pytest.approx((-2.25, -1.0))
    assert viewport.pixel_to_plane(175, 100, letterbox) == pytest.approx((-0.5, 0.0))
    assert viewport.pixel_to_plane(350, 200, letterbox) == pytest.approx((1.25, 1.0))


def test_plane_grid_matches_scalar_mapping():
    viewport = Viewport(center_x=0.3, center_y=-0.1, range_x=0.7, range_y=0.4)
    letterbox = LetterboxGeometry(render_width=35, render_height=20, offset_x=3, offset_y=0)

    xs, ys = viewport.plane_grid(letterbox, 5, 9)

    assert xs.shape == ys.shape == (4, 35)
    for row in range(5, 9):
        for col in (0, 17, 34):
            assert (xs[row - 5, col], ys[row - 5, col]) == viewport.pixel_to_plane(col, row, letterbox)


def test_set_from_complex_rect_and_zoom_level():
    viewport = Viewport()
    viewport.set_from_complex_rect(-1.0, -0.125, -0.25, 0.25)

    assert viewport.center_x == pytest.approx(-0.5625)
    assert viewport.center_y == pytest.approx(0.0)
    assert viewport.range_x == pytest.approx(0.875)
    assert viewport.range_y == pytest.approx(0.5)
    assert viewport.zoom_level() == pytest.approx(4.0)
    assert viewport.bounds() == pytest.approx((-1.0, -0.125, -0.25, 0.25))


def test_set_from_complex_rect_rejects_empty_rectangle():
    viewport = Viewport()
    with pytest.raises(ValueError):
        viewport.set_from_complex_rect(0.5, 0.5, -1.0, 1.0)
    assert viewport == Viewport()


def test_snapshot_is_independent():
    viewport = Viewport()
    copy = viewport.snapshot()
    viewport.set_from_complex_rect(0.0, 1.0, 0.0, 1.0)
    assert copy == Viewport()


@pytest.mark.parametrize(
    "canvas, ranges",
    [
        ((800, 600), (3.5, 2.0)),
        ((600, 800), (3.5, 2.0)),
        ((1920, 1080), (3.5, 2.0)),
        ((300, 300), (0.01, 0.04)),
        ((123, 457), (1.0, 1.0)),
        ((700, 400), (3.5, 2.0)),
    ],
)
def test_letterbox_fits_canvas_and_keeps_aspect(canvas, ranges):
    width, height = canvas
    range_x, range_y = ranges
    box = compute_letterbox(width, height, range_x, range_y)

    assert 0 < box.render_width <= width
    assert 0 < box.render_height <= height
    assert box.render_width == width or box.render_height == height
    # the shrunk axis loses at most one pixel to flooring
    assert box.render_width / box.render_height == pytest.approx(
        range_x / range_y, rel=1.0 / min(box.render_width, box.render_height)
    )
    # centered with margins that differ by at most one pixel
    assert abs((width - box.render_width - box.offset_x) - box.offset_x) <= 1
    assert abs((height - box.render_height - box.offset_y) - box.offset_y) <= 1


def test_letterbox_bars_left_right_on_wide_canvas():
    box = compute_letterbox(1000, 400, 3.5, 2.0)
    assert box == LetterboxGeometry(render_width=700, render_height=400, offset_x=150, offset_y=0)


def test_letterbox_bars_top_bottom_on_tall_canvas():
    box = compute_letterbox(350, 400, 3.5, 2.0)
    assert box == LetterboxGeometry(render_width=350, render_height=200, offset_x=0, offset_y=100)


def test_letterbox_zero_canvas_is_empty():
    box = compute_letterbox(0, 480, 3.5, 2.0)
    assert box.is_empty
    assert box == LetterboxGeometry(0, 0, 0, 0)

