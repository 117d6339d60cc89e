import pytest

from fractals import (
    MAX_ITERATION_CAP,
    Viewport,
    compute_letterbox,
    convert_selection,
    fit_selection_to_aspect,
    iteration_budget,
    normalize_selection,
)


@pytest.mark.parametrize(
    "base, zoom, expected",
    [
        (100, 1.0, 100),
        (100, 4.0, 200),
        (100, 0.25, 100),
        (100, 1e12, MAX_ITERATION_CAP),
        (6000, 1.0, MAX_ITERATION_CAP),
        (1, 9.0, 3),
    ],
)
def test_iteration_budget(base, zoom, expected):
    assert iteration_budget(base, zoom) == expected


def test_iteration_budget_never_decreases_with_zoom():
    zooms = [0.5, 1.0, 1.5, 2.0, 10.0, 100.0, 1e4, 1e8]
    budgets = [iteration_budget(150, z) for z in zooms]
    assert budgets == sorted(budgets)
    assert all(150 <= b <= MAX_ITERATION_CAP for b in budgets)


def test_normalize_selection_orders_corners():
    assert normalize_selection((5, 9), (1, 2)) == (1, 2, 5, 9)
    assert normalize_selection((1, 2), (5, 9)) == (1, 2, 5, 9)


@pytest.mark.parametrize(
    "start, end",
    [
        ((100, 100), (108, 108)),
        ((100, 100), (110, 150)),
        ((100, 100), (150, 110)),
        ((100, 100), (100, 100)),
    ],
)
def test_small_selections_are_rejected(start, end):
    viewport = Viewport()
    letterbox = compute_letterbox(800, 600, viewport.range_x, viewport.range_y)
    assert convert_selection(start, end, 800, 600, letterbox, viewport) is None


def test_selection_just_above_minimum_is_accepted():
    viewport = Viewport()
    letterbox = compute_letterbox(800, 600, viewport.range_x, viewport.range_y)
    selected = convert_selection((100, 100), (112, 112), 800, 600, letterbox, viewport)
    assert selected is not None
    assert selected.zoom_level() > 1.0


def test_selection_maps_to_enclosed_rectangle():
    viewport = Viewport()
    letterbox = compute_letterbox(700, 400, viewport.range_x, viewport.range_y)
    assert (letterbox.render_width, letterbox.render_height) == (700, 400)

    selected = convert_selection((350, 200), (175, 100), 700, 400, letterbox, viewport)

    assert selected.center_x == pytest.approx(-0.9375)
    assert selected.center_y == pytest.approx(-0.25)
    assert selected.range_x == pytest.approx(0.875)
    assert selected.range_y == pytest.approx(0.5)
    assert selected.zoom_level() == pytest.approx(4.0)
    # the viewport passed in stays where it was
    assert viewport == Viewport()


def test_selection_round_trips_through_pixel_mapping():
    viewport = Viewport(center_x=0.3, center_y=-0.1, range_x=0.7, range_y=0.4)
    letterbox = compute_letterbox(640, 480, viewport.range_x, viewport.range_y)
    start = (letterbox.offset_x + 64, letterbox.offset_y + 40)
    end = (letterbox.offset_x + 320, letterbox.offset_y + 200)

    selected = convert_selection(start, end, 640, 480, letterbox, viewport)

    min_real, min_imag = viewport.pixel_to_plane(64, 40, letterbox)
    max_real, max_imag = viewport.pixel_to_plane(320, 200, letterbox)
    assert selected.bounds() == pytest.approx((min_real, max_real, min_imag, max_imag))


def test_corners_in_letterbox_bars_are_clamped():
    viewport = Viewport()
    letterbox = compute_letterbox(1000, 400, viewport.range_x, viewport.range_y)
    assert (letterbox.render_width, letterbox.offset_x) == (700, 150)

    selected = convert_selection((0, 0), (500, 200), 1000, 400, letterbox, viewport)

    min_real, max_real, min_imag, max_imag = selected.bounds()
    assert min_real == pytest.approx(-2.25)
    assert max_real == pytest.approx(-0.5)
    assert min_imag == pytest.approx(-1.0)
    assert max_imag == pytest.approx(0.0)


def test_selection_entirely_inside_a_bar_is_rejected():
    viewport = Viewport()
    letterbox = compute_letterbox(1000, 400, viewport.range_x, viewport.range_y)
    assert convert_selection((0, 0), (100, 200), 1000, 400, letterbox, viewport) is None


def test_selection_without_render_area_is_rejected():
    viewport = Viewport()
    letterbox = compute_letterbox(0, 0, viewport.range_x, viewport.range_y)
    assert convert_selection((0, 0), (50, 50), 0, 0, letterbox, viewport) is None


@pytest.mark.parametrize(
    "start, end, expected",
    [
        ((100, 100), (140, 200), (300, 200)),
        ((100, 100), (60, 0), (-100, 0)),
        ((0, 0), (400, 50), (400, 200)),
        ((0, 0), (50, 0), (50, 25)),
    ],
)
def test_fit_selection_to_aspect(start, end, expected):
    assert fit_selection_to_aspect(start, end, 800, 400) == pytest.approx(expected)


def test_fit_selection_ignores_empty_canvas():
    assert fit_selection_to_aspect((0, 0), (30, 40), 0, 100) == (30, 40)
