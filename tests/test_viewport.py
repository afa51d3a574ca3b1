"""Tests for the map viewport transform and gestures."""

import pytest

from ranchhand import config
from ranchhand.viewport import (
    OUT_OF_BOUNDS,
    GestureKind,
    ImagePercent,
    MapViewport,
    fit_to_container,
)


@pytest.fixture
def viewport():
    return MapViewport(800, 600)


class TestFit:
    def test_fit_uses_smaller_ratio(self):
        view = fit_to_container(800, 600, 4505, 3340)
        expected = min(800 / 4505, 600 / 3340)
        assert view.scale == pytest.approx(expected)
        assert view.scale == pytest.approx(0.17758, rel=1e-4)

    def test_fit_centres_image(self):
        view = fit_to_container(800, 600, 4505, 3340)
        # Width is the limiting dimension here, so horizontal pan is zero
        assert view.pan_x == pytest.approx(0)
        assert view.pan_y == pytest.approx((600 - 3340 * view.scale) / 2)
        assert view.pan_y > 0

    def test_tall_container(self):
        view = fit_to_container(300, 1000, 4505, 3340)
        assert view.scale == pytest.approx(300 / 4505)
        assert view.pan_x == pytest.approx(0)

    def test_initial_view_is_fit(self, viewport):
        assert viewport.state == fit_to_container(800, 600)
        assert viewport.zoom_percent == 100

    def test_rejects_empty_container(self):
        with pytest.raises(ValueError):
            MapViewport(0, 600)


class TestZoom:
    @pytest.mark.parametrize("point", [(0, 0), (400, 300), (123.4, 456.7), (799, 5)])
    def test_zoom_keeps_point_fixed(self, viewport, point):
        before = viewport.screen_to_image(*point)
        assert viewport.zoom_at(point[0], point[1], 1, 0.5)
        after = viewport.screen_to_image(*point)
        assert after == pytest.approx(before)

    def test_zoom_out_keeps_point_fixed(self, viewport):
        viewport.zoom_at(200, 200, 1, 2)
        before = viewport.screen_to_image(600, 100)
        viewport.zoom_at(600, 100, -1, 0.5)
        assert viewport.screen_to_image(600, 100) == pytest.approx(before)

    def test_cannot_zoom_below_fit(self, viewport):
        assert viewport.zoom_at(400, 300, -1, 0.5) is False
        assert viewport.scale == viewport.fit_scale

    def test_zoom_out_clamps_to_fit(self, viewport):
        viewport.zoom_at(400, 300, 1, 0.1)
        viewport.zoom_at(400, 300, -1, 5)
        assert viewport.scale == viewport.fit_scale

    def test_cannot_zoom_past_max(self, viewport):
        for _ in range(50):
            viewport.zoom_button(1)
        assert viewport.scale == config.MAX_ZOOM
        assert viewport.zoom_button(1) is False

    def test_wheel_direction(self, viewport):
        viewport.wheel(100, 100, -120)
        assert viewport.scale == pytest.approx(viewport.fit_scale + config.ZOOM_WHEEL_STEP)
        viewport.wheel(100, 100, 120)
        assert viewport.scale == pytest.approx(viewport.fit_scale)

    def test_zoom_button_uses_centre(self, viewport):
        before = viewport.screen_to_image(400, 300)
        viewport.zoom_button(1)
        assert viewport.scale == pytest.approx(viewport.fit_scale + config.ZOOM_STEP)
        assert viewport.screen_to_image(400, 300) == pytest.approx(before)

    def test_reset_view(self, viewport):
        viewport.zoom_button(1)
        viewport.pan_by(30, -20)
        assert viewport.reset_view() == fit_to_container(800, 600)

    def test_resize_snaps_when_below_new_floor(self, viewport):
        viewport.resize(1600, 1200)
        assert viewport.scale == viewport.fit_scale
        assert viewport.state == fit_to_container(1600, 1200)

    def test_resize_keeps_zoom_above_floor(self, viewport):
        viewport.zoom_button(1)
        scale = viewport.scale
        viewport.resize(400, 300)
        assert viewport.scale == scale


class TestCoordinates:
    def test_round_trip(self, viewport):
        viewport.zoom_at(100, 100, 1, 1)
        ix, iy = viewport.screen_to_image(321, 123)
        assert viewport.image_to_screen(ix, iy) == pytest.approx((321, 123))

    def test_centre_is_fifty_percent(self, viewport):
        point = viewport.screen_to_image_percent(400, 300)
        assert point.x_pct == pytest.approx(50)
        assert point.y_pct == pytest.approx(50)

    def test_letterbox_is_out_of_bounds(self, viewport):
        # The image starts about 3.4px down at this size
        assert viewport.screen_to_image_percent(400, 1) is OUT_OF_BOUNDS

    def test_outside_container_is_out_of_bounds(self, viewport):
        assert viewport.screen_to_image_percent(-10, 300) is OUT_OF_BOUNDS
        assert not OUT_OF_BOUNDS

    def test_percent_to_screen(self, viewport):
        sx, sy = viewport.percent_to_screen(50, 50)
        assert (sx, sy) == pytest.approx((400, 300))


class TestGestures:
    def test_click_places(self, viewport):
        viewport.pointer_down(400, 300)
        viewport.pointer_move(402, 301)
        outcome = viewport.pointer_up(402, 301)
        assert outcome.kind == GestureKind.PLACE
        assert isinstance(outcome.point, ImagePercent)
        assert outcome.point.x_pct == pytest.approx(
            viewport.screen_to_image_percent(402, 301).x_pct
        )

    def test_drag_pans_and_never_places(self, viewport):
        start = viewport.state
        viewport.pointer_down(400, 300)
        viewport.pointer_move(420, 310)
        outcome = viewport.pointer_up(420, 310)
        assert outcome.kind == GestureKind.PAN
        assert outcome.point is None
        assert viewport.pan_x == pytest.approx(start.pan_x + 20)
        assert viewport.pan_y == pytest.approx(start.pan_y + 10)

    def test_drag_back_to_start_is_still_pan(self, viewport):
        viewport.pointer_down(400, 300)
        viewport.pointer_move(440, 300)
        viewport.pointer_move(401, 300)
        assert viewport.pointer_up(400, 300).kind == GestureKind.PAN

    def test_threshold_is_exclusive(self, viewport):
        viewport.pointer_down(400, 300)
        viewport.pointer_move(400 + config.DRAG_THRESHOLD, 300)
        assert viewport.pointer_up(400 + config.DRAG_THRESHOLD, 300).kind == GestureKind.PLACE

    def test_release_past_threshold_without_move_is_pan(self, viewport):
        viewport.pointer_down(400, 300)
        assert viewport.pointer_up(450, 300).kind == GestureKind.PAN

    def test_press_on_pin_selects(self, viewport):
        viewport.pointer_down(400, 300, pin_id="pin-1")
        outcome = viewport.pointer_up(400, 300)
        assert outcome.kind == GestureKind.SELECT
        assert outcome.pin_id == "pin-1"

    def test_drag_from_pin_pans(self, viewport):
        viewport.pointer_down(400, 300, pin_id="pin-1")
        assert viewport.pointer_up(480, 300).kind == GestureKind.PAN

    def test_click_off_image_does_nothing(self, viewport):
        viewport.pointer_down(400, 1)
        assert viewport.pointer_up(400, 1).kind == GestureKind.NONE

    def test_read_only_never_places(self):
        viewport = MapViewport(800, 600, read_only=True)
        viewport.pointer_down(400, 300)
        assert viewport.pointer_up(400, 300).kind == GestureKind.NONE
        viewport.pointer_down(400, 300, pin_id="pin-1")
        assert viewport.pointer_up(400, 300).kind == GestureKind.SELECT

    def test_up_without_down(self, viewport):
        assert viewport.pointer_up(1, 1).kind == GestureKind.NONE

    def test_cancel(self, viewport):
        viewport.pointer_down(400, 300)
        viewport.cancel_gesture()
        assert viewport.pointer_up(400, 300).kind == GestureKind.NONE
