"""
Tests for the geometry functions: zoom sanitizing, bounds clamping,
zoom anchoring and pan percentages.
"""
import math

import pytest

from panzoom_core.errors import DegenerateGeometryError
from panzoom_core.geometry import (
    PanZoomState,
    SurfaceMetrics,
    adjust_position_for_zoom,
    clamp_offsets,
    derive_min_zoom,
    fit_zoom,
    get_pan_percent,
    midpoint,
    offset_to_center,
    pan_by_step,
    pan_pixels,
    pan_to_percent,
    pointer_distance,
    sanitize_zoom,
    zoom_step_factor,
)

SQUARE = SurfaceMetrics(800, 600, 1000, 1000)


def screen_x(state, local_x, content_width):
    """Where a content-local x coordinate ends up in the viewport."""
    center = content_width / 2
    return center + state.zoom * (local_x - center) + state.x


class TestSurfaceMetrics:

    def test_valid_metrics(self, metrics):
        assert not metrics.is_degenerate
        assert metrics.require_valid() is metrics

    @pytest.mark.parametrize('sizes', [
        (0, 600, 1600, 1200),
        (800, -1, 1600, 1200),
        (800, 600, 0, 1200),
        (800, 600, 1600, float('nan')),
        (800, 600, float('inf'), 1200),
    ])
    def test_degenerate_metrics(self, sizes):
        metrics = SurfaceMetrics(*sizes)
        assert metrics.is_degenerate
        with pytest.raises(DegenerateGeometryError):
            metrics.require_valid()

    def test_measure_reads_surfaces(self, viewport, content):
        metrics = SurfaceMetrics.measure(viewport, content)
        assert metrics == SurfaceMetrics(800.0, 600.0, 1600.0, 1200.0)


class TestZoom:

    def test_fit_zoom(self):
        assert fit_zoom('contain', SQUARE) == pytest.approx(0.6)
        assert fit_zoom('cover', SQUARE) == pytest.approx(0.8)

    def test_fit_zoom_unknown_mode(self):
        with pytest.raises(ValueError):
            fit_zoom('stretch', SQUARE)

    def test_fit_zoom_degenerate(self):
        with pytest.raises(DegenerateGeometryError):
            fit_zoom('contain', SurfaceMetrics(800, 600, 0, 0))

    @pytest.mark.parametrize('requested, expected', [
        (0.01, 0.1),
        (0.1, 0.1),
        (1.0, 1.0),
        (5.0, 5.0),
        (10.0, 10.0),
        (50.0, 10.0),
    ])
    def test_sanitize_numeric_clamps(self, metrics, requested, expected):
        assert sanitize_zoom(requested, metrics, 0.1, 10) == expected

    def test_sanitize_symbolic(self):
        assert sanitize_zoom('contain', SQUARE, 0.1, 10) == pytest.approx(0.6)
        assert sanitize_zoom('cover', SQUARE, 0.1, 10) == pytest.approx(0.8)
        assert sanitize_zoom('contain', SQUARE, 1, 10) == 1

    def test_locked_zoom(self, metrics):
        for requested in (0.2, 1, 3, 'contain', 'cover'):
            assert sanitize_zoom(requested, metrics, 1, 1) == 1

    def test_derive_min_zoom(self):
        assert derive_min_zoom(0.1, SQUARE, 'cover') == pytest.approx(0.8)
        assert derive_min_zoom(0.1, SQUARE, 'contain') == pytest.approx(0.6)
        assert derive_min_zoom(0.7, SQUARE, 'contain') == 0.7
        assert derive_min_zoom(0.1, SQUARE, 'off') == 0.1

    def test_zoom_step_factor(self):
        assert zoom_step_factor(50, 'in') == 1.5
        assert zoom_step_factor(50, 'out') == pytest.approx(1 / 1.5)
        with pytest.raises(ValueError):
            zoom_step_factor(50, 'sideways')


class TestClampOffsets:

    def test_larger_content_is_clamped_to_its_edges(self, metrics):
        assert clamp_offsets(PanZoomState(1, 100, 50), metrics) == (0, 0)
        assert clamp_offsets(PanZoomState(1, -1000, -900), metrics) == (-800, -600)
        assert clamp_offsets(PanZoomState(1, -300, -200), metrics) == (-300, -200)

    def test_smaller_content_stays_inside_viewport(self):
        # Scaled to 500x500 inside 800x600
        assert clamp_offsets(PanZoomState(0.5, -300, 0), SQUARE) == (-250, -150)
        assert clamp_offsets(PanZoomState(0.5, 100, -300), SQUARE) == (50, -250)

    def test_smaller_content_accepts_any_position_in_window(self):
        assert clamp_offsets(PanZoomState(0.5, 0, -200), SQUARE) == (0, -200)
        assert clamp_offsets(PanZoomState(0.5, -250, -150), SQUARE) == (-250, -150)

    @pytest.mark.parametrize('zoom', [0.5, 1.0, 2.0, 5.0])
    @pytest.mark.parametrize('x', [-5000.0, -800.0, -123.4, 0.0, 350.0, 5000.0])
    def test_no_empty_space_when_content_covers_viewport(self, metrics, zoom, x):
        state = PanZoomState(zoom, x, x)
        state.x, state.y = clamp_offsets(state, metrics)

        upper_x = metrics.content_width / 2 * (zoom - 1)
        left = state.x - upper_x
        right = left + metrics.content_width * zoom
        assert left <= 1e-9
        assert right >= metrics.viewport_width - 1e-9

        upper_y = metrics.content_height / 2 * (zoom - 1)
        top = state.y - upper_y
        bottom = top + metrics.content_height * zoom
        assert top <= 1e-9
        assert bottom >= metrics.viewport_height - 1e-9

    def test_clamping_is_idempotent(self, metrics):
        state = PanZoomState(2.5, 4000, -4000)
        state.x, state.y = clamp_offsets(state, metrics)
        assert clamp_offsets(state, metrics) == (state.x, state.y)


class TestZoomAnchor:

    def test_offset_to_viewport_center(self, metrics):
        assert offset_to_center(PanZoomState(1, 0, 0), metrics) == (400, 300)

    def test_offset_to_pointer(self, metrics):
        assert offset_to_center(PanZoomState(1, 0, 0), metrics, (100, 50)) == (700, 550)

    def test_adjust_moves_by_growth(self, metrics):
        state = PanZoomState(1, 0, 0)
        adjust_position_for_zoom(state, 2, 100, -50, metrics)
        assert (state.x, state.y) == (100, -50)
        assert state.zoom == 1

    def test_adjust_caps_anchor_at_half_content(self, metrics):
        state = PanZoomState(1, 0, 0)
        adjust_position_for_zoom(state, 2, 1000, -700, metrics)
        assert (state.x, state.y) == (800, -600)

    def test_anchor_point_stays_in_place(self, metrics):
        state = PanZoomState(1, -400, -300)
        pointer = (200, 150)
        local_x = (pointer[0] - 800 - state.x) / state.zoom + 800

        offset_x, offset_y = offset_to_center(state, metrics, pointer)
        adjust_position_for_zoom(state, 2, offset_x, offset_y, metrics)
        state.zoom = 2

        assert screen_x(state, local_x, metrics.content_width) == pytest.approx(pointer[0])

    def test_adjust_rejects_zero_zoom(self, metrics):
        with pytest.raises(DegenerateGeometryError):
            adjust_position_for_zoom(PanZoomState(0, 0, 0), 1, 0, 0, metrics)


class TestPan:

    def test_pan_to_center(self, metrics):
        assert pan_to_percent(50, 50, PanZoomState(0.5), metrics) == (-400, -300)

    def test_pan_pixels(self, metrics):
        assert pan_pixels(PanZoomState(0.5, -400, -300), metrics) == (400, 300)

    def test_get_pan_percent_centered(self, metrics):
        assert get_pan_percent(PanZoomState(0.5, -400, -300), metrics) == (50, 50)

    @pytest.mark.parametrize('zoom', [0.1, 0.5, 1.0, 3.7, 10.0])
    @pytest.mark.parametrize('x, y', [(0, 0), (-412.5, 97.25), (1200, -3000)])
    def test_round_trip(self, metrics, zoom, x, y):
        state = PanZoomState(zoom, x, y)
        percent_x, percent_y = get_pan_percent(state, metrics)
        back_x, back_y = pan_to_percent(percent_x, percent_y, state, metrics)
        assert back_x == pytest.approx(x)
        assert back_y == pytest.approx(y)

    def test_get_pan_percent_degenerate(self):
        with pytest.raises(DegenerateGeometryError):
            get_pan_percent(PanZoomState(1, 0, 0), SurfaceMetrics(800, 600, 0, 1200))

    def test_pan_by_step_uses_scaled_size(self, metrics):
        state = PanZoomState(2, 0, 0)
        assert pan_by_step(state, metrics, 10, 'left') == (-320, 0)
        assert pan_by_step(state, metrics, 10, 'right') == (320, 0)
        assert pan_by_step(state, metrics, 10, 'up') == (0, -240)
        assert pan_by_step(state, metrics, 10, 'down') == (0, 240)

    def test_pan_by_step_unknown_direction(self, metrics):
        with pytest.raises(ValueError):
            pan_by_step(PanZoomState(), metrics, 10, 'diagonal')


def test_pointer_distance_is_euclidean():
    assert pointer_distance((100, 100), (200, 100)) == 100
    assert pointer_distance((0, 0), (30, 40)) == 50
    assert math.isclose(pointer_distance((1, 1), (1, 1)), 0)


def test_midpoint():
    assert midpoint((100, 100), (200, 300)) == (150, 200)
