"""
Tests for transforms, transitions, easing curves and notifications.
"""
import pytest

from panzoom_core.easing import EASING_FUNCTIONS, clamp, css_timing, get_easing, lerp
from panzoom_core.geometry import PanZoomState, SurfaceMetrics
from panzoom_core.surfaces import VirtualSurface
from panzoom_core.transform import (
    INSTANT,
    NotificationHub,
    Transform,
    Transition,
    TransformEmitter,
)


class TestTransform:

    def test_css_matrix(self):
        assert Transform(0.5, -400, -300).to_css() == 'matrix(0.5, 0, 0, 0.5, -400, -300)'
        assert Transform(2.5, -350, -262.5).to_css() == 'matrix(2.5, 0, 0, 2.5, -350, -262.5)'
        assert Transform().to_css() == 'matrix(1, 0, 0, 1, 0, 0)'

    def test_matrix(self):
        assert Transform(2, 10, 20).to_matrix() == (2, 0, 0, 2, 10, 20)

    def test_from_state(self):
        assert Transform.from_state(PanZoomState(3, 1, 2)) == Transform(3, 1, 2)

    def test_interpolate(self):
        start, end = Transform(1, 0, 0), Transform(3, -100, 50)
        assert start.interpolate(end, 0) == start
        assert start.interpolate(end, 1) == end
        assert start.interpolate(end, 0.5) == Transform(2, -50, 25)


class TestTransition:

    def test_instant(self):
        assert not INSTANT.enabled
        assert INSTANT.to_css() == 'none'
        assert INSTANT.progress(0) == 1.0

    def test_css(self):
        assert Transition(400, 'ease').to_css() == 'transform 400ms ease'
        assert Transition(250.5, 'ease_in_out').to_css() == 'transform 250.5ms ease-in-out'
        assert Transition(100, 'unknown').to_css() == 'transform 100ms linear'

    def test_progress(self):
        transition = Transition(400, 'linear')
        assert transition.progress(0) == 0
        assert transition.progress(100) == 0.25
        assert transition.progress(400) == 1
        assert transition.progress(1000) == 1


class TestEasing:

    @pytest.mark.parametrize('name', sorted(EASING_FUNCTIONS))
    def test_endpoints(self, name):
        curve = get_easing(name)
        assert curve(0) == pytest.approx(0, abs=1e-6)
        assert curve(1) == pytest.approx(1, abs=1e-6)

    @pytest.mark.parametrize('name', sorted(EASING_FUNCTIONS))
    def test_monotonic(self, name):
        curve = get_easing(name)
        samples = [curve(i / 20) for i in range(21)]
        assert samples == sorted(samples)

    def test_css_keyword_curves(self):
        assert get_easing('ease_in_out')(0.5) == pytest.approx(0.5, abs=1e-4)
        assert get_easing('ease')(0.5) == pytest.approx(0.8024, abs=1e-3)
        assert get_easing('ease_in')(0.5) < 0.5 < get_easing('ease_out')(0.5)

    def test_unknown_names(self):
        assert get_easing('wobble')(0.3) == 0.3
        assert css_timing('wobble') == 'linear'

    def test_helpers(self):
        assert lerp(10, 20, 0.25) == 12.5
        assert clamp(5, 0, 3) == 3
        assert clamp(-1, 0, 3) == 0


class TestNotificationHub:

    def test_emit_passes_snapshot(self):
        hub = NotificationHub()
        seen = []
        hub.subscribe('zoom', seen.append)

        state = PanZoomState(2, 3, 4)
        hub.emit('zoom', state)
        state.zoom = 5

        assert seen == [{'zoom': 2, 'x': 3, 'y': 4}]

    def test_unsubscribe(self):
        hub = NotificationHub()
        seen = []
        unsubscribe = hub.subscribe('pan', seen.append)
        assert hub.listener_count('pan') == 1

        unsubscribe()
        unsubscribe()
        hub.emit('pan', PanZoomState())

        assert seen == []
        assert hub.listener_count('pan') == 0

    def test_unknown_channel(self):
        hub = NotificationHub()
        with pytest.raises(ValueError):
            hub.subscribe('rotate', print)
        with pytest.raises(ValueError):
            hub.emit('rotate', PanZoomState())

    def test_listener_errors_propagate(self):
        hub = NotificationHub()

        def fail(state):
            raise KeyError('boom')

        hub.subscribe('change', fail)
        with pytest.raises(KeyError):
            hub.emit('change', PanZoomState())


class TestTransformEmitter:

    @pytest.fixture
    def surface(self):
        return VirtualSurface('content', 1600, 1200)

    def test_commit_clamps_and_applies(self, surface, metrics):
        hub = NotificationHub()
        changes = []
        hub.subscribe('change', changes.append)
        emitter = TransformEmitter(surface, hub)

        state = PanZoomState(1, 500, -5000)
        transform = emitter.commit(state, metrics)

        assert (state.x, state.y) == (0, -600)
        assert transform == Transform(1, 0, -600)
        assert surface.transform == transform
        assert surface.transition == Transition(400, 'ease')
        assert emitter.last_transform == transform
        assert changes == [{'zoom': 1, 'x': 0, 'y': -600}]

    def test_commit_without_bounds(self, surface, metrics):
        emitter = TransformEmitter(surface, NotificationHub(), bounds_enabled=False)
        state = PanZoomState(1, 500, -5000)
        emitter.commit(state, metrics, instant=True)
        assert (state.x, state.y) == (500, -5000)
        assert surface.transition == INSTANT

    def test_commit_is_idempotent(self, surface, metrics):
        emitter = TransformEmitter(surface, NotificationHub())
        state = PanZoomState(2.2, 3000, 3000)
        first = emitter.commit(state, metrics)
        second = emitter.commit(state, metrics)
        assert first == second

    def test_transition_settings(self, surface):
        emitter = TransformEmitter(surface, NotificationHub(), transition_speed=0)
        assert emitter.transition_for(False) == Transition(0, 'ease')
        assert emitter.transition_for(True) is INSTANT


class TestPresentedTransform:

    def test_animates_between_transforms(self):
        surface = VirtualSurface('content', 100, 100)
        assert surface.presented_transform(0) == Transform()

        surface.apply(Transform(1, 0, 0), INSTANT)
        assert surface.presented_transform(0) == Transform(1, 0, 0)

        surface.apply(Transform(3, -100, 0), Transition(400, 'linear'))
        assert surface.presented_transform(0) == Transform(1, 0, 0)
        assert surface.presented_transform(200) == Transform(2, -50, 0)
        assert surface.presented_transform(800) == Transform(3, -100, 0)
        assert surface.apply_count == 2
