"""
Shared fixtures for pan/zoom tests.

Provides virtual surfaces, a registry holding them, a controller factory
and a recorder for notifications.
"""
import pytest

from panzoom_core import PanZoomController, SurfaceMetrics, SurfaceRegistry, VirtualSurface


class Recorder:
    """Collects (channel, snapshot) pairs from controller notifications."""

    def __init__(self):
        self.events = []

    def callbacks(self):
        return {
            f'on_{channel}': (lambda state, channel=channel: self.events.append((channel, state)))
            for channel in ('init', 'change', 'zoom', 'pan')
        }

    @property
    def channels(self):
        return [channel for channel, _ in self.events]

    def clear(self):
        self.events = []


@pytest.fixture
def viewport():
    return VirtualSurface('viewport', 800, 600)


@pytest.fixture
def content():
    return VirtualSurface('content', 1600, 1200)


@pytest.fixture
def metrics():
    return SurfaceMetrics(800, 600, 1600, 1200)


@pytest.fixture
def registry(viewport, content):
    registry = SurfaceRegistry()
    registry.register('viewport', viewport)
    registry.register('content', content)
    return registry


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def make_controller(registry):
    def factory(**options):
        options.setdefault('viewport', '#viewport')
        options.setdefault('content', '#content')
        return PanZoomController(options, registry=registry)
    return factory
