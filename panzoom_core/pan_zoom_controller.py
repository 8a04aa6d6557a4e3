"""
Pan Zoom Controller Module
Public pan/zoom API tying options, geometry, gestures and the transform emitter together
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .config_manager import (
    SYMBOLIC_ZOOMS,
    PanZoomOptions,
    is_number,
    resolve_options,
    split_callbacks,
)
from .easing import clamp
from .errors import ConfigurationError, DegenerateGeometryError
from .geometry import (
    PanZoomState,
    SurfaceMetrics,
    adjust_position_for_zoom,
    derive_min_zoom,
    get_pan_percent,
    offset_to_center,
    pan_by_step,
    pan_pixels,
    pan_to_percent,
    sanitize_zoom,
    zoom_step_factor,
)
from .gestures import (
    GestureMachine,
    PanDelta,
    PinchUpdate,
    PointerEvent,
    WheelEvent,
    pinch_zoom_factor,
    wheel_zoom_factor,
)
from .surfaces import SurfaceRegistry, to_local
from .transform import NotificationHub, Transform, TransformEmitter

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class PanZoomController:
    """
    Pans and zooms a content surface inside a viewport surface.

    The controller owns the pan/zoom state. Every mutator clamps the
    zoom to the configured limits, applies the bounds policy, pushes the
    transform to the content surface and notifies listeners. Mutators
    return the controller so calls can be chained.

    If a surface cannot be resolved the error is logged and the
    controller stays inert: mutators do nothing and getters report the
    last known state.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None,
                 registry: Optional[SurfaceRegistry] = None, **kwargs: Any):
        """
        Initialize the controller.

        Args:
            options: Option mapping (see PanZoomOptions), may include the
                on_init/on_change/on_zoom/on_pan callbacks
            registry: Registry used to resolve surface identifiers
            **kwargs: Options taking precedence over `options`
        """
        merged = dict(options or {})
        merged.update(kwargs)
        plain, callbacks = split_callbacks(merged)

        self._options: PanZoomOptions = resolve_options(plain)
        self._registry = registry or SurfaceRegistry()
        self._hub = NotificationHub()
        for key, callback in callbacks.items():
            self._hub.subscribe(key[len('on_'):], callback)

        self._state = PanZoomState()
        self._gestures = GestureMachine()
        self._viewport: Any = None
        self._content: Any = None
        self._emitter: Optional[TransformEmitter] = None
        self._last_metrics: Optional[SurfaceMetrics] = None

        try:
            self._viewport = self._registry.resolve(self._options.viewport, 'viewport')
            self._content = self._registry.resolve(self._options.content, 'content')
        except ConfigurationError as e:
            logger.error("Pan/zoom disabled: %s", e)
            return

        self._emitter = TransformEmitter(
            self._content,
            self._hub,
            transition_speed=self._options.transition_speed,
            transition_easing=self._options.transition_easing,
            bounds_enabled=self._options.bounds_enabled
        )
        self._initialize()

    def _initialize(self):
        options = self._options
        metrics = self._metrics()

        if metrics is None:
            initial = 1.0 if isinstance(options.initial_zoom, str) else options.initial_zoom
            self._state.zoom = clamp(initial, options.min_zoom, options.max_zoom)
        else:
            if options.bounds_enabled:
                # Never past max_zoom, even if the bounds mode cannot be met
                min_zoom = min(derive_min_zoom(options.min_zoom, metrics, options.bounds),
                               options.max_zoom)
                if min_zoom != options.min_zoom:
                    logger.debug("Raised min_zoom from %s to %s for bounds '%s'",
                                 options.min_zoom, min_zoom, options.bounds)
                    self._options = options.with_min_zoom(min_zoom)

            self._state.zoom = self._sanitize(options.initial_zoom, metrics)

            if options.center:
                self.center(instant=True)
            else:
                self.pan_to(options.initial_pan_x, options.initial_pan_y, instant=True)

        self._hub.emit('init', self._state)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _metrics(self) -> Optional[SurfaceMetrics]:
        """Fresh surface metrics, or None when the controller cannot act."""
        if self._emitter is None:
            return None
        try:
            metrics = SurfaceMetrics.measure(self._viewport, self._content).require_valid()
        except DegenerateGeometryError as e:
            logger.warning("Ignoring pan/zoom update, degenerate surfaces: %s", e)
            return None
        self._last_metrics = metrics
        return metrics

    def _accepts(self, operation: str, *values: Any) -> bool:
        """False, with a warning, unless every value is a finite number."""
        if all(is_number(v) for v in values):
            return True
        logger.warning("Ignoring %s with invalid arguments %r", operation, values)
        return False

    def _sanitize(self, zoom: Union[float, str], metrics: SurfaceMetrics) -> float:
        if isinstance(zoom, str):
            # Fit ratios are computed from a centred content surface
            self._state.x, self._state.y = pan_to_percent(50, 50, self._state, metrics)
        return sanitize_zoom(zoom, metrics, self._options.min_zoom, self._options.max_zoom)

    def _to_local(self, point: Point) -> Point:
        return to_local(self._viewport, point[0], point[1])

    def _commit(self, metrics: SurfaceMetrics, instant: bool) -> None:
        self._emitter.commit(self._state, metrics, instant)

    def _zoom_around(self, zoom: float, anchor: Optional[Point],
                     metrics: SurfaceMetrics) -> None:
        offset_x, offset_y = offset_to_center(self._state, metrics, anchor)
        adjust_position_for_zoom(self._state, zoom, offset_x, offset_y, metrics)
        self._state.zoom = zoom

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        """False if the surfaces could not be resolved."""
        return self._emitter is not None

    @property
    def options(self) -> PanZoomOptions:
        return self._options

    @property
    def gestures(self) -> GestureMachine:
        return self._gestures

    @property
    def viewport(self) -> Any:
        return self._viewport

    @property
    def content(self) -> Any:
        return self._content

    @property
    def transform(self) -> Transform:
        """Transform describing the current state."""
        return Transform.from_state(self._state)

    def subscribe(self, channel: str, listener: Callable[[Dict[str, float]], Any]):
        """
        Listen to 'init', 'change', 'zoom' or 'pan' notifications.

        Returns:
            Function that removes the listener again
        """
        return self._hub.subscribe(channel, listener)

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    def get_zoom(self) -> float:
        return self._state.zoom

    def get_position(self) -> Dict[str, float]:
        """Current {zoom, x, y} snapshot."""
        return self._state.to_dict()

    def get_pan(self, pixel_values: bool = False) -> Dict[str, float]:
        """
        Content position at the viewport centre.

        Args:
            pixel_values: Return scaled-content pixels instead of percent

        Returns:
            Dict with 'x' and 'y'. While the surfaces cannot be measured
            the last measured sizes are used; if they were never known
            the centre is reported.
        """
        metrics = self._metrics() or self._last_metrics
        if metrics is None:
            return {'x': 50.0, 'y': 50.0} if not pixel_values else {'x': 0.0, 'y': 0.0}
        if pixel_values:
            x, y = pan_pixels(self._state, metrics)
        else:
            x, y = get_pan_percent(self._state, metrics)
        return {'x': x, 'y': y}

    # ------------------------------------------------------------------
    # Zooming
    # ------------------------------------------------------------------

    def zoom_to(self, zoom: Union[float, str], instant: bool = False,
                anchor: Optional[Point] = None) -> 'PanZoomController':
        """
        Zoom to a value, keeping the viewport centre (or anchor) in place.

        Args:
            zoom: Zoom value, or 'contain'/'cover'
            instant: Skip the transition animation
            anchor: Client position to keep in place instead of the centre

        Returns:
            The controller
        """
        if isinstance(zoom, str):
            if zoom.lower() not in SYMBOLIC_ZOOMS:
                logger.warning("Ignoring zoom_to with unknown zoom %r", zoom)
                return self
            zoom = zoom.lower()
        elif not self._accepts('zoom_to', zoom):
            return self
        if anchor is not None and not self._accepts('zoom_to anchor', *anchor):
            return self

        metrics = self._metrics()
        if metrics is None:
            return self

        zoom = self._sanitize(zoom, metrics)
        self._zoom_around(zoom, self._to_local(anchor) if anchor is not None else None, metrics)
        self._commit(metrics, instant)
        self._hub.emit('zoom', self._state)
        return self

    def zoom_in(self, step: Optional[float] = None, instant: bool = False) -> 'PanZoomController':
        """Zoom in by step percent (default: the zoom_step option)."""
        return self._zoom_step('in', step, instant)

    def zoom_out(self, step: Optional[float] = None, instant: bool = False) -> 'PanZoomController':
        """Zoom out by step percent (default: the zoom_step option)."""
        return self._zoom_step('out', step, instant)

    def _zoom_step(self, direction: str, step: Optional[float], instant: bool):
        if step is not None:
            if not self._accepts('zoom step', step):
                return self
            if step <= -100:
                logger.warning("Ignoring zoom step %r, must be above -100", step)
                return self
        step = self._options.zoom_step if step is None else step
        return self.zoom_to(self._state.zoom * zoom_step_factor(step, direction), instant)

    # ------------------------------------------------------------------
    # Panning
    # ------------------------------------------------------------------

    def pan_to(self, x: float, y: float, instant: bool = False) -> 'PanZoomController':
        """
        Pan so that a content position sits at the viewport centre.

        Args:
            x: Horizontal position in percent (50 is the middle)
            y: Vertical position in percent
            instant: Skip the transition animation

        Returns:
            The controller
        """
        if not self._accepts('pan_to', x, y):
            return self

        metrics = self._metrics()
        if metrics is None:
            return self

        self._state.x, self._state.y = pan_to_percent(x, y, self._state, metrics)
        self._commit(metrics, instant)
        self._hub.emit('pan', self._state)
        return self

    def center(self, instant: bool = False) -> 'PanZoomController':
        """Centre the content in the viewport."""
        return self.pan_to(50, 50, instant)

    def pan_left(self, step: Optional[float] = None, instant: bool = False) -> 'PanZoomController':
        return self._pan_step('left', step, instant)

    def pan_right(self, step: Optional[float] = None, instant: bool = False) -> 'PanZoomController':
        return self._pan_step('right', step, instant)

    def pan_up(self, step: Optional[float] = None, instant: bool = False) -> 'PanZoomController':
        return self._pan_step('up', step, instant)

    def pan_down(self, step: Optional[float] = None, instant: bool = False) -> 'PanZoomController':
        return self._pan_step('down', step, instant)

    def _pan_step(self, direction: str, step: Optional[float], instant: bool):
        if step is not None and not self._accepts('pan step', step):
            return self

        metrics = self._metrics()
        if metrics is None:
            return self

        step = self._options.pan_step if step is None else step
        dx, dy = pan_by_step(self._state, metrics, step, direction)
        self._state.x += dx
        self._state.y += dy
        self._commit(metrics, instant)
        self._hub.emit('pan', self._state)
        return self

    def refresh(self, instant: bool = True) -> 'PanZoomController':
        """Re-apply the current state after the surfaces changed size."""
        metrics = self._metrics()
        if metrics is None:
            return self
        self._state.zoom = sanitize_zoom(self._state.zoom, metrics,
                                         self._options.min_zoom, self._options.max_zoom)
        self._commit(metrics, instant)
        return self

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_event(self, event: Union[PointerEvent, WheelEvent]) -> 'PanZoomController':
        """Dispatch a pointer or wheel event."""
        if isinstance(event, WheelEvent):
            return self.handle_wheel(event)
        return self.handle_pointer(event)

    def handle_pointer(self, event: PointerEvent) -> 'PanZoomController':
        """
        Feed a pointer event through the gesture machine.

        Args:
            event: Pointer down/move/up/cancel/leave/out event

        Returns:
            The controller
        """
        if not self.is_ready:
            return self

        if event.kind in ('down', 'move') and not self._accepts(
                'pointer event', *event.client, *event.page):
            return self

        update = self._gestures.handle_pointer(event, self._state)
        if update is None:
            return self

        metrics = self._metrics()
        if metrics is None:
            return self

        if isinstance(update, PanDelta):
            self._apply_pan(update, metrics)
        elif isinstance(update, PinchUpdate):
            self._apply_pinch(update, metrics)
        return self

    def _apply_pan(self, delta: PanDelta, metrics: SurfaceMetrics):
        self._state.x += delta.dx
        self._state.y += delta.dy
        self._commit(metrics, True)
        self._hub.emit('pan', self._state)

    def _apply_pinch(self, update: PinchUpdate, metrics: SurfaceMetrics):
        baseline = update.baseline
        factor = pinch_zoom_factor(update.distance_delta, metrics.content_width,
                                   self._options.zoom_speed_pinch)
        zoom = sanitize_zoom(baseline.zoom * factor, metrics,
                             self._options.min_zoom, self._options.max_zoom)

        # Zoom around the starting midpoint, then follow the midpoint
        pinched = PanZoomState(baseline.zoom, baseline.x, baseline.y)
        offset_x, offset_y = offset_to_center(pinched, metrics, self._to_local(baseline.center))
        adjust_position_for_zoom(pinched, zoom, offset_x, offset_y, metrics)

        move_x, move_y = update.center_delta
        self._state.zoom = zoom
        self._state.x = pinched.x + move_x
        self._state.y = pinched.y + move_y
        self._commit(metrics, True)
        self._hub.emit('zoom', self._state)
        self._hub.emit('pan', self._state)

    def handle_wheel(self, event: WheelEvent) -> 'PanZoomController':
        """
        Zoom around the cursor for a wheel event.

        Args:
            event: The wheel event

        Returns:
            The controller
        """
        if not self._accepts('wheel event', event.delta_y, *event.client):
            return self

        metrics = self._metrics()
        if metrics is None:
            return self

        factor = wheel_zoom_factor(event, self._options.zoom_speed_wheel)
        zoom = sanitize_zoom(self._state.zoom * factor, metrics,
                             self._options.min_zoom, self._options.max_zoom)
        self._zoom_around(zoom, self._to_local(event.client), metrics)
        self._commit(metrics, True)
        self._hub.emit('zoom', self._state)
        return self
