"""
Transform Module
Turns the pan/zoom state into a transform for the content surface
and notifies listeners about state changes
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .easing import clamp, css_timing, get_easing, lerp
from .geometry import PanZoomState, SurfaceMetrics, clamp_offsets

logger = logging.getLogger(__name__)

CHANNELS = ('init', 'change', 'zoom', 'pan')

Listener = Callable[[Dict[str, float]], Any]


def _fmt(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith('.0') else text


@dataclass(frozen=True)
class Transform:
    """Uniform scale followed by a translation, in CSS matrix order."""
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    @classmethod
    def from_state(cls, state: PanZoomState) -> 'Transform':
        return cls(state.zoom, state.x, state.y)

    def to_matrix(self):
        """Affine matrix as (a, b, c, d, e, f)."""
        return (self.scale, 0.0, 0.0, self.scale, self.translate_x, self.translate_y)

    def to_css(self) -> str:
        return 'matrix({}, 0, 0, {}, {}, {})'.format(
            _fmt(self.scale), _fmt(self.scale),
            _fmt(self.translate_x), _fmt(self.translate_y)
        )

    def interpolate(self, target: 'Transform', t: float) -> 'Transform':
        """Transform a fraction t of the way towards target."""
        return Transform(
            lerp(self.scale, target.scale, t),
            lerp(self.translate_x, target.translate_x, t),
            lerp(self.translate_y, target.translate_y, t)
        )


@dataclass(frozen=True)
class Transition:
    """How a new transform should be presented: animated or instant."""
    duration_ms: float = 0.0
    easing: str = 'linear'

    @property
    def enabled(self) -> bool:
        return self.duration_ms > 0

    def to_css(self) -> str:
        if not self.enabled:
            return 'none'
        return f"transform {_fmt(self.duration_ms)}ms {css_timing(self.easing)}"

    def progress(self, elapsed_ms: float) -> float:
        """
        Eased completion of the transition.

        Args:
            elapsed_ms: Time since the transform was applied

        Returns:
            Progress between 0 and 1 (1 for instant transitions)
        """
        if not self.enabled:
            return 1.0
        t = clamp(elapsed_ms / self.duration_ms, 0.0, 1.0)
        return get_easing(self.easing)(t)


INSTANT = Transition()


class NotificationHub:
    """
    Named notification channels: init, change, zoom and pan.

    Listeners are called synchronously with a {zoom, x, y} snapshot.
    Exceptions raised by listeners propagate to the caller.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = {name: [] for name in CHANNELS}

    def _channel(self, channel: str) -> List[Listener]:
        try:
            return self._listeners[channel]
        except KeyError:
            raise ValueError(f"Unknown notification channel: {channel}") from None

    def subscribe(self, channel: str, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            channel: 'init', 'change', 'zoom' or 'pan'
            listener: Called with the state snapshot

        Returns:
            Function that removes the listener again
        """
        listeners = self._channel(channel)
        listeners.append(listener)

        def unsubscribe():
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def emit(self, channel: str, state: PanZoomState) -> None:
        """Notify every listener of a channel."""
        for listener in list(self._channel(channel)):
            listener(state.to_dict())

    def listener_count(self, channel: str) -> int:
        return len(self._channel(channel))


class TransformEmitter:
    """
    Applies committed state to the content surface.

    A commit selects the transition, clamps the offsets when bounds are
    enabled, hands the transform to the surface and raises 'change'.
    """

    def __init__(self, content: Any, hub: NotificationHub,
                 transition_speed: float = 400.0, transition_easing: str = 'ease',
                 bounds_enabled: bool = True):
        self._content = content
        self._hub = hub
        self._transition = Transition(transition_speed, transition_easing)
        self._bounds_enabled = bounds_enabled
        self._last: Optional[Transform] = None

    @property
    def last_transform(self) -> Optional[Transform]:
        """Transform applied by the most recent commit."""
        return self._last

    def transition_for(self, instant: bool) -> Transition:
        return INSTANT if instant else self._transition

    def commit(self, state: PanZoomState, metrics: SurfaceMetrics,
               instant: bool = False) -> Transform:
        """
        Clamp and apply the state.

        Args:
            state: State to apply; x and y are clamped in place
            metrics: Current surface sizes
            instant: Skip the transition animation for this update

        Returns:
            The applied transform
        """
        transition = self.transition_for(instant)

        if self._bounds_enabled:
            state.x, state.y = clamp_offsets(state, metrics)

        transform = Transform.from_state(state)
        self._content.apply(transform, transition)
        self._last = transform
        logger.debug("Applied %s (%s)", transform.to_css(), transition.to_css())

        self._hub.emit('change', state)
        return transform
