"""
Gestures Module
State machine interpreting pointer and wheel input as pan, pinch and wheel-zoom
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Tuple, Union

from .geometry import PanZoomState, midpoint, pointer_distance

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

POINTER_KINDS = ('down', 'move', 'up', 'cancel', 'leave', 'out')
MAX_POINTERS = 2

# Upper bound on the zoom change a single wheel event may cause
WHEEL_STEP_LIMIT = 0.25


class GestureState(Enum):
    """States of the gesture state machine."""
    IDLE = auto()       # No gesture in progress
    PANNING = auto()    # One pointer dragging the content
    PINCHING = auto()   # Two pointers zooming the content


@dataclass(frozen=True)
class PointerEvent:
    """A pointer (mouse, touch or pen) event in client coordinates."""
    kind: str
    pointer_id: int
    client_x: float
    client_y: float
    page_x: Optional[float] = None
    page_y: Optional[float] = None
    pointer_type: str = 'mouse'

    def __post_init__(self):
        if self.kind not in POINTER_KINDS:
            raise ValueError(f"Unknown pointer event kind: {self.kind}")

    @property
    def client(self) -> Point:
        return (self.client_x, self.client_y)

    @property
    def page(self) -> Point:
        """Page position, falling back to the client position."""
        return (
            self.client_x if self.page_x is None else self.page_x,
            self.client_y if self.page_y is None else self.page_y
        )


@dataclass(frozen=True)
class WheelEvent:
    """A wheel event; delta_mode 0 is pixels, anything else lines/pages."""
    delta_y: float
    client_x: float
    client_y: float
    delta_mode: int = 0

    @property
    def client(self) -> Point:
        return (self.client_x, self.client_y)


@dataclass
class PointerRecord:
    """Last known position of an active pointer."""
    pointer_id: int
    page: Point
    client: Point


@dataclass(frozen=True)
class PinchBaseline:
    """State captured when the second pointer went down."""
    zoom: float
    x: float
    y: float
    distance: float
    center: Point


@dataclass(frozen=True)
class PanDelta:
    """Translate the content by (dx, dy)."""
    dx: float
    dy: float


@dataclass(frozen=True)
class PinchUpdate:
    """Pinch progress relative to its baseline."""
    baseline: PinchBaseline
    distance_delta: float
    center: Point

    @property
    def center_delta(self) -> Point:
        return (self.center[0] - self.baseline.center[0],
                self.center[1] - self.baseline.center[1])


GestureUpdate = Union[PanDelta, PinchUpdate]


def wheel_zoom_factor(event: WheelEvent, speed: float) -> float:
    """
    Zoom multiplier for one wheel event.

    Scrolling up (negative delta) zooms in. Line and page deltas are
    scaled to pixels first, and one event never changes the zoom by
    more than WHEEL_STEP_LIMIT.

    Args:
        event: The wheel event
        speed: Wheel zoom speed option

    Returns:
        Factor to multiply the current zoom by
    """
    delta = event.delta_y
    if event.delta_mode > 0:
        delta *= 100
    if delta == 0 or not math.isfinite(delta):
        return 1.0
    sign = math.copysign(1.0, delta)
    return 1 - sign * min(WHEEL_STEP_LIMIT, abs(speed * delta / 128))


def pinch_zoom_factor(distance_delta: float, content_width: float, speed: float) -> float:
    """Zoom multiplier for a change in finger separation."""
    return 1 + (distance_delta / content_width) * speed


class DragSession:
    """
    An active single-pointer drag.

    The session keeps following its pointer after it leaves the viewport
    and ends only when that pointer is released or cancelled.
    """

    def __init__(self, pointer_id: int, position: Point):
        self.pointer_id = pointer_id
        self.previous: Optional[Point] = position

    @property
    def active(self) -> bool:
        return self.previous is not None

    def follow(self, position: Point) -> PanDelta:
        """Movement since the previous position."""
        if self.previous is None:
            raise RuntimeError("Drag session already stopped")
        delta = PanDelta(position[0] - self.previous[0], position[1] - self.previous[1])
        self.previous = position
        return delta

    def stop(self) -> None:
        self.previous = None


class GestureMachine:
    """
    Tracks active pointers and derives gesture updates from them.

    One pointer pans, two pointers pinch. Only one interpretation is
    active at a time; panning is blocked while pinching.
    """

    def __init__(self):
        self._state = GestureState.IDLE
        self._pointers: List[PointerRecord] = []
        self._drag: Optional[DragSession] = None
        self._baseline: Optional[PinchBaseline] = None

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def block_pan(self) -> bool:
        """True while two pointers are pinching."""
        return self._state == GestureState.PINCHING

    @property
    def pointers(self) -> List[PointerRecord]:
        """Active pointers in the order they went down."""
        return list(self._pointers)

    @property
    def drag_session(self) -> Optional[DragSession]:
        return self._drag

    @property
    def baseline(self) -> Optional[PinchBaseline]:
        return self._baseline

    def _set_state(self, new_state: GestureState):
        if new_state != self._state:
            logger.debug("Gesture %s -> %s", self._state.name, new_state.name)
            self._state = new_state

    def _find(self, pointer_id: int) -> Optional[PointerRecord]:
        for record in self._pointers:
            if record.pointer_id == pointer_id:
                return record
        return None

    def _remove(self, pointer_id: int) -> None:
        self._pointers = [p for p in self._pointers if p.pointer_id != pointer_id]

    def _capture_baseline(self, current: PanZoomState) -> PinchBaseline:
        first, second = self._pointers
        return PinchBaseline(
            zoom=current.zoom,
            x=current.x,
            y=current.y,
            distance=pointer_distance(first.page, second.page),
            center=midpoint(first.client, second.client)
        )

    def handle_pointer(self, event: PointerEvent,
                       current: PanZoomState) -> Optional[GestureUpdate]:
        """
        Feed one pointer event into the machine.

        Args:
            event: The pointer event
            current: Current pan/zoom state (used for the pinch baseline)

        Returns:
            A PanDelta or PinchUpdate to apply, or None
        """
        if event.kind == 'down':
            return self._pointer_down(event, current)
        if event.kind == 'move':
            return self._pointer_move(event)
        if event.kind in ('leave', 'out'):
            if self._drag is not None and self._drag.pointer_id == event.pointer_id:
                # The drag keeps tracking outside the viewport
                return None
        self._pointer_up(event)
        return None

    def _pointer_down(self, event: PointerEvent, current: PanZoomState) -> None:
        record = self._find(event.pointer_id)
        if record is not None:
            record.page, record.client = event.page, event.client
            return None
        if len(self._pointers) >= MAX_POINTERS:
            logger.debug("Ignoring pointer %s, already tracking two", event.pointer_id)
            return None

        self._pointers.append(PointerRecord(event.pointer_id, event.page, event.client))

        if len(self._pointers) == MAX_POINTERS:
            if self._drag is not None:
                self._drag.stop()
                self._drag = None
            self._baseline = self._capture_baseline(current)
            self._set_state(GestureState.PINCHING)
        elif self._state == GestureState.IDLE and self._drag is None:
            self._drag = DragSession(event.pointer_id, event.page)
            self._set_state(GestureState.PANNING)
        return None

    def _pointer_move(self, event: PointerEvent) -> Optional[GestureUpdate]:
        record = self._find(event.pointer_id)
        if record is not None:
            record.page, record.client = event.page, event.client

        if self._state == GestureState.PINCHING:
            if record is None:
                return None
            first, second = self._pointers
            return PinchUpdate(
                baseline=self._baseline,
                distance_delta=pointer_distance(first.page, second.page) - self._baseline.distance,
                center=midpoint(first.client, second.client)
            )

        if (self._state == GestureState.PANNING and self._drag is not None
                and self._drag.pointer_id == event.pointer_id):
            return self._drag.follow(event.page)

        return None

    def _pointer_up(self, event: PointerEvent) -> None:
        self._remove(event.pointer_id)

        if self._drag is not None and self._drag.pointer_id == event.pointer_id:
            self._drag.stop()
            self._drag = None
            self._set_state(GestureState.IDLE)

        if self._state == GestureState.PINCHING and len(self._pointers) < MAX_POINTERS:
            # A remaining pointer does not resume panning on its own
            self._baseline = None
            self._set_state(GestureState.IDLE)

    def reset(self) -> None:
        """Forget all pointers and end any gesture."""
        if self._drag is not None:
            self._drag.stop()
        self._drag = None
        self._pointers = []
        self._baseline = None
        self._set_state(GestureState.IDLE)
