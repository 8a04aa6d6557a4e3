"""
Mouse Input Module
Global mouse input using pynput, delivered as pointer and wheel events
"""

import logging
import queue
import threading
from typing import Any, List, Optional, Tuple, Union

from .gestures import PointerEvent, WheelEvent

logger = logging.getLogger(__name__)

InputEvent = Union[PointerEvent, WheelEvent]


class MouseInput:
    """
    Cross-platform mouse input source.

    The pynput listener runs on its own thread and sees the mouse
    everywhere on screen, so a drag keeps being tracked after the pointer
    leaves the viewport. Events are queued and handed to the pan/zoom
    controller on the caller's thread by dispatch_pending().
    """

    POINTER_ID = 1

    def __init__(self, button: str = 'left'):
        """
        Initialize mouse input.

        Args:
            button: Name of the mouse button that drags ('left', 'middle', 'right')
        """
        self._button = button
        self._queue: "queue.Queue[InputEvent]" = queue.Queue()
        self._lock = threading.Lock()
        self._position: Tuple[float, float] = (0.0, 0.0)
        self._pressed = False
        self._listener: Optional[Any] = None
        self._running = False

    @property
    def position(self) -> Tuple[float, float]:
        """Last known mouse position in screen coordinates."""
        with self._lock:
            return self._position

    @property
    def is_pressed(self) -> bool:
        return self._pressed

    def is_running(self) -> bool:
        return self._running

    def on_move(self, x: float, y: float):
        """Listener callback: the mouse moved."""
        with self._lock:
            self._position = (float(x), float(y))
        if self._pressed:
            self._queue.put(PointerEvent('move', self.POINTER_ID, float(x), float(y)))

    def on_click(self, x: float, y: float, button: Any, pressed: bool):
        """Listener callback: a mouse button changed state."""
        if getattr(button, 'name', button) != self._button:
            return
        with self._lock:
            self._position = (float(x), float(y))
        self._pressed = pressed
        kind = 'down' if pressed else 'up'
        self._queue.put(PointerEvent(kind, self.POINTER_ID, float(x), float(y)))

    def on_scroll(self, x: float, y: float, dx: float, dy: float):
        """Listener callback: the wheel turned (dy > 0 is away from the user)."""
        if not dy:
            return
        self._queue.put(WheelEvent(delta_y=-float(dy), client_x=float(x),
                                   client_y=float(y), delta_mode=1))

    def start(self) -> bool:
        """
        Start listening to the mouse.

        Returns:
            True if the listener is running
        """
        if self._running:
            return True

        try:
            from pynput import mouse
        except ImportError as e:
            logger.error("Mouse input not available: %s", e)
            return False

        self._listener = mouse.Listener(
            on_move=self.on_move,
            on_click=self.on_click,
            on_scroll=self.on_scroll
        )
        self._listener.start()
        self._running = True
        logger.debug("Mouse listener started")
        return True

    def stop(self):
        """Stop listening to the mouse."""
        if not self._running:
            return

        self._running = False
        if self._listener:
            self._listener.stop()
            self._listener = None

    def pending(self) -> List[InputEvent]:
        """Take all queued events, oldest first."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def dispatch_pending(self, controller: Any) -> int:
        """
        Hand queued events to a controller in arrival order.

        Args:
            controller: Object with a handle_event(event) method

        Returns:
            Number of events dispatched
        """
        events = self.pending()
        for event in events:
            controller.handle_event(event)
        return len(events)
