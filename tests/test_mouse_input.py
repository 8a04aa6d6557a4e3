"""
Tests for translating mouse listener callbacks into pointer and wheel events.
"""
from types import SimpleNamespace

from panzoom_core.gestures import PointerEvent, WheelEvent
from panzoom_core.mouse_input import MouseInput

LEFT = SimpleNamespace(name='left')
RIGHT = SimpleNamespace(name='right')


def test_moves_are_only_queued_while_pressed():
    mouse = MouseInput()
    mouse.on_move(10, 20)
    assert mouse.pending() == []
    assert mouse.position == (10, 20)

    mouse.on_click(10, 20, LEFT, True)
    mouse.on_move(15, 25)
    mouse.on_click(15, 25, LEFT, False)
    mouse.on_move(30, 30)

    assert mouse.pending() == [
        PointerEvent('down', 1, 10, 20),
        PointerEvent('move', 1, 15, 25),
        PointerEvent('up', 1, 15, 25),
    ]
    assert not mouse.is_pressed


def test_other_buttons_are_ignored():
    mouse = MouseInput()
    mouse.on_click(0, 0, RIGHT, True)
    assert mouse.pending() == []

    middle = MouseInput(button='middle')
    middle.on_click(0, 0, 'middle', True)
    assert middle.is_pressed


def test_scroll_becomes_wheel_event():
    mouse = MouseInput()
    mouse.on_scroll(400, 300, 0, 1)
    mouse.on_scroll(400, 300, 2, 0)
    mouse.on_scroll(400, 300, 0, -2)

    assert mouse.pending() == [
        WheelEvent(-1.0, 400, 300, delta_mode=1),
        WheelEvent(2.0, 400, 300, delta_mode=1),
    ]


def test_dispatch_drives_controller(make_controller):
    controller = make_controller().zoom_to(2, instant=True)
    mouse = MouseInput()

    mouse.on_click(100, 100, LEFT, True)
    mouse.on_move(80, 90)
    mouse.on_click(80, 90, LEFT, False)
    mouse.on_scroll(400, 300, 0, 1)

    assert mouse.dispatch_pending(controller) == 4
    assert controller.get_zoom() == 2.5
    assert mouse.dispatch_pending(controller) == 0


def test_stop_without_start():
    mouse = MouseInput()
    assert not mouse.is_running()
    mouse.stop()
