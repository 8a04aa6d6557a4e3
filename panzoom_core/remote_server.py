"""
Remote Server Module
Remote control of the pan/zoom API via WebSocket
"""

import asyncio
import json
import logging
import queue
import threading
from typing import Any, Dict, Optional, Tuple

import websockets
from websockets.exceptions import ConnectionClosed

logger = logging.getLogger(__name__)

# Message types named after the controller step method they call
_STEP_COMMANDS = ('zoom_in', 'zoom_out', 'pan_left', 'pan_right', 'pan_up', 'pan_down')


def state_message(controller: Any, msg_type: str = 'state') -> Dict[str, Any]:
    """Reply describing the controller's current state."""
    message = {'type': msg_type}
    message.update(controller.get_position())
    message['pan'] = controller.get_pan()
    return message


def error_message(text: str) -> Dict[str, Any]:
    return {'type': 'error', 'message': text}


def apply_command(controller: Any, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform one remote command on a controller.

    Args:
        controller: PanZoomController to drive
        data: Decoded message, e.g. {"type": "zoom_to", "zoom": 2}

    Returns:
        Reply message
    """
    if not isinstance(data, dict):
        return error_message("Message must be a JSON object")

    msg_type = data.get('type', '')
    instant = bool(data.get('instant', False))

    try:
        if msg_type == 'ping':
            return {'type': 'pong'}

        if msg_type == 'get_state':
            return state_message(controller)

        if msg_type == 'zoom_to':
            zoom = data['zoom']
            if not isinstance(zoom, (int, float, str)) or isinstance(zoom, bool):
                raise ValueError(f"invalid zoom {zoom!r}")
            if isinstance(zoom, str) and zoom not in ('contain', 'cover'):
                raise ValueError(f"invalid zoom {zoom!r}")
            controller.zoom_to(zoom, instant=instant)

        elif msg_type == 'pan_to':
            controller.pan_to(float(data['x']), float(data['y']), instant=instant)

        elif msg_type == 'center':
            controller.center(instant=instant)

        elif msg_type in _STEP_COMMANDS:
            step = data.get('step')
            step = None if step is None else float(step)
            getattr(controller, msg_type)(step, instant=instant)

        else:
            return error_message(f"Unknown message type: {msg_type!r}")

    except KeyError as e:
        return error_message(f"Missing field {e.args[0]!r} for {msg_type}")
    except (TypeError, ValueError) as e:
        return error_message(f"Invalid {msg_type} message: {e}")

    return state_message(controller)


class RemoteControlServer:
    """
    WebSocket server for remote control.

    Supports:
    - Zoom and pan commands (applied by dispatch_pending on the caller's thread)
    - State queries
    - State updates pushed to clients
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 8765):
        """
        Initialize remote control server.

        Args:
            host: Interface to listen on
            port: Port to listen on
        """
        self._host = host
        self._port = port
        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

        self._clients = set()
        self._commands: "queue.Queue[Tuple[Dict[str, Any], Any]]" = queue.Queue()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        return (self._host, self._port)

    def start(self) -> bool:
        """Start the server on a background thread."""
        if self._running:
            return True

        self._running = True
        self._thread = threading.Thread(target=self._run_server, daemon=True)
        self._thread.start()
        logger.info("Remote control listening on ws://%s:%s", self._host, self._port)
        return True

    def stop(self):
        """Stop the server."""
        self._running = False

        if self._thread:
            self._thread.join(timeout=2.0)
            self._thread = None

    def _run_server(self):
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        try:
            self._loop.run_until_complete(self._server_main())
        except OSError as e:
            logger.error("Remote control server error: %s", e)
            self._running = False
        finally:
            self._loop.close()
            self._loop = None

    async def _server_main(self):
        async with websockets.serve(self._handle_client, self._host, self._port):
            while self._running:
                await asyncio.sleep(0.1)

    async def _handle_client(self, websocket):
        self._clients.add(websocket)
        try:
            async for message in websocket:
                await self._handle_message(message, websocket)
        except ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)

    async def _handle_message(self, message: str, websocket):
        try:
            data = json.loads(message)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring malformed remote message: %s", e)
            await websocket.send(json.dumps(error_message("Malformed JSON")))
            return

        if isinstance(data, dict) and data.get('type') == 'ping':
            await websocket.send(json.dumps({'type': 'pong'}))
            return

        self._commands.put((data, websocket))

    def dispatch_pending(self, controller: Any) -> int:
        """
        Apply queued commands to a controller and send the replies.

        Args:
            controller: PanZoomController to drive

        Returns:
            Number of commands applied
        """
        count = 0
        while True:
            try:
                data, websocket = self._commands.get_nowait()
            except queue.Empty:
                return count

            reply = apply_command(controller, data)
            if reply['type'] == 'error':
                logger.warning("Remote command failed: %s", reply['message'])
            self._send(websocket, reply)
            count += 1

    def _send(self, websocket, message: Dict[str, Any]):
        if self._loop is None:
            return
        asyncio.run_coroutine_threadsafe(self._safe_send(websocket, json.dumps(message)), self._loop)

    async def _safe_send(self, websocket, text: str):
        try:
            await websocket.send(text)
        except ConnectionClosed:
            self._clients.discard(websocket)

    def broadcast_state(self, state: Dict[str, Any]):
        """
        Broadcast a state update to all connected clients.

        Args:
            state: {zoom, x, y} snapshot
        """
        if not self._clients or not self._loop:
            return

        text = json.dumps({'type': 'state_update', **state})

        async def _broadcast():
            for client in list(self._clients):
                await self._safe_send(client, text)

        asyncio.run_coroutine_threadsafe(_broadcast(), self._loop)
