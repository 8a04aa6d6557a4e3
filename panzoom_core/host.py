"""
Host Module
Command-line host driving a pan/zoom controller from the mouse and remote control
"""

import argparse
import logging
import re
import time
from typing import List, Optional, Tuple

from .config_manager import ConfigManager
from .mouse_input import MouseInput
from .pan_zoom_controller import PanZoomController
from .remote_server import RemoteControlServer
from .surfaces import SurfaceRegistry, VirtualSurface

logger = logging.getLogger(__name__)

_SIZE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*[xX]\s*(\d+(?:\.\d+)?)\s*$')


def parse_size(text: str) -> Tuple[float, float]:
    """Parse 'WIDTHxHEIGHT'."""
    match = _SIZE.match(text)
    if not match:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got '{text}'")
    return (float(match.group(1)), float(match.group(2)))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='panzoom-host',
        description="Pan and zoom a virtual content surface with the mouse."
    )
    parser.add_argument('--config', help="Path to the JSON config file")
    parser.add_argument('--profile', help="Profile to use (default: config default)")
    parser.add_argument('--viewport', default='800x600',
                        help="Viewport size WIDTHxHEIGHT or display:N / display:primary")
    parser.add_argument('--content', default='1600x1200', type=parse_size,
                        help="Content size WIDTHxHEIGHT")
    parser.add_argument('--remote', action='store_true',
                        help="Enable the WebSocket remote control")
    parser.add_argument('--port', type=int, help="Remote control port")
    parser.add_argument('--fps', type=float, default=60.0, help="Input dispatch rate")
    parser.add_argument('--no-mouse', action='store_true', help="Do not listen to the mouse")
    parser.add_argument('--debug', action='store_true', help="Enable debug logging")
    return parser


def build_registry(viewport: str, content: Tuple[float, float]) -> SurfaceRegistry:
    """Register the content surface and, unless a display is used, the viewport."""
    registry = SurfaceRegistry()
    registry.register('content', VirtualSurface('content', *content))
    if not viewport.startswith('display:'):
        registry.register('viewport', VirtualSurface('viewport', *parse_size(viewport)))
    return registry


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config_manager = ConfigManager(config_path=args.config)
    config = config_manager.load()

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or config.debug_logging) else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    profile = config_manager.get_profile(args.profile) if args.profile else config_manager.current_profile
    viewport_id = args.viewport if args.viewport.startswith('display:') else 'viewport'
    registry = build_registry(args.viewport, args.content)

    controller = PanZoomController(
        profile.to_dict(),
        registry=registry,
        viewport=viewport_id,
        content='content',
        on_change=lambda state: logger.info("zoom=%.3f x=%.1f y=%.1f",
                                            state['zoom'], state['x'], state['y'])
    )
    if not controller.is_ready:
        return 1

    mouse_input = None
    if not args.no_mouse:
        mouse_input = MouseInput()
        if not mouse_input.start():
            mouse_input = None

    server = None
    if args.remote or config.remote.enabled:
        server = RemoteControlServer(config.remote.host, args.port or config.remote.port)
        server.start()
        controller.subscribe('change', server.broadcast_state)

    interval = 1.0 / max(args.fps, 1.0)
    try:
        while True:
            if mouse_input:
                mouse_input.dispatch_pending(controller)
            if server:
                server.dispatch_pending(controller)
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        if mouse_input:
            mouse_input.stop()
        if server:
            server.stop()
        config_manager.save()

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
