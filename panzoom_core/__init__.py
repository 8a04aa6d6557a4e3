"""
Pan Zoom - Core Module
Pan and zoom a content surface inside a viewport with drag, wheel and pinch input
"""

from .errors import PanZoomError, ConfigurationError, DegenerateGeometryError
from .config_manager import (
    ConfigManager,
    Config,
    PanZoomOptions,
    RemoteConfig,
    resolve_options,
)
from .geometry import (
    PanZoomState,
    SurfaceMetrics,
    sanitize_zoom,
    derive_min_zoom,
    clamp_offsets,
    offset_to_center,
    adjust_position_for_zoom,
    pan_to_percent,
    get_pan_percent,
)
from .gestures import (
    GestureMachine,
    GestureState,
    DragSession,
    PointerEvent,
    WheelEvent,
)
from .transform import NotificationHub, Transform, Transition, TransformEmitter
from .surfaces import Surface, VirtualSurface, DisplaySurface, SurfaceRegistry
from .pan_zoom_controller import PanZoomController
from .easing import EASING_FUNCTIONS, get_easing, lerp, clamp

__all__ = [
    # Errors
    'PanZoomError',
    'ConfigurationError',
    'DegenerateGeometryError',

    # Configuration
    'ConfigManager',
    'Config',
    'PanZoomOptions',
    'RemoteConfig',
    'resolve_options',

    # Geometry
    'PanZoomState',
    'SurfaceMetrics',
    'sanitize_zoom',
    'derive_min_zoom',
    'clamp_offsets',
    'offset_to_center',
    'adjust_position_for_zoom',
    'pan_to_percent',
    'get_pan_percent',

    # Gestures
    'GestureMachine',
    'GestureState',
    'DragSession',
    'PointerEvent',
    'WheelEvent',

    # Transform and notifications
    'NotificationHub',
    'Transform',
    'Transition',
    'TransformEmitter',

    # Surfaces
    'Surface',
    'VirtualSurface',
    'DisplaySurface',
    'SurfaceRegistry',

    # Controller
    'PanZoomController',

    # Easing
    'EASING_FUNCTIONS',
    'get_easing',
    'lerp',
    'clamp',
]

__version__ = '1.0.0'
