"""
Geometry Module
Coordinate math for panning and zooming a content surface inside a viewport

All offsets are pixel translations of the content surface relative to its
layout position at the viewport's origin. Scaling happens around the centre
of the content surface, so a zoom of z with offset (0, 0) keeps the content
centre where it was laid out.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from .easing import clamp
from .errors import DegenerateGeometryError

Point = Tuple[float, float]


@dataclass
class PanZoomState:
    """Current zoom and pixel offsets of the content surface."""
    zoom: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def copy(self) -> 'PanZoomState':
        return PanZoomState(self.zoom, self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        return {'zoom': self.zoom, 'x': self.x, 'y': self.y}


@dataclass(frozen=True)
class SurfaceMetrics:
    """Sizes of the viewport and of the unscaled content surface."""
    viewport_width: float
    viewport_height: float
    content_width: float
    content_height: float

    @classmethod
    def measure(cls, viewport: Any, content: Any) -> 'SurfaceMetrics':
        """Read the current sizes of two surfaces."""
        return cls(
            float(viewport.width),
            float(viewport.height),
            float(content.width),
            float(content.height)
        )

    @property
    def is_degenerate(self) -> bool:
        """True if any dimension is zero, negative or not finite."""
        return not all(
            math.isfinite(v) and v > 0
            for v in (self.viewport_width, self.viewport_height,
                      self.content_width, self.content_height)
        )

    def require_valid(self) -> 'SurfaceMetrics':
        """Return self, or raise DegenerateGeometryError for unusable sizes."""
        if self.is_degenerate:
            raise DegenerateGeometryError(
                f"viewport {self.viewport_width}x{self.viewport_height}, "
                f"content {self.content_width}x{self.content_height}"
            )
        return self


def fit_zoom(mode: str, metrics: SurfaceMetrics) -> float:
    """
    Zoom at which the content fits the viewport.

    Args:
        mode: 'contain' (whole content visible) or 'cover' (viewport filled)
        metrics: Current surface sizes

    Returns:
        The zoom ratio for the requested fit
    """
    metrics.require_valid()
    ratio_x = metrics.viewport_width / metrics.content_width
    ratio_y = metrics.viewport_height / metrics.content_height
    if mode == 'cover':
        return max(ratio_x, ratio_y)
    if mode == 'contain':
        return min(ratio_x, ratio_y)
    raise ValueError(f"Unknown fit mode: {mode}")


def sanitize_zoom(zoom: Union[float, str], metrics: SurfaceMetrics,
                  min_zoom: float, max_zoom: float) -> float:
    """
    Turn a requested zoom into a usable one.

    Symbolic zooms ('contain', 'cover') become the matching fit ratio;
    the result is then clamped to [min_zoom, max_zoom]. Callers that pass
    a symbolic zoom are expected to re-centre the content first.

    Args:
        zoom: Numeric zoom or 'contain'/'cover'
        metrics: Current surface sizes
        min_zoom: Lower zoom limit
        max_zoom: Upper zoom limit

    Returns:
        The sanitized zoom
    """
    if isinstance(zoom, str):
        zoom = fit_zoom(zoom, metrics)
    return clamp(float(zoom), min_zoom, max_zoom)


def derive_min_zoom(min_zoom: float, metrics: SurfaceMetrics, bounds: str) -> float:
    """
    Raise the minimum zoom so the bounds mode can always be satisfied.

    'cover' needs the content to fill the viewport on both axes,
    'contain' needs it to fill at least one. 'off' leaves min_zoom alone.
    """
    if bounds == 'off':
        return min_zoom
    return max(min_zoom, fit_zoom(bounds, metrics))


def _clamp_axis(offset: float, zoom: float, viewport_size: float, content_size: float) -> float:
    upper = (content_size / 2) * (zoom - 1)
    lower = -upper + viewport_size - content_size

    if content_size * zoom < viewport_size:
        # Smaller than the viewport: keep it anywhere inside
        return clamp(offset, min(upper, lower), max(upper, lower))

    # Larger: never reveal space beyond the content edges
    return clamp(offset, lower, upper)


def clamp_offsets(state: PanZoomState, metrics: SurfaceMetrics) -> Point:
    """
    Offsets restricted so the content stays within the bounds policy.

    Args:
        state: Current zoom and offsets
        metrics: Current surface sizes

    Returns:
        Tuple of clamped (x, y)
    """
    x = _clamp_axis(state.x, state.zoom, metrics.viewport_width, metrics.content_width)
    y = _clamp_axis(state.y, state.zoom, metrics.viewport_height, metrics.content_height)
    return (x, y)


def offset_to_center(state: PanZoomState, metrics: SurfaceMetrics,
                     pointer: Optional[Point] = None) -> Point:
    """
    Offset of a viewport point from the current content centre.

    Args:
        state: Current zoom and offsets
        metrics: Current surface sizes
        pointer: Point relative to the viewport origin, or None for
            the viewport centre

    Returns:
        Tuple of (x, y) to feed into adjust_position_for_zoom
    """
    if pointer is None:
        pointer = (metrics.viewport_width / 2, metrics.viewport_height / 2)
    return (
        state.x + metrics.content_width / 2 - pointer[0],
        state.y + metrics.content_height / 2 - pointer[1]
    )


def adjust_position_for_zoom(state: PanZoomState, zoom: float,
                             offset_x: float, offset_y: float,
                             metrics: SurfaceMetrics) -> None:
    """
    Move the content so the anchor point stays put while zooming.

    The anchor offset is capped at half of the current scaled content
    size. Only state.x and state.y are changed; the caller sets the zoom.

    Args:
        state: State to update, still holding the old zoom
        zoom: The zoom about to be applied
        offset_x: Anchor offset from offset_to_center
        offset_y: Anchor offset from offset_to_center
        metrics: Current surface sizes
    """
    if state.zoom <= 0:
        raise DegenerateGeometryError(f"zoom {state.zoom}")

    zoom_growth = (zoom - state.zoom) / state.zoom

    max_offset_x = metrics.content_width * 0.5 * state.zoom
    max_offset_y = metrics.content_height * 0.5 * state.zoom
    offset_x = clamp(offset_x, -max_offset_x, max_offset_x)
    offset_y = clamp(offset_y, -max_offset_y, max_offset_y)

    state.x += offset_x * zoom_growth
    state.y += offset_y * zoom_growth


def pan_to_percent(percent_x: float, percent_y: float, state: PanZoomState,
                   metrics: SurfaceMetrics) -> Point:
    """
    Offsets that put a content position at the viewport centre.

    Args:
        percent_x: Horizontal content position, 0-100 (50 is the middle)
        percent_y: Vertical content position, 0-100
        state: Current state (only the zoom is used)
        metrics: Current surface sizes

    Returns:
        Tuple of (x, y) offsets in pixels
    """
    zoom = state.zoom
    x = -(metrics.content_width * zoom * percent_x / 100)
    x += (zoom - 1) * metrics.content_width / 2
    x += metrics.viewport_width / 2

    y = -(metrics.content_height * zoom * percent_y / 100)
    y += (zoom - 1) * metrics.content_height / 2
    y += metrics.viewport_height / 2
    return (x, y)


def pan_pixels(state: PanZoomState, metrics: SurfaceMetrics) -> Point:
    """Scaled-content pixel position currently at the viewport centre."""
    x = metrics.viewport_width / 2 - state.x
    x += (state.zoom - 1) * metrics.content_width / 2

    y = metrics.viewport_height / 2 - state.y
    y += (state.zoom - 1) * metrics.content_height / 2
    return (x, y)


def get_pan_percent(state: PanZoomState, metrics: SurfaceMetrics) -> Point:
    """Inverse of pan_to_percent."""
    metrics.require_valid()
    if state.zoom <= 0:
        raise DegenerateGeometryError(f"zoom {state.zoom}")
    x, y = pan_pixels(state, metrics)
    return (
        x / (metrics.content_width * state.zoom) * 100,
        y / (metrics.content_height * state.zoom) * 100
    )


# Sign of the offset change for each pan direction
PAN_DIRECTIONS = {
    'left': (-1, 0),
    'right': (1, 0),
    'up': (0, -1),
    'down': (0, 1),
}


def pan_by_step(state: PanZoomState, metrics: SurfaceMetrics,
                step: float, direction: str) -> Point:
    """
    Offset change for one pan step.

    Args:
        state: Current state (only the zoom is used)
        metrics: Current surface sizes
        step: Percent of the scaled content size to move by
        direction: 'left', 'right', 'up' or 'down'

    Returns:
        Tuple of (dx, dy) to add to the offsets
    """
    try:
        sign_x, sign_y = PAN_DIRECTIONS[direction]
    except KeyError:
        raise ValueError(f"Unknown pan direction: {direction}") from None
    width = metrics.content_width * step / 100 * state.zoom
    height = metrics.content_height * step / 100 * state.zoom
    return (sign_x * width, sign_y * height)


def zoom_step_factor(step: float, direction: str) -> float:
    """Multiplier for one zoom step in ('in' or 'out') direction."""
    factor = (100 + step) / 100
    if direction == 'out':
        return 1 / factor
    if direction != 'in':
        raise ValueError(f"Unknown zoom direction: {direction}")
    return factor


def pointer_distance(a: Point, b: Point) -> float:
    """Euclidean distance between two pointer positions."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def midpoint(a: Point, b: Point) -> Point:
    """Point halfway between two pointer positions."""
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)
