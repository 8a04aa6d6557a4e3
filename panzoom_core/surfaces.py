"""
Surfaces Module
Rectangular surfaces the pan/zoom core measures and transforms,
and resolution of surface identifiers
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from screeninfo import ScreenInfoError, get_monitors

from .errors import ConfigurationError
from .transform import INSTANT, Transform, Transition

logger = logging.getLogger(__name__)

DISPLAY_PREFIX = "display:"
_SURFACE_ATTRS = ('width', 'height', 'apply')


def surface_origin(surface: Any) -> Tuple[float, float]:
    """Layout origin of any surface-like object, (0, 0) if it has none."""
    return (getattr(surface, 'left', 0.0), getattr(surface, 'top', 0.0))


def to_local(surface: Any, x: float, y: float) -> Tuple[float, float]:
    """Convert client coordinates to coordinates relative to a surface's origin."""
    left, top = surface_origin(surface)
    return (x - left, y - top)


class Surface:
    """
    A live rectangle with a layout origin and a settable transform.

    width/height are the unscaled layout size; left/top is the layout
    origin in client coordinates.
    """

    width: float = 0.0
    height: float = 0.0
    left: float = 0.0
    top: float = 0.0

    @property
    def origin(self) -> Tuple[float, float]:
        return surface_origin(self)

    def to_local(self, x: float, y: float) -> Tuple[float, float]:
        return to_local(self, x, y)

    def apply(self, transform: Transform, transition: Transition) -> None:
        raise NotImplementedError


@dataclass
class VirtualSurface(Surface):
    """
    In-memory surface.

    Keeps the transform it was given so a host can render it, and can
    replay the requested transition frame by frame.
    """

    name: str = ""
    width: float = 0.0
    height: float = 0.0
    left: float = 0.0
    top: float = 0.0
    transform: Optional[Transform] = None
    transition: Transition = INSTANT
    previous_transform: Optional[Transform] = None
    apply_count: int = 0

    def apply(self, transform: Transform, transition: Transition) -> None:
        self.previous_transform = self.transform
        self.transform = transform
        self.transition = transition
        self.apply_count += 1

    def resize(self, width: float, height: float) -> None:
        """Change the layout size (e.g. after a window resize)."""
        self.width = width
        self.height = height

    def presented_transform(self, elapsed_ms: float) -> Transform:
        """
        Transform on screen a given time after the last apply.

        Args:
            elapsed_ms: Milliseconds since the last apply

        Returns:
            The interpolated transform (identity if nothing was applied)
        """
        if self.transform is None:
            return Transform()
        if self.previous_transform is None:
            return self.transform
        t = self.transition.progress(elapsed_ms)
        return self.previous_transform.interpolate(self.transform, t)


@dataclass
class DisplaySurface(Surface):
    """A monitor used as a viewport."""

    name: str = ""
    width: float = 0.0
    height: float = 0.0
    left: float = 0.0
    top: float = 0.0
    is_primary: bool = False
    transform: Optional[Transform] = None

    @classmethod
    def from_monitor(cls, monitor: Any, index: int) -> 'DisplaySurface':
        return cls(
            name=getattr(monitor, 'name', None) or f"Display {index + 1}",
            width=monitor.width,
            height=monitor.height,
            left=monitor.x,
            top=monitor.y,
            is_primary=bool(getattr(monitor, 'is_primary', False))
        )

    def apply(self, transform: Transform, transition: Transition) -> None:
        # A monitor cannot be scaled; remember what was asked for
        self.transform = transform

    def __repr__(self):
        return (f"DisplaySurface(name='{self.name}', "
                f"pos=({self.left}, {self.top}), "
                f"size={self.width}x{self.height})")


def is_surface(value: Any) -> bool:
    """True for objects that can be measured and transformed."""
    return not isinstance(value, str) and all(hasattr(value, a) for a in _SURFACE_ATTRS)


class SurfaceRegistry:
    """
    Resolves surface identifiers.

    Identifiers are:
    - a surface object, returned as is
    - a registered name, with or without a leading '#'
    - 'display:primary' or 'display:<index>' for a connected monitor
    """

    def __init__(self):
        self._surfaces: Dict[str, Any] = {}

    def register(self, name: str, surface: Any) -> Any:
        """Register a surface under a name and return it."""
        self._surfaces[name.lstrip('#')] = surface
        return surface

    def unregister(self, name: str) -> bool:
        return self._surfaces.pop(name.lstrip('#'), None) is not None

    def names(self) -> List[str]:
        return list(self._surfaces.keys())

    def displays(self) -> List[DisplaySurface]:
        """Connected monitors as surfaces (empty if none can be detected)."""
        try:
            monitors = get_monitors()
        except ScreenInfoError as e:
            logger.warning("Display detection failed: %s", e)
            return []
        return [DisplaySurface.from_monitor(m, i) for i, m in enumerate(monitors)]

    def _resolve_display(self, identifier: str) -> DisplaySurface:
        which = identifier[len(DISPLAY_PREFIX):].strip()
        displays = self.displays()
        if not displays:
            raise ConfigurationError(f"No displays available for '{identifier}'")

        if which == 'primary':
            for display in displays:
                if display.is_primary:
                    return display
            return displays[0]

        try:
            return displays[int(which)]
        except (ValueError, IndexError):
            raise ConfigurationError(f"Unknown display '{identifier}'") from None

    def resolve(self, identifier: Any, role: str = "surface") -> Any:
        """
        Find the surface an identifier refers to.

        Args:
            identifier: Surface object, name or display identifier
            role: What the surface is used for, for error messages

        Returns:
            The surface

        Raises:
            ConfigurationError: if the identifier is missing or unknown
        """
        if identifier is None or identifier == "":
            raise ConfigurationError(f"The {role} option is required.")

        if is_surface(identifier):
            return identifier

        if not isinstance(identifier, str):
            raise ConfigurationError(
                f"The {role} option needs to be a surface name or a surface object, "
                f"got {type(identifier).__name__}."
            )

        if identifier.startswith(DISPLAY_PREFIX):
            return self._resolve_display(identifier)

        surface = self._surfaces.get(identifier.lstrip('#'))
        if surface is None:
            raise ConfigurationError(f"No {role} surface named '{identifier}'.")
        return surface
