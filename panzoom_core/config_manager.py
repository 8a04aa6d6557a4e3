"""
Config Manager Module
Option resolution and JSON-based configuration with profile support
"""

import json
import logging
import math
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from .easing import EASING_FUNCTIONS

logger = logging.getLogger(__name__)

BOUNDS_MODES = ('contain', 'cover', 'off')
SYMBOLIC_ZOOMS = ('contain', 'cover')
CALLBACK_KEYS = ('on_init', 'on_change', 'on_zoom', 'on_pan')

# Legacy option names accepted as aliases
_ALIASES = {
    'wrapper_element': 'viewport',
    'pan_zoom_element': 'content',
}


@dataclass(frozen=True)
class PanZoomOptions:
    """Resolved pan/zoom options. Read-only once resolved."""

    viewport: Any = None
    content: Any = None
    center: bool = True
    bounds: str = 'contain'
    min_zoom: float = 0.1
    max_zoom: float = 10.0
    pan_step: float = 10.0
    zoom_step: float = 50.0
    zoom_speed_wheel: float = 1.0
    zoom_speed_pinch: float = 4.0
    initial_zoom: Union[float, str] = 'contain'
    initial_pan_x: float = 0.0
    initial_pan_y: float = 0.0
    transition_speed: float = 400.0
    transition_easing: str = 'ease'

    @property
    def bounds_enabled(self) -> bool:
        return self.bounds != 'off'

    def with_min_zoom(self, min_zoom: float) -> 'PanZoomOptions':
        """Copy of these options with a different minimum zoom."""
        return replace(self, min_zoom=min_zoom)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary. Surface objects are left out."""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name in ('viewport', 'content') and not isinstance(value, str):
                continue
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'PanZoomOptions':
        """Create from dictionary."""
        return resolve_options(data)


_DEFAULTS = PanZoomOptions()
_OPTION_NAMES = tuple(f.name for f in fields(PanZoomOptions))


def _snake_case(key: str) -> str:
    key = re.sub(r'(?<=[a-z0-9])([A-Z])', r'_\1', key).lower()
    return _ALIASES.get(key, key)


def is_number(value: Any) -> bool:
    """True for finite ints and floats (bools excluded)."""
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def _number(name: str, value: Any, minimum: Optional[float] = None,
            exclusive: bool = False) -> float:
    default = getattr(_DEFAULTS, name)
    if not is_number(value):
        logger.warning("Option %s=%r is not a number, using %r", name, value, default)
        return float(default)
    if minimum is not None and (value <= minimum if exclusive else value < minimum):
        logger.warning("Option %s=%r is out of range, using %r", name, value, default)
        return float(default)
    return float(value)


def normalize_bounds(value: Any) -> str:
    """
    Normalize a bounds option.

    Accepts 'contain', 'cover' and 'off' as well as the boolean
    spellings: False/None switch bounds off, True means 'contain'.
    """
    if value is None or value is False:
        return 'off'
    if value is True:
        return 'contain'
    if isinstance(value, str) and value.lower() in BOUNDS_MODES:
        return value.lower()
    logger.warning("Unknown bounds mode %r, using %r", value, _DEFAULTS.bounds)
    return _DEFAULTS.bounds


def split_callbacks(user_options: Optional[Mapping[str, Any]]
                    ) -> Tuple[Dict[str, Any], Dict[str, Callable]]:
    """
    Separate notification callbacks from plain option values.

    Returns:
        Tuple of (options, callbacks) with snake_case keys
    """
    options: Dict[str, Any] = {}
    callbacks: Dict[str, Callable] = {}
    for key, value in (user_options or {}).items():
        key = _snake_case(key)
        if key in CALLBACK_KEYS:
            if value is not None:
                callbacks[key] = value
        else:
            options[key] = value
    return options, callbacks


def resolve_options(user_options: Optional[Mapping[str, Any]] = None,
                    **overrides: Any) -> PanZoomOptions:
    """
    Merge user-supplied options over the defaults.

    Never raises: unknown keys are ignored and invalid values fall back
    to their defaults, each with a logged warning. Surface identifiers are
    not checked here (see SurfaceRegistry.resolve).

    Args:
        user_options: Option mapping, snake_case or camelCase keys
        **overrides: Additional options taking precedence

    Returns:
        Resolved PanZoomOptions
    """
    merged = dict(user_options or {})
    merged.update(overrides)
    options, callbacks = split_callbacks(merged)
    if callbacks:
        logger.debug("Ignoring callbacks while resolving options: %s", sorted(callbacks))

    values: Dict[str, Any] = {}
    for key, value in options.items():
        if key not in _OPTION_NAMES:
            logger.warning("Ignoring unknown option %r", key)
            continue
        values[key] = value

    resolved: Dict[str, Any] = {}
    resolved['viewport'] = values.get('viewport')
    resolved['content'] = values.get('content')
    resolved['center'] = bool(values.get('center', _DEFAULTS.center))
    resolved['bounds'] = normalize_bounds(values.get('bounds', _DEFAULTS.bounds))

    for name in ('min_zoom', 'max_zoom', 'pan_step', 'zoom_step'):
        if name in values:
            resolved[name] = _number(name, values[name], 0, exclusive=True)
    for name in ('zoom_speed_wheel', 'zoom_speed_pinch', 'transition_speed'):
        if name in values:
            resolved[name] = _number(name, values[name], 0)
    for name in ('initial_pan_x', 'initial_pan_y'):
        if name in values:
            resolved[name] = _number(name, values[name])

    min_zoom = resolved.get('min_zoom', _DEFAULTS.min_zoom)
    max_zoom = resolved.get('max_zoom', _DEFAULTS.max_zoom)
    if min_zoom > max_zoom:
        logger.warning("min_zoom %r is above max_zoom %r, swapping them", min_zoom, max_zoom)
        resolved['min_zoom'], resolved['max_zoom'] = max_zoom, min_zoom

    if 'initial_zoom' in values:
        initial = values['initial_zoom']
        if isinstance(initial, str) and initial.lower() in SYMBOLIC_ZOOMS:
            resolved['initial_zoom'] = initial.lower()
        elif is_number(initial) and initial > 0:
            resolved['initial_zoom'] = float(initial)
        else:
            logger.warning("Invalid initial_zoom %r, using %r", initial, _DEFAULTS.initial_zoom)

    if 'transition_easing' in values:
        easing = values['transition_easing']
        if easing in EASING_FUNCTIONS:
            resolved['transition_easing'] = easing
        else:
            logger.warning("Unknown transition_easing %r, using %r",
                           easing, _DEFAULTS.transition_easing)

    return PanZoomOptions(**resolved)


@dataclass
class RemoteConfig:
    """WebSocket remote control configuration."""

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765

    def to_dict(self) -> Dict[str, Any]:
        return {'enabled': self.enabled, 'host': self.host, 'port': self.port}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RemoteConfig':
        return cls(
            enabled=bool(data.get('enabled', False)),
            host=data.get('host', "127.0.0.1"),
            port=int(data.get('port', 8765))
        )


@dataclass
class Config:
    """Main configuration object."""

    version: str = "1.0.0"
    default_profile: str = "standard"
    profiles: Dict[str, PanZoomOptions] = field(default_factory=dict)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    debug_logging: bool = False

    def __post_init__(self):
        if not self.profiles:
            self.profiles['standard'] = PanZoomOptions()

    def get_profile(self, name: Optional[str] = None) -> PanZoomOptions:
        """Get a profile by name, or the default profile."""
        if name is None:
            name = self.default_profile

        if name in self.profiles:
            return self.profiles[name]

        if self.default_profile in self.profiles:
            logger.warning("Profile %r not found, using %r", name, self.default_profile)
            return self.profiles[self.default_profile]

        first = next(iter(self.profiles))
        logger.warning("Profile %r not found, using %r", name, first)
        return self.profiles[first]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'version': self.version,
            'default_profile': self.default_profile,
            'profiles': {name: options.to_dict() for name, options in self.profiles.items()},
            'remote': self.remote.to_dict(),
            'debug_logging': self.debug_logging
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        profiles = {
            name: PanZoomOptions.from_dict(profile_data)
            for name, profile_data in data.get('profiles', {}).items()
        }

        return cls(
            version=data.get('version', "1.0.0"),
            default_profile=data.get('default_profile', 'standard'),
            profiles=profiles,
            remote=RemoteConfig.from_dict(data.get('remote', {})),
            debug_logging=bool(data.get('debug_logging', False))
        )


class ConfigManager:
    """
    Manages loading, saving, and accessing configuration.

    Configuration is stored in a JSON file that can be:
    - In the same directory as the host script
    - In the current working directory
    - Specified explicitly
    """

    DEFAULT_FILENAME = "panzoom.json"

    def __init__(self, config_path: Optional[str] = None, script_path: Optional[str] = None):
        """
        Initialize config manager.

        Args:
            config_path: Explicit path to config file
            script_path: Path to the host script (for locating default config)
        """
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = Path(config_path) if config_path else None
        self._script_path = Path(script_path) if script_path else None

    @property
    def path(self) -> Path:
        """Path the configuration is read from and written to."""
        return self._find_config_path()

    def _find_config_path(self) -> Path:
        if self._config_path:
            return self._config_path

        if self._script_path:
            script_config = self._script_path.parent / self.DEFAULT_FILENAME
            if script_config.exists():
                return script_config

        cwd_config = Path.cwd() / self.DEFAULT_FILENAME
        if cwd_config.exists() or not self._script_path:
            return cwd_config
        return self._script_path.parent / self.DEFAULT_FILENAME

    def load(self) -> Config:
        """
        Load configuration from file.

        Returns:
            Config object (creates and saves a default if the file is missing)
        """
        config_path = self._find_config_path()

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self._config = Config.from_dict(data)
            except (json.JSONDecodeError, OSError, AttributeError, TypeError, ValueError) as e:
                logger.error("Error loading config from %s: %s", config_path, e)
                self._config = self._create_default_config()
            self._config_path = config_path
        else:
            self._config = self._create_default_config()
            self._config_path = config_path
            self.save()

        return self._config

    def save(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if saved successfully
        """
        if self._config is None:
            return False

        config_path = self._find_config_path()

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self._config.to_dict(), f, indent=2)
            return True
        except OSError as e:
            logger.error("Error saving config to %s: %s", config_path, e)
            return False

    def _create_default_config(self) -> Config:
        return Config(
            profiles={
                'standard': PanZoomOptions(),
                'smooth': PanZoomOptions(
                    transition_speed=700.0,
                    transition_easing='ease_in_out',
                    zoom_step=25.0
                ),
                'instant': PanZoomOptions(transition_speed=0.0)
            }
        )

    @property
    def config(self) -> Config:
        """Get current configuration (loads if not already loaded)."""
        if self._config is None:
            self.load()
        return self._config

    @property
    def current_profile(self) -> PanZoomOptions:
        """Get the current active profile."""
        return self.config.get_profile()

    def get_profile(self, name: str) -> PanZoomOptions:
        """Get a specific profile by name."""
        return self.config.get_profile(name)

    def set_default_profile(self, name: str) -> bool:
        """
        Set the default profile.

        Returns:
            True if profile exists and was set
        """
        if name in self.config.profiles:
            self.config.default_profile = name
            return True
        return False

    def add_profile(self, name: str, options: PanZoomOptions) -> None:
        """Add or update a profile."""
        self.config.profiles[name] = options

    def remove_profile(self, name: str) -> bool:
        """
        Remove a profile.

        Returns:
            True if removed, False if not found or is the only profile
        """
        if name in self.config.profiles and len(self.config.profiles) > 1:
            del self.config.profiles[name]
            if self.config.default_profile == name:
                self.config.default_profile = next(iter(self.config.profiles))
            return True
        return False

    def list_profiles(self) -> list:
        """Get list of profile names."""
        return list(self.config.profiles.keys())
