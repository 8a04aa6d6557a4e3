"""
Errors Module
Exception types raised inside the pan/zoom core
"""


class PanZoomError(Exception):
    """Base class for pan/zoom errors."""


class ConfigurationError(PanZoomError):
    """A required surface identifier is missing or cannot be resolved."""


class DegenerateGeometryError(PanZoomError):
    """A surface has a zero, negative or non-finite dimension."""
