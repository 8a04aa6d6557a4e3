"""
Easing Module
Timing curves for animated transform transitions
"""

import math
from typing import Callable, Dict


def linear(t: float) -> float:
    """Linear timing - no easing."""
    return t


def ease_out_quad(t: float) -> float:
    """Quadratic ease-out."""
    return t * (2 - t)


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in-out."""
    if t < 0.5:
        return 4 * t * t * t
    return 1 - pow(-2 * t + 2, 3) / 2


def ease_out_sine(t: float) -> float:
    """Sinusoidal ease-out."""
    return math.sin((t * math.pi) / 2)


def cubic_bezier(x1: float, y1: float, x2: float, y2: float) -> Callable[[float], float]:
    """
    Build a timing function from a CSS-style cubic bezier.

    The curve runs from (0, 0) to (1, 1) with control points (x1, y1)
    and (x2, y2). The returned function maps elapsed time to progress.

    Args:
        x1, y1: First control point
        x2, y2: Second control point

    Returns:
        Timing function taking t in [0, 1]
    """
    cx = 3 * x1
    bx = 3 * (x2 - x1) - cx
    ax = 1 - cx - bx
    cy = 3 * y1
    by = 3 * (y2 - y1) - cy
    ay = 1 - cy - by

    def sample_x(s: float) -> float:
        return ((ax * s + bx) * s + cx) * s

    def sample_y(s: float) -> float:
        return ((ay * s + by) * s + cy) * s

    def slope_x(s: float) -> float:
        return (3 * ax * s + 2 * bx) * s + cx

    def solve(x: float) -> float:
        # Newton first, bisection when the slope flattens out
        s = x
        for _ in range(8):
            err = sample_x(s) - x
            if abs(err) < 1e-6:
                return s
            d = slope_x(s)
            if abs(d) < 1e-6:
                break
            s -= err / d

        lo, hi = 0.0, 1.0
        s = x
        while lo < hi:
            value = sample_x(s)
            if abs(value - x) < 1e-6:
                return s
            if x > value:
                lo = s
            else:
                hi = s
            if hi - lo < 1e-7:
                break
            s = (lo + hi) / 2
        return s

    def timing(t: float) -> float:
        if t <= 0:
            return 0.0
        if t >= 1:
            return 1.0
        return sample_y(solve(t))

    return timing


# CSS keyword curves
ease = cubic_bezier(0.25, 0.1, 0.25, 1.0)
ease_in = cubic_bezier(0.42, 0.0, 1.0, 1.0)
ease_out = cubic_bezier(0.0, 0.0, 0.58, 1.0)
ease_in_out = cubic_bezier(0.42, 0.0, 0.58, 1.0)


EASING_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    'linear': linear,
    'ease': ease,
    'ease_in': ease_in,
    'ease_out': ease_out,
    'ease_in_out': ease_in_out,
    'ease_out_quad': ease_out_quad,
    'ease_in_out_cubic': ease_in_out_cubic,
    'ease_out_sine': ease_out_sine,
}


def get_easing(name: str) -> Callable[[float], float]:
    """
    Get an easing function by name.

    Args:
        name: Name of the easing function

    Returns:
        The easing function, or linear if not found
    """
    return EASING_FUNCTIONS.get(name, linear)


# How each curve is written in a CSS transition
CSS_TIMING: Dict[str, str] = {
    'linear': 'linear',
    'ease': 'ease',
    'ease_in': 'ease-in',
    'ease_out': 'ease-out',
    'ease_in_out': 'ease-in-out',
    'ease_out_quad': 'cubic-bezier(0.5, 1, 0.89, 1)',
    'ease_in_out_cubic': 'cubic-bezier(0.65, 0, 0.35, 1)',
    'ease_out_sine': 'cubic-bezier(0.61, 1, 0.88, 1)',
}


def css_timing(name: str) -> str:
    """CSS timing-function text for an easing name (linear if unknown)."""
    return CSS_TIMING.get(name, 'linear')


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation between two values."""
    return start + (end - start) * t


def clamp(value: float, min_val: float, max_val: float) -> float:
    """
    Clamp a value between min and max.

    Args:
        value: Value to clamp
        min_val: Minimum value
        max_val: Maximum value

    Returns:
        Clamped value
    """
    return max(min_val, min(max_val, value))
