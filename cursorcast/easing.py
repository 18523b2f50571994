"""
Easing Functions Module
Shared time-warp curves for cursor, zoom and click animations
"""

from enum import Enum
from typing import Callable, Dict, Union


class Easing(str, Enum):
    """Named easing curves a keyframe or transition can use."""
    LINEAR = 'linear'
    EASE_IN = 'ease_in'
    EASE_OUT = 'ease_out'
    EASE_IN_OUT = 'ease_in_out'


def linear(t: float) -> float:
    """Linear interpolation - no easing."""
    return t


def ease_in(t: float) -> float:
    """Quadratic ease-in."""
    return t * t


def ease_out(t: float) -> float:
    """Quadratic ease-out."""
    return t * (2 - t)


def ease_in_out(t: float) -> float:
    """Cubic ease-in-out (default for zoom transitions)."""
    if t < 0.5:
        return 4 * t * t * t
    return 1 - pow(-2 * t + 2, 3) / 2


EASING_FUNCTIONS: Dict[Easing, Callable[[float], float]] = {
    Easing.LINEAR: linear,
    Easing.EASE_IN: ease_in,
    Easing.EASE_OUT: ease_out,
    Easing.EASE_IN_OUT: ease_in_out,
}


def parse_easing(name: Union[str, Easing, None]) -> Easing:
    """
    Resolve an easing name to an Easing member.

    Accepts snake_case names as well as the camelCase names found in
    older metadata files ("easeInOut"). Unknown or empty names resolve
    to linear.
    """
    if isinstance(name, Easing):
        return name
    if not name:
        return Easing.LINEAR
    normalized = ''.join('_' + c.lower() if c.isupper() else c for c in name)
    try:
        return Easing(normalized)
    except ValueError:
        return Easing.LINEAR


def get_easing(name: Union[str, Easing, None]) -> Callable[[float], float]:
    """
    Get an easing function by name.

    Args:
        name: Easing member or name

    Returns:
        The easing function, or linear if not found
    """
    return EASING_FUNCTIONS[parse_easing(name)]


def lerp(start: float, end: float, t: float) -> float:
    """
    Linear interpolation between two values.

    Args:
        start: Start value
        end: End value
        t: Progress (0-1)

    Returns:
        Interpolated value
    """
    return start + (end - start) * t


def lerp_eased(start: float, end: float, t: float,
               easing: Union[str, Easing] = Easing.LINEAR) -> float:
    """Eased interpolation between two values."""
    return lerp(start, end, get_easing(easing)(t))


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
