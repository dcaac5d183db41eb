"""
Utility functions for agent motion: easing, heading and interpolation.
"""
import math


def clamp(value, low, high):
    return max(low, min(high, value))


def ease_in_out_cubic(t):
    """
    Symmetric cubic ease-in-ease-out.
    Slow start, fast middle, slow stop; f(0) = 0, f(0.5) = 0.5, f(1) = 1.
    """
    t = clamp(t, 0.0, 1.0)
    if t < 0.5:
        return 4.0 * t * t * t
    return 1.0 - math.pow(-2.0 * t + 2.0, 3) / 2.0


def forward_offset(heading, distance):
    """
    Offset in the ground (x/z) plane for travelling `distance` along `heading`.
    Heading 0 faces +z; positive headings turn towards +x.
    """
    return distance * math.sin(heading), distance * math.cos(heading)


def normalize_angle(angle):
    """Wrap an angle in radians to [-pi, pi)."""
    return (angle + math.pi) % (2 * math.pi) - math.pi


def degrees_to_radians(degrees):
    return degrees * math.pi / 180.0


def radians_to_degrees(radians):
    return radians * 180.0 / math.pi
