"""
Targeting ("windowing") functions.

Each window returns a 0.0-1.0 strength describing how much a pixel
qualifies for a correction. The hue window feathers with a raised cosine;
luminance and saturation windows use linear ramps.
"""

import math


def hue_window_strength(hue: float, center: float, half_width: float, softness: float) -> float:
    """
    Strength of a circular hue window.

    Args:
        hue: Hue angle in degrees
        center: Window center in degrees
        half_width: Half-width of the window in degrees
        softness: Feather half-width around each edge in degrees

    Returns:
        1.0 within half_width - softness of the center, 0.0 beyond
        half_width + softness, raised-cosine falloff in between
    """
    diff = abs(hue - center) % 360.0
    if diff > 180.0:
        diff = 360.0 - diff

    inner = half_width - softness
    if diff <= inner:
        return 1.0
    if diff > half_width + softness:
        return 0.0

    t = (diff - inner) / (2.0 * softness)
    return (1.0 + math.cos(t * math.pi)) / 2.0


def linear_window_strength(value: float, low: float, high: float, softness: float) -> float:
    """
    Strength of a linear (non-circular) window, used for luminance and saturation.

    Zero outside [low, high], linear ramps across the softness margin inside
    each edge, 1.0 in the middle.
    """
    if value < low or value > high:
        return 0.0
    if value < low + softness:
        return (value - low) / softness
    if value > high - softness:
        return (high - value) / softness
    return 1.0


def soft_knee_rolloff(value: float, knee_start: float, ceiling: float) -> float:
    """
    Quadratic highlight compression above a knee.

    Identity at or below knee_start. Above it the curve is continuous with
    the identity at the knee and flattens to exactly ceiling at value 1.0;
    anything brighter than 1.0 maps to ceiling.
    """
    if value <= knee_start:
        return value

    t = min((value - knee_start) / (1.0 - knee_start), 1.0)
    return knee_start + (ceiling - knee_start) * (2.0 * t - t * t)
