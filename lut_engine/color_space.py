"""
RGB <-> HSL conversion for scalar colors.

Inputs may sit outside [0, 1] mid-pipeline; these functions never raise on
such values. Clamping is the caller's job at the table boundary.
"""

from typing import Tuple

RGB = Tuple[float, float, float]
HSL = Tuple[float, float, float]


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    """Clamp value into [lo, hi]."""
    return min(max(value, lo), hi)


def rgb_to_hsl(r: float, g: float, b: float) -> HSL:
    """
    Convert an RGB triple to (hue degrees, saturation, luminance).

    Achromatic input (max == min) returns hue 0 and saturation 0. When
    channels are equal at the maximum the red branch wins, then green.
    """
    mx = max(r, g, b)
    mn = min(r, g, b)
    l = (mx + mn) / 2.0

    if mx == mn:
        return 0.0, 0.0, l

    d = mx - mn
    denom = (2.0 - mx - mn) if l > 0.5 else (mx + mn)
    # Only reachable with out-of-range channels
    s = d / denom if denom != 0.0 else 0.0

    if mx == r:
        h = (g - b) / d + (6.0 if g < b else 0.0)
    elif mx == g:
        h = (b - r) / d + 2.0
    else:
        h = (r - g) / d + 4.0
    return wrap_hue(h * 60.0), s, l


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0.0 or t > 1.0:
        t %= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 0.5:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Convert (hue degrees, saturation, luminance) back to RGB."""
    if s == 0.0:
        return l, l, l

    q = l * (1.0 + s) if l < 0.5 else l + s - l * s
    p = 2.0 * l - q
    hk = h / 360.0

    return (
        _hue_to_channel(p, q, hk + 1.0 / 3.0),
        _hue_to_channel(p, q, hk),
        _hue_to_channel(p, q, hk - 1.0 / 3.0),
    )


def wrap_hue(h: float) -> float:
    """Normalize a hue angle into [0, 360)."""
    if h < 0.0 or h >= 360.0:
        h %= 360.0
        # A tiny negative angle rounds up to exactly 360.0
        if h >= 360.0:
            h = 0.0
    return h
