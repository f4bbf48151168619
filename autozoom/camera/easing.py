"""Easing curves applied between consecutive zoom keyframes.

Every curve maps progress ``t`` in [0, 1] to an eased fraction in
[0, 1].  Input outside that range is clamped first, so callers can pass
raw ``elapsed / duration`` ratios.
"""

from enum import Enum


def _clamp01(t: float) -> float:
    return max(0.0, min(1.0, t))


def linear(t: float) -> float:
    return _clamp01(t)


def ease_in(t: float) -> float:
    """Quadratic ease-in: f(t) = t²."""
    t = _clamp01(t)
    return t * t


def ease_out(t: float) -> float:
    """Quadratic ease-out: f(t) = 1 - (1-t)².

    Fast start, gentle arrival.  Used when the camera should react
    immediately to a click but settle softly on the target.
    """
    inv = 1.0 - _clamp01(t)
    return 1.0 - inv * inv


def ease_in_out(t: float) -> float:
    """Quadratic ease-in-out, symmetric around t = 0.5.

    f(t) = 2t²                 for t < 0.5
    f(t) = 1 - (-2t + 2)² / 2  otherwise
    """
    t = _clamp01(t)
    if t < 0.5:
        return 2.0 * t * t
    k = -2.0 * t + 2.0
    return 1.0 - k * k / 2.0


def smoothstep(t: float) -> float:
    """Hermite smoothstep t²(3 - 2t); zero slope at both ends."""
    t = _clamp01(t)
    return t * t * (3.0 - 2.0 * t)


class EasingCurve(str, Enum):
    """Named easing applied on the way *into* a keyframe."""
    LINEAR = "linear"
    EASE_IN = "ease_in"
    EASE_OUT = "ease_out"
    EASE_IN_OUT = "ease_in_out"

    def apply(self, t: float) -> float:
        return _CURVES[self](t)


_CURVES = {
    EasingCurve.LINEAR: linear,
    EasingCurve.EASE_IN: ease_in,
    EasingCurve.EASE_OUT: ease_out,
    EasingCurve.EASE_IN_OUT: ease_in_out,
}
