"""Viewport boundary and cursor-visibility constraints.

At zoom ``s`` the viewport covers ``1/s`` of the recording on each
axis, so its center must stay within ``[1/(2s), 1 - 1/(2s)]`` or the
camera would show area outside the screen.
"""

from typing import Tuple

from .geometry import CENTER, NormalizedPoint, clamp

VISIBILITY_MARGIN = 0.05     # keep the target this fraction inside the half-extent
CORRECTIVE_LIMIT = 0.98      # final pass: target must be within 98% of the half-extent


def valid_range(scale: float) -> Tuple[float, float]:
    """Allowed center interval (same on both axes) at *scale*."""
    if scale <= 1.0:
        return 0.5, 0.5
    half = 0.5 / scale
    return half, 1.0 - half


def constrain_center(center: NormalizedPoint, scale: float) -> NormalizedPoint:
    """Clamp *center* so the viewport stays inside [0, 1]²."""
    if scale <= 1.0:
        return CENTER
    lo, hi = valid_range(scale)
    return NormalizedPoint(clamp(center.x, lo, hi), clamp(center.y, lo, hi))


def _solve_axis(desired: float, target: float, half: float, margin: float) -> float:
    lo, hi = half, 1.0 - half
    reach = half * (1.0 - margin)
    vis_lo, vis_hi = target - reach, target + reach

    a, b = max(lo, vis_lo), min(hi, vis_hi)
    if a <= b:
        c = clamp(desired, a, b)
    else:
        # No center satisfies both; stay on screen, as close to the target as allowed
        c = clamp(target, lo, hi)

    limit = half * CORRECTIVE_LIMIT
    if target < c - limit:
        c = target + limit
    elif target > c + limit:
        c = target - limit
    return clamp(c, lo, hi)


def keep_visible(
    desired: NormalizedPoint,
    scale: float,
    target: NormalizedPoint,
    margin: float = VISIBILITY_MARGIN,
) -> NormalizedPoint:
    """Closest center to *desired* that keeps *target* inside the viewport.

    The result always satisfies the boundary clamp; visibility of
    *target* is guaranteed whenever the clamp allows it.
    """
    if scale <= 1.0:
        return CENTER
    half = 0.5 / scale
    return NormalizedPoint(
        _solve_axis(desired.x, target.x, half, margin),
        _solve_axis(desired.y, target.y, half, margin),
    )
