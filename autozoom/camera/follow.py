"""Follow-mode keyframes: the camera tracks the cursor while zoomed.

The cursor track is resampled at ``follow_sample_rate``, smoothed with a
per-segment One-Euro filter (tuned softer than the defaults, since a
camera should move more calmly than a pointer) and turned into camera
centers either directly or through a spring chase.  The dense result is
thinned with RDP and re-densified so the renderer gets few keyframes
without long blind gaps.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .boundary import keep_visible
from .config import FollowMode, ZoomConfig
from .easing import EasingCurve, smoothstep
from .geometry import NormalizedPoint
from .models import MoveEvent, ZoomKeyframe
from .one_euro import PointFilter
from .rdp import PathPoint, densify, simplify

logger = logging.getLogger(__name__)

FOLLOW_SMOOTHING = 0.5   # scale applied to min_cutoff and beta for follow segments


@dataclass
class FollowResult:
    keyframes: List[ZoomKeyframe]
    center: NormalizedPoint   # camera center at the end of the segment
    cursor: NormalizedPoint   # cursor position at the end of the segment


def _cursor_track(
    moves: List[MoveEvent], start_time: float, end_time: float, anchor: NormalizedPoint
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Raw cursor samples covering the segment, starting at *start_time*."""
    before = [m for m in moves if m.time <= start_time]
    inside = [m for m in moves if start_time < m.time <= end_time]
    first = before[-1].position if before else anchor
    times = np.array([start_time] + [m.time for m in inside], dtype=float)
    xs = np.array([first.x] + [m.position.x for m in inside], dtype=float)
    ys = np.array([first.y] + [m.position.y for m in inside], dtype=float)
    return times, xs, ys


def _blend_targets(
    times: np.ndarray, xs: np.ndarray, ys: np.ndarray, ticks: np.ndarray, smooth: bool
) -> Tuple[np.ndarray, np.ndarray]:
    """Cursor position at each tick, blended between bracketing samples."""
    if not smooth:
        return np.interp(ticks, times, xs), np.interp(ticks, times, ys)

    last = len(times) - 1
    lo = np.clip(np.searchsorted(times, ticks, side="right") - 1, 0, last)
    hi = np.minimum(lo + 1, last)
    span = times[hi] - times[lo]
    frac = np.divide(ticks - times[lo], span, out=np.zeros_like(ticks), where=span > 0)
    frac = np.vectorize(smoothstep, otypes=[float])(frac)
    return xs[lo] + (xs[hi] - xs[lo]) * frac, ys[lo] + (ys[hi] - ys[lo]) * frac


def generate_follow_keyframes(
    start_center: NormalizedPoint,
    scale: float,
    start_time: float,
    end_time: float,
    moves: List[MoveEvent],
    config: ZoomConfig,
    anchor: NormalizedPoint,
) -> FollowResult:
    """Camera keyframes tracking the cursor from *start_time* to *end_time*.

    The first keyframe sits at *start_time* on *start_center* so the
    segment continues the camera's current state.  *anchor* stands in for
    the cursor position when no move precedes the segment.
    """
    if end_time <= start_time:
        return FollowResult([], start_center, anchor)

    times, xs, ys = _cursor_track(moves, start_time, end_time, anchor)
    step = 1.0 / config.follow_sample_rate
    n = int(math.floor((end_time - start_time) / step + 1e-9))
    ticks = start_time + step * np.arange(n + 1)
    if ticks[-1] < end_time - 1e-9:
        ticks = np.append(ticks, end_time)

    spring_mode = config.follow_mode == FollowMode.SPRING
    tx, ty = _blend_targets(times, xs, ys, ticks, smooth=spring_mode)

    smoother = PointFilter(
        config.one_euro_min_cutoff * FOLLOW_SMOOTHING,
        config.one_euro_beta * FOLLOW_SMOOTHING,
        config.one_euro_d_cutoff,
    )
    # Seed with the camera so the smoothed target starts where the camera is
    smoother.filter(start_center, start_time - step)

    spring = config.spring
    every = max(1, int(round(config.follow_keyframe_interval * config.follow_sample_rate)))
    cx, cy = start_center.x, start_center.y
    vx = vy = 0.0
    path = [PathPoint(start_time, start_center)]
    cursor = anchor

    for i in range(1, len(ticks)):
        t = float(ticks[i])
        cursor = NormalizedPoint(float(tx[i]), float(ty[i]))
        target = smoother.filter(cursor, t)
        if spring_mode:
            cx, vx = spring.step(cx, vx, target.x, step)
            cy, vy = spring.step(cy, vy, target.y, step)
            desired = NormalizedPoint(cx, cy)
        else:
            desired = target
        center = keep_visible(desired, scale, cursor)
        cx, cy = center.x, center.y
        if i % every == 0 or i == len(ticks) - 1:
            path.append(PathPoint(t, center))

    simplified = simplify(path, config.rdp_epsilon)
    dense = densify(simplified, path, config.follow_max_keyframe_gap)
    logger.debug(
        "Follow %.2f-%.2fs: %d samples -> %d keyframes",
        start_time, end_time, len(path), len(dense),
    )

    keyframes = [
        ZoomKeyframe(time=p.time, scale=scale, center=p.position, easing=EasingCurve.LINEAR)
        for p in dense
    ]
    return FollowResult(keyframes, path[-1].position, cursor)
