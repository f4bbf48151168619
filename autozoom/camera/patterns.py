"""Click grouping and cursor-movement pattern detection.

Three detectors feed the zoom controller:

1. **Click merging**: clicks closer together than ``click_merge_time``
   *and* ``click_merge_distance`` (pixels, at a reference resolution)
   collapse into one :class:`MergedClick`.  Double-clicks and quick
   multi-select bursts therefore produce a single camera move.

2. **Click-then-move**: the user clicks and immediately starts dragging
   or moving (opening a dropdown, dragging a slider).  The camera should
   follow the cursor instead of holding on the click position.

3. **Late follow**: the same movement starting *after* the detection
   window but while the camera is still holding, so it does not stay
   locked on a stale position.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import ZoomConfig
from .geometry import NormalizedPoint
from .models import ClickEvent, MergedClick, MoveEvent, DEFAULT_REFERENCE_SIZE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowWindow:
    """Interval during which the camera should track the cursor."""
    start: float   # first qualifying move
    until: float   # end of follow, including the settle tail
    moves: int     # qualifying moves found


def merge_distance(pixels: float, reference_size: Tuple[int, int] = DEFAULT_REFERENCE_SIZE) -> float:
    """Convert a pixel threshold to normalized units (largest dimension)."""
    return pixels / float(max(reference_size))


def merge_clicks(
    clicks: List[ClickEvent],
    reference_size: Tuple[int, int] = DEFAULT_REFERENCE_SIZE,
    merge_time: float = 0.35,
    merge_distance_px: float = 120.0,
) -> List[MergedClick]:
    """Group time-ordered *clicks* into :class:`MergedClick` runs.

    A click joins the current run when it is within *merge_time* of the
    previous click in the run and within the converted distance of it.
    """
    if not clicks:
        return []

    max_dist = merge_distance(merge_distance_px, reference_size)
    merged: List[MergedClick] = []
    group = [clicks[0]]

    def _close(run: List[ClickEvent]) -> MergedClick:
        first, last = run[0], run[-1]
        return MergedClick(
            position=first.position,
            time=first.time,
            last_position=last.position,
            last_time=last.time,
            count=len(run),
        )

    for click in clicks[1:]:
        prev = group[-1]
        if (click.time - prev.time < merge_time
                and click.position.distance_to(prev.position) < max_dist):
            group.append(click)
        else:
            merged.append(_close(group))
            group = [click]
    merged.append(_close(group))

    if len(merged) < len(clicks):
        logger.debug("Merged %d clicks into %d groups", len(clicks), len(merged))
    return merged


def _follow_horizon(
    start: float, next_click_time: Optional[float], config: ZoomConfig
) -> float:
    horizon = start + config.follow_time_limit
    if next_click_time is not None:
        horizon = min(horizon, next_click_time - config.follow_next_click_gap)
    return horizon


def _extend_motion(
    first: MoveEvent, later: List[MoveEvent], horizon: float, config: ZoomConfig
) -> FollowWindow:
    """Walk forward from *first* while the cursor keeps moving."""
    last = first
    count = 1
    for move in later:
        if move.time > horizon or move.time - last.time > config.follow_gap_tolerance:
            break
        if move.position.distance_to(last.position) > config.follow_jitter_threshold:
            last = move
            count += 1
    until = min(last.time + config.follow_tail, horizon)
    return FollowWindow(start=first.time, until=max(until, first.time), moves=count)


def detect_click_then_move(
    click: MergedClick,
    moves: List[MoveEvent],
    next_click_time: Optional[float],
    config: ZoomConfig,
) -> Optional[FollowWindow]:
    """Movement starting right after *click*, or ``None``.

    The first move must land within ``follow_detection_window`` of the
    (last) click and be more than ``follow_min_displacement`` away from
    it; smaller offsets are hand jitter.
    """
    anchor = click.last_position
    t0 = click.last_time
    horizon = _follow_horizon(t0, next_click_time, config)
    window_end = min(t0 + config.follow_detection_window, horizon)

    after = [m for m in moves if t0 < m.time <= horizon]
    for i, move in enumerate(after):
        if move.time > window_end:
            return None
        if move.position.distance_to(anchor) > config.follow_min_displacement:
            return _extend_motion(move, after[i + 1:], horizon, config)
    return None


def detect_late_follow(
    hold_start: float,
    hold_end: float,
    focus: NormalizedPoint,
    moves: List[MoveEvent],
    next_click_time: Optional[float],
    config: ZoomConfig,
    not_before: float = 0.0,
) -> Optional[FollowWindow]:
    """Movement away from *focus* beginning inside a scheduled hold.

    Only moves at or after *not_before* are considered, so callers can
    exclude the click-then-move detection window.
    """
    scan_from = max(hold_start, not_before)
    candidates = [m for m in moves if scan_from <= m.time <= hold_end]
    for move in candidates:
        if move.position.distance_to(focus) > config.follow_min_displacement:
            horizon = _follow_horizon(move.time, next_click_time, config)
            if horizon <= move.time:
                return None
            later = [m for m in moves if move.time < m.time <= horizon]
            return _extend_motion(move, later, horizon, config)
    return None
