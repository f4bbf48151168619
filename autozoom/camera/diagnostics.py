"""Diagnostics for tuning: what the input looked like, what came out.

``log_report`` writes a summary of a session and the keyframes
generated for it to the module logger: rapid click pairs, moves
recorded right around clicks, and abrupt keyframe steps are the usual
suspects when a zoom looks jittery.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .models import ClickEvent, RecordingSession, ZoomKeyframe

logger = logging.getLogger(__name__)

RAPID_CLICK_GAP = 0.5        # s between clicks
MOVE_NEAR_CLICK = 0.1        # s either side of a click
RAPID_KEYFRAME_GAP = 0.1     # s between keyframes
RAPID_SCALE_STEP = 0.1
RAPID_CENTER_STEP = 0.05
LARGE_SCALE_STEP = 0.5
REPORT_LIMIT = 5             # examples listed per section


@dataclass
class SessionAnalysis:
    duration: float
    total_clicks: int
    total_moves: int
    rapid_click_pairs: List[Tuple[ClickEvent, ClickEvent, float]] = field(default_factory=list)
    moves_near_clicks: List[Tuple[ClickEvent, int]] = field(default_factory=list)
    avg_move_interval: float = 0.0

    @property
    def move_sample_rate(self) -> float:
        return 1.0 / self.avg_move_interval if self.avg_move_interval > 0 else 0.0


@dataclass
class KeyframeAnalysis:
    total_keyframes: int
    rapid_transitions: List[Tuple[ZoomKeyframe, ZoomKeyframe, float]] = field(default_factory=list)
    large_scale_changes: List[Tuple[ZoomKeyframe, ZoomKeyframe, float]] = field(default_factory=list)


def analyze_session(session: RecordingSession) -> SessionAnalysis:
    clicks = session.clicks
    moves = session.moves
    analysis = SessionAnalysis(
        duration=session.duration,
        total_clicks=len(clicks),
        total_moves=len(moves),
    )

    for a, b in zip(clicks, clicks[1:]):
        gap = b.time - a.time
        if gap < RAPID_CLICK_GAP:
            analysis.rapid_click_pairs.append((a, b, gap))

    move_times = np.array([m.time for m in moves], dtype=float)
    for click in clicks:
        nearby = int(np.count_nonzero(np.abs(move_times - click.time) < MOVE_NEAR_CLICK))
        if nearby:
            analysis.moves_near_clicks.append((click, nearby))

    if move_times.size > 1:
        analysis.avg_move_interval = float(np.diff(move_times).mean())
    return analysis


def analyze_keyframes(keyframes: Sequence[ZoomKeyframe]) -> KeyframeAnalysis:
    analysis = KeyframeAnalysis(total_keyframes=len(keyframes))
    for a, b in zip(keyframes, keyframes[1:]):
        gap = b.time - a.time
        scale_step = abs(b.scale - a.scale)
        center_step = a.center.distance_to(b.center)
        if gap < RAPID_KEYFRAME_GAP and (scale_step > RAPID_SCALE_STEP or center_step > RAPID_CENTER_STEP):
            analysis.rapid_transitions.append((a, b, gap))
        if scale_step > LARGE_SCALE_STEP:
            analysis.large_scale_changes.append((a, b, scale_step))
    return analysis


def log_report(session: RecordingSession, keyframes: Sequence[ZoomKeyframe]) -> None:
    """Log a diagnostics report for *session* and its generated *keyframes*."""
    s = analyze_session(session)
    k = analyze_keyframes(keyframes)

    logger.info(
        "Session: %.2fs, %d clicks, %d moves, move sample rate %.1f Hz",
        s.duration, s.total_clicks, s.total_moves, s.move_sample_rate,
    )
    if s.rapid_click_pairs:
        logger.info("Rapid clicks: %d pairs", len(s.rapid_click_pairs))
        for a, b, gap in s.rapid_click_pairs[:REPORT_LIMIT]:
            logger.info(
                "  t=%.3f -> t=%.3f (dt=%.3fs, dd=%.3f)",
                a.time, b.time, gap, a.position.distance_to(b.position),
            )
    if s.moves_near_clicks:
        logger.info("Clicks with moves within %.0fms: %d", MOVE_NEAR_CLICK * 1000, len(s.moves_near_clicks))
        for click, count in s.moves_near_clicks[:REPORT_LIMIT]:
            logger.info("  click at t=%.3f has %d nearby moves", click.time, count)

    logger.info("Keyframes: %d", k.total_keyframes)
    if k.rapid_transitions:
        logger.info("Rapid transitions: %d", len(k.rapid_transitions))
        for a, b, gap in k.rapid_transitions[:REPORT_LIMIT]:
            logger.info("  t=%.3f -> t=%.3f (dt=%.3fs)", a.time, b.time, gap)
    if k.large_scale_changes:
        logger.warning("Large scale jumps between keyframes: %d", len(k.large_scale_changes))
        for a, b, step in k.large_scale_changes[:REPORT_LIMIT]:
            logger.warning("  t=%.3f: scale %.2f -> %.2f (d=%.2f)", a.time, a.scale, b.scale, step)
