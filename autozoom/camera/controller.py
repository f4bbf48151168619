"""Turn a recorded session into a complete zoom keyframe list.

The controller makes one offline pass over the merged clicks of a
session, carrying a small accumulator from click to click:

1. **Keyboard veto**: a key press right at the click means the user is
   typing into a field, not pointing. The click is skipped and a zoomed
   camera zooms out.
2. **Zoom-out interruption**: a click arriving while a scheduled
   zoom-out is still playing zooms straight back in from wherever the
   camera is at that moment, never passing through the neutral view.
3. **Idle timeout**: no clicks or key presses for ``idle_timeout``
   while zoomed schedules a zoom-out.
4. **Transition**: from idle: zoom in (optionally pan across a merged
   run, or follow the cursor if the user moves right after clicking).
   From zoomed: debounce and hysteresis absorb jitter, clicks before
   ``hold_min`` are dropped, large jumps get a zoom-out/pan/zoom-in and
   small ones a single pan.
5. Update the activity clock.

After the last click any remaining zoom is closed with a final
zoom-out, so a recording never ends mid-zoom.

Keyframes emitted after the start of a new transition are speculative
(hold plateaus, follow tails, scheduled zoom-outs) and get cut there;
the camera state at the cut becomes the new transition's origin.
"""

import functools
import logging
import math
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from .boundary import constrain_center
from .config import ZoomConfig
from .easing import EasingCurve
from .follow import generate_follow_keyframes
from .geometry import CENTER, NormalizedPoint
from .models import (
    ClickEvent,
    MergedClick,
    MoveEvent,
    RecordingSession,
    ZoomKeyframe,
    DEFAULT_REFERENCE_SIZE,
)
from .patterns import FollowWindow, detect_click_then_move, detect_late_follow, merge_clicks
from .timeline import ZoomTimeline, interpolate_at
from .zoom_calculator import DynamicZoomCalculator, EdgeBoostCurve, no_boost

logger = logging.getLogger(__name__)


# ── Tuning constants ────────────────────────────────────────────────

VETO_LEAD = 0.1                 # keyboard-veto zoom-out starts this long before the click
LARGE_MOVE_FAR = 0.6            # distance above which the camera pulls fully out
LARGE_MOVE_MID = 0.45
INTERMEDIATE_SCALE_FAR = 1.0
INTERMEDIATE_SCALE_MID = 1.3
INTERMEDIATE_SCALE_NEAR = 1.5
DISTANCE_DURATION_GAIN = 0.5    # transition time grows by this fraction per unit distance


# ── Generator state ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class ZoomingIn:
    target: NormalizedPoint
    until: float


@dataclass(frozen=True)
class Zoomed:
    center: NormalizedPoint


@dataclass(frozen=True)
class Following:
    center: NormalizedPoint


@dataclass(frozen=True)
class ZoomingOut:
    origin: NormalizedPoint
    until: float


@dataclass(frozen=True)
class Transitioning:
    origin: NormalizedPoint
    target: NormalizedPoint
    until: float


GeneratorState = Union[Idle, ZoomingIn, Zoomed, Following, ZoomingOut, Transitioning]

_ZOOMED_STATES = (Zoomed, Following)
_IDLE_STATES = (Idle, ZoomingOut)


def settle(state: GeneratorState, time: float) -> GeneratorState:
    """Resolve in-flight states whose motion has finished by *time*."""
    if isinstance(state, ZoomingIn) and time >= state.until:
        return Zoomed(state.target)
    if isinstance(state, Transitioning) and time >= state.until:
        return Zoomed(state.target)
    if isinstance(state, ZoomingOut) and time >= state.until:
        return Idle()
    return state


# ── Pass bookkeeping ────────────────────────────────────────────────

@dataclass(frozen=True)
class PendingZoomOut:
    """A scheduled zoom-out that a later click may still interrupt."""
    start: float
    end: float
    origin_scale: float
    origin_center: NormalizedPoint

    def covers(self, time: float) -> bool:
        return self.start <= time < self.end


@dataclass(frozen=True)
class _PassInput:
    clicks: List[MergedClick]
    raw_clicks: List[ClickEvent]
    moves: List[MoveEvent]
    key_times: List[float]
    duration: float


@dataclass
class _Accumulator:
    """Running totals threaded through the fold over merged clicks."""
    keyframes: List[ZoomKeyframe] = field(default_factory=lambda: [ZoomKeyframe.idle(0.0)])
    state: GeneratorState = field(default_factory=Idle)
    scale: float = 1.0
    center: NormalizedPoint = CENTER
    focus: NormalizedPoint = CENTER       # point of interest the camera frames
    last_activity: float = 0.0
    last_click_time: Optional[float] = None
    hold_start: float = 0.0
    hold_end: float = 0.0
    floor: float = 0.0                    # transitions never start before this
    pending: Optional[PendingZoomOut] = None


def _key_near(key_times: Sequence[float], time: float, window: float) -> bool:
    i = bisect_right(key_times, time - window)
    return i < len(key_times) and abs(key_times[i] - time) < window


def assemble(keyframes: List[ZoomKeyframe], epsilon: float) -> List[ZoomKeyframe]:
    """Sort by time and drop keyframes within *epsilon* of their predecessor."""
    out: List[ZoomKeyframe] = []
    for kf in sorted(keyframes, key=lambda k: k.time):
        if out and kf.time - out[-1].time <= epsilon:
            continue
        out.append(kf)
    return out


class ContinuousZoomController:
    """Offline zoom keyframe generator.

    Holds only configuration; every call to :meth:`generate_keyframes`
    builds its own accumulator, so one controller can serve any number
    of sessions.
    """

    def __init__(
        self,
        config: Optional[ZoomConfig] = None,
        reference_size: Optional[Tuple[int, int]] = None,
        calculator: Optional[DynamicZoomCalculator] = None,
    ) -> None:
        self.config = config or ZoomConfig()
        self.reference_size = reference_size or DEFAULT_REFERENCE_SIZE
        cfg = self.config
        self.calculator = calculator or DynamicZoomCalculator(
            base_scale=cfg.base_zoom_scale,
            min_scale=cfg.min_zoom_scale,
            max_scale=cfg.max_zoom_scale,
            boost_curve=EdgeBoostCurve() if cfg.dynamic_zoom_enabled else no_boost,
        )

    # ── public API ──────────────────────────────────────────────────

    def generate_timeline(self, session: RecordingSession) -> ZoomTimeline:
        return ZoomTimeline(self.generate_keyframes(session), session.duration)

    def generate_keyframes(self, session: RecordingSession) -> List[ZoomKeyframe]:
        """Run the full pass over *session*; returns sorted, deduplicated keyframes."""
        cfg = self.config
        raw_clicks = session.clicks
        merged = merge_clicks(
            raw_clicks,
            reference_size=self.reference_size,
            merge_time=cfg.click_merge_time,
            merge_distance_px=cfg.click_merge_distance,
        )
        inp = _PassInput(
            clicks=merged,
            raw_clicks=raw_clicks,
            moves=session.moves,
            key_times=[k.time for k in session.key_downs],
            duration=session.duration,
        )
        logger.info(
            "Generating zoom keyframes: %d clicks (%d merged), %d moves, %d key presses, %.1fs",
            len(raw_clicks), len(merged), len(inp.moves), len(inp.key_times), session.duration,
        )

        acc = _Accumulator()
        if not merged:
            return acc.keyframes

        acc = functools.reduce(
            lambda a, item: self._process_click(a, item[0], item[1], inp),
            enumerate(merged),
            acc,
        )
        self._finish(acc, inp)

        result = assemble(acc.keyframes, cfg.dedup_epsilon)
        logger.info("Generated %d keyframes", len(result))
        return result

    # ── per-click step ──────────────────────────────────────────────

    def _process_click(
        self, acc: _Accumulator, index: int, click: MergedClick, inp: _PassInput
    ) -> _Accumulator:
        cfg = self.config
        t = click.time
        next_time = inp.clicks[index + 1].time if index + 1 < len(inp.clicks) else None
        acc.state = settle(acc.state, t)

        # 1. Keyboard veto
        if cfg.zoom_out_on_keyboard and _key_near(inp.key_times, t, cfg.keyboard_veto_window):
            if isinstance(acc.state, _ZOOMED_STATES):
                logger.debug("Click at %.2fs: keyboard activity, zooming out", t)
                self._zoom_out(acc, max(acc.floor, t - VETO_LEAD))
            else:
                logger.debug("Click at %.2fs skipped, keyboard activity", t)
            return acc

        # 3. Idle timeout (2. interruption is resolved by the idle branch)
        if isinstance(acc.state, _ZOOMED_STATES):
            last = self._last_activity(acc, inp, t)
            out_start = max(acc.hold_end, last + cfg.idle_timeout)
            if t - last > cfg.idle_timeout and out_start < t:
                logger.debug("Idle since %.2fs, zoom-out at %.2fs", last, out_start)
                self._zoom_out(acc, max(acc.floor, out_start))

        # 4. Transition
        if isinstance(acc.state, _IDLE_STATES):
            self._from_idle(acc, click, next_time, inp)
        elif not self._from_zoomed(acc, click, next_time, inp):
            return acc

        # 5. Activity clock
        acc.last_activity = max(acc.last_activity, click.last_time)
        acc.last_click_time = click.last_time
        return acc

    def _from_idle(
        self, acc: _Accumulator, click: MergedClick, next_time: Optional[float], inp: _PassInput
    ) -> None:
        cfg = self.config
        start = self._transition_start(acc, click.time)
        if acc.pending is not None and start < acc.pending.end:
            logger.debug(
                "Click at %.2fs interrupts zoom-out %.2f-%.2fs",
                click.time, acc.pending.start, acc.pending.end,
            )

        scale = self.calculator.scale_with_corner_boost(click.position)
        center = constrain_center(click.position, scale)
        end = self._transition(acc, start, cfg.zoom_in_duration, scale, center)
        acc.pending = None
        focus = click.position

        if click.internal_distance > cfg.merge_pan_threshold:
            last_center = constrain_center(click.last_position, scale)
            end = self._transition(acc, end, cfg.pan_duration, scale, last_center)
            center, focus = last_center, click.last_position

        acc.scale, acc.center, acc.focus = scale, center, focus
        acc.state = ZoomingIn(target=center, until=end)
        acc.hold_start = end
        acc.hold_end = self._hold_end(end, click, inp.key_times, None)

        window = detect_click_then_move(click, inp.moves, next_time, cfg)
        if window is not None and window.until > end:
            logger.debug("Click at %.2fs: cursor moves on, following until %.2fs", click.time, window.until)
            self._follow(acc, end, window, inp)
            return
        self._hold(acc, click, next_time, inp)

    def _from_zoomed(
        self, acc: _Accumulator, click: MergedClick, next_time: Optional[float], inp: _PassInput
    ) -> bool:
        """Handle a click while zoomed; returns False when the click is dropped."""
        cfg = self.config
        t = click.time
        distance = acc.focus.distance_to(click.position)
        hold_elapsed = t - acc.hold_start

        if distance < cfg.large_distance_threshold and self._debounced(click, inp.raw_clicks):
            logger.debug("Click at %.2fs absorbed (debounce)", t)
            return True
        if (hold_elapsed < cfg.hold_min
                and distance < cfg.large_distance_threshold * cfg.hysteresis_distance_ratio):
            logger.debug("Click at %.2fs absorbed (hysteresis, d=%.3f)", t, distance)
            return True
        if hold_elapsed < cfg.hold_min:
            logger.debug("Click at %.2fs dropped, hold only %.2fs old", t, hold_elapsed)
            return False

        in_session = (acc.last_click_time is not None
                      and t - acc.last_click_time < cfg.active_session_timeout)
        scale = self.calculator.scale_with_corner_boost(click.position)
        target = constrain_center(click.position, scale)
        start = self._transition_start(acc, t)
        origin = acc.center

        if distance > cfg.large_distance_threshold and not in_session:
            logger.debug("Click at %.2fs: large move (d=%.3f), zoom-out/pan/zoom-in", t, distance)
            end = self._large_transition(acc, start, distance, scale, target)
        else:
            duration = cfg.pan_duration * (1.0 + DISTANCE_DURATION_GAIN * min(distance, 1.0))
            end = self._transition(acc, start, duration, scale, target)

        acc.scale, acc.center, acc.focus = scale, target, click.position
        acc.state = Transitioning(origin=origin, target=target, until=end)
        acc.hold_start = end
        acc.hold_end = self._hold_end(end, click, inp.key_times, next_time)
        self._hold(acc, click, next_time, inp)
        return True

    def _large_transition(
        self, acc: _Accumulator, start: float, distance: float, scale: float, target: NormalizedPoint
    ) -> float:
        """Zoom out at the current center, pan at the intermediate scale, zoom in."""
        cfg = self.config
        if distance > LARGE_MOVE_FAR:
            mid_scale = INTERMEDIATE_SCALE_FAR
        elif distance > LARGE_MOVE_MID:
            mid_scale = INTERMEDIATE_SCALE_MID
        else:
            mid_scale = INTERMEDIATE_SCALE_NEAR
        mid_scale = min(mid_scale, acc.scale)
        stretch = 1.0 + DISTANCE_DURATION_GAIN * min(distance, 1.0)

        out_center = constrain_center(acc.center, mid_scale)
        t = self._transition(acc, start, cfg.zoom_out_duration * stretch, mid_scale, out_center)
        pan_center = constrain_center(target, mid_scale)
        t = self._transition(acc, t, cfg.pan_duration * 0.5 * stretch, mid_scale, pan_center)
        return self._transition(acc, t, cfg.zoom_in_duration * stretch, scale, target)

    # ── hold / follow ───────────────────────────────────────────────

    def _hold(
        self, acc: _Accumulator, click: MergedClick, next_time: Optional[float], inp: _PassInput
    ) -> None:
        """Static hold after a transition, unless the cursor starts moving."""
        cfg = self.config
        late = detect_late_follow(
            acc.hold_start,
            acc.hold_end,
            acc.focus,
            inp.moves,
            next_time,
            cfg,
            not_before=click.last_time + cfg.follow_detection_window,
        )
        if late is not None:
            logger.debug("Late movement at %.2fs, following until %.2fs", late.start, late.until)
            self._follow(acc, max(acc.hold_start, late.start), late, inp)
            return

        plateau = acc.hold_end if next_time is None else min(acc.hold_end, next_time)
        if plateau > acc.hold_start:
            self._emit(acc, plateau, acc.scale, acc.center, cfg.easing)

    def _follow(self, acc: _Accumulator, start: float, window: FollowWindow, inp: _PassInput) -> None:
        result = generate_follow_keyframes(
            start_center=acc.center,
            scale=acc.scale,
            start_time=start,
            end_time=window.until,
            moves=inp.moves,
            config=self.config,
            anchor=acc.focus,
        )
        self._cut(acc, start)
        for kf in result.keyframes:
            if kf.time > start:
                self._emit(acc, kf.time, kf.scale, kf.center, kf.easing)
        acc.center, acc.focus = result.center, result.cursor
        acc.state = Following(center=result.center)
        acc.hold_end = max(acc.hold_end, window.until)

    def _hold_end(
        self,
        hold_start: float,
        click: MergedClick,
        key_times: Sequence[float],
        next_time: Optional[float],
    ) -> float:
        """Hold end for *click*, extended by keyboard activity after it."""
        cfg = self.config
        hold = min(cfg.hold_base + (click.count - 1) * cfg.hold_extension_per_event, cfg.hold_max)
        end = hold_start + hold
        if next_time is not None and next_time > hold_start:
            end = min(end, next_time)

        # Chain key presses that follow each other within the protection buffer
        reach = hold_start
        last_key = None
        for k in key_times[bisect_right(key_times, click.time):]:
            if k > reach + cfg.keyboard_protection_buffer:
                break
            last_key = k
            reach = max(reach, k)
        if last_key is not None:
            end = max(end, last_key + cfg.keyboard_protection_buffer)
        return end

    # ── zoom-out ────────────────────────────────────────────────────

    def _zoom_out(self, acc: _Accumulator, start: float) -> None:
        cfg = self.config
        origin_scale, origin_center = self._cut(acc, start)
        end = self._sample(acc, start, cfg.zoom_out_duration,
                           (origin_scale, origin_center), (1.0, CENTER))
        acc.pending = PendingZoomOut(start, end, origin_scale, origin_center)
        acc.state = ZoomingOut(origin=origin_center, until=end)
        acc.scale, acc.center, acc.focus = 1.0, CENTER, CENTER
        acc.floor = max(acc.floor, start)

    def _finish(self, acc: _Accumulator, inp: _PassInput) -> None:
        """Close any zoom still open at the end of the recording."""
        cfg = self.config
        state = settle(acc.state, inp.duration)
        if isinstance(state, _IDLE_STATES):
            return
        last = self._last_activity(acc, inp, inp.duration)
        start = max(acc.hold_end, last + cfg.idle_timeout)
        start = min(start, inp.duration - cfg.zoom_out_duration)
        start = max(start, acc.floor, 0.0)
        logger.debug("Final zoom-out at %.2fs", start)
        self._zoom_out(acc, start)

    # ── keyframe emission ───────────────────────────────────────────

    def _transition_start(self, acc: _Accumulator, click_time: float) -> float:
        return max(acc.floor, 0.0, click_time - self.config.effective_pre_click_buffer)

    def _cut(self, acc: _Accumulator, at: float) -> Tuple[float, NormalizedPoint]:
        """Discard speculative keyframes from *at* on; returns the state at *at*."""
        pending = acc.pending
        if pending is not None and pending.covers(at) and self.config.spring_transitions:
            p = self.config.spring.progress_over(at - pending.start, pending.end - pending.start)
            scale = pending.origin_scale + (1.0 - pending.origin_scale) * p
            center = pending.origin_center.lerp(CENTER, p)
        else:
            scale, center = interpolate_at(acc.keyframes, at)
        acc.keyframes = [k for k in acc.keyframes if k.time < at]
        self._emit(acc, at, scale, center, EasingCurve.LINEAR)
        return scale, center

    def _transition(
        self, acc: _Accumulator, start: float, duration: float, scale: float, center: NormalizedPoint
    ) -> float:
        """Cut at *start* and move to ``(scale, center)``; returns the end time."""
        origin = self._cut(acc, start)
        acc.floor = max(acc.floor, start)
        return self._sample(acc, start, duration, origin, (scale, center))

    def _sample(
        self,
        acc: _Accumulator,
        start: float,
        duration: float,
        origin: Tuple[float, NormalizedPoint],
        target: Tuple[float, NormalizedPoint],
    ) -> float:
        cfg = self.config
        s0, c0 = origin
        s1, c1 = target
        end = start + duration
        if not cfg.spring_transitions:
            self._emit(acc, end, s1, c1, cfg.easing)
            return end

        spring = cfg.spring
        steps = max(1, int(math.ceil(duration / cfg.transition_sample_interval - 1e-9)))
        for i in range(1, steps):
            t = start + i * cfg.transition_sample_interval
            if end - t <= cfg.dedup_epsilon:
                break
            p = spring.progress_over(t - start, duration)
            self._emit(acc, t, s0 + (s1 - s0) * p, c0.lerp(c1, p), EasingCurve.LINEAR)
        self._emit(acc, end, s1, c1, EasingCurve.LINEAR)
        return end

    def _emit(
        self, acc: _Accumulator, time: float, scale: float, center: NormalizedPoint, easing: EasingCurve
    ) -> None:
        scale = max(1.0, scale)
        acc.keyframes.append(ZoomKeyframe(
            time=time, scale=scale, center=constrain_center(center, scale), easing=easing,
        ))

    # ── helpers ─────────────────────────────────────────────────────

    def _last_activity(self, acc: _Accumulator, inp: _PassInput, time: float) -> float:
        """Last click or key press before *time* not separated by an idle gap."""
        last = acc.last_activity
        keys = inp.key_times
        for k in keys[bisect_right(keys, last):bisect_right(keys, time)]:
            if k - last > self.config.idle_timeout:
                break
            last = k
        return last

    def _debounced(self, click: MergedClick, raw_clicks: List[ClickEvent]) -> bool:
        """Recent clicks confined to a small box: jitter, not a new target."""
        cfg = self.config
        window_start = click.time - cfg.debounce_time_window
        recent = [c.position for c in raw_clicks if window_start <= c.time < click.time]
        if len(recent) < 2:
            return False
        points = recent + [click.position]
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        area = (max(xs) - min(xs)) * (max(ys) - min(ys))
        return area < cfg.debounce_area_threshold
