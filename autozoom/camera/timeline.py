"""Zoom timeline — an immutable keyframe sequence with interpolated lookup.

The timeline holds keyframes sorted by time and computes the camera
state ``(scale, center)`` at any instant.  Between two keyframes the
state moves linearly in time, shaped by the *later* keyframe's easing;
outside the keyframe range it clamps to the nearest end.  This is the
only surface a renderer needs.
"""

from bisect import bisect_right
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from .geometry import CENTER, NormalizedPoint
from .models import RecordingSession, ZoomKeyframe

ACTIVE_SCALE = 1.01   # above this the camera counts as zoomed
_PHASE_EPSILON = 1e-3


class ZoomPhase(str, Enum):
    IDLE = "idle"
    ZOOM_IN = "zoom_in"
    HOLD = "hold"
    ZOOM_OUT = "zoom_out"


@dataclass(frozen=True)
class ZoomState:
    """Camera state at one instant."""
    scale: float
    center: NormalizedPoint
    phase: ZoomPhase = ZoomPhase.IDLE

    @property
    def is_active(self) -> bool:
        return self.scale > ACTIVE_SCALE

    @staticmethod
    def idle() -> "ZoomState":
        return ZoomState(scale=1.0, center=CENTER, phase=ZoomPhase.IDLE)


def interpolate_at(keyframes: Sequence[ZoomKeyframe], time: float) -> Tuple[float, NormalizedPoint]:
    """Returns (scale, center) at *time* for a time-sorted keyframe list."""
    if not keyframes:
        return 1.0, CENTER
    first, last = keyframes[0], keyframes[-1]
    if time <= first.time:
        return first.scale, first.center
    if time >= last.time:
        return last.scale, last.center

    i = bisect_right([k.time for k in keyframes], time)
    a, b = keyframes[i - 1], keyframes[i]
    span = b.time - a.time
    if span <= 0:
        return a.scale, a.center
    return a.interpolate(b, (time - a.time) / span)


def _phase_between(a: ZoomKeyframe, b: ZoomKeyframe, scale: float) -> ZoomPhase:
    if b.scale > a.scale + _PHASE_EPSILON:
        return ZoomPhase.ZOOM_IN
    if b.scale < a.scale - _PHASE_EPSILON:
        return ZoomPhase.ZOOM_OUT
    return ZoomPhase.HOLD if scale > ACTIVE_SCALE else ZoomPhase.IDLE


class ZoomTimeline:
    """Immutable, time-sorted keyframes plus the recording duration."""

    def __init__(self, keyframes: Sequence[ZoomKeyframe], duration: float) -> None:
        self._keyframes: Tuple[ZoomKeyframe, ...] = tuple(sorted(keyframes, key=lambda k: k.time))
        self._times: List[float] = [k.time for k in self._keyframes]
        self.duration = duration

    @property
    def keyframes(self) -> Tuple[ZoomKeyframe, ...]:
        return self._keyframes

    def __len__(self) -> int:
        return len(self._keyframes)

    def __iter__(self) -> Iterator[ZoomKeyframe]:
        return iter(self._keyframes)

    @property
    def is_empty(self) -> bool:
        return not self._keyframes

    def state_at(self, time: float) -> ZoomState:
        """Interpolated camera state at *time* (seconds)."""
        if not self._keyframes:
            return ZoomState.idle()

        scale, center = interpolate_at(self._keyframes, time)
        i = bisect_right(self._times, time)
        if 0 < i < len(self._keyframes):
            phase = _phase_between(self._keyframes[i - 1], self._keyframes[i], scale)
        else:
            phase = ZoomPhase.HOLD if scale > ACTIVE_SCALE else ZoomPhase.IDLE
        return ZoomState(scale=scale, center=center, phase=phase)

    def keyframes_between(self, start: float, end: float) -> List[ZoomKeyframe]:
        """Keyframes with ``start <= time <= end``."""
        return [k for k in self._keyframes if start <= k.time <= end]

    def sample(self, fps: float, duration: Optional[float] = None) -> Iterator[Tuple[float, ZoomState]]:
        """Yield ``(time, state)`` once per frame from 0 to *duration*."""
        total = self.duration if duration is None else duration
        frames = int(total * fps) + 1
        for n in range(frames):
            t = n / fps
            yield t, self.state_at(t)

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "keyframes": [k.to_dict() for k in self._keyframes],
        }

    @staticmethod
    def from_dict(d: dict) -> "ZoomTimeline":
        return ZoomTimeline(
            keyframes=[ZoomKeyframe.from_dict(k) for k in d["keyframes"]],
            duration=float(d["duration"]),
        )

    @staticmethod
    def from_session(session: RecordingSession, config=None, reference_size=None) -> "ZoomTimeline":
        """Run the generator over *session* and wrap the result."""
        from .controller import ContinuousZoomController

        controller = ContinuousZoomController(config, reference_size=reference_size)
        return controller.generate_timeline(session)
