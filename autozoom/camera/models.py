"""Core data models for AutoZoom.

Defines the recorded input events, the session container, merged click
groups and the zoom keyframes produced by the generator.  Positions are
normalized (see :mod:`camera.geometry`) and times are seconds since
recording start.  All models support JSON serialization via
``to_dict()`` / ``from_dict()`` (or ``to_json()`` / ``from_json()`` for
top-level sessions).
"""

from bisect import bisect_left
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union
import uuid
import json

from .easing import EasingCurve
from .geometry import CENTER, NormalizedPoint


class ClickKind(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    DOUBLE = "double"


# ── Events ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MoveEvent:
    """A cursor position sample."""
    position: NormalizedPoint
    time: float  # s since recording start

    def to_dict(self) -> dict:
        return {"type": "move", "time": self.time, **self.position.to_dict()}


@dataclass(frozen=True)
class ClickEvent:
    """A mouse button press at a position."""
    position: NormalizedPoint
    time: float
    kind: ClickKind = ClickKind.LEFT

    def to_dict(self) -> dict:
        return {
            "type": "click",
            "time": self.time,
            "kind": self.kind.value,
            **self.position.to_dict(),
        }


@dataclass(frozen=True)
class KeyDownEvent:
    """A key press (no key identity stored for privacy)."""
    time: float

    def to_dict(self) -> dict:
        return {"type": "keyDown", "time": self.time}


@dataclass(frozen=True)
class KeyUpEvent:
    time: float

    def to_dict(self) -> dict:
        return {"type": "keyUp", "time": self.time}


Event = Union[MoveEvent, ClickEvent, KeyDownEvent, KeyUpEvent]


def event_from_dict(d: dict) -> Event:
    """Reconstruct an event from its tagged dict form."""
    tag = d.get("type")
    if tag == "move":
        return MoveEvent(position=NormalizedPoint.from_dict(d), time=float(d["time"]))
    if tag == "click":
        return ClickEvent(
            position=NormalizedPoint.from_dict(d),
            time=float(d["time"]),
            kind=ClickKind(d.get("kind", ClickKind.LEFT.value)),
        )
    if tag == "keyDown":
        return KeyDownEvent(time=float(d["time"]))
    if tag == "keyUp":
        return KeyUpEvent(time=float(d["time"]))
    raise ValueError(f"Unknown event type: {tag!r}")


# ── Session ─────────────────────────────────────────────────────────

@dataclass
class RecordingSession:
    """Everything captured in one recording that the generator needs.

    Events are kept sorted by time; the sort is stable so events sharing
    a timestamp keep their recorded order.
    """

    events: List[Event]
    duration: float  # s
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        self.events = sorted(self.events, key=lambda e: e.time)

    @property
    def moves(self) -> List[MoveEvent]:
        return [e for e in self.events if isinstance(e, MoveEvent)]

    @property
    def clicks(self) -> List[ClickEvent]:
        return [e for e in self.events if isinstance(e, ClickEvent)]

    @property
    def key_downs(self) -> List[KeyDownEvent]:
        return [e for e in self.events if isinstance(e, KeyDownEvent)]

    def position_at(self, time: float) -> Optional[NormalizedPoint]:
        """Cursor position at *time*, linearly interpolated between moves.

        Clamps to the first/last sample outside the recorded range and
        returns ``None`` when the session has no move events.
        """
        moves = self.moves
        if not moves:
            return None
        times = [m.time for m in moves]
        i = bisect_left(times, time)
        if i == 0:
            return moves[0].position
        if i >= len(moves):
            return moves[-1].position
        a, b = moves[i - 1], moves[i]
        span = b.time - a.time
        if span <= 0:
            return b.position
        return a.position.lerp(b.position, (time - a.time) / span)

    def to_json(self) -> str:
        """Serialize the entire session to a JSON string."""
        data = {
            "id": self.id,
            "duration": self.duration,
            "events": [e.to_dict() for e in self.events],
        }
        return json.dumps(data, indent=2)

    @staticmethod
    def from_json(s: str) -> "RecordingSession":
        """Reconstruct a session from its JSON representation."""
        d = json.loads(s)
        return RecordingSession.from_dict(d)

    @staticmethod
    def from_dict(d: dict) -> "RecordingSession":
        if "events" not in d or "duration" not in d:
            raise ValueError("Session data needs 'events' and 'duration'")
        kwargs = {}
        if "id" in d:
            kwargs["id"] = d["id"]
        try:
            events = [event_from_dict(e) for e in d["events"]]
            duration = float(d["duration"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed session data: {exc!r}") from exc
        return RecordingSession(events=events, duration=duration, **kwargs)


# ── Merged clicks ───────────────────────────────────────────────────

@dataclass(frozen=True)
class MergedClick:
    """A run of clicks close in time and space, treated as one intent.

    ``position`` / ``time`` belong to the first click of the run,
    ``last_position`` / ``last_time`` to the final one.
    """
    position: NormalizedPoint
    time: float
    last_position: NormalizedPoint
    last_time: float
    count: int = 1

    @property
    def internal_distance(self) -> float:
        """Spread between the first and last click of the run."""
        return self.position.distance_to(self.last_position)

    @staticmethod
    def single(click: ClickEvent) -> "MergedClick":
        return MergedClick(
            position=click.position,
            time=click.time,
            last_position=click.position,
            last_time=click.time,
            count=1,
        )


# ── Keyframes ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class ZoomKeyframe:
    """The camera state at one instant.

    ``easing`` shapes the interpolation *arriving* at this keyframe from
    the previous one.
    """

    time: float  # s
    scale: float  # >= 1.0
    center: NormalizedPoint
    easing: EasingCurve = EasingCurve.EASE_IN_OUT

    @staticmethod
    def idle(time: float, easing: EasingCurve = EasingCurve.EASE_IN_OUT) -> "ZoomKeyframe":
        """Un-zoomed keyframe (scale 1, screen center)."""
        return ZoomKeyframe(time=time, scale=1.0, center=CENTER, easing=easing)

    def interpolate(self, other: "ZoomKeyframe", t: float) -> Tuple[float, NormalizedPoint]:
        """Blend from this keyframe toward *other* at progress *t*.

        Uses ``other.easing``; *t* is clamped by the easing curve.
        """
        eased = other.easing.apply(t)
        scale = self.scale + (other.scale - self.scale) * eased
        return scale, self.center.lerp(other.center, eased)

    def to_dict(self) -> dict:
        """Serialize to a plain dict for JSON storage."""
        return {
            "time": self.time,
            "scale": self.scale,
            "x": self.center.x,
            "y": self.center.y,
            "easing": self.easing.value,
        }

    @staticmethod
    def from_dict(d: dict) -> "ZoomKeyframe":
        """Reconstruct from a dict, ignoring unknown keys for forward compat."""
        return ZoomKeyframe(
            time=float(d["time"]),
            scale=float(d["scale"]),
            center=NormalizedPoint(float(d.get("x", 0.5)), float(d.get("y", 0.5))),
            easing=EasingCurve(d.get("easing", EasingCurve.EASE_IN_OUT.value)),
        )


DEFAULT_REFERENCE_SIZE = (1920, 1080)  # px, for converting pixel thresholds
DEDUP_EPSILON = 0.01  # s, minimum keyframe spacing
