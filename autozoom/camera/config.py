"""Generator configuration, animation styles and named presets.

:class:`ZoomConfig` gathers every tunable of the keyframe generator.
Values are validated once at construction; a bad value raises
``ValueError`` naming the field, so nothing invalid can reach the
generation pass.  Defaults are tuning choices, not contracts.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Dict

from .easing import EasingCurve
from .models import DEDUP_EPSILON
from .spring import SpringAnimation


class FollowMode(str, Enum):
    DIRECT = "direct"  # one keyframe per smoothed cursor sample
    SPRING = "spring"  # camera chases the cursor on a spring


class AnimationStyle(str, Enum):
    """Overall transition feel: spring parameters plus matching durations."""
    SLOW = "slow"
    MELLOW = "mellow"
    QUICK = "quick"
    RAPID = "rapid"

    @property
    def spring(self) -> SpringAnimation:
        return _STYLE_SPRINGS[self]

    @property
    def zoom_in_duration(self) -> float:
        return _STYLE_DURATIONS[self][0]

    @property
    def zoom_out_duration(self) -> float:
        return _STYLE_DURATIONS[self][1]

    @property
    def pan_duration(self) -> float:
        return _STYLE_DURATIONS[self][2]

    @staticmethod
    def from_speed(speed: float) -> "AnimationStyle":
        """Map a 0-100 speed slider value onto a style."""
        if speed < 25:
            return AnimationStyle.SLOW
        if speed < 50:
            return AnimationStyle.MELLOW
        if speed < 75:
            return AnimationStyle.QUICK
        return AnimationStyle.RAPID


_STYLE_SPRINGS = {
    AnimationStyle.SLOW: SpringAnimation(tension=80, friction=20, mass=1.5),
    AnimationStyle.MELLOW: SpringAnimation(tension=150, friction=22, mass=1.0),
    AnimationStyle.QUICK: SpringAnimation(tension=220, friction=24, mass=0.8),
    AnimationStyle.RAPID: SpringAnimation(tension=300, friction=28, mass=0.6),
}

# (zoom in, zoom out, pan) in seconds
_STYLE_DURATIONS = {
    AnimationStyle.SLOW: (0.5, 0.6, 0.45),
    AnimationStyle.MELLOW: (0.35, 0.45, 0.3),
    AnimationStyle.QUICK: (0.2, 0.28, 0.2),
    AnimationStyle.RAPID: (0.12, 0.18, 0.12),
}


def _check_range(name: str, value: float, lo: float, hi: float = float("inf")) -> None:
    if not lo <= value <= hi:
        if hi == float("inf"):
            raise ValueError(f"{name} must be >= {lo}, got {value}")
        raise ValueError(f"{name} must be in [{lo}, {hi}], got {value}")


def _check_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ValueError(f"{name} must be > 0, got {value}")


@dataclass(frozen=True)
class ZoomConfig:
    """Every tunable of the keyframe generator.  Times are seconds."""

    # Zoom level
    base_zoom_scale: float = 2.0
    min_zoom_scale: float = 1.0
    max_zoom_scale: float = 3.0
    dynamic_zoom_enabled: bool = True       # edge/corner boost

    # Transition timing
    zoom_in_duration: float = 0.3
    zoom_out_duration: float = 0.4
    pan_duration: float = 0.3
    easing: EasingCurve = EasingCurve.EASE_IN_OUT
    animation_style: AnimationStyle = AnimationStyle.MELLOW
    spring_transitions: bool = True         # False: one eased keyframe per transition
    transition_sample_interval: float = 1.0 / 30.0
    pre_click_buffer: float = 0.15          # start moving this early so the click is on screen
    pre_click_buffer_enabled: bool = True

    # Hold phase
    hold_min: float = 0.35                  # no re-targeting before this
    hold_base: float = 0.6
    hold_max: float = 1.5
    hold_extension_per_event: float = 0.4   # per extra merged click

    # Keyboard
    keyboard_protection_buffer: float = 5.0  # keep zoom this long after a key press
    keyboard_veto_window: float = 0.5        # key press this close to a click = typing, not pointing
    zoom_out_on_keyboard: bool = True

    # Idle / transitions
    idle_timeout: float = 3.0
    large_distance_threshold: float = 0.3
    hysteresis_distance_ratio: float = 0.5   # fraction of the large-distance threshold
    active_session_timeout: float = 0.8      # clicks closer than this = rapid-click session

    # Debounce
    debounce_area_threshold: float = 0.15    # bounding-box area ratio
    debounce_time_window: float = 0.5

    # Click merging
    click_merge_time: float = 0.35
    click_merge_distance: float = 120.0      # px at reference resolution
    merge_pan_threshold: float = 0.05        # pan first->last when a merged run spreads further

    # Follow detection
    follow_detection_window: float = 0.3
    follow_min_displacement: float = 0.02
    follow_jitter_threshold: float = 0.005
    follow_gap_tolerance: float = 0.5
    follow_tail: float = 0.3
    follow_time_limit: float = 5.0
    follow_next_click_gap: float = 0.05

    # Follow keyframe generation
    follow_mode: FollowMode = FollowMode.SPRING
    follow_sample_rate: float = 60.0         # Hz
    follow_keyframe_interval: float = 1.0 / 30.0
    one_euro_min_cutoff: float = 1.0
    one_euro_beta: float = 0.5
    one_euro_d_cutoff: float = 1.0
    rdp_epsilon: float = 0.002
    follow_max_keyframe_gap: float = 0.1

    # Output
    dedup_epsilon: float = DEDUP_EPSILON

    def __post_init__(self) -> None:
        _check_range("base_zoom_scale", self.base_zoom_scale, 1.0, 6.0)
        _check_range("min_zoom_scale", self.min_zoom_scale, 1.0)
        if self.max_zoom_scale < self.min_zoom_scale:
            raise ValueError(
                f"max_zoom_scale ({self.max_zoom_scale}) must be >= "
                f"min_zoom_scale ({self.min_zoom_scale})"
            )
        for name in ("zoom_in_duration", "zoom_out_duration", "pan_duration"):
            _check_range(name, getattr(self, name), 0.05, 2.0)
        _check_range("hold_min", self.hold_min, 0.0)
        if not self.hold_min <= self.hold_base <= self.hold_max:
            raise ValueError(
                "hold durations must satisfy hold_min <= hold_base <= hold_max, "
                f"got {self.hold_min} / {self.hold_base} / {self.hold_max}"
            )
        _check_range("idle_timeout", self.idle_timeout, 0.5, 10.0)
        _check_range("large_distance_threshold", self.large_distance_threshold, 0.1, 0.5)
        _check_range("hysteresis_distance_ratio", self.hysteresis_distance_ratio, 0.0, 1.0)
        _check_range("debounce_area_threshold", self.debounce_area_threshold, 0.0, 1.0)
        for name in (
            "pre_click_buffer",
            "hold_extension_per_event",
            "keyboard_protection_buffer",
            "keyboard_veto_window",
            "active_session_timeout",
            "debounce_time_window",
            "click_merge_time",
            "click_merge_distance",
            "merge_pan_threshold",
            "follow_min_displacement",
            "follow_jitter_threshold",
            "follow_tail",
            "follow_next_click_gap",
            "one_euro_min_cutoff",
            "one_euro_beta",
            "one_euro_d_cutoff",
        ):
            _check_range(name, getattr(self, name), 0.0)
        for name in (
            "transition_sample_interval",
            "follow_detection_window",
            "follow_gap_tolerance",
            "follow_time_limit",
            "follow_sample_rate",
            "follow_keyframe_interval",
            "rdp_epsilon",
            "follow_max_keyframe_gap",
            "dedup_epsilon",
        ):
            _check_positive(name, getattr(self, name))
        # Enum fields may arrive as plain strings from JSON
        object.__setattr__(self, "easing", EasingCurve(self.easing))
        object.__setattr__(self, "animation_style", AnimationStyle(self.animation_style))
        object.__setattr__(self, "follow_mode", FollowMode(self.follow_mode))

    @property
    def spring(self) -> SpringAnimation:
        return self.animation_style.spring

    @property
    def effective_pre_click_buffer(self) -> float:
        return self.pre_click_buffer if self.pre_click_buffer_enabled else 0.0

    def with_style(self, style: AnimationStyle) -> "ZoomConfig":
        """Copy with the style's spring and transition durations applied."""
        return dataclasses.replace(
            self,
            animation_style=style,
            zoom_in_duration=style.zoom_in_duration,
            zoom_out_duration=style.zoom_out_duration,
            pan_duration=style.pan_duration,
        )

    def to_dict(self) -> dict:
        d = dataclasses.asdict(self)
        for name in ("easing", "animation_style", "follow_mode"):
            d[name] = d[name].value
        return d

    @staticmethod
    def from_dict(d: dict) -> "ZoomConfig":
        """Build from a dict, ignoring unknown keys for forward compat."""
        known = {f.name for f in dataclasses.fields(ZoomConfig)}
        return ZoomConfig(**{k: v for k, v in d.items() if k in known})


# ── Built-in presets ────────────────────────────────────────────────

PRESETS: Dict[str, ZoomConfig] = {
    "subtle": ZoomConfig(
        base_zoom_scale=1.5, max_zoom_scale=2.0,
        zoom_in_duration=0.4, zoom_out_duration=0.5, pan_duration=0.4,
        hold_base=0.8,
    ),
    "normal": ZoomConfig(),
    "dramatic": ZoomConfig(
        base_zoom_scale=2.5, max_zoom_scale=3.5,
        zoom_in_duration=0.25, zoom_out_duration=0.35, pan_duration=0.25,
        easing=EasingCurve.EASE_OUT,
    ),
}

DEFAULT_PRESET = "normal"
