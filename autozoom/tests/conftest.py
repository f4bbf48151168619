"""Shared pytest fixtures for AutoZoom tests."""

import pytest

from camera.config import ZoomConfig
from camera.geometry import NormalizedPoint
from camera.models import (
    ClickEvent,
    KeyDownEvent,
    KeyUpEvent,
    MoveEvent,
    RecordingSession,
    ZoomKeyframe,
)


# ── Config ──────────────────────────────────────────────────────────

@pytest.fixture
def config() -> ZoomConfig:
    """Default generator settings."""
    return ZoomConfig()


@pytest.fixture
def reference_size() -> tuple[int, int]:
    """A 1920×1080 recording."""
    return (1920, 1080)


# ── Event helpers ──────────────────────────────────────────────────

@pytest.fixture
def straight_moves() -> list[MoveEvent]:
    """Cursor sliding right along y=0.5, 60 Hz for 1s starting at 1s."""
    return [
        MoveEvent(position=NormalizedPoint(0.3 + i * 0.004, 0.5), time=1.0 + i / 60.0)
        for i in range(60)
    ]


@pytest.fixture
def typing_burst() -> list[KeyDownEvent]:
    """Key presses every 0.3s from 2.0s to 4.7s."""
    return [KeyDownEvent(time=2.0 + i * 0.3) for i in range(10)]


@pytest.fixture
def click_cluster() -> list[ClickEvent]:
    """3 clicks close together around (0.5, 0.5) at 1s."""
    return [
        ClickEvent(position=NormalizedPoint(0.50, 0.50), time=1.0),
        ClickEvent(position=NormalizedPoint(0.51, 0.50), time=1.1),
        ClickEvent(position=NormalizedPoint(0.51, 0.51), time=1.2),
    ]


# ── Zoom keyframes ─────────────────────────────────────────────────

@pytest.fixture
def zoom_in_out() -> list[ZoomKeyframe]:
    """Idle → zoom to (0.3, 0.4) at 1s → hold → back to idle at 4s."""
    return [
        ZoomKeyframe.idle(0.0),
        ZoomKeyframe(time=0.7, scale=1.0, center=NormalizedPoint(0.5, 0.5)),
        ZoomKeyframe(time=1.0, scale=2.0, center=NormalizedPoint(0.3, 0.4)),
        ZoomKeyframe(time=3.6, scale=2.0, center=NormalizedPoint(0.3, 0.4)),
        ZoomKeyframe(time=4.0, scale=1.0, center=NormalizedPoint(0.5, 0.5)),
    ]


# ── Recording session ──────────────────────────────────────────────

@pytest.fixture
def sample_session(straight_moves, typing_burst) -> RecordingSession:
    """Small mixed session for serialization and pipeline tests."""
    events = list(straight_moves) + list(typing_burst) + [
        KeyUpEvent(time=2.05),
        ClickEvent(position=NormalizedPoint(0.3, 0.5), time=0.9),
        ClickEvent(position=NormalizedPoint(0.8, 0.2), time=5.0),
    ]
    return RecordingSession(id="test-session-001", events=events, duration=9.0)
