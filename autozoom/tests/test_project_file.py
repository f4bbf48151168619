"""Tests for camera.project_file — session loading and .azproj bundles."""

import json
import zipfile

import pytest

from camera.config import ZoomConfig, PRESETS
from camera.project_file import (
    load_project,
    load_session,
    save_project,
    save_timeline,
    PROJ_EXT,
    _CONFIG_NAME,
    _SESSION_NAME,
    _TIMELINE_NAME,
)
from camera.timeline import ZoomTimeline


# ── Helpers ─────────────────────────────────────────────────────────

@pytest.fixture
def session_file(tmp_path, sample_session) -> str:
    path = tmp_path / "session.json"
    path.write_text(sample_session.to_json(), encoding="utf-8")
    return str(path)


@pytest.fixture
def timeline(zoom_in_out) -> ZoomTimeline:
    return ZoomTimeline(zoom_in_out, duration=9.0)


# ── load_session ────────────────────────────────────────────────────


class TestLoadSession:
    def test_plain_json(self, session_file, sample_session) -> None:
        session = load_session(session_file)
        assert session.id == sample_session.id
        assert session.events == sample_session.events

    def test_from_bundle(self, tmp_path, sample_session) -> None:
        out = save_project(str(tmp_path / "bundle"), sample_session)
        assert load_session(out).id == sample_session.id

    def test_invalid_json_raises(self, tmp_path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Not a valid session"):
            load_session(str(bad))

    def test_missing_fields_raise(self, tmp_path) -> None:
        bad = tmp_path / "partial.json"
        bad.write_text(json.dumps({"events": []}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_session(str(bad))

    def test_event_missing_coordinate_raises(self, tmp_path) -> None:
        bad = tmp_path / "partial-event.json"
        bad.write_text(
            json.dumps({"duration": 1.0, "events": [{"type": "move", "time": 0.1}]}),
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="Malformed session"):
            load_session(str(bad))

    def test_bundle_with_malformed_event_raises(self, tmp_path) -> None:
        bad = str(tmp_path / ("broken" + PROJ_EXT))
        with zipfile.ZipFile(bad, "w") as zf:
            zf.writestr(_SESSION_NAME, json.dumps(
                {"duration": 1.0, "events": [{"type": "move", "time": 0.1}]}
            ))
        with pytest.raises(ValueError, match="Malformed session"):
            load_session(bad)

    def test_missing_file_raises_oserror(self, tmp_path) -> None:
        with pytest.raises(OSError):
            load_session(str(tmp_path / "nope.json"))


# ── save_timeline ───────────────────────────────────────────────────


class TestSaveTimeline:
    def test_writes_json(self, tmp_path, timeline) -> None:
        out = save_timeline(str(tmp_path / "kf.json"), timeline)
        with open(out, encoding="utf-8") as f:
            data = json.load(f)
        assert data["duration"] == 9.0
        assert len(data["keyframes"]) == len(timeline)
        assert set(data["keyframes"][0]) == {"time", "scale", "x", "y", "easing"}

    def test_roundtrip(self, tmp_path, timeline) -> None:
        out = save_timeline(str(tmp_path / "kf.json"), timeline)
        with open(out, encoding="utf-8") as f:
            restored = ZoomTimeline.from_dict(json.load(f))
        assert restored.keyframes == timeline.keyframes


# ── save_project ────────────────────────────────────────────────────


class TestSaveProject:
    def test_creates_zip(self, tmp_path, sample_session) -> None:
        out = save_project(str(tmp_path / "test"), sample_session)
        assert out.endswith(PROJ_EXT)
        assert zipfile.is_zipfile(out)

    def test_does_not_double_extension(self, tmp_path, sample_session) -> None:
        out = save_project(str(tmp_path / ("already" + PROJ_EXT)), sample_session)
        assert not out.endswith(PROJ_EXT + PROJ_EXT)

    def test_members(self, tmp_path, sample_session, timeline) -> None:
        out = save_project(str(tmp_path / "test"), sample_session, timeline, ZoomConfig())
        with zipfile.ZipFile(out, "r") as zf:
            assert set(zf.namelist()) == {_SESSION_NAME, _TIMELINE_NAME, _CONFIG_NAME}

    def test_session_only(self, tmp_path, sample_session) -> None:
        out = save_project(str(tmp_path / "test"), sample_session)
        with zipfile.ZipFile(out, "r") as zf:
            assert zf.namelist() == [_SESSION_NAME]


# ── load_project ────────────────────────────────────────────────────


class TestLoadProject:
    def test_roundtrip(self, tmp_path, sample_session, timeline) -> None:
        config = PRESETS["dramatic"]
        out = save_project(str(tmp_path / "rt"), sample_session, timeline, config)
        result = load_project(out)
        assert result["session"].id == sample_session.id
        assert result["session"].duration == sample_session.duration
        assert result["timeline"].keyframes == timeline.keyframes
        assert result["config"] == config

    def test_optional_members_absent(self, tmp_path, sample_session) -> None:
        result = load_project(save_project(str(tmp_path / "rt"), sample_session))
        assert result["timeline"] is None
        assert result["config"] is None

    def test_invalid_config_ignored(self, tmp_path, sample_session, caplog) -> None:
        out = str(tmp_path / ("badcfg" + PROJ_EXT))
        with zipfile.ZipFile(out, "w") as zf:
            zf.writestr(_SESSION_NAME, sample_session.to_json())
            zf.writestr(_CONFIG_NAME, json.dumps({"idle_timeout": 99}))
        result = load_project(out)
        assert result["config"] is None
        assert "Ignoring stored config" in caplog.text

    def test_invalid_file_raises(self, tmp_path) -> None:
        bad = tmp_path / ("bad" + PROJ_EXT)
        bad.write_text("not a zip")
        with pytest.raises(ValueError, match="Not a valid"):
            load_project(str(bad))

    def test_missing_session_raises(self, tmp_path) -> None:
        bad = str(tmp_path / ("nosession" + PROJ_EXT))
        with zipfile.ZipFile(bad, "w") as zf:
            zf.writestr("random.txt", "hello")
        with pytest.raises(ValueError, match="missing"):
            load_project(bad)
