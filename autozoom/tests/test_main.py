"""Tests for the autozoom command line."""

import argparse
import json
import logging
import sys
import zipfile

import pytest

from camera.project_file import PROJ_EXT
from main import _parse_size, build_parser, main


@pytest.fixture(autouse=True)
def _restore_excepthook(monkeypatch):
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)


@pytest.fixture
def session_file(tmp_path, sample_session) -> str:
    path = tmp_path / "session.json"
    path.write_text(sample_session.to_json(), encoding="utf-8")
    return str(path)


class TestParseSize:
    def test_valid(self) -> None:
        assert _parse_size("1920x1080") == (1920, 1080)
        assert _parse_size("3840X2160") == (3840, 2160)

    @pytest.mark.parametrize("text", ["1920", "axb", "0x100", "1920x1080x3"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_size(text)


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args(["in.json"])
        assert args.preset == "normal"
        assert args.style is None
        assert args.reference_size == (1920, 1080)
        assert not args.diagnostics

    def test_rejects_unknown_preset(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["in.json", "--preset", "wild"])


class TestMain:
    def test_prints_summary(self, session_file, capsys) -> None:
        assert main([session_file]) == 0
        out = capsys.readouterr().out
        assert "keyframes over 9.00s" in out

    def test_writes_timeline_json(self, session_file, tmp_path) -> None:
        out = tmp_path / "kf.json"
        assert main([session_file, "-o", str(out)]) == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["duration"] == 9.0
        assert data["keyframes"][0]["time"] == 0.0

    def test_writes_project_bundle(self, session_file, tmp_path) -> None:
        out = tmp_path / ("result" + PROJ_EXT)
        assert main([session_file, "-o", str(out), "--preset", "subtle", "--style", "quick"]) == 0
        with zipfile.ZipFile(out) as zf:
            config = json.loads(zf.read("config.json"))
        assert config["base_zoom_scale"] == 1.5
        assert config["animation_style"] == "quick"

    def test_diagnostics_flag(self, session_file, caplog) -> None:
        caplog.set_level(logging.INFO)
        assert main([session_file, "--diagnostics"]) == 0
        assert "Session: 9.00s" in caplog.text

    def test_missing_session_fails(self, tmp_path) -> None:
        assert main([str(tmp_path / "missing.json")]) == 1

    def test_invalid_session_fails(self, tmp_path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text("[]", encoding="utf-8")
        assert main([str(bad)]) == 1

    def test_malformed_bundle_fails(self, tmp_path) -> None:
        bad = tmp_path / ("broken" + PROJ_EXT)
        with zipfile.ZipFile(bad, "w") as zf:
            zf.writestr("session.json", json.dumps(
                {"duration": 1.0, "events": [{"type": "move", "time": 0.1}]}
            ))
        assert main([str(bad)]) == 1
