"""Project file management — session input and timeline output.

Sessions arrive as plain JSON (``RecordingSession.to_json`` format).
Generated work can be saved as an .azproj bundle, a ZIP archive
containing:
  - session.json   : the recorded events the timeline was built from
  - timeline.json  : generated keyframes + duration
  - config.json    : generator settings used (optional)

so a timeline can be reviewed or regenerated later with other settings.
"""

import json
import logging
import os
import zipfile
from typing import Optional

from .config import ZoomConfig
from .models import RecordingSession
from .timeline import ZoomTimeline

logger = logging.getLogger(__name__)

PROJ_EXT = ".azproj"
_SESSION_NAME = "session.json"
_TIMELINE_NAME = "timeline.json"
_CONFIG_NAME = "config.json"


def load_session(input_path: str) -> RecordingSession:
    """Load a session from a JSON file or from an .azproj bundle."""
    if zipfile.is_zipfile(input_path):
        return load_project(input_path)["session"]
    try:
        with open(input_path, "r", encoding="utf-8") as f:
            return RecordingSession.from_json(f.read())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Not a valid session file: {input_path} ({exc})") from exc


def save_timeline(output_path: str, timeline: ZoomTimeline) -> str:
    """Write *timeline* as standalone JSON.  Returns the output path."""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(json.dumps(timeline.to_dict(), indent=2))
    return output_path


def save_project(
    output_path: str,
    session: RecordingSession,
    timeline: Optional[ZoomTimeline] = None,
    config: Optional[ZoomConfig] = None,
) -> str:
    """Bundle session + timeline (+ config) into an .azproj ZIP file.

    Returns the final output path.
    """
    if not output_path.lower().endswith(PROJ_EXT):
        output_path += PROJ_EXT

    with zipfile.ZipFile(output_path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(_SESSION_NAME, session.to_json())
        if timeline is not None:
            zf.writestr(_TIMELINE_NAME, json.dumps(timeline.to_dict(), indent=2))
        if config is not None:
            zf.writestr(_CONFIG_NAME, json.dumps(config.to_dict(), indent=2))

    logger.info("Saved project %s", os.path.basename(output_path))
    return output_path


def load_project(input_path: str) -> dict:
    """Read an .azproj ZIP and return its contents.

    Returns dict with keys:
      - session: RecordingSession
      - timeline: ZoomTimeline | None
      - config: ZoomConfig | None, None also when the stored settings
        no longer validate
    """
    if not zipfile.is_zipfile(input_path):
        raise ValueError(f"Not a valid project file: {input_path}")

    with zipfile.ZipFile(input_path, "r") as zf:
        names = set(zf.namelist())
        if _SESSION_NAME not in names:
            raise ValueError(f"Project file missing {_SESSION_NAME}")
        session = RecordingSession.from_json(zf.read(_SESSION_NAME).decode("utf-8"))

        timeline = None
        if _TIMELINE_NAME in names:
            timeline = ZoomTimeline.from_dict(json.loads(zf.read(_TIMELINE_NAME)))

        config = None
        if _CONFIG_NAME in names:
            try:
                config = ZoomConfig.from_dict(json.loads(zf.read(_CONFIG_NAME)))
            except ValueError as exc:
                logger.warning("Ignoring stored config: %s", exc)

    return {"session": session, "timeline": timeline, "config": config}
