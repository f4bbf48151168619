"""AutoZoom — generate cinematic zoom keyframes from a recorded input session."""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from camera.config import AnimationStyle, PRESETS, DEFAULT_PRESET
from camera.controller import ContinuousZoomController
from camera.diagnostics import log_report
from camera.project_file import PROJ_EXT, load_session, save_project, save_timeline
from camera.version import __version__

logging.basicConfig(
    level=logging.INFO,
    format="%(name)s | %(levelname)s | %(message)s",
)

_logger = logging.getLogger(__name__)


def _global_exception_handler(exc_type, exc_value, exc_tb):
    """Log unhandled exceptions instead of crashing silently."""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_tb)
        return
    _logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_tb))


def _parse_size(text: str) -> Tuple[int, int]:
    """Parse ``WIDTHxHEIGHT`` (e.g. ``1920x1080``)."""
    try:
        w, h = (int(part) for part in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return w, h


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autozoom",
        description="Generate zoom/pan keyframes from a recorded session.",
    )
    parser.add_argument("session", help="session JSON file or .azproj bundle")
    parser.add_argument("-o", "--output", help=f"keyframes JSON, or a {PROJ_EXT} bundle")
    parser.add_argument("--preset", choices=sorted(PRESETS), default=DEFAULT_PRESET)
    parser.add_argument("--style", choices=[s.value for s in AnimationStyle],
                        help="animation style (overrides preset durations)")
    parser.add_argument("--reference-size", type=_parse_size, default=(1920, 1080),
                        metavar="WxH", help="recording resolution for pixel thresholds")
    parser.add_argument("--diagnostics", action="store_true",
                        help="log a diagnostics report for the session and result")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point: load session, generate timeline, write output."""
    sys.excepthook = _global_exception_handler
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = PRESETS[args.preset]
    if args.style:
        config = config.with_style(AnimationStyle(args.style))

    try:
        session = load_session(args.session)
    except (OSError, ValueError) as exc:
        _logger.error("Cannot load session: %s", exc)
        return 1

    controller = ContinuousZoomController(config, reference_size=args.reference_size)
    timeline = controller.generate_timeline(session)

    if args.diagnostics:
        log_report(session, timeline.keyframes)

    if args.output:
        if args.output.lower().endswith(PROJ_EXT):
            path = save_project(args.output, session, timeline, config)
        else:
            path = save_timeline(args.output, timeline)
        _logger.info("Wrote %d keyframes to %s", len(timeline), path)

    print(f"{len(timeline)} keyframes over {timeline.duration:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
