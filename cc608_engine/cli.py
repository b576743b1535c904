"""Command-line interface for the CEA-608 caption engine.

WHY: Caption operators and build scripts need the engine's timecode math,
per-frame preview data and QC reports without running the API server.

HOW: argparse with three subcommands:
  timecode  convert seconds to a label, or a label to seconds
  render    print the render plan of a caption document at one time
  export    run formatters over a caption document and save the outputs
Results go to stdout (so they can be piped); status messages go to stderr.
Caption documents are JSON files read through the legacy import adapter.

RULES:
- Errors print "Error: ..." to stderr and exit with status 1
- A value that parses as a number is seconds; anything else is a label
- Output naming: {stem}{suffix}, numeric suffix for conflicts
  (captions-placement-audit-2.json)
- --formats: comma-separated formatter keys (default: all registered)
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
import warnings
from pathlib import Path
from typing import List, Optional

import jsonschema

from cc608_engine import config
from cc608_engine.adapters.legacy_import import load_document
from cc608_engine.core.models import CaptionEvent, Document
from cc608_engine.core.render import evaluate
from cc608_engine.core.timecode import media_to_label, seconds_to_generic, try_parse_label
from cc608_engine.errors import ParseError
from cc608_engine.formatters import FORMATTERS
from cc608_engine.formatters.base import FormatterOutput

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr, flush=True)
    sys.exit(1)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. captions-placement-audit.json)
    - Conflict: insert a counter before the extension, starting at 2
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name, suffix_ext = suffix[:dot_idx], suffix[dot_idx:]
    else:
        suffix_name, suffix_ext = suffix, ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _load_document_file(path_arg: str) -> tuple[Path, Document, List[CaptionEvent]]:
    path = Path(path_arg).resolve()
    if not path.is_file():
        _fail("File not found: {}".format(path))
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        _fail("{} is not valid JSON: {}".format(path.name, exc))
    try:
        document, events = load_document(payload)
    except jsonschema.ValidationError as exc:
        _fail("Invalid caption document {}: {}".format(path.name, exc.message))
    except ParseError as exc:
        _fail(str(exc))
    return path, document, events


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_timecode(args: argparse.Namespace) -> None:
    document = Document(fps=args.fps, drop_frame=args.drop_frame, start_timecode_label=args.start_tc)
    value = args.value.strip()
    try:
        seconds = float(value)
    except ValueError:
        seconds = None
    if seconds is not None and not math.isfinite(seconds):
        _fail("Not a finite number of seconds: {}".format(value))

    if seconds is not None:
        if args.generic:
            print(seconds_to_generic(seconds))
            return
        try:
            print(media_to_label(seconds, document))
        except ParseError as exc:
            _fail(str(exc))
        return

    result = try_parse_label(value, document, strict=args.strict)
    if not result.ok:
        _fail(result.error)
    for message in result.warnings:
        _status("Warning: {}".format(message))
    print("{:.3f}".format(result.seconds))


def _cmd_render(args: argparse.Namespace) -> None:
    _, document, events = _load_document_file(args.document)
    surface = (args.width, args.height) if args.width and args.height else None
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        plan = evaluate(events, document, args.time, surface=surface, aspect_is_constrained=args.constrained)
    for w in caught:
        _status("Warning: {}".format(w.message))
    if plan.is_empty:
        _status("No caption on screen at {:.3f}s".format(args.time))
    print(json.dumps(plan.to_dict(), indent=2, ensure_ascii=False))


def _cmd_export(args: argparse.Namespace) -> None:
    path, document, events = _load_document_file(args.document)

    output_dir = Path(args.output_dir).resolve() if args.output_dir else path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    if args.formats:
        format_keys = [f.strip() for f in args.formats.split(",") if f.strip()]
        for key in format_keys:
            if key not in FORMATTERS:
                available = ", ".join(sorted(FORMATTERS.keys()))
                _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    else:
        format_keys = list(FORMATTERS.keys())

    _status("Loaded {} events from {}".format(len(events), path.name))
    saved: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        try:
            outputs = formatter.format(document, events)
        except ParseError as exc:
            _fail(str(exc))
        for output in outputs:
            saved_path = _save_output(output, path.stem, output_dir)
            saved.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("Done! Saved {} file(s) to {}".format(len(saved), output_dir))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_document_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--fps",
        type=float,
        default=config.DEFAULT_FPS,
        help="Frame rate (default: %(default)s).",
    )
    parser.add_argument(
        "--drop-frame",
        action=argparse.BooleanOptionalAction,
        default=config.DEFAULT_DROP_FRAME,
        help="Use drop-frame numbering at 29.97/59.94 (default: %(default)s).",
    )
    parser.add_argument(
        "--start-tc",
        default=None,
        help="SMPTE label assigned to media time zero, e.g. 01:00:00;00.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separate from main() so tests can inspect the parser without running
    a command.
    """
    parser = argparse.ArgumentParser(
        prog="cc608",
        description="CEA-608 caption timecode, placement and preview tools.",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help="Logging level (default: %(default)s).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    tc = sub.add_parser("timecode", help="Convert seconds <-> timecode label.")
    tc.add_argument("value", help="Seconds (e.g. 60.06) or a label (00:01:00;02, 00:01:00.060).")
    _add_document_flags(tc)
    tc.add_argument(
        "--generic",
        action="store_true",
        help="Format seconds as HH:MM:SS.mmm instead of SMPTE.",
    )
    tc.add_argument(
        "--strict",
        action=argparse.BooleanOptionalAction,
        default=config.STRICT_DROP_FRAME,
        help="Reject labels drop-frame numbering never produces (default: %(default)s).",
    )
    tc.set_defaults(handler=_cmd_timecode)

    render = sub.add_parser("render", help="Print the render plan at a playhead time.")
    render.add_argument("document", help="Caption document JSON file.")
    render.add_argument("--time", type=float, required=True, help="Playhead time in seconds.")
    render.add_argument("--width", type=float, default=None, help="Surface width in pixels.")
    render.add_argument("--height", type=float, default=None, help="Surface height in pixels.")
    render.add_argument(
        "--constrained",
        action="store_true",
        help="Lay columns out inside a centred 4:3 aperture.",
    )
    render.set_defaults(handler=_cmd_render)

    export = sub.add_parser("export", help="Write QC / preview reports for a caption document.")
    export.add_argument("document", help="Caption document JSON file.")
    export.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )
    export.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: next to the document).",
    )
    export.set_defaults(handler=_cmd_export)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config.configure_logging(args.log_level.upper())
    args.handler(args)


if __name__ == "__main__":
    main()
