"""Adapter: legacy caption document dicts to engine dataclasses.

WHY: Caption documents come from several generations of import tools.
Placement was stored as an array in some ("sccPlacement": [{...}, null])
and as a sparse map keyed by line index in others ({"1": {...}}); keys for
the same field differ ("dropFrame" vs "drop_frame", "startTc" vs
"startTimecodeLabel"); times are sometimes strings; zero-length events and
upside-down two-line placements both occur. The core should only ever see
one clean shape, so every ambiguity is settled here.

HOW: load_document() validates the payload against the bundled JSON schema,
then builds a Document and a sorted CaptionEvent list:
  1. document_from_dict() resolves key aliases and config defaults, and
     infers drop-frame from the start label when the flag is missing
  2. event_from_dict() picks lines ("lines" or text split on newline / "|"),
     parses times, and normalizes placements to one entry per line
  3. events_from_dicts() sorts by start, stretches zero-length events to one
     frame, and swaps inverted two-line placements with their text

RULES:
- Input dicts are never modified
- Placements are clamped on import (DomainClampWarning for each repair)
- Unparseable time strings raise ParseError; the payload is not half-loaded
- Sorting is stable so same-start events keep their document order
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

import jsonschema

from cc608_engine import config
from cc608_engine.core.editing import split_lines
from cc608_engine.core.models import CaptionEvent, Document, Placement
from cc608_engine.core.placement import clamp_placement
from cc608_engine.core.timecode import (
    detect_drop_frame,
    frame_duration,
    generic_to_seconds,
    normalize_delimiter,
)

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "caption_document.schema.json"

_CACHED_SCHEMA: dict[str, Any] | None = None


def _get_schema() -> dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _first_present(data: dict[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def parse_time(value: Any) -> float:
    """Seconds from a number, a numeric string, or an HH:MM:SS.mmm string.

    Raises:
        ParseError: If a string is neither numeric nor a generic time label.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    text = str(value).strip()
    try:
        return float(text)
    except ValueError:
        return generic_to_seconds(text)


# ---------------------------------------------------------------------------
# Placement normalization
# ---------------------------------------------------------------------------

def _placement_from_raw(raw: Any) -> Placement | None:
    if not isinstance(raw, dict):
        return None
    row, col = raw.get("row"), raw.get("col")
    if row is None and col is None:
        return None
    # A placement with only one coordinate keeps the default for the other
    return clamp_placement(Placement(row=15 if row is None else row, col=0 if col is None else col))


def normalize_placements(raw: Any, line_count: int) -> list[Placement | None]:
    """Turn an array or sparse-map placement encoding into one entry per line.

    Args:
        raw: None, a list aligned with lines, or a dict keyed by line index
             (int or numeric string).
        line_count: Number of lines the event has.

    Returns:
        A list of length line_count holding a clamped Placement or None.
    """
    result: list[Placement | None] = [None] * line_count
    if raw is None:
        return result
    if isinstance(raw, dict):
        for key, value in raw.items():
            try:
                index = int(key)
            except (TypeError, ValueError):
                logger.warning("Ignoring placement with non-numeric line key %r", key)
                continue
            if 0 <= index < line_count:
                result[index] = _placement_from_raw(value)
        return result
    if isinstance(raw, list):
        for index, value in enumerate(raw[:line_count]):
            result[index] = _placement_from_raw(value)
        return result
    logger.warning("Ignoring unrecognized placement encoding of type %s", type(raw).__name__)
    return result


# ---------------------------------------------------------------------------
# Events and documents
# ---------------------------------------------------------------------------

def event_from_dict(data: dict[str, Any]) -> CaptionEvent:
    """Build one CaptionEvent from a legacy event dict."""
    raw_lines = data.get("lines")
    if raw_lines:
        lines = [str(line) for line in raw_lines if str(line).strip()][:2]
    else:
        lines = split_lines(data.get("text") or "")

    raw_placement = _first_present(data, ("sccPlacement", "placement"))
    return CaptionEvent(
        start=parse_time(data["start"]),
        end=parse_time(data["end"]),
        lines=lines,
        placement=normalize_placements(raw_placement, len(lines)),
        id=data.get("id"),
        speaker=data.get("speaker"),
    )


def document_from_dict(data: dict[str, Any]) -> Document:
    """Build a Document, filling gaps from configured defaults.

    When the drop-frame flag is missing, the start label's separator decides
    it (";" means DF). The stored start label is rewritten with the
    separator that matches the final flag.
    """
    defaults = config.load_document_defaults()
    fps = _first_present(data, ("fps", "frameRate"), defaults.fps)
    start_label = _first_present(data, ("startTc", "startTimecodeLabel", "start_timecode_label"))
    start_label = (str(start_label).strip() or None) if start_label else None

    drop_frame = _first_present(data, ("dropFrame", "drop_frame"))
    if drop_frame is None and start_label:
        drop_frame = detect_drop_frame([start_label]).drop_frame
    if drop_frame is None:
        drop_frame = defaults.drop_frame
    if start_label:
        start_label = normalize_delimiter(start_label, bool(drop_frame))

    return Document(fps=float(fps), drop_frame=bool(drop_frame), start_timecode_label=start_label)


def _swap_if_inverted(event: CaptionEvent) -> None:
    if len(event.lines) != 2 or len(event.placement) != 2:
        return
    first, second = event.placement
    if first is not None and second is not None and first.row > second.row:
        event.lines.reverse()
        event.placement.reverse()


def events_from_dicts(items: Iterable[dict[str, Any]], fps: float | None = None) -> list[CaptionEvent]:
    """Build, repair and sort a list of events.

    Zero-length or negative-length events are stretched to one frame so
    that end > start holds for everything the core sees.
    """
    minimum = frame_duration(fps)
    events: list[CaptionEvent] = []
    for item in items:
        event = event_from_dict(item)
        if event.end <= event.start:
            logger.warning(
                "Event %r has end %.3f <= start %.3f; extending to one frame",
                event.id, event.end, event.start,
            )
            event.end = event.start + minimum
        _swap_if_inverted(event)
        events.append(event)
    events.sort(key=lambda e: e.start)
    return events


def load_document(payload: dict[str, Any]) -> tuple[Document, list[CaptionEvent]]:
    """Validate a caption document payload and convert it.

    Raises:
        jsonschema.ValidationError: If the payload does not match the
            caption document schema.
        ParseError: If an event time string cannot be parsed.
    """
    jsonschema.validate(instance=payload, schema=_get_schema())
    document = document_from_dict(payload)
    items = _first_present(payload, ("cues", "events"), [])
    events = events_from_dicts(items, document.fps)
    logger.info("Loaded %d caption events (fps=%s, drop_frame=%s)", len(events), document.fps, document.drop_frame)
    return document, events


# ---------------------------------------------------------------------------
# Back to dicts
# ---------------------------------------------------------------------------

def event_to_dict(event: CaptionEvent) -> dict[str, Any]:
    """Serialize an event in the editor's shape (sccPlacement as an array)."""
    return {
        "id": event.id,
        "start": event.start,
        "end": event.end,
        "text": event.text,
        "lines": list(event.lines),
        "speaker": event.speaker,
        "sccPlacement": [p.to_dict() if p is not None else None for p in event.placement],
    }


def document_to_dict(document: Document, events: list[CaptionEvent]) -> dict[str, Any]:
    return {
        "fps": document.fps,
        "dropFrame": document.drop_frame,
        "startTc": document.start_timecode_label,
        "cues": [event_to_dict(e) for e in events],
    }
