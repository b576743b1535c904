"""In-place editing operations on a caption event list.

WHY: The editor's split / merge / nudge / retime / retype actions all have
small rules that keep a document valid (no zero-length events, no start
before zero, never more than two lines). Keeping them here keeps every
front end (API, CLI, desktop editor) applying the same rules.

HOW: Each function takes the caller's list and an index and mutates the
list in place. Refusals return False (or an error result) rather than
raising, because these are driven directly by user gestures.

RULES:
- Events keep at least MIN_DURATION seconds; starts never go below 0
- A split closer than SPLIT_GUARD to either edge is refused
- Text splits on newlines or "|" and keeps at most two lines
- Placements stay aligned with lines (extra entries dropped, missing = None)
"""

from __future__ import annotations

import copy
import logging
import math
import re

from cc608_engine.core.models import CaptionEvent, Document
from cc608_engine.core.timecode import LabelParseResult, try_parse_label

logger = logging.getLogger(__name__)

MIN_DURATION = 0.01
SPLIT_GUARD = 0.05
MAX_LINES = 2

_LINE_BREAK_RE = re.compile(r"\r?\n|\s*\|\s*")


def _valid_index(events: list[CaptionEvent], index: int) -> bool:
    return 0 <= index < len(events)


def split_lines(text: str) -> list[str]:
    """Split editor text into at most two trimmed, non-empty lines."""
    text = (text or "").replace("\\n", "\n")
    parts = [part.strip() for part in _LINE_BREAK_RE.split(text)]
    return [part for part in parts if part][:MAX_LINES]


def split_event(events: list[CaptionEvent], index: int, time: float) -> bool:
    """Split events[index] at ``time``, dividing its words in half.

    The first half keeps the original id; the second gets "<id>-b". If the
    event has a single word, the second half repeats it.

    Returns:
        True if the event was split, False if the split was refused.
    """
    if not _valid_index(events, index):
        return False
    event = events[index]
    if time <= event.start + SPLIT_GUARD or time >= event.end - SPLIT_GUARD:
        logger.info("Refusing split of event %d at %.3f (too close to an edge)", index, time)
        return False

    words = event.text.split()
    mid = max(1, math.ceil(len(words) / 2))
    first_text = " ".join(words[:mid])
    second_text = " ".join(words[mid:]) or event.text.replace("\n", " ")

    first = copy.deepcopy(event)
    first.end = time
    first.lines = [first_text]
    first.placement = [event.placement_for(0)]

    second = copy.deepcopy(event)
    second.start = time
    second.lines = [second_text]
    second.placement = [event.placement_for(0)]
    if event.id is not None:
        second.id = "{}-b".format(event.id)

    events[index:index + 1] = [first, second]
    return True


def merge_events(events: list[CaptionEvent], index: int) -> bool:
    """Merge events[index] with the event after it.

    The merged event spans both, keeps the first event's id and first
    placement, and holds the joined words on one line.
    """
    if not _valid_index(events, index) or index + 1 >= len(events):
        return False
    event = events[index]
    following = events[index + 1]
    joined = " ".join((event.text + " " + following.text).split())

    merged = copy.deepcopy(event)
    merged.end = max(event.end, following.end)
    merged.lines = [joined] if joined else []
    merged.placement = [event.placement_for(0)] if joined else []

    events[index:index + 2] = [merged]
    return True


def nudge_event(events: list[CaptionEvent], index: int, delta: float, target: str = "start") -> bool:
    """Move the start or end of an event by ``delta`` seconds.

    Raises:
        ValueError: If target is not "start" or "end".
    """
    if target not in ("start", "end"):
        raise ValueError("target must be 'start' or 'end', got {!r}".format(target))
    if not _valid_index(events, index):
        return False
    event = events[index]
    if target == "end":
        event.end = max(event.start + MIN_DURATION, event.end + delta)
    else:
        event.start = min(event.end - MIN_DURATION, max(0.0, event.start + delta))
    return True


def set_event_time(
    events: list[CaptionEvent],
    index: int,
    target: str,
    label: str,
    document: Document,
    strict: bool = False,
) -> LabelParseResult:
    """Apply a user-typed SMPTE or generic label to an event boundary.

    A label that cannot be parsed leaves the event untouched and comes back
    as an error result for the UI to show.

    Raises:
        ValueError: If target is not "start" or "end".
        IndexError: If index is out of range.
    """
    if target not in ("start", "end"):
        raise ValueError("target must be 'start' or 'end', got {!r}".format(target))
    if not _valid_index(events, index):
        raise IndexError("event index {} out of range".format(index))

    result = try_parse_label(label, document, strict=strict)
    if not result.ok:
        return result

    event = events[index]
    if target == "end":
        event.end = max(result.seconds, event.start + MIN_DURATION)
    else:
        event.start = min(result.seconds, event.end - MIN_DURATION)
    return result


def set_event_text(events: list[CaptionEvent], index: int, text: str) -> bool:
    """Replace an event's lines from editor text, keeping placements aligned."""
    if not _valid_index(events, index):
        return False
    event = events[index]
    lines = split_lines(text)
    event.placement = [event.placement_for(i) for i in range(len(lines))]
    event.lines = lines
    return True
