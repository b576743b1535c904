"""SMPTE and generic timecode conversion with drop-frame compensation.

WHY: Broadcast delivery addresses frames, not seconds. At 29.97 fps a
naive seconds-to-label conversion drifts 3.6 seconds per hour against the
wall clock, which is why drop-frame (DF) numbering skips label values. A
wrong DF formula shifts every caption on delivery; a label that is parsed
"leniently" to zero silently moves a cue to the top of the programme.

HOW: Everything goes through integer frame counts.
  seconds -> frames:  round(seconds * fps)
  frames  -> label:   DF adds back the skipped label numbers (2 per minute
                      at 29.97, 4 at 59.94, none on every tenth minute)
  label   -> frames:  inverse; DF subtracts the skipped numbers
  frames  -> seconds: frames / fps
Generic HH:MM:SS.mmm labels use millisecond math with no frame quantization.
A document's start timecode label is converted to an offset that is added
when formatting media time for display and subtracted when parsing back.

RULES:
- DF math only at DF-eligible rates (~29.97, ~59.94); elsewhere NDF is used
  even when drop_frame=True, and the label uses ':'
- The label separator is cosmetic on input; drop_frame decides the math
- FF is always < round(fps) on output and validated on input
- Labels DF numbering never produces (;00/;01 at non-tenth minutes) are
  rejected in strict mode and reported with IllegalDropFrameWarning otherwise
- Negative seconds format as 00:00:00:00; nothing parses to zero by default
- The start offset is never applied to stored CaptionEvent times
"""

from __future__ import annotations

import logging
import math
import re
import warnings
from dataclasses import dataclass, field
from typing import Iterable

from cc608_engine.core.models import Document
from cc608_engine.errors import IllegalDropFrameWarning, ParseError, report

logger = logging.getLogger(__name__)

SMPTE_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})([:;])(\d{2})$")
GENERIC_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})(?:[.,](\d{1,3}))?$")

DEFAULT_FRAME_RATE = 30.0


# =============================================================================
# Frame-rate helpers
# =============================================================================

def is_drop_frame_rate(fps: float) -> bool:
    """True for rates where drop-frame numbering is defined (29.97, 59.94)."""
    try:
        f = float(fps)
    except (TypeError, ValueError):
        return False
    # tight windows so integer 30 and 60 stay non-drop
    return abs(f - 30000.0 / 1001.0) < 0.01 or abs(f - 60000.0 / 1001.0) < 0.02


def nominal_rate(fps: float) -> int:
    """Integer frames-per-second used for label arithmetic (29.97 -> 30)."""
    return max(1, int(math.floor(float(fps) + 0.5)))


def uses_drop_frame(fps: float, drop_frame: bool) -> bool:
    return bool(drop_frame) and is_drop_frame_rate(fps)


def frame_duration(fps: float | None) -> float:
    """Seconds per frame; falls back to 1/30 for a missing or bad rate."""
    if fps is None:
        return 1.0 / DEFAULT_FRAME_RATE
    try:
        f = float(fps)
    except (TypeError, ValueError):
        return 1.0 / DEFAULT_FRAME_RATE
    if not math.isfinite(f) or f <= 0:
        return 1.0 / DEFAULT_FRAME_RATE
    return 1.0 / f


def _dropped_per_minute(fps: float) -> int:
    # 2 label numbers at 29.97, scaled proportionally at 59.94
    return 2 * nominal_rate(fps) // 30


def seconds_to_frames(seconds: float, fps: float) -> int:
    """Round elapsed seconds to the nearest frame count (half rounds up)."""
    return int(math.floor(max(0.0, float(seconds)) * float(fps) + 0.5))


def frames_to_seconds(frames: int, fps: float) -> float:
    return frames / float(fps)


# =============================================================================
# SMPTE labels
# =============================================================================

def frames_to_smpte(frames: int, fps: float, drop_frame: bool) -> str:
    """Format a frame count as HH:MM:SS:FF (NDF) or HH:MM:SS;FF (DF).

    WHY: DF labels are not a simple base-30 rendering of the frame count;
    the skipped label numbers have to be added back before splitting into
    hours/minutes/seconds/frames.

    HOW: For DF, count complete ten-minute groups (each short by nine
    minutes' worth of dropped numbers) and complete minutes inside the
    current group, then add the skipped numbers back.

    RULES:
    - frames < 0 is treated as 0
    - Hours are not wrapped at 24
    """
    frames = max(0, int(frames))
    base = nominal_rate(fps)
    separator = ":"

    if uses_drop_frame(fps, drop_frame):
        drop = _dropped_per_minute(fps)
        per_minute = base * 60 - drop
        per_ten_minutes = base * 600 - drop * 9
        tens, remainder = divmod(frames, per_ten_minutes)
        if remainder > drop:
            frames += drop * 9 * tens + drop * ((remainder - drop) // per_minute)
        else:
            frames += drop * 9 * tens
        separator = ";"

    ff = frames % base
    total_seconds = frames // base
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600
    return "{:02d}:{:02d}:{:02d}{}{:02d}".format(hh, mm, ss, separator, ff)


def seconds_to_smpte(seconds: float, fps: float, drop_frame: bool) -> str:
    """Convert elapsed seconds to an SMPTE label.

    Args:
        seconds: Elapsed media time (negative values format as zero).
        fps: Nominal frame rate.
        drop_frame: Request DF numbering (ignored at non-DF rates).

    Returns:
        "HH:MM:SS:FF" or "HH:MM:SS;FF".
    """
    return frames_to_smpte(seconds_to_frames(seconds, fps), fps, drop_frame)


def is_legal_drop_frame_label(minutes: int, seconds: int, frames: int, fps: float) -> bool:
    """False for the label numbers DF counting skips at non-tenth minutes."""
    if not is_drop_frame_rate(fps):
        return True
    return not (seconds == 0 and frames < _dropped_per_minute(fps) and minutes % 10 != 0)


def smpte_to_frames(
    label: str,
    fps: float,
    drop_frame: bool,
    strict: bool = False,
) -> int:
    """Parse an SMPTE label into a frame count.

    WHY: Editors type labels, imports carry labels, and both must land on
    exactly the frame the label names under the document's numbering.

    HOW: Validate the shape and field ranges, compute the base-N frame
    number, and for DF subtract the label numbers skipped so far
    (drop * (minutes - minutes // 10)).

    RULES:
    - Raises ParseError on shape mismatch, MM/SS >= 60, or FF >= round(fps)
    - strict=True raises ParseError for labels DF numbering never produces;
      otherwise the label is accepted and IllegalDropFrameWarning is emitted

    Raises:
        ParseError: If the label cannot be used.
    """
    text = str(label or "").strip()
    match = SMPTE_RE.match(text)
    if not match:
        raise ParseError(
            "Invalid SMPTE timecode '{}' (expected HH:MM:SS:FF or HH:MM:SS;FF)".format(text),
            text,
        )

    hh, mm, ss, ff = (int(match.group(i)) for i in (1, 2, 3, 5))
    base = nominal_rate(fps)
    if mm >= 60 or ss >= 60:
        raise ParseError("Minutes/seconds out of range in timecode '{}'".format(text), text)
    if ff >= base:
        raise ParseError(
            "Frame {:02d} out of range for {} fps in timecode '{}'".format(ff, fps, text),
            text,
        )

    frames = ((hh * 60 + mm) * 60 + ss) * base + ff

    if uses_drop_frame(fps, drop_frame):
        if not is_legal_drop_frame_label(mm, ss, ff, fps):
            message = "Drop-frame timecode '{}' names a dropped frame number".format(text)
            if strict:
                raise ParseError(message, text)
            report(IllegalDropFrameWarning, message, logger)
        total_minutes = hh * 60 + mm
        frames -= _dropped_per_minute(fps) * (total_minutes - total_minutes // 10)

    return max(0, frames)


def smpte_to_seconds(
    label: str,
    fps: float,
    drop_frame: bool,
    strict: bool = False,
) -> float:
    """Parse an SMPTE label into elapsed seconds (the inverse of seconds_to_smpte)."""
    return frames_to_seconds(smpte_to_frames(label, fps, drop_frame, strict=strict), fps)


@dataclass
class DropFrameDetection:
    """Result of inspecting the separators used by a set of labels.

    drop_frame is None when no label was recognised.
    """

    drop_frame: bool | None
    mixed: bool = False


def detect_drop_frame(labels: Iterable[str]) -> DropFrameDetection:
    """Infer DF/NDF from label separators.

    RULES:
    - Any ';' separator means DF (mixed=True if ':' labels were also seen)
    - Only ':' separators means NDF
    - No recognisable labels means unknown (None)
    """
    saw_colon = False
    saw_semicolon = False
    for label in labels:
        match = SMPTE_RE.match(str(label or "").strip())
        if not match:
            continue
        if match.group(4) == ";":
            saw_semicolon = True
        else:
            saw_colon = True

    if saw_semicolon:
        return DropFrameDetection(drop_frame=True, mixed=saw_colon)
    if saw_colon:
        return DropFrameDetection(drop_frame=False)
    return DropFrameDetection(drop_frame=None)


def normalize_delimiter(label: str, drop_frame: bool) -> str:
    """Rewrite the frame separator to match the numbering (';' DF, ':' NDF).

    Labels that are not SMPTE-shaped are returned stripped but unchanged.
    """
    text = str(label or "").strip()
    match = SMPTE_RE.match(text)
    if not match:
        return text
    return "{}:{}:{}{}{}".format(
        match.group(1), match.group(2), match.group(3),
        ";" if drop_frame else ":", match.group(5),
    )


# =============================================================================
# Generic HH:MM:SS.mmm labels
# =============================================================================

def seconds_to_generic(seconds: float, separator: str = ".") -> str:
    """Format seconds as HH:MM:SS.mmm (or HH:MM:SS,mmm with separator=",")."""
    total_ms = int(math.floor(max(0.0, float(seconds)) * 1000 + 0.5))
    ms = total_ms % 1000
    total_seconds = total_ms // 1000
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(
        total_seconds // 3600,
        (total_seconds // 60) % 60,
        total_seconds % 60,
        separator,
        ms,
    )


def generic_to_seconds(label: str) -> float:
    """Parse H:MM:SS[.mmm] / HH:MM:SS[,mmm] into seconds.

    RULES:
    - The fraction is right-padded to milliseconds ("5" -> 500 ms)
    - MM and SS must be < 60

    Raises:
        ParseError: If the label does not match.
    """
    text = str(label or "").strip()
    match = GENERIC_RE.match(text)
    if not match:
        raise ParseError(
            "Invalid time '{}' (expected HH:MM:SS.mmm or HH:MM:SS,mmm)".format(text),
            text,
        )
    hh, mm, ss = int(match.group(1)), int(match.group(2)), int(match.group(3))
    if mm >= 60 or ss >= 60:
        raise ParseError("Minutes/seconds out of range in time '{}'".format(text), text)
    ms = int((match.group(4) or "").ljust(3, "0"))
    return hh * 3600 + mm * 60 + ss + ms / 1000.0


# =============================================================================
# Start-timecode offset
# =============================================================================

def start_offset_seconds(document: Document, strict: bool = False) -> float:
    """Seconds to add to media time when showing SMPTE labels.

    Returns 0 when the document has no start timecode label.

    Raises:
        ParseError: If the document's start label is malformed.
    """
    label = (document.start_timecode_label or "").strip()
    if not label:
        return 0.0
    return smpte_to_seconds(label, document.fps, document.drop_frame, strict=strict)


def media_to_label(seconds: float, document: Document) -> str:
    """Format media time as the SMPTE label shown to the user (offset applied)."""
    offset = start_offset_seconds(document)
    return seconds_to_smpte(seconds + offset, document.fps, document.drop_frame)


def label_to_media(label: str, document: Document, strict: bool = False) -> float:
    """Parse a displayed SMPTE label back into media time (offset removed).

    Labels earlier than the start timecode clamp to media time 0.
    """
    offset = start_offset_seconds(document)
    value = smpte_to_seconds(label, document.fps, document.drop_frame, strict=strict)
    return max(0.0, value - offset)


@dataclass
class LabelParseResult:
    """Explicit success/failure result for a user-entered time field."""

    seconds: float | None = None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


def try_parse_label(label: str, document: Document, strict: bool = False) -> LabelParseResult:
    """Parse an SMPTE or generic label without raising.

    WHY: Text fields in an authoring UI need a result they can branch on
    (show the error, keep the old value) rather than an exception.

    HOW: SMPTE-shaped input goes through label_to_media (offset removed);
    generic input goes through generic_to_seconds (no offset, no frame math).
    Drop-frame warnings raised while parsing are collected into the result.

    RULES:
    - Never substitutes a default value; failure leaves seconds=None
    """
    text = str(label or "").strip()
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", IllegalDropFrameWarning)
        try:
            if SMPTE_RE.match(text):
                seconds = label_to_media(text, document, strict=strict)
            else:
                seconds = generic_to_seconds(text)
        except ParseError as exc:
            return LabelParseResult(error=str(exc))

    messages = [str(w.message) for w in caught if issubclass(w.category, IllegalDropFrameWarning)]
    return LabelParseResult(seconds=seconds, warnings=messages)
