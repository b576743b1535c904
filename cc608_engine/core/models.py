"""Data model shared by every core component.

WHY: Import pipelines, the editor, and the per-frame preview all talk about
the same few things: timed caption events, the document's frame-rate
metadata, grid placements, and styled display cells. One set of small
dataclasses keeps those conversations typed and keeps the core free of the
dict-shaped legacy payloads it is fed.

HOW: Plain dataclasses, no behaviour beyond trivial derived properties.
  CaptionEvent: one timed text unit (1-2 lines, optional placements)
  Document: fps, drop-frame flag, optional start timecode label
  Placement: a {row, col} grid position
  CellStyle: color / italic / underline state of one cell
  DisplayCell: one character cell produced by the tokenizer
  Block: ephemeral pop-on block rebuilt from 1-2 events
  LinePlan: geometry plus cells for one rendered line
  RenderPlan: everything the presentation layer needs for one tick

RULES:
- All times are float seconds of media time (never offset by a start TC)
- CaptionEvent.placement is aligned with lines; None means "compute default"
- Placement values are clamped by the placement engine before use, not here
- Block and RenderPlan are never persisted
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Placement:
    """A caption line's position in the 15-row x 32-column grid.

    Attributes:
        row: 1-based row (1 = top, 15 = bottom).
        col: 0-based starting column.
    """

    row: int
    col: int

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}


@dataclass
class CaptionEvent:
    """One timed text unit as supplied by an import step or user edits.

    Attributes:
        start: Start time in seconds.
        end: End time in seconds (end > start).
        lines: One or two already-wrapped lines, top to bottom.
        placement: One entry per line, or None entries for defaults.
        id: Opaque identifier from the source document, carried through.
        speaker: Optional speaker label, carried through.
    """

    start: float
    end: float
    lines: list[str] = field(default_factory=list)
    placement: list[Placement | None] = field(default_factory=list)
    id: Any = None
    speaker: str | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def placement_for(self, line_index: int) -> Placement | None:
        if 0 <= line_index < len(self.placement):
            return self.placement[line_index]
        return None


@dataclass
class Document:
    """Frame-rate metadata for a caption document.

    Attributes:
        fps: Nominal frame rate (23.976, 24, 25, 29.97, 30, 59.94, ...).
        drop_frame: True if labels use drop-frame numbering. Only honoured
            at drop-frame-eligible rates.
        start_timecode_label: SMPTE label assigned to media time zero.
    """

    fps: float = 29.97
    drop_frame: bool = False
    start_timecode_label: str | None = None

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.fps if self.fps and self.fps > 0 else 1.0 / 30.0


@dataclass(frozen=True)
class CellStyle:
    """Mid-row style state: color plus italic/underline flags."""

    color: str = "white"
    italic: bool = False
    underline: bool = False


@dataclass(frozen=True)
class DisplayCell:
    """One character cell; control tokens occupy a cell holding a space."""

    character: str
    style: CellStyle = CellStyle()

    @property
    def is_blank(self) -> bool:
        return self.character == " "

    def to_dict(self) -> dict[str, Any]:
        return {
            "char": self.character,
            "color": self.style.color,
            "italic": self.style.italic,
            "underline": self.style.underline,
        }


@dataclass
class Block:
    """A pop-on caption block reconstructed from one or two events.

    Attributes:
        start: Start of the anchor event.
        end: End of the anchor event.
        lines: Up to two lines, in event order (normalized later by placement).
        placements: Placement or None per line.
        event_indices: Indices of the contributing events in the source list.
    """

    start: float
    end: float
    lines: list[str] = field(default_factory=list)
    placements: list[Placement | None] = field(default_factory=list)
    event_indices: list[int] = field(default_factory=list)


@dataclass
class PixelGeometry:
    """Pixel position of a line on a concrete rendering surface."""

    x: float
    y: float
    cell_width: float
    row_height: float


@dataclass
class LinePlan:
    """Geometry and styled cells for one rendered caption line."""

    row: int
    col: int
    left_fraction: float
    cell_width_fraction: float
    vertical_fraction: float
    cells: list[DisplayCell] = field(default_factory=list)
    text: str = ""
    pixels: PixelGeometry | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "row": self.row,
            "col": self.col,
            "leftFraction": self.left_fraction,
            "cellWidthFraction": self.cell_width_fraction,
            "verticalFraction": self.vertical_fraction,
            "text": self.text,
            "cells": [cell.to_dict() for cell in self.cells],
        }
        if self.pixels is not None:
            data["pixels"] = {
                "x": self.pixels.x,
                "y": self.pixels.y,
                "cellWidth": self.pixels.cell_width,
                "rowHeight": self.pixels.row_height,
            }
        return data


@dataclass
class RenderPlan:
    """Everything the presentation layer needs to paint one tick.

    An empty ``lines`` list means nothing is on screen at ``time``.
    """

    time: float
    event_index: int = -1
    lines: list[LinePlan] = field(default_factory=list)
    block: Block | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "eventIndex": self.event_index,
            "lines": [line.to_dict() for line in self.lines],
        }
