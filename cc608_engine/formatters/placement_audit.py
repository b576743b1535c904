"""CEA-608 placement audit JSON formatter.

WHY: Broadcast QC wants to know, before an SCC is ever written, where each
line will sit on air, which PAC will carry it, whether it fits in the
columns left after its indent, and what had to be repaired on the way
(rows clamped, illegal drop-frame labels). This formatter produces that
report from the same code path the preview uses.

HOW: Blocks are rebuilt with iter_blocks(), placed with resolve_placement(),
and each line is measured in on-air cells: visible_cell_count() (style
tokens count as one cell) plus one more cell for every extra mid-row code a
token needs. The PAC word comes from pac_word(); any style tokens are listed
as mid-row words. Warnings raised while auditing are captured with
warnings.catch_warnings() and written into the report. The result is
validated against schemas/placement_audit.schema.json before returning.

RULES:
- Timecodes use the document's start offset and drop-frame setting
- "indent" is the column the PAC actually addresses (multiple of 4)
- overflow = cells > 32 - col, where {IU} occupies two cells
- Output suffix: "-placement-audit.json"
- Validate output against the schema before returning; raise on failure
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any

import jsonschema

from cc608_engine.core.blocks import iter_blocks
from cc608_engine.core.control_codes import indent_for_column, mid_row_words, pac_word
from cc608_engine.core.models import CaptionEvent, Document
from cc608_engine.core.placement import resolve_placement
from cc608_engine.core.timecode import media_to_label
from cc608_engine.core.tokenizer import GRID_COLUMNS, TOKEN_RE, strip_style_tokens, visible_cell_count
from cc608_engine.errors import DomainClampWarning, IllegalDropFrameWarning
from cc608_engine.formatters.base import BaseFormatter, FormatterOutput

AUDIT_VERSION = "1.0"

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "placement_audit.schema.json"

_CACHED_SCHEMA: dict[str, Any] | None = None

_AUDITED_WARNINGS = (DomainClampWarning, IllegalDropFrameWarning)


def _get_schema() -> dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def _audit_line(index: int, text: str, row: int, col: int, channel: int) -> dict[str, Any]:
    cells = visible_cell_count(text)
    available = GRID_COLUMNS - col
    words: list[str] = []
    for token in TOKEN_RE.findall(text):
        token_words = mid_row_words(token, channel)
        words.extend(token_words)
        # each extra mid-row code takes another cell on air ({IU} sends two)
        cells += max(0, len(token_words) - 1)
    return {
        "index": index,
        "text": text,
        "plainText": strip_style_tokens(text),
        "row": row,
        "col": col,
        "indent": indent_for_column(col),
        "pacWord": pac_word(row, col, channel),
        "midRowWords": words,
        "cells": cells,
        "availableColumns": available,
        "overflow": cells > available,
    }


def build_audit(document: Document, events: list[CaptionEvent], channel: int = 1) -> dict[str, Any]:
    """Build the audit dict (unvalidated) for a document."""
    blocks: list[dict[str, Any]] = []
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        for block in iter_blocks(events, document.fps):
            lines, placements = resolve_placement(block.lines, block.placements)
            blocks.append({
                "index": len(blocks),
                "eventIndices": list(block.event_indices),
                "eventIds": [events[i].id for i in block.event_indices],
                "start": block.start,
                "end": block.end,
                "startTimecode": media_to_label(block.start, document),
                "endTimecode": media_to_label(block.end, document),
                "lines": [
                    _audit_line(i, text, p.row, p.col, channel)
                    for i, (text, p) in enumerate(zip(lines, placements))
                ],
            })

    audit_warnings = [
        {"category": w.category.__name__, "message": str(w.message)}
        for w in caught
        if issubclass(w.category, _AUDITED_WARNINGS)
    ]
    line_count = sum(len(b["lines"]) for b in blocks)
    overflow = sum(1 for b in blocks for line in b["lines"] if line["overflow"])
    return {
        "version": AUDIT_VERSION,
        "fps": document.fps,
        "dropFrame": document.drop_frame,
        "startTc": document.start_timecode_label,
        "blocks": blocks,
        "warnings": audit_warnings,
        "summary": {
            "blocks": len(blocks),
            "lines": line_count,
            "overflowLines": overflow,
            "warnings": len(audit_warnings),
        },
    }


class PlacementAuditFormatter(BaseFormatter):
    """QC report of on-air placement, PAC words and repairs per block."""

    def __init__(self, channel: int = 1) -> None:
        self._channel = channel

    @property
    def name(self) -> str:
        return "Placement audit JSON"

    def format(self, document: Document, events: list[CaptionEvent]) -> list[FormatterOutput]:
        """Audit every block of the document.

        Raises:
            jsonschema.ValidationError: If the generated report does not
                conform to the placement audit schema.
        """
        audit = build_audit(document, events, self._channel)
        jsonschema.validate(instance=audit, schema=_get_schema())
        return [FormatterOutput(
            suffix="-placement-audit.json",
            content=json.dumps(audit, indent=2, ensure_ascii=False),
            media_type="application/json",
        )]
