"""Render timeline JSON formatter.

WHY: Preview tooling and regression snapshots need to know what the screen
shows at each caption change without running a player. One render plan per
block start is enough to reproduce the whole on-air sequence.

HOW: For every block from iter_blocks(), evaluate() is called at the block
start and its RenderPlan is serialized along with the display timecode.
An empty plan is written at the end of each block when nothing takes over,
so consumers can tell when the screen clears.

RULES:
- Entries are in time order, one per distinct block start plus clears
- Output suffix: "-render-timeline.json"
"""

from __future__ import annotations

import json
from typing import Any

from cc608_engine.core.blocks import iter_blocks
from cc608_engine.core.models import CaptionEvent, Document
from cc608_engine.core.render import evaluate
from cc608_engine.core.timecode import media_to_label
from cc608_engine.formatters.base import BaseFormatter, FormatterOutput


def build_timeline(document: Document, events: list[CaptionEvent]) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    blocks = list(iter_blocks(events, document.fps))
    last_start: float | None = None
    for position, block in enumerate(blocks):
        # blocks sharing a start are one screen change
        if block.start != last_start:
            plan = evaluate(events, document, block.start)
            entry = plan.to_dict()
            entry["timecode"] = media_to_label(block.start, document)
            entries.append(entry)
            last_start = block.start

        following = blocks[position + 1].start if position + 1 < len(blocks) else None
        if following is None or following > block.end:
            clear = evaluate(events, document, block.end)
            if clear.is_empty:
                entry = clear.to_dict()
                entry["timecode"] = media_to_label(block.end, document)
                entries.append(entry)
    return entries


class RenderTimelineFormatter(BaseFormatter):
    """One serialized render plan per caption change."""

    @property
    def name(self) -> str:
        return "Render timeline JSON"

    def format(self, document: Document, events: list[CaptionEvent]) -> list[FormatterOutput]:
        timeline = {
            "fps": document.fps,
            "dropFrame": document.drop_frame,
            "entries": build_timeline(document, events),
        }
        return [FormatterOutput(
            suffix="-render-timeline.json",
            content=json.dumps(timeline, indent=2, ensure_ascii=False),
            media_type="application/json",
        )]
