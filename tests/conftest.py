"""Shared test fixtures for the cc608_engine test suite.

WHY: Several test modules need the same small caption documents: a
drop-frame document with a start timecode, and a legacy payload that
exercises every import quirk (split rows, sparse placement maps, inverted
rows, style tokens). Centralizing them keeps expectations consistent.

HOW: Plain pytest fixtures returning fresh objects per test, plus a
make_event factory for ad-hoc event lists.

RULES:
- Fixtures never share mutable state between tests (fresh copies each time)
- LEGACY_PAYLOAD timings are chosen so the two 5.0-8.0 events form one
  block and the 8.05 event does not join it
"""

from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from cc608_engine.core.models import CaptionEvent, Document, Placement


LEGACY_PAYLOAD: Dict[str, Any] = {
    "fps": 29.97,
    "dropFrame": True,
    "startTc": "01:00:00;00",
    "cues": [
        {"id": "c3", "start": 8.05, "end": 10.0, "lines": ["{I}Hi"]},
        {"id": "c1", "start": 1.0, "end": 3.0, "text": "HELLO | THERE"},
        {"id": "c2a", "start": 5.0, "end": 8.0, "lines": ["TOP LINE"], "sccPlacement": [{"row": 14, "col": 4}]},
        {"id": "c2b", "start": 5.0, "end": 8.0, "lines": ["BOTTOM LINE"], "sccPlacement": {"0": {"row": 15, "col": 4}}},
    ],
}


@pytest.fixture
def legacy_payload():
    """Caption document dict in the editor's legacy shape (unsorted cues)."""
    return copy.deepcopy(LEGACY_PAYLOAD)


@pytest.fixture
def df_document():
    return Document(fps=29.97, drop_frame=True)


@pytest.fixture
def offset_document():
    """29.97 DF document whose media zero is labelled 01:00:00;00."""
    return Document(fps=29.97, drop_frame=True, start_timecode_label="01:00:00;00")


@pytest.fixture
def make_event():
    """Factory: make_event(start, end, *lines, placement=[(row, col) or None, ...])."""

    def _make(start, end, *lines, placement=None, id=None):
        placements = []
        for entry in placement or []:
            placements.append(Placement(row=entry[0], col=entry[1]) if entry is not None else None)
        return CaptionEvent(start=start, end=end, lines=list(lines), placement=placements, id=id)

    return _make
