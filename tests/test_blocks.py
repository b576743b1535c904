"""Tests for pop-on block reconstruction and active cue lookup.

WHY: Two-row captions split across events must come back together as one
block, or the preview shows half a caption on the wrong row. The locator
decides which event is "current" on every tick, so its boundary behaviour
is tested alongside.
"""

from __future__ import annotations

import pytest

from cc608_engine.adapters.legacy_import import load_document
from cc608_engine.core.blocks import iter_blocks, reconstruct_block, sibling_indices
from cc608_engine.core.locator import locate_active
from cc608_engine.core.models import Placement


class TestReconstructBlock:
    def test_split_rows_form_one_block(self, legacy_payload):
        document, events = load_document(legacy_payload)
        block = reconstruct_block(events, 1, document.fps)
        assert block.event_indices == [1, 2]
        assert block.lines == ["TOP LINE", "BOTTOM LINE"]
        assert block.placements == [Placement(14, 4), Placement(15, 4)]
        assert (block.start, block.end) == (5.0, 8.0)

    def test_anchor_on_second_row_finds_first(self, legacy_payload):
        document, events = load_document(legacy_payload)
        assert reconstruct_block(events, 2, document.fps).event_indices == [1, 2]

    def test_excluded_sibling_leaves_lone_anchor(self, legacy_payload):
        document, events = load_document(legacy_payload)
        block = reconstruct_block(events, 2, document.fps, exclude={1})
        assert block.event_indices == [2]
        assert block.lines == ["BOTTOM LINE"]

    def test_event_more_than_a_frame_away_excluded(self, legacy_payload):
        document, events = load_document(legacy_payload)
        block = reconstruct_block(events, 3, document.fps)
        assert block.event_indices == [3]
        assert block.lines == ["{I}Hi"]

    def test_lone_anchor_keeps_two_lines(self, make_event):
        events = [make_event(1.0, 3.0, "A", "B", "C")]
        block = reconstruct_block(events, 0)
        assert block.lines == ["A", "B"]
        assert block.placements == [None, None]

    def test_only_first_line_of_each_sibling(self, make_event):
        events = [
            make_event(5.0, 8.0, "A1", "A2", placement=[(13, 0), (14, 0)]),
            make_event(5.0, 8.0, "B1", "B2"),
        ]
        block = reconstruct_block(events, 0)
        assert block.lines == ["A1", "B1"]
        assert block.placements == [Placement(13, 0), None]

    def test_tie_goes_to_earlier_event(self, make_event):
        events = [make_event(5.0, 8.0, "A"), make_event(5.0, 8.0, "B"), make_event(5.0, 8.0, "C")]
        block = reconstruct_block(events, 1, 29.97)
        assert block.event_indices == [0, 1]
        assert len(block.lines) == 2

    def test_nearest_sibling_wins(self, make_event):
        events = [
            make_event(5.0, 8.0, "A"),
            make_event(5.01, 8.0, "C"),
            make_event(5.02, 8.02, "B"),
        ]
        assert sibling_indices(events, 2, 29.97) == [1, 0]
        assert reconstruct_block(events, 2, 29.97).event_indices == [1, 2]

    def test_scan_stops_at_first_mismatch(self, make_event):
        events = [make_event(5.0, 8.0, "A"), make_event(5.0, 9.0, "X"), make_event(5.0, 8.0, "B")]
        assert reconstruct_block(events, 2, 29.97).event_indices == [2]

    def test_tolerance_is_one_frame(self, make_event):
        one_frame = [make_event(5.0, 8.0, "A"), make_event(5.0 + 1 / 30, 8.0, "B")]
        assert reconstruct_block(one_frame, 0).event_indices == [0, 1]
        two_frames = [make_event(5.0, 8.0, "A"), make_event(5.0 + 2 / 30, 8.0, "B")]
        assert reconstruct_block(two_frames, 0).event_indices == [0]

    def test_out_of_range_anchor(self, make_event):
        with pytest.raises(IndexError):
            reconstruct_block([make_event(0.0, 1.0, "A")], 1)


class TestIterBlocks:
    def test_each_event_used_once(self, legacy_payload):
        document, events = load_document(legacy_payload)
        blocks = list(iter_blocks(events, document.fps))
        assert [b.event_indices for b in blocks] == [[0], [1, 2], [3]]

    def test_three_coincident_events_each_used_once(self, make_event):
        events = [make_event(5.0, 8.0, "A"), make_event(5.0, 8.0, "B"), make_event(5.0, 8.0, "C")]
        blocks = list(iter_blocks(events, 29.97))
        assert [b.event_indices for b in blocks] == [[0, 1], [2]]
        assert [b.lines for b in blocks] == [["A", "B"], ["C"]]

    def test_empty(self):
        assert list(iter_blocks([])) == []


class TestLocateActive:
    @pytest.fixture
    def events(self, make_event):
        return [
            make_event(1.0, 2.0, "a"),
            make_event(3.0, 4.0, "b"),
            make_event(3.0, 4.0, "c"),
            make_event(7.0, 8.0, "d"),
        ]

    def test_shared_start_selects_last(self, events):
        assert locate_active(events, 3.0) == 2

    def test_before_first(self, events):
        assert locate_active(events, 0.5) == -1

    def test_after_last(self, events):
        assert locate_active(events, 100.0) == 3

    def test_half_frame_slack(self, events):
        assert locate_active(events, 2.99) == 2
        assert locate_active(events, 2.98) == 0

    def test_no_events(self):
        assert locate_active([], 1.0) == -1
