"""Tests for the legacy caption document adapter.

WHY: Every quirk of old payloads (alias keys, sparse placement maps, string
times, zero-length events, upside-down rows) is settled here. If one slips
through, the core sees a shape it was never meant to handle.
"""

from __future__ import annotations

import copy

import jsonschema
import pytest

from cc608_engine import config
from cc608_engine.adapters.legacy_import import (
    document_to_dict,
    event_from_dict,
    events_from_dicts,
    load_document,
    normalize_placements,
    parse_time,
)
from cc608_engine.core.models import Placement
from cc608_engine.errors import DomainClampWarning, ParseError


class TestLoadDocument:
    def test_document_metadata(self, legacy_payload):
        document, _ = load_document(legacy_payload)
        assert document.fps == 29.97
        assert document.drop_frame is True
        assert document.start_timecode_label == "01:00:00;00"

    def test_events_sorted_stably(self, legacy_payload):
        _, events = load_document(legacy_payload)
        assert [e.id for e in events] == ["c1", "c2a", "c2b", "c3"]

    def test_text_split_on_bar(self, legacy_payload):
        _, events = load_document(legacy_payload)
        assert events[0].lines == ["HELLO", "THERE"]
        assert events[0].placement == [None, None]

    def test_array_and_sparse_placements(self, legacy_payload):
        _, events = load_document(legacy_payload)
        assert events[1].placement == [Placement(14, 4)]
        assert events[2].placement == [Placement(15, 4)]

    def test_payload_not_modified(self, legacy_payload):
        before = copy.deepcopy(legacy_payload)
        load_document(legacy_payload)
        assert legacy_payload == before

    def test_aliases_and_events_key(self):
        document, events = load_document({
            "frameRate": 25,
            "drop_frame": False,
            "startTimecodeLabel": "10:00:00:00",
            "events": [{"start": 0, "end": 1, "text": "x"}],
        })
        assert document.fps == 25.0
        assert document.drop_frame is False
        assert document.start_timecode_label == "10:00:00:00"
        assert len(events) == 1

    def test_config_defaults(self):
        document, events = load_document({})
        assert document.fps == config.DEFAULT_FPS
        assert document.drop_frame == config.DEFAULT_DROP_FRAME
        assert document.start_timecode_label is None
        assert events == []

    def test_drop_frame_inferred_from_start_label(self):
        document, _ = load_document({"fps": 29.97, "startTc": "01:00:00;00"})
        assert document.drop_frame is True
        document, _ = load_document({"fps": 29.97, "startTc": "01:00:00:00"})
        assert document.drop_frame is False

    def test_start_label_separator_follows_flag(self):
        document, _ = load_document({"fps": 29.97, "dropFrame": True, "startTc": "01:00:00:00"})
        assert document.start_timecode_label == "01:00:00;00"

    @pytest.mark.parametrize("payload", [
        {"cues": [{"start": 1}]},
        {"fps": "fast"},
        {"fps": 0},
        {"cues": [{"start": 0, "end": 1, "sccPlacement": "top"}]},
        {"cues": [{"start": 0, "end": 1, "sccPlacement": {"row": 14, "col": 0}}]},
    ])
    def test_schema_rejects(self, payload):
        with pytest.raises(jsonschema.ValidationError):
            load_document(payload)

    def test_bad_time_string(self):
        with pytest.raises(ParseError):
            load_document({"cues": [{"start": "soon", "end": 2}]})


class TestEvents:
    def test_string_times(self):
        event = event_from_dict({"start": "00:00:01.500", "end": "2.5", "text": "x"})
        assert (event.start, event.end) == (1.5, 2.5)

    def test_parse_time_number(self):
        assert parse_time(3) == 3.0

    def test_lines_preferred_over_text(self):
        event = event_from_dict({"start": 0, "end": 1, "text": "ignored", "lines": ["A", " ", "B", "C"]})
        assert event.lines == ["A", "B"]

    def test_placement_key_fallback(self):
        event = event_from_dict({"start": 0, "end": 1, "lines": ["A"], "placement": [{"row": 12, "col": 0}]})
        assert event.placement == [Placement(12, 0)]

    def test_zero_length_event_stretched_to_one_frame(self):
        (event,) = events_from_dicts([{"start": 2.0, "end": 2.0, "text": "x"}], fps=25)
        assert event.end == pytest.approx(2.04)

    def test_inverted_rows_swapped_with_text(self):
        (event,) = events_from_dicts([{
            "start": 0, "end": 1,
            "lines": ["BOTTOM", "TOP"],
            "sccPlacement": [{"row": 15, "col": 0}, {"row": 14, "col": 2}],
        }])
        assert event.lines == ["TOP", "BOTTOM"]
        assert event.placement == [Placement(14, 2), Placement(15, 0)]

    def test_out_of_range_placement_clamped_on_import(self):
        with pytest.warns(DomainClampWarning):
            event = event_from_dict({"start": 0, "end": 1, "lines": ["A"], "sccPlacement": [{"row": 20}]})
        assert event.placement == [Placement(15, 0)]


class TestNormalizePlacements:
    def test_sparse_map_with_gaps(self):
        assert normalize_placements({"1": {"row": 15, "col": 0}}, 2) == [None, Placement(15, 0)]

    def test_out_of_range_keys_ignored(self):
        assert normalize_placements({"5": {"row": 15, "col": 0}}, 1) == [None]

    def test_non_numeric_key_ignored(self):
        assert normalize_placements({"first": {"row": 15, "col": 0}}, 1) == [None]

    def test_list_longer_than_lines(self):
        raw = [{"row": 14, "col": 0}, {"row": 15, "col": 0}]
        assert normalize_placements(raw, 1) == [Placement(14, 0)]

    def test_empty_placement_object_means_default(self):
        assert normalize_placements([{}], 1) == [None]

    def test_none(self):
        assert normalize_placements(None, 2) == [None, None]


class TestExport:
    def test_document_to_dict_reloads(self, legacy_payload):
        document, events = load_document(legacy_payload)
        reloaded_document, reloaded = load_document(document_to_dict(document, events))
        assert reloaded_document == document
        assert reloaded == events
