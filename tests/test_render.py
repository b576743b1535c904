"""End-to-end tests for per-tick render plan evaluation."""

from __future__ import annotations

import pytest

from cc608_engine.adapters.legacy_import import load_document
from cc608_engine.core.placement import GeometryCache
from cc608_engine.core.render import evaluate


@pytest.fixture
def loaded(legacy_payload):
    return load_document(legacy_payload)


class TestEvaluate:
    def test_split_block_renders_both_rows(self, loaded):
        document, events = loaded
        plan = evaluate(events, document, 6.0)
        assert plan.event_index == 2
        assert [(line.row, line.col) for line in plan.lines] == [(14, 4), (15, 4)]
        assert [line.text for line in plan.lines] == ["TOP LINE", "BOTTOM LINE"]
        assert len(plan.lines[0].cells) == len("TOP LINE")
        assert plan.lines[0].pixels is None

    def test_text_with_bar_renders_two_default_rows(self, loaded):
        document, events = loaded
        plan = evaluate(events, document, 2.0)
        assert [line.text for line in plan.lines] == ["HELLO", "THERE"]
        assert [line.row for line in plan.lines] == [14, 15]

    def test_style_tokens_become_cells(self, loaded):
        document, events = loaded
        plan = evaluate(events, document, 9.0)
        (line,) = plan.lines
        assert [c.character for c in line.cells] == [" ", "H", "i"]
        assert all(c.style.italic for c in line.cells)

    def test_nothing_on_screen_at_end(self, loaded):
        document, events = loaded
        plan = evaluate(events, document, 8.0)
        assert plan.is_empty

    def test_nothing_before_first_event(self, loaded):
        document, events = loaded
        plan = evaluate(events, document, 0.5)
        assert plan.is_empty
        assert plan.event_index == -1

    def test_gap_between_events(self, loaded):
        document, events = loaded
        assert evaluate(events, document, 4.0).is_empty

    def test_fractions(self, loaded):
        document, events = loaded
        line = evaluate(events, document, 2.0).lines[1]
        assert line.left_fraction == pytest.approx(0.1)
        assert line.vertical_fraction == pytest.approx(0.1 + 14.5 * 0.8 / 15)

    def test_pixels_with_surface_and_cache(self, loaded):
        document, events = loaded
        cache = GeometryCache()
        plan = evaluate(events, document, 6.0, surface=(1920, 1080), aspect_is_constrained=True, cache=cache)
        assert len(cache) == 1
        first = plan.lines[0]
        assert first.pixels is not None
        # column 4 inside the centred 1440 px aperture
        assert first.pixels.x == pytest.approx(240 + 144 + 4 * 1440 * 0.8 / 32)
        assert first.left_fraction * 1920 == pytest.approx(first.pixels.x)

    def test_to_dict(self, loaded):
        document, events = loaded
        data = evaluate(events, document, 6.0, surface=(640, 480)).to_dict()
        assert data["eventIndex"] == 2
        assert data["lines"][0]["row"] == 14
        assert data["lines"][0]["cells"][0] == {"char": "T", "color": "white", "italic": False, "underline": False}
        assert set(data["lines"][0]["pixels"]) == {"x", "y", "cellWidth", "rowHeight"}

    def test_no_events(self, df_document):
        assert evaluate([], df_document, 1.0).is_empty
