"""Tests for mid-row style token expansion.

WHY: Every style token is a control code that occupies a blank cell on a
real decoder. If the tokenizer drops or double-counts tokens, line length
(and therefore wrapping and safe-area checks) silently changes.

HOW: Build cells for short lines and check characters, styles, clamping
against the starting column, and trailing-blank trimming.
"""

from __future__ import annotations

from cc608_engine.core.models import CellStyle
from cc608_engine.core.tokenizer import (
    STYLE_TOKENS,
    strip_style_tokens,
    tokenize_line,
    visible_cell_count,
)


class TestTokenizeLine:
    def test_plain_text_is_white(self):
        cells = tokenize_line("AB")
        assert [c.character for c in cells] == ["A", "B"]
        assert all(c.style == CellStyle() for c in cells)

    def test_italic_token_occupies_one_blank_cell(self):
        cells = tokenize_line("{I}Hi", start_col=0)
        assert [c.character for c in cells] == [" ", "H", "i"]
        assert all(c.style.italic for c in cells)
        assert all(c.style.color == "white" for c in cells)

    def test_clamp_after_expansion(self):
        cells = tokenize_line("{I}Hi", start_col=30)
        assert [c.character for c in cells] == [" ", "H"]

    def test_token_cell_carries_new_style(self):
        cells = tokenize_line("A{Gr}B")
        assert cells[0].style.color == "white"
        assert cells[1].character == " "
        assert cells[1].style.color == "green"
        assert cells[2].style.color == "green"

    def test_color_resets_italic(self):
        cells = tokenize_line("{I}a{Y}b")
        assert cells[1].style.italic is True
        assert cells[3].style == CellStyle(color="yellow", italic=False, underline=False)

    def test_underlined_color(self):
        cells = tokenize_line("{CyU}x")
        assert cells[1].style == CellStyle(color="cyan", italic=False, underline=True)

    def test_italic_preserves_underline_and_color(self):
        cells = tokenize_line("{MaU}a{I}b")
        assert cells[3].style == CellStyle(color="magenta", italic=True, underline=True)

    def test_italic_underline_sets_both(self):
        cells = tokenize_line("{IU}a")
        assert cells[1].style == CellStyle(color="white", italic=True, underline=True)

    def test_plain_color_clears_underline(self):
        cells = tokenize_line("{WhU}a{Wh}b")
        assert cells[1].style.underline is True
        assert cells[3].style.underline is False

    def test_trailing_blanks_trimmed(self):
        cells = tokenize_line("Hi{R}   ")
        assert [c.character for c in cells] == ["H", "i"]

    def test_trailing_token_trimmed_after_clamp(self):
        # 31 characters + token fills 32 cells; the token is the last blank
        cells = tokenize_line("X" * 31 + "{I}")
        assert len(cells) == 31

    def test_clamps_to_32_columns(self):
        assert len(tokenize_line("A" * 40)) == 32
        assert len(tokenize_line("A" * 40, start_col=8)) == 24

    def test_unknown_brace_group_is_literal(self):
        cells = tokenize_line("{foo}")
        assert "".join(c.character for c in cells) == "{foo}"

    def test_every_token_recognised(self):
        for token in STYLE_TOKENS:
            cells = tokenize_line("{" + token + "}x")
            assert len(cells) == 2, token

    def test_empty(self):
        assert tokenize_line("") == []


class TestTokenHelpers:
    def test_visible_cell_count_counts_tokens(self):
        assert visible_cell_count("{I}Hi") == 3
        assert visible_cell_count("Hello") == 5

    def test_strip_style_tokens(self):
        assert strip_style_tokens("{I} Hi {GrU}there") == "Hi there"
        assert strip_style_tokens("{foo}") == "{foo}"
