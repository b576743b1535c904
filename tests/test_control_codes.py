"""Tests for PAC and mid-row control word generation."""

from __future__ import annotations

import pytest

from cc608_engine.core.control_codes import (
    decode_mid_row,
    decode_pac,
    has_odd_parity,
    indent_for_column,
    mid_row_words,
    pac_word,
    split_word,
    with_odd_parity,
)
from cc608_engine.core.models import Placement
from cc608_engine.core.tokenizer import STYLE_TOKENS


class TestParity:
    def test_every_byte_gets_odd_parity(self):
        for byte in range(0x80):
            assert has_odd_parity(with_odd_parity(byte))

    def test_split_word_strips_parity(self):
        assert split_word("94e0") == (0x14, 0x60)

    @pytest.mark.parametrize("word", ["", "94e", "94e0a", "zzzz"])
    def test_split_word_rejects_garbage(self, word):
        with pytest.raises(ValueError):
            split_word(word)


class TestPac:
    def test_bottom_row_column_zero(self):
        assert pac_word(15, 0) == "94e0"

    def test_row_14_indent_4(self):
        assert pac_word(14, 4) == "9452"

    def test_column_rounds_down_to_indent(self):
        assert indent_for_column(13) == 12
        assert indent_for_column(31) == 28
        assert pac_word(14, 6) == pac_word(14, 4)

    def test_second_channel(self):
        assert pac_word(15, 0, channel=2) == "1ce0"

    def test_underline_bit(self):
        assert pac_word(15, 0, underline=True) == "9461"

    @pytest.mark.parametrize("row", [0, 16, -1])
    def test_bad_row(self, row):
        with pytest.raises(ValueError):
            pac_word(row)

    def test_bad_channel(self):
        with pytest.raises(ValueError):
            pac_word(15, channel=3)

    def test_decode_every_row_and_indent(self):
        for row in range(1, 16):
            for col in range(0, 32, 4):
                for channel in (1, 2):
                    assert decode_pac(pac_word(row, col, channel)) == (Placement(row=row, col=col), channel)

    def test_decode_non_pac(self):
        assert decode_pac("91ae") is None


class TestMidRow:
    def test_italics(self):
        assert mid_row_words("I") == ["91ae"]

    def test_italic_underline_is_two_words(self):
        assert mid_row_words("IU") == ["91ae", "91a1"]

    def test_second_channel(self):
        assert mid_row_words("I", channel=2) == ["19ae"]

    def test_every_style_token_has_words(self):
        for token in STYLE_TOKENS:
            words = mid_row_words(token)
            assert words
            assert all(len(w) == 4 for w in words)

    def test_decode(self):
        for token in STYLE_TOKENS:
            if token == "IU":
                continue
            assert decode_mid_row(mid_row_words(token)[0]) == token
        assert decode_mid_row("9452") is None

    def test_unknown_token(self):
        with pytest.raises(KeyError):
            mid_row_words("Pk")
