"""CEA-608 Preamble Address Codes and mid-row codes as SCC hex words.

WHY: The placement audit and the preview both need to say which control
words a placement or a style token becomes on air. A PAC can only address
columns in steps of four, so a line placed at column 13 is actually sent at
indent 12; QC needs to see that, not the requested column.

HOW: Words are two 7-bit bytes with odd parity in bit 7, written as four
lowercase hex digits ("9470"). PAC rows come from the CEA-608 row table
(first byte selects a row pair, second byte 0x40-0x5F or 0x60-0x7F selects
which row of the pair). The second byte then encodes either "white at
column 0" or an indent of 4*n columns, plus an underline bit.

RULES:
- Only data channels 1 and 2 (field 1) are supported; CC2 = CC1 first byte + 8
- Column 0 uses the white style PAC; other columns use indent PACs
- Requested columns round down to a multiple of 4 (max indent 28)
- {IU} has no single mid-row code and is sent as {I} followed by {WhU}
"""

from __future__ import annotations

from cc608_engine.core.models import Placement

# Row -> (first byte for CC1, second-byte base)
PAC_ROWS: dict[int, tuple[int, int]] = {
    1: (0x11, 0x40), 2: (0x11, 0x60),
    3: (0x12, 0x40), 4: (0x12, 0x60),
    5: (0x15, 0x40), 6: (0x15, 0x60),
    7: (0x16, 0x40), 8: (0x16, 0x60),
    9: (0x17, 0x40), 10: (0x17, 0x60),
    11: (0x10, 0x40),
    12: (0x13, 0x40), 13: (0x13, 0x60),
    14: (0x14, 0x40), 15: (0x14, 0x60),
}
_ROW_BY_BYTES = {value: row for row, value in PAC_ROWS.items()}

MID_ROW_CODES: dict[str, int] = {
    "Wh": 0x20, "WhU": 0x21,
    "Gr": 0x22, "GrU": 0x23,
    "Bl": 0x24, "BlU": 0x25,
    "Cy": 0x26, "CyU": 0x27,
    "R": 0x28, "RU": 0x29,
    "Y": 0x2A, "YU": 0x2B,
    "Ma": 0x2C, "MaU": 0x2D,
    "I": 0x2E, "IU": 0x2F,
}
_TOKEN_BY_MID_ROW = {code: token for token, code in MID_ROW_CODES.items()}

_MID_ROW_FIRST_BYTE = 0x11
_CHANNEL_OFFSET = 0x08


def _check_channel(channel: int) -> int:
    if channel not in (1, 2):
        raise ValueError("Unsupported caption channel: {!r} (expected 1 or 2)".format(channel))
    return channel


# -----------------------------------------------------------------------------
# Parity
# -----------------------------------------------------------------------------

def with_odd_parity(byte: int) -> int:
    """Set bit 7 so the byte has an odd number of one bits."""
    data = byte & 0x7F
    return data | (0x80 if bin(data).count("1") % 2 == 0 else 0x00)


def has_odd_parity(byte: int) -> bool:
    return bin(byte & 0xFF).count("1") % 2 == 1


def make_word(first: int, second: int) -> str:
    return "{:02x}{:02x}".format(with_odd_parity(first), with_odd_parity(second))


def split_word(word: str) -> tuple[int, int]:
    """Parse a four-digit hex word and strip parity from both bytes.

    Raises:
        ValueError: If the word is not four hex digits.
    """
    word = (word or "").strip()
    if len(word) != 4:
        raise ValueError("Control word must be four hex digits: {!r}".format(word))
    value = int(word, 16)
    return (value >> 8) & 0x7F, value & 0x7F


# -----------------------------------------------------------------------------
# Preamble Address Codes
# -----------------------------------------------------------------------------

def indent_for_column(col: int) -> int:
    """Largest PAC-addressable column at or before col (0, 4, ..., 28)."""
    col = max(0, min(31, int(col)))
    return min(7, col // 4) * 4


def pac_word(row: int, col: int = 0, channel: int = 1, underline: bool = False) -> str:
    """SCC word for a PAC placing a line at (row, col).

    Args:
        row: 1..15.
        col: 0..31; rounded down to the nearest indent.
        channel: Caption data channel (1 or 2).
        underline: Set the PAC's underline attribute.

    Raises:
        ValueError: If row is outside 1..15 or channel is not 1 or 2.
    """
    _check_channel(channel)
    if row not in PAC_ROWS:
        raise ValueError("PAC row out of range: {!r}".format(row))
    first, base = PAC_ROWS[row]
    if channel == 2:
        first += _CHANNEL_OFFSET
    indent = indent_for_column(col)
    second = base if indent == 0 else base + 0x10 + (indent // 4) * 2
    if underline:
        second += 1
    return make_word(first, second)


def decode_pac(word: str) -> tuple[Placement, int] | None:
    """Decode a PAC word into (placement, channel); None if not a PAC."""
    first, second = split_word(word)
    if not 0x10 <= first <= 0x1F or not 0x40 <= second <= 0x7F:
        return None
    channel = 2 if first >= 0x18 else 1
    if channel == 2:
        first -= _CHANNEL_OFFSET
    base = 0x60 if second >= 0x60 else 0x40
    row = _ROW_BY_BYTES.get((first, base))
    if row is None:
        return None
    index = second - base
    col = ((index - 0x10) // 2) * 4 if index >= 0x10 else 0
    return Placement(row=row, col=col), channel


# -----------------------------------------------------------------------------
# Mid-row codes
# -----------------------------------------------------------------------------

def mid_row_words(token: str, channel: int = 1) -> list[str]:
    """SCC words that send a style token ({IU} expands to {I}{WhU}).

    Raises:
        KeyError: If token is not a known style token.
    """
    _check_channel(channel)
    if token == "IU":
        return mid_row_words("I", channel) + mid_row_words("WhU", channel)
    first = _MID_ROW_FIRST_BYTE + (_CHANNEL_OFFSET if channel == 2 else 0)
    return [make_word(first, MID_ROW_CODES[token])]


def decode_mid_row(word: str) -> str | None:
    """Token name for a mid-row word, or None if the word is not one."""
    first, second = split_word(word)
    if first not in (0x11, 0x19) or not 0x20 <= second <= 0x2F:
        return None
    return _TOKEN_BY_MID_ROW.get(second)
