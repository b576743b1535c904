"""Mid-row style token expansion into decoder-accurate display cells.

WHY: Caption text stored by the editor carries mid-row style changes as
inline tokens ({I}, {GrU}, ...). On a real CEA-608 decoder every mid-row
code is a control code that also occupies one character cell, displayed as
a blank. Dropping tokens before measuring a line makes it look shorter than
it is on air, which breaks wrapping and safe-area checks.

HOW: tokenize_line() splits the text on the token pattern and walks the
pieces with a running CellStyle. Literal characters become one cell each in
the current style; each token updates the style and emits one blank cell in
the *new* style. The result is clamped to the columns left after the line's
starting column, then trailing blank cells are trimmed.

RULES:
- Initial style: white, not italic, not underlined
- Color tokens set color, set underline from the "U" variant, clear italic
- {I} sets italic and keeps the current underline; {IU} sets both
- Every token occupies exactly one cell
- Clamp after expansion, never before; trim trailing blanks after clamping
- Unknown brace groups ({foo}) are ordinary text
"""

from __future__ import annotations

import re

from cc608_engine.core.models import CellStyle, DisplayCell

GRID_COLUMNS = 32

# token -> (color or None for italics, underline)
STYLE_TOKENS: dict[str, tuple[str | None, bool]] = {
    "Wh": ("white", False),
    "WhU": ("white", True),
    "Gr": ("green", False),
    "GrU": ("green", True),
    "Bl": ("blue", False),
    "BlU": ("blue", True),
    "Cy": ("cyan", False),
    "CyU": ("cyan", True),
    "R": ("red", False),
    "RU": ("red", True),
    "Y": ("yellow", False),
    "YU": ("yellow", True),
    "Ma": ("magenta", False),
    "MaU": ("magenta", True),
    "I": (None, False),
    "IU": (None, True),
}

# Longer alternatives first so "WhU" is not read as "Wh" + "U}".
_TOKEN_NAMES = sorted(STYLE_TOKENS, key=len, reverse=True)
TOKEN_RE = re.compile(r"\{(" + "|".join(_TOKEN_NAMES) + r")\}")
_LOOSE_TOKEN_RE = re.compile(r"\{\s*(" + "|".join(_TOKEN_NAMES) + r")\s*\}\s*")

DEFAULT_STYLE = CellStyle()


def apply_token(style: CellStyle, token: str) -> CellStyle:
    """Return the style in effect after a mid-row token.

    Raises:
        KeyError: If token is not a known style token name.
    """
    color, underline = STYLE_TOKENS[token]
    if color is None:
        # {I} keeps underline as-is, {IU} turns it on
        return CellStyle(color=style.color, italic=True, underline=style.underline or underline)
    return CellStyle(color=color, italic=False, underline=underline)


def expand_cells(text: str) -> list[DisplayCell]:
    """Expand a line into cells without any clamping."""
    cells: list[DisplayCell] = []
    style = DEFAULT_STYLE
    parts = TOKEN_RE.split(text or "")
    # re.split with one group alternates literal, token, literal, ...
    for i, piece in enumerate(parts):
        if i % 2 == 1:
            style = apply_token(style, piece)
            cells.append(DisplayCell(" ", style))
        else:
            cells.extend(DisplayCell(ch, style) for ch in piece)
    return cells


def available_columns(start_col: int) -> int:
    col = max(0, min(GRID_COLUMNS - 1, int(start_col)))
    return GRID_COLUMNS - col


def trim_trailing_blanks(cells: list[DisplayCell]) -> list[DisplayCell]:
    end = len(cells)
    while end > 0 and cells[end - 1].is_blank:
        end -= 1
    return cells[:end]


def tokenize_line(text: str, start_col: int = 0) -> list[DisplayCell]:
    """Turn one caption line into the cells a decoder would display.

    Args:
        text: Line text, possibly containing style tokens.
        start_col: Column the line starts at (0..31, clamped).

    Returns:
        Cells clamped to 32 - start_col, with trailing blanks removed.
    """
    cells = expand_cells(text)
    return trim_trailing_blanks(cells[:available_columns(start_col)])


def visible_cell_count(text: str) -> int:
    """Number of cells the line occupies on air (tokens count as one)."""
    return len(expand_cells(text))


def strip_style_tokens(text: str) -> str:
    """Remove style tokens (and the whitespace that follows them) for plain output."""
    return _LOOSE_TOKEN_RE.sub("", text or "")
