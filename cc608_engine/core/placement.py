"""Row/column placement and safe-title geometry for the 15x32 caption grid.

WHY: A CEA-608 pop-on caption is addressed by row (1..15) and column
(0..31). Legacy data arrives with rows out of range, lines stored in the
wrong order, or two lines collapsed onto one row after a careless click.
Broadcast QC rejects all of those, but an authoring tool has to keep
working with them, so this module repairs placements instead of refusing
them and makes every repair observable.

HOW:
  1. resolve_placement() picks an explicit placement (clamped) or a default
     row plus the column implied by leading-space indentation
  2. Two lines on the same row are separated (the defaulted line moves)
  3. Inverted rows swap placements AND text so line one is the top line
  4. row_to_vertical_fraction() / col_to_horizontal_fraction() map the grid
     onto the inner 80% safe-title band of the surface, optionally inside a
     centred 4:3 aperture
  5. GeometryCache memoizes per-surface pixel positions; the caller owns it
     and invalidates it on resize

RULES:
- Rows 1..15, cols 0..31; out-of-range values are clamped, never rejected
- Every clamp emits DomainClampWarning (and a log line)
- Default rows are bottom-aligned: one line -> [15], two -> [14, 15]
- Rows 12..15 vs 1..15 is a UI display policy, not enforced here
- No module-level mutable state
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from cc608_engine.core.models import Placement, PixelGeometry
from cc608_engine.core.tokenizer import GRID_COLUMNS
from cc608_engine.errors import DomainClampWarning, report

logger = logging.getLogger(__name__)

GRID_ROWS = 15
SAFE_AREA_FRACTION = 0.8
CAPTION_ASPECT = 4.0 / 3.0

_MARGIN = (1.0 - SAFE_AREA_FRACTION) / 2.0


# =============================================================================
# Clamping
# =============================================================================

def _as_int(value, default: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number):
        return default
    if math.isinf(number):
        return int(math.copysign(10 ** 6, number))
    return int(round(number))


def _changed(original, clamped: int) -> bool:
    try:
        return float(original) != clamped
    except (TypeError, ValueError):
        return True


def clamp_row(row) -> int:
    """Clamp a row into 1..15, reporting any change."""
    clamped = max(1, min(GRID_ROWS, _as_int(row, GRID_ROWS)))
    if _changed(row, clamped):
        report(DomainClampWarning, "Row {!r} clamped to {}".format(row, clamped), logger)
    return clamped


def clamp_col(col) -> int:
    """Clamp a column into 0..31, reporting any change."""
    clamped = max(0, min(GRID_COLUMNS - 1, _as_int(col, 0)))
    if _changed(col, clamped):
        report(DomainClampWarning, "Column {!r} clamped to {}".format(col, clamped), logger)
    return clamped


def clamp_placement(placement: Placement) -> Placement:
    return Placement(row=clamp_row(placement.row), col=clamp_col(placement.col))


# =============================================================================
# Resolution
# =============================================================================

def default_rows_for(line_count: int) -> list[int]:
    """Bottom-aligned default rows: 1 -> [15], 2 -> [14, 15]."""
    count = max(0, min(GRID_ROWS, int(line_count)))
    return list(range(GRID_ROWS - count + 1, GRID_ROWS + 1))


def leading_indent(text: str) -> int:
    """Number of leading spaces, used as the column of an unplaced line."""
    text = text or ""
    return len(text) - len(text.lstrip(" "))


def _separate_collision(rows: list[int], explicit: list[bool]) -> None:
    """Move one of two lines that share a row; the defaulted line moves."""
    row = rows[0]
    if explicit[0] and not explicit[1]:
        rows[1] = row + 1 if row < GRID_ROWS else row - 1
    elif explicit[1] and not explicit[0]:
        rows[0] = row - 1 if row > 1 else row + 1
    elif row < GRID_ROWS:
        rows[1] = row + 1
    else:
        rows[0] = row - 1
    logger.debug("Separated two lines sharing row %d -> %s", row, rows)


def resolve_placement(
    lines: list[str],
    explicit_placements: list[Placement | None] | None = None,
) -> tuple[list[str], list[Placement]]:
    """Compute the final placement of every line of a block.

    Args:
        lines: Block lines, top to bottom as stored.
        explicit_placements: Placement or None per line. Shorter lists are
            padded with None.

    Returns:
        (lines, placements) with the same length, possibly reordered so that
        the first line has the smaller row. Returned text has the
        indentation that produced its column removed.
    """
    explicit_placements = list(explicit_placements or [])
    defaults = default_rows_for(len(lines))
    rows: list[int] = []
    cols: list[int] = []
    texts: list[str] = []
    explicit: list[bool] = []

    for i, text in enumerate(lines):
        text = text or ""
        given = explicit_placements[i] if i < len(explicit_placements) else None
        if given is not None:
            rows.append(clamp_row(given.row))
            cols.append(clamp_col(given.col))
            explicit.append(True)
        else:
            rows.append(defaults[i] if i < len(defaults) else GRID_ROWS)
            cols.append(clamp_col(leading_indent(text)))
            explicit.append(False)
        texts.append(text.strip())

    if len(lines) == 2:
        if rows[0] == rows[1]:
            _separate_collision(rows, explicit)
        if rows[0] > rows[1]:
            rows.reverse()
            cols.reverse()
            texts.reverse()

    placements = [Placement(row=r, col=c) for r, c in zip(rows, cols)]
    return texts, placements


# =============================================================================
# Geometry
# =============================================================================

def row_to_vertical_fraction(row: int) -> float:
    """Vertical centre of a row's band, as a fraction of surface height."""
    row = clamp_row(row)
    band = SAFE_AREA_FRACTION / GRID_ROWS
    return _MARGIN + (row - 0.5) * band


def col_to_horizontal_fraction(
    col: int,
    aspect_is_constrained: bool = False,
    surface: tuple[float, float] | None = None,
) -> tuple[float, float]:
    """Left edge and cell width of a column, as fractions of surface width.

    The aperture is the full surface width, or a centred 4:3 region derived
    from the surface height when aspect_is_constrained is set. The caption
    area is the inner 80% of the aperture split into 32 columns. Without a
    surface the constrained aperture is taken to fill the frame.

    Returns:
        (left_fraction, cell_width_fraction)
    """
    col = clamp_col(col)
    aperture_left = 0.0
    aperture_width = 1.0
    if aspect_is_constrained and surface is not None:
        width, height = surface
        if width > 0 and height > 0:
            aperture_px = min(height * CAPTION_ASPECT, width)
            aperture_width = aperture_px / width
            aperture_left = (1.0 - aperture_width) / 2.0
    safe_left = aperture_left + _MARGIN * aperture_width
    cell = SAFE_AREA_FRACTION * aperture_width / GRID_COLUMNS
    return safe_left + col * cell, cell


@dataclass
class SurfaceGeometry:
    """Pixel positions of every row centre and column edge on one surface."""

    width: float
    height: float
    row_centers: list[float] = field(default_factory=list)
    col_lefts: list[float] = field(default_factory=list)
    cell_width: float = 0.0
    row_height: float = 0.0


class GeometryCache:
    """Per-surface memo of grid pixel positions.

    Keyed by (width, height, aspect_is_constrained). The host owns the cache
    and calls invalidate() when the rendering surface is resized.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[float, float, bool], SurfaceGeometry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, width: float, height: float, aspect_is_constrained: bool = False) -> SurfaceGeometry:
        key = (float(width), float(height), bool(aspect_is_constrained))
        geometry = self._entries.get(key)
        if geometry is None:
            geometry = _build_geometry(key[0], key[1], key[2])
            self._entries[key] = geometry
        return geometry

    def invalidate(self) -> None:
        self._entries.clear()


def _build_geometry(width: float, height: float, aspect_is_constrained: bool) -> SurfaceGeometry:
    surface = (width, height)
    _, cell_fraction = col_to_horizontal_fraction(0, aspect_is_constrained, surface)
    return SurfaceGeometry(
        width=width,
        height=height,
        row_centers=[row_to_vertical_fraction(r) * height for r in range(1, GRID_ROWS + 1)],
        col_lefts=[
            col_to_horizontal_fraction(c, aspect_is_constrained, surface)[0] * width
            for c in range(GRID_COLUMNS)
        ],
        cell_width=cell_fraction * width,
        row_height=SAFE_AREA_FRACTION * height / GRID_ROWS,
    )


def pixel_position(
    row: int,
    col: int,
    surface: tuple[float, float],
    aspect_is_constrained: bool = False,
    cache: GeometryCache | None = None,
) -> PixelGeometry:
    """Pixel position of a (row, col) cell on a concrete surface."""
    width, height = surface
    if cache is None:
        geometry = _build_geometry(float(width), float(height), aspect_is_constrained)
    else:
        geometry = cache.get(width, height, aspect_is_constrained)
    row = clamp_row(row)
    col = clamp_col(col)
    return PixelGeometry(
        x=geometry.col_lefts[col],
        y=geometry.row_centers[row - 1],
        cell_width=geometry.cell_width,
        row_height=geometry.row_height,
    )
