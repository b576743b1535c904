"""Per-tick render plan evaluation.

WHY: The host player drives the preview from its own timer. Rather than
subscribing to player events, the host asks "what is on screen at t?" and
gets back pure data it can paint however it likes.

HOW: evaluate() chains the core components:
  locate_active -> reconstruct_block -> resolve_placement -> tokenize_line
and attaches grid fractions (and pixel geometry when a surface is given)
to every line.

RULES:
- Events are half-open [start, end); nothing is shown at t >= end
- No state is kept between calls; pass a GeometryCache to reuse pixel math
- Logging here is DEBUG only (it runs once per frame)
"""

from __future__ import annotations

import logging
from typing import Sequence

from cc608_engine.core.blocks import reconstruct_block
from cc608_engine.core.locator import locate_active
from cc608_engine.core.models import CaptionEvent, Document, LinePlan, RenderPlan
from cc608_engine.core.placement import (
    GeometryCache,
    col_to_horizontal_fraction,
    pixel_position,
    resolve_placement,
    row_to_vertical_fraction,
)
from cc608_engine.core.tokenizer import tokenize_line

logger = logging.getLogger(__name__)


def evaluate(
    events: Sequence[CaptionEvent],
    document: Document,
    time: float,
    surface: tuple[float, float] | None = None,
    aspect_is_constrained: bool = False,
    cache: GeometryCache | None = None,
) -> RenderPlan:
    """Build the RenderPlan for the caption on screen at ``time``.

    Args:
        events: Events sorted by start.
        document: Supplies fps for locator and block tolerances.
        time: Playhead position in media seconds.
        surface: Optional (width, height) in pixels for pixel geometry and
            for the 4:3 constrained aperture.
        aspect_is_constrained: Lay columns out inside a centred 4:3 aperture.
        cache: Optional per-surface geometry cache owned by the caller.
    """
    index = locate_active(events, time, document.fps)
    if index < 0 or time >= events[index].end:
        return RenderPlan(time=time)

    block = reconstruct_block(events, index, document.fps)
    lines, placements = resolve_placement(block.lines, block.placements)

    plans: list[LinePlan] = []
    for text, placement in zip(lines, placements):
        left, cell_width = col_to_horizontal_fraction(placement.col, aspect_is_constrained, surface)
        plan = LinePlan(
            row=placement.row,
            col=placement.col,
            left_fraction=left,
            cell_width_fraction=cell_width,
            vertical_fraction=row_to_vertical_fraction(placement.row),
            cells=tokenize_line(text, placement.col),
            text=text,
        )
        if surface is not None:
            plan.pixels = pixel_position(placement.row, placement.col, surface, aspect_is_constrained, cache)
        plans.append(plan)

    logger.debug("t=%.3f -> event %d, %d line(s)", time, index, len(plans))
    return RenderPlan(time=time, event_index=index, lines=plans, block=block)
