"""Pop-on block reconstruction from over-segmented caption events.

WHY: Many import pipelines write each row of a two-line pop-on caption as
its own event with identical timing. Rendering those events one at a time
shows half a caption; laying them out independently puts both rows on the
default bottom row. The block has to be rebuilt before placement.

HOW: Starting at an anchor event, scan backward and then forward while the
neighbour's start AND end are both within one frame of the anchor's. Stop
at the first neighbour that is out of tolerance. Keep the anchor plus the
single nearest qualifying neighbour, and take the first line and first
placement of each.

RULES:
- Tolerance is one frame duration (1/fps, 1/30 when fps is unknown)
- A block never has more than two lines
- Nearest neighbour = smallest |d_start| + |d_end|; the earlier one wins ties
- A lone anchor contributes up to two of its own lines
- Excluded events (already in an earlier block) are never taken as siblings
- Lines stay in event order; resolve_placement() normalizes row order later
"""

from __future__ import annotations

import logging
from typing import Collection, Iterator, Sequence

from cc608_engine.core.models import Block, CaptionEvent
from cc608_engine.core.timecode import frame_duration

logger = logging.getLogger(__name__)

# Absorbs float noise when timings sit exactly one frame apart.
_EPSILON = 1e-9


def _within(a: CaptionEvent, b: CaptionEvent, tolerance: float) -> bool:
    return abs(a.start - b.start) <= tolerance and abs(a.end - b.end) <= tolerance


def _distance(a: CaptionEvent, b: CaptionEvent) -> float:
    return abs(a.start - b.start) + abs(a.end - b.end)


def sibling_indices(events: Sequence[CaptionEvent], anchor_index: int, fps: float | None = None) -> list[int]:
    """Indices of the contiguous neighbours sharing the anchor's timing."""
    anchor = events[anchor_index]
    tolerance = frame_duration(fps) + _EPSILON
    found: list[int] = []

    i = anchor_index - 1
    while i >= 0 and _within(events[i], anchor, tolerance):
        found.append(i)
        i -= 1

    i = anchor_index + 1
    while i < len(events) and _within(events[i], anchor, tolerance):
        found.append(i)
        i += 1

    return found


def reconstruct_block(
    events: Sequence[CaptionEvent],
    anchor_index: int,
    fps: float | None = None,
    exclude: Collection[int] = (),
) -> Block:
    """Rebuild the on-air block that contains events[anchor_index].

    Args:
        events: Events sorted by start time.
        anchor_index: Index of the event the block is built around.
        fps: Document frame rate, used for the timing tolerance.
        exclude: Event indices that may not be picked as the sibling, for
                 instance events already placed in an earlier block.

    Returns:
        Block spanning the anchor's start/end with at most two lines.

    Raises:
        IndexError: If anchor_index is out of range.
    """
    if not 0 <= anchor_index < len(events):
        raise IndexError("anchor_index {} out of range for {} events".format(anchor_index, len(events)))
    anchor = events[anchor_index]
    siblings = [i for i in sibling_indices(events, anchor_index, fps) if i not in exclude]

    if not siblings:
        lines = list(anchor.lines[:2])
        return Block(
            start=anchor.start,
            end=anchor.end,
            lines=lines,
            placements=[anchor.placement_for(i) for i in range(len(lines))],
            event_indices=[anchor_index],
        )

    # equal distances go to the earlier event
    nearest = min(siblings, key=lambda i: (_distance(events[i], anchor), i))
    if len(siblings) > 1:
        logger.debug(
            "Event %d has %d timing siblings; keeping only event %d",
            anchor_index, len(siblings), nearest,
        )

    indices = sorted([anchor_index, nearest])
    lines: list[str] = []
    placements = []
    for i in indices:
        event = events[i]
        lines.append(event.lines[0] if event.lines else "")
        placements.append(event.placement_for(0))
    return Block(
        start=anchor.start,
        end=anchor.end,
        lines=lines,
        placements=placements,
        event_indices=indices,
    )


def iter_blocks(events: Sequence[CaptionEvent], fps: float | None = None) -> Iterator[Block]:
    """Yield every block of a document once, in start order.

    Events already used by an earlier block are not used again, either as
    anchors or as siblings.
    """
    consumed: set[int] = set()
    for index in range(len(events)):
        if index in consumed:
            continue
        block = reconstruct_block(events, index, fps, exclude=consumed)
        consumed.update(block.event_indices)
        yield block
