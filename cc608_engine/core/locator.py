"""Active cue lookup for a playhead time.

Binary search for the last event whose start is at or before the query
time, with half a frame of slack for player clock jitter. Called once per
rendering tick, so it must stay O(log n) and allocation-free.
"""

from __future__ import annotations

from typing import Sequence

from cc608_engine.core.models import CaptionEvent
from cc608_engine.core.timecode import frame_duration


def locate_active(events: Sequence[CaptionEvent], t: float, fps: float | None = None) -> int:
    """Index of the greatest event with start <= t + half a frame, or -1.

    Events must be sorted ascending by start. When several events share a
    start the last one wins, so a query exactly on a boundary selects the
    event that begins there.
    """
    limit = t + frame_duration(fps) / 2.0
    lo, hi = 0, len(events)
    while lo < hi:
        mid = (lo + hi) // 2
        if events[mid].start <= limit:
            lo = mid + 1
        else:
            hi = mid
    return lo - 1
