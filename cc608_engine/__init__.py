"""CEA-608 caption placement and timecode engine.

WHY: Broadcast caption tooling needs decoder-accurate behaviour in a few
small places: drop-frame timecode math, row/column placement inside the
15x32 caption grid, pop-on block reconstruction, and mid-row style tokens
that occupy a display cell. Getting any of these wrong produces files a
broadcast QC pass rejects. This package holds that logic, free of any UI,
player, or file-format code.

HOW: Four layers. core (pure functions over CaptionEvent lists and a
Document), adapters (normalize legacy import payloads into the core data
model), formatters (QC and preview outputs), and the outer surfaces (CLI and
a small HTTP API). Each layer only depends on the ones below it.

RULES:
- Core functions are pure; the engine never retains event objects
- Stored event times are media time; start-timecode offsets are only applied
  at display/export boundaries
- Out-of-range placement data is clamped and reported, never rejected
"""

__version__ = "0.1.0"
