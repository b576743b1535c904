"""Caption placement and timecode engine core.

WHY: The core package holds the decoder-accurate parts of the engine: the
timecode codec, the style tokenizer, the placement engine, block
reconstruction and the active cue locator. Everything outside core (API,
CLI, formatters, import adapters) is glue around these modules.

HOW: models.py defines the dataclasses, timecode.py / tokenizer.py /
placement.py / blocks.py / locator.py are the components, render.py chains
them into a per-tick RenderPlan, control_codes.py maps placements and
tokens to CEA-608 words, editing.py holds the event list edit operations.

RULES:
- Pure functions over their inputs; no module-level mutable state
- No file or network I/O in this package
- Clamp-and-warn for grid values, raise ParseError for bad timecode text
"""
