"""Adapters between external caption document payloads and the core model.

WHY: The core only understands CaptionEvent / Document dataclasses with one
placement shape. Documents produced by import tools and older editor builds
are dicts with alias keys and two placement encodings. Adapters settle that
at the boundary so the core never has to.

HOW: legacy_import.py validates a payload with jsonschema and converts it;
event_to_dict / document_to_dict go the other way for API and CLI output.

RULES:
- Adapters are pure data transformations: no file or network I/O.
- Source dicts are never modified.
"""

from cc608_engine.adapters.legacy_import import (
    document_from_dict,
    document_to_dict,
    event_from_dict,
    event_to_dict,
    events_from_dicts,
    load_document,
    normalize_placements,
)

__all__ = [
    "document_from_dict",
    "document_to_dict",
    "event_from_dict",
    "event_to_dict",
    "events_from_dicts",
    "load_document",
    "normalize_placements",
]
