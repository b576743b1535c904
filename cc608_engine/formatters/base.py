"""Abstract base formatter and output container.

WHY: The CLI and API both need to export a caption document in several
report shapes without knowing each one. A shared interface lets them look a
formatter up by key and write whatever it returns.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method taking the Document and its events. FormatterOutput bundles a file
suffix with its content and MIME type.

RULES:
- ``format()`` returns a list (one item for every current formatter)
- ``suffix`` starts with a hyphen, e.g. ``"-placement-audit.json"``
- The caller prepends the source filename stem
- Formatters never mutate the events they are given
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from cc608_engine.core.models import CaptionEvent, Document


@dataclass
class FormatterOutput:
    """One output file produced by a formatter.

    Attributes:
        suffix: File suffix appended to the source stem.
        content: File content as a string.
        media_type: MIME type, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for caption document formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter, implement ``name`` and ``format()``
    3. Register it in FORMATTERS in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Placement audit JSON'."""

    @abstractmethod
    def format(self, document: Document, events: list[CaptionEvent]) -> list[FormatterOutput]:
        """Convert a document and its time-sorted events into output files."""
