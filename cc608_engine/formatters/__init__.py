"""Output formatter registry: pluggable report hub.

WHY: The CLI and API layers need a single lookup to find a formatter by
key. A central dict makes adding a format a matter of writing the class,
importing it here and adding one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["placement_audit"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API paths)
- Values are BaseFormatter subclasses (not instances)
- Every formatter listed here must be importable without side effects
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cc608_engine.formatters.placement_audit import PlacementAuditFormatter
from cc608_engine.formatters.render_timeline import RenderTimelineFormatter

if TYPE_CHECKING:
    from cc608_engine.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "placement_audit": PlacementAuditFormatter,
    "render_timeline": RenderTimelineFormatter,
}
