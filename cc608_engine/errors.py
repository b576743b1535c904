"""Error and warning taxonomy for the caption engine.

WHY: An authoring tool has to stay usable with imperfect data. Only one
class of problem (a timecode string that cannot be read) needs the caller
to act. Everything else (out-of-range rows, labels drop-frame numbering
would never produce) is accepted with a best-effort result but must remain
visible to QC reporting.

HOW: ParseError is a ValueError subclass raised by the codec and caught at
public boundaries (try_parse_label, the HTTP API, the CLI). The two warning
categories are UserWarning subclasses emitted through the warnings module
*and* logged, so interactive callers can ignore them while QC tooling
captures them with warnings.catch_warnings().

RULES:
- ParseError carries the offending text so UIs can highlight it
- Never substitute a default value for an unparseable label
- Clamping and drop-frame diagnostics never interrupt the calling workflow
"""

from __future__ import annotations

import logging
import warnings


class ParseError(ValueError):
    """A timecode or time string did not match an accepted format."""

    def __init__(self, message: str, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


class DomainClampWarning(UserWarning):
    """A row, column, or placement was outside the legal grid and was clamped."""


class IllegalDropFrameWarning(UserWarning):
    """A drop-frame label names a frame number that DF counting skips."""


def report(category: type[Warning], message: str, logger: logging.Logger) -> None:
    """Log a diagnostic and emit it as a warning of the given category.

    stacklevel=3 points the warning at the caller of the public operation
    that detected the problem, not at this helper.
    """
    logger.warning(message)
    warnings.warn(message, category, stacklevel=3)
