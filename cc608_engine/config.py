"""Configuration constants and .env loading.

WHY: Frame-rate defaults, drop-frame strictness, and the API bind address
differ between facilities. Keeping them as plain module-level values (with
environment overrides) means nobody has to dig through the timecode or
placement code to change a default.

HOW: python-dotenv loads the .env file on import. Each setting is read from
the environment with a literal fallback. load_document_defaults() builds a
Document from the defaults for callers that receive caption data without
frame-rate metadata.

RULES:
- Every default can be overridden via an environment variable
- Boolean variables accept "true"/"false" (case-insensitive)
- Grid and safe-area constants are NOT configurable; they are CEA-608 facts
  and live in core/placement.py
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring non-numeric %s=%r, using %s", name, raw, default
        )
        return default


# ---------------------------------------------------------------------------
# Timecode defaults
# ---------------------------------------------------------------------------

DEFAULT_FPS = _env_float("CC608_DEFAULT_FPS", 29.97)
"""Frame rate assumed when a document does not declare one."""

DEFAULT_DROP_FRAME = _env_bool("CC608_DEFAULT_DROP_FRAME", "true")
"""Drop-frame default for documents that do not declare it."""

STRICT_DROP_FRAME = _env_bool("CC608_STRICT_DROP_FRAME", "false")
"""Reject labels that drop-frame numbering never produces (instead of warning)."""

# ---------------------------------------------------------------------------
# Logging and API
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("CC608_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

API_HOST = os.getenv("CC608_API_HOST", "0.0.0.0")
API_PORT = int(_env_float("CC608_API_PORT", 8000))


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for an entry point (CLI or API server).

    Library modules never call this; they only create module loggers.
    """
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
    )


def load_document_defaults():
    """Return a Document populated from the configured defaults.

    WHY: Caption payloads from older tools often omit fps/dropFrame. The
    engine still needs a frame duration for tolerances and timecode math.

    RULES:
    - No start timecode label (media time zero displays as 00:00:00:00)
    """
    from cc608_engine.core.models import Document

    return Document(fps=DEFAULT_FPS, drop_frame=DEFAULT_DROP_FRAME)
