"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and the OpenAPI documentation served at /docs.

HOW: Each endpoint has its own request and response model. Document
metadata (fps, drop frame, start timecode) is shared through a base model
so every timecode endpoint accepts the same fields. Caption document
payloads for /render and /exports stay plain dicts: they are validated by
the import adapter's JSON schema, not by pydantic.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Defaults for document metadata come from cc608_engine.config
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from cc608_engine import config


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class LabelStyle(str, Enum):
    """Label style produced by /timecode/to-label."""

    smpte = "smpte"
    generic = "generic"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class DocumentSettings(BaseModel):
    """Frame-rate metadata shared by the timecode endpoints."""

    fps: float = Field(
        default=config.DEFAULT_FPS,
        gt=0,
        description="Nominal frame rate (23.976, 24, 25, 29.97, 30, 59.94, ...).",
    )
    drop_frame: bool = Field(
        default=config.DEFAULT_DROP_FRAME,
        description="Use drop-frame numbering (only applied at 29.97 / 59.94).",
    )
    start_timecode_label: Optional[str] = Field(
        default=None,
        description="SMPTE label assigned to media time zero, e.g. '01:00:00;00'.",
    )


class ToLabelRequest(DocumentSettings):
    """Convert media seconds to a display label."""

    seconds: float = Field(description="Media time in seconds (negative values clamp to 0).")
    style: LabelStyle = Field(
        default=LabelStyle.smpte,
        description="'smpte' for HH:MM:SS:FF / HH:MM:SS;FF, 'generic' for HH:MM:SS.mmm.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {"seconds": 60.06, "fps": 29.97, "drop_frame": True, "style": "smpte"}
        ]
    }}


class ToSecondsRequest(DocumentSettings):
    """Parse a display label back into media seconds."""

    label: str = Field(description="SMPTE (HH:MM:SS:FF) or generic (HH:MM:SS.mmm) label.")
    strict: Optional[bool] = Field(
        default=None,
        description="Reject labels drop-frame numbering never produces. Defaults to server config.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {"label": "00:01:00;02", "fps": 29.97, "drop_frame": True}
        ]
    }}


class RenderRequest(BaseModel):
    """Evaluate what is on screen at one playhead time."""

    document: Dict[str, Any] = Field(
        description="Caption document payload (fps, dropFrame, startTc, cues).",
    )
    time: float = Field(description="Playhead position in media seconds.")
    surface_width: Optional[float] = Field(
        default=None, gt=0, description="Rendering surface width in pixels.",
    )
    surface_height: Optional[float] = Field(
        default=None, gt=0, description="Rendering surface height in pixels.",
    )
    aspect_is_constrained: bool = Field(
        default=False,
        description="Lay columns out inside a centred 4:3 caption aperture.",
    )


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ToLabelResponse(BaseModel):
    label: str = Field(description="Formatted label.")
    seconds: float = Field(description="Media seconds that were formatted.")
    drop_frame_applied: bool = Field(description="True if drop-frame math was used.")


class ToSecondsResponse(BaseModel):
    seconds: float = Field(description="Media time in seconds (start offset removed).")
    warnings: List[str] = Field(
        default_factory=list,
        description="Drop-frame diagnostics raised while parsing.",
    )


class DisplayCellModel(BaseModel):
    char: str = Field(description="Character shown in the cell (space for a control code).")
    color: str = Field(description="Foreground color name.")
    italic: bool = Field(description="Italic attribute.")
    underline: bool = Field(description="Underline attribute.")


class RenderLine(BaseModel):
    row: int = Field(description="Grid row, 1 (top) to 15 (bottom).")
    col: int = Field(description="Starting column, 0 to 31.")
    left_fraction: float = Field(description="Left edge as a fraction of surface width.")
    cell_width_fraction: float = Field(description="Cell width as a fraction of surface width.")
    vertical_fraction: float = Field(description="Row centre as a fraction of surface height.")
    text: str = Field(description="Line text including style tokens.")
    cells: List[DisplayCellModel] = Field(description="Styled display cells.")
    pixels: Optional[Dict[str, float]] = Field(
        default=None,
        description="Pixel geometry (x, y, cellWidth, rowHeight) when a surface was supplied.",
    )


class RenderResponse(BaseModel):
    time: float = Field(description="Playhead time evaluated.")
    timecode: str = Field(description="Display label for the playhead time.")
    event_index: int = Field(description="Index of the active event, -1 when nothing is shown.")
    lines: List[RenderLine] = Field(description="Lines on screen, top to bottom.")
    warnings: List[str] = Field(
        default_factory=list,
        description="Clamp and drop-frame diagnostics raised while evaluating.",
    )


class FormatInfo(BaseModel):
    """Description of an available export format."""

    key: str = Field(description="Format identifier used in /exports/{format_key}.")
    name: str = Field(description="Human-readable format name.")
    suffix: str = Field(description="File suffix produced (e.g. '-placement-audit.json').")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
