"""FastAPI application exposing the caption engine over HTTP.

WHY: Editors, import pipelines and QC scripts written in other stacks need
the same timecode math and placement rules as the desktop preview. An HTTP
API with OpenAPI docs lets them call the engine instead of reimplementing
drop-frame arithmetic or PAC tables.

HOW: A single FastAPI app exposes endpoints grouped by tags:
  timecode  POST /timecode/to-label, POST /timecode/to-seconds
  render    POST /render
  exports   GET /formats, POST /exports/{format_key}
  health    GET /health
Caption document payloads are converted with the legacy import adapter
(jsonschema-validated). Diagnostics raised while handling a request are
captured and returned alongside the result.

RULES:
- ParseError and schema validation failures -> 422 with ErrorResponse
- Unknown export format -> 404 with ErrorResponse
- The server keeps no state between requests
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Dict, List

import jsonschema
from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import Response

from cc608_engine import __version__, config
from cc608_engine.adapters.legacy_import import load_document
from cc608_engine.core.models import Document
from cc608_engine.core.placement import GeometryCache
from cc608_engine.core.render import evaluate
from cc608_engine.core.timecode import (
    media_to_label,
    seconds_to_generic,
    try_parse_label,
    uses_drop_frame,
)
from cc608_engine.errors import DomainClampWarning, IllegalDropFrameWarning, ParseError
from cc608_engine.formatters import FORMATTERS
from cc608_engine.server.models import (
    DisplayCellModel,
    DocumentSettings,
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    LabelStyle,
    RenderLine,
    RenderRequest,
    RenderResponse,
    ToLabelRequest,
    ToLabelResponse,
    ToSecondsRequest,
    ToSecondsResponse,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="CEA-608 Caption Engine API",
    description=(
        "Timecode conversion (NDF/DF), caption placement, pop-on block "
        "reconstruction and styled render plans for the 15x32 CEA-608 "
        "caption grid, plus placement audit exports for QC."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

geometry_cache = GeometryCache()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _document(settings: DocumentSettings) -> Document:
    return Document(
        fps=settings.fps,
        drop_frame=settings.drop_frame,
        start_timecode_label=settings.start_timecode_label,
    )


def _load_payload(payload: Dict[str, Any]):
    """Convert a caption document payload, mapping failures to 422."""
    try:
        return load_document(payload)
    except jsonschema.ValidationError as exc:
        raise HTTPException(status_code=422, detail="Invalid caption document: {}".format(exc.message))
    except ParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def _diagnostics(caught: List[warnings.WarningMessage]) -> List[str]:
    return [
        str(w.message)
        for w in caught
        if issubclass(w.category, (DomainClampWarning, IllegalDropFrameWarning))
    ]


# ---------------------------------------------------------------------------
# Endpoints: Timecode
# ---------------------------------------------------------------------------


@app.post(
    "/timecode/to-label",
    response_model=ToLabelResponse,
    tags=["timecode"],
    summary="Format media seconds as a display label",
    description=(
        "Formats media time as an SMPTE label (with the document's start "
        "timecode offset and drop-frame setting) or as HH:MM:SS.mmm."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "Malformed start timecode label"},
    },
)
async def to_label(request: ToLabelRequest) -> ToLabelResponse:
    document = _document(request)
    if request.style == LabelStyle.generic:
        return ToLabelResponse(
            label=seconds_to_generic(request.seconds),
            seconds=request.seconds,
            drop_frame_applied=False,
        )
    try:
        label = media_to_label(request.seconds, document)
    except ParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return ToLabelResponse(
        label=label,
        seconds=request.seconds,
        drop_frame_applied=uses_drop_frame(document.fps, document.drop_frame),
    )


@app.post(
    "/timecode/to-seconds",
    response_model=ToSecondsResponse,
    tags=["timecode"],
    summary="Parse a display label into media seconds",
    description=(
        "Parses an SMPTE or generic label. SMPTE labels have the document's "
        "start timecode offset removed. Unparseable labels are rejected; "
        "they are never read as zero."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "Label could not be parsed"},
    },
)
async def to_seconds(request: ToSecondsRequest) -> ToSecondsResponse:
    strict = config.STRICT_DROP_FRAME if request.strict is None else request.strict
    result = try_parse_label(request.label, _document(request), strict=strict)
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error)
    return ToSecondsResponse(seconds=result.seconds, warnings=result.warnings)


# ---------------------------------------------------------------------------
# Endpoints: Render
# ---------------------------------------------------------------------------


@app.post(
    "/render",
    response_model=RenderResponse,
    tags=["render"],
    summary="Evaluate the caption on screen at a playhead time",
    description=(
        "Locates the active event, rebuilds its pop-on block, resolves "
        "placement and returns styled display cells with grid geometry "
        "(and pixel geometry when a surface size is given)."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "Invalid caption document"},
    },
)
async def render(request: RenderRequest) -> RenderResponse:
    surface = None
    if request.surface_width and request.surface_height:
        surface = (request.surface_width, request.surface_height)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        document, events = _load_payload(request.document)
        plan = evaluate(
            events,
            document,
            request.time,
            surface=surface,
            aspect_is_constrained=request.aspect_is_constrained,
            cache=geometry_cache,
        )
        try:
            timecode = media_to_label(request.time, document)
        except ParseError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

    lines = []
    for line in plan.lines:
        data = line.to_dict()
        lines.append(RenderLine(
            row=line.row,
            col=line.col,
            left_fraction=line.left_fraction,
            cell_width_fraction=line.cell_width_fraction,
            vertical_fraction=line.vertical_fraction,
            text=line.text,
            cells=[DisplayCellModel(**cell) for cell in data["cells"]],
            pixels=data.get("pixels"),
        ))
    return RenderResponse(
        time=request.time,
        timecode=timecode,
        event_index=plan.event_index,
        lines=lines,
        warnings=_diagnostics(caught),
    )


# ---------------------------------------------------------------------------
# Endpoints: Exports
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["exports"],
    summary="List available export formats",
    description="Returns all export formats with their identifiers, names and file suffixes.",
)
async def list_formats() -> List[FormatInfo]:
    result = []
    for key, formatter_cls in sorted(FORMATTERS.items()):
        formatter = formatter_cls()
        # An empty document is enough to learn the suffix
        outputs = formatter.format(Document(), [])
        result.append(FormatInfo(
            key=key,
            name=formatter.name,
            suffix=outputs[0].suffix if outputs else "",
        ))
    return result


@app.post(
    "/exports/{format_key}",
    tags=["exports"],
    summary="Export a caption document in one format",
    description=(
        "Runs one formatter over a caption document payload and returns "
        "the file as an attachment named <stem><suffix>."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Unknown format"},
        422: {"model": ErrorResponse, "description": "Invalid caption document"},
    },
)
async def export_document(
    format_key: str,
    payload: Dict[str, Any] = Body(..., description="Caption document payload."),
    stem: str = "captions",
) -> Response:
    if format_key not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=404,
            detail="Unknown format '{}'. Available: {}".format(format_key, available),
        )
    document, events = _load_payload(payload)
    try:
        outputs = FORMATTERS[format_key]().format(document, events)
    except ParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    output = outputs[0]
    filename = "{}{}".format(stem.replace("/", "_").replace("\\", "_"), output.suffix)
    logger.info("Exported %d events as %s", len(events), filename)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the cc608-api console script."""
    import uvicorn

    config.configure_logging()
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
