from __future__ import annotations

import logging
import os
import uuid
from typing import Any

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from warpdrive_weaver.dimensions import DimensionPolicy, DraftDimensions, resolve_dimensions
from warpdrive_weaver.draft_store import DraftStore
from warpdrive_weaver.drawdown import compute_drawdown
from warpdrive_weaver.editor import apply_edit, toggle_cell
from warpdrive_weaver.errors import DraftError, MalformedInputError, SerializationError
from warpdrive_weaver.ingest import create_default, ingest, serialize
from warpdrive_weaver.logging_config import set_trace_id, setup_logging
from warpdrive_weaver.mapper import GridKind, grid_matrix
from warpdrive_weaver.models.draft import Draft
from warpdrive_weaver.models.edits import (
    DraftEdit,
    EditEnvelope,
    ThreadingEdit,
    TieupEdit,
    TreadlingEdit,
)
from warpdrive_weaver.models.record import DraftRecord


class DraftCreatedResponse(BaseModel):
    draft_id: str
    revision: int


class DraftResponse(BaseModel):
    draft_id: str
    revision: int
    sections: dict[str, Any]
    dimensions: DraftDimensions

    @staticmethod
    def from_record(record: DraftRecord) -> "DraftResponse":
        return DraftResponse(
            draft_id=record.id,
            revision=record.revision,
            sections=record.draft.sections,
            dimensions=_dimensions(record.draft),
        )


class GridResponse(BaseModel):
    kind: GridKind
    rows: int
    columns: int
    cells: list[list[bool]]


class DrawdownResponse(BaseModel):
    dimensions: DraftDimensions
    cells: list[tuple[int, int]] = Field(description="Filled (pick, thread) pairs, 1-indexed")


class ThreadingUpdate(BaseModel):
    shaft: int | None = None


class TreadlingUpdate(BaseModel):
    treadle: int | None = None


class TieupUpdate(BaseModel):
    selected: bool


class ToggleRequest(BaseModel):
    row: int
    column: int


class EditResponse(BaseModel):
    draft_id: str
    revision: int
    changed: bool
    edit: DraftEdit | None = None


# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")
DIMENSION_POLICY = DimensionPolicy(os.getenv("DIMENSION_POLICY", DimensionPolicy.infer.value))

# Setup logging
setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)
logger = logging.getLogger(__name__)

app = FastAPI(title="WarpDrive Weaver API", version="0.1.0")

draft_store = DraftStore()


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    header = request.headers.get("X-Cloud-Trace-Context")
    trace_id = header.split("/")[0] if header else uuid.uuid4().hex
    set_trace_id(trace_id)
    response = await call_next(request)
    response.headers["X-Trace-Id"] = trace_id
    return response


def _dimensions(draft: Draft) -> DraftDimensions:
    return resolve_dimensions(draft, policy=DIMENSION_POLICY)


def _get_record(draft_id: str) -> DraftRecord:
    record = draft_store.get(draft_id)
    if not record:
        raise HTTPException(status_code=404, detail="Draft not found")
    return record


def _commit(record: DraftRecord, draft: Draft, edit: DraftEdit | None) -> EditResponse:
    updated = draft_store.replace(record.id, draft)
    changed = updated.revision != record.revision
    logger.info(
        f"Applied edit to draft {record.id}",
        extra={
            "draft_id": record.id,
            "revision": updated.revision,
            "changed": changed,
            "edit": edit.model_dump() if edit else None,
        },
    )
    return EditResponse(draft_id=updated.id, revision=updated.revision, changed=changed, edit=edit)


def _edit(draft_id: str, edit: DraftEdit) -> EditResponse:
    record = _get_record(draft_id)
    try:
        draft = apply_edit(record.draft, edit, dimensions=_dimensions(record.draft))
    except DraftError as exc:
        logger.warning(f"Rejected edit to draft {draft_id}: {exc}", extra={"draft_id": draft_id})
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _commit(record, draft, edit)


@app.post("/v1/drafts", response_model=DraftCreatedResponse, status_code=201)
async def create_draft(payload: dict[str, Any] = Body(...)) -> DraftCreatedResponse:
    try:
        draft = ingest(payload, copy_payload=False)
    except MalformedInputError as exc:
        logger.warning(f"Rejected WIF payload: {exc}")
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    record = draft_store.create(draft)
    return DraftCreatedResponse(draft_id=record.id, revision=record.revision)


@app.post("/v1/drafts:new", response_model=DraftCreatedResponse, status_code=201)
async def create_empty_draft() -> DraftCreatedResponse:
    record = draft_store.create(create_default())
    return DraftCreatedResponse(draft_id=record.id, revision=record.revision)


@app.get("/v1/drafts/{draft_id}", response_model=DraftResponse)
async def get_draft(draft_id: str) -> DraftResponse:
    return DraftResponse.from_record(_get_record(draft_id))


@app.get("/v1/drafts/{draft_id}/export", response_class=PlainTextResponse)
async def export_draft(draft_id: str) -> PlainTextResponse:
    record = _get_record(draft_id)
    try:
        text = serialize(record.draft)
    except SerializationError as exc:
        logger.error(f"Could not export draft {draft_id}: {exc}", extra={"draft_id": draft_id})
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return PlainTextResponse(text, media_type="application/json")


@app.get("/v1/drafts/{draft_id}/grids/{kind}", response_model=GridResponse)
async def get_grid(draft_id: str, kind: GridKind) -> GridResponse:
    draft = _get_record(draft_id).draft
    cells = grid_matrix(draft, kind, _dimensions(draft))
    return GridResponse(kind=kind, rows=len(cells), columns=len(cells[0]) if cells else 0, cells=cells)


@app.get("/v1/drafts/{draft_id}/drawdown", response_model=DrawdownResponse)
async def get_drawdown(draft_id: str) -> DrawdownResponse:
    draft = _get_record(draft_id).draft
    drawdown = compute_drawdown(draft, _dimensions(draft))
    return DrawdownResponse(dimensions=drawdown.dimensions, cells=sorted(drawdown.cells))


@app.put("/v1/drafts/{draft_id}/threading/{thread}", response_model=EditResponse)
async def update_threading(draft_id: str, thread: int, update: ThreadingUpdate) -> EditResponse:
    return _edit(draft_id, ThreadingEdit(thread=thread, shaft=update.shaft))


@app.put("/v1/drafts/{draft_id}/treadling/{pick}", response_model=EditResponse)
async def update_treadling(draft_id: str, pick: int, update: TreadlingUpdate) -> EditResponse:
    return _edit(draft_id, TreadlingEdit(pick=pick, treadle=update.treadle))


@app.put("/v1/drafts/{draft_id}/tieup/{treadle}/{shaft}", response_model=EditResponse)
async def update_tieup(draft_id: str, treadle: int, shaft: int, update: TieupUpdate) -> EditResponse:
    return _edit(draft_id, TieupEdit(treadle=treadle, shaft=shaft, selected=update.selected))


@app.post("/v1/drafts/{draft_id}/edits", response_model=EditResponse)
async def submit_edit(draft_id: str, envelope: EditEnvelope) -> EditResponse:
    return _edit(draft_id, envelope.edit)


@app.post("/v1/drafts/{draft_id}/grids/{kind}:toggle", response_model=EditResponse)
async def toggle_grid_cell(draft_id: str, kind: GridKind, request: ToggleRequest) -> EditResponse:
    record = _get_record(draft_id)
    try:
        draft, edit = toggle_cell(
            record.draft,
            kind,
            request.row,
            request.column,
            dimensions=_dimensions(record.draft),
        )
    except DraftError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _commit(record, draft, edit)


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
