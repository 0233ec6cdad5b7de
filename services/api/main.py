from __future__ import annotations

import logging
import os
import random
import re
import uuid
from typing import Any
from urllib.parse import quote

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from smart_quote.color_extractor import extract_dominant_color, to_data_url
from smart_quote.document_builder import ProposalBuilder
from smart_quote.exporters.pdf import pdf_filename, render_pdf
from smart_quote.freight import FreightEstimator
from smart_quote.ingestors.cnpj import DEFAULT_BASE_URL, CnpjIngestor
from smart_quote.logging_config import set_request_id, setup_logging
from smart_quote.models.document import ProposalDocument, ShareSummary
from smart_quote.models.party import Client, Company
from smart_quote.models.quote import QuoteConfig, QuoteItem
from smart_quote.models.session import QuoteSession
from smart_quote.models.task import FieldTask, TaskKind, TaskStatus
from smart_quote.session import QuoteEditor, should_lookup_client, should_lookup_company
from smart_quote.session_store import QuoteSessionStore, RecentItem, RecentItemCache
from smart_quote.task_registry import FieldTaskRegistry
from smart_quote.vertex_ai_adapter import VertexAIAdapter


class ItemUpdateRequest(BaseModel):
    field: str = Field(description="name, ncm, packaging, quantity, unit_cost or markup")
    value: Any = None


class ConfigResponse(BaseModel):
    config: QuoteConfig
    distance_km: float
    calculated_freight: float

    @staticmethod
    def from_config(config: QuoteConfig) -> "ConfigResponse":
        return ConfigResponse(
            config=config,
            distance_km=config.distance_km,
            calculated_freight=config.calculated_freight,
        )


class QuoteResponse(BaseModel):
    session: QuoteSession
    total: float
    discounted_total: float


class ProposalResponse(BaseModel):
    document: ProposalDocument
    share: ShareSummary
    summary: str


# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")
VERTEX_LOCATION = os.getenv("VERTEX_LOCATION", "us-central1")
VERTEX_MODEL = os.getenv("VERTEX_MODEL", "gemini-2.5-flash")
BRASILAPI_BASE_URL = os.getenv("BRASILAPI_BASE_URL", DEFAULT_BASE_URL)
FREIGHT_SEED = os.getenv("FREIGHT_SEED")

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

# Setup logging
setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)
logger = logging.getLogger(__name__)

app = FastAPI(title="SmartQuote API", version="0.1.0")

session_store = QuoteSessionStore()
recent_items = RecentItemCache()
task_registry = FieldTaskRegistry()
freight_estimator = FreightEstimator(
    random_source=random.Random(int(FREIGHT_SEED)) if FREIGHT_SEED else None,
)
editor = QuoteEditor(freight_estimator=freight_estimator, recent_items=recent_items)
proposal_builder = ProposalBuilder()
cnpj_ingestor = CnpjIngestor(base_url=BRASILAPI_BASE_URL)

# Description enhancement needs a GCP project; without one item names are kept as typed
description_enhancer = (
    VertexAIAdapter(project_id=PROJECT_ID, location=VERTEX_LOCATION, model_name=VERTEX_MODEL)
    if PROJECT_ID
    else None
)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    set_request_id(request.headers.get("x-request-id") or uuid.uuid4().hex)
    return await call_next(request)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": exc.errors(include_url=False, include_context=False)})


def _get_session(session_id: str) -> QuoteSession:
    session = session_store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Quote not found")
    return session


def content_disposition(filename: str, *, inline: bool = False) -> str:
    """Header value with an ASCII ``filename`` and the exact name as RFC 5987 ``filename*``."""
    disposition = "inline" if inline else "attachment"
    ascii_name = _UNSAFE_FILENAME_CHARS.sub("_", filename)
    return f"{disposition}; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _quote_response(session: QuoteSession) -> QuoteResponse:
    return QuoteResponse(
        session=session,
        total=editor.total_value(session),
        discounted_total=editor.discounted_total(session),
    )


@app.post("/v1/quotes", response_model=QuoteResponse, status_code=201)
def create_quote() -> QuoteResponse:
    session = session_store.create_session()
    logger.info("Created quote session", extra={"session_id": session.id, "number": session.config.number})
    return _quote_response(session)


@app.get("/v1/quotes/{session_id}", response_model=QuoteResponse)
def get_quote(session_id: str) -> QuoteResponse:
    return _quote_response(_get_session(session_id))


@app.delete("/v1/quotes/{session_id}", status_code=204)
def delete_quote(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Quote not found")
    dropped = task_registry.discard_session(session_id)
    logger.info("Deleted quote session", extra={"session_id": session_id, "dropped_tasks": dropped})
    return Response(status_code=204)


@app.patch("/v1/quotes/{session_id}/company", response_model=Company)
def update_company(session_id: str, changes: dict[str, Any]) -> Company:
    return editor.update_company(_get_session(session_id), changes)


@app.patch("/v1/quotes/{session_id}/client", response_model=Client)
def update_client(session_id: str, changes: dict[str, Any]) -> Client:
    return editor.update_client(_get_session(session_id), changes)


@app.patch("/v1/quotes/{session_id}/config", response_model=ConfigResponse)
def update_config(session_id: str, changes: dict[str, Any]) -> ConfigResponse:
    return ConfigResponse.from_config(editor.update_config(_get_session(session_id), changes))


@app.post("/v1/quotes/{session_id}/items", response_model=QuoteItem, status_code=201)
def add_item(session_id: str) -> QuoteItem:
    return editor.add_item(_get_session(session_id))


@app.patch("/v1/quotes/{session_id}/items/{item_id}", response_model=QuoteItem)
def update_item(session_id: str, item_id: str, request: ItemUpdateRequest) -> QuoteItem:
    session = _get_session(session_id)
    try:
        return editor.update_item(session, item_id, request.field, request.value)
    except KeyError:
        raise HTTPException(status_code=404, detail="Item not found")
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@app.delete("/v1/quotes/{session_id}/items/{item_id}", status_code=204)
def remove_item(session_id: str, item_id: str) -> Response:
    session = _get_session(session_id)
    try:
        editor.remove_item(session, item_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Item not found")
    return Response(status_code=204)


@app.post("/v1/quotes/{session_id}/freight:calculate", response_model=ConfigResponse)
def calculate_freight(session_id: str) -> ConfigResponse:
    return ConfigResponse.from_config(editor.calculate_freight(_get_session(session_id)))


@app.post("/v1/quotes/{session_id}/company:lookup", response_model=FieldTask, status_code=202)
def lookup_company(session_id: str, background_tasks: BackgroundTasks) -> FieldTask:
    session = _get_session(session_id)
    task = task_registry.create_task(session_id=session_id, field="company.cnpj", kind=TaskKind.company_lookup)
    if not should_lookup_company(session.company.cnpj):
        return task_registry.update_task(task.id, status=TaskStatus.skipped)
    background_tasks.add_task(_run_lookup, task.id, session.company.cnpj)
    return task


@app.post("/v1/quotes/{session_id}/client:lookup", response_model=FieldTask, status_code=202)
def lookup_client(session_id: str, background_tasks: BackgroundTasks) -> FieldTask:
    session = _get_session(session_id)
    task = task_registry.create_task(session_id=session_id, field="client.doc", kind=TaskKind.client_lookup)
    if not should_lookup_client(session.client.doc):
        return task_registry.update_task(task.id, status=TaskStatus.skipped)
    background_tasks.add_task(_run_lookup, task.id, session.client.doc)
    return task


@app.post(
    "/v1/quotes/{session_id}/items/{item_id}/description:enhance",
    response_model=FieldTask,
    status_code=202,
)
def enhance_description(session_id: str, item_id: str, background_tasks: BackgroundTasks) -> FieldTask:
    session = _get_session(session_id)
    try:
        item = session.find_item(item_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Item not found")
    task = task_registry.create_task(session_id=session_id, field=f"items.{item_id}.name", kind=TaskKind.description)
    if not item.name:
        return task_registry.update_task(task.id, status=TaskStatus.skipped)
    background_tasks.add_task(_run_enhancement, task.id, item_id, item.name)
    return task


@app.put("/v1/quotes/{session_id}/company/logo", response_model=FieldTask, status_code=202)
async def upload_logo(session_id: str, request: Request, background_tasks: BackgroundTasks) -> FieldTask:
    _get_session(session_id)
    raw = await request.body()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty upload")
    task = task_registry.create_task(session_id=session_id, field="company.logo", kind=TaskKind.logo_color)
    background_tasks.add_task(_run_logo_color, task.id, raw, request.headers.get("content-type"))
    return task


@app.put("/v1/quotes/{session_id}/company/signature", response_model=Company)
async def upload_signature(session_id: str, request: Request) -> Company:
    session = _get_session(session_id)
    raw = await request.body()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty upload")
    editor.set_signature(session, signature_url=to_data_url(raw, request.headers.get("content-type")))
    return session.company


@app.get("/v1/quotes/{session_id}/proposal", response_model=ProposalResponse)
def get_proposal(session_id: str) -> ProposalResponse:
    bundle = proposal_builder.build(_get_session(session_id))
    return ProposalResponse(document=bundle.document, share=bundle.share, summary=bundle.summary_markdown)


@app.get("/v1/quotes/{session_id}/proposal.pdf")
def get_proposal_pdf(session_id: str, inline: bool = False) -> Response:
    bundle = proposal_builder.build(_get_session(session_id))
    return Response(
        content=render_pdf(bundle.document),
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition(pdf_filename(bundle.document), inline=inline)},
    )


@app.get("/v1/quotes/{session_id}/share", response_model=ShareSummary)
def get_share(session_id: str) -> ShareSummary:
    return proposal_builder.build(_get_session(session_id)).share


@app.get("/v1/tasks/{task_id}", response_model=FieldTask)
def get_task(task_id: str) -> FieldTask:
    task = task_registry.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


@app.get("/v1/items/recent", response_model=list[RecentItem])
def get_recent_items() -> list[RecentItem]:
    return recent_items.recent()


def _run_lookup(task_id: str, document: str) -> None:
    task = task_registry.update_task(task_id, status=TaskStatus.in_progress)
    if task is None:
        return
    try:
        data = cnpj_ingestor.lookup(document)
        session = session_store.get_session(task.session_id)
        applied = False
        if data is not None and session is not None:
            with session.lock:
                if task_registry.is_current(task_id):
                    if task.kind == TaskKind.company_lookup:
                        editor.apply_company_lookup(session, data)
                    else:
                        editor.apply_client_lookup(session, data)
                    applied = True
        task_registry.finish(task_id, applied=applied)
    except Exception as exc:  # pragma: no cover - safety net
        logger.error("Lookup task failed", exc_info=True, extra={"task_id": task_id})
        task_registry.update_task(task_id, status=TaskStatus.failed, errors=[str(exc)])


def _run_enhancement(task_id: str, item_id: str, name: str) -> None:
    task = task_registry.update_task(task_id, status=TaskStatus.in_progress)
    if task is None:
        return
    try:
        improved = description_enhancer.enhance_item_description(name) if description_enhancer else name
        session = session_store.get_session(task.session_id)
        applied = False
        if session is not None:
            with session.lock:
                if task_registry.is_current(task_id):
                    try:
                        editor.set_item_name(session, item_id, improved)
                        applied = True
                    except KeyError:
                        logger.info("Item removed before enhancement finished", extra={"task_id": task_id})
        task_registry.finish(task_id, applied=applied)
    except Exception as exc:  # pragma: no cover - safety net
        logger.error("Enhancement task failed", exc_info=True, extra={"task_id": task_id})
        task_registry.update_task(task_id, status=TaskStatus.failed, errors=[str(exc)])


def _run_logo_color(task_id: str, raw: bytes, content_type: str | None) -> None:
    task = task_registry.update_task(task_id, status=TaskStatus.in_progress)
    if task is None:
        return
    try:
        color = extract_dominant_color(raw)
        session = session_store.get_session(task.session_id)
        applied = False
        if session is not None:
            with session.lock:
                if task_registry.is_current(task_id):
                    editor.set_logo(session, logo_url=to_data_url(raw, content_type), primary_color=color)
                    applied = True
        task_registry.finish(task_id, applied=applied)
    except Exception as exc:  # pragma: no cover - safety net
        logger.error("Logo task failed", exc_info=True, extra={"task_id": task_id})
        task_registry.update_task(task_id, status=TaskStatus.failed, errors=[str(exc)])


@app.get("/health")
async def healthcheck() -> JSONResponse:
    return JSONResponse({"status": "ok"})
