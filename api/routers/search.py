# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: search router
# -----------------------------------------------------------------------------
import json
import logging
import threading
from typing import AsyncIterator, Iterator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from api.dependencies import get_retrieval_service
from api.http_errors import to_http_exception
from api.schemas.search import (
    AskRequest,
    AskResponse,
    SearchFilters,
    SearchHit,
    SearchRequest,
    SearchResponse,
    SourceItem,
)
from services.RetrievalService import AskOptions, RetrievalService, StreamEvent
from vectorstore.VectorStore import SearchOptions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

_END = object()


def _search_options(req: SearchFilters) -> SearchOptions:
    return SearchOptions(
        namespace_id=req.namespace_id,
        namespace_ids=req.namespace_ids,
        namespace_type=req.namespace_type,
        org_id=req.org_id,
        source_types=req.source_types,
        limit=req.limit,
        min_similarity=req.min_similarity,
    )


def _ask_options(req: AskRequest) -> AskOptions:
    return AskOptions(
        namespace_id=req.namespace_id,
        namespace_ids=req.namespace_ids,
        namespace_type=req.namespace_type,
        org_id=req.org_id,
        source_types=req.source_types,
        limit=req.limit,
        min_similarity=req.min_similarity,
        custom_prompt=req.custom_prompt,
        llm_config=req.llm_config.model_dump(exclude_none=True) if req.llm_config else None,
    )


def _sse(event: StreamEvent) -> str:
    return "data: " + json.dumps({"type": event.type, "data": event.data}) + "\n\n"


@router.post("", response_model=SearchResponse)
def post_search(
    req: SearchRequest,
    svc: RetrievalService = Depends(get_retrieval_service),
) -> SearchResponse:
    query_text = req.query.strip()
    logger.info("POST /search (start) limit=%d", req.limit)
    try:
        results = svc.search(query_text, _search_options(req))
    except Exception as e:
        raise to_http_exception(e, "search", logger) from e

    hits = [SearchHit(**r.to_dict()) for r in results]
    logger.info("POST /search (done) hits=%d", len(hits))
    return SearchResponse(query=query_text, count=len(hits), results=hits)


@router.post("/ask", response_model=AskResponse)
def post_ask(
    req: AskRequest,
    svc: RetrievalService = Depends(get_retrieval_service),
) -> AskResponse:
    logger.info("POST /search/ask (start)")
    try:
        result = svc.ask(req.question, _ask_options(req))
    except Exception as e:
        raise to_http_exception(e, "ask", logger) from e

    logger.info("POST /search/ask (done) sources=%d confidence=%.3f", len(result.sources), result.confidence)
    return AskResponse(
        answer=result.answer,
        sources=[SourceItem(**s.to_dict()) for s in result.sources],
        confidence=result.confidence,
    )


async def _event_stream(
    request: Request,
    events: Iterator[StreamEvent],
    cancel: threading.Event,
) -> AsyncIterator[str]:
    """
    Pull events off the blocking generator in the threadpool, one at a time.
    A client disconnect sets the cancel event so the upstream model stream is closed.
    """
    try:
        while True:
            if await request.is_disconnected():
                logger.info("POST /search/ask/stream client disconnected")
                cancel.set()
                break
            event = await run_in_threadpool(next, events, _END)
            if event is _END:
                break
            yield _sse(event)
    finally:
        cancel.set()
        try:
            events.close()
        except ValueError:
            # still running in a worker thread; it sees the cancel flag on its next token
            logger.debug("Answer stream busy at shutdown; relying on cancel flag")


@router.post("/ask/stream")
async def post_ask_stream(
    req: AskRequest,
    request: Request,
    svc: RetrievalService = Depends(get_retrieval_service),
) -> StreamingResponse:
    logger.info("POST /search/ask/stream (start)")
    cancel = threading.Event()
    try:
        events = svc.ask_stream(req.question, _ask_options(req), cancel_event=cancel)
    except Exception as e:
        raise to_http_exception(e, "ask_stream", logger) from e

    return StreamingResponse(
        _event_stream(request, events, cancel),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
