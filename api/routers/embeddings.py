# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: embeddings.py
# -----------------------------------------------------------------------------
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from api.dependencies import get_indexing_service
from api.http_errors import to_http_exception
from api.schemas.embeddings import DeleteResponse, IndexRequest, IndexResponse, NamespaceStatsResponse
from document.IndexDocument import ChunkOptions, IndexDocument, IndexResult
from embedding.EmbeddingRecord import SourceType
from processor.DocumentProcessor import DocumentMetadata
from services.IndexingService import IndexingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/embeddings", tags=["embeddings"])


def _to_response(result: IndexResult) -> IndexResponse:
    return IndexResponse(
        success=result.success,
        chunks_created=result.chunks_created,
        message=result.message,
        skipped=result.skipped,
    )


def _to_document(req: IndexRequest) -> IndexDocument:
    return IndexDocument(
        namespace_id=req.namespace_id,
        namespace_type=req.namespace_type,
        org_id=req.org_id,
        source_type=req.source_type,
        source_id=req.source_id,
        content=req.content,
        metadata=req.metadata,
    )


@router.post("/index", response_model=IndexResponse)
def index_document(
    req: IndexRequest,
    svc: IndexingService = Depends(get_indexing_service),
) -> IndexResponse:
    logger.info("POST /embeddings/index (start) %s:%s", req.source_type.value, req.source_id)
    try:
        chunk_options = None
        if req.chunk_size is not None or req.chunk_overlap is not None:
            chunk_options = ChunkOptions(
                chunk_size=req.chunk_size if req.chunk_size is not None else svc.chunker.chunk_size,
                chunk_overlap=req.chunk_overlap if req.chunk_overlap is not None else svc.chunker.chunk_overlap,
            )
        result = svc.index_document(_to_document(req), chunk_options)
    except Exception as e:
        raise to_http_exception(e, "index_document", logger) from e

    logger.info("POST /embeddings/index (done) chunks=%d", result.chunks_created)
    return _to_response(result)


@router.post("/index-short", response_model=IndexResponse)
def index_short_text(
    req: IndexRequest,
    svc: IndexingService = Depends(get_indexing_service),
) -> IndexResponse:
    try:
        result = svc.index_short_text(_to_document(req))
    except Exception as e:
        raise to_http_exception(e, "index_short_text", logger) from e
    return _to_response(result)


@router.post("/index-file", response_model=IndexResponse)
async def index_file(
    file: UploadFile = File(...),
    namespace_id: str = Form(...),
    org_id: str = Form(...),
    source_id: str = Form(...),
    source_type: SourceType = Form(SourceType.ATTACHMENT),
    namespace_type: str = Form("room"),
    mime_type: Optional[str] = Form(None),
    metadata: Optional[str] = Form(None, description="JSON object merged into every chunk's metadata"),
    svc: IndexingService = Depends(get_indexing_service),
) -> IndexResponse:
    logger.info("POST /embeddings/index-file (start) file='%s' source=%s", file.filename, source_id)
    try:
        extra: Dict[str, Any] = json.loads(metadata) if metadata else {}
        if not isinstance(extra, dict):
            raise ValueError("metadata must be a JSON object")

        content = await file.read()
        file_metadata = DocumentMetadata(
            file_name=file.filename or source_id,
            mime_type=mime_type or file.content_type or "application/octet-stream",
            source_id=source_id,
            size=len(content),
            namespace_id=namespace_id,
            org_id=org_id,
        )
        doc = IndexDocument(
            namespace_id=namespace_id,
            namespace_type=namespace_type,
            org_id=org_id,
            source_type=source_type,
            source_id=source_id,
            metadata=extra,
        )
        result = await run_in_threadpool(svc.index_file, content, file_metadata, doc)
    except Exception as e:
        raise to_http_exception(e, "index_file", logger) from e

    logger.info(
        "POST /embeddings/index-file (done) success=%s chunks=%d", result.success, result.chunks_created
    )
    return _to_response(result)


@router.delete("/source/{source_type}/{source_id}", response_model=DeleteResponse)
def delete_by_source(
    source_type: str,
    source_id: str,
    svc: IndexingService = Depends(get_indexing_service),
) -> DeleteResponse:
    try:
        deleted = svc.delete_by_source(source_type, source_id)
    except Exception as e:
        raise to_http_exception(e, "delete_by_source", logger) from e
    return DeleteResponse(success=True, deleted=deleted)


@router.delete("/namespace/{namespace_id}", response_model=DeleteResponse)
def delete_by_namespace(
    namespace_id: str,
    svc: IndexingService = Depends(get_indexing_service),
) -> DeleteResponse:
    try:
        deleted = svc.delete_by_namespace(namespace_id)
    except Exception as e:
        raise to_http_exception(e, "delete_by_namespace", logger) from e
    return DeleteResponse(success=True, deleted=deleted)


@router.get("/stats/{namespace_id}", response_model=NamespaceStatsResponse)
def get_namespace_stats(
    namespace_id: str,
    svc: IndexingService = Depends(get_indexing_service),
) -> NamespaceStatsResponse:
    try:
        stats = svc.get_namespace_stats(namespace_id)
    except Exception as e:
        raise to_http_exception(e, "get_namespace_stats", logger) from e
    return NamespaceStatsResponse(
        namespace_id=namespace_id,
        total_embeddings=stats.total_embeddings,
        by_source_type=stats.by_source_type,
    )
