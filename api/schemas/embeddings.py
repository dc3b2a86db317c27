# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: embeddings.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from embedding.EmbeddingRecord import SourceType


class IndexRequest(BaseModel):
    namespace_id: str = Field(..., min_length=1)
    namespace_type: str = "room"
    org_id: str = Field(..., min_length=1)
    source_type: SourceType
    source_id: str = Field(..., min_length=1)
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    chunk_size: Optional[int] = Field(None, ge=1)
    chunk_overlap: Optional[int] = Field(None, ge=0)


class IndexResponse(BaseModel):
    success: bool
    chunks_created: int
    message: str
    skipped: bool = False


class DeleteResponse(BaseModel):
    success: bool
    deleted: int


class NamespaceStatsResponse(BaseModel):
    namespace_id: str
    total_embeddings: int
    by_source_type: Dict[str, int]
