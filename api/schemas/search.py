# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: search.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

import settings
from embedding.EmbeddingRecord import SourceType


class SearchFilters(BaseModel):
    namespace_id: Optional[str] = None
    namespace_ids: Optional[List[str]] = None
    namespace_type: Optional[str] = None
    org_id: Optional[str] = None
    source_types: Optional[List[SourceType]] = None
    limit: int = Field(settings.SEARCH_LIMIT_DEFAULT, ge=1, le=100)
    min_similarity: float = Field(settings.MIN_SIMILARITY_DEFAULT, ge=0.0, le=1.0)


class SearchRequest(SearchFilters):
    query: str = Field(..., min_length=1)


class SearchHit(BaseModel):
    id: str
    namespace_id: str
    org_id: str
    source_type: str
    source_id: str
    content: str
    chunk_index: int
    similarity: float
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: str


class SearchResponse(BaseModel):
    query: str
    count: int
    results: List[SearchHit]


class LLMConfigOverride(BaseModel):
    model_name: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, ge=1)


class AskRequest(SearchFilters):
    question: str = Field(..., min_length=1)
    custom_prompt: Optional[str] = None
    llm_config: Optional[LLMConfigOverride] = None


class SourceItem(BaseModel):
    type: str
    id: str
    content: str
    score: float
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AskResponse(BaseModel):
    answer: str
    sources: List[SourceItem]
    confidence: float
