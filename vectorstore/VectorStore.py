# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-15
# Updated: 2026-01-24
# Description: VectorStore
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

import settings
from embedding.EmbeddingRecord import EmbeddingRecord, SourceType


@dataclass
class SearchOptions:
    """All filters are optional and ANDed together when present."""
    namespace_id: Optional[str] = None
    namespace_ids: Optional[List[str]] = None
    namespace_type: Optional[str] = None
    org_id: Optional[str] = None
    source_types: Optional[List[SourceType]] = None
    limit: int = settings.SEARCH_LIMIT_DEFAULT
    min_similarity: float = settings.MIN_SIMILARITY_DEFAULT

    def __post_init__(self) -> None:
        if self.source_types:
            self.source_types = [SourceType.coerce(s) for s in self.source_types]
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    def matches(self, record: EmbeddingRecord) -> bool:
        if self.namespace_id and record.namespace_id != self.namespace_id:
            return False
        if self.namespace_ids and record.namespace_id not in self.namespace_ids:
            return False
        if self.namespace_type and record.namespace_type != self.namespace_type:
            return False
        if self.org_id and record.org_id != self.org_id:
            return False
        if self.source_types and record.source_type not in self.source_types:
            return False
        return True


@dataclass
class SearchResult:
    record: EmbeddingRecord
    similarity: float

    def to_dict(self) -> Dict[str, Any]:
        r = self.record
        return {
            "id": r.id,
            "namespace_id": r.namespace_id,
            "org_id": r.org_id,
            "source_type": r.source_type.value,
            "source_id": r.source_id,
            "content": r.content,
            "chunk_index": r.chunk_index,
            "metadata": r.metadata,
            "similarity": self.similarity,
            "created_at": r.created_at.isoformat(),
        }


@dataclass
class NamespaceStats:
    total_embeddings: int = 0
    by_source_type: Dict[str, int] = field(default_factory=dict)


@runtime_checkable
class VectorStore(Protocol):
    """
    Persistence + similarity search over EmbeddingRecords.

    Callers own per-source write serialisation; IndexingService does it with a
    keyed lock.
    """

    def test_connection(self) -> bool:
        ...

    def create(self, record: EmbeddingRecord) -> EmbeddingRecord:
        ...

    def create_batch(self, records: Sequence[EmbeddingRecord]) -> List[EmbeddingRecord]:
        ...

    def delete_by_source(self, source_type: SourceType | str, source_id: str) -> int:
        ...

    def delete_by_namespace(self, namespace_id: str) -> int:
        ...

    def exists_for_source(self, source_type: SourceType | str, source_id: str) -> bool:
        ...

    def find_by_source(self, source_type: SourceType | str, source_id: str) -> List[EmbeddingRecord]:
        ...

    def count_by_namespace(self, namespace_id: str) -> int:
        ...

    def count_by_org(self, org_id: str) -> int:
        ...

    def update_metadata(self, record_id: str, metadata: Dict[str, Any]) -> bool:
        ...

    def search_similar(
            self,
            query_vector: Sequence[float] | np.ndarray,
            options: SearchOptions | None = None,
    ) -> List[SearchResult]:
        ...

    def get_namespace_stats(self, namespace_id: str) -> NamespaceStats:
        ...
