# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: InMemoryVectorStore
# -----------------------------------------------------------------------------
import threading
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from embedding.EmbeddingRecord import EmbeddingRecord, SourceType, as_vector, utc_now
from utility.logging_utils import get_class_logger
from vectorstore.VectorStore import NamespaceStats, SearchOptions, SearchResult
from vectorstore.similarity import check_dimension, rank_by_similarity


class InMemoryVectorStore:
    """
    Process-local VectorStore: dict of records + exact cosine scan.

    Used for tests, local development and small single-process deployments.
    """

    def __init__(self, *, logger=None) -> None:
        self.logger = logger or get_class_logger(self.__class__)
        self._records: Dict[str, EmbeddingRecord] = {}
        self._dimension: Optional[int] = None
        self._lock = threading.RLock()

    @property
    def dimension(self) -> Optional[int]:
        return self._dimension

    def test_connection(self) -> bool:
        return True

    def _check_and_claim_dimension(self, records: Sequence[EmbeddingRecord]) -> None:
        dim = self._dimension
        for rec in records:
            if rec.embedding is None:
                continue
            if dim is None:
                dim = rec.dimension
            check_dimension(rec.embedding, dim, what=f"embedding for {rec.source_type.value}:{rec.source_id}")
        self._dimension = dim

    def create(self, record: EmbeddingRecord) -> EmbeddingRecord:
        return self.create_batch([record])[0]

    def create_batch(self, records: Sequence[EmbeddingRecord]) -> List[EmbeddingRecord]:
        records = list(records)
        if not records:
            return []

        with self._lock:
            # validate the whole batch before touching the map
            self._check_and_claim_dimension(records)
            for rec in records:
                self._records[rec.id] = rec

        self.logger.debug("Stored %d records", len(records))
        return records

    def _delete_where(self, predicate) -> int:
        with self._lock:
            doomed = [rid for rid, rec in self._records.items() if predicate(rec)]
            for rid in doomed:
                del self._records[rid]
        return len(doomed)

    def delete_by_source(self, source_type: SourceType | str, source_id: str) -> int:
        st = SourceType.coerce(source_type)
        deleted = self._delete_where(lambda r: r.source_type == st and r.source_id == source_id)
        self.logger.info("Deleted %d records for %s:%s", deleted, st.value, source_id)
        return deleted

    def delete_by_namespace(self, namespace_id: str) -> int:
        deleted = self._delete_where(lambda r: r.namespace_id == namespace_id)
        self.logger.info("Deleted %d records for namespace '%s'", deleted, namespace_id)
        return deleted

    def exists_for_source(self, source_type: SourceType | str, source_id: str) -> bool:
        st = SourceType.coerce(source_type)
        with self._lock:
            return any(r.source_type == st and r.source_id == source_id for r in self._records.values())

    def find_by_source(self, source_type: SourceType | str, source_id: str) -> List[EmbeddingRecord]:
        st = SourceType.coerce(source_type)
        with self._lock:
            found = [r for r in self._records.values() if r.source_type == st and r.source_id == source_id]
        return sorted(found, key=lambda r: r.chunk_index)

    def count_by_namespace(self, namespace_id: str) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.namespace_id == namespace_id)

    def count_by_org(self, org_id: str) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.org_id == org_id)

    def update_metadata(self, record_id: str, metadata: Dict[str, Any]) -> bool:
        with self._lock:
            rec = self._records.get(record_id)
            if rec is None:
                return False
            rec.metadata = dict(metadata)
            rec.updated_at = utc_now()
        return True

    def search_similar(
            self,
            query_vector: Sequence[float] | np.ndarray,
            options: SearchOptions | None = None,
    ) -> List[SearchResult]:
        options = options or SearchOptions()
        query = as_vector(query_vector)

        with self._lock:
            check_dimension(query, self._dimension, what="query vector")
            candidates = [r for r in self._records.values() if r.embedding is not None and options.matches(r)]

        results = rank_by_similarity(query, candidates, options)
        self.logger.debug(
            "search_similar: candidates=%d returned=%d (limit=%d min_similarity=%.2f)",
            len(candidates),
            len(results),
            options.limit,
            options.min_similarity,
        )
        return results

    def get_namespace_stats(self, namespace_id: str) -> NamespaceStats:
        with self._lock:
            counts = Counter(r.source_type.value for r in self._records.values() if r.namespace_id == namespace_id)
        return NamespaceStats(total_embeddings=sum(counts.values()), by_source_type=dict(counts))
