# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-16
# Updated: 2026-01-27
# Description: ChromaVectorStore
# -----------------------------------------------------------------------------
import json
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import chromadb
import numpy as np
from chromadb import ClientAPI
from chromadb.api.models import Collection

import settings
from config.Config import Config
from embedding.EmbeddingRecord import EmbeddingRecord, SourceType, as_vector, utc_now
from utility.logging_utils import get_class_logger
from vectorstore.VectorStore import NamespaceStats, SearchOptions, SearchResult
from vectorstore.similarity import check_dimension, rank_by_similarity

# Scalar columns written next to every record; the free-form bag goes into METADATA_JSON
METADATA_JSON = "metadata_json"


def _where(*conditions: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    parts = [c for c in conditions if c]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}


def _rows(res: Any, key: str, n: int) -> List[Any]:
    """Chroma may return None, a list or a numpy array per include key."""
    values = res.get(key) if res is not None else None
    if values is None:
        return [None] * n
    return list(values)


@dataclass
class ChromaVectorStore:
    cfg: Config
    collection_name: str = settings.VECTOR_COLLECTION_DEFAULT
    client: Optional[ClientAPI] = None
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        if self.client is None:
            self.client = self._build_client()

        self.collection: Collection = self.client.get_or_create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )
        self._dimension: Optional[int] = None
        self.logger.info("Chroma collection ready: '%s'", self.collection_name)

    def _build_client(self) -> ClientAPI:
        if self.cfg.uses_chroma_cloud:
            self.logger.info(
                "Initialising Chroma Cloud client (tenant=%s, database=%s)",
                self.cfg.chroma_tenant,
                self.cfg.chroma_database,
            )
            return chromadb.CloudClient(
                tenant=self.cfg.chroma_tenant,
                database=self.cfg.chroma_database,
                api_key=self.cfg.chroma_api_key,
            )

        path = self.cfg.chroma_path or settings.CHROMA_PATH_DEFAULT
        self.logger.info("Initialising local persistent Chroma client at '%s'", path)
        return chromadb.PersistentClient(path=path)

    def test_connection(self) -> bool:
        """
        Simple health check: can we talk to Chroma and our collection?
        """
        try:
            _ = self.collection.count()
            return True
        except Exception as e:
            self.logger.error("Chroma connection failed: %s", e)
            return False

    # -------------------------------------------------------------------------
    # (de)serialisation
    # -------------------------------------------------------------------------
    @staticmethod
    def _to_metadata(rec: EmbeddingRecord) -> Dict[str, Any]:
        return {
            "namespace_id": rec.namespace_id,
            "namespace_type": rec.namespace_type,
            "org_id": rec.org_id,
            "source_type": rec.source_type.value,
            "source_id": rec.source_id,
            "chunk_index": rec.chunk_index,
            "chunk_total": rec.chunk_total,
            "created_at": rec.created_at.isoformat(),
            "updated_at": rec.updated_at.isoformat(),
            METADATA_JSON: json.dumps(rec.metadata or {}, default=str),
        }

    @staticmethod
    def _from_row(record_id: str, document: Optional[str], md: Dict[str, Any], vector: Any) -> EmbeddingRecord:
        md = md or {}
        return EmbeddingRecord(
            id=record_id,
            namespace_id=md.get("namespace_id", ""),
            namespace_type=md.get("namespace_type", "room"),
            org_id=md.get("org_id", ""),
            source_type=md.get("source_type", SourceType.DOCUMENT.value),
            source_id=md.get("source_id", ""),
            content=document or "",
            chunk_index=int(md.get("chunk_index", 0)),
            chunk_total=int(md.get("chunk_total", 1)),
            embedding=None if vector is None else as_vector(vector),
            metadata=json.loads(md.get(METADATA_JSON) or "{}"),
            created_at=datetime.fromisoformat(md["created_at"]) if md.get("created_at") else utc_now(),
            updated_at=datetime.fromisoformat(md["updated_at"]) if md.get("updated_at") else utc_now(),
        )

    def _get_records(self, where: Optional[Dict[str, Any]], *, with_vectors: bool) -> List[EmbeddingRecord]:
        include = ["documents", "metadatas"]
        if with_vectors:
            include.append("embeddings")

        kwargs: Dict[str, Any] = {"include": include}
        if where is not None:
            kwargs["where"] = where

        res = self.collection.get(**kwargs)
        ids: List[str] = list(res.get("ids") or [])
        docs = _rows(res, "documents", len(ids))
        metas = _rows(res, "metadatas", len(ids))
        vecs = _rows(res, "embeddings", len(ids)) if with_vectors else [None] * len(ids)

        return [self._from_row(i, d, m, v) for i, d, m, v in zip(ids, docs, metas, vecs)]

    def _get_ids(self, where: Dict[str, Any]) -> List[str]:
        res = self.collection.get(where=where, include=[])
        ids: List[str] = res.get("ids", []) or []
        # preserves order while de-duplicating
        return list(dict.fromkeys(ids))

    def _stored_dimension(self) -> Optional[int]:
        if self._dimension is None:
            res = self.collection.get(limit=1, include=["embeddings"])
            vecs = _rows(res, "embeddings", len(res.get("ids") or []))
            if vecs and vecs[0] is not None:
                self._dimension = int(np.asarray(vecs[0]).shape[0])
        return self._dimension

    # -------------------------------------------------------------------------
    # writes
    # -------------------------------------------------------------------------
    def create(self, record: EmbeddingRecord) -> EmbeddingRecord:
        return self.create_batch([record])[0]

    def create_batch(self, records: Sequence[EmbeddingRecord]) -> List[EmbeddingRecord]:
        records = list(records)
        if not records:
            return []

        missing = [r.id for r in records if r.embedding is None]
        if missing:
            raise ValueError(f"Chroma records need an embedding; {len(missing)} record(s) have none")

        dim = self._stored_dimension() or records[0].dimension
        for rec in records:
            check_dimension(rec.embedding, dim, what=f"embedding for {rec.source_type.value}:{rec.source_id}")

        self.collection.add(
            ids=[r.id for r in records],
            documents=[r.content for r in records],
            embeddings=[r.embedding.tolist() for r in records],
            metadatas=[self._to_metadata(r) for r in records],
        )
        self._dimension = dim

        self.logger.info(
            "Added %d records into Chroma collection '%s'",
            len(records),
            self.collection_name,
        )
        return records

    def _delete_ids(self, ids: List[str], label: str) -> int:
        if not ids:
            self.logger.info("No records found for %s in collection '%s'", label, self.collection_name)
            return 0
        try:
            self.collection.delete(ids=ids)
        except Exception as e:
            self.logger.error(
                "Failed to delete %d records for %s from collection '%s': %s",
                len(ids),
                label,
                self.collection_name,
                e,
            )
            raise
        self.logger.info("Deleted %d records for %s from collection '%s'", len(ids), label, self.collection_name)
        return len(ids)

    def delete_by_source(self, source_type: SourceType | str, source_id: str) -> int:
        st = SourceType.coerce(source_type)
        ids = self._get_ids(_where({"source_type": st.value}, {"source_id": source_id}))
        return self._delete_ids(ids, f"{st.value}:{source_id}")

    def delete_by_namespace(self, namespace_id: str) -> int:
        ids = self._get_ids({"namespace_id": namespace_id})
        return self._delete_ids(ids, f"namespace '{namespace_id}'")

    def update_metadata(self, record_id: str, metadata: Dict[str, Any]) -> bool:
        found = self.collection.get(ids=[record_id], include=["metadatas"])
        if not found.get("ids"):
            return False

        md = dict(_rows(found, "metadatas", 1)[0] or {})
        md[METADATA_JSON] = json.dumps(metadata or {}, default=str)
        md["updated_at"] = utc_now().isoformat()
        self.collection.update(ids=[record_id], metadatas=[md])
        return True

    # -------------------------------------------------------------------------
    # reads
    # -------------------------------------------------------------------------
    def exists_for_source(self, source_type: SourceType | str, source_id: str) -> bool:
        st = SourceType.coerce(source_type)
        res = self.collection.get(
            where=_where({"source_type": st.value}, {"source_id": source_id}),
            limit=1,
            include=[],
        )
        return bool(res.get("ids"))

    def find_by_source(self, source_type: SourceType | str, source_id: str) -> List[EmbeddingRecord]:
        st = SourceType.coerce(source_type)
        recs = self._get_records(_where({"source_type": st.value}, {"source_id": source_id}), with_vectors=False)
        return sorted(recs, key=lambda r: r.chunk_index)

    def count_by_namespace(self, namespace_id: str) -> int:
        return len(self._get_ids({"namespace_id": namespace_id}))

    def count_by_org(self, org_id: str) -> int:
        return len(self._get_ids({"org_id": org_id}))

    @staticmethod
    def _build_search_where(options: SearchOptions) -> Optional[Dict[str, Any]]:
        conditions: List[Dict[str, Any]] = []
        if options.namespace_id:
            conditions.append({"namespace_id": options.namespace_id})
        if options.namespace_ids:
            conditions.append({"namespace_id": {"$in": list(options.namespace_ids)}})
        if options.namespace_type:
            conditions.append({"namespace_type": options.namespace_type})
        if options.org_id:
            conditions.append({"org_id": options.org_id})
        if options.source_types:
            conditions.append({"source_type": {"$in": [s.value for s in options.source_types]}})
        return _where(*conditions)

    def search_similar(
            self,
            query_vector: Sequence[float] | np.ndarray,
            options: SearchOptions | None = None,
    ) -> List[SearchResult]:
        options = options or SearchOptions()
        query = as_vector(query_vector)
        where = self._build_search_where(options)

        self.logger.info(
            "Searching Chroma collection '%s' (limit=%d, min_similarity=%.2f, where=%s)",
            self.collection_name,
            options.limit,
            options.min_similarity,
            where,
        )

        try:
            check_dimension(query, self._stored_dimension(), what="query vector")
            candidates = self._get_records(where, with_vectors=True)
        except Exception as e:
            self.logger.error("Error during search_similar: %s", e, exc_info=True)
            raise

        # exact scan: ranking does not depend on Chroma's own distance function
        results = rank_by_similarity(query, candidates, options)
        self.logger.info(
            "Chroma search complete: candidates=%d returned=%d",
            len(candidates),
            len(results),
        )
        return results

    def get_namespace_stats(self, namespace_id: str) -> NamespaceStats:
        res = self.collection.get(where={"namespace_id": namespace_id}, include=["metadatas"])
        metas = _rows(res, "metadatas", len(res.get("ids") or []))
        counts = Counter((m or {}).get("source_type", "unknown") for m in metas)
        return NamespaceStats(total_embeddings=sum(counts.values()), by_source_type=dict(counts))
