# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-21
# Updated: 2026-01-28
# Description: IndexingService.py
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from chunking.TextChunker import TextChunker, validate_chunk_params
from document.IndexDocument import ChunkOptions, IndexDocument, IndexResult
from embedding.EmbeddingRecord import EmbeddingRecord, SourceType
from embedding.OpenAIEmbedder import OpenAIEmbedder
from processor.DocumentProcessor import DocumentMetadata, ProcessedChunk
from processor.ProcessorRegistry import ProcessorRegistry
from utility.keyed_locks import KeyedLocks
from utility.logging_utils import get_class_logger
from vectorstore.VectorStore import NamespaceStats, SearchOptions, SearchResult, VectorStore


class IndexingService:
    """
    Owns the index pipeline:
      - chunk (or dispatch a file to its processor)
      - embed every chunk in one batched call
      - replace the source's records in the vector store

    Writes for one (source_type, source_id) are serialised; different sources
    run concurrently.
    """

    def __init__(
        self,
        *,
        store: VectorStore,
        embedder: OpenAIEmbedder,
        chunker: TextChunker | None = None,
        registry: ProcessorRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.chunker = chunker or TextChunker()
        self.registry = registry
        self.logger = logger or get_class_logger(self.__class__)
        self._locks = KeyedLocks()

    # -------------------------------------------------------------------------
    # helpers
    # -------------------------------------------------------------------------
    def _build_records(
        self,
        doc: IndexDocument,
        contents: Sequence[str],
        metadatas: Sequence[Dict[str, Any]],
    ) -> List[EmbeddingRecord]:
        vectors = self.embedder.embed_batch(list(contents))
        total = len(contents)
        return [
            EmbeddingRecord(
                namespace_id=doc.namespace_id,
                namespace_type=doc.namespace_type,
                org_id=doc.org_id,
                source_type=doc.source_type,
                source_id=doc.source_id,
                content=content,
                embedding=vector,
                chunk_index=i,
                chunk_total=total,
                metadata=md,
            )
            for i, (content, vector, md) in enumerate(zip(contents, vectors, metadatas))
        ]

    def _replace_source(self, doc: IndexDocument, records: List[EmbeddingRecord]) -> int:
        deleted = self.store.delete_by_source(doc.source_type, doc.source_id)
        if deleted:
            self.logger.info(
                "Replacing %d existing records for %s:%s", deleted, doc.source_type.value, doc.source_id
            )
        self.store.create_batch(records)
        return len(records)

    # -------------------------------------------------------------------------
    # indexing
    # -------------------------------------------------------------------------
    def index_document(self, doc: IndexDocument, chunk_options: Optional[ChunkOptions] = None) -> IndexResult:
        opts = chunk_options or ChunkOptions(
            chunk_size=self.chunker.chunk_size,
            chunk_overlap=self.chunker.chunk_overlap,
        )
        # reject bad parameters before touching the store
        validate_chunk_params(opts.chunk_size, opts.chunk_overlap)

        with self._locks.hold(doc.source_key):
            chunks = self.chunker.chunk(
                doc.content,
                chunk_size=opts.chunk_size,
                chunk_overlap=opts.chunk_overlap,
            )
            if not chunks:
                self.logger.info("No content to index for %s:%s", doc.source_type.value, doc.source_id)
                return IndexResult.ok(0, "No content to index")

            total = len(chunks)
            metadatas = [
                {**doc.metadata, "chunk_index": i, "chunk_total": total}
                for i in range(total)
            ]
            records = self._build_records(doc, chunks, metadatas)
            created = self._replace_source(doc, records)

        self.logger.info(
            "Indexed %s:%s into %d chunks (namespace=%s)",
            doc.source_type.value,
            doc.source_id,
            created,
            doc.namespace_id,
        )
        return IndexResult.ok(created)

    def index_short_text(self, doc: IndexDocument) -> IndexResult:
        if not doc.content or not doc.content.strip():
            return IndexResult.ok(0, "No content to index")

        with self._locks.hold(doc.source_key):
            if self.store.exists_for_source(doc.source_type, doc.source_id):
                self.logger.debug("Already indexed %s:%s, skipping", doc.source_type.value, doc.source_id)
                return IndexResult(success=True, chunks_created=0, message="Already indexed", skipped=True)

            vector = self.embedder.embed(doc.content)
            self.store.create(
                EmbeddingRecord(
                    namespace_id=doc.namespace_id,
                    namespace_type=doc.namespace_type,
                    org_id=doc.org_id,
                    source_type=doc.source_type,
                    source_id=doc.source_id,
                    content=doc.content,
                    embedding=vector,
                    chunk_index=0,
                    chunk_total=1,
                    metadata=dict(doc.metadata),
                )
            )

        return IndexResult.ok(1)

    def index_file(
        self,
        content: bytes | str,
        file_metadata: DocumentMetadata,
        doc: IndexDocument,
    ) -> IndexResult:
        """
        Run an uploaded file through its processor and index the chunks it
        produces as one re-indexable source.
        """
        if self.registry is None:
            raise RuntimeError("IndexingService was built without a ProcessorRegistry")

        with self._locks.hold(doc.source_key):
            chunks: Optional[List[ProcessedChunk]] = self.registry.process(content, file_metadata)
            if chunks is None:
                return IndexResult.failed(f"Unsupported file type: {file_metadata.mime_type}")
            if not chunks:
                return IndexResult.failed(f"No content extracted from {file_metadata.file_name}")

            chunks = sorted(chunks, key=lambda c: c.chunk_index)
            total = len(chunks)
            metadatas = [
                {**doc.metadata, **c.metadata, "chunk_index": i, "chunk_total": total}
                for i, c in enumerate(chunks)
            ]
            records = self._build_records(doc, [c.content for c in chunks], metadatas)
            created = self._replace_source(doc, records)

        self.logger.info(
            "Indexed file '%s' as %s:%s (%d chunks)",
            file_metadata.file_name,
            doc.source_type.value,
            doc.source_id,
            created,
        )
        return IndexResult.ok(created, f"Indexed {created} chunks from {file_metadata.file_name}")

    # -------------------------------------------------------------------------
    # maintenance / reads
    # -------------------------------------------------------------------------
    def delete_by_source(self, source_type: SourceType | str, source_id: str) -> int:
        st = SourceType.coerce(source_type)
        with self._locks.hold((st.value, source_id)):
            return self.store.delete_by_source(st, source_id)

    def delete_by_namespace(self, namespace_id: str) -> int:
        return self.store.delete_by_namespace(namespace_id)

    def get_namespace_stats(self, namespace_id: str) -> NamespaceStats:
        return self.store.get_namespace_stats(namespace_id)

    def search(self, query: str, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        if not query or not query.strip():
            raise ValueError("query must be non-empty")
        vector = self.embedder.embed(query)
        return self.store.search_similar(vector, options or SearchOptions())
