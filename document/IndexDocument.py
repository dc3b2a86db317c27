# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-28
# Updated: 2026-01-27
# Description: IndexDocument
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import settings
from embedding.EmbeddingRecord import SourceType


@dataclass
class IndexDocument:
    """One re-indexable unit: everything the engine stores comes from one of these."""
    namespace_id: str
    org_id: str
    source_type: SourceType
    source_id: str
    content: str = ""
    namespace_type: str = "room"
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.source_type = SourceType.coerce(self.source_type)
        if not self.namespace_id or not self.org_id or not self.source_id:
            raise ValueError("namespace_id, org_id and source_id are required")

    @property
    def source_key(self) -> tuple:
        return self.source_type.value, self.source_id


@dataclass
class ChunkOptions:
    chunk_size: int = settings.CHUNK_SIZE_DEFAULT
    chunk_overlap: int = settings.CHUNK_OVERLAP_DEFAULT


@dataclass
class IndexResult:
    success: bool
    chunks_created: int = 0
    message: str = ""
    skipped: bool = False

    @classmethod
    def failed(cls, message: str, chunks_created: int = 0) -> "IndexResult":
        return cls(success=False, chunks_created=chunks_created, message=message)

    @classmethod
    def ok(cls, chunks_created: int, message: Optional[str] = None) -> "IndexResult":
        return cls(
            success=True,
            chunks_created=chunks_created,
            message=message or f"Created {chunks_created} embeddings",
        )
