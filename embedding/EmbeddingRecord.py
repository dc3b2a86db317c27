# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-24
# Description: EmbeddingRecord
# -----------------------------------------------------------------------------
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence

import numpy as np


class SourceType(str, Enum):
    MESSAGE = "message"
    ATTACHMENT = "attachment"
    DOCUMENT = "document"
    FILE = "file"

    @classmethod
    def coerce(cls, value: "SourceType | str") -> "SourceType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            allowed = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown source_type {value!r} (expected one of: {allowed})") from e


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_vector(values: Optional[Sequence[float]]) -> Optional[np.ndarray]:
    if values is None:
        return None
    return np.asarray(values, dtype=np.float32).reshape(-1)


@dataclass
class EmbeddingRecord:
    """One indexed chunk: vector + original text + scope and provenance."""
    namespace_id: str
    org_id: str
    source_type: SourceType
    source_id: str
    content: str
    embedding: Optional[np.ndarray] = None
    namespace_type: str = "room"
    chunk_index: int = 0
    chunk_total: int = 1
    metadata: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.source_type = SourceType.coerce(self.source_type)
        self.embedding = as_vector(self.embedding)
        if self.chunk_total < 1 or not 0 <= self.chunk_index < self.chunk_total:
            raise ValueError(
                f"chunk_index {self.chunk_index} out of range for chunk_total {self.chunk_total}"
            )

    @property
    def dimension(self) -> Optional[int]:
        return None if self.embedding is None else int(self.embedding.shape[0])
