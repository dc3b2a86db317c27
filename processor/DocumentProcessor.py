# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: DocumentProcessor
# -----------------------------------------------------------------------------
import base64
import binascii
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from chunking.LangDetectDetector import LangDetectDetector
from chunking.TextChunker import TextChunker
from utility.logging_utils import get_class_logger

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_INLINE_WS = re.compile(r"[ \t]+")
_MANY_NEWLINES = re.compile(r"\n{3,}")


@dataclass
class DocumentMetadata:
    """What the caller knows about an uploaded file."""
    file_name: str
    mime_type: str
    source_id: str
    size: Optional[int] = None
    namespace_id: Optional[str] = None
    org_id: Optional[str] = None


@dataclass
class ProcessedChunk:
    content: str
    chunk_index: int
    chunk_total: int
    metadata: Dict[str, Any] = field(default_factory=dict)


def normalize_text(text: str) -> str:
    """
    Clean extracted text before chunking: drop control characters (newlines
    kept), collapse inline whitespace, trim every line and squeeze 3+ newlines
    into a paragraph break.
    """
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    text = _INLINE_WS.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _MANY_NEWLINES.sub("\n\n", text)
    return text.strip()


def decode_content(content: bytes | bytearray | str) -> bytes:
    """Processors accept raw bytes or a base64 string."""
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    if isinstance(content, str):
        try:
            return base64.b64decode(content, validate=False)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Content string is not valid base64: {e}") from e
    raise TypeError(f"Unsupported content type: {type(content).__name__}")


def base_mime(mime_type: str) -> str:
    """'Text/Plain; charset=utf-8' -> 'text/plain'"""
    return (mime_type or "").split(";", 1)[0].strip().lower()


class BaseDocumentProcessor(ABC):
    processor_type: str = "base"
    SUPPORTED_TYPES: tuple = ()

    def __init__(
            self,
            *,
            chunker: Optional[TextChunker] = None,
            detector: Optional[LangDetectDetector] = None,
            logger=None,
    ):
        self.chunker = chunker or TextChunker()
        self.detector = detector or LangDetectDetector()
        self.logger = logger or get_class_logger(self.__class__)

    def supported_types(self) -> Set[str]:
        return set(self.SUPPORTED_TYPES)

    def can_process(self, mime_type: str) -> bool:
        mime = base_mime(mime_type)
        if not mime:
            return False
        return any(mime == t or mime.startswith(t) for t in self.SUPPORTED_TYPES)

    @abstractmethod
    def process(self, content: bytes | str, metadata: DocumentMetadata) -> List[ProcessedChunk]:
        ...

    def _to_chunks(
            self,
            text: str,
            metadata: DocumentMetadata,
            extra: Optional[Dict[str, Any]] = None,
    ) -> List[ProcessedChunk]:
        pieces = self.chunker.chunk(normalize_text(text))
        total = len(pieces)

        out: List[ProcessedChunk] = []
        for i, piece in enumerate(pieces):
            lang, _, _ = self.detector.detect(piece)
            md: Dict[str, Any] = {
                "file_name": metadata.file_name,
                "mime_type": metadata.mime_type,
                "source_id": metadata.source_id,
                "processor_type": self.processor_type,
                "lang": lang,
            }
            if extra:
                md.update(extra)
            out.append(ProcessedChunk(content=piece, chunk_index=i, chunk_total=total, metadata=md))

        self.logger.info(
            "Processed '%s' (%s) into %d chunks", metadata.file_name, self.processor_type, total
        )
        return out
