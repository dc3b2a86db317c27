# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: TextDocumentProcessor
# -----------------------------------------------------------------------------
from typing import List

from processor.DocumentProcessor import (
    BaseDocumentProcessor,
    DocumentMetadata,
    ProcessedChunk,
    base_mime,
    decode_content,
)


class TextDocumentProcessor(BaseDocumentProcessor):
    """Plain text and text-like application formats. Registered last as the generic fallback."""

    processor_type = "text"
    # any other text/* is accepted by can_process
    SUPPORTED_TYPES = (
        "text/plain",
        "text/markdown",
        "text/csv",
        "text/html",
        "text/xml",
        "application/json",
        "application/xml",
        "application/yaml",
        "application/x-yaml",
        "application/csv",
        "application/markdown",
        "application/x-markdown",
    )

    def can_process(self, mime_type: str) -> bool:
        mime = base_mime(mime_type)
        if mime.startswith("text/"):
            return True
        # application/ld+json, application/atom+xml, ...
        if mime.startswith("application/") and mime.endswith(("+json", "+xml")):
            return True
        return super().can_process(mime)

    def process(self, content: bytes | str, metadata: DocumentMetadata) -> List[ProcessedChunk]:
        raw = decode_content(content)
        text = raw.decode("utf-8", errors="replace")
        if not text.strip():
            self.logger.warning("No text content in '%s'", metadata.file_name)
            return []
        return self._to_chunks(text, metadata)
