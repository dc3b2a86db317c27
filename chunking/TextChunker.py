# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-11
# Updated: 2026-01-25
# Description: TextChunker
# -----------------------------------------------------------------------------
import logging
from typing import List, Optional, Sequence

import settings
from utility.errors import InvalidChunkParametersError
from utility.logging_utils import get_class_logger

# Highest priority first: paragraph, line, sentence, clause, word
SEPARATORS: Sequence[str] = ("\n\n", "\n", ". ", "? ", "! ", "; ", ", ", " ")


def validate_chunk_params(chunk_size: int, chunk_overlap: int) -> None:
    if chunk_size <= 0:
        raise InvalidChunkParametersError(f"chunk_size ({chunk_size}) must be > 0")
    if chunk_overlap < 0:
        raise InvalidChunkParametersError(f"chunk_overlap ({chunk_overlap}) must be >= 0")
    # guard against bad config that can cause infinite loops
    if chunk_overlap >= chunk_size:
        raise InvalidChunkParametersError(
            f"chunk_overlap ({chunk_overlap}) must be < chunk_size ({chunk_size})"
        )


def _find_boundary(text: str, cursor: int, end: int, chunk_size: int) -> int:
    """
    Pull `end` back to just after the last natural break, provided the break
    sits past the middle of the window.
    """
    floor = cursor + chunk_size / 2
    for sep in SEPARATORS:
        # last occurrence that *starts* at or before `end`
        pos = text.rfind(sep, 0, end + len(sep))
        if pos > floor:
            return pos + len(sep)
    return end


def chunk_text(text: str, chunk_size: int, chunk_overlap: int) -> List[str]:
    """
    Split text into overlapping chunks, preferring natural separators.

    Pure function: same text and parameters always give the same chunks.
    """
    validate_chunk_params(chunk_size, chunk_overlap)

    if not text or not text.strip():
        return []

    text_len = len(text)
    if text_len <= chunk_size:
        return [text.strip()]

    chunks: List[str] = []
    cursor = 0

    while cursor < text_len:
        end = min(cursor + chunk_size, text_len)
        if end < text_len:
            end = _find_boundary(text, cursor, end, chunk_size)

        piece = text[cursor:end].strip()
        if piece:
            chunks.append(piece)

        # last window reached the end of the text
        if end >= text_len:
            break

        next_cursor = end - chunk_overlap
        if next_cursor <= cursor:
            # overlap larger than the step a separator allowed; drop the overlap this once
            next_cursor = end
        cursor = next_cursor

    return chunks


class TextChunker:
    """
    Recursive-separator chunker used by the indexing service and all
    document processors.
    """

    def __init__(
        self,
        *,
        chunk_size: int = settings.CHUNK_SIZE_DEFAULT,
        chunk_overlap: int = settings.CHUNK_OVERLAP_DEFAULT,
        logger: logging.Logger | None = None,
    ):
        validate_chunk_params(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.logger = logger or get_class_logger(self.__class__)

    def chunk(
        self,
        text: str,
        *,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
    ) -> List[str]:
        size = self.chunk_size if chunk_size is None else chunk_size
        overlap = self.chunk_overlap if chunk_overlap is None else chunk_overlap

        chunks = chunk_text(text or "", size, overlap)

        if chunks:
            avg_len = sum(len(c) for c in chunks) / len(chunks)
            self.logger.debug(
                "Chunking summary: text_len=%d chunks=%d avg_len=%.1f (size=%d overlap=%d)",
                len(text),
                len(chunks),
                avg_len,
                size,
                overlap,
            )
        else:
            self.logger.debug("No chunks produced (text_len=%d)", len(text or ""))

        return chunks
