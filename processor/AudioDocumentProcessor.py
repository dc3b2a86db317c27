# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: AudioDocumentProcessor
# -----------------------------------------------------------------------------
from typing import List

from processor.DocumentProcessor import (
    BaseDocumentProcessor,
    DocumentMetadata,
    ProcessedChunk,
    base_mime,
    decode_content,
)
from transcription.WhisperTranscriber import WhisperTranscriber


class AudioDocumentProcessor(BaseDocumentProcessor):
    processor_type = "audio"
    SUPPORTED_TYPES = (
        "audio/mpeg",
        "audio/mp3",
        "audio/mp4",
        "audio/m4a",
        "audio/wav",
        "audio/x-wav",
        "audio/webm",
        "audio/ogg",
        "audio/flac",
    )

    def __init__(self, transcriber: WhisperTranscriber, **kwargs):
        super().__init__(**kwargs)
        self.transcriber = transcriber

    def can_process(self, mime_type: str) -> bool:
        return base_mime(mime_type).startswith("audio/")

    def process(self, content: bytes | str, metadata: DocumentMetadata) -> List[ProcessedChunk]:
        audio = decode_content(content)
        if not audio:
            self.logger.warning("Empty audio payload for '%s'", metadata.file_name)
            return []

        # provider failures propagate; the caller reports them per request
        transcript = self.transcriber.transcribe(audio, metadata.file_name, base_mime(metadata.mime_type))
        if not transcript or not transcript.strip():
            self.logger.warning("No transcription generated for '%s'", metadata.file_name)
            return []

        return self._to_chunks(
            transcript,
            metadata,
            extra={"transcription_model": self.transcriber.model},
        )
