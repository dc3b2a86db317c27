# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: ProcessorRegistry
# -----------------------------------------------------------------------------
from typing import Callable, List, Optional, Set, Tuple

from chunking.TextChunker import TextChunker
from media.FfmpegAudioExtractor import FfmpegAudioExtractor
from processor.AudioDocumentProcessor import AudioDocumentProcessor
from processor.DocumentProcessor import BaseDocumentProcessor, DocumentMetadata, ProcessedChunk
from processor.PdfDocumentProcessor import PdfDocumentProcessor
from processor.TextDocumentProcessor import TextDocumentProcessor
from processor.VideoDocumentProcessor import VideoDocumentProcessor
from transcription.WhisperTranscriber import WhisperTranscriber
from utility.logging_utils import get_class_logger

Predicate = Callable[[str], bool]


class ProcessorRegistry:
    """
    Ordered (predicate, processor) pairs; the first matching predicate wins.
    Generic processors are registered last.
    """

    def __init__(self, logger=None):
        self.logger = logger or get_class_logger(self.__class__)
        self._entries: List[Tuple[Predicate, BaseDocumentProcessor]] = []

    @classmethod
    def default(
            cls,
            transcriber: WhisperTranscriber,
            extractor: Optional[FfmpegAudioExtractor] = None,
            chunker: Optional[TextChunker] = None,
            logger=None,
    ) -> "ProcessorRegistry":
        chunker = chunker or TextChunker()
        extractor = extractor or FfmpegAudioExtractor()

        reg = cls(logger=logger)
        reg.register(PdfDocumentProcessor(chunker=chunker))
        reg.register(VideoDocumentProcessor(transcriber, extractor, chunker=chunker))
        reg.register(AudioDocumentProcessor(transcriber, chunker=chunker))
        reg.register(TextDocumentProcessor(chunker=chunker))
        return reg

    def register(self, processor: BaseDocumentProcessor, predicate: Optional[Predicate] = None) -> None:
        self._entries.append((predicate or processor.can_process, processor))
        self.logger.debug("Registered processor '%s'", processor.processor_type)

    def get_processor(self, mime_type: str) -> Optional[BaseDocumentProcessor]:
        for predicate, processor in self._entries:
            if predicate(mime_type):
                return processor
        return None

    def can_process(self, mime_type: str) -> bool:
        return self.get_processor(mime_type) is not None

    def supported_types(self) -> Set[str]:
        out: Set[str] = set()
        for _, processor in self._entries:
            out |= processor.supported_types()
        return out

    def process(self, content: bytes | str, metadata: DocumentMetadata) -> Optional[List[ProcessedChunk]]:
        processor = self.get_processor(metadata.mime_type)
        if processor is None:
            self.logger.warning(
                "No processor for '%s' (mime_type=%s)", metadata.file_name, metadata.mime_type
            )
            return None

        self.logger.info(
            "Processing '%s' with %s processor", metadata.file_name, processor.processor_type
        )
        return processor.process(content, metadata)
