# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: VideoDocumentProcessor
# -----------------------------------------------------------------------------
import tempfile
from pathlib import Path
from typing import List

from media.FfmpegAudioExtractor import FfmpegAudioExtractor
from processor.DocumentProcessor import (
    BaseDocumentProcessor,
    DocumentMetadata,
    ProcessedChunk,
    decode_content,
)
from transcription.WhisperTranscriber import WhisperTranscriber
from utility.errors import MediaExtractionError


class VideoDocumentProcessor(BaseDocumentProcessor):
    """
    Video -> audio track (ffmpeg) -> transcript (Whisper) -> chunks.

    All intermediate files live in one temporary directory that is removed on
    every exit path, including transcription failures.
    """

    processor_type = "video"
    SUPPORTED_TYPES = (
        "video/mp4",
        "video/webm",
        "video/quicktime",  # .mov
        "video/x-msvideo",  # .avi
        "video/x-matroska",  # .mkv
        "video/mpeg",
    )

    def __init__(self, transcriber: WhisperTranscriber, extractor: FfmpegAudioExtractor, **kwargs):
        super().__init__(**kwargs)
        self.transcriber = transcriber
        self.extractor = extractor

    def process(self, content: bytes | str, metadata: DocumentMetadata) -> List[ProcessedChunk]:
        video = decode_content(content)
        if not video:
            self.logger.warning("Empty video payload for '%s'", metadata.file_name)
            return []

        with tempfile.TemporaryDirectory(prefix="rag_video_") as tmp:
            tmp_dir = Path(tmp)
            # fixed names; only the extension comes from the upload
            suffix = Path(metadata.file_name or "").suffix[:10]
            video_path = tmp_dir / f"input{suffix}"
            audio_path = tmp_dir / "audio.mp3"
            video_path.write_bytes(video)

            try:
                self.extractor.extract_audio_track(video_path, audio_path)
            except MediaExtractionError as e:
                self.logger.error("Audio extraction failed for '%s': %s", metadata.file_name, e)
                return []

            audio = audio_path.read_bytes()
            if not audio:
                self.logger.warning("No audio extracted from '%s'", metadata.file_name)
                return []

            transcript = self.transcriber.transcribe(audio, audio_path.name, "audio/mpeg")

        if not transcript or not transcript.strip():
            self.logger.warning("No transcription generated for '%s'", metadata.file_name)
            return []

        return self._to_chunks(
            transcript,
            metadata,
            extra={"transcription_model": self.transcriber.model},
        )
