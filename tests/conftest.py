# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-01-29
# Description: conftest.py
# -----------------------------------------------------------------------------

import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from chat.OpenAIChat import LLMConfig  # noqa: E402
from chunking.TextChunker import TextChunker  # noqa: E402
from processor.ProcessorRegistry import ProcessorRegistry  # noqa: E402
from services.IndexingService import IndexingService  # noqa: E402
from services.RetrievalService import RetrievalService  # noqa: E402
from utility.errors import MediaExtractionError, ProviderError  # noqa: E402
from vectorstore.InMemoryVectorStore import InMemoryVectorStore  # noqa: E402


class FakeEmbedder:
    """
    Looks vectors up by exact text; anything unknown gets `default`.
    Records every batch so tests can count provider calls.
    """

    def __init__(self, vectors: Optional[Dict[str, Sequence[float]]] = None, default=(1.0, 0.0, 0.0, 0.0)):
        self.vectors = dict(vectors or {})
        self.default = default
        self.batches: List[List[str]] = []
        self.fail = False

    def _vec(self, text: str) -> np.ndarray:
        return np.asarray(self.vectors.get(text, self.default), dtype=np.float32)

    def embed(self, text: str) -> np.ndarray:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> List[np.ndarray]:
        texts = list(texts)
        if self.fail:
            raise ProviderError("embedding provider unavailable")
        self.batches.append(texts)
        return [self._vec(t) for t in texts]

    def healthcheck(self) -> bool:
        return not self.fail


class FakeChat:
    def __init__(self, answer: str = "The answer.", tokens: Sequence[str] = ("The ", "answer", ".")):
        self.defaults = LLMConfig()
        self.answer = answer
        self.tokens = list(tokens)
        self.calls: List[dict] = []
        self.fail_after: Optional[int] = None
        self.stream_closed = False
        self.tokens_sent = 0

    def complete(self, messages, config=None) -> str:
        self.calls.append({"messages": messages, "config": config})
        return self.answer

    def chat_stream(self, messages, config=None):
        self.calls.append({"messages": messages, "config": config, "stream": True})
        try:
            for i, tok in enumerate(self.tokens):
                if self.fail_after is not None and i >= self.fail_after:
                    raise ProviderError("model stream dropped")
                self.tokens_sent += 1
                yield tok
        finally:
            self.stream_closed = True

    def healthcheck(self) -> bool:
        return True


class FakeTranscriber:
    model = "whisper-1"

    def __init__(self, transcript: str = "", error: Optional[Exception] = None):
        self.transcript = transcript
        self.error = error
        self.calls: List[tuple] = []

    def transcribe(self, audio_bytes: bytes, file_name: str, mime_type: str) -> str:
        self.calls.append((len(audio_bytes), file_name, mime_type))
        if self.error is not None:
            raise self.error
        return self.transcript


class FakeAudioExtractor:
    """Writes fixed audio bytes, or fails like ffmpeg would."""

    def __init__(self, audio: bytes = b"ID3fake-mp3", fail: bool = False):
        self.audio = audio
        self.fail = fail
        self.seen_paths: List[Path] = []

    def extract_audio_track(self, video_path, audio_path) -> Path:
        self.seen_paths.append(Path(video_path))
        assert Path(video_path).exists()
        if self.fail:
            raise MediaExtractionError("ffmpeg exited with code 1")
        Path(audio_path).write_bytes(self.audio)
        return Path(audio_path)


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber(transcript="This is a short recorded meeting about the quarterly budget review.")


@pytest.fixture
def audio_extractor() -> FakeAudioExtractor:
    return FakeAudioExtractor()


@pytest.fixture
def registry(transcriber, audio_extractor) -> ProcessorRegistry:
    return ProcessorRegistry.default(transcriber=transcriber, extractor=audio_extractor, chunker=TextChunker())


@pytest.fixture
def indexing_service(store, embedder, registry) -> IndexingService:
    return IndexingService(store=store, embedder=embedder, registry=registry)


@pytest.fixture
def retrieval_service(store, embedder, chat) -> RetrievalService:
    return RetrievalService(store=store, embedder=embedder, chat=chat)
