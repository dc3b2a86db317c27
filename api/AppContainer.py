# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: AppContainer.py
# -----------------------------------------------------------------------------
from typing import Optional

import settings
from chat.OpenAIChat import OpenAIChat
from chunking.TextChunker import TextChunker
from config.Config import Config
from embedding.OpenAIEmbedder import OpenAIEmbedder
from media.FfmpegAudioExtractor import FfmpegAudioExtractor
from processor.ProcessorRegistry import ProcessorRegistry
from services.HealthService import HealthService
from services.IndexingService import IndexingService
from services.RetrievalService import RetrievalService
from transcription.WhisperTranscriber import WhisperTranscriber
from utility.logging_utils import get_logger
from vectorstore.ChromaVectorStore import ChromaVectorStore
from vectorstore.InMemoryVectorStore import InMemoryVectorStore
from vectorstore.VectorStore import VectorStore

logger = get_logger("api.AppContainer")


def build_store(cfg: Config, backend: str = settings.VECTOR_BACKEND) -> VectorStore:
    if backend == "memory":
        logger.info("Using in-memory vector store")
        return InMemoryVectorStore()
    return ChromaVectorStore(
        cfg=cfg,
        collection_name=cfg.chroma_collection or settings.VECTOR_COLLECTION_DEFAULT,
    )


class AppContainer:
    """
    Owns heavy object instantiation and application wiring.
    Singleton instances are provided via FastAPI dependencies.

    Model provider clients (embeddings, chat, transcription) connect on first
    use, so building the container needs no OpenAI keys. The Chroma
    collection is opened here.
    """

    def __init__(self, cfg: Optional[Config] = None, store: Optional[VectorStore] = None) -> None:
        # Configuration
        self.cfg = cfg or Config.from_env()
        logger.info("Building AppContainer: %s", self.cfg.summary())

        # Core infrastructure
        self.store = store or build_store(self.cfg)
        self.embedder = OpenAIEmbedder(cfg=self.cfg)
        self.chat = OpenAIChat(cfg=self.cfg)
        self.transcriber = WhisperTranscriber(cfg=self.cfg)
        self.media_extractor = FfmpegAudioExtractor()
        self.chunker = TextChunker()

        # Document processors, generic text last
        self.registry = ProcessorRegistry.default(
            transcriber=self.transcriber,
            extractor=self.media_extractor,
            chunker=self.chunker,
        )

        self.indexing_service = IndexingService(
            store=self.store,
            embedder=self.embedder,
            chunker=self.chunker,
            registry=self.registry,
        )

        self.retrieval_service = RetrievalService(
            store=self.store,
            embedder=self.embedder,
            chat=self.chat,
        )

        self.health_service = HealthService(
            store=self.store,
            embedder=self.embedder,
            chat=self.chat,
        )
