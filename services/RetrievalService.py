# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: RetrievalService
# -----------------------------------------------------------------------------
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import settings
from chat.OpenAIChat import LLMConfig, Message, OpenAIChat
from embedding.EmbeddingRecord import SourceType
from embedding.OpenAIEmbedder import OpenAIEmbedder
from utility.logging_utils import get_class_logger
from vectorstore.VectorStore import SearchOptions, SearchResult, VectorStore

NO_CONTEXT_ANSWER = "No relevant information was found in the indexed content."

DEFAULT_SYSTEM_PROMPT = """You are an AI assistant that answers questions using the provided context from documents and conversations.

Rules:
- Answer only from the information in the context
- If the context does not contain the answer, say so clearly
- Keep answers short, concise and accurate
- When several sources are relevant, combine them into one answer
- Answer in the language of the question

Format the answer in Markdown:
- Use **bold** for key points
- Use lists (-) when listing several points
- Use > blockquotes when quoting from the context"""

SOURCE_LABELS = {
    SourceType.MESSAGE: "Message",
    SourceType.ATTACHMENT: "Attachment",
    SourceType.DOCUMENT: "Document",
    SourceType.FILE: "File",
}


@dataclass
class AskOptions:
    """Search filters plus generation overrides for one question."""
    namespace_id: Optional[str] = None
    namespace_ids: Optional[List[str]] = None
    namespace_type: Optional[str] = None
    org_id: Optional[str] = None
    source_types: Optional[List[SourceType]] = None
    limit: int = settings.SEARCH_LIMIT_DEFAULT
    min_similarity: float = settings.MIN_SIMILARITY_DEFAULT
    custom_prompt: Optional[str] = None
    llm_config: Optional[Dict[str, Any]] = None

    def to_search_options(self) -> SearchOptions:
        return SearchOptions(
            namespace_id=self.namespace_id,
            namespace_ids=self.namespace_ids,
            namespace_type=self.namespace_type,
            org_id=self.org_id,
            source_types=self.source_types,
            limit=self.limit,
            min_similarity=self.min_similarity,
        )


@dataclass
class SourceRef:
    type: str
    id: str
    content: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_result(cls, result: SearchResult, preview_chars: int = settings.SOURCE_PREVIEW_CHARS) -> "SourceRef":
        r = result.record
        content = r.content[:preview_chars] + ("..." if len(r.content) > preview_chars else "")
        return cls(
            type=r.source_type.value,
            id=r.source_id,
            content=content,
            score=result.similarity,
            metadata=dict(r.metadata),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "id": self.id,
            "content": self.content,
            "score": self.score,
            "metadata": self.metadata,
        }


@dataclass
class AskResult:
    answer: str
    sources: List[SourceRef]
    confidence: float


@dataclass
class StreamEvent:
    """One item of an answer stream: sources -> token* -> done, or error."""
    type: str
    data: Any = None

    @classmethod
    def sources(cls, refs: List[SourceRef]) -> "StreamEvent":
        return cls("sources", [s.to_dict() for s in refs])

    @classmethod
    def token(cls, text: str) -> "StreamEvent":
        return cls("token", text)

    @classmethod
    def done(cls, confidence: float) -> "StreamEvent":
        return cls("done", {"confidence": confidence})

    @classmethod
    def error(cls, message: str) -> "StreamEvent":
        return cls("error", {"message": message})


def build_context(results: List[SearchResult], max_chars: int = settings.MAX_CONTEXT_CHARS) -> str:
    """
    One provenance line per result followed by its content, ranked order,
    blank line between blocks. Stops adding blocks once max_chars is reached.
    """
    parts: List[str] = []
    used = 0
    for result in results:
        label = SOURCE_LABELS.get(result.record.source_type, result.record.source_type.value.title())
        block = f"[{label}] (relevance: {result.similarity * 100:.1f}%)\n{result.record.content}\n"
        cost = len(block) + (1 if parts else 0)  # joining newline
        if parts and used + cost > max_chars:
            break
        if not parts and len(block) > max_chars:
            block = block[:max_chars]
        parts.append(block)
        used += cost
    return "\n".join(parts)


def mean_similarity(results: List[SearchResult]) -> float:
    if not results:
        return 0.0
    return sum(r.similarity for r in results) / len(results)


class RetrievalService:
    """
    Question answering over the vector store:
      - embed the question
      - search the caller's scope
      - build a context block and prompt
      - complete (or stream) with the language model
    """

    def __init__(
        self,
        *,
        store: VectorStore,
        embedder: OpenAIEmbedder,
        chat: OpenAIChat,
        max_context_chars: int = settings.MAX_CONTEXT_CHARS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.chat = chat
        self.max_context_chars = max_context_chars
        self.logger = logger or get_class_logger(self.__class__)

    def search(self, query: str, options: Optional[SearchOptions] = None) -> List[SearchResult]:
        if not query or not query.strip():
            raise ValueError("query must be non-empty")
        self.logger.debug("Searching: %r", query[:50])
        vector = self.embedder.embed(query)
        return self.store.search_similar(vector, options or SearchOptions())

    def _messages(self, question: str, results: List[SearchResult], custom_prompt: Optional[str]) -> List[Message]:
        context = build_context(results, self.max_context_chars)
        return [
            {"role": "system", "content": custom_prompt or DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": f"Context:\n{context}\n\nQuestion: {question}"},
        ]

    def _llm_config(self, options: AskOptions) -> LLMConfig:
        return self.chat.defaults.merged(options.llm_config)

    @staticmethod
    def _check_question(question: str) -> None:
        if not question or not question.strip():
            raise ValueError("question must be non-empty")

    def ask(self, question: str, options: Optional[AskOptions] = None) -> AskResult:
        self._check_question(question)
        options = options or AskOptions()

        results = self.search(question, options.to_search_options())
        if not results:
            self.logger.info("No context found for question; returning fallback answer")
            return AskResult(answer=NO_CONTEXT_ANSWER, sources=[], confidence=0.0)

        messages = self._messages(question, results, options.custom_prompt)
        answer = self.chat.complete(messages, self._llm_config(options))
        confidence = mean_similarity(results)

        self.logger.info("Answered question with %d sources (confidence=%.3f)", len(results), confidence)
        return AskResult(
            answer=answer,
            sources=[SourceRef.from_result(r) for r in results],
            confidence=confidence,
        )

    def ask_stream(
        self,
        question: str,
        options: Optional[AskOptions] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Iterator[StreamEvent]:
        """
        Validate eagerly, then hand back the event generator.

        Closing the generator or setting cancel_event stops iteration and
        closes the upstream model stream.
        """
        self._check_question(question)
        return self._stream(question, options or AskOptions(), cancel_event)

    def _stream(
        self,
        question: str,
        options: AskOptions,
        cancel_event: Optional[threading.Event],
    ) -> Iterator[StreamEvent]:
        try:
            results = self.search(question, options.to_search_options())
            llm_config = self._llm_config(options)
        except Exception as e:
            self.logger.error("Retrieval for streamed answer failed: %s", e)
            yield StreamEvent.error(str(e))
            return

        yield StreamEvent.sources([SourceRef.from_result(r) for r in results])

        if not results:
            yield StreamEvent.token(NO_CONTEXT_ANSWER)
            yield StreamEvent.done(0.0)
            return

        messages = self._messages(question, results, options.custom_prompt)
        tokens = self.chat.chat_stream(messages, llm_config)
        try:
            for text in tokens:
                if cancel_event is not None and cancel_event.is_set():
                    self.logger.info("Answer stream cancelled by consumer")
                    return
                yield StreamEvent.token(text)
        except Exception as e:
            self.logger.error("Answer stream failed: %s", e)
            yield StreamEvent.error(str(e))
            return
        finally:
            tokens.close()

        yield StreamEvent.done(mean_similarity(results))
