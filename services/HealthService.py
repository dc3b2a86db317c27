# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Updated: 2026-01-28
# Description: HealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Callable, Dict

from api.schemas.health import DeepHealthResponse, SmokeTestSummary
from chat.OpenAIChat import OpenAIChat
from embedding.OpenAIEmbedder import OpenAIEmbedder
from utility.logging_utils import get_class_logger
from vectorstore.VectorStore import VectorStore


@dataclass
class HealthService:
    """
    Runs smoke checks against the store and the model providers.
    Returns DeepHealthResponse for API layer
    """

    store: VectorStore
    embedder: OpenAIEmbedder
    chat: OpenAIChat
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    def _run(self, name: str, check: Callable[[], bool]) -> bool:
        try:
            ok = bool(check())
        except Exception as e:
            self.logger.error("Health check '%s' raised: %s", name, e)
            ok = False
        self.logger.info("Health check '%s': %s", name, "PASS" if ok else "FAIL")
        return ok

    def deep_health(self, include_providers: bool = True) -> DeepHealthResponse:
        results: Dict[str, bool] = {"vector_store": self._run("vector_store", self.store.test_connection)}
        if include_providers:
            results["embeddings"] = self._run("embeddings", self.embedder.healthcheck)
            results["chat"] = self._run("chat", self.chat.healthcheck)

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)
        failed = total - passed

        return DeepHealthResponse(
            status="ok" if failed == 0 else "error",
            results=results,
            summary=SmokeTestSummary(total=total, passed=passed, failed=failed),
        )
