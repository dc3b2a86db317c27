# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-14
# Updated: 2026-01-26
# Description: OpenAIEmbedder
# -----------------------------------------------------------------------------
import time
from typing import Any, List, Sequence

import numpy as np
from openai import AzureOpenAI, OpenAI

import settings
from config.Config import Config
from utility.errors import ConfigurationError, ProviderError
from utility.logging_utils import get_class_logger


class OpenAIEmbedder:
    """
    Text -> vector via the OpenAI embeddings API (Azure deployment when configured).

    The SDK client is built on first use so a process that never embeds does not
    need embedding credentials.
    """

    def __init__(
            self,
            cfg: Config,
            *,
            batch_size: int = settings.EMBED_BATCH_SIZE,
            normalize: bool = settings.EMBED_NORMALIZE,
            timeout: float = settings.EMBED_TIMEOUT_SECONDS,
            max_retries: int = settings.EMBED_MAX_RETRIES,
            retry_delay: float = 0.8,
            client: Any = None,
            logger=None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")

        self.cfg = cfg
        self.batch_size = batch_size
        self.normalize = normalize
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.logger = logger or get_class_logger(self.__class__)

        self.client = client
        if cfg.uses_azure_embeddings:
            self.model = cfg.openai_azure_embed_deployment or "text-embedding-3-large"
        else:
            self.model = cfg.openai_embed_model or settings.EMBED_MODEL_DEFAULT

    def _init_client(self) -> None:
        if self.cfg.uses_azure_embeddings:
            self.client = AzureOpenAI(
                api_key=self.cfg.openai_azure_api_key,
                azure_endpoint=self.cfg.openai_azure_endpoint.rstrip("/"),
                api_version=self.cfg.openai_azure_api_version or "2024-10-21",
                timeout=self.timeout,
                max_retries=0,
            )
            self.logger.info("Azure OpenAI embedder initialised (deployment=%s)", self.model)
            return

        missing = self.cfg.missing("openai_api_key")
        if missing:
            raise ConfigurationError(f"Embeddings need {', '.join(missing)} (or the AZURE_OPENAI_* settings)")

        self.client = OpenAI(
            api_key=self.cfg.openai_api_key,
            base_url=self.cfg.openai_base_url or None,
            timeout=self.timeout,
            max_retries=0,
        )
        self.logger.info("OpenAI embedder initialised (model=%s)", self.model)

    def _get_client(self) -> Any:
        if self.client is None:
            self._init_client()
        return self.client

    def _embed_batch(self, texts: List[str]) -> np.ndarray:
        client = self._get_client()
        delay = self.retry_delay

        for attempt in range(1, self.max_retries + 1):
            try:
                resp = client.embeddings.create(model=self.model, input=texts)
                # the API may return items out of order; index is authoritative
                data = sorted(resp.data, key=lambda d: getattr(d, "index", 0))
                arr = np.asarray([d.embedding for d in data], dtype=np.float32)
                break
            except Exception as e:
                self.logger.warning(
                    "Embedding batch failed (attempt %d/%d): %s", attempt, self.max_retries, e
                )
                if attempt == self.max_retries:
                    raise ProviderError(f"Embedding request failed after {attempt} attempts: {e}") from e
                time.sleep(delay)
                delay *= 1.7  # backoff

        if arr.ndim != 2 or arr.shape[0] != len(texts):
            raise ProviderError(
                f"Embedding response has {arr.shape[0] if arr.ndim else 0} vectors for {len(texts)} inputs"
            )

        # Normalize vectors (cosine-friendly)
        if self.normalize:
            norms = np.linalg.norm(arr, axis=1, keepdims=True) + 1e-12
            arr = arr / norms
        return arr

    def embed(self, text: str) -> np.ndarray:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        return self._embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> List[np.ndarray]:
        """
        Embed many texts in as few requests as the batch size allows.

        Output order matches input order. Any failed batch fails the whole call.
        """
        texts = list(texts)
        if not texts:
            return []

        out: List[np.ndarray] = []
        for i in range(0, len(texts), self.batch_size):
            batch = texts[i:i + self.batch_size]
            out.extend(self._embed_batch(batch))

        self.logger.info("Embedded %d texts (model=%s, batch=%d)", len(out), self.model, self.batch_size)
        return out

    def healthcheck(self) -> bool:
        try:
            vec = self.embed("healthcheck")
            self.logger.info("Embedding healthcheck ok (model=%s, dim=%d)", self.model, vec.shape[0])
            return True
        except Exception as e:
            self.logger.warning("Embedding healthcheck failed: %s", e)
            return False
