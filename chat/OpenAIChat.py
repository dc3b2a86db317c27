# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-22
# Updated: 2026-01-26
# Description: OpenAIChat
# -----------------------------------------------------------------------------
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterator, List, Optional

from openai import OpenAI

import settings
from config.Config import Config
from utility.errors import ConfigurationError, ProviderError
from utility.logging_utils import get_class_logger

Message = Dict[str, str]  # {"role": "system"|"user"|"assistant", "content": "..."}

ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class LLMConfig:
    model_name: str = settings.LLM_DEFAULTS["model_name"]
    temperature: float = settings.LLM_DEFAULTS["temperature"]
    max_tokens: int = settings.LLM_DEFAULTS["max_tokens"]

    def merged(self, overrides: Optional[Dict[str, Any]] = None) -> "LLMConfig":
        """Per-call overrides on top of these defaults; None values are ignored."""
        if not overrides:
            return self
        known = {k: v for k, v in overrides.items() if v is not None and k in ("model_name", "temperature", "max_tokens")}
        return replace(self, **known)


def _check_messages(messages: List[Message]) -> None:
    if not messages:
        raise ValueError("messages must be non-empty.")
    for m in messages:
        if m.get("role") not in ROLES:
            raise ValueError(f"Unsupported message role: {m.get('role')!r}")


@dataclass
class OpenAIChat:
    """
        OpenAI chat wrapper used for answer generation.

        Expected Config fields:
          cfg.openai_api_key: str
          cfg.openai_base_url: str (optional)
          cfg.openai_chat_model: str (optional, overrides the LLM default model)
    """

    cfg: Config
    defaults: Optional[LLMConfig] = None
    client: Any = None
    timeout: float = settings.CHAT_TIMEOUT_SECONDS
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        if self.defaults is None:
            self.defaults = LLMConfig()
            if self.cfg.openai_chat_model:
                self.defaults = replace(self.defaults, model_name=self.cfg.openai_chat_model)

    @property
    def model(self) -> str:
        return self.defaults.model_name

    def _get_client(self) -> Any:
        if self.client is None:
            missing = self.cfg.missing("openai_api_key")
            if missing:
                raise ConfigurationError(f"Chat completion needs {', '.join(missing)}")
            self.client = OpenAI(
                api_key=self.cfg.openai_api_key,
                base_url=self.cfg.openai_base_url or None,
                timeout=self.timeout,
            )
            self.logger.info("OpenAIChat initialised (model=%s)", self.model)
        return self.client

    def _params(self, messages: List[Message], config: Optional[LLMConfig]) -> Dict[str, Any]:
        cfg = config or self.defaults
        return {
            "model": cfg.model_name,
            "messages": messages,
            "temperature": cfg.temperature,
            "max_tokens": cfg.max_tokens,
        }

    # Standard chat call
    def complete(self, messages: List[Message], config: Optional[LLMConfig] = None) -> str:
        _check_messages(messages)
        client = self._get_client()
        params = self._params(messages, config)

        self.logger.debug(
            "Chat request: model=%s temp=%s max_tokens=%s",
            params["model"], params["temperature"], params["max_tokens"]
        )

        try:
            resp = client.chat.completions.create(**params)
        except Exception as e:
            self.logger.error("Chat completion failed: %s", e)
            raise ProviderError(f"Chat completion failed: {e}") from e

        try:
            content = resp.choices[0].message.content or ""
        except (AttributeError, IndexError) as e:
            self.logger.error("Unexpected chat response format: %s", e, exc_info=True)
            raise ProviderError(f"Unexpected chat response format: {e}") from e

        self.logger.info("Chat answer generated (model=%s)", getattr(resp, "model", params["model"]))
        self.logger.debug("Token usage: %r", getattr(resp, "usage", None))
        return content

    # Streaming chat call
    def chat_stream(self, messages: List[Message], config: Optional[LLMConfig] = None) -> Iterator[str]:
        """
        Yield non-empty content deltas as they arrive.

        The HTTP stream is closed when the generator finishes, fails or is closed
        by the consumer, which stops generation upstream.
        """
        _check_messages(messages)
        client = self._get_client()
        params = self._params(messages, config)
        params["stream"] = True

        try:
            stream = client.chat.completions.create(**params)
        except Exception as e:
            self.logger.error("Chat stream failed to start: %s", e)
            raise ProviderError(f"Chat stream failed to start: {e}") from e

        try:
            for event in stream:
                if not event.choices:
                    continue
                delta = event.choices[0].delta
                if delta and getattr(delta, "content", None):
                    yield delta.content
        except GeneratorExit:
            self.logger.info("Chat stream closed by consumer")
            raise
        except Exception as e:
            self.logger.error("Chat stream failed mid-way: %s", e)
            raise ProviderError(f"Chat stream failed: {e}") from e
        finally:
            close = getattr(stream, "close", None)
            if callable(close):
                close()

    # Convenience helper functions
    def simple_chat(
            self,
            user_text: str,
            system_text: Optional[str] = None,
            config: Optional[LLMConfig] = None,
    ) -> str:
        messages: List[Message] = []
        if system_text:
            messages.append({"role": "system", "content": system_text})
        messages.append({"role": "user", "content": user_text})
        return self.complete(messages, config)

    def healthcheck(self) -> bool:
        try:
            _ = self.simple_chat("ping", config=replace(self.defaults, max_tokens=5, temperature=0.0))
            return True
        except Exception as e:
            self.logger.warning("Chat healthcheck failed: %s", e)
            return False
