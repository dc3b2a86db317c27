# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-27
# Description: WhisperTranscriber
# -----------------------------------------------------------------------------
from typing import Any, Optional

from openai import OpenAI

import settings
from config.Config import Config
from utility.errors import ConfigurationError, ProviderError
from utility.logging_utils import get_class_logger


class WhisperTranscriber:
    def __init__(
            self,
            cfg: Config,
            *,
            model: Optional[str] = None,
            timeout: float = settings.TRANSCRIBE_TIMEOUT_SECONDS,
            client: Any = None,
            logger=None,
    ):
        self.cfg = cfg
        self.model = model or cfg.openai_transcribe_model or settings.TRANSCRIBE_MODEL_DEFAULT
        self.timeout = timeout
        self.client = client
        self.logger = logger or get_class_logger(self.__class__)

    def _get_client(self) -> Any:
        if self.client is None:
            missing = self.cfg.missing("openai_api_key")
            if missing:
                raise ConfigurationError(f"Transcription needs {', '.join(missing)}")
            self.client = OpenAI(
                api_key=self.cfg.openai_api_key,
                base_url=self.cfg.openai_base_url or None,
                timeout=self.timeout,
            )
        return self.client

    def transcribe(self, audio_bytes: bytes, file_name: str, mime_type: str) -> str:
        """Speech -> plain text. Returns "" when the audio holds no speech."""
        if not audio_bytes:
            return ""

        client = self._get_client()
        self.logger.info(
            "Transcribing '%s' (%s, %d bytes, model=%s)", file_name, mime_type, len(audio_bytes), self.model
        )

        try:
            resp = client.audio.transcriptions.create(
                model=self.model,
                file=(file_name, audio_bytes, mime_type),
                response_format="text",
            )
        except Exception as e:
            self.logger.error("Transcription of '%s' failed: %s", file_name, e)
            raise ProviderError(f"Transcription failed: {e}") from e

        # response_format="text" gives a str; older SDKs wrap it in an object
        text = resp if isinstance(resp, str) else getattr(resp, "text", "") or ""
        self.logger.info("Transcription complete for '%s' (%d chars)", file_name, len(text))
        return text
