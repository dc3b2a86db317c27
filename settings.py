# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-09
# Updated: 2026-02-02
# Description: settings.py
# -----------------------------------------------------------------------------
import os
from typing import Any, Dict


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Chunking
# -----------------------------------------------------------------------------
CHUNK_SIZE_DEFAULT = _env_int("RAG_CHUNK_SIZE", 1000)
CHUNK_OVERLAP_DEFAULT = _env_int("RAG_CHUNK_OVERLAP", 200)


# -----------------------------------------------------------------------------
# Search / ask defaults
# -----------------------------------------------------------------------------
SEARCH_LIMIT_DEFAULT = _env_int("RAG_SEARCH_LIMIT", 10)
MIN_SIMILARITY_DEFAULT = _env_float("RAG_MIN_SIMILARITY", 0.7)

# Cap on the context block handed to the language model
MAX_CONTEXT_CHARS = _env_int("RAG_MAX_CONTEXT_CHARS", 24000)

# Source excerpt length returned to callers
SOURCE_PREVIEW_CHARS = _env_int("RAG_SOURCE_PREVIEW_CHARS", 200)

LLM_DEFAULTS: Dict[str, Any] = {
    "model_name": _env("RAG_LLM_MODEL", "gpt-4o-mini"),
    "temperature": _env_float("RAG_LLM_TEMPERATURE", 0.7),
    "max_tokens": _env_int("RAG_LLM_MAX_TOKENS", 2000),
}


# -----------------------------------------------------------------------------
# Providers
# -----------------------------------------------------------------------------
EMBED_MODEL_DEFAULT = _env("RAG_EMBED_MODEL", "text-embedding-3-small")
# OpenAI accepts up to 2048 inputs per embeddings request
EMBED_BATCH_SIZE = _env_int("RAG_EMBED_BATCH_SIZE", 2048)
EMBED_TIMEOUT_SECONDS = _env_float("RAG_EMBED_TIMEOUT_SECONDS", 30.0)
EMBED_MAX_RETRIES = _env_int("RAG_EMBED_MAX_RETRIES", 3)
EMBED_NORMALIZE = _env_bool("RAG_EMBED_NORMALIZE", True)

CHAT_TIMEOUT_SECONDS = _env_float("RAG_CHAT_TIMEOUT_SECONDS", 60.0)

TRANSCRIBE_MODEL_DEFAULT = _env("RAG_TRANSCRIBE_MODEL", "whisper-1")
TRANSCRIBE_TIMEOUT_SECONDS = _env_float("RAG_TRANSCRIBE_TIMEOUT_SECONDS", 300.0)

FFMPEG_BINARY = _env("RAG_FFMPEG_BINARY", "ffmpeg")
FFMPEG_TIMEOUT_SECONDS = _env_float("RAG_FFMPEG_TIMEOUT_SECONDS", 600.0)


# -----------------------------------------------------------------------------
# Vector storage
# -----------------------------------------------------------------------------
# "chroma" (default) or "memory"
VECTOR_BACKEND = _env("RAG_VECTOR_BACKEND", "chroma").lower()
VECTOR_COLLECTION_DEFAULT = _env("RAG_CHROMA_COLLECTION", "document_embeddings")
CHROMA_PATH_DEFAULT = _env("RAG_CHROMA_PATH", "./data/chroma")


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
LOG_LEVEL = _env("RAG_LOG_LEVEL", "INFO").upper()
LOG_TO_FILE = _env_bool("RAG_LOG_TO_FILE", False)
LOG_FILE = _env("RAG_LOG_FILE", "./logs/rag_engine.log")
LOG_MAX_BYTES = _env_int("RAG_LOG_MAX_BYTES", 5 * 1024 * 1024)
LOG_BACKUP_COUNT = _env_int("RAG_LOG_BACKUP_COUNT", 5)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if CHUNK_OVERLAP_DEFAULT >= CHUNK_SIZE_DEFAULT:
    raise RuntimeError(
        f"RAG_CHUNK_OVERLAP ({CHUNK_OVERLAP_DEFAULT}) must be < RAG_CHUNK_SIZE ({CHUNK_SIZE_DEFAULT})"
    )

if VECTOR_BACKEND not in ("chroma", "memory"):
    raise RuntimeError(f"RAG_VECTOR_BACKEND must be 'chroma' or 'memory', got {VECTOR_BACKEND!r}")

if not 0.0 <= MIN_SIMILARITY_DEFAULT <= 1.0:
    raise RuntimeError("RAG_MIN_SIMILARITY must be within [0, 1]")
