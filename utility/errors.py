# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-24
# Description: errors.py
# -----------------------------------------------------------------------------


class RagError(Exception):
    """Base class for errors raised by the indexing/retrieval engine."""


class ConfigurationError(RagError, RuntimeError):
    """A provider (embedding, chat, transcription) is used without its credentials."""


class ProviderError(RagError, RuntimeError):
    """An external provider call failed (network, timeout, quota, bad response)."""


class MediaExtractionError(RagError):
    """The media tool could not extract an audio track."""


class DimensionMismatchError(RagError, ValueError):
    """A vector does not match the store's embedding dimensionality."""


class InvalidChunkParametersError(RagError, ValueError):
    """chunk_size / chunk_overlap combination cannot make forward progress."""
