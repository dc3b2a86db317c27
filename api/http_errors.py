# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-28
# Description: http_errors.py
# -----------------------------------------------------------------------------
import logging

from fastapi import HTTPException

from utility.errors import ConfigurationError, ProviderError


def to_http_exception(e: Exception, action: str, logger: logging.Logger) -> HTTPException:
    """Map engine errors onto status codes; caller does `raise to_http_exception(...) from e`."""
    if isinstance(e, ConfigurationError):
        logger.error("%s -> 503: %s", action, e)
        return HTTPException(status_code=503, detail=f"{action} unavailable: {e}")
    if isinstance(e, ProviderError):
        logger.error("%s -> 502: %s", action, e)
        return HTTPException(status_code=502, detail=f"{action} failed upstream: {e}")
    if isinstance(e, ValueError):
        logger.warning("%s -> 400: %s", action, e)
        return HTTPException(status_code=400, detail=str(e))

    logger.exception("%s -> 500: %s", action, e)
    return HTTPException(status_code=500, detail=f"{action} failed: {e}")
