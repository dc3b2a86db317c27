# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-07
# Updated: 2026-02-02
# Description: logging_utils.py
# -----------------------------------------------------------------------------
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

import settings

BASE_LOGGER_NAME = "rag_engine"

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_COLOURS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _console_handler() -> logging.Handler:
    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(
        fmt="%(log_color)s%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(reset)s %(message)s",
        datefmt=DATE_FORMAT,
        log_colors=LEVEL_COLOURS,
    ))
    return handler


def _file_handler(path: str) -> logging.Handler:
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=settings.LOG_MAX_BYTES,
        backupCount=settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    # plain text on disk, no colour codes
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s",
        datefmt=DATE_FORMAT,
    ))
    return handler


def _create_logger(full_name: str) -> logging.Logger:
    """
    Configure a named logger once: coloured console output, plus a rotating
    file when RAG_LOG_TO_FILE is on. Repeat calls return the same logger.
    """
    logger = logging.getLogger(full_name)
    if logger.handlers:
        return logger

    logger.addHandler(_console_handler())
    if settings.LOG_TO_FILE:
        logger.addHandler(_file_handler(settings.LOG_FILE))

    logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    full_name = f"{BASE_LOGGER_NAME}.{name}" if name else BASE_LOGGER_NAME
    return _create_logger(full_name)


def get_class_logger(cls: type) -> logging.Logger:
    """
    Logger named after module + class, e.g.:

      rag_engine.services.IndexingService.IndexingService
      rag_engine.processor.PdfDocumentProcessor.PdfDocumentProcessor
    """
    module = getattr(cls, "__module__", "unknown_module")
    classname = getattr(cls, "__name__", "UnknownClass")
    return _create_logger(f"{BASE_LOGGER_NAME}.{module}.{classname}")
