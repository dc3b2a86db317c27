# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: dependencies.py
# -----------------------------------------------------------------------------
from functools import lru_cache

from api.AppContainer import AppContainer
from services.HealthService import HealthService
from services.IndexingService import IndexingService
from services.RetrievalService import RetrievalService


@lru_cache
def get_container() -> AppContainer:
    return AppContainer()


def get_health_service() -> HealthService:
    # use the singleton service from the container
    return get_container().health_service


def get_indexing_service() -> IndexingService:
    # use the singleton service from the container
    return get_container().indexing_service


def get_retrieval_service() -> RetrievalService:
    # use the singleton service from the container
    return get_container().retrieval_service
