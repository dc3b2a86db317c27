# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-07
# Updated: 2026-01-28
# Description: main.py
# -----------------------------------------------------------------------------
import logging

from fastapi import FastAPI

from api.routers import embeddings, health, search

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",)
app = FastAPI(title="RAG Engine API")
app.include_router(health.router)
app.include_router(embeddings.router)
app.include_router(search.router)


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=os.getenv("RAG_API_HOST", "127.0.0.1"),
        port=int(os.getenv("RAG_API_PORT", "8000")),
        log_level="info",
        reload=False,
    )
