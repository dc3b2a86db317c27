# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-08
# Updated: 2026-01-24
# Description: Config
# -----------------------------------------------------------------------------

import os
from dataclasses import dataclass, fields
from typing import List

from dotenv import load_dotenv, find_dotenv

# Load .env once globally
load_dotenv(find_dotenv(usecwd=True), override=False)


@dataclass(frozen=True)
class Config:
    # OpenAI (direct: chat, transcription, embeddings when Azure is not set)
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_chat_model: str = ""
    openai_embed_model: str = ""
    openai_transcribe_model: str = ""

    # Azure OpenAI (embeddings)
    openai_azure_api_key: str = ""
    openai_azure_endpoint: str = ""
    openai_azure_embed_deployment: str = ""
    openai_azure_api_version: str = ""

    # Chroma Vector Database
    chroma_api_key: str = ""
    chroma_tenant: str = ""
    chroma_database: str = ""
    chroma_path: str = ""
    chroma_collection: str = ""

    # ---- Single source of truth: field_name -> ENV VAR NAME ----
    ENV_VARS = {
        # OpenAI direct
        "openai_api_key": "OPENAI_API_KEY",
        "openai_base_url": "OPENAI_BASE_URL",      # e.g. https://api.openai.com/v1
        "openai_chat_model": "OPENAI_CHAT_MODEL",
        "openai_embed_model": "OPENAI_EMBED_MODEL",
        "openai_transcribe_model": "OPENAI_TRANSCRIBE_MODEL",

        # Azure OpenAI
        "openai_azure_api_key": "AZURE_OPENAI_API_KEY",
        "openai_azure_endpoint": "AZURE_OPENAI_ENDPOINT",
        "openai_azure_embed_deployment": "AZURE_OPENAI_EMBED_DEPLOYMENT",
        "openai_azure_api_version": "AZURE_OPENAI_API_VERSION",

        # Chroma
        "chroma_api_key": "CHROMA_API_KEY",
        "chroma_tenant": "CHROMA_TENANT",
        "chroma_database": "CHROMA_DATABASE",
        "chroma_path": "RAG_CHROMA_PATH",
        "chroma_collection": "RAG_CHROMA_COLLECTION",
    }

    # Env vars an integration run needs for live OpenAI calls
    OPENAI_DIRECT_ENV_VARS = (
        "OPENAI_API_KEY",
    )

    @staticmethod
    def from_env() -> "Config":
        """Build Config object from environment variables."""
        kwargs = {
            field_name: (os.getenv(env_name) or "").strip()
            for field_name, env_name in Config.ENV_VARS.items()
        }
        return Config(**kwargs)

    def missing(self, *field_names: str) -> List[str]:
        """
        Return the env var names for the given fields that are empty.

        Clients call this lazily (first use) instead of failing the whole
        process at start-up, so an embed-only deployment does not need chat keys.
        """
        known = {f.name for f in fields(self)}
        out: List[str] = []
        for name in field_names:
            if name not in known:
                raise KeyError(f"Unknown config field: {name}")
            if not getattr(self, name):
                out.append(self.ENV_VARS[name])
        return out

    @property
    def uses_azure_embeddings(self) -> bool:
        return bool(self.openai_azure_endpoint and self.openai_azure_api_key)

    @property
    def uses_chroma_cloud(self) -> bool:
        return not self.missing("chroma_api_key", "chroma_tenant", "chroma_database")

    def summary(self) -> dict:
        """Return a safe, non-sensitive summary for logging."""
        return {
            "openai_base_url": self.openai_base_url,
            "openai_chat_model": self.openai_chat_model,
            "openai_embed_model": self.openai_embed_model,
            "openai_azure_endpoint": self.openai_azure_endpoint,
            "openai_azure_embed_deployment": self.openai_azure_embed_deployment,
            "chroma_tenant": self.chroma_tenant,
            "chroma_database": self.chroma_database,
            "chroma_path": self.chroma_path,
            "chroma_collection": self.chroma_collection,
            "openai_api_key_set": bool(self.openai_api_key),
            "openai_azure_api_key_set": bool(self.openai_azure_api_key),
        }
