"""OpenAI Embedding Provider — text-embedding-3-* via OpenAI or Azure OpenAI."""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from reportflow.providers.base import EmbeddingProvider
from reportflow.providers.openai_llm import build_client

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider(EmbeddingProvider):
    def __init__(self, client: AsyncOpenAI | None = None):
        self.client: AsyncOpenAI | None = client

    async def start(self) -> None:
        if self.client:
            return
        self.client = build_client()
        logger.info("Embedding provider ready")

    async def stop(self) -> None:
        if self.client:
            await self.client.close()
        self.client = None

    async def embed(self, texts: list[str], *, model: str) -> list[list[float]]:
        if not self.client:
            raise RuntimeError("OpenAI embeddings not started")
        if not texts:
            return []

        response = await self.client.embeddings.create(model=model, input=texts)
        data = sorted(response.data, key=lambda item: item.index)
        logger.debug("Embedded %d texts with %s", len(texts), model)
        return [list(item.embedding) for item in data]

    async def health_check(self) -> dict:
        return {
            "provider": "openai",
            "status": "ready" if self.client else "not_started",
        }
