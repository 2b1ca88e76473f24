"""
Provider Registry — factory functions to get the right provider by config.

Add a new provider? Just add an elif. No plugin systems, no metaclasses.
"""

from __future__ import annotations

import reportflow.core.config as config_module
from reportflow.providers.base import EmbeddingProvider, LLMProvider

_OPENAI_COMPATIBLE = ("openai", "azure")


def get_llm_provider() -> LLMProvider:
    provider = config_module.config.llm.provider.lower()
    if provider in _OPENAI_COMPATIBLE:
        from reportflow.providers.openai_llm import OpenAILLMProvider

        return OpenAILLMProvider()
    raise ValueError(f"Unknown LLM provider: {provider}")


def get_embedding_provider() -> EmbeddingProvider:
    provider = config_module.config.llm.provider.lower()
    if provider in _OPENAI_COMPATIBLE:
        from reportflow.providers.openai_embeddings import OpenAIEmbeddingProvider

        return OpenAIEmbeddingProvider()
    raise ValueError(f"Unknown embedding provider: {provider}")
