"""
reportflow Providers — abstract interfaces for chat completions and embeddings.

Concrete implementations (OpenAI, Azure OpenAI) live alongside. Swap
providers by changing config.
"""

from reportflow.providers.base import (
    ChatResponse,
    EmbeddingProvider,
    LLMProvider,
    LLMToolCall,
)
from reportflow.providers.registry import get_embedding_provider, get_llm_provider

__all__ = [
    "ChatResponse",
    "EmbeddingProvider",
    "LLMProvider",
    "LLMToolCall",
    "get_embedding_provider",
    "get_llm_provider",
]
