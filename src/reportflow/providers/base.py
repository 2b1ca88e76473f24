"""
Provider base classes — the two clean boundaries.

LLMProvider answers chat completions (optionally with tools or a structured
response format). EmbeddingProvider turns text into vectors. Everything that
talks to a hosted model goes through one of these.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel


@dataclass
class LLMToolCall:
    """A tool call requested by the LLM."""
    id: str
    name: str
    arguments: dict


@dataclass
class ChatResponse:
    """One completion from the LLM: text, tool calls, or both."""
    text: str = ""
    tool_calls: list[LLMToolCall] = field(default_factory=list)
    model: str = ""

    def to_message(self) -> dict[str, Any]:
        """Assistant message in OpenAI chat format, ready to append to history."""
        message: dict[str, Any] = {"role": "assistant", "content": self.text or None}
        if self.tool_calls:
            message["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.name,
                        "arguments": json.dumps(tc.arguments, ensure_ascii=False),
                    },
                }
                for tc in self.tool_calls
            ]
        return message


class LLMProvider(ABC):
    """Language model provider interface."""

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        tools: list[dict] | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int | None = None,
    ) -> ChatResponse:
        """Run one chat completion.

        ``tools`` are OpenAI function schemas. ``response_format`` asks the
        model for JSON matching the given pydantic model's schema.
        """
        ...

    async def health_check(self) -> dict:
        return {"provider": self.__class__.__name__, "status": "unknown"}


class EmbeddingProvider(ABC):
    """Embedding provider interface."""

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def embed(self, texts: list[str], *, model: str) -> list[list[float]]:
        """Embed each text. Output order matches input order."""
        ...

    async def embed_one(self, text: str, *, model: str) -> list[float]:
        vectors = await self.embed([text], model=model)
        return vectors[0]

    async def health_check(self) -> dict:
        return {"provider": self.__class__.__name__, "status": "unknown"}
