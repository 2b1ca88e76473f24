"""
OpenAI LLM Provider — chat completions against OpenAI or Azure OpenAI.

Supports function calling (tools) and structured output: a pydantic model
passed as response_format is sent as a json_schema response format, using the
model's aliased field names.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI
from pydantic import BaseModel

import reportflow.core.config as config_module
from reportflow.providers.base import ChatResponse, LLMProvider, LLMToolCall

logger = logging.getLogger(__name__)


def build_client() -> AsyncOpenAI:
    """Create the async client for the configured provider."""
    llm = config_module.config.llm
    if llm.provider == "azure":
        if not llm.azure_endpoint:
            raise ValueError("AZURE_OPENAI_ENDPOINT is required for the azure provider")
        return AsyncAzureOpenAI(
            azure_endpoint=llm.azure_endpoint,
            api_key=llm.api_key or None,
            api_version=llm.api_version,
        )

    client_kwargs: dict[str, Any] = {}
    if llm.api_key:
        client_kwargs["api_key"] = llm.api_key
    if llm.base_url:
        client_kwargs["base_url"] = llm.base_url
        logger.info(f"Using custom base_url: {llm.base_url}")
    return AsyncOpenAI(**client_kwargs)


def json_schema_format(model: type[BaseModel]) -> dict:
    """OpenAI response_format payload for a pydantic model."""
    return {
        "type": "json_schema",
        "json_schema": {
            "name": model.__name__,
            "schema": model.model_json_schema(by_alias=True),
        },
    }


def parse_tool_calls(raw_tool_calls: list | None) -> list[LLMToolCall]:
    """Convert SDK tool call objects to LLMToolCalls. Bad JSON args become {}."""
    tool_calls = []
    for tc in raw_tool_calls or []:
        raw_args = tc.function.arguments or ""
        try:
            args = json.loads(raw_args) if raw_args else {}
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse tool args: {raw_args[:100]}")
            args = {}
        tool_calls.append(LLMToolCall(id=tc.id, name=tc.function.name, arguments=args))
    return tool_calls


class OpenAILLMProvider(LLMProvider):
    def __init__(self, client: AsyncOpenAI | None = None):
        self.client: AsyncOpenAI | None = client

    async def start(self) -> None:
        if self.client:
            return  # Already started

        self.client = build_client()
        provider_name = "Azure OpenAI" if config_module.config.llm.provider == "azure" else "OpenAI"
        logger.info(f"{provider_name} LLM ready")

    async def stop(self) -> None:
        if self.client:
            await self.client.close()
        self.client = None

    async def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        tools: list[dict] | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int | None = None,
    ) -> ChatResponse:
        if not self.client:
            raise RuntimeError("OpenAI LLM not started")

        kwargs: dict[str, Any] = {"model": model, "messages": messages}
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        if response_format is not None:
            kwargs["response_format"] = json_schema_format(response_format)
        if max_tokens is not None:
            kwargs["max_completion_tokens"] = max_tokens

        response = await self.client.chat.completions.create(**kwargs)
        message = response.choices[0].message

        return ChatResponse(
            text=message.content or "",
            tool_calls=parse_tool_calls(message.tool_calls),
            model=response.model or model,
        )

    async def health_check(self) -> dict:
        return {
            "provider": config_module.config.llm.provider,
            "status": "ready" if self.client else "not_started",
        }
