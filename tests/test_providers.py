"""Tests for provider interfaces, registry and the OpenAI adapters."""

import json
from types import SimpleNamespace

import pytest
from openai import AsyncAzureOpenAI

import reportflow.core.config as config_module
from reportflow.core.config import AppConfig, LLMConfig
from reportflow.providers.base import ChatResponse, EmbeddingProvider, LLMProvider, LLMToolCall
from reportflow.providers.openai_embeddings import OpenAIEmbeddingProvider
from reportflow.providers.openai_llm import (
    OpenAILLMProvider,
    build_client,
    json_schema_format,
    parse_tool_calls,
)
from reportflow.providers.registry import get_embedding_provider, get_llm_provider
from reportflow.report.models import Section


class FakeCompletions:
    def __init__(self, message):
        self.message = message
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return SimpleNamespace(model="served-model", choices=[SimpleNamespace(message=self.message)])


class FakeEmbeddings:
    async def create(self, model, input):
        # Returned out of order on purpose
        data = [SimpleNamespace(index=i, embedding=[float(i), float(len(t))]) for i, t in enumerate(input)]
        return SimpleNamespace(data=list(reversed(data)))


class FakeClient:
    def __init__(self, message=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(message))
        self.embeddings = FakeEmbeddings()
        self.closed = False

    async def close(self):
        self.closed = True


def tool_call_obj(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def use_config(monkeypatch):
    def apply(**llm_fields):
        monkeypatch.setattr(config_module, "config", AppConfig(llm=LLMConfig(**llm_fields)))

    return apply


# --- Interfaces ---


def test_llm_provider_is_abstract():
    with pytest.raises(TypeError):
        LLMProvider()  # type: ignore


def test_embedding_provider_is_abstract():
    with pytest.raises(TypeError):
        EmbeddingProvider()  # type: ignore


def test_chat_response_to_message_with_tool_calls():
    response = ChatResponse(tool_calls=[LLMToolCall(id="c1", name="save_report", arguments={"text": "猫"})])
    message = response.to_message()
    assert message["role"] == "assistant"
    assert message["content"] is None
    assert message["tool_calls"][0]["id"] == "c1"
    assert json.loads(message["tool_calls"][0]["function"]["arguments"]) == {"text": "猫"}


def test_chat_response_to_message_plain_text():
    assert ChatResponse(text="hi").to_message() == {"role": "assistant", "content": "hi"}


# --- Registry ---


def test_get_llm_provider_returns_openai(use_config):
    use_config(provider="openai")
    assert get_llm_provider().__class__.__name__ == "OpenAILLMProvider"


def test_get_llm_provider_azure_is_openai_compatible(use_config):
    use_config(provider="azure", azure_endpoint="https://example.openai.azure.com")
    assert isinstance(get_llm_provider(), OpenAILLMProvider)


def test_get_embedding_provider_returns_openai(use_config):
    use_config(provider="openai")
    assert isinstance(get_embedding_provider(), OpenAIEmbeddingProvider)


def test_unknown_provider_raises(use_config):
    use_config(provider="carrier-pigeon")
    with pytest.raises(ValueError, match="carrier-pigeon"):
        get_llm_provider()
    with pytest.raises(ValueError):
        get_embedding_provider()


# --- Client construction ---


def test_build_client_openai(use_config):
    use_config(provider="openai", api_key="sk-test", base_url="https://proxy.example/v1")
    client = build_client()
    assert client.api_key == "sk-test"
    assert str(client.base_url).startswith("https://proxy.example/v1")


def test_build_client_azure_requires_endpoint(use_config):
    use_config(provider="azure", api_key="key")
    with pytest.raises(ValueError, match="AZURE_OPENAI_ENDPOINT"):
        build_client()


def test_build_client_azure(use_config):
    use_config(provider="azure", api_key="key", azure_endpoint="https://example.openai.azure.com")
    assert isinstance(build_client(), AsyncAzureOpenAI)


# --- Helpers ---


def test_json_schema_format_uses_aliases():
    fmt = json_schema_format(Section)
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["name"] == "Section"
    assert set(fmt["json_schema"]["schema"]["properties"]) == {"Title", "Content"}


def test_parse_tool_calls():
    calls = parse_tool_calls(
        [tool_call_obj("a", "web_search", '{"query": "x"}'), tool_call_obj("b", "get_today", "")]
    )
    assert calls == [
        LLMToolCall(id="a", name="web_search", arguments={"query": "x"}),
        LLMToolCall(id="b", name="get_today", arguments={}),
    ]


def test_parse_tool_calls_bad_json_becomes_empty():
    assert parse_tool_calls([tool_call_obj("a", "t", "{not json")])[0].arguments == {}


def test_parse_tool_calls_none():
    assert parse_tool_calls(None) == []


# --- OpenAILLMProvider ---


@pytest.mark.asyncio
async def test_complete_before_start_raises():
    with pytest.raises(RuntimeError, match="not started"):
        await OpenAILLMProvider().complete([], model="m")


@pytest.mark.asyncio
async def test_complete_sends_tools_and_format():
    client = FakeClient(SimpleNamespace(content='{"Title": "a", "Content": "b"}', tool_calls=None))
    provider = OpenAILLMProvider(client=client)
    tools = [{"type": "function", "function": {"name": "t"}}]

    response = await provider.complete(
        [{"role": "user", "content": "hi"}], model="gpt-4.1", tools=tools, response_format=Section, max_tokens=50
    )

    kwargs = client.chat.completions.kwargs
    assert kwargs["model"] == "gpt-4.1"
    assert kwargs["tools"] == tools
    assert kwargs["tool_choice"] == "auto"
    assert kwargs["response_format"]["json_schema"]["name"] == "Section"
    assert kwargs["max_completion_tokens"] == 50
    assert response.text == '{"Title": "a", "Content": "b"}'
    assert response.model == "served-model"


@pytest.mark.asyncio
async def test_complete_minimal_request():
    client = FakeClient(SimpleNamespace(content=None, tool_calls=[tool_call_obj("c", "get_today", "{}")]))
    provider = OpenAILLMProvider(client=client)

    response = await provider.complete([{"role": "user", "content": "date?"}], model="m")

    assert set(client.chat.completions.kwargs) == {"model", "messages"}
    assert response.text == ""
    assert response.tool_calls[0].name == "get_today"


@pytest.mark.asyncio
async def test_stop_closes_client():
    client = FakeClient()
    provider = OpenAILLMProvider(client=client)
    await provider.stop()
    assert client.closed
    assert (await provider.health_check())["status"] == "not_started"


# --- OpenAIEmbeddingProvider ---


@pytest.mark.asyncio
async def test_embed_keeps_input_order():
    provider = OpenAIEmbeddingProvider(client=FakeClient())
    vectors = await provider.embed(["a", "bbb"], model="text-embedding-3-large")
    assert vectors == [[0.0, 1.0], [1.0, 3.0]]


@pytest.mark.asyncio
async def test_embed_empty_input():
    provider = OpenAIEmbeddingProvider(client=FakeClient())
    assert await provider.embed([], model="m") == []


@pytest.mark.asyncio
async def test_embed_one():
    provider = OpenAIEmbeddingProvider(client=FakeClient())
    assert await provider.embed_one("abcd", model="m") == [0.0, 4.0]


@pytest.mark.asyncio
async def test_embed_before_start_raises():
    with pytest.raises(RuntimeError):
        await OpenAIEmbeddingProvider().embed(["x"], model="m")
