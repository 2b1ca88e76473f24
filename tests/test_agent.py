"""Tests for Agent — completion loop, tool calls and thread release."""

import pytest

from reportflow.agents.agent import Agent, AgentThread
from reportflow.providers.base import ChatResponse, LLMToolCall
from reportflow.report.models import Section
from reportflow.tools.base import AgentTool, ToolParam, ToolResult
from reportflow.tools.registry import ToolRegistry

from conftest import ScriptedLLMProvider


class EchoTool(AgentTool):
    name = "echo"
    description = "Echo the text back."
    parameters = [ToolParam(name="text", type="string", description="Text to echo")]

    def __init__(self):
        self.calls = []

    async def execute(self, text: str) -> ToolResult:
        self.calls.append(text)
        return ToolResult.success(f"echo: {text}")


def echo_call(text, call_id="call-1"):
    return ChatResponse(tool_calls=[LLMToolCall(id=call_id, name="echo", arguments={"text": text})])


# --- Thread ---


class TestAgentThread:
    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self):
        thread = AgentThread("A")
        thread.messages.append({"role": "user", "content": "hi"})
        await thread.delete()
        await thread.delete()
        assert thread.deleted
        assert thread.messages == []

    @pytest.mark.asyncio
    async def test_context_manager_deletes_on_error(self):
        thread = AgentThread("A")
        with pytest.raises(RuntimeError):
            async with thread:
                raise RuntimeError("inside")
        assert thread.deleted

    @pytest.mark.asyncio
    async def test_deleted_thread_cannot_be_reused(self):
        provider = ScriptedLLMProvider(["one", "two"])
        agent = Agent("A", provider=provider, model="m")
        response = await agent.invoke("first")
        await response.thread.delete()

        with pytest.raises(RuntimeError, match="deleted"):
            await agent.invoke("second", thread=response.thread)


# --- invoke ---


@pytest.mark.asyncio
async def test_invoke_returns_text_and_open_thread():
    provider = ScriptedLLMProvider(["  Hello there.  "])
    agent = Agent("Greeter", provider=provider, model="gpt-test", instructions="Be nice.")

    response = await agent.invoke("Hi")

    assert response.message == "Hello there."
    assert agent.open_threads == 1
    assert provider.calls[0]["model"] == "gpt-test"
    assert provider.calls[0]["messages"] == [
        {"role": "system", "content": "Be nice."},
        {"role": "user", "content": "Hi"},
    ]

    async with response.thread:
        pass
    assert agent.open_threads == 0


@pytest.mark.asyncio
async def test_invoke_passes_response_format():
    provider = ScriptedLLMProvider(['{"Title": "t", "Content": "c"}'])
    agent = Agent("Writer", provider=provider, model="m", response_format=Section)

    response = await agent.invoke("write")
    await response.thread.delete()

    assert provider.calls[0]["response_format"] is Section
    assert provider.calls[0]["tools"] is None


@pytest.mark.asyncio
async def test_invoke_accepts_message_list():
    provider = ScriptedLLMProvider(["ok"])
    agent = Agent("A", provider=provider, model="m")
    messages = [
        {"role": "system", "content": "persona"},
        {"role": "user", "content": "question"},
    ]

    response = await agent.invoke(messages)
    await response.thread.delete()

    assert provider.calls[0]["messages"] == messages


@pytest.mark.asyncio
async def test_tool_calls_are_executed_and_fed_back():
    tool = EchoTool()
    provider = ScriptedLLMProvider([echo_call("ping"), "The tool said echo: ping"])
    agent = Agent("Tooly", provider=provider, model="m", tools=ToolRegistry([tool]))

    response = await agent.invoke("use the tool")

    assert tool.calls == ["ping"]
    assert response.message == "The tool said echo: ping"
    second_call = provider.calls[1]["messages"]
    assert second_call[-2]["tool_calls"][0]["function"]["name"] == "echo"
    assert second_call[-1] == {"role": "tool", "tool_call_id": "call-1", "content": "echo: ping"}
    assert provider.calls[0]["tools"][0]["function"]["name"] == "echo"
    await response.thread.delete()


@pytest.mark.asyncio
async def test_unknown_tool_is_reported_to_the_model():
    provider = ScriptedLLMProvider(
        [
            ChatResponse(tool_calls=[LLMToolCall(id="c", name="missing", arguments={})]),
            "recovered",
        ]
    )
    agent = Agent("A", provider=provider, model="m", tools=ToolRegistry([EchoTool()]))

    response = await agent.invoke("go")

    assert response.message == "recovered"
    assert provider.calls[1]["messages"][-1]["content"] == "Unknown tool: missing"
    await response.thread.delete()


@pytest.mark.asyncio
async def test_tool_loop_stops_at_max_iterations():
    provider = ScriptedLLMProvider([echo_call(str(i), f"call-{i}") for i in range(3)])
    agent = Agent("Loopy", provider=provider, model="m", tools=ToolRegistry([EchoTool()]), max_iterations=3)

    response = await agent.invoke("loop")

    assert len(provider.calls) == 3
    assert response.message == ""
    await response.thread.delete()


@pytest.mark.asyncio
async def test_failed_invoke_releases_its_thread():
    class Exploding(ScriptedLLMProvider):
        async def complete(self, messages, **kwargs):
            raise ConnectionError("provider down")

    agent = Agent("A", provider=Exploding(), model="m")

    with pytest.raises(ConnectionError):
        await agent.invoke("hi")

    assert agent.open_threads == 0


@pytest.mark.asyncio
async def test_failed_invoke_keeps_caller_thread():
    class Exploding(ScriptedLLMProvider):
        async def complete(self, messages, **kwargs):
            raise ConnectionError("provider down")

    agent = Agent("A", provider=Exploding(), model="m")
    thread = agent.create_thread()

    with pytest.raises(ConnectionError):
        await agent.invoke("hi", thread=thread)

    assert not thread.deleted
    assert agent.open_threads == 1
    await thread.delete()
    assert agent.open_threads == 0
