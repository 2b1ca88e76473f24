"""Shared fixtures — scripted in-memory providers instead of network calls."""

from __future__ import annotations

import inspect
import re

import pytest

from reportflow.providers.base import ChatResponse, EmbeddingProvider, LLMProvider, LLMToolCall
from reportflow.report.models import ReportPlan, Section, SectionPlan
from reportflow.tools.save_report import ReportFileStore


class ScriptedLLMProvider(LLMProvider):
    """Replies from a list, or from a handler called with the messages.

    Replies may be plain strings or ChatResponse objects. Every call is
    recorded in ``calls``.
    """

    def __init__(self, replies=None, handler=None):
        self.replies = list(replies or [])
        self.handler = handler
        self.calls: list[dict] = []
        self.started = False
        self.stopped = False

    @staticmethod
    def tool_call(name: str, arguments: dict, call_id: str = "call-1") -> ChatResponse:
        return ChatResponse(tool_calls=[LLMToolCall(id=call_id, name=name, arguments=arguments)])

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def complete(self, messages, *, model, tools=None, response_format=None, max_tokens=None):
        self.calls.append(
            {
                "messages": [dict(m) for m in messages],
                "model": model,
                "tools": tools,
                "response_format": response_format,
            }
        )
        if self.handler is not None:
            reply = self.handler(messages, model=model, tools=tools)
            if inspect.isawaitable(reply):
                reply = await reply
        else:
            reply = self.replies.pop(0)
        if isinstance(reply, str):
            reply = ChatResponse(text=reply, model=model)
        return reply


class FakeEmbeddingProvider(EmbeddingProvider):
    def __init__(self, vectors: dict[str, list[float]]):
        self.vectors = vectors
        self.calls: list[list[str]] = []

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def embed(self, texts, *, model):
        self.calls.append(list(texts))
        return [self.vectors[text] for text in texts]


_WRITE_PROMPT = re.compile(r"write the (.+) section\.")


def role_of(messages) -> str:
    """Which report agent a request comes from, by its system prompt."""
    system = messages[0]["content"] if messages and messages[0]["role"] == "system" else ""
    if "plans a report" in system:
        return "Planner"
    if "gathers reference information" in system:
        return "Researcher"
    if "writes one section" in system:
        return "SectionWriter"
    if "finishes a report" in system:
        return "ReportFinalizer"
    return "Unknown"


class ReportScript:
    """Plays all four report agents. The finalizer really calls save_report."""

    def __init__(self, plan: ReportPlan, planner_reply: str | None = None):
        self.plan = plan
        self.planner_reply = planner_reply
        self.prompts: dict[str, list[str]] = {}

    def __call__(self, messages, *, model, tools=None):
        role = role_of(messages)
        last = messages[-1]
        if last["role"] == "user":
            self.prompts.setdefault(role, []).append(last["content"])

        if role == "Planner":
            return self.planner_reply if self.planner_reply is not None else self.plan.to_json()
        if role == "Researcher":
            return f"Research notes on {last['content']} (https://example.com)"
        if role == "SectionWriter":
            title = _WRITE_PROMPT.search(last["content"]).group(1)
            return Section(title=title, content=f"## {title}\n\nBody of {title}.").to_json()
        if role == "ReportFinalizer":
            if last["role"] == "tool":
                return f"Saved to {last['content']}."
            return ScriptedLLMProvider.tool_call("save_report", {"text": last["content"]})
        raise AssertionError(f"Unexpected request: {messages}")


def make_plan(title: str, *section_titles: str) -> ReportPlan:
    return ReportPlan(
        title=title,
        sections=tuple(
            SectionPlan(title=name, search_keywords=f"{name} keywords") for name in section_titles
        ),
    )


@pytest.fixture
def file_store(tmp_path):
    return ReportFileStore(str(tmp_path))


@pytest.fixture
def csharp_plan():
    return make_plan(
        "Getting Started with C#",
        "What is C#",
        "Setting up .NET",
        "Your first program",
    )
