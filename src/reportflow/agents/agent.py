"""
Agent — an LLM with instructions, an optional tool set and an optional
structured response format.

Each invoke() runs inside an AgentThread, the conversation handle for that
call. Threads must be deleted when the caller is done with them:

    response = await agent.invoke("Plan a report on Blazor")
    async with response.thread:
        plan = ReportPlan.from_json(response.message)

The thread is deleted when the block exits, normally or with an exception.
If invoke() itself fails, a thread it created is deleted before the error
propagates.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from reportflow.providers.base import LLMProvider
from reportflow.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5  # Tool loop iterations per invoke


class AgentThread:
    """Conversation state for one agent call. Delete it after use."""

    def __init__(self, agent_name: str):
        self.id = f"thread-{uuid.uuid4().hex[:12]}"
        self.agent_name = agent_name
        self.messages: list[dict[str, Any]] = []
        self.deleted = False
        self._on_delete: list = []

    def ensure_active(self) -> None:
        if self.deleted:
            raise RuntimeError(f"Thread {self.id} has been deleted")

    async def delete(self) -> None:
        """Release the thread. Safe to call more than once."""
        if self.deleted:
            return
        self.deleted = True
        self.messages.clear()
        for callback in self._on_delete:
            callback(self)
        logger.debug(
            "Deleted thread %s", self.id, extra={"agent": self.agent_name, "thread_id": self.id}
        )

    async def __aenter__(self) -> AgentThread:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.delete()

    def __repr__(self) -> str:
        state = "deleted" if self.deleted else f"{len(self.messages)} messages"
        return f"<AgentThread {self.id} ({state})>"


@dataclass
class AgentResponse:
    """Final reply of an invoke() and the thread it ran in."""
    message: str
    thread: AgentThread


class Agent:
    """
    A single LLM-backed agent.

    Usage:
        agent = Agent("Planner", instructions="...", provider=llm, model="o3",
                      response_format=ReportPlan)
        response = await agent.invoke("C# intro")
    """

    def __init__(
        self,
        name: str,
        *,
        provider: LLMProvider,
        model: str,
        instructions: str | None = None,
        description: str = "",
        response_format: type[BaseModel] | None = None,
        tools: ToolRegistry | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        self.name = name
        self.provider = provider
        self.model = model
        self.instructions = instructions
        self.description = description
        self.response_format = response_format
        self.tools = tools
        self.max_iterations = max_iterations
        self._open_threads: set[str] = set()

    @property
    def open_threads(self) -> int:
        """Threads created by this agent that have not been deleted yet."""
        return len(self._open_threads)

    def create_thread(self) -> AgentThread:
        thread = AgentThread(self.name)
        self._open_threads.add(thread.id)
        thread._on_delete.append(lambda t: self._open_threads.discard(t.id))
        return thread

    async def invoke(
        self,
        prompt: str | list[dict[str, Any]],
        thread: AgentThread | None = None,
    ) -> AgentResponse:
        """Send a prompt (text or chat messages) and return the final reply."""
        owns_thread = thread is None
        if thread is None:
            thread = self.create_thread()
        thread.ensure_active()

        start = time.time()
        try:
            text = await self._run(prompt, thread)
        except BaseException:
            if owns_thread:
                await thread.delete()
            raise

        logger.info(
            f"Agent {self.name} replied in {time.time() - start:.1f}s ({len(text)} chars)",
            extra={"agent": self.name, "thread_id": thread.id},
        )
        return AgentResponse(message=text, thread=thread)

    async def _run(self, prompt: str | list[dict[str, Any]], thread: AgentThread) -> str:
        """Run the completion loop, executing tool calls until a plain reply."""
        if isinstance(prompt, str):
            thread.messages.append({"role": "user", "content": prompt})
        else:
            thread.messages.extend(prompt)

        tools_schema = self.tools.to_openai_tools() if self.tools else None
        text = ""

        for iteration in range(self.max_iterations):
            messages = list(thread.messages)
            if self.instructions:
                messages.insert(0, {"role": "system", "content": self.instructions})

            response = await self.provider.complete(
                messages,
                model=self.model,
                tools=tools_schema,
                response_format=self.response_format,
            )
            thread.messages.append(response.to_message())
            text = response.text

            if not response.tool_calls or not self.tools:
                break

            for tc in response.tool_calls:
                logger.info(
                    f"Agent {self.name} tool: {tc.name}({list(tc.arguments.keys())})",
                    extra={"agent": self.name, "thread_id": thread.id},
                )
                result = await self.tools.dispatch(tc.name, tc.arguments)
                thread.messages.append(
                    {"role": "tool", "tool_call_id": tc.id, "content": result.output}
                )

            logger.debug(
                f"Agent {self.name} iteration {iteration + 1}: executed {len(response.tool_calls)} tools"
            )
        else:
            logger.warning(f"Agent {self.name} hit the tool loop limit ({self.max_iterations})")

        return text.strip()

    def __repr__(self) -> str:
        return f"<Agent:{self.name} model={self.model}>"
