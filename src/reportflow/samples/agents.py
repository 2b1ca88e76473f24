"""Agent sample — run one agent on one message and print the reply."""

from __future__ import annotations

from typing import Callable

from reportflow.agents.agent import Agent
from reportflow.agents.agent_types import AgentRole
from reportflow.agents.factory import AgentFactoryRegistry

DEFAULT_MESSAGE = "An introduction to C# .NET Blazor"


def header(agent_name: str) -> str:
    return f"================================ {agent_name} ======================================"


async def run_agent(agent: Agent, message: str, out: Callable[[str], None] = print) -> str:
    out(header(agent.name))
    response = await agent.invoke(message)
    async with response.thread:
        reply = response.message
    out(reply)
    out("")
    return reply


async def run_role(
    factories: AgentFactoryRegistry,
    role: AgentRole,
    message: str = DEFAULT_MESSAGE,
    out: Callable[[str], None] = print,
) -> str:
    """Build the agent for a role and run it once."""
    agent = await factories.create(role)
    return await run_agent(agent, message, out)
