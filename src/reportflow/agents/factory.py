"""
Agent Factories — explicit role → constructor mapping.

Steps never build agents themselves. They receive an AgentFactory (an async
callable returning a fresh Agent) looked up from an AgentFactoryRegistry that
is filled once at startup. Each call creates a new agent.

Usage:
    factories = build_default_factories(provider, file_store)
    planner = await factories.create(AgentRole.PLANNER)
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

import reportflow.core.config as config_module
from reportflow.agents.agent import Agent
from reportflow.agents.agent_types import AgentRole, get_agent_role
from reportflow.core.config import LLMConfig
from reportflow.providers.base import LLMProvider
from reportflow.tools.base import AgentTool
from reportflow.tools.registry import ToolRegistry
from reportflow.tools.save_report import ReportFileStore, SaveReportTool
from reportflow.tools.web_search import WebSearchTool

logger = logging.getLogger(__name__)

AgentFactory = Callable[[], Awaitable[Agent]]


class AgentFactoryRegistry:
    """Maps each AgentRole to the factory that builds its agent."""

    def __init__(self) -> None:
        self._factories: dict[AgentRole, AgentFactory] = {}

    def register(self, role: AgentRole, factory: AgentFactory) -> None:
        self._factories[role] = factory
        logger.debug("Registered agent factory: %s", role.value)

    def get(self, role: AgentRole) -> AgentFactory:
        factory = self._factories.get(role)
        if factory is None:
            raise LookupError(f"No agent factory registered for role: {role.value}")
        return factory

    async def create(self, role: AgentRole) -> Agent:
        return await self.get(role)()

    def roles(self) -> list[AgentRole]:
        return list(self._factories.keys())


def model_for_role(role: AgentRole, llm: LLMConfig) -> str:
    return {
        AgentRole.PLANNER: llm.planner_model,
        AgentRole.SECTION_WRITER: llm.writer_model,
        AgentRole.RESEARCHER: llm.researcher_model,
        AgentRole.REPORT_FINALIZER: llm.finalizer_model,
    }[role]


def build_agent(
    role: AgentRole,
    provider: LLMProvider,
    tools: list[AgentTool] | None = None,
    llm: LLMConfig | None = None,
) -> Agent:
    """Build the agent for a role. ``tools`` must cover the role's tool names."""
    llm = llm or config_module.config.llm
    defn = get_agent_role(role)

    registry = None
    if defn.tools:
        available = {tool.name: tool for tool in tools or []}
        missing = [name for name in defn.tools if name not in available]
        if missing:
            raise ValueError(f"Agent {role.value} needs tools: {', '.join(missing)}")
        registry = ToolRegistry([available[name] for name in defn.tools])

    return Agent(
        role.value,
        provider=provider,
        model=model_for_role(role, llm),
        instructions=defn.instructions,
        description=defn.description,
        response_format=defn.response_format,
        tools=registry,
        max_iterations=llm.max_tool_iterations,
    )


def build_default_factories(
    provider: LLMProvider,
    file_store: ReportFileStore,
    llm: LLMConfig | None = None,
) -> AgentFactoryRegistry:
    """Register a factory for every role, sharing one provider and file store."""
    tools: list[AgentTool] = [WebSearchTool(), SaveReportTool(file_store)]
    registry = AgentFactoryRegistry()

    def _factory(role: AgentRole) -> AgentFactory:
        async def create() -> Agent:
            return build_agent(role, provider, tools, llm)

        return create

    for role in AgentRole:
        registry.register(role, _factory(role))
    return registry
