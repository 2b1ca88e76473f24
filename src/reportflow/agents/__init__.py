"""reportflow agents — agents, conversation threads, roles and factories."""

from reportflow.agents.agent import Agent, AgentResponse, AgentThread
from reportflow.agents.agent_types import (
    AgentRole,
    AgentRoleDefinition,
    get_agent_role,
    list_agent_roles,
)
from reportflow.agents.factory import (
    AgentFactory,
    AgentFactoryRegistry,
    build_agent,
    build_default_factories,
)

__all__ = [
    "Agent",
    "AgentResponse",
    "AgentThread",
    "AgentRole",
    "AgentRoleDefinition",
    "get_agent_role",
    "list_agent_roles",
    "AgentFactory",
    "AgentFactoryRegistry",
    "build_agent",
    "build_default_factories",
]
