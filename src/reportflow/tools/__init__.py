"""reportflow tools — function-calling tools for agents."""

from reportflow.tools.base import AgentTool, ToolParam, ToolResult
from reportflow.tools.registry import ToolRegistry

__all__ = ["AgentTool", "ToolParam", "ToolResult", "ToolRegistry"]
