"""
Tool Registry — register tools, export schemas, dispatch by name.
"""

from __future__ import annotations

import logging
from typing import Any

from reportflow.tools.base import AgentTool, ToolResult

logger = logging.getLogger(__name__)


class ToolRegistry:
    """A set of tools an agent may call."""

    def __init__(self, tools: list[AgentTool] | None = None):
        self._tools: dict[str, AgentTool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: AgentTool) -> None:
        """Register a tool. Overwrites if name already exists."""
        if not tool.name:
            raise ValueError(f"Tool must have a name: {tool}")
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get(self, name: str) -> AgentTool | None:
        return self._tools.get(name)

    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    async def dispatch(self, name: str, args: dict[str, Any]) -> ToolResult:
        """Execute a tool by name with the model-supplied args."""
        tool = self._tools.get(name)
        if not tool:
            return ToolResult.fail(f"Unknown tool: {name}")

        logger.info(f"Dispatching tool: {name} with args: {list(args.keys())}")
        return await tool.safe_execute(**args)

    def to_openai_tools(self) -> list[dict]:
        """Get all tool schemas in OpenAI function calling format."""
        return [tool.to_openai_schema() for tool in self._tools.values()]
