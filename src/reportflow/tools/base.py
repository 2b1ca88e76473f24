"""
Function-calling tools for report agents.

A tool declares its name, a description for the model and typed parameters,
and implements execute(). Agents only ever call safe_execute(): bad arguments
and tool exceptions come back to the model as a failed ToolResult, so a tool
can never abort an agent's completion loop.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolParam:
    """One argument of a tool, described in JSON Schema terms."""
    name: str
    type: str  # JSON Schema type
    description: str
    required: bool = True
    default: Any = None
    enum: tuple[str, ...] | None = None

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema


@dataclass(frozen=True)
class ToolResult:
    """Text handed back to the model, plus metadata for callers and logs."""
    output: str
    error: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, output: str, **metadata: Any) -> ToolResult:
        return cls(output, error=False, metadata=metadata)

    @classmethod
    def fail(cls, message: str, **metadata: Any) -> ToolResult:
        return cls(message, error=True, metadata=metadata)


class AgentTool(ABC):
    """Base class for report agent tools. Subclasses set the class attributes."""

    name: str = ""
    description: str = ""
    parameters: list[ToolParam] = []

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        ...

    def to_openai_schema(self) -> dict:
        """The tool as an entry of the chat completions ``tools`` list."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {p.name: p.json_schema() for p in self.parameters},
                    "required": [p.name for p in self.parameters if p.required],
                },
            },
        }

    def bind_arguments(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Keep declared arguments and fill optional defaults.

        Raises ValueError when a required argument is missing.
        """
        missing = [p.name for p in self.parameters if p.required and p.name not in arguments]
        if missing:
            raise ValueError(f"Missing required parameter: {', '.join(missing)}")

        bound = {}
        for param in self.parameters:
            if param.name in arguments:
                bound[param.name] = arguments[param.name]
            elif param.default is not None:
                bound[param.name] = param.default
        return bound

    async def safe_execute(self, **kwargs: Any) -> ToolResult:
        try:
            bound = self.bind_arguments(kwargs)
        except ValueError as e:
            return ToolResult.fail(f"Invalid arguments: {e}")

        try:
            return await self.execute(**bound)
        except Exception as e:
            logger.error(f"Tool {self.name} failed: {e}", exc_info=True, extra={"tool": self.name})
            return ToolResult.fail(f"Tool error: {e}")

    def __repr__(self) -> str:
        return f"<AgentTool {self.name}>"
