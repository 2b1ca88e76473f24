"""Get Today tool — the current local date and time."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from reportflow.tools.base import AgentTool, ToolResult


class GetTodayTool(AgentTool):
    name = "get_today"
    description = "Returns today's date and time."
    parameters = []

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now().astimezone())

    async def execute(self) -> ToolResult:
        now = self._clock()
        return ToolResult.success(now.isoformat(), timestamp=now.timestamp())
