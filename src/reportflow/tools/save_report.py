"""Save Report tool — persist a finished report and hand back its file name."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Callable

from reportflow.tools.base import AgentTool, ToolParam, ToolResult

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportFileStore:
    """Writes reports as report-YYYYMMDD-HHMMSS.md (UTC) under output_dir."""

    def __init__(self, output_dir: str = ".", clock: Callable[[], datetime] = _utcnow):
        self.output_dir = os.path.abspath(output_dir)
        self._clock = clock
        self.saved: list[str] = []

    def file_name(self) -> str:
        return f"report-{self._clock():%Y%m%d-%H%M%S}.md"

    def save(self, text: str) -> str:
        """Write text to a fresh report file. Returns the generated file name."""
        name = self.file_name()
        os.makedirs(self.output_dir, exist_ok=True)
        with open(os.path.join(self.output_dir, name), "w", encoding="utf-8") as f:
            f.write(text)
        self.saved.append(name)
        logger.info("Saved report %s (%d chars)", name, len(text))
        return name


class SaveReportTool(AgentTool):
    name = "save_report"
    description = "Save the report to the file system. The file name is generated automatically and returned."
    parameters = [
        ToolParam(name="text", type="string", description="The full report content to save."),
    ]

    def __init__(self, store: ReportFileStore):
        self.store = store

    async def execute(self, text: str) -> ToolResult:
        try:
            file_name = self.store.save(text)
        except OSError as e:
            return ToolResult.fail(f"Error saving report: {e}")
        return ToolResult.success(file_name, file_name=file_name)
