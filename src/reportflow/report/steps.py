"""
Report Steps — the four stages of the CreateReport process.

    InputThemeStep      operator input → theme
    PlanningStep        theme → PublishTitle(title), PublishSectionPlan(sections)
    WriteSectionStep    one SectionPlan → PublishSection(section)   (map step)
    FinalizeReportStep  title + sections → saved report file name

Each step gets its agents from factories and deletes every agent thread it
opens, whether the step succeeds or fails.
"""

from __future__ import annotations

import inspect
import logging
import re
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from reportflow.agents.factory import AgentFactory
from reportflow.process.step import Step, StepContext
from reportflow.report.errors import (
    EmptyInputError,
    FinalizationError,
    PlanParseError,
    SectionParseError,
)
from reportflow.report.models import ReportPlan, Section, SectionPlan, sections_to_json

logger = logging.getLogger(__name__)

ReadLine = Callable[[], "str | None | Awaitable[str | None]"]

THEME_PROMPT = "Enter the report theme: "
REPORT_FILE_PATTERN = re.compile(r"report-\d{8}-\d{6}\.md")


def console_read_line() -> str | None:
    """Read one line from the console. End of input reads as None."""
    try:
        return input(THEME_PROMPT)
    except EOFError:
        return None


class InputThemeStep(Step):
    """Asks the operator for the report theme."""

    name = "InputThemeStep"
    parameters = ()

    def __init__(self, read_line: ReadLine | None = None):
        self._read_line = read_line or console_read_line

    async def invoke(self, context: StepContext, **inputs: Any) -> str:
        line = self._read_line()
        if inspect.isawaitable(line):
            line = await line
        theme = (line or "").strip()
        if not theme:
            raise EmptyInputError("The report theme cannot be empty.")
        logger.info(f"Theme: {theme}", extra={"step": self.name})
        return theme


class PlanningStep(Step):
    """Has the planner outline the report, then publishes title and sections."""

    name = "PlanningStep"
    parameters = ("theme",)

    PUBLISH_TITLE = "PublishTitle"
    PUBLISH_SECTION_PLAN = "PublishSectionPlan"

    def __init__(self, create_planner: AgentFactory):
        self._create_planner = create_planner

    async def invoke(self, context: StepContext, theme: str) -> None:
        logger.info(f"Planning a report on {theme}...", extra={"step": self.name})
        planner = await self._create_planner()
        response = await planner.invoke(theme)
        async with response.thread:
            try:
                plan = ReportPlan.from_json(response.message)
            except ValidationError as e:
                raise PlanParseError(f"Planner returned an invalid plan: {e}") from e

        logger.info(
            f"Title: {plan.title}, sections: {', '.join(s.title for s in plan.sections)}",
            extra={"step": self.name},
        )
        await context.emit_event(self.PUBLISH_TITLE, plan.title)
        await context.emit_event(self.PUBLISH_SECTION_PLAN, list(plan.sections))


class WriteSectionStep(Step):
    """Researches and writes one section. Runs once per planned section."""

    name = "WriteSectionStep"
    parameters = ("section_plan",)

    PUBLISH_SECTION = "PublishSection"

    def __init__(self, create_researcher: AgentFactory, create_section_writer: AgentFactory):
        self._create_researcher = create_researcher
        self._create_section_writer = create_section_writer

    @staticmethod
    def writer_prompt(section_title: str, research: str) -> str:
        return (
            f"Using the information below, write the {section_title} section.\n"
            f"{research}\n\n"
            "Write the section content in Markdown."
        )

    async def invoke(self, context: StepContext, section_plan: SectionPlan) -> None:
        logger.info(f"Searching for {section_plan.search_keywords}...", extra={"step": self.name})
        researcher = await self._create_researcher()
        research = await researcher.invoke(section_plan.search_keywords)
        async with research.thread:
            findings = research.message

        logger.info(f"Writing the {section_plan.title} section...", extra={"step": self.name})
        writer = await self._create_section_writer()
        response = await writer.invoke(self.writer_prompt(section_plan.title, findings))
        async with response.thread:
            try:
                section = Section.from_json(response.message)
            except ValidationError as e:
                raise SectionParseError(
                    f"Section writer returned an invalid section for {section_plan.title}: {e}"
                ) from e

        await context.emit_event(self.PUBLISH_SECTION, section)


class FinalizeReportStep(Step):
    """Assembles the final report and has the finalizer save it."""

    name = "FinalizeReportStep"
    parameters = ("title", "sections")

    def __init__(
        self,
        create_finalizer: AgentFactory,
        saved_names: Callable[[], list[str]] | None = None,
    ):
        self._create_finalizer = create_finalizer
        self._saved_names = saved_names

    @staticmethod
    def finalizer_prompt(title: str, sections: list[Section]) -> str:
        return (
            "Write the final report from the content below.\n\n"
            f"<title>{title}</title>\n"
            f"<sections>{sections_to_json(sections)}</sections>"
        )

    async def invoke(self, context: StepContext, title: str, sections: list[Section]) -> str:
        logger.info(
            f"Writing the final report ({len(sections)} sections)...", extra={"step": self.name}
        )
        saved_before = len(self._saved_names()) if self._saved_names else 0
        finalizer = await self._create_finalizer()
        response = await finalizer.invoke(self.finalizer_prompt(title, list(sections)))
        async with response.thread:
            reply = response.message

        match = REPORT_FILE_PATTERN.search(reply)
        if match is None:
            raise FinalizationError(f"Finalizer did not report a saved file: {reply[:200]!r}")

        file_name = match.group(0)
        if self._saved_names is not None:
            saved = self._saved_names()[saved_before:]
            if file_name not in saved:
                raise FinalizationError(
                    f"Finalizer reported {file_name}, which was not saved in this run "
                    f"(saved: {', '.join(saved) or 'nothing'})"
                )

        logger.info(f"Report saved to {file_name}", extra={"step": self.name})
        return file_name
