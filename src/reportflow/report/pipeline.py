"""
Report Pipeline — wires the report steps into the CreateReport process.

    Start ─► InputThemeStep ─► PlanningStep ─┬─ PublishTitle ───────────► FinalizeReportStep(title)
                                             └─ PublishSectionPlan ─► WriteSectionStep ×N
                                                                       └─ PublishSection ─► FinalizeReportStep(sections)
    FinalizeReportStep result ─► stop
"""

from __future__ import annotations

import logging

import reportflow.core.config as config_module
from reportflow.agents.agent_types import AgentRole
from reportflow.agents.factory import AgentFactoryRegistry, build_default_factories
from reportflow.core.logging import PipelineTimer
from reportflow.process import CommonEventNames, Process, ProcessBuilder, ProcessResult
from reportflow.providers.base import LLMProvider
from reportflow.report.steps import (
    FinalizeReportStep,
    InputThemeStep,
    PlanningStep,
    ReadLine,
    WriteSectionStep,
)
from reportflow.tools.save_report import ReportFileStore

logger = logging.getLogger(__name__)

PROCESS_NAME = "CreateReport"


def build_report_process(
    factories: AgentFactoryRegistry,
    read_line: ReadLine | None = None,
    max_concurrency: int | None = None,
    file_store: ReportFileStore | None = None,
) -> Process:
    """Build the CreateReport process from the registered agent factories.

    With a file_store, finalization only succeeds for a file name the store
    actually saved during the run.
    """
    if max_concurrency is None:
        max_concurrency = config_module.config.report.max_concurrency

    builder = ProcessBuilder(PROCESS_NAME)

    input_theme = builder.add_step(InputThemeStep(read_line))
    planning = builder.add_step(PlanningStep(factories.get(AgentRole.PLANNER)))
    write_section = builder.add_map_step(
        WriteSectionStep(
            factories.get(AgentRole.RESEARCHER),
            factories.get(AgentRole.SECTION_WRITER),
        )
    )
    saved_names = (lambda: file_store.saved) if file_store is not None else None
    finalize = builder.add_step(
        FinalizeReportStep(factories.get(AgentRole.REPORT_FINALIZER), saved_names)
    )

    builder.on_input_event(CommonEventNames.START).send_event_to(input_theme)
    input_theme.on_function_result().send_event_to(planning)
    planning.on_event(PlanningStep.PUBLISH_TITLE).send_event_to(finalize, parameter="title")
    planning.on_event(PlanningStep.PUBLISH_SECTION_PLAN).send_event_to(write_section)
    write_section.on_event(WriteSectionStep.PUBLISH_SECTION).send_event_to(
        finalize, parameter="sections"
    )
    finalize.on_function_result().stop_process()

    return builder.build(max_concurrency=max_concurrency)


async def run_report(
    provider: LLMProvider,
    *,
    read_line: ReadLine | None = None,
    output_dir: str | None = None,
    max_concurrency: int | None = None,
) -> ProcessResult:
    """Run one report end to end. The result's output is the saved file name."""
    report_cfg = config_module.config.report
    store = ReportFileStore(output_dir or report_cfg.output_dir)
    timer = PipelineTimer()

    await provider.start()
    timer.mark("provider_start")
    try:
        factories = build_default_factories(provider, store)
        process = build_report_process(factories, read_line, max_concurrency, file_store=store)
        result = await process.run(CommonEventNames.START)
        timer.mark(PROCESS_NAME)
    finally:
        await provider.stop()

    logger.info(
        f"Report {result.output} written to {store.output_dir} [{timer.summary()}]",
        extra={"run_id": result.run_id},
    )
    return result
