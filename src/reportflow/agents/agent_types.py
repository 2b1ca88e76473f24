"""
Agent Roles — the four agents of the report pipeline.

Each role definition carries the agent's instructions, a description, the
structured output it must produce (if any) and the tools it may call.
Models are not part of the definition; they come from LLMConfig per role.

Usage:
    defn = get_agent_role(AgentRole.PLANNER)
    # defn.instructions, defn.response_format, defn.tools
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from reportflow.report.models import ReportPlan, Section


class AgentRole(str, Enum):
    RESEARCHER = "Researcher"
    PLANNER = "Planner"
    SECTION_WRITER = "SectionWriter"
    REPORT_FINALIZER = "ReportFinalizer"


@dataclass(frozen=True)
class AgentRoleDefinition:
    """Definition of one agent role."""

    role: AgentRole
    description: str
    instructions: str
    response_format: type[BaseModel] | None = None
    tools: tuple[str, ...] = field(default_factory=tuple)  # tool names


RESEARCHER_AGENT = AgentRoleDefinition(
    role=AgentRole.RESEARCHER,
    description="Collects the information needed to write one section of a report.",
    instructions=(
        "<BasicInstructions>\n"
        "    You are an agent that gathers reference information for a report section.\n"
        "</BasicInstructions>\n"
        "<Details>\n"
        "    Search the web with the keywords you are given and summarize what you find.\n"
        "    Include the source URLs of the information you use.\n"
        "</Details>"
    ),
    tools=("web_search",),
)

PLANNER_AGENT = AgentRoleDefinition(
    role=AgentRole.PLANNER,
    description="Plans a report for a theme.",
    instructions=(
        "<BasicInstructions>\n"
        "    You are an agent that plans a report on the theme given by the user.\n"
        "</BasicInstructions>\n"
        "<Details>\n"
        "    Produce a plan with the report title, the section titles, and for each\n"
        "    section the keywords to search the internet for when writing it.\n"
        "</Details>"
    ),
    response_format=ReportPlan,
)

SECTION_WRITER_AGENT = AgentRoleDefinition(
    role=AgentRole.SECTION_WRITER,
    description="Writes one report section from its title and reference information.",
    instructions=(
        "<BasicInstructions>\n"
        "    You are an agent that writes one section of a report.\n"
        "</BasicInstructions>\n"
        "<Details>\n"
        "    The user gives you reference information for the section.\n"
        "    Write the section using only that reference information.\n"
        "</Details>"
    ),
    response_format=Section,
)

REPORT_FINALIZER_AGENT = AgentRoleDefinition(
    role=AgentRole.REPORT_FINALIZER,
    description="Assembles the title and sections into the final report and saves it.",
    instructions=(
        "<BasicInstructions>\n"
        "    You are an agent that finishes a report and saves it to a file.\n"
        "</BasicInstructions>\n"
        "<Details>\n"
        "    Combine the given title and sections into the final report.\n"
        "    If the sections do not include an introduction and a conclusion, add them.\n"
        "    Write the report in Markdown and save it with the save_report tool.\n"
        "    Saving returns a file name; tell the user that file name.\n"
        "</Details>\n"
        "<Examples>\n"
        "    Saved to report-20250601-123456.md.\n"
        "</Examples>"
    ),
    tools=("save_report",),
)

_AGENT_ROLES: dict[AgentRole, AgentRoleDefinition] = {
    defn.role: defn
    for defn in (RESEARCHER_AGENT, PLANNER_AGENT, SECTION_WRITER_AGENT, REPORT_FINALIZER_AGENT)
}


def get_agent_role(role: AgentRole | str) -> AgentRoleDefinition:
    """Get a role definition by role or role name (case-insensitive)."""
    if isinstance(role, AgentRole):
        return _AGENT_ROLES[role]
    for known, defn in _AGENT_ROLES.items():
        if known.value.lower() == role.lower():
            return defn
    raise KeyError(f"Unknown agent role: {role}")


def list_agent_roles() -> list[AgentRoleDefinition]:
    return list(_AGENT_ROLES.values())
