"""reportflow report — the multi-agent report pipeline.

Steps and process wiring live in reportflow.report.steps and
reportflow.report.pipeline.
"""

from reportflow.report.errors import (
    EmptyInputError,
    FinalizationError,
    PlanParseError,
    ReportError,
    SectionParseError,
)
from reportflow.report.models import ReportPlan, Section, SectionPlan

__all__ = [
    "ReportPlan",
    "SectionPlan",
    "Section",
    "ReportError",
    "EmptyInputError",
    "PlanParseError",
    "SectionParseError",
    "FinalizationError",
]
