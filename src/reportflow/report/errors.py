"""Report pipeline errors. Each one aborts the run."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for report pipeline failures."""


class EmptyInputError(ReportError):
    """The operator entered a blank theme."""


class PlanParseError(ReportError):
    """The planner's reply is not a valid ReportPlan document."""


class SectionParseError(ReportError):
    """The section writer's reply is not a valid Section document."""


class FinalizationError(ReportError):
    """The finalizer did not report a saved file name."""
