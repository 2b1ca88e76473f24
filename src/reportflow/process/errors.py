"""Process wiring and routing errors."""

from __future__ import annotations


class ProcessError(Exception):
    """Base class for step runner errors."""


class UnknownEventError(ProcessError):
    """An event was emitted that no route subscribes to."""

    def __init__(self, event_name: str, source: str = ""):
        self.event_name = event_name
        self.source = source
        origin = f" from step '{source}'" if source else ""
        super().__init__(f"No route for event '{event_name}'{origin}")


class ProcessConfigurationError(ProcessError, ValueError):
    """The process graph is wired inconsistently."""
