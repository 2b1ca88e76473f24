"""
Step — the building block of a process.

A step declares the parameters it needs and implements invoke(). The runner
calls invoke() once every parameter has a value. Whatever invoke() returns is
published as the step's function result event; anything else is published
explicitly with context.emit_event().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from reportflow.process.events import Event


class StepContext:
    """Handed to every invoke(). Emits events on behalf of the step."""

    def __init__(self, step_name: str, emit: Callable[[Event], None], run_id: str = ""):
        self.step_name = step_name
        self.run_id = run_id
        self._emit = emit

    async def emit_event(self, name: str, payload: Any = None) -> None:
        """Publish an event from this step. Raises UnknownEventError if unrouted."""
        self._emit(Event(name=name, payload=payload, source=self.step_name))


class Step(ABC):
    """Base class for all process steps."""

    name: str = ""
    parameters: tuple[str, ...] = ()

    @abstractmethod
    async def invoke(self, context: StepContext, **inputs: Any) -> Any:
        """Run the step with one value per declared parameter."""
        ...

    def __repr__(self) -> str:
        return f"<Step:{self.name or self.__class__.__name__}>"
