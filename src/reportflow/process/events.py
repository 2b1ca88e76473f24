"""
Process contracts — events, routing targets and run results.

All contracts are immutable (frozen dataclasses).
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any


class CommonEventNames:
    """Event names shared by every process."""

    START = "Start"


def function_result(step_name: str) -> str:
    """Name of the event a step's return value is published under."""
    return f"{step_name}.OnFunctionResult"


@dataclass(frozen=True)
class Event:
    """A named payload travelling between steps.

    ``source`` is the emitting step's name, or "" for process input events.
    """

    name: str
    payload: Any = None
    source: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: float = field(default_factory=time.time)

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.name)


@dataclass(frozen=True)
class Target:
    """Where a routed event goes: a step parameter, or the process stop."""

    step: str
    parameter: str | None = None
    stop: bool = False


STOP_PROCESS = Target(step="", stop=True)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one Process.run()."""

    process: str
    run_id: str
    stopped: bool  # True when a stop route fired, False when the queue drained
    output: Any = None  # Payload of the event that stopped the process
    events: tuple[str, ...] = ()  # Dispatched event names, in order
    duration: float = 0.0
