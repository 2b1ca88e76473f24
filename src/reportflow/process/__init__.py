"""
Process Package — event-routed step runner.

Steps are wired with named events; the runner buffers inputs, fans out map
steps, and stops when a stop route fires.
"""

from reportflow.process.errors import (
    ProcessConfigurationError,
    ProcessError,
    UnknownEventError,
)
from reportflow.process.events import (
    STOP_PROCESS,
    CommonEventNames,
    Event,
    ProcessResult,
    Target,
    function_result,
)
from reportflow.process.runner import Process, ProcessBuilder, StepHandle
from reportflow.process.step import Step, StepContext

__all__ = [
    # Contracts
    "CommonEventNames",
    "Event",
    "ProcessResult",
    "Target",
    "STOP_PROCESS",
    "function_result",
    # Errors
    "ProcessError",
    "ProcessConfigurationError",
    "UnknownEventError",
    # Runner
    "Process",
    "ProcessBuilder",
    "StepHandle",
    "Step",
    "StepContext",
]
