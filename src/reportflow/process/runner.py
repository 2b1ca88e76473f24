"""
Process Runner — routes named events between steps until the process stops.

Wiring:
    builder = ProcessBuilder("CreateReport")
    plan = builder.add_step(PlanningStep(...))
    write = builder.add_map_step(WriteSectionStep(...))
    builder.on_input_event(CommonEventNames.START).send_event_to(plan)
    plan.on_event("PublishSectionPlan").send_event_to(write)
    write.on_function_result().stop_process()
    process = builder.build(max_concurrency=3)

    result = await process.run(CommonEventNames.START, payload)

Semantics:
- Routes are keyed by (source step, event name). Emitting an event with no
  route raises UnknownEventError. Function-result events are published only
  when something is routed to them.
- A step fires once every declared parameter has a buffered value. Values are
  buffered FIFO per step and parameter.
- A map step receives a sequence and runs once per element, at most
  max_concurrency at a time. Events emitted by the instances are collected
  and re-published once as a list in element order, after every instance has
  finished. Each event routed from a map step is re-published even when the
  list is empty.
- The run ends when a stop route fires or when no events are pending and no
  step is running. The first step failure cancels everything still running
  and propagates out of run().
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any

from reportflow.process.errors import ProcessConfigurationError, UnknownEventError
from reportflow.process.events import (
    STOP_PROCESS,
    CommonEventNames,
    Event,
    ProcessResult,
    Target,
    function_result,
)
from reportflow.process.step import Step, StepContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 3


@dataclass(frozen=True)
class _StepEntry:
    name: str
    step: Step
    is_map: bool = False


class EdgeBuilder:
    """Adds routes for one (source, event name) key."""

    def __init__(self, builder: ProcessBuilder, key: tuple[str, str]):
        self._builder = builder
        self._key = key

    def send_event_to(
        self, target: StepHandle | Target, parameter: str | None = None
    ) -> EdgeBuilder:
        if isinstance(target, StepHandle):
            target = Target(step=target.name, parameter=parameter)
        self._builder._add_route(self._key, target)
        return self

    def stop_process(self) -> EdgeBuilder:
        self._builder._add_route(self._key, STOP_PROCESS)
        return self


class StepHandle:
    """A step added to a ProcessBuilder. Source of outgoing routes."""

    def __init__(self, builder: ProcessBuilder, name: str):
        self._builder = builder
        self.name = name

    def on_event(self, event_name: str) -> EdgeBuilder:
        return EdgeBuilder(self._builder, (self.name, event_name))

    def on_function_result(self) -> EdgeBuilder:
        return self.on_event(function_result(self.name))

    def __repr__(self) -> str:
        return f"<StepHandle:{self.name}>"


class ProcessBuilder:
    """Collects steps and routes, then validates them into a Process."""

    def __init__(self, name: str):
        self.name = name
        self._steps: dict[str, _StepEntry] = {}
        self._routes: dict[tuple[str, str], list[Target]] = {}

    def add_step(self, step: Step, name: str | None = None) -> StepHandle:
        return self._add(step, name, is_map=False)

    def add_map_step(self, step: Step, name: str | None = None) -> StepHandle:
        return self._add(step, name, is_map=True)

    def on_input_event(self, event_name: str) -> EdgeBuilder:
        return EdgeBuilder(self, ("", event_name))

    def _add(self, step: Step, name: str | None, is_map: bool) -> StepHandle:
        name = name or step.name or step.__class__.__name__
        if name in self._steps:
            raise ProcessConfigurationError(f"Duplicate step name: {name}")
        self._steps[name] = _StepEntry(name=name, step=step, is_map=is_map)
        return StepHandle(self, name)

    def _add_route(self, key: tuple[str, str], target: Target) -> None:
        self._routes.setdefault(key, []).append(target)

    def _resolve(self, target: Target) -> Target:
        """Check a target and bind its parameter."""
        if target.stop:
            return target
        entry = self._steps.get(target.step)
        if entry is None:
            raise ProcessConfigurationError(f"Route targets unknown step: {target.step}")
        params = entry.step.parameters
        if target.parameter is not None:
            if target.parameter not in params:
                raise ProcessConfigurationError(
                    f"Step {entry.name} has no parameter '{target.parameter}'"
                )
            return target
        if len(params) > 1:
            raise ProcessConfigurationError(
                f"Route to {entry.name} must name one of its parameters: {', '.join(params)}"
            )
        return Target(step=entry.name, parameter=params[0] if params else None)

    def build(self, max_concurrency: int = DEFAULT_MAX_CONCURRENCY) -> Process:
        if max_concurrency < 1:
            raise ProcessConfigurationError("max_concurrency must be at least 1")
        for entry in self._steps.values():
            if entry.is_map and len(entry.step.parameters) != 1:
                raise ProcessConfigurationError(
                    f"Map step {entry.name} must declare exactly one parameter"
                )
        routes = {
            key: tuple(self._resolve(target) for target in targets)
            for key, targets in self._routes.items()
        }
        return Process(self.name, dict(self._steps), routes, max_concurrency)


class Process:
    """A validated, reusable process graph. Each run() gets fresh state."""

    def __init__(
        self,
        name: str,
        steps: dict[str, _StepEntry],
        routes: dict[tuple[str, str], tuple[Target, ...]],
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ):
        self.name = name
        self.steps = steps
        self.routes = routes
        self.max_concurrency = max_concurrency

    def event_names_from(self, step_name: str) -> list[str]:
        """Names of all routed events whose source is the given step."""
        return [name for source, name in self.routes if source == step_name]

    async def run(
        self, event_name: str = CommonEventNames.START, payload: Any = None
    ) -> ProcessResult:
        """Run the process from one input event until it stops or drains."""
        return await _ProcessRun(self).execute(Event(name=event_name, payload=payload))

    def __repr__(self) -> str:
        return f"Process[{self.name}: {', '.join(self.steps)}]"


class _ProcessRun:
    """State of a single run: pending events, parameter buffers, tasks."""

    def __init__(self, process: Process):
        self.process = process
        self.run_id = uuid.uuid4().hex[:12]
        self._pending: deque[Event] = deque()
        self._buffers: dict[str, dict[str, deque]] = {
            name: {param: deque() for param in entry.step.parameters}
            for name, entry in process.steps.items()
        }
        self._tasks: set[asyncio.Task] = set()
        self._wakeup = asyncio.Event()
        self._semaphore = asyncio.Semaphore(process.max_concurrency)
        self._stopped = False
        self._output: Any = None
        self._history: list[str] = []

    def _log_extra(self, **fields: Any) -> dict:
        return {"run_id": self.run_id, **fields}

    def emit(self, event: Event) -> None:
        if event.key not in self.process.routes:
            raise UnknownEventError(event.name, event.source)
        self._pending.append(event)
        self._wakeup.set()

    async def execute(self, start: Event) -> ProcessResult:
        started = time.monotonic()
        self.emit(start)
        logger.info(
            f"Process {self.process.name} started ({start.name})",
            extra=self._log_extra(event=start.name),
        )

        try:
            while True:
                while self._pending and not self._stopped:
                    self._dispatch(self._pending.popleft())
                if self._stopped or not self._tasks:
                    break

                # Wake on a finished task or on an event emitted mid-step
                self._wakeup.clear()
                waiter = asyncio.create_task(self._wakeup.wait())
                try:
                    done, _ = await asyncio.wait(
                        {*self._tasks, waiter}, return_when=asyncio.FIRST_COMPLETED
                    )
                finally:
                    waiter.cancel()
                done.discard(waiter)
                self._tasks -= done
                failures = [
                    task.exception()
                    for task in done
                    if not task.cancelled() and task.exception() is not None
                ]
                if failures:
                    logger.error(
                        f"Process {self.process.name} failed: {failures[0]!r}",
                        extra=self._log_extra(),
                    )
                    raise failures[0]
        finally:
            await self._cancel_outstanding()

        duration = time.monotonic() - started
        logger.info(
            f"Process {self.process.name} {'stopped' if self._stopped else 'drained'} "
            f"after {duration:.1f}s",
            extra=self._log_extra(duration_ms=int(duration * 1000)),
        )
        return ProcessResult(
            process=self.process.name,
            run_id=self.run_id,
            stopped=self._stopped,
            output=self._output,
            events=tuple(self._history),
            duration=duration,
        )

    def _dispatch(self, event: Event) -> None:
        self._history.append(event.name)
        logger.debug(
            f"Dispatching {event.name} from {event.source or 'input'}",
            extra=self._log_extra(event=event.name),
        )
        for target in self.process.routes[event.key]:
            if target.stop:
                self._stopped = True
                self._output = event.payload
                return
            entry = self.process.steps[target.step]
            if target.parameter is None:
                self._schedule(entry, {})
                continue
            self._buffers[entry.name][target.parameter].append(event.payload)
            self._fire_ready(entry)

    def _fire_ready(self, entry: _StepEntry) -> None:
        buffers = self._buffers[entry.name]
        while all(buffers[param] for param in entry.step.parameters):
            inputs = {param: buffers[param].popleft() for param in entry.step.parameters}
            self._schedule(entry, inputs)

    def _schedule(self, entry: _StepEntry, inputs: dict[str, Any]) -> None:
        coro = self._run_map(entry, inputs) if entry.is_map else self._run_step(entry, inputs)
        task = asyncio.create_task(coro, name=f"{self.process.name}:{entry.name}")
        self._tasks.add(task)

    def _publish_result(self, step_name: str, result: Any) -> None:
        name = function_result(step_name)
        if (step_name, name) in self.process.routes:
            self._pending.append(Event(name=name, payload=result, source=step_name))

    async def _run_step(self, entry: _StepEntry, inputs: dict[str, Any]) -> None:
        context = StepContext(entry.name, self.emit, self.run_id)
        start = time.monotonic()
        logger.debug(f"Step {entry.name} started", extra=self._log_extra(step=entry.name))

        result = await entry.step.invoke(context, **inputs)

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"Step {entry.name} finished in {duration_ms}ms",
            extra=self._log_extra(step=entry.name, duration_ms=duration_ms),
        )
        self._publish_result(entry.name, result)

    async def _run_map(self, entry: _StepEntry, inputs: dict[str, Any]) -> None:
        (param,) = entry.step.parameters
        items = list(inputs[param])
        emitted: list[list[Event]] = [[] for _ in items]

        def instance_emit(index: int):
            def emit(event: Event) -> None:
                if event.key not in self.process.routes:
                    raise UnknownEventError(event.name, event.source)
                emitted[index].append(event)

            return emit

        async def run_instance(index: int, item: Any) -> Any:
            async with self._semaphore:
                context = StepContext(entry.name, instance_emit(index), self.run_id)
                return await entry.step.invoke(context, **{param: item})

        logger.info(
            f"Map step {entry.name} fanning out over {len(items)} items",
            extra=self._log_extra(step=entry.name),
        )
        tasks = [asyncio.create_task(run_instance(i, item)) for i, item in enumerate(items)]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        result_name = function_result(entry.name)
        for name in self.process.event_names_from(entry.name):
            if name == result_name:
                continue
            payloads = [e.payload for events in emitted for e in events if e.name == name]
            self._pending.append(Event(name=name, payload=payloads, source=entry.name))
        self._publish_result(entry.name, list(results))

    async def _cancel_outstanding(self) -> None:
        if not self._tasks:
            return
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
