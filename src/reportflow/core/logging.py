"""
reportflow Logging — console or JSON-lines output on stderr.

stdout belongs to the CLI (report file names, sample output, the theme
prompt), so every handler writes to stderr.

Env vars:
    REPORTFLOW_LOG_LEVEL   DEBUG / INFO / WARNING / ERROR (default: INFO)
    REPORTFLOW_LOG_COLOR   true / false / auto (default: auto, on for a TTY)
    REPORTFLOW_LOG_FORMAT  text / json (default: text)

Pipeline code attaches context with ``extra=``; the JSON formatter lifts
these keys to the top level of each line:
    run_id, step, event, agent, thread_id, tool, duration_ms
"""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from datetime import datetime, timezone

CONTEXT_FIELDS = ("run_id", "step", "event", "agent", "thread_id", "tool", "duration_ms")

NOISY_LOGGERS = ("httpx", "httpcore", "openai")

_RESET = "\033[0m"
_DIM = "\033[2m"
_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


class ColorFormatter(logging.Formatter):
    """``HH:MM:SS [logger] LEVEL: message``, with ANSI colours when enabled."""

    def __init__(self, use_color: bool = True):
        super().__init__("%(asctime)s [%(name)s] %(levelname)s: %(message)s", "%H:%M:%S")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        # Other handlers see the same record; restore the painted fields
        levelname, name = record.levelname, record.name
        color = _LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{color}{levelname}{_RESET}"
        record.name = f"{_DIM}{name}{_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname, record.name = levelname, name


class StructuredFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, msg, context fields, exc."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update(
            (key, record.__dict__[key]) for key in CONTEXT_FIELDS if key in record.__dict__
        )
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class PipelineTimer:
    """Wall-clock time spent in each stage of one report run.

        timer = PipelineTimer()
        ...
        timer.mark("provider_start")
        ...
        timer.mark("CreateReport")
        timer.summary()  # "provider_start: 0.1s | CreateReport: 41.7s | Total: 41.8s"
    """

    def __init__(self):
        self._start = time.monotonic()
        self._marks: dict[str, float] = {}

    def mark(self, stage: str) -> None:
        """Close a stage at the current time."""
        self._marks[stage] = time.monotonic()

    def stages(self) -> list[str]:
        return list(self._marks)

    def _durations(self) -> dict[str, float]:
        durations, previous = {}, self._start
        for stage, at in self._marks.items():
            durations[stage] = at - previous
            previous = at
        return durations

    def elapsed(self, stage: str) -> float | None:
        return self._durations().get(stage)

    def total(self) -> float:
        return time.monotonic() - self._start

    def summary(self) -> str:
        parts = [f"{stage}: {seconds:.1f}s" for stage, seconds in self._durations().items()]
        parts.append(f"Total: {self.total():.1f}s")
        return " | ".join(parts)


def _use_color() -> bool:
    setting = os.getenv("REPORTFLOW_LOG_COLOR", "auto").lower()
    if setting in ("true", "false"):
        return setting == "true"
    return sys.stderr.isatty()


def setup_logging() -> None:
    """Replace the root handlers with a single stderr handler. Call once at startup."""
    level_name = os.getenv("REPORTFLOW_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    log_format = os.getenv("REPORTFLOW_LOG_FORMAT", "text").lower()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        StructuredFormatter() if log_format == "json" else ColorFormatter(use_color=_use_color())
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    # Child loggers (httpcore.http11, openai._base_client) inherit the level
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("reportflow").debug(
        "Logging configured (level=%s, format=%s)", logging.getLevelName(level), log_format
    )
