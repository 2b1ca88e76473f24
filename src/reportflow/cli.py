"""
reportflow command line.

    reportflow report [--theme T] [--output-dir DIR] [--max-concurrency N]
    reportflow chat [--model M ...]
    reportflow embed [--model M]
    reportflow agent [--role ROLE] [MESSAGE]
    reportflow evaluate [--model M ...]

Every subcommand prints "Error: ..." to stderr and exits 1 on failure.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import openai

import reportflow.core.config as config_module
from reportflow import __version__
from reportflow.agents.agent_types import AgentRole
from reportflow.agents.factory import build_default_factories
from reportflow.core.logging import setup_logging
from reportflow.evaluation.scenarios import run_evaluation, scenario_passed
from reportflow.process.errors import ProcessError
from reportflow.providers.registry import get_embedding_provider, get_llm_provider
from reportflow.report.errors import ReportError
from reportflow.report.pipeline import run_report
from reportflow.samples.agents import DEFAULT_MESSAGE, run_role
from reportflow.samples.chat import run_chat
from reportflow.samples.embeddings import run_embeddings
from reportflow.tools.save_report import ReportFileStore

logger = logging.getLogger(__name__)

_EXPECTED_ERRORS = (
    ReportError,
    ProcessError,
    openai.OpenAIError,
    LookupError,
    OSError,
    RuntimeError,
    ValueError,
)


async def _cmd_report(args: argparse.Namespace) -> int:
    read_line = (lambda: args.theme) if args.theme is not None else None
    result = await run_report(
        get_llm_provider(),
        read_line=read_line,
        output_dir=args.output_dir,
        max_concurrency=args.max_concurrency,
    )
    print(result.output)
    return 0


async def _cmd_chat(args: argparse.Namespace) -> int:
    provider = get_llm_provider()
    await provider.start()
    try:
        await run_chat(provider, tuple(args.model) if args.model else None)
    finally:
        await provider.stop()
    return 0


async def _cmd_embed(args: argparse.Namespace) -> int:
    provider = get_embedding_provider()
    await provider.start()
    try:
        await run_embeddings(provider, args.model)
    finally:
        await provider.stop()
    return 0


async def _cmd_agent(args: argparse.Namespace) -> int:
    provider = get_llm_provider()
    await provider.start()
    try:
        store = ReportFileStore(args.output_dir or config_module.config.report.output_dir)
        factories = build_default_factories(provider, store)
        await run_role(factories, AgentRole(args.role), args.message)
    finally:
        await provider.stop()
    return 0


async def _cmd_evaluate(args: argparse.Namespace) -> int:
    provider = get_llm_provider()
    await provider.start()
    try:
        results = await run_evaluation(provider, tuple(args.model) if args.model else None)
    finally:
        await provider.stop()

    failed = 0
    for model, result in results.items():
        passed = scenario_passed(result)
        failed += not passed
        metrics = ", ".join(
            f"{m.name}={m.interpretation.rating.value if m.interpretation else 'n/a'}"
            for m in result.metrics.values()
        )
        print(f"{'PASS' if passed else 'FAIL'} {model}: {metrics}")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reportflow", description="Multi-agent report writer and model samples"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Write a report on a theme")
    report.add_argument("--theme", help="Report theme (prompted for when omitted)")
    report.add_argument("--output-dir", help="Directory the report is saved in")
    report.add_argument("--max-concurrency", type=int, help="Sections written in parallel")
    report.set_defaults(handler=_cmd_report)

    chat = sub.add_parser("chat", help="Ask chat models for today's date via a tool")
    chat.add_argument("--model", action="append", help="Model to ask (repeatable)")
    chat.set_defaults(handler=_cmd_chat)

    embed = sub.add_parser("embed", help="Print cosine similarities of sample phrases")
    embed.add_argument("--model", help="Embedding model")
    embed.set_defaults(handler=_cmd_embed)

    agent = sub.add_parser("agent", help="Run one agent on a message")
    agent.add_argument(
        "--role",
        choices=[role.value for role in AgentRole],
        default=AgentRole.PLANNER.value,
    )
    agent.add_argument("--output-dir", help="Directory the finalizer saves reports in")
    agent.add_argument("message", nargs="?", default=DEFAULT_MESSAGE)
    agent.set_defaults(handler=_cmd_agent)

    evaluate = sub.add_parser("evaluate", help="Evaluate models on the basic scenario")
    evaluate.add_argument("--model", action="append", help="Model to evaluate (repeatable)")
    evaluate.set_defaults(handler=_cmd_evaluate)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        return asyncio.run(args.handler(args))
    except KeyboardInterrupt:
        return 130
    except _EXPECTED_ERRORS as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
