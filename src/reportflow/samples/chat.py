"""Chat sample — ask each configured model for today's date with a tool."""

from __future__ import annotations

import logging
from typing import Callable

import reportflow.core.config as config_module
from reportflow.agents.agent import Agent
from reportflow.providers.base import LLMProvider
from reportflow.tools.get_today import GetTodayTool
from reportflow.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

QUESTION = "What is today's date?"
SEPARATOR = "====================================="


async def ask_today(provider: LLMProvider, model: str, tool: GetTodayTool | None = None) -> str:
    """Ask one model the date question with get_today available."""
    agent = Agent(
        f"chat-{model}",
        provider=provider,
        model=model,
        tools=ToolRegistry([tool or GetTodayTool()]),
        max_iterations=config_module.config.llm.max_tool_iterations,
    )
    response = await agent.invoke(QUESTION)
    async with response.thread:
        return response.message


async def run_chat(
    provider: LLMProvider,
    models: tuple[str, ...] | None = None,
    out: Callable[[str], None] = print,
) -> list[str]:
    """Print every model's answer, separated by a rule. Returns the answers."""
    models = models or config_module.config.llm.chat_models
    answers = []
    for i, model in enumerate(models):
        if i:
            out(SEPARATOR)
            out("")
        logger.debug("Asking %s", model)
        answer = await ask_today(provider, model)
        out(answer)
        answers.append(answer)
    return answers
