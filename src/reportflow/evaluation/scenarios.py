"""
Evaluation Scenarios — the basic cat-persona door puzzle.

The model under test plays a cat assistant and must answer a short
push-or-pull puzzle. Relevance and Equivalence (against the expected answer)
must both rate Good or Exceptional.
"""

from __future__ import annotations

import logging

import reportflow.core.config as config_module
from reportflow.core.config import EvaluationConfig
from reportflow.evaluation.evaluators import (
    EquivalenceEvaluatorContext,
    EvaluationRating,
    EvaluationResult,
)
from reportflow.evaluation.reporting import ReportingConfiguration, ScenarioRun
from reportflow.providers.base import LLMProvider

logger = logging.getLogger(__name__)

CAT_PERSONA = (
    "You are a cat-style AI assistant.\n"
    'To act like a cat, always end your sentences with "nya".\n'
    "Answer the user's question simply, with just the answer."
)

DOOR_PUZZLE = (
    "There is a door that opens when pushed.\n"
    "You enter the room through that door, turn around to face the door, "
    "and walk out of the room through it.\n"
    "Then, keeping that posture, you walk backwards into the room.\n"
    "To close the door now, should you push it or pull it?"
)

EXPECTED_ANSWER = "You push it, nya."

PASSING_RATINGS = (EvaluationRating.GOOD, EvaluationRating.EXCEPTIONAL)


def basic_messages() -> list[dict]:
    return [
        {"role": "system", "content": CAT_PERSONA},
        {"role": "user", "content": DOOR_PUZZLE},
    ]


def scenario_name(execution_name: str, model: str) -> str:
    return f"{execution_name}.{model}"


def scenario_passed(result: EvaluationResult) -> bool:
    """Every metric is not failed and rated Good or Exceptional."""
    return bool(result.metrics) and all(
        metric.interpretation is not None
        and not metric.interpretation.failed
        and metric.interpretation.rating in PASSING_RATINGS
        for metric in result.metrics.values()
    )


async def run_basic_scenario(
    provider: LLMProvider, model: str, scenario_run: ScenarioRun
) -> EvaluationResult:
    """Ask the model the door puzzle and evaluate its answer."""
    messages = basic_messages()
    response = await provider.complete(messages, model=model)
    return await scenario_run.evaluate(
        messages, response.text, [EquivalenceEvaluatorContext(EXPECTED_ANSWER)]
    )


async def run_evaluation(
    provider: LLMProvider,
    models: tuple[str, ...] | None = None,
    eval_cfg: EvaluationConfig | None = None,
) -> dict[str, EvaluationResult]:
    """Evaluate each model on the basic scenario. The provider must be started."""
    eval_cfg = eval_cfg or config_module.config.evaluation
    reporting = ReportingConfiguration.from_config(provider, eval_cfg=eval_cfg)
    chat = reporting.chat_provider(provider)

    results = {}
    for model in models or eval_cfg.models:
        async with reporting.create_scenario_run(
            scenario_name(reporting.execution_name, model)
        ) as run:
            result = await run_basic_scenario(chat, model, run)
        results[model] = result
        logger.info(f"{model}: {'passed' if scenario_passed(result) else 'failed'}")
    return results
