"""
Evaluators — LLM-as-judge quality metrics for a model response.

Each evaluator asks a judge model to score one aspect of a response on a
1-5 scale and interprets the score:

    1 Unacceptable   2 Poor   3 Average   4 Good   5 Exceptional

Scores below 4 count as failed. A judge reply that cannot be parsed gives an
Inconclusive, failed metric instead of raising.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from reportflow.providers.base import LLMProvider
from reportflow.report.models import strip_code_fence

logger = logging.getLogger(__name__)

PASSING_SCORE = 4

JUDGE_INSTRUCTIONS = (
    "You are an impartial evaluator of AI assistant responses. "
    "Score the response on a scale from 1 (worst) to 5 (best) and explain the score briefly. "
    'Reply with JSON only: {"score": <1-5>, "reason": "<one or two sentences>"}.'
)


class EvaluationRating(str, Enum):
    UNKNOWN = "Unknown"
    INCONCLUSIVE = "Inconclusive"
    UNACCEPTABLE = "Unacceptable"
    POOR = "Poor"
    AVERAGE = "Average"
    GOOD = "Good"
    EXCEPTIONAL = "Exceptional"


_RATINGS = {
    1: EvaluationRating.UNACCEPTABLE,
    2: EvaluationRating.POOR,
    3: EvaluationRating.AVERAGE,
    4: EvaluationRating.GOOD,
    5: EvaluationRating.EXCEPTIONAL,
}


@dataclass(frozen=True)
class MetricInterpretation:
    rating: EvaluationRating
    failed: bool
    reason: str = ""


def interpret_score(score: float | None) -> MetricInterpretation:
    """Map a 1-5 score to a rating. Out-of-range scores are Inconclusive."""
    if score is None:
        return MetricInterpretation(EvaluationRating.UNKNOWN, failed=True, reason="No score")
    rounded = int(round(score))
    rating = _RATINGS.get(rounded)
    if rating is None:
        return MetricInterpretation(
            EvaluationRating.INCONCLUSIVE, failed=True, reason=f"Score {score} is out of range"
        )
    failed = rounded < PASSING_SCORE
    reason = f"Score is below {PASSING_SCORE}" if failed else ""
    return MetricInterpretation(rating, failed=failed, reason=reason)


@dataclass
class NumericMetric:
    name: str
    value: float | None = None
    reason: str = ""
    interpretation: MetricInterpretation | None = None

    @property
    def passed(self) -> bool:
        return self.interpretation is not None and not self.interpretation.failed

    def to_dict(self) -> dict[str, Any]:
        interp = self.interpretation
        return {
            "name": self.name,
            "value": self.value,
            "reason": self.reason,
            "rating": interp.rating.value if interp else None,
            "failed": interp.failed if interp else None,
        }


@dataclass
class EvaluationResult:
    metrics: dict[str, NumericMetric] = field(default_factory=dict)

    def get(self, name: str) -> NumericMetric:
        """Look up a metric by name. Raises KeyError when it was not evaluated."""
        return self.metrics[name]

    @property
    def passed(self) -> bool:
        return bool(self.metrics) and all(m.passed for m in self.metrics.values())

    def to_dict(self) -> dict[str, Any]:
        return {name: metric.to_dict() for name, metric in self.metrics.items()}


class JudgeVerdict(BaseModel):
    score: int = Field(ge=1, le=5, description="Quality score from 1 (worst) to 5 (best).")
    reason: str = Field(default="", description="Short justification for the score.")


@dataclass(frozen=True)
class EquivalenceEvaluatorContext:
    """Expected answer the Equivalence evaluator compares against."""
    ground_truth: str


def render_conversation(messages: list[dict[str, Any]]) -> str:
    return "\n".join(f"[{m.get('role', 'user')}] {m.get('content') or ''}" for m in messages)


class Evaluator(ABC):
    """One judge-scored metric."""

    metric_name: str = ""

    @abstractmethod
    def build_prompt(
        self, messages: list[dict[str, Any]], response: str, context: list[Any]
    ) -> str | None:
        """The judge prompt, or None when required context is missing."""
        ...

    def _inconclusive(self, reason: str) -> NumericMetric:
        return NumericMetric(
            self.metric_name,
            reason=reason,
            interpretation=MetricInterpretation(
                EvaluationRating.INCONCLUSIVE, failed=True, reason=reason
            ),
        )

    async def evaluate(
        self,
        messages: list[dict[str, Any]],
        response: str,
        *,
        judge: LLMProvider,
        model: str,
        context: list[Any] | None = None,
    ) -> NumericMetric:
        prompt = self.build_prompt(messages, response, context or [])
        if prompt is None:
            return self._inconclusive(f"{self.metric_name} needs additional context")

        reply = await judge.complete(
            [
                {"role": "system", "content": JUDGE_INSTRUCTIONS},
                {"role": "user", "content": prompt},
            ],
            model=model,
            response_format=JudgeVerdict,
        )
        try:
            verdict = JudgeVerdict.model_validate_json(strip_code_fence(reply.text))
        except ValidationError as e:
            logger.warning(f"{self.metric_name}: unparseable judge reply: {reply.text[:200]!r}")
            return self._inconclusive(f"Judge reply could not be parsed: {e.errors()[0]['msg']}")

        return NumericMetric(
            self.metric_name,
            value=float(verdict.score),
            reason=verdict.reason,
            interpretation=interpret_score(verdict.score),
        )


class RelevanceEvaluator(Evaluator):
    """How well the response addresses the user's request."""

    metric_name = "Relevance"

    def build_prompt(self, messages, response, context):
        return (
            "Rate how relevant the response is to the conversation. A relevant response "
            "addresses the user's question directly and stays on topic.\n\n"
            f"<conversation>\n{render_conversation(messages)}\n</conversation>\n"
            f"<response>\n{response}\n</response>"
        )


class EquivalenceEvaluator(Evaluator):
    """How close the response is to an expected answer."""

    metric_name = "Equivalence"

    def build_prompt(self, messages, response, context):
        expected = next(
            (c for c in context if isinstance(c, EquivalenceEvaluatorContext)), None
        )
        if expected is None:
            return None
        return (
            "Rate how equivalent the response is to the expected answer in meaning. "
            "Wording may differ; the substance must match.\n\n"
            f"<conversation>\n{render_conversation(messages)}\n</conversation>\n"
            f"<expected>\n{expected.ground_truth}\n</expected>\n"
            f"<response>\n{response}\n</response>"
        )
