"""Evaluation harness — judge-scored metrics and on-disk scenario reports."""

from reportflow.evaluation.evaluators import (
    EquivalenceEvaluator,
    EquivalenceEvaluatorContext,
    EvaluationRating,
    EvaluationResult,
    Evaluator,
    JudgeVerdict,
    MetricInterpretation,
    NumericMetric,
    RelevanceEvaluator,
    interpret_score,
)
from reportflow.evaluation.reporting import (
    CachingLLMProvider,
    ReportingConfiguration,
    ScenarioRun,
)
from reportflow.evaluation.scenarios import (
    EXPECTED_ANSWER,
    run_basic_scenario,
    run_evaluation,
    scenario_passed,
)

__all__ = [
    "EvaluationRating",
    "MetricInterpretation",
    "NumericMetric",
    "EvaluationResult",
    "Evaluator",
    "RelevanceEvaluator",
    "EquivalenceEvaluator",
    "EquivalenceEvaluatorContext",
    "JudgeVerdict",
    "interpret_score",
    "CachingLLMProvider",
    "ReportingConfiguration",
    "ScenarioRun",
    "EXPECTED_ANSWER",
    "run_basic_scenario",
    "run_evaluation",
    "scenario_passed",
]
