"""
Evaluation Reporting — scenario runs stored on disk, with response caching.

Usage:
    reporting = ReportingConfiguration(
        storage_root="TestReports",
        evaluators=[RelevanceEvaluator(), EquivalenceEvaluator()],
        judge=provider,
        judge_model="gpt-4.1",
    )
    async with reporting.create_scenario_run("AIEvaluationTest.gpt-4.1") as run:
        result = await run.evaluate(messages, reply, [EquivalenceEvaluatorContext("...")])

Layout under storage_root:
    <execution_name>/<scenario>/<iteration>.json   one file per scenario run
    cache/<sha256>.json                            cached completions
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from typing import Any

from pydantic import BaseModel

import reportflow.core.config as config_module
from reportflow.core.config import EvaluationConfig
from reportflow.evaluation.evaluators import (
    EquivalenceEvaluator,
    EvaluationResult,
    Evaluator,
    RelevanceEvaluator,
)
from reportflow.providers.base import ChatResponse, LLMProvider

logger = logging.getLogger(__name__)


class CachingLLMProvider(LLMProvider):
    """Wraps a provider and replays identical completions from disk.

    Responses with tool calls are never cached.
    """

    def __init__(self, inner: LLMProvider, cache_dir: str):
        self.inner = inner
        self.cache_dir = cache_dir
        self.hits = 0
        self.misses = 0

    async def start(self) -> None:
        await self.inner.start()

    async def stop(self) -> None:
        await self.inner.stop()

    @staticmethod
    def cache_key(
        messages: list[dict],
        model: str,
        tools: list[dict] | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int | None = None,
    ) -> str:
        payload = {
            "messages": messages,
            "model": model,
            "tools": tools,
            "response_format": response_format.__name__ if response_format else None,
            "max_tokens": max_tokens,
        }
        encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False, default=str)
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()

    def _path(self, key: str) -> str:
        return os.path.join(self.cache_dir, f"{key}.json")

    async def complete(
        self,
        messages: list[dict],
        *,
        model: str,
        tools: list[dict] | None = None,
        response_format: type[BaseModel] | None = None,
        max_tokens: int | None = None,
    ) -> ChatResponse:
        path = self._path(self.cache_key(messages, model, tools, response_format, max_tokens))
        if os.path.exists(path):
            with open(path, encoding="utf-8") as f:
                cached = json.load(f)
            self.hits += 1
            logger.debug("Cache hit %s", os.path.basename(path))
            return ChatResponse(text=cached["text"], model=cached.get("model", model))

        response = await self.inner.complete(
            messages,
            model=model,
            tools=tools,
            response_format=response_format,
            max_tokens=max_tokens,
        )
        self.misses += 1
        if not response.tool_calls:
            os.makedirs(self.cache_dir, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"text": response.text, "model": response.model}, f, ensure_ascii=False)
        return response

    async def health_check(self) -> dict:
        status = await self.inner.health_check()
        return {**status, "cache": {"hits": self.hits, "misses": self.misses}}


class ReportingConfiguration:
    """Evaluators, judge and storage shared by every scenario run."""

    def __init__(
        self,
        storage_root: str,
        evaluators: list[Evaluator],
        judge: LLMProvider,
        judge_model: str,
        enable_response_caching: bool = True,
        execution_name: str = "AIEvaluationTest",
    ):
        self.storage_root = storage_root
        self.evaluators = evaluators
        self.judge_model = judge_model
        self.enable_response_caching = enable_response_caching
        self.execution_name = execution_name
        self.judge = self.chat_provider(judge)

    @classmethod
    def from_config(
        cls,
        judge: LLMProvider,
        evaluators: list[Evaluator] | None = None,
        eval_cfg: EvaluationConfig | None = None,
    ) -> ReportingConfiguration:
        eval_cfg = eval_cfg or config_module.config.evaluation
        return cls(
            storage_root=eval_cfg.storage_root,
            evaluators=evaluators or [RelevanceEvaluator(), EquivalenceEvaluator()],
            judge=judge,
            judge_model=eval_cfg.judge_model,
            enable_response_caching=eval_cfg.enable_response_caching,
            execution_name=eval_cfg.execution_name,
        )

    @property
    def cache_dir(self) -> str:
        return os.path.join(self.storage_root, "cache")

    def chat_provider(self, provider: LLMProvider) -> LLMProvider:
        """The provider to use for scenario calls, cached when caching is on."""
        if not self.enable_response_caching or isinstance(provider, CachingLLMProvider):
            return provider
        return CachingLLMProvider(provider, self.cache_dir)

    def create_scenario_run(self, scenario_name: str, iteration_name: str = "1") -> ScenarioRun:
        return ScenarioRun(self, scenario_name, iteration_name)


class ScenarioRun:
    """One evaluated scenario. Results are written when the block exits."""

    def __init__(self, configuration: ReportingConfiguration, scenario_name: str, iteration_name: str):
        self.configuration = configuration
        self.scenario_name = scenario_name
        self.iteration_name = iteration_name
        self.results: list[EvaluationResult] = []
        self._started = time.time()

    @property
    def path(self) -> str:
        return os.path.join(
            self.configuration.storage_root,
            self.configuration.execution_name,
            self.scenario_name,
            f"{self.iteration_name}.json",
        )

    async def evaluate(
        self,
        messages: list[dict[str, Any]],
        response: str,
        additional_context: list[Any] | None = None,
    ) -> EvaluationResult:
        """Run every configured evaluator on one response."""
        result = EvaluationResult()
        for evaluator in self.configuration.evaluators:
            metric = await evaluator.evaluate(
                messages,
                response,
                judge=self.configuration.judge,
                model=self.configuration.judge_model,
                context=additional_context,
            )
            result.metrics[metric.name] = metric
            logger.info(
                f"{self.scenario_name} {metric.name}: {metric.value} "
                f"({metric.interpretation.rating.value if metric.interpretation else 'n/a'})"
            )
        self.results.append(result)
        return result

    def to_dict(self) -> dict[str, Any]:
        return {
            "execution_name": self.configuration.execution_name,
            "scenario_name": self.scenario_name,
            "iteration_name": self.iteration_name,
            "started_at": self._started,
            "results": [result.to_dict() for result in self.results],
        }

    def write(self) -> str:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, ensure_ascii=False, indent=2)
        logger.debug("Wrote scenario results to %s", self.path)
        return self.path

    async def __aenter__(self) -> ScenarioRun:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.write()
