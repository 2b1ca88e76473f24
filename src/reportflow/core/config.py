"""
reportflow Configuration — single source of truth for all settings.

Reads from environment variables (and a .env file) with sensible defaults.
Every section is a frozen dataclass; call reload_config() to re-read the env.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class LLMConfig:
    """Chat model provider settings and per-role deployments."""

    provider: str = "openai"  # "openai" or "azure"
    api_key: str = ""
    base_url: str = ""
    azure_endpoint: str = ""
    api_version: str = "2024-12-01-preview"
    planner_model: str = "o3"
    writer_model: str = "gpt-4.1"
    researcher_model: str = "gpt-4.1"
    finalizer_model: str = "gpt-4.1"
    chat_models: tuple[str, ...] = ("gpt-4.1",)
    max_tool_iterations: int = 5

    @classmethod
    def from_env(cls) -> LLMConfig:
        provider = os.getenv("REPORTFLOW_LLM_PROVIDER", "openai").lower()
        if provider == "azure":
            api_key = os.getenv("AZURE_OPENAI_API_KEY", "")
        else:
            api_key = os.getenv("OPENAI_API_KEY", "")
        return cls(
            provider=provider,
            api_key=api_key,
            base_url=os.getenv("OPENAI_BASE_URL", ""),
            azure_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT", ""),
            api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-12-01-preview"),
            planner_model=os.getenv("REPORTFLOW_PLANNER_MODEL", "o3"),
            writer_model=os.getenv("REPORTFLOW_WRITER_MODEL", "gpt-4.1"),
            researcher_model=os.getenv("REPORTFLOW_RESEARCHER_MODEL", "gpt-4.1"),
            finalizer_model=os.getenv("REPORTFLOW_FINALIZER_MODEL", "gpt-4.1"),
            chat_models=_csv(os.getenv("REPORTFLOW_CHAT_MODELS", "gpt-4.1")),
            max_tool_iterations=int(os.getenv("REPORTFLOW_MAX_TOOL_ITERATIONS", "5")),
        )


@dataclass(frozen=True)
class EmbeddingConfig:
    """Embedding model settings."""

    model: str = "text-embedding-3-large"

    @classmethod
    def from_env(cls) -> EmbeddingConfig:
        return cls(
            model=os.getenv("REPORTFLOW_EMBEDDING_MODEL", "text-embedding-3-large"),
        )


@dataclass(frozen=True)
class ReportConfig:
    """Report pipeline settings."""

    output_dir: str = "."
    max_concurrency: int = 3  # Parallel section writers

    @classmethod
    def from_env(cls) -> ReportConfig:
        return cls(
            output_dir=os.getenv("REPORTFLOW_OUTPUT_DIR", "."),
            max_concurrency=int(os.getenv("REPORTFLOW_MAX_CONCURRENCY", "3")),
        )


@dataclass(frozen=True)
class EvaluationConfig:
    """Evaluation harness settings."""

    storage_root: str = "TestReports"
    judge_model: str = "gpt-4.1"
    models: tuple[str, ...] = ("gpt-4o-mini", "gpt-4.1", "o3")
    enable_response_caching: bool = True
    execution_name: str = "AIEvaluationTest"

    @classmethod
    def from_env(cls) -> EvaluationConfig:
        return cls(
            storage_root=os.getenv("REPORTFLOW_EVAL_STORAGE_ROOT", "TestReports"),
            judge_model=os.getenv("REPORTFLOW_EVAL_JUDGE_MODEL", "gpt-4.1"),
            models=_csv(os.getenv("REPORTFLOW_EVAL_MODELS", "gpt-4o-mini,gpt-4.1,o3")),
            enable_response_caching=_flag(os.getenv("REPORTFLOW_EVAL_CACHE", "true")),
            execution_name=os.getenv("REPORTFLOW_EVAL_EXECUTION_NAME", "AIEvaluationTest"),
        )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration, built once from the environment."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        return cls(
            llm=LLMConfig.from_env(),
            embedding=EmbeddingConfig.from_env(),
            report=ReportConfig.from_env(),
            evaluation=EvaluationConfig.from_env(),
        )


# Singleton. Import the module and read config_module.config to see reloads
config = AppConfig.from_env()


def reload_config() -> AppConfig:
    """Re-read the environment and replace the module-level singleton."""
    global config
    config = AppConfig.from_env()
    return config
