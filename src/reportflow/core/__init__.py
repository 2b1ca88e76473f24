"""reportflow core — configuration and logging."""

from reportflow.core.config import AppConfig, reload_config
from reportflow.core.logging import PipelineTimer, setup_logging

__all__ = ["AppConfig", "reload_config", "PipelineTimer", "setup_logging"]
