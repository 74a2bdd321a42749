"""Configuration management for Content Mill."""

from .loader import DEFAULT_CONFIG_PATH, Config, load_config, save_config
from .models import (
    ConfigModel,
    FetcherConfig,
    LLMConfig,
    PipelineConfig,
    PostgresConfig,
    SchedulerConfig,
)

__all__ = [
    "Config",
    "ConfigModel",
    "DEFAULT_CONFIG_PATH",
    "FetcherConfig",
    "LLMConfig",
    "PipelineConfig",
    "PostgresConfig",
    "SchedulerConfig",
    "load_config",
    "save_config",
]
