# packages/xai_lib/config/__init__.py

from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, ValidationError as PydanticValidationError

from packages.xai_lib.exceptions import ConfigurationError

# Import sub-configs
from .base import EnvConfig, PROJECT_ROOT
from .system import SystemConfig
from .training import (
    TrainingConfig,
    RegressionTrainingConfig,
    ClassificationTrainingConfig,
)
from .xai import XaiConfig
from .executors import ExecutorConfig


class Settings(EnvConfig):
    # Composition: Grouping configs by domain
    system: SystemConfig = Field(default_factory=SystemConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    xai: XaiConfig = Field(default_factory=XaiConfig)
    executors: ExecutorConfig = Field(default_factory=ExecutorConfig)


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Builds the process-wide settings once at startup.

    Values come from the environment (and .env), or from a YAML file whose
    top-level keys mirror Settings (system, training, xai, executors).
    Sections missing from the file fall back to the environment.
    """
    try:
        if path is None:
            return Settings()

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return Settings(**raw)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Config load failed. Details: {e}") from e


__all__ = [
    "PROJECT_ROOT",
    "Settings",
    "SystemConfig",
    "TrainingConfig",
    "RegressionTrainingConfig",
    "ClassificationTrainingConfig",
    "XaiConfig",
    "ExecutorConfig",
    "load_settings",
]
