from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import EnvConfig


class SystemConfig(EnvConfig):
    """
    General system-wide configuration.
    """

    # Maps to XAI_ENV in .env
    environment: str = Field(validation_alias="XAI_ENV", default="production")

    debug: bool = Field(validation_alias="DEBUG", default=False)
    project_name: str = "XAI Core"
    version: str = "1.0.0"

    # JSON file logging is opt-in; console logging is always on
    log_dir: Optional[Path] = Field(validation_alias="XAI_LOG_DIR", default=None)

    model_config = SettingsConfigDict(populate_by_name=True)
