from pydantic import Field
from pydantic_settings import SettingsConfigDict

from .base import EnvConfig


class ExecutorConfig(EnvConfig):
    """
    Sizing for the two worker pools. Training jobs are few and long,
    prediction bursts are many and short.
    """

    thread_name_prefix: str = "xai-async-"

    training_workers: int = Field(default=4, ge=1)
    training_queue_capacity: int = Field(default=100, ge=0)
    training_shutdown_grace_seconds: float = Field(default=60.0, ge=0.0)

    prediction_workers: int = Field(default=8, ge=1)
    prediction_queue_capacity: int = Field(default=200, ge=0)
    prediction_shutdown_grace_seconds: float = Field(default=30.0, ge=0.0)

    model_config = SettingsConfigDict(env_prefix="XAI_EXECUTOR_")
