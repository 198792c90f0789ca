# packages/xai_lib/config/training.py

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from packages.xai_lib.logging import get_logger

from .base import EnvConfig

ONE_HOUR_MS = 3_600_000


class RegressionTrainingConfig(EnvConfig):
    # AdaGrad step size
    learning_rate: float = Field(default=0.1, gt=0.0, le=1.0)
    # Seeds the squared-gradient accumulator
    initial_learning_rate: float = Field(default=0.1, gt=0.0)
    # Step-size decay per update; 0 keeps AdaGrad's own adaptation only
    lr_decay: float = Field(default=0.0, ge=0.0)
    epochs: int = Field(default=10, ge=1, le=1000)
    minibatch_size: int = Field(default=1, ge=1)
    max_time_ms: int = Field(default=300_000, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="XAI_REGRESSION_",  # XAI_REGRESSION_LEARNING_RATE, etc.
    )


class ClassificationTrainingConfig(EnvConfig):
    # Logistic regression runs with library defaults; only the time budget is tunable
    max_time_ms: int = Field(default=300_000, gt=0)

    model_config = SettingsConfigDict(env_prefix="XAI_CLASSIFICATION_")


class TrainingConfig(EnvConfig):
    max_time_ms: int = Field(default=300_000, gt=0)
    max_dataset_size: int = Field(default=100_000, ge=1)
    # Fixed seed so identical requests produce identical models
    seed: int = 12345

    regression: RegressionTrainingConfig = Field(
        default_factory=RegressionTrainingConfig
    )
    classification: ClassificationTrainingConfig = Field(
        default_factory=ClassificationTrainingConfig
    )

    model_config = SettingsConfigDict(env_prefix="XAI_TRAINING_")

    @model_validator(mode="after")
    def _warn_on_long_budgets(self):
        budgets = {
            "training": self.max_time_ms,
            "regression": self.regression.max_time_ms,
            "classification": self.classification.max_time_ms,
        }
        for name, budget in budgets.items():
            if budget > ONE_HOUR_MS:
                get_logger("config").warning(
                    f"{name} time budget is very high: {budget}ms ({budget // 60_000} minutes)"
                )
        return self

    def budget_ms(self, model_type) -> int:
        """Effective deadline for a model type: the tighter of global and per-type."""
        per_type = (
            self.regression.max_time_ms
            if str(model_type) == "REGRESSION"
            else self.classification.max_time_ms
        )
        return min(self.max_time_ms, per_type)
