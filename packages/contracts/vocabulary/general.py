from enum import Enum


class StrEnum(str, Enum):
    """Base class to make enums behave like strings for easy use in Pydantic/JSON."""

    def __str__(self):
        return self.value


class ModelType(StrEnum):
    """The closed set of model families the core can train and explain."""

    CLASSIFICATION = "CLASSIFICATION"  # Discrete label + class distribution
    REGRESSION = "REGRESSION"  # A single continuous value

    @classmethod
    def parse(cls, value) -> "ModelType":
        """Accepts an enum member or a case-insensitive name. Raises ValueError."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Unsupported model type: {value!r}")


class Direction(StrEnum):
    """Which way a feature pushed the prediction."""

    POSITIVE = "positive"
    NEGATIVE = "negative"

    @classmethod
    def of(cls, contribution: float) -> "Direction":
        # 0.0 counts as positive
        return cls.POSITIVE if contribution >= 0 else cls.NEGATIVE


class TrainingState(StrEnum):
    """Lifecycle of a single training run. No resumable states."""

    NOT_STARTED = "NOT_STARTED"
    VALIDATING = "VALIDATING"
    TRAINING = "TRAINING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
