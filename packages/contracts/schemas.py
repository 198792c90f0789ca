import math
from typing import Annotated, Dict, Optional, Tuple

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .vocabulary.general import Direction, ModelType


def _not_blank(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


NonBlankStr = Annotated[str, AfterValidator(_not_blank)]


class FrozenSchema(BaseModel):
    """The base contract for all value objects leaving the core."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class TrainingRequest(FrozenSchema):
    dataset_id: int
    model_name: NonBlankStr
    model_type: ModelType
    target_variable: NonBlankStr
    # Position in this tuple defines the coefficient index
    feature_names: Tuple[NonBlankStr, ...] = Field(min_length=1)

    @field_validator("model_type", mode="before")
    @classmethod
    def _closed_model_type(cls, value):
        try:
            return ModelType.parse(value)
        except ValueError:
            raise ValueError("Model type must be CLASSIFICATION or REGRESSION")

    @field_validator("feature_names")
    @classmethod
    def _unique_features(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        seen = set()
        for name in value:
            if name in seen:
                raise ValueError(f"Duplicate feature name: '{name}'")
            seen.add(name)
        return value

    @model_validator(mode="after")
    def _target_not_a_feature(self):
        if self.target_variable in self.feature_names:
            raise ValueError(
                f"Target variable '{self.target_variable}' cannot also be a feature"
            )
        return self


class FeatureContribution(FrozenSchema):
    feature_name: NonBlankStr
    contribution: float
    direction: Direction

    @field_validator("contribution")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("Contribution must be a finite number")
        return value

    @model_validator(mode="after")
    def _direction_matches_sign(self):
        if self.direction != Direction.of(self.contribution):
            raise ValueError(
                f"Direction '{self.direction}' does not match contribution {self.contribution}"
            )
        return self

    @classmethod
    def of(cls, feature_name: str, contribution: float) -> "FeatureContribution":
        return cls(
            feature_name=feature_name,
            contribution=contribution,
            direction=Direction.of(contribution),
        )


class ExplanationResult(FrozenSchema):
    prediction: NonBlankStr
    feature_contributions: Tuple[FeatureContribution, ...] = Field(min_length=1)
    input_data: Dict[str, str] = Field(min_length=1)
    explanation_text: NonBlankStr
    # Set only when the explanation is approximate (fallback / degenerate model)
    warning: Optional[NonBlankStr] = None

    @field_validator("feature_contributions")
    @classmethod
    def _ranked(cls, value):
        magnitudes = [abs(c.contribution) for c in value]
        if any(a < b for a, b in zip(magnitudes, magnitudes[1:])):
            raise ValueError(
                "Feature contributions must be sorted by descending absolute value"
            )
        return value

    @property
    def is_approximate(self) -> bool:
        return self.warning is not None


class PredictionResult(FrozenSchema):
    prediction: NonBlankStr
    confidence: float = Field(ge=0.0, le=1.0)
    # Empty for regression
    probabilities: Dict[str, float] = Field(default_factory=dict)
    input_data: Dict[str, str] = Field(min_length=1)

    @field_validator("probabilities")
    @classmethod
    def _valid_probabilities(cls, value: Dict[str, float]) -> Dict[str, float]:
        for label, p in value.items():
            if not (0.0 <= p <= 1.0):
                raise ValueError(f"Probability for '{label}' must be between 0.0 and 1.0")
        return value
