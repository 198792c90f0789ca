# packages/xai_lib/config/xai.py

from typing import Dict, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import SettingsConfigDict

from .base import EnvConfig


def _default_multipliers() -> Dict[str, float]:
    # Declaration order matters: the first matching substring wins
    return {
        "score": 1.5,
        "grade": 1.5,
        "age": 1.2,
        "year": 1.2,
        "length": 2.0,
        "width": 2.0,
        "color": 1.8,
        "type": 1.8,
        "size": 1.5,
        "area": 1.5,
        "count": 1.3,
        "number": 1.3,
    }


class XaiConfig(EnvConfig):
    """
    Attribution settings. Read-only after startup and shared across threads.
    """

    # Corrects for the different natural output scales of linear vs logistic models
    regression_base_factor: float = Field(default=0.2, gt=0.0)
    classification_base_factor: float = Field(default=0.25, gt=0.0)

    # Parsed from JSON in XAI_FEATURE_MULTIPLIERS
    feature_multipliers: Dict[str, float] = Field(default_factory=_default_multipliers)

    enable_fallback_explanation: bool = True
    max_features_in_explanation: int = Field(default=10, ge=1)
    min_contribution_threshold: float = Field(default=0.01, ge=0.0)

    # How many contributions the explanation text enumerates
    summary_features: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(env_prefix="XAI_")

    @field_validator("feature_multipliers")
    @classmethod
    def _normalise_keys(cls, table: Dict[str, float]) -> Dict[str, float]:
        normalised: Dict[str, float] = {}
        for key, multiplier in table.items():
            name = key.strip().lower()
            if not name:
                raise ValueError("Feature multiplier keys must not be blank")
            if multiplier <= 0:
                raise ValueError(f"Multiplier for '{key}' must be positive")
            # Keys that collide after lower-casing keep their first declaration
            normalised.setdefault(name, float(multiplier))
        return normalised

    @model_validator(mode="after")
    def _fallback_clears_threshold(self):
        # Fallback entries are 1/k with k <= max features; they must survive the threshold
        if self.min_contribution_threshold * self.max_features_in_explanation > 1.0:
            raise ValueError(
                "min_contribution_threshold * max_features_in_explanation must not exceed 1"
            )
        return self

    def base_factor(self, model_type) -> float:
        if str(model_type) == "REGRESSION":
            return self.regression_base_factor
        return self.classification_base_factor

    def feature_multiplier(self, feature_name: Optional[str]) -> float:
        """
        Exact case-insensitive key first, then the first declared key that is a
        substring of the feature name, else 1.0.
        """
        if feature_name is None:
            return 1.0

        name = feature_name.lower()
        if name in self.feature_multipliers:
            return self.feature_multipliers[name]

        for key, multiplier in self.feature_multipliers.items():
            if key in name:
                return multiplier

        return 1.0
