# packages/ml_ops/artifacts.py

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import joblib
import numpy as np

from packages.contracts.vocabulary.general import ModelType
from packages.xai_lib.exceptions import DegenerateModelError


@dataclass(frozen=True)
class TrainingMetadata:
    algorithm_name: str
    trained_at: datetime
    n_examples: int
    n_features: int
    # Training-set score in [0, 1]; None when evaluation failed
    accuracy: Optional[float] = None
    classes: Tuple[str, ...] = ()
    metrics: Dict[str, float] = field(default_factory=dict)
    epochs_completed: Optional[int] = None
    stopped_early: bool = False


@dataclass(frozen=True)
class TrainedModel:
    """
    The immutable result of one successful training run.
    Retraining produces a new instance; nothing in the core mutates one.
    """

    model_name: str
    model_type: ModelType
    feature_names: Tuple[str, ...]
    target_variable: str
    estimator: Any
    metadata: TrainingMetadata

    @property
    def classes(self) -> Tuple[str, ...]:
        return tuple(str(c) for c in getattr(self.estimator, "classes_", ()))

    def weights(self) -> Tuple[np.ndarray, np.ndarray]:
        """
        Returns (coefficients, intercepts) with one coefficient row per class
        for classification (binary models expand to two opposing rows) or a
        single row for regression. Columns follow feature_names.

        Raises:
            DegenerateModelError: the estimator has no usable linear weights.
        """
        coef = getattr(self.estimator, "coef_", None)
        intercept = getattr(self.estimator, "intercept_", 0.0)
        if coef is None:
            raise DegenerateModelError(
                f"{type(self.estimator).__name__} does not expose linear coefficients"
            )

        try:
            coef = np.atleast_2d(np.asarray(coef, dtype=float))
            intercept = np.atleast_1d(np.asarray(intercept, dtype=float))
        except (TypeError, ValueError) as e:
            raise DegenerateModelError(f"Unreadable model coefficients: {e}") from e

        if coef.shape[1] != len(self.feature_names):
            raise DegenerateModelError(
                f"Model has {coef.shape[1]} coefficients for {len(self.feature_names)} features"
            )
        if not np.all(np.isfinite(coef)):
            raise DegenerateModelError("Model coefficients contain non-finite values")

        if self.model_type == ModelType.CLASSIFICATION and coef.shape[0] == 1:
            coef = np.vstack([-coef[0], coef[0]])
            intercept = np.array([-intercept[0], intercept[0]])

        if self.model_type == ModelType.CLASSIFICATION and coef.shape[0] != len(
            self.classes
        ):
            raise DegenerateModelError(
                f"Model has {coef.shape[0]} weight vectors for {len(self.classes)} classes"
            )

        return coef, intercept

    def save(self, path: Path):
        joblib.dump(self, path)

    @staticmethod
    def load(path: Path) -> "TrainedModel":
        model = joblib.load(path)
        if not isinstance(model, TrainedModel):
            raise TypeError(f"{path} does not contain a TrainedModel")
        return model
