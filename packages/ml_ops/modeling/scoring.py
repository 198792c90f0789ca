from dataclasses import dataclass, field
from typing import Dict

import numpy as np

from packages.contracts.vocabulary.general import ModelType


@dataclass(frozen=True)
class Score:
    label: str
    confidence: float
    probabilities: Dict[str, float] = field(default_factory=dict)
    # Row of the weight table that produced the label (0 for regression)
    class_index: int = 0


def _unit(p) -> float:
    return min(1.0, max(0.0, float(p)))


def score_row(model, row: np.ndarray) -> Score:
    """Runs the model's estimator on one encoded row."""
    if model.model_type == ModelType.CLASSIFICATION:
        proba = np.asarray(model.estimator.predict_proba(row), dtype=float)[0]
        classes = model.classes
        idx = int(np.argmax(proba))
        return Score(
            label=classes[idx],
            confidence=_unit(proba[idx]),
            probabilities={label: _unit(p) for label, p in zip(classes, proba)},
            class_index=idx,
        )

    value = float(np.asarray(model.estimator.predict(row), dtype=float).ravel()[0])
    # Regression has no calibrated confidence
    return Score(label=str(value), confidence=1.0)
