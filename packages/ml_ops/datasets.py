# packages/ml_ops/datasets.py

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from packages.contracts.vocabulary.general import ModelType
from packages.xai_lib.exceptions import InvalidDatasetError


@dataclass(frozen=True)
class TabularDataset:
    """
    Numeric training matrix plus targets, in the column order of feature_names.
    Built from a DataFrame supplied by the external storage collaborator.
    """

    X: np.ndarray
    y: Optional[np.ndarray]
    feature_names: Tuple[str, ...]
    target_name: str
    model_type: ModelType

    @property
    def n_examples(self) -> int:
        return int(self.X.shape[0])

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    @property
    def n_outputs(self) -> int:
        return 0 if self.y is None or len(self.y) == 0 else 1

    @property
    def classes(self) -> Tuple[str, ...]:
        if self.y is None or self.model_type != ModelType.CLASSIFICATION:
            return ()
        return tuple(str(c) for c in np.unique(self.y))

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        feature_names: Sequence[str],
        target: str,
        model_type: ModelType,
    ) -> "TabularDataset":
        """
        Applies the training-time encoding: every feature column is coerced to
        float, rows with missing values are dropped, and classification targets
        become text labels. Prediction-time coercion must stay consistent with this.
        """
        model_type = ModelType.parse(model_type)
        feature_names = tuple(feature_names)

        missing = [c for c in (*feature_names, target) if c not in df.columns]
        if missing:
            raise InvalidDatasetError(f"Dataset is missing columns: {missing}")

        frame = df.loc[:, [*feature_names, target]].copy()

        for col in feature_names:
            try:
                frame[col] = pd.to_numeric(frame[col], errors="raise").astype(float)
            except (ValueError, TypeError) as e:
                raise InvalidDatasetError(
                    f"Feature column '{col}' must be numeric: {e}"
                ) from e

        if model_type == ModelType.REGRESSION:
            try:
                frame[target] = pd.to_numeric(frame[target], errors="raise").astype(
                    float
                )
            except (ValueError, TypeError) as e:
                raise InvalidDatasetError(
                    f"Regression target '{target}' must be numeric: {e}"
                ) from e

        # Rows with missing targets or features are useless for training
        frame = frame.replace([np.inf, -np.inf], np.nan).dropna()

        X = frame.loc[:, list(feature_names)].to_numpy(dtype=float)
        if model_type == ModelType.CLASSIFICATION:
            labels = frame[target]
            # Integer labels turn float when the column held a NaN; undo that
            if pd.api.types.is_float_dtype(labels) and (labels % 1 == 0).all():
                labels = labels.astype("int64")
            y = labels.astype(str).str.strip().to_numpy()
        else:
            y = frame[target].to_numpy(dtype=float)

        return cls(
            X=X,
            y=y,
            feature_names=feature_names,
            target_name=target,
            model_type=model_type,
        )
