import math
from typing import Dict, Optional

import numpy as np
from sklearn.metrics import (
    mean_squared_error,
    mean_absolute_error,
    r2_score,
)
from .base import EvaluationStrategy


class RegressionEvaluator(EvaluationStrategy):
    """
    Evaluation strategy for regression models.
    Calculates key error metrics and goodness-of-fit.
    """

    def evaluate(self, model, X, y, logger=None) -> Dict[str, float]:
        # 1. Get Predictions
        predictions = model.predict(X)

        # 2. Calculate Metrics
        mse = float(mean_squared_error(y, predictions))
        rmse = float(np.sqrt(mse))
        mae = float(mean_absolute_error(y, predictions))
        r2 = float(r2_score(y, predictions)) if len(y) > 1 else float("nan")

        # 3. Logging (if a logger is provided)
        if logger:
            logger.info(f"Regression metrics - R²: {r2:.4f}, RMSE: {rmse:.6f}, MAE: {mae:.6f}")
            if r2 < 0:
                logger.warning("  -> Model performs worse than a simple mean forecast.")

        return {"mse": mse, "rmse": rmse, "mae": mae, "r2": r2}

    def headline(self, metrics: Dict[str, float]) -> Optional[float]:
        # R² clamped to [0, 1] so it reads like an accuracy
        r2 = metrics.get("r2")
        if r2 is None or math.isnan(r2) or math.isinf(r2):
            return 0.0
        return max(0.0, min(1.0, r2))
