from typing import Dict, Optional

import numpy as np
from sklearn.metrics import (
    accuracy_score,
    precision_score,
    recall_score,
    log_loss,
)

from .base import EvaluationStrategy


class ClassificationEvaluator(EvaluationStrategy):
    """
    Evaluation strategy for classification models.
    Calculates Accuracy, Precision, Recall and LogLoss.
    """

    def evaluate(self, model, X, y, logger=None) -> Dict[str, float]:
        predictions = model.predict(X)

        # We need the full universe of possible classes, even if some are not in the data
        all_labels = np.union1d(getattr(model, "classes_", np.unique(y)), np.unique(y))
        avg_method = "binary" if len(all_labels) <= 2 else "weighted"
        pos_label = all_labels[-1]

        accuracy = float(accuracy_score(y, predictions))
        if avg_method == "binary":
            precision = precision_score(y, predictions, pos_label=pos_label, zero_division=0)
            recall = recall_score(y, predictions, pos_label=pos_label, zero_division=0)
        else:
            precision = precision_score(
                y, predictions, average=avg_method, labels=all_labels, zero_division=0
            )
            recall = recall_score(
                y, predictions, average=avg_method, labels=all_labels, zero_division=0
            )

        results = {
            "accuracy": accuracy,
            "precision": float(precision),
            "recall": float(recall),
        }

        if hasattr(model, "predict_proba"):
            results["log_loss"] = float(
                log_loss(y, model.predict_proba(X), labels=model.classes_)
            )

        if logger:
            logger.info(f"Classification accuracy: {accuracy:.4f}")
            logger.debug(
                f"  Precision: {results['precision']:.4f} / Recall: {results['recall']:.4f} ({avg_method})"
            )

        return results

    def headline(self, metrics: Dict[str, float]) -> Optional[float]:
        return metrics.get("accuracy")
