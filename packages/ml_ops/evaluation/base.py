from abc import ABC, abstractmethod
from typing import Dict, Optional

import numpy as np


class EvaluationStrategy(ABC):
    """
    Abstract Base Class for all model evaluation procedures.
    Its job is to take a trained estimator and data, and return a dictionary of metrics.
    """

    @abstractmethod
    def evaluate(self, model, X: np.ndarray, y: np.ndarray, logger=None) -> Dict[str, float]:
        """
        Takes a trained estimator and evaluation data, computes metrics, logs
        them when a logger is given, and returns them by name.
        """
        pass

    @abstractmethod
    def headline(self, metrics: Dict[str, float]) -> Optional[float]:
        """The single [0, 1] score stored as the model's accuracy."""
        pass
