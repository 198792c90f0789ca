# packages/ml_ops/training/registry.py

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from packages.contracts.vocabulary.general import ModelType
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.datasets import TabularDataset
from packages.xai_lib.config import TrainingConfig
from packages.xai_lib.exceptions import UnsupportedModelType
from packages.xai_lib.logging import get_logger
from .strategies import (
    TrainingStrategy,
    ClassificationStrategy,
    RegressionStrategy,
)


class StrategyRegistry:
    """
    Maps a model-type tag to its training strategy.
    Built once at startup; lookups are plain dict reads and need no locking.
    """

    def __init__(self, training_config: TrainingConfig, logger=None):
        self.logger = logger or get_logger("strategy-registry")

        # --- Component Registry ---
        self._strategies: Dict[ModelType, TrainingStrategy] = {
            ModelType.CLASSIFICATION: ClassificationStrategy(training_config, logger),
            ModelType.REGRESSION: RegressionStrategy(training_config, logger),
        }

    @property
    def strategies(self) -> Mapping[ModelType, TrainingStrategy]:
        return MappingProxyType(self._strategies)

    def select_strategy(self, model_type) -> TrainingStrategy:
        try:
            key = ModelType.parse(model_type)
        except ValueError:
            raise UnsupportedModelType(model_type) from None

        strategy = self._strategies.get(key)
        if strategy is None:
            raise UnsupportedModelType(model_type)
        return strategy

    def describe(self, model_type) -> Dict[str, str]:
        strategy = self.select_strategy(model_type)
        return {
            "algorithm_name": strategy.algorithm_name,
            "model_type": str(strategy.model_type),
        }

    def train(
        self,
        dataset: Optional[TabularDataset],
        model_type,
        params: Optional[Mapping[str, Any]] = None,
        model_name: Optional[str] = None,
    ) -> TrainedModel:
        strategy = self.select_strategy(model_type)
        self.logger.info(f"Creating model of type: {strategy.model_type}")
        return strategy.train(dataset, params, model_name=model_name)
