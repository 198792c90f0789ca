from typing import Any, Mapping, Optional

import pandas as pd

from packages.contracts.schemas import TrainingRequest
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.datasets import TabularDataset
from packages.ml_ops.protocols import DatasetProvider
from packages.xai_lib.exceptions import ConfigurationError
from packages.xai_lib.logging import get_logger
from .registry import StrategyRegistry


class ModelTrainer:
    """
    Orchestrates one training request: fetch frame -> encode -> dispatch.
    """

    def __init__(
        self,
        registry: StrategyRegistry,
        dataset_provider: Optional[DatasetProvider] = None,
        logger=None,
    ):
        self.registry = registry
        self.dataset_provider = dataset_provider
        self.logger = logger or get_logger("trainer")

    def train(
        self, request: TrainingRequest, params: Optional[Mapping[str, Any]] = None
    ) -> TrainedModel:
        if self.dataset_provider is None:
            raise ConfigurationError("ModelTrainer was built without a dataset provider")

        self.logger.info(f"Loading dataset {request.dataset_id} for '{request.model_name}'...")
        frame = self.dataset_provider.load(request.dataset_id)
        return self.train_on_frame(request, frame, params)

    def train_on_frame(
        self,
        request: TrainingRequest,
        frame: Optional[pd.DataFrame],
        params: Optional[Mapping[str, Any]] = None,
    ) -> TrainedModel:
        # Resolve the strategy first so an unsupported type fails before any data work
        self.registry.select_strategy(request.model_type)

        dataset = None
        if frame is not None:
            dataset = TabularDataset.from_frame(
                frame,
                request.feature_names,
                request.target_variable,
                request.model_type,
            )

        model = self.registry.train(
            dataset, request.model_type, params, model_name=request.model_name
        )
        self.logger.success(
            f"Trained '{model.model_name}' ({model.metadata.algorithm_name}), "
            f"accuracy={model.metadata.accuracy}"
        )
        return model
