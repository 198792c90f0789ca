# packages/ml_ops/service.py

import asyncio
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Mapping, Optional

import pandas as pd

from packages.contracts.schemas import (
    ExplanationResult,
    PredictionResult,
    TrainingRequest,
)
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.executors import WorkerPools
from packages.ml_ops.explain.engine import AttributionEngine
from packages.ml_ops.inference import PredictionService
from packages.ml_ops.protocols import DatasetProvider
from packages.ml_ops.training.registry import StrategyRegistry
from packages.ml_ops.training.trainer import ModelTrainer
from packages.xai_lib.config import Settings, load_settings
from packages.xai_lib.logging import LogManager


class XaiService:
    """
    The surface offered to the HTTP and persistence collaborators.

    Synchronous calls run on the caller's thread; submit_* and *_async
    dispatch onto the training or prediction pool.
    """

    def __init__(
        self,
        settings: Settings,
        dataset_provider: Optional[DatasetProvider] = None,
        logger=None,
        pools: Optional[WorkerPools] = None,
    ):
        self.settings = settings
        self.registry = StrategyRegistry(settings.training, logger)
        self.trainer = ModelTrainer(self.registry, dataset_provider, logger)
        self.engine = AttributionEngine(settings.xai, logger)
        self.predictor = PredictionService(logger)
        self.pools = pools or WorkerPools(settings.executors, logger)

    # --- Synchronous API ---

    def train(
        self, request: TrainingRequest, params: Optional[Mapping[str, Any]] = None
    ) -> TrainedModel:
        return self.trainer.train(request, params)

    def train_on_frame(
        self,
        request: TrainingRequest,
        frame: Optional[pd.DataFrame],
        params: Optional[Mapping[str, Any]] = None,
    ) -> TrainedModel:
        return self.trainer.train_on_frame(request, frame, params)

    def predict(
        self, model: TrainedModel, input_data: Mapping[str, str]
    ) -> PredictionResult:
        return self.predictor.predict(model, input_data)

    def explain(
        self, model: TrainedModel, input_data: Mapping[str, str]
    ) -> ExplanationResult:
        return self.engine.explain(model, input_data)

    # --- Pool dispatch ---

    def submit_training(
        self, request: TrainingRequest, params: Optional[Mapping[str, Any]] = None
    ) -> Future:
        return self.pools.training.submit(self.train, request, params)

    def submit_prediction(self, model: TrainedModel, input_data: Mapping[str, str]) -> Future:
        return self.pools.prediction.submit(self.predict, model, input_data)

    def submit_explanation(self, model: TrainedModel, input_data: Mapping[str, str]) -> Future:
        return self.pools.prediction.submit(self.explain, model, input_data)

    async def train_async(
        self, request: TrainingRequest, params: Optional[Mapping[str, Any]] = None
    ) -> TrainedModel:
        return await asyncio.wrap_future(self.submit_training(request, params))

    async def predict_async(
        self, model: TrainedModel, input_data: Mapping[str, str]
    ) -> PredictionResult:
        return await asyncio.wrap_future(self.submit_prediction(model, input_data))

    async def explain_async(
        self, model: TrainedModel, input_data: Mapping[str, str]
    ) -> ExplanationResult:
        return await asyncio.wrap_future(self.submit_explanation(model, input_data))

    # --- Lifecycle ---

    def close(self) -> None:
        self.pools.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def create_service(
    config_path: Optional[Path] = None,
    dataset_provider: Optional[DatasetProvider] = None,
) -> XaiService:
    """Startup wiring: load settings once, configure logging, build the service."""
    settings = load_settings(config_path)
    log_manager = LogManager(
        service_name="xai-core",
        debug=settings.system.debug,
        log_dir=settings.system.log_dir,
    )
    logger = log_manager.get_logger("service")
    logger.info(
        f"{settings.system.project_name} v{settings.system.version} starting "
        f"({settings.system.environment})"
    )
    return XaiService(settings, dataset_provider, logger)
