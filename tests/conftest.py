"""Shared fixtures: isolated configuration, small synthetic datasets and trained models."""

import os
from datetime import datetime, timezone
from typing import Dict, Optional

import numpy as np
import pandas as pd
import pytest

from packages.contracts.schemas import TrainingRequest
from packages.contracts.vocabulary.general import ModelType
from packages.ml_ops.artifacts import TrainedModel, TrainingMetadata
from packages.ml_ops.training.registry import StrategyRegistry
from packages.ml_ops.training.trainer import ModelTrainer
from packages.xai_lib.config import Settings, TrainingConfig, XaiConfig


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    """Keeps developer shell variables from leaking into configuration defaults."""
    for key in list(os.environ):
        if key.upper().startswith("XAI_") or key.upper() == "DEBUG":
            monkeypatch.delenv(key, raising=False)


class InMemoryDatasetProvider:
    """Stands in for the storage collaborator."""

    def __init__(self, frames: Optional[Dict[int, pd.DataFrame]] = None):
        self.frames = dict(frames or {})

    def load(self, dataset_id: int) -> Optional[pd.DataFrame]:
        return self.frames.get(dataset_id)


class LinearStub:
    """A fixed linear estimator with known weights, for exact attribution checks."""

    def __init__(self, coef, intercept=0.0):
        self.coef_ = np.asarray(coef, dtype=float)
        self.intercept_ = intercept

    def predict(self, X):
        return np.asarray(X, dtype=float) @ self.coef_ + self.intercept_


class OpaqueStub:
    """Predicts a constant but exposes no linear weights."""

    def predict(self, X):
        return np.full(len(X), 42.0)


@pytest.fixture
def training_config() -> TrainingConfig:
    return TrainingConfig()


@pytest.fixture
def xai_config() -> XaiConfig:
    return XaiConfig()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def registry(training_config) -> StrategyRegistry:
    return StrategyRegistry(training_config)


@pytest.fixture
def regression_frame() -> pd.DataFrame:
    """price = 3 * rooms - 2 * distance + 1, with a little noise."""
    rng = np.random.default_rng(7)
    n_rows = 200
    rooms = rng.normal(size=n_rows)
    distance = rng.normal(size=n_rows)
    noise = rng.normal(scale=0.1, size=n_rows)
    return pd.DataFrame(
        {
            "rooms": rooms,
            "distance": distance,
            "price": 3.0 * rooms - 2.0 * distance + 1.0 + noise,
        }
    )


@pytest.fixture
def classification_frame() -> pd.DataFrame:
    """Label is 'yes' when height + 0.5 * weight is positive."""
    rng = np.random.default_rng(11)
    n_rows = 200
    height = rng.normal(size=n_rows)
    weight = rng.normal(size=n_rows)
    label = np.where(height + 0.5 * weight > 0, "yes", "no")
    return pd.DataFrame({"height": height, "weight": weight, "label": label})


@pytest.fixture
def regression_request() -> TrainingRequest:
    return TrainingRequest(
        dataset_id=1,
        model_name="house-prices",
        model_type="REGRESSION",
        target_variable="price",
        feature_names=("rooms", "distance"),
    )


@pytest.fixture
def classification_request() -> TrainingRequest:
    return TrainingRequest(
        dataset_id=2,
        model_name="tall-or-not",
        model_type="CLASSIFICATION",
        target_variable="label",
        feature_names=("height", "weight"),
    )


@pytest.fixture
def provider(regression_frame, classification_frame) -> InMemoryDatasetProvider:
    return InMemoryDatasetProvider({1: regression_frame, 2: classification_frame})


@pytest.fixture
def trainer(registry, provider) -> ModelTrainer:
    return ModelTrainer(registry, provider)


@pytest.fixture
def regression_model(trainer, regression_request) -> TrainedModel:
    return trainer.train(regression_request)


@pytest.fixture
def classification_model(trainer, classification_request) -> TrainedModel:
    return trainer.train(classification_request)


@pytest.fixture
def make_model():
    """Wraps an arbitrary estimator in a TrainedModel."""

    def _make(
        estimator,
        feature_names,
        model_type=ModelType.REGRESSION,
        model_name="stub",
    ) -> TrainedModel:
        return TrainedModel(
            model_name=model_name,
            model_type=model_type,
            feature_names=tuple(feature_names),
            target_variable="target",
            estimator=estimator,
            metadata=TrainingMetadata(
                algorithm_name="stub",
                trained_at=datetime.now(timezone.utc),
                n_examples=0,
                n_features=len(feature_names),
            ),
        )

    return _make
