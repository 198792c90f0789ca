# packages/ml_ops/training/strategies.py

import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sklearn.linear_model import LogisticRegression

from packages.contracts.vocabulary.general import ModelType, TrainingState
from packages.ml_ops.artifacts import TrainedModel, TrainingMetadata
from packages.ml_ops.datasets import TabularDataset
from packages.ml_ops.evaluation.base import EvaluationStrategy
from packages.ml_ops.evaluation.classification import ClassificationEvaluator
from packages.ml_ops.evaluation.regression import RegressionEvaluator
from packages.ml_ops.modeling.linear import AdaGradLinearRegressor
from packages.xai_lib.config import TrainingConfig, RegressionTrainingConfig
from packages.xai_lib.exceptions import InvalidDatasetError, ValidationError
from packages.xai_lib.logging import get_logger


class TrainingStrategy(ABC):
    """
    Abstract Base Class for all model training procedures.
    Stateless apart from the injected configuration, so one instance serves
    concurrent training runs.
    """

    model_type: ModelType
    algorithm_name: str

    def __init__(self, training_config: TrainingConfig, logger=None):
        self.config = training_config
        self.logger = logger or get_logger(type(self).__name__)

    def validate_dataset(self, dataset: Optional[TabularDataset]) -> None:
        """Checks shared by every strategy. Raises InvalidDatasetError."""
        if dataset is None:
            raise InvalidDatasetError("Dataset cannot be null")
        if dataset.n_examples == 0:
            raise InvalidDatasetError("Dataset cannot be empty")
        if dataset.n_features == 0:
            raise InvalidDatasetError("Dataset must have at least one feature")
        if dataset.n_examples > self.config.max_dataset_size:
            raise InvalidDatasetError(
                f"Dataset has {dataset.n_examples} examples, the limit is {self.config.max_dataset_size}"
            )
        if dataset.model_type != self.model_type:
            raise InvalidDatasetError(
                f"Dataset was prepared for {dataset.model_type}, not {self.model_type}"
            )

    def train(
        self,
        dataset: Optional[TabularDataset],
        params: Optional[Mapping[str, Any]] = None,
        model_name: Optional[str] = None,
    ) -> TrainedModel:
        """
        Validates the dataset, fits the estimator and packages it.
        NOT_STARTED -> VALIDATING -> TRAINING -> COMPLETED, or -> FAILED.
        """
        log = self.logger.bind(algorithm=self.algorithm_name)
        state = TrainingState.NOT_STARTED
        try:
            state = self._transition(log, state, TrainingState.VALIDATING)
            self.validate_dataset(dataset)

            state = self._transition(log, state, TrainingState.TRAINING)
            started = time.monotonic()
            estimator = self._fit(dataset, params or {})
            elapsed_ms = int((time.monotonic() - started) * 1000)

            metadata = self._metadata(estimator, dataset, elapsed_ms)
            state = self._transition(log, state, TrainingState.COMPLETED)
        except Exception:
            self._transition(log, state, TrainingState.FAILED)
            raise

        return TrainedModel(
            model_name=model_name or f"{self.model_type.lower()}-{dataset.target_name}",
            model_type=self.model_type,
            feature_names=dataset.feature_names,
            target_variable=dataset.target_name,
            estimator=estimator,
            metadata=metadata,
        )

    @abstractmethod
    def _fit(self, dataset: TabularDataset, params: Mapping[str, Any]):
        """Returns a fitted estimator with the scikit-learn linear model API."""
        pass

    @abstractmethod
    def _evaluator(self) -> EvaluationStrategy:
        pass

    def _metadata(self, estimator, dataset: TabularDataset, elapsed_ms: int):
        budget = self.config.budget_ms(self.model_type)
        if elapsed_ms > budget:
            self.logger.warning(
                f"Training took {elapsed_ms}ms, over the {budget}ms budget"
            )

        evaluator = self._evaluator()
        metrics = {}
        accuracy = None
        try:
            metrics = evaluator.evaluate(estimator, dataset.X, dataset.y, self.logger)
            accuracy = evaluator.headline(metrics)
        except ValueError as e:
            self.logger.warning(f"Could not calculate accuracy: {e}")

        return TrainingMetadata(
            algorithm_name=self.algorithm_name,
            trained_at=datetime.now(timezone.utc),
            n_examples=dataset.n_examples,
            n_features=dataset.n_features,
            accuracy=accuracy,
            classes=dataset.classes,
            metrics=metrics,
            epochs_completed=getattr(estimator, "n_epochs_", None),
            stopped_early=bool(getattr(estimator, "stopped_early_", False)),
        )

    @staticmethod
    def _transition(log, current: TrainingState, target: TrainingState):
        log.debug(f"Training state {current} -> {target}")
        return target


class ClassificationStrategy(TrainingStrategy):
    """Multinomial logistic regression with library defaults."""

    model_type = ModelType.CLASSIFICATION
    algorithm_name = "Logistic Regression"

    def validate_dataset(self, dataset: Optional[TabularDataset]) -> None:
        super().validate_dataset(dataset)
        if len(dataset.classes) < 2:
            raise InvalidDatasetError("Classification requires at least 2 classes")
        self.logger.debug("Dataset validation passed for classification")

    def _fit(self, dataset: TabularDataset, params: Mapping[str, Any]):
        if params:
            self.logger.debug(
                f"Ignoring classification parameters {sorted(params)}; defaults are used"
            )

        self.logger.bind(
            examples=dataset.n_examples,
            features=dataset.n_features,
            classes=len(dataset.classes),
        ).info(
            f"Starting classification training with Logistic Regression: "
            f"{dataset.n_examples} examples, {dataset.n_features} features, "
            f"{len(dataset.classes)} classes"
        )

        model = LogisticRegression(random_state=self.config.seed)
        model.fit(dataset.X, dataset.y)

        self.logger.info("Classification training completed successfully")
        return model

    def _evaluator(self) -> EvaluationStrategy:
        return ClassificationEvaluator()


class RegressionStrategy(TrainingStrategy):
    """Linear regression, squared loss, minibatch SGD with AdaGrad."""

    model_type = ModelType.REGRESSION
    algorithm_name = "Linear SGD"

    def validate_dataset(self, dataset: Optional[TabularDataset]) -> None:
        super().validate_dataset(dataset)
        if dataset.n_outputs == 0:
            raise InvalidDatasetError("Regression requires at least one output variable")
        self.logger.debug("Dataset validation passed for regression")

    def hyperparameters(
        self, params: Optional[Mapping[str, Any]] = None
    ) -> RegressionTrainingConfig:
        """Configured hyperparameters with per-request overrides applied."""
        params = dict(params or {})
        base = self.config.regression
        unknown = sorted(set(params) - set(type(base).model_fields))
        if unknown:
            raise ValidationError([f"Unknown regression parameters: {unknown}"])
        try:
            return RegressionTrainingConfig.model_validate(
                {**base.model_dump(), **params}
            )
        except PydanticValidationError as e:
            raise ValidationError(
                [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
            ) from e

    def _fit(self, dataset: TabularDataset, params: Mapping[str, Any]):
        hp = self.hyperparameters(params)

        self.logger.bind(
            examples=dataset.n_examples, features=dataset.n_features
        ).info(
            f"Starting regression training with Linear SGD: "
            f"{dataset.n_examples} examples, {dataset.n_features} features"
        )

        model = AdaGradLinearRegressor(
            learning_rate=hp.learning_rate,
            initial_accumulator=hp.initial_learning_rate,
            lr_decay=hp.lr_decay,
            epochs=hp.epochs,
            minibatch_size=hp.minibatch_size,
            seed=self.config.seed,
            max_time_ms=min(self.config.max_time_ms, hp.max_time_ms),
        )
        model.fit(dataset.X, dataset.y)

        if model.stopped_early_:
            self.logger.warning(
                f"Training deadline reached after {model.n_epochs_}/{hp.epochs} epochs"
            )
        self.logger.info("Regression training completed successfully")
        return model

    def _evaluator(self) -> EvaluationStrategy:
        return RegressionEvaluator()
