"""End-to-end tests for the service facade: sync, pooled and async paths."""

import pytest

from packages.contracts.schemas import ExplanationResult, PredictionResult
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.service import XaiService, create_service
from packages.xai_lib.exceptions import (
    InvalidDatasetError,
    MissingOrInvalidFeatureError,
)


@pytest.fixture
def xai_service(settings, provider):
    with XaiService(settings, provider) as service:
        yield service


class TestSyncApi:
    def test_train_predict_explain(self, xai_service, regression_request) -> None:
        model = xai_service.train(regression_request)
        row = {"rooms": "2", "distance": "0.5"}

        prediction = xai_service.predict(model, row)
        explanation = xai_service.explain(model, row)

        assert isinstance(model, TrainedModel)
        assert explanation.prediction == prediction.prediction
        assert explanation.explanation_text.startswith(
            f"The model predicted {prediction.prediction}."
        )

    def test_train_on_frame(self, xai_service, classification_request, classification_frame) -> None:
        model = xai_service.train_on_frame(classification_request, classification_frame)
        assert model.classes == ("no", "yes")

    def test_single_class_dataset(self, xai_service, classification_request, classification_frame) -> None:
        frame = classification_frame.assign(label="yes")
        with pytest.raises(InvalidDatasetError, match="at least 2 classes"):
            xai_service.train_on_frame(classification_request, frame)


class TestPooledApi:
    def test_submit_training(self, xai_service, regression_request) -> None:
        model = xai_service.submit_training(regression_request).result(timeout=30)
        assert model.model_name == "house-prices"

    def test_submit_prediction_and_explanation(self, xai_service, classification_model) -> None:
        row = {"height": "1", "weight": "1"}
        prediction = xai_service.submit_prediction(classification_model, row).result(timeout=10)
        explanation = xai_service.submit_explanation(classification_model, row).result(timeout=10)
        assert isinstance(prediction, PredictionResult)
        assert isinstance(explanation, ExplanationResult)

    def test_errors_surface_through_future(self, xai_service, regression_model) -> None:
        future = xai_service.submit_prediction(regression_model, {"rooms": "1"})
        with pytest.raises(MissingOrInvalidFeatureError):
            future.result(timeout=10)

    def test_concurrent_explanations_agree(self, xai_service, regression_model) -> None:
        row = {"rooms": "1.5", "distance": "-1"}
        futures = [xai_service.submit_explanation(regression_model, row) for _ in range(20)]
        results = [f.result(timeout=10) for f in futures]
        assert all(result == results[0] for result in results)


class TestAsyncApi:
    async def test_train_async(self, xai_service, regression_request) -> None:
        model = await xai_service.train_async(regression_request)
        assert model.metadata.algorithm_name == "Linear SGD"

    async def test_predict_and_explain_async(self, xai_service, regression_model) -> None:
        row = {"rooms": "0", "distance": "0"}
        prediction = await xai_service.predict_async(regression_model, row)
        explanation = await xai_service.explain_async(regression_model, row)
        assert prediction.confidence == 1.0
        assert explanation.prediction == prediction.prediction

    async def test_async_errors(self, xai_service, regression_model) -> None:
        with pytest.raises(MissingOrInvalidFeatureError):
            await xai_service.explain_async(regression_model, {"distance": "0"})


class TestCreateService:
    def test_from_yaml(self, tmp_path, provider, regression_request) -> None:
        path = tmp_path / "xai.yaml"
        path.write_text("training:\n  regression:\n    epochs: 2\n")
        with create_service(path, provider) as service:
            model = service.train(regression_request)
        assert model.metadata.epochs_completed == 2
