"""Tests for prediction, feature encoding and trained-model artifacts."""

import numpy as np
import pytest

from packages.contracts.vocabulary.general import ModelType
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.inference import PredictionService
from packages.ml_ops.modeling.encoding import encode_row, encode_value
from packages.xai_lib.exceptions import DegenerateModelError, MissingOrInvalidFeatureError
from tests.conftest import LinearStub, OpaqueStub


@pytest.fixture
def service() -> PredictionService:
    return PredictionService()


class TestEncoding:
    def test_encodes_in_declared_order(self) -> None:
        row = encode_row(["b", "a"], {"a": "1", "b": " 2.5 "})
        np.testing.assert_array_equal(row, [[2.5, 1.0]])

    @pytest.mark.parametrize(
        "raw, reason",
        [
            (None, "is missing"),
            ("", "is blank"),
            ("abc", "is not numeric"),
            ("inf", "is not finite"),
            (True, "is not numeric"),
        ],
    )
    def test_rejects(self, raw, reason) -> None:
        with pytest.raises(MissingOrInvalidFeatureError, match=reason) as exc_info:
            encode_value("rooms", raw)
        assert exc_info.value.feature_name == "rooms"

    def test_accepts_numbers(self) -> None:
        assert encode_value("rooms", 3) == 3.0


class TestPredictionService:
    def test_regression(self, service, regression_model) -> None:
        result = service.predict(regression_model, {"rooms": "1", "distance": "0"})
        assert result.confidence == 1.0
        assert result.probabilities == {}
        assert float(result.prediction) == pytest.approx(
            regression_model.estimator.predict([[1.0, 0.0]])[0]
        )

    def test_regression_accepts_exactly_declared_features(self, service, regression_model) -> None:
        row = {name: "0.5" for name in regression_model.feature_names}
        assert service.predict(regression_model, row).input_data == row

    def test_classification(self, service, classification_model) -> None:
        result = service.predict(classification_model, {"height": "2", "weight": "1"})
        assert result.prediction == "yes"
        assert set(result.probabilities) == {"no", "yes"}
        assert sum(result.probabilities.values()) == pytest.approx(1.0)
        assert result.confidence == max(result.probabilities.values())

    def test_missing_feature(self, service, classification_model) -> None:
        with pytest.raises(MissingOrInvalidFeatureError) as exc_info:
            service.predict(classification_model, {"height": "2"})
        assert exc_info.value.feature_name == "weight"
        assert exc_info.value.error_code == "INVALID_FEATURE"


class TestTrainedModel:
    def test_binary_weights_expand(self, classification_model) -> None:
        coef, intercept = classification_model.weights()
        assert coef.shape == (2, 2)
        np.testing.assert_array_equal(coef[0], -coef[1])
        assert intercept.shape == (2,)

    def test_regression_weights(self, make_model) -> None:
        coef, intercept = make_model(LinearStub([1.0, 2.0], 0.5), ["a", "b"]).weights()
        np.testing.assert_array_equal(coef, [[1.0, 2.0]])
        np.testing.assert_array_equal(intercept, [0.5])

    def test_no_coefficients(self, make_model) -> None:
        with pytest.raises(DegenerateModelError):
            make_model(OpaqueStub(), ["a"]).weights()

    def test_width_mismatch(self, make_model) -> None:
        with pytest.raises(DegenerateModelError, match="3 features"):
            make_model(LinearStub([1.0, 2.0]), ["a", "b", "c"]).weights()

    def test_class_count_mismatch(self, make_model) -> None:
        stub = LinearStub([[1.0], [2.0]])
        stub.classes_ = ["a", "b", "c"]
        model = make_model(stub, ["x"], model_type=ModelType.CLASSIFICATION)
        with pytest.raises(DegenerateModelError, match="3 classes"):
            model.weights()

    def test_save_and_load(self, tmp_path, regression_model) -> None:
        path = tmp_path / "model.joblib"
        regression_model.save(path)
        loaded = TrainedModel.load(path)
        assert loaded.model_name == regression_model.model_name
        np.testing.assert_array_equal(loaded.estimator.coef_, regression_model.estimator.coef_)

    def test_load_rejects_other_objects(self, tmp_path) -> None:
        import joblib

        path = tmp_path / "other.joblib"
        joblib.dump({"not": "a model"}, path)
        with pytest.raises(TypeError):
            TrainedModel.load(path)
