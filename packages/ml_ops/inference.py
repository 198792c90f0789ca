from typing import Mapping

from packages.contracts.schemas import PredictionResult
from packages.ml_ops.artifacts import TrainedModel
from packages.ml_ops.builders import PredictionResultBuilder
from packages.ml_ops.modeling.encoding import encode_row
from packages.ml_ops.modeling.scoring import score_row
from packages.xai_lib.logging import get_logger


class PredictionService:
    def __init__(self, logger=None):
        self.logger = logger or get_logger("inference")

    def predict(
        self, model: TrainedModel, input_data: Mapping[str, str]
    ) -> PredictionResult:
        """
        Scores one input row.
        Classification returns the most probable label with its full class
        distribution; regression returns the value with confidence 1.0.

        Raises:
            MissingOrInvalidFeatureError: a declared feature is absent or not numeric.
        """
        row = encode_row(model.feature_names, input_data)
        score = score_row(model, row)

        self.logger.debug(
            f"Prediction for '{model.model_name}': {score.label} (confidence {score.confidence:.4f})"
        )

        return (
            PredictionResultBuilder()
            .set_prediction(score.label)
            .set_confidence(score.confidence)
            .set_probabilities(score.probabilities)
            .set_input_data({k: str(v) for k, v in input_data.items()})
            .build()
        )
